"""Static competition site: records and client."""

from .client import ContentAPIError, ContentClient, DecodingError, NetworkError, ServerError
from .models import ChallengeExample, ChallengeRecord, LadderRecord, RankingRecord

__all__ = [
    "ChallengeExample",
    "ChallengeRecord",
    "ContentAPIError",
    "ContentClient",
    "DecodingError",
    "LadderRecord",
    "NetworkError",
    "RankingRecord",
    "ServerError",
]
