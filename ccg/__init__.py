"""CCG Arena - code golf challenges, scoring and leaderboards."""

__version__ = "0.1.0"
