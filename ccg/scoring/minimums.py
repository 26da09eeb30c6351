"""Running minimum byte length per challenge."""

import threading
from typing import Callable, Dict, Optional, Tuple

from .engine import compute_score, update_minimum


class MinimumStore:
    """
    Challenge id -> shortest accepted byte length.

    ``accept`` folds a submission into the minimum and scores it against the
    result while holding that challenge's lock, so concurrent submissions to
    one challenge are scored in the order they update the minimum.
    """

    def __init__(self, initial: Optional[Dict[int, int]] = None):
        self._minimums: Dict[int, int] = dict(initial or {})
        self._locks: Dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, challenge_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(challenge_id)
            if lock is None:
                lock = self._locks[challenge_id] = threading.Lock()
            return lock

    def get(self, challenge_id: int) -> Optional[int]:
        return self._minimums.get(challenge_id)

    def seed(self, challenge_id: int, value: Optional[int]) -> Optional[int]:
        """Load a persisted minimum. Never raises the stored value."""
        if value is None:
            return self.get(challenge_id)
        with self._lock_for(challenge_id):
            new_min = update_minimum(self._minimums.get(challenge_id), value)
            self._minimums[challenge_id] = new_min
            return new_min

    def accept(
        self,
        challenge_id: int,
        difficulty: int,
        byte_count: int,
        load: Optional[Callable[[], Optional[int]]] = None,
        persist: Optional[Callable[[int, int], None]] = None,
    ) -> Tuple[int, int]:
        """
        Record an accepted submission and score it.

        Args:
            load: Returns the persisted minimum, merged in before scoring
            persist: Called with (score, new minimum) while the lock is held;
                if it raises, the stored minimum is left unchanged

        Returns:
            (score, new minimum)
        """
        with self._lock_for(challenge_id):
            current = self._minimums.get(challenge_id)
            if load is not None:
                stored = load()
                if stored is not None:
                    current = update_minimum(current, stored)
            new_min = update_minimum(current, byte_count)
            score = compute_score(difficulty, new_min, byte_count)
            if persist is not None:
                persist(score, new_min)
            self._minimums[challenge_id] = new_min
            return score, new_min

    def snapshot(self) -> Dict[int, int]:
        with self._guard:
            return dict(self._minimums)

    def reset(self) -> None:
        with self._guard:
            self._minimums.clear()
            self._locks.clear()
