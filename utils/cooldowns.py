"""
Per-user battle cooldowns with lazy expiry cleanup.
"""
import logging
import math
import random
import time
from typing import Callable, MutableMapping, Optional

from config import COOLDOWN_CLEANUP_CHANCE

logger = logging.getLogger(__name__)


class CooldownTracker:
    """
    Maps user IDs to absolute expiry timestamps.

    Expired entries are never read as active, so they are only swept now and
    then from arm() instead of on a timer.
    """

    def __init__(self, store: Optional[MutableMapping[str, float]] = None,
                 clock: Callable[[], float] = time.time, rng=random,
                 cleanup_chance: float = COOLDOWN_CLEANUP_CHANCE):
        self.store = {} if store is None else store
        self.clock = clock
        self.rng = rng
        self.cleanup_chance = cleanup_chance

    def is_on_cooldown(self, user_id) -> bool:
        """Return True if the user's cooldown has not expired yet."""
        expires_at = self.store.get(str(user_id))
        if expires_at is None:
            return False
        return expires_at > self.clock()

    def remaining_seconds(self, user_id) -> int:
        """Return the whole seconds left on the user's cooldown, rounded up, or 0."""
        if not self.is_on_cooldown(user_id):
            return 0
        return math.ceil(self.store[str(user_id)] - self.clock())

    def arm(self, user_id, seconds: float):
        """Start (or restart) a cooldown of the given length for the user."""
        self.store[str(user_id)] = self.clock() + seconds

        if self.rng.random() < self.cleanup_chance:
            self.purge_expired()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self.clock()
        expired = [user_id for user_id, expires_at in self.store.items() if expires_at <= now]
        for user_id in expired:
            del self.store[user_id]

        if expired:
            logger.debug(f"Purged {len(expired)} expired battle cooldowns")
        return len(expired)

    def active_count(self) -> int:
        now = self.clock()
        return sum(1 for expires_at in self.store.values() if expires_at > now)
