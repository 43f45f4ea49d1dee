"""
Key record held by the in-memory store
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class KeyRecord:
    """A leased, revocable access key. Timestamps are epoch seconds."""
    id: str
    secret: str
    created_at: float
    last_activity: float
    blocked: bool = False
    expires_at: Optional[float] = None  # None: no lease engaged, never expires

    @property
    def leased(self) -> bool:
        return self.expires_at is not None

    def lapsed(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def snapshot(self) -> "KeyInfo":
        return KeyInfo(
            blocked=self.blocked,
            created_at=self.created_at,
            expires_at=self.expires_at,
            last_activity=self.last_activity,
        )


@dataclass(frozen=True)
class KeyInfo:
    """Point-in-time copy of a record's state, safe to read outside the lock"""
    blocked: bool
    created_at: float
    expires_at: Optional[float]
    last_activity: float
