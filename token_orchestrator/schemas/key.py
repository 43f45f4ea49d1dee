from datetime import datetime, timezone

from pydantic import BaseModel

from ..models import KeyInfo

NEVER = "never"


def iso_ts(ts: float) -> str:
    """Epoch seconds as ISO-8601 UTC with millisecond precision, e.g. 2024-01-01T00:00:00.000Z"""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class KeyCreated(BaseModel):
    keyId: str


class KeyOut(BaseModel):
    keyId: str
    key: str


class KeyInfoOut(BaseModel):
    isBlocked: bool
    createdAt: str
    expiresAt: str
    lastActivity: str

    @classmethod
    def from_info(cls, info: KeyInfo) -> "KeyInfoOut":
        return cls(
            isBlocked=info.blocked,
            createdAt=iso_ts(info.created_at),
            expiresAt=iso_ts(info.expires_at) if info.expires_at is not None else NEVER,
            lastActivity=iso_ts(info.last_activity),
        )


class Message(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str
