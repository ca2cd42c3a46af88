"""In-process TTL store for signups awaiting OTP verification.

One entry per email; a new request for the same email replaces the old one.
Entries are never swept: expiry is checked by the caller when the entry is read,
and stale entries stay in memory until overwritten or discarded.

The store lives in this process only. It is lost on restart and is not shared
between server instances, so multi-instance deployments need an external
keyed store with TTL behind the same interface.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass
class PendingRegistration:
    email: str
    code: str
    expires_at: datetime
    # None for codes issued by request-otp (no account data captured)
    signup_payload: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=utcnow)

    def is_expired(self, now: datetime) -> bool:
        # Valid up to and including expires_at
        return now > self.expires_at


class PendingRegistrationStore:
    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._entries: dict[str, PendingRegistration] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def create(
        self,
        email: str,
        code: str,
        ttl: timedelta,
        signup_payload: dict[str, Any] | None = None,
    ) -> PendingRegistration:
        """Build an entry expiring ttl from now and store it, replacing any previous one."""
        now = self.now()
        entry = PendingRegistration(
            email=normalize_email(email),
            code=code,
            expires_at=now + ttl,
            signup_payload=signup_payload,
            created_at=now,
        )
        self.put(entry)
        return entry

    def put(self, entry: PendingRegistration) -> None:
        with self._lock:
            self._entries[normalize_email(entry.email)] = entry

    def get(self, email: str) -> PendingRegistration | None:
        with self._lock:
            return self._entries.get(normalize_email(email))

    def discard(self, email: str, expected: PendingRegistration | None = None) -> bool:
        """Remove the entry for email. With expected, only remove it if it is still that entry.

        Returns True if this call removed something; two concurrent discards of the
        same entry see exactly one True.
        """
        key = normalize_email(email)
        with self._lock:
            current = self._entries.get(key)
            if current is None:
                return False
            if expected is not None and current is not expected:
                return False
            del self._entries[key]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_store = PendingRegistrationStore()


def get_pending_store() -> PendingRegistrationStore:
    """Process-wide store (FastAPI dependency; overridden in tests)."""
    return _store
