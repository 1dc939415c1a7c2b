"""Round-robin pool of Gemini API keys with per-key health state.

One pool is built at start-up and shared by every request. A key that the
provider reports as invalid or leaked is blocked for the rest of the
process; a key that hits its quota sits out a fixed cooldown window.
Mutations happen on the event loop between awaits, so no lock is taken;
two requests racing on the same key can at worst both push its cooldown
forward.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from models.responses import CredentialStatus
from services.error_classifier import ErrorKind

logger = logging.getLogger(__name__)

QUOTA_COOLDOWN_SECONDS = 15 * 60


@dataclass
class CredentialState:
    api_key: str = field(repr=False)
    position: int  # 1-based, for log labels only
    blocked_forever: bool = False
    cooldown_until: float | None = None
    last_error_message: str | None = None
    last_status_code: int | None = None

    @property
    def label(self) -> str:
        return f"key #{self.position}"

    def is_cooling(self, now: float) -> bool:
        return self.cooldown_until is not None and self.cooldown_until > now

    def is_eligible(self, now: float) -> bool:
        return not self.blocked_forever and not self.is_cooling(now)


class CredentialPool:
    def __init__(
        self,
        api_keys: Iterable[str],
        *,
        cooldown_seconds: float = QUOTA_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        keys: list[str] = []
        for key in api_keys:
            key = key.strip()
            if key and key not in keys:
                keys.append(key)
        self._entries = tuple(
            CredentialState(api_key=key, position=i + 1) for i, key in enumerate(keys)
        )
        self._cursor = 0
        self._cooldown_seconds = cooldown_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[CredentialState, ...]:
        return self._entries

    def now(self) -> float:
        return self._clock()

    def select(self) -> CredentialState | None:
        """Return the next eligible key after the cursor, or None if all are out."""
        n = len(self._entries)
        now = self.now()
        for i in range(n):
            idx = (self._cursor + i) % n
            entry = self._entries[idx]
            if not entry.is_eligible(now):
                continue
            self._cursor = (idx + 1) % n
            return entry
        return None

    def report_outcome(
        self,
        entry: CredentialState,
        kind: ErrorKind | None,
        status_code: int | None,
        message: str | None,
    ) -> None:
        """Record the result of one call made with ``entry``.

        ``kind`` is None for a successful call.
        """
        entry.last_error_message = message
        entry.last_status_code = status_code

        if kind is ErrorKind.FATAL_CREDENTIAL:
            if not entry.blocked_forever:
                logger.warning("Blocking %s permanently: %s", entry.label, message)
            entry.blocked_forever = True
        elif kind is ErrorKind.QUOTA_EXCEEDED:
            until = self.now() + self._cooldown_seconds
            if entry.cooldown_until is None or until > entry.cooldown_until:
                entry.cooldown_until = until
            logger.warning(
                "Cooling down %s for %.0fs after quota error (HTTP %s)",
                entry.label,
                self._cooldown_seconds,
                status_code,
            )

    def snapshot(self) -> list[CredentialStatus]:
        now = self.now()
        return [
            CredentialStatus(
                blocked=entry.blocked_forever,
                cooling=entry.is_cooling(now),
                cooldown_until=(
                    datetime.fromtimestamp(entry.cooldown_until, tz=timezone.utc)
                    if entry.cooldown_until is not None
                    else None
                ),
                last_error=entry.last_error_message,
                last_status=entry.last_status_code,
            )
            for entry in self._entries
        ]
