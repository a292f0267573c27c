import threading
from collections.abc import Mapping
from typing import Any, Callable

import anyio
from loguru import logger

from pairlink.core.constants import PAIRING_CODE_PATTERN
from pairlink.core.exceptions.domain import BadCodeFormat, MissingGuild, MissingIdentity
from pairlink.core.utils import normalize_pairing_code, now_ms
from pairlink.schemas import ClaimRecord, ClaimStatus, Identity

DEFAULT_CLAIM_TTL_SECONDS = 300


def _coerce_identity(identity: Identity | Mapping[str, Any] | None) -> Identity:
    if isinstance(identity, Identity):
        return identity

    if not isinstance(identity, Mapping):
        raise MissingIdentity()

    identity_id = identity.get("id")
    if identity_id is None or not str(identity_id).strip():
        raise MissingIdentity()

    display_name = next(
        (
            identity[key]
            for key in ("displayName", "display_name", "username")
            if identity.get(key) is not None
        ),
        None,
    )

    return Identity(
        id=str(identity_id).strip(),
        display_name=None if display_name is None else str(display_name),
    )


class ClaimCache:
    """
    Process-local, best-effort record of which pairing codes have been claimed.

    Records live for ``ttl_seconds`` and are dropped lazily when read past their age,
    on every write (opportunistic sweep) and by the background sweeper. Nothing
    survives a restart and nothing is shared between worker processes.

    A single lock guards the mapping; records are frozen and replaced wholesale,
    so a concurrent reader sees either the old record or the new one.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_CLAIM_TTL_SECONDS,
        clock: Callable[[], int] = now_ms,
    ):
        self.ttl_ms = ttl_seconds * 1000
        self.clock = clock
        self._records: dict[str, ClaimRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _is_expired(self, record: ClaimRecord, now: int) -> bool:
        return now - record.created_at > self.ttl_ms

    def _sweep_locked(self, now: int) -> int:
        expired = [code for code, record in self._records.items() if self._is_expired(record, now)]
        for code in expired:
            del self._records[code]

        return len(expired)

    def record_claim(
        self,
        code: Any,
        identity: Identity | Mapping[str, Any] | None,
        guild_id: Any,
        account_id: Any = None,
        extra: dict[str, Any] | None = None,
    ) -> ClaimRecord:
        """
        Store (or overwrite) the claim for a pairing code.

        Args:
            code: Pairing code in any case, e.g. ``rw-ab12-cd34``
            identity: Claiming identity, ``{"id": ..., "displayName": ...}``
            guild_id: Guild the claim was made from
            account_id: Optional account ID passthrough
            extra: Optional opaque passthrough data

        Returns:
            ClaimRecord: The stored record

        Raises:
            BadCodeFormat: If the code does not match RW-XXXX-XXXX
            MissingIdentity: If no identity id is given
            MissingGuild: If no guild id is given
        """
        normalized = normalize_pairing_code(code)
        if not PAIRING_CODE_PATTERN.fullmatch(normalized):
            raise BadCodeFormat(normalized)

        claimant = _coerce_identity(identity)

        if guild_id is None or not str(guild_id).strip():
            raise MissingGuild()

        with self._lock:
            now = self.clock()
            swept = self._sweep_locked(now)
            record = ClaimRecord(
                code=normalized,
                created_at=now,
                identity=claimant,
                guild_id=str(guild_id).strip(),
                account_id=None if account_id is None else str(account_id),
                extra=dict(extra) if extra is not None else None,
            )
            replaced = normalized in self._records
            self._records[normalized] = record

        if swept:
            logger.debug(f"Swept {swept} expired claim(s) before recording {normalized}")

        if replaced:
            logger.info(f"Claim for {normalized} overwritten by identity {claimant.id}")

        return record

    def query_claim(self, code: Any) -> ClaimStatus:
        """
        Report whether a pairing code has a live claim.

        Args:
            code: Pairing code in any case

        Returns:
            ClaimStatus: ``claimed=True`` with the identity, or ``claimed=False``
        """
        normalized = normalize_pairing_code(code)

        with self._lock:
            record = self._records.get(normalized)
            if record is None:
                return ClaimStatus(claimed=False)

            if self._is_expired(record, self.clock()):
                del self._records[normalized]
                logger.debug(f"Claim for {normalized} expired")
                return ClaimStatus(claimed=False)

        return ClaimStatus(claimed=True, identity=record.identity)

    def sweep(self) -> int:
        """
        Drop every expired record.

        Returns:
            int: Number of records removed
        """
        with self._lock:
            return self._sweep_locked(self.clock())

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


async def run_claim_sweeper(cache: ClaimCache, interval_seconds: float) -> None:
    """
    Periodically sweep expired claims until cancelled.

    Abandoned pairing attempts are never read again, so without this they would
    only be removed by the next write.
    """
    while True:
        await anyio.sleep(interval_seconds)
        removed = cache.sweep()
        if removed:
            logger.debug(f"Background sweep removed {removed} expired claim(s)")
