import threading

import anyio
import pytest
from pydantic import ValidationError as PydanticValidationError

from pairlink.core.exceptions.domain import (
    BadCodeFormat,
    MissingGuild,
    MissingIdentity,
    ValidationError,
)
from pairlink.schemas import ClaimStatus, Identity
from pairlink.services.claim_cache import ClaimCache, run_claim_sweeper
from tests.utils import ManualClock, generate_claimant, generate_pairing_code


class TestRecordClaim:
    """Tests for recording pairing claims."""

    def test_record_returns_stored_record(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test the stored record carries the normalized code and passthrough fields."""
        record = claim_cache.record_claim(
            "  rw-ab12-cd34 ",
            {"id": "999", "displayName": "Tester"},
            "guild1",
            account_id="76561197960287930",
            extra={"source": "bot"},
        )

        assert record.claimed is True
        assert record.code == "RW-AB12-CD34"
        assert record.created_at == clock.now
        assert record.identity == Identity(id="999", display_name="Tester")
        assert record.guild_id == "guild1"
        assert record.account_id == "76561197960287930"
        assert record.extra == {"source": "bot"}

    def test_record_accepts_identity_model(self, claim_cache: ClaimCache):
        """Test an Identity instance is stored as-is."""
        identity = Identity(id="42")

        record = claim_cache.record_claim(generate_pairing_code(), identity, "guild1")

        assert record.identity == identity

    def test_record_coerces_numeric_ids(self, claim_cache: ClaimCache):
        """Test snowflake ids sent as numbers are stored as strings."""
        record = claim_cache.record_claim(
            generate_pairing_code(), {"id": 123456789012345678}, 987654321
        )

        assert record.identity.id == "123456789012345678"
        assert record.guild_id == "987654321"

    def test_record_accepts_snake_case_display_name(self, claim_cache: ClaimCache):
        """Test display_name and username are accepted in place of displayName."""
        record = claim_cache.record_claim(
            generate_pairing_code(), {"id": "1", "username": "someone"}, "guild1"
        )

        assert record.identity.display_name == "someone"

    def test_record_is_frozen(self, claim_cache: ClaimCache):
        """Test a stored record cannot be mutated."""
        record = claim_cache.record_claim(generate_pairing_code(), {"id": "1"}, "guild1")

        with pytest.raises(PydanticValidationError):
            record.guild_id = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "code",
        ["", None, "RW-AB12-CD3", "RW-AB12-CD345", "XX-AB12-CD34", "RW_AB12_CD34", "RW-AB!2-CD34"],
    )
    def test_record_rejects_bad_code(self, claim_cache: ClaimCache, code):
        """Test codes not shaped like RW-XXXX-XXXX are rejected."""
        with pytest.raises(BadCodeFormat) as exc_info:
            claim_cache.record_claim(code, {"id": "1"}, "guild1")

        assert isinstance(exc_info.value, ValidationError)
        assert len(claim_cache) == 0

    @pytest.mark.parametrize("identity", [None, {}, {"id": ""}, {"id": "   "}, {"id": None}, "999"])
    def test_record_requires_identity_id(self, claim_cache: ClaimCache, identity):
        """Test a missing or blank identity id is rejected."""
        with pytest.raises(MissingIdentity):
            claim_cache.record_claim(generate_pairing_code(), identity, "guild1")

    @pytest.mark.parametrize("guild_id", [None, "", "  "])
    def test_record_requires_guild(self, claim_cache: ClaimCache, guild_id):
        """Test a missing or blank guild id is rejected."""
        with pytest.raises(MissingGuild):
            claim_cache.record_claim(generate_pairing_code(), {"id": "1"}, guild_id)

    def test_record_sweeps_expired_records(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test recording a claim removes other records older than the TTL."""
        claim_cache.record_claim("RW-AAAA-0001", {"id": "1"}, "guild1")
        clock.advance(seconds=200)
        claim_cache.record_claim("RW-AAAA-0002", {"id": "2"}, "guild1")
        clock.advance(seconds=101)

        claim_cache.record_claim("RW-AAAA-0003", {"id": "3"}, "guild1")

        assert len(claim_cache) == 2
        assert claim_cache.query_claim("RW-AAAA-0001").claimed is False
        assert claim_cache.query_claim("RW-AAAA-0002").claimed is True


class TestQueryClaim:
    """Tests for polling pairing claims."""

    def test_claim_lifecycle(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test a claim is visible case-insensitively until its TTL passes."""
        claim_cache.record_claim("RW-AB12-CD34", {"id": "999"}, "guild1")

        status = claim_cache.query_claim("rw-ab12-cd34")
        assert status == ClaimStatus(claimed=True, identity=Identity(id="999"))

        clock.advance(seconds=301)

        assert claim_cache.query_claim("rw-ab12-cd34") == ClaimStatus(claimed=False)

    def test_claim_visible_at_exact_ttl(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test a claim exactly TTL old is still reported."""
        code = generate_pairing_code()
        claim_cache.record_claim(code, {"id": "1"}, "guild1")

        clock.advance(seconds=300)

        assert claim_cache.query_claim(code).claimed is True

    def test_expired_query_evicts(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test reading an expired claim removes it."""
        code = generate_pairing_code()
        claim_cache.record_claim(code, {"id": "1"}, "guild1")
        clock.advance(seconds=301)

        claim_cache.query_claim(code)

        assert len(claim_cache) == 0

    def test_overwrite_keeps_only_second_identity(
        self, claim_cache: ClaimCache, clock: ManualClock
    ):
        """Test a second claim for the same code replaces the first."""
        first = generate_claimant()
        second = generate_claimant()
        code = generate_pairing_code()

        claim_cache.record_claim(code, {"id": first["id"]}, first["guild_id"])
        clock.advance(seconds=10)
        record = claim_cache.record_claim(
            code.lower(),
            {"id": second["id"], "displayName": second["display_name"]},
            second["guild_id"],
        )

        status = claim_cache.query_claim(code)
        assert status.identity == Identity(id=second["id"], display_name=second["display_name"])
        assert record.created_at == clock.now
        assert len(claim_cache) == 1

    def test_overwrite_restarts_ttl(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test an overwriting claim gets a fresh lifetime."""
        code = generate_pairing_code()
        claim_cache.record_claim(code, {"id": "1"}, "guild1")
        clock.advance(seconds=250)
        claim_cache.record_claim(code, {"id": "2"}, "guild1")
        clock.advance(seconds=250)

        assert claim_cache.query_claim(code).identity == Identity(id="2")

    def test_unclaimed_query_is_idempotent(self, claim_cache: ClaimCache):
        """Test polling an unknown code never creates state."""
        for _ in range(5):
            assert claim_cache.query_claim("RW-ZZZZ-9999") == ClaimStatus(claimed=False)

        assert len(claim_cache) == 0

    def test_query_ill_formed_code_is_unclaimed(self, claim_cache: ClaimCache):
        """Test a code that could never be recorded is simply unclaimed."""
        assert claim_cache.query_claim("not a code").claimed is False
        assert claim_cache.query_claim(None).claimed is False


class TestSweep:
    """Tests for sweeping expired claims."""

    def test_sweep_removes_only_expired(self, claim_cache: ClaimCache, clock: ManualClock):
        """Test sweep drops expired records and reports the count."""
        claim_cache.record_claim("RW-AAAA-0001", {"id": "1"}, "guild1")
        claim_cache.record_claim("RW-AAAA-0002", {"id": "2"}, "guild1")
        clock.advance(seconds=200)
        claim_cache.record_claim("RW-AAAA-0003", {"id": "3"}, "guild1")
        clock.advance(seconds=101)

        assert claim_cache.sweep() == 2
        assert len(claim_cache) == 1
        assert claim_cache.sweep() == 0

    def test_clear(self, claim_cache: ClaimCache):
        """Test clear empties the cache."""
        claim_cache.record_claim(generate_pairing_code(), {"id": "1"}, "guild1")

        claim_cache.clear()

        assert len(claim_cache) == 0

    def test_custom_ttl(self, clock: ManualClock):
        """Test the TTL is taken from the constructor."""
        cache = ClaimCache(ttl_seconds=10, clock=clock)
        code = generate_pairing_code()
        cache.record_claim(code, {"id": "1"}, "guild1")

        clock.advance(seconds=11)

        assert cache.query_claim(code).claimed is False

    @pytest.mark.anyio
    async def test_background_sweeper_removes_expired(self, clock: ManualClock):
        """Test the periodic sweeper evicts records nobody polls."""
        cache = ClaimCache(ttl_seconds=1, clock=clock)
        cache.record_claim(generate_pairing_code(), {"id": "1"}, "guild1")
        clock.advance(seconds=2)

        async with anyio.create_task_group() as tg:
            tg.start_soon(run_claim_sweeper, cache, 0.01)
            with anyio.fail_after(2):
                while len(cache):
                    await anyio.sleep(0.01)
            tg.cancel_scope.cancel()

        assert len(cache) == 0


class TestConcurrency:
    """Concurrent access to a shared cache."""

    def test_concurrent_records_for_different_codes(self, claim_cache: ClaimCache):
        """Test parallel writers for distinct codes all land."""
        codes = [f"RW-AAAA-{i:04d}" for i in range(200)]

        def writer(chunk: list[str]):
            for code in chunk:
                claim_cache.record_claim(code, {"id": code}, "guild1")

        threads = [threading.Thread(target=writer, args=(codes[i::8],)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(claim_cache) == 200
        for code in codes:
            assert claim_cache.query_claim(code).identity == Identity(id=code)

    def test_reader_sees_whole_records(self, claim_cache: ClaimCache):
        """Test a reader racing a writer for one code only sees complete records."""
        code = "RW-RACE-0001"
        errors: list[str] = []
        stop = threading.Event()

        def writer():
            for i in range(500):
                claim_cache.record_claim(code, {"id": str(i), "displayName": f"user-{i}"}, "g")
            stop.set()

        def reader():
            while not stop.is_set():
                status = claim_cache.query_claim(code)
                if status.claimed and status.identity.display_name != f"user-{status.identity.id}":
                    errors.append(status.identity.id)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert claim_cache.query_claim(code).identity.id == "499"
