import secrets
import string

from faker import Faker

from tests.schemas import ClaimantData

PAIRING_CODE_ALPHABET = string.ascii_uppercase + string.digits
TEST_SECRET = "test-link-secret-0123456789abcdef"


class ManualClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float = 0, ms: int = 0) -> None:
        self.now += int(seconds * 1000) + ms


def generate_account_id() -> str:
    """17-digit numeric account ID, never starting with zero."""
    return str(secrets.randbelow(9 * 10**16) + 10**16)


def generate_nonce(length: int = 24) -> str:
    return secrets.token_urlsafe(length)[:length]


def generate_pairing_code() -> str:
    def block() -> str:
        return "".join(secrets.choice(PAIRING_CODE_ALPHABET) for _ in range(4))

    return f"RW-{block()}-{block()}"


def generate_claimant() -> ClaimantData:
    """
    Generate a random chat-platform identity and guild
    Returns:
        ClaimantData: Snowflake-style user and guild ids plus a display name
    """
    faker = Faker()
    return ClaimantData(
        id=str(faker.random_number(digits=18, fix_len=True)),
        display_name=faker.user_name(),
        guild_id=str(faker.random_number(digits=18, fix_len=True)),
    )
