import pytest
from notifications.channel.fake_email import FakeEmailAdapter


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def transport():
    adapter = FakeEmailAdapter()
    yield adapter
    adapter.reset()


@pytest.fixture()
def sleep():
    return RecordingSleep()


VALID_SECRET = "x" * 40

VALID_ENV = {
    "RESEND_API_KEY": "re_123456789abcdef",
    "RESEND_FROM_EMAIL": "orders@storefront.example",
    "ORDER_WEBHOOK_SECRET": VALID_SECRET,
    "PROTEAN_ENV": "production",
}


@pytest.fixture()
def valid_env():
    return dict(VALID_ENV)
