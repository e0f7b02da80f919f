import pytest

from tipjar.core.config import Settings
from tipjar.services.session import TipSession

from tests.helpers import PROGRAM_ID, RECIPIENT, FakeNetwork, FakeWallet


@pytest.fixture
def settings():
    return Settings(
        solana_rpc_url="http://localhost:8899",
        tip_program_id=PROGRAM_ID,
        recipient_address=RECIPIENT,
        confirmation_timeout_seconds=1.0,
    )


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def wallet(network):
    return FakeWallet(network)


@pytest.fixture
def session(wallet, network, settings):
    return TipSession(wallet, network, settings)
