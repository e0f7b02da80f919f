from unittest.mock import AsyncMock, MagicMock

import base58
import pytest
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solana.rpc.core import UnconfirmedTxError
from solana.rpc.models import MemcmpOpts

from tipjar.blockchain.base import ConfirmationStatus
from tipjar.blockchain.chains.solana import KeypairWallet, SolanaNetworkService
from tipjar.core.constants import TIP_HISTORY_DISCRIMINATOR
from tipjar.core.errors import ConfirmationTimeout, WalletUnavailable

from tests.helpers import PROGRAM_ID, TIPPER, encode_tip_record


@pytest.fixture
def rpc_client():
    return AsyncMock()


@pytest.fixture
def service(settings, rpc_client):
    svc = SolanaNetworkService(settings)
    svc._client = rpc_client
    return svc


@pytest.mark.asyncio
async def test_query_filters_on_discriminator(service, rpc_client):
    data = encode_tip_record(TIPPER, 1, "hi", 5)
    pda = Pubkey.new_unique()
    rpc_client.get_program_accounts.return_value = MagicMock(
        value=[MagicMock(pubkey=pda, account=MagicMock(data=data))]
    )

    accounts = await service.query_accounts_by_type(TIP_HISTORY_DISCRIMINATOR)

    assert len(accounts) == 1
    assert accounts[0].address == str(pda)
    assert accounts[0].data == data

    args, kwargs = rpc_client.get_program_accounts.call_args
    assert args[0] == Pubkey.from_string(PROGRAM_ID)
    assert kwargs["filters"] == [
        MemcmpOpts(offset=0, bytes=base58.b58encode(TIP_HISTORY_DISCRIMINATOR).decode("utf-8"))
    ]


@pytest.mark.asyncio
async def test_query_with_no_accounts(service, rpc_client):
    rpc_client.get_program_accounts.return_value = MagicMock(value=[])
    assert await service.query_accounts_by_type(TIP_HISTORY_DISCRIMINATOR) == []


@pytest.mark.asyncio
async def test_confirm_success(service, rpc_client):
    signature = str(Signature.default())
    rpc_client.confirm_transaction.return_value = MagicMock(value=[MagicMock(err=None)])

    assert await service.confirm(signature) is ConfirmationStatus.FINALIZED
    args, kwargs = rpc_client.confirm_transaction.call_args
    assert args[0] == Signature.default()
    assert kwargs["commitment"] == "confirmed"


@pytest.mark.asyncio
async def test_confirm_reports_failed_transaction(service, rpc_client):
    rpc_client.confirm_transaction.return_value = MagicMock(value=[MagicMock(err="InstructionError")])
    assert await service.confirm(str(Signature.default())) is ConfirmationStatus.FAILED


@pytest.mark.asyncio
async def test_confirm_expired_blockhash_is_timeout(service, rpc_client):
    rpc_client.confirm_transaction.side_effect = UnconfirmedTxError("blockhash expired")
    with pytest.raises(ConfirmationTimeout):
        await service.confirm(str(Signature.default()))


@pytest.mark.asyncio
async def test_close_releases_client(service, rpc_client):
    await service.close()
    rpc_client.close.assert_awaited_once()
    assert service._client is None


@pytest.mark.asyncio
async def test_keypair_wallet_without_key(service):
    wallet = KeypairWallet(service, private_key="")
    with pytest.raises(WalletUnavailable):
        await wallet.connect()


@pytest.mark.asyncio
async def test_keypair_wallet_signs_and_sends(service):
    keypair = Keypair()
    wallet = KeypairWallet(service, private_key=base58.b58encode(bytes(keypair)).decode("utf-8"))
    service.latest_blockhash = AsyncMock(return_value=Hash.default())
    service.send_transaction = AsyncMock(return_value="sig")

    assert await wallet.connect() == str(keypair.pubkey())

    ix = Instruction(
        Pubkey.new_unique(),
        b"\x00",
        [AccountMeta(pubkey=keypair.pubkey(), is_signer=True, is_writable=True)],
    )
    assert await wallet.sign_and_send(ix) == "sig"

    (tx,), _ = service.send_transaction.call_args
    assert tx.message.account_keys[0] == keypair.pubkey()
    assert tx.signatures[0] != Signature.default()
