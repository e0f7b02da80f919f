"""
Solana implementation of the tip jar capabilities.

This module implements:
- SolanaNetworkService: RPC interactions (confirmation, program account queries)
- KeypairWallet: a local ed25519 signer for scripts and operators
"""

import base58
import logging
from typing import List, Optional

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.models import MemcmpOpts

from tipjar.blockchain.base import (
    ConfirmationStatus,
    NetworkCapability,
    RawAccount,
    WalletCapability,
)
from tipjar.core.config import Settings, settings as default_settings
from tipjar.core.errors import (
    ConfirmationTimeout,
    NetworkError,
    SubmissionFailed,
    WalletUnavailable,
)

logger = logging.getLogger(__name__)


class SolanaNetworkService(NetworkCapability):
    """Solana RPC service bound to the tip program."""

    def __init__(self, config: Optional[Settings] = None):
        self._settings = config or default_settings
        self._client: Optional[AsyncClient] = None
        self._program_id = Pubkey.from_string(self._settings.tip_program_id)

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = AsyncClient(
                self._settings.solana_rpc_url, commitment=self._settings.commitment
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None

    async def is_connected(self) -> bool:
        try:
            client = await self._get_client()
            await client.get_health()
            return True
        except Exception:
            return False

    # --- On-chain reads ---

    async def latest_blockhash(self) -> Hash:
        client = await self._get_client()
        try:
            resp = await client.get_latest_blockhash()
        except (RPCException, SolanaRpcException) as e:
            raise NetworkError(f"Failed to fetch latest blockhash: {e}") from e
        return resp.value.blockhash

    async def query_accounts_by_type(self, type_tag: bytes) -> List[RawAccount]:
        """List program accounts whose 8-byte Anchor discriminator equals `type_tag`."""
        client = await self._get_client()
        filters = [MemcmpOpts(offset=0, bytes=base58.b58encode(type_tag).decode("utf-8"))]
        try:
            resp = await client.get_program_accounts(
                self._program_id, encoding="base64", filters=filters
            )
        except (RPCException, SolanaRpcException) as e:
            raise NetworkError(f"Failed to query program accounts: {e}") from e

        if not resp.value:
            return []
        return [
            RawAccount(address=str(acc.pubkey), data=bytes(acc.account.data))
            for acc in resp.value
        ]

    # --- On-chain writes ---

    async def send_transaction(self, tx: Transaction) -> str:
        client = await self._get_client()
        try:
            resp = await client.send_transaction(tx)
        except RPCException as e:
            # Preflight rejections: insufficient funds, PDA already in use, bad data
            raise SubmissionFailed(f"Transaction rejected: {e}") from e
        except SolanaRpcException as e:
            raise SubmissionFailed(f"Failed to submit transaction: {e}") from e
        sig = str(resp.value)
        logger.info(f"tip tx sent: {sig}")
        return sig

    async def confirm(self, signature: str) -> ConfirmationStatus:
        client = await self._get_client()
        try:
            resp = await client.confirm_transaction(
                Signature.from_string(signature), commitment=self._settings.commitment
            )
        except (UnconfirmedTxError, TransactionExpiredBlockheightExceededError) as e:
            raise ConfirmationTimeout(
                signature, self._settings.confirmation_timeout_seconds
            ) from e
        except (RPCException, SolanaRpcException) as e:
            raise NetworkError(f"Failed to confirm {signature}: {e}") from e

        status = resp.value[0] if resp.value else None
        if status is None or status.err is not None:
            logger.warning(f"tip tx failed: {signature} err={status.err if status else None}")
            return ConfirmationStatus.FAILED

        logger.info(f"tip tx confirmed: {signature}")
        return ConfirmationStatus.FINALIZED


class KeypairWallet(WalletCapability):
    """Wallet backed by a local keypair (Base58 encoded 64-byte secret key)."""

    def __init__(self, network: SolanaNetworkService, private_key: Optional[str] = None):
        self._network = network
        self._private_key = private_key if private_key is not None else default_settings.tipper_private_key
        self._keypair: Optional[Keypair] = None

    @property
    def keypair(self) -> Keypair:
        if self._keypair is None:
            if not self._private_key:
                raise WalletUnavailable("TIPPER_PRIVATE_KEY not configured")
            try:
                secret_key = base58.b58decode(self._private_key)
                self._keypair = Keypair.from_bytes(secret_key)
            except ValueError as e:
                raise WalletUnavailable(f"Invalid TIPPER_PRIVATE_KEY: {e}") from e
        return self._keypair

    async def connect(self) -> str:
        return str(self.keypair.pubkey())

    async def sign_and_send(self, instruction: Instruction) -> str:
        payer = self.keypair
        recent_blockhash = await self._network.latest_blockhash()

        msg = Message.new_with_blockhash([instruction], payer.pubkey(), recent_blockhash)
        tx = Transaction.new_unsigned(msg)
        tx.sign([payer], recent_blockhash)

        return await self._network.send_transaction(tx)
