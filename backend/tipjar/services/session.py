"""
Session state machine.

    DISCONNECTED -> CONNECTING -> IDLE -> SUBMITTING -> IDLE
    CONNECTING -> DISCONNECTED (connect failed)
    any -> DISCONNECTED (disconnect)

SessionState is an immutable snapshot; the transition functions below return
a new snapshot and never touch the network. TipSession drives them.
"""

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from solders.instruction import Instruction

from tipjar.blockchain.base import DisplayTip, NetworkCapability, TipRequest, WalletCapability
from tipjar.core.config import Settings, settings as default_settings
from tipjar.core.constants import SYSTEM_PROGRAM_ID
from tipjar.core.errors import SessionError, TipJarError
from tipjar.services import address, history, submission, transaction
from tipjar.services.history import HistoryPage, short_address
from tipjar.services.units import Amount, to_decimal

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    IDLE = "idle"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class SessionState:
    phase: SessionPhase = SessionPhase.DISCONNECTED
    wallet_address: str = ""
    wallet_address_short: str = ""
    feed: Tuple[DisplayTip, ...] = ()
    skipped: int = 0
    error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.phase in (SessionPhase.IDLE, SessionPhase.SUBMITTING)

    @property
    def pending(self) -> bool:
        return self.phase is SessionPhase.SUBMITTING


INITIAL_STATE = SessionState()


# --- Transitions ---

def begin_connect(state: SessionState) -> SessionState:
    if state.phase is not SessionPhase.DISCONNECTED:
        raise SessionError(f"Cannot connect while {state.phase.value}")
    return replace(state, phase=SessionPhase.CONNECTING, error=None)


def connect_succeeded(state: SessionState, wallet_address: str) -> SessionState:
    if state.phase is not SessionPhase.CONNECTING:
        raise SessionError(f"Not connecting (phase={state.phase.value})")
    return replace(
        state,
        phase=SessionPhase.IDLE,
        wallet_address=wallet_address,
        wallet_address_short=short_address(wallet_address),
        error=None,
    )


def connect_failed(state: SessionState, error: str) -> SessionState:
    return replace(INITIAL_STATE, feed=state.feed, skipped=state.skipped, error=error)


def begin_submit(state: SessionState) -> SessionState:
    """Enter SUBMITTING. A second call while submitting returns `state` unchanged."""
    if state.phase is SessionPhase.SUBMITTING:
        return state
    if state.phase is not SessionPhase.IDLE:
        raise SessionError("Connect a wallet before sending a tip")
    return replace(state, phase=SessionPhase.SUBMITTING, error=None)


def submit_finished(state: SessionState, error: Optional[str] = None) -> SessionState:
    if state.phase is not SessionPhase.SUBMITTING:
        return state
    return replace(state, phase=SessionPhase.IDLE, error=error)


def feed_loaded(state: SessionState, page: HistoryPage) -> SessionState:
    return replace(state, feed=page.tips, skipped=page.skipped)


def feed_failed(state: SessionState, error: str) -> SessionState:
    return replace(state, error=error)


def disconnect(state: SessionState) -> SessionState:
    return INITIAL_STATE


class TipSession:
    """
    One user's view of the tip jar: a wallet, a network and the current state.

    Validation errors from send_tip are raised to the caller and leave the
    state untouched. Wallet and network errors are logged and recorded in
    `state.error`; the feed is kept as it was.
    """

    def __init__(
        self,
        wallet: WalletCapability,
        network: NetworkCapability,
        config: Optional[Settings] = None,
    ):
        self._wallet = wallet
        self._network = network
        self._settings = config or default_settings
        self.state = INITIAL_STATE

    async def connect(self) -> bool:
        self.state = begin_connect(self.state)
        try:
            wallet_address = await self._wallet.connect()
        except Exception as e:
            logger.error(f"Wallet connection failed: {e}")
            self.state = connect_failed(self.state, f"Failed to connect wallet: {e}")
            return False

        self.state = connect_succeeded(self.state, wallet_address)
        logger.info(f"Wallet connected: {self.state.wallet_address_short}")
        await self.reload()
        return True

    async def reload(self) -> Optional[HistoryPage]:
        try:
            page = await history.load_all(self._network)
        except TipJarError as e:
            logger.error(f"Failed to load tip history: {e}")
            self.state = feed_failed(self.state, f"Failed to load tip history: {e}")
            return None
        self.state = feed_loaded(self.state, page)
        return page

    def prepare(self, amount: Amount, message: str, timestamp: Optional[int] = None) -> Instruction:
        """Validate, derive the PDA and build the instruction. No I/O."""
        request = TipRequest(
            tipper_address=self.state.wallet_address,
            amount=to_decimal(amount),
            message=message,
            timestamp=int(time.time()) if timestamp is None else timestamp,
        )
        transaction.validate_tip_request(request, self._settings.message_max_length)

        tip_record, _ = address.derive(
            self._settings.namespace_seed,
            request.tipper_address,
            request.timestamp,
            self._settings.tip_program_id,
        )
        return transaction.build(
            request,
            tip_record,
            self._settings.recipient_address,
            SYSTEM_PROGRAM_ID,
            self._settings.tip_program_id,
            self._settings.message_max_length,
        )

    async def send_tip(
        self,
        amount: Amount,
        message: str,
        timestamp: Optional[int] = None,
    ) -> Optional[str]:
        """
        Send a tip and refresh the feed once it is confirmed.

        Returns the signature, or None when the tip was ignored (already
        submitting) or failed at the wallet/network boundary.
        """
        if self.state.pending:
            logger.info("Tip already in flight, ignoring")
            return None
        if not self.state.connected:
            raise SessionError("Connect a wallet before sending a tip")

        instruction = self.prepare(amount, message, timestamp)

        self.state = begin_submit(self.state)
        try:
            signature = await submission.submit(
                instruction,
                self._wallet,
                self._network,
                self._settings.confirmation_timeout_seconds,
            )
        except TipJarError as e:
            logger.error(f"Failed to send tip: {e}")
            self.state = submit_finished(self.state, f"Failed to send tip: {e}")
            return None

        logger.info(f"Tip sent successfully: {signature}")
        # Reload only after confirmation so the new tip is visible
        await self.reload()
        self.state = submit_finished(self.state, self.state.error)
        return signature

    def disconnect(self) -> None:
        self.state = disconnect(self.state)
