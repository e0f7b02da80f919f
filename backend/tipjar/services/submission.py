"""
Submission pipeline: wallet sign-and-send, then a bounded confirmation wait.

There is no retry. A second tip from the same tipper in the same second
targets an existing PDA, so the network rejects it instead of recording a
duplicate.
"""

import asyncio
import logging

from solders.instruction import Instruction

from tipjar.blockchain.base import ConfirmationStatus, NetworkCapability, WalletCapability
from tipjar.core.errors import (
    ConfirmationTimeout,
    SubmissionFailed,
    TipJarError,
    WalletRejected,
    WalletUnavailable,
)

logger = logging.getLogger(__name__)


async def submit(
    instruction: Instruction,
    wallet: WalletCapability,
    network: NetworkCapability,
    timeout_seconds: float,
) -> str:
    """Sign, broadcast and confirm `instruction`. Returns the transaction signature."""
    try:
        # May wait on the user for as long as the wallet prompt is open
        signature = await wallet.sign_and_send(instruction)
    except (WalletUnavailable, WalletRejected, SubmissionFailed):
        raise
    except TipJarError as e:
        raise SubmissionFailed(str(e)) from e
    except Exception as e:
        logger.error(f"sign_and_send failed: {e}")
        raise SubmissionFailed(f"Failed to send tip: {e}") from e

    logger.info(f"tip submitted: {signature}, waiting for confirmation")

    try:
        status = await asyncio.wait_for(network.confirm(signature), timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.warning(f"tip {signature} not confirmed within {timeout_seconds}s")
        raise ConfirmationTimeout(signature, timeout_seconds) from e

    if status is not ConfirmationStatus.FINALIZED:
        raise SubmissionFailed(f"Transaction {signature} failed on-chain")

    logger.info(f"tip confirmed: {signature}")
    return signature
