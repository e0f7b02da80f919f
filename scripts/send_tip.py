#!/usr/bin/env python3
"""
send_tip.py — Send a tip to the creator and print the tip feed.

Signs with the keypair in TIPPER_PRIVATE_KEY, waits for confirmation, then
reloads the feed from on-chain TipHistory accounts.

Usage:
    python scripts/send_tip.py <amount_sol> <message> [--cluster CLUSTER]
    python scripts/send_tip.py --list [--cluster CLUSTER]

Examples:
    python scripts/send_tip.py 0.5 "Great work!"
    python scripts/send_tip.py 1 "Thanks for the stream" --cluster mainnet
    python scripts/send_tip.py --list
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ── Paths ──────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent

# ── Cluster config ─────────────────────────────────────────────
CLUSTERS = {
    "localnet": "http://localhost:8899",
    "devnet": "https://api.devnet.solana.com",
    "mainnet": "https://api.mainnet-beta.solana.com",
}

# ── Colors ─────────────────────────────────────────────────────
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
RED = "\033[0;31m"
CYAN = "\033[0;36m"
NC = "\033[0m"


def log(msg: str) -> None:
    print(f"{CYAN}[send_tip]{NC} {msg}")


def ok(msg: str) -> None:
    print(f"{GREEN}[  ok  ]{NC} {msg}")


def err(msg: str) -> None:
    print(f"{RED}[error ]{NC} {msg}", file=sys.stderr)


def load_env() -> None:
    """Load .env from project root or backend, if present."""
    for env_path in (PROJECT_ROOT / ".env", PROJECT_ROOT / "backend" / ".env"):
        if env_path.exists():
            load_dotenv(env_path)
            return


def print_feed(tips) -> None:
    if not tips:
        log("No tips yet. Be the first to support!")
        return
    for tip in tips:
        when = datetime.fromtimestamp(tip.timestamp_millis / 1000, tz=timezone.utc)
        print(
            f"  {when:%Y-%m-%d %H:%M:%S}  {tip.tipper_short}  "
            f"{YELLOW}{tip.amount} SOL{NC}  {tip.message}"
        )


def resolve_settings(cluster: Optional[str]):
    """An explicit --cluster wins over SOLANA_RPC_URL from the environment or .env."""
    # Imported after load_env so Settings sees the .env values
    from tipjar.core.config import Settings

    if cluster is not None:
        return Settings(solana_rpc_url=CLUSTERS[cluster])
    return Settings()


def explorer_url(signature: str, network: str) -> str:
    url = f"https://explorer.solana.com/tx/{signature}"
    if network == "mainnet":
        return url
    if network == "localnet":
        return f"{url}?cluster=custom&customUrl=http%3A%2F%2Flocalhost%3A8899"
    return f"{url}?cluster={network}"


async def run(args: argparse.Namespace) -> int:
    from tipjar.blockchain.chains.solana import KeypairWallet, SolanaNetworkService
    from tipjar.core.errors import InvalidRequest
    from tipjar.services.session import TipSession

    config = resolve_settings(args.cluster)
    network = SolanaNetworkService(config)
    wallet = KeypairWallet(network, config.tipper_private_key)
    session = TipSession(wallet, network, config)

    log(f"Cluster:     {YELLOW}{config.network_label}{NC} ({config.solana_rpc_url})")
    log(f"Program ID:  {YELLOW}{config.tip_program_id}{NC}")
    log(f"Recipient:   {config.recipient_address}")

    try:
        if not await session.connect():
            err(session.state.error or "Failed to connect wallet")
            return 1
        log(f"Tipper:      {session.state.wallet_address}")

        if not args.list:
            log(f"Sending {YELLOW}{args.amount} SOL{NC}: {args.message!r}")
            try:
                signature = await session.send_tip(args.amount, args.message)
            except InvalidRequest as e:
                err(str(e))
                return 1
            if signature is None:
                err(session.state.error or "Tip was not sent")
                return 1
            ok(f"Tip sent: {YELLOW}{signature}{NC}")
            log(f"Explorer: {explorer_url(signature, config.network_label)}")

        if session.state.skipped:
            log(f"Skipped {session.state.skipped} malformed tip records")
        print_feed(session.state.feed)
        return 0
    finally:
        await network.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a SOL tip with a message")
    parser.add_argument("amount", nargs="?", help="Amount in SOL (e.g. 0.1, 0.5, 1, 2)")
    parser.add_argument("message", nargs="?", help="Message, up to 200 characters")
    parser.add_argument("--list", action="store_true", help="Only print the tip feed")
    parser.add_argument(
        "--cluster",
        choices=CLUSTERS.keys(),
        help="Solana cluster (default: SOLANA_RPC_URL, else devnet)",
    )
    args = parser.parse_args()

    if not args.list and (args.amount is None or args.message is None):
        parser.error("amount and message are required unless --list is given")

    load_env()
    logging.basicConfig(level=logging.WARNING)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
