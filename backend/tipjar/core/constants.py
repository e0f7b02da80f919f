import hashlib
from decimal import Decimal

from solders.pubkey import Pubkey

# Lamports per SOL (must match the ledger)
LAMPORTS_PER_SOL = 10**9
U64_MAX = 2**64 - 1

# PDA seeds (must match smart contract)
TIP_HISTORY_SEED = b"tip_history"
MAX_SEED_LENGTH = 32

# Anchor discriminators
TIP_IX_DISCRIMINATOR = hashlib.sha256(b"global:tip").digest()[:8]
TIP_HISTORY_DISCRIMINATOR = hashlib.sha256(b"account:TipHistory").digest()[:8]

# System program
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

MESSAGE_MAX_LENGTH = 200

# Convenience amounts offered to tippers (SOL), not enforced on-chain
TIP_PRESETS = (Decimal("0.1"), Decimal("0.5"), Decimal("1.0"), Decimal("2.0"))
