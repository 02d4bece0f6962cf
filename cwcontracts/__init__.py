"""ICS-20 transfer contract, escrow state and airdrop message types with an in-memory chain environment."""

__version__ = "0.1.0"