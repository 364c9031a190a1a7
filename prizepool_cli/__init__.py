"""
Prizepool CLI

Command-line tooling for the escrow core.

Usage:
    python -m prizepool_cli tree build entitlements.yaml --out tree.json
    python -m prizepool_cli tree verify --root 0x... --account 0x... --amount 150 --proof 0x...
    python -m prizepool_cli simulate scenario.yaml
"""

__version__ = "0.1.0"
