"""
CLI Tree Commands

Off-line proof tooling for batch-proof competitions:
- build: compute the claim root and every claimant's proof
- prove: print the proof for one claimant
- verify: check a proof against a published root

Entitlement files are JSON or YAML, either a mapping of account -> amount
or a list of {account, amount} objects, optionally under an
"entitlements" key. Quote 0x addresses in YAML, otherwise they parse as
integers.

Usage:
    prizepool tree build entitlements.yaml --out tree.json
    prizepool tree prove entitlements.yaml 0xabc...
    prizepool tree verify --root 0x... --account 0xabc... --amount 150 --proof 0x... 0x...
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path
from typing import Any

import yaml

from core.crypto.hashing import coerce_digest, to_hex
from core.merkle.merkle_proofs import ClaimTree, MerkleVerifier


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def parse_entitlements(data: Any) -> dict[str, int]:
    """Normalize any supported entitlement layout to account -> amount."""
    if isinstance(data, dict) and "entitlements" in data:
        data = data["entitlements"]

    if isinstance(data, dict):
        pairs = list(data.items())
    elif isinstance(data, list):
        try:
            pairs = [(item["account"], item["amount"]) for item in data]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Entitlement list items need 'account' and 'amount': {e}") from e
    else:
        raise ValueError(f"Unsupported entitlements layout: {type(data).__name__}")

    result: dict[str, int] = {}
    for account, amount in pairs:
        if not isinstance(account, str):
            raise ValueError(
                f"Account {account!r} is not a string (quote 0x addresses in YAML)"
            )
        if account in result:
            raise ValueError(f"Duplicate account in entitlements: {account}")
        result[account] = amount
    return result


def load_entitlements(path: str | Path) -> dict[str, int]:
    """Load an entitlements file (JSON by extension, YAML otherwise)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Entitlements file not found: {path}")

    with open(path) as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    return parse_entitlements(data)


def build_cmd(args: Namespace) -> int:
    """Handle tree build."""
    entitlements = load_entitlements(args.entitlements)
    logger.info(f"Building claim tree for {len(entitlements)} accounts")
    tree = ClaimTree(entitlements)
    report = tree.to_dict()

    if args.out:
        out_path = Path(args.out)
        out_path.write_text(json.dumps(report, indent=2, sort_keys=True))
        logger.info(f"Wrote claim tree to {out_path}")

    if args.json:
        print(json.dumps(report, indent=2, sort_keys=True))
    else:
        print(f"root: {report['root']}")
        print(f"claimants: {len(tree)}")
        print(f"depth: {report['depth']}")
        print(f"total: {report['total']}")
        if args.out:
            print(f"written: {args.out}")

    return EXIT_SUCCESS


def prove_cmd(args: Namespace) -> int:
    """Handle tree prove."""
    tree = ClaimTree(load_entitlements(args.entitlements))
    if args.account not in tree:
        print(f"Error: account not in entitlements: {args.account}")
        return EXIT_RUNTIME_ERROR

    proof = [to_hex(s) for s in tree.proof_for(args.account)]
    result = {
        "root": to_hex(tree.root),
        "account": args.account,
        "amount": tree.amount_for(args.account),
        "proof": proof,
    }

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print(f"root: {result['root']}")
        print(f"account: {result['account']}")
        print(f"amount: {result['amount']}")
        print("proof:")
        for sibling in proof:
            print(f"  {sibling}")

    return EXIT_SUCCESS


def verify_cmd(args: Namespace) -> int:
    """Handle tree verify."""
    try:
        root = coerce_digest(args.root)
        siblings = [coerce_digest(s) for s in args.proof]
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_RUNTIME_ERROR

    ok = MerkleVerifier.verify_claim(args.account, args.amount, siblings, root)
    logger.debug(f"Proof for {args.account}/{args.amount} against {args.root}: {ok}")

    if args.json:
        print(json.dumps({
            "root": to_hex(root),
            "account": args.account,
            "amount": args.amount,
            "valid": ok,
        }, indent=2))
    else:
        print(f"valid: {str(ok).lower()}")

    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED
