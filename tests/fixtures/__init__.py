"""
Test fixtures package for escrow core tests.

Provides factory functions for creating hosts, registries and tokens.

Usage:
    from fixtures.common import make_registry, make_token, ADMIN, ALICE

    def test_something():
        registry = make_registry()
        token = make_token(registry.host)
"""

from .common import (
    ADMIN,
    ALICE,
    BOB,
    CAROL,
    DAVE,
    REGISTRY,
    TOKEN_ADDRESS,
    StepClock,
    create_native,
    create_token,
    join_native,
    join_token,
    make_host,
    make_registry,
    make_token,
)

__all__ = [
    "ADMIN",
    "ALICE",
    "BOB",
    "CAROL",
    "DAVE",
    "REGISTRY",
    "TOKEN_ADDRESS",
    "StepClock",
    "create_native",
    "create_token",
    "join_native",
    "join_token",
    "make_host",
    "make_registry",
    "make_token",
]
