"""Shared fixtures for onetimeauth tests."""

import random
import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow (large random sweeps)")


@pytest.fixture
def rng():
    """Deterministic RNG for reproducible tests."""
    return random.Random(42)


@pytest.fixture
def random_bytes(rng):
    """Callable returning n deterministic pseudo-random bytes."""
    def _random_bytes(n: int) -> bytes:
        return bytes(rng.getrandbits(8) for _ in range(n))
    return _random_bytes


@pytest.fixture
def ascii_key():
    """'this is 32-byte key for Poly1305'."""
    return bytes.fromhex('746869732069732033322d62797465206b657920666f7220506f6c7931333035')


@pytest.fixture
def nacl_key():
    return bytes.fromhex('eea6a7251c1e72916d11c2cb214d3c252539121d8e234e652d651fa4c8cff880')


@pytest.fixture
def nacl_message():
    """131-byte message from the NaCl onetimeauth test."""
    return bytes.fromhex(
        '8e993b9f48681273c29650ba32fc76ce48332ea7164d96a4476fb8c531a1186a'
        'c0dfc17c98dce87b4da7f011ec48c97271d2c20f9b928fe2270d6fb863d51738'
        'b48eeee314a7cc8ab932164548e526ae90224368517acfeabd6bb3732bc0e9da'
        '99832b61ca01b6de56244a9e88d5f9b37973f622a43d14a6599b1f654cb45a74'
        'e355a5'
    )
