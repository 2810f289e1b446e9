"""Shared fixtures."""

import base64

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from ecdhes.config import get_settings
from ecdhes.core.key_objects import ECKey, NamedCurve


def b64url_decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def private_key_from_d(d: str, curve: ec.EllipticCurve) -> ECKey:
    """Private key handle from a base64url JWK "d" value."""
    return ECKey.private(ec.derive_private_key(int.from_bytes(b64url_decode(d), "big"), curve))


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are re-read from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(params=list(NamedCurve), ids=lambda c: c.value)
def named_curve(request) -> NamedCurve:
    return request.param


@pytest.fixture
def key_pair(named_curve):
    """(recipient, ephemeral) private key handles on the same curve."""
    recipient = ECKey.private(ec.generate_private_key(named_curve.to_curve()))
    ephemeral = ECKey.private(ec.generate_private_key(named_curve.to_curve()))
    return recipient, ephemeral


@pytest.fixture
def p256_pair():
    recipient = ECKey.private(ec.generate_private_key(ec.SECP256R1()))
    ephemeral = ECKey.private(ec.generate_private_key(ec.SECP256R1()))
    return recipient, ephemeral
