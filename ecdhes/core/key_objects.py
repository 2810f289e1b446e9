"""Opaque EC key handles for ECDH-ES.

Wraps `cryptography` EC keys together with the capability tags a JOSE key
carries (RFC 7517 "key_ops" / WebCrypto usages). Raw scalars and points
never leave the wrapped key object.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec


# Exceptions
class JOSEError(Exception):
    """Base JOSE exception."""

    pass


class InvalidKeyTypeError(JOSEError, TypeError):
    """Argument is not a recognized key object."""

    def __init__(self, actual: Any, expected_type: str = "ECKey"):
        self.expected_type = expected_type
        super().__init__(f"Key must be of type {expected_type}. Received {_describe(actual)}")


class UnauthorizedKeyUsageError(JOSEError, TypeError):
    """Key lacks the capability required by the operation."""

    pass


class KeyAgreementError(JOSEError):
    """Underlying ECDH or key generation primitive rejected the operation."""

    pass


def _describe(value: Any) -> str:
    if value is None:
        return "None"
    return f"an instance of {type(value).__name__}"


class KeyUsage(str, Enum):
    """Key capabilities."""

    DERIVE_BITS = "deriveBits"
    SIGN = "sign"
    VERIFY = "verify"


class NamedCurve(str, Enum):
    """Curves allowed for ECDH-ES (RFC 7518 Section 6.2.1.1)."""

    P256 = "P-256"
    P384 = "P-384"
    P521 = "P-521"

    @property
    def field_size(self) -> int:
        """Field size in bits."""
        return _FIELD_SIZES[self]

    @property
    def secret_length(self) -> int:
        """Length in bytes of the raw ECDH output on this curve."""
        return (self.field_size + 7) // 8

    def to_curve(self) -> ec.EllipticCurve:
        return _CURVES[self]()

    @classmethod
    def from_curve(cls, curve: ec.EllipticCurve) -> "NamedCurve | None":
        return _BY_SEC_NAME.get(curve.name)


_FIELD_SIZES = {
    NamedCurve.P256: 256,
    NamedCurve.P384: 384,
    NamedCurve.P521: 521,
}

_CURVES = {
    NamedCurve.P256: ec.SECP256R1,
    NamedCurve.P384: ec.SECP384R1,
    NamedCurve.P521: ec.SECP521R1,
}

_BY_SEC_NAME = {
    "secp256r1": NamedCurve.P256,
    "secp384r1": NamedCurve.P384,
    "secp521r1": NamedCurve.P521,
}


@dataclass(frozen=True, repr=False, eq=False)
class ECKey:
    """Elliptic curve key handle.

    A private handle may carry any usages; a public handle carries only
    VERIFY, matching what a public key can actually do.
    """

    key: ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey
    usages: frozenset[KeyUsage] = frozenset()

    def __post_init__(self):
        if not isinstance(self.key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
            raise InvalidKeyTypeError(self.key, "EllipticCurvePrivateKey or EllipticCurvePublicKey")
        usages = frozenset(KeyUsage(u) for u in self.usages)
        if not self.is_private and usages - {KeyUsage.VERIFY}:
            raise ValueError("Public keys may only carry the 'verify' usage")
        object.__setattr__(self, "usages", usages)

    @classmethod
    def private(
        cls,
        key: ec.EllipticCurvePrivateKey,
        usages: tuple[KeyUsage, ...] = (KeyUsage.DERIVE_BITS,),
    ) -> "ECKey":
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise InvalidKeyTypeError(key, "EllipticCurvePrivateKey")
        return cls(key=key, usages=frozenset(usages))

    @property
    def is_private(self) -> bool:
        return isinstance(self.key, ec.EllipticCurvePrivateKey)

    @property
    def curve(self) -> ec.EllipticCurve:
        return self.key.curve

    @property
    def named_curve(self) -> NamedCurve | None:
        """Allow-listed curve, or None for any other curve."""
        return NamedCurve.from_curve(self.key.curve)

    @property
    def curve_name(self) -> str:
        """JOSE curve name, falling back to the SEC name for other curves."""
        named = self.named_curve
        return named.value if named is not None else self.key.curve.name

    def public(self) -> "ECKey":
        """Public half of this key."""
        if not self.is_private:
            return self
        return ECKey(key=self.key.public_key())

    def public_key_object(self) -> ec.EllipticCurvePublicKey:
        if self.is_private:
            return self.key.public_key()
        return self.key

    def __repr__(self) -> str:
        kind = "private" if self.is_private else "public"
        ops = ",".join(sorted(u.value for u in self.usages))
        return f"ECKey({kind}, crv={self.curve_name}, usages=[{ops}])"
