"""ECDH-ES key agreement (RFC 7518 Section 4.6).

- ecdh_allowed: curve allow-list check for a key
- generate_epk: ephemeral key pair on the same curve as a static key
- derive_key: ECDH shared secret expanded with Concat KDF
"""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec

from ecdhes.core.concat_kdf import Digest, build_other_info, concat_kdf, sha256, MAX_UINT32
from ecdhes.core.key_objects import (
    ECKey,
    InvalidKeyTypeError,
    KeyAgreementError,
    KeyUsage,
    NamedCurve,
    UnauthorizedKeyUsageError,
)
from ecdhes.core.secure_memory import SecureBytes

ALLOWED_CURVES = frozenset(c.value for c in NamedCurve)


def _require_key(key) -> ECKey:
    if not isinstance(key, ECKey):
        raise InvalidKeyTypeError(key, "ECKey")
    return key


def ecdh_allowed(key: ECKey) -> bool:
    """Whether key's curve may be used for ECDH-ES."""
    return _require_key(key).curve_name in ALLOWED_CURVES


def generate_epk(key: ECKey) -> ECKey:
    """Generate an ephemeral private key on the same curve as key.

    The returned key can only derive bits. Its public half is available
    through ECKey.public().
    """
    curve = _require_key(key).curve
    try:
        private_key = ec.generate_private_key(type(curve)())
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyAgreementError(f"Ephemeral key generation failed for curve {key.curve_name}") from e
    return ECKey.private(private_key, (KeyUsage.DERIVE_BITS,))


def shared_secret_length(key: ECKey) -> int:
    """Length in bytes of the raw ECDH output for key's curve."""
    named = key.named_curve
    if named is None:
        raise KeyAgreementError(f"Unsupported curve: {key.curve_name}")
    return named.secret_length


def derive_key(
    public_key: ECKey,
    private_key: ECKey,
    algorithm: str,
    key_length: int,
    apu: bytes = b"",
    apv: bytes = b"",
    *,
    digest: Digest | None = None,
) -> bytes:
    """Derive a key_length-bit key from an ECDH agreement.

    Args:
        public_key: Peer public key (a private handle contributes its public half)
        private_key: Own private key, must carry the deriveBits usage
        algorithm: AlgorithmID label ("enc" for ECDH-ES, "alg" for key wrapping)
        key_length: Derived key length in bits
        apu: Agreement PartyUInfo
        apv: Agreement PartyVInfo
        digest: Hash function for Concat KDF; defaults to SHA-256 (RFC 7518)

    Returns:
        ceil(key_length / 8) bytes of derived key
    """
    _require_key(public_key)
    _require_key(private_key)

    if not private_key.is_private or KeyUsage.DERIVE_BITS not in private_key.usages:
        raise UnauthorizedKeyUsageError('ECDH-ES private key "usages" must include "deriveBits"')

    if isinstance(key_length, bool) or not isinstance(key_length, int):
        raise TypeError("key_length must be an integer number of bits")
    if not 0 < key_length <= MAX_UINT32:
        raise ValueError(f"key_length must be in the range (0, 2**32), got {key_length}")
    for name, value in (("apu", apu), ("apv", apv)):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"{name} must be bytes, got {type(value).__name__}")

    if digest is None:
        digest = sha256

    expected = shared_secret_length(private_key)

    with SecureBytes(build_other_info(algorithm, bytes(apu), bytes(apv), key_length)) as other_info:
        try:
            secret = private_key.key.exchange(ec.ECDH(), public_key.public_key_object())
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyAgreementError(f"ECDH key agreement failed: {e}") from e

        with SecureBytes(secret) as shared_secret:
            del secret
            if len(shared_secret) != expected:
                raise KeyAgreementError(
                    f"Shared secret is {len(shared_secret)} bytes, expected {expected} for {private_key.curve_name}"
                )
            try:
                return concat_kdf(digest, bytes(shared_secret.buffer), key_length, bytes(other_info.buffer))
            except (ValueError, UnsupportedAlgorithm) as e:
                raise KeyAgreementError(f"Concat KDF failed: {e}") from e
