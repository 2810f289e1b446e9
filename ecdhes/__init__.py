"""ECDH-ES key agreement for JOSE (RFC 7518 Section 4.6).

Usage:
    from ecdhes import ECKey, generate_epk, derive_key

    epk = generate_epk(recipient)
    cek = derive_key(recipient, epk, "A128GCM", 128)
"""

from ecdhes.core.concat_kdf import build_other_info, concat_kdf, length_and_input, uint32be
from ecdhes.core.key_agreement import derive_key, ecdh_allowed, generate_epk
from ecdhes.core.key_management import (
    ECDHESAlgorithm,
    ECDHESKeyManager,
    InvalidJWEError,
    JWEEncryption,
    KeyAgreementResult,
    UnsupportedAlgorithmError,
    ecdh_es_key_manager,
)
from ecdhes.core.key_objects import (
    ECKey,
    InvalidKeyTypeError,
    JOSEError,
    KeyAgreementError,
    KeyUsage,
    NamedCurve,
    UnauthorizedKeyUsageError,
)

__version__ = "0.1.0"

__all__ = [
    "ecdh_allowed",
    "generate_epk",
    "derive_key",
    "build_other_info",
    "concat_kdf",
    "length_and_input",
    "uint32be",
    "ECKey",
    "KeyUsage",
    "NamedCurve",
    "ECDHESAlgorithm",
    "ECDHESKeyManager",
    "JWEEncryption",
    "KeyAgreementResult",
    "ecdh_es_key_manager",
    "JOSEError",
    "InvalidKeyTypeError",
    "UnauthorizedKeyUsageError",
    "KeyAgreementError",
    "UnsupportedAlgorithmError",
    "InvalidJWEError",
]
