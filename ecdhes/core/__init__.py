"""Core key agreement logic."""

from ecdhes.core.key_agreement import derive_key, ecdh_allowed, generate_epk
from ecdhes.core.key_management import ECDHESKeyManager, ecdh_es_key_manager
from ecdhes.core.key_objects import ECKey, KeyUsage, NamedCurve

__all__ = [
    "derive_key",
    "ecdh_allowed",
    "generate_epk",
    "ECDHESKeyManager",
    "ecdh_es_key_manager",
    "ECKey",
    "KeyUsage",
    "NamedCurve",
]
