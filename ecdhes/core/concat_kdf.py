"""Concat KDF (NIST SP 800-56A Section 5.8.1, single-step, hash based).

Profiled by RFC 7518 Section 4.6.2 for ECDH-ES:

    OtherInfo = AlgorithmID || PartyUInfo || PartyVInfo || SuppPubInfo

where the first three fields are each prefixed with their 32-bit big-endian
length and SuppPubInfo is the key length in bits as a 32-bit big-endian
integer. SuppPrivInfo is always empty.
"""

import struct
from typing import Callable

from cryptography.hazmat.primitives import hashes

from ecdhes.core.secure_memory import SecureBytes

Digest = Callable[[bytes], bytes]

MAX_UINT32 = 2**32 - 1

HASH_ALGORITHMS = {
    "SHA-256": hashes.SHA256,
    "SHA-384": hashes.SHA384,
    "SHA-512": hashes.SHA512,
}


def uint32be(value: int) -> bytes:
    """Encode an unsigned 32-bit integer big-endian."""
    if not 0 <= value <= MAX_UINT32:
        raise ValueError(f"value must be in the range [0, 2**32), got {value}")
    return struct.pack(">I", value)


def length_and_input(data: bytes) -> bytes:
    """Prefix data with its 32-bit big-endian length."""
    return uint32be(len(data)) + bytes(data)


def build_other_info(algorithm: str, apu: bytes, apv: bytes, key_length: int) -> bytes:
    """Build the OtherInfo value for the given algorithm and key length (bits)."""
    if not isinstance(algorithm, str):
        raise TypeError(f"algorithm must be str, got {type(algorithm).__name__}")
    return (
        length_and_input(algorithm.encode("utf-8"))
        + length_and_input(apu)
        + length_and_input(apv)
        + uint32be(key_length)
    )


def hash_digest(name: str) -> Digest:
    """Return a one-shot digest function for a JOSE hash name."""
    try:
        algorithm = HASH_ALGORITHMS[name]
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {name}") from None

    def digest(data: bytes) -> bytes:
        h = hashes.Hash(algorithm())
        h.update(data)
        return h.finalize()

    return digest


sha256 = hash_digest("SHA-256")


def concat_kdf(digest: Digest, shared_secret: bytes, key_length: int, other_info: bytes) -> bytes:
    """Derive key_length bits from shared_secret.

    Rounds are digest(counter || Z || OtherInfo) with a 32-bit big-endian
    counter starting at 1. The result is ceil(key_length / 8) bytes; when
    key_length is not a multiple of 8 the trailing bits of the last byte are
    zero.
    """
    if key_length <= 0:
        raise ValueError(f"key_length must be positive, got {key_length}")

    out_len = (key_length + 7) // 8
    with SecureBytes() as okm:
        counter = 1
        while len(okm) < out_len:
            with SecureBytes(uint32be(counter)) as block:
                block.extend(shared_secret)
                block.extend(other_info)
                okm.extend(digest(bytes(block.buffer)))
            counter += 1

        derived = bytearray(okm.buffer[:out_len])

    spare = out_len * 8 - key_length
    if spare:
        derived[-1] &= (0xFF << spare) & 0xFF
    return bytes(derived)
