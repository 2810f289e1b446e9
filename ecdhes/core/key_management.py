"""JWE key management with ECDH-ES (RFC 7518 Section 4.6).

Supported algorithms:
- ECDH-ES (direct key agreement, derived key is the CEK)
- ECDH-ES+A128KW, ECDH-ES+A192KW, ECDH-ES+A256KW (derived key wraps a random CEK)

Content encryption itself is out of scope; this module only produces and
recovers the CEK and the "epk"/"apu"/"apv" header parameters.
"""

import base64
import binascii
import os
from dataclasses import dataclass, field
from enum import Enum

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.keywrap import InvalidUnwrap, aes_key_unwrap, aes_key_wrap

from ecdhes.config import get_settings
from ecdhes.core.key_agreement import derive_key, ecdh_allowed, generate_epk
from ecdhes.core.key_objects import (
    ECKey,
    InvalidKeyTypeError,
    JOSEError,
    KeyAgreementError,
    NamedCurve,
)


class ECDHESAlgorithm(str, Enum):
    """ECDH-ES key management algorithms."""

    ECDH_ES = "ECDH-ES"
    ECDH_ES_A128KW = "ECDH-ES+A128KW"
    ECDH_ES_A192KW = "ECDH-ES+A192KW"
    ECDH_ES_A256KW = "ECDH-ES+A256KW"


class JWEEncryption(str, Enum):
    """JWE content encryption algorithms."""

    A128GCM = "A128GCM"
    A192GCM = "A192GCM"
    A256GCM = "A256GCM"
    A128CBC_HS256 = "A128CBC-HS256"
    A192CBC_HS384 = "A192CBC-HS384"
    A256CBC_HS512 = "A256CBC-HS512"


class UnsupportedAlgorithmError(JOSEError):
    """Algorithm not supported."""

    pass


class InvalidJWEError(JOSEError):
    """JWE header or encrypted key is invalid."""

    pass


# CEK sizes in bytes
CEK_SIZES = {
    JWEEncryption.A128GCM: 16,
    JWEEncryption.A192GCM: 24,
    JWEEncryption.A256GCM: 32,
    JWEEncryption.A128CBC_HS256: 32,  # 16 enc + 16 mac
    JWEEncryption.A192CBC_HS384: 48,  # 24 enc + 24 mac
    JWEEncryption.A256CBC_HS512: 64,  # 32 enc + 32 mac
}

# Key wrapping key sizes in bytes
KW_KEY_SIZES = {
    ECDHESAlgorithm.ECDH_ES_A128KW: 16,
    ECDHESAlgorithm.ECDH_ES_A192KW: 24,
    ECDHESAlgorithm.ECDH_ES_A256KW: 32,
}


@dataclass
class KeyAgreementResult:
    """Result of ECDH-ES key management on the sender side."""

    cek: bytes
    encrypted_key: bytes  # Empty for direct key agreement
    header: dict = field(default_factory=dict)  # epk, and apu/apv when present

    def __repr__(self) -> str:
        return f"KeyAgreementResult(cek=<{len(self.cek)} bytes>, encrypted_key=<{len(self.encrypted_key)} bytes>, header={self.header!r})"


def _b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    """Base64url decode with padding restoration."""
    padding = 4 - len(data) % 4
    if padding != 4:
        data += "=" * padding
    return base64.urlsafe_b64decode(data)


def epk_to_jwk(key: ECKey) -> dict:
    """Public JWK for the "epk" header parameter."""
    if not isinstance(key, ECKey):
        raise InvalidKeyTypeError(key, "ECKey")
    named = key.named_curve
    if named is None:
        raise UnsupportedAlgorithmError(f"Unsupported curve: {key.curve_name}")

    size = named.secret_length
    numbers = key.public_key_object().public_numbers()
    return {
        "kty": "EC",
        "crv": named.value,
        "x": _b64url_encode(numbers.x.to_bytes(size, "big")),
        "y": _b64url_encode(numbers.y.to_bytes(size, "big")),
    }


def jwk_to_public_key(jwk: dict) -> ECKey:
    """Parse an "epk" header parameter into a public key handle."""
    if not isinstance(jwk, dict):
        raise InvalidJWEError("'epk' must be a JSON object")
    if jwk.get("kty") != "EC":
        raise InvalidJWEError(f"Unsupported 'epk' key type: {jwk.get('kty')}")
    if "d" in jwk:
        raise InvalidJWEError("'epk' must not contain private key material")

    try:
        named = NamedCurve(jwk.get("crv"))
    except ValueError:
        raise InvalidJWEError(f"Unsupported 'epk' curve: {jwk.get('crv')}") from None

    try:
        x = _b64url_decode(jwk["x"])
        y = _b64url_decode(jwk["y"])
    except (KeyError, TypeError, binascii.Error, ValueError) as e:
        raise InvalidJWEError("'epk' is missing valid 'x' and 'y' coordinates") from e

    size = named.secret_length
    if len(x) != size or len(y) != size:
        raise InvalidJWEError(f"'epk' coordinates must be {size} bytes for {named.value}")

    public_numbers = ec.EllipticCurvePublicNumbers(
        int.from_bytes(x, "big"),
        int.from_bytes(y, "big"),
        named.to_curve(),
    )
    try:
        return ECKey(key=public_numbers.public_key())
    except ValueError as e:
        raise InvalidJWEError("'epk' is not a point on the curve") from e


class ECDHESKeyManager:
    """ECDH-ES key management operations."""

    def _parameters(self, algorithm, encryption) -> tuple[ECDHESAlgorithm, str, int]:
        """Resolve (algorithm, AlgorithmID, key data length in bytes)."""
        try:
            algorithm = ECDHESAlgorithm(algorithm)
        except ValueError:
            raise UnsupportedAlgorithmError(f"Unsupported algorithm: {algorithm}") from None
        try:
            encryption = JWEEncryption(encryption)
        except ValueError:
            raise UnsupportedAlgorithmError(f"Unsupported encryption: {encryption}") from None

        if algorithm == ECDHESAlgorithm.ECDH_ES:
            return algorithm, encryption.value, CEK_SIZES[encryption]
        return algorithm, algorithm.value, KW_KEY_SIZES[algorithm]

    def wrap(
        self,
        recipient_key: ECKey,
        algorithm: ECDHESAlgorithm | str,
        encryption: JWEEncryption | str,
        apu: bytes = b"",
        apv: bytes = b"",
        epk: ECKey | None = None,
    ) -> KeyAgreementResult:
        """Produce a CEK and header parameters for a recipient's static key.

        Args:
            recipient_key: Recipient public key
            algorithm: ECDH-ES key management algorithm
            encryption: Content encryption algorithm ("enc")
            apu: Agreement PartyUInfo
            apv: Agreement PartyVInfo
            epk: Ephemeral private key to use instead of a fresh one

        Returns:
            KeyAgreementResult with the CEK, the encrypted key and the header
        """
        if not isinstance(recipient_key, ECKey):
            raise InvalidKeyTypeError(recipient_key, "ECKey")
        if not ecdh_allowed(recipient_key):
            raise UnsupportedAlgorithmError(f"ECDH-ES is not allowed with curve {recipient_key.curve_name}")

        algorithm, alg_id, key_data_len = self._parameters(algorithm, encryption)
        cek_size = CEK_SIZES[JWEEncryption(encryption)]

        if epk is None:
            epk = generate_epk(recipient_key)
        elif not isinstance(epk, ECKey):
            raise InvalidKeyTypeError(epk, "ECKey")
        elif epk.curve_name != recipient_key.curve_name:
            raise KeyAgreementError(
                f"Ephemeral key curve {epk.curve_name} does not match recipient curve {recipient_key.curve_name}"
            )

        derived_key = derive_key(recipient_key, epk, alg_id, key_data_len * 8, apu, apv)

        header = {"epk": epk_to_jwk(epk)}
        if apu:
            header["apu"] = _b64url_encode(apu)
        if apv:
            header["apv"] = _b64url_encode(apv)

        if algorithm == ECDHESAlgorithm.ECDH_ES:
            # Direct key agreement - derived key is CEK
            return KeyAgreementResult(cek=derived_key, encrypted_key=b"", header=header)

        cek = os.urandom(cek_size)
        return KeyAgreementResult(cek=cek, encrypted_key=aes_key_wrap(derived_key, cek), header=header)

    def unwrap(
        self,
        private_key: ECKey,
        header: dict,
        encrypted_key: bytes,
        algorithm: ECDHESAlgorithm | str,
        encryption: JWEEncryption | str,
    ) -> bytes:
        """Recover the CEK from a JWE protected header and encrypted key."""
        if not isinstance(private_key, ECKey):
            raise InvalidKeyTypeError(private_key, "ECKey")
        if not private_key.is_private:
            raise InvalidKeyTypeError(private_key, "private ECKey")

        algorithm, alg_id, key_data_len = self._parameters(algorithm, encryption)
        cek_size = CEK_SIZES[JWEEncryption(encryption)]

        if "epk" not in header:
            raise InvalidJWEError("Missing 'epk' header for ECDH")
        ephemeral_public = jwk_to_public_key(header["epk"])

        if get_settings().require_epk_curve_match and ephemeral_public.curve_name != private_key.curve_name:
            raise InvalidJWEError(
                f"'epk' curve {ephemeral_public.curve_name} does not match key curve {private_key.curve_name}"
            )
        if not ecdh_allowed(private_key):
            raise UnsupportedAlgorithmError(f"ECDH-ES is not allowed with curve {private_key.curve_name}")

        apu = self._decode_party_info(header, "apu")
        apv = self._decode_party_info(header, "apv")

        derived_key = derive_key(ephemeral_public, private_key, alg_id, key_data_len * 8, apu, apv)

        if algorithm == ECDHESAlgorithm.ECDH_ES:
            if encrypted_key:
                raise InvalidJWEError("Encrypted key must be empty for direct key agreement")
            return derived_key

        try:
            cek = aes_key_unwrap(derived_key, encrypted_key)
        except (InvalidUnwrap, ValueError) as e:
            raise InvalidJWEError("Key unwrap failed") from e
        if len(cek) != cek_size:
            raise InvalidJWEError(f"Unwrapped CEK is {len(cek)} bytes, expected {cek_size}")
        return cek

    @staticmethod
    def _decode_party_info(header: dict, name: str) -> bytes:
        value = header.get(name)
        if value is None:
            return b""
        if not isinstance(value, str):
            raise InvalidJWEError(f"'{name}' must be a base64url string")
        try:
            return _b64url_decode(value)
        except (binascii.Error, ValueError) as e:
            raise InvalidJWEError(f"'{name}' is not valid base64url") from e


# Singleton instance
ecdh_es_key_manager = ECDHESKeyManager()
