"""
Signing — secp256k1 ECDSA helpers backed by ``cryptography``.

Private keys are 32-byte scalars written as 64 hex characters, public keys
are compressed SEC1 points in hex, signatures are DER in hex.
"""
import re
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

CURVE = ec.SECP256K1()
CURVE_ORDER = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)

_PRIVATE_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def _to_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def is_valid_private(private_key: str) -> bool:
    """Whether ``private_key`` is a well-formed secp256k1 private key."""
    if not isinstance(private_key, str) or not _PRIVATE_KEY_PATTERN.match(private_key):
        return False
    return 0 < int(private_key, 16) < CURVE_ORDER


def _load_private(private_key: str) -> ec.EllipticCurvePrivateKey:
    if not is_valid_private(private_key):
        raise ValueError("Not a valid secp256k1 private key")
    return ec.derive_private_key(int(private_key, 16), CURVE)


def generate_private_key() -> str:
    key = ec.generate_private_key(CURVE)
    return f"{key.private_numbers().private_value:064x}"


def public_key_of(private_key: str) -> str:
    """Compressed public key for a private key."""
    public = _load_private(private_key).public_key()
    return public.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.CompressedPoint,
    ).hex()


def sign(data: Union[str, bytes], private_key: str) -> str:
    """Sign ``data`` (SHA-256 digest) and return the DER signature in hex."""
    key = _load_private(private_key)
    return key.sign(_to_bytes(data), ec.ECDSA(hashes.SHA256())).hex()


def verify(data: Union[str, bytes], signature: str, public_key: str) -> bool:
    try:
        public = ec.EllipticCurvePublicKey.from_encoded_point(
            CURVE, bytes.fromhex(public_key)
        )
        public.verify(
            bytes.fromhex(signature), _to_bytes(data), ec.ECDSA(hashes.SHA256())
        )
    except (InvalidSignature, ValueError):
        return False
    return True
