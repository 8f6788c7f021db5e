"""
secp256k1 keypair for AT Protocol identities.

The signing and recovery keys of a did:plc are referenced as DID:KEY strings:
multibase (base58btc with 'z' prefix) over the multicodec secp256k1-pub
prefix (0xe7 0x01) followed by the 33-byte compressed public key.

    private key  ->  32 raw bytes (big-endian scalar), what gets persisted
    public key   ->  33 bytes, SEC1 compressed point
    did()        ->  did:key:zQ3s...
"""

import base58
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

# Multicodec prefix for secp256k1 public key (0xe7 0x01)
MULTICODEC_SECP256K1_PREFIX = b'\xe7\x01'

PRIVATE_KEY_LEN = 32

# Group order of secp256k1; valid private scalars are 1..n-1
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class Secp256k1Keypair:
    """In-memory secp256k1 keypair. Only the private scalar is ever exported."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey):
        if not isinstance(private_key.curve, ec.SECP256K1):
            raise TypeError(f"Expected a secp256k1 key, got {private_key.curve.name}")
        self._private_key = private_key

    @classmethod
    def create(cls) -> 'Secp256k1Keypair':
        """Generate a fresh keypair."""
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def import_key(cls, raw_bytes: bytes) -> 'Secp256k1Keypair':
        """
        Load a keypair from a raw 32-byte private key.

        Raises:
            ValueError: wrong length, or the scalar is outside [1, n-1].
        """
        if len(raw_bytes) != PRIVATE_KEY_LEN:
            raise ValueError(
                f"secp256k1 private key must be {PRIVATE_KEY_LEN} bytes, got {len(raw_bytes)}"
            )
        private_value = int.from_bytes(raw_bytes, 'big')
        if not 0 < private_value < SECP256K1_ORDER:
            raise ValueError("secp256k1 private key is out of range")
        return cls(ec.derive_private_key(private_value, ec.SECP256K1()))

    @property
    def private_key(self) -> ec.EllipticCurvePrivateKey:
        return self._private_key

    def export(self) -> bytes:
        return self._private_key.private_numbers().private_value.to_bytes(PRIVATE_KEY_LEN, 'big')

    @property
    def public_key_bytes(self) -> bytes:
        return self._private_key.public_key().public_bytes(
            Encoding.X962, PublicFormat.CompressedPoint
        )

    def did(self) -> str:
        """DID:KEY string for the public key."""
        multibase = base58.b58encode(MULTICODEC_SECP256K1_PREFIX + self.public_key_bytes)
        return f"did:key:z{multibase.decode('utf-8')}"
