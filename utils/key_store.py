"""
Key files for the PLC identity.

All keys are stored as a single base64 token of raw key bytes in plain text
files under the keys directory:

    privateKey.b64   signing private key (32 bytes)
    publicKey.b64    signing public key (33 bytes, compressed)
    recoveryKey.b64  recovery private key (32 bytes)

The signing key is loaded when present and regenerated when missing or
unreadable. The recovery key is regenerated on every call.
"""

import base64
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from config import config
from utils.keypair import PRIVATE_KEY_LEN, Secp256k1Keypair

PRIVATE_KEY_FILE = 'privateKey.b64'
PUBLIC_KEY_FILE = 'publicKey.b64'
RECOVERY_KEY_FILE = 'recoveryKey.b64'


class KeySource(Enum):
    LOADED = 'loaded'
    GENERATED = 'generated'


@dataclass
class Loaded:
    keypair: Secp256k1Keypair


@dataclass
class Absent:
    reason: str


@dataclass
class SigningKey:
    keypair: Secp256k1Keypair
    did: str
    source: KeySource
    # Why the stored key could not be used (GENERATED only)
    reason: Optional[str] = None


def load_signing_keypair(keys_dir: Optional[str] = None) -> Union[Loaded, Absent]:
    """
    Read the signing private key from disk.

    A missing or unreadable file, invalid base64, a wrong-length buffer or an
    out-of-range scalar all come back as Absent. Corruption is therefore
    indistinguishable from a first run except through the reason string.
    """
    path = os.path.join(keys_dir or config.KEYS_DIR, PRIVATE_KEY_FILE)
    if not os.path.isfile(path):
        return Absent(f"no key file at {path}")

    try:
        raw = _read_b64(path)
    except OSError as e:
        return Absent(f"{path} could not be read: {e}")
    except ValueError as e:
        # binascii.Error, UnicodeDecodeError and non-ASCII text all land here
        return Absent(f"{path} is not valid base64: {e}")

    try:
        return Loaded(Secp256k1Keypair.import_key(raw))
    except ValueError as e:
        return Absent(f"{path} does not hold a secp256k1 key: {e}")


def generate_signing_keypair(keys_dir: Optional[str] = None) -> Secp256k1Keypair:
    """Create a new signing keypair and write both halves, overwriting old files."""
    keys_dir = keys_dir or config.KEYS_DIR
    keypair = Secp256k1Keypair.create()

    private_bytes = keypair.export()
    public_bytes = public_key_bytes_of(keypair, private_bytes)

    os.makedirs(keys_dir, exist_ok=True)
    _write_b64(os.path.join(keys_dir, PRIVATE_KEY_FILE), private_bytes)
    _write_b64(os.path.join(keys_dir, PUBLIC_KEY_FILE), public_bytes)
    return keypair


def ensure_signing_keypair(keys_dir: Optional[str] = None) -> SigningKey:
    """
    Return a usable signing keypair, generating one if the stored key can't be loaded.

    Only generation failures (e.g. an unwritable keys directory) raise.
    """
    keys_dir = keys_dir or config.KEYS_DIR
    print(f"Looking for keys in: {keys_dir}")

    outcome = load_signing_keypair(keys_dir)
    if isinstance(outcome, Loaded):
        print(f"Loaded existing key pair from {keys_dir}")
        keypair = outcome.keypair
        return SigningKey(keypair, keypair.did(), KeySource.LOADED)

    print(f"Could not load key pair ({outcome.reason}), generating new one")
    keypair = generate_signing_keypair(keys_dir)
    print(f"Key pair generated and saved in {keys_dir}")
    return SigningKey(keypair, keypair.did(), KeySource.GENERATED, outcome.reason)


def create_recovery_keypair(keys_dir: Optional[str] = None) -> Secp256k1Keypair:
    """
    Generate a new recovery keypair, save its private key and return it.

    The keypair becomes the rotation key of the registered did:plc.

    Never reads an existing recovery key: every call replaces recoveryKey.b64.
    """
    keys_dir = keys_dir or config.KEYS_DIR
    keypair = Secp256k1Keypair.create()

    os.makedirs(keys_dir, exist_ok=True)
    path = os.path.join(keys_dir, RECOVERY_KEY_FILE)
    _write_b64(path, keypair.export())
    print(f"Recovery key saved to {path}")
    return keypair


def public_key_bytes_of(keypair, exported: bytes) -> bytes:
    """
    Public key bytes of a keypair.

    Keypair objects without a public_key_bytes accessor are assumed to export
    private || public, so the public half starts at byte 32.
    """
    public_bytes = getattr(keypair, 'public_key_bytes', None)
    if public_bytes is not None:
        return public_bytes
    return exported[PRIVATE_KEY_LEN:]


def _read_b64(path: str) -> bytes:
    with open(path, 'r', encoding='utf-8') as f:
        return base64.b64decode(f.read().strip(), validate=True)


def _write_b64(path: str, data: bytes) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(base64.b64encode(data).decode('utf-8'))
