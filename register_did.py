"""
Register a did:plc for a Bluesky handle.

Loads (or generates) the signing key from keys/, generates a fresh recovery
key, and submits the genesis operation to the PLC directory:
    python register_did.py

Set BLUESKY_HANDLE in .env to register your own handle.

Warning: the recovery key in keys/recoveryKey.b64 is replaced on every run,
including failed ones. Back it up after a successful registration.
"""

import json
import sys
from typing import Any, Dict, Optional

from config import Config, config as default_config
from utils.errors import RegistrationError, TransportError
from utils.key_store import create_recovery_keypair, ensure_signing_keypair
from utils.keypair import Secp256k1Keypair
from utils.plc import PlcClient, RegistrationRequest


def register(
    signing_key: Secp256k1Keypair,
    recovery_key: Secp256k1Keypair,
    handle: Optional[str] = None,
    config: Optional[Config] = None,
    client: Optional[PlcClient] = None,
) -> Dict[str, Any]:
    """
    Submit the registration for signing_key to the PLC directory.

    Args:
        signing_key: Keypair whose DID becomes the atproto verification
            method.
        recovery_key: Keypair registered as the rotation key. It signs
            the genesis operation.
        handle: Overrides config.HANDLE.
        config: Defaults to the module-level config.
        client: Defaults to a PlcClient for config.PLC_DIRECTORY_URL.

    Returns:
        Directory result dict, containing the new 'did'.

    Raises:
        RegistrationError: after printing the failure details.
    """
    config = config or default_config
    client = client or PlcClient(config.PLC_DIRECTORY_URL, timeout=config.REQUEST_TIMEOUT)

    request = RegistrationRequest(
        signing_key=signing_key.did(),
        handle=handle or config.HANDLE,
        pds=config.PDS_URL,
        recovery_key=recovery_key.did(),
    )

    print(f"Registering DID for handle: {request.handle}")
    print(f"Using DID: {request.signing_key}")
    print(f"Using recovery DID: {request.recovery_key}")

    try:
        result = client.create_did(request, signing_key, recovery_key)
    except RegistrationError as e:
        print(f"DID Registration Failed: {e}", file=sys.stderr)
        if isinstance(e, TransportError) and e.status is not None:
            print(f"Status code: {e.status}", file=sys.stderr)
            print(f"Response details: {json.dumps(e.body, indent=2)}", file=sys.stderr)
        raise

    print(f"DID Registration Successful: {result['did']}")
    return result


def run(config: Optional[Config] = None, client: Optional[PlcClient] = None) -> int:
    """Provision keys and register. Returns the process exit code."""
    config = config or default_config
    try:
        print("Setting up cryptographic keys...")
        signing = ensure_signing_keypair(config.KEYS_DIR)

        print("Generating recovery key...")
        recovery = create_recovery_keypair(config.KEYS_DIR)

        print("Registering DID with PLC directory...")
        result = register(signing.keypair, recovery, config=config, client=client)

        print(f"Registration complete with DID: {result['did']}")
        return 0
    except Exception as e:
        print(f"Process failed: {e}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == '__main__':
    main()
