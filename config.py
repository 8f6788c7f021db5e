import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

DEFAULT_HANDLE = 'k1nghandy.bsky.social'
DEFAULT_PDS_URL = 'https://bsky.network'
DEFAULT_PLC_DIRECTORY_URL = 'https://plc.directory'
DEFAULT_KEYS_DIR = os.path.join(PROJECT_ROOT, 'keys')


class Config:
    """
    Settings for a registration run.

    Every field falls back to an environment variable (loaded from .env),
    then to its documented default. Explicit arguments win, so tests can
    build a Config pointing at a temporary keys directory.
    """

    def __init__(
        self,
        handle: Optional[str] = None,
        pds_url: Optional[str] = None,
        plc_directory_url: Optional[str] = None,
        keys_dir: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ):
        # Handle registered as alsoKnownAs (at://<handle>)
        self.HANDLE: str = handle or os.getenv('BLUESKY_HANDLE') or DEFAULT_HANDLE

        # PDS endpoint advertised in the DID document
        self.PDS_URL: str = pds_url or os.getenv('PDS_URL') or DEFAULT_PDS_URL

        # PLC directory accepting the genesis operation
        self.PLC_DIRECTORY_URL: str = (
            plc_directory_url or os.getenv('PLC_DIRECTORY_URL') or DEFAULT_PLC_DIRECTORY_URL
        )

        # privateKey.b64, publicKey.b64 and recoveryKey.b64 live here
        self.KEYS_DIR: str = keys_dir or os.getenv('KEYS_DIR') or DEFAULT_KEYS_DIR

        self.REQUEST_TIMEOUT: Optional[float] = (
            request_timeout if request_timeout is not None
            else _parse_timeout(os.getenv('PLC_REQUEST_TIMEOUT', ''))
        )


def _parse_timeout(value: str) -> Optional[float]:
    """Seconds from PLC_REQUEST_TIMEOUT; unset or unparseable means no timeout."""
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        print(f"WARNING: ignoring PLC_REQUEST_TIMEOUT={value!r}, not a number")
        return None


config = Config()
