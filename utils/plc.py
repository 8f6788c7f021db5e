"""
did:plc registration through arroba.

arroba builds, signs and submits the genesis operation. This module checks
the request, points arroba at the configured PLC directory (arroba reads
the host from the PLC_HOST environment variable) and turns request failures
into TransportError.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from arroba import did as arroba_did

from utils.errors import TransportError, ValidationError
from utils.keypair import Secp256k1Keypair


@dataclass
class RegistrationRequest:
    signing_key: str
    handle: str
    pds: str
    recovery_key: str

    def to_payload(self) -> Dict[str, str]:
        return {
            "signingKey": self.signing_key,
            "handle": self.handle,
            "pds": self.pds,
            "recoveryKey": self.recovery_key,
        }


def validate_request(
    request: RegistrationRequest,
    signer: Secp256k1Keypair,
    recovery: Secp256k1Keypair,
) -> None:
    """
    Raises:
        ValidationError: a field is empty, a key is not a did:key, or the
            keypairs do not match the DIDs in the request.
    """
    payload = request.to_payload()
    for field, value in payload.items():
        if not value or not value.strip():
            raise ValidationError(f"{field} is required")

    for field in ('signingKey', 'recoveryKey'):
        if not payload[field].startswith('did:key:'):
            raise ValidationError(f"{field} must be a did:key, got {payload[field]}")

    if signer.did() != request.signing_key:
        raise ValidationError("signer does not match signingKey")
    if recovery.did() != request.recovery_key:
        raise ValidationError("recovery keypair does not match recoveryKey")


class PlcClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.host = urlparse(self.base_url).netloc or self.base_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, url, **kwargs):
        return self.session.post(url, timeout=self.timeout, **kwargs)

    def create_did(
        self,
        request: RegistrationRequest,
        signer: Secp256k1Keypair,
        recovery: Secp256k1Keypair,
    ) -> Dict[str, Any]:
        """
        Register a new did:plc for the request.

        The signing keypair becomes the atproto verification method and the
        recovery keypair the rotation key.

        Returns:
            {"did": "did:plc:...", "doc": did_document}

        Raises:
            ValidationError: the request is malformed (nothing is sent).
            TransportError: network failure or non-2xx response.
        """
        validate_request(request, signer, recovery)

        os.environ['PLC_HOST'] = self.host
        try:
            did_plc = arroba_did.create_plc(
                request.handle,
                signing_key=signer.private_key,
                rotation_key=recovery.private_key,
                pds_url=request.pds,
                post_fn=self._post,
            )
        except requests.HTTPError as e:
            response = e.response
            if response is None:
                raise TransportError(f"{self.base_url} request failed: {e}") from e
            raise TransportError(
                f"{self.base_url} returned HTTP {response.status_code}",
                status=response.status_code,
                body=_response_body(response),
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"Could not reach {self.base_url}: {e}") from e
        except ValueError as e:
            raise ValidationError(str(e)) from e

        return {"did": did_plc.did, "doc": did_plc.doc}


def _response_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
