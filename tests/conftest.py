import os
from types import SimpleNamespace

import pytest
import requests

import utils.plc
from config import Config


class FakeResponse:
    def __init__(self, status_code: int, body=None, text: str = ''):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body

    def raise_for_status(self):
        if not 200 <= self.status_code < 300:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(200)
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class FakeCreatePlc:
    """
    Replaces arroba's create_plc: records its arguments, POSTs through
    post_fn to https://$PLC_HOST/<did> and checks the status the same way.
    """

    def __init__(self, did='did:plc:abc123', error=None):
        self.did = did
        self.error = error
        self.calls = []

    def __call__(self, handle, signing_key=None, rotation_key=None, pds_url=None,
                 post_fn=requests.post, **kwargs):
        self.calls.append({
            "handle": handle,
            "signing_key": signing_key,
            "rotation_key": rotation_key,
            "pds_url": pds_url,
            "plc_host": os.environ.get('PLC_HOST'),
        })
        if self.error is not None:
            raise self.error
        resp = post_fn(f"https://{os.environ['PLC_HOST']}/{self.did}", json={"type": "plc_operation"})
        resp.raise_for_status()
        return SimpleNamespace(did=self.did, doc={"id": self.did},
                               signing_key=signing_key, rotation_key=rotation_key)


@pytest.fixture(autouse=True)
def isolate_plc_host(monkeypatch):
    """PlcClient sets PLC_HOST for arroba; restore it after each test."""
    monkeypatch.setenv('PLC_HOST', 'unset.invalid')


@pytest.fixture
def fake_create_plc(monkeypatch):
    fake = FakeCreatePlc()
    monkeypatch.setattr(utils.plc.arroba_did, 'create_plc', fake)
    return fake


@pytest.fixture
def keys_dir(tmp_path):
    return str(tmp_path / 'keys')


@pytest.fixture
def test_config(keys_dir, monkeypatch):
    monkeypatch.delenv('BLUESKY_HANDLE', raising=False)
    return Config(keys_dir=keys_dir, pds_url='https://bsky.network',
                  plc_directory_url='https://plc.directory')


@pytest.fixture
def ok_session():
    return FakeSession(FakeResponse(200))


@pytest.fixture
def rejecting_session():
    return FakeSession(FakeResponse(400, body={"message": "Invalid signature"}))


@pytest.fixture
def unreachable_session():
    return FakeSession(error=requests.ConnectionError("connection refused"))


@pytest.fixture
def bad_gateway_session():
    return FakeSession(FakeResponse(502, text='Bad Gateway'))
