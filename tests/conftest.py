"""Shared fixtures for mod version checker tests."""

import json
import zipfile

import pytest
import requests


@pytest.fixture
def make_jar(tmp_path):
    """Build a jar in tmp_path. ``metadata`` may be a dict, raw text, or None."""
    def _make_jar(name, metadata=None, extra_files=None):
        jar_path = tmp_path / name
        with zipfile.ZipFile(jar_path, 'w') as zf:
            if isinstance(metadata, dict):
                zf.writestr("fabric.mod.json", json.dumps(metadata))
            elif metadata is not None:
                zf.writestr("fabric.mod.json", metadata)
            for entry_name, content in (extra_files or {}).items():
                zf.writestr(entry_name, content)
        return jar_path
    return _make_jar


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.text is not None:
            return json.loads(self.text)
        return self.payload


class FakeSession:
    """Records GET calls and answers with a canned response or exception."""

    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_session():
    """Factory for FakeSession objects."""
    def _fake_session(payload=None, **kwargs):
        if 'error' in kwargs:
            return FakeSession(error=kwargs['error'])
        return FakeSession(response=FakeResponse(payload, **kwargs))
    return _fake_session
