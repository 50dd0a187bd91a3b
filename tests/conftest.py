import json

import pytest

import sfmeta.connection as connection
from sfmeta.metadata_api import DescribeResult


def org_display_payload(access_token="00DFAKE-TOKEN", instance_url="https://example.my.salesforce.com"):
    """Body printed by `sfdx force:org:display --json` for an authorized org."""
    return {
        "status": 0,
        "result": {
            "id": "00D000000000001",
            "accessToken": access_token,
            "instanceUrl": instance_url,
            "username": "admin@example.com",
            "alias": "org1",
        },
    }


class FakeProcess:
    def __init__(self, stdout=b"", stderr=b"", returncode=0):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode

    async def communicate(self):
        return self._stdout, self._stderr


class FakeSfdx:
    """Stands in for asyncio.create_subprocess_exec; records every command."""

    def __init__(self):
        self.calls = []
        self.queued = []
        self.exec_error = None
        self.default = (json.dumps(org_display_payload()).encode(), b"", 0)

    def respond(self, stdout=b"", stderr=b"", returncode=0):
        self.queued.append((stdout, stderr, returncode))

    def respond_json(self, payload, returncode=0):
        self.respond(json.dumps(payload).encode(), b"", returncode)

    async def __call__(self, *args, **kwargs):
        self.calls.append(list(args))
        if self.exec_error is not None:
            raise self.exec_error
        stdout, stderr, rc = self.queued.pop(0) if self.queued else self.default
        return FakeProcess(stdout, stderr, rc)


class FakeMetadataClient:
    """Factory + client in one: MetadataLister calls it with the session."""

    def __init__(self):
        self.describe_result = DescribeResult()
        self.members = []
        self.error = None
        self.sessions = []
        self.calls = []

    def __call__(self, session, timeout=None):
        self.sessions.append(session)
        return self

    def describe(self, api_version):
        self.calls.append(("describe", api_version))
        if self.error is not None:
            raise self.error
        return self.describe_result

    def list(self, query, api_version):
        self.calls.append(("list", dict(query), api_version))
        if self.error is not None:
            raise self.error
        return self.members


@pytest.fixture(autouse=True)
def clean_sfmeta_env(monkeypatch):
    """Keep a developer's SFMETA_* settings out of the tests."""
    for name in ("SFMETA_ALIAS", "SFMETA_API_VERSION", "SFMETA_SFDX_BIN", "SFMETA_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_sfdx(monkeypatch):
    fake = FakeSfdx()
    monkeypatch.setattr(connection.asyncio, "create_subprocess_exec", fake)
    return fake


@pytest.fixture
def fake_client():
    return FakeMetadataClient()


@pytest.fixture
def org_payload():
    return org_display_payload
