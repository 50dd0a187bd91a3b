import pytest
from click.testing import CliRunner

from sfmeta.cli import cli
from sfmeta.exceptions import MetadataAPIError
from sfmeta.metadata_api import (
    DescribeResult,
    MetadataMemberDescriptor,
    MetadataTypeDescriptor,
)


@pytest.fixture
def client(monkeypatch, fake_client, fake_sfdx):
    monkeypatch.setattr("sfmeta.command_types.MetadataAPI", fake_client)
    monkeypatch.setattr("sfmeta.command_members.MetadataAPI", fake_client)
    return fake_client


def _lines(output):
    return [ln.strip() for ln in output.splitlines() if ln.strip()]


# ---- group ---------------------------------------------------------------------


def test_no_subcommand_shows_help():
    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "types" in result.output and "members" in result.output


def test_cli_verbose_flags_help():
    r1 = CliRunner().invoke(cli, ["-v"])
    r2 = CliRunner().invoke(cli, ["-vv"])
    assert r1.exit_code == 0 and r2.exit_code == 0
    assert "Usage:" in r1.output and "Usage:" in r2.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "sfmeta" in result.output


# ---- types ---------------------------------------------------------------------


def test_types_prints_sorted_names(client, fake_sfdx):
    client.describe_result = DescribeResult(
        metadata_objects=[
            MetadataTypeDescriptor("ApexClass"),
            MetadataTypeDescriptor("Report", in_folder=True),
            MetadataTypeDescriptor("ApexTrigger"),
        ]
    )

    result = CliRunner().invoke(cli, ["types", "-u", "org1"])

    assert result.exit_code == 0, result.output
    assert _lines(result.output) == ["ApexClass", "ApexTrigger", "Report*"]
    assert fake_sfdx.calls == [["sfdx", "force:org:display", "-u", "org1", "--json"]]
    assert client.calls == [("describe", "40.0")]


def test_types_empty(client):
    result = CliRunner().invoke(cli, ["types", "-u", "org1"])

    assert result.exit_code == 0, result.output
    assert _lines(result.output) == ["-- no types found --"]


def test_types_api_version_option(client):
    result = CliRunner().invoke(cli, ["types", "-u", "org1", "--api-version", "52.0"])

    assert result.exit_code == 0, result.output
    assert client.calls == [("describe", "52.0")]
    assert client.sessions[0].api_version == "52.0"


def test_types_uses_config_from_env(client, fake_sfdx, monkeypatch):
    monkeypatch.setenv("SFMETA_ALIAS", "env-org")
    monkeypatch.setenv("SFMETA_API_VERSION", "45.0")
    monkeypatch.setenv("SFMETA_SFDX_BIN", "/opt/sfdx")

    result = CliRunner().invoke(cli, ["types"])

    assert result.exit_code == 0, result.output
    assert fake_sfdx.calls == [["/opt/sfdx", "force:org:display", "-u", "env-org", "--json"]]
    assert client.calls == [("describe", "45.0")]


def test_types_without_alias(client, fake_sfdx):
    result = CliRunner().invoke(cli, ["types"])

    assert result.exit_code != 0
    assert "No org alias given" in result.output
    assert "SFMETA_ALIAS" in result.output
    assert fake_sfdx.calls == []


def test_types_bad_alias(client, fake_sfdx):
    fake_sfdx.respond(b'{"status": 1, "message": "No org configuration found for name nope"}', b"", 1)

    result = CliRunner().invoke(cli, ["types", "-u", "nope"])

    assert result.exit_code != 0
    assert "Could not resolve credentials for alias 'nope'" in result.output
    assert "No org configuration found" in result.output
    assert client.calls == []


def test_types_remote_failure(client):
    client.error = MetadataAPIError("sf:INVALID_SESSION_ID", "Invalid Session ID", 500)

    result = CliRunner().invoke(cli, ["types", "-u", "org1"])

    assert result.exit_code != 0
    assert "Error occurred during describe" in result.output


def test_bad_timeout_setting(client, monkeypatch):
    monkeypatch.setenv("SFMETA_TIMEOUT", "later")

    result = CliRunner().invoke(cli, ["types", "-u", "org1"])

    assert result.exit_code != 0
    assert "SFMETA_TIMEOUT" in result.output


# ---- members -------------------------------------------------------------------


def test_members_prints_sorted_full_names(client):
    client.members = [
        MetadataMemberDescriptor("Zeta"),
        MetadataMemberDescriptor("Alpha"),
    ]

    result = CliRunner().invoke(cli, ["members", "ApexClass", "-u", "org1"])

    assert result.exit_code == 0, result.output
    assert _lines(result.output) == ["Alpha", "Zeta"]
    assert client.calls == [("list", {"type": "ApexClass", "folder": ""}, "40.0")]


def test_members_with_folder(client):
    client.members = [MetadataMemberDescriptor("SalesReports/Pipeline")]

    result = CliRunner().invoke(cli, ["members", "Report", "-u", "org1", "--folder", "SalesReports"])

    assert result.exit_code == 0, result.output
    assert _lines(result.output) == ["SalesReports/Pipeline"]
    assert client.calls == [("list", {"type": "Report", "folder": "SalesReports"}, "40.0")]


def test_members_none_found(client):
    result = CliRunner().invoke(cli, ["members", "Report", "-u", "org1"])

    assert result.exit_code == 0, result.output
    assert "-- no member entries found --" not in result.output
    assert "No Report members found." in result.output


def test_members_remote_failure(client):
    client.error = MetadataAPIError("sf:INVALID_TYPE", "Unknown type", 500)

    result = CliRunner().invoke(cli, ["members", "Bogus", "-u", "org1"])

    assert result.exit_code != 0
    assert "Error while retrieving members for type: Bogus" in result.output


def test_zero_timeout_setting(client, fake_sfdx, monkeypatch):
    monkeypatch.setenv("SFMETA_TIMEOUT", "0")

    result = CliRunner().invoke(cli, ["types", "-u", "org1"])

    assert result.exit_code != 0
    assert "SFMETA_TIMEOUT must be a positive number" in result.output
    assert fake_sfdx.calls == []
