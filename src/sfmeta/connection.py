from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_API_VERSION, DEFAULT_SFDX_BIN
from .exceptions import CredentialResolutionError, MissingAliasError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Resolved credentials for one org."""

    access_token: str
    instance_url: str
    api_version: str

    def __repr__(self) -> str:
        return (
            f"Session(access_token='***', instance_url={self.instance_url!r}, "
            f"api_version={self.api_version!r})"
        )


class ConnectionHolder:
    """Holds at most one Session, resolved from an SFDX alias.

    Holders are plain objects: create one per org (or per tool run) and pass
    it to whatever needs the session. Nothing is shared between holders.
    """

    def __init__(self, api_version: Optional[str] = None, sfdx_bin: str = DEFAULT_SFDX_BIN) -> None:
        self.api_version = api_version or DEFAULT_API_VERSION
        self.sfdx_bin = sfdx_bin
        self.last_alias: Optional[str] = None
        self._session: Optional[Session] = None

    def has_session(self) -> bool:
        return self._session is not None

    def get_session(self) -> Optional[Session]:
        """Return the current session; never refreshes."""
        return self._session

    async def refresh(self, alias: Optional[str] = None) -> Session:
        """Resolve a fresh session for ``alias`` via the SFDX CLI.

        When ``alias`` is omitted the alias of the last successful refresh
        is reused. With several aliases in flight on one holder that default
        is ambiguous, so pass the alias explicitly in that case.

        Each call runs the credential command exactly once, with no retry
        and no timeout. Concurrent refreshes on the same holder race: the
        last one to finish wins both the session and ``last_alias``.

        Raises:
            MissingAliasError: no alias given and none remembered.
            CredentialResolutionError: the command failed or its output
                did not contain an access token and instance URL.
        """
        if not alias:
            alias = self.last_alias

        if not alias:
            raise MissingAliasError()

        payload = await self._display_org(alias)

        try:
            result = payload["result"]
            access_token = result["accessToken"]
            instance_url = result["instanceUrl"]
        except (KeyError, TypeError):
            raise CredentialResolutionError(
                alias, "response has no result.accessToken/instanceUrl"
            ) from None

        if not isinstance(access_token, str) or not isinstance(instance_url, str):
            raise CredentialResolutionError(alias, "accessToken/instanceUrl are not strings")

        self._session = Session(
            access_token=access_token,
            instance_url=instance_url.rstrip("/"),
            api_version=self.api_version,
        )
        self.last_alias = alias

        _logger.info("Session refreshed for alias=%s instance=%s", alias, self._session.instance_url)
        return self._session

    async def _display_org(self, alias: str) -> dict:
        """Run ``force:org:display`` for ``alias`` and return its parsed JSON."""
        cmd = [self.sfdx_bin, "force:org:display", "-u", alias, "--json"]
        _logger.debug("Running %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CredentialResolutionError(alias, f"cannot run {self.sfdx_bin}: {e}") from e

        stdout, stderr = await proc.communicate()

        if proc.returncode != 0:
            detail = _error_message(stdout) or stderr.decode("utf-8", "replace").strip()
            _logger.debug("%s exited with %s: %s", self.sfdx_bin, proc.returncode, detail)
            raise CredentialResolutionError(alias, detail or f"exit status {proc.returncode}")

        try:
            payload = json.loads(stdout)
        except ValueError as e:
            raise CredentialResolutionError(alias, "output is not valid JSON") from e

        if not isinstance(payload, dict):
            raise CredentialResolutionError(alias, "output is not a JSON object")
        return payload


def _error_message(stdout: bytes) -> Optional[str]:
    """Pull ``message`` out of the JSON error body the CLI prints with --json."""
    try:
        body = json.loads(stdout)
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None
