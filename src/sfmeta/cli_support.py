from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional, TypeVar

import click

from .config import SFMetaConfig
from .connection import ConnectionHolder
from .exceptions import CredentialResolutionError, MissingAliasError, SfMetaError

T = TypeVar("T")

_MISSING_ALIAS_MSG = (
    "No org alias given.\n\n"
    "Pass one with -u/--alias, or set a default in the environment (or a .env file):\n"
    "  SFMETA_ALIAS=my-org            # an alias listed by `sfdx force:org:list`\n\n"
    "Tip: authorize an org first with `sfdx force:auth:web:login -a my-org`."
)


def build_holder(cfg: SFMetaConfig, api_version: Optional[str]) -> ConnectionHolder:
    return ConnectionHolder(api_version=api_version or cfg.api_version, sfdx_bin=cfg.sfdx_bin)


def run_or_fail(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion, turning sfmeta errors into ClickException."""
    try:
        return asyncio.run(coro)
    except MissingAliasError as e:
        raise click.ClickException(_MISSING_ALIAS_MSG) from e
    except CredentialResolutionError as e:
        msg = (
            f"Could not resolve credentials for alias '{e.alias}'"
            + (f": {e.detail}" if e.detail else "")
            + "\n\nCheck the alias with `sfdx force:org:list`."
        )
        raise click.ClickException(msg) from e
    except SfMetaError as e:
        raise click.ClickException(str(e)) from e


def load_config() -> SFMetaConfig:
    try:
        return SFMetaConfig.from_env()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
