from __future__ import annotations

from typing import List, Optional

import click

from .cli_support import build_holder, load_config, run_or_fail
from .lister import MetadataLister
from .metadata_api import MetadataAPI


@click.command("members")
@click.argument("type_name", metavar="TYPE")
@click.option("-u", "--alias", default=None, help="SFDX org alias (default: $SFMETA_ALIAS).")
@click.option("-f", "--folder", default=None, help="Folder to list, for folder-based types.")
@click.option("--api-version", default=None, help="Metadata API version, e.g. 40.0.")
def members_cmd(
    type_name: str, alias: Optional[str], folder: Optional[str], api_version: Optional[str]
) -> None:
    """List the members of one metadata TYPE (e.g. ApexClass)."""
    cfg = load_config()
    holder = build_holder(cfg, api_version)
    lister = MetadataLister(lambda s: MetadataAPI(s, timeout=cfg.timeout))

    async def _run() -> List[str]:
        await holder.refresh(alias or cfg.alias)
        members = await lister.list_type_members(holder, type_name, folder)
        return await lister.format_member_names(members)

    names = run_or_fail(_run())
    if not names:
        click.echo(f"No {type_name} members found.", err=True)
