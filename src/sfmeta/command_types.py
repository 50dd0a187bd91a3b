from __future__ import annotations

from typing import List, Optional

import click

from .cli_support import build_holder, load_config, run_or_fail
from .lister import MetadataLister
from .metadata_api import MetadataAPI


@click.command("types")
@click.option("-u", "--alias", default=None, help="SFDX org alias (default: $SFMETA_ALIAS).")
@click.option("--api-version", default=None, help="Metadata API version, e.g. 40.0.")
def types_cmd(alias: Optional[str], api_version: Optional[str]) -> None:
    """List all metadata types of an org.

    Types whose members live in folders (reports, documents, ...) are
    marked with a trailing '*'.
    """
    cfg = load_config()
    holder = build_holder(cfg, api_version)
    lister = MetadataLister(lambda s: MetadataAPI(s, timeout=cfg.timeout))

    async def _run() -> List[str]:
        await holder.refresh(alias or cfg.alias)
        result = await lister.list_all_types(holder)
        return await lister.format_type_names(result)

    run_or_fail(_run())
