"""
Metadata listing on top of a ConnectionHolder.

The two ``list_*`` coroutines fetch raw results from the Metadata API; the
two ``format_*`` coroutines turn those results into sorted names and print
them one per line.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

import click

from .connection import ConnectionHolder, Session
from .exceptions import DescribeError, ListMembersError, NoSessionError
from .metadata_api import DescribeResult, MetadataAPI, MetadataMemberDescriptor

_logger = logging.getLogger(__name__)

NO_TYPES_MESSAGE = "-- no types found --"
NO_MEMBERS_MESSAGE = "-- no member entries found --"

ClientFactory = Callable[[Session], MetadataAPI]


class MetadataLister:
    """List metadata types and members for the session held by a ConnectionHolder."""

    def __init__(self, client_factory: ClientFactory = MetadataAPI) -> None:
        self.client_factory = client_factory

    def _client(self, holder: ConnectionHolder) -> MetadataAPI:
        session = holder.get_session()
        if session is None:
            raise NoSessionError()
        return self.client_factory(session)

    async def list_all_types(self, holder: ConnectionHolder) -> DescribeResult:
        """Describe all metadata types available at ``holder.api_version``."""
        client = self._client(holder)
        try:
            result = await asyncio.to_thread(client.describe, holder.api_version)
        except Exception as e:
            raise DescribeError(e) from e

        _logger.info("describe returned %d metadata types", len(result.metadata_objects))
        return result

    async def list_type_members(
        self,
        holder: ConnectionHolder,
        type_name: str,
        folder: Optional[str] = None,
    ) -> List[MetadataMemberDescriptor]:
        """List members of ``type_name``; ``folder`` scopes folder-based types."""
        client = self._client(holder)
        query = {"type": type_name, "folder": folder or ""}
        try:
            members = await asyncio.to_thread(client.list, query, holder.api_version)
        except Exception as e:
            raise ListMembersError(type_name, e) from e

        _logger.info("list returned %d members for type=%s", len(members), type_name)
        return members

    async def format_type_names(self, describe_result: DescribeResult) -> List[str]:
        """Print and return sorted type names; folder-based types get a ``*`` suffix."""
        names = []
        for descriptor in describe_result.metadata_objects:
            name = descriptor.xml_name
            if descriptor.in_folder:
                name += "*"
            names.append(name)

        return sort_and_print(names, NO_TYPES_MESSAGE)

    async def format_member_names(
        self, list_result: Optional[Sequence[MetadataMemberDescriptor]]
    ) -> List[str]:
        """Print and return sorted member full names; prints nothing when empty."""
        if not list_result:
            return []

        names = [member.full_name for member in list_result]
        return sort_and_print(names, NO_MEMBERS_MESSAGE)


def sort_and_print(names: List[str], message_if_empty: str) -> List[str]:
    """Echo ``names`` in code-point order, or ``message_if_empty`` for an empty list."""
    if not names:
        click.echo(message_if_empty)
        return names

    sorted_names = sorted(names)
    for name in sorted_names:
        click.echo(name)
    return sorted_names
