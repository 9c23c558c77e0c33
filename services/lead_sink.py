"""
Bulk insert target for imported leads.

The importer only needs insert_many(); the Supabase implementation is built
from an explicit client so tests and scripts can hand in their own.
"""

import json
from typing import Any, Optional, Protocol, Sequence

from supabase import Client

from config import DatabaseSession

GENERIC_SINK_ERROR = (
    "Connection error. Check that the leads table exists in Supabase."
)


class LeadSink(Protocol):
    """Anything that can insert a batch of lead records or raise."""

    def insert_many(self, records: Sequence[dict[str, Any]]) -> None:
        ...


class SupabaseLeadSink:
    """Inserts lead batches through a Supabase client."""

    def __init__(self, client: Client, table: str = "leads"):
        self.client = client
        self.table = table

    def insert_many(self, records: Sequence[dict[str, Any]]) -> None:
        """
        Insert records in one request.

        Raises:
            postgrest.exceptions.APIError: When the database rejects the batch
        """
        with DatabaseSession(f"insert_{self.table}", self.client) as client:
            client.table(self.table).insert(list(records)).execute()


def describe_sink_error(error: BaseException) -> str:
    """
    Best human-readable message from a failed insert.

    PostgREST errors carry message, details and hint, any of which may be
    empty; the first non-empty one wins.
    """
    for attr in ("message", "details", "hint"):
        value: Optional[Any] = getattr(error, attr, None)
        if value:
            return str(value)

    if error.args:
        first = error.args[0]
        if isinstance(first, dict):
            for key in ("message", "details", "hint"):
                if first.get(key):
                    return str(first[key])
            text = json.dumps(first)
        else:
            text = str(first)
        if text and text != "{}":
            return text

    return GENERIC_SINK_ERROR
