# src/sanity/core/record_store.py
import asyncio
from typing import Any, Callable, Dict, List, Mapping, Optional

import aiohttp

from sanity.core.exceptions import NotFound, StoreError
from sanity.core.http_utils import read_error_message
from sanity.core.schemas import ID_COLUMN, OWNER_COLUMN, Record, RecordSchema


class RecordStoreClient:
    """
    A thin typed accessor for one record collection on the backend's REST interface.
    Every query and command is scoped to the owner it is given; the backend enforces it.
    """

    def __init__(self, schema: RecordSchema, rest_url: str, api_key: str,
                 token_provider: Callable[[], Optional[str]], timeout: float = 10.0):
        self.schema = schema
        self.rest_url = rest_url.rstrip("/")
        self.api_key = api_key
        self.token_provider = token_provider
        self.timeout = timeout

    @property
    def collection(self) -> str:
        return self.schema.collection

    @property
    def collection_url(self) -> str:
        return f"{self.rest_url}/{self.collection}"

    async def list(self, owner: str) -> List[Record]:
        """Fetches all of the owner's records, newest first."""
        params = {
            "select": "*",
            OWNER_COLUMN: f"eq.{owner}",
            "order": f"{self.schema.created_column}.desc",
        }
        rows = await self._request("GET", params)
        return [self._to_record(row) for row in rows]

    async def create(self, fields: Mapping[str, Any]) -> Record:
        """Inserts a record. The store assigns id and creation time."""
        rows = await self._request("POST", {"select": "*"}, [dict(fields)])
        if not rows:
            raise StoreError("Create returned no record", self.collection)
        return self._to_record(rows[0])

    async def update(self, record_id: str, fields: Mapping[str, Any], owner: str) -> Record:
        """Overwrites every non-identity field of a record the owner holds."""
        payload = {k: v for k, v in fields.items() if k != ID_COLUMN}
        rows = await self._request("PATCH", self._scope(record_id, owner), payload)
        if not rows:
            raise NotFound(record_id, self.collection)
        return self._to_record(rows[0])

    async def delete(self, record_id: str, owner: str):
        """Deletes a record. Raises NotFound when nothing matched (e.g. already deleted)."""
        rows = await self._request("DELETE", self._scope(record_id, owner))
        if not rows:
            raise NotFound(record_id, self.collection)

    def _to_record(self, row: Any) -> Record:
        try:
            return Record.from_row(self.schema, row)
        except (KeyError, TypeError, AttributeError) as e:
            raise StoreError(f"Malformed row from the record store: {row!r}", self.collection) from e

    def _scope(self, record_id: str, owner: str) -> Dict[str, str]:
        return {ID_COLUMN: f"eq.{record_id}", OWNER_COLUMN: f"eq.{owner}", "select": "*"}

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() or self.api_key
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Prefer": "return=representation",
        }

    async def _request(self, method: str, params: Dict[str, str], payload: Any = None) -> List[Dict[str, Any]]:
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.request(method, self.collection_url, params=params, json=payload,
                                           headers=self._headers()) as response:
                    if response.status >= 400:
                        raise StoreError(await read_error_message(response), self.collection, response.status)
                    if response.status == 204:
                        return []
                    try:
                        body = await response.json(content_type=None)
                    except ValueError as e:
                        raise StoreError("Malformed response from the record store",
                                         self.collection, response.status) from e
        except aiohttp.ClientError as e:
            raise StoreError(f"Could not reach the record store: {e}", self.collection) from e
        except asyncio.TimeoutError as e:
            raise StoreError(f"Request timed out after {self.timeout}s", self.collection) from e

        if body is None:
            return []
        return body if isinstance(body, list) else [body]

