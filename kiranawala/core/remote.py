# kiranawala/core/remote.py
"""
Async client for the remote row-store (PostgREST dialect, as served by Supabase).

Every failure mode the caller cannot act on (connection errors, timeouts,
HTTP error statuses, bodies that are not JSON) is raised as RemoteUnavailable
so the engines only ever have one exception to fall back on.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import httpx

from kiranawala.core.config import settings
from kiranawala.core.exceptions import RemoteUnavailable

logger = logging.getLogger(__name__)

_RESERVED = set(',()"')


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    text = str(value)
    if any(ch in _RESERVED for ch in text):
        return '"' + text.replace('"', '\\"') + '"'
    return text


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any

    def operand(self) -> str:
        if self.value is None:
            return "is.null"
        return f"eq.{_literal(self.value)}"

    def matches(self, row: Dict[str, Any]) -> bool:
        return row.get(self.column) == self.value


@dataclass(frozen=True)
class ILike:
    """Case-insensitive substring match"""
    column: str
    substring: str

    def operand(self) -> str:
        return f"ilike.{_literal('*' + self.substring + '*')}"

    def matches(self, row: Dict[str, Any]) -> bool:
        return self.substring.lower() in str(row.get(self.column) or "").lower()


@dataclass(frozen=True)
class AnyOf:
    conditions: Tuple[Union[Eq, ILike], ...]

    def operand(self) -> str:
        return "(" + ",".join(f"{c.column}.{c.operand()}" for c in self.conditions) + ")"

    def matches(self, row: Dict[str, Any]) -> bool:
        return any(c.matches(row) for c in self.conditions)


Condition = Union[Eq, ILike, AnyOf]


def eq(column: str, value: Any) -> Eq:
    return Eq(column, value)


def ilike(column: str, substring: str) -> ILike:
    return ILike(column, substring)


def any_of(*conditions: Union[Eq, ILike]) -> AnyOf:
    return AnyOf(tuple(conditions))


def to_params(filters: Optional[Sequence[Condition]]) -> List[Tuple[str, str]]:
    """Render AND-ed conditions as PostgREST query parameters"""
    params = []
    for condition in filters or ():
        if isinstance(condition, AnyOf):
            params.append(("or", condition.operand()))
        else:
            params.append((condition.column, condition.operand()))
    return params


def matches_all(filters: Optional[Sequence[Condition]], row: Dict[str, Any]) -> bool:
    return all(condition.matches(row) for condition in filters or ())


class RemoteStore:
    """Authenticated table API: select / insert / update / delete by table name"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REMOTE_TIMEOUT_SECONDS
        api_key = api_key if api_key is not None else settings.SUPABASE_ANON_KEY
        token = access_token or settings.SUPABASE_ACCESS_TOKEN or api_key

        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers=self.headers,
            timeout=self.timeout,
            transport=transport,
        )

    async def select(
        self,
        table: str,
        filters: Optional[Sequence[Condition]] = None,
        limit: Optional[int] = None,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        params = [("select", columns)] + to_params(filters)
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params=params)

    async def insert(
        self,
        table: str,
        rows: Union[Dict[str, Any], List[Dict[str, Any]]],
        returning: bool = True,
    ) -> List[Dict[str, Any]]:
        prefer = "return=representation" if returning else "return=minimal"
        return await self._request("POST", table, json=rows, headers={"Prefer": prefer})

    async def update(
        self,
        table: str,
        patch: Dict[str, Any],
        filters: Sequence[Condition],
    ) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError(f"Refusing unfiltered update on {table}")
        return await self._request(
            "PATCH", table, params=to_params(filters), json=patch,
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, table: str, filters: Sequence[Condition]) -> None:
        if not filters:
            raise ValueError(f"Refusing unfiltered delete on {table}")
        await self._request("DELETE", table, params=to_params(filters))

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Iterable[Tuple[str, str]]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            response = await asyncio.wait_for(
                self.client.request(method, f"/{table}", params=list(params or []), json=json, headers=headers),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except asyncio.TimeoutError:
            raise RemoteUnavailable(f"{method} {table} timed out after {self.timeout}s", table)
        except httpx.HTTPStatusError as e:
            raise RemoteUnavailable(
                f"{method} {table} failed: {e.response.status_code} - {e.response.text}", table
            )
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"{method} {table} request failed: {e}", table)

        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as e:
            raise RemoteUnavailable(f"{method} {table} returned undecodable body: {e}", table)
        return data if isinstance(data, list) else [data]

    async def aclose(self):
        await self.client.aclose()
