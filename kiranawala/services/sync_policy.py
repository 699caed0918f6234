# kiranawala/services/sync_policy.py
"""
Remote-first reads with cache fallback, and write-through on successful writes.

The remote store is the source of truth. The local cache only exists so reads
keep working while the remote is unreachable; it is never used to resolve
write conflicts (last writer wins, no merge).
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from kiranawala.core.cache import LocalCache
from kiranawala.core.exceptions import RemoteUnavailable
from kiranawala.core.monitoring import SyncMonitoring, monitoring
from kiranawala.core.remote import Condition, RemoteStore, eq, matches_all
from kiranawala.schemas.result import DataSource, Fetched, NotFound, Ok, Outcome, Unavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityKind:
    """One synchronized entity: its table name and its domain schema"""
    table: str
    schema: Type[BaseModel]

    def decode(self, row: Dict[str, Any]) -> BaseModel:
        return self.schema.model_validate(row)

    def encode(self, item: BaseModel) -> Dict[str, Any]:
        return item.model_dump()


class SyncPolicy:
    def __init__(self, remote: RemoteStore, cache: LocalCache, monitor: Optional[SyncMonitoring] = None):
        self.remote = remote
        self.cache = cache
        self.monitor = monitor or monitoring

    async def fetch(
        self,
        kind: EntityKind,
        filters: Optional[Sequence[Condition]] = None,
        cache_criteria: Optional[Dict[str, Any]] = None,
        write_through: bool = True,
        mirror: bool = False,
        limit: Optional[int] = None,
    ) -> Fetched:
        """Read from the remote store, falling back to the cache on any remote failure.

        cache_criteria narrows the cache lookup to an indexed slice; filters are
        then re-applied to the cached rows. With mirror=True the cached slice is
        replaced by the remote result instead of merged into.
        """
        start_time = time.time()
        try:
            rows = await self.remote.select(kind.table, filters, limit=limit)
            items = [kind.decode(row) for row in rows]
        except (RemoteUnavailable, SchemaError) as e:
            self.monitor.record_error(str(e), kind.table)
            items = self.read_cache(kind, filters, cache_criteria)
            if limit is not None:
                items = items[:limit]
            self.monitor.record_fetch(kind.table, True, (time.time() - start_time) * 1000)
            logger.warning(f"Serving {len(items)} cached {kind.table} rows (degraded mode)")
            return Fetched(items, DataSource.CACHE, e)

        if mirror and cache_criteria:
            self.cache.replace_all_by_index(
                kind.table, [kind.encode(item) for item in items], **cache_criteria
            )
        elif write_through:
            self.write_through(kind, items)

        self.monitor.record_fetch(kind.table, False, (time.time() - start_time) * 1000)
        return Fetched(items, DataSource.REMOTE)

    async def fetch_one(self, kind: EntityKind, entity_id: str) -> Outcome:
        start_time = time.time()
        try:
            rows = await self.remote.select(kind.table, [eq("id", entity_id)], limit=1)
            item = kind.decode(rows[0]) if rows else None
        except (RemoteUnavailable, SchemaError) as e:
            self.monitor.record_error(str(e), kind.table)
            self.monitor.record_fetch(kind.table, True, (time.time() - start_time) * 1000)
            cached = self.cache.get(kind.table, entity_id)
            if cached is None:
                return Unavailable(e)
            return Ok(kind.decode(cached), DataSource.CACHE)

        self.monitor.record_fetch(kind.table, False, (time.time() - start_time) * 1000)
        if item is None:
            return NotFound(entity_id)
        self.write_through(kind, [item])
        return Ok(item)

    def read_cache(
        self,
        kind: EntityKind,
        filters: Optional[Sequence[Condition]] = None,
        cache_criteria: Optional[Dict[str, Any]] = None,
    ) -> List[BaseModel]:
        if cache_criteria:
            rows = self.cache.get_all_by_index(kind.table, **cache_criteria)
        else:
            rows = self.cache.get_all(kind.table)

        items = []
        for row in rows:
            if not matches_all(filters, row):
                continue
            try:
                items.append(kind.decode(row))
            except SchemaError as e:
                logger.warning(f"Skipping undecodable cached {kind.table} row {row.get('id')}: {e}")
        return items

    def write_through(self, kind: EntityKind, items: Sequence[BaseModel]) -> None:
        if items:
            self.cache.upsert_many(kind.table, [kind.encode(item) for item in items])

    async def insert(self, kind: EntityKind, payload: Dict[str, Any]) -> BaseModel:
        """Insert remotely, then cache the row the remote handed back"""
        try:
            rows = await self.remote.insert(kind.table, payload)
        except RemoteUnavailable as e:
            self.monitor.record_error(str(e), kind.table, write=True)
            raise
        item = kind.decode({**payload, **(rows[0] if rows else {})})
        self.write_through(kind, [item])
        return item

    async def update(
        self,
        kind: EntityKind,
        patch: Dict[str, Any],
        filters: Sequence[Condition],
        entity_id: str,
    ) -> BaseModel:
        try:
            rows = await self.remote.update(kind.table, patch, filters)
        except RemoteUnavailable as e:
            self.monitor.record_error(str(e), kind.table, write=True)
            raise
        if rows:
            item = kind.decode(rows[0])
        else:
            current = self.cache.get(kind.table, entity_id) or {}
            item = kind.decode({**current, **patch, "id": entity_id})
        self.write_through(kind, [item])
        return item

    async def delete(self, kind: EntityKind, filters: Sequence[Condition], entity_id: str) -> None:
        try:
            await self.remote.delete(kind.table, filters)
        except RemoteUnavailable as e:
            self.monitor.record_error(str(e), kind.table, write=True)
            raise
        self.cache.delete(kind.table, entity_id)
