import logging
import uuid
from typing import List, Optional

from kiranawala.core.exceptions import NotFoundError
from kiranawala.core.remote import eq
from kiranawala.schemas.address import Address, AddressCreate
from kiranawala.schemas.result import Fetched
from kiranawala.services.sync_policy import EntityKind, SyncPolicy

logger = logging.getLogger(__name__)

ADDRESSES = EntityKind("addresses", Address)


def _display_order(addresses: List[Address]) -> List[Address]:
    by_recency = sorted(
        addresses,
        key=lambda a: a.updated_at.timestamp() if a.updated_at else 0.0,
        reverse=True,
    )
    return sorted(by_recency, key=lambda a: not a.is_default)


class AddressBook:
    """Delivery addresses per owner; at most one of them is the default"""

    def __init__(self, sync: SyncPolicy):
        self.sync = sync

    async def list_addresses(self, owner_id: str) -> Fetched:
        fetched = await self.sync.fetch(
            ADDRESSES,
            filters=[eq("owner_id", owner_id)],
            cache_criteria={"owner_id": owner_id},
            mirror=True,
        )
        addresses = _display_order(fetched.items)

        defaults = [a for a in addresses if a.is_default]
        if len(defaults) > 1:
            # keep the most recently updated default, locally only
            keep = defaults[0]
            logger.warning(f"Owner {owner_id} has {len(defaults)} default addresses, keeping {keep.id}")
            self.sync.cache.mark_default_address(owner_id, keep.id)
            addresses = [
                a if a.id == keep.id or not a.is_default else a.model_copy(update={"is_default": False})
                for a in addresses
            ]

        fetched.items = addresses
        return fetched

    async def get_default_address(self, owner_id: str) -> Optional[Address]:
        rows = self.sync.cache.get_all_by_index(ADDRESSES.table, owner_id=owner_id, is_default=True)
        if rows:
            return Address.model_validate(rows[0])
        refreshed = await self.list_addresses(owner_id)
        return next((a for a in refreshed.items if a.is_default), None)

    async def add_address(self, owner_id: str, data: AddressCreate) -> Address:
        address_id = str(uuid.uuid4())
        logger.info(f"Adding address {address_id} for owner {owner_id}")
        if data.is_default:
            await self._clear_remote_default(owner_id)

        payload = {"id": address_id, "owner_id": owner_id, **data.model_dump(mode="json")}
        address = await self.sync.insert(ADDRESSES, payload)
        if address.is_default:
            self.sync.cache.mark_default_address(owner_id, address.id)
        return address

    async def update_address(self, owner_id: str, address_id: str, data: AddressCreate) -> Address:
        logger.info(f"Updating address {address_id}")
        if data.is_default:
            await self._clear_remote_default(owner_id)

        address = await self.sync.update(
            ADDRESSES,
            {"owner_id": owner_id, **data.model_dump(mode="json")},
            [eq("id", address_id), eq("owner_id", owner_id)],
            entity_id=address_id,
        )
        if address.is_default:
            self.sync.cache.mark_default_address(owner_id, address.id)
        return address

    async def delete_address(self, owner_id: str, address_id: str) -> None:
        logger.info(f"Deleting address {address_id}")
        await self.sync.delete(
            ADDRESSES, [eq("id", address_id), eq("owner_id", owner_id)], entity_id=address_id
        )

    async def set_default_address(self, owner_id: str, address_id: str) -> None:
        """Make address_id the owner's only default, remotely and then locally"""
        logger.info(f"Setting default address {address_id} for {owner_id}")
        rows = await self.sync.remote.select(
            ADDRESSES.table, [eq("id", address_id), eq("owner_id", owner_id)], limit=1
        )
        if not rows:
            raise NotFoundError(f"Address {address_id} not found for owner {owner_id}")

        await self._clear_remote_default(owner_id)
        await self.sync.remote.update(
            ADDRESSES.table, {"is_default": True}, [eq("id", address_id), eq("owner_id", owner_id)]
        )

        if self.sync.cache.get(ADDRESSES.table, address_id) is None:
            self.sync.write_through(ADDRESSES, [ADDRESSES.decode(rows[0])])
        self.sync.cache.mark_default_address(owner_id, address_id)

    async def _clear_remote_default(self, owner_id: str) -> None:
        await self.sync.remote.update(
            ADDRESSES.table,
            {"is_default": False},
            [eq("owner_id", owner_id), eq("is_default", True)],
        )
