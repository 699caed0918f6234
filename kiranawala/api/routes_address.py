from fastapi import APIRouter, Depends
from kiranawala.api.responses import listing
from kiranawala.db.deps import get_address_book
from kiranawala.schemas.address import Address, AddressCreate
from kiranawala.services.address_book import AddressBook

router = APIRouter()

@router.get("/{owner_id}")
async def list_addresses(owner_id: str, book: AddressBook = Depends(get_address_book)):
    return listing(await book.list_addresses(owner_id))

@router.post("/{owner_id}", response_model=Address)
async def add_address(owner_id: str, data: AddressCreate, book: AddressBook = Depends(get_address_book)):
    return await book.add_address(owner_id, data)

@router.put("/{owner_id}/{address_id}", response_model=Address)
async def update_address(
    owner_id: str,
    address_id: str,
    data: AddressCreate,
    book: AddressBook = Depends(get_address_book),
):
    return await book.update_address(owner_id, address_id, data)

@router.put("/{owner_id}/{address_id}/default")
async def set_default_address(owner_id: str, address_id: str, book: AddressBook = Depends(get_address_book)):
    await book.set_default_address(owner_id, address_id)
    return {"default_address_id": address_id}

@router.delete("/{owner_id}/{address_id}")
async def delete_address(owner_id: str, address_id: str, book: AddressBook = Depends(get_address_book)):
    await book.delete_address(owner_id, address_id)
    return {"deleted": address_id}
