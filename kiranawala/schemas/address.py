from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class AddressLabel(str, Enum):
    HOME = "Home"
    WORK = "Work"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.OTHER

class AddressCreate(BaseModel):
    address_line: str = Field(min_length=3)
    building_name: Optional[str] = None
    flat_number: Optional[str] = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    label: AddressLabel = AddressLabel.HOME
    is_default: bool = False

class Address(AddressCreate):
    id: str
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
