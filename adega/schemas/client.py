"""
Client (retail establishment) schemas.
Deactivation has its own endpoint, so is_active is not patchable here.
"""
from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from adega.schemas.common import CamelModel, reject_null

# (11) 91234-5678, 11912345678, 91234-5678
PHONE_PATTERN = r"^(\(?\d{2}\)?\s?)?(9\d{4})-?(\d{4})$"


class ClientBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    tax_id: str = Field(..., min_length=14, max_length=18)
    address: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    contact_name: str = Field(..., min_length=1, max_length=100)


class ClientCreate(ClientBase):
    pass


class ClientUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    tax_id: Optional[str] = Field(None, min_length=14, max_length=18)
    address: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    contact_name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("name", "tax_id", "address", "phone", "contact_name", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ClientResponse(ClientBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None


class ActiveClientsCount(CamelModel):
    active_clients: int
