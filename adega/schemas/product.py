"""
Product catalog schemas.
"""
from pydantic import Field, field_validator
from typing import Optional
from decimal import Decimal
from enum import Enum

from adega.schemas.common import CamelModel, reject_null


class WineType(str, Enum):
    TINTO = "tinto"
    BRANCO = "branco"
    ROSE = "rose"
    ESPUMANTE = "espumante"
    FORTIFICADO = "fortificado"


VOLUME_PATTERN = r"^\d+(ml|l)$"


class ProductBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    country: str = Field(..., min_length=1, max_length=80)
    type: WineType
    unit_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    volume: str = Field("750ml", pattern=VOLUME_PATTERN)
    photo: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    country: Optional[str] = Field(None, min_length=1, max_length=80)
    type: Optional[WineType] = None
    unit_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    volume: Optional[str] = Field(None, pattern=VOLUME_PATTERN)
    photo: Optional[str] = None

    @field_validator("name", "country", "type", "unit_price", "volume", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ProductResponse(ProductBase):
    id: int
