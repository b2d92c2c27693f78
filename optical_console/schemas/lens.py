from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator


# Descriptive attributes shared by every lens record, filter and stock form
LENS_ATTRIBUTES = (
    "lens_type",
    "lens_thickness",
    "lens_colour",
    "lens_diameter",
    "lens_coating",
)


def blank_to_none(v):
    if v is None:
        return None
    v = str(v).strip()
    return v or None


class LensRecord(BaseModel):
    """A lens-stock row as handed out by the record store."""
    id: UUID
    sph: Decimal
    cyl: Decimal
    quantity: int
    lens_type: Optional[str] = None
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    reason: Optional[str] = None
    details: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v

    @property
    def attributes(self) -> dict:
        return {name: getattr(self, name) for name in LENS_ATTRIBUTES}


class LensCreate(BaseModel):
    sph: Decimal
    cyl: Decimal
    quantity: int = 0
    lens_type: Optional[str] = None
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    reason: Optional[str] = None
    details: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v

    @field_validator("cyl")
    @classmethod
    def _cyl_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("cyl must be >= 0")
        return v

    @field_validator(*LENS_ATTRIBUTES, "reason", "details")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class LensUpdate(BaseModel):
    sph: Optional[Decimal] = None
    cyl: Optional[Decimal] = None
    quantity: Optional[int] = None
    lens_type: Optional[str] = None
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    reason: Optional[str] = None
    details: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("quantity must be >= 0")
        return v

    @field_validator("cyl")
    @classmethod
    def _cyl_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("cyl must be >= 0")
        return v

    @field_validator(*LENS_ATTRIBUTES, "reason", "details")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class LensMovementRecord(BaseModel):
    id: UUID
    lens_id: Optional[UUID] = None
    sph: Decimal
    cyl: Decimal
    change: int
    source: str
    reason: Optional[str] = None
    details: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
