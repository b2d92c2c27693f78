from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from .lens import blank_to_none


LensUse = Literal["Single Vision", "Bifocal", "Progressive"]


class LensCostingCreate(BaseModel):
    lens_type: str
    other_lens_type: Optional[str] = None
    lens_use: LensUse
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    supplier: Optional[str] = None
    cost_price: Optional[float] = None
    selling_price: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("lens_type")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator(
        "other_lens_type", "lens_thickness", "lens_colour", "lens_diameter",
        "lens_coating", "supplier", "notes",
    )
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)

    @field_validator("cost_price", "selling_price")
    @classmethod
    def _price_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("price must be >= 0")
        return v

    @model_validator(mode="after")
    def _other_lens_type(self):
        # "Other" is a placeholder; the free-text type is what gets stored
        if self.lens_type == "Other" and not self.other_lens_type:
            raise ValueError("other_lens_type is required when lens_type is 'Other'")
        return self

    @property
    def effective_lens_type(self) -> str:
        if self.lens_type == "Other":
            return self.other_lens_type
        return self.lens_type


class LensCostingUpdate(BaseModel):
    lens_type: Optional[str] = None
    lens_use: Optional[LensUse] = None
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    supplier: Optional[str] = None
    cost_price: Optional[float] = None
    selling_price: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("lens_type")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("cost_price", "selling_price")
    @classmethod
    def _price_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("price must be >= 0")
        return v


class LensCostingRead(BaseModel):
    id: UUID
    lens_type: str
    lens_use: str
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    supplier: Optional[str] = None
    cost_price_minor: Optional[int] = None
    selling_price_minor: Optional[int] = None
    cost_price: Optional[float] = None
    selling_price: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
