from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .lens import LENS_ATTRIBUTES, blank_to_none


QuantityUnit = Literal["pair", "single"]
BatchStatus = Literal["success", "partial", "failure", "noop"]

# Raw pending-grid values as they come from a form: ints, numeric strings or blanks
PendingValue = Union[int, str, None]


class LensFilter(BaseModel):
    """Optional attribute-equality filters. Blank or "all" means no constraint."""
    lens_type: Optional[str] = None
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None

    @field_validator(*LENS_ATTRIBUTES, mode="before")
    @classmethod
    def _unset_all(cls, v):
        v = blank_to_none(v)
        if v is not None and v.lower() == "all":
            return None
        return v

    def active(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in LENS_ATTRIBUTES if getattr(self, name) is not None}


class BulkRangeSpec(BaseModel):
    start_sph: Decimal
    end_sph: Optional[Decimal] = None
    start_cyl: Decimal
    end_cyl: Optional[Decimal] = None
    quantity: int
    unit: QuantityUnit = "pair"

    @field_validator("end_sph", "end_cyl", mode="before")
    @classmethod
    def _blank_end(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v

    @property
    def per_cell_quantity(self) -> int:
        return self.quantity * (2 if self.unit == "pair" else 1)

    @property
    def sph_bounds(self) -> tuple:
        return self.start_sph, self.start_sph if self.end_sph is None else self.end_sph

    @property
    def cyl_bounds(self) -> tuple:
        return self.start_cyl, self.start_cyl if self.end_cyl is None else self.end_cyl


class StockDetails(BaseModel):
    """Metadata applied to every cell of one add/remove submission."""
    lens_type: Optional[str] = None
    lens_thickness: Optional[str] = None
    lens_colour: Optional[str] = None
    lens_diameter: Optional[str] = None
    lens_coating: Optional[str] = None
    reason: Optional[str] = None
    details: Optional[str] = None

    @field_validator(*LENS_ATTRIBUTES, "reason", "details", mode="before")
    @classmethod
    def _strip_nullable(cls, v):
        return blank_to_none(v)

    def attributes(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in LENS_ATTRIBUTES}


class BulkRequest(BaseModel):
    grid: Dict[str, PendingValue] = Field(default_factory=dict)
    ranges: List[BulkRangeSpec]


class QuickSelectRequest(BaseModel):
    grid: Dict[str, PendingValue] = Field(default_factory=dict)
    sph: Optional[Decimal] = None
    cyl: Optional[Decimal] = None
    quantity: Optional[int] = None


class AddStockRequest(BaseModel):
    grid: Dict[str, PendingValue]
    details: StockDetails = Field(default_factory=StockDetails)


class RemoveStockRequest(BaseModel):
    grid: Dict[str, PendingValue]
    filters: LensFilter = Field(default_factory=LensFilter)
    reason: Optional[str] = None
    details: Optional[str] = None

    @field_validator("reason", "details", mode="before")
    @classmethod
    def _strip_nullable(cls, v):
        return blank_to_none(v)


class CellOutcome(BaseModel):
    key: str
    sph: Optional[Decimal] = None
    cyl: Optional[Decimal] = None
    requested: Optional[int] = None
    applied: int = 0
    lens_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None


class BatchResult(BaseModel):
    operation: Literal["add", "remove"]
    status: BatchStatus
    succeeded: List[CellOutcome] = Field(default_factory=list)
    failed: List[CellOutcome] = Field(default_factory=list)
    rejected: List[CellOutcome] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed) + len(self.rejected)

    @property
    def message(self) -> str:
        if self.status == "noop":
            return "No lens quantities were specified."
        if self.status == "success":
            return f"Successfully processed {self.success_count} lens entries."
        if self.status == "partial":
            return f"Processed {self.success_count} entries successfully, {self.failure_count} failed."
        return f"Failed to process {self.failure_count} entries."
