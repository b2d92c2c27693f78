from decimal import Decimal
from typing import Iterable, List, Optional

from optical_console.schemas.lens_grid import BulkRangeSpec

from .axes import cyl_axis, sph_axis
from .cell_key import encode
from .errors import ValidationError
from .pending import PendingGrid


def cells_in_range(spec: BulkRangeSpec) -> List[str]:
    """Keys of every axis cell inside the (inclusive) range; empty when start > end."""
    sph_lo, sph_hi = spec.sph_bounds
    cyl_lo, cyl_hi = spec.cyl_bounds
    return [
        encode(sph, cyl)
        for sph in sph_axis()
        if sph_lo <= sph <= sph_hi
        for cyl in cyl_axis()
        if cyl_lo <= cyl <= cyl_hi
    ]


def apply_bulk(pending: PendingGrid, spec: BulkRangeSpec) -> PendingGrid:
    # Overwrites whatever was pending in those cells
    value = spec.per_cell_quantity
    return pending.update({key: value for key in cells_in_range(spec)})


def apply_bulk_ranges(pending: PendingGrid, specs: Iterable[BulkRangeSpec]) -> PendingGrid:
    for spec in specs:
        pending = apply_bulk(pending, spec)
    return pending


def quick_select(
    pending: PendingGrid,
    sph: Optional[Decimal],
    cyl: Optional[Decimal],
    quantity: Optional[int],
) -> PendingGrid:
    """Add `quantity` on top of whatever is already pending for one cell."""
    if sph is None or cyl is None or quantity is None:
        raise ValidationError("Please fill in SPH, CYL, and quantity for quick select.")
    if int(quantity) <= 0:
        raise ValidationError("quick select quantity must be > 0")
    return pending.add(encode(sph, cyl), int(quantity))
