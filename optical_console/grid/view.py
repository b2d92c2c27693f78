from enum import Enum
from typing import Optional

from .axes import cyl_axis, sph_axis
from .cell_key import decode, encode, format_power
from .errors import ValidationError
from .index import InventoryIndex
from .pending import PendingGrid

LOW_STOCK_MAX = 5
MEDIUM_STOCK_MAX = 20


class StockLevel(str, Enum):
    OUT_OF_STOCK = "out of stock"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RemovalState(str, Enum):
    UNAVAILABLE = "unavailable"
    EXCEEDS = "exceeds"
    SELECTED = "selected"
    IDLE = "idle"


def stock_level(total: int) -> StockLevel:
    total = int(total)
    if total < 0:
        raise ValueError(f"stock total cannot be negative: {total}")
    if total == 0:
        return StockLevel.OUT_OF_STOCK
    if total <= LOW_STOCK_MAX:
        return StockLevel.LOW
    if total <= MEDIUM_STOCK_MAX:
        return StockLevel.MEDIUM
    return StockLevel.HIGH


def removal_state(total: int, requested: int) -> RemovalState:
    if total == 0:
        return RemovalState.UNAVAILABLE
    if requested > total:
        return RemovalState.EXCEEDS
    if requested > 0:
        return RemovalState.SELECTED
    return RemovalState.IDLE


def _record_out(record) -> dict:
    return {
        "id": str(record.id),
        "quantity": int(record.quantity),
        "lens_type": record.lens_type,
        "lens_thickness": record.lens_thickness,
        "lens_colour": record.lens_colour,
        "lens_diameter": record.lens_diameter,
        "lens_coating": record.lens_coating,
    }


def _pending_by_cell(pending: PendingGrid) -> dict:
    """Pending entries keyed by canonical cell key; unparseable keys are dropped."""
    cells = {}
    for key, raw in pending.items():
        try:
            cell = encode(*decode(key))
        except ValidationError:
            continue
        try:
            requested = pending.quantity(key) or 0
        except ValidationError:
            requested = 0
        # the first positive entry for a cell is the one a submission would act on
        if cell not in cells or (cells[cell][1] <= 0 and requested > 0):
            cells[cell] = (raw, requested)
    return cells


def project_grid(index: InventoryIndex, pending: Optional[PendingGrid] = None) -> dict:
    """Rows of cells for the fixed axes, ready to render."""
    pending_cells = _pending_by_cell(pending) if pending is not None else None
    rows = []
    for sph in sph_axis():
        cells = []
        for cyl in cyl_axis():
            key = encode(sph, cyl)
            total = index.total(key)
            cell = {
                "key": key,
                "cyl": format_power(cyl),
                "total": total,
                "level": stock_level(total).value,
                "records": [_record_out(r) for r in index.records_at(key)],
            }
            if pending_cells is not None:
                raw, requested = pending_cells.get(key, (None, 0))
                cell["pending"] = raw
                cell["removal_state"] = removal_state(total, requested).value
            cells.append(cell)
        rows.append({"sph": format_power(sph), "cells": cells})
    return {
        "sph_axis": [format_power(v) for v in sph_axis()],
        "cyl_axis": [format_power(v) for v in cyl_axis()],
        "rows": rows,
    }
