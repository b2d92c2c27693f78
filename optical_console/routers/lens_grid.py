import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from optical_console.core.deps import get_lens_store, get_movement_store
from optical_console.grid.axes import axis_labels
from optical_console.grid.bulk import apply_bulk_ranges, quick_select
from optical_console.grid.errors import StoreError, ValidationError
from optical_console.grid.filters import apply_filters
from optical_console.grid.index import InventoryIndex
from optical_console.grid.mutations import GridMutationEngine
from optical_console.grid.pending import PendingGrid
from optical_console.grid.store import RecordStore
from optical_console.grid.view import project_grid
from optical_console.routers.lenses import lens_filter_params
from optical_console.schemas.lens_grid import (
    AddStockRequest,
    BatchResult,
    BulkRequest,
    LensFilter,
    QuickSelectRequest,
    RemoveStockRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_lenses(store: RecordStore) -> list:
    try:
        return await store.select(order_by=["sph", "cyl"])
    except StoreError as e:
        logger.error("[lens-grid] loading lenses failed: %r", e, exc_info=e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error loading lens stock: {e}",
        )


def _batch_out(result: BatchResult) -> Dict:
    out = result.model_dump()
    out["message"] = result.message
    out["success_count"] = result.success_count
    out["failure_count"] = result.failure_count
    return out


@router.get("/axes", response_model=Dict)
async def get_axes():
    return axis_labels()


@router.get("/", response_model=Dict)
async def get_grid(
    lens_filter: LensFilter = Depends(lens_filter_params),
    store: RecordStore = Depends(get_lens_store),
):
    """
    Stock overview: per-cell totals for the filtered working set.

    Filter options are taken from the unfiltered set so every choice stays selectable.
    """
    lenses = await _load_lenses(store)
    index = InventoryIndex(apply_filters(lenses, lens_filter))
    out = project_grid(index)
    out["summary"] = index.summary()
    out["filter_options"] = InventoryIndex(lenses).filter_options()
    out["filters"] = lens_filter.active()
    return out


@router.post("/preview", response_model=Dict)
async def preview_removal(
    payload: RemoveStockRequest,
    store: RecordStore = Depends(get_lens_store),
):
    """Grid projection with the pending removal quantities and per-cell removal state."""
    lenses = await _load_lenses(store)
    index = InventoryIndex(apply_filters(lenses, payload.filters))
    return project_grid(index, PendingGrid(payload.grid))


@router.post("/bulk", response_model=Dict)
async def apply_bulk_entries(payload: BulkRequest):
    pending = apply_bulk_ranges(PendingGrid(payload.grid), payload.ranges)
    return {"grid": pending.as_dict()}


@router.post("/quick-select", response_model=Dict)
async def quick_select_cell(payload: QuickSelectRequest):
    try:
        pending = quick_select(PendingGrid(payload.grid), payload.sph, payload.cyl, payload.quantity)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"grid": pending.as_dict()}


@router.post("/add", response_model=Dict)
async def add_stock(
    payload: AddStockRequest,
    lenses: RecordStore = Depends(get_lens_store),
    movements: RecordStore = Depends(get_movement_store),
):
    """
    Add the pending quantities to stock.

    - A cell whose (sph, cyl) and attributes match an existing lens increments it.
    - Otherwise a new lens is inserted.
    - Always answers with the batch summary; failures are per cell.
    """
    engine = GridMutationEngine(lenses, movements)
    result = await engine.add_stock(PendingGrid(payload.grid), payload.details)
    return _batch_out(result)


@router.post("/remove", response_model=Dict)
async def remove_stock(
    payload: RemoveStockRequest,
    lenses: RecordStore = Depends(get_lens_store),
    movements: RecordStore = Depends(get_movement_store),
):
    """
    Remove the pending quantities from stock, smallest records of a cell first.

    Cells are resolved against the filtered working set, so filters narrow which
    records may be drawn from.
    """
    working_set = apply_filters(await _load_lenses(lenses), payload.filters)
    engine = GridMutationEngine(lenses, movements)
    result = await engine.remove_stock(
        PendingGrid(payload.grid),
        InventoryIndex(working_set),
        reason=payload.reason,
        details=payload.details,
    )
    return _batch_out(result)


@router.get("/ledger", response_model=List[Dict])
async def list_movements(
    lens_id: Optional[UUID] = None,
    limit: int = Query(100, ge=1, le=1000),
    movements: RecordStore = Depends(get_movement_store),
):
    filters = {"lens_id": lens_id} if lens_id else None
    try:
        records = await movements.select(filters=filters, order_by=["-created_at"], limit=limit)
    except StoreError as e:
        logger.error("[lens-grid] loading ledger failed: %r", e, exc_info=e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error loading lens ledger: {e}",
        )
    return [m.model_dump() for m in records]
