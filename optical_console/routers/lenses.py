import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from optical_console.core.deps import get_lens_store
from optical_console.grid.errors import NotFoundError, StoreError
from optical_console.grid.store import RecordStore
from optical_console.schemas.lens import LensCreate, LensUpdate
from optical_console.schemas.lens_grid import LensFilter

logger = logging.getLogger(__name__)

router = APIRouter()


def lens_filter_params(
    lens_type: Optional[str] = None,
    lens_thickness: Optional[str] = None,
    lens_colour: Optional[str] = None,
    lens_diameter: Optional[str] = None,
    lens_coating: Optional[str] = None,
) -> LensFilter:
    return LensFilter(
        lens_type=lens_type,
        lens_thickness=lens_thickness,
        lens_colour=lens_colour,
        lens_diameter=lens_diameter,
        lens_coating=lens_coating,
    )


def store_failure(action: str, e: StoreError) -> HTTPException:
    logger.error("[lenses] %s failed: %r", action, e, exc_info=e)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}: {e}")


@router.get("/", response_model=List[Dict])
async def list_lenses(
    lens_filter: LensFilter = Depends(lens_filter_params),
    store: RecordStore = Depends(get_lens_store),
):
    """List lens records ordered by sph then cyl."""
    try:
        records = await store.select(filters=lens_filter.active(), order_by=["sph", "cyl"])
    except StoreError as e:
        raise store_failure("load lenses", e)
    return [r.model_dump() for r in records]


@router.get("/{lens_id}", response_model=Dict)
async def get_lens(lens_id: UUID, store: RecordStore = Depends(get_lens_store)):
    try:
        record = await store.get(lens_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Lens with id {lens_id} not found")
    except StoreError as e:
        raise store_failure("load lens", e)
    return record.model_dump()


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_lens(payload: LensCreate, store: RecordStore = Depends(get_lens_store)):
    try:
        record = await store.insert(payload.model_dump())
    except StoreError as e:
        raise store_failure("create lens", e)
    return record.model_dump()


@router.patch("/{lens_id}", response_model=Dict)
async def update_lens(lens_id: UUID, payload: LensUpdate, store: RecordStore = Depends(get_lens_store)):
    data = payload.model_dump(exclude_unset=True)
    for required in ("sph", "cyl", "quantity"):
        if required in data and data[required] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{required} cannot be null")
    try:
        if not data:
            return (await store.get(lens_id)).model_dump()
        record = await store.update(lens_id, data)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Lens with id {lens_id} not found")
    except StoreError as e:
        raise store_failure("update lens", e)
    return record.model_dump()


@router.delete("/{lens_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lens(lens_id: UUID, store: RecordStore = Depends(get_lens_store)):
    try:
        await store.delete(lens_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Lens with id {lens_id} not found")
    except StoreError as e:
        raise store_failure("delete lens", e)
