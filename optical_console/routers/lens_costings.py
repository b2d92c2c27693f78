from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from optical_console.db.costing import LensCosting as LensCostingModel
from optical_console.db.database import get_async_session
from optical_console.schemas.lens_costing import (
    LensCostingCreate,
    LensCostingRead,
    LensCostingUpdate,
)

router = APIRouter()


def _minor_from_price(price: Optional[float]) -> Optional[int]:
    if price is None:
        return None
    return int(round(float(price) * 100))


@router.get("/", response_model=List[LensCostingRead])
async def list_lens_costings(
    lens_type: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(LensCostingModel)
    if lens_type:
        stmt = stmt.where(func.lower(LensCostingModel.lens_type) == lens_type.strip().lower())
    res = await db.execute(stmt.order_by(func.lower(LensCostingModel.lens_type).asc(), LensCostingModel.created_at.desc()))
    return [LensCostingRead(**m.to_schema) for m in res.scalars().all()]


@router.post("/", response_model=LensCostingRead, status_code=status.HTTP_201_CREATED)
async def create_lens_costing(
    payload: LensCostingCreate,
    db: AsyncSession = Depends(get_async_session),
):
    m = LensCostingModel(
        lens_type=payload.effective_lens_type,
        lens_use=payload.lens_use,
        lens_thickness=payload.lens_thickness,
        lens_colour=payload.lens_colour,
        lens_diameter=payload.lens_diameter,
        lens_coating=payload.lens_coating,
        supplier=payload.supplier,
        cost_price_minor=_minor_from_price(payload.cost_price),
        selling_price_minor=_minor_from_price(payload.selling_price),
        notes=payload.notes,
    )
    db.add(m)
    await db.commit()
    await db.refresh(m)
    return LensCostingRead(**m.to_schema)


@router.patch("/{costing_id}", response_model=LensCostingRead)
async def update_lens_costing(
    costing_id: UUID,
    payload: LensCostingUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(select(LensCostingModel).where(LensCostingModel.id == costing_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lens costing not found")

    data = payload.model_dump(exclude_unset=True)
    if "lens_type" in data and data["lens_type"] is not None:
        m.lens_type = data["lens_type"]
    if "lens_use" in data and data["lens_use"] is not None:
        m.lens_use = data["lens_use"]
    for name in ("lens_thickness", "lens_colour", "lens_diameter", "lens_coating", "supplier", "notes"):
        if name in data:
            setattr(m, name, data[name])
    if "cost_price" in data:
        m.cost_price_minor = _minor_from_price(data["cost_price"])
    if "selling_price" in data:
        m.selling_price_minor = _minor_from_price(data["selling_price"])

    await db.commit()
    await db.refresh(m)
    return LensCostingRead(**m.to_schema)


@router.delete("/{costing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lens_costing(
    costing_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(select(LensCostingModel).where(LensCostingModel.id == costing_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lens costing not found")
    await db.delete(m)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
