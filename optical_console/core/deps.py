from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from optical_console.db.database import get_async_session
from optical_console.db.lens import Lens as LensModel
from optical_console.db.movement import LensMovement as LensMovementModel
from optical_console.grid.store import RecordStore, SqlRecordStore
from optical_console.schemas.lens import LensMovementRecord, LensRecord


async def get_lens_store(db: AsyncSession = Depends(get_async_session)) -> RecordStore:
    return SqlRecordStore(db, LensModel, LensRecord)


async def get_movement_store(db: AsyncSession = Depends(get_async_session)) -> RecordStore:
    return SqlRecordStore(db, LensMovementModel, LensMovementRecord)
