"""
Add/remove protocols for the lens grid.

A submission is a PendingGrid of {cell key -> quantity}. Every cell is
validated first, then written one record at a time. A failing cell never
stops the rest of the batch; the caller gets a BatchResult summary.

Add matches an existing record on the full attribute tuple (sph, cyl, type,
thickness, colour, diameter, coating); an unset attribute only matches an
unset one. Remove drains the smallest records of a cell first.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from optical_console.schemas.lens_grid import BatchResult, CellOutcome, StockDetails

from .cell_key import decode, encode
from .errors import (
    InsufficientStockError,
    LensGridError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .index import InventoryIndex
from .pending import PendingGrid, parse_quantity
from .store import RecordStore

logger = logging.getLogger(__name__)

SOURCE_ADD = "grid_add"
SOURCE_REMOVE = "grid_remove"

# (submitted key, canonical key, sph, cyl, requested quantity)
CellRequest = Tuple[str, str, Decimal, Decimal, int]


class MutationState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING = "persisting"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _rejection(key: str, error: LensGridError, sph=None, cyl=None, requested=None) -> CellOutcome:
    return CellOutcome(
        key=key,
        sph=sph,
        cyl=cyl,
        requested=requested,
        error=str(error),
        error_kind=type(error).__name__,
    )


def plan_removal(key: str, bucket: Sequence, quantity: int) -> List[Tuple[object, int]]:
    """Split `quantity` over the records of one cell, smallest stock first.

    Returns (record, amount to take) pairs; records left untouched are omitted.
    """
    if not bucket:
        raise NotFoundError(f"No lenses available for {key}")
    available = sum(int(r.quantity) for r in bucket)
    if quantity > available:
        raise InsufficientStockError(key, quantity, available)

    steps = []
    remaining = quantity
    for record in sorted(bucket, key=lambda r: int(r.quantity)):
        if remaining <= 0:
            break
        take = min(remaining, int(record.quantity))
        if take <= 0:
            continue
        steps.append((record, take))
        remaining -= take
    return steps


def summarise(operation: str, succeeded, failed, rejected) -> BatchResult:
    failures = len(failed) + len(rejected)
    if not succeeded and not failures:
        status = "noop"
    elif not failures:
        status = "success"
    elif succeeded:
        status = "partial"
    else:
        status = "failure"
    return BatchResult(
        operation=operation,
        status=status,
        succeeded=succeeded,
        failed=failed,
        rejected=rejected,
    )


class GridMutationEngine:
    """Turns a pending grid into record-store writes.

    `lenses` is the store for the lenses table; `movements`, when given,
    receives one ledger row per successful stock write.
    """

    def __init__(self, lenses: RecordStore, movements: Optional[RecordStore] = None):
        self.lenses = lenses
        self.movements = movements
        self.state = MutationState.IDLE

    def _begin(self) -> None:
        if self.state != MutationState.IDLE:
            raise ValidationError("A stock batch is already being processed")
        self.state = MutationState.VALIDATING

    def _collect(self, pending: PendingGrid) -> Tuple[List[CellRequest], List[CellOutcome]]:
        requests: List[CellRequest] = []
        rejected: List[CellOutcome] = []
        seen = {}
        for key, raw in pending.items():
            try:
                qty = parse_quantity(raw)
            except ValidationError as e:
                rejected.append(_rejection(key, e))
                continue
            if qty is None or qty <= 0:
                continue
            try:
                cell = encode(*decode(key))
                sph, cyl = decode(cell)
            except ValidationError as e:
                rejected.append(_rejection(key, e, requested=qty))
                continue
            if cyl < 0:
                rejected.append(
                    _rejection(key, ValidationError(f"cyl must be >= 0: {cyl}"), sph, cyl, qty)
                )
                continue
            # "cell__-2__1" and "cell__-2.00__1.00" are the same cell; the first entry wins
            if cell in seen:
                error = ValidationError(f"duplicate entry for {cell} (already given as {seen[cell]})")
                rejected.append(_rejection(key, error, sph, cyl, qty))
                continue
            seen[cell] = key
            requests.append((key, cell, sph, cyl, qty))
        return requests, rejected

    async def _record_movement(self, lens, change: int, source: str, reason, details) -> None:
        if self.movements is None:
            return
        try:
            await self.movements.insert(
                {
                    "lens_id": lens.id,
                    "sph": lens.sph,
                    "cyl": lens.cyl,
                    "change": int(change),
                    "source": source,
                    "reason": reason,
                    "details": details,
                }
            )
        except StoreError as e:
            raise StoreError(f"stock updated for lens {lens.id} but ledger write failed: {e}") from e

    # -- add ---------------------------------------------------------------

    async def _add_to_cell(self, sph: Decimal, cyl: Decimal, qty: int, details: StockDetails):
        attrs = details.attributes()
        matches = await self.lenses.select(
            filters={"sph": sph, "cyl": cyl, **attrs},
            order_by=["created_at"],
        )
        if matches:
            existing = matches[0]
            new_quantity = int(existing.quantity) + qty
            lens = await self.lenses.update(
                existing.id,
                {
                    "quantity": new_quantity,
                    "reason": details.reason,
                    "details": details.details,
                    "updated_at": _utcnow(),
                },
            )
            logger.info("[lens-grid] updated lens (%s, %s) %s - new quantity: %s", sph, cyl, lens.id, new_quantity)
        else:
            lens = await self.lenses.insert(
                {
                    "sph": sph,
                    "cyl": cyl,
                    "quantity": qty,
                    **attrs,
                    "reason": details.reason,
                    "details": details.details,
                }
            )
            logger.info("[lens-grid] inserted lens (%s, %s) %s with quantity %s", sph, cyl, lens.id, qty)
        await self._record_movement(lens, qty, SOURCE_ADD, details.reason, details.details)
        return lens

    async def add_stock(self, pending: PendingGrid, details: Optional[StockDetails] = None) -> BatchResult:
        details = details or StockDetails()
        self._begin()
        try:
            requests, rejected = self._collect(pending)
            self.state = MutationState.PERSISTING

            succeeded: List[CellOutcome] = []
            failed: List[CellOutcome] = []
            for key, _cell, sph, cyl, qty in requests:
                try:
                    lens = await self._add_to_cell(sph, cyl, qty, details)
                except (StoreError, NotFoundError) as e:
                    logger.exception("[lens-grid] add failed for (%s, %s)", sph, cyl)
                    failed.append(_rejection(key, e, sph, cyl, qty))
                    continue
                succeeded.append(
                    CellOutcome(key=key, sph=sph, cyl=cyl, requested=qty, applied=qty, lens_ids=[str(lens.id)])
                )

            result = summarise("add", succeeded, failed, rejected)
            logger.info(
                "[lens-grid] add batch %s: %s ok, %s failed",
                result.status, result.success_count, result.failure_count,
            )
            return result
        finally:
            self.state = MutationState.IDLE

    # -- remove ------------------------------------------------------------

    async def remove_stock(
        self,
        pending: PendingGrid,
        index: InventoryIndex,
        reason: Optional[str] = None,
        details: Optional[str] = None,
    ) -> BatchResult:
        self._begin()
        try:
            requests, rejected = self._collect(pending)

            plans = []
            for key, cell, sph, cyl, qty in requests:
                try:
                    steps = plan_removal(cell, index.records_at(cell), qty)
                except (NotFoundError, InsufficientStockError) as e:
                    logger.info("[lens-grid] removal rejected for %s: %s", key, e)
                    rejected.append(_rejection(key, e, sph, cyl, qty))
                    continue
                plans.append((key, sph, cyl, qty, steps))

            self.state = MutationState.PERSISTING
            succeeded: List[CellOutcome] = []
            failed: List[CellOutcome] = []
            for key, sph, cyl, qty, steps in plans:
                applied = 0
                touched: List[str] = []
                try:
                    for record, take in steps:
                        values = {"quantity": int(record.quantity) - take, "updated_at": _utcnow()}
                        if reason is not None:
                            values["reason"] = reason
                        if details is not None:
                            values["details"] = details
                        lens = await self.lenses.update(record.id, values)
                        applied += take
                        touched.append(str(lens.id))
                        logger.info(
                            "[lens-grid] removed %s from lens %s, new quantity: %s",
                            take, lens.id, lens.quantity,
                        )
                        await self._record_movement(lens, -take, SOURCE_REMOVE, reason, details)
                except (StoreError, NotFoundError) as e:
                    logger.exception("[lens-grid] removal failed for %s after %s removed", key, applied)
                    outcome = _rejection(key, e, sph, cyl, qty)
                    outcome.applied = applied
                    outcome.lens_ids = touched
                    failed.append(outcome)
                    continue
                succeeded.append(
                    CellOutcome(key=key, sph=sph, cyl=cyl, requested=qty, applied=applied, lens_ids=touched)
                )

            result = summarise("remove", succeeded, failed, rejected)
            logger.info(
                "[lens-grid] remove batch %s: %s ok, %s failed",
                result.status, result.success_count, result.failure_count,
            )
            return result
        finally:
            self.state = MutationState.IDLE
