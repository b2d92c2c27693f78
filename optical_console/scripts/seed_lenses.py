"""
Seed demo lens stock through the grid (bulk range -> add-stock protocol).

Run locally:
  python -m optical_console.scripts.seed_lenses --start-sph -2 --end-sph 2 --end-cyl 1 --quantity 2
  python -m optical_console.scripts.seed_lenses --dry-run

Re-running adds the quantities again: adding stock is not idempotent.
"""

import argparse
import asyncio
from decimal import Decimal
from typing import Optional

from optical_console.core.config import settings
from optical_console.core.log_config import configure_logging
from optical_console.db.database import async_session_maker
from optical_console.db.lens import Lens as LensModel
from optical_console.db.movement import LensMovement as LensMovementModel
from optical_console.grid.bulk import apply_bulk
from optical_console.grid.mutations import GridMutationEngine
from optical_console.grid.pending import PendingGrid
from optical_console.grid.store import SqlRecordStore
from optical_console.schemas.lens import LensMovementRecord, LensRecord
from optical_console.schemas.lens_grid import BulkRangeSpec, StockDetails


def _parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed lens stock through the SPH/CYL grid")
    p.add_argument("--start-sph", type=Decimal, default=Decimal("-2.00"))
    p.add_argument("--end-sph", type=Decimal, default=Decimal("2.00"))
    p.add_argument("--start-cyl", type=Decimal, default=Decimal("0.00"))
    p.add_argument("--end-cyl", type=Decimal, default=Decimal("1.00"))
    p.add_argument("--quantity", type=int, default=2)
    p.add_argument("--unit", choices=["pair", "single"], default="pair")
    p.add_argument("--lens-type", default="CR39")
    p.add_argument("--lens-thickness", default="1.50")
    p.add_argument("--lens-colour", default="clear")
    p.add_argument("--lens-diameter", default="70")
    p.add_argument("--lens-coating", default="HC")
    p.add_argument("--reason", default="New Stock")
    p.add_argument("--details", default="Seeded by seed_lenses")
    p.add_argument("--dry-run", action="store_true", help="Print the cells, write nothing")
    return p.parse_args(argv)


def build_request(args: argparse.Namespace):
    spec = BulkRangeSpec(
        start_sph=args.start_sph,
        end_sph=args.end_sph,
        start_cyl=args.start_cyl,
        end_cyl=args.end_cyl,
        quantity=args.quantity,
        unit=args.unit,
    )
    details = StockDetails(
        lens_type=args.lens_type,
        lens_thickness=args.lens_thickness,
        lens_colour=args.lens_colour,
        lens_diameter=args.lens_diameter,
        lens_coating=args.lens_coating,
        reason=args.reason,
        details=args.details,
    )
    return apply_bulk(PendingGrid(), spec), details


async def seed(args: argparse.Namespace) -> None:
    logger = configure_logging(settings.log_level)
    pending, details = build_request(args)

    if args.dry_run:
        for key, qty in pending.items():
            print(f"{key}\t{qty}")
        logger.info("[seed_lenses] DRY RUN: would add %s cells", len(pending))
        return

    async with async_session_maker() as db:
        engine = GridMutationEngine(
            SqlRecordStore(db, LensModel, LensRecord),
            SqlRecordStore(db, LensMovementModel, LensMovementRecord),
        )
        result = await engine.add_stock(pending, details)

    logger.info("[seed_lenses] %s (%s)", result.message, result.status)


if __name__ == "__main__":
    asyncio.run(seed(_parse_args()))
