from decimal import Decimal
from typing import Dict, Iterable, List

from optical_console.schemas.lens import LENS_ATTRIBUTES

from .cell_key import encode


class InventoryIndex:
    """Lens records bucketed by grid cell.

    Off-axis powers get their own bucket; the fixed grid simply never renders it.
    """

    def __init__(self, records: Iterable):
        self._records = list(records)
        self._buckets: Dict[str, List] = {}
        for record in self._records:
            self._buckets.setdefault(encode(record.sph, record.cyl), []).append(record)

    def keys(self) -> List[str]:
        return list(self._buckets)

    def records_at(self, key: str) -> List:
        return list(self._buckets.get(key, ()))

    def cell(self, sph: Decimal, cyl: Decimal) -> List:
        return self.records_at(encode(sph, cyl))

    def total(self, key: str) -> int:
        return sum(int(r.quantity) for r in self._buckets.get(key, ()))

    def summary(self) -> dict:
        return {
            "unique_skus": len(self._records),
            "total_lenses": sum(int(r.quantity) for r in self._records),
            "out_of_stock": sum(1 for r in self._records if int(r.quantity) == 0),
        }

    def filter_options(self) -> Dict[str, List[str]]:
        out = {}
        for name in LENS_ATTRIBUTES:
            values = {getattr(r, name, None) for r in self._records}
            out[name] = sorted(v for v in values if v)
        return out
