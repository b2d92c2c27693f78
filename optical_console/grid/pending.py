import re
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from .errors import ValidationError

PendingValue = Union[int, str, None]

_INT_RE = re.compile(r"^[+-]?\d+$")

# lenses.quantity is a 32-bit integer column
MAX_QUANTITY_DIGITS = 9


def parse_quantity(raw: PendingValue) -> Optional[int]:
    """Whole-number quantity from form input; None for a blank entry."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"quantity must be a whole number: {raw!r}")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    if not _INT_RE.match(text):
        raise ValidationError(f"quantity must be a whole number: {raw!r}")
    if len(text.lstrip("+-")) > MAX_QUANTITY_DIGITS:
        raise ValidationError(f"quantity is too long: {len(text)} characters")
    return int(text)


class PendingGrid:
    """Quantities a user has typed into the grid but not yet submitted.

    Instances are never mutated; set/add/update return a new grid.
    """

    def __init__(self, cells: Optional[Mapping[str, PendingValue]] = None):
        self._cells: Dict[str, PendingValue] = dict(cells or {})

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, key: str) -> bool:
        return key in self._cells

    def __eq__(self, other) -> bool:
        if not isinstance(other, PendingGrid):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"PendingGrid({self._cells!r})"

    def items(self) -> Iterator[Tuple[str, PendingValue]]:
        return iter(list(self._cells.items()))

    def raw(self, key: str) -> PendingValue:
        return self._cells.get(key)

    def quantity(self, key: str) -> Optional[int]:
        return parse_quantity(self._cells.get(key))

    def set(self, key: str, value: PendingValue) -> "PendingGrid":
        return self.update({key: value})

    def add(self, key: str, quantity: int) -> "PendingGrid":
        current = self.quantity(key) or 0
        return self.update({key: current + int(quantity)})

    def update(self, values: Mapping[str, PendingValue]) -> "PendingGrid":
        cells = dict(self._cells)
        cells.update(values)
        return PendingGrid(cells)

    def as_dict(self) -> Dict[str, PendingValue]:
        return dict(self._cells)
