from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Tuple, Union

from .errors import CellKeyError

PREFIX = "cell"
SEPARATOR = "__"

_CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def format_power(value: Number) -> str:
    """Two-decimal text for a sph/cyl value; never renders "-0.00"."""
    try:
        d = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise CellKeyError(f"not a number: {value!r}") from e
    if d == 0:
        d = Decimal("0.00")
    return f"{d:.2f}"


def encode(sph: Number, cyl: Number) -> str:
    return SEPARATOR.join((PREFIX, format_power(sph), format_power(cyl)))


def decode(key: str) -> Tuple[Decimal, Decimal]:
    parts = str(key).split(SEPARATOR)
    if len(parts) != 3 or parts[0] != PREFIX:
        raise CellKeyError(f"malformed cell key: {key!r}")
    try:
        sph, cyl = Decimal(parts[1]), Decimal(parts[2])
    except InvalidOperation as e:
        raise CellKeyError(f"malformed cell key: {key!r}") from e
    if not (sph.is_finite() and cyl.is_finite()):
        raise CellKeyError(f"malformed cell key: {key!r}")
    return sph, cyl
