from decimal import Decimal
from typing import Tuple

SPH_START = Decimal("-6.00")
SPH_STEP = Decimal("0.50")
SPH_COUNT = 33

CYL_START = Decimal("0.00")
CYL_STEP = Decimal("0.25")
CYL_COUNT = 17

_CENT = Decimal("0.01")


def _progression(start: Decimal, step: Decimal, count: int) -> Tuple[Decimal, ...]:
    return tuple((start + step * i).quantize(_CENT) for i in range(count))


_SPH_AXIS = _progression(SPH_START, SPH_STEP, SPH_COUNT)
_CYL_AXIS = _progression(CYL_START, CYL_STEP, CYL_COUNT)


def sph_axis() -> Tuple[Decimal, ...]:
    """-6.00 .. +10.00 in 0.50 steps (grid rows)."""
    return _SPH_AXIS


def cyl_axis() -> Tuple[Decimal, ...]:
    """0.00 .. 4.00 in 0.25 steps (grid columns)."""
    return _CYL_AXIS


def axis_labels() -> dict:
    return {
        "sph": [f"{v:.2f}" for v in _SPH_AXIS],
        "cyl": [f"{v:.2f}" for v in _CYL_AXIS],
    }
