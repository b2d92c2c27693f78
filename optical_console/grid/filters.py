from typing import Optional, Sequence

from optical_console.schemas.lens_grid import LensFilter


def apply_filters(records: Sequence, lens_filter: Optional[LensFilter] = None) -> Sequence:
    active = lens_filter.active() if lens_filter is not None else {}
    if not active:
        return records
    return [
        r for r in records
        if all(getattr(r, name, None) == value for name, value in active.items())
    ]
