"""
Lens-stock grid: an SPH x CYL matrix over the `lenses` table.

- axes: the fixed row/column values
- cell_key: (sph, cyl) <-> "cell__<sph>__<cyl>"
- index: records bucketed per cell, per-cell totals
- bulk / pending: the request-scoped grid of quantities a user is about to submit
- filters / view: read-side narrowing and presentation
- mutations: add/remove protocols that write to a RecordStore
"""
