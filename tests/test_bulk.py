"""Tests for the pending grid, bulk range applier and quick select."""

from decimal import Decimal

import pydantic
import pytest

from optical_console.grid.bulk import apply_bulk, apply_bulk_ranges, cells_in_range, quick_select
from optical_console.grid.errors import ValidationError
from optical_console.grid.pending import PendingGrid, parse_quantity
from optical_console.schemas.lens_grid import BulkRangeSpec


def spec(**kw):
    base = {"start_sph": "-1.00", "end_sph": "1.00", "start_cyl": "0.00", "end_cyl": "0.50", "quantity": 3}
    base.update(kw)
    return BulkRangeSpec(**base)


class TestParseQuantity:
    def test_blank_values(self):
        assert parse_quantity(None) is None
        assert parse_quantity("") is None
        assert parse_quantity("   ") is None

    def test_numbers(self):
        assert parse_quantity(4) == 4
        assert parse_quantity(" 12 ") == 12
        assert parse_quantity("-3") == -3

    @pytest.mark.parametrize("raw", ["abc", "1.5", "3x", True])
    def test_rejects_non_integers(self, raw):
        with pytest.raises(ValidationError):
            parse_quantity(raw)

    def test_digit_limit(self):
        assert parse_quantity("999999999") == 999999999
        with pytest.raises(ValidationError):
            parse_quantity("1234567890")
        with pytest.raises(ValidationError):
            parse_quantity("1" * 5000)


class TestPendingGrid:
    def test_set_returns_new_grid(self):
        grid = PendingGrid()
        updated = grid.set("cell__0.00__0.00", 2)
        assert len(grid) == 0
        assert updated.quantity("cell__0.00__0.00") == 2

    def test_add_accumulates(self):
        grid = PendingGrid({"cell__0.00__0.00": "3"}).add("cell__0.00__0.00", 2)
        assert grid.raw("cell__0.00__0.00") == 5


class TestBulkRange:
    def test_pair_doubles_quantity(self):
        grid = apply_bulk(PendingGrid(), spec(unit="pair"))
        assert set(grid.as_dict().values()) == {6}

    def test_single_keeps_quantity(self):
        grid = apply_bulk(PendingGrid(), spec(unit="single"))
        assert set(grid.as_dict().values()) == {3}

    def test_default_unit_is_pair(self):
        assert spec().per_cell_quantity == 6

    def test_inclusive_rectangle(self):
        keys = cells_in_range(spec())
        # sph -1.0, -0.5, 0.0, 0.5, 1.0 x cyl 0.0, 0.25, 0.5
        assert len(keys) == 15
        assert "cell__-1.00__0.00" in keys
        assert "cell__1.00__0.50" in keys
        assert "cell__1.50__0.00" not in keys

    def test_missing_end_means_single_row_and_column(self):
        keys = cells_in_range(spec(end_sph=None, end_cyl=""))
        assert keys == ["cell__-1.00__0.00"]

    def test_start_after_end_matches_nothing(self):
        assert cells_in_range(spec(start_sph="1.00", end_sph="-1.00")) == []
        assert cells_in_range(spec(start_cyl="2.00", end_cyl="1.00")) == []
        grid = PendingGrid({"cell__0.00__0.00": 1})
        assert apply_bulk(grid, spec(start_sph="1.00", end_sph="-1.00")) == grid

    def test_overwrites_prior_pending_value(self):
        grid = PendingGrid({"cell__0.00__0.00": 40, "cell__5.00__0.00": 1})
        out = apply_bulk(grid, spec(unit="single"))
        assert out.raw("cell__0.00__0.00") == 3
        assert out.raw("cell__5.00__0.00") == 1

    def test_ranges_apply_in_order(self):
        out = apply_bulk_ranges(
            PendingGrid(),
            [spec(unit="single"), spec(start_sph="0.00", end_sph="0.00", end_cyl="0.00", quantity=9, unit="single")],
        )
        assert out.raw("cell__0.00__0.00") == 9
        assert out.raw("cell__-1.00__0.00") == 3

    def test_negative_quantity_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            spec(quantity=-1)


class TestQuickSelect:
    def test_accumulates(self):
        grid = quick_select(PendingGrid(), Decimal("-2"), Decimal("1"), 2)
        grid = quick_select(grid, Decimal("-2.00"), Decimal("1.00"), 3)
        assert grid.quantity("cell__-2.00__1.00") == 5

    @pytest.mark.parametrize("sph,cyl,qty", [(None, 1, 1), (1, None, 1), (1, 1, None)])
    def test_missing_information(self, sph, cyl, qty):
        with pytest.raises(ValidationError):
            quick_select(PendingGrid(), sph, cyl, qty)

    def test_non_positive_quantity(self):
        with pytest.raises(ValidationError):
            quick_select(PendingGrid(), Decimal("0"), Decimal("0"), 0)
