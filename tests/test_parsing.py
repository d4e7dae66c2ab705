"""Tests for cell id and grid JSON parsing."""

import json

import pytest

from edm_slicer.core.parsing import (
    dump_grid_json,
    format_cell_id,
    grid_from_dict,
    grid_to_dict,
    is_valid_link,
    load_grid_json,
    parse_cell_id,
    parse_cell_links,
    parse_cell_map,
    parse_selection,
    validate_filename,
)
from edm_slicer.core.types import BandCoord, GridConfig, MergedCell


class TestCellIds:
    """Tests for cell id helpers."""

    def test_format_and_parse(self):
        """Ids are 1-based row-col pairs."""
        assert format_cell_id(2, 10) == "2-10"
        assert parse_cell_id("2-10") == BandCoord(2, 10)

    @pytest.mark.parametrize("cell_id", ["", "1", "1-", "a-b", "0-1", "1-0", "1-2-3", " 1-2", "1-2\n", "\u0661-\u0661", None])
    def test_malformed(self, cell_id):
        """Anything but two positive integers is rejected."""
        with pytest.raises(ValueError):
            parse_cell_id(cell_id)


class TestGridJson:
    """Tests for grid config (de)serialisation."""

    def test_from_dict(self):
        """camelCase keys map onto the grid model."""
        grid = grid_from_dict({
            "rows": [0, 50, 100],
            "cols": [0, 25.5, 100],
            "mergedCells": [{"primaryId": "1-1", "rowSpan": 2, "colSpan": 1}],
        })

        assert grid == GridConfig(
            rows=(0.0, 50.0, 100.0),
            cols=(0.0, 25.5, 100.0),
            merged_cells=(MergedCell("1-1", 2, 1),),
        )

    def test_merged_cells_optional(self):
        """A missing mergedCells list means no merges."""
        assert grid_from_dict({"rows": [0, 100], "cols": [0, 100]}).merged_cells == ()

    def test_dict_round_trip(self, random_grids):
        """grid_to_dict output parses back to the same grid."""
        for grid in random_grids[:50]:
            assert load_grid_json(dump_grid_json(grid)) == grid

    def test_to_dict_keys(self):
        """Persisted keys match the stored JSON format."""
        grid = GridConfig(rows=(0.0, 100.0), cols=(0.0, 50.0, 100.0), merged_cells=(MergedCell("1-1", 1, 2),))

        assert grid_to_dict(grid) == {
            "rows": [0.0, 100.0],
            "cols": [0.0, 50.0, 100.0],
            "mergedCells": [{"primaryId": "1-1", "rowSpan": 1, "colSpan": 2}],
        }

    @pytest.mark.parametrize("data", [
        [],
        {"cols": [0, 100]},
        {"rows": [0], "cols": [0, 100]},
        {"rows": [5, 100], "cols": [0, 100]},
        {"rows": [0, 90], "cols": [0, 100]},
        {"rows": [0, 60, 40, 100], "cols": [0, 100]},
        {"rows": [0, 50, 50, 100], "cols": [0, 100]},
        {"rows": [0, "50", 100], "cols": [0, 100]},
        {"rows": [0, True, 100], "cols": [0, 100]},
        {"rows": [0, float("nan"), 100], "cols": [0, 100]},
        {"rows": [0, 50, 100], "cols": [0, float("inf"), 100]},
        {"rows": [0, 100], "cols": [0, 100], "mergedCells": {"1-1": 2}},
        {"rows": [0, 100], "cols": [0, 100], "mergedCells": ["1-1"]},
        {"rows": [0, 100], "cols": [0, 50, 100], "mergedCells": [{"primaryId": "x", "colSpan": 2}]},
        {"rows": [0, 100], "cols": [0, 50, 100], "mergedCells": [{"primaryId": "1-1", "colSpan": 0}]},
        {"rows": [0, 100], "cols": [0, 50, 100], "mergedCells": [{"primaryId": "1-1", "colSpan": 3}]},
        {
            "rows": [0, 50, 100],
            "cols": [0, 50, 100],
            "mergedCells": [
                {"primaryId": "1-1", "rowSpan": 2, "colSpan": 1},
                {"primaryId": "2-1", "rowSpan": 1, "colSpan": 2},
            ],
        },
    ])
    def test_invalid(self, data):
        """Malformed breakpoints or merges are rejected."""
        with pytest.raises(ValueError):
            grid_from_dict(data)

    def test_invalid_json(self):
        """Non-JSON text raises ValueError, not a decoder error type."""
        with pytest.raises(ValueError, match="not valid JSON"):
            load_grid_json("{rows:")

    def test_nan_breakpoint_json(self):
        """NaN is valid JSON to the decoder but not a breakpoint."""
        with pytest.raises(ValueError, match="non-finite"):
            load_grid_json('{"rows": [0, NaN, 100], "cols": [0, 50, 100], "mergedCells": []}')


class TestCellMaps:
    """Tests for link and image maps."""

    def test_empty_input(self):
        """Blank text is an empty map."""
        assert parse_cell_map("") == {}
        assert parse_cell_map(None) == {}
        assert parse_cell_map("null") == {}

    def test_empty_values_dropped(self):
        """Empty strings mean 'no entry'."""
        assert parse_cell_map(json.dumps({"1-1": "a", "1-2": ""})) == {"1-1": "a"}

    @pytest.mark.parametrize("text", ['["a"]', '{"x": "a"}', '{"1-1": 3}', '{"\u0661-\u0661": "a"}'])
    def test_invalid_maps(self, text):
        """Non-objects, bad ids or non-string values are rejected."""
        with pytest.raises(ValueError):
            parse_cell_map(text)

    def test_links_must_be_http(self):
        """Only http and https links are accepted."""
        assert parse_cell_links('{"1-1": "https://example.com"}') == {"1-1": "https://example.com"}
        with pytest.raises(ValueError, match="1-2"):
            parse_cell_links('{"1-2": "javascript:alert(1)"}')

    @pytest.mark.parametrize("url, valid", [
        ("http://example.com", True),
        ("https://example.com/a?b=c", True),
        ("ftp://example.com", False),
        ("example.com", False),
        ("", False),
    ])
    def test_is_valid_link(self, url, valid):
        assert is_valid_link(url) is valid


@pytest.mark.parametrize("name, valid", [
    ("banner.png", True),
    ("cell_1-2.jpeg", True),
    ("summer_sale", True),
    ("my banner.png", False),
    ("../etc/passwd", False),
    ("banner.final.png", False),
    (".png", False),
])
def test_validate_filename(name, valid):
    """Upload names may only use letters, digits, '_' and '-'."""
    assert validate_filename(name) is valid


def test_parse_selection():
    """Selections accept commas, spaces or both."""
    assert parse_selection("1-1, 1-2  2-1,2-2") == ["1-1", "1-2", "2-1", "2-2"]
    assert parse_selection("") == []
    assert parse_selection(" , ") == []
