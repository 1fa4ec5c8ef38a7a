"""Tests for the filter, sort and viewport engines and value formatting."""

from datetime import datetime, timedelta, timezone
from enum import Enum

import pytest

from pyre.formatting import (
    clean_value,
    format_ago,
    format_bytes,
    format_duration,
    format_number,
    format_packets,
    truncate,
)
from pyre.models import Interface, SecurityRule, Session, as_utc
from pyre.views import viewport
from pyre.views.filtering import filter_rows, matches
from pyre.views.sorting import SortColumn, SortTable, ip_key, sort_rows, state_rank


NAME_ZONE = (lambda i: i.name, lambda i: i.zone)


class TestFilterEngine:
    """Tests for free-text filtering."""

    def test_empty_query_keeps_everything(self, five_interfaces) -> None:
        """Test that an empty query returns all rows in order."""
        result = filter_rows(five_interfaces, "", NAME_ZONE)
        assert result == five_interfaces
        assert result is not five_interfaces

    def test_case_insensitive_substring(self, five_interfaces) -> None:
        """Test that matching ignores case and matches substrings."""
        result = filter_rows(five_interfaces, "TRUST", NAME_ZONE)
        assert [i.name for i in result] == ["ethernet1/1", "ethernet1/2", "ethernet1/4"]

    def test_any_field_matches(self, five_interfaces) -> None:
        """Test that a match in any extracted field includes the row."""
        assert [i.name for i in filter_rows(five_interfaces, "dmz", NAME_ZONE)] == ["ethernet1/3"]
        assert [i.name for i in filter_rows(five_interfaces, "1/5", NAME_ZONE)] == ["ethernet1/5"]

    def test_no_match(self, five_interfaces) -> None:
        """Test that a query matching nothing yields an empty list."""
        assert filter_rows(five_interfaces, "nope", NAME_ZONE) == []

    def test_none_field_is_ignored(self) -> None:
        """Test that extractors returning None never match."""
        assert not matches(Interface(name="x"), "a", (lambda i: None,))

    def test_idempotent(self, five_interfaces) -> None:
        """Test that filtering twice equals filtering once."""
        once = filter_rows(five_interfaces, "eth", NAME_ZONE)
        assert filter_rows(once, "eth", NAME_ZONE) == once

    def test_monotonic(self, five_interfaces) -> None:
        """Test that a longer query never matches more rows."""
        broad = filter_rows(five_interfaces, "", NAME_ZONE)
        narrow = filter_rows(five_interfaces, "eth", NAME_ZONE)
        narrower = filter_rows(five_interfaces, "ethernet1/2", NAME_ZONE)
        assert set(map(id, narrow)) <= set(map(id, broad))
        assert set(map(id, narrower)) <= set(map(id, narrow))


class Field(Enum):
    NAME = "name"
    ZONE = "zone"


TABLE = SortTable(
    fields=Field,
    columns={
        Field.NAME: SortColumn("Name", lambda i: i.name),
        Field.ZONE: SortColumn("Zone", lambda i: i.zone),
    },
    default_ascending={Field.ZONE: False},
)


class TestSortEngine:
    """Tests for sort tables and stable sorting."""

    def test_stable_ascending(self, five_interfaces) -> None:
        """Test that equal keys keep their incoming order."""
        result = sort_rows(five_interfaces, lambda i: i.zone)
        trust = [i.name for i in result if i.zone == "trust"]
        assert trust == ["ethernet1/2", "ethernet1/4"]

    def test_stable_descending(self, five_interfaces) -> None:
        """Test that descending order keeps equal keys in incoming order."""
        result = sort_rows(five_interfaces, lambda i: i.zone, ascending=False)
        assert [i.zone for i in result] == ["untrust", "trust", "trust", "dmz", ""]
        trust = [i.name for i in result if i.zone == "trust"]
        assert trust == ["ethernet1/2", "ethernet1/4"]

    def test_sorting_sorted_is_noop(self, five_interfaces) -> None:
        """Test that re-sorting an already sorted sequence keeps its order."""
        for ascending in (True, False):
            once = sort_rows(five_interfaces, lambda i: i.zone, ascending)
            assert sort_rows(once, lambda i: i.zone, ascending) == once

    def test_tiebreak_stays_ascending(self, five_interfaces) -> None:
        """Test a column tie-break orders equal keys ascending in both directions."""
        table = SortTable(
            fields=Field,
            columns={
                Field.NAME: SortColumn("Name", lambda i: i.name),
                Field.ZONE: SortColumn("Zone", lambda i: i.zone, tiebreak=lambda i: i.name),
            },
        )
        reversed_rows = list(reversed(five_interfaces))
        for ascending in (True, False):
            result = table.apply(reversed_rows, Field.ZONE, ascending)
            trust = [i.name for i in result if i.zone == "trust"]
            assert trust == ["ethernet1/2", "ethernet1/4"]
        assert result[0].zone == "untrust"

    def test_cycle_wraps(self) -> None:
        """Test that cycling advances through fields and wraps."""
        assert TABLE.cycle(Field.NAME) is Field.ZONE
        assert TABLE.cycle(Field.ZONE) is Field.NAME

    def test_default_direction(self) -> None:
        """Test per-field default directions and fallback to the current one."""
        assert TABLE.default_direction(Field.ZONE, True) is False
        assert TABLE.default_direction(Field.NAME, False) is False
        assert TABLE.default_direction(Field.NAME, True) is True

    def test_describe(self) -> None:
        """Test header labels carry a direction arrow."""
        assert TABLE.describe(Field.NAME, True) == "Name ↑"
        assert TABLE.describe(Field.ZONE, False) == "Zone ↓"

    def test_missing_column_rejected(self) -> None:
        """Test that every enum member needs a column."""
        with pytest.raises(ValueError, match="ZONE"):
            SortTable(fields=Field, columns={Field.NAME: SortColumn("Name", lambda i: i.name)})

    def test_state_rank(self) -> None:
        """Test up < init < other < down."""
        states = ["down", "weird", "UP", "init"]
        assert sorted(states, key=state_rank) == ["UP", "init", "weird", "down"]

    def test_ip_key(self) -> None:
        """Test numeric address ordering with blanks last."""
        ips = ["10.0.0.10/24", "", "10.0.0.9", "192.168.1.1", "fe80::1", "bogus"]
        assert sorted(ips, key=ip_key) == ["10.0.0.9", "10.0.0.10/24", "192.168.1.1", "fe80::1", "", "bogus"]


class TestViewport:
    """Tests for scroll window arithmetic."""

    @pytest.mark.parametrize(
        "height,overhead,expanded_overhead,expanded,expected",
        [
            (18, 8, 14, False, 10),
            (18, 8, 14, True, 1),
            (30, 8, 14, True, 8),
            (0, 8, 0, False, 1),
        ],
    )
    def test_visible_rows(self, height, overhead, expanded_overhead, expanded, expected) -> None:
        """Test visible rows never drop below one."""
        assert viewport.visible_rows(height, overhead, expanded_overhead, expanded) == expected

    def test_clamp_cursor(self) -> None:
        """Test clamping into range and to zero for empty lists."""
        assert viewport.clamp_cursor(-3, 5) == 0
        assert viewport.clamp_cursor(9, 5) == 4
        assert viewport.clamp_cursor(2, 5) == 2
        assert viewport.clamp_cursor(7, 0) == 0

    def test_ensure_visible_minimal_movement(self) -> None:
        """Test the window only moves as far as needed."""
        assert viewport.ensure_visible(4, 2, 5) == 2
        assert viewport.ensure_visible(1, 2, 5) == 1
        assert viewport.ensure_visible(7, 0, 3) == 5
        assert viewport.ensure_visible(0, 0, 1) == 0

    def test_page_window(self) -> None:
        """Test the on-screen slice keeps absolute indexes."""
        assert viewport.page_window(list("abcdef"), 2, 3) == [(2, "c"), (3, "d"), (4, "e")]
        assert viewport.page_window(list("ab"), 1, 5) == [(1, "b")]


class TestFormatting:
    """Tests for value formatting helpers."""

    def test_format_bytes(self) -> None:
        """Test 1024-based byte sizes."""
        assert format_bytes(0) == "0 B"
        assert format_bytes(512) == "512 B"
        assert format_bytes(1536) == "1.5 KB"
        assert format_bytes(5 * 1024**3) == "5.0 GB"

    def test_format_number(self) -> None:
        """Test thousands separators."""
        assert format_number(999) == "999"
        assert format_number(1234567) == "1,234,567"

    def test_format_packets(self) -> None:
        """Test packet counts with suffixes."""
        assert format_packets(999) == "999"
        assert format_packets(1500) == "1.5K"
        assert format_packets(2_500_000) == "2.5M"
        assert format_packets(3_000_000_000) == "3.0B"

    def test_format_duration(self) -> None:
        """Test compact durations."""
        assert format_duration(5) == "5s"
        assert format_duration(65) == "1m 05s"
        assert format_duration(2 * 3600 + 5 * 60) == "2h 05m"
        assert format_duration(3 * 86400 + 4 * 3600) == "3d 4h"

    def test_format_ago(self) -> None:
        """Test relative times."""
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_ago(None) == "never"
        assert format_ago(now - timedelta(minutes=2), now=now) == "2m 00s ago"

    def test_format_ago_naive_moment(self) -> None:
        """Test timestamps without a timezone are read as UTC."""
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert format_ago(datetime(2024, 1, 1, 11, 0), now=now) == "1h 00m ago"

    def test_clean_value(self) -> None:
        """Test placeholder values are blanked."""
        for placeholder in ("N/A", "ukn", "[n/a]", "unknown", None):
            assert clean_value(placeholder) == ""
        assert clean_value("trust") == "trust"

    def test_truncate(self) -> None:
        """Test truncation with an ellipsis."""
        assert truncate("ethernet1/1", 20) == "ethernet1/1"
        assert truncate("ethernet1/1", 8) == "ether..."
        assert truncate("ethernet1/1", 2) == "et"


class TestModels:
    """Tests for the row models."""

    def test_fields_are_validated(self) -> None:
        """Test numeric strings from the API are coerced and missing names rejected."""
        assert Session(id="42", bytes_in="10", bytes_out=5).total_bytes == 15
        with pytest.raises(ValueError):
            Interface()

    def test_list_defaults_are_not_shared(self) -> None:
        """Test each rule gets its own match lists."""
        first = SecurityRule(name="a")
        first.tags.append("x")
        assert SecurityRule(name="b").tags == []

    def test_as_utc(self) -> None:
        """Test naive times gain UTC and aware times are left alone."""
        naive = datetime(2024, 6, 1, 12, 0)
        aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert as_utc(naive) == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert as_utc(aware) is aware
        assert as_utc(None) is None
