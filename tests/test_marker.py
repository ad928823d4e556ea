import time

import pytest

from docvault.core.errors import InvalidMarker
from docvault.domains.documents.marker import MAX_MARKER, MAX_MARKER_VALUE, VersionMarker


class TestParse:
    def test_round_trips_decimal_string(self):
        raw = "1712345678901234567"
        marker = VersionMarker.parse(raw)
        assert marker.value == 1712345678901234567
        assert str(marker) == raw

    def test_accepts_zero_and_max(self):
        assert VersionMarker.parse("0").value == 0
        assert VersionMarker.parse(str(MAX_MARKER_VALUE)) == MAX_MARKER

    @pytest.mark.parametrize("raw", [
        None, "", "not-a-number", "-1", "+5", " 42", "42 ", "1.5", "0x10", "١٢٣",
        str(MAX_MARKER_VALUE + 1),
    ])
    def test_rejects_invalid_input(self, raw):
        with pytest.raises(InvalidMarker):
            VersionMarker.parse(raw)

    def test_constructor_checks_range(self):
        with pytest.raises(InvalidMarker):
            VersionMarker(-1)
        with pytest.raises(InvalidMarker):
            VersionMarker(MAX_MARKER_VALUE + 1)


class TestOrdering:
    def test_markers_compare_by_value(self):
        assert VersionMarker(1) < VersionMarker(2)
        assert VersionMarker(7) == VersionMarker(7)
        assert max(VersionMarker(3), VersionMarker(9)) == VersionMarker(9)


class TestNextAfter:
    def test_first_marker_is_clock_based(self):
        before = time.time_ns()
        marker = VersionMarker.next_after(None)
        assert marker.value >= before

    def test_is_strictly_greater_than_previous(self):
        future = VersionMarker(time.time_ns() + 10 ** 12)
        assert VersionMarker.next_after(future) == VersionMarker(future.value + 1)

    def test_consecutive_markers_are_increasing(self):
        previous = None
        for _ in range(50):
            marker = VersionMarker.next_after(previous)
            if previous is not None:
                assert marker > previous
            previous = marker
