"""
Tests for calculation history and amount formatting.
"""

from fincalc.services.history import HistoryEntry, InMemoryHistory, format_amount


class TestFormatAmount:
    def test_thousands_and_decimals(self):
        assert format_amount(1135.5812, "$") == "$1,135.58"

    def test_negative(self):
        assert format_amount(-42.5, "€") == "-€42.50"

    def test_missing_value(self):
        assert format_amount(None) == "N/A"

    def test_default_symbol_from_settings(self):
        assert format_amount(10) == "$10.00"


class TestInMemoryHistory:
    def test_newest_first(self):
        history = InMemoryHistory()
        history.record(HistoryEntry(calculator="first", input="a", result="b"))
        history.record(HistoryEntry(calculator="second", input="c", result="d"))
        assert [entry.calculator for entry in history.entries()] == ["second", "first"]

    def test_limit_drops_oldest(self):
        history = InMemoryHistory(limit=2)
        for name in ("one", "two", "three"):
            history.record(HistoryEntry(calculator=name, input="", result=""))
        assert [entry.calculator for entry in history.entries()] == ["three", "two"]

    def test_clear(self):
        history = InMemoryHistory()
        history.record(HistoryEntry(calculator="x", input="", result=""))
        history.clear()
        assert history.entries() == []
