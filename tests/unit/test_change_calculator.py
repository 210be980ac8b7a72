"""
Unit Tests for Change Calculator
Reference day is fixed; history is built relative to it
"""

import pytest
from decimal import Decimal
from datetime import date, datetime, timedelta, timezone

from macrodesk.domain.models import HistoryPoint, HorizonSpec
from macrodesk.domain.services.change_calculator import ChangeCalculator, change_keys
from macrodesk.domain.services.horizons import HorizonTable

REF = datetime(2024, 6, 15, 14, 30, tzinfo=timezone.utc)


def point(days_back: int, value, ref: datetime = REF) -> HistoryPoint:
    v = None if value is None else Decimal(str(value))
    return HistoryPoint(date=ref.date() - timedelta(days=days_back), value=v)


@pytest.fixture
def calculator():
    return ChangeCalculator()


class TestOutputShape:

    def test_fourteen_keys(self, calculator):
        assert len(calculator.output_keys) == 14
        assert calculator.output_keys[:2] == ["change1D", "change1DPercent"]
        assert calculator.output_keys[-2:] == ["changeYTD", "changeYTDPercent"]

    def test_empty_history_all_null(self, calculator):
        result = calculator.compute_changes(Decimal("100"), [], REF)
        assert set(result) == set(calculator.output_keys)
        assert all(v is None for v in result.values())

    def test_latest_missing_all_null(self, calculator):
        result = calculator.compute_changes(None, [point(40, 100)], REF)
        assert len(result) == 14
        assert all(v is None for v in result.values())

    def test_nan_latest_all_null(self, calculator):
        result = calculator.compute_changes(float("nan"), [point(40, 100)], REF)
        assert all(v is None for v in result.values())

    def test_custom_table_without_ytd(self):
        table = HorizonTable(fixed=(HorizonSpec("2D", 2),), include_ytd=False)
        result = ChangeCalculator(table).compute_changes(Decimal("10"), [point(2, 8)], REF)
        assert result == {"change2D": Decimal("2.00"), "change2DPercent": Decimal("25.00")}


class TestPointSelection:

    def test_gap_scenario(self, calculator):
        """Latest 110, points 40 and 2 days back"""
        history = [point(40, 100), point(2, 108)]
        result = calculator.compute_changes(Decimal("110"), history, REF)

        assert result["change1M"] == Decimal("10.00")
        assert result["change1MPercent"] == Decimal("10.00")
        assert result["change1W"] == Decimal("10.00")
        # Nothing in the 3 days before the 3D target except the 40-day point
        assert result["change3D"] == Decimal("10.00")
        # 1D target is yesterday; the 2-days-back point is the latest on or before it
        assert result["change1D"] == Decimal("2.00")
        assert result["change1DPercent"] == Decimal("1.85")
        assert result["change1Y"] is None
        assert result["change5Y"] is None
        assert result["changeYTD"] is None

    def test_exact_date_match(self, calculator):
        history = [point(10, 90), point(7, 95), point(6, 99)]
        result = calculator.compute_changes(Decimal("100"), history, REF)
        assert result["change1W"] == Decimal("5.00")
        assert result["change1WPercent"] == Decimal("5.26")

    def test_history_newer_than_target_is_ignored(self, calculator):
        result = calculator.compute_changes(Decimal("100"), [point(0, 50)], REF)
        assert result["change1D"] is None
        assert result["change1DPercent"] is None

    def test_unsorted_history_matches_sorted(self, calculator):
        ordered = [point(400, 80), point(40, 100), point(8, 104), point(2, 108)]
        shuffled = [ordered[2], ordered[0], ordered[3], ordered[1]]
        assert (
            calculator.compute_changes(Decimal("110"), shuffled, REF)
            == calculator.compute_changes(Decimal("110"), ordered, REF)
        )

    def test_datetime_points_use_calendar_day(self, calculator):
        late_evening = datetime.combine(
            REF.date() - timedelta(days=1), datetime.min.time()
        ).replace(hour=23, minute=59)
        history = [HistoryPoint(date=late_evening, value=Decimal("50"))]
        result = calculator.compute_changes(Decimal("55"), history, REF)
        assert result["change1D"] == Decimal("5.00")

    def test_reference_as_plain_date(self, calculator):
        history = [point(40, 100)]
        assert (
            calculator.compute_changes(Decimal("110"), history, REF.date())
            == calculator.compute_changes(Decimal("110"), history, REF)
        )

    def test_idempotent(self, calculator):
        history = [point(400, 80), point(40, 100), point(2, 108)]
        first = calculator.compute_changes(Decimal("110"), history, REF)
        second = calculator.compute_changes(Decimal("110"), history, REF)
        assert first == second


class TestChangeValues:

    @pytest.mark.parametrize(
        "latest,past,expected_abs,expected_pct",
        [
            ("110", "100", "10.00", "10.00"),
            ("95.5", "100", "-4.50", "-4.50"),
            ("1", "3", "-2.00", "-66.67"),
            ("2.5", "2.0", "0.50", "25.00"),
            ("100", "100", "0.00", "0.00"),
        ],
    )
    def test_absolute_and_percent(self, calculator, latest, past, expected_abs, expected_pct):
        result = calculator.compute_changes(Decimal(latest), [point(1, past)], REF)
        assert result["change1D"] == Decimal(expected_abs)
        assert result["change1DPercent"] == Decimal(expected_pct)

    def test_round_half_up(self, calculator):
        result = calculator.compute_changes(Decimal("100.005"), [point(1, "100")], REF)
        assert result["change1D"] == Decimal("0.01")
        assert result["change1DPercent"] == Decimal("0.01")

    def test_float_latest_is_accepted(self, calculator):
        result = calculator.compute_changes(110.0, [point(40, 100)], REF)
        assert result["change1M"] == Decimal("10.00")

    def test_zero_past_value_keeps_absolute(self, calculator):
        result = calculator.compute_changes(Decimal("5"), [point(1, 0)], REF)
        assert result["change1D"] == Decimal("5.00")
        assert result["change1DPercent"] is None

    def test_null_past_value(self, calculator):
        history = [point(5, 50), point(1, None)]
        result = calculator.compute_changes(Decimal("55"), history, REF)
        assert result["change1D"] is None
        assert result["change1DPercent"] is None
        assert result["change3D"] == Decimal("5.00")
        assert result["change3DPercent"] == Decimal("10.00")


class TestYearToDate:

    def test_mid_year(self, calculator):
        jan_first = date(2024, 1, 1)
        history = [
            HistoryPoint(date=date(2023, 12, 29), value=Decimal("90")),
            HistoryPoint(date=jan_first, value=Decimal("100")),
        ]
        result = calculator.compute_changes(Decimal("120"), history, REF)
        assert result["changeYTD"] == Decimal("20.00")
        assert result["changeYTDPercent"] == Decimal("20.00")

    def test_falls_back_to_last_close_of_previous_year(self, calculator):
        history = [HistoryPoint(date=date(2023, 12, 29), value=Decimal("80"))]
        result = calculator.compute_changes(Decimal("100"), history, REF)
        assert result["changeYTD"] == Decimal("20.00")
        assert result["changeYTDPercent"] == Decimal("25.00")

    def test_on_january_first_compares_same_day(self, calculator):
        ref = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
        history = [
            HistoryPoint(date=date(2024, 12, 31), value=Decimal("100")),
            HistoryPoint(date=date(2025, 1, 1), value=Decimal("104")),
        ]
        result = calculator.compute_changes(Decimal("105"), history, ref)
        assert result["changeYTD"] == Decimal("1.00")
        assert result["changeYTDPercent"] == Decimal("0.96")


def test_change_keys():
    assert change_keys("5Y") == ("change5Y", "change5YPercent")
