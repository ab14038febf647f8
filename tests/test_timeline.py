"""Tests for the monthly bucket axis."""

from datetime import datetime

from chronomap.timeline import (
    add_months,
    bucket_cutoff,
    bucket_label,
    build_monthly_buckets,
    month_span,
    month_start,
    short_label,
)


class TestBuildMonthlyBuckets:
    def test_covers_inclusive_range(self):
        buckets = build_monthly_buckets(datetime(2017, 6, 15, 13, 30), datetime(2017, 8, 2))
        assert buckets == [datetime(2017, 6, 1), datetime(2017, 7, 1), datetime(2017, 8, 1)]

    def test_same_month_single_bucket(self):
        buckets = build_monthly_buckets(datetime(2017, 6, 3), datetime(2017, 6, 28))
        assert buckets == [datetime(2017, 6, 1)]

    def test_max_before_min_is_clamped(self):
        buckets = build_monthly_buckets(datetime(2017, 6, 1), datetime(2015, 1, 1))
        assert buckets == [datetime(2017, 6, 1)]

    def test_crosses_year_boundary(self):
        buckets = build_monthly_buckets(datetime(2017, 11, 30), datetime(2018, 2, 1))
        assert [(b.year, b.month) for b in buckets] == [(2017, 11), (2017, 12), (2018, 1), (2018, 2)]

    def test_calendar_steps_not_fixed_days(self):
        """January 31st must not skip February."""
        buckets = build_monthly_buckets(datetime(2019, 1, 31), datetime(2019, 3, 31))
        assert [b.month for b in buckets] == [1, 2, 3]

    def test_properties_over_many_ranges(self):
        starts = [datetime(2016, m, d) for m in (1, 2, 6, 12) for d in (1, 15, 28)]
        ends = [datetime(y, m, 20) for y in (2016, 2017, 2020) for m in (1, 7, 12)]
        for lo in starts:
            for hi in ends:
                if hi < lo:
                    continue
                buckets = build_monthly_buckets(lo, hi)
                assert all(a < b for a, b in zip(buckets, buckets[1:]))
                assert buckets[0] <= month_start(lo)
                assert buckets[-1] == month_start(hi)
                assert len(buckets) == month_span(lo, hi) + 1
                assert all(b.day == 1 and b.hour == 0 for b in buckets)


class TestMonthHelpers:
    def test_add_months_wraps_year(self):
        assert add_months(datetime(2017, 12, 1), 1) == datetime(2018, 1, 1)
        assert add_months(datetime(2017, 1, 1), -1) == datetime(2016, 12, 1)

    def test_bucket_cutoff_is_end_of_month(self):
        cutoff = bucket_cutoff(datetime(2017, 2, 1))
        assert cutoff < datetime(2017, 3, 1)
        assert cutoff > datetime(2017, 2, 28, 23, 59, 59)

    def test_month_span(self):
        assert month_span(datetime(2017, 6, 30), datetime(2018, 6, 1)) == 12


class TestLabels:
    def test_spanish_label(self):
        assert bucket_label(datetime(2017, 6, 1), "es") == "Junio de 2017"

    def test_english_label(self):
        assert bucket_label(datetime(2017, 6, 1), "en") == "June 2017"

    def test_short_label(self):
        assert short_label(datetime(2017, 6, 1)) == "01/06/2017"
