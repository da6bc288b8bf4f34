"""
기간 토큰 해석기 테스트
"""
from datetime import date, datetime, time, timedelta, timezone as dt_timezone

import pytest

from apps.core.exceptions import InvalidPeriodToken
from apps.dashboard.periods import (
    Period,
    classify,
    default_token,
    make_token,
    parse_token,
    period_contains,
    period_from_params,
    resolve_period,
    resolve_period_or_default,
    to_local_naive,
)


class TestResolvePeriod:
    @pytest.mark.parametrize('token,start,end', [
        ('2025-all', datetime(2025, 1, 1), datetime(2026, 1, 1)),
        ('2025-q1', datetime(2025, 1, 1), datetime(2025, 4, 1)),
        ('2025-q2', datetime(2025, 4, 1), datetime(2025, 7, 1)),
        ('2025-q3', datetime(2025, 7, 1), datetime(2025, 10, 1)),
        ('2025-q4', datetime(2025, 10, 1), datetime(2026, 1, 1)),
        ('2025-1', datetime(2025, 1, 1), datetime(2025, 2, 1)),
        ('2024-2', datetime(2024, 2, 1), datetime(2024, 3, 1)),
        ('2025-12', datetime(2025, 12, 1), datetime(2026, 1, 1)),
    ])
    def test_bounds(self, token, start, end):
        period = resolve_period(token)

        assert period == Period(start=start, end=end, token=token)

    @pytest.mark.parametrize('token,normalized', [
        ('2025-Q2', '2025-q2'),
        ('2025-03', '2025-3'),
        (' 2025-ALL ', '2025-all'),
    ])
    def test_normalizes_token(self, token, normalized):
        assert resolve_period(token).token == normalized

    @pytest.mark.parametrize('token', [
        'q5', '13', 'abcd-all', '2025', '2025-0', '2025-13', '2025-q0', '2025-q5',
        '2025-', '-all', '2025-all-x', '', '0-all', '2025-year',
    ])
    def test_invalid_token(self, token):
        with pytest.raises(InvalidPeriodToken):
            resolve_period(token)

    def test_invalid_token_is_value_error(self):
        # 호출부가 ValueError로 한 번에 잡을 수 있어야 한다
        with pytest.raises(ValueError):
            resolve_period('2025-q5')

    @pytest.mark.parametrize('token', [None, 2025, ('2025', 'q1')])
    def test_non_string_raises_type_error(self, token):
        with pytest.raises(TypeError):
            resolve_period(token)

    def test_parse_token(self):
        assert parse_token('2025-Q4') == (2025, 'q4')
        assert parse_token('2025-07') == (2025, '7')


class TestPartition:
    """월/분기 구간은 한 해를 빈틈없이, 겹치지 않게 나눈다"""

    @pytest.mark.parametrize('year', [2024, 2025])
    def test_every_day_belongs_to_exactly_one_month_and_quarter(self, year):
        months = [resolve_period(f"{year}-{month}") for month in range(1, 13)]
        quarters = [resolve_period(f"{year}-q{quarter}") for quarter in range(1, 5)]
        whole_year = resolve_period(f"{year}-all")

        day = date(year, 1, 1)
        while day.year == year:
            for moment in (datetime.combine(day, time.min), datetime.combine(day, time.max)):
                month_hits = [p.token for p in months if p.contains(moment)]
                quarter_hits = [p.token for p in quarters if p.contains(moment)]

                assert month_hits == [classify(moment, year, 'month')]
                assert quarter_hits == [classify(moment, year, 'quarter')]
                assert whole_year.contains(moment)
            day += timedelta(days=1)

    def test_adjacent_periods_share_boundary(self):
        for quarter in range(1, 4):
            assert resolve_period(f"2025-q{quarter}").end == resolve_period(f"2025-q{quarter + 1}").start


class TestBoundaries:
    def test_midnight_belongs_to_next_period(self):
        midnight = datetime(2025, 4, 1, 0, 0)

        assert not period_contains('2025-q1', midnight)
        assert period_contains('2025-q2', midnight)
        assert classify(midnight, 2025, 'month') == '2025-4'
        assert classify(midnight, 2025, 'quarter') == '2025-q2'

    def test_last_microsecond_stays_in_period(self):
        moment = datetime(2025, 3, 31, 23, 59, 59, 999999)

        assert period_contains('2025-q1', moment)
        assert not period_contains('2025-q2', moment)

    def test_new_year_midnight(self):
        assert not period_contains('2025-all', datetime(2026, 1, 1))
        assert period_contains('2026-1', datetime(2026, 1, 1))

    def test_aware_datetime_uses_local_time(self):
        # 2025-03-31 22:30 UTC == 2025-04-01 00:30 Europe/Madrid (CEST)
        moment = datetime(2025, 3, 31, 22, 30, tzinfo=dt_timezone.utc)

        assert to_local_naive(moment) == datetime(2025, 4, 1, 0, 30)
        assert classify(moment, 2025, 'quarter') == '2025-q2'
        assert not period_contains('2025-q1', moment)


class TestClassify:
    @pytest.mark.parametrize('value,expected', [
        (date(2025, 2, 15), '2025-2'),
        ('2025-11-30', '2025-11'),
        ('2025-11-30T23:00:00', '2025-11'),
        (datetime(2025, 12, 31, 23, 59), '2025-12'),
    ])
    def test_month(self, value, expected):
        assert classify(value, 2025) == expected

    def test_all(self):
        assert classify(date(2025, 8, 1), 2025, 'all') == '2025-all'

    @pytest.mark.parametrize('value', [date(2024, 12, 31), date(2026, 1, 1), 'fecha', '2025-13-01', None])
    def test_outside_year_or_unparseable(self, value):
        assert classify(value, 2025) is None

    def test_invalid_granularity(self):
        with pytest.raises(ValueError):
            classify(date(2025, 1, 1), 2025, 'week')


class TestMakeToken:
    def test_normalizes(self):
        assert make_token(2025, 'Q1') == '2025-q1'
        assert make_token(2025, 3) == '2025-3'
        assert make_token(2025, 'all') == '2025-all'

    def test_invalid(self):
        with pytest.raises(InvalidPeriodToken):
            make_token(2025, 13)


class TestFallback:
    def test_default_token(self):
        assert default_token(date(2024, 6, 1)) == '2024-all'

    def test_invalid_token_falls_back_to_current_year(self, caplog):
        period = resolve_period_or_default('2025-q5', today=date(2024, 6, 1))

        assert period.token == '2024-all'
        assert '2024-all' in caplog.text

    def test_valid_token_is_kept(self):
        assert resolve_period_or_default('2025-q3', today=date(2024, 6, 1)).token == '2025-q3'

    def test_non_string_falls_back(self):
        assert resolve_period_or_default(None, today=date(2024, 6, 1)).token == '2024-all'


class TestPeriodFromParams:
    today = date(2025, 5, 10)

    @pytest.mark.parametrize('year,period,expected', [
        ('2024', 'Q2', '2024-q2'),
        ('2024', '3', '2024-3'),
        ('2024', 'all', '2024-all'),
        ('2024', None, '2024-all'),
        (None, 'q1', '2025-q1'),
        (None, None, '2025-all'),
        ('', '', '2025-all'),
        ('2024', '2023-2', '2023-2'),
        ('abc', 'q1', '2025-all'),
        ('2024', 'q9', '2025-all'),
    ])
    def test_params(self, year, period, expected):
        assert period_from_params(year, period, today=self.today).token == expected
