"""Tests for tournament_statistics.py: totals, monthly rollups, recent, export set."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import InMemoryTournamentStore, UnavailableStore, make_input, seed_tournaments as seed
from models import TournamentQuery, TournamentType
from tournament_manager import TournamentManager
from tournament_statistics import TournamentStatistics, month_range, scan_and_sum
from utils.errors import DataError, StoreUnavailableError, ValidationError


@pytest.fixture(params=['scan', 'native'])
def any_store(request, store, native_store):
    """Both aggregation strategies must give identical output."""
    return store if request.param == 'scan' else native_store


# ============================================================================
# Totals
# ============================================================================


class TestTotalStatistics:
    def test_empty_store_is_all_zero(self, any_store):
        result = TournamentStatistics(any_store).total_statistics()
        assert result == {
            'total_revenue': Decimal('0.00'),
            'total_income': Decimal('0.00'),
            'total_tournaments': 0,
            'total_participants': 0,
            'settled_count': 0,
            'certified_count': 0,
        }

    def test_sums_stored_values(self, any_store):
        seed(any_store)
        result = TournamentStatistics(any_store).total_statistics()
        assert result['total_revenue'] == Decimal('7500.00')
        # 158.88 + 25.92 + 4.00 + 25.40
        assert result['total_income'] == Decimal('214.20')
        assert result['total_tournaments'] == 4
        assert result['total_participants'] == 260
        assert result['settled_count'] == 1
        assert result['certified_count'] == 2

    def test_native_sum_used_when_available(self, native_store):
        seed(native_store)
        TournamentStatistics(native_store).total_statistics()
        assert native_store.sum_calls == 1

    def test_falls_back_when_native_sum_not_implemented(self, store):
        seed(store)

        def not_implemented(query, fields):
            raise NotImplementedError

        store.sum_fields = not_implemented
        result = TournamentStatistics(store).total_statistics()
        assert result['total_revenue'] == Decimal('7500.00')

    def test_trusts_stored_derived_values(self, store):
        records = seed(store)
        # a stored value that the calculator would never produce is still summed as-is
        store.update(records[0].tournament_id, {'total_income': Decimal('1000.00')})
        result = TournamentStatistics(store).total_statistics()
        assert result['total_income'] == Decimal('1055.32')

    def test_read_only(self, store):
        seed(store)
        before = store.snapshot()
        seeded_calls = len(store.calls)
        statistics = TournamentStatistics(store)
        statistics.total_statistics()
        statistics.monthly_statistics(2024, 3)
        statistics.recent_tournaments(2)
        assert store.snapshot() == before
        assert set(store.calls[seeded_calls:]) <= {'query', 'count'}

    def test_idempotent(self, any_store):
        seed(any_store)
        statistics = TournamentStatistics(any_store)
        assert statistics.total_statistics() == statistics.total_statistics()


# ============================================================================
# Monthly
# ============================================================================


class TestMonthlyStatistics:
    def test_month_bounds_inclusive(self, any_store):
        seed(any_store)
        result = TournamentStatistics(any_store).monthly_statistics(2024, 3)
        assert result == {
            'monthly_revenue': Decimal('6000.00'),
            'monthly_income': Decimal('184.80'),
            'monthly_tournaments': 2,
            'monthly_participants': 200,
        }

    def test_leap_day_belongs_to_february(self, any_store):
        seed(any_store)
        result = TournamentStatistics(any_store).monthly_statistics(2024, 2)
        assert result['monthly_tournaments'] == 1
        assert result['monthly_revenue'] == Decimal('500.00')

    def test_next_month_first_day_excluded(self, any_store):
        seed(any_store)
        result = TournamentStatistics(any_store).monthly_statistics('2024', '4')
        assert result['monthly_tournaments'] == 1
        assert result['monthly_participants'] == 40

    def test_empty_month(self, any_store):
        seed(any_store)
        result = TournamentStatistics(any_store).monthly_statistics(2023, 12)
        assert result['monthly_revenue'] == Decimal('0.00')
        assert result['monthly_tournaments'] == 0

    def test_current_month(self, store):
        seed(store)
        result = TournamentStatistics(store).current_month_statistics(today=date(2024, 3, 20))
        assert result['monthly_tournaments'] == 2

    @pytest.mark.parametrize('year, month', [(2024, 13), (2024, 0), ('abc', 1), (None, 3)])
    def test_invalid_month(self, store, year, month):
        with pytest.raises(ValidationError):
            TournamentStatistics(store).monthly_statistics(year, month)

    def test_month_range(self):
        assert month_range(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))
        assert month_range(2024, 12) == (date(2024, 12, 1), date(2024, 12, 31))


class TestRangeStatistics:
    def test_date_range(self, any_store):
        seed(any_store)
        result = TournamentStatistics(any_store).range_statistics('2024-03-01', '2024-04-01')
        assert result['total_tournaments'] == 3
        assert result['total_revenue'] == Decimal('7000.00')
        assert result['settled_count'] == 1

    def test_no_range_is_everything(self, store):
        seed(store)
        assert TournamentStatistics(store).range_statistics()['total_tournaments'] == 4


# ============================================================================
# Recent / export set
# ============================================================================


class TestRecentTournaments:
    def test_ordered_by_creation_desc(self, store):
        records = seed(store)
        for offset, record in enumerate(records):
            store.update(record.tournament_id, {'created_at': datetime(2024, 5, 1, 10, offset)})
        recent = TournamentStatistics(store).recent_tournaments(3)
        assert [t.tournament_name for t in recent] == ['协会秋季赛', '校园趣味赛', '高校联赛第一轮']

    def test_default_limit_is_ten(self, store):
        manager = TournamentManager(store)
        for i in range(12):
            manager.create_tournament(make_input(tournament_name=f'比赛{i}'))
        assert len(TournamentStatistics(store).recent_tournaments()) == 10

    @pytest.mark.parametrize('limit', [0, -1, 'x'])
    def test_invalid_limit(self, store, limit):
        with pytest.raises(ValidationError):
            TournamentStatistics(store).recent_tournaments(limit)


class TestExportSet:
    def test_no_filters_returns_all_by_event_date_desc(self, store):
        seed(store)
        result = TournamentStatistics(store).export_set(TournamentQuery())
        assert [t.event_date for t in result] == [
            date(2024, 4, 1), date(2024, 3, 31), date(2024, 3, 1), date(2024, 2, 29)]

    def test_filters_are_anded(self, store):
        seed(store)
        query = TournamentQuery.from_filters({
            'dateFrom': '2024-02-01', 'dateTo': '2024-03-31',
            'tournamentType': '协会机构', 'isCertified': 'true', 'search': '春季',
        })
        result = TournamentStatistics(store).export_set(query)
        assert [t.tournament_name for t in result] == ['协会春季赛']

    def test_settled_filter(self, store):
        seed(store)
        settled = TournamentStatistics(store).export_set(TournamentQuery(is_settled=True))
        unsettled = TournamentStatistics(store).export_set(TournamentQuery(is_settled=False))
        assert [t.tournament_name for t in settled] == ['高校联赛第一轮']
        assert len(unsettled) == 3

    def test_type_filter(self, store):
        seed(store)
        query = TournamentQuery(tournament_type=TournamentType.CAMPUS)
        assert len(TournamentStatistics(store).export_set(query)) == 1

    def test_paging_on_input_query_ignored(self, store):
        seed(store)
        result = TournamentStatistics(store).export_set(TournamentQuery(limit=1, skip=1))
        assert len(result) == 4


# ============================================================================
# Full dashboard / failures
# ============================================================================


def test_full_dashboard(store):
    seed(store)
    data = TournamentStatistics(store).full_dashboard(recent_limit=2, today=date(2024, 3, 5))
    assert data['total_tournaments'] == 4
    assert data['monthly_tournaments'] == 2
    assert len(data['recent_tournaments']) == 2


class TestFailures:
    def test_store_unavailable_propagates(self):
        statistics = TournamentStatistics(UnavailableStore())
        with pytest.raises(StoreUnavailableError):
            statistics.total_statistics()
        with pytest.raises(StoreUnavailableError):
            statistics.monthly_statistics(2024, 3)
        with pytest.raises(StoreUnavailableError):
            statistics.recent_tournaments()

    def test_malformed_native_result_is_data_error(self, store):
        store.sum_fields = lambda query, fields: {'total_revenue': 'oops'}
        with pytest.raises(DataError):
            TournamentStatistics(store).total_statistics()

    def test_malformed_record_is_data_error(self):
        class Row:
            tournament_id = 9
            total_revenue = 'not-a-number'
            total_income = 0
            participant_count = 1

        with pytest.raises(DataError):
            scan_and_sum([Row()])

    def test_no_partial_result_when_count_fails(self, store):
        seed(store)

        def broken_count(query=None):
            raise StoreUnavailableError('连接中断')

        store.count = broken_count
        with pytest.raises(StoreUnavailableError):
            TournamentStatistics(store).total_statistics()


def test_scan_and_sum_empty():
    assert scan_and_sum([]) == {
        'total_revenue': Decimal('0'), 'total_income': Decimal('0'),
        'participant_count': Decimal('0'), 'count': 0,
    }


def test_separate_stores_do_not_share_state():
    a, b = InMemoryTournamentStore(), InMemoryTournamentStore()
    seed(a)
    assert TournamentStatistics(b).total_statistics()['total_tournaments'] == 0
