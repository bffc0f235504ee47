"""
tests/conftest.py - shared fixtures.

InMemoryTournamentStore implements the store collaborator interface without
a database; NativeSumStore adds the optional sum_fields capability.
"""

import copy

import pytest

from app import create_app
from models import TournamentQuery
from tournament_manager import TournamentManager
from tournament_statistics import scan_and_sum
from utils.errors import StoreUnavailableError


class InMemoryTournamentStore:
    """Dict-backed store; hands out copies so callers can't mutate stored rows."""

    def __init__(self):
        self._rows = {}
        self._next_id = 1
        self.calls = []

    def insert(self, tournament):
        self.calls.append('insert')
        tournament_id = self._next_id
        self._next_id += 1
        stored = copy.deepcopy(tournament)
        stored.tournament_id = tournament_id
        self._rows[tournament_id] = stored
        return tournament_id

    def get(self, tournament_id):
        self.calls.append('get')
        row = self._rows.get(tournament_id)
        return copy.deepcopy(row) if row else None

    def query(self, query=None):
        self.calls.append('query')
        query = query or TournamentQuery()
        matched = [t for t in self._rows.values() if query.matches(t)]
        return copy.deepcopy(query.paginate(query.sort(matched)))

    def count(self, query=None):
        self.calls.append('count')
        query = query or TournamentQuery()
        return sum(1 for t in self._rows.values() if query.matches(t))

    def update(self, tournament_id, fields):
        self.calls.append('update')
        row = self._rows.get(tournament_id)
        if row is None:
            return False
        for key, value in fields.items():
            setattr(row, key, value)
        # keep typed attributes consistent with what a real store returns
        self._rows[tournament_id] = type(row).from_row(
            dict(row.to_record(), tournament_id=tournament_id))
        return True

    def delete(self, tournament_id):
        self.calls.append('delete')
        return self._rows.pop(tournament_id, None) is not None

    def snapshot(self):
        return {tid: t.to_record() for tid, t in self._rows.items()}


class NativeSumStore(InMemoryTournamentStore):
    """Store with a native aggregate capability."""

    def __init__(self):
        super().__init__()
        self.sum_calls = 0

    def sum_fields(self, query, fields):
        self.sum_calls += 1
        matched = [t for t in self._rows.values() if query.matches(t)]
        return scan_and_sum(matched, fields)


class UnavailableStore:
    """Every call fails the way the MySQL mixin does when the server is down."""

    def _fail(self, *args, **kwargs):
        raise StoreUnavailableError('数据库连接失败')

    insert = get = query = count = update = delete = sum_fields = _fail


def make_input(**overrides):
    data = {
        'tournament_name': '春季羽毛球公开赛',
        'event_date': '2024-03-15',
        'participant_count': 120,
        'withdrawal_count': 3,
        'total_revenue': 3600,
        'wechat_payment': 3000,
        'refund_balance': 50,
        'tournament_type': '协会机构',
        'is_certified': True,
        'medal_count': 15,
        'medal_price': 18,
    }
    data.update(overrides)
    return data


def seed_tournaments(store):
    """Four records across two months, one settled, two certified."""
    manager = TournamentManager(store)
    records = [
        manager.create_tournament(make_input(
            tournament_name='协会春季赛', event_date='2024-03-01', total_revenue=3600,
            participant_count=120, tournament_type='协会机构', is_certified=True)),
        manager.create_tournament(make_input(
            tournament_name='高校联赛第一轮', event_date='2024-03-31', total_revenue=2400,
            participant_count=80, tournament_type='高校联赛', is_certified=False, medal_count=10)),
        manager.create_tournament(make_input(
            tournament_name='校园趣味赛', event_date='2024-04-01', total_revenue=1000,
            participant_count=40, tournament_type='高校校园赛', is_certified=False, medal_count=0)),
        manager.create_tournament(make_input(
            tournament_name='协会秋季赛', event_date='2024-02-29', total_revenue=500,
            participant_count=20, tournament_type='协会机构', is_certified=True, medal_count=0)),
    ]
    manager.toggle_settlement(records[1].tournament_id, True)
    return records


@pytest.fixture
def store():
    return InMemoryTournamentStore()


@pytest.fixture
def native_store():
    return NativeSumStore()


@pytest.fixture
def manager(store):
    return TournamentManager(store)


@pytest.fixture
def app(store):
    return create_app('testing', store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(store):
    return seed_tournaments(store)
