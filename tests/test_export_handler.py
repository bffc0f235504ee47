"""Tests for utils/export_handler.py."""

from io import BytesIO
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from conftest import make_input
from utils.export_handler import CSV_BOM, EXPORT_HEADERS, TournamentExporter
from utils.errors import ValidationError
from utils.fee_calculator import calculate_fees


@pytest.fixture
def exporter():
    return TournamentExporter()


def csv_lines(text):
    assert text.startswith(CSV_BOM)
    return text[len(CSV_BOM):].rstrip('\n').split('\n')


class TestCsv:
    def test_empty_export_is_empty_string(self, exporter):
        assert exporter.to_csv([]) == ''

    def test_header_row(self, exporter, seeded):
        lines = csv_lines(exporter.to_csv(seeded))
        assert lines[0].split(',') == EXPORT_HEADERS
        assert len(lines) == 5

    def test_row_formatting(self, exporter, store, seeded):
        row = csv_lines(exporter.to_csv([store.get(2)]))[1].split(',')
        values = dict(zip(EXPORT_HEADERS, row))
        assert values['比赛名称'] == '高校联赛第一轮'
        assert values['举办日期'] == '2024-03-31'
        assert values['流水总计'] == '2400.00'
        assert values['总手续费'] == '40.32'
        assert values['认证费'] == '0.00'
        assert values['比赛类型'] == '高校联赛'
        assert values['是否认证赛'] == '否'
        assert values['是否结算'] == '已结算'
        assert len(values['创建时间']) == len('2024-03-31 10:00')

    def test_certified_and_unsettled_tokens(self, exporter, store, seeded):
        row = csv_lines(exporter.to_csv([store.get(1)]))[1].split(',')
        values = dict(zip(EXPORT_HEADERS, row))
        assert values['是否认证赛'] == '是'
        assert values['是否结算'] == '未结算'

    def test_name_with_comma_is_quoted(self, exporter, manager, store):
        manager.create_tournament(make_input(tournament_name='春季赛,第二站'))
        lines = csv_lines(exporter.to_csv([store.get(1)]))
        assert lines[1].startswith('"春季赛,第二站",')

    def test_round_trip_reproduces_derived_fields(self, exporter, store, seeded):
        tournaments = [store.get(t.tournament_id) for t in seeded]
        parsed = exporter.parse_csv(exporter.to_csv(tournaments))
        assert len(parsed) == len(tournaments)
        for raw, original in zip(parsed, tournaments):
            assert calculate_fees(raw) == original.derived_fields()

    def test_round_trip_custom_medal_price(self, exporter, manager, store):
        manager.create_tournament(make_input(medal_count=9, medal_price='17.3'))
        original = store.get(1)
        parsed = exporter.parse_csv(exporter.to_csv([original]))
        assert calculate_fees(parsed[0])['medal_cost'] == Decimal('155.70')

    def test_parse_missing_column(self, exporter):
        with pytest.raises(ValueError):
            exporter.parse_csv('比赛名称,举办日期\n测试,2024-01-01\n')

    def test_parse_empty(self, exporter):
        assert exporter.parse_csv('') == []
        assert exporter.parse_csv(CSV_BOM) == []


class TestXlsx:
    def test_workbook_contents(self, exporter, store, seeded):
        content = exporter.to_xlsx([store.get(1), store.get(2)])
        ws = load_workbook(BytesIO(content)).active
        assert ws.title == '比赛财务记录'
        assert [cell.value for cell in ws[1]] == EXPORT_HEADERS
        assert ws.max_row == 3
        assert ws.cell(row=2, column=1).value == '协会春季赛'
        assert ws.cell(row=2, column=EXPORT_HEADERS.index('总收入') + 1).value == pytest.approx(158.88)
        assert ws.cell(row=3, column=EXPORT_HEADERS.index('是否结算') + 1).value == '已结算'

    def test_empty_workbook_has_headers_only(self, exporter):
        ws = load_workbook(BytesIO(exporter.to_xlsx([]))).active
        assert ws.max_row == 1


def test_over_precise_revenue_never_stored(exporter, manager, store):
    with pytest.raises(ValidationError):
        manager.create_tournament(make_input(tournament_type='高校联赛', total_revenue='11.5745'))
    assert store.snapshot() == {}

    manager.create_tournament(make_input(tournament_type='高校联赛', total_revenue='11.57'))
    original = store.get(1)
    parsed = exporter.parse_csv(exporter.to_csv([original]))
    assert calculate_fees(parsed[0]) == original.derived_fields()
