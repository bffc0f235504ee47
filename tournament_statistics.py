#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 统计汇总

只读取记录中已保存的派生金额求和，不重新计算费用，也不缓存任何中间结果。
存储支持 sum_fields 时使用数据库原生聚合，否则全量读取后在本地求和，两种方式结果一致。
"""

import calendar
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from models import TournamentQuery
from utils.errors import DataError, TournamentError, ValidationError
from utils.fee_calculator import round_money

logger = logging.getLogger(__name__)

SUM_FIELDS = ('total_revenue', 'total_income', 'participant_count')


def _strict_decimal(value, field, tournament_id):
    if value is None:
        return Decimal('0')
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise DataError(f'比赛记录 {tournament_id} 的 {field} 数据格式异常: {value!r}') from e
    if not result.is_finite():
        raise DataError(f'比赛记录 {tournament_id} 的 {field} 数据格式异常: {value!r}')
    return result


def scan_and_sum(tournaments, fields=SUM_FIELDS):
    """逐条累加记录中保存的值，返回各字段合计及记录数（键 'count'）"""
    totals = {field: Decimal('0') for field in fields}
    count = 0
    for tournament in tournaments:
        tournament_id = getattr(tournament, 'tournament_id', None)
        for field in fields:
            totals[field] += _strict_decimal(getattr(tournament, field, None), field, tournament_id)
        count += 1
    totals['count'] = count
    return totals


def month_range(year, month):
    """返回指定月份的首日和末日（均包含）"""
    try:
        year = int(year)
        month = int(month)
    except (TypeError, ValueError):
        raise ValidationError('年份和月份必须是数字')
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise ValidationError('年份或月份超出范围')
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class TournamentStatistics:
    """比赛统计汇总器

    Args:
        store: 存储协作方，需提供 query / count，可选 sum_fields
    """

    def __init__(self, store):
        self.store = store

    def _sum(self, query):
        try:
            sum_fields = getattr(self.store, 'sum_fields', None)
            if callable(sum_fields):
                try:
                    raw = sum_fields(query, SUM_FIELDS)
                except NotImplementedError:
                    raw = None
                if raw is not None:
                    return self._normalize_sums(raw)
            return self._normalize_sums(scan_and_sum(self.store.query(query.without_paging())))
        except TournamentError:
            raise
        except (TypeError, ValueError, KeyError, AttributeError, InvalidOperation) as e:
            logger.error(f"统计数据格式异常: {e}")
            raise DataError(f'统计数据格式异常: {e}') from e

    @staticmethod
    def _normalize_sums(raw):
        return {
            'total_revenue': round_money(raw['total_revenue']),
            'total_income': round_money(raw['total_income']),
            'participant_count': int(raw['participant_count']),
            'count': int(raw['count']),
        }

    def _count(self, query):
        try:
            return int(self.store.count(query))
        except TournamentError:
            raise
        except (TypeError, ValueError) as e:
            raise DataError(f'统计数据格式异常: {e}') from e

    def total_statistics(self):
        """总体统计"""
        sums = self._sum(TournamentQuery())
        result = {
            'total_revenue': sums['total_revenue'],
            'total_income': sums['total_income'],
            'total_tournaments': sums['count'],
            'total_participants': sums['participant_count'],
            'settled_count': self._count(TournamentQuery(is_settled=True)),
            'certified_count': self._count(TournamentQuery(is_certified=True)),
        }
        logger.info(f"总体统计结果: 比赛 {result['total_tournaments']} 场, 流水 {result['total_revenue']}")
        return result

    def monthly_statistics(self, year, month):
        """指定月份统计，举办日期在当月首日至末日（含）之间"""
        first_day, last_day = month_range(year, month)
        sums = self._sum(TournamentQuery(date_from=first_day, date_to=last_day))
        result = {
            'monthly_revenue': sums['total_revenue'],
            'monthly_income': sums['total_income'],
            'monthly_tournaments': sums['count'],
            'monthly_participants': sums['participant_count'],
        }
        logger.info(f"{first_day.year}年{first_day.month}月统计: 比赛 {result['monthly_tournaments']} 场")
        return result

    def current_month_statistics(self, today=None):
        today = today or date.today()
        return self.monthly_statistics(today.year, today.month)

    def range_statistics(self, date_from=None, date_to=None):
        """日期范围统计（兼容旧的 type=stats 接口）"""
        query = TournamentQuery.from_filters({'date_from': date_from, 'date_to': date_to})
        sums = self._sum(query)
        return {
            'total_revenue': sums['total_revenue'],
            'total_income': sums['total_income'],
            'total_tournaments': sums['count'],
            'total_participants': sums['participant_count'],
            'settled_count': self._count(TournamentQuery(
                date_from=query.date_from, date_to=query.date_to, is_settled=True)),
        }

    def recent_tournaments(self, limit=10):
        """最近创建的比赛记录"""
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError('limit 必须是数字')
        if limit < 1:
            raise ValidationError('limit 必须大于0')
        query = TournamentQuery(
            order_by=(('created_at', 'desc'), ('event_date', 'desc')),
            limit=limit,
        )
        return self.store.query(query)

    def export_set(self, query):
        """导出用记录集：按举办日期倒序，不分页"""
        query = TournamentQuery(
            date_from=query.date_from, date_to=query.date_to,
            tournament_type=query.tournament_type,
            is_certified=query.is_certified, is_settled=query.is_settled,
            search=query.search,
            order_by=(('event_date', 'desc'),),
        )
        tournaments = self.store.query(query)
        logger.info(f"导出查询到{len(tournaments)}条记录")
        return tournaments

    def full_dashboard(self, recent_limit=5, today=None):
        """完整仪表盘数据：总体统计 + 本月统计 + 最近比赛"""
        data = {}
        data.update(self.total_statistics())
        data.update(self.current_month_statistics(today=today))
        data['recent_tournaments'] = self.recent_tournaments(recent_limit)
        return data
