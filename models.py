#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 数据模型定义
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from utils.errors import ValidationError
from utils.helpers import (
    jsonable,
    normalize_tournament_input,
    parse_bool,
    parse_date,
    parse_datetime,
    parse_optional_bool,
    to_decimal,
    to_int,
)

DEFAULT_MEDAL_PRICE = Decimal('18')

# 英文类型名 -> 枚举名
TOURNAMENT_TYPE_ALIASES = {
    'AssociationOrganization': 'ASSOCIATION',
    'UniversityLeague': 'UNIVERSITY_LEAGUE',
    'UniversityCampusEvent': 'CAMPUS',
}


class TournamentType(Enum):
    """比赛类型枚举（决定手续费费率）"""
    ASSOCIATION = '协会机构'          # 协会机构
    UNIVERSITY_LEAGUE = '高校联赛'    # 高校联赛
    CAMPUS = '高校校园赛'             # 高校校园赛

    @classmethod
    def parse(cls, value):
        """解析比赛类型，兼容中文值、枚举名和英文类型名，无法识别时返回 None"""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        text = str(value).strip()
        text = TOURNAMENT_TYPE_ALIASES.get(text, text)
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        return None


class Tournament:
    """比赛财务记录模型"""

    RAW_FIELDS = (
        'tournament_name',
        'event_date',
        'participant_count',
        'withdrawal_count',
        'total_revenue',
        'wechat_payment',
        'refund_balance',
        'tournament_type',
        'is_certified',
        'medal_count',
        'medal_price',
    )

    # 仅由费用计算器写入
    DERIVED_FIELDS = (
        'processing_fee',
        'wechat_fee',
        'certification_fee',
        'total_fee',
        'medal_cost',
        'host_settlement',
        'total_income',
    )

    def __init__(self, tournament_id=None, tournament_name=None, event_date=None,
                 participant_count=0, withdrawal_count=0,
                 total_revenue=0, wechat_payment=0, refund_balance=0,
                 tournament_type=None, is_certified=False,
                 medal_count=0, medal_price=DEFAULT_MEDAL_PRICE,
                 processing_fee=0, wechat_fee=0, certification_fee=0, total_fee=0,
                 medal_cost=0, host_settlement=0, total_income=0,
                 is_settled=False, created_at=None, updated_at=None):
        self.tournament_id = tournament_id
        self.tournament_name = (tournament_name or '').strip()
        self.event_date = parse_date(event_date)
        self.participant_count = to_int(participant_count)
        self.withdrawal_count = to_int(withdrawal_count)
        self.total_revenue = to_decimal(total_revenue)
        self.wechat_payment = to_decimal(wechat_payment)
        self.refund_balance = to_decimal(refund_balance)
        self.tournament_type = TournamentType.parse(tournament_type)
        self.is_certified = parse_bool(is_certified)
        self.medal_count = to_int(medal_count)
        self.medal_price = to_decimal(medal_price, default=DEFAULT_MEDAL_PRICE)
        # 结算结果允许为负数，不能走 to_decimal 的非负回退
        self.processing_fee = Decimal(str(processing_fee or 0))
        self.wechat_fee = Decimal(str(wechat_fee or 0))
        self.certification_fee = Decimal(str(certification_fee or 0))
        self.total_fee = Decimal(str(total_fee or 0))
        self.medal_cost = Decimal(str(medal_cost or 0))
        self.host_settlement = Decimal(str(host_settlement or 0))
        self.total_income = Decimal(str(total_income or 0))
        self.is_settled = parse_bool(is_settled)
        self.created_at = parse_datetime(created_at)
        self.updated_at = parse_datetime(updated_at)

    @classmethod
    def from_input(cls, data):
        """从客户端提交的原始字段构建（不含派生字段和生命周期字段）"""
        data = normalize_tournament_input(data)
        return cls(**{field: data.get(field) for field in cls.RAW_FIELDS})

    @classmethod
    def from_row(cls, row):
        """从存储返回的行数据构建"""
        kwargs = {key: row.get(key) for key in cls.RAW_FIELDS + cls.DERIVED_FIELDS}
        kwargs['tournament_id'] = row.get('tournament_id')
        kwargs['is_settled'] = row.get('is_settled')
        kwargs['created_at'] = row.get('created_at')
        kwargs['updated_at'] = row.get('updated_at')
        return cls(**kwargs)

    def raw_fields(self):
        """当前原始字段，费用计算器的输入"""
        return {
            'tournament_name': self.tournament_name,
            'event_date': self.event_date,
            'participant_count': self.participant_count,
            'withdrawal_count': self.withdrawal_count,
            'total_revenue': self.total_revenue,
            'wechat_payment': self.wechat_payment,
            'refund_balance': self.refund_balance,
            'tournament_type': self.tournament_type.value if self.tournament_type else '',
            'is_certified': self.is_certified,
            'medal_count': self.medal_count,
            'medal_price': self.medal_price,
        }

    def derived_fields(self):
        return {field: getattr(self, field) for field in self.DERIVED_FIELDS}

    def apply_fees(self, fees):
        """写入费用计算器的输出"""
        for field in self.DERIVED_FIELDS:
            setattr(self, field, fees[field])
        return self

    def to_record(self):
        """存储用的完整字段（不含ID）"""
        record = self.raw_fields()
        record.update(self.derived_fields())
        record['is_settled'] = self.is_settled
        record['created_at'] = self.created_at
        record['updated_at'] = self.updated_at
        return record

    def to_dict(self):
        """转换为字典"""
        data = {'tournament_id': self.tournament_id}
        data.update(jsonable(self.to_record()))
        data['tournament_type_name'] = self.tournament_type.name if self.tournament_type else None
        return data


class TournamentQuery:
    """比赛查询条件：筛选谓词 + 排序 + 分页

    所有提供的筛选条件按 AND 组合；值为 None 的条件不生效。
    """

    SORTABLE_FIELDS = (
        'event_date',
        'created_at',
        'updated_at',
        'tournament_name',
        'total_revenue',
        'total_income',
        'participant_count',
    )

    def __init__(self, date_from=None, date_to=None, tournament_type=None,
                 is_certified=None, is_settled=None, search=None,
                 order_by=(('event_date', 'desc'),), skip=0, limit=None):
        self.date_from = date_from
        self.date_to = date_to
        self.tournament_type = tournament_type
        self.is_certified = is_certified
        self.is_settled = is_settled
        self.search = search or None
        self.order_by = tuple(self._check_order(order_by))
        self.skip = max(int(skip or 0), 0)
        self.limit = limit

    @classmethod
    def _check_order(cls, order_by):
        for field, direction in order_by:
            direction = direction.lower()
            if field not in cls.SORTABLE_FIELDS:
                raise ValidationError(f'无效的排序字段: {field}')
            if direction not in ('asc', 'desc'):
                raise ValidationError('排序方向必须是 asc 或 desc')
            yield field, direction

    @classmethod
    def from_filters(cls, filters, **kwargs):
        """从请求参数构建筛选条件，参数格式错误抛出 ValidationError"""
        filters = normalize_tournament_input(filters)
        errors = []

        date_from = date_to = None
        if filters.get('date_from'):
            date_from = parse_date(filters['date_from'])
            if date_from is None:
                errors.append('开始日期格式无效')
        if filters.get('date_to'):
            date_to = parse_date(filters['date_to'])
            if date_to is None:
                errors.append('结束日期格式无效')
        if date_from and date_to and date_from > date_to:
            errors.append('开始日期不能晚于结束日期')

        tournament_type = None
        if filters.get('tournament_type'):
            tournament_type = TournamentType.parse(filters['tournament_type'])
            if tournament_type is None:
                errors.append(f"无效的比赛类型: {filters['tournament_type']}")

        flags = {}
        for key, label in (('is_certified', '认证状态'), ('is_settled', '结算状态')):
            try:
                flags[key] = parse_optional_bool(filters.get(key))
            except ValueError:
                errors.append(f'无效的{label}筛选值')

        if errors:
            raise ValidationError(errors)

        search = (filters.get('search') or '').strip()
        return cls(date_from=date_from, date_to=date_to, tournament_type=tournament_type,
                   search=search, **flags, **kwargs)

    def without_paging(self):
        return TournamentQuery(
            date_from=self.date_from, date_to=self.date_to,
            tournament_type=self.tournament_type,
            is_certified=self.is_certified, is_settled=self.is_settled,
            search=self.search, order_by=self.order_by,
        )

    def matches(self, tournament):
        """判断单条记录是否满足全部筛选条件"""
        if self.date_from is not None:
            if tournament.event_date is None or tournament.event_date < self.date_from:
                return False
        if self.date_to is not None:
            if tournament.event_date is None or tournament.event_date > self.date_to:
                return False
        if self.tournament_type is not None and tournament.tournament_type != self.tournament_type:
            return False
        if self.is_certified is not None and tournament.is_certified != self.is_certified:
            return False
        if self.is_settled is not None and tournament.is_settled != self.is_settled:
            return False
        if self.search and self.search not in (tournament.tournament_name or ''):
            return False
        return True

    def sort(self, tournaments):
        """按 order_by 排序（稳定排序，从最后一个键开始）"""
        result = list(tournaments)
        for field, direction in reversed(self.order_by):
            present = [t for t in result if getattr(t, field) is not None]
            missing = [t for t in result if getattr(t, field) is None]
            present.sort(key=lambda t: getattr(t, field), reverse=(direction == 'desc'))
            result = present + missing
        return result

    def paginate(self, tournaments):
        end = None if self.limit is None else self.skip + self.limit
        return tournaments[self.skip:end]

    def describe(self):
        """用于日志和导出响应的筛选条件摘要"""
        return {
            'date_from': self.date_from.isoformat() if self.date_from else None,
            'date_to': self.date_to.isoformat() if self.date_to else None,
            'tournament_type': self.tournament_type.value if self.tournament_type else None,
            'is_certified': self.is_certified,
            'is_settled': self.is_settled,
            'search': self.search,
        }


# 数据库表结构定义
DATABASE_SCHEMA = {
    'tournaments': '''
        CREATE TABLE IF NOT EXISTS tournaments (
            tournament_id INT AUTO_INCREMENT PRIMARY KEY,
            tournament_name VARCHAR(200) NOT NULL COMMENT '比赛名称',
            event_date DATE NOT NULL COMMENT '举办日期',
            participant_count INT NOT NULL DEFAULT 0 COMMENT '参赛人数',
            withdrawal_count INT NOT NULL DEFAULT 0 COMMENT '退赛人数',
            total_revenue DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '流水总计',
            wechat_payment DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '微信支付',
            refund_balance DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '退款结余',
            tournament_type ENUM('协会机构', '高校联赛', '高校校园赛') NOT NULL COMMENT '比赛类型',
            is_certified BOOLEAN NOT NULL DEFAULT FALSE COMMENT '是否认证赛',
            medal_count INT NOT NULL DEFAULT 0 COMMENT '奖牌数量',
            medal_price DECIMAL(10,4) NOT NULL DEFAULT 18.0000 COMMENT '奖牌单价',
            processing_fee DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '手续费',
            wechat_fee DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '微信手续费',
            certification_fee DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '认证费',
            total_fee DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '总手续费',
            medal_cost DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '奖牌费用',
            host_settlement DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '主办结算费用',
            total_income DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '总收入',
            is_settled BOOLEAN NOT NULL DEFAULT FALSE COMMENT '是否结算',
            created_at DATETIME NOT NULL COMMENT '创建时间',
            updated_at DATETIME NOT NULL COMMENT '更新时间',
            INDEX idx_event_date (event_date),
            INDEX idx_created_at (created_at),
            INDEX idx_tournament_type (tournament_type),
            INDEX idx_is_settled (is_settled)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='比赛财务记录表';
    ''',
}
