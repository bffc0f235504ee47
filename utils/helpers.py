#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 辅助函数
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from flask import current_app

# 兼容前端的 camelCase 字段名
FIELD_ALIASES = {
    'tournamentName': 'tournament_name',
    'eventDate': 'event_date',
    'participantCount': 'participant_count',
    'withdrawalCount': 'withdrawal_count',
    'totalRevenue': 'total_revenue',
    'wechatPayment': 'wechat_payment',
    'refundBalance': 'refund_balance',
    'tournamentType': 'tournament_type',
    'isCertified': 'is_certified',
    'medalCount': 'medal_count',
    'medalPrice': 'medal_price',
    'isSettled': 'is_settled',
    'dateFrom': 'date_from',
    'dateTo': 'date_to',
}

TRUE_VALUES = ('true', '1', 'yes', 'y', 'on', '是', '已结算')
FALSE_VALUES = ('false', '0', 'no', 'n', 'off', '否', '未结算')


def normalize_tournament_input(data):
    """将输入字段统一为 snake_case，snake_case 同名字段优先"""
    if not data:
        return {}
    normalized = {}
    for key, value in data.items():
        target = FIELD_ALIASES.get(key, key)
        if target != key and target in data:
            continue
        normalized[target] = value
    return normalized


def to_decimal(value, default=Decimal('0')):
    """宽松地转换为 Decimal：缺失、无法解析、非有限值和负数都回退"""
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        if isinstance(value, float):
            result = Decimal(str(value))
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    if result < 0:
        return Decimal('0')
    return result


def to_int(value, default=0):
    result = to_decimal(value, default=None)
    if result is None:
        return default
    return int(result)


def parse_number(value):
    """严格解析数字，失败返回 None（用于校验）"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def parse_bool(value, default=False):
    """解析布尔值，兼容字符串形式和中文标记"""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return default


def parse_optional_bool(value):
    """筛选条件用：未提供时返回 None，表示不筛选"""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f'无效的布尔值: {value}')


def parse_datetime(date_str, format_str=None):
    """解析日期时间字符串（支持多种格式）"""
    if not date_str:
        return None

    if isinstance(date_str, datetime):
        return date_str

    if isinstance(date_str, date):
        return datetime(date_str.year, date_str.month, date_str.day)

    date_str = str(date_str).strip()

    if format_str:
        try:
            return datetime.strptime(date_str, format_str)
        except ValueError:
            return None

    formats = [
        '%Y-%m-%dT%H:%M:%S',      # ISO格式: 2024-06-01T10:00:00
        '%Y-%m-%dT%H:%M:%S.%f',   # ISO格式带微秒: 2024-06-01T10:00:00.000
        '%Y-%m-%dT%H:%M',         # ISO格式无秒: 2024-06-01T10:00
        '%Y-%m-%d %H:%M:%S',      # 标准格式: 2024-06-01 10:00:00
        '%Y-%m-%d %H:%M',         # 无秒: 2024-06-01 10:00
        '%Y-%m-%d',               # 仅日期: 2024-06-01
        '%Y/%m/%d',               # 斜杠格式: 2024/06/01
    ]

    # 处理时区标识符
    date_str_clean = date_str.replace('Z', '').replace('+00:00', '')

    for fmt in formats:
        try:
            return datetime.strptime(date_str_clean, fmt)
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(date_str_clean)
    except ValueError:
        pass

    return None


def parse_date(value):
    """解析举办日期，只保留日期部分"""
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def format_datetime(dt, format_str='%Y-%m-%d %H:%M'):
    """格式化日期时间"""
    if not dt:
        return ''

    if isinstance(dt, str):
        dt = parse_datetime(dt)
        if dt is None:
            return ''

    return dt.strftime(format_str)


def format_date(value, format_str='%Y-%m-%d'):
    """格式化日期"""
    if not value:
        return ''

    if isinstance(value, str):
        value = parse_date(value)
        if value is None:
            return ''

    if isinstance(value, datetime):
        value = value.date()

    return value.strftime(format_str)


def jsonable(value):
    """把 Decimal / 日期转换为 JSON 可序列化的值"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def paginate_params(page, limit, default_limit=20, max_limit=100):
    """规范化分页参数，返回 (page, limit, skip)"""
    try:
        page = int(page or 1)
        limit = int(limit or default_limit)
    except (TypeError, ValueError):
        raise ValueError('分页参数必须是数字')

    page = max(page, 1)
    limit = max(min(limit, max_limit), 1)
    return page, limit, (page - 1) * limit


def get_store():
    """获取当前应用注入的存储协作方"""
    return current_app.extensions['tournament_store']
