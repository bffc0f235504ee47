#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 比赛数据校验
"""

from models import TournamentType
from utils.helpers import normalize_tournament_input, parse_date, parse_number

# 字段 -> 错误提示中的中文名称
NON_NEGATIVE_FIELDS = (
    ('participant_count', '参赛人数'),
    ('withdrawal_count', '退赛人数'),
    ('total_revenue', '流水总计'),
    ('wechat_payment', '微信支付'),
    ('refund_balance', '退款结余'),
    ('medal_count', '奖牌数量'),
    ('medal_price', '奖牌单价'),
)

INTEGER_FIELDS = ('participant_count', 'withdrawal_count', 'medal_count')

# 小数位数上限，与数据库列精度一致
DECIMAL_PLACES = {
    'total_revenue': (2, '两'),
    'wechat_payment': (2, '两'),
    'refund_balance': (2, '两'),
    'medal_price': (4, '四'),
}


def validate_tournament_data(data):
    """校验比赛原始数据，返回错误信息列表（空列表表示通过）"""
    data = normalize_tournament_input(data)
    errors = []

    name = data.get('tournament_name')
    if not isinstance(name, str) or not name.strip():
        errors.append('比赛名称不能为空')

    event_date = data.get('event_date')
    if not event_date:
        errors.append('举办日期不能为空')
    elif parse_date(event_date) is None:
        errors.append('举办日期格式无效')

    for field, label in NON_NEGATIVE_FIELDS:
        value = parse_number(data.get(field))
        if value is None or value < 0:
            errors.append(f'{label}必须大于等于0')
        elif field in INTEGER_FIELDS and value != value.to_integral_value():
            errors.append(f'{label}必须是整数')
        elif field in DECIMAL_PLACES:
            places, places_text = DECIMAL_PLACES[field]
            if -value.normalize().as_tuple().exponent > places:
                errors.append(f'{label}最多{places_text}位小数')

    if TournamentType.parse(data.get('tournament_type')) is None:
        errors.append('请选择正确的比赛类型')

    return errors
