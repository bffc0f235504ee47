#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 费用计算

创建、更新、预览、导出都调用同一个 calculate_fees，这里是金额的唯一来源。
所有金额使用 Decimal 精确计算，最后按两位小数四舍五入（ROUND_HALF_UP）。
"""

from decimal import Decimal, ROUND_HALF_UP

from models import DEFAULT_MEDAL_PRICE, TournamentType
from utils.helpers import normalize_tournament_input, parse_bool, to_decimal, to_int

CENT = Decimal('0.01')

# 手续费费率
PROCESSING_FEE_RATES = {
    TournamentType.ASSOCIATION: Decimal('0.0108'),        # 1.08%
    TournamentType.UNIVERSITY_LEAGUE: Decimal('0.0108'),  # 1.08%
    TournamentType.CAMPUS: Decimal('0.004'),              # 0.4%
}
WECHAT_FEE_RATE = Decimal('0.006')                        # 0.6%
CERTIFICATION_FEE_PER_PARTICIPANT = Decimal('1')
MINIMUM_TOTAL_FEE = Decimal('100')                        # 仅协会机构


def round_money(value):
    """四舍五入到分"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_fees(data):
    """根据原始比赛数据计算全部派生金额

    缺失字段使用默认值（奖牌单价默认18，其余为0），不会抛出异常。

    Returns:
        dict: processing_fee, wechat_fee, certification_fee, total_fee,
              medal_cost, host_settlement, total_income（均为两位小数的 Decimal）
    """
    data = normalize_tournament_input(data)

    total_revenue = to_decimal(data.get('total_revenue'))
    participant_count = to_int(data.get('participant_count'))
    tournament_type = TournamentType.parse(data.get('tournament_type'))
    is_certified = parse_bool(data.get('is_certified'))
    medal_count = to_int(data.get('medal_count'))
    medal_price = to_decimal(data.get('medal_price'), default=DEFAULT_MEDAL_PRICE)

    processing_fee = total_revenue * PROCESSING_FEE_RATES.get(tournament_type, Decimal('0'))
    wechat_fee = total_revenue * WECHAT_FEE_RATE

    certification_fee = Decimal('0')
    if tournament_type is TournamentType.ASSOCIATION and is_certified:
        certification_fee = participant_count * CERTIFICATION_FEE_PER_PARTICIPANT

    total_fee = processing_fee + wechat_fee + certification_fee
    # 最低收费
    if tournament_type is TournamentType.ASSOCIATION and total_fee < MINIMUM_TOTAL_FEE:
        total_fee = MINIMUM_TOTAL_FEE

    total_fee = round_money(total_fee)
    medal_cost = round_money(medal_count * medal_price)
    # 结算额与保存的总手续费、奖牌费用保持一致
    host_settlement = total_revenue - total_fee - medal_cost
    # 用未取整的原始值相加
    total_income = certification_fee + processing_fee

    return {
        'processing_fee': round_money(processing_fee),
        'wechat_fee': round_money(wechat_fee),
        'certification_fee': round_money(certification_fee),
        'total_fee': total_fee,
        'medal_cost': medal_cost,
        'host_settlement': round_money(host_settlement),
        'total_income': round_money(total_income),
    }
