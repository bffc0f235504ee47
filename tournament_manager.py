#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 比赛记录管理模块
"""

import logging
from datetime import datetime

from models import Tournament, TournamentQuery
from utils.errors import NotFoundError, ValidationError
from utils.fee_calculator import calculate_fees
from utils.helpers import normalize_tournament_input, paginate_params
from utils.validators import validate_tournament_data

logger = logging.getLogger(__name__)


class TournamentManager:
    """比赛记录管理器，存储协作方由调用方显式传入"""

    def __init__(self, store):
        self.store = store

    def _build_from_input(self, data):
        data = normalize_tournament_input(data)
        errors = validate_tournament_data(data)
        if errors:
            raise ValidationError(errors)
        tournament = Tournament.from_input(data)
        tournament.apply_fees(calculate_fees(tournament.raw_fields()))
        return tournament

    def get_tournament(self, tournament_id):
        """根据ID获取比赛"""
        tournament = self.store.get(tournament_id)
        if tournament is None:
            raise NotFoundError(tournament_id)
        return tournament

    def list_tournaments(self, page=1, limit=20, sort='event_date', order='desc', max_limit=100):
        """分页获取比赛列表"""
        try:
            page, limit, skip = paginate_params(page, limit, default_limit=20, max_limit=max_limit)
        except ValueError as e:
            raise ValidationError(str(e))

        query = TournamentQuery(
            order_by=((sort or 'event_date', (order or 'desc').lower()),),
            skip=skip,
            limit=limit,
        )
        tournaments = self.store.query(query)
        total = self.store.count()
        logger.info(f"成功获取{len(tournaments)}条记录，总计{total}条")
        return {
            'tournaments': tournaments,
            'total': total,
            'page': page,
            'limit': limit,
        }

    def create_tournament(self, data):
        """创建新比赛：校验 -> 计算费用 -> 保存"""
        tournament = self._build_from_input(data)
        now = datetime.now()
        tournament.is_settled = False
        tournament.created_at = now
        tournament.updated_at = now

        tournament.tournament_id = self.store.insert(tournament)
        logger.info(
            f"创建比赛 {tournament.tournament_name}(ID:{tournament.tournament_id}), "
            f"总手续费 {tournament.total_fee}, 主办结算 {tournament.host_settlement}"
        )
        return tournament

    def update_tournament(self, tournament_id, data):
        """更新比赛信息：原始字段整体替换并重新计算全部派生字段"""
        tournament = self._build_from_input(data)
        self.get_tournament(tournament_id)

        fields = tournament.raw_fields()
        fields.update(tournament.derived_fields())
        fields['updated_at'] = datetime.now()

        if not self.store.update(tournament_id, fields):
            raise NotFoundError(tournament_id)
        logger.info(f"更新比赛(ID:{tournament_id})，已重新计算费用")
        return self.get_tournament(tournament_id)

    def delete_tournament(self, tournament_id):
        """删除比赛"""
        if not self.store.delete(tournament_id):
            raise NotFoundError(tournament_id)
        logger.info(f"删除比赛(ID:{tournament_id})")
        return True

    def toggle_settlement(self, tournament_id, is_settled):
        """切换结算状态，只修改 is_settled 和 updated_at，不触发重新计算"""
        if not isinstance(is_settled, bool):
            raise ValidationError('结算状态必须是布尔值')
        fields = {'is_settled': is_settled, 'updated_at': datetime.now()}
        if not self.store.update(tournament_id, fields):
            raise NotFoundError(tournament_id)
        logger.info(f"比赛(ID:{tournament_id}) 结算状态切换为 {is_settled}")
        return self.get_tournament(tournament_id)


def preview_fees(data):
    """提交前预览费用，不保存"""
    return calculate_fees(data)
