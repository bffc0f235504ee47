#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 业务异常定义
"""


class TournamentError(Exception):
    """业务异常基类，HTTP 层据此返回带标记的失败结果"""

    error_type = 'error'
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {
            'success': False,
            'message': self.message,
            'error_type': self.error_type,
        }


class ValidationError(TournamentError):
    """输入校验失败，不会触达计算器和存储"""

    error_type = 'validation_error'
    status_code = 400

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))

    def to_dict(self):
        result = super().to_dict()
        result['errors'] = self.errors
        return result


class NotFoundError(TournamentError):
    """记录不存在"""

    error_type = 'not_found'
    status_code = 404

    def __init__(self, tournament_id):
        self.tournament_id = tournament_id
        super().__init__('比赛记录不存在')


class StoreError(TournamentError):
    """存储协作方失败的公共基类"""

    error_type = 'store_error'
    status_code = 503


class StoreUnavailableError(StoreError):
    """存储不可达或执行失败"""

    error_type = 'store_unavailable'


class DataError(StoreError):
    """存储返回了格式异常的数据"""

    error_type = 'data_error'
