#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 装饰器（日志、错误处理等）
"""

import logging
import time
from functools import wraps

from flask import jsonify, request

from utils.errors import StoreError, TournamentError

logger = logging.getLogger(__name__)


def validate_json(f):
    """JSON请求体验证装饰器"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not request.is_json:
            return jsonify({'success': False, 'message': '请求必须是JSON格式', 'error_type': 'validation_error'}), 400

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'success': False, 'message': 'JSON数据为空或格式错误', 'error_type': 'validation_error'}), 400

        return f(*args, **kwargs)
    return decorated_function


def log_action(action_name):
    """操作日志装饰器

    Args:
        action_name: 操作名称
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            client = request.remote_addr

            start_time = time.perf_counter()
            logger.info(f"客户端 {client} 开始执行操作: {action_name}")

            try:
                result = f(*args, **kwargs)

                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.info(f"客户端 {client} 完成操作: {action_name}, 耗时: {duration_ms:.1f} ms")

                return result

            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"客户端 {client} 执行操作失败: {action_name}, 耗时: {duration_ms:.1f} ms, 错误: {str(e)}"
                )
                raise

        return decorated_function
    return decorator


def handle_tournament_errors(f):
    """业务错误处理装饰器：把异常转换为带标记的失败结果"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except StoreError as e:
            logger.error(f"存储操作错误: {e.message}")
            return jsonify(e.to_dict()), e.status_code
        except TournamentError as e:
            logger.warning(f"请求处理失败({e.error_type}): {e.message}")
            return jsonify(e.to_dict()), e.status_code
        except Exception as e:
            logger.exception(f"服务器内部错误: {str(e)}")
            return jsonify({
                'success': False,
                'message': '服务器内部错误',
                'error_type': 'internal_error',
            }), 500

    return decorated_function
