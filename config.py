#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 配置文件
"""

import logging
import os

from dotenv import load_dotenv

# 加载环境变量
load_dotenv()


class Config:
    """应用配置类"""

    # Flask 基础配置
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # 数据库配置
    DB_HOST = os.environ.get('DB_HOST') or 'localhost'
    DB_PORT = int(os.environ.get('DB_PORT') or 3306)
    DB_USER = os.environ.get('DB_USER') or 'tournament'
    DB_PASSWORD = os.environ.get('DB_PASSWORD') or ''
    DB_NAME = os.environ.get('DB_NAME') or 'tournament_finance'
    # 数据库连接池配置
    DB_POOL_NAME = os.environ.get('DB_POOL_NAME') or 'tournament_pool'
    DB_POOL_SIZE = int(os.environ.get('DB_POOL_SIZE') or 5)
    DB_CONNECTION_TIMEOUT = int(os.environ.get('DB_CONNECTION_TIMEOUT') or 10)
    SLOW_QUERY_THRESHOLD_MS = int(os.environ.get('SLOW_QUERY_THRESHOLD_MS') or 50)

    # 服务器配置
    HOST = os.environ.get('HOST') or '0.0.0.0'
    PORT = int(os.environ.get('PORT') or 5000)
    DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'

    # 分页配置
    ITEMS_PER_PAGE = 20
    MAX_PAGE_SIZE = 100

    # 仪表盘配置
    DASHBOARD_RECENT_LIMIT = 10        # type=recent 默认条数
    DASHBOARD_FULL_RECENT_LIMIT = 5    # 完整仪表盘中的最近比赛条数

    # 导出配置
    EXPORT_FILENAME_PREFIX = 'tournaments'

    # 日志配置
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = os.environ.get('LOG_FILE') or 'tournament_finance.log'

    # 系统配置
    SYSTEM_NAME = '赛事财务结算系统'
    SYSTEM_VERSION = '1.0.0'

    @classmethod
    def init_app(cls, app):
        """初始化应用配置（日志）"""
        handlers = [logging.StreamHandler()]
        if cls.LOG_FILE:
            handlers.append(logging.FileHandler(cls.LOG_FILE, encoding='utf-8'))
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL.upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers,
        )
        app.logger.setLevel(getattr(logging, cls.LOG_LEVEL.upper(), logging.INFO))


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'tournament-finance-dev-secret-key'
    DB_NAME = os.environ.get('DB_NAME') or 'tournament_finance_dev'


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # 生产环境数据库配置（从环境变量获取）
    DB_HOST = os.environ.get('PROD_DB_HOST') or 'localhost'
    DB_USER = os.environ.get('PROD_DB_USER') or 'tournament_user'
    DB_PASSWORD = os.environ.get('PROD_DB_PASSWORD') or ''
    DB_NAME = os.environ.get('PROD_DB_NAME') or 'tournament_finance_prod'


class TestingConfig(Config):
    """测试环境配置"""
    TESTING = True
    SECRET_KEY = 'tournament-finance-test-secret-key'
    DB_NAME = 'tournament_finance_test'
    LOG_FILE = None


# 配置映射
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
