#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - 数据库连接和操作
"""

import logging
import time
from contextlib import contextmanager

import mysql.connector
from mysql.connector import Error, pooling
from mysql.connector.constants import ClientFlag

from config import Config
from models import DATABASE_SCHEMA
from db_modules.db_tournaments import TournamentDbMixin

logger = logging.getLogger(__name__)


class TimedCursorWrapper:
    def __init__(self, cursor, slow_threshold_ms=50):
        self._cursor = cursor
        self._slow_threshold_ms = slow_threshold_ms

    def execute(self, operation, params=None):
        start = time.perf_counter()
        try:
            return self._cursor.execute(operation, params)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms >= self._slow_threshold_ms:
                logger.warning(
                    "Slow query took %.1f ms: %s; params=%s",
                    duration_ms,
                    operation,
                    params,
                )

    def __getattr__(self, item):
        return getattr(self._cursor, item)


_connection_pools = {}


def _get_connection_pool(config):
    """获取数据库连接池（按池名缓存）"""
    pool_config = config.copy()
    # 移除连接池配置参数，避免传递给连接池构造函数
    pool_size = pool_config.pop('pool_size', 5)
    pool_name = pool_config.pop('pool_name', 'tournament_pool')

    if pool_name not in _connection_pools:
        try:
            _connection_pools[pool_name] = pooling.MySQLConnectionPool(
                pool_name=pool_name,
                pool_size=pool_size,
                **pool_config
            )
            logger.info(f"数据库连接池创建成功，池大小: {pool_size}")
        except Error as e:
            logger.error(f"创建数据库连接池失败，将回退到直连模式: {e}")
            return None
    return _connection_pools[pool_name]


class DatabaseManager(TournamentDbMixin):
    """数据库管理器（比赛记录存储协作方的 MySQL 实现）"""

    def __init__(self, config=Config):
        self.slow_threshold_ms = config.SLOW_QUERY_THRESHOLD_MS
        self.config = {
            'host': config.DB_HOST,
            'port': config.DB_PORT,
            'user': config.DB_USER,
            'password': config.DB_PASSWORD,
            'database': config.DB_NAME,
            'charset': 'utf8mb4',
            'collation': 'utf8mb4_unicode_ci',
            'autocommit': False,
            'raise_on_warnings': False,
            'connection_timeout': config.DB_CONNECTION_TIMEOUT,
            # UPDATE 的 rowcount 返回匹配行数而非实际变更行数
            'client_flags': [ClientFlag.FOUND_ROWS],
        }
        self.pool_config = dict(
            self.config,
            pool_size=config.DB_POOL_SIZE,
            pool_name=config.DB_POOL_NAME,
            pool_reset_session=True,
        )
        self.pool = None

    def _ensure_pool(self):
        if self.pool is None:
            self.pool = _get_connection_pool(self.pool_config)
        return self.pool

    @contextmanager
    def get_connection(self):
        """获取数据库连接的上下文管理器"""
        connection = None
        try:
            pool = self._ensure_pool()
            if pool:
                connection = pool.get_connection()
            else:
                connection = mysql.connector.connect(**self.config)

            original_cursor = connection.cursor

            def timed_cursor(*args, **kwargs):
                base_cursor = original_cursor(*args, **kwargs)
                return TimedCursorWrapper(base_cursor, slow_threshold_ms=self.slow_threshold_ms)

            connection.cursor = timed_cursor

            yield connection
        except Error as e:
            logger.error(f"数据库连接错误: {e}")
            if connection:
                connection.rollback()
            raise
        finally:
            if connection and connection.is_connected():
                connection.close()

    def init_database(self, force_recreate=False):
        """初始化数据库和表

        Args:
            force_recreate (bool): 是否强制重建表（删除现有表）
        """
        try:
            # 首先连接到MySQL服务器（不指定数据库）
            temp_config = self.config.copy()
            temp_config.pop('database', None)

            with mysql.connector.connect(**temp_config) as connection:
                cursor = connection.cursor()
                try:
                    cursor.execute(
                        f"CREATE DATABASE IF NOT EXISTS {self.config['database']} "
                        "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
                    )
                except Error as e:
                    # 忽略错误码1007（数据库已存在）
                    if '1007' not in str(e):
                        logger.warning(f"创建数据库时出现警告: {e}")

            with self.get_connection() as connection:
                cursor = connection.cursor()

                if force_recreate:
                    logger.info("强制重建模式：删除现有表...")
                    for table_name in reversed(list(DATABASE_SCHEMA.keys())):
                        cursor.execute(f"DROP TABLE IF EXISTS {table_name}")
                        logger.info(f"删除表 {table_name}")

                for table_name, schema in DATABASE_SCHEMA.items():
                    cursor.execute(schema)

                if not force_recreate:
                    self._migrate_database(cursor)

                connection.commit()
                logger.info("数据库表检查完成")

        except Error as e:
            logger.error(f"数据库初始化失败: {e}")
            raise

    def _migrate_database(self, cursor):
        """迁移数据库结构（只增量补列，不重建）"""
        for column, definition in self.MIGRATION_COLUMNS:
            cursor.execute(f"SHOW COLUMNS FROM tournaments LIKE '{column}'")
            if not cursor.fetchone():
                cursor.execute(f"ALTER TABLE tournaments ADD COLUMN {column} {definition}")
                logger.info(f"添加了{column}列到tournaments表")
