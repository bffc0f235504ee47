import logging
from decimal import Decimal

from mysql.connector import Error

from models import Tournament, TournamentQuery
from utils.errors import StoreUnavailableError


logger = logging.getLogger(__name__)


class TournamentDbMixin:
    """比赛记录相关数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器

    对外提供存储协作方接口: insert / get / query / count / update / delete / sum_fields
    """

    TABLE = 'tournaments'

    # 可写入的列（tournament_id 由数据库自增生成）
    WRITABLE_COLUMNS = Tournament.RAW_FIELDS + Tournament.DERIVED_FIELDS + (
        'is_settled',
        'created_at',
        'updated_at',
    )

    SUMMABLE_COLUMNS = ('total_revenue', 'total_income', 'participant_count',
                        'total_fee', 'host_settlement', 'medal_cost')

    # 历史库可能缺少的列
    MIGRATION_COLUMNS = (
        ('withdrawal_count', "INT NOT NULL DEFAULT 0 COMMENT '退赛人数'"),
        ('refund_balance', "DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '退款结余'"),
        ('medal_price', "DECIMAL(10,4) NOT NULL DEFAULT 18.0000 COMMENT '奖牌单价'"),
        ('total_income', "DECIMAL(12,2) NOT NULL DEFAULT 0.00 COMMENT '总收入'"),
        ('is_settled', "BOOLEAN NOT NULL DEFAULT FALSE COMMENT '是否结算'"),
    )

    # ==================== 比赛记录相关操作 ====================

    def _build_tournament_where(self, query):
        """构建比赛查询的 WHERE 子句和参数（复用于 count / list / sum）"""
        where_clauses = []
        params = []

        if query is None:
            return "", params

        if query.date_from is not None:
            where_clauses.append("event_date >= %s")
            params.append(query.date_from)
        if query.date_to is not None:
            where_clauses.append("event_date <= %s")
            params.append(query.date_to)
        if query.tournament_type is not None:
            where_clauses.append("tournament_type = %s")
            params.append(query.tournament_type.value)
        if query.is_certified is not None:
            where_clauses.append("is_certified = %s")
            params.append(query.is_certified)
        if query.is_settled is not None:
            where_clauses.append("is_settled = %s")
            params.append(query.is_settled)
        if query.search:
            where_clauses.append("tournament_name LIKE %s")
            params.append(f"%{self._escape_like(query.search)}%")

        where_sql = (" WHERE " + " AND ".join(where_clauses)) if where_clauses else ""
        return where_sql, params

    @staticmethod
    def _escape_like(value):
        return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')

    def _build_order_clause(self, query):
        # 字段和方向已经在 TournamentQuery 中按白名单校验
        parts = [f"{field} {direction.upper()}" for field, direction in query.order_by]
        parts.append("tournament_id DESC")
        return " ORDER BY " + ", ".join(parts)

    def insert(self, tournament):
        """插入比赛记录，返回新记录ID"""
        record = tournament.to_record()
        columns = [c for c in self.WRITABLE_COLUMNS if c in record]
        placeholders = ', '.join(['%s'] * len(columns))
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"INSERT INTO {self.TABLE} ({', '.join(columns)}) VALUES ({placeholders})",
                    tuple(record[c] for c in columns),
                )
                tournament_id = cursor.lastrowid
                conn.commit()
                return tournament_id
        except Error as e:
            logger.error(f"创建比赛记录失败: {e}")
            raise StoreUnavailableError(f'创建比赛记录失败: {e}') from e

    def get(self, tournament_id):
        """根据ID获取比赛记录，不存在返回 None"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(
                    f"SELECT * FROM {self.TABLE} WHERE tournament_id = %s",
                    (tournament_id,),
                )
                row = cursor.fetchone()
                return Tournament.from_row(row) if row else None
        except Error as e:
            logger.error(f"获取比赛记录失败: {e}")
            raise StoreUnavailableError(f'获取比赛记录失败: {e}') from e

    def query(self, query=None):
        """按查询条件获取比赛记录列表"""
        query = query or TournamentQuery()
        where_sql, params = self._build_tournament_where(query)
        sql = f"SELECT * FROM {self.TABLE}" + where_sql + self._build_order_clause(query)
        if query.limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params.extend([query.limit, query.skip])
        elif query.skip:
            # MySQL 的 OFFSET 必须跟在 LIMIT 之后
            sql += " LIMIT 18446744073709551615 OFFSET %s"
            params.append(query.skip)

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(sql, params)
                return [Tournament.from_row(row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"查询比赛记录失败: {e}")
            raise StoreUnavailableError(f'查询比赛记录失败: {e}') from e

    def count(self, query=None):
        """统计满足条件的记录数"""
        where_sql, params = self._build_tournament_where(query)
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(f"SELECT COUNT(*) AS cnt FROM {self.TABLE}" + where_sql, params)
                row = cursor.fetchone() or {}
                return int(row.get('cnt') or 0)
        except Error as e:
            logger.error(f"统计比赛记录失败: {e}")
            raise StoreUnavailableError(f'统计比赛记录失败: {e}') from e

    def update(self, tournament_id, fields):
        """按ID更新部分或全部字段，返回是否找到记录"""
        columns = [c for c in self.WRITABLE_COLUMNS if c in fields]
        if not columns:
            return self.get(tournament_id) is not None

        set_sql = ', '.join(f"{c} = %s" for c in columns)
        params = [fields[c] for c in columns]
        params.append(tournament_id)
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"UPDATE {self.TABLE} SET {set_sql} WHERE tournament_id = %s",
                    params,
                )
                updated = cursor.rowcount
                conn.commit()
                return updated > 0
        except Error as e:
            logger.error(f"更新比赛记录失败: {e}")
            raise StoreUnavailableError(f'更新比赛记录失败: {e}') from e

    def delete(self, tournament_id):
        """按ID删除记录，返回是否删除成功"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"DELETE FROM {self.TABLE} WHERE tournament_id = %s",
                    (tournament_id,),
                )
                deleted = cursor.rowcount
                conn.commit()
                return deleted > 0
        except Error as e:
            logger.error(f"删除比赛记录失败: {e}")
            raise StoreUnavailableError(f'删除比赛记录失败: {e}') from e

    def sum_fields(self, query, fields):
        """数据库原生聚合：返回各字段合计及记录数（键 'count'）"""
        unknown = [f for f in fields if f not in self.SUMMABLE_COLUMNS]
        if unknown:
            raise ValueError(f"不支持聚合的字段: {', '.join(unknown)}")

        where_sql, params = self._build_tournament_where(query)
        select_sql = ", ".join(f"COALESCE(SUM({f}), 0) AS {f}" for f in fields)
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(
                    f"SELECT COUNT(*) AS cnt, {select_sql} FROM {self.TABLE}" + where_sql,
                    params,
                )
                row = cursor.fetchone() or {}
        except Error as e:
            logger.error(f"聚合比赛记录失败: {e}")
            raise StoreUnavailableError(f'聚合比赛记录失败: {e}') from e

        result = {f: Decimal(str(row.get(f) or 0)) for f in fields}
        result['count'] = int(row.get('cnt') or 0)
        return result
