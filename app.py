import logging
import os
import sys
import time

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from werkzeug.middleware.proxy_fix import ProxyFix

load_dotenv()

from config import config as config_map
from api import dashboard_bp, export_bp, tournaments_bp

logger = logging.getLogger(__name__)


def _init_default_store(app):
    from database import DatabaseManager

    db_manager = DatabaseManager(app.config['CONFIG_CLASS'])
    # 应用启动时进行一次数据库结构检查与迁移（只增量修复，不重建）
    try:
        db_manager.init_database(force_recreate=False)
        app.logger.info("数据库初始化成功")
    except Exception as e:
        # 记录错误但不阻止应用启动，请求时由存储层返回 store_unavailable
        app.logger.error(f"数据库初始化检查失败: {e}")
    return db_manager


def create_app(config_name=None, store=None):
    """创建应用

    Args:
        config_name: 配置名称，默认读取环境变量 APP_ENV
        store: 比赛记录存储协作方，未提供时使用 MySQL 的 DatabaseManager
    """
    app = Flask(__name__)
    env_name = (config_name or os.environ.get('APP_ENV', 'default')).lower()
    config_cls = config_map.get(env_name, config_map['default'])
    app.config.from_object(config_cls)
    app.config['CONFIG_CLASS'] = config_cls
    app.json.ensure_ascii = False

    if env_name == 'production' and not app.config.get('SECRET_KEY'):
        raise RuntimeError('SECRET_KEY environment variable is required in production')

    config_cls.init_app(app)
    app.logger.info(f"{app.config['SYSTEM_NAME']} v{app.config['SYSTEM_VERSION']} 启动 (环境: {env_name})")

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    @app.before_request
    def start_request_timer():
        g.request_start_time = time.perf_counter()

    @app.after_request
    def log_request_time(response):
        start_time = getattr(g, 'request_start_time', None)
        if start_time is not None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            app.logger.info(
                "Request %s %s took %.2fms, status %d",
                request.method,
                request.path,
                duration_ms,
                response.status_code,
            )
        return response

    if store is None:
        store = _init_default_store(app)
    app.extensions['tournament_store'] = store

    app.register_blueprint(tournaments_bp, url_prefix='/api/tournaments')
    app.register_blueprint(dashboard_bp, url_prefix='/api')
    app.register_blueprint(export_bp, url_prefix='/api')

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'success': False, 'message': '接口不存在', 'error_type': 'not_found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'message': '不支持的请求方法', 'error_type': 'method_not_allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'success': False, 'message': '服务器内部错误', 'error_type': 'internal_error'}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    try:
        app.run(
            host=app.config.get('HOST', '0.0.0.0'),
            port=app.config.get('PORT', 5000),
            debug=app.config.get('DEBUG', True)
        )
    except KeyboardInterrupt:
        sys.exit(0)
