from flask import Blueprint


dashboard_bp = Blueprint('dashboard', __name__)

# 将具体路由实现拆分到独立模块中
from . import dashboard_statistics

__all__ = ['dashboard_bp']
