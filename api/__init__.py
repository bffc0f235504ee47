#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
赛事财务结算系统 - API接口模块
"""

from .tournaments import tournaments_bp
from .dashboard import dashboard_bp
from .export import export_bp

__version__ = '1.0.0'

# 导出所有蓝图
__all__ = ['tournaments_bp', 'dashboard_bp', 'export_bp']
