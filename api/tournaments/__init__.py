from flask import Blueprint
import logging


tournaments_bp = Blueprint('tournaments', __name__)

logger = logging.getLogger(__name__)

# 每个具体路由实现在本包下的独立模块中
from . import (
    get_tournaments,
    get_tournament,
    create_tournament,
    update_tournament,
    delete_tournament,
    toggle_settlement,
    preview_fees,
)

__all__ = ['tournaments_bp']
