from flask import Blueprint


export_bp = Blueprint('export', __name__)

from . import export_tournaments

__all__ = ['export_bp']
