from flask import jsonify, request

from tournament_manager import preview_fees
from utils.decorators import handle_tournament_errors, log_action, validate_json
from utils.helpers import jsonable

from . import tournaments_bp


@tournaments_bp.route('/preview', methods=['POST'])
@log_action('预览费用')
@handle_tournament_errors
@validate_json
def api_preview_fees():
    """提交前预览费用（与保存时使用同一计算逻辑），不做持久化"""
    fees = preview_fees(request.get_json())
    return jsonify({'success': True, 'data': jsonable(fees)})
