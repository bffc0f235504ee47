from flask import jsonify, request

from tournament_manager import TournamentManager
from utils.decorators import handle_tournament_errors, log_action, validate_json
from utils.errors import ValidationError
from utils.helpers import get_store, parse_optional_bool

from . import tournaments_bp


@tournaments_bp.route('/<int:tournament_id>/settlement', methods=['PATCH'])
@log_action('切换结算状态')
@handle_tournament_errors
@validate_json
def api_toggle_settlement(tournament_id):
    data = request.get_json()
    raw_value = data.get('is_settled', data.get('isSettled'))
    try:
        is_settled = parse_optional_bool(raw_value)
    except ValueError:
        is_settled = None
    if is_settled is None:
        raise ValidationError('缺少或无效的结算状态 is_settled')

    tournament = TournamentManager(get_store()).toggle_settlement(tournament_id, is_settled)
    return jsonify({'success': True, 'data': tournament.to_dict()})
