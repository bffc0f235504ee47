from flask import jsonify, request

from tournament_manager import TournamentManager
from utils.decorators import handle_tournament_errors, log_action, validate_json
from utils.helpers import get_store

from . import tournaments_bp


@tournaments_bp.route('/<int:tournament_id>', methods=['PUT'])
@log_action('更新比赛')
@handle_tournament_errors
@validate_json
def api_update_tournament(tournament_id):
    data = request.get_json()
    tournament = TournamentManager(get_store()).update_tournament(tournament_id, data)
    return jsonify({
        'success': True,
        'message': '比赛更新成功',
        'data': tournament.to_dict(),
    })
