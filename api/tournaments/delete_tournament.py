from flask import jsonify

from tournament_manager import TournamentManager
from utils.decorators import handle_tournament_errors, log_action
from utils.helpers import get_store

from . import tournaments_bp


@tournaments_bp.route('/<int:tournament_id>', methods=['DELETE'])
@log_action('删除比赛')
@handle_tournament_errors
def api_delete_tournament(tournament_id):
    TournamentManager(get_store()).delete_tournament(tournament_id)
    return jsonify({'success': True, 'data': {'deleted': True}})
