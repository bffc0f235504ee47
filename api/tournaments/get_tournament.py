from flask import jsonify

from tournament_manager import TournamentManager
from utils.decorators import handle_tournament_errors, log_action
from utils.helpers import get_store

from . import tournaments_bp


@tournaments_bp.route('/<int:tournament_id>', methods=['GET'])
@log_action('获取比赛详情')
@handle_tournament_errors
def api_get_tournament(tournament_id):
    tournament = TournamentManager(get_store()).get_tournament(tournament_id)
    return jsonify({'success': True, 'data': tournament.to_dict()})
