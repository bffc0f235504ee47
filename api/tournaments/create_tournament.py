from flask import jsonify, request

from tournament_manager import TournamentManager
from utils.decorators import handle_tournament_errors, log_action, validate_json
from utils.helpers import get_store

from . import tournaments_bp


@tournaments_bp.route('', methods=['POST'])
@log_action('创建比赛')
@handle_tournament_errors
@validate_json
def api_create_tournament():
    """创建比赛，派生费用字段由服务端计算，客户端传入的同名字段会被忽略"""
    data = request.get_json()
    tournament = TournamentManager(get_store()).create_tournament(data)
    return jsonify({
        'success': True,
        'message': '比赛创建成功',
        'data': tournament.to_dict(),
    }), 201
