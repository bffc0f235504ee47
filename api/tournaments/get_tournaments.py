from flask import current_app, jsonify, request

from tournament_manager import TournamentManager
from utils.decorators import handle_tournament_errors, log_action
from utils.helpers import get_store

from . import tournaments_bp


@tournaments_bp.route('', methods=['GET'])
@log_action('获取比赛列表')
@handle_tournament_errors
def api_get_tournaments():
    """获取比赛列表（分页）
    可选查询参数：
    - page: 第几页，默认1
    - limit: 每页数量，默认20，最多100
    - sort: 排序字段，默认 event_date
    - order: 排序方向 asc/desc，默认 desc
    """
    manager = TournamentManager(get_store())
    result = manager.list_tournaments(
        page=request.args.get('page', 1),
        limit=request.args.get('limit', current_app.config.get('ITEMS_PER_PAGE', 20)),
        sort=request.args.get('sort', 'event_date').strip(),
        order=request.args.get('order', 'desc').strip(),
        max_limit=current_app.config.get('MAX_PAGE_SIZE', 100),
    )

    return jsonify({
        'success': True,
        'data': {
            'tournaments': [t.to_dict() for t in result['tournaments']],
            'total': result['total'],
            'page': result['page'],
            'limit': result['limit'],
        },
    })
