from flask import current_app, jsonify, request

from tournament_statistics import TournamentStatistics
from utils.decorators import handle_tournament_errors, log_action
from utils.errors import ValidationError
from utils.helpers import get_store, jsonable

from . import dashboard_bp


def _recent_to_dict(tournaments):
    return [t.to_dict() for t in tournaments]


@dashboard_bp.route('/dashboard', methods=['GET'])
@log_action('获取仪表盘统计信息')
@handle_tournament_errors
def api_dashboard():
    """仪表盘数据
    查询参数 type：
    - full（默认）: 总体统计 + 本月统计 + 最近比赛
    - stats: 日期范围统计，可选 date_from / date_to
    - monthly: 指定月份统计，需要 year / month
    - recent: 最近比赛，可选 limit
    """
    statistics = TournamentStatistics(get_store())
    summary_type = (request.args.get('type') or 'full').strip().lower()

    if summary_type == 'stats':
        data = statistics.range_statistics(
            date_from=request.args.get('date_from') or request.args.get('dateFrom'),
            date_to=request.args.get('date_to') or request.args.get('dateTo'),
        )
    elif summary_type == 'monthly':
        year = request.args.get('year')
        month = request.args.get('month')
        if not year or not month:
            raise ValidationError('缺少年份或月份参数')
        data = statistics.monthly_statistics(year, month)
    elif summary_type == 'recent':
        limit = request.args.get('limit') or current_app.config.get('DASHBOARD_RECENT_LIMIT', 10)
        data = _recent_to_dict(statistics.recent_tournaments(limit))
    elif summary_type == 'full':
        data = statistics.full_dashboard(
            recent_limit=current_app.config.get('DASHBOARD_FULL_RECENT_LIMIT', 5))
        data['recent_tournaments'] = _recent_to_dict(data['recent_tournaments'])
    else:
        raise ValidationError(f'无效的统计类型: {summary_type}')

    return jsonify({
        'success': True,
        'data': jsonable(data),
    })
