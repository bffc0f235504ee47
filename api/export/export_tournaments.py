from datetime import datetime
from io import BytesIO

from flask import Response, current_app, jsonify, request, send_file

from models import TournamentQuery
from tournament_statistics import TournamentStatistics
from utils.decorators import handle_tournament_errors, log_action
from utils.errors import ValidationError
from utils.export_handler import TournamentExporter
from utils.helpers import get_store

from . import export_bp

EXPORT_FORMATS = ('json', 'csv', 'xlsx')


def _build_export_response(filters, export_format, filename_suffix):
    if export_format not in EXPORT_FORMATS:
        raise ValidationError(f'不支持的导出格式: {export_format}')

    query = TournamentQuery.from_filters(filters)
    tournaments = TournamentStatistics(get_store()).export_set(query)

    now = datetime.now()
    filename = f"{current_app.config.get('EXPORT_FILENAME_PREFIX', 'tournaments')}{filename_suffix}_{now:%Y-%m-%d}"
    exporter = TournamentExporter()

    if export_format == 'csv':
        csv_text = exporter.to_csv(tournaments)
        return Response(
            csv_text.encode('utf-8'),
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename={filename}.csv'},
        )

    if export_format == 'xlsx':
        return send_file(
            BytesIO(exporter.to_xlsx(tournaments)),
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            as_attachment=True,
            download_name=f'{filename}.xlsx',
        )

    return jsonify({
        'success': True,
        'data': {
            'tournaments': [t.to_dict() for t in tournaments],
            'total': len(tournaments),
            'filters': query.describe(),
            'export_time': now.isoformat(),
        },
    })


@export_bp.route('/export', methods=['GET'])
@log_action('导出比赛数据')
@handle_tournament_errors
def api_export_tournaments():
    """按查询参数筛选导出
    可选参数：date_from, date_to, tournament_type, is_certified, is_settled, search,
    format（json/csv/xlsx，默认json）
    """
    filters = request.args.to_dict()
    export_format = (filters.pop('format', None) or 'json').lower()
    return _build_export_response(filters, export_format, '')


@export_bp.route('/export', methods=['POST'])
@log_action('导出比赛数据')
@handle_tournament_errors
def api_export_tournaments_post():
    """JSON 请求体：{"filters": {...}, "format": "csv"}"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError('请求体必须是JSON对象')
    filters = data.get('filters') or {}
    if not isinstance(filters, dict):
        raise ValidationError('filters 必须是对象')
    export_format = (data.get('format') or 'json').lower()
    return _build_export_response(filters, export_format, '_export')
