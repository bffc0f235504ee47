"""
导出处理工具类
用于把比赛记录导出为 CSV / Excel，以及把导出的 CSV 重新解析为原始字段
"""

from io import BytesIO, StringIO

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from models import DEFAULT_MEDAL_PRICE
from utils.helpers import format_date, format_datetime, parse_number

CSV_BOM = '\ufeff'

# (表头, 取值函数)
EXPORT_COLUMNS = (
    ('比赛名称', lambda t: t.tournament_name or ''),
    ('举办日期', lambda t: format_date(t.event_date)),
    ('参赛人数', lambda t: t.participant_count or 0),
    ('退赛人数', lambda t: t.withdrawal_count or 0),
    ('流水总计', lambda t: float(t.total_revenue or 0)),
    ('微信支付', lambda t: float(t.wechat_payment or 0)),
    ('退款结余', lambda t: float(t.refund_balance or 0)),
    ('手续费', lambda t: float(t.processing_fee or 0)),
    ('微信手续费', lambda t: float(t.wechat_fee or 0)),
    ('认证费', lambda t: float(t.certification_fee or 0)),
    ('总手续费', lambda t: float(t.total_fee or 0)),
    ('奖牌数量', lambda t: t.medal_count or 0),
    ('奖牌费用', lambda t: float(t.medal_cost or 0)),
    ('主办结算费用', lambda t: float(t.host_settlement or 0)),
    ('总收入', lambda t: float(t.total_income or 0)),
    ('比赛类型', lambda t: t.tournament_type.value if t.tournament_type else ''),
    ('是否认证赛', lambda t: '是' if t.is_certified else '否'),
    ('是否结算', lambda t: '已结算' if t.is_settled else '未结算'),
    ('创建时间', lambda t: format_datetime(t.created_at)),
)

EXPORT_HEADERS = [header for header, _ in EXPORT_COLUMNS]

MONEY_HEADERS = ('流水总计', '微信支付', '退款结余', '手续费', '微信手续费', '认证费',
                 '总手续费', '奖牌费用', '主办结算费用', '总收入')


class TournamentExporter:

    def __init__(self, sheet_name='比赛财务记录'):
        self.sheet_name = sheet_name

    def to_dataframe(self, tournaments):
        rows = [[getter(t) for _, getter in EXPORT_COLUMNS] for t in tournaments]
        return pd.DataFrame(rows, columns=EXPORT_HEADERS)

    def to_csv(self, tournaments):
        """导出 CSV 文本（带 BOM 以便 Excel 识别中文），无记录时返回空字符串"""
        tournaments = list(tournaments)
        if not tournaments:
            return ''
        df = self.to_dataframe(tournaments)
        return CSV_BOM + df.to_csv(index=False, float_format='%.2f', lineterminator='\n')

    def to_xlsx(self, tournaments):
        """导出 Excel 文件内容（bytes）"""
        wb = Workbook()
        ws = wb.active
        ws.title = self.sheet_name

        for col, header in enumerate(EXPORT_HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal='center')
            cell.fill = PatternFill(start_color='CCCCCC', end_color='CCCCCC', fill_type='solid')

        for row, tournament in enumerate(tournaments, 2):
            for col, (header, getter) in enumerate(EXPORT_COLUMNS, 1):
                cell = ws.cell(row=row, column=col, value=getter(tournament))
                if header in MONEY_HEADERS:
                    cell.number_format = '0.00'

        # 调整列宽
        for column in ws.columns:
            max_length = max(len(str(cell.value or '')) for cell in column)
            ws.column_dimensions[column[0].column_letter].width = min(max_length + 4, 40)

        output = BytesIO()
        wb.save(output)
        return output.getvalue()

    def parse_csv(self, csv_text):
        """
        解析导出的 CSV，还原每条记录的原始字段。
        导出文件中没有奖牌单价，按 奖牌费用 / 奖牌数量 反推，数量为0时使用默认单价。
        """
        if csv_text.startswith(CSV_BOM):
            csv_text = csv_text[len(CSV_BOM):]
        if not csv_text.strip():
            return []

        df = pd.read_csv(StringIO(csv_text), dtype=str, keep_default_na=False)
        missing_columns = [col for col in EXPORT_HEADERS if col not in df.columns]
        if missing_columns:
            raise ValueError(f'缺少必需的列: {", ".join(missing_columns)}')

        records = []
        for _, row in df.iterrows():
            medal_count = int(parse_number(row['奖牌数量']) or 0)
            medal_cost = parse_number(row['奖牌费用']) or 0
            medal_price = medal_cost / medal_count if medal_count else DEFAULT_MEDAL_PRICE
            records.append({
                'tournament_name': row['比赛名称'],
                'event_date': row['举办日期'],
                'participant_count': int(parse_number(row['参赛人数']) or 0),
                'withdrawal_count': int(parse_number(row['退赛人数']) or 0),
                'total_revenue': parse_number(row['流水总计']),
                'wechat_payment': parse_number(row['微信支付']),
                'refund_balance': parse_number(row['退款结余']),
                'tournament_type': row['比赛类型'],
                'is_certified': row['是否认证赛'] == '是',
                'medal_count': medal_count,
                'medal_price': medal_price,
            })
        return records
