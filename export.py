"""
Excel export of a plan projection - portfolio P&L, per-brand monthly tables,
and the assumptions behind them.
"""

import logging
import math
from datetime import datetime
from typing import Dict, List, Tuple

from plan import DISCOVER, MONTHS, SYNDICATION, PlanState
from portfolio import PortfolioRollup
from projection import BrandProjection

log = logging.getLogger('lh2')

PNL_ROWS = [
    ('Syndication Total Rev', 'syndication_revenue'),
    ('Syndication LH2 Net', 'syndication_lh2_net'),
    ('Discover Total Rev', 'discover_revenue'),
    ('Discover LH2 Net', 'discover_lh2_net'),
    ('Total Revenue', 'total_revenue'),
    ('Total LH2 Net', 'total_lh2_net'),
    ('Overhead', 'overhead'),
    ('Net Profit', 'net_profit'),
]

SYND_COLUMNS = [
    ('Authors', lambda m: m.drivers.get('authors', 0), '0'),
    ('Editors', lambda m: m.drivers.get('editors', 0), '0'),
    ('Video Editors', lambda m: m.drivers.get('videoEditors', 0), '0'),
    ('Programmatic', lambda m: m.streams.get('programmatic', 0), '#,##0'),
    ('Syndication', lambda m: m.streams.get('syndication', 0), '#,##0'),
    ('Video', lambda m: m.streams.get('video', 0), '#,##0'),
]

DISC_COLUMNS = [
    ('Traffic', lambda m: m.drivers.get('traffic', 0), '#,##0'),
    ('Eff. RPM', lambda m: m.drivers.get('effectiveRpm', 0), '0.00'),
]

COMMON_COLUMNS = [
    ('Total Rev', lambda m: m.total_revenue, '#,##0'),
    ('Total Cost', lambda m: m.total_cost, '#,##0'),
    ('Growth', lambda m: m.growth_multiple, '0.00"x"'),
    ('LH2 %', lambda m: m.share, '0%'),
    ('LH2 Rev', lambda m: m.lh2_revenue, '#,##0'),
    ('LH2 Cost', lambda m: m.lh2_cost, '#,##0'),
    ('LH2 Net', lambda m: m.lh2_net, '#,##0'),
]

# Columns summed in the per-brand total row
_SUMMED = {'Programmatic', 'Syndication', 'Video', 'Total Rev', 'Total Cost',
           'LH2 Rev', 'LH2 Cost', 'LH2 Net'}


def export_projection_excel(plan: PlanState, projections: Dict[Tuple[str, str], BrandProjection],
                            rollup: PortfolioRollup, output_path: str,
                            title: str = 'LH2 AOP Projection'):
    """Write the projection workbook to a path or binary stream. Returns output_path."""
    import openpyxl
    from openpyxl.styles import Font, PatternFill
    from openpyxl.utils import get_column_letter

    hdr = Font(bold=True, size=12)
    bf = Font(bold=True)
    mf = '#,##0'
    blue = PatternFill(start_color='DBEAFE', end_color='DBEAFE', fill_type='solid')
    green = PatternFill(start_color='D1FAE5', end_color='D1FAE5', fill_type='solid')
    gray = PatternFill(start_color='F3F4F6', end_color='F3F4F6', fill_type='solid')

    def _header_row(ws, row, labels, fill=blue):
        for i, label in enumerate(labels):
            c = ws.cell(row=row, column=1 + i, value=label)
            c.font = bf
            c.fill = fill

    wb = openpyxl.Workbook()

    # ====================================================================
    # Sheet 1: Overview
    # ====================================================================
    ws = wb.active
    ws.title = 'Overview'
    ws['A1'] = title
    ws['A1'].font = Font(bold=True, size=16)
    ws['A2'] = f'Generated: {datetime.now().strftime("%Y-%m-%d %H:%M")}'
    ws['A2'].font = Font(size=10, color='666666')

    r = 4
    _header_row(ws, r, ['Line', *MONTHS, 'Total'])
    for label, key in PNL_ROWS:
        r += 1
        c = ws.cell(row=r, column=1, value=label)
        if key in ('total_lh2_net', 'net_profit'):
            c.font = bf
        for i, row in enumerate(rollup.per_month):
            ws.cell(row=r, column=2 + i, value=round(row[key], 2)).number_format = mf
        c = ws.cell(row=r, column=2 + len(MONTHS), value=round(rollup.totals[key], 2))
        c.number_format = mf
        c.font = bf
        c.fill = gray
    r += 1
    ws.cell(row=r, column=1, value='Margin %')
    for i, row in enumerate(rollup.per_month):
        ws.cell(row=r, column=2 + i, value=row['margin'] / 100).number_format = '0.0%'
    ws.cell(row=r, column=2 + len(MONTHS), value=rollup.totals['margin'] / 100).number_format = '0.0%'

    ws.column_dimensions['A'].width = 24
    for col in range(2, len(MONTHS) + 3):
        ws.column_dimensions[get_column_letter(col)].width = 12

    # ====================================================================
    # Sheets 2-3: per-brand tables
    # ====================================================================
    for kind, sheet_title, columns, fill in (
        (SYNDICATION, 'Syndication', SYND_COLUMNS + COMMON_COLUMNS, blue),
        (DISCOVER, 'Discover', DISC_COLUMNS + COMMON_COLUMNS, green),
    ):
        ws = wb.create_sheet(sheet_title)
        r = 1
        for bp in projections.values():
            if bp.kind != kind:
                continue
            ws.cell(row=r, column=1, value=bp.name).font = hdr
            r += 1
            _header_row(ws, r, ['Month'] + [c[0] for c in columns], fill)
            for m in bp.months:
                r += 1
                ws.cell(row=r, column=1, value=m.month)
                for j, (_, getter, fmt) in enumerate(columns):
                    ws.cell(row=r, column=2 + j, value=getter(m)).number_format = fmt
            r += 1
            ws.cell(row=r, column=1, value='Total').font = bf
            for j, (label, getter, fmt) in enumerate(columns):
                if label in _SUMMED:
                    c = ws.cell(row=r, column=2 + j, value=sum(getter(m) for m in bp.months))
                    c.number_format = fmt
                    c.font = bf
                    c.fill = gray
            r += 2
        ws.column_dimensions['A'].width = 18
        for col in range(2, len(columns) + 2):
            ws.column_dimensions[get_column_letter(col)].width = 13

    # ====================================================================
    # Sheet 4: Assumptions
    # ====================================================================
    ws = wb.create_sheet('Assumptions')
    ws['A1'] = 'RPM Seasonality'
    ws['A1'].font = hdr
    _header_row(ws, 2, list(MONTHS))
    for i, month in enumerate(MONTHS):
        ws.cell(row=3, column=1 + i, value=plan.seasonality.get(month, 1.0)).number_format = '0.00'

    ws['A5'] = 'Monthly Overhead'
    ws['A5'].font = hdr
    r = 5
    for label, value in (('Salary', plan.overhead.salary), ('Tech', plan.overhead.tech),
                         ('Admin', plan.overhead.admin), ('Total', plan.overhead.total)):
        r += 1
        ws.cell(row=r, column=1, value=label)
        ws.cell(row=r, column=2, value=value).number_format = mf

    r += 2
    ws.cell(row=r, column=1, value='Revenue Share Slabs').font = hdr
    r += 1
    _header_row(ws, r, ['Brand', 'Type', 'Base Revenue', 'Base Costs', 'Slabs'])
    for brand in plan.brands:
        r += 1
        cfg = brand.config
        base_costs = cfg.base_costs if brand.kind == SYNDICATION else cfg.base_costs_lh2
        ws.cell(row=r, column=1, value=brand.name)
        ws.cell(row=r, column=2, value=brand.kind)
        ws.cell(row=r, column=3, value=cfg.base_revenue).number_format = mf
        ws.cell(row=r, column=4, value=base_costs).number_format = mf
        ws.cell(row=r, column=5, value=_format_slabs(cfg.rev_share_slabs))
    ws.column_dimensions['A'].width = 20
    ws.column_dimensions['E'].width = 48

    wb.save(output_path)
    wb.close()
    log.info("Projection exported to %s (%d brands)",
             output_path if isinstance(output_path, str) else 'stream', len(projections))
    return output_path


def _format_slabs(slabs) -> str:
    parts: List[str] = []
    prev = 0.0
    for s in slabs:
        if math.isinf(s.threshold):
            parts.append(f'>{prev:g}x {s.share:.0%}')
        else:
            parts.append(f'<={s.threshold:g}x {s.share:.0%}')
            prev = s.threshold
    return ', '.join(parts)
