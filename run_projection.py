#!/usr/bin/env python3
"""
Print the portfolio P&L for a plan and optionally export it to Excel.

Usage:
    python run_projection.py                          # plan from the state store
    python run_projection.py --state plan.json        # plan from a JSON blob
    python run_projection.py --brand Inquisitr        # add one brand's monthly detail
    python run_projection.py --xlsx projection.xlsx   # also write the workbook
"""

import argparse
import json
import logging
import sys

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
log = logging.getLogger('lh2')

from dotenv import load_dotenv
load_dotenv()

import pandas as pd

import db
import validator
from export import export_projection_excel
from plan import PlanState
from portfolio import rollup
from projection import project_plan


def load_blob(state_path: str = '') -> dict:
    if state_path:
        with open(state_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    if not db.init_db():
        log.error("No state store available; pass --state")
        sys.exit(1)
    return db.load_state()


def brand_frame(projection) -> pd.DataFrame:
    """Monthly table for one brand, one column per figure."""
    rows = []
    for m in projection.months:
        row = {'month': m.month}
        row.update(m.streams)
        row.update({
            'total_revenue': m.total_revenue,
            'total_cost': m.total_cost,
            'growth_x': m.growth_multiple,
            'share_pct': m.share * 100,
            'lh2_revenue': m.lh2_revenue,
            'lh2_cost': m.lh2_cost,
            'lh2_net': m.lh2_net,
        })
        rows.append(row)
    return pd.DataFrame(rows).set_index('month')


def main(argv=None):
    parser = argparse.ArgumentParser(description='LH2 AOP portfolio projection')
    parser.add_argument('--state', default='', help='Plan JSON blob (default: state store)')
    parser.add_argument('--brand', default='', help='Print monthly detail for this brand')
    parser.add_argument('--xlsx', default='', help='Write the projection workbook here')
    args = parser.parse_args(argv)

    blob = load_blob(args.state)
    plan = PlanState.from_dict(blob)
    projections = project_plan(plan)
    result = rollup(projections, plan.overhead)

    with pd.option_context('display.width', 200, 'display.max_columns', 20,
                           'display.float_format', '{:,.0f}'.format):
        print(result.pnl_frame().T)
        if args.brand:
            # a name can exist under both kinds; show each match
            matches = [bp for (_, name), bp in projections.items() if name == args.brand]
            if not matches:
                log.error("Unknown brand: %s", args.brand)
                return 1
            for bp in matches:
                print(f'\n{bp.name} ({bp.kind})')
                print(brand_frame(bp))

    issues = validator.run_all_checks(plan, blob)
    for issue in issues.issues:
        print(f'[{issue.severity.upper()}] {issue.message}')

    if args.xlsx:
        export_projection_excel(plan, projections, result, args.xlsx)
    return 0


if __name__ == '__main__':
    sys.exit(main())
