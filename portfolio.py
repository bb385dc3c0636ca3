"""
Portfolio rollup - brand projections summed into category and portfolio P&L.

Sums are purely additive over a long-form pandas frame (one row per
brand-month); nothing is rounded here. Per-brand series are kept unsummed
for drill-down.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd

from plan import CATEGORIES, DISCOVER, MONTHS, SYNDICATION, Overhead
from projection import ADDITIVE_FIELDS, BrandProjection

log = logging.getLogger('lh2')

PNL_FIELDS = [
    'syndication_revenue', 'syndication_lh2_net',
    'discover_revenue', 'discover_lh2_net',
    'total_revenue', 'total_lh2_net', 'overhead', 'net_profit',
]


@dataclass
class PortfolioRollup:
    """Category and portfolio totals per month and over the ten months."""
    per_month: List[dict]
    totals: dict
    category_totals: Dict[str, Dict[str, List[float]]]
    per_brand: Dict[str, Dict[str, Dict[str, List[float]]]] = field(default_factory=dict)

    def brand_series(self, category: str, metric: str = 'total_revenue') -> List[dict]:
        """Drill-down rows for one category: [{brand, values, total}, ...]."""
        rows = []
        for brand, series in self.per_brand.get(category, {}).items():
            values = list(series.get(metric, []))
            rows.append({'brand': brand, 'values': values, 'total': sum(values)})
        return rows

    def pnl_frame(self) -> pd.DataFrame:
        """Monthly P&L as a DataFrame indexed by month, with a Total row."""
        df = pd.DataFrame(self.per_month).set_index('month')
        df.loc['Total'] = pd.Series(self.totals)
        return df

    def to_dict(self, digits: int = None) -> dict:
        def r(v):
            return round(v, digits) if digits is not None else v
        return {
            'perMonth': [{k: (r(v) if k != 'month' else v) for k, v in row.items()}
                         for row in self.per_month],
            'totals': {k: r(v) for k, v in self.totals.items()},
            'categoryTotals': {
                cat: {metric: [r(v) for v in vals] for metric, vals in metrics.items()}
                for cat, metrics in self.category_totals.items()
            },
            'perBrand': {
                cat: {brand: {metric: [r(v) for v in vals] for metric, vals in series.items()}
                      for brand, series in brands.items()}
                for cat, brands in self.per_brand.items()
            },
        }


# ---------------------------------------------------------------------------
# Frame building
# ---------------------------------------------------------------------------

def projection_frame(projections: Dict[Tuple[str, str], BrandProjection]) -> pd.DataFrame:
    """Long-form frame: brand, category, month_idx, month + additive fields."""
    rows = []
    for bp in projections.values():
        for i, m in enumerate(bp.months):
            row = {'brand': bp.name, 'category': bp.kind, 'month_idx': i, 'month': m.month}
            for f in ADDITIVE_FIELDS:
                row[f] = getattr(m, f)
            rows.append(row)
    return pd.DataFrame(rows, columns=['brand', 'category', 'month_idx', 'month', *ADDITIVE_FIELDS])


def _category_month_totals(frame: pd.DataFrame) -> pd.DataFrame:
    """Sum per (category, month_idx); categories without brands are zero rows."""
    index = pd.MultiIndex.from_product([CATEGORIES, range(len(MONTHS))],
                                       names=['category', 'month_idx'])
    if frame.empty:
        return pd.DataFrame(0.0, index=index, columns=list(ADDITIVE_FIELDS))
    grouped = frame.groupby(['category', 'month_idx'])[list(ADDITIVE_FIELDS)].sum()
    return grouped.reindex(index, fill_value=0.0).astype(float)


# ---------------------------------------------------------------------------
# Rollup
# ---------------------------------------------------------------------------

def rollup(projections: Dict[Tuple[str, str], BrandProjection],
           overhead: Overhead = None) -> PortfolioRollup:
    """Aggregate brand projections into category and portfolio totals."""
    overhead = overhead if overhead is not None else Overhead()
    oh = overhead.total

    cat = _category_month_totals(projection_frame(projections))
    synd = cat.loc[SYNDICATION]
    disc = cat.loc[DISCOVER]

    per_month = []
    for i, month in enumerate(MONTHS):
        synd_rev = float(synd.at[i, 'total_revenue'])
        synd_net = float(synd.at[i, 'lh2_net'])
        disc_rev = float(disc.at[i, 'total_revenue'])
        disc_net = float(disc.at[i, 'lh2_net'])
        total_rev = synd_rev + disc_rev
        total_net = synd_net + disc_net
        net_profit = total_net - oh
        per_month.append({
            'month': month,
            'syndication_revenue': synd_rev,
            'syndication_lh2_net': synd_net,
            'discover_revenue': disc_rev,
            'discover_lh2_net': disc_net,
            'total_revenue': total_rev,
            'total_lh2_net': total_net,
            'overhead': oh,
            'net_profit': net_profit,
            'margin': net_profit / total_rev * 100 if total_rev > 0 else 0.0,
        })

    totals = {f: sum(row[f] for row in per_month) for f in PNL_FIELDS}
    totals['margin'] = (totals['net_profit'] / totals['total_revenue'] * 100
                        if totals['total_revenue'] > 0 else 0.0)

    category_totals = {
        c: {f: [float(v) for v in cat.loc[c][f].tolist()] for f in ADDITIVE_FIELDS}
        for c in CATEGORIES
    }

    per_brand: Dict[str, Dict[str, Dict[str, List[float]]]] = {c: {} for c in CATEGORIES}
    for bp in projections.values():
        per_brand.setdefault(bp.kind, {})[bp.name] = {f: bp.series(f) for f in ADDITIVE_FIELDS}

    log.debug("Rollup: %d brands, total revenue %.0f, LH2 net %.0f",
              len(projections), totals['total_revenue'], totals['total_lh2_net'])
    return PortfolioRollup(per_month=per_month, totals=totals,
                           category_totals=category_totals, per_brand=per_brand)
