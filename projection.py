"""
Projection Engine - month-by-month revenue, cost and LH2 share per brand.

Syndication brands earn from three streams (programmatic, syndication, MSN
video) driven by cumulative headcount; discover brands earn from traffic x
RPM with an optional RPM uplift from a transition month. Both run the same
tiered revenue-share allocation, which credits LH2 with a slab-dependent
share of the growth above each brand's pre-partnership baseline (or of the
total, when the brand has no baseline at all).

Everything here is a pure function of a PlanState; nothing is cached.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from plan import (
    DISCOVER, MONTHS, SYNDICATION, WORKING_DAYS,
    Brand, DiscoverConfig, HiringPlan, PlanState, RevShareSlab, SyndicationConfig,
    _num, month_index, seasonality_for,
)

log = logging.getLogger('lh2')

ADDITIVE_FIELDS = ('total_revenue', 'total_cost', 'lh2_revenue', 'lh2_cost', 'lh2_net')


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Allocation:
    """LH2 split of one brand-month."""
    growth_multiple: float
    share: float
    auto_mode: bool
    lh2_revenue: float
    lh2_cost: float

    @property
    def lh2_net(self) -> float:
        return self.lh2_revenue - self.lh2_cost


@dataclass
class MonthlyProjection:
    """One brand-month. `streams` sums to total_revenue (success-weighted)."""
    month: str
    streams: Dict[str, float]
    total_revenue: float
    total_cost: float
    growth_multiple: float
    share: float
    lh2_revenue: float
    lh2_cost: float
    lh2_net: float
    drivers: Dict[str, float] = field(default_factory=dict)

    def to_dict(self, digits: int = None) -> dict:
        def r(v):
            return round(v, digits) if digits is not None else v
        d = {
            'month': self.month,
            'totalRevenue': r(self.total_revenue),
            'totalCost': r(self.total_cost),
            'growthMultiple': round(self.growth_multiple, 2),
            'sharePct': round(self.share * 100, 2),
            'lh2Revenue': r(self.lh2_revenue),
            'lh2Cost': r(self.lh2_cost),
            'lh2Net': r(self.lh2_net),
        }
        d['streams'] = {k: r(v) for k, v in self.streams.items()}
        d['drivers'] = dict(self.drivers)
        return d


@dataclass
class BrandProjection:
    """Ten monthly projections for one brand plus their sums."""
    name: str
    kind: str
    months: List[MonthlyProjection]

    @property
    def totals(self) -> Dict[str, float]:
        totals = {f: sum(getattr(m, f) for m in self.months) for f in ADDITIVE_FIELDS}
        streams: Dict[str, float] = {}
        for m in self.months:
            for k, v in m.streams.items():
                streams[k] = streams.get(k, 0.0) + v
        totals['streams'] = streams
        return totals

    def series(self, metric: str) -> List[float]:
        return [getattr(m, metric) for m in self.months]

    def to_dict(self, digits: int = None) -> dict:
        totals = self.totals
        streams = totals.pop('streams')
        if digits is not None:
            totals = {k: round(v, digits) for k, v in totals.items()}
            streams = {k: round(v, digits) for k, v in streams.items()}
        return {
            'brand': self.name,
            'kind': self.kind,
            'months': [m.to_dict(digits) for m in self.months],
            'totals': dict(totals, streams=streams),
        }


# ---------------------------------------------------------------------------
# Revenue-share resolution + allocation
# ---------------------------------------------------------------------------

def is_auto_mode(base_revenue: float, base_cost: float) -> bool:
    """No established baseline: the top tier applies to the whole figure."""
    return _num(base_revenue) == 0 and _num(base_cost) == 0


def growth_multiple(total_revenue: float, base_revenue: float) -> float:
    base_revenue = _num(base_revenue)
    return _num(total_revenue) / base_revenue if base_revenue > 0 else 0.0


def resolve_share(growth: float, slabs: Sequence[RevShareSlab],
                  base_revenue: float, base_cost: float) -> float:
    """Share fraction for a growth multiple.

    Auto mode returns the last slab's share whatever the growth. Otherwise the
    first slab whose threshold is >= growth wins, falling through to the last
    slab. Thresholds are taken in the order given and never sorted.
    """
    if not slabs:
        return 0.0
    if is_auto_mode(base_revenue, base_cost):
        return slabs[-1].share
    for slab in slabs:
        if growth <= slab.threshold:
            return slab.share
    return slabs[-1].share


def allocate_lh2(total_revenue: float, total_cost: float,
                 base_revenue: float, base_cost: float,
                 slabs: Sequence[RevShareSlab]) -> Allocation:
    """Split one brand-month between LH2 and the baseline business."""
    total_revenue = _num(total_revenue)
    total_cost = _num(total_cost)
    base_revenue = _num(base_revenue)
    base_cost = _num(base_cost)

    growth = growth_multiple(total_revenue, base_revenue)
    share = resolve_share(growth, slabs, base_revenue, base_cost)
    auto = is_auto_mode(base_revenue, base_cost)
    if auto:
        lh2_revenue = total_revenue * share
        lh2_cost = total_cost * share
    else:
        # Only growth above the baseline is shared; shrinkage floors at zero
        lh2_revenue = max(0.0, total_revenue - base_revenue) * share
        lh2_cost = max(0.0, total_cost - base_cost) * share
    return Allocation(growth_multiple=growth, share=share, auto_mode=auto,
                      lh2_revenue=lh2_revenue, lh2_cost=lh2_cost)


# ---------------------------------------------------------------------------
# Hiring accrual
# ---------------------------------------------------------------------------

def cumulative_headcount(base_count: float, deltas: Sequence[float], month_idx: int) -> float:
    """Base headcount plus every delta up to and including `month_idx`."""
    return _num(base_count) + sum(_num(d) for d in list(deltas or ())[:month_idx + 1])


# ---------------------------------------------------------------------------
# Syndication
# ---------------------------------------------------------------------------

def project_syndication(config: SyndicationConfig, hiring: HiringPlan,
                        seasonality: Dict[str, float]) -> List[MonthlyProjection]:
    c = config
    success = c.success_probability / 100
    results = []
    for i, month in enumerate(MONTHS):
        season = seasonality_for(seasonality, month)

        authors = cumulative_headcount(c.authors, hiring.authors, i)
        editors = cumulative_headcount(c.editors, hiring.editors, i)
        video_editors = cumulative_headcount(c.video_editors, hiring.video_editors, i)

        monthly_articles = authors * c.articles_per_author_per_day * WORKING_DAYS

        programmatic = (monthly_articles * c.sessions_per_article / 1000) * c.programmatic_rpm * season
        synd_views = monthly_articles * c.views_per_article + c.extra_views[i]
        syndication = (synd_views / 1000) * c.blended_rpm * season
        engaged_views = (video_editors * c.videos_per_editor_per_day * WORKING_DAYS
                         * c.engaged_views_per_video + c.extra_engaged_views[i])
        video = (engaged_views / 1000) * c.video_rpm * season

        streams = {
            'programmatic': programmatic * success,
            'syndication': syndication * success,
            'video': video * success,
        }
        total_revenue = (programmatic + syndication + video) * success

        direct_cost = (authors * c.author_salary + editors * c.editor_salary
                       + video_editors * c.video_editor_salary)
        total_cost = direct_cost * (1 + c.indirect_costs_pct / 100)

        alloc = allocate_lh2(total_revenue, total_cost, c.base_revenue, c.base_costs,
                             c.rev_share_slabs)
        results.append(MonthlyProjection(
            month=month,
            streams=streams,
            total_revenue=total_revenue,
            total_cost=total_cost,
            growth_multiple=alloc.growth_multiple,
            share=alloc.share,
            lh2_revenue=alloc.lh2_revenue,
            lh2_cost=alloc.lh2_cost,
            lh2_net=alloc.lh2_net,
            drivers={
                'authors': authors,
                'editors': editors,
                'videoEditors': video_editors,
                'monthlyArticles': monthly_articles,
                'syndicationViews': synd_views,
                'engagedViews': engaged_views,
                'seasonality': season,
            },
        ))
    return results


# ---------------------------------------------------------------------------
# Discover
# ---------------------------------------------------------------------------

def project_discover(config: DiscoverConfig,
                     seasonality: Dict[str, float]) -> List[MonthlyProjection]:
    c = config
    success = c.success_probability / 100
    transition_idx = month_index(c.transition_month)
    results = []
    for i, month in enumerate(MONTHS):
        traffic = c.base_traffic * (1 + c.traffic_growth[i] / 100)
        # an uplift of exactly 1.0 counts as none
        uplifted = i >= transition_idx and c.rpm_uplift != 1.0
        rpm = c.base_rpm * c.rpm_uplift if uplifted else c.base_rpm
        effective_rpm = rpm * seasonality_for(seasonality, month)

        revenue = (traffic / 1000) * effective_rpm * success
        total_cost = c.base_cost + c.direct_costs[i]

        alloc = allocate_lh2(revenue, total_cost, c.base_revenue, c.base_costs_lh2,
                             c.rev_share_slabs)
        results.append(MonthlyProjection(
            month=month,
            streams={'discover': revenue},
            total_revenue=revenue,
            total_cost=total_cost,
            growth_multiple=alloc.growth_multiple,
            share=alloc.share,
            lh2_revenue=alloc.lh2_revenue,
            lh2_cost=alloc.lh2_cost,
            lh2_net=alloc.lh2_net,
            drivers={
                'traffic': traffic,
                'effectiveRpm': effective_rpm,
                'hasUplift': uplifted,
            },
        ))
    return results


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

def project_brand(brand: Brand, seasonality: Dict[str, float]) -> BrandProjection:
    """Run the projection that matches the brand's kind."""
    if brand.kind == SYNDICATION:
        months = project_syndication(brand.config, brand.hiring, seasonality)
    elif brand.kind == DISCOVER:
        months = project_discover(brand.config, seasonality)
    else:
        raise ValueError(f"Unknown brand kind: {brand.kind!r}")
    return BrandProjection(name=brand.name, kind=brand.kind, months=months)


def project_plan(plan: PlanState) -> Dict[Tuple[str, str], BrandProjection]:
    """Project every brand in the plan, keyed by (kind, name) in plan order.

    A name may appear under both kinds, so the name alone is not a key.
    """
    projections = {(b.kind, b.name): project_brand(b, plan.seasonality) for b in plan.brands}
    log.debug("Projected %d brands (plan v%d)", len(projections), plan.version)
    return projections
