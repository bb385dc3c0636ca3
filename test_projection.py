"""
Tests for the projection engine:
  - resolve_share() slab lookup and auto mode
  - cumulative_headcount() accrual
  - allocate_lh2() incremental vs auto allocation
  - project_syndication() / project_discover() monthly models
"""

import os
import sys
from dataclasses import replace

import pytest

sys.path.insert(0, os.path.dirname(__file__))

from plan import (
    DEFAULT_REV_SHARE_SLABS, DISCOVER, MONTHS, SYNDICATION,
    Brand, DiscoverConfig, HiringPlan, PlanState, RevShareSlab, SyndicationConfig,
)
from projection import (
    allocate_lh2, cumulative_headcount, growth_multiple, project_brand,
    project_discover, project_plan, project_syndication, resolve_share,
)

FLAT = {}  # every month reads as seasonality 1.0
DEFAULT_SEASONALITY = {'Mar': 0.75, 'Nov': 1.25}


def _hiring(authors=None, editors=None, video_editors=None):
    zeros = tuple(0.0 for _ in MONTHS)
    return HiringPlan(
        authors=tuple(authors) if authors else zeros,
        editors=tuple(editors) if editors else zeros,
        video_editors=tuple(video_editors) if video_editors else zeros,
    )


# ---------------------------------------------------------------------------
# resolve_share()
# ---------------------------------------------------------------------------

class TestResolveShare:

    def test_auto_mode_returns_last_share(self):
        """No baseline revenue or cost: last slab's share whatever the growth."""
        for growth in (0, 0.5, 1.3, 2.5, 10, 1000):
            assert resolve_share(growth, DEFAULT_REV_SHARE_SLABS, 0, 0) == 0.50

    def test_auto_mode_uses_custom_last_share(self):
        slabs = (RevShareSlab(1.5, 0.1), RevShareSlab(float('inf'), 0.4))
        assert resolve_share(0, slabs, 0, 0) == 0.4

    def test_at_or_below_first_threshold(self):
        """Growth <= first threshold resolves to the first slab."""
        for growth in (0, 0.9, 1.3):
            assert resolve_share(growth, DEFAULT_REV_SHARE_SLABS, 1000, 500) == 0.0

    def test_threshold_is_inclusive(self):
        assert resolve_share(2.0, DEFAULT_REV_SHARE_SLABS, 1000, 500) == 0.20
        assert resolve_share(2.0001, DEFAULT_REV_SHARE_SLABS, 1000, 500) == 0.30

    def test_above_all_finite_thresholds(self):
        assert resolve_share(3.5, DEFAULT_REV_SHARE_SLABS, 1000, 500) == 0.50

    def test_falls_through_to_last_when_all_bounded(self):
        slabs = (RevShareSlab(1.0, 0.1), RevShareSlab(2.0, 0.2))
        assert resolve_share(5.0, slabs, 100, 0) == 0.2

    def test_non_ascending_first_match_wins(self):
        """Thresholds are taken in order, never sorted."""
        slabs = (RevShareSlab(3.0, 0.3), RevShareSlab(1.5, 0.1), RevShareSlab(float('inf'), 0.5))
        assert resolve_share(1.0, slabs, 100, 0) == 0.3

    def test_only_base_cost_set_is_not_auto(self):
        assert resolve_share(0, DEFAULT_REV_SHARE_SLABS, 0, 500) == 0.0

    def test_empty_slabs(self):
        assert resolve_share(2.0, (), 1000, 500) == 0.0


class TestGrowthMultiple:

    def test_ratio(self):
        assert growth_multiple(2500, 1000) == 2.5

    def test_zero_base_is_zero_not_inf(self):
        assert growth_multiple(2500, 0) == 0.0

    def test_non_numeric_inputs(self):
        assert growth_multiple('abc', 1000) == 0.0
        assert growth_multiple(100, None) == 0.0


# ---------------------------------------------------------------------------
# cumulative_headcount()
# ---------------------------------------------------------------------------

class TestCumulativeHeadcount:

    def test_inclusive_sum(self):
        deltas = [1, 0, 2, 0, 0, 0, 0, 0, 0, 0]
        assert cumulative_headcount(2, deltas, 0) == 3
        assert cumulative_headcount(2, deltas, 1) == 3
        assert cumulative_headcount(2, deltas, 2) == 5
        assert cumulative_headcount(2, deltas, 9) == 5

    def test_only_depends_on_earlier_months(self):
        a = [1, 1, 1, 0, 0, 0, 0, 0, 0, 0]
        b = [1, 1, 1, 9, -4, 7, 7, 7, 7, 7]
        for i in range(3):
            assert cumulative_headcount(1, a, i) == cumulative_headcount(1, b, i)

    def test_negative_deltas_are_not_clamped(self):
        assert cumulative_headcount(1, [-3] + [0] * 9, 0) == -2

    def test_missing_deltas(self):
        assert cumulative_headcount(4, None, 5) == 4
        assert cumulative_headcount(4, [1, 1], 9) == 6


# ---------------------------------------------------------------------------
# allocate_lh2()
# ---------------------------------------------------------------------------

class TestAllocateLh2:

    def test_auto_mode_scenario(self):
        """No baseline: share applies to the total figures."""
        a = allocate_lh2(1000, 600, 0, 0, DEFAULT_REV_SHARE_SLABS)
        assert a.auto_mode
        assert a.lh2_revenue == pytest.approx(500)
        assert a.lh2_cost == pytest.approx(300)
        assert a.lh2_net == pytest.approx(200)

    def test_tiered_scenario(self):
        """2.5x growth lands in the 30% slab; only the increment is shared."""
        a = allocate_lh2(2500, 1200, 1000, 500, DEFAULT_REV_SHARE_SLABS)
        assert a.growth_multiple == pytest.approx(2.5)
        assert a.share == pytest.approx(0.30)
        assert a.lh2_revenue == pytest.approx(450)
        assert a.lh2_cost == pytest.approx(210)
        assert a.lh2_net == pytest.approx(240)

    def test_decline_floors_at_zero(self):
        slabs = (RevShareSlab(float('inf'), 0.5),)
        a = allocate_lh2(800, 300, 1000, 500, slabs)
        assert a.lh2_revenue == 0
        assert a.lh2_cost == 0
        assert a.lh2_net == 0

    def test_lh2_never_exceeds_totals(self):
        for total_rev in (0, 500, 1000, 2500, 10000):
            for total_cost in (0, 300, 1200):
                for base_rev, base_cost in ((0, 0), (1000, 500), (0, 500), (3000, 0)):
                    a = allocate_lh2(total_rev, total_cost, base_rev, base_cost,
                                     DEFAULT_REV_SHARE_SLABS)
                    assert 0 <= a.lh2_revenue <= total_rev
                    assert 0 <= a.lh2_cost <= total_cost

    def test_non_numeric_inputs_read_as_zero(self):
        a = allocate_lh2(None, 'x', None, None, DEFAULT_REV_SHARE_SLABS)
        assert a.lh2_revenue == 0
        assert a.lh2_cost == 0


# ---------------------------------------------------------------------------
# project_syndication()
# ---------------------------------------------------------------------------

class TestSyndicationProjection:

    def test_programmatic_scenario(self):
        """2 authors x 5 articles x 22 days = 220 articles -> 352 programmatic."""
        months = project_syndication(SyndicationConfig(), _hiring(), FLAT)
        m = months[0]
        assert m.drivers['monthlyArticles'] == 220
        assert m.streams['programmatic'] == pytest.approx(352)

    def test_default_config_month(self):
        m = project_syndication(SyndicationConfig(), _hiring(), FLAT)[0]
        assert m.streams['syndication'] == pytest.approx(786.5)
        assert m.streams['video'] == pytest.approx(825)
        assert m.total_revenue == pytest.approx(1963.5)
        # (2*800 + 1200 + 1000) * 1.10
        assert m.total_cost == pytest.approx(4180)
        # growth 0.98x sits in the 0% slab
        assert m.share == 0.0
        assert m.lh2_net == 0.0

    def test_ten_months(self):
        months = project_syndication(SyndicationConfig(), _hiring(), FLAT)
        assert [m.month for m in months] == list(MONTHS)

    def test_streams_sum_to_total(self):
        cfg = SyndicationConfig(success_probability=60)
        for m in project_syndication(cfg, _hiring(), FLAT):
            assert sum(m.streams.values()) == pytest.approx(m.total_revenue)

    def test_success_probability_scales_revenue_not_cost(self):
        full = project_syndication(SyndicationConfig(), _hiring(), FLAT)[0]
        half = project_syndication(SyndicationConfig(success_probability=50), _hiring(), FLAT)[0]
        assert half.total_revenue == pytest.approx(full.total_revenue / 2)
        assert half.total_cost == pytest.approx(full.total_cost)

    def test_seasonality_applies_per_month(self):
        months = project_syndication(SyndicationConfig(), _hiring(), {'Mar': 0.5, 'Dec': 2.0})
        assert months[0].total_revenue == pytest.approx(1963.5 * 0.5)
        assert months[1].total_revenue == pytest.approx(1963.5)
        assert months[-1].total_revenue == pytest.approx(1963.5 * 2.0)

    def test_hiring_accrues(self):
        hiring = _hiring(authors=[0, 1, 0, 0, 0, 0, 0, 0, 0, 0],
                         video_editors=[0, 0, 2, 0, 0, 0, 0, 0, 0, 0])
        months = project_syndication(SyndicationConfig(), hiring, FLAT)
        assert months[0].drivers['authors'] == 2
        assert months[1].drivers['authors'] == 3
        assert months[1].drivers['monthlyArticles'] == 330
        assert months[2].drivers['videoEditors'] == 3
        # one more author from Apr: +800 salary (+10% indirect)
        assert months[1].total_cost - months[0].total_cost == pytest.approx(880)

    def test_extra_views(self):
        extra = tuple([100000] + [0] * 9)
        cfg = SyndicationConfig(extra_views=extra, extra_engaged_views=extra)
        months = project_syndication(cfg, _hiring(), FLAT)
        assert months[0].streams['syndication'] == pytest.approx(786.5 + 100 * 3.25)
        assert months[0].streams['video'] == pytest.approx(825 + 100 * 2.5)
        assert months[1].streams['syndication'] == pytest.approx(786.5)

    def test_auto_mode_brand(self):
        cfg = SyndicationConfig(base_revenue=0, base_costs=0)
        m = project_syndication(cfg, _hiring(), FLAT)[0]
        assert m.share == 0.5
        assert m.lh2_revenue == pytest.approx(1963.5 / 2)
        assert m.lh2_cost == pytest.approx(4180 / 2)

    def test_monotonic_in_drivers(self):
        """Raising one revenue driver never lowers total revenue."""
        base = SyndicationConfig()
        bumps = [
            {'sessions_per_article': 800},
            {'programmatic_rpm': 6.0},
            {'blended_rpm': 5.0},
            {'video_rpm': 3.0},
            {'views_per_article': 2000},
        ]
        before = project_syndication(base, _hiring(), DEFAULT_SEASONALITY)
        for bump in bumps:
            after = project_syndication(replace(base, **bump), _hiring(), DEFAULT_SEASONALITY)
            for b, a in zip(before, after):
                assert a.total_revenue >= b.total_revenue


# ---------------------------------------------------------------------------
# project_discover()
# ---------------------------------------------------------------------------

class TestDiscoverProjection:

    def test_revenue_scenario(self):
        """500k traffic at RPM 3.0 = 1500."""
        cfg = DiscoverConfig(base_traffic=500000, base_rpm=3.0)
        for m in project_discover(cfg, FLAT):
            assert m.total_revenue == pytest.approx(1500)

    def test_traffic_growth(self):
        growth = tuple([10] + [0] * 9)
        cfg = DiscoverConfig(base_traffic=500000, base_rpm=3.0, traffic_growth=growth)
        months = project_discover(cfg, FLAT)
        assert months[0].drivers['traffic'] == pytest.approx(550000)
        assert months[0].total_revenue == pytest.approx(1650)
        assert months[1].total_revenue == pytest.approx(1500)

    def test_uplift_from_transition_month(self):
        cfg = DiscoverConfig(base_traffic=500000, base_rpm=3.0, rpm_uplift=1.2,
                             transition_month='May')
        months = project_discover(cfg, FLAT)
        assert months[0].total_revenue == pytest.approx(1500)
        assert months[1].total_revenue == pytest.approx(1500)
        assert months[2].total_revenue == pytest.approx(1800)
        assert months[9].total_revenue == pytest.approx(1800)
        assert not months[1].drivers['hasUplift']
        assert months[2].drivers['hasUplift']

    def test_unit_uplift_is_no_uplift(self):
        """An uplift of exactly 1.0 leaves the RPM and the flag untouched."""
        cfg = DiscoverConfig(base_traffic=500000, base_rpm=3.0, rpm_uplift=1.0,
                             transition_month='Mar')
        for m in project_discover(cfg, FLAT):
            assert m.drivers['effectiveRpm'] == 3.0
            assert m.drivers['hasUplift'] is False

    def test_flag_matches_rpm(self):
        cfg = DiscoverConfig(base_traffic=1000, base_rpm=2.0, rpm_uplift=1.5,
                             transition_month='Jul')
        for m in project_discover(cfg, FLAT):
            assert m.drivers['hasUplift'] == (m.drivers['effectiveRpm'] != 2.0)

    def test_cost_is_base_plus_direct(self):
        direct = tuple([0, 250] + [0] * 8)
        cfg = DiscoverConfig(base_traffic=1000, base_rpm=1, base_cost=400, direct_costs=direct)
        months = project_discover(cfg, FLAT)
        assert months[0].total_cost == 400
        assert months[1].total_cost == 650

    def test_incremental_allocation(self):
        cfg = DiscoverConfig(base_traffic=500000, base_rpm=3.0, base_cost=200,
                             base_revenue=600, base_costs_lh2=100)
        m = project_discover(cfg, FLAT)[0]
        assert m.growth_multiple == pytest.approx(2.5)
        assert m.share == pytest.approx(0.30)
        assert m.lh2_revenue == pytest.approx((1500 - 600) * 0.3)
        assert m.lh2_cost == pytest.approx((200 - 100) * 0.3)

    def test_monotonic_in_traffic(self):
        low = project_discover(DiscoverConfig(base_traffic=100000, base_rpm=2.5), DEFAULT_SEASONALITY)
        high = project_discover(DiscoverConfig(base_traffic=150000, base_rpm=2.5), DEFAULT_SEASONALITY)
        for lo, hi in zip(low, high):
            assert hi.total_revenue >= lo.total_revenue


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestProjectBrand:

    def test_dispatch_by_kind(self):
        synd = Brand(name='S', kind=SYNDICATION, config=SyndicationConfig())
        disc = Brand(name='D', kind=DISCOVER, config=DiscoverConfig(base_traffic=1000, base_rpm=1))
        assert set(project_brand(synd, FLAT).months[0].streams) == {'programmatic', 'syndication', 'video'}
        assert set(project_brand(disc, FLAT).months[0].streams) == {'discover'}

    def test_brand_totals(self):
        bp = project_brand(Brand(name='S', kind=SYNDICATION, config=SyndicationConfig()), FLAT)
        assert bp.totals['total_revenue'] == pytest.approx(1963.5 * 10)
        assert bp.totals['streams']['programmatic'] == pytest.approx(3520)

    def test_project_plan_keeps_order(self):
        plan = PlanState.from_dict({})
        projections = project_plan(plan)
        assert list(projections) == [(b.kind, b.name) for b in plan.brands]
        assert all(len(bp.months) == len(MONTHS) for bp in projections.values())
