"""
Plan configuration for the LH2 AOP projections.

Holds the fixed month sequence, default seasonality and revenue-share slabs,
the initial brand roster, and the frozen PlanState aggregate that the
projection engine reads. The persisted JSON blob keeps the dashboard's
camelCase layout; from_dict/to_dict convert at that boundary and normalise
every monthly array to exactly one value per month.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

log = logging.getLogger('lh2')

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MONTHS = ('Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')
WORKING_DAYS = 22

SYNDICATION = 'syndication'
DISCOVER = 'discover'
CATEGORIES = (SYNDICATION, DISCOVER)

DEFAULT_RPM_SEASONALITY = {
    'Mar': 0.75, 'Apr': 0.85, 'May': 0.90, 'Jun': 0.88, 'Jul': 0.85,
    'Aug': 0.88, 'Sep': 0.95, 'Oct': 1.05, 'Nov': 1.25, 'Dec': 1.35,
}

DEFAULT_OVERHEAD = {'salary': 47000, 'tech': 4855, 'admin': 12800}

# Feb 2026 exit figures
INITIAL_BASELINE_DATA = {
    SYNDICATION: {
        'Inquisitr': {'revenue': 81282, 'cost': 31429},
        'Cheatsheet': {'revenue': 49499, 'cost': 5439},
        'Fadeaway': {'revenue': 17422, 'cost': 12186},
        'FPD': {'revenue': 4100, 'cost': 2022},
        'Wonderwall': {'revenue': 0, 'cost': 0},
        'OKMagazine': {'revenue': 0, 'cost': 0},
    },
    DISCOVER: {
        'Nofilmschool': {'revenue': 28038, 'cost': 2854, 'currentTraffic': 850000, 'rpm': 3.3, 'adNetwork': 'tier1'},
        'Vintage Aviation': {'revenue': 6357, 'cost': 4045, 'currentTraffic': 240000, 'rpm': 2.65, 'adNetwork': 'tier1'},
        'Best Classic Bands': {'revenue': 3977, 'cost': 0, 'currentTraffic': 180000, 'rpm': 2.2, 'adNetwork': 'tier2'},
        'Whatnow': {'revenue': 14395, 'cost': 4381, 'currentTraffic': 520000, 'rpm': 2.77, 'adNetwork': 'tier1'},
        'Edhat': {'revenue': 8836, 'cost': 3394, 'currentTraffic': 380000, 'rpm': 2.33, 'adNetwork': 'tier1'},
        'Cultofmac': {'revenue': 0, 'cost': 0, 'currentTraffic': 500000, 'rpm': 3.0, 'adNetwork': 'tier1'},
        'F4WOnline': {'revenue': 93623, 'cost': 34617, 'currentTraffic': 2800000, 'rpm': 3.35, 'adNetwork': 'tier1'},
        'Ewrestlingnews': {'revenue': 17371, 'cost': 8684, 'currentTraffic': 620000, 'rpm': 2.8, 'adNetwork': 'tier1'},
        'Aviationist': {'revenue': 0, 'cost': 0, 'currentTraffic': 400000, 'rpm': 2.5, 'adNetwork': 'tier1'},
        'Shark Tank Blog': {'revenue': 8953, 'cost': 926, 'currentTraffic': 320000, 'rpm': 2.8, 'adNetwork': 'tier1'},
        'Wordsmyth': {'revenue': 0, 'cost': 0, 'currentTraffic': 200000, 'rpm': 2.0, 'adNetwork': 'tier2'},
    },
}


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _num(value, default: float = 0.0) -> float:
    """Coerce to float; None, non-numeric and NaN become `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(v):
        return default
    return v


def _section(value) -> dict:
    """A blob object, or {} when the value is missing or not an object."""
    return value if isinstance(value, dict) else {}


def _monthly(values) -> Tuple[float, ...]:
    """Normalise a monthly override array to exactly len(MONTHS) floats.

    Missing arrays become all zeros; short arrays are zero-padded and long
    ones truncated.
    """
    if not isinstance(values, (list, tuple)):
        values = []
    out = [_num(v) for v in values[:len(MONTHS)]]
    out.extend([0.0] * (len(MONTHS) - len(out)))
    return tuple(out)


def _zeros() -> Tuple[float, ...]:
    return tuple(0.0 for _ in MONTHS)


def month_index(label: str) -> int:
    """Position of a month label; unknown labels map to the first month."""
    try:
        return MONTHS.index(label)
    except ValueError:
        return 0


def seasonality_for(table: Dict[str, float], month: str) -> float:
    """Multiplier for a month; absent or zero entries read as 1."""
    return _num((table or {}).get(month)) or 1.0


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


# ---------------------------------------------------------------------------
# Revenue-share slabs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RevShareSlab:
    """One tier: growth multiples up to `threshold` earn `share` (0-1)."""
    threshold: float
    share: float

    def to_dict(self) -> dict:
        # JSON has no Infinity; the unbounded tier is stored as null
        return {
            'threshold': None if math.isinf(self.threshold) else self.threshold,
            'lh2Share': self.share,
        }


DEFAULT_REV_SHARE_SLABS = (
    RevShareSlab(1.3, 0.0),
    RevShareSlab(2.0, 0.20),
    RevShareSlab(3.0, 0.30),
    RevShareSlab(math.inf, 0.50),
)


def slabs_from_list(items) -> Tuple[RevShareSlab, ...]:
    """Parse a stored slab list. A null threshold on the last tier is unbounded."""
    if not isinstance(items, (list, tuple)) or not items:
        return DEFAULT_REV_SHARE_SLABS
    slabs = []
    last = len(items) - 1
    for i, item in enumerate(items):
        if isinstance(item, RevShareSlab):
            slabs.append(item)
            continue
        item = item if isinstance(item, dict) else {}
        raw = item.get('threshold')
        if i == last and raw is None:
            threshold = math.inf
        else:
            threshold = _num(raw)
        share = _num(item.get('lh2Share', item.get('share')))
        slabs.append(RevShareSlab(threshold, share))
    return tuple(slabs)


def slabs_to_list(slabs) -> List[dict]:
    return [s.to_dict() for s in slabs]


# ---------------------------------------------------------------------------
# Brand configs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HiringPlan:
    """Headcount added per month, relative to the brand's base headcount."""
    authors: Tuple[float, ...] = field(default_factory=_zeros)
    editors: Tuple[float, ...] = field(default_factory=_zeros)
    video_editors: Tuple[float, ...] = field(default_factory=_zeros)

    def to_dict(self) -> dict:
        return {
            'authors': list(self.authors),
            'editors': list(self.editors),
            'videoEditors': list(self.video_editors),
        }

    @staticmethod
    def from_dict(d: Optional[dict]) -> 'HiringPlan':
        d = _section(d)
        return HiringPlan(
            authors=_monthly(d.get('authors')),
            editors=_monthly(d.get('editors')),
            video_editors=_monthly(d.get('videoEditors')),
        )


@dataclass(frozen=True)
class SyndicationConfig:
    """Staffing, stream economics and LH2 terms for a syndication brand."""
    # --- Shared staffing ---
    authors: float = 2
    editors: float = 1
    articles_per_author_per_day: float = 5
    # --- Salaries (monthly) ---
    author_salary: float = 800
    editor_salary: float = 1200
    video_editor_salary: float = 1000
    indirect_costs_pct: float = 10
    # --- Programmatic ---
    sessions_per_article: float = 400
    programmatic_rpm: float = 4.0
    # --- Syndication ---
    views_per_article: float = 1100
    blended_rpm: float = 3.25
    extra_views: Tuple[float, ...] = field(default_factory=_zeros)
    # --- MSN videos ---
    video_editors: float = 1
    videos_per_editor_per_day: float = 3
    engaged_views_per_video: float = 5000
    video_rpm: float = 2.5
    extra_engaged_views: Tuple[float, ...] = field(default_factory=_zeros)
    # --- LH2 terms ---
    success_probability: float = 100
    base_revenue: float = 2000
    base_costs: float = 1000
    rev_share_slabs: Tuple[RevShareSlab, ...] = DEFAULT_REV_SHARE_SLABS

    def to_dict(self) -> dict:
        return {
            'shared': {
                'authors': self.authors,
                'editors': self.editors,
                'articlesPerAuthorPerDay': self.articles_per_author_per_day,
            },
            'salaries': {
                'authorSalary': self.author_salary,
                'editorSalary': self.editor_salary,
                'videoEditorSalary': self.video_editor_salary,
            },
            'indirectCostsPct': self.indirect_costs_pct,
            'programmatic': {
                'sessionsPerArticle': self.sessions_per_article,
                'rpm': self.programmatic_rpm,
            },
            'syndication': {
                'viewsPerArticle': self.views_per_article,
                'blendedRpm': self.blended_rpm,
                'momExtraViews': list(self.extra_views),
            },
            'msnVideos': {
                'videoEditors': self.video_editors,
                'videosPerEditorPerDay': self.videos_per_editor_per_day,
                'engagedViewsPerVideo': self.engaged_views_per_video,
                'rpm': self.video_rpm,
                'momExtraEngagedViews': list(self.extra_engaged_views),
            },
            'baseRevenue': self.base_revenue,
            'baseCosts': self.base_costs,
            'revShareSlabs': slabs_to_list(self.rev_share_slabs),
            'successProbability': self.success_probability,
        }

    @staticmethod
    def from_dict(d: Optional[dict]) -> 'SyndicationConfig':
        d = _section(d)
        shared = _section(d.get('shared'))
        salaries = _section(d.get('salaries'))
        prog = _section(d.get('programmatic'))
        synd = _section(d.get('syndication'))
        vid = _section(d.get('msnVideos'))
        return SyndicationConfig(
            authors=_num(shared.get('authors')),
            editors=_num(shared.get('editors')),
            articles_per_author_per_day=_num(shared.get('articlesPerAuthorPerDay')),
            author_salary=_num(salaries.get('authorSalary')),
            editor_salary=_num(salaries.get('editorSalary')),
            video_editor_salary=_num(salaries.get('videoEditorSalary')),
            indirect_costs_pct=_num(d.get('indirectCostsPct')),
            sessions_per_article=_num(prog.get('sessionsPerArticle')),
            programmatic_rpm=_num(prog.get('rpm')),
            views_per_article=_num(synd.get('viewsPerArticle')),
            blended_rpm=_num(synd.get('blendedRpm')),
            extra_views=_monthly(synd.get('momExtraViews')),
            video_editors=_num(vid.get('videoEditors')),
            videos_per_editor_per_day=_num(vid.get('videosPerEditorPerDay')),
            engaged_views_per_video=_num(vid.get('engagedViewsPerVideo')),
            video_rpm=_num(vid.get('rpm')),
            extra_engaged_views=_monthly(vid.get('momExtraEngagedViews')),
            success_probability=_num(d.get('successProbability'), 100.0),
            base_revenue=_num(d.get('baseRevenue')),
            base_costs=_num(d.get('baseCosts')),
            rev_share_slabs=slabs_from_list(d.get('revShareSlabs')),
        )


@dataclass(frozen=True)
class DiscoverConfig:
    """Traffic, RPM and cost drivers plus LH2 terms for a discover brand."""
    base_traffic: float = 0
    base_rpm: float = 0
    rpm_uplift: float = 1.0
    transition_month: str = 'Mar'
    base_cost: float = 0
    success_probability: float = 100
    traffic_growth: Tuple[float, ...] = field(default_factory=_zeros)  # % per month
    direct_costs: Tuple[float, ...] = field(default_factory=_zeros)
    base_revenue: float = 0
    base_costs_lh2: float = 0
    rev_share_slabs: Tuple[RevShareSlab, ...] = DEFAULT_REV_SHARE_SLABS

    def to_dict(self) -> dict:
        return {
            'baseTraffic': self.base_traffic,
            'baseRpm': self.base_rpm,
            'rpmUplift': self.rpm_uplift,
            'transitionMonth': self.transition_month,
            'baseCost': self.base_cost,
            'successProbability': self.success_probability,
            'trafficGrowth': list(self.traffic_growth),
            'directCosts': list(self.direct_costs),
            'baseRevenue': self.base_revenue,
            'baseCostsLH2': self.base_costs_lh2,
            'revShareSlabs': slabs_to_list(self.rev_share_slabs),
        }

    @staticmethod
    def from_dict(d: Optional[dict]) -> 'DiscoverConfig':
        d = _section(d)
        month = d.get('transitionMonth')
        return DiscoverConfig(
            base_traffic=_num(d.get('baseTraffic')),
            base_rpm=_num(d.get('baseRpm')),
            rpm_uplift=_num(d.get('rpmUplift'), 1.0),
            transition_month=month if month in MONTHS else MONTHS[0],
            base_cost=_num(d.get('baseCost')),
            success_probability=_num(d.get('successProbability'), 100.0),
            traffic_growth=_monthly(d.get('trafficGrowth')),
            direct_costs=_monthly(d.get('directCosts')),
            base_revenue=_num(d.get('baseRevenue')),
            base_costs_lh2=_num(d.get('baseCostsLH2')),
            rev_share_slabs=slabs_from_list(d.get('revShareSlabs')),
        )

    @staticmethod
    def from_baseline(baseline: 'BrandBaseline') -> 'DiscoverConfig':
        """Default discover config seeded from the brand's baseline record."""
        return DiscoverConfig(
            base_traffic=baseline.current_traffic,
            base_rpm=baseline.rpm,
            base_cost=float(round(baseline.cost)),
        )


@dataclass(frozen=True)
class BrandBaseline:
    """Pre-partnership reference figures (Feb 2026 exit)."""
    revenue: float = 0
    cost: float = 0
    current_traffic: float = 0
    rpm: float = 0
    ad_network: str = 'tier1'

    def to_dict(self, kind: str) -> dict:
        d = {'revenue': self.revenue, 'cost': self.cost}
        if kind == DISCOVER:
            d.update({
                'currentTraffic': self.current_traffic,
                'rpm': self.rpm,
                'adNetwork': self.ad_network,
            })
        return d

    @staticmethod
    def from_dict(d: Optional[dict]) -> 'BrandBaseline':
        d = _section(d)
        return BrandBaseline(
            revenue=_num(d.get('revenue')),
            cost=_num(d.get('cost')),
            current_traffic=_num(d.get('currentTraffic')),
            rpm=_num(d.get('rpm')),
            ad_network=str(d.get('adNetwork') or 'tier1'),
        )


@dataclass(frozen=True)
class Brand:
    """A brand of either kind. `kind` decides which config type `config` holds."""
    name: str
    kind: str
    config: object  # SyndicationConfig | DiscoverConfig
    baseline: BrandBaseline = field(default_factory=BrandBaseline)
    hiring: HiringPlan = field(default_factory=HiringPlan)

    def __post_init__(self):
        expected = {SYNDICATION: SyndicationConfig, DISCOVER: DiscoverConfig}.get(self.kind)
        if expected is None:
            raise ValueError(f"Unknown brand kind: {self.kind!r}")
        if not isinstance(self.config, expected):
            raise TypeError(f"{self.kind} brand {self.name!r} needs a {expected.__name__}")


@dataclass(frozen=True)
class Overhead:
    """Fixed monthly org cost, charged once at portfolio level."""
    salary: float = DEFAULT_OVERHEAD['salary']
    tech: float = DEFAULT_OVERHEAD['tech']
    admin: float = DEFAULT_OVERHEAD['admin']

    @property
    def total(self) -> float:
        return self.salary + self.tech + self.admin

    def to_dict(self) -> dict:
        return {'salary': self.salary, 'tech': self.tech, 'admin': self.admin}

    @staticmethod
    def from_dict(d: Optional[dict]) -> 'Overhead':
        if not isinstance(d, dict):
            return Overhead()
        return Overhead(salary=_num(d.get('salary')), tech=_num(d.get('tech')),
                        admin=_num(d.get('admin')))


# ---------------------------------------------------------------------------
# Plan aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlanState:
    """The single configuration aggregate. Edits return a new PlanState."""
    overhead: Overhead = field(default_factory=Overhead)
    seasonality: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_RPM_SEASONALITY))
    brands: Tuple[Brand, ...] = ()
    last_updated: str = ''
    updated_by: str = 'system'
    version: int = 0

    def brands_of(self, kind: str) -> List[Brand]:
        return [b for b in self.brands if b.kind == kind]

    def get_brand(self, name: str, kind: Optional[str] = None) -> Optional[Brand]:
        """Brand by name. Names are unique per kind only; pass `kind` to pick one."""
        for b in self.brands:
            if b.name == name and (kind is None or b.kind == kind):
                return b
        return None

    def to_dict(self) -> dict:
        """Serialise to the persisted blob layout."""
        baseline = {SYNDICATION: {}, DISCOVER: {}}
        synd, hiring, disc = {}, {}, {}
        for b in self.brands:
            baseline[b.kind][b.name] = b.baseline.to_dict(b.kind)
            if b.kind == SYNDICATION:
                synd[b.name] = b.config.to_dict()
                hiring[b.name] = b.hiring.to_dict()
            else:
                disc[b.name] = b.config.to_dict()
        return {
            'overhead': self.overhead.to_dict(),
            'rpmSeasonality': dict(self.seasonality),
            'baselineData': baseline,
            'syndConfigs': synd,
            'hiringPlans': hiring,
            'discConfigs': disc,
            'lastUpdated': self.last_updated,
            'updatedBy': self.updated_by,
        }

    @staticmethod
    def from_dict(d: Optional[dict]) -> 'PlanState':
        """Build a plan from a stored blob.

        Null or missing sections fall back to the initial roster, the way the
        dashboard kept its defaults when the server returned nothing. Sections
        or entries of the wrong type read as empty.
        """
        d = _section(d)
        baseline_data = _section(d.get('baselineData')) or INITIAL_BASELINE_DATA
        synd_baselines = _section(baseline_data.get(SYNDICATION))
        disc_baselines = _section(baseline_data.get(DISCOVER))

        synd_configs = d.get('syndConfigs')
        if synd_configs is None:
            synd_configs = {name: SyndicationConfig() for name in synd_baselines}
        disc_configs = d.get('discConfigs')
        if disc_configs is None:
            disc_configs = {
                name: DiscoverConfig.from_baseline(BrandBaseline.from_dict(bd))
                for name, bd in disc_baselines.items()
            }
        synd_configs = _section(synd_configs)
        disc_configs = _section(disc_configs)
        hiring_plans = _section(d.get('hiringPlans'))

        brands = []
        for name, cfg in synd_configs.items():
            if not isinstance(cfg, SyndicationConfig):
                cfg = SyndicationConfig.from_dict(cfg)
            brands.append(Brand(
                name=name, kind=SYNDICATION, config=cfg,
                baseline=BrandBaseline.from_dict(synd_baselines.get(name)),
                hiring=HiringPlan.from_dict(hiring_plans.get(name)),
            ))
        for name, cfg in disc_configs.items():
            if not isinstance(cfg, DiscoverConfig):
                cfg = DiscoverConfig.from_dict(cfg)
            brands.append(Brand(
                name=name, kind=DISCOVER, config=cfg,
                baseline=BrandBaseline.from_dict(disc_baselines.get(name)),
            ))

        seasonality = d.get('rpmSeasonality')
        if not isinstance(seasonality, dict):
            seasonality = DEFAULT_RPM_SEASONALITY
        return PlanState(
            overhead=Overhead.from_dict(d.get('overhead')),
            seasonality={k: _num(v, 1.0) for k, v in seasonality.items()},
            brands=tuple(brands),
            last_updated=str(d.get('lastUpdated') or ''),
            updated_by=str(d.get('updatedBy') or 'system'),
        )


def default_plan() -> PlanState:
    """Initial roster with default configs and seasonality."""
    return PlanState.from_dict({'lastUpdated': _now_iso()})


# ---------------------------------------------------------------------------
# Edits (each returns a new PlanState)
# ---------------------------------------------------------------------------

def _bump(plan: PlanState, **changes) -> PlanState:
    return replace(plan, version=plan.version + 1, **changes)


def with_overhead(plan: PlanState, **amounts) -> PlanState:
    return _bump(plan, overhead=replace(plan.overhead, **{k: _num(v) for k, v in amounts.items()}))


def with_seasonality(plan: PlanState, month: str, multiplier: float) -> PlanState:
    if month not in MONTHS:
        raise ValueError(f"Unknown month: {month!r}")
    table = dict(plan.seasonality)
    table[month] = _num(multiplier, 1.0)
    return _bump(plan, seasonality=table)


def put_brand(plan: PlanState, brand: Brand) -> PlanState:
    """Insert or replace a brand by (kind, name); a replaced brand keeps its position."""
    brands = list(plan.brands)
    for i, b in enumerate(brands):
        if b.kind == brand.kind and b.name == brand.name:
            brands[i] = brand
            break
    else:
        brands.append(brand)
    return _bump(plan, brands=tuple(brands))


def update_brand(plan: PlanState, kind: str, name: str, **config_changes) -> PlanState:
    """Replace fields on a brand's config, e.g. update_brand(p, SYNDICATION, 'FPD', authors=4)."""
    brand = plan.get_brand(name, kind)
    if brand is None:
        raise KeyError((kind, name))
    hiring = config_changes.pop('hiring', None)
    new_brand = replace(brand, config=replace(brand.config, **config_changes))
    if hiring is not None:
        new_brand = replace(new_brand, hiring=hiring if isinstance(hiring, HiringPlan)
                            else HiringPlan.from_dict(hiring))
    return put_brand(plan, new_brand)


def remove_brand(plan: PlanState, kind: str, name: str) -> PlanState:
    brands = tuple(b for b in plan.brands if not (b.kind == kind and b.name == name))
    if len(brands) == len(plan.brands):
        raise KeyError((kind, name))
    return _bump(plan, brands=brands)


# ---------------------------------------------------------------------------
# Brand creation (wizard form -> Brand)
# ---------------------------------------------------------------------------

_WIZARD_DEFAULTS = {
    'baselineRevenue': 0, 'baselineCost': 0,
    'authors': 2, 'editors': 1, 'articlesPerAuthorPerDay': 5,
    'authorSalary': 800, 'editorSalary': 1200, 'videoEditorSalary': 1000, 'indirectCostsPct': 10,
    'sessionsPerArticle': 400, 'programmaticRpm': 4.0,
    'syndicationViewsPerArticle': 1100, 'syndicationBlendedRpm': 3.25,
    'videoEditors': 1, 'videosPerEditorPerDay': 3, 'engagedViewsPerVideo': 5000, 'videoRpm': 2.5,
    'baseRevenueLH2': 0, 'baseCostsLH2': 0, 'useDefaultSlabs': True,
    'successProbability': 100,
    'currentTraffic': 500000, 'baseTraffic': 500000, 'baseRpm': 3.0, 'baseCostOperational': 0,
    'rpmUplift': 1.0, 'transitionMonth': 'Mar',
    'setMOMTraffic': False, 'setMOMDirectCosts': False,
}


def brand_from_form(brand_type: str, form: dict) -> Brand:
    """Map the brand-creation form fields to a Brand."""
    f = dict(_WIZARD_DEFAULTS)
    f.update({k: v for k, v in (form or {}).items() if v is not None})
    name = str(f.get('brandName') or '').strip()
    if not name:
        raise ValueError("Brand name is required")

    slabs = DEFAULT_REV_SHARE_SLABS if f['useDefaultSlabs'] else slabs_from_list(f.get('revShareSlabs'))

    if brand_type == SYNDICATION:
        config = SyndicationConfig(
            authors=_num(f['authors']),
            editors=_num(f['editors']),
            articles_per_author_per_day=_num(f['articlesPerAuthorPerDay']),
            author_salary=_num(f['authorSalary']),
            editor_salary=_num(f['editorSalary']),
            video_editor_salary=_num(f['videoEditorSalary']),
            indirect_costs_pct=_num(f['indirectCostsPct']),
            sessions_per_article=_num(f['sessionsPerArticle']),
            programmatic_rpm=_num(f['programmaticRpm']),
            views_per_article=_num(f['syndicationViewsPerArticle']),
            blended_rpm=_num(f['syndicationBlendedRpm']),
            video_editors=_num(f['videoEditors']),
            videos_per_editor_per_day=_num(f['videosPerEditorPerDay']),
            engaged_views_per_video=_num(f['engagedViewsPerVideo']),
            video_rpm=_num(f['videoRpm']),
            success_probability=_num(f['successProbability'], 100.0),
            base_revenue=_num(f['baseRevenueLH2']),
            base_costs=_num(f['baseCostsLH2']),
            rev_share_slabs=slabs,
        )
        baseline = BrandBaseline(revenue=_num(f['baselineRevenue']), cost=_num(f['baselineCost']))
        return Brand(name=name, kind=SYNDICATION, config=config, baseline=baseline)

    if brand_type == DISCOVER:
        month = f['transitionMonth']
        config = DiscoverConfig(
            base_traffic=_num(f['baseTraffic']),
            base_rpm=_num(f['baseRpm']),
            rpm_uplift=_num(f['rpmUplift'], 1.0),
            transition_month=month if month in MONTHS else MONTHS[0],
            base_cost=_num(f['baseCostOperational']),
            success_probability=_num(f['successProbability'], 100.0),
            traffic_growth=_monthly(f.get('trafficGrowth')) if f['setMOMTraffic'] else _zeros(),
            direct_costs=_monthly(f.get('directCosts')) if f['setMOMDirectCosts'] else _zeros(),
            base_revenue=_num(f['baseRevenueLH2']),
            base_costs_lh2=_num(f['baseCostsLH2']),
            rev_share_slabs=slabs,
        )
        baseline = BrandBaseline(
            revenue=_num(f['baselineRevenue']), cost=_num(f['baselineCost']),
            current_traffic=_num(f['currentTraffic']), rpm=_num(f['baseRpm']),
            ad_network='tier1',
        )
        return Brand(name=name, kind=DISCOVER, config=config, baseline=baseline)

    raise ValueError(f"Unknown brand type: {brand_type!r}")


def add_brand(plan: PlanState, brand_type: str, form: dict) -> PlanState:
    """Add a brand from the creation form. An existing brand of the same kind and name is replaced."""
    brand = brand_from_form(brand_type, form)
    if plan.get_brand(brand.name, brand.kind) is not None:
        log.info("%s brand %s already exists; replacing it", brand.kind, brand.name)
    return put_brand(plan, brand)

