"""
Plan Validation Engine
Runs 5 checks on a plan to catch configuration that the projection engine
would silently turn into misleading numbers: malformed revenue-share slabs,
negative cumulative headcount, out-of-range success probabilities, bad
seasonality entries, and monthly arrays of the wrong length.

Checks only report; they never block a projection.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from plan import MONTHS, SYNDICATION, Brand, PlanState
from projection import cumulative_headcount


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class ValidationIssue:
    """A single validation issue found during checks."""
    check: str              # Check name (e.g. 'rev_share_slabs', 'headcount')
    severity: str           # 'error' or 'warning'
    message: str            # Human-readable description
    brand: str = ''
    months: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'check': self.check,
            'severity': self.severity,
            'message': self.message,
            'brand': self.brand,
            'months': self.months,
        }


@dataclass
class ValidationResult:
    """Combined result of all validation checks."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return len(self.issues) > 0

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == 'error')

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == 'warning')

    def to_dict(self) -> dict:
        return {
            'errors': self.error_count,
            'warnings': self.warning_count,
            'issues': [i.to_dict() for i in self.issues],
        }


# ---------------------------------------------------------------------------
# Check 1: Revenue-share slabs
# ---------------------------------------------------------------------------

def check_rev_share_slabs(brand: Brand) -> List[ValidationIssue]:
    """Slab schedules need >= 2 tiers, ascending thresholds, shares in [0, 1]."""
    issues = []
    slabs = brand.config.rev_share_slabs

    if len(slabs) < 2:
        issues.append(ValidationIssue(
            check='rev_share_slabs', severity='error', brand=brand.name,
            message=f'{brand.name}: revenue share needs at least 2 slabs, found {len(slabs)}',
        ))
        if not slabs:
            return issues

    finite = [s.threshold for s in slabs[:-1]]
    if any(b <= a for a, b in zip(finite, finite[1:])):
        issues.append(ValidationIssue(
            check='rev_share_slabs', severity='warning', brand=brand.name,
            message=f'{brand.name}: slab thresholds are not ascending '
                    f'({", ".join(f"{t:g}" for t in finite)}); first match wins',
        ))

    if not math.isinf(slabs[-1].threshold):
        issues.append(ValidationIssue(
            check='rev_share_slabs', severity='warning', brand=brand.name,
            message=f'{brand.name}: last slab should be unbounded, has threshold {slabs[-1].threshold:g}',
        ))

    bad = [s.share for s in slabs if not 0 <= s.share <= 1]
    if bad:
        issues.append(ValidationIssue(
            check='rev_share_slabs', severity='error', brand=brand.name,
            message=f'{brand.name}: slab shares must be between 0% and 100% '
                    f'(got {", ".join(f"{b:.0%}" for b in bad)})',
        ))

    return issues


# ---------------------------------------------------------------------------
# Check 2: Negative headcount from hiring deltas
# ---------------------------------------------------------------------------

def check_headcount(brand: Brand) -> List[ValidationIssue]:
    """Flag months where cumulative authors/editors/video editors drop below zero."""
    if brand.kind != SYNDICATION:
        return []
    c, h = brand.config, brand.hiring
    roles = [
        ('authors', c.authors, h.authors),
        ('editors', c.editors, h.editors),
        ('video editors', c.video_editors, h.video_editors),
    ]
    issues = []
    for role, base, deltas in roles:
        months = [m for i, m in enumerate(MONTHS) if cumulative_headcount(base, deltas, i) < 0]
        if months:
            issues.append(ValidationIssue(
                check='headcount', severity='error', brand=brand.name, months=months,
                message=f'{brand.name}: {role} headcount goes negative in {", ".join(months)}',
            ))
    return issues


# ---------------------------------------------------------------------------
# Check 3: Success probability range
# ---------------------------------------------------------------------------

def check_success_probability(brand: Brand) -> List[ValidationIssue]:
    p = brand.config.success_probability
    if 0 <= p <= 100:
        return []
    return [ValidationIssue(
        check='success_probability', severity='warning', brand=brand.name,
        message=f'{brand.name}: success probability {p:g}% is outside 0-100%',
    )]


# ---------------------------------------------------------------------------
# Check 4: Seasonality table
# ---------------------------------------------------------------------------

def check_seasonality(plan: PlanState) -> List[ValidationIssue]:
    """Unknown month labels are ignored by the engine; non-positive ones read as 1."""
    issues = []
    unknown = [m for m in plan.seasonality if m not in MONTHS]
    if unknown:
        issues.append(ValidationIssue(
            check='seasonality', severity='warning', months=unknown,
            message=f'Seasonality has unknown months: {", ".join(unknown)}',
        ))
    bad = [m for m in MONTHS if m in plan.seasonality and plan.seasonality[m] <= 0]
    if bad:
        issues.append(ValidationIssue(
            check='seasonality', severity='warning', months=bad,
            message=f'Seasonality must be positive; {", ".join(bad)} will read as 1.0',
        ))
    return issues


# ---------------------------------------------------------------------------
# Check 5: Monthly array lengths (raw blob)
# ---------------------------------------------------------------------------

_MONTHLY_ARRAYS = {
    'syndConfigs': [('syndication', 'momExtraViews'), ('msnVideos', 'momExtraEngagedViews')],
    'discConfigs': [(None, 'trafficGrowth'), (None, 'directCosts')],
    'hiringPlans': [(None, 'authors'), (None, 'editors'), (None, 'videoEditors')],
}


def check_monthly_lengths(blob: Optional[dict]) -> List[ValidationIssue]:
    """Monthly arrays are padded/truncated to 10 on load; report the ones that were."""
    issues = []
    blob = blob if isinstance(blob, dict) else {}
    for section, paths in _MONTHLY_ARRAYS.items():
        entries = blob.get(section)
        if not isinstance(entries, dict):
            continue
        for name, cfg in entries.items():
            if not isinstance(cfg, dict):
                continue
            for parent, key in paths:
                holder = cfg.get(parent) if parent else cfg
                if not isinstance(holder, dict) or holder.get(key) is None:
                    continue
                arr = holder[key]
                n = len(arr) if isinstance(arr, list) else 0
                if n != len(MONTHS):
                    issues.append(ValidationIssue(
                        check='monthly_lengths', severity='warning', brand=name,
                        message=f'{name}: {key} has {n} values, expected {len(MONTHS)}',
                    ))
    return issues


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def run_all_checks(plan: PlanState, blob: Optional[dict] = None) -> ValidationResult:
    """Run all 5 checks. Pass the raw blob to include the array-length check."""
    all_issues = []
    for brand in plan.brands:
        all_issues.extend(check_rev_share_slabs(brand))
        all_issues.extend(check_headcount(brand))
        all_issues.extend(check_success_probability(brand))
    all_issues.extend(check_seasonality(plan))
    if blob is not None:
        all_issues.extend(check_monthly_lengths(blob))
    return ValidationResult(issues=all_issues)
