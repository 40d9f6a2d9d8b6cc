from __future__ import annotations

from dataclasses import dataclass, field

from .model import ShiftContext
from .strategies.base import StatusDecision, StatusRule
from .strategies.missing_bio_strategy import FailedBioInRule, FailedBioOutRule, NoBioRule
from .strategies.punctuality_strategy import HalfDayAbsenceRule, OnTimeRule, TardyRule
from .strategies.review_strategy import ManualReviewRule


def default_rules() -> tuple[StatusRule, ...]:
    # Order matters: anomaly first, then presence, then thresholds.
    return (
        ManualReviewRule(),
        NoBioRule(),
        FailedBioInRule(),
        FailedBioOutRule(),
        OnTimeRule(),
        TardyRule(),
        HalfDayAbsenceRule(),
    )


@dataclass
class StatusRuleFactory:
    """Factory Pattern: pick the first rule in the table that matches."""

    rules: tuple[StatusRule, ...] = field(default_factory=default_rules)

    def for_context(self, ctx: ShiftContext) -> StatusRule:
        for rule in self.rules:
            if rule.applies(ctx):
                return rule
        raise LookupError("status table has no fallback rule")

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return self.for_context(ctx).decide(ctx)
