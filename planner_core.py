#!/usr/bin/env python3
"""
planner_core
------------
Backyard ultra training planner core.

- Form input record (target date, plan length, avg/peak hours, training days)
- Ordered rule-set validation returning every violation in one pass
- Ramp-and-taper or flat weekly hours projection
- Two-tier (avg/peak) and single-tier (avg + floors) configurations
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from logging_config import get_logger


logger = get_logger(__name__)


# -----------------------------
# Data model
# -----------------------------


WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

PROGRESSION_MODELS = ("ramp_taper", "flat")
THRESHOLD_TIERS = ("two_tier", "single_tier")


def _dedupe_days(days: Iterable[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for day in days:
        if day not in WEEKDAY_LABELS:
            raise ValueError(f"Unknown training day label: {day!r}")
        if day not in seen:
            seen.append(day)
    return tuple(seen)


@dataclass(frozen=True)
class PlanInput:
    target_date: Optional[date]
    plan_length_weeks: int
    avg_hours: float
    peak_hours: float = math.nan
    selected_days: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # a datetime is compared by calendar date only
        if isinstance(self.target_date, datetime):
            object.__setattr__(self, "target_date", self.target_date.date())
        object.__setattr__(self, "selected_days", _dedupe_days(self.selected_days))


@dataclass(frozen=True)
class WeekPlan:
    week_number: int
    planned_hours: float


@dataclass(frozen=True)
class Schedule:
    start_date: date
    weeks: List[WeekPlan]

    @property
    def target_date(self) -> date:
        return self.start_date + timedelta(days=len(self.weeks) * 7)

    @property
    def total_hours(self) -> float:
        return round1(sum(week.planned_hours for week in self.weeks))

    @property
    def peak_week(self) -> Optional[WeekPlan]:
        if not self.weeks:
            return None
        return max(self.weeks, key=lambda week: week.planned_hours)


@dataclass(frozen=True)
class PlannerConfig:
    """Selects the progression model and the validation thresholds.

    ``thresholds="two_tier"`` checks avg and peak hours and a future target date;
    ``"single_tier"`` ignores peak hours (unless the ramp model needs them) and adds a weekly floor, a minimum day
    count, long run day coverage and an upper per-day bound.
    """

    progression: str = "ramp_taper"
    thresholds: str = "two_tier"
    plan_lengths: Tuple[int, ...] = (8, 12, 16)
    peak_fraction: float = 0.65
    taper_factor: float = 0.8
    min_avg_hours: float = 6.0
    min_training_days: int = 3
    long_run_days: Tuple[str, ...] = ("Thu", "Sat", "Sun")
    low_per_day_hours: float = 0.25
    high_per_day_hours: Optional[float] = None
    date_format: str = "%Y-%m-%d"

    def __post_init__(self) -> None:
        if self.progression not in PROGRESSION_MODELS:
            raise ValueError(f"progression must be one of {PROGRESSION_MODELS}")
        if self.thresholds not in THRESHOLD_TIERS:
            raise ValueError(f"thresholds must be one of {THRESHOLD_TIERS}")
        if not self.plan_lengths:
            raise ValueError("plan_lengths must not be empty")
        object.__setattr__(self, "long_run_days", _dedupe_days(self.long_run_days))

    @property
    def two_tier(self) -> bool:
        return self.thresholds == "two_tier"

    @property
    def uses_peak(self) -> bool:
        return self.progression == "ramp_taper"

    @property
    def checks_peak(self) -> bool:
        # the ramp needs a peak even under single-tier thresholds
        return self.two_tier or self.uses_peak


TWO_TIER_CONFIG = PlannerConfig()
SINGLE_TIER_CONFIG = PlannerConfig(
    progression="flat",
    thresholds="single_tier",
    low_per_day_hours=1.5,
    high_per_day_hours=3.5,
    date_format="%d-%m-%Y",
)

CONFIG_PRESETS: Dict[str, PlannerConfig] = {
    "two_tier": TWO_TIER_CONFIG,
    "single_tier": SINGLE_TIER_CONFIG,
}


def config_for_mode(mode: str) -> PlannerConfig:
    key = mode.strip().lower().replace("-", "_")
    if key not in CONFIG_PRESETS:
        raise ValueError(f"Unknown planner mode {mode!r}; expected one of {sorted(CONFIG_PRESETS)}")
    return CONFIG_PRESETS[key]


class PlanPreconditionError(ValueError):
    """Raised when a schedule is requested for input that fails validation."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations))


# -----------------------------
# Helpers
# -----------------------------


def round1(value: float) -> float:
    """Round half up to one decimal place (2.45 -> 2.5)."""
    if abs(value) >= 2 ** 52:
        # no tenths digit left at this magnitude
        return value
    return math.floor(value * 10 + 0.5) / 10


def interpolate(x: float, x0: float, x1: float, y0: float, y1: float) -> float:
    if x1 == x0:
        return y0
    return y0 + (y1 - y0) * ((x - x0) / (x1 - x0))


def is_number(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def is_positive(value: Optional[float]) -> bool:
    return is_number(value) and value > 0


def format_date(value: date, config: PlannerConfig = TWO_TIER_CONFIG) -> str:
    return value.strftime(config.date_format)


def _format_choices(values: Tuple[Any, ...], conjunction: str, *, oxford_comma: bool = True) -> str:
    labels = [str(v) for v in values]
    if len(labels) == 1:
        return labels[0]
    if len(labels) == 2:
        return f"{labels[0]} {conjunction} {labels[1]}"
    separator = "," if oxford_comma else ""
    return f"{', '.join(labels[:-1])}{separator} {conjunction} {labels[-1]}"


def _format_hours(value: float) -> str:
    return f"{value:g}"


# -----------------------------
# Validation
# -----------------------------


def validate(
    record: PlanInput,
    config: PlannerConfig = TWO_TIER_CONFIG,
    *,
    today: Optional[date] = None,
) -> List[str]:
    """Return every rule violation for ``record`` in fixed rule order.

    ``today`` is the reference date for the futurity rule. It defaults to the
    current date, sampled once for the whole call.
    """
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()
    errors: List[str] = []
    avg = record.avg_hours
    peak = record.peak_hours
    days = record.selected_days

    if record.target_date is None:
        errors.append("Please select a target backyard ultra date.")
    elif config.two_tier and record.target_date <= today:
        errors.append("Target date must be in the future.")

    if record.plan_length_weeks not in config.plan_lengths:
        choices = _format_choices(config.plan_lengths, "or")
        errors.append(f"Please select a training plan length ({choices} weeks).")

    if not is_positive(avg):
        errors.append("Average weekly training hours must be a positive number.")
    elif not config.two_tier and avg < config.min_avg_hours:
        errors.append(
            f"Average weekly training is lower than the minimum of {_format_hours(config.min_avg_hours)} hrs."
        )

    if config.checks_peak:
        if not is_positive(peak):
            errors.append("Peak weekly training hours must be a positive number.")
        if is_number(avg) and is_number(peak) and peak < avg:
            errors.append("Peak weekly hours should be greater than or equal to average weekly hours.")

    if not days:
        errors.append("Select at least one training day.")
    elif not config.two_tier:
        if len(days) < config.min_training_days:
            errors.append(f"Select at least {config.min_training_days} training days.")
        if not any(day in config.long_run_days for day in days):
            long_days = _format_choices(config.long_run_days, "or", oxford_comma=False)
            errors.append(f"Include at least one long run day ({long_days}).")

    if days and is_number(avg):
        per_day = avg / len(days)
        low = _format_hours(config.low_per_day_hours)
        if per_day < config.low_per_day_hours:
            if config.two_tier:
                errors.append(
                    f"Average hours per selected training day is very low (<{low}h). "
                    "Consider adjusting days or hours."
                )
            else:
                errors.append(
                    f"Average hours per selected training day is too low (<{low}h). "
                    "Add hours or remove days."
                )
        elif config.high_per_day_hours is not None and per_day > config.high_per_day_hours:
            high = _format_hours(config.high_per_day_hours)
            errors.append(
                f"Average hours per selected training day is too high (>{high}h). "
                "Add days or reduce hours."
            )

    logger.debug("validation finished with %d violation(s)", len(errors))
    return errors


# -----------------------------
# Schedule generation
# -----------------------------


def _precondition_violations(record: PlanInput, config: PlannerConfig) -> List[str]:
    problems: List[str] = []
    if record.target_date is None:
        problems.append("target_date is required")
    if record.plan_length_weeks not in config.plan_lengths:
        problems.append(f"plan_length_weeks must be one of {config.plan_lengths}")
    if not is_positive(record.avg_hours):
        problems.append("avg_hours must be a positive number")
    if config.checks_peak:
        if not is_positive(record.peak_hours):
            problems.append("peak_hours must be a positive number")
        elif is_number(record.avg_hours) and record.peak_hours < record.avg_hours:
            problems.append("peak_hours must be >= avg_hours")
    return problems


def weekly_hours(week_index: int, total_weeks: int, avg: float, peak: float, config: PlannerConfig) -> float:
    if not config.uses_peak:
        return avg
    peak_index = math.floor(total_weeks * config.peak_fraction)
    if week_index < peak_index:
        return interpolate(week_index, 0, peak_index, avg, peak)
    if week_index == peak_index:
        return peak
    return max(avg, peak * config.taper_factor ** (week_index - peak_index))


def generate(record: PlanInput, config: PlannerConfig = TWO_TIER_CONFIG) -> Schedule:
    problems = _precondition_violations(record, config)
    if problems:
        raise PlanPreconditionError(problems)

    total_weeks = record.plan_length_weeks
    start_date = record.target_date - timedelta(days=total_weeks * 7)
    weeks = [
        WeekPlan(
            week_number=idx + 1,
            planned_hours=round1(weekly_hours(idx, total_weeks, record.avg_hours, record.peak_hours, config)),
        )
        for idx in range(total_weeks)
    ]
    logger.debug("generated %d week schedule starting %s", total_weeks, start_date.isoformat())
    return Schedule(start_date=start_date, weeks=weeks)


# -----------------------------
# Form adapter & controller
# -----------------------------


def parse_hours(raw: Any) -> float:
    """Parse a free-form hours field; anything unparseable becomes NaN."""
    if raw is None:
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    try:
        return float(str(raw).strip())
    except ValueError:
        return math.nan


def parse_plan_length(raw: Any) -> int:
    """Parse the plan length select; anything unparseable becomes 0."""
    if raw is None:
        return 0
    if isinstance(raw, int):
        return raw
    try:
        return int(float(str(raw).strip()))
    except (ValueError, OverflowError):
        return 0


def collect_plan_input(
    *,
    target_date: Optional[date],
    plan_length: Any,
    avg_hours: Any,
    peak_hours: Any = None,
    selected_days: Iterable[str] = (),
) -> PlanInput:
    return PlanInput(
        target_date=target_date,
        plan_length_weeks=parse_plan_length(plan_length),
        avg_hours=parse_hours(avg_hours),
        peak_hours=parse_hours(peak_hours),
        selected_days=tuple(selected_days),
    )


@dataclass
class PlanOutcome:
    errors: List[str] = field(default_factory=list)
    schedule: Optional[Schedule] = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.schedule is not None


def run_planner(
    record: PlanInput,
    config: PlannerConfig = TWO_TIER_CONFIG,
    *,
    today: Optional[date] = None,
) -> PlanOutcome:
    errors = validate(record, config, today=today)
    if errors:
        logger.info("plan request rejected", extra={"ctx_violations": len(errors)})
        return PlanOutcome(errors=errors)
    schedule = generate(record, config)
    logger.info(
        "plan generated",
        extra={"ctx_weeks": len(schedule.weeks), "ctx_mode": config.thresholds},
    )
    return PlanOutcome(schedule=schedule)


def build_plan_payload(
    record: PlanInput,
    schedule: Schedule,
    config: PlannerConfig = TWO_TIER_CONFIG,
) -> Dict[str, Any]:
    peak_week = schedule.peak_week
    summary: Dict[str, Any] = {
        "target_date": format_date(record.target_date, config),
        "start_date": format_date(schedule.start_date, config),
        "plan_length_weeks": record.plan_length_weeks,
        "training_days": ", ".join(record.selected_days),
        "avg_hours": record.avg_hours,
        "peak_hours": record.peak_hours if config.uses_peak else None,
        "total_hours": schedule.total_hours,
        "peak_week_number": peak_week.week_number if peak_week else None,
    }
    weeks = [
        {
            "week_number": week.week_number,
            "week_start": format_date(schedule.start_date + timedelta(weeks=week.week_number - 1), config),
            "planned_hours": week.planned_hours,
        }
        for week in schedule.weeks
    ]
    notes = ["Placeholder distribution. Will refine algorithm later."]
    if record.selected_days:
        per_day = round1(record.avg_hours / len(record.selected_days))
        notes.append(f"Average {per_day:.1f} h per selected training day.")
    return {"summary": summary, "weeks": weeks, "notes": notes}


__all__ = [
    "CONFIG_PRESETS",
    "PlanInput",
    "PlanOutcome",
    "PlanPreconditionError",
    "PlannerConfig",
    "SINGLE_TIER_CONFIG",
    "Schedule",
    "TWO_TIER_CONFIG",
    "WEEKDAY_LABELS",
    "WeekPlan",
    "build_plan_payload",
    "collect_plan_input",
    "config_for_mode",
    "format_date",
    "generate",
    "interpolate",
    "parse_hours",
    "parse_plan_length",
    "round1",
    "run_planner",
    "validate",
    "weekly_hours",
]
