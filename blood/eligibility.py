"""
Donor self-assessment scoring.

The questionnaire answers are scored with a point-deduction model: every donor
starts at 100 and each failing check removes a fixed penalty. A donor is
eligible when the final score is at least ``PASSING_SCORE``.

The score is not clamped, so several failing checks can push it below zero.
"""
from dataclasses import dataclass, field, asdict
from datetime import date, datetime, timedelta
from typing import Optional, Union

from django.utils import timezone

BASE_SCORE = 100
PASSING_SCORE = 70

MIN_AGE = 18
MAX_AGE = 65
MIN_WEIGHT_KG = 50
DONATION_INTERVAL_DAYS = 56  # 8 weeks between two whole-blood donations

AGE_PENALTY = 50
WEIGHT_PENALTY = 30
RECENT_DONATION_PENALTY = 40
ILLNESS_PENALTY = 30
MEDICATION_PENALTY = 20
TRAVEL_PENALTY = 15

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class EligibilityAnswers:
    age: int
    weight: float
    last_donation_date: Optional[DateLike] = None
    has_illness: bool = False
    takes_medication: bool = False
    has_traveled: bool = False


@dataclass(frozen=True)
class EligibilityResult:
    score: int
    eligible: bool
    age: int
    weight: float
    last_donation_date: Optional[DateLike]
    has_illness: bool
    takes_medication: bool
    has_traveled: bool
    reasons: tuple = field(default_factory=tuple)

    def as_dict(self) -> dict:
        data = asdict(self)
        last = data["last_donation_date"]
        data["last_donation_date"] = last.isoformat() if last else None
        data["reasons"] = list(self.reasons)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EligibilityResult":
        last = data.get("last_donation_date")
        if isinstance(last, str):
            last = datetime.fromisoformat(last) if "T" in last else date.fromisoformat(last)
        return cls(
            score=int(data["score"]),
            eligible=bool(data["eligible"]),
            age=data["age"],
            weight=data["weight"],
            last_donation_date=last,
            has_illness=bool(data.get("has_illness")),
            takes_medication=bool(data.get("takes_medication")),
            has_traveled=bool(data.get("has_traveled")),
            reasons=tuple(data.get("reasons") or ()),
        )


def days_since(last_donation_date: DateLike, now: datetime) -> int:
    """
    Whole days elapsed between the last donation and ``now``.
    Plain dates are compared on the calendar, datetimes on the clock.
    """
    if isinstance(last_donation_date, datetime):
        if timezone.is_aware(now) and timezone.is_naive(last_donation_date):
            last_donation_date = timezone.make_aware(last_donation_date, timezone.get_current_timezone())
        elif timezone.is_naive(now) and timezone.is_aware(last_donation_date):
            now = timezone.make_aware(now, timezone.get_current_timezone())
        return (now - last_donation_date).days

    if isinstance(now, datetime):
        today = timezone.localtime(now).date() if timezone.is_aware(now) else now.date()
    else:
        today = now
    return (today - last_donation_date).days


def evaluate_eligibility(answers: EligibilityAnswers, now: Optional[datetime] = None) -> EligibilityResult:
    now = now or timezone.now()
    score = BASE_SCORE
    reasons = []

    if answers.age < MIN_AGE or answers.age > MAX_AGE:
        score -= AGE_PENALTY
        reasons.append(f"Age outside {MIN_AGE}-{MAX_AGE} years")

    if answers.weight < MIN_WEIGHT_KG:
        score -= WEIGHT_PENALTY
        reasons.append(f"Weight under {MIN_WEIGHT_KG} kg")

    if answers.last_donation_date is not None:
        if days_since(answers.last_donation_date, now) < DONATION_INTERVAL_DAYS:
            score -= RECENT_DONATION_PENALTY
            reasons.append(f"Less than {DONATION_INTERVAL_DAYS // 7} weeks since last donation")

    if answers.has_illness:
        score -= ILLNESS_PENALTY
        reasons.append("Medical condition to be assessed")

    if answers.takes_medication:
        score -= MEDICATION_PENALTY
        reasons.append("Current medication to be assessed")

    if answers.has_traveled:
        score -= TRAVEL_PENALTY
        reasons.append("Recent travel to a risk zone")

    return EligibilityResult(
        score=score,
        eligible=score >= PASSING_SCORE,
        age=answers.age,
        weight=answers.weight,
        last_donation_date=answers.last_donation_date,
        has_illness=answers.has_illness,
        takes_medication=answers.takes_medication,
        has_traveled=answers.has_traveled,
        reasons=tuple(reasons),
    )


def next_eligible_date(last_donation_date: Optional[DateLike]) -> Optional[date]:
    if last_donation_date is None:
        return None
    if isinstance(last_donation_date, datetime):
        last_donation_date = last_donation_date.date()
    return last_donation_date + timedelta(days=DONATION_INTERVAL_DAYS)
