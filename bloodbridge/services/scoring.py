"""
Donor Suggestion Scorer
Ranks directory donors against an in-progress blood request so the requester
sees the most promising matches, and so the top matches can be attached to the
submitted request as ``aiRecommendations``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from ..models.donor import DonorRecommendation, DonorRecord, RequestCriteria, ScoredDonor


BLOOD_GROUP_POINTS = 5
DISTRICT_POINTS = 3
UPAZILA_POINTS = 2
AVAILABLE_POINTS = 4
RECOVERED_DONOR_POINTS = 2
RECENT_DONOR_PENALTY = -3

RECOVERED_AFTER_DAYS = 90
RECENT_WITHIN_DAYS = 60
MS_PER_DAY = 86_400_000

SUGGESTION_LIMIT = 3


def parse_donation_date(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or datetime string.

    Date-only values and naive datetimes are read as UTC. Anything that does
    not parse gives None.
    """
    if not raw or not isinstance(raw, str):
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_since(raw: Optional[str], now: datetime) -> Optional[float]:
    donated_at = parse_donation_date(raw)
    if donated_at is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed_ms = (now - donated_at).total_seconds() * 1000
    return elapsed_ms / MS_PER_DAY


def is_candidate(donor: DonorRecord) -> bool:
    return donor.role == "donor" and donor.status == "active"


def as_donor(row: Any) -> Optional[DonorRecord]:
    if isinstance(row, DonorRecord):
        return row
    if not isinstance(row, Mapping):
        return None
    try:
        return DonorRecord.model_validate(dict(row))
    except ValidationError:
        return None


def as_criteria(raw: Any) -> Optional[RequestCriteria]:
    if isinstance(raw, RequestCriteria):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return RequestCriteria.model_validate(dict(raw))
    except ValidationError:
        return None


def _matches(value: Optional[str], wanted: str) -> bool:
    # blank criteria never match, even a donor with the same blank field
    return bool(wanted) and value == wanted


def score_donor(donor: DonorRecord, criteria: RequestCriteria, now: datetime) -> int:
    score = 0
    if _matches(donor.blood_group, criteria.blood_group):
        score += BLOOD_GROUP_POINTS
    if _matches(donor.district, criteria.district):
        score += DISTRICT_POINTS
    if _matches(donor.upazila, criteria.upazila):
        score += UPAZILA_POINTS
    if donor.availability_status == "available":
        score += AVAILABLE_POINTS

    age_days = days_since(donor.last_donation_date, now)
    if age_days is not None:
        if age_days > RECOVERED_AFTER_DAYS:
            score += RECOVERED_DONOR_POINTS
        if age_days < RECENT_WITHIN_DAYS:
            score += RECENT_DONOR_PENALTY
    return score


def score_donors(
    donors: Optional[Sequence[Any]],
    criteria: Any,
    now: Optional[datetime] = None,
) -> List[ScoredDonor]:
    """
    Score eligible donors and return the best matches.

    Only active accounts with the donor role are considered. The result is
    sorted by score, highest first, ties keeping input order, and holds at
    most SUGGESTION_LIMIT entries. Inputs are never modified.

    Donors may be DonorRecord instances or raw camelCase mappings; rows that
    do not validate are skipped. Criteria that cannot be read give no
    suggestions.

    Args:
        donors: Donor records or rows from the directory fetch
        criteria: RequestCriteria, or a mapping with the same fields
        now: Reference time for donation recency (defaults to current UTC time)

    Returns:
        List of ScoredDonor
    """
    criteria = as_criteria(criteria)
    if criteria is None or not isinstance(donors, (list, tuple)) or not donors:
        return []
    if now is None:
        now = datetime.now(timezone.utc)

    scored = [
        ScoredDonor(
            name=donor.name,
            email=donor.email,
            district=donor.district,
            upazila=donor.upazila,
            availability_status=donor.availability_status,
            score=score_donor(donor, criteria, now),
        )
        for donor in (as_donor(row) for row in donors)
        if donor is not None and is_candidate(donor)
    ]
    scored.sort(key=lambda item: item.score, reverse=True)

    logger.debug("Scored {} of {} donors for {}", len(scored), len(donors), criteria.blood_group or "any group")
    return scored[:SUGGESTION_LIMIT]


def suggest_donors(
    donors: Optional[Sequence[Any]],
    criteria: Any,
    now: Optional[datetime] = None,
) -> List[ScoredDonor]:
    """Suggestions for the request form; nothing until a blood group is picked."""
    criteria = as_criteria(criteria)
    if criteria is None or not criteria.blood_group:
        return []
    return score_donors(donors, criteria, now)


def recommendation_snapshot(scored: Iterable[ScoredDonor]) -> List[DonorRecommendation]:
    return [
        DonorRecommendation(
            name=item.name,
            email=item.email,
            district=item.district,
            upazila=item.upazila,
            score=item.score,
            availability_status=item.availability_status,
        )
        for item in scored
    ]
