from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional

from ..models.donor import BloodGroupShare, DonationBadge, DonorRecord, DonorSearchFilters
from .directory import reward_badges


def _accepts(wanted: str, value: Optional[str]) -> bool:
    return not wanted or value == wanted


def search_donors(donors: Iterable[DonorRecord], filters: DonorSearchFilters) -> List[DonorRecord]:
    """Blank filters are ignored; every other filter must match exactly."""
    return [
        donor
        for donor in donors
        if _accepts(filters.blood_group, donor.blood_group)
        and _accepts(filters.district, donor.district)
        and _accepts(filters.upazila, donor.upazila)
        and _accepts(filters.thana, donor.thana)
        and _accepts(filters.availability, donor.availability_status)
    ]


def blood_group_distribution(donors: Iterable[DonorRecord]) -> List[BloodGroupShare]:
    counts = Counter(donor.blood_group for donor in donors if donor.blood_group)
    total = sum(counts.values())
    return [
        BloodGroupShare(name=group, value=count, percentage=f"{count / total * 100:.1f}")
        for group, count in counts.items()
    ]


def donation_badge(count: int = 0) -> Optional[DonationBadge]:
    """Highest reward badge whose threshold the donation count reaches."""
    earned = [badge for badge in reward_badges() if count >= badge["threshold"]]
    if not earned:
        return None
    best = max(earned, key=lambda badge: badge["threshold"])
    return DonationBadge(label=best["name"], threshold=best["threshold"])
