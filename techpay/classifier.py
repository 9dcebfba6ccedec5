"""Technician classification from roster position titles"""
import logging
import re
from typing import Dict, Iterable, Optional, Tuple

from .errors import RosterUnavailableError
from .models import RosterEntry, TechnicianProfile, Role

logger = logging.getLogger(__name__)

CLASS_PATTERN = re.compile(r'class\s*([1-4])')

# skill class -> (eligible for payout, default role)
CLASS_RULES: Dict[int, Tuple[bool, Role]] = {
    4: (True, 'Lead'),
    3: (True, 'Lead'),
    2: (True, 'Assistant'),
    1: (False, 'Assistant'),  # apprentice: counts toward the team, earns nothing
    0: (False, 'None'),
}


def parse_skill_class(position: Optional[str]) -> int:
    """Return the class digit found in a position title, or 0."""
    if not position:
        return 0
    match = CLASS_PATTERN.search(str(position).strip().lower())
    if not match:
        return 0
    return int(match.group(1))


def classify_technician(name: str, position: Optional[str]) -> TechnicianProfile:
    """
    Build a technician profile from a free-text position title.

    "Class 3 Technician" -> class 3, eligible, Lead.
    Anything without a "class N" marker is class 0, ineligible, no role.
    """
    skill_class = parse_skill_class(position)
    eligible, role = CLASS_RULES[skill_class]
    return TechnicianProfile(
        name=name,
        skill_class=skill_class,
        is_eligible_for_payout=eligible,
        default_role=role
    )


class TechnicianRoster:
    """
    Read-only lookup of technician profiles, keyed by lowercase name.

    Built once per run and shared by every technician processed in that run.
    """

    def __init__(self, profiles: Dict[str, TechnicianProfile]):
        self._profiles = profiles

    @classmethod
    def from_entries(cls, entries: Optional[Iterable[RosterEntry]]) -> 'TechnicianRoster':
        if entries is None:
            raise RosterUnavailableError("Technician roster is not available")

        profiles = {}
        for entry in entries:
            name = (entry.name or '').strip()
            if not name:
                continue
            key = name.lower()
            if key in profiles:
                logger.warning("Duplicate roster entry for %s, keeping the first one", name)
                continue
            profiles[key] = classify_technician(name, entry.position)

        if not profiles:
            raise RosterUnavailableError("Technician roster has no technicians")

        logger.info("Loaded roster with %d technicians", len(profiles))
        return cls(profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def knows(self, name: str) -> bool:
        return (name or '').strip().lower() in self._profiles

    def lookup(self, name: str) -> TechnicianProfile:
        """Cached profile for name; unknown technicians come back as class 0."""
        profile = self._profiles.get((name or '').strip().lower())
        if profile is None:
            logger.info("Technician %s not found in roster, treating as class 0", name)
            return classify_technician(name, None)
        # Keep the spelling used on the job row
        return TechnicianProfile(
            name=name,
            skill_class=profile.skill_class,
            is_eligible_for_payout=profile.is_eligible_for_payout,
            default_role=profile.default_role
        )

    def names(self):
        return [p.name for p in self._profiles.values()]
