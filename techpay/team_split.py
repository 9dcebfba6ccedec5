"""Team role resolution and pool split percentages for PBP jobs"""
from typing import Dict, List, Tuple

from .models import JobTechnicianAssignment, TechnicianProfile, Role

# (total techs, leads, assistants) -> (lead %, assistant %)
SPLIT_TABLE: Dict[Tuple[int, int, int], Tuple[float, float]] = {
    (2, 1, 1): (65, 35),
    (2, 2, 0): (50, 50),
    (2, 0, 2): (50, 50),
    (3, 1, 2): (46, 27),
    (3, 2, 1): (38, 24),
    (3, 3, 0): (33.33, 33.33),
    (3, 0, 3): (33.33, 33.33),
    (4, 2, 2): (30, 20),
    (4, 3, 1): (30, 10),
    (4, 4, 0): (25, 25),
    (4, 0, 4): (25, 25),
}


def resolve_roles(profiles: List[TechnicianProfile]) -> List[Tuple[TechnicianProfile, Role]]:
    """
    Assign each technician on a job their role for that job.

    Rules, first match wins:
    1. Class 1 is always an Assistant (counts toward the team, never paid).
    2. Other ineligible technicians (class 0) get no role.
    3. A class 2 leads when nobody on the job is class 3 or higher.
    4. A lone technician of class 2 or higher leads.
    5. Everyone else keeps the role their class implies.
    """
    eligible_classes = [p.skill_class for p in profiles if p.is_eligible_for_payout]
    highest_eligible_class = max(eligible_classes) if eligible_classes else 0
    has_senior = any(p.skill_class >= 3 for p in profiles)
    solo = len(profiles) == 1

    resolved = []
    for profile in profiles:
        if profile.skill_class == 1:
            role = 'Assistant'
        elif not profile.is_eligible_for_payout:
            role = 'None'
        elif profile.skill_class == 2 and highest_eligible_class == 2 and not has_senior:
            role = 'Lead'
        elif solo and profile.skill_class >= 2:
            role = 'Lead'
        else:
            role = profile.default_role
        resolved.append((profile, role))
    return resolved


def team_composition(resolved: List[Tuple[TechnicianProfile, Role]]) -> Tuple[int, int, int]:
    """Return (total techs, lead count, assistant count), ignoring role None."""
    leads = sum(1 for _, role in resolved if role == 'Lead')
    assistants = sum(1 for _, role in resolved if role == 'Assistant')
    total = sum(1 for _, role in resolved if role != 'None')
    return total, leads, assistants


def split_percentage(total_techs: int, lead_count: int, assistant_count: int, role: Role) -> float:
    """
    Percentage of the pool paid to one technician with the given role.

    The table values are fixed business constants. Compositions the table does
    not list fall back to an even split.
    """
    if role == 'None' or total_techs == 0:
        return 0
    if lead_count + assistant_count != total_techs:
        total_techs = lead_count + assistant_count
        if total_techs == 0:
            return 0

    if total_techs == 1:
        return 100

    split = SPLIT_TABLE.get((total_techs, lead_count, assistant_count))
    if split is None:
        return 100 / total_techs

    lead_pct, assistant_pct = split
    return lead_pct if role == 'Lead' else assistant_pct


def allocate_pool(profiles: List[TechnicianProfile], pool_amount: float) -> List[JobTechnicianAssignment]:
    """Split a job's pool across every technician on it."""
    resolved = resolve_roles(profiles)
    total, leads, assistants = team_composition(resolved)

    assignments = []
    for profile, role in resolved:
        percent = split_percentage(total, leads, assistants, role)
        if profile.is_eligible_for_payout:
            payout = round(pool_amount * percent / 100, 2)
        else:
            payout = 0.0
        assignments.append(JobTechnicianAssignment(
            profile=profile,
            final_role=role,
            split_percent=percent,
            payout_amount=payout
        ))
    return assignments


def format_percent(percent: float) -> str:
    return f"{round(percent, 2):g}%"


def format_team_details(assignments: List[JobTechnicianAssignment]) -> str:
    """Human readable breakdown: 'Alice (Class 4): Lead 65% | Bob (Class 2): Assistant 35%'"""
    parts = []
    for a in assignments:
        label = f"{a.profile.name} (Class {a.profile.skill_class})"
        if a.profile.skill_class == 1:
            parts.append(f"{label}: {a.final_role} {format_percent(a.split_percent)} (apprentice, no payout)")
        elif not a.profile.is_eligible_for_payout:
            parts.append(f"{label}: Not eligible")
        else:
            parts.append(f"{label}: {a.final_role} {format_percent(a.split_percent)}")
    return " | ".join(parts)
