"""Data models for Technician Payroll Splits"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Literal, Union

Role = Literal['Lead', 'Assistant', 'None']


@dataclass
class RosterEntry:
    """One row of the technician roster"""
    name: str
    position: str = ""


@dataclass
class TechnicianProfile:
    """Represents a technician as classified from their position title"""
    name: str
    skill_class: int = 0
    is_eligible_for_payout: bool = False
    default_role: Role = 'None'

    def __post_init__(self):
        if self.skill_class not in (0, 1, 2, 3, 4):
            raise ValueError("Skill class must be between 0 and 4")


@dataclass
class JobRecord:
    """One row of the PBP job ledger"""
    customer_name: str
    completion_date: Union[date, str]
    pool_amount: float
    primary_technician_name: str
    assigned_technician_names: str = ""
    job_business_unit: str = ""
    item_name: str = ""
    row_number: Optional[int] = None

    @property
    def dedup_key(self) -> str:
        if isinstance(self.completion_date, date):
            job_date = self.completion_date.isoformat()
        else:
            job_date = str(self.completion_date)
        return f"{self.customer_name}|{job_date}|{self.item_name}|{self.pool_amount:g}"


@dataclass
class JobTechnicianAssignment:
    """One technician's share of a single job's pool"""
    profile: TechnicianProfile
    final_role: Role
    split_percent: float
    payout_amount: float

    @property
    def is_payable(self) -> bool:
        return self.profile.is_eligible_for_payout and self.payout_amount > 0


@dataclass
class PayoutEntry:
    """One PBP output row for a technician's sheet"""
    customer_name: str
    job_business_unit: str
    completion_date: Union[date, str]
    item_name: str
    total_pool_amount: float
    technician_share: float
    role_for_job: Role
    split_percentage: float
    team_details: str = ""


@dataclass
class TechnicianPayout:
    """All PBP rows for one technician plus their total"""
    technician_name: str
    entries: List[PayoutEntry] = field(default_factory=list)

    @property
    def total(self) -> float:
        return round(sum(e.technician_share for e in self.entries), 2)


@dataclass
class LeadRecord:
    """One row of the Lead Set sheet"""
    customer_name: str
    lead_generated_by: str
    revenue: float
    completion_date: Optional[date] = None
    business_unit: str = ""
    row_number: Optional[int] = None


@dataclass
class LeadEntry:
    """Lead commission for one job"""
    customer_name: str
    business_unit: str
    completion_date: Optional[date]
    revenue: float
    amount: float
    percentage: int
    notes: str = ""


@dataclass
class TechnicianLeads:
    """All lead commission rows for one technician plus their total"""
    technician_name: str
    entries: List[LeadEntry] = field(default_factory=list)

    @property
    def total(self) -> float:
        return round(sum(e.amount for e in self.entries), 2)
