"""Tests for team role resolution and the split percentage table"""
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from techpay.classifier import classify_technician
from techpay.team_split import (
    resolve_roles, team_composition, split_percentage, allocate_pool, format_team_details
)


def tech(name, skill_class):
    position = f"Class {skill_class} Technician" if skill_class else "Dispatcher"
    return classify_technician(name, position)


def roles(profiles):
    return [role for _, role in resolve_roles(profiles)]


class TestResolveRoles:
    """Role assignment by team composition"""

    def test_single_senior_leads(self):
        assert roles([tech("Carl", 3)]) == ['Lead']

    def test_single_class_two_leads(self):
        assert roles([tech("Bob", 2)]) == ['Lead']

    def test_senior_with_class_two(self):
        assert roles([tech("Alice", 4), tech("Bob", 2)]) == ['Lead', 'Assistant']

    def test_class_two_pair_both_lead_without_senior(self):
        assert roles([tech("Bob", 2), tech("Eve", 2)]) == ['Lead', 'Lead']

    def test_apprentice_is_always_assistant(self):
        assert roles([tech("Alice", 3), tech("Dan", 1)]) == ['Lead', 'Assistant']

    def test_class_two_leads_apprentice(self):
        assert roles([tech("Bob", 2), tech("Dan", 1)]) == ['Lead', 'Assistant']

    def test_unclassified_gets_no_role(self):
        assert roles([tech("Alice", 3), tech("Zed", 0)]) == ['Lead', 'None']

    def test_lone_unclassified_gets_no_role(self):
        assert roles([tech("Zed", 0)]) == ['None']

    def test_composition_counts_apprentice_but_not_unclassified(self):
        resolved = resolve_roles([tech("Alice", 3), tech("Dan", 1), tech("Zed", 0)])
        assert team_composition(resolved) == (2, 1, 1)


class TestSplitPercentage:
    """Fixed percentage table"""

    @pytest.mark.parametrize("total,leads,assistants,lead_pct,assistant_pct", [
        (2, 1, 1, 65, 35),
        (2, 2, 0, 50, 50),
        (2, 0, 2, 50, 50),
        (3, 1, 2, 46, 27),
        (3, 2, 1, 38, 24),
        (3, 3, 0, 33.33, 33.33),
        (3, 0, 3, 33.33, 33.33),
        (4, 2, 2, 30, 20),
        (4, 3, 1, 30, 10),
        (4, 4, 0, 25, 25),
        (4, 0, 4, 25, 25),
    ])
    def test_table_values(self, total, leads, assistants, lead_pct, assistant_pct):
        assert split_percentage(total, leads, assistants, 'Lead') == lead_pct
        assert split_percentage(total, leads, assistants, 'Assistant') == assistant_pct

    def test_solo(self):
        assert split_percentage(1, 1, 0, 'Lead') == 100

    def test_no_role_gets_nothing(self):
        assert split_percentage(2, 1, 1, 'None') == 0

    def test_empty_team(self):
        assert split_percentage(0, 0, 0, 'Lead') == 0

    def test_inconsistent_total_is_recounted(self):
        assert split_percentage(3, 1, 1, 'Lead') == 65
        assert split_percentage(2, 0, 0, 'Lead') == 0

    def test_large_team_splits_evenly(self):
        assert split_percentage(5, 2, 3, 'Lead') == 20

    def test_unlisted_composition_splits_evenly(self):
        assert split_percentage(4, 1, 3, 'Assistant') == 25


class TestAllocatePool:
    """Per-technician payouts for one job"""

    def test_lead_and_assistant(self):
        result = allocate_pool([tech("Alice", 4), tech("Bob", 2)], 150)

        assert [a.final_role for a in result] == ['Lead', 'Assistant']
        assert [a.split_percent for a in result] == [65, 35]
        assert result[0].payout_amount == 97.50
        assert result[1].payout_amount == 52.50
        assert sum(a.payout_amount for a in result) == 150.00

    def test_two_seniors_split_evenly(self):
        result = allocate_pool([tech("Alice", 3), tech("Carl", 4)], 200)

        assert [a.split_percent for a in result] == [50, 50]
        assert sum(a.split_percent for a in result) == 100

    def test_one_lead_two_assistants(self):
        result = allocate_pool([tech("Alice", 4), tech("Bob", 2), tech("Eve", 2)], 100)

        assert [a.split_percent for a in result] == [46, 27, 27]
        assert [a.payout_amount for a in result] == [46.0, 27.0, 27.0]

    def test_apprentice_takes_slot_without_pay(self):
        result = allocate_pool([tech("Alice", 3), tech("Dan", 1)], 100)

        assert result[0].split_percent == 65
        assert result[0].payout_amount == 65.0
        assert result[1].final_role == 'Assistant'
        assert result[1].payout_amount == 0
        assert result[1].is_payable is False

    def test_unclassified_does_not_reduce_share(self):
        result = allocate_pool([tech("Carl", 3), tech("Zed", 0)], 80)

        assert result[0].split_percent == 100
        assert result[0].payout_amount == 80.0
        assert result[1].split_percent == 0

    def test_team_details(self):
        result = allocate_pool([tech("Alice", 4), tech("Dan", 1), tech("Zed", 0)], 100)

        assert format_team_details(result) == (
            "Alice (Class 4): Lead 65% | "
            "Dan (Class 1): Assistant 35% (apprentice, no payout) | "
            "Zed (Class 0): Not eligible"
        )
