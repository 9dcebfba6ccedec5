"""Tests for technician classification and the roster cache"""
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from techpay.classifier import TechnicianRoster, classify_technician, parse_skill_class
from techpay.errors import RosterUnavailableError
from techpay.models import RosterEntry


class TestClassifyTechnician:

    @pytest.mark.parametrize("position,expected", [
        ("Class 4 Technician", 4),
        ("  CLASS 3 - Service  ", 3),
        ("class2", 2),
        ("Apprentice (Class 1)", 1),
        ("Class 5 Technician", 0),
        ("Dispatcher", 0),
        ("", 0),
        (None, 0),
    ])
    def test_parse_skill_class(self, position, expected):
        assert parse_skill_class(position) == expected

    def test_senior_is_eligible_lead(self):
        profile = classify_technician("Alice", "Class 4 Technician")
        assert profile.skill_class == 4
        assert profile.is_eligible_for_payout is True
        assert profile.default_role == 'Lead'

    def test_class_two_is_eligible_assistant(self):
        profile = classify_technician("Bob", "Class 2")
        assert profile.is_eligible_for_payout is True
        assert profile.default_role == 'Assistant'

    def test_apprentice_is_ineligible_assistant(self):
        profile = classify_technician("Dan", "Class 1 Apprentice")
        assert profile.is_eligible_for_payout is False
        assert profile.default_role == 'Assistant'

    def test_unknown_title(self):
        profile = classify_technician("Zed", "Office")
        assert profile.skill_class == 0
        assert profile.is_eligible_for_payout is False
        assert profile.default_role == 'None'


class TestTechnicianRoster:

    def setup_method(self):
        self.roster = TechnicianRoster.from_entries([
            RosterEntry("Alice Smith", "Class 4 Technician"),
            RosterEntry("Bob", "Class 2 Technician"),
            RosterEntry("bob", "Class 3 Technician"),
            RosterEntry("", "Class 3 Technician"),
        ])

    def test_lookup_is_case_insensitive(self):
        profile = self.roster.lookup("alice smith")
        assert profile.skill_class == 4
        assert profile.name == "alice smith"

    def test_first_duplicate_wins(self):
        assert len(self.roster) == 2
        assert self.roster.lookup("BOB").skill_class == 2

    def test_unknown_technician_is_class_zero(self):
        profile = self.roster.lookup("Nobody")
        assert profile.skill_class == 0
        assert profile.default_role == 'None'

    def test_knows(self):
        assert self.roster.knows(" Bob ")
        assert not self.roster.knows("Carl")

    def test_missing_roster_is_fatal(self):
        with pytest.raises(RosterUnavailableError):
            TechnicianRoster.from_entries(None)

    def test_empty_roster_is_fatal(self):
        with pytest.raises(RosterUnavailableError):
            TechnicianRoster.from_entries([])
