"""Tests for optimal-match generation."""

from carespace.core.scheduling.availability import DoctorAvailability, SpaceAvailability
from carespace.core.scheduling.matching import generate_matches
from carespace.models.entities import Doctor, Space


def doctor(doctor_id: str, specialty: str, available: bool = True) -> DoctorAvailability:
    return DoctorAvailability(
        doctor=Doctor(id=doctor_id, name=f"Dr. {doctor_id}", specialty=specialty),
        available=available,
        reason="",
    )


def space(space_id: str, category: str, available: bool = True) -> SpaceAvailability:
    return SpaceAvailability(
        space=Space(id=space_id, name=space_id, category=category, bookable=True),
        available=available,
        reason="",
    )


class TestGenerateMatches:
    """Test the compatible cross product."""

    def test_cardiology_only_clinical_and_diagnostic(self):
        doctors = [doctor("D2", "Cardiology")]
        spaces = [space("R1", "Clinical"), space("R2", "Research"), space("R5", "Diagnostic")]

        matches = generate_matches(doctors, spaces)

        assert [m.space.space_id for m in matches] == ["R1", "R5"]
        assert all(m.compatibility == "High" for m in matches)

    def test_unmatched_specialty_pairs_with_everything(self):
        matches = generate_matches(
            [doctor("D4", "General Medicine")],
            [space("R1", "Clinical"), space("R3", "Admin")],
        )
        assert len(matches) == 2

    def test_unavailable_entries_are_skipped(self):
        matches = generate_matches(
            [doctor("D1", "Research", available=False), doctor("D3", "Research")],
            [space("R1", "Clinical", available=False), space("R2", "Research")],
        )
        assert [(m.doctor.doctor_id, m.space.space_id) for m in matches] == [("D3", "R2")]

    def test_doctor_major_order(self):
        matches = generate_matches(
            [doctor("D3", "Research"), doctor("D4", "General")],
            [space("R2", "Research"), space("R3", "Admin")],
        )
        assert [(m.doctor.doctor_id, m.space.space_id) for m in matches] == [
            ("D3", "R2"),
            ("D3", "R3"),
            ("D4", "R2"),
            ("D4", "R3"),
        ]

    def test_same_space_may_appear_in_several_matches(self):
        matches = generate_matches(
            [doctor("D3", "Research"), doctor("D4", "General")],
            [space("R2", "Research")],
        )
        assert [m.space.space_id for m in matches] == ["R2", "R2"]

    def test_empty_inputs(self):
        assert generate_matches([], [space("R1", "Clinical")]) == []
        assert generate_matches([doctor("D1", "Pediatric")], []) == []

    def test_to_dict(self):
        match = generate_matches([doctor("D1", "Pediatric")], [space("R1", "Clinical")])[0]
        data = match.to_dict()
        assert data["doctor"]["doctor_id"] == "D1"
        assert data["space"]["space_id"] == "R1"
        assert data["compatibility"] == "High"
