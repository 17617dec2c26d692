"""Shared fixtures: a small CSV data set written to a temporary directory."""

import csv
from pathlib import Path

import pytest

from carespace.config import Settings
from carespace.infra.store import EntityStore
from carespace.models.entities import (
    BOOKING_FIELDS,
    DOCTOR_FIELDS,
    SCHEDULE_FIELDS,
    SPACE_FIELDS,
)

DOCTORS = [
    {"Id": "D1", "Name": "Dr. Alice Moreau", "Email": "alice@example.com",
     "Specialty": "Pediatric", "Dedicated Space in Office": "yes",
     "Home Office": "no", "Office Id": "R1"},
    {"Id": "D2", "Name": "Dr. Ben Okafor", "Email": "ben@example.com",
     "Specialty": "Cardiology", "Dedicated Space in Office": "no",
     "Home Office": "yes", "Office Id": ""},
    {"Id": "D3", "Name": "Dr. Chen Li", "Email": "chen@example.com",
     "Specialty": "Research", "Dedicated Space in Office": "no",
     "Home Office": "no", "Office Id": ""},
]

SPACES = [
    {"Space ID": "R1", "SpaceName": "Consultation Room A", "Category": "Clinical",
     "Capacity (people)": "3", "Area (sqm)": "18", "Bookable": "Yes",
     "Specialized Equipment": "Examination table", "Conference Equip.": "",
     "uses": "Patient consultation"},
    {"Space ID": "R2", "SpaceName": "Research Lab", "Category": "Research",
     "Capacity (people)": "6", "Area (sqm)": "40", "Bookable": "Yes",
     "Specialized Equipment": "Microscopes", "Conference Equip.": "",
     "uses": "Lab work; Research"},
    {"Space ID": "R3", "SpaceName": "Admin Office", "Category": "Admin",
     "Capacity (people)": "2", "Area (sqm)": "12", "Bookable": "Yes",
     "Specialized Equipment": "", "Conference Equip.": "Phone",
     "uses": "Administration"},
    {"Space ID": "R4", "SpaceName": "Operating Theatre", "Category": "Operating",
     "Capacity (people)": "8", "Area (sqm)": "45", "Bookable": "No",
     "Specialized Equipment": "Surgical suite", "Conference Equip.": "",
     "uses": "Surgery"},
]

SCHEDULE = [
    {"DoctorID": "D1", "Date": "2025-07-10", "Time": "09:00-11:00",
     "Activity": "Consultations", "Location": "R1", "Notes": ""},
    {"DoctorID": "D2", "Date": "2025-07-15", "Time": "OFF",
     "Activity": "", "Location": "", "Notes": "Vacation"},
]

BOOKINGS = [
    {"Booking ID": "BK1", "Space ID": "R1", "Doctor ID": "D1",
     "Start Timestamp": "2025-07-15T14:00:00", "End Timestamp": "2025-07-15T15:00:00",
     "Duration (hours)": "1", "Activity": "Consultation", "Notes": "",
     "Status": "Confirmed", "Created At": "2025-07-01T08:00:00"},
]


def write_csv(path: Path, fieldnames: list[str], rows: list[dict]) -> Path:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Directory holding the four CSV files."""
    write_csv(tmp_path / "Doctors.csv", DOCTOR_FIELDS, DOCTORS)
    write_csv(tmp_path / "Spaces.csv", SPACE_FIELDS, SPACES)
    write_csv(tmp_path / "DoctorCalendars.csv", SCHEDULE_FIELDS, SCHEDULE)
    write_csv(tmp_path / "SpaceBookings.csv", BOOKING_FIELDS, BOOKINGS)
    return tmp_path


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(data_dir=data_dir, _env_file=None)


@pytest.fixture
def store(settings: Settings) -> EntityStore:
    """Loaded store over the temporary data set."""
    return EntityStore.from_settings(settings).load()
