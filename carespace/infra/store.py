"""
Entity Store

In-memory doctors, spaces, schedule entries and bookings backed by CSV
files. Reference data is loaded once at startup. Bookings are the only
collection written at runtime: every write rewrites the whole file to
a temp file in the same directory and atomically replaces the original.
"""

import csv
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar

from carespace.config import Settings, get_settings
from carespace.core.errors import StorageFailure
from carespace.models.entities import (
    BOOKING_FIELDS,
    Booking,
    Doctor,
    ScheduleEntry,
    Space,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def read_csv(path: Path) -> list[dict]:
    """Read a CSV file with a header row into a list of row dicts.

    Blank lines are skipped and header names are stripped.

    Raises:
        StorageFailure: If the file cannot be read or parsed
    """
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            rows = []
            for row in reader:
                cleaned = {
                    (key or "").strip(): value
                    for key, value in row.items()
                    if key is not None
                }
                if any((value or "").strip() for value in cleaned.values()):
                    rows.append(cleaned)
            return rows
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        raise StorageFailure(f"Failed to read {path}: {e}") from e


def write_csv_atomic(path: Path, fieldnames: list[str], rows: list[dict]) -> None:
    """Write rows to `path` via a temp file and an atomic replace.

    The original file is either left untouched or fully replaced. The
    temp file is removed on every error path.

    Raises:
        StorageFailure: If writing or replacing fails
    """
    path = Path(path)
    tmp_name: Optional[str] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            newline="",
            encoding="utf-8",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            writer = csv.DictWriter(tmp, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise StorageFailure(f"Failed to write {path}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning(f"Could not remove temp file {tmp_name}")


class EntityStore:
    """
    Process-wide owner of the entity collections.

    Lifecycle:
    - init: `load()` reads every CSV file
    - mutate: `add_booking()` appends and flushes under `write_lock()`
    - teardown: nothing to release

    Readers get copies of the collections, so a query never observes a
    half-applied write.
    """

    def __init__(
        self,
        doctors_path: Path,
        spaces_path: Path,
        calendars_path: Path,
        bookings_path: Path,
    ):
        """Initialize an empty store.

        Args:
            doctors_path: Doctors CSV
            spaces_path: Spaces CSV
            calendars_path: Doctor schedule CSV
            bookings_path: Bookings CSV (rewritten on every booking)
        """
        self.doctors_path = Path(doctors_path)
        self.spaces_path = Path(spaces_path)
        self.calendars_path = Path(calendars_path)
        self.bookings_path = Path(bookings_path)

        self._doctors: list[Doctor] = []
        self._spaces: list[Space] = []
        self._schedule: list[ScheduleEntry] = []
        self._bookings: list[Booking] = []
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EntityStore":
        settings = settings or get_settings()
        return cls(
            doctors_path=settings.doctors_path,
            spaces_path=settings.spaces_path,
            calendars_path=settings.calendars_path,
            bookings_path=settings.bookings_path,
        )

    # === Loading ===

    def load(self) -> "EntityStore":
        """Load every collection from its CSV file.

        A file that is missing or unreadable yields an empty collection
        and an error log; the process keeps running.
        """
        with self._lock:
            self._doctors = self._load(self.doctors_path, Doctor.from_row)
            self._spaces = self._load(self.spaces_path, Space.from_row)
            self._schedule = self._load(self.calendars_path, ScheduleEntry.from_row)
            self._bookings = self._load(self.bookings_path, Booking.from_row)

        logger.info(
            f"Loaded {len(self._doctors)} doctors, {len(self._spaces)} spaces, "
            f"{len(self._bookings)} bookings, "
            f"{len(self._schedule)} doctor calendar entries"
        )
        return self

    def _load(self, path: Path, factory: Callable[[dict], T]) -> list[T]:
        if not path.exists():
            logger.warning(f"Data file not found, starting empty: {path}")
            return []

        try:
            rows = read_csv(path)
        except StorageFailure as e:
            logger.error(f"{e} - treating collection as empty")
            return []

        items = []
        for line_no, row in enumerate(rows, start=2):
            try:
                items.append(factory(row))
            except ValueError as e:
                logger.warning(f"Skipping malformed row {line_no} in {path.name}: {e}")
        return items

    # === Queries ===

    @property
    def doctors(self) -> list[Doctor]:
        with self._lock:
            return list(self._doctors)

    @property
    def spaces(self) -> list[Space]:
        with self._lock:
            return list(self._spaces)

    @property
    def schedule(self) -> list[ScheduleEntry]:
        with self._lock:
            return list(self._schedule)

    @property
    def bookings(self) -> list[Booking]:
        with self._lock:
            return list(self._bookings)

    def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        return next((d for d in self.doctors if d.id == doctor_id), None)

    def get_space(self, space_id: str) -> Optional[Space]:
        return next((s for s in self.spaces if s.id == space_id), None)

    def schedule_for(
        self,
        doctor_id: str,
        day: Optional[date] = None,
    ) -> list[ScheduleEntry]:
        """Schedule entries of one doctor, optionally for one date."""
        return [
            entry
            for entry in self.schedule
            if entry.doctor_id == doctor_id and (day is None or entry.date == day)
        ]

    def bookings_for_space(self, space_id: str) -> list[Booking]:
        return [b for b in self.bookings if b.space_id == space_id]

    def booking_ids(self) -> set[str]:
        with self._lock:
            return {b.id for b in self._bookings}

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "doctors": len(self._doctors),
                "spaces": len(self._spaces),
                "bookings": len(self._bookings),
                "doctor_calendar_entries": len(self._schedule),
            }

    # === Mutation ===

    @contextmanager
    def write_lock(self) -> Iterator["EntityStore"]:
        """Hold the store's write lock.

        Wrap a whole check-then-append-then-flush sequence in this so
        concurrent writers cannot both pass the check.

        Usage:
            with store.write_lock():
                if not conflicting_bookings(store.bookings_for_space(sid), iv):
                    store.add_booking(booking)
        """
        with self._lock:
            yield self

    def add_booking(self, booking: Booking) -> None:
        """Append a booking and flush the booking file.

        The booking stays in memory even when the flush fails.

        Raises:
            StorageFailure: If the flush fails
        """
        with self._lock:
            self._bookings.append(booking)
            self.flush_bookings()

    def flush_bookings(self) -> None:
        """Rewrite the bookings file from the in-memory collection.

        Raises:
            StorageFailure: If the file cannot be written
        """
        with self._lock:
            rows = [booking.to_row() for booking in self._bookings]
            write_csv_atomic(self.bookings_path, BOOKING_FIELDS, rows)
        logger.info(f"Saved {len(rows)} bookings to {self.bookings_path.name}")


# Singleton
_store: Optional[EntityStore] = None


def get_entity_store() -> EntityStore:
    """Get singleton EntityStore, loading it on first use."""
    global _store
    if _store is None:
        _store = EntityStore.from_settings().load()
    return _store


def init_store(store: Optional[EntityStore] = None) -> EntityStore:
    """Install (and load) the process-wide store.

    Args:
        store: Pre-built store, e.g. pointing at test data. When None,
            a store is built from settings.

    Returns:
        The installed store
    """
    global _store
    _store = (store or EntityStore.from_settings()).load()
    return _store


def reset_store() -> None:
    """Drop the singleton store (useful for testing)."""
    global _store
    _store = None
