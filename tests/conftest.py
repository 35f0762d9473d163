import os
from datetime import date, datetime, time

import pytest

# Must be set before clinic_scheduler.core.config is imported
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test.db")

from clinic_scheduler.scheduling.availability import Weekday
from clinic_scheduler.scheduling.manager import ScheduleManager
from clinic_scheduler.scheduling.ports import InMemoryProfileDirectory, InMemoryScheduleStore

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)

PHYSICIAN = "physician-1"
OTHER_PHYSICIAN = "physician-2"
PATIENT = "patient-1"
OTHER_PATIENT = "patient-2"

def at(hour, minute=0, day=MONDAY):
    return datetime.combine(day, time(hour, minute))

@pytest.fixture
def profiles():
    return InMemoryProfileDirectory(
        patients=[PATIENT, OTHER_PATIENT],
        physicians=[PHYSICIAN, OTHER_PHYSICIAN]
    )

@pytest.fixture
def store():
    return InMemoryScheduleStore()

@pytest.fixture
def manager(profiles, store):
    """Manager whose first physician works Mondays 09:00-12:00."""
    manager = ScheduleManager(profiles, store=store)
    manager.set_physician_availability(PHYSICIAN, Weekday.MONDAY, time(9), time(12))
    return manager
