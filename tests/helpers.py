from clinic_scheduler.scheduling.appointments import Appointment
from clinic_scheduler.scheduling.intervals import TimeInterval

from .conftest import MONDAY, PATIENT, PHYSICIAN, at

def interval(hour, minute, duration_minutes, day=MONDAY):
    return TimeInterval.from_duration(at(hour, minute, day), duration_minutes)

def appointment(hour, minute, duration_minutes, **kwargs):
    kwargs.setdefault("patient_id", PATIENT)
    kwargs.setdefault("physician_id", PHYSICIAN)
    return Appointment(interval=interval(hour, minute, duration_minutes), **kwargs)
