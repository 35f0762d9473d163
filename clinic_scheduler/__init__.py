"""
Clinic Scheduler

A FastAPI-based appointment scheduling and conflict-resolution engine for
clinics: weekly physician availability, free-slot search, and booking
without double-booking under concurrent requests.
"""

__version__ = "1.0.0"
