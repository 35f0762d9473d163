import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import time, timedelta, timezone
import threading

from clinic_scheduler.scheduling.appointments import AppointmentStatus
from clinic_scheduler.scheduling.availability import Weekday
from clinic_scheduler.scheduling.blocks import UnavailabilityReason
from clinic_scheduler.scheduling.errors import (
    AlreadyTerminalError, ConflictError, InvalidIntervalError, NoAvailabilityError,
    NotFoundError, PersistenceError, SlotUnavailableError
)
from clinic_scheduler.scheduling.manager import ScheduleManager, SchedulingPolicy
from clinic_scheduler.scheduling.ports import InMemoryScheduleStore
from clinic_scheduler.scheduling.strategies import PreferredTimeOfDayStrategy

from .conftest import MONDAY, OTHER_PATIENT, OTHER_PHYSICIAN, PATIENT, PHYSICIAN, TUESDAY, at

def book(manager, hour, minute=0, duration=30, patient=PATIENT, physician=PHYSICIAN):
    return manager.schedule_appointment(physician, patient, at(hour, minute), duration)

class FailingStore(InMemoryScheduleStore):
    """In-memory store whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.failing = False

    def save_appointment(self, appointment):
        if self.failing:
            raise RuntimeError("database unavailable")
        super().save_appointment(appointment)

    def replace_windows(self, physician_id, day_of_week, windows):
        if self.failing:
            raise RuntimeError("database unavailable")
        super().replace_windows(physician_id, day_of_week, windows)

    def save_block(self, block):
        if self.failing:
            raise RuntimeError("database unavailable")
        super().save_block(block)

    def delete_block(self, block_id):
        if self.failing:
            raise RuntimeError("database unavailable")
        super().delete_block(block_id)

@pytest.fixture
def failing_store():
    return FailingStore()

@pytest.fixture
def fragile(profiles, failing_store):
    """Manager over a store that can be made to fail."""
    manager = ScheduleManager(profiles, store=failing_store)
    manager.set_physician_availability(PHYSICIAN, Weekday.MONDAY, time(9), time(12))
    return manager

class TestScheduleScenarios:

    def test_book_free_slot(self, manager):
        """Test booking 09:00-09:30 inside the Monday window."""
        result = book(manager, 9)
        assert result.success
        assert result.appointment.status is AppointmentStatus.SCHEDULED
        assert result.appointment.end == at(9, 30)

    def test_overlapping_booking_is_a_conflict(self, manager):
        """Test that 09:15-09:45 conflicts with 09:00-09:30."""
        first = book(manager, 9).appointment
        result = book(manager, 9, 15, patient=OTHER_PATIENT)
        assert not result.success
        assert isinstance(result.error, ConflictError)
        assert result.error_code == "conflict"
        assert [c.id for c in result.conflicts] == [first.id]

    def test_conflict_suggests_alternatives(self, manager):
        """Test that a conflict comes back with free slots of the same length."""
        book(manager, 9)
        result = book(manager, 9, 15, patient=OTHER_PATIENT)
        assert [slot.start for slot in result.alternatives] == [at(9, 30), at(10), at(10, 30)]

    def test_booking_outside_availability(self, manager):
        """Test that 12:00-12:30 is outside the window."""
        result = book(manager, 12)
        assert isinstance(result.error, NoAvailabilityError)

    def test_available_slots_after_booking(self, manager):
        """Test 30-minute slots once 09:00-09:30 is taken."""
        book(manager, 9)
        slots = manager.get_available_time_slots(PHYSICIAN, MONDAY, 30)
        assert [slot.start for slot in slots] == [at(9, 30), at(10), at(10, 30), at(11), at(11, 30)]

    def test_cancel_then_rebook(self, manager):
        """Test that cancelling frees the slot and rebooking gets a new id."""
        first = book(manager, 9).appointment
        assert manager.cancel_appointment(PHYSICIAN, first.id, "conflict at work").success
        slots = manager.get_available_time_slots(PHYSICIAN, MONDAY, 30)
        assert slots[0].start == at(9)

        rebooked = book(manager, 9, patient=OTHER_PATIENT).appointment
        assert rebooked.id != first.id
        assert manager.get_appointment(first.id).status is AppointmentStatus.CANCELLED

    def test_reschedule_onto_scheduled_appointment(self, manager):
        """Test that a rejected reschedule keeps the original interval."""
        first = book(manager, 9).appointment
        book(manager, 10, patient=OTHER_PATIENT)
        result = manager.reschedule_appointment(PHYSICIAN, first.id, at(10), 30)
        assert isinstance(result.error, ConflictError)
        assert manager.get_appointment(first.id).interval == first.interval

class TestScheduleValidation:

    def test_unknown_patient(self, manager):
        """Test that bookings for unknown patients are rejected."""
        result = book(manager, 9, patient="nobody")
        assert isinstance(result.error, NotFoundError)
        assert result.message == "Patient with ID nobody not found"

    def test_unknown_physician(self, manager):
        """Test that bookings with unknown physicians are rejected."""
        result = book(manager, 9, physician="nobody")
        assert isinstance(result.error, NotFoundError)

    @pytest.mark.parametrize("duration", [10, 241])
    def test_duration_outside_policy(self, manager, duration):
        """Test the configured duration bounds."""
        result = book(manager, 9, duration=duration)
        assert isinstance(result.error, InvalidIntervalError)

    def test_start_is_floored_to_minute(self, manager):
        """Test that seconds are dropped from the requested start."""
        start = at(9).replace(second=30)
        result = manager.schedule_appointment(PHYSICIAN, PATIENT, start, 30)
        assert result.appointment.start == at(9)

    def test_offset_aware_start_is_rejected(self, manager):
        """Test that a start with a UTC offset never reaches the schedule."""
        result = manager.schedule_appointment(PHYSICIAN, PATIENT, at(9).replace(tzinfo=timezone.utc), 30)
        assert isinstance(result.error, InvalidIntervalError)
        assert [slot.start for slot in manager.get_available_time_slots(PHYSICIAN, MONDAY, 60)] == [at(9), at(10), at(11)]
        assert book(manager, 9).success

    def test_offset_aware_search_and_queries(self, manager):
        """Test that slot search and queries refuse offset-aware times."""
        aware = at(8).replace(tzinfo=timezone.utc)
        assert isinstance(manager.find_next_available_slot(PHYSICIAN, 30, aware).error, InvalidIntervalError)
        with pytest.raises(ValueError):
            manager.check_conflicts(PHYSICIAN, aware, 30)
        with pytest.raises(ValueError):
            manager.get_schedule_in_range(PHYSICIAN, aware, aware + timedelta(days=1))

    def test_custom_policy(self, profiles):
        """Test a manager built with a narrower policy."""
        manager = ScheduleManager(profiles, policy=SchedulingPolicy(max_duration_minutes=60))
        manager.set_physician_availability(PHYSICIAN, Weekday.MONDAY, time(9), time(12))
        assert isinstance(book(manager, 9, duration=90).error, InvalidIntervalError)
        assert book(manager, 9, duration=60).success

class TestTransitions:

    def test_cancel_twice(self, manager):
        """Test that cancelling a cancelled appointment fails without changes."""
        first = book(manager, 9).appointment
        cancelled = manager.cancel_appointment(PHYSICIAN, first.id).appointment
        result = manager.cancel_appointment(PHYSICIAN, first.id)
        assert isinstance(result.error, AlreadyTerminalError)
        assert manager.get_appointment(first.id) == cancelled

    def test_complete_and_no_show(self, manager):
        """Test the remaining terminal transitions."""
        first = book(manager, 9).appointment
        second = book(manager, 10).appointment
        assert manager.complete_appointment(PHYSICIAN, first.id).appointment.status is AppointmentStatus.COMPLETED
        assert manager.mark_no_show(PHYSICIAN, second.id).appointment.status is AppointmentStatus.NO_SHOW

    def test_wrong_physician(self, manager):
        """Test that an appointment is only found under its own physician."""
        first = book(manager, 9).appointment
        result = manager.cancel_appointment(OTHER_PHYSICIAN, first.id)
        assert isinstance(result.error, NotFoundError)

    def test_reschedule_in_place(self, manager):
        """Test moving an appointment to a free time."""
        first = book(manager, 9).appointment
        result = manager.reschedule_appointment(PHYSICIAN, first.id, at(11), 45)
        assert result.success
        assert result.appointment.id == first.id
        assert result.appointment.end == at(11, 45)

    def test_link_clinical_document(self, manager):
        """Test linking a document without naming the physician."""
        first = book(manager, 9).appointment
        result = manager.link_clinical_document(first.id, "doc-42")
        assert result.appointment.clinical_document_id == "doc-42"
        assert isinstance(manager.link_clinical_document("missing", "doc").error, NotFoundError)

    def test_cancel_patient_appointments(self, manager):
        """Test cancelling a patient's bookings across physicians."""
        manager.set_physician_availability(OTHER_PHYSICIAN, Weekday.MONDAY, time(9), time(12))
        mine = book(manager, 9).appointment
        elsewhere = book(manager, 10, physician=OTHER_PHYSICIAN).appointment
        theirs = book(manager, 11, patient=OTHER_PATIENT).appointment

        cancelled = manager.cancel_patient_appointments(PATIENT, "moved away")
        assert [a.id for a in cancelled] == [mine.id, elsewhere.id]
        assert manager.get_appointment(theirs.id).is_scheduled

class TestSlotSearch:

    def test_find_next_available_slot(self, manager):
        """Test finding the earliest free slot after a time."""
        book(manager, 9)
        result = manager.find_next_available_slot(PHYSICIAN, 30, at(8))
        assert result.slot.start == at(9, 30)

    def test_next_slot_rolls_to_next_week(self, manager):
        """Test that the search continues to the next working day."""
        result = manager.find_next_available_slot(PHYSICIAN, 30, at(12))
        assert result.slot.start == at(9, day=MONDAY + timedelta(days=7))

    def test_no_slot_within_horizon(self, manager):
        """Test SlotUnavailableError when nothing fits before the horizon."""
        result = manager.find_next_available_slot(OTHER_PHYSICIAN, 30, at(8))
        assert isinstance(result.error, SlotUnavailableError)

    def test_schedule_first_available(self, manager):
        """Test booking whatever slot the strategy picks."""
        book(manager, 9)
        result = manager.schedule_first_available(PHYSICIAN, OTHER_PATIENT, at(8), 30)
        assert result.success
        assert result.appointment.start == at(9, 30)
        assert result.slot == result.appointment.interval

    def test_schedule_with_preferred_time_of_day(self, manager):
        """Test a strategy limited to late-morning starts."""
        strategy = PreferredTimeOfDayStrategy(time(11), time(12))
        result = manager.schedule_first_available(PHYSICIAN, PATIENT, at(8), 30, strategy=strategy)
        assert result.appointment.start == at(11)

    def test_slots_for_out_of_policy_duration(self, manager):
        """Test that durations outside policy have no slots."""
        assert manager.get_available_time_slots(PHYSICIAN, MONDAY, 5) == []

    def test_slots_on_unavailable_day(self, manager):
        """Test that a day without windows has no slots."""
        assert manager.get_available_time_slots(PHYSICIAN, TUESDAY, 30) == []

    def test_check_conflicts(self, manager):
        """Test previewing conflicts without booking."""
        first = book(manager, 9).appointment
        assert [a.id for a in manager.check_conflicts(PHYSICIAN, at(9, 15), 30)] == [first.id]
        assert manager.check_conflicts(PHYSICIAN, at(9, 30), 30) == []

    def test_check_conflicts_rejects_non_positive_duration(self, manager):
        """Test that a non-positive duration is a programming error."""
        with pytest.raises(ValueError):
            manager.check_conflicts(PHYSICIAN, at(9), 0)
        with pytest.raises(ValueError):
            manager.check_conflicts(PHYSICIAN, at(9), -30)

class TestAvailability:

    def test_split_shift(self, manager):
        """Test adding a second window on the same day."""
        assert manager.add_physician_availability(PHYSICIAN, Weekday.MONDAY, time(14), time(16)).success
        assert book(manager, 14).success

    def test_overlapping_window_rejected(self, manager):
        """Test that overlapping windows are refused."""
        result = manager.add_physician_availability(PHYSICIAN, Weekday.MONDAY, time(11), time(13))
        assert isinstance(result.error, InvalidIntervalError)

    def test_clear_day(self, manager):
        """Test that clearing a day stops new bookings."""
        manager.clear_physician_availability(PHYSICIAN, Weekday.MONDAY)
        assert isinstance(book(manager, 9).error, NoAvailabilityError)
        assert manager.get_physician_availability(PHYSICIAN) == []

    def test_unknown_physician(self, manager):
        """Test that availability cannot be set for unknown physicians."""
        result = manager.set_physician_availability("nobody", Weekday.MONDAY, time(9), time(12))
        assert isinstance(result.error, NotFoundError)

class TestQueries:

    def test_get_schedule_in_range(self, manager):
        """Test the range view over every status."""
        first = book(manager, 9).appointment
        second = book(manager, 10).appointment
        manager.cancel_appointment(PHYSICIAN, first.id)
        found = manager.get_schedule_in_range(PHYSICIAN, at(0), at(23))
        assert [a.id for a in found] == [first.id, second.id]

    def test_empty_range_is_a_programming_error(self, manager):
        """Test that start must precede end."""
        with pytest.raises(ValueError):
            manager.get_schedule_in_range(PHYSICIAN, at(10), at(10))

    def test_get_patient_appointments(self, manager):
        """Test listing a patient's appointments by start."""
        manager.set_physician_availability(OTHER_PHYSICIAN, Weekday.MONDAY, time(9), time(12))
        later = book(manager, 11).appointment
        earlier = book(manager, 9, physician=OTHER_PHYSICIAN).appointment
        book(manager, 10, patient=OTHER_PATIENT)
        assert [a.id for a in manager.get_patient_appointments(PATIENT)] == [earlier.id, later.id]

    def test_get_unknown_appointment(self, manager):
        """Test that unknown ids return None."""
        assert manager.get_appointment("missing") is None

    def test_statistics(self, manager):
        """Test per-status totals and rates."""
        done = book(manager, 9, duration=60).appointment
        gone = book(manager, 10).appointment
        book(manager, 11)
        manager.complete_appointment(PHYSICIAN, done.id)
        manager.cancel_appointment(PHYSICIAN, gone.id)

        stats = manager.get_physician_statistics(PHYSICIAN, at(0), at(23))
        assert stats.total_appointments == 3
        assert stats.completed_appointments == 1
        assert stats.cancelled_appointments == 1
        assert stats.scheduled_appointments == 1
        assert stats.total_scheduled_hours == 1.5
        assert stats.average_duration_minutes == 40
        assert stats.completion_rate == pytest.approx(100 / 3)

    def test_statistics_empty(self, manager):
        """Test that an empty range has zero rates."""
        stats = manager.get_physician_statistics(PHYSICIAN, at(0), at(23))
        assert stats.total_appointments == 0
        assert stats.no_show_rate == 0.0

class TestPersistence:

    def test_changes_reach_the_store(self, manager, store):
        """Test that bookings and transitions are written through."""
        first = book(manager, 9).appointment
        manager.cancel_appointment(PHYSICIAN, first.id)
        stored = store.get_appointment(first.id)
        assert stored.status is AppointmentStatus.CANCELLED
        assert stored.version == 2

    def test_new_manager_hydrates_from_store(self, manager, store, profiles):
        """Test that a fresh manager sees persisted state."""
        first = book(manager, 9).appointment
        restarted = ScheduleManager(profiles, store=store)
        assert restarted.get_appointment(first.id) == first
        assert isinstance(book(restarted, 9, patient=OTHER_PATIENT).error, ConflictError)

    def test_stale_write_is_ignored(self, manager, store):
        """Test that an older version never overwrites a newer one."""
        first = book(manager, 9).appointment
        manager.cancel_appointment(PHYSICIAN, first.id)
        store.save_appointment(first)
        assert store.get_appointment(first.id).status is AppointmentStatus.CANCELLED

class TestConcurrency:

    def test_no_double_booking(self, manager):
        """Test that exactly one of many simultaneous overlapping bookings wins."""
        barrier = threading.Barrier(8)

        def attempt(index):
            barrier.wait()
            minute = 0 if index % 2 else 15
            return manager.schedule_appointment(PHYSICIAN, PATIENT, at(9, minute), 30)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))

        winners = [r for r in results if r.success]
        assert len(winners) == 1
        assert all(isinstance(r.error, ConflictError) for r in results if not r.success)
        scheduled = [a for a in manager.get_schedule_in_range(PHYSICIAN, at(0), at(23)) if a.is_scheduled]
        assert len(scheduled) == 1

    def test_physicians_book_in_parallel(self, manager):
        """Test that bookings for different physicians do not interfere."""
        manager.set_physician_availability(OTHER_PHYSICIAN, Weekday.MONDAY, time(9), time(12))

        def attempt(physician_id):
            return manager.schedule_appointment(physician_id, PATIENT, at(9), 30)

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(attempt, [PHYSICIAN, OTHER_PHYSICIAN]))
        assert all(r.success for r in results)

class TestFailedWrites:

    def test_failed_booking_leaves_nothing_behind(self, fragile, failing_store):
        """Test that a booking the store rejects is rolled back."""
        failing_store.failing = True
        result = book(fragile, 9)
        assert not result.success
        assert isinstance(result.error, PersistenceError)
        assert result.error_code == "persistence_failed"
        assert fragile.get_schedule_in_range(PHYSICIAN, at(0), at(23)) == []
        assert failing_store.load_appointments(PHYSICIAN) == []

        failing_store.failing = False
        retried = book(fragile, 9)
        assert retried.success
        assert failing_store.get_appointment(retried.appointment.id) is not None

    def test_failed_cancel_keeps_appointment_scheduled(self, fragile, failing_store):
        """Test that a transition the store rejects is undone."""
        booked = book(fragile, 9).appointment
        failing_store.failing = True
        result = fragile.cancel_appointment(PHYSICIAN, booked.id)
        assert isinstance(result.error, PersistenceError)
        assert fragile.get_appointment(booked.id) == booked
        assert failing_store.get_appointment(booked.id).is_scheduled

        failing_store.failing = False
        assert fragile.cancel_appointment(PHYSICIAN, booked.id).success
        assert failing_store.get_appointment(booked.id).status is AppointmentStatus.CANCELLED

    def test_failed_reschedule_keeps_old_time(self, fragile, failing_store):
        """Test that a reschedule the store rejects moves the appointment back."""
        booked = book(fragile, 9).appointment
        failing_store.failing = True
        assert isinstance(fragile.reschedule_appointment(PHYSICIAN, booked.id, at(11), 30).error, PersistenceError)
        assert fragile.get_appointment(booked.id).start == at(9)
        assert book(fragile, 11, patient=OTHER_PATIENT).error_code == "persistence_failed"

    def test_failed_patient_cancel_is_left_out(self, fragile, failing_store):
        """Test that bulk cancels the store rejects are not reported or kept."""
        booked = book(fragile, 9).appointment
        failing_store.failing = True
        assert fragile.cancel_patient_appointments(PATIENT) == []
        assert fragile.get_appointment(booked.id).is_scheduled

    def test_failed_availability_update_restores_windows(self, fragile, failing_store):
        """Test that windows the store rejects are put back."""
        failing_store.failing = True
        result = fragile.set_physician_availability(PHYSICIAN, Weekday.MONDAY, time(14), time(16))
        assert isinstance(result.error, PersistenceError)
        assert [(w.start_time, w.end_time) for w in fragile.get_physician_availability(PHYSICIAN)] == [(time(9), time(12))]
        assert isinstance(fragile.clear_physician_availability(PHYSICIAN, Weekday.MONDAY).error, PersistenceError)
        assert len(fragile.get_physician_availability(PHYSICIAN)) == 1

class TestUnavailableBlocks:

    def test_block_rejects_booking_and_hides_slots(self, manager):
        """Test that a physician block stops bookings and slot listings."""
        result = manager.add_unavailable_block(PHYSICIAN, at(10), at(11), UnavailabilityReason.MEETING, "Staff meeting")
        assert result.success
        assert result.block.reason is UnavailabilityReason.MEETING
        assert isinstance(book(manager, 10, 30).error, NoAvailabilityError)
        assert [slot.start for slot in manager.get_available_time_slots(PHYSICIAN, MONDAY, 60)] == [at(9), at(11)]

    def test_block_lists_affected_appointments(self, manager):
        """Test that appointments already in the blocked time are reported, not cancelled."""
        booked = book(manager, 10).appointment
        result = manager.add_unavailable_block(PHYSICIAN, at(10), at(11), UnavailabilityReason.SICK_LEAVE)
        assert [a.id for a in result.conflicts] == [booked.id]
        assert manager.get_appointment(booked.id).is_scheduled

    def test_facility_block_applies_to_every_physician(self, manager):
        """Test that a facility-wide block covers all physicians."""
        manager.set_physician_availability(OTHER_PHYSICIAN, Weekday.MONDAY, time(9), time(12))
        assert manager.add_facility_unavailable_block(at(0), at(0, day=TUESDAY), UnavailabilityReason.HOLIDAY).success
        assert isinstance(book(manager, 9).error, NoAvailabilityError)
        assert isinstance(book(manager, 9, physician=OTHER_PHYSICIAN).error, NoAvailabilityError)
        assert manager.find_next_available_slot(PHYSICIAN, 30, at(8)).slot.start == at(9, day=MONDAY + timedelta(days=7))

    def test_facility_block_needs_description_for_other(self, manager):
        """Test the validation of unexplained facility-wide blocks."""
        result = manager.add_facility_unavailable_block(at(9), at(10))
        assert isinstance(result.error, InvalidIntervalError)

    def test_invalid_block(self, manager):
        """Test that empty and offset-aware blocks are rejected."""
        assert isinstance(manager.add_unavailable_block(PHYSICIAN, at(10), at(10)).error, InvalidIntervalError)
        aware = at(10).replace(tzinfo=timezone.utc)
        assert isinstance(manager.add_unavailable_block(PHYSICIAN, aware, aware + timedelta(hours=1)).error, InvalidIntervalError)
        assert isinstance(manager.add_unavailable_block("nobody", at(10), at(11)).error, NotFoundError)

    def test_remove_block(self, manager):
        """Test that removing a block reopens its time."""
        block = manager.add_unavailable_block(PHYSICIAN, at(10), at(11)).block
        assert manager.remove_unavailable_block(block.id).success
        assert book(manager, 10).success
        assert isinstance(manager.remove_unavailable_block(block.id).error, NotFoundError)

    def test_listing_blocks(self, manager):
        """Test listing a physician's blocks with the facility-wide ones."""
        own = manager.add_unavailable_block(PHYSICIAN, at(10), at(11), UnavailabilityReason.LUNCH).block
        other = manager.add_unavailable_block(OTHER_PHYSICIAN, at(10), at(11)).block
        holiday = manager.add_facility_unavailable_block(at(8), at(9), UnavailabilityReason.HOLIDAY).block
        assert manager.get_unavailable_blocks(PHYSICIAN) == [holiday, own]
        assert manager.get_unavailable_blocks(OTHER_PHYSICIAN) == [holiday, other]
        assert manager.get_facility_unavailable_blocks() == [holiday]

    def test_blocks_survive_restart(self, manager, store, profiles):
        """Test that a fresh manager loads physician and facility blocks."""
        manager.add_unavailable_block(PHYSICIAN, at(10), at(11), UnavailabilityReason.LUNCH)
        manager.add_facility_unavailable_block(at(11), at(12), UnavailabilityReason.HOLIDAY)
        restarted = ScheduleManager(profiles, store=store)
        assert [slot.start for slot in restarted.get_available_time_slots(PHYSICIAN, MONDAY, 60)] == [at(9)]

    def test_remove_block_of_unloaded_physician(self, manager, store, profiles):
        """Test removing a block before its physician's schedule was used."""
        block = manager.add_unavailable_block(PHYSICIAN, at(10), at(11)).block
        restarted = ScheduleManager(profiles, store=store)
        assert restarted.remove_unavailable_block(block.id).success
        assert store.load_blocks(PHYSICIAN) == []

    def test_failed_block_write_is_rolled_back(self, fragile, failing_store):
        """Test that a block the store rejects does not take effect."""
        failing_store.failing = True
        result = fragile.add_unavailable_block(PHYSICIAN, at(10), at(11))
        assert isinstance(result.error, PersistenceError)
        assert fragile.get_unavailable_blocks(PHYSICIAN) == []

        failing_store.failing = False
        block = fragile.add_unavailable_block(PHYSICIAN, at(10), at(11)).block
        failing_store.failing = True
        assert isinstance(fragile.remove_unavailable_block(block.id).error, PersistenceError)
        assert fragile.get_unavailable_blocks(PHYSICIAN) == [block]
