"""SQLAlchemy-backed implementations of the engine's store and profile ports."""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from typing import List, Optional
import logging

from ..models.appointment import AppointmentRecord, AvailabilityWindowRecord, UnavailableBlockRecord
from ..models.profiles import Patient, Physician
from ..scheduling.appointments import Appointment
from ..scheduling.availability import AvailabilityWindow, Weekday
from ..scheduling.blocks import UnavailableBlock
from ..scheduling.intervals import TimeInterval

logger = logging.getLogger(__name__)

def to_appointment(record: AppointmentRecord) -> Appointment:
    return Appointment(
        id=record.id,
        interval=TimeInterval(record.start_time, record.end_time),
        patient_id=record.patient_id,
        physician_id=record.physician_id,
        status=record.status,
        reason_for_visit=record.reason_for_visit,
        notes=record.notes,
        clinical_document_id=record.clinical_document_id,
        cancellation_reason=record.cancellation_reason,
        created_at=record.created_at,
        modified_at=record.modified_at,
        version=record.version,
    )

def to_window(record: AvailabilityWindowRecord) -> AvailabilityWindow:
    return AvailabilityWindow(
        physician_id=record.physician_id,
        day_of_week=record.day_of_week,
        start_time=record.start_time,
        end_time=record.end_time,
    )

def to_block(record: UnavailableBlockRecord) -> UnavailableBlock:
    return UnavailableBlock(
        id=record.id,
        interval=TimeInterval(record.start_time, record.end_time),
        reason=record.reason,
        description=record.description,
        physician_id=record.physician_id,
    )

class SqlScheduleStore:
    """Persists appointments, windows and blocks; every call runs in its own session."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def save_appointment(self, appointment: Appointment) -> None:
        """Insert or update, ignoring writes older than the stored version."""
        try:
            self._save_appointment(appointment)
        except IntegrityError:
            # Another session inserted this id first; retry as a guarded update
            logger.debug(f"Concurrent insert of appointment {appointment.id}, retrying as update")
            self._save_appointment(appointment)

    def _save_appointment(self, appointment: Appointment) -> None:
        values = {
            "physician_id": appointment.physician_id,
            "patient_id": appointment.patient_id,
            "start_time": appointment.start,
            "end_time": appointment.end,
            "status": appointment.status,
            "reason_for_visit": appointment.reason_for_visit,
            "notes": appointment.notes,
            "clinical_document_id": appointment.clinical_document_id,
            "cancellation_reason": appointment.cancellation_reason,
            "modified_at": appointment.modified_at,
            "version": appointment.version,
        }
        db: Session = self.session_factory()
        try:
            # Version compare-and-set in a single UPDATE
            updated = db.query(AppointmentRecord).filter(
                AppointmentRecord.id == appointment.id,
                AppointmentRecord.version < appointment.version
            ).update(values, synchronize_session=False)
            if not updated:
                if db.get(AppointmentRecord, appointment.id) is None:
                    db.add(AppointmentRecord(id=appointment.id, created_at=appointment.created_at, **values))
                else:
                    logger.debug(
                        f"Skipping stale write for appointment {appointment.id} (v{appointment.version})"
                    )
            db.commit()
        except IntegrityError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.error(f"Failed to persist appointment {appointment.id}")
            raise
        finally:
            db.close()

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        db: Session = self.session_factory()
        try:
            record = db.get(AppointmentRecord, appointment_id)
            return to_appointment(record) if record else None
        finally:
            db.close()

    def load_appointments(self, physician_id: str) -> List[Appointment]:
        db: Session = self.session_factory()
        try:
            records = db.query(AppointmentRecord).filter(
                AppointmentRecord.physician_id == physician_id
            ).order_by(AppointmentRecord.start_time).all()
            return [to_appointment(record) for record in records]
        finally:
            db.close()

    def physician_ids(self) -> List[str]:
        db: Session = self.session_factory()
        try:
            ids = {row[0] for row in db.query(AppointmentRecord.physician_id).distinct()}
            ids.update(row[0] for row in db.query(AvailabilityWindowRecord.physician_id).distinct())
            ids.update(row[0] for row in db.query(UnavailableBlockRecord.physician_id).distinct())
            ids.discard(None)
            return sorted(ids)
        finally:
            db.close()

    def replace_windows(self, physician_id: str, day_of_week: Weekday, windows: List[AvailabilityWindow]) -> None:
        db: Session = self.session_factory()
        try:
            db.query(AvailabilityWindowRecord).filter(
                AvailabilityWindowRecord.physician_id == physician_id,
                AvailabilityWindowRecord.day_of_week == int(Weekday(day_of_week))
            ).delete(synchronize_session=False)
            for window in windows:
                db.add(AvailabilityWindowRecord(
                    physician_id=window.physician_id,
                    day_of_week=int(window.day_of_week),
                    start_time=window.start_time,
                    end_time=window.end_time
                ))
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to persist availability for physician {physician_id}")
            raise
        finally:
            db.close()

    def load_windows(self, physician_id: str) -> List[AvailabilityWindow]:
        db: Session = self.session_factory()
        try:
            records = db.query(AvailabilityWindowRecord).filter(
                AvailabilityWindowRecord.physician_id == physician_id
            ).order_by(AvailabilityWindowRecord.day_of_week, AvailabilityWindowRecord.start_time).all()
            return [to_window(record) for record in records]
        finally:
            db.close()

    def save_block(self, block: UnavailableBlock) -> None:
        db: Session = self.session_factory()
        try:
            db.merge(UnavailableBlockRecord(
                id=block.id,
                physician_id=block.physician_id,
                start_time=block.start,
                end_time=block.end,
                reason=block.reason,
                description=block.description
            ))
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to persist unavailable block {block.id}")
            raise
        finally:
            db.close()

    def delete_block(self, block_id: str) -> None:
        db: Session = self.session_factory()
        try:
            db.query(UnavailableBlockRecord).filter(
                UnavailableBlockRecord.id == block_id
            ).delete(synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to delete unavailable block {block_id}")
            raise
        finally:
            db.close()

    def load_blocks(self, physician_id: Optional[str]) -> List[UnavailableBlock]:
        db: Session = self.session_factory()
        try:
            query = db.query(UnavailableBlockRecord)
            if physician_id is None:
                query = query.filter(UnavailableBlockRecord.physician_id.is_(None))
            else:
                query = query.filter(UnavailableBlockRecord.physician_id == physician_id)
            records = query.order_by(UnavailableBlockRecord.start_time).all()
            return [to_block(record) for record in records]
        finally:
            db.close()

class SqlProfileDirectory:
    """Looks patients and physicians up in their profile tables."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def patient_exists(self, patient_id: str) -> bool:
        return self._exists(Patient, patient_id)

    def physician_exists(self, physician_id: str) -> bool:
        return self._exists(Physician, physician_id)

    def _exists(self, model, record_id: str) -> bool:
        db: Session = self.session_factory()
        try:
            return db.query(model.id).filter(model.id == record_id).first() is not None
        finally:
            db.close()
