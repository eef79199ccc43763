from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Protocol, Sequence, Set, Tuple, TypeVar

from slots import SlotGrid, format_time_slot, today, tomorrow

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Cyclic table used to spread the demo bookings over the day.
DEFAULT_TIMES = ("17:00", "12:30", "08:30", "14:00", "13:30", "09:00", "15:00", "10:00")

DEFAULT_DOCTORS = (
    "John Smith",
    "Emily Johnson",
    "David Brown",
    "Sarah Lee",
    "Michael Wilson",
    "Alexandra Garcia",
    "Matthew Taylor",
    "Olivia Martinez",
)

DEFAULT_PATIENTS = (
    ("Alice Smith", "23.08.1997"),
    ("Bob Johnson", "22.06.2000"),
    ("Charlie Brown", "12.01.1998"),
    ("Diana Davis", "03.03.2003"),
    ("Eva Martinez", "02.08.2008"),
    ("Frank Lopez", "14.02.2012"),
    ("Grace Lee", "14.08.2012"),
    ("Henry Jackson", "22.08.2006"),
)


class RegistryError(Exception):
    """Base class for errors raised by the registry."""


class NotFoundError(RegistryError, LookupError):
    """Raised when a doctor, patient or appointment lookup finds nothing."""


class InvalidIndexError(RegistryError, IndexError):
    """Raised when a selection from a displayed list is out of range."""


class PersonKind(str, Enum):
    DOCTOR = "doctor"
    PATIENT = "patient"


@dataclass(frozen=True)
class AppointmentSummary:
    time_slot: str
    patient_name: str
    doctor_name: str


@dataclass
class Person(ABC):
    id: int
    name: str
    date_of_birth: Optional[str] = None
    # Index into the registry's appointment store, maintained by the registry only.
    appointment_ids: List[int] = field(default_factory=list)

    kind: ClassVar[PersonKind]

    @abstractmethod
    def render_details(self, summaries: Sequence[AppointmentSummary]) -> str:
        """Doctor schedule view or patient appointment history."""


@dataclass
class Doctor(Person):
    kind: ClassVar[PersonKind] = PersonKind.DOCTOR

    def render_details(self, summaries: Sequence[AppointmentSummary]) -> str:
        lines = [
            f"Date & Time: {s.time_slot}, Patient: {s.patient_name}" for s in summaries
        ]
        return "\n".join(lines)


@dataclass
class Patient(Person):
    kind: ClassVar[PersonKind] = PersonKind.PATIENT

    def render_details(self, summaries: Sequence[AppointmentSummary]) -> str:
        if not summaries:
            return "No appointments to show"
        lines = []
        for index, s in enumerate(summaries, start=1):
            lines.append(f"({index}) Date & Time: {s.time_slot}, Doctor: {s.doctor_name}")
        return "\n".join(lines)


@dataclass
class Appointment:
    id: int
    time_slot: str
    doctor_id: int
    patient_id: int


@dataclass(frozen=True)
class VisitRecord:
    id: int
    doctor_name: str
    patient_name: str
    time_slot: str
    diagnosis: str


@dataclass
class ScheduleResult:
    success: bool
    message: str
    appointment: Optional[Appointment] = None


class Reporter(Protocol):
    def report(self, message: str) -> None:
        ...


class LoggingReporter:
    """Default reporter: user-facing status lines go to the application log."""

    def __init__(self, name: str = "clinic.reports") -> None:
        self._logger = logging.getLogger(name)

    def report(self, message: str) -> None:
        self._logger.info(message)


class MessageBuffer:
    """Collects reported messages until the caller drains them."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)

    def drain(self) -> List[str]:
        drained, self.messages = self.messages, []
        return drained


class Registry:
    """
    In-memory scheduling engine for the clinic.

    Responsibilities:
    - Owns the canonical doctors, patients, appointments and visit records.
    - Derives free slots from the slot grid and each doctor's bookings.
    - Allows at most one appointment per doctor per time slot.
    - Keeps the global store and the per-doctor / per-patient indices in step
      on every schedule and cancel.

    Callers hold entities only as handles; every mutation re-resolves them
    through the registry by id. The engine is not thread-safe and expects a
    single caller at a time.
    """

    def __init__(
        self,
        grid: Optional[SlotGrid] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.grid = grid or SlotGrid()
        self.reporter: Reporter = reporter or LoggingReporter()
        self.doctors: Dict[int, Doctor] = {}
        self.patients: Dict[int, Patient] = {}
        self.appointments: Dict[int, Appointment] = {}
        self.visit_records: List[VisitRecord] = []
        self._next_doctor_id = 1
        self._next_patient_id = 1
        self._next_appointment_id = 1
        self._next_visit_record_id = 1

    def reset(self) -> None:
        self.doctors.clear()
        self.patients.clear()
        self.appointments.clear()
        self.visit_records.clear()
        self._next_doctor_id = 1
        self._next_patient_id = 1
        self._next_appointment_id = 1
        self._next_visit_record_id = 1

    # -- people -----------------------------------------------------------

    def add_doctor(self, name: str) -> Doctor:
        doctor = Doctor(id=self._next_doctor_id, name=name)
        self._next_doctor_id += 1
        self.doctors[doctor.id] = doctor
        logger.debug("Registered doctor %s (id=%d)", name, doctor.id)
        return doctor

    def _register_patient(self, name: str, date_of_birth: str) -> Patient:
        patient = Patient(id=self._next_patient_id, name=name, date_of_birth=date_of_birth)
        self._next_patient_id += 1
        self.patients[patient.id] = patient
        logger.debug("Registered patient %s (id=%d)", name, patient.id)
        return patient

    def add_patient(self, name: str, date_of_birth: str) -> Patient:
        """Register a patient, or return the existing one with that name."""
        if self.patient_exists(name):
            self.reporter.report(f"Patient {name} already exists.")
            return self.find_patient_by_name(name)

        patient = self._register_patient(name, date_of_birth)
        self.reporter.report(f"Patient {name} added to the registry.")
        return patient

    def patient_exists(self, name: str) -> bool:
        return any(p.name == name for p in self.patients.values())

    def find_doctor_by_name(self, name: str) -> Doctor:
        for doctor in self.doctors.values():
            if doctor.name == name:
                return doctor
        raise NotFoundError("Doctor not found.")

    def find_patient_by_name(self, name: str) -> Patient:
        for patient in self.patients.values():
            if patient.name == name:
                return patient
        raise NotFoundError("Patient not found.")

    def get_doctor(self, doctor_id: int) -> Doctor:
        if doctor_id not in self.doctors:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        return self.doctors[doctor_id]

    def get_patient(self, patient_id: int) -> Patient:
        if patient_id not in self.patients:
            raise NotFoundError(f"Patient {patient_id} not found")
        return self.patients[patient_id]

    def get_doctors(self) -> List[Doctor]:
        return list(self.doctors.values())

    def get_patients(self) -> List[Patient]:
        return list(self.patients.values())

    def _canonical(self, person: Person) -> Person:
        if person.kind is PersonKind.DOCTOR:
            return self.get_doctor(person.id)
        return self.get_patient(person.id)

    # -- appointments -----------------------------------------------------

    def get_appointments(self) -> List[Appointment]:
        return list(self.appointments.values())

    def get_appointment(self, appointment_id: int) -> Appointment:
        if appointment_id not in self.appointments:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return self.appointments[appointment_id]

    def summary_of(self, appointment: Appointment) -> AppointmentSummary:
        return AppointmentSummary(
            time_slot=appointment.time_slot,
            patient_name=self.patients[appointment.patient_id].name,
            doctor_name=self.doctors[appointment.doctor_id].name,
        )

    def appointments_for(self, person: Person) -> List[AppointmentSummary]:
        canonical = self._canonical(person)
        return [self.summary_of(self.appointments[aid]) for aid in canonical.appointment_ids]

    def render_details(self, person: Person) -> str:
        canonical = self._canonical(person)
        return canonical.render_details(self.appointments_for(canonical))

    def _booked_slots(self, doctor: Doctor) -> Set[str]:
        return {self.appointments[aid].time_slot for aid in doctor.appointment_ids}

    def is_available(self, doctor: Doctor, time_slot: str) -> bool:
        """True iff the doctor has no appointment at exactly this time slot."""
        return time_slot not in self._booked_slots(self.get_doctor(doctor.id))

    def _book(self, time_slot: str, doctor: Doctor, patient: Patient) -> Appointment:
        appointment = Appointment(
            id=self._next_appointment_id,
            time_slot=time_slot,
            doctor_id=doctor.id,
            patient_id=patient.id,
        )
        self._next_appointment_id += 1

        self.appointments[appointment.id] = appointment
        doctor.appointment_ids.append(appointment.id)
        patient.appointment_ids.append(appointment.id)
        logger.info(
            "Booked appointment %d: %s with %s for %s",
            appointment.id,
            time_slot,
            doctor.name,
            patient.name,
        )
        return appointment

    def _remove(self, appointment: Appointment) -> None:
        del self.appointments[appointment.id]
        self.doctors[appointment.doctor_id].appointment_ids.remove(appointment.id)
        self.patients[appointment.patient_id].appointment_ids.remove(appointment.id)
        logger.info("Removed appointment %d (%s)", appointment.id, appointment.time_slot)

    def schedule_appointment(
        self,
        time_slot: str,
        doctor: Doctor,
        patient: Patient,
    ) -> ScheduleResult:
        doctor = self.get_doctor(doctor.id)
        patient = self.get_patient(patient.id)

        if not self.is_available(doctor, time_slot):
            message = (
                f"Sorry, Dr. {doctor.name} is not available at {time_slot}. "
                "Please choose another time."
            )
            logger.info("Scheduling conflict for %s at %s", doctor.name, time_slot)
            self.reporter.report(message)
            return ScheduleResult(success=False, message=message)

        appointment = self._book(time_slot, doctor, patient)
        message = (
            f"Appointment scheduled for {time_slot} with Dr. {doctor.name} "
            f"for patient {patient.name}"
        )
        self.reporter.report(message)
        return ScheduleResult(success=True, message=message, appointment=appointment)

    def _matches(
        self,
        appointment: Appointment,
        time_slot: str,
        patient_name: str,
        doctor_name: str,
    ) -> bool:
        return (
            appointment.time_slot == time_slot
            and self.patients[appointment.patient_id].name == patient_name
            and self.doctors[appointment.doctor_id].name == doctor_name
        )

    def cancel_appointment(self, time_slot: str, patient_name: str, doctor_name: str) -> bool:
        """
        Cancel every appointment matching the exact (time, patient, doctor) triple.

        A triple that matches nothing is a silent no-op and returns False.
        """
        matches = [
            a
            for a in self.appointments.values()
            if self._matches(a, time_slot, patient_name, doctor_name)
        ]
        if not matches:
            logger.debug(
                "Nothing to cancel for %s / %s / %s", time_slot, patient_name, doctor_name
            )
            return False

        for appointment in matches:
            self._remove(appointment)
        self.reporter.report(f"Appointment on {time_slot} canceled for patient {patient_name}")
        return True

    def cancel_appointment_by_id(self, appointment_id: int) -> AppointmentSummary:
        appointment = self.get_appointment(appointment_id)
        summary = self.summary_of(appointment)
        self._remove(appointment)
        self.reporter.report(
            f"Appointment on {summary.time_slot} canceled for patient {summary.patient_name}"
        )
        return summary

    # -- availability -----------------------------------------------------

    def get_available_times(self, day: str) -> List[Tuple[str, str]]:
        """Every free (time_slot, doctor_name) pair on the given day, doctor by doctor."""
        grid = self.grid.time_slots(day)
        available: List[Tuple[str, str]] = []
        for doctor in self.doctors.values():
            booked = self._booked_slots(doctor)
            available.extend((slot, doctor.name) for slot in grid if slot not in booked)
        return available

    def get_available_times_for_doctor(self, day: str, doctor_name: str) -> List[Tuple[str, str]]:
        return [pair for pair in self.get_available_times(day) if pair[1] == doctor_name]

    def get_available_doctors(self, day: str) -> List[str]:
        free = {name for _, name in self.get_available_times(day)}
        names: List[str] = []
        for doctor in self.doctors.values():
            if doctor.name in free and doctor.name not in names:
                names.append(doctor.name)
        return names

    # -- visit records ----------------------------------------------------

    def add_hospital_visit_record(
        self,
        doctor: Doctor,
        patient: Patient,
        time_slot: str,
        diagnosis: str,
    ) -> VisitRecord:
        doctor = self.get_doctor(doctor.id)
        patient = self.get_patient(patient.id)
        record = VisitRecord(
            id=self._next_visit_record_id,
            doctor_name=doctor.name,
            patient_name=patient.name,
            time_slot=time_slot,
            diagnosis=diagnosis,
        )
        self._next_visit_record_id += 1
        self.visit_records.append(record)
        logger.info("Added visit record %d for %s", record.id, patient.name)
        return record

    def get_visit_records_for_patient(self, patient: Patient) -> List[VisitRecord]:
        return [r for r in self.visit_records if r.patient_name == patient.name]

    # -- selection --------------------------------------------------------

    @staticmethod
    def get_by_index(choice: int, items: Sequence[T]) -> T:
        """Return the item at a 1-based position from a displayed list."""
        if 1 <= choice <= len(items):
            return items[choice - 1]
        raise InvalidIndexError("Invalid index.")

    # -- demo data --------------------------------------------------------

    def _schedule_defaults_for_date(
        self,
        day: str,
        time_index: int,
        doctors: Sequence[Doctor],
        patients: Sequence[Patient],
    ) -> int:
        booked = 0
        for doctor in doctors:
            for patient in patients:
                time_slot = format_time_slot(day, DEFAULT_TIMES[time_index])
                time_index = (time_index - 1) % len(DEFAULT_TIMES)
                if not self.is_available(doctor, time_slot):
                    logger.debug("Skipping demo booking %s for %s", time_slot, doctor.name)
                    continue
                self._book(time_slot, doctor, patient)
                booked += 1
        return booked

    def generate_default_appointments(self, today_date: str, tomorrow_date: str) -> int:
        """
        Book the demo appointments: the first half of doctors and patients
        today, the second half tomorrow. Returns the number booked.
        """
        doctors = self.get_doctors()
        patients = self.get_patients()
        half_doctors = len(doctors) // 2
        half_patients = len(patients) // 2

        booked = self._schedule_defaults_for_date(
            today_date, 0, doctors[:half_doctors], patients[:half_patients]
        )
        booked += self._schedule_defaults_for_date(
            tomorrow_date,
            len(DEFAULT_TIMES) - 1,
            doctors[half_doctors:],
            patients[half_patients:],
        )
        logger.info("Generated %d demo appointments", booked)
        return booked

    def load_defaults(
        self,
        with_appointments: bool = True,
        today_date: Optional[str] = None,
        tomorrow_date: Optional[str] = None,
    ) -> None:
        """Register the built-in doctors and patients, optionally with demo bookings."""
        for name in DEFAULT_DOCTORS:
            self.add_doctor(name)
        for name, date_of_birth in DEFAULT_PATIENTS:
            self._register_patient(name, date_of_birth)
        if with_appointments:
            self.generate_default_appointments(
                today_date or today(), tomorrow_date or tomorrow()
            )
