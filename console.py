from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from config import get_settings
from domain import (
    Appointment,
    Doctor,
    InvalidIndexError,
    Patient,
    Person,
    Registry,
    RegistryError,
)
from logging_config import setup_logging
from slots import is_valid_date

logger = logging.getLogger(__name__)

T = TypeVar("T")

RULE = "=" * 41
INVALID_CHOICE = "Invalid choice. Please try again."


class ConsoleIO:
    """Prompts and printing for the console menu; input and output are injectable."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def print_msg(self, message: str) -> None:
        self._output(message)

    def header(self, title: str) -> None:
        self._output("")
        self._output(RULE)
        self._output(title)
        self._output(RULE)
        self._output("")

    def get_info(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def get_user_choice(self) -> int:
        raw = self._input("Enter your choice: ").strip()
        try:
            return int(raw)
        except ValueError:
            return -1

    def show_people(self, people: Sequence[Person]) -> None:
        for index, person in enumerate(people, start=1):
            self._output(f"({index}) {person.name}")


class ConsoleReporter:
    def __init__(self, io: ConsoleIO) -> None:
        self.io = io

    def report(self, message: str) -> None:
        self.io.print_msg(message)


class Menu:
    """
    Console front end for patients and registrators.

    Holds entities only as handles returned by the registry and routes every
    change back through it.
    """

    def __init__(self, registry: Registry, io: ConsoleIO) -> None:
        self.registry = registry
        self.io = io

    # -- selections -------------------------------------------------------

    def _select(self, items: Sequence[T]) -> Optional[T]:
        try:
            return self.registry.get_by_index(self.io.get_user_choice(), items)
        except InvalidIndexError:
            self.io.print_msg(INVALID_CHOICE)
            return None

    def select_doctor(self) -> Doctor:
        while True:
            self.io.header("List of Doctors")
            doctors = self.registry.get_doctors()
            self.io.show_people(doctors)
            doctor = self._select(doctors)
            if doctor is not None:
                return doctor

    def choose_patient(self) -> Optional[Patient]:
        self.io.header("List of registered patients")
        patients = self.registry.get_patients()
        self.io.show_people(patients)
        return self._select(patients)

    def get_valid_date(self) -> str:
        while True:
            day = self.io.get_info("Enter date (YYYY-MM-DD): ")
            if is_valid_date(day):
                return day
            self.io.print_msg("Invalid date. Date must be today or in the future.")

    def show_appointments(self) -> List[Appointment]:
        self.io.header("Appointments")
        appointments = self.registry.get_appointments()
        for index, appointment in enumerate(appointments, start=1):
            summary = self.registry.summary_of(appointment)
            self.io.print_msg(f"({index}) -----------------------------")
            self.io.print_msg(f"     Date & Time: {summary.time_slot}")
            self.io.print_msg(f"     Doctor: {summary.doctor_name}")
            self.io.print_msg(f"     Patient: {summary.patient_name}")
            self.io.print_msg("")
        return appointments

    def display_available_times(
        self, times: Sequence[Tuple[str, str]], doctor_name: str, day: str
    ) -> None:
        self.io.header(f"Available Times for Dr. {doctor_name} on {day}: ")
        for index, (time_slot, _) in enumerate(times, start=1):
            self.io.print_msg(f"Time: {time_slot}  ({index})")
        self.io.print_msg("")

    # -- actions ----------------------------------------------------------

    def register_patient(self) -> Patient:
        self.io.header("Registration form")
        name = self.io.get_info("Enter your name: ")
        surname = self.io.get_info("Enter your surname: ")
        date_of_birth = self.io.get_info("Enter your date of birth (DD.MM.YYYY): ")
        return self.registry.add_patient(f"{name} {surname}", date_of_birth)

    def schedule_appointment_menu(self, patient: Optional[Patient]) -> None:
        if patient is None:
            return
        doctor = self.select_doctor()
        day = self.get_valid_date()
        times = self.registry.get_available_times_for_doctor(day, doctor.name)
        self.display_available_times(times, doctor.name, day)
        selected = self._select(times)
        if selected is None:
            return
        self.registry.schedule_appointment(selected[0], doctor, patient)

    def cancel_appointment_menu(self) -> None:
        appointments = self.show_appointments()
        appointment = self._select(appointments)
        if appointment is None:
            return
        summary = self.registry.summary_of(appointment)
        self.registry.cancel_appointment(
            summary.time_slot, summary.patient_name, summary.doctor_name
        )

    def cancel_own_appointment_menu(self, patient: Patient) -> None:
        self.show_appointments_for_patient(patient)
        summaries = self.registry.appointments_for(patient)
        if not summaries:
            return
        summary = self._select(summaries)
        if summary is None:
            return
        self.registry.cancel_appointment(
            summary.time_slot, summary.patient_name, summary.doctor_name
        )

    def show_appointments_for_patient(self, patient: Patient) -> None:
        self.io.header("Appointments")
        self.io.print_msg(self.registry.render_details(patient))

    def add_visit_card_menu(self) -> None:
        appointments = self.show_appointments()
        appointment = self._select(appointments)
        if appointment is None:
            return
        doctor = self.registry.get_doctor(appointment.doctor_id)
        patient = self.registry.get_patient(appointment.patient_id)
        diagnosis = self.io.get_info("Enter diagnosis: ")
        self.registry.add_hospital_visit_record(doctor, patient, appointment.time_slot, diagnosis)
        self.io.print_msg(f"Hospital visit card is added for patient {patient.name}")

    def get_visit_card_menu(self) -> None:
        patient = self.choose_patient()
        if patient is None:
            return
        records = self.registry.get_visit_records_for_patient(patient)
        self.io.header(f"Hospital Visit Cards for {patient.name}:")
        if not records:
            self.io.print_msg("No visit cards found for this patient.")
            return
        for record in records:
            self.io.print_msg(f"Patient Name: {record.patient_name}")
            self.io.print_msg(f"Doctor Name: {record.doctor_name}")
            self.io.print_msg(f"Date & Time: {record.time_slot}")
            self.io.print_msg(f"Diagnosis: {record.diagnosis}")
            self.io.print_msg("--------------------------------------")

    def doctor_schedule_menu(self) -> None:
        doctor = self.select_doctor()
        self.io.print_msg(RULE)
        details = self.registry.render_details(doctor)
        if details:
            self.io.print_msg(details)
        self.io.print_msg(RULE)

    # -- routes -----------------------------------------------------------

    def _run(self, action: Callable[[], None]) -> None:
        try:
            action()
        except RegistryError as exc:
            logger.warning("Menu action failed: %s", exc)
            self.io.print_msg(str(exc))

    def registrator_route(self) -> None:
        actions = {
            1: lambda: self.schedule_appointment_menu(self.choose_patient()),
            2: self.cancel_appointment_menu,
            3: self.add_visit_card_menu,
            4: self.get_visit_card_menu,
            5: self.doctor_schedule_menu,
        }
        while True:
            self.io.header(
                "(1) Schedule appointment\n"
                "(2) Cancel appointment\n"
                "(3) Add visit card for appointment\n"
                "(4) Get visit cards for a patient\n"
                "(5) Check doctor's schedule\n"
                "(6) Exit"
            )
            choice = self.io.get_user_choice()
            if choice == 6:
                self.io.print_msg("Returning to main menu...")
                return
            if choice not in actions:
                self.io.print_msg(INVALID_CHOICE)
                continue
            self._run(actions[choice])

    def patient_route(self) -> None:
        patient = self.register_patient()
        actions = {
            1: lambda: self.schedule_appointment_menu(patient),
            2: lambda: self.cancel_own_appointment_menu(patient),
            3: lambda: self.show_appointments_for_patient(patient),
        }
        while True:
            self.io.header(
                "(1) Schedule appointment\n"
                "(2) Cancel appointment\n"
                "(3) Check existing appointments\n"
                "(4) Exit"
            )
            choice = self.io.get_user_choice()
            if choice == 4:
                self.io.print_msg("Returning to main menu...")
                return
            if choice not in actions:
                self.io.print_msg(INVALID_CHOICE)
                continue
            self._run(actions[choice])

    def start(self) -> None:
        while True:
            self.io.header("===== Appointment Scheduling System =====")
            self.io.print_msg(
                "Please, select your role\n"
                "(1) Role: Patient\n"
                "(2) Role: Registrator\n"
                "(3) Exit"
            )
            choice = self.io.get_user_choice()
            if choice == 1:
                self.patient_route()
            elif choice == 2:
                self.registrator_route()
            elif choice == 3:
                return
            else:
                self.io.print_msg(INVALID_CHOICE)


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    io = ConsoleIO()
    registry = Registry(grid=settings.slot_grid(), reporter=ConsoleReporter(io))
    if settings.seed_demo_data:
        registry.load_defaults()

    try:
        Menu(registry, io).start()
    except (EOFError, KeyboardInterrupt):
        io.print_msg("")


if __name__ == "__main__":
    main()
