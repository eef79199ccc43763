"""Tests for the console menu, driven by scripted input."""
from console import INVALID_CHOICE, ConsoleIO, ConsoleReporter, Menu
from domain import Registry


class Script:
    def __init__(self, *answers: str) -> None:
        self._answers = iter(answers)
        self.output = []

    def ask(self, prompt: str) -> str:
        return next(self._answers)

    @property
    def text(self) -> str:
        return "\n".join(self.output)


def run_menu(*answers: str):
    script = Script(*answers)
    io = ConsoleIO(input_func=script.ask, output_func=script.output.append)
    registry = Registry(reporter=ConsoleReporter(io))
    registry.add_doctor("A")
    registry.add_patient("P", "01.01.1990")
    Menu(registry, io).start()
    return registry, script


class TestMainMenu:
    def test_exit(self):
        _, script = run_menu("3")
        assert "===== Appointment Scheduling System =====" in script.text

    def test_invalid_choice_is_reported(self):
        _, script = run_menu("9", "x", "3")
        assert script.output.count(INVALID_CHOICE) == 2


class TestRegistratorRoute:
    def test_schedule_for_a_listed_patient(self):
        registry, script = run_menu(
            "2",  # registrator
            "1",  # schedule
            "1",  # patient P
            "1",  # doctor A
            "2030-01-01",
            "1",  # first free time
            "6",
            "3",
        )

        assert "Appointment scheduled for 2030-01-01 08:00 with Dr. A for patient P" in script.output
        assert "Available Times for Dr. A on 2030-01-01: " in script.output
        assert len(registry.get_appointments()) == 1

    def test_past_date_is_asked_again(self):
        registry, script = run_menu(
            "2", "1", "1", "1", "2000-01-01", "2030-01-01", "3", "6", "3"
        )

        assert "Invalid date. Date must be today or in the future." in script.output
        assert registry.summary_of(registry.get_appointments()[0]).time_slot == "2030-01-01 09:00"

    def test_invalid_doctor_choice_is_asked_again(self):
        registry, script = run_menu("2", "1", "1", "5", "1", "2030-01-01", "1", "6", "3")

        assert INVALID_CHOICE in script.output
        assert len(registry.get_appointments()) == 1

    def test_out_of_range_time_books_nothing(self):
        registry, script = run_menu("2", "1", "1", "1", "2030-01-01", "21", "6", "3")

        assert INVALID_CHOICE in script.output
        assert registry.get_appointments() == []

    def test_cancel_any_appointment(self):
        registry, script = run_menu(
            "2", "1", "1", "1", "2030-01-01", "1",
            "2", "1",  # cancel the first listed appointment
            "6", "3",
        )

        assert "Appointment on 2030-01-01 08:00 canceled for patient P" in script.output
        assert registry.get_appointments() == []
        assert registry.appointments_for(registry.find_doctor_by_name("A")) == []

    def test_visit_card_flow(self):
        registry, script = run_menu(
            "2", "1", "1", "1", "2030-01-01", "1",
            "3", "1", "Flu",  # add visit card
            "4", "1",  # show visit cards for P
            "6", "3",
        )

        assert "Hospital visit card is added for patient P" in script.output
        assert "Hospital Visit Cards for P:" in script.output
        assert "Diagnosis: Flu" in script.output

    def test_visit_cards_for_patient_without_any(self):
        _, script = run_menu("2", "4", "1", "6", "3")
        assert "No visit cards found for this patient." in script.output

    def test_doctor_schedule(self):
        _, script = run_menu(
            "2", "1", "1", "1", "2030-01-01", "1",
            "5", "1",
            "6", "3",
        )
        assert "Date & Time: 2030-01-01 08:00, Patient: P" in script.output


class TestPatientRoute:
    def test_register_schedule_review_and_cancel(self):
        registry, script = run_menu(
            "1",  # patient
            "Ivy", "Walker", "05.05.1990",
            "1", "1", "2030-01-01", "2",  # schedule 08:30 with A
            "3",  # review
            "2", "1",  # cancel own appointment
            "4",
            "3",
        )

        assert "Patient Ivy Walker added to the registry." in script.output
        assert (
            "Appointment scheduled for 2030-01-01 08:30 with Dr. A for patient Ivy Walker"
            in script.output
        )
        assert "(1) Date & Time: 2030-01-01 08:30, Doctor: A" in script.output
        assert "Appointment on 2030-01-01 08:30 canceled for patient Ivy Walker" in script.output
        assert registry.get_appointments() == []

    def test_returning_patient_is_not_duplicated(self):
        registry, script = run_menu("1", "P", "Q", "01.01.1990", "4", "1", "P", "Q", "01.01.1990", "4", "3")

        assert "Patient P Q already exists." in script.output
        assert [p.name for p in registry.get_patients()] == ["P", "P Q"]

    def test_cancel_with_no_appointments(self):
        registry, script = run_menu("1", "Ivy", "Walker", "05.05.1990", "2", "4", "3")

        assert "No appointments to show" in script.output
        assert registry.get_appointments() == []
