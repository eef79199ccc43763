from domain import MessageBuffer, Registry
from slots import today, tomorrow


def run_simulation(day: str = "") -> Registry:
    """
    Simulate one clinic day on top of the default seed.

    Demonstrates:
    - Free slots derived from the slot grid.
    - Refusing a second booking of the same doctor and time.
    - Cancellation returning the slot to the grid.
    - Visit records kept per patient.
    """
    messages = MessageBuffer()
    registry = Registry(reporter=messages)
    registry.load_defaults(today_date=today(), tomorrow_date=tomorrow())
    day = day or tomorrow()

    print("Doctors:", ", ".join(d.name for d in registry.get_doctors()))
    print("Demo appointments booked:", len(registry.get_appointments()))

    doctor = registry.find_doctor_by_name("John Smith")
    alice = registry.find_patient_by_name("Alice Smith")
    newcomer = registry.add_patient("Ivy Walker", "05.05.1990")

    free = registry.get_available_times_for_doctor(day, doctor.name)
    print(f"Free slots for Dr. {doctor.name} on {day}:", len(free))

    first_slot = free[0][0]
    registry.schedule_appointment(first_slot, doctor, alice)
    registry.schedule_appointment(first_slot, doctor, newcomer)
    registry.schedule_appointment(free[1][0], doctor, newcomer)

    print("Doctors with free slots:", len(registry.get_available_doctors(day)))

    registry.cancel_appointment(first_slot, alice.name, doctor.name)
    registry.cancel_appointment(first_slot, alice.name, doctor.name)

    registry.add_hospital_visit_record(doctor, newcomer, free[1][0], "Seasonal flu")

    for message in messages.drain():
        print(" -", message)

    print(f"\nSchedule for Dr. {doctor.name}")
    print(registry.render_details(doctor))

    print(f"\nVisit records for {newcomer.name}")
    for record in registry.get_visit_records_for_patient(newcomer):
        print(f"  {record.time_slot} Dr. {record.doctor_name}: {record.diagnosis}")

    return registry


if __name__ == "__main__":
    run_simulation()
