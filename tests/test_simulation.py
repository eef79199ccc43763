"""Smoke test for the demo day script."""
from simulation import run_simulation


def test_simulation_prints_the_demo_day(capsys):
    registry = run_simulation(day="2030-01-01")
    out = capsys.readouterr().out

    assert "Demo appointments booked: 32" in out
    assert "Free slots for Dr. John Smith on 2030-01-01: 20" in out
    assert "Sorry, Dr. John Smith is not available at 2030-01-01 08:00" in out
    assert "Appointment on 2030-01-01 08:00 canceled for patient Alice Smith" in out
    assert "2030-01-01 08:30 Dr. John Smith: Seasonal flu" in out

    ivy = registry.find_patient_by_name("Ivy Walker")
    assert [s.time_slot for s in registry.appointments_for(ivy)] == ["2030-01-01 08:30"]
