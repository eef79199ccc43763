import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field, field_validator

from config import Settings, get_settings
from domain import (
    Appointment,
    AppointmentSummary,
    MessageBuffer,
    NotFoundError,
    Registry,
    VisitRecord,
)
from logging_config import setup_logging
from slots import is_valid_date, is_valid_time_slot, parse_date

logger = logging.getLogger(__name__)

router = APIRouter()


class Clinic:
    """The registry instance served by the app, plus what guards and reports for it."""

    def __init__(self, registry: Registry, reporter: MessageBuffer) -> None:
        self.registry = registry
        self.reporter = reporter
        # FastAPI runs sync handlers in a thread pool; the registry expects one caller.
        self.lock = threading.Lock()

    @contextmanager
    def session(self) -> Iterator[Registry]:
        with self.lock:
            self.reporter.drain()
            yield self.registry

    def messages(self) -> List[str]:
        return self.reporter.drain()


def get_clinic(request: Request) -> Clinic:
    return request.app.state.clinic


class DoctorSummary(BaseModel):
    id: int
    name: str


class PatientSummary(BaseModel):
    id: int
    name: str
    date_of_birth: Optional[str] = None


class CreatePatientRequest(BaseModel):
    name: str = Field(..., min_length=1)
    date_of_birth: str = Field(..., min_length=1)  # e.g. "23.08.1997"


class PatientCreatedResponse(PatientSummary):
    messages: List[str]


class ScheduleEntry(BaseModel):
    time_slot: str
    patient_name: str
    doctor_name: str


class DoctorScheduleResponse(BaseModel):
    doctor_name: str
    appointments: List[ScheduleEntry]


class AppointmentResponse(BaseModel):
    id: int
    time_slot: str
    doctor_name: str
    patient_name: str


class ScheduleRequest(BaseModel):
    time_slot: str  # "YYYY-MM-DD HH:MM"
    doctor_name: str
    patient_name: str

    @field_validator("time_slot")
    @classmethod
    def check_time_slot(cls, value: str) -> str:
        if not is_valid_time_slot(value):
            raise ValueError("time_slot must look like YYYY-MM-DD HH:MM")
        if not is_valid_date(value.split(" ")[0]):
            raise ValueError("Invalid date. Date must be today or in the future.")
        return value


class ScheduleResponse(BaseModel):
    appointment: AppointmentResponse
    messages: List[str]


class CancelRequest(BaseModel):
    time_slot: str
    patient_name: str
    doctor_name: str


class CancelResponse(BaseModel):
    canceled: bool
    messages: List[str]


class AvailableTime(BaseModel):
    time_slot: str
    doctor_name: str


class VisitRecordRequest(BaseModel):
    doctor_name: str
    patient_name: str
    time_slot: str
    diagnosis: str = Field(..., min_length=1)


class VisitRecordResponse(BaseModel):
    id: int
    doctor_name: str
    patient_name: str
    time_slot: str
    diagnosis: str


class VisitRecordCreatedResponse(VisitRecordResponse):
    messages: List[str]


def to_appointment_response(registry: Registry, appointment: Appointment) -> AppointmentResponse:
    summary = registry.summary_of(appointment)
    return AppointmentResponse(
        id=appointment.id,
        time_slot=summary.time_slot,
        doctor_name=summary.doctor_name,
        patient_name=summary.patient_name,
    )


def to_schedule_entry(summary: AppointmentSummary) -> ScheduleEntry:
    return ScheduleEntry(
        time_slot=summary.time_slot,
        patient_name=summary.patient_name,
        doctor_name=summary.doctor_name,
    )


def to_visit_record_response(record: VisitRecord) -> VisitRecordResponse:
    return VisitRecordResponse(
        id=record.id,
        doctor_name=record.doctor_name,
        patient_name=record.patient_name,
        time_slot=record.time_slot,
        diagnosis=record.diagnosis,
    )


def require_date(day: str) -> str:
    if parse_date(day) is None:
        raise HTTPException(status_code=422, detail="Date must look like YYYY-MM-DD")
    return day


@router.get("/doctors", response_model=List[DoctorSummary])
def list_doctors(clinic: Clinic = Depends(get_clinic)) -> List[DoctorSummary]:
    with clinic.session() as registry:
        return [DoctorSummary(id=d.id, name=d.name) for d in registry.get_doctors()]


@router.get("/doctors/{doctor_name}/schedule", response_model=DoctorScheduleResponse)
def get_doctor_schedule(
    doctor_name: str, clinic: Clinic = Depends(get_clinic)
) -> DoctorScheduleResponse:
    with clinic.session() as registry:
        try:
            doctor = registry.find_doctor_by_name(doctor_name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        entries = [to_schedule_entry(s) for s in registry.appointments_for(doctor)]
    return DoctorScheduleResponse(doctor_name=doctor.name, appointments=entries)


@router.get("/patients", response_model=List[PatientSummary])
def list_patients(clinic: Clinic = Depends(get_clinic)) -> List[PatientSummary]:
    with clinic.session() as registry:
        return [
            PatientSummary(id=p.id, name=p.name, date_of_birth=p.date_of_birth)
            for p in registry.get_patients()
        ]


@router.post("/patients", response_model=PatientCreatedResponse)
def add_patient(
    body: CreatePatientRequest, clinic: Clinic = Depends(get_clinic)
) -> PatientCreatedResponse:
    with clinic.session() as registry:
        patient = registry.add_patient(body.name, body.date_of_birth)
        messages = clinic.messages()
    return PatientCreatedResponse(
        id=patient.id,
        name=patient.name,
        date_of_birth=patient.date_of_birth,
        messages=messages,
    )


@router.get("/patients/{patient_name}/appointments", response_model=List[ScheduleEntry])
def get_patient_appointments(
    patient_name: str, clinic: Clinic = Depends(get_clinic)
) -> List[ScheduleEntry]:
    with clinic.session() as registry:
        try:
            patient = registry.find_patient_by_name(patient_name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return [to_schedule_entry(s) for s in registry.appointments_for(patient)]


@router.get("/availability/{day}", response_model=List[AvailableTime])
def get_available_times(
    day: str,
    doctor: Optional[str] = None,
    clinic: Clinic = Depends(get_clinic),
) -> List[AvailableTime]:
    require_date(day)
    with clinic.session() as registry:
        if doctor is None:
            pairs = registry.get_available_times(day)
        else:
            pairs = registry.get_available_times_for_doctor(day, doctor)
    return [AvailableTime(time_slot=t, doctor_name=name) for t, name in pairs]


@router.get("/availability/{day}/doctors", response_model=List[str])
def get_available_doctors(day: str, clinic: Clinic = Depends(get_clinic)) -> List[str]:
    require_date(day)
    with clinic.session() as registry:
        return registry.get_available_doctors(day)


@router.get("/appointments", response_model=List[AppointmentResponse])
def list_appointments(clinic: Clinic = Depends(get_clinic)) -> List[AppointmentResponse]:
    with clinic.session() as registry:
        return [to_appointment_response(registry, a) for a in registry.get_appointments()]


@router.post("/appointments", response_model=ScheduleResponse)
def schedule_appointment(
    body: ScheduleRequest, clinic: Clinic = Depends(get_clinic)
) -> ScheduleResponse:
    with clinic.session() as registry:
        if not registry.grid.contains(body.time_slot):
            raise HTTPException(
                status_code=422,
                detail=f"{body.time_slot} is not a bookable slot of the working day",
            )
        try:
            doctor = registry.find_doctor_by_name(body.doctor_name)
            patient = registry.find_patient_by_name(body.patient_name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

        result = registry.schedule_appointment(body.time_slot, doctor, patient)
        messages = clinic.messages()
        if not result.success:
            raise HTTPException(status_code=409, detail=result.message)
        appointment = to_appointment_response(registry, result.appointment)
    return ScheduleResponse(appointment=appointment, messages=messages)


@router.post("/appointments/cancel", response_model=CancelResponse)
def cancel_appointment(
    body: CancelRequest, clinic: Clinic = Depends(get_clinic)
) -> CancelResponse:
    with clinic.session() as registry:
        canceled = registry.cancel_appointment(
            body.time_slot, body.patient_name, body.doctor_name
        )
        messages = clinic.messages()
    return CancelResponse(canceled=canceled, messages=messages)


@router.delete("/appointments/{appointment_id}", response_model=CancelResponse)
def cancel_appointment_by_id(
    appointment_id: int, clinic: Clinic = Depends(get_clinic)
) -> CancelResponse:
    with clinic.session() as registry:
        try:
            registry.cancel_appointment_by_id(appointment_id)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        messages = clinic.messages()
    return CancelResponse(canceled=True, messages=messages)


@router.post("/visit-records", response_model=VisitRecordCreatedResponse)
def add_visit_record(
    body: VisitRecordRequest, clinic: Clinic = Depends(get_clinic)
) -> VisitRecordCreatedResponse:
    with clinic.session() as registry:
        try:
            doctor = registry.find_doctor_by_name(body.doctor_name)
            patient = registry.find_patient_by_name(body.patient_name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        record = registry.add_hospital_visit_record(
            doctor, patient, body.time_slot, body.diagnosis
        )
    response = to_visit_record_response(record)
    return VisitRecordCreatedResponse(
        **response.model_dump(),
        messages=[f"Hospital visit card is added for patient {record.patient_name}"],
    )


@router.get("/patients/{patient_name}/visit-records", response_model=List[VisitRecordResponse])
def get_visit_records(
    patient_name: str, clinic: Clinic = Depends(get_clinic)
) -> List[VisitRecordResponse]:
    with clinic.session() as registry:
        try:
            patient = registry.find_patient_by_name(patient_name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        records = registry.get_visit_records_for_patient(patient)
    return [to_visit_record_response(r) for r in records]


@router.post("/admin/reset")
def reset_all(request: Request, clinic: Clinic = Depends(get_clinic)) -> dict:
    """Reset in-memory data, reloading the demo seed when it is enabled."""
    settings: Settings = request.app.state.settings
    with clinic.session() as registry:
        registry.reset()
        if settings.seed_demo_data:
            registry.load_defaults()
    logger.info("Registry reset (seeded=%s)", settings.seed_demo_data)
    return {"detail": "State cleared"}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    reporter = MessageBuffer()
    registry = Registry(grid=settings.slot_grid(), reporter=reporter)
    if settings.seed_demo_data:
        registry.load_defaults()

    app = FastAPI(title=settings.app_title)
    app.state.settings = settings
    app.state.clinic = Clinic(registry, reporter)
    app.include_router(router)
    logger.info(
        "Scheduler ready: %d doctors, %d patients, %d appointments",
        len(registry.doctors),
        len(registry.patients),
        len(registry.appointments),
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
