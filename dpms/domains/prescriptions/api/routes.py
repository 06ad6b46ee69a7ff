"""
Prescription API Routes

FastAPI routers for prescriptions, scannable payloads and reminders.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from dpms.domains.prescriptions.api.dependencies import (
    AdminViewer,
    ClinicianViewer,
    CurrentViewer,
    DoctorViewer,
    PatientViewer,
    PharmacistViewer,
    get_all_payloads_use_case,
    get_apply_amounts_use_case,
    get_channel_health_use_case,
    get_create_prescription_use_case,
    get_deactivate_prescription_use_case,
    get_issue_payload_use_case,
    get_list_prescriptions_use_case,
    get_patient_payloads_use_case,
    get_patient_reminders_use_case,
    get_payload_use_case,
    get_pending_pricing_use_case,
    get_prescription_use_case,
    get_reminder_dispatch_use_case,
    get_reminder_scheduler,
)
from dpms.domains.prescriptions.api.schemas import (
    AmountsRequest,
    AmountsResponse,
    ChannelHealthResponse,
    DispatchResponse,
    IssuePayloadRequest,
    JobInfo,
    PatientRemindersResponse,
    PayloadResponse,
    PrescriptionCreate,
    PrescriptionResponse,
    ReminderRunResponse,
    SampleEmailRequest,
    SampleEmailResponse,
    SendReminderRequest,
)
from dpms.domains.prescriptions.application.dto import (
    ApplyAmountsRequest,
    CreatePrescriptionRequest,
    MedicationLineInput,
)
from dpms.domains.prescriptions.application.use_cases import (
    ApplyAmountsUseCase,
    ChannelHealthUseCase,
    CreatePrescriptionUseCase,
    DeactivatePrescriptionUseCase,
    GetPatientRemindersUseCase,
    GetPayloadUseCase,
    GetPrescriptionUseCase,
    IssuePayloadUseCase,
    ListAllPayloadsUseCase,
    ListPatientPayloadsUseCase,
    ListPendingPricingUseCase,
    ListPrescriptionsUseCase,
    ReminderDispatchUseCase,
)
from dpms.domains.prescriptions.domain.value_objects import TimingSlot, ViewerRole
from dpms.domains.prescriptions.infrastructure.scheduler import MedicationReminderScheduler

# Type aliases for use case dependencies
CreatePrescriptionUseCaseDep = Annotated[CreatePrescriptionUseCase, Depends(get_create_prescription_use_case)]
DeactivatePrescriptionUseCaseDep = Annotated[
    DeactivatePrescriptionUseCase, Depends(get_deactivate_prescription_use_case)
]
GetPrescriptionUseCaseDep = Annotated[GetPrescriptionUseCase, Depends(get_prescription_use_case)]
ListPrescriptionsUseCaseDep = Annotated[ListPrescriptionsUseCase, Depends(get_list_prescriptions_use_case)]
PendingPricingUseCaseDep = Annotated[ListPendingPricingUseCase, Depends(get_pending_pricing_use_case)]
ApplyAmountsUseCaseDep = Annotated[ApplyAmountsUseCase, Depends(get_apply_amounts_use_case)]
IssuePayloadUseCaseDep = Annotated[IssuePayloadUseCase, Depends(get_issue_payload_use_case)]
GetPayloadUseCaseDep = Annotated[GetPayloadUseCase, Depends(get_payload_use_case)]
PatientPayloadsUseCaseDep = Annotated[ListPatientPayloadsUseCase, Depends(get_patient_payloads_use_case)]
AllPayloadsUseCaseDep = Annotated[ListAllPayloadsUseCase, Depends(get_all_payloads_use_case)]
PatientRemindersUseCaseDep = Annotated[GetPatientRemindersUseCase, Depends(get_patient_reminders_use_case)]
ReminderDispatchUseCaseDep = Annotated[ReminderDispatchUseCase, Depends(get_reminder_dispatch_use_case)]
ChannelHealthUseCaseDep = Annotated[ChannelHealthUseCase, Depends(get_channel_health_use_case)]
SchedulerDep = Annotated[MedicationReminderScheduler, Depends(get_reminder_scheduler)]


# ==================== PRESCRIPTIONS ====================

prescriptions_router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])


@prescriptions_router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    request: PrescriptionCreate,
    viewer: DoctorViewer,
    use_case: CreatePrescriptionUseCaseDep,
):
    """Create a prescription for a patient."""
    prescription = await use_case.execute(
        CreatePrescriptionRequest(
            patient_id=request.patient_id,
            doctor_id=viewer.id,
            disease=request.disease,
            disease_type=request.disease_type,
            medications=[
                MedicationLineInput(medicine_id=item.medicine_id, timing=item.timing)
                for item in request.medications
            ],
            issued_at=request.issued_at,
        )
    )
    return PrescriptionResponse.from_entity(prescription)


@prescriptions_router.get("/pending-pricing", response_model=list[PrescriptionResponse])
async def list_pending_pricing(
    _: PharmacistViewer,
    use_case: PendingPricingUseCaseDep,
):
    """Issued prescriptions with at least one unpriced medication."""
    prescriptions = await use_case.execute()
    return [PrescriptionResponse.from_entity(p) for p in prescriptions]


@prescriptions_router.get("", response_model=list[PrescriptionResponse])
async def list_prescriptions(
    viewer: ClinicianViewer,
    use_case: ListPrescriptionsUseCaseDep,
    patient_id: Annotated[int | None, Query(description="Only prescriptions of this patient")] = None,
):
    """
    Active prescriptions.

    With ``patient_id`` a doctor sees only the prescriptions they wrote for
    that patient; an admin sees every doctor's.
    """
    if patient_id is None:
        prescriptions = await use_case.list_all()
    elif viewer.role is ViewerRole.DOCTOR:
        prescriptions = await use_case.list_by_patient(patient_id, doctor_id=viewer.id)
    else:
        prescriptions = await use_case.list_by_patient(patient_id)
    return [PrescriptionResponse.from_entity(p) for p in prescriptions]


@prescriptions_router.get("/mine", response_model=list[PrescriptionResponse])
async def list_my_prescriptions(
    viewer: PatientViewer,
    use_case: ListPrescriptionsUseCaseDep,
):
    """The caller's active prescriptions, without amounts."""
    prescriptions = await use_case.list_for_patient(viewer.id)
    return [PrescriptionResponse.from_entity(p) for p in prescriptions]


@prescriptions_router.get("/mine-issued", response_model=list[PrescriptionResponse])
async def list_my_issued_prescriptions(
    viewer: DoctorViewer,
    use_case: ListPrescriptionsUseCaseDep,
):
    """Active prescriptions written by the calling doctor."""
    prescriptions = await use_case.list_by_doctor(viewer.id)
    return [PrescriptionResponse.from_entity(p) for p in prescriptions]


@prescriptions_router.get("/{prescription_id}", response_model=PrescriptionResponse)
async def get_prescription(
    prescription_id: int,
    viewer: CurrentViewer,
    use_case: GetPrescriptionUseCaseDep,
):
    """Get a prescription; patients do not see amounts."""
    prescription = await use_case.execute(prescription_id, viewer.role)
    return PrescriptionResponse.from_entity(prescription)


@prescriptions_router.delete("/{prescription_id}", response_model=PrescriptionResponse)
async def deactivate_prescription(
    prescription_id: int,
    _: AdminViewer,
    use_case: DeactivatePrescriptionUseCaseDep,
):
    """Soft delete a prescription."""
    prescription = await use_case.execute(prescription_id)
    return PrescriptionResponse.from_entity(prescription)


@prescriptions_router.put("/{prescription_id}/amounts", response_model=AmountsResponse)
async def enter_amounts(
    prescription_id: int,
    request: AmountsRequest,
    _: PharmacistViewer,
    use_case: ApplyAmountsUseCaseDep,
):
    """Price medications by line id, or split a total over the unpriced ones."""
    result = await use_case.execute(
        ApplyAmountsRequest(
            prescription_id=prescription_id,
            line_amounts=request.line_amounts,
            total_amount=request.total_amount,
        )
    )
    return AmountsResponse.from_result(result)


# ==================== PAYLOADS ====================

payloads_router = APIRouter(prefix="/payloads", tags=["Scannable Payloads"])


@payloads_router.post("", response_model=PayloadResponse, status_code=status.HTTP_201_CREATED)
async def issue_payload(
    request: IssuePayloadRequest,
    _: DoctorViewer,
    use_case: IssuePayloadUseCaseDep,
):
    """Issue the scannable payload of a prescription (once)."""
    payload = await use_case.execute(request.prescription_id)
    return PayloadResponse.from_entity(payload)


@payloads_router.get("/mine", response_model=list[PayloadResponse])
async def list_my_payloads(
    viewer: PatientViewer,
    use_case: PatientPayloadsUseCaseDep,
):
    """The caller's own payloads."""
    payloads = await use_case.execute(viewer.id)
    return [PayloadResponse.from_entity(p) for p in payloads]


@payloads_router.get("", response_model=list[PayloadResponse])
async def list_all_payloads(
    _: AdminViewer,
    use_case: AllPayloadsUseCaseDep,
):
    """Every active payload."""
    payloads = await use_case.execute()
    return [PayloadResponse.from_entity(p) for p in payloads]


@payloads_router.get("/{prescription_id}", response_model=PayloadResponse)
async def get_payload(
    prescription_id: int,
    viewer: CurrentViewer,
    use_case: GetPayloadUseCaseDep,
):
    """Payload of a prescription; the artifact is null once it is fully priced (except for admins)."""
    payload = await use_case.execute(prescription_id, viewer.role)
    return PayloadResponse.from_entity(payload)


# ==================== REMINDERS ====================

reminders_router = APIRouter(prefix="/reminders", tags=["Reminders"])


@reminders_router.get("/patient", response_model=PatientRemindersResponse)
async def get_patient_reminders(
    viewer: PatientViewer,
    use_case: PatientRemindersUseCaseDep,
):
    """The caller's medications grouped by timing slot."""
    reminders = await use_case.execute(viewer.id)
    return PatientRemindersResponse.from_reminders(reminders)


@reminders_router.post("/send", response_model=DispatchResponse)
async def send_reminder(
    request: SendReminderRequest,
    _: ClinicianViewer,
    use_case: ReminderDispatchUseCaseDep,
):
    """Send a reminder for one prescription and slot right away."""
    result = await use_case.send_now(request.prescription_id, request.timing)
    return DispatchResponse.from_result(result)


@reminders_router.post("/run/{timing}", response_model=ReminderRunResponse)
async def run_reminder_bucket(
    timing: TimingSlot,
    _: AdminViewer,
    scheduler: SchedulerDep,
):
    """Run one reminder bucket now."""
    result = await scheduler.run_now(timing)
    return ReminderRunResponse.from_result(result)


@reminders_router.get("/jobs", response_model=list[JobInfo])
async def list_reminder_jobs(
    _: AdminViewer,
    scheduler: SchedulerDep,
):
    """Scheduled reminder jobs and their next run."""
    return [JobInfo(**job) for job in scheduler.get_jobs_info()]


@reminders_router.post("/test-email", response_model=SampleEmailResponse)
async def send_test_email(
    request: SampleEmailRequest,
    _: AdminViewer,
    use_case: ChannelHealthUseCaseDep,
):
    """Send a sample reminder to check the e-mail setup."""
    result = await use_case.send_test(request.email)
    return SampleEmailResponse(
        success=True,
        message="Test email sent successfully",
        recipient=result.recipient,
        message_id=result.message_id,
    )


@reminders_router.get("/check-config", response_model=ChannelHealthResponse)
async def check_email_config(
    _: AdminViewer,
    use_case: ChannelHealthUseCaseDep,
):
    """E-mail configuration and connection status."""
    health = await use_case.check()
    return ChannelHealthResponse.from_health(health)


router = APIRouter()
router.include_router(prescriptions_router)
router.include_router(payloads_router)
router.include_router(reminders_router)
