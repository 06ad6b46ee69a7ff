"""
Prescription API Dependencies

FastAPI dependencies: caller identity from upstream headers, role guards
and use cases built by the container.
"""

from dataclasses import dataclass
from typing import Annotated, Callable

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from dpms.core.container import get_container
from dpms.core.domain import AuthorizationException
from dpms.database.async_db import get_async_db
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
from dpms.domains.prescriptions.domain.value_objects import ViewerRole
from dpms.domains.prescriptions.infrastructure.scheduler import MedicationReminderScheduler

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_async_db)]


@dataclass(frozen=True)
class Viewer:
    """Authenticated caller as asserted by the identity layer."""

    id: int
    role: ViewerRole


def get_current_viewer(
    x_user_id: Annotated[int, Header(alias="X-User-Id")],
    x_user_role: Annotated[str, Header(alias="X-User-Role")],
) -> Viewer:
    try:
        role = ViewerRole.from_string(x_user_role)
    except ValueError:
        raise AuthorizationException("access", x_user_role) from None
    return Viewer(id=x_user_id, role=role)


CurrentViewer = Annotated[Viewer, Depends(get_current_viewer)]


def require_roles(*roles: ViewerRole) -> Callable[[Viewer], Viewer]:
    """Dependency factory rejecting callers outside ``roles``."""
    allowed = ", ".join(role.value for role in roles)

    def guard(viewer: CurrentViewer) -> Viewer:
        if viewer.role not in roles:
            raise AuthorizationException(f"this operation (requires {allowed})", viewer.role.value)
        return viewer

    return guard


AdminViewer = Annotated[Viewer, Depends(require_roles(ViewerRole.ADMIN))]
DoctorViewer = Annotated[Viewer, Depends(require_roles(ViewerRole.DOCTOR))]
PatientViewer = Annotated[Viewer, Depends(require_roles(ViewerRole.PATIENT))]
PharmacistViewer = Annotated[Viewer, Depends(require_roles(ViewerRole.PHARMACIST))]
ClinicianViewer = Annotated[Viewer, Depends(require_roles(ViewerRole.ADMIN, ViewerRole.DOCTOR))]


def get_create_prescription_use_case(db: DbSession) -> CreatePrescriptionUseCase:
    return get_container().create_create_prescription_use_case(db)


def get_deactivate_prescription_use_case(db: DbSession) -> DeactivatePrescriptionUseCase:
    return get_container().create_deactivate_prescription_use_case(db)


def get_prescription_use_case(db: DbSession) -> GetPrescriptionUseCase:
    return get_container().create_get_prescription_use_case(db)


def get_list_prescriptions_use_case(db: DbSession) -> ListPrescriptionsUseCase:
    return get_container().create_list_prescriptions_use_case(db)


def get_pending_pricing_use_case(db: DbSession) -> ListPendingPricingUseCase:
    return get_container().create_list_pending_pricing_use_case(db)


def get_apply_amounts_use_case(db: DbSession) -> ApplyAmountsUseCase:
    return get_container().create_apply_amounts_use_case(db)


def get_issue_payload_use_case(db: DbSession) -> IssuePayloadUseCase:
    return get_container().create_issue_payload_use_case(db)


def get_payload_use_case(db: DbSession) -> GetPayloadUseCase:
    return get_container().create_get_payload_use_case(db)


def get_patient_payloads_use_case(db: DbSession) -> ListPatientPayloadsUseCase:
    return get_container().create_list_patient_payloads_use_case(db)


def get_all_payloads_use_case(db: DbSession) -> ListAllPayloadsUseCase:
    return get_container().create_list_all_payloads_use_case(db)


def get_patient_reminders_use_case(db: DbSession) -> GetPatientRemindersUseCase:
    return get_container().create_patient_reminders_use_case(db)


def get_reminder_dispatch_use_case(db: DbSession) -> ReminderDispatchUseCase:
    return get_container().create_reminder_dispatch_use_case(db)


def get_channel_health_use_case() -> ChannelHealthUseCase:
    return get_container().create_channel_health_use_case()


def get_reminder_scheduler() -> MedicationReminderScheduler:
    return get_container().get_reminder_scheduler()
