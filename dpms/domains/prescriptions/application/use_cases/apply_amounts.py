"""
Apply Amounts Use Case

Pharmacist pricing of prescription lines.
"""

import logging

from dpms.core.domain import EntityNotFoundException, ValidationException
from dpms.domains.prescriptions.application.dto import ApplyAmountsRequest, ApplyAmountsResult
from dpms.domains.prescriptions.application.ports import IPrescriptionRepository
from dpms.domains.prescriptions.domain.services import is_fully_priced

logger = logging.getLogger(__name__)


class ApplyAmountsUseCase:
    """
    Price lines explicitly by id or split a total over the unpriced ones.

    Pricing never touches the payload itself; once every line is priced the
    visibility resolver starts hiding the artifact from non-admin readers.
    Concurrent requests are not version-checked, the last write wins.
    """

    def __init__(self, prescription_repository: IPrescriptionRepository):
        self.prescription_repo = prescription_repository

    async def execute(self, request: ApplyAmountsRequest) -> ApplyAmountsResult:
        explicit = request.line_amounts is not None
        split = request.total_amount is not None
        if explicit == split:
            raise ValidationException(
                "Provide either line amounts or a total amount",
                field="amounts",
            )

        prescription = await self.prescription_repo.find_by_id(request.prescription_id)
        if prescription is None or not prescription.is_active:
            raise EntityNotFoundException("Prescription", request.prescription_id)

        if explicit:
            updated = prescription.apply_line_amounts(request.line_amounts or {})
        else:
            updated = prescription.apply_total_amount(request.total_amount)

        if updated:
            prescription = await self.prescription_repo.save(prescription)

        all_priced = is_fully_priced(prescription.medications)
        logger.info(
            f"Priced {len(updated)} line(s) on prescription {request.prescription_id} "
            f"({'explicit' if explicit else 'total'} mode, all priced: {all_priced})"
        )
        return ApplyAmountsResult(
            prescription=prescription,
            updated_line_ids=[line.id for line in updated if line.id is not None],
            all_priced=all_priced,
        )
