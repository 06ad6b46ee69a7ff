"""
Prescription Aggregate

A prescription owns its ordered medication lines. After creation it only
changes through soft delete, per-line pricing and the payload-issued flip.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from dpms.core.domain import SoftDeletableEntity, ValidationException

from ..value_objects import DiseaseType, MedicineInfo, TimingSlot

CENT = Decimal("0.01")


@dataclass
class MedicationLine:
    """One medicine on a prescription with its intake slots and price."""

    medicine_id: int
    timing: frozenset[TimingSlot]
    amount: Decimal | None = None
    id: int | None = None
    medicine: MedicineInfo | None = None

    def __post_init__(self):
        if not self.timing:
            raise ValidationException("Medication line needs at least one timing slot", field="timing")
        if self.amount is not None:
            self.amount = _checked_amount(self.amount)

    @property
    def is_priced(self) -> bool:
        return self.amount is not None

    def is_taken_at(self, slot: TimingSlot) -> bool:
        return slot in self.timing


@dataclass
class Prescription(SoftDeletableEntity[int]):
    """
    Prescription aggregate root.

    Example:
        ```python
        prescription = Prescription.create(
            patient_id=7,
            doctor_id=3,
            disease="Hypertension",
            medications=[MedicationLine(medicine_id=1, timing=frozenset({TimingSlot.MORNING}))],
        )
        prescription.apply_total_amount(Decimal("30.00"))
        ```
    """

    patient_id: int = 0
    doctor_id: int = 0
    disease: str = ""
    disease_type: DiseaseType = DiseaseType.GENERAL
    medications: list[MedicationLine] = field(default_factory=list)
    issued_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    payload_issued: bool = False

    @classmethod
    def create(
        cls,
        patient_id: int,
        doctor_id: int,
        disease: str,
        medications: list[MedicationLine],
        disease_type: DiseaseType = DiseaseType.GENERAL,
        issued_at: datetime | None = None,
    ) -> "Prescription":
        """Build a new prescription, enforcing creation invariants."""
        if not disease or not disease.strip():
            raise ValidationException("Disease is required", field="disease")
        if not medications:
            raise ValidationException("At least one medication is required", field="medications")
        if issued_at is not None and issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=UTC)

        return cls(
            patient_id=patient_id,
            doctor_id=doctor_id,
            disease=disease.strip(),
            disease_type=disease_type,
            medications=list(medications),
            issued_at=issued_at or datetime.now(UTC),
        )

    # Queries

    @property
    def unpriced_lines(self) -> list[MedicationLine]:
        return [line for line in self.medications if not line.is_priced]

    def lines_for(self, slot: TimingSlot) -> list[MedicationLine]:
        """Lines whose timing includes the slot, in prescription order."""
        return [line for line in self.medications if line.is_taken_at(slot)]

    def is_stale(self, now: datetime, max_age_days: int) -> bool:
        """Older than the reminder window; exactly max_age_days old is still fresh."""
        return now - self.issued_at > timedelta(days=max_age_days)

    # Transitions

    def apply_line_amounts(self, amounts: dict[int, Decimal]) -> list[MedicationLine]:
        """
        Set amounts for the listed line ids.

        Unknown ids are ignored and an already priced line is overwritten.
        Every amount is validated before any line changes.

        Returns:
            The lines that were updated
        """
        checked = {line_id: _checked_amount(amount) for line_id, amount in amounts.items()}
        updated = []
        for line in self.medications:
            if line.id in checked:
                line.amount = checked[line.id]
                updated.append(line)
        if updated:
            self.touch()
        return updated

    def apply_total_amount(self, total: Decimal) -> list[MedicationLine]:
        """
        Split a total evenly over the lines without an amount.

        Each share is total / N rounded half-up to cents. Priced lines are
        left alone, and with no unpriced line nothing changes.
        """
        total = _checked_amount(total)
        pending = self.unpriced_lines
        if not pending:
            return []
        share = (total / len(pending)).quantize(CENT, rounding=ROUND_HALF_UP)
        for line in pending:
            line.amount = share
        self.touch()
        return pending

    def mark_payload_issued(self) -> None:
        self.payload_issued = True
        self.touch()

    def deactivate(self) -> None:
        self.soft_delete()

    def without_amounts(self) -> "Prescription":
        """Copy of this prescription with every line amount hidden."""
        hidden = [replace(line, amount=None) for line in self.medications]
        return replace(self, medications=hidden)


def _checked_amount(value) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError:
        raise ValidationException(f"Invalid amount: {value}", field="amount") from None
    if not amount.is_finite():
        raise ValidationException(f"Invalid amount: {value}", field="amount")
    if amount < 0:
        raise ValidationException("Amount must not be negative", field="amount", details={"amount": str(amount)})
    return amount
