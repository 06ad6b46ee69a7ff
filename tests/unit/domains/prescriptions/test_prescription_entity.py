"""
Unit tests for the Prescription aggregate.

Tests:
- Creation invariants
- Explicit and total pricing
- Reminder window and slot filtering
- Amount hiding for patients
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from dpms.core.domain import ValidationException
from dpms.domains.prescriptions.domain.entities import MedicationLine, Prescription
from dpms.domains.prescriptions.domain.value_objects import TimingSlot


# ============================================================================
# Creation
# ============================================================================


@pytest.mark.unit
def test_create_requires_disease(make_line):
    """Test that a blank disease is rejected."""
    # Act & Assert
    with pytest.raises(ValidationException) as exc_info:
        Prescription.create(patient_id=7, doctor_id=3, disease="  ", medications=[make_line()])

    assert exc_info.value.field == "disease"


@pytest.mark.unit
def test_create_requires_medications():
    """Test that a prescription needs at least one medication."""
    # Act & Assert
    with pytest.raises(ValidationException) as exc_info:
        Prescription.create(patient_id=7, doctor_id=3, disease="Flu", medications=[])

    assert exc_info.value.field == "medications"


@pytest.mark.unit
def test_create_assumes_utc_for_naive_issue_date(make_line, now):
    """Test that a naive issue date is read as UTC and the disease is trimmed."""
    # Act
    prescription = Prescription.create(
        patient_id=7,
        doctor_id=3,
        disease=" Flu ",
        medications=[make_line()],
        issued_at=now.replace(tzinfo=None),
    )

    # Assert
    assert prescription.issued_at == now
    assert prescription.disease == "Flu"
    assert prescription.is_new()
    assert prescription.payload_issued is False


@pytest.mark.unit
def test_line_requires_timing():
    """Test that a medication line needs at least one slot."""
    # Act & Assert
    with pytest.raises(ValidationException):
        MedicationLine(medicine_id=1, timing=frozenset())


@pytest.mark.unit
def test_line_rejects_negative_amount():
    """Test that a medication line rejects a negative amount."""
    # Act & Assert
    with pytest.raises(ValidationException):
        MedicationLine(medicine_id=1, timing=frozenset({TimingSlot.NIGHT}), amount=Decimal("-1"))


# ============================================================================
# Explicit pricing
# ============================================================================


@pytest.mark.unit
def test_apply_line_amounts_ignores_unknown_ids(make_prescription, make_line):
    """Test that explicit amounts skip unknown line ids."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1), make_line(line_id=2)])

    # Act
    updated = prescription.apply_line_amounts({1: Decimal("12.50"), 99: Decimal("3")})

    # Assert
    assert [line.id for line in updated] == [1]
    assert prescription.medications[0].amount == Decimal("12.50")
    assert prescription.medications[1].amount is None


@pytest.mark.unit
def test_apply_line_amounts_overwrites_priced_line(make_prescription, make_line):
    """Test that an explicit amount overwrites an existing one."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1, amount="5.00")])

    # Act
    prescription.apply_line_amounts({1: Decimal("7.25")})

    # Assert
    assert prescription.medications[0].amount == Decimal("7.25")


@pytest.mark.unit
def test_apply_line_amounts_validates_before_changing(make_prescription, make_line):
    """Test that one negative amount leaves every line unchanged."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1), make_line(line_id=2)])

    # Act & Assert
    with pytest.raises(ValidationException):
        prescription.apply_line_amounts({1: Decimal("4"), 2: Decimal("-4")})

    assert all(line.amount is None for line in prescription.medications)


@pytest.mark.unit
def test_apply_line_amounts_accepts_zero(make_prescription, make_line):
    """Test that zero counts as priced."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1)])

    # Act
    prescription.apply_line_amounts({1: Decimal("0")})

    # Assert
    assert prescription.medications[0].is_priced


# ============================================================================
# Total split
# ============================================================================


@pytest.mark.unit
def test_total_split_over_unpriced_lines_rounds_half_up(make_prescription, make_line):
    """Test splitting a total over unpriced lines to the cent."""
    # Arrange
    prescription = make_prescription(
        lines=[make_line(line_id=1), make_line(line_id=2), make_line(line_id=3)],
    )

    # Act
    updated = prescription.apply_total_amount(Decimal("10"))

    # Assert
    assert len(updated) == 3
    assert [line.amount for line in prescription.medications] == [Decimal("3.33")] * 3


@pytest.mark.unit
def test_total_split_rounds_half_cent_up(make_prescription, make_line):
    """Test that a half cent share rounds up."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1), make_line(line_id=2)])

    # Act
    prescription.apply_total_amount(Decimal("0.05"))

    # Assert
    assert prescription.medications[0].amount == Decimal("0.03")


@pytest.mark.unit
def test_total_split_leaves_priced_lines_alone(make_prescription, make_line):
    """Test that a total split skips lines that already have an amount."""
    # Arrange
    prescription = make_prescription(
        lines=[make_line(line_id=1, amount="8.00"), make_line(line_id=2), make_line(line_id=3)],
    )

    # Act
    updated = prescription.apply_total_amount(Decimal("30"))

    # Assert
    assert [line.id for line in updated] == [2, 3]
    assert prescription.medications[0].amount == Decimal("8.00")
    assert prescription.medications[1].amount == Decimal("15.00")


@pytest.mark.unit
def test_total_split_with_nothing_unpriced_is_noop(make_prescription, make_line):
    """Test that a total split with every line priced changes nothing."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1, amount="8.00")])

    # Act & Assert
    assert prescription.apply_total_amount(Decimal("30")) == []
    assert prescription.medications[0].amount == Decimal("8.00")


# ============================================================================
# Reminder queries
# ============================================================================


@pytest.mark.unit
def test_lines_for_keeps_prescription_order(make_prescription, make_line):
    """Test that slot filtering keeps the prescription's line order."""
    # Arrange
    prescription = make_prescription(
        lines=[
            make_line(line_id=1, timing="MN"),
            make_line(line_id=2, timing="A"),
            make_line(line_id=3, timing="N"),
        ]
    )

    # Act & Assert
    assert [line.id for line in prescription.lines_for(TimingSlot.NIGHT)] == [1, 3]
    assert [line.id for line in prescription.lines_for(TimingSlot.AFTERNOON)] == [2]


@pytest.mark.unit
def test_stale_boundary_is_exclusive(make_prescription, now):
    """Test that a prescription exactly 90 days old is not stale."""
    # Arrange
    prescription = make_prescription(issued_at=now - timedelta(days=90))

    # Act & Assert
    assert prescription.is_stale(now, 90) is False
    assert prescription.is_stale(now + timedelta(seconds=1), 90) is True


# ============================================================================
# Role views
# ============================================================================


@pytest.mark.unit
def test_without_amounts_returns_copy(make_prescription, make_line):
    """Test that the patient view is a copy without amounts."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1, amount="9.99")])

    # Act
    hidden = prescription.without_amounts()

    # Assert
    assert hidden.medications[0].amount is None
    assert prescription.medications[0].amount == Decimal("9.99")
    assert hidden.id == prescription.id


@pytest.mark.unit
def test_deactivate_is_soft_delete(make_prescription):
    """Test that deactivating marks the prescription deleted."""
    # Arrange
    prescription = make_prescription()

    # Act
    prescription.deactivate()

    # Assert
    assert prescription.is_deleted()
