"""
Prescription SQLAlchemy Models

Tables for users, the medicine catalog, prescriptions with their lines and
issued scannable payloads.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dpms.models.base import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """Users are managed by the identity service; this service only reads them."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="patient", index=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class MedicationModel(Base, TimestampMixin):
    """Medicine catalog entry."""

    __tablename__ = "medications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    medicine_name: Mapped[str] = mapped_column(String(200), nullable=False)
    dosage: Mapped[str] = mapped_column(String(100), nullable=False)
    expire_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class PrescriptionModel(Base, TimestampMixin):
    __tablename__ = "prescriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    patient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    doctor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    disease: Mapped[str] = mapped_column(Text, nullable=False)
    disease_type: Mapped[str] = mapped_column(String(20), nullable=False, default="General")
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    payload_issued: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    lines: Mapped[list["PrescriptionMedicationModel"]] = relationship(
        back_populates="prescription",
        cascade="all, delete-orphan",
        order_by="PrescriptionMedicationModel.position",
    )


class PrescriptionMedicationModel(Base):
    """One medication line; ``timing`` is a JSONB list of slot codes."""

    __tablename__ = "prescription_medications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    prescription_id: Mapped[int] = mapped_column(
        ForeignKey("prescriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    medicine_id: Mapped[int] = mapped_column(ForeignKey("medications.id"), nullable=False)
    timing: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    prescription: Mapped[PrescriptionModel] = relationship(back_populates="lines")
    medicine: Mapped[MedicationModel | None] = relationship()


class ScannablePayloadModel(Base, TimestampMixin):
    __tablename__ = "scannable_payloads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    prescription_id: Mapped[int] = mapped_column(
        ForeignKey("prescriptions.id"),
        unique=True,
        nullable=False,
    )
    patient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    doctor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    artifact: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
