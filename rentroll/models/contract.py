"""
Rental Contract Models
Tables: rent_contracts, contract_units, rent_periods, contract_documents

A RentContract owns its rental spaces (contract_units), each space owns its
pricing tiers (rent_periods), and the contract owns its documents. Children
are created in the same transaction as the contract and never exist alone.
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from sqlalchemy import (
    String, Integer, Float, Date, DateTime, Text, ForeignKey,
    Enum as SQLEnum, Uuid, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from rentroll.db.base import Base, TimestampMixin, SoftDeleteMixin, utcnow


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"
    CANCELLED = "cancelled"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class RentContract(Base, TimestampMixin, SoftDeleteMixin):
    """Aggregate root of the leasing core."""
    __tablename__ = "rent_contracts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False, index=True
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id"), nullable=False, index=True
    )

    # Human identifier, unique per company by convention only
    contract_no: Mapped[str] = mapped_column(String(50), nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    deposit_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    status: Mapped[ContractStatus] = mapped_column(
        SQLEnum(ContractStatus, name="contract_status", values_callable=_enum_values),
        default=ContractStatus.DRAFT,
        nullable=False,
        index=True,
    )

    # Renewal chain
    previous_contract_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("rent_contracts.id"), nullable=True
    )
    renewal_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Optimistic concurrency counter, bumped by the mapper on every UPDATE
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="contracts")
    creator = relationship("User", foreign_keys=[created_by])
    previous_contract = relationship("RentContract", remote_side=[id])
    contract_units = relationship(
        "ContractUnit",
        back_populates="contract",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ContractUnit.created_at",
    )
    documents = relationship(
        "ContractDocument",
        back_populates="contract",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ContractDocument.uploaded_at",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_rent_contracts_company_status", "company_id", "status"),
    )


class ContractUnit(Base):
    """A rental space: one leased area of a building within a contract."""
    __tablename__ = "contract_units"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rent_contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    building_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("buildings.id"), nullable=True, index=True
    )

    floor: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # free-text label
    area_sqm: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    contract = relationship("RentContract", back_populates="contract_units")
    building = relationship("Building")
    rent_periods = relationship(
        "RentPeriod",
        back_populates="contract_unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RentPeriod.period_order",
    )


class RentPeriod(Base):
    """
    Pricing tier for one rental space.
    e.g. Year 1: 50,000/month, Year 2: 55,000/month
    """
    __tablename__ = "rent_periods"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_unit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("contract_units.id", ondelete="CASCADE"), nullable=False, index=True
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False)
    service_fee: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    period_order: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    contract_unit = relationship("ContractUnit", back_populates="rent_periods")

    @property
    def total_monthly(self) -> float:
        return float(self.rent_amount or 0) + float(self.service_fee or 0)


class ContractDocument(Base):
    """Attachment stored through the document storage collaborator."""
    __tablename__ = "contract_documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rent_contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)  # opaque storage path
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    file_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    contract = relationship("RentContract", back_populates="documents")
