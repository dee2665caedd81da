from enum import Enum
from sqlalchemy import String, ForeignKey, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from rentroll.db.base import Base, TimestampMixin, SoftDeleteMixin


class CustomerType(str, Enum):
    INDIVIDUAL = "individual"
    CORPORATE = "corporate"


class Customer(Base, TimestampMixin, SoftDeleteMixin):
    """Counterparty on rental contracts."""
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False, index=True
    )

    type: Mapped[CustomerType] = mapped_column(SQLEnum(CustomerType), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tax_id: Mapped[str] = mapped_column(String(20), nullable=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=True)
    email: Mapped[str] = mapped_column(String(100), nullable=True)
    contact_person: Mapped[str] = mapped_column(String(100), nullable=True)

    company = relationship("Company", back_populates="customers")
    contracts = relationship("RentContract", back_populates="customer")
