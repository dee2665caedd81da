from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import String, Boolean, DateTime, Text, ForeignKey, Enum as SQLEnum, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from rentroll.db.base import Base, utcnow


class AlertType(str, Enum):
    EXPIRY_90 = "expiry_90"
    EXPIRY_60 = "expiry_60"
    EXPIRY_30 = "expiry_30"
    EXPIRED = "expired"
    CUSTOM = "custom"


class Alert(Base):
    """Notification raised for a company, usually about one contract."""
    __tablename__ = "alerts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False, index=True
    )
    contract_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("rent_contracts.id"), nullable=True, index=True
    )

    type: Mapped[AlertType] = mapped_column(
        SQLEnum(AlertType, name="alert_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    contract = relationship("RentContract")

    __table_args__ = (
        Index("idx_alerts_company_read", "company_id", "is_read"),
    )
