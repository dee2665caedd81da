from sqlalchemy import String, Integer, Float, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from rentroll.db.base import Base, TimestampMixin, SoftDeleteMixin


class Building(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "buildings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=True)
    total_floors: Mapped[int] = mapped_column(Integer, default=1)
    rentable_area: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)  # sqm
    status: Mapped[str] = mapped_column(String(20), default="active")  # active, inactive

    company = relationship("Company", back_populates="buildings")

    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_buildings_company_code"),
    )
