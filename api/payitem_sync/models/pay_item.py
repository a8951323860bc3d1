from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payitem_sync.core.database import Base


class PayItem(Base):
    __tablename__ = "pay_items"
    # Natural key used by the sync upsert; the surrogate id is never matched on
    __table_args__ = (
        UniqueConstraint(
            "external_id", "business_id", "user_id", name="uq_pay_items_external_business_user"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    pay_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4))
    hours: Mapped[Decimal] = mapped_column(Numeric(12, 4))
    external_id: Mapped[str] = mapped_column(String(255))
    pay_date: Mapped[date] = mapped_column(Date, server_default=func.current_date())
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="pay_items")
    business: Mapped["Business"] = relationship(back_populates="pay_items")
