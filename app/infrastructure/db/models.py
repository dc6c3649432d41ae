"""
SQLAlchemy ORM models
"""
import uuid
from datetime import datetime

from sqlalchemy import String, Integer, TIMESTAMP, Uuid, CheckConstraint, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.db.session import Base


class SubscriptionModel(Base):
    """User subscription to a paid service (monthly price, MM-YYYY period)"""
    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_subscriptions_price_non_negative"),
        Index("idx_subscriptions_dates", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    service_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # за месяц, целые рубли
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # "MM-YYYY"; end_date NULL = подписка активна (без даты окончания)
    start_date: Mapped[str] = mapped_column(String(7), nullable=False)
    end_date: Mapped[str | None] = mapped_column(String(7), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
