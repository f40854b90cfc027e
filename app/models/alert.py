import enum

from sqlalchemy import Column, Integer, Float, String, Date, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.session import Base


class AlertStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    EXPIRED = "EXPIRED"
    TRIGGERED = "TRIGGERED"


class PriceAlert(Base):
    __tablename__ = "price_alerts"

    id = Column(Integer, primary_key=True, index=True)
    origin = Column(String(3), nullable=False)
    destination = Column(String(3), nullable=False)
    depart_date = Column(Date, nullable=False, index=True)
    passengers = Column(Integer, default=1, nullable=False)
    target_price = Column(Float, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    email = Column(String, nullable=True)
    webhook_url = Column(String, nullable=True)
    status = Column(Enum(AlertStatus), default=AlertStatus.ACTIVE, nullable=False, index=True)
    last_checked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    notifications = relationship(
        "PriceAlertNotification", back_populates="alert", cascade="all, delete-orphan"
    )
