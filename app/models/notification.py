from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.session import Base


class PriceAlertNotification(Base):
    __tablename__ = "price_alert_notifications"

    id = Column(Integer, primary_key=True, index=True)
    alert_id = Column(Integer, ForeignKey("price_alerts.id", ondelete="CASCADE"), index=True)
    current_price = Column(Float, nullable=False)
    message = Column(String, nullable=False)
    sent_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    alert = relationship("PriceAlert", back_populates="notifications")
