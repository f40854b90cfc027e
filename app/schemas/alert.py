from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AlertSnapshot(BaseModel):
    """Point-in-time copy of an alert, carried by a price-check job."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    origin: str
    destination: str
    depart_date: date
    passengers: int = 1
    target_price: float
    currency: str = "USD"
    email: Optional[str] = None
    webhook_url: Optional[str] = None


class PriceAlertPayload(BaseModel):
    origin: str
    destination: str
    depart_date: date
    current_price: float
    target_price: float
    currency: str


class DeliveryResult(BaseModel):
    email_delivered: bool = False
    webhook_delivered: bool = False


class CheckOutcome(str, Enum):
    NO_OFFERS = "no_offers"
    ABOVE_TARGET = "above_target"
    TRIGGERED = "triggered"
    SKIPPED = "skipped"


class PriceCheckResult(BaseModel):
    alert_id: int
    outcome: CheckOutcome
    lowest_price: Optional[float] = None
    delivery: Optional[DeliveryResult] = None


class TickResult(BaseModel):
    selected: int = 0
    enqueued: int = 0
    failed: int = 0
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
