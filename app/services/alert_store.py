from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy import nulls_first, or_
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.alert import AlertStatus, PriceAlert
from app.models.notification import PriceAlertNotification
from app.schemas.alert import AlertSnapshot

logger = get_logger(__name__)


class AlertStore(ABC):
    """The narrow slice of alert persistence the price-check pipeline uses."""

    @abstractmethod
    def list_due_alerts(
        self, now: datetime, freshness_window: timedelta, limit: int
    ) -> List[AlertSnapshot]:
        ...

    @abstractmethod
    def get_alert(self, alert_id: int) -> AlertSnapshot:
        ...

    @abstractmethod
    def get_status(self, alert_id: int) -> AlertStatus:
        ...

    @abstractmethod
    def mark_checked(self, alert_id: int) -> None:
        ...

    @abstractmethod
    def mark_triggered(self, alert_id: int) -> None:
        ...

    @abstractmethod
    def append_notification_record(
        self, alert_id: int, current_price: float, message: str
    ) -> None:
        ...


class SqlAlertStore(AlertStore):
    """AlertStore backed by SQLAlchemy; every call uses its own session."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def add_alert(
        self,
        origin: str,
        destination: str,
        depart_date: date,
        target_price: float,
        passengers: int = 1,
        currency: str = "USD",
        email: Optional[str] = None,
        webhook_url: Optional[str] = None,
        status: AlertStatus = AlertStatus.ACTIVE,
        last_checked_at: Optional[datetime] = None,
    ) -> AlertSnapshot:
        """Create an alert; at least one notification channel is required."""
        if not email and not webhook_url:
            raise ValidationError("An alert needs an email address or a webhook URL")

        db = self.session_factory()
        try:
            alert = PriceAlert(
                origin=origin.upper(),
                destination=destination.upper(),
                depart_date=depart_date,
                passengers=passengers,
                target_price=target_price,
                currency=currency,
                email=email,
                webhook_url=webhook_url,
                status=status,
                last_checked_at=last_checked_at,
            )
            db.add(alert)
            db.commit()
            db.refresh(alert)
            return AlertSnapshot.model_validate(alert)
        finally:
            db.close()

    def list_due_alerts(
        self, now: datetime, freshness_window: timedelta, limit: int
    ) -> List[AlertSnapshot]:
        """Active alerts for future travel dates not checked within the window."""
        stale_before = now - freshness_window
        db = self.session_factory()
        try:
            alerts = (
                db.query(PriceAlert)
                .filter(
                    PriceAlert.status == AlertStatus.ACTIVE,
                    PriceAlert.depart_date > now.date(),
                    or_(
                        PriceAlert.last_checked_at.is_(None),
                        PriceAlert.last_checked_at < stale_before,
                    ),
                )
                .order_by(nulls_first(PriceAlert.last_checked_at.asc()), PriceAlert.id)
                .limit(limit)
                .all()
            )
            return [AlertSnapshot.model_validate(alert) for alert in alerts]
        finally:
            db.close()

    def _get(self, db: Session, alert_id: int) -> PriceAlert:
        alert = db.query(PriceAlert).filter(PriceAlert.id == alert_id).first()
        if not alert:
            raise NotFoundError(f"Alert with ID {alert_id} not found")
        return alert

    def get_alert(self, alert_id: int) -> AlertSnapshot:
        db = self.session_factory()
        try:
            return AlertSnapshot.model_validate(self._get(db, alert_id))
        finally:
            db.close()

    def get_status(self, alert_id: int) -> AlertStatus:
        db = self.session_factory()
        try:
            return self._get(db, alert_id).status
        finally:
            db.close()

    def _update(self, alert_id: int, values: dict) -> None:
        # Field-scoped UPDATE so concurrent edits of other columns survive
        db = self.session_factory()
        try:
            updated = (
                db.query(PriceAlert)
                .filter(PriceAlert.id == alert_id)
                .update(values, synchronize_session=False)
            )
            db.commit()
        finally:
            db.close()

        if not updated:
            logger.warning("Alert vanished before update", extra={"alert_id": alert_id})

    def mark_checked(self, alert_id: int) -> None:
        self._update(alert_id, {PriceAlert.last_checked_at: datetime.now(timezone.utc)})

    def mark_triggered(self, alert_id: int) -> None:
        self._update(alert_id, {PriceAlert.status: AlertStatus.TRIGGERED})

    def append_notification_record(
        self, alert_id: int, current_price: float, message: str
    ) -> None:
        db = self.session_factory()
        try:
            db.add(
                PriceAlertNotification(
                    alert_id=alert_id, current_price=current_price, message=message
                )
            )
            db.commit()
        finally:
            db.close()
