from enum import Enum
from typing import Optional

from app.core.logging import get_logger
from app.models.alert import AlertStatus
from app.providers.base import FlightProvider
from app.schemas.alert import (
    AlertSnapshot,
    CheckOutcome,
    PriceAlertPayload,
    PriceCheckResult,
)
from app.schemas.flight import SearchCriteria
from app.services.alert_lock import AlertLock
from app.services.alert_store import AlertStore
from app.services.notification import NotificationDispatcher


class CheckState(str, Enum):
    RECEIVED = "RECEIVED"
    SEARCHING = "SEARCHING"
    NO_OFFERS = "NO_OFFERS"
    PRICED = "PRICED"
    BELOW_TARGET = "BELOW_TARGET"
    NOTIFYING = "NOTIFYING"
    TRIGGERED = "TRIGGERED"
    ABOVE_TARGET = "ABOVE_TARGET"
    DONE = "DONE"


def build_message(lowest_price: float, alert: AlertSnapshot) -> str:
    return (
        f"Price dropped to {alert.currency} {lowest_price:.2f}! "
        f"Target was {alert.currency} {alert.target_price:.2f}"
    )


class PriceCheckWorker:
    """
    Checks one alert snapshot against the flight provider.

    A search error is not handled here: it propagates to the queue, which
    owns retries. Finding no offers is a normal outcome.
    """

    def __init__(
        self,
        provider: FlightProvider,
        store: AlertStore,
        dispatcher: NotificationDispatcher,
        alert_lock: Optional[AlertLock] = None,
    ):
        self.provider = provider
        self.store = store
        self.dispatcher = dispatcher
        self.alert_lock = alert_lock

    def process(self, alert: AlertSnapshot) -> PriceCheckResult:
        if self.alert_lock is None:
            return self._check(alert)

        logger = get_logger(__name__, alert_id=alert.id)
        with self.alert_lock.hold(alert.id) as acquired:
            if not acquired:
                logger.info("Another check of this alert is running, skipping")
                return PriceCheckResult(alert_id=alert.id, outcome=CheckOutcome.SKIPPED)

            status = self.store.get_status(alert.id)
            if status != AlertStatus.ACTIVE:
                logger.info(f"Alert is {status.value}, skipping")
                return PriceCheckResult(alert_id=alert.id, outcome=CheckOutcome.SKIPPED)

            return self._check(alert)

    def _check(self, alert: AlertSnapshot) -> PriceCheckResult:
        logger = get_logger(__name__, alert_id=alert.id)

        def transition(state: CheckState) -> None:
            logger.debug(f"Price check state {state.value}")

        transition(CheckState.RECEIVED)
        logger.info(
            f"Checking price alert {alert.id}: {alert.origin} -> {alert.destination} on {alert.depart_date}"
        )

        transition(CheckState.SEARCHING)
        offers = self.provider.search(
            SearchCriteria(
                origin=alert.origin,
                destination=alert.destination,
                depart_date=alert.depart_date,
                passengers=alert.passengers,
            )
        )

        if not offers:
            transition(CheckState.NO_OFFERS)
            logger.warning(f"No flights found for alert {alert.id}")
            self.store.mark_checked(alert.id)
            return PriceCheckResult(alert_id=alert.id, outcome=CheckOutcome.NO_OFFERS)

        transition(CheckState.PRICED)
        lowest_price = min(offer.price for offer in offers)
        self.store.mark_checked(alert.id)

        if lowest_price > alert.target_price:
            transition(CheckState.ABOVE_TARGET)
            logger.debug(
                f"Alert {alert.id}: current price {lowest_price} > target {alert.target_price}"
            )
            transition(CheckState.DONE)
            return PriceCheckResult(
                alert_id=alert.id,
                outcome=CheckOutcome.ABOVE_TARGET,
                lowest_price=lowest_price,
            )

        transition(CheckState.BELOW_TARGET)
        logger.info(
            f"🎯 Price alert triggered! {alert.id}: {lowest_price} <= {alert.target_price}"
        )
        self.store.append_notification_record(
            alert.id, lowest_price, build_message(lowest_price, alert)
        )

        transition(CheckState.NOTIFYING)
        delivery = self.dispatcher.send_alert(
            alert.email,
            alert.webhook_url,
            PriceAlertPayload(
                origin=alert.origin,
                destination=alert.destination,
                depart_date=alert.depart_date,
                current_price=lowest_price,
                target_price=alert.target_price,
                currency=alert.currency,
            ),
        )
        logger.info(
            f"Notifications sent for alert {alert.id}: "
            f"email={delivery.email_delivered}, webhook={delivery.webhook_delivered}"
        )

        # Terminal even when delivery failed; a triggered alert is never re-queued
        self.store.mark_triggered(alert.id)
        transition(CheckState.TRIGGERED)

        return PriceCheckResult(
            alert_id=alert.id,
            outcome=CheckOutcome.TRIGGERED,
            lowest_price=lowest_price,
            delivery=delivery,
        )
