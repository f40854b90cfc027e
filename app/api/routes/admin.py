from fastapi import APIRouter, Depends, status
from typing import Dict

from app.api.deps import get_scheduler
from app.services.scheduler import PriceCheckScheduler

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/alerts/{alert_id}/check", status_code=status.HTTP_202_ACCEPTED)
def trigger_price_check(
        alert_id: int,
        scheduler: PriceCheckScheduler = Depends(get_scheduler)
) -> Dict[str, str]:
    """Queue a single-attempt price check for one alert. Admin only in production."""
    job_id = scheduler.trigger_manual_check(alert_id)
    return {
        "message": f"Price check queued for alert {alert_id}",
        "job_id": job_id,
    }


@router.post("/price-checks/run", status_code=status.HTTP_202_ACCEPTED)
def run_scheduler_tick(
        scheduler: PriceCheckScheduler = Depends(get_scheduler)
) -> Dict[str, int]:
    """Run one scheduler tick now instead of waiting for the next interval."""
    result = scheduler.run_tick()
    return {"selected": result.selected, "enqueued": result.enqueued, "failed": result.failed}
