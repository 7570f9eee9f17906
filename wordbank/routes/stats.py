from fastapi import APIRouter, Depends

from wordbank.models.progress import StatsOut
from wordbank.services.registry import current_scheduler
from wordbank.services.scheduler import Scheduler

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsOut)
async def stats(scheduler: Scheduler = Depends(current_scheduler)):
    return StatsOut(**scheduler.get_stats())
