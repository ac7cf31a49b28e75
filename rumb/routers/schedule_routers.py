# import moduls/libraries
import logging
import secrets
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional, Tuple

# import form project
from rumb.core.config import settings
from rumb.core.database import get_db
from rumb.core.resources import get_region_graph, get_rule_catalog
from rumb.engine import RegionGraph, RuleDefinition
from rumb.schemas import BackfillRequest, BackfillResponse, CronResponse, ScheduleMode
from rumb.services import ScheduleServices

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_cron_token(authorization: Optional[str] = Header(None)):
    """Reject the call before any work unless it carries the scheduler's bearer token"""
    expected = settings.CRON_SECRET
    scheme, _, token = (authorization or "").partition(" ")
    if not expected or scheme.lower() != "bearer" or not secrets.compare_digest(token, expected):
        logger.warning("Rejected unauthenticated scheduler call")
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_schedule_services(
    db: Session = Depends(get_db),
    graph: RegionGraph = Depends(get_region_graph),
    catalog: Tuple[RuleDefinition, ...] = Depends(get_rule_catalog),
) -> ScheduleServices:
    return ScheduleServices(db, graph, catalog)


# Cron entry point
@router.post("/run", response_model=CronResponse, dependencies=[Depends(verify_cron_token)])
async def run_schedule(
    mode: Optional[ScheduleMode] = Query(None, description="daily or weekly, empty runs whatever is due"),
    force: bool = Query(False, description="Skip the time window and the run ledger"),
    services: ScheduleServices = Depends(get_schedule_services),
):
    """Create today's and this week's levels when due"""
    if mode not in (None, ScheduleMode.DAILY, ScheduleMode.WEEKLY):
        raise HTTPException(status_code=422, detail="Use /schedule/backfill for backfill modes")
    return services.run(mode=mode, force=force)


@router.post("/backfill", response_model=BackfillResponse, dependencies=[Depends(verify_cron_token)])
async def backfill(request: BackfillRequest, services: ScheduleServices = Depends(get_schedule_services)):
    """Create missing levels for explicit dates or for a date range"""
    if request.mode == ScheduleMode.BACKFILL_DATES:
        try:
            daily = services.backfill_dates(request.dates)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return BackfillResponse(mode=ScheduleMode.BACKFILL_DATES, daily=daily)
    return services.backfill_range(request.start, request.end, request.include_weekly)
