"""API key usage statistics routes."""

import logging
import re
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError

from chatmeter.contracts import (
    DailyStatsResponse,
    DailyUsage,
    DayStatsResponse,
    HourlyStatsResponse,
    HourlyUsage,
    LifetimeStatisticsResponse,
    MonthlyStatsResponse,
    MonthlyUsage,
    MonthStatsResponse,
    UsageTotals,
    YearStatsResponse,
)
from chatmeter.db.session import Database
from chatmeter.domain import UsageDelta
from chatmeter.routes.depends import get_clock, require_database
from chatmeter.services.statistics import (
    InvalidRangeError,
    RollupAggregator,
    StatisticsRecorder,
    UsagePeriod,
    UsageView,
)
from chatmeter.shared_utils import Clock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api-keys", tags=["statistics"])

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_date(value: str) -> date:
    if not DATE_PATTERN.match(value):
        raise HTTPException(
            status_code=400, detail="Valid date is required (YYYY-MM-DD)"
        )
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(
            status_code=400, detail="Valid date is required (YYYY-MM-DD)"
        )


def _hourly(period: UsagePeriod) -> HourlyUsage:
    return HourlyUsage(
        time_interval=period.start,
        hour=period.hour,
        **UsageTotals.from_counters(period.counters).model_dump(),
    )


def _daily(period: UsagePeriod) -> DailyUsage:
    return DailyUsage(
        date=period.date,
        **UsageTotals.from_counters(period.counters).model_dump(),
    )


def _monthly(period: UsagePeriod) -> MonthlyUsage:
    return MonthlyUsage(
        year=period.year,
        month=period.month,
        **UsageTotals.from_counters(period.counters).model_dump(),
    )


def _totals(view: UsageView) -> UsageTotals:
    return UsageTotals.from_counters(view.totals)


@router.post("/{api_key_id}/events", status_code=204)
async def record_event(
    api_key_id: str,
    body: UsageDelta,
    db: Database = Depends(require_database),
    clock: Clock = Depends(get_clock),
) -> Response:
    """Record one chat event against the key's counters."""
    recorder = StatisticsRecorder(db, clock=clock)
    try:
        await recorder.record_event(api_key_id, body)
    except IntegrityError:
        raise HTTPException(status_code=404, detail="API key not found")
    return Response(status_code=204)


@router.get("/{api_key_id}/statistics", response_model=LifetimeStatisticsResponse)
async def get_statistics(
    api_key_id: str,
    db: Database = Depends(require_database),
) -> LifetimeStatisticsResponse:
    """Lifetime summary for one API key."""
    record = await RollupAggregator(db).lifetime(api_key_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Statistics not found")
    return LifetimeStatisticsResponse.from_record(record)


@router.get("/{api_key_id}/hourly-stats", response_model=HourlyStatsResponse)
async def get_hourly_stats(
    api_key_id: str,
    db: Database = Depends(require_database),
    clock: Clock = Depends(get_clock),
) -> HourlyStatsResponse:
    """Usage for each of the last 24 hours."""
    view = await RollupAggregator(db, clock=clock).last_24_hours(api_key_id)
    return HourlyStatsResponse(
        start_time=view.start,
        end_time=view.end,
        hours=[_hourly(period) for period in view.periods],
        totals=_totals(view),
    )


@router.get("/{api_key_id}/day-stats", response_model=DayStatsResponse)
async def get_day_stats(
    api_key_id: str,
    date_param: str = Query(..., alias="date"),
    db: Database = Depends(require_database),
) -> DayStatsResponse:
    """Hourly usage for one UTC calendar day."""
    day = _parse_date(date_param)
    try:
        view = await RollupAggregator(db).day(api_key_id, day)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DayStatsResponse(
        date=day,
        hours=[_hourly(period) for period in view.periods],
        totals=_totals(view),
    )


@router.get("/{api_key_id}/month-stats", response_model=MonthStatsResponse)
async def get_month_stats(
    api_key_id: str,
    year: int = Query(...),
    month: int = Query(...),
    db: Database = Depends(require_database),
) -> MonthStatsResponse:
    """Daily usage for one calendar month."""
    try:
        view = await RollupAggregator(db).month(api_key_id, year, month)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MonthStatsResponse(
        year=year,
        month=month,
        days=[_daily(period) for period in view.periods],
        totals=_totals(view),
    )


@router.get("/{api_key_id}/year-stats", response_model=YearStatsResponse)
async def get_year_stats(
    api_key_id: str,
    year: int = Query(...),
    db: Database = Depends(require_database),
) -> YearStatsResponse:
    """Monthly usage for one calendar year."""
    try:
        view = await RollupAggregator(db).year(api_key_id, year)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return YearStatsResponse(
        year=year,
        months=[_monthly(period) for period in view.periods],
        totals=_totals(view),
    )


@router.get("/{api_key_id}/daily-stats", response_model=DailyStatsResponse)
async def get_daily_stats(
    api_key_id: str,
    db: Database = Depends(require_database),
    clock: Clock = Depends(get_clock),
) -> DailyStatsResponse:
    """Usage for each of the last 30 days."""
    view = await RollupAggregator(db, clock=clock).last_30_days(api_key_id)
    return DailyStatsResponse(
        start_time=view.start,
        end_time=view.end,
        days=[_daily(period) for period in view.periods],
        totals=_totals(view),
    )


@router.get("/{api_key_id}/monthly-stats", response_model=MonthlyStatsResponse)
async def get_monthly_stats(
    api_key_id: str,
    db: Database = Depends(require_database),
    clock: Clock = Depends(get_clock),
) -> MonthlyStatsResponse:
    """Usage for each of the last 12 months."""
    view = await RollupAggregator(db, clock=clock).last_12_months(api_key_id)
    return MonthlyStatsResponse(
        start_time=view.start,
        end_time=view.end,
        months=[_monthly(period) for period in view.periods],
        totals=_totals(view),
    )
