from typing import Optional

from fastapi import HTTPException, Query

from tintix.services.date_range import DateRange, explicit_date_range, resolve_date_range


def date_range_filter(
    range_mode: Optional[str] = Query(default=None, alias="range"),
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
) -> DateRange:
    """
    ?range=all|today|lastWeek|lastMonth|custom picks a dashboard preset; with
    custom both dateFrom and dateTo are needed or nothing is filtered.
    Without range, dateFrom/dateTo are plain optional bounds.
    """
    try:
        if range_mode:
            return resolve_date_range(range_mode, date_from=date_from, date_to=date_to)
        return explicit_date_range(date_from, date_to)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
