# habitflow/utils/datetime_utils.py

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import pytz

from habitflow.config import config

KEY_FORMAT = "%Y-%m-%d"

DateLike = Union[str, date, datetime]


def local_timezone():
    if not config.timezone:
        return None
    return pytz.timezone(config.timezone)


def now_local() -> datetime:
    tz = local_timezone()
    if tz is None:
        return datetime.now()
    return datetime.now(tz)


def date_key(moment: DateLike) -> str:
    """Calendar-day key (YYYY-MM-DD) for a date, datetime or key string"""
    if isinstance(moment, str):
        return parse_key(moment).strftime(KEY_FORMAT)
    if isinstance(moment, datetime):
        tz = local_timezone()
        if tz is not None and moment.tzinfo is not None:
            moment = moment.astimezone(tz)
        return moment.date().strftime(KEY_FORMAT)
    return moment.strftime(KEY_FORMAT)


def today_key() -> str:
    return date_key(now_local())


def parse_key(key: str) -> date:
    return datetime.strptime(key, KEY_FORMAT).date()


def add_days(key: str, days: int) -> str:
    return (parse_key(key) + timedelta(days=days)).strftime(KEY_FORMAT)


def previous_day(key: str) -> str:
    return add_days(key, -1)


def current_week_days(today: Optional[str] = None) -> List[str]:
    """Monday..Sunday of the week containing today, Monday first"""
    current = parse_key(today or today_key())
    monday = current - timedelta(days=current.weekday())
    return [(monday + timedelta(days=i)).strftime(KEY_FORMAT) for i in range(7)]


def last_n_days(n: int, end: Optional[str] = None) -> List[str]:
    """Trailing window of n day keys ending at `end` (inclusive), oldest first"""
    end = end or today_key()
    return [add_days(end, -offset) for offset in range(n - 1, -1, -1)]


def weekday_label(key: str) -> str:
    return parse_key(key).strftime("%a")


def now_millis() -> int:
    return int(now_local().timestamp() * 1000)
