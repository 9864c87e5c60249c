"""
Calendar bucketing for the comment volume template.

The truncation unit is a class, not a string, so only the two fixed
granularities can ever reach the compiled SQL.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class week_start(FunctionElement):
    """Monday 00:00 of the ISO week containing the expression."""
    name = "week_start"
    inherit_cache = True


class month_start(FunctionElement):
    """First day of the calendar month containing the expression."""
    name = "month_start"
    inherit_cache = True


@compiles(week_start)
def _week_start_default(element, compiler, **kw):
    return "date_trunc('week', %s)" % compiler.process(element.clauses, **kw)


@compiles(month_start)
def _month_start_default(element, compiler, **kw):
    return "date_trunc('month', %s)" % compiler.process(element.clauses, **kw)


@compiles(week_start, "sqlite")
def _week_start_sqlite(element, compiler, **kw):
    # 'weekday 0' moves forward to Sunday (or stays), -6 days lands on Monday
    return "date(%s, 'weekday 0', '-6 days')" % compiler.process(element.clauses, **kw)


@compiles(month_start, "sqlite")
def _month_start_sqlite(element, compiler, **kw):
    return "date(%s, 'start of month')" % compiler.process(element.clauses, **kw)


def period_bucket(period: str, column):
    if period == "month":
        return month_start(column)
    return week_start(column)


def bucket_label(value: Any) -> Optional[str]:
    """Normalise a bucket value (datetime on PostgreSQL, text on SQLite) to YYYY-MM-DD."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]
