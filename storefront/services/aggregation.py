"""Shared SQL helpers for the per-entity aggregation queries"""
from sqlalchemy import extract, func
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List


def month_key(year, month) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def monthly_counts(db: Session, column, since: datetime, *criteria) -> List[dict]:
    """Count rows per calendar month of `column` from `since` onwards, oldest month first"""
    year = extract("year", column)
    month = extract("month", column)
    rows = db.query(year, month, func.count()).filter(
        column >= since, *criteria
    ).group_by(year, month).order_by(year, month).all()
    return [{"month": month_key(y, m), "count": count} for y, m, count in rows]


def round2(value) -> float:
    return round(float(value or 0), 2)
