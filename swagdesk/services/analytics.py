"""
Dashboard figures computed over requests still inside their retention window.
"""

from __future__ import annotations

from datetime import datetime

from swagdesk.db import get_db, to_db_time
from swagdesk.models import AnalyticsSummary, PromoCodeAnalytics, PromoCodeStats

TOP_PROMO_CODES = 10


def approval_rate(approved: int, rejected: int) -> float:
    """Approved share of decided requests, as a percentage with one decimal."""
    decided = approved + rejected
    if decided == 0:
        return 0.0
    return round(approved / decided * 100, 1)


async def summary(now: datetime) -> AnalyticsSummary:
    db = get_db()
    async with db.execute(
        """
        SELECT
            COUNT(*) AS total,
            SUM(CASE WHEN status = 'pending' THEN 1 ELSE 0 END) AS pending,
            SUM(CASE WHEN status = 'approved' THEN 1 ELSE 0 END) AS approved,
            SUM(CASE WHEN status = 'rejected' THEN 1 ELSE 0 END) AS rejected
        FROM swag_requests
        WHERE expires_at > ?
        """,
        (to_db_time(now),),
    ) as cur:
        row = await cur.fetchone()

    # SUM() is NULL over an empty table
    approved = row["approved"] or 0
    rejected = row["rejected"] or 0
    return AnalyticsSummary(
        total=row["total"] or 0,
        pending=row["pending"] or 0,
        approved=approved,
        rejected=rejected,
        approval_rate=approval_rate(approved, rejected),
    )


async def promo_codes(now: datetime) -> PromoCodeAnalytics:
    db = get_db()
    stamp = to_db_time(now)

    async with db.execute(
        """
        SELECT promo_code AS code, COUNT(*) AS count
        FROM swag_requests
        WHERE promo_code IS NOT NULL AND promo_code != '' AND expires_at > ?
        GROUP BY promo_code
        ORDER BY count DESC, code ASC
        LIMIT ?
        """,
        (stamp, TOP_PROMO_CODES),
    ) as cur:
        rows = await cur.fetchall()

    async with db.execute(
        """
        SELECT
            SUM(CASE WHEN promo_code IS NOT NULL AND promo_code != '' THEN 1 ELSE 0 END) AS with_code,
            SUM(CASE WHEN promo_code IS NULL OR promo_code = '' THEN 1 ELSE 0 END) AS without_code
        FROM swag_requests
        WHERE expires_at > ?
        """,
        (stamp,),
    ) as cur:
        totals = await cur.fetchone()

    return PromoCodeAnalytics(
        top_codes=[PromoCodeStats(code=r["code"], count=r["count"]) for r in rows],
        with_code=totals["with_code"] or 0,
        without_code=totals["without_code"] or 0,
    )
