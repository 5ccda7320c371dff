"""
Dashboard figures: collection counts, a recent activity feed and a
six-month series of new posts and requests.

Each figure is an independent query, so the numbers are not a consistent
snapshot of the database.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from database import Database, serialize_doc

COUNT_KEYS = {
    "user": "users",
    "article": "articles",
    "post": "posts",
    "request": "requests",
    "history": "history",
}

ACTIVITY_SOURCES = ("article", "post", "request")
ACTIVITY_PER_SOURCE = 3
MONTHS = 6
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des")


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` calendar months from (year, month)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(now: datetime, months: int = MONTHS) -> List[Tuple[int, int]]:
    """The trailing ``months`` calendar months up to and including ``now``'s, oldest first."""
    return [shift_month(now.year, now.month, -offset) for offset in range(months - 1, -1, -1)]


def collection_counts(db: Database) -> Dict[str, int]:
    return {key: db[name].count_documents({}) for name, key in COUNT_KEYS.items()}


def recent_activity(db: Database, per_source: int = ACTIVITY_PER_SOURCE) -> List[dict]:
    feed = []
    for source in ACTIVITY_SOURCES:
        docs = db.get_documents(source, limit=per_source)
        for doc in docs:
            doc["activity_type"] = source
        feed.extend(docs)
    feed.sort(key=lambda d: d.get("created_at") or datetime.min, reverse=True)
    items = [serialize_doc(d) for d in feed]
    return db.populate(items, "user_id", "user", "user", ("name",))


def monthly_counts(db: Database, collection_name: str, since: datetime) -> Dict[Tuple[int, int], int]:
    pipeline = [
        {"$match": {"created_at": {"$gte": since}}},
        {"$group": {
            "_id": {"year": {"$year": "$created_at"}, "month": {"$month": "$created_at"}},
            "count": {"$sum": 1},
        }},
    ]
    return {
        (row["_id"]["year"], row["_id"]["month"]): row["count"]
        for row in db[collection_name].aggregate(pipeline)
    }


def monthly_series(db: Database, now: Optional[datetime] = None) -> List[dict]:
    """
    Posts and requests created per month over the trailing six months.

    Always returns six entries, oldest month first. Months are UTC calendar
    months; a month with no documents reports 0.
    """
    now = now or datetime.now(timezone.utc)
    months = month_window(now)
    first_year, first_month = months[0]
    # naive datetimes are read as UTC by the driver
    since = datetime(first_year, first_month, 1)

    posts = monthly_counts(db, "post", since)
    requests = monthly_counts(db, "request", since)

    series = []
    for year, month in months:
        start = datetime(year, month, 1)
        series.append({
            "month": start.strftime("%Y-%m"),
            "label": f"{MONTH_NAMES[month - 1]} {year}",
            "posts": posts.get((year, month), 0),
            "requests": requests.get((year, month), 0),
        })
    return series


def build_dashboard(db: Database, now: Optional[datetime] = None) -> dict:
    data = collection_counts(db)
    data["recent_activity"] = recent_activity(db)
    data["monthly_data"] = monthly_series(db, now)
    return data
