from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException

from database import Database, build_filter, serialize_doc
from dependencies import get_db, get_session, object_id_or_400

router = APIRouter(prefix="/api/history", tags=["history"], dependencies=[Depends(get_session)])

UNKNOWN_USER = {"name": "Unknown User", "email": ""}
UNKNOWN_PARTNER = {"name": "Unknown Partner", "email": ""}


def _expand(db: Database, docs: List[dict]) -> List[dict]:
    """Resolve both parties and the originating post/request of each exchange."""
    items = [serialize_doc(d) for d in docs]
    db.populate(items, "user_id", "user", "user", ("name", "email"))
    db.populate(items, "partner_id", "partner", "user", ("name", "email"))
    db.populate(items, "post_id", "post", "post", ("title",))
    db.populate(items, "request_id", "request", "request", ("plant_name",))
    for item in items:
        if item["user"] is None:
            item["user"] = dict(UNKNOWN_USER)
        if item["partner"] is None:
            item["partner"] = dict(UNKNOWN_PARTNER)
    return items


@router.get("")
def list_history(
    q: Optional[str] = None,
    type: Optional[Literal["post", "request"]] = None,
    db: Database = Depends(get_db),
):
    filt = build_filter(q, ("plant_name", "notes"), type=type)
    return _expand(db, db.get_documents("history", filt, sort_field="date"))


@router.get("/{history_id}")
def get_history(history_id: str, db: Database = Depends(get_db)):
    doc = db.get_document("history", object_id_or_400(history_id, "history"))
    if not doc:
        raise HTTPException(status_code=404, detail="History not found")
    return _expand(db, [doc])[0]


@router.delete("/{history_id}")
def delete_history(history_id: str, db: Database = Depends(get_db)):
    if not db.delete_document("history", object_id_or_400(history_id, "history")):
        raise HTTPException(status_code=404, detail="History not found")
    return {"message": "History deleted successfully"}
