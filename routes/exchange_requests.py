"""Plant requests posted by marketplace users ("request" collection)."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from database import Database, build_filter, serialize_doc
from dependencies import get_db, get_session, object_id_or_400
from schemas import RequestStatus, RequestUpdate

router = APIRouter(prefix="/api/requests", tags=["requests"], dependencies=[Depends(get_session)])


def _with_requester(db: Database, docs: List[dict]) -> List[dict]:
    return db.populate([serialize_doc(d) for d in docs], "user_id", "user", "user", ("name", "email"))


@router.get("")
def list_requests(
    q: Optional[str] = None,
    status: Optional[RequestStatus] = None,
    category: Optional[str] = None,
    db: Database = Depends(get_db),
):
    filt = build_filter(q, ("plant_name", "reason", "location"), status=status, category=category)
    return _with_requester(db, db.get_documents("request", filt))


@router.get("/{request_id}")
def get_request(request_id: str, db: Database = Depends(get_db)):
    doc = db.get_document("request", object_id_or_400(request_id, "request"))
    if not doc:
        raise HTTPException(status_code=404, detail="Request not found")
    return _with_requester(db, [doc])[0]


@router.put("/{request_id}")
def update_request(request_id: str, payload: RequestUpdate, db: Database = Depends(get_db)):
    doc = db.update_document("request", object_id_or_400(request_id, "request"), payload)
    if not doc:
        raise HTTPException(status_code=404, detail="Request not found")
    return _with_requester(db, [doc])[0]


@router.delete("/{request_id}")
def delete_request(request_id: str, db: Database = Depends(get_db)):
    if not db.delete_document("request", object_id_or_400(request_id, "request")):
        raise HTTPException(status_code=404, detail="Request not found")
    return {"message": "Request deleted successfully"}
