from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from database import Database, build_filter, serialize_doc
from dependencies import get_db, get_session, object_id_or_400
from schemas import PostStatus, PostUpdate

router = APIRouter(prefix="/api/posts", tags=["posts"], dependencies=[Depends(get_session)])


def _with_owner(db: Database, docs: List[dict]) -> List[dict]:
    return db.populate([serialize_doc(d) for d in docs], "user_id", "user", "user", ("name", "email"))


@router.get("")
def list_posts(q: Optional[str] = None, status: Optional[PostStatus] = None, db: Database = Depends(get_db)):
    filt = build_filter(q, ("title", "description", "location"), status=status)
    return _with_owner(db, db.get_documents("post", filt))


@router.get("/{post_id}")
def get_post(post_id: str, db: Database = Depends(get_db)):
    doc = db.get_document("post", object_id_or_400(post_id, "post"))
    if not doc:
        raise HTTPException(status_code=404, detail="Post not found")
    return _with_owner(db, [doc])[0]


@router.put("/{post_id}")
def update_post(post_id: str, payload: PostUpdate, db: Database = Depends(get_db)):
    doc = db.update_document("post", object_id_or_400(post_id, "post"), payload)
    if not doc:
        raise HTTPException(status_code=404, detail="Post not found")
    return _with_owner(db, [doc])[0]


@router.delete("/{post_id}")
def delete_post(post_id: str, db: Database = Depends(get_db)):
    if not db.delete_document("post", object_id_or_400(post_id, "post")):
        raise HTTPException(status_code=404, detail="Post not found")
    return {"message": "Post deleted successfully"}
