import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from database import Database, build_filter, serialize_doc
from dependencies import get_db, get_session, object_id_or_400
from schemas import ArticleCreate, ArticleUpdate, SessionUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/articles", tags=["articles"], dependencies=[Depends(get_session)])


def _with_author(db: Database, docs: List[dict]) -> List[dict]:
    return db.populate([serialize_doc(d) for d in docs], "user_id", "user", "user", ("name", "email"))


@router.get("")
def list_articles(q: Optional[str] = None, category: Optional[str] = None, db: Database = Depends(get_db)):
    filt = build_filter(q, ("title", "content", "tags"), category=category)
    return _with_author(db, db.get_documents("article", filt))


@router.get("/{article_id}")
def get_article(article_id: str, db: Database = Depends(get_db)):
    doc = db.get_document("article", object_id_or_400(article_id, "article"))
    if not doc:
        raise HTTPException(status_code=404, detail="Article not found")
    return _with_author(db, [doc])[0]


@router.post("", status_code=201)
def create_article(payload: ArticleCreate, db: Database = Depends(get_db),
                   session: SessionUser = Depends(get_session)):
    # Validate author exists
    author_id = object_id_or_400(payload.user_id, "user")
    if not db.get_document("user", author_id):
        raise HTTPException(status_code=404, detail="User not found")
    article_id = db.create_document("article", payload)
    logger.info("%s created article %s", session.email, article_id)
    return _with_author(db, [db.get_document("article", object_id_or_400(article_id, "article"))])[0]


@router.put("/{article_id}")
def update_article(article_id: str, payload: ArticleUpdate, db: Database = Depends(get_db)):
    doc = db.update_document("article", object_id_or_400(article_id, "article"), payload)
    if not doc:
        raise HTTPException(status_code=404, detail="Article not found")
    return _with_author(db, [doc])[0]


@router.delete("/{article_id}")
def delete_article(article_id: str, db: Database = Depends(get_db)):
    if not db.delete_document("article", object_id_or_400(article_id, "article")):
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article deleted successfully"}
