"""
User account management. Every endpoint here is reserved to superadmins.

Nobody may change their own role or status, or delete themselves.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from database import Database, build_filter, serialize_doc
from dependencies import get_db, object_id_or_400, require_superadmin
from schemas import Role, SessionUser, User, UserCreate, UserUpdate
from security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(require_superadmin)])


def _email_taken(db: Database, email: str, exclude_id=None) -> bool:
    query = {"email": email}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    return db["user"].find_one(query) is not None


@router.get("")
def list_users(
    q: Optional[str] = None,
    role: Optional[Role] = None,
    db: Database = Depends(get_db),
):
    filt = build_filter(q, ("name", "email"), role=role)
    return [serialize_doc(d) for d in db.get_documents("user", filt)]


@router.get("/{user_id}")
def get_user(user_id: str, db: Database = Depends(get_db)):
    doc = db.get_document("user", object_id_or_400(user_id, "user"))
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize_doc(doc)


@router.post("", status_code=201)
def create_user(payload: UserCreate, db: Database = Depends(get_db),
                session: SessionUser = Depends(require_superadmin)):
    if _email_taken(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already exists")

    user = User(
        name=payload.name.strip(),
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        is_active=payload.is_active,
    )
    user_id = db.create_document("user", user)
    logger.info("%s created %s account %s", session.email, user.role, user.email)
    return serialize_doc(db.get_document("user", object_id_or_400(user_id, "user")))


@router.put("/{user_id}")
def update_user(user_id: str, payload: UserUpdate, db: Database = Depends(get_db),
                session: SessionUser = Depends(require_superadmin)):
    oid = object_id_or_400(user_id, "user")
    user = db.get_document("user", oid)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    current_role = user.get("role", "user")
    current_active = user.get("is_active", True)
    role = payload.role if payload.role is not None else current_role
    is_active = payload.is_active if payload.is_active is not None else current_active

    if str(user["_id"]) == session.id and (role != current_role or is_active != current_active):
        raise HTTPException(status_code=400, detail="Cannot modify your own role or status")

    if payload.email != user.get("email") and _email_taken(db, payload.email, exclude_id=oid):
        raise HTTPException(status_code=400, detail="Email already exists")

    updates = {
        "name": payload.name.strip(),
        "email": payload.email,
        "role": role,
        "is_active": is_active,
    }
    if payload.password:
        updates["password"] = payload.password

    doc = db.update_document("user", oid, updates)
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("%s updated account %s", session.email, doc.get("email"))
    return serialize_doc(doc)


@router.delete("/{user_id}")
def delete_user(user_id: str, db: Database = Depends(get_db), session: SessionUser = Depends(require_superadmin)):
    oid = object_id_or_400(user_id, "user")
    user = db.get_document("user", oid)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if str(user["_id"]) == session.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    if not db.delete_document("user", oid):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("%s deleted account %s", session.email, user.get("email"))
    return {"message": "User deleted successfully"}
