"""
Database Schemas

MongoDB collection schemas for the plant exchange back-office, defined as
Pydantic models. These schemas are used for data validation in the API.

Each collection model maps to a MongoDB collection named after the
lowercase class name:
- User -> "user"
- Article -> "article"
- Post -> "post"
- Request -> "request"
- History -> "history"

References between documents are stored as ObjectId hex strings.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

Role = Literal["user", "admin", "superadmin"]

PostStatus = Literal["available", "reserved", "completed"]
RequestStatus = Literal["open", "fulfilled"]


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _unique_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


# User profile pieces
class GeoPoint(BaseModel):
    """GeoJSON point, coordinates are [longitude, latitude]."""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(default_factory=lambda: [0.0, 0.0], min_length=2, max_length=2)


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Profile(BaseModel):
    avatar: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = None
    address: Address = Field(default_factory=Address)
    location: GeoPoint = Field(default_factory=GeoPoint)


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True


class PrivacyPreferences(BaseModel):
    show_profile: bool = True
    show_email: bool = False


class Preferences(BaseModel):
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    privacy: PrivacyPreferences = Field(default_factory=PrivacyPreferences)


class UserStats(BaseModel):
    posts_count: int = Field(0, ge=0)
    requests_count: int = Field(0, ge=0)
    successful_trades: int = Field(0, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    total_ratings: int = Field(0, ge=0)


class User(BaseModel):
    """
    Users collection schema
    Collection name: "user"
    Roles: user, admin, superadmin. Back-office operators are users with
    an admin or superadmin role.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Full name")
    email: EmailStr = Field(..., description="Email address, stored lowercase")
    password_hash: str = Field(..., min_length=1, description="Hashed password")
    role: Role = Field("user", description="Access level")
    is_active: bool = Field(True, description="Whether account is active")
    profile: Profile = Field(default_factory=Profile)
    preferences: Preferences = Field(default_factory=Preferences)
    stats: UserStats = Field(default_factory=UserStats)
    last_login: Optional[datetime] = None
    email_verified: bool = False

    normalize_email = field_validator("email")(_normalize_email)


# Editable fields of each content collection double as the PUT payloads;
# the collection schemas add the owning user reference.
class ArticleUpdate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, description="Rich text body")
    image: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)

    dedupe_tags = field_validator("tags")(_unique_tags)


class Article(ArticleUpdate):
    """
    Articles collection schema
    Collection name: "article"
    """
    user_id: str = Field(..., min_length=1, description="Author user _id as string")


class ArticleCreate(Article):
    pass


class PostUpdate(BaseModel):
    title: str = Field(..., min_length=1)
    type: Literal["seed", "harvest"]
    exchange_type: Literal["barter", "free"] = "barter"
    quantity: int = Field(..., ge=1)
    location: str = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list)
    description: str = Field(..., min_length=1)
    status: PostStatus = "available"


class Post(PostUpdate):
    """
    Exchange offers collection schema
    Collection name: "post"
    """
    user_id: str = Field(..., min_length=1, description="Owner user _id as string")


class RequestUpdate(BaseModel):
    plant_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    category: str = "buah"
    quantity: str = Field("1", description="Free text, e.g. '5 batang'")
    status: RequestStatus = "open"


class Request(RequestUpdate):
    """
    Plant requests collection schema
    Collection name: "request"
    """
    user_id: str = Field(..., min_length=1, description="Requesting user _id as string")


class History(BaseModel):
    """
    Completed exchanges between two users
    Collection name: "history"
    """
    post_id: Optional[str] = None
    request_id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    partner_id: str = Field(..., min_length=1)
    plant_name: str = Field(..., min_length=1)
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    notes: Optional[str] = None
    type: Literal["post", "request"]


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = "user"
    is_active: bool = True

    normalize_email = field_validator("email")(_normalize_email)


class UserUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=6, description="Omit to keep the current password")
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    normalize_email = field_validator("email")(_normalize_email)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    normalize_email = field_validator("email")(_normalize_email)


class SessionUser(BaseModel):
    """Identity carried by a session token."""
    id: str
    email: str
    name: str
    role: Role
    is_active: bool = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser
