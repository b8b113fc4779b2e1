from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime


class ArtisanProfile(SQLModel, table=True):
    __tablename__ = "artisan_profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)

    # shop info
    shop_name: str
    description: Optional[str] = None
    specialties: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    location: Optional[str] = None
    business_license: Optional[str] = None
    established_year: Optional[int] = None
    experience_years: Optional[int] = None

    # contact
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # storefront
    banner_image: Optional[str] = None
    shop_logo: Optional[str] = None
    business_hours: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    return_policy: Optional[str] = None
    shipping_policy: Optional[str] = None
    preferred_language: Optional[str] = None

    verification_status: str = Field(default="pending")
    status: str = Field(default="active")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
