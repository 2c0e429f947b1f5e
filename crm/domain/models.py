"""
Canonical entity schemas.

Each collection stores plain JSON records; these models define the one accepted
shape for what clients send in. Wire and disk keys are camelCase.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# -----------------------------
# Properties
# -----------------------------

class Location(CamelModel):
    address: Optional[str] = None
    city: Optional[str] = None
    community: Optional[str] = None
    district: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class PropertyDetails(CamelModel):
    """Extended CRM fields shared by create and update payloads."""

    listing_type: Optional[str] = None
    property_type: Optional[str] = None
    currency: Optional[str] = None
    area: Optional[float] = None
    area_unit: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    furnishing: Optional[str] = None
    features: Optional[List[str]] = None
    location: Optional[Location] = None
    video_url: Optional[str] = None
    virtual_tour_url: Optional[str] = None
    floor_plan_url: Optional[str] = None
    three_d_model_url: Optional[str] = None
    developer: Optional[str] = None
    handover_date: Optional[str] = None
    payment_plan: Optional[str] = None
    down_payment: Optional[float] = None
    ownership: Optional[str] = None


class PropertyCreate(PropertyDetails):
    title: str = Field(min_length=1)
    price: float = Field(gt=0)
    status: str = Field(min_length=1)
    description: str = ""
    agent_id: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class PropertyUpdate(PropertyDetails):
    title: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, gt=0)
    status: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    agent_id: Optional[str] = None
    images: Optional[List[str]] = None


class Property(PropertyCreate):
    id: str
    created_at: str
    updated_at: Optional[str] = None


# -----------------------------
# Roles
# -----------------------------

class RoleCreate(CamelModel):
    name: str = Field(min_length=1)
    permissions: List[str]


class RoleUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    permissions: Optional[List[str]] = None


class Role(RoleCreate):
    id: str


# -----------------------------
# Users / auth
# -----------------------------

class CredentialsModel(CamelModel):
    """Passwords are hashed exactly as sent; the auth service trims email and roleId itself."""

    model_config = ConfigDict(str_strip_whitespace=False)


class RegisterRequest(CredentialsModel):
    email: str = ""
    password: str = ""
    role_id: str = ""


class LoginRequest(CredentialsModel):
    email: str = ""
    password: str = ""


class ProfileUpdate(CredentialsModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PublicUser(CamelModel):
    """User record as exposed to clients (never carries the password hash)."""

    id: str
    email: str
    role_id: Optional[str] = None
    created_at: Optional[str] = None


class TokenResponse(CamelModel):
    token: str


class AuthSettings(CamelModel):
    """The singleton ``settings`` collection."""

    jwt_secret: str = Field(min_length=1)
    token_expiry: int | float | str = "1h"


def to_record(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)
