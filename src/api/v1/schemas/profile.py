"""Pydantic schemas for Profile API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.entities.profile import PasswordChange, ProfileCandidate, ProfilePatch


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileResponse(CamelModel):
    """Sanitized profile. Credential material is never included."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "username": "jdoe",
                "profession": "Entrepreneur",
                "companyName": "Acme Ltd",
                "addressLine1": "1 Main Street",
                "country": "India",
                "state": "Maharashtra",
                "city": "Mumbai",
                "subscriptionPlan": "Pro",
                "newsletter": True,
                "gender": "Male",
                "customGender": None,
                "profilePhoto": "/uploads/profile-1767225600000-123456789.png",
                "createdAt": "2026-01-01T00:00:00",
                "updatedAt": "2026-01-01T00:00:00",
            }
        },
    )

    id: UUID
    username: str
    profession: str
    company_name: str | None = None
    address_line1: str
    country: str
    state: str
    city: str
    subscription_plan: str
    newsletter: bool
    gender: str
    custom_gender: str | None = None
    profile_photo: str | None = None
    created_at: datetime
    updated_at: datetime


class ProfileDetailResponse(BaseModel):
    """Schema for a single profile with a status message."""

    message: str
    user: ProfileResponse


class UsernameAvailabilityResponse(BaseModel):
    available: bool
    message: str


class PasswordCheckRequest(BaseModel):
    password: str = ""


class PasswordCheckResponse(BaseModel):
    valid: bool
    strength: str = Field(..., description="weak, medium or strong")
    score: int


class VerifyPasswordRequest(CamelModel):
    username: str = ""
    current_password: str = ""


class RegistrationRequest(CamelModel):
    """JSON registration body. Fields default to empty so that the
    validation pipeline reports every missing one."""

    username: str = ""
    password: str = ""
    profession: str = ""
    company_name: str = ""
    address_line1: str = ""
    country: str = ""
    state: str = ""
    city: str = ""
    subscription_plan: str = ""
    newsletter: bool = False
    gender: str = ""
    custom_gender: str = ""

    def to_candidate(self) -> ProfileCandidate:
        return ProfileCandidate(**self.model_dump())


class ProfileUpdateRequest(CamelModel):
    """JSON update body. Omitted fields are left unchanged."""

    profession: str | None = None
    company_name: str | None = None
    address_line1: str | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None
    subscription_plan: str | None = None
    newsletter: bool | None = None
    gender: str | None = None
    custom_gender: str | None = None
    new_password: str | None = None
    current_password: str | None = None

    def to_patch(self) -> ProfilePatch:
        return ProfilePatch(**self.model_dump(exclude={"new_password", "current_password"}))

    def to_password_change(self) -> PasswordChange | None:
        if not self.new_password:
            return None
        return PasswordChange(
            current_password=self.current_password or "",
            new_password=self.new_password,
        )
