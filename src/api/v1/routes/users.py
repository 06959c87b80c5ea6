"""User profile API routes."""

from typing import Annotated, Optional, TypeVar

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from api.v1.dependencies import (
    get_profile_update_service,
    get_registration_service,
    get_upload_policy,
)
from api.v1.schemas.common import ErrorResponse, MessageResponse
from api.v1.schemas.profile import (
    PasswordCheckRequest,
    PasswordCheckResponse,
    ProfileDetailResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RegistrationRequest,
    UsernameAvailabilityResponse,
    VerifyPasswordRequest,
)
from domain.entities.profile import PasswordChange, ProfileCandidate, ProfilePatch
from domain.services.file_lifecycle import Upload, UploadPolicy
from domain.services.profile_update_service import ProfileUpdateService
from domain.services.profile_validation import password_strength
from domain.services.registration_service import RegistrationService

router = APIRouter(prefix="/users", tags=["users"])

BodyT = TypeVar("BodyT", bound=BaseModel)


async def read_upload(
    profile_photo: Annotated[Optional[UploadFile], File(alias="profilePhoto")] = None,
    policy: UploadPolicy = Depends(get_upload_policy),
) -> Optional[Upload]:
    """Read the optional photo, never buffering more than one byte past the limit."""
    if profile_photo is None or not profile_photo.filename:
        return None
    data = await profile_photo.read(policy.max_bytes + 1)
    await profile_photo.close()
    return Upload(
        data=data,
        content_type=profile_photo.content_type or "",
        filename=profile_photo.filename,
    )


def registration_form(
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    profession: Annotated[str, Form()] = "",
    company_name: Annotated[str, Form(alias="companyName")] = "",
    address_line1: Annotated[str, Form(alias="addressLine1")] = "",
    country: Annotated[str, Form()] = "",
    state: Annotated[str, Form()] = "",
    city: Annotated[str, Form()] = "",
    subscription_plan: Annotated[str, Form(alias="subscriptionPlan")] = "",
    newsletter: Annotated[bool, Form()] = False,
    gender: Annotated[str, Form()] = "",
    custom_gender: Annotated[str, Form(alias="customGender")] = "",
) -> ProfileCandidate:
    """Collect the registration fields. All are optional here so that the
    validation pipeline can report every problem in one response."""
    return ProfileCandidate(
        username=username,
        password=password,
        profession=profession,
        company_name=company_name,
        address_line1=address_line1,
        country=country,
        state=state,
        city=city,
        subscription_plan=subscription_plan,
        newsletter=newsletter,
        gender=gender,
        custom_gender=custom_gender,
    )


def update_form(
    profession: Annotated[Optional[str], Form()] = None,
    company_name: Annotated[Optional[str], Form(alias="companyName")] = None,
    address_line1: Annotated[Optional[str], Form(alias="addressLine1")] = None,
    country: Annotated[Optional[str], Form()] = None,
    state: Annotated[Optional[str], Form()] = None,
    city: Annotated[Optional[str], Form()] = None,
    subscription_plan: Annotated[Optional[str], Form(alias="subscriptionPlan")] = None,
    newsletter: Annotated[Optional[bool], Form()] = None,
    gender: Annotated[Optional[str], Form()] = None,
    custom_gender: Annotated[Optional[str], Form(alias="customGender")] = None,
) -> ProfilePatch:
    return ProfilePatch(
        profession=profession,
        company_name=company_name,
        address_line1=address_line1,
        country=country,
        state=state,
        city=city,
        subscription_plan=subscription_plan,
        newsletter=newsletter,
        gender=gender,
        custom_gender=custom_gender,
    )


def password_change_form(
    new_password: Annotated[Optional[str], Form(alias="newPassword")] = None,
    current_password: Annotated[Optional[str], Form(alias="currentPassword")] = None,
) -> Optional[PasswordChange]:
    if not new_password:
        return None
    return PasswordChange(current_password=current_password or "", new_password=new_password)


def _is_json(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() == "application/json"


async def _json_body(request: Request, model: type[BodyT]) -> BodyT:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "Malformed JSON body"}]
        ) from exc
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


async def registration_input(
    request: Request,
    form: ProfileCandidate = Depends(registration_form),
) -> ProfileCandidate:
    """Registration fields from a JSON body or, otherwise, the multipart form."""
    if _is_json(request):
        return (await _json_body(request, RegistrationRequest)).to_candidate()
    return form


async def update_input(
    request: Request,
    form: ProfilePatch = Depends(update_form),
) -> ProfilePatch:
    if _is_json(request):
        return (await _json_body(request, ProfileUpdateRequest)).to_patch()
    return form


async def password_change_input(
    request: Request,
    form: Optional[PasswordChange] = Depends(password_change_form),
) -> Optional[PasswordChange]:
    if _is_json(request):
        return (await _json_body(request, ProfileUpdateRequest)).to_password_change()
    return form


@router.get(
    "/check-username/{username}",
    response_model=UsernameAvailabilityResponse,
    summary="Check username availability",
    responses={
        400: {
            "model": UsernameAvailabilityResponse,
            "description": "Username format is invalid",
        }
    },
)
async def check_username(
    username: str,
    service: RegistrationService = Depends(get_registration_service),
) -> UsernameAvailabilityResponse | JSONResponse:
    """Report whether a username is well formed and not yet registered."""
    result = await service.check_username(username)
    if not result.well_formed:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"available": False, "message": result.message},
        )
    return UsernameAvailabilityResponse(available=result.available, message=result.message)


@router.post(
    "/check-password",
    response_model=PasswordCheckResponse,
    summary="Score a password",
)
async def check_password(body: PasswordCheckRequest) -> PasswordCheckResponse:
    """Score password strength and report whether it meets the registration policy."""
    report = password_strength(body.password)
    return PasswordCheckResponse(
        valid=report.valid,
        strength=report.strength.value,
        score=report.score,
    )


@router.post(
    "/register",
    response_model=ProfileDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a profile",
    responses={
        201: {"description": "Profile registered successfully"},
        400: {"model": ErrorResponse, "description": "Validation failed or username taken"},
        500: {"model": ErrorResponse, "description": "Server error during registration"},
    },
)
async def register(
    candidate: ProfileCandidate = Depends(registration_input),
    upload: Optional[Upload] = Depends(read_upload),
    service: RegistrationService = Depends(get_registration_service),
) -> ProfileDetailResponse:
    """Register a new profile from a JSON body, or from a multipart form with an
    optional JPG/PNG profile photo (max 2 MB)."""
    profile = await service.register(candidate, upload)
    return ProfileDetailResponse(
        message="User registered successfully",
        user=ProfileResponse.model_validate(profile),
    )


@router.post(
    "/verify-password",
    response_model=MessageResponse,
    summary="Verify a user's current password",
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or password incorrect"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def verify_password(
    body: VerifyPasswordRequest,
    service: ProfileUpdateService = Depends(get_profile_update_service),
) -> MessageResponse:
    """Check the current password before a password change."""
    await service.verify_password(body.username, body.current_password)
    return MessageResponse(message="Password verified successfully")


@router.put(
    "/{username}",
    response_model=ProfileDetailResponse,
    summary="Update a profile",
    responses={
        200: {"description": "Profile updated successfully"},
        400: {
            "model": ErrorResponse,
            "description": "Validation failed or current password incorrect",
        },
        404: {"model": ErrorResponse, "description": "User not found"},
        500: {"model": ErrorResponse, "description": "Server error during profile update"},
    },
)
async def update_profile(
    username: str,
    patch: ProfilePatch = Depends(update_input),
    password_change: Optional[PasswordChange] = Depends(password_change_input),
    upload: Optional[Upload] = Depends(read_upload),
    service: ProfileUpdateService = Depends(get_profile_update_service),
) -> ProfileDetailResponse:
    """Partially update a profile, optionally changing the password.

    Accepts a JSON body or a multipart form; a new photo needs the form.
    """
    profile = await service.update(username, patch, password_change, upload)
    return ProfileDetailResponse(
        message="Profile updated successfully",
        user=ProfileResponse.model_validate(profile),
    )
