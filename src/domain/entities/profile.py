"""Profile domain entities."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class Profession(StrEnum):
    STUDENT = "Student"
    DEVELOPER = "Developer"
    ENTREPRENEUR = "Entrepreneur"


class SubscriptionPlan(StrEnum):
    BASIC = "Basic"
    PRO = "Pro"
    ENTERPRISE = "Enterprise"


class Gender(StrEnum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    PREFER_NOT_TO_SAY = "Prefer not to say"


@dataclass
class ProfileCandidate:
    """Raw, unvalidated profile data as submitted by a client.

    Every field is kept as submitted so that validation can report all
    problems at once instead of failing on the first bad enum value.
    """

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

    def __post_init__(self) -> None:
        """Apply the subscription default before validation."""
        if not self.subscription_plan:
            self.subscription_plan = SubscriptionPlan.BASIC.value


@dataclass(frozen=True)
class ProfilePatch:
    """Partial update of the plain profile fields.

    ``None`` means "not supplied". Username, credentials and the photo
    reference are deliberately absent: they never change through a patch.
    """

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

    def is_empty(self) -> bool:
        return all(value is None for value in vars(self).values())

    def merged_with(self, profile: "Profile") -> ProfileCandidate:
        """Overlay the supplied fields onto an existing profile."""
        base = profile.to_candidate()
        supplied = {name: value for name, value in vars(self).items() if value is not None}
        return replace(base, **supplied)


@dataclass(frozen=True)
class PasswordChange:
    """Request to replace the stored credential."""

    current_password: str
    new_password: str


@dataclass
class Profile:
    """Domain entity for a registered user profile."""

    username: str
    password_hash: str
    profession: Profession
    address_line1: str
    country: str
    state: str
    city: str
    gender: Gender
    id: UUID = field(default_factory=uuid4)
    company_name: str | None = None
    subscription_plan: SubscriptionPlan = SubscriptionPlan.BASIC
    newsletter: bool = False
    custom_gender: str | None = None
    profile_photo: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @classmethod
    def from_candidate(
        cls,
        candidate: ProfileCandidate,
        password_hash: str,
        profile_photo: str | None = None,
    ) -> "Profile":
        """Build a new profile from an already validated candidate."""
        profile = cls(
            username=candidate.username,
            password_hash=password_hash,
            profession=Profession(candidate.profession),
            address_line1=candidate.address_line1,
            country=candidate.country,
            state=candidate.state,
            city=candidate.city,
            gender=Gender(candidate.gender),
            profile_photo=profile_photo,
        )
        profile.apply_details(candidate)
        return profile

    def apply_details(self, candidate: ProfileCandidate) -> None:
        """Copy the plain (non-credential, non-photo) fields from a validated candidate."""
        self.profession = Profession(candidate.profession)
        self.address_line1 = candidate.address_line1
        self.country = candidate.country
        self.state = candidate.state
        self.city = candidate.city
        self.subscription_plan = SubscriptionPlan(candidate.subscription_plan)
        self.newsletter = candidate.newsletter
        self.gender = Gender(candidate.gender)
        # Conditional fields are only kept where they apply
        self.company_name = (
            candidate.company_name if self.profession is Profession.ENTREPRENEUR else None
        )
        self.custom_gender = candidate.custom_gender if self.gender is Gender.OTHER else None

    def to_candidate(self) -> ProfileCandidate:
        return ProfileCandidate(
            username=self.username,
            profession=self.profession.value,
            company_name=self.company_name or "",
            address_line1=self.address_line1,
            country=self.country,
            state=self.state,
            city=self.city,
            subscription_plan=self.subscription_plan.value,
            newsletter=self.newsletter,
            gender=self.gender.value,
            custom_gender=self.custom_gender or "",
        )

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
