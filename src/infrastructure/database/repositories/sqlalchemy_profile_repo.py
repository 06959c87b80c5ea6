"""SQLAlchemy implementation of Profile repository."""

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import UsernameTakenError
from domain.entities.profile import Gender, Profession, Profile, SubscriptionPlan
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_username(self, username: str) -> Profile | None:
        """Get a profile by its exact username."""
        model = await self._get_model(username)
        return self._to_entity(model) if model else None

    async def username_exists(self, username: str) -> bool:
        """Check whether a username is already registered."""
        stmt = select(exists().where(ProfileModel.username == username))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile; a unique-constraint hit means the username is taken."""
        model = self._to_model(profile)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise UsernameTakenError(profile.username) from exc
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, profile: Profile) -> Profile:
        """Update an existing profile."""
        model = await self._get_model(profile.username)
        if not model:
            raise ValueError(f"Profile {profile.username} not found")

        model.password_hash = profile.password_hash
        model.profession = profile.profession.value
        model.company_name = profile.company_name
        model.address_line1 = profile.address_line1
        model.country = profile.country
        model.state = profile.state
        model.city = profile.city
        model.subscription_plan = profile.subscription_plan.value
        model.newsletter = profile.newsletter
        model.gender = profile.gender.value
        model.custom_gender = profile.custom_gender
        model.profile_photo = profile.profile_photo
        model.updated_at = profile.updated_at

        await self._session.flush()
        return self._to_entity(model)

    async def _get_model(self, username: str) -> ProfileModel | None:
        stmt = select(ProfileModel).where(ProfileModel.username == username)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            username=model.username,
            password_hash=model.password_hash,
            profession=Profession(model.profession),
            company_name=model.company_name,
            address_line1=model.address_line1,
            country=model.country,
            state=model.state,
            city=model.city,
            subscription_plan=SubscriptionPlan(model.subscription_plan),
            newsletter=model.newsletter,
            gender=Gender(model.gender),
            custom_gender=model.custom_gender,
            profile_photo=model.profile_photo,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            username=entity.username,
            password_hash=entity.password_hash,
            profession=entity.profession.value,
            company_name=entity.company_name,
            address_line1=entity.address_line1,
            country=entity.country,
            state=entity.state,
            city=entity.city,
            subscription_plan=entity.subscription_plan.value,
            newsletter=entity.newsletter,
            gender=entity.gender.value,
            custom_gender=entity.custom_gender,
            profile_photo=entity.profile_photo,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
