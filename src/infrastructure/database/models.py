"""SQLAlchemy ORM models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """Registered user profile."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    # Unique constraint is the final authority on username collisions
    username: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    profession: Mapped[str] = mapped_column(String(20), nullable=False)
    company_name: Mapped[str | None] = mapped_column(String(255))
    address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    subscription_plan: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Basic"
    )
    newsletter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    custom_gender: Mapped[str | None] = mapped_column(String(100))
    profile_photo: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "profession IN ('Student', 'Developer', 'Entrepreneur')",
            name="ck_profiles_profession",
        ),
        CheckConstraint(
            "subscription_plan IN ('Basic', 'Pro', 'Enterprise')",
            name="ck_profiles_subscription_plan",
        ),
        CheckConstraint(
            "gender IN ('Male', 'Female', 'Other', 'Prefer not to say')",
            name="ck_profiles_gender",
        ),
    )
