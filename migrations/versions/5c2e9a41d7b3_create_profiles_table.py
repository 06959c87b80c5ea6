"""create_profiles_table

Revision ID: 5c2e9a41d7b3
Revises:
Create Date: 2026-10-19 09:12:44.201318

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c2e9a41d7b3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles table."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('username', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('profession', sa.String(length=20), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('address_line1', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=100), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('subscription_plan', sa.String(length=20), nullable=False, server_default='Basic'),
        sa.Column('newsletter', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('gender', sa.String(length=20), nullable=False),
        sa.Column('custom_gender', sa.String(length=100), nullable=True),
        sa.Column('profile_photo', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("profession IN ('Student', 'Developer', 'Entrepreneur')", name='ck_profiles_profession'),
        sa.CheckConstraint("subscription_plan IN ('Basic', 'Pro', 'Enterprise')", name='ck_profiles_subscription_plan'),
        sa.CheckConstraint("gender IN ('Male', 'Female', 'Other', 'Prefer not to say')", name='ck_profiles_gender'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )


def downgrade() -> None:
    """Drop profiles table."""
    op.drop_table('profiles')
