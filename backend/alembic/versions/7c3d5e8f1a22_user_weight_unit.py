"""user weight unit preference

Revision ID: 7c3d5e8f1a22
Revises: 4b1e2c7d9a10
Create Date: 2026-10-18 16:40:51.902117

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c3d5e8f1a22'
down_revision: Union[str, None] = '4b1e2c7d9a10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('users', sa.Column('weight_unit', sa.String(length=3), nullable=False, server_default='kg'))


def downgrade() -> None:
    op.drop_column('users', 'weight_unit')
