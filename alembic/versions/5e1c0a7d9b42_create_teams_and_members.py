"""create teams and members tables

Revision ID: 5e1c0a7d9b42
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5e1c0a7d9b42"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("age", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("team_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    # 팀 이름 조건 조인 및 나이 범위 검색용 인덱스 — Indexes for team join and age range filters
    op.create_index("ix_members_team_id", "members", ["team_id"])
    op.create_index("ix_members_age", "members", ["age"])


def downgrade() -> None:
    op.drop_index("ix_members_age", table_name="members")
    op.drop_index("ix_members_team_id", table_name="members")
    op.drop_table("members")
    op.drop_table("teams")
