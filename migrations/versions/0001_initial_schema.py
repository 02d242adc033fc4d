"""initial schema: quotes, votes, user accounts

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:12:44.512301

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the quote, quote_vote and user_account tables."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "quote",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("quote", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_quote_created_at_id", "quote", ["created_at", "id"])
    op.create_index("ix_quote_likes_id", "quote", ["likes", "id"])
    op.create_index("ix_quote_user_id", "quote", ["user_id"])
    op.create_table(
        "quote_vote",
        sa.Column("quote_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        sa.CheckConstraint("value IN (1, -1)", name="ck_quote_vote_value"),
        sa.ForeignKeyConstraint(["quote_id"], ["quote.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        # One vote per (quote, user); concurrent first votes collide here.
        sa.PrimaryKeyConstraint("quote_id", "user_id"),
    )
    op.create_index("ix_quote_vote_user_id", "quote_vote", ["user_id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_quote_vote_user_id", table_name="quote_vote")
    op.drop_table("quote_vote")
    op.drop_index("ix_quote_user_id", table_name="quote")
    op.drop_index("ix_quote_likes_id", table_name="quote")
    op.drop_index("ix_quote_created_at_id", table_name="quote")
    op.drop_table("quote")
    op.drop_table("user_account")
