"""create_accounts_and_verification_tokens

Revision ID: 4c7e2a9d1b30
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "4c7e2a9d1b30"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_canonical", sa.String(), nullable=False),
        sa.Column("username_canonical", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_accounts_email_canonical", "accounts", ["email_canonical"], unique=True)
    op.create_index("ix_accounts_username_canonical", "accounts", ["username_canonical"], unique=True)
    op.create_index("ix_accounts_created_at", "accounts", ["created_at"])

    op.create_table(
        "verification_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("account_id", sa.Uuid(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("secret", sa.String(length=64), nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_verification_tokens_account_id", "verification_tokens", ["account_id"])
    op.create_index("ix_verification_tokens_secret", "verification_tokens", ["secret"], unique=True)
    op.create_index("ix_verification_tokens_issued_at", "verification_tokens", ["issued_at"])


def downgrade() -> None:
    op.drop_index("ix_verification_tokens_issued_at", table_name="verification_tokens")
    op.drop_index("ix_verification_tokens_secret", table_name="verification_tokens")
    op.drop_index("ix_verification_tokens_account_id", table_name="verification_tokens")
    op.drop_table("verification_tokens")

    op.drop_index("ix_accounts_created_at", table_name="accounts")
    op.drop_index("ix_accounts_username_canonical", table_name="accounts")
    op.drop_index("ix_accounts_email_canonical", table_name="accounts")
    op.drop_table("accounts")
