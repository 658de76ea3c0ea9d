"""Create links table.

Revision ID: 0001
Revises:
Create Date: 2025-11-02

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the links table."""
    op.create_table(
        "links",
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("target_url", sa.Text(), nullable=False),
        sa.Column(
            "clicks",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("last_clicked", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("code", name=op.f("pk_links")),
        sa.CheckConstraint("clicks >= 0", name=op.f("ck_links_clicks_non_negative")),
    )
    op.create_index(op.f("ix_links_created_at"), "links", ["created_at"])


def downgrade() -> None:
    """Drop the links table."""
    op.drop_index(op.f("ix_links_created_at"), table_name="links")
    op.drop_table("links")
