"""create documents table"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "create_documents"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(64), primary_key=True),
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_documents_collection_created_at", "documents", ["collection", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_documents_collection_created_at", table_name="documents")
    op.drop_table("documents")
