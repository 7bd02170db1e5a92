"""Initial schema - document_chunk with pgvector embedding.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from pgvector.sqlalchemy import Vector

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

EMBEDDING_DIMENSIONS = 1536


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        "document_chunk",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), primary_key=True),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("content_hash", sa.String(32), nullable=False),
        sa.Column("token_count", sa.Integer(), nullable=False),
        sa.Column("embedding", Vector(EMBEDDING_DIMENSIONS), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index(
        "ix_document_chunk_content_hash", "document_chunk", ["content_hash"], unique=True
    )
    op.create_index("ix_document_chunk_path", "document_chunk", ["path"])
    op.execute("""
        CREATE INDEX ix_document_chunk_embedding
        ON document_chunk USING hnsw (embedding vector_l2_ops)
    """)


def downgrade() -> None:
    op.drop_index("ix_document_chunk_embedding", table_name="document_chunk")
    op.drop_index("ix_document_chunk_path", table_name="document_chunk")
    op.drop_index("ix_document_chunk_content_hash", table_name="document_chunk")
    op.drop_table("document_chunk")
    op.execute("DROP EXTENSION IF EXISTS vector")
