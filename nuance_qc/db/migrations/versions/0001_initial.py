"""fingerprint history and gate runs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from nuance_qc.db.models import JSONType

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "narrative_fingerprints",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("project_id", sa.String(length=128), nullable=False),
        sa.Column("lane", sa.String(length=64), nullable=False),
        sa.Column("fingerprint", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_narrative_fingerprints_project_lane",
        "narrative_fingerprints",
        ["project_id", "lane", "id"],
        unique=False,
    )

    op.create_table(
        "gate_runs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.String(length=128), nullable=False),
        sa.Column("lane", sa.String(length=64), nullable=False),
        sa.Column("outcome", sa.String(length=32), nullable=False),
        sa.Column("passed", sa.Boolean(), nullable=False),
        sa.Column("result", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_gate_runs_project_lane", "gate_runs", ["project_id", "lane"], unique=False)
    op.create_index("ix_gate_runs_outcome", "gate_runs", ["outcome"], unique=False)
    op.create_index("ix_gate_runs_created_at", "gate_runs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_gate_runs_created_at", table_name="gate_runs")
    op.drop_index("ix_gate_runs_outcome", table_name="gate_runs")
    op.drop_index("ix_gate_runs_project_lane", table_name="gate_runs")
    op.drop_table("gate_runs")
    op.drop_index("ix_narrative_fingerprints_project_lane", table_name="narrative_fingerprints")
    op.drop_table("narrative_fingerprints")
