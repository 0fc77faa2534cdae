"""create_todos_with_single_pinned_index

Revision ID: 3f9a1c2e7b4d
Revises:
Create Date: 2026-10-19 10:12:03.418226
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from nextup.config import get_settings


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2e7b4d'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = get_settings().db_schema


def upgrade() -> None:
    # 1. todos 表
    op.create_table(
        'todos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False, comment='标题'),
        sa.Column('priority', sa.Integer(), nullable=False, comment='优先级，>= 1，数值越小越紧急'),
        sa.Column('done', sa.Boolean(), server_default=sa.false(), nullable=False, comment='是否已完成'),
        sa.Column('pinned', sa.Boolean(), server_default=sa.false(), nullable=False, comment='是否为当前推荐'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True, comment='更新时间'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA,
    )
    op.create_index('ix_todos_done_priority', 'todos', ['done', 'priority'], schema=SCHEMA)

    # 2. 全表至多一条 pinned = true
    op.create_index(
        'uq_todos_single_pinned', 'todos', ['pinned'],
        unique=True,
        schema=SCHEMA,
        postgresql_where=sa.text('pinned'),
        sqlite_where=sa.text('pinned = 1'),
    )


def downgrade() -> None:
    op.drop_index('uq_todos_single_pinned', table_name='todos', schema=SCHEMA)
    op.drop_index('ix_todos_done_priority', table_name='todos', schema=SCHEMA)
    op.drop_table('todos', schema=SCHEMA)
