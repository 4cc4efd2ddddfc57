"""Initial schema for the KM Portal

Revision ID: 3f2a9c41d7b0
Revises:
Create Date: 2026-10-19

Tables Created:
- roles: Named roles with a priority (lower value = more privileged)
- users: User accounts, profile and lockout state
- user_roles: User-role associations
- boards: Bulletin board posts (soft deleted through deleted_at)

Seed data:
- ROLE_ADMIN (1), ROLE_MANAGER (10), ROLE_BOARD_ADMIN (20), ROLE_USER (100)
"""
from typing import Sequence, Union
from datetime import datetime, UTC
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f2a9c41d7b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SEED_ROLES = [
    ("ROLE_ADMIN", "Administrator", "Full access to the portal", 1),
    ("ROLE_MANAGER", "Manager", "Department manager", 10),
    ("ROLE_BOARD_ADMIN", "Board administrator", "Moderates boards", 20),
    ("ROLE_USER", "User", "Regular portal user", 100),
]


def upgrade() -> None:
    """Create the schema and seed the reference roles."""
    # =========================================================================
    # STEP 1: Base tables
    # =========================================================================

    # roles table
    op.create_table(
        'roles',
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_roles'))
    )
    op.create_index(op.f('ix_roles_created_at'), 'roles', ['created_at'], unique=False)
    op.create_index(op.f('ix_roles_name'), 'roles', ['name'], unique=True)
    op.create_index(op.f('ix_roles_priority'), 'roles', ['priority'], unique=False)

    # users table
    op.create_table(
        'users',
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('locked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('password_expired', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users'))
    )
    op.create_index(op.f('ix_users_created_at'), 'users', ['created_at'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    # Case-insensitive email lookups
    op.execute("CREATE UNIQUE INDEX idx_users_email_lower ON users (LOWER(email))")

    # =========================================================================
    # STEP 2: Dependent tables
    # =========================================================================

    # user_roles table
    op.create_table(
        'user_roles',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], name=op.f('fk_user_roles_role_id_roles'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_user_roles_user_id_users'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'role_id', name=op.f('pk_user_roles'))
    )

    # boards table
    op.create_table(
        'boards',
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_pinned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('view_count >= 0', name=op.f('ck_boards_view_count_non_negative')),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], name=op.f('fk_boards_author_id_users'), ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_boards'))
    )
    op.create_index(op.f('ix_boards_author_id'), 'boards', ['author_id'], unique=False)
    op.create_index(op.f('ix_boards_category'), 'boards', ['category'], unique=False)
    op.create_index(op.f('ix_boards_created_at'), 'boards', ['created_at'], unique=False)
    op.create_index(op.f('ix_boards_deleted_at'), 'boards', ['deleted_at'], unique=False)
    op.create_index(op.f('ix_boards_is_pinned'), 'boards', ['is_pinned'], unique=False)

    # Listing index - live boards newest first
    op.execute("""
        CREATE INDEX idx_boards_live_created
        ON boards (created_at DESC)
        WHERE deleted_at IS NULL
    """)

    # =========================================================================
    # STEP 3: Seed reference roles
    # =========================================================================
    roles = sa.table(
        'roles',
        sa.Column('id', postgresql.UUID(as_uuid=True)),
        sa.Column('name', sa.String(50)),
        sa.Column('display_name', sa.String(100)),
        sa.Column('description', sa.String(255)),
        sa.Column('priority', sa.Integer()),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    now = datetime.now(UTC)
    op.bulk_insert(
        roles,
        [
            {
                'id': uuid.uuid4(),
                'name': name,
                'display_name': display_name,
                'description': description,
                'priority': priority,
                'created_at': now,
                'updated_at': now,
            }
            for name, display_name, description, priority in SEED_ROLES
        ],
    )


def downgrade() -> None:
    """Drop all schema elements in reverse order."""
    op.execute("DROP INDEX IF EXISTS idx_boards_live_created")
    op.drop_index(op.f('ix_boards_is_pinned'), table_name='boards')
    op.drop_index(op.f('ix_boards_deleted_at'), table_name='boards')
    op.drop_index(op.f('ix_boards_created_at'), table_name='boards')
    op.drop_index(op.f('ix_boards_category'), table_name='boards')
    op.drop_index(op.f('ix_boards_author_id'), table_name='boards')
    op.drop_table('boards')

    op.drop_table('user_roles')

    op.execute("DROP INDEX IF EXISTS idx_users_email_lower")
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_created_at'), table_name='users')
    op.drop_table('users')

    op.drop_index(op.f('ix_roles_priority'), table_name='roles')
    op.drop_index(op.f('ix_roles_name'), table_name='roles')
    op.drop_index(op.f('ix_roles_created_at'), table_name='roles')
    op.drop_table('roles')
