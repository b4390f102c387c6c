"""Create users, friend requests and friendships

Revision ID: v1
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v1'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("full_name", sa.String(), nullable=False, server_default=""),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_pic", sa.String(), nullable=True),
        sa.Column("native_language", sa.String(), nullable=True),
        sa.Column("learning_language", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("is_onboarded", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "friend_requests",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("sender_id", sa.String(), nullable=False),
        sa.Column("recipient_id", sa.String(), nullable=False),
        sa.Column("pair_key", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("sender_id <> recipient_id", name="ck_friend_request_distinct_users"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_friend_requests_id"), "friend_requests", ["id"], unique=False)
    op.create_index(op.f("ix_friend_requests_sender_id"), "friend_requests", ["sender_id"], unique=False)
    op.create_index(op.f("ix_friend_requests_recipient_id"), "friend_requests", ["recipient_id"], unique=False)
    op.create_index(op.f("ix_friend_requests_pair_key"), "friend_requests", ["pair_key"], unique=False)
    op.create_index(
        "uq_friend_requests_pending_pair",
        "friend_requests",
        ["pair_key"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )
    op.create_index("ix_friend_requests_status_updated_at", "friend_requests", ["status", "updated_at"], unique=False)

    op.create_table(
        "friendships",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user1_id", sa.String(), nullable=False),
        sa.Column("user2_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user1_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user2_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("user1_id < user2_id", name="ck_friendship_ordered_pair"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user1_id", "user2_id", name="unique_friendship"),
    )
    op.create_index(op.f("ix_friendships_id"), "friendships", ["id"], unique=False)
    op.create_index(op.f("ix_friendships_user1_id"), "friendships", ["user1_id"], unique=False)
    op.create_index(op.f("ix_friendships_user2_id"), "friendships", ["user2_id"], unique=False)


def downgrade() -> None:
    op.drop_table("friendships")
    op.drop_index("ix_friend_requests_status_updated_at", table_name="friend_requests")
    op.drop_index("uq_friend_requests_pending_pair", table_name="friend_requests")
    op.drop_table("friend_requests")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
