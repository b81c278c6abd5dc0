"""Baseline schema: users, posts, likes, comments, ledger, rewards, messages

Revision ID: 5c1e2a7d9b30
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "5c1e2a7d9b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
        sa.Column("display_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("nickname", sa.String(50), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tier", sa.String(20), nullable=False, server_default="bronze"),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_challenger", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_test_account", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("introduction", sa.Text(), nullable=True),
        sa.Column("favorite_game", sa.String(100), nullable=True),
        sa.Column("student_id", sa.String(30), nullable=True),
        sa.Column("lol_nickname", sa.String(50), nullable=True),
        sa.Column("main_position", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )
    op.create_index("ix_users_points_desc", "users", ["points"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("author_id", sa.String(128), nullable=False),
        sa.Column("author_name", sa.String(100), nullable=False),
        sa.Column("author_photo_url", sa.Text(), nullable=True),
        sa.Column("author_tier", sa.String(20), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )
    op.create_index("ix_posts_category_time", "posts", ["category", "created_at"])
    op.create_index("ix_posts_author_time", "posts", ["author_id", "created_at"])

    op.create_table(
        "post_likes",
        sa.Column("post_id", sa.Integer(),
                  sa.ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(128), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("post_id", sa.Integer(),
                  sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.String(128), nullable=False),
        sa.Column("author_name", sa.String(100), nullable=False),
        sa.Column("author_photo_url", sa.Text(), nullable=True),
        sa.Column("author_tier", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )
    op.create_index("ix_comments_post_time", "comments", ["post_id", "created_at"])

    op.create_table(
        "point_log",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("reason", sa.String(30), nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("tier_after", sa.String(20), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=True),
        sa.Column("comment_id", sa.String(32), nullable=True),
        sa.Column("actor_id", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )
    op.create_index("ix_point_log_user_time", "point_log", ["user_id", "created_at"])

    op.create_table(
        "rewards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("reward_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("given_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
        sa.Column("given_by", sa.String(100), nullable=False),
        sa.Column("given_by_id", sa.String(128), nullable=True),
    )
    op.create_index("ix_rewards_given_at", "rewards", ["given_at"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sender_id", sa.String(128), nullable=False),
        sa.Column("sender_name", sa.String(100), nullable=False),
        sa.Column("sender_photo_url", sa.Text(), nullable=True),
        sa.Column("sender_tier", sa.String(20), nullable=False),
        sa.Column("receiver_id", sa.String(128), nullable=False),
        sa.Column("receiver_name", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_by_sender", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_by_receiver", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )
    op.create_index("ix_messages_receiver_time", "messages", ["receiver_id", "created_at"])
    op.create_index("ix_messages_sender_time", "messages", ["sender_id", "created_at"])

    op.create_table(
        "gallery_images",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.String(128), nullable=False),
        sa.Column("uploaded_by_name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )

    op.create_table(
        "admin_log",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(128), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_table", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(128), nullable=True),
        sa.Column("before_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("after_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )
    op.create_index("ix_admin_log_actor_time", "admin_log", ["actor_id", "timestamp"])
    op.create_index("ix_admin_log_target", "admin_log",
                    ["target_table", "target_id", "timestamp"])


def downgrade() -> None:
    op.drop_index("ix_admin_log_target", table_name="admin_log")
    op.drop_index("ix_admin_log_actor_time", table_name="admin_log")
    op.drop_table("admin_log")
    op.drop_table("gallery_images")
    op.drop_index("ix_messages_sender_time", table_name="messages")
    op.drop_index("ix_messages_receiver_time", table_name="messages")
    op.drop_table("messages")
    op.drop_index("ix_rewards_given_at", table_name="rewards")
    op.drop_table("rewards")
    op.drop_index("ix_point_log_user_time", table_name="point_log")
    op.drop_table("point_log")
    op.drop_index("ix_comments_post_time", table_name="comments")
    op.drop_table("comments")
    op.drop_table("post_likes")
    op.drop_index("ix_posts_author_time", table_name="posts")
    op.drop_index("ix_posts_category_time", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_users_points_desc", table_name="users")
    op.drop_table("users")
