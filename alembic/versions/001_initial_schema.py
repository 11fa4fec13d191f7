"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

Creates every JobMeter table:
  • users, onboarding_data
  • jobs, companies, blog_posts, category_pages
  • job_matches, job_applications, application_notifications
  • user_credits, credit_transactions, user_subscriptions
  • notification_tokens
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB


# revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _json_list(name: str):
    return sa.Column(name, JSONB(), nullable=False, server_default="[]")


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_is_active", "users", ["is_active"])

    # ── onboarding_data ───────────────────────────────────────────────────
    op.create_table(
        "onboarding_data",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("cv_name", sa.String(255), nullable=True),
        sa.Column("cv_email", sa.String(255), nullable=True),
        sa.Column("cv_phone", sa.String(50), nullable=True),
        sa.Column("cv_location", sa.String(255), nullable=True),
        sa.Column("cv_summary", sa.Text(), nullable=True),
        _json_list("cv_roles"),
        _json_list("cv_skills"),
        sa.Column("cv_experience", sa.Text(), nullable=True),
        _json_list("cv_work_experience"),
        _json_list("cv_education"),
        _json_list("cv_projects"),
        _json_list("cv_accomplishments"),
        _json_list("cv_awards"),
        _json_list("cv_certifications"),
        _json_list("cv_languages"),
        _json_list("cv_interests"),
        _json_list("cv_publications"),
        _json_list("cv_volunteer_work"),
        _json_list("cv_additional_sections"),
        _json_list("cv_ai_suggested_roles"),
        sa.Column("cv_linkedin", sa.Text(), nullable=True),
        sa.Column("cv_github", sa.Text(), nullable=True),
        sa.Column("cv_portfolio", sa.Text(), nullable=True),
        _json_list("target_roles"),
        _json_list("preferred_locations"),
        sa.Column("salary_min", sa.Integer(), nullable=True),
        sa.Column("salary_max", sa.Integer(), nullable=True),
        sa.Column("experience_level", sa.String(50), nullable=True),
        sa.Column("job_type", sa.String(50), nullable=True),
        sa.Column("remote_preference", sa.String(50), nullable=True),
        sa.Column("sector", sa.String(255), nullable=True),
        sa.Column("cv_text", sa.Text(), nullable=True),
        sa.Column("cv_file_name", sa.String(255), nullable=True),
        sa.Column("cv_file_type", sa.String(100), nullable=True),
        sa.Column("cv_file_size", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_onboarding_data_user_id", "onboarding_data", ["user_id"], unique=True)

    # ── jobs ──────────────────────────────────────────────────────────────
    op.create_table(
        "jobs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("role", sa.String(255), nullable=True),
        _json_list("related_roles"),
        _json_list("ai_enhanced_roles"),
        sa.Column("sector", sa.String(255), nullable=True),
        _json_list("ai_enhanced_sectors"),
        sa.Column("company", JSONB(), nullable=True),
        sa.Column("location", JSONB(), nullable=True),
        sa.Column("employment_type", sa.String(50), nullable=True),
        sa.Column("experience_level", sa.String(50), nullable=True),
        _json_list("skills_required"),
        _json_list("ai_enhanced_skills"),
        sa.Column("description", sa.Text(), nullable=True),
        _json_list("responsibilities"),
        _json_list("qualifications"),
        _json_list("benefits"),
        sa.Column("salary_range", JSONB(), nullable=True),
        sa.Column("application", JSONB(), nullable=True),
        sa.Column("source", JSONB(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("posted_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("slug", sa.String(300), nullable=True),
        sa.Column("duplicate_hash", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_jobs_sector", "jobs", ["sector"])
    op.create_index("ix_jobs_status", "jobs", ["status"])
    op.create_index("ix_jobs_slug", "jobs", ["slug"], unique=True)
    op.create_index("ix_jobs_status_created", "jobs", ["status", "created_at"])
    op.create_unique_constraint("uq_jobs_duplicate_hash", "jobs", ["duplicate_hash"])

    # ── companies & SEO content ───────────────────────────────────────────
    op.create_table(
        "companies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("industry", sa.String(255), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_companies_name", "companies", ["name"])
    op.create_index("ix_companies_slug", "companies", ["slug"], unique=True)
    op.create_index("ix_companies_is_published", "companies", ["is_published"])

    op.create_table(
        "blog_posts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_blog_posts_is_published", "blog_posts", ["is_published"])

    op.create_table(
        "category_pages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("job_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_category_pages_slug", "category_pages", ["slug"], unique=True)
    op.create_index("ix_category_pages_is_published", "category_pages", ["is_published"])

    # ── matching & applications ───────────────────────────────────────────
    op.create_table(
        "job_matches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("job_id", UUID(as_uuid=True), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("breakdown", JSONB(), nullable=False, server_default="{}"),
        sa.Column("computed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_auto_apply_eligible", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("auto_apply_rank", sa.Integer(), nullable=True),
        sa.Column("plan_type", sa.String(20), nullable=True),
        sa.Column("queued_for_auto_apply_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notification_date", sa.Date(), nullable=True),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notification_sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "job_id", name="uq_job_match_user_job"),
    )
    op.create_index("ix_job_matches_user_id", "job_matches", ["user_id"])
    op.create_index("ix_job_matches_job_id", "job_matches", ["job_id"])
    op.create_index("ix_job_matches_score", "job_matches", ["score"])
    op.create_index("ix_job_matches_is_auto_apply_eligible", "job_matches", ["is_auto_apply_eligible"])

    op.create_table(
        "job_applications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("job_id", UUID(as_uuid=True), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("application_method", sa.String(20), nullable=False, server_default="manual"),
        sa.Column("recipient_email", sa.String(255), nullable=True),
        sa.Column("plan_type", sa.String(20), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("ses_message_id", sa.String(255), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cv_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cover_letter_generated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "job_id", name="uq_application_user_job"),
    )
    op.create_index("ix_job_applications_user_id", "job_applications", ["user_id"])
    op.create_index("ix_job_applications_job_id", "job_applications", ["job_id"])
    op.create_index("ix_job_applications_status", "job_applications", ["status"])

    op.create_table(
        "application_notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("job_id", UUID(as_uuid=True), sa.ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "application_id",
            UUID(as_uuid=True),
            sa.ForeignKey("job_applications.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_application_notifications_user_id", "application_notifications", ["user_id"])

    # ── credits & subscriptions ───────────────────────────────────────────
    op.create_table(
        "user_credits",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_credits_available", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_credits_last_awarded", sa.Date(), nullable=True),
        sa.Column("daily_credits_last_used", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "credit_transactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.String(20), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("reference_id", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_credit_transactions_user_id", "credit_transactions", ["user_id"])
    op.create_index("ix_credit_transactions_reference_id", "credit_transactions", ["reference_id"])
    op.create_index(
        "uq_credit_transactions_purchase_reference",
        "credit_transactions",
        ["reference_id"],
        unique=True,
        postgresql_where=sa.text("transaction_type = 'purchase'"),
    )

    op.create_table(
        "user_subscriptions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("plan_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("monthly_application_limit", sa.Integer(), nullable=False),
        sa.Column("applications_used_this_month", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_reset_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_user_subscriptions_user_id", "user_subscriptions", ["user_id"])
    op.create_index("ix_user_subscriptions_status", "user_subscriptions", ["status"])

    # ── push tokens ───────────────────────────────────────────────────────
    op.create_table(
        "notification_tokens",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("token", sa.Text(), nullable=False, unique=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("platform", sa.String(20), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_notification_tokens_user_id", "notification_tokens", ["user_id"])


def downgrade() -> None:
    op.drop_table("notification_tokens")
    op.drop_table("user_subscriptions")
    op.drop_table("credit_transactions")
    op.drop_table("user_credits")
    op.drop_table("application_notifications")
    op.drop_table("job_applications")
    op.drop_table("job_matches")
    op.drop_table("category_pages")
    op.drop_table("blog_posts")
    op.drop_table("companies")
    op.drop_table("jobs")
    op.drop_table("onboarding_data")
    op.drop_table("users")
