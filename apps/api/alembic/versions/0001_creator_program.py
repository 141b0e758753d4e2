"""Creator program baseline

Revision ID: 0001_creator_program
Revises:
Create Date: 2026-10-18

Platform accounts (users, communities, admin directory), the creator
program tables, and the job/email/scheduler-lock infrastructure.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0001_creator_program'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create creator program tables."""

    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')  # For gen_random_uuid()

    # ==========================================================================
    # Platform accounts
    # ==========================================================================
    op.execute('''
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            email VARCHAR(255) UNIQUE NOT NULL,
            username VARCHAR(100),
            display_name VARCHAR(255) NOT NULL DEFAULT '',
            is_active BOOLEAN NOT NULL DEFAULT true,
            token_version INTEGER NOT NULL DEFAULT 1,
            subscription_plan VARCHAR(50) NOT NULL DEFAULT '',
            subscription_active BOOLEAN NOT NULL DEFAULT false,
            subscription_id VARCHAR(100),
            subscription_created_at TIMESTAMPTZ,
            subscription_updated_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    op.execute('''
        CREATE TABLE communities (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            owner_user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            subscription_plan VARCHAR(50) NOT NULL DEFAULT '',
            subscription_active BOOLEAN NOT NULL DEFAULT false,
            subscription_id VARCHAR(100),
            subscription_created_at TIMESTAMPTZ,
            subscription_updated_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_communities_owner ON communities(owner_user_id)')

    op.execute('''
        CREATE TABLE admin_users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            email VARCHAR(255) UNIQUE NOT NULL,
            display_name VARCHAR(255) NOT NULL DEFAULT '',
            role VARCHAR(50) NOT NULL DEFAULT 'admin',
            roles JSONB NOT NULL DEFAULT '[]'::jsonb,
            is_active BOOLEAN NOT NULL DEFAULT true,
            token_version INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    # ==========================================================================
    # Applications
    # ==========================================================================
    op.execute('''
        CREATE TABLE creator_applications (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            display_name VARCHAR(100) NOT NULL,
            primary_platform VARCHAR(20) NOT NULL,
            platforms JSONB NOT NULL DEFAULT '[]'::jsonb,
            description TEXT NOT NULL,
            bio TEXT NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'submitted',
            first_approval_by UUID,
            first_approval_at TIMESTAMPTZ,
            reviewed_by UUID,
            reviewed_at TIMESTAMPTZ,
            rejection_reason TEXT,
            feedback TEXT,
            admin_notes TEXT,
            creator_id UUID,
            withdrawn_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute(
        'CREATE INDEX idx_creator_applications_status '
        'ON creator_applications(status, created_at)'
    )
    # One pending application per user
    op.execute('''
        CREATE UNIQUE INDEX uq_creator_applications_pending_user
        ON creator_applications(user_id)
        WHERE status IN ('submitted', 'under_review')
    ''')

    # ==========================================================================
    # Creators
    # ==========================================================================
    op.execute('''
        CREATE TABLE creators (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID REFERENCES users(id) ON DELETE SET NULL,
            application_id UUID REFERENCES creator_applications(id) ON DELETE SET NULL,
            display_name VARCHAR(100) NOT NULL,
            slug VARCHAR(120) UNIQUE NOT NULL,
            bio TEXT NOT NULL DEFAULT '',
            theme_color VARCHAR(7) NOT NULL,
            profile_image VARCHAR(500),
            primary_platform VARCHAR(20) NOT NULL,
            platforms JSONB NOT NULL DEFAULT '[]'::jsonb,
            status VARCHAR(20) NOT NULL DEFAULT 'active',
            featured BOOLEAN NOT NULL DEFAULT false,
            grace_period_started_at TIMESTAMPTZ,
            grace_period_ends_at TIMESTAMPTZ,
            grace_period_notified_at TIMESTAMPTZ,
            warning_reason VARCHAR(100),
            warning_message TEXT,
            warned_at TIMESTAMPTZ,
            removal_reason TEXT,
            removed_at TIMESTAMPTZ,
            removed_by UUID,
            last_synced_at TIMESTAMPTZ,
            joined_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_creators_grace_period_pair CHECK (
                (grace_period_started_at IS NULL) = (grace_period_ends_at IS NULL)
            )
        )
    ''')
    op.execute('CREATE INDEX idx_creators_status ON creators(status, joined_at)')
    op.execute('CREATE INDEX idx_creators_grace_period ON creators(grace_period_ends_at)')
    # One live creator record per user; removed records are retained
    op.execute('''
        CREATE UNIQUE INDEX uq_creators_live_user
        ON creators(user_id)
        WHERE status IN ('active', 'warned')
    ''')

    # ==========================================================================
    # Entitlement ledger and follower history
    # ==========================================================================
    op.execute('''
        CREATE TABLE creator_entitlements (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            content_creator_id UUID NOT NULL REFERENCES creators(id) ON DELETE CASCADE,
            target_type VARCHAR(20) NOT NULL,
            target_id UUID NOT NULL,
            plan VARCHAR(50) NOT NULL,
            source VARCHAR(50) NOT NULL,
            granted_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            granted_by UUID,
            active BOOLEAN NOT NULL DEFAULT true,
            revoked_at TIMESTAMPTZ,
            revoked_by UUID,
            revoke_reason TEXT
        )
    ''')
    op.execute(
        'CREATE INDEX idx_creator_entitlements_creator '
        'ON creator_entitlements(content_creator_id, active)'
    )
    op.execute(
        'CREATE INDEX idx_creator_entitlements_target '
        'ON creator_entitlements(target_type, target_id)'
    )
    # One active community promotion per creator
    op.execute('''
        CREATE UNIQUE INDEX uq_creator_entitlements_active_community
        ON creator_entitlements(content_creator_id)
        WHERE target_type = 'community' AND active = true
    ''')

    op.execute('''
        CREATE TABLE follower_snapshots (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            content_creator_id UUID NOT NULL REFERENCES creators(id) ON DELETE CASCADE,
            platforms JSONB NOT NULL DEFAULT '[]'::jsonb,
            total_followers INTEGER NOT NULL,
            max_followers INTEGER NOT NULL,
            source VARCHAR(20) NOT NULL,
            recorded_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            recorded_by UUID
        )
    ''')
    op.execute(
        'CREATE INDEX idx_follower_snapshots_creator '
        'ON follower_snapshots(content_creator_id, recorded_at)'
    )

    # ==========================================================================
    # Jobs, email log, scheduler locks
    # ==========================================================================
    op.execute('''
        CREATE TABLE jobs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            job_type VARCHAR(50) NOT NULL,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            run_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            attempts INTEGER NOT NULL DEFAULT 0,
            max_attempts INTEGER NOT NULL DEFAULT 3,
            last_error TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            completed_at TIMESTAMPTZ,
            idempotency_key VARCHAR(255) UNIQUE
        )
    ''')
    op.execute('CREATE INDEX idx_jobs_pending ON jobs(status, run_at)')

    op.execute('''
        CREATE TABLE email_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            job_id UUID REFERENCES jobs(id) ON DELETE SET NULL,
            kind VARCHAR(50) NOT NULL,
            recipient_email VARCHAR(255) NOT NULL,
            recipient_name VARCHAR(255),
            subject VARCHAR(500) NOT NULL,
            body TEXT NOT NULL,
            text_body TEXT NOT NULL DEFAULT '',
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            external_id VARCHAR(255),
            error TEXT,
            sent_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute(
        'CREATE INDEX idx_email_logs_recipient ON email_logs(recipient_email, created_at)'
    )

    op.execute('''
        CREATE TABLE scheduler_locks (
            name VARCHAR(100) PRIMARY KEY,
            holder VARCHAR(255) NOT NULL,
            acquired_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            expires_at TIMESTAMPTZ NOT NULL
        )
    ''')


def downgrade() -> None:
    """Drop creator program tables."""
    for table in (
        'scheduler_locks',
        'email_logs',
        'jobs',
        'follower_snapshots',
        'creator_entitlements',
        'creators',
        'creator_applications',
        'admin_users',
        'communities',
        'users',
    ):
        op.execute(f'DROP TABLE IF EXISTS {table} CASCADE')
