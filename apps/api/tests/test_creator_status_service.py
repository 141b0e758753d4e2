from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import caller_for, make_community, make_creator, make_user
from creator_program.core.constants import (
    GRACE_PERIOD_LENGTH,
    LOW_FOLLOWER_WARNING_MESSAGE,
    REMOVAL_REVOKE_REASON_PREFIX,
    VOLUNTARY_REMOVAL_REASON,
    VOLUNTARY_REVOKE_REASON,
)
from creator_program.core.exceptions import Conflict, NotFound, RateLimited, ValidationError
from creator_program.db.enums import (
    CreatorStatus,
    EmailKind,
    EntitlementTargetType,
    SnapshotSource,
    WarningReason,
)
from creator_program.db.models import CreatorEntitlement, EmailLog, FollowerSnapshot, User
from creator_program.schemas.creator import FollowerCountIn
from creator_program.services import (
    community_promotion_service,
    creator_admin_service,
    creator_status_service,
    subscription_projector,
    sweep_service,
)
from creator_program.services.creator_status_service import ThresholdOutcome
from creator_program.utils.datetime_utils import utcnow


def _counts(**counts) -> list[FollowerCountIn]:
    return [FollowerCountIn(type=t, follower_count=c) for t, c in counts.items()]


def _email_count(db, kind: EmailKind) -> int:
    return db.query(EmailLog).filter(EmailLog.kind == kind.value).count()


# =============================================================================
# Manual sync
# =============================================================================


def test_sync_below_threshold_starts_grace_period(db, user, creator):
    now = utcnow()

    result = creator_status_service.sync_my_followers(db, user.id, _counts(twitch=100), now=now)

    assert result.outcome == ThresholdOutcome.GRACE_STARTED
    assert result.totals.max_followers == 100
    creator = result.creator
    assert creator.status == CreatorStatus.WARNED.value
    assert creator.warning_reason == WarningReason.LOW_FOLLOWERS.value
    assert creator.warning_message == LOW_FOLLOWER_WARNING_MESSAGE
    assert creator.grace_period_ends_at == now + GRACE_PERIOD_LENGTH
    assert creator.last_synced_at == now
    assert _email_count(db, EmailKind.LOW_FOLLOWER_WARNING) == 1

    snapshot = db.query(FollowerSnapshot).one()
    assert snapshot.source == SnapshotSource.MANUAL.value
    assert snapshot.max_followers == 100
    assert snapshot.recorded_by == user.id


def test_sync_is_limited_to_once_per_day(db, user, creator):
    now = utcnow()
    creator_status_service.sync_my_followers(db, user.id, _counts(twitch=1500), now=now)

    with pytest.raises(RateLimited) as exc:
        creator_status_service.sync_my_followers(
            db, user.id, _counts(twitch=1600), now=now + timedelta(hours=1)
        )

    assert exc.value.code == "sync_cooldown"
    assert 0 < exc.value.retry_after_seconds <= 23 * 3600 + 1


def test_sync_still_below_keeps_original_deadline(db, user, creator):
    start = utcnow()
    creator_status_service.sync_my_followers(db, user.id, _counts(twitch=100), now=start)

    result = creator_status_service.sync_my_followers(
        db, user.id, _counts(twitch=200), now=start + timedelta(hours=25)
    )

    assert result.outcome == ThresholdOutcome.STILL_BELOW
    assert result.creator.grace_period_ends_at == start + GRACE_PERIOD_LENGTH
    assert _email_count(db, EmailKind.LOW_FOLLOWER_WARNING) == 1


def test_sync_recovery_clears_grace_period(db, user, creator):
    start = utcnow()
    creator_status_service.sync_my_followers(db, user.id, _counts(twitch=100), now=start)

    result = creator_status_service.sync_my_followers(
        db, user.id, _counts(youtube=800), now=start + timedelta(hours=25)
    )

    creator = result.creator
    assert result.outcome == ThresholdOutcome.RECOVERED
    assert creator.status == CreatorStatus.ACTIVE.value
    assert creator.grace_period is None
    assert creator.warning_reason is None
    assert creator.warning_message is None
    assert _email_count(db, EmailKind.GRACE_PERIOD_RECOVERED) == 1
    assert {p["type"] for p in creator.platforms} == {"twitch", "youtube"}


def test_sync_does_not_clear_admin_warning(db, user, creator, admin_a):
    creator_status_service.warn_creator(
        db, creator.id, caller_for(admin_a), "spam", "Please stop posting spam links"
    )

    result = creator_status_service.sync_my_followers(db, user.id, _counts(twitch=2000))

    assert result.outcome == ThresholdOutcome.IN_GOOD_STANDING
    assert result.creator.status == CreatorStatus.WARNED.value
    assert result.creator.warning_reason == "spam"


def test_sync_rejects_unknown_platform(db, user, creator):
    with pytest.raises(ValidationError):
        creator_status_service.sync_my_followers(db, user.id, _counts(myspace=9000))


def test_sync_requires_live_creator(db, user):
    with pytest.raises(NotFound):
        creator_status_service.sync_my_followers(db, user.id, _counts(twitch=900))


# =============================================================================
# Admin warning
# =============================================================================


def test_warn_requires_reason_and_message(db, creator, admin_a):
    with pytest.raises(ValidationError):
        creator_status_service.warn_creator(db, creator.id, caller_for(admin_a), "", "message")
    with pytest.raises(ValidationError):
        creator_status_service.warn_creator(db, creator.id, caller_for(admin_a), "spam", " ")


def test_warn_removed_creator_conflicts(db, user, creator, admin_a):
    creator_status_service.request_my_removal(db, user.id)

    with pytest.raises(Conflict):
        creator_status_service.warn_creator(db, creator.id, caller_for(admin_a), "spam", "msg")


# =============================================================================
# Removal
# =============================================================================


def test_voluntary_removal_revokes_and_reverts(db, user, creator):
    result = creator_status_service.request_my_removal(db, user.id)

    assert result.revoked == 1
    assert result.reverted == 1
    assert result.failed == []
    assert result.creator.status == CreatorStatus.REMOVED.value
    assert result.creator.removal_reason == VOLUNTARY_REMOVAL_REASON
    assert result.creator.removed_by == user.id

    entitlement = db.query(CreatorEntitlement).one()
    assert entitlement.active is False
    assert entitlement.revoke_reason == VOLUNTARY_REVOKE_REASON
    db.refresh(user)
    assert user.subscription_active is False
    # Voluntary removals are not emailed
    assert _email_count(db, EmailKind.CREATOR_REMOVED) == 0


def test_admin_removal_reverts_community_promotion(db, user, creator, admin_a):
    community = make_community(db, user)
    community_promotion_service.apply_promotion(db, user.id, community.id)

    result = creator_status_service.admin_remove_creator(
        db, creator.id, caller_for(admin_a), "Terms of service violation"
    )

    assert result.revoked == 2
    assert result.reverted == 2
    assert result.creator.removed_by == admin_a.id
    db.refresh(community)
    assert community.subscription_active is False
    reasons = {e.revoke_reason for e in db.query(CreatorEntitlement).all()}
    assert reasons == {REMOVAL_REVOKE_REASON_PREFIX + "Terms of service violation"}
    assert _email_count(db, EmailKind.CREATOR_REMOVED) == 1


def test_removal_leaves_upgraded_subscription_alone(db, user, creator, admin_a):
    user.subscription_plan = "premium"
    db.commit()

    result = creator_status_service.admin_remove_creator(
        db, creator.id, caller_for(admin_a), "Inactive"
    )

    assert result.skipped == 1
    db.refresh(user)
    assert user.subscription_plan == "premium"
    assert user.subscription_active is True


def test_removal_clears_grace_period(db, user, creator, admin_a):
    creator_status_service.sync_my_followers(db, user.id, _counts(twitch=10))

    result = creator_status_service.admin_remove_creator(
        db, creator.id, caller_for(admin_a), "Inactive"
    )

    assert result.creator.grace_period is None


def test_admin_removal_requires_reason(db, creator, admin_a):
    with pytest.raises(ValidationError):
        creator_status_service.admin_remove_creator(db, creator.id, caller_for(admin_a), "")


def test_removing_removed_creator_conflicts(db, user, creator, admin_a):
    creator_status_service.request_my_removal(db, user.id)

    with pytest.raises(Conflict):
        creator_status_service.admin_remove_creator(db, creator.id, caller_for(admin_a), "again")


def test_removed_creator_may_reapply_and_be_approved_again(db, user, creator, owner):
    creator_status_service.request_my_removal(db, user.id)

    second = make_creator(db, user, owner, display_name="Speedy Runner")

    assert second.id != creator.id
    assert second.slug != creator.slug
    db.refresh(user)
    assert user.subscription_active is True


def test_failed_revert_is_repaired_by_reconciliation(db, user, creator, admin_a, monkeypatch):
    original_revert = subscription_projector.revert

    def flaky_revert(target, reason, **kwargs):
        if isinstance(target, User):
            raise SQLAlchemyError("connection lost")
        return original_revert(target, reason, **kwargs)

    monkeypatch.setattr(subscription_projector, "revert", flaky_revert)
    result = creator_status_service.admin_remove_creator(
        db, creator.id, caller_for(admin_a), "Inactive"
    )

    assert len(result.failed) == 1
    assert result.creator.status == CreatorStatus.REMOVED.value
    db.refresh(user)
    assert user.subscription_active is True

    monkeypatch.setattr(subscription_projector, "revert", original_revert)
    assert sweep_service.reconcile_orphaned_subscriptions(db) == 1
    db.refresh(user)
    assert user.subscription_active is False
    assert sweep_service.reconcile_orphaned_subscriptions(db) == 0


def test_revert_skipped_while_other_creator_still_grants_target(db, owner, admin_a):
    community_owner = make_user(db)
    first_user = make_user(db)
    first = make_creator(db, first_user, owner, display_name="First Creator")
    community = make_community(db, community_owner)
    caller = caller_for(admin_a)
    second_user = make_user(db)
    second = make_creator(db, second_user, owner, display_name="Second Creator")
    creator_admin_service.grant_entitlement(
        db, first.id, caller, EntitlementTargetType.COMMUNITY, community.id
    )
    creator_admin_service.grant_entitlement(
        db, second.id, caller, EntitlementTargetType.COMMUNITY, community.id
    )

    result = creator_status_service.admin_remove_creator(db, first.id, caller, "Inactive")

    assert result.skipped == 1
    db.refresh(community)
    assert community.subscription_active is True
