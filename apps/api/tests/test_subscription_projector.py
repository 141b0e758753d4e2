import uuid

from creator_program.core.constants import PROGRAM_PLAN
from creator_program.db.models import Community, User
from creator_program.services import subscription_projector


def _user(plan: str = "", active: bool = False, subscription_id: str | None = None) -> User:
    return User(
        id=uuid.uuid4(),
        email="someone@test.com",
        subscription_plan=plan,
        subscription_active=active,
        subscription_id=subscription_id,
    )


def test_apply_sets_program_subscription():
    creator_id = uuid.uuid4()
    community = Community(id=uuid.uuid4(), name="Guild", subscription_plan="", subscription_active=False)

    subscription_projector.apply(community, creator_id)

    assert community.subscription_plan == PROGRAM_PLAN
    assert community.subscription_active is True
    assert community.subscription_id == f"cc_program_{creator_id}"
    assert community.subscription_created_at is not None


def test_apply_personal_skips_higher_tier():
    user = _user(plan="premium", active=True, subscription_id="sub_paid")

    assert subscription_projector.apply_personal(user, uuid.uuid4()) is False
    assert user.subscription_plan == "premium"
    assert user.subscription_id == "sub_paid"


def test_apply_personal_upgrades_free_user():
    user = _user(plan="free")

    assert subscription_projector.apply_personal(user, uuid.uuid4()) is True
    assert user.subscription_plan == PROGRAM_PLAN
    assert user.subscription_active is True


def test_revert_disables_base_plan():
    user = _user(plan=PROGRAM_PLAN, active=True)

    assert subscription_projector.revert(user, "removed") is True
    assert user.subscription_active is False
    assert user.subscription_plan == PROGRAM_PLAN


def test_revert_leaves_paid_plan_untouched():
    user = _user(plan="premium_plus", active=True)

    assert subscription_projector.revert(user, "removed") is False
    assert user.subscription_active is True


def test_orphan_detection_requires_matching_provenance():
    creator_id = uuid.uuid4()
    stamped = _user(
        plan=PROGRAM_PLAN,
        active=True,
        subscription_id=subscription_projector.program_subscription_id(creator_id),
    )
    other = _user(plan=PROGRAM_PLAN, active=True, subscription_id="cc_program_someone-else")
    inactive = _user(
        plan=PROGRAM_PLAN,
        active=False,
        subscription_id=subscription_projector.program_subscription_id(creator_id),
    )

    assert subscription_projector.is_orphaned_program_subscription(stamped, creator_id)
    assert not subscription_projector.is_orphaned_program_subscription(other, creator_id)
    assert not subscription_projector.is_orphaned_program_subscription(inactive, creator_id)


def test_has_paid_subscription():
    assert subscription_projector.has_paid_subscription(_user(plan="enterprise", active=True))
    assert not subscription_projector.has_paid_subscription(_user(plan="enterprise", active=False))
    assert not subscription_projector.has_paid_subscription(_user(plan=PROGRAM_PLAN, active=True))
