import pytest

from conftest import make_community, make_creator, make_user
from creator_program.core.constants import ENTITLEMENT_SOURCE, PROGRAM_PLAN
from creator_program.core.exceptions import Conflict
from creator_program.db.enums import EntitlementTargetType
from creator_program.services import entitlement_service


def test_approval_records_personal_entitlement(db, creator, user):
    entitlement = entitlement_service.find_active(db, creator.id, EntitlementTargetType.USER)

    assert entitlement is not None
    assert entitlement.target_id == user.id
    assert entitlement.plan == PROGRAM_PLAN
    assert entitlement.source == ENTITLEMENT_SOURCE
    assert entitlement.active is True


def test_creator_holds_at_most_one_active_community_entitlement(db, creator, user):
    first = make_community(db, user)
    second = make_community(db, user)
    entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=EntitlementTargetType.COMMUNITY,
        target_id=first.id,
        granted_by=user.id,
    )
    db.commit()

    with pytest.raises(Conflict) as exc:
        entitlement_service.grant(
            db,
            creator_id=creator.id,
            target_type=EntitlementTargetType.COMMUNITY,
            target_id=second.id,
            granted_by=user.id,
        )

    assert exc.value.message == entitlement_service.COMMUNITY_PROMOTION_EXISTS


def test_community_can_be_granted_again_after_revocation(db, creator, user):
    community = make_community(db, user)
    entitlement = entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=EntitlementTargetType.COMMUNITY,
        target_id=community.id,
        granted_by=user.id,
    )
    db.commit()
    entitlement_service.revoke(entitlement, reason="test", revoked_by=None)
    db.commit()

    again = entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=EntitlementTargetType.COMMUNITY,
        target_id=community.id,
        granted_by=user.id,
    )
    db.commit()

    assert again.id != entitlement.id
    assert again.active is True


def test_revoke_is_idempotent(db, creator):
    entitlement = entitlement_service.find_active(db, creator.id, EntitlementTargetType.USER)

    assert entitlement_service.revoke(entitlement, reason="first", revoked_by=None) is True
    revoked_at = entitlement.revoked_at
    assert entitlement_service.revoke(entitlement, reason="second", revoked_by=None) is False

    assert entitlement.active is False
    assert entitlement.revoke_reason == "first"
    assert entitlement.revoked_at == revoked_at


def test_revoke_all_returns_previously_active(db, creator, user):
    community = make_community(db, user)
    entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=EntitlementTargetType.COMMUNITY,
        target_id=community.id,
        granted_by=user.id,
    )
    db.commit()

    revoked = entitlement_service.revoke_all(db, creator.id, reason="cleanup", revoked_by=None)
    db.commit()

    assert len(revoked) == 2
    assert all(not e.active and e.revoke_reason == "cleanup" for e in revoked)
    assert entitlement_service.list_active(db, creator.id) == []
    assert entitlement_service.revoke_all(db, creator.id, reason="again", revoked_by=None) == []


def test_has_active_for_target_spans_creators(db, owner):
    first_user = make_user(db)
    second_user = make_user(db)

    first = make_creator(db, first_user, owner, display_name="First Creator")
    make_creator(db, second_user, owner, display_name="Second Creator")

    assert entitlement_service.has_active_for_target(db, EntitlementTargetType.USER, first_user.id)
    entitlement_service.revoke_all(db, first.id, reason="x", revoked_by=None)
    db.commit()
    assert not entitlement_service.has_active_for_target(
        db, EntitlementTargetType.USER, first_user.id
    )
    assert entitlement_service.has_active_for_target(
        db, EntitlementTargetType.USER, second_user.id
    )
