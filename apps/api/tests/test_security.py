import uuid

import jwt
import pytest

from creator_program.core import security
from creator_program.core.security import (
    ADMIN_SCOPE,
    USER_SCOPE,
    create_session_token,
    decode_session_token,
)


def test_session_token_carries_scope_and_version():
    subject = uuid.uuid4()

    payload = decode_session_token(create_session_token(subject, 3, scope=ADMIN_SCOPE))

    assert payload["sub"] == str(subject)
    assert payload["scope"] == ADMIN_SCOPE
    assert payload["token_version"] == 3


def test_previous_secret_still_verifies_during_rotation(monkeypatch):
    token = create_session_token(uuid.uuid4(), scope=USER_SCOPE)
    old_secret = security.settings.JWT_SECRET

    monkeypatch.setattr(security.settings, "JWT_SECRET", "rotated-secret")
    monkeypatch.setattr(security.settings, "JWT_SECRET_PREVIOUS", old_secret)

    assert decode_session_token(token)["scope"] == USER_SCOPE


def test_unknown_secret_is_rejected(monkeypatch):
    token = create_session_token(uuid.uuid4())

    monkeypatch.setattr(security.settings, "JWT_SECRET", "someone-else")
    monkeypatch.setattr(security.settings, "JWT_SECRET_PREVIOUS", "")

    with pytest.raises(jwt.InvalidTokenError):
        decode_session_token(token)
