import pytest
from datetime import timedelta
from app.core.exceptions import AuthenticationError, AccessDeniedError, ProfileNotFoundError
from app.models.profile import ProfileRole
from app.services.access_gate import AccessGate
from app.services.auth import create_access_token


@pytest.fixture
def gate(session_factory):
    return AccessGate(session_factory)


def test_missing_token_is_unauthorized(gate):
    with pytest.raises(AuthenticationError):
        gate.require_profile(None)
    with pytest.raises(AuthenticationError):
        gate.require_team_view("")


def test_invalid_and_expired_tokens_are_unauthorized(gate, employee_profile):
    expired = create_access_token({"sub": employee_profile.email}, expires_delta=timedelta(seconds=-1))
    with pytest.raises(AuthenticationError):
        gate.require_profile(expired)
    with pytest.raises(AuthenticationError):
        gate.require_profile("garbage")


def test_refresh_token_type_is_rejected(gate, employee_profile, get_token):
    with pytest.raises(AuthenticationError):
        gate.require_profile(get_token(employee_profile, type="refresh"))


def test_admin_and_stakeholder_pass_team_gate(gate, admin_profile, make_profile, get_token):
    stakeholder = make_profile("board@alphacorp.com", role=ProfileRole.STAKEHOLDER)

    caller = gate.require_team_view(get_token(admin_profile))
    assert caller.user_id == admin_profile.id
    assert caller.role == ProfileRole.ADMIN
    assert caller.profile.full_name == "System Admin"

    assert gate.require_team_view(get_token(stakeholder)).role == ProfileRole.STAKEHOLDER


def test_employee_denied_team_view(gate, employee_profile, get_token):
    with pytest.raises(AccessDeniedError):
        gate.require_team_view(get_token(employee_profile))


def test_unknown_profile(gate):
    token = create_access_token({"sub": "ghost@alphacorp.com"})
    with pytest.raises(ProfileNotFoundError):
        gate.require_profile(token)
    # The team gate does not reveal whether the profile exists
    with pytest.raises(AccessDeniedError):
        gate.require_team_view(token)


def test_any_profile_passes_employee_gate(gate, admin_profile, employee_profile, get_token):
    assert gate.require_profile(get_token(employee_profile)).user_id == employee_profile.id
    assert gate.require_profile(get_token(admin_profile)).user_id == admin_profile.id
