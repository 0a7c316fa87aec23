import pytest
from datetime import timedelta
from app.services import auth as auth_service

def test_token_round_trip():
    """A freshly issued token decodes to its claims."""
    token = auth_service.create_access_token({"sub": "dana@alphacorp.com", "role": "employee"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "dana@alphacorp.com"
    assert payload["role"] == "employee"
    assert payload["type"] == "access"

def test_expired_token_is_flagged():
    token = auth_service.create_access_token({"sub": "dana@alphacorp.com"}, expires_delta=timedelta(minutes=-5))
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}

def test_tampered_token_is_rejected():
    token = auth_service.create_access_token({"sub": "dana@alphacorp.com"})
    assert auth_service.decode_access_token(token + "x") is None
    assert auth_service.decode_access_token("not-a-jwt") is None
