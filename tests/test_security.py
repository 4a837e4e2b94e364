from types import SimpleNamespace

from models.user import UserRole
from security import create_access_token, decode_token, hash_password, verify_password


def test_password_hash_round_trip():
    stored = hash_password("s3cret!")
    assert stored != "s3cret!"
    assert verify_password("s3cret!", stored)
    assert not verify_password("wrong", stored)
    assert not verify_password("s3cret!", None)


def test_same_password_gets_different_salts():
    assert hash_password("repeat") != hash_password("repeat")


def test_token_carries_identity():
    user = SimpleNamespace(id=7, username="alice", role=UserRole.MEMBER)
    payload = decode_token(create_access_token(user))
    assert payload["sub"] == "7"
    assert payload["username"] == "alice"
    assert payload["role"] == "member"


def test_expired_or_tampered_token():
    user = SimpleNamespace(id=7, username="alice", role=UserRole.ADMIN)
    assert decode_token(create_access_token(user, expires_minutes=-1)) is None
    token = create_access_token(user)
    tampered = token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1]
    assert decode_token(tampered) is None
