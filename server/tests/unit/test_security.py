"""Tests for password hashing."""

from hotel_booking.core.security import hash_password, verify_password


def test_hash_is_not_plain_text():
    hashed = hash_password("demo-password")

    assert hashed != "demo-password"
    assert hashed.startswith("$2b$")


def test_verify_password():
    hashed = hash_password("demo-password")

    assert verify_password("demo-password", hashed) is True
    assert verify_password("wrong-password", hashed) is False


def test_hashes_are_salted():
    assert hash_password("demo-password") != hash_password("demo-password")
