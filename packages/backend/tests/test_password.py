"""Credential hasher tests."""

from folio.auth.password import BCRYPT_ROUNDS, hash_password, verify_password


def test_hash_verifies_against_its_own_plaintext():
    hashed = hash_password("correct horse battery staple")
    assert verify_password("correct horse battery staple", hashed)


def test_wrong_password_does_not_verify():
    hashed = hash_password("pw123456")
    assert verify_password("pw1234567", hashed) is False
    assert verify_password("", hashed) is False


def test_hash_is_salted_and_not_plaintext():
    h1 = hash_password("pw123456")
    h2 = hash_password("pw123456")
    assert h1 != h2
    assert "pw123456" not in h1
    assert h1.startswith("$2b$")


def test_cost_factor_is_ten():
    hashed = hash_password("pw123456")
    assert BCRYPT_ROUNDS == 10
    assert hashed.split("$")[2] == "10"


def test_unparseable_hash_returns_false():
    """A corrupt stored hash is a mismatch, not a crash."""
    assert verify_password("pw123456", "not-a-bcrypt-hash") is False


def test_non_ascii_password():
    hashed = hash_password("pässwörd-✓")
    assert verify_password("pässwörd-✓", hashed)
    assert not verify_password("passwoerd-✓", hashed)
