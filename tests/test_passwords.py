import pytest

from helpdesk.services.passwords import (
    PASSWORD_RULES,
    BcryptHasher,
    get_password_strength,
    password_errors,
    validate_password,
)


def test_short_password_reports_every_broken_rule():
    violations = validate_password("short")
    assert set(violations) == {"length", "uppercase", "number", "special_character"}
    assert "lowercase" not in violations


def test_compliant_password_has_no_violations():
    assert validate_password("Aa1!Aa1!") == []


def test_empty_password_breaks_all_rules():
    assert validate_password("") == list(PASSWORD_RULES)


def test_password_errors_are_human_readable():
    messages = password_errors("abcdefgh")
    assert PASSWORD_RULES["uppercase"] in messages
    assert PASSWORD_RULES["number"] in messages
    assert PASSWORD_RULES["special_character"] in messages
    assert len(messages) == 3


@pytest.mark.parametrize(
    ("password", "expected"),
    [
        ("abc", "weak"),
        ("abcdefgh", "weak"),
        ("Abcdefg1", "medium"),
        ("Abcdefgh1!xyz", "strong"),
    ],
)
def test_password_strength(password, expected):
    assert get_password_strength(password) == expected


def test_bcrypt_hasher_round_trip():
    hasher = BcryptHasher(rounds=4)
    hashed = hasher.hash("Aa1!aaaa")
    assert hashed.startswith("$2")
    assert hasher.compare("Aa1!aaaa", hashed)
    assert not hasher.compare("Aa1!aaab", hashed)


def test_bcrypt_dummy_hash_is_a_real_hash_at_the_same_cost():
    hasher = BcryptHasher(rounds=4)
    assert hasher.dummy_hash.startswith("$2b$04$")
    assert hasher.dummy_hash == hasher.dummy_hash
    assert not hasher.compare("", hasher.dummy_hash)


def test_bcrypt_hasher_treats_malformed_hash_as_mismatch():
    assert BcryptHasher(rounds=4).compare("anything", "not-a-bcrypt-hash") is False
