from __future__ import annotations

import pytest

from roster_import.models import CanonicalUserRecord, ErrorKind
from roster_import.services.validator import (
    MSG_EMAIL_REQUIRED,
    MSG_EMPTY_ROW,
    MSG_INVALID_EMAIL,
    MSG_PHONE_REQUIRED,
    synthesize_names,
    validate_users,
)


def _user(**kw) -> CanonicalUserRecord:
    return CanonicalUserRecord.from_values(kw)


def test_valid_user_is_normalized():
    user = _user(
        first_name="  Ada ",
        last_name=" Lovelace",
        email="  ADA@Example.COM ",
        phone_number=" 555-0100 ",
        bio="   ",
    )
    outcome = validate_users([user])
    assert outcome.errors == []
    [valid] = outcome.valid_users
    assert valid.first_name == "Ada"
    assert valid.last_name == "Lovelace"
    assert valid.email == "ada@example.com"
    assert valid.phone_number == "555-0100"
    assert valid.bio is None
    assert valid.source_row == 2


def test_input_is_not_modified():
    user = _user(email=" A@B.CO ", phone_number="1")
    validate_users([user])
    assert user.email == " A@B.CO "
    assert user.first_name == ""


@pytest.mark.parametrize(
    "fields, message, email",
    [
        ({}, MSG_EMPTY_ROW, None),
        ({"first_name": "   "}, MSG_EMPTY_ROW, None),
        ({"first_name": "Ada", "phone_number": "1"}, MSG_EMAIL_REQUIRED, None),
        ({"email": "   ", "phone_number": "1"}, MSG_EMAIL_REQUIRED, None),
        ({"email": "ada@example.com"}, MSG_PHONE_REQUIRED, "ada@example.com"),
        ({"email": "ada@example.com", "phone_number": " "}, MSG_PHONE_REQUIRED, "ada@example.com"),
        ({"email": "not-an-email", "phone_number": "1"}, MSG_INVALID_EMAIL, "not-an-email"),
        ({"email": "a b@example.com", "phone_number": "1"}, MSG_INVALID_EMAIL, "a b@example.com"),
        ({"email": "ada@localhost", "phone_number": "1"}, MSG_INVALID_EMAIL, "ada@localhost"),
    ],
)
def test_rejections(fields, message, email):
    outcome = validate_users([_user(**fields)])
    assert outcome.valid_users == []
    [err] = outcome.errors
    assert err.row == 2
    assert err.error == message
    assert err.email == email
    assert err.kind is ErrorKind.VALIDATION


def test_only_extras_counts_as_empty_row():
    user = CanonicalUserRecord.from_values({}, extras={"badge": "blue"})
    [err] = validate_users([user]).errors
    assert err.error == MSG_EMPTY_ROW
    assert err.data == {"first_name": "", "last_name": "", "email": "", "badge": "blue"}


def test_first_failing_check_wins():
    # missing email and missing phone: email is checked first
    [err] = validate_users([_user(first_name="Ada")]).errors
    assert err.error == MSG_EMAIL_REQUIRED


def test_error_data_is_pre_validation_snapshot():
    user = _user(email="john.doe@example.com")
    [err] = validate_users([user]).errors
    assert err.data == {"first_name": "", "last_name": "", "email": "john.doe@example.com"}


def test_row_numbers_follow_input_positions():
    users = [
        _user(email="a@example.com", phone_number="1"),
        _user(),
        _user(email="b@example.com", phone_number="2"),
        _user(email="bad", phone_number="3"),
    ]
    outcome = validate_users(users)
    assert [u.source_row for u in outcome.valid_users] == [2, 4]
    assert [e.row for e in outcome.errors] == [3, 5]
    assert len(outcome.valid_users) + len(outcome.errors) == len(users)


def test_names_generated_from_email():
    outcome = validate_users([_user(email="john.doe@example.com", phone_number="1")])
    [valid] = outcome.valid_users
    assert (valid.first_name, valid.last_name) == ("john", "doe")


def test_last_name_defaults_to_user():
    named = synthesize_names(_user(email="jane@example.com"))
    assert (named.first_name, named.last_name) == ("jane", "User")


def test_full_name_in_first_name_is_split():
    named = synthesize_names(_user(first_name="Matthew T Cianciolo", email="m@example.com"))
    assert (named.first_name, named.last_name) == ("Matthew", "T Cianciolo")


def test_existing_last_name_is_kept():
    named = synthesize_names(_user(last_name="Hopper", email="grace.x@example.com"))
    assert (named.first_name, named.last_name) == ("grace", "Hopper")


def test_empty_second_email_segment_defaults_to_user():
    named = synthesize_names(_user(email="jane.@example.com"))
    assert (named.first_name, named.last_name) == ("jane", "User")


def test_local_part_starting_with_dot_uses_whole_local_part():
    named = synthesize_names(_user(email=".x@example.com"))
    assert named.first_name == ".x"
    assert named.last_name == "x"
