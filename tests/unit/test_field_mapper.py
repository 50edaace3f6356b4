from __future__ import annotations

from roster_import.mapping.aliases import AUTO_MAPPINGS, aliases_for
from roster_import.mapping.field_mapper import apply_field_mappings, auto_map_record, map_fields
from roster_import.models import FieldMapping, RawRecord


def test_auto_map_common_headers():
    user = auto_map_record(
        {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "phone": "555-0100",
            "company": "Analytical Engines",
            "job_title": "Programmer",
            "shirt_size": "M",
        }
    )
    assert user.first_name == "Ada"
    assert user.last_name == "Lovelace"
    assert user.email == "ada@example.com"
    assert user.phone_number == "555-0100"
    assert user.organization_affiliation == "Analytical Engines"
    assert user.title_position == "Programmer"
    assert user.t_shirt_size == "M"
    assert user.extras == {}


def test_auto_map_first_alias_wins():
    user = auto_map_record({"firstname": "Second", "first_name": "First", "email": "a@b.co"})
    assert user.first_name == "First"
    user = auto_map_record({"mobile": "222", "phone": "111", "email": "a@b.co"})
    assert user.phone_number == "111"


def test_auto_map_phone_aliases_target_phone_number():
    for alias in ("phone", "mobile", "cell", "telephone"):
        user = auto_map_record({alias: "555"})
        assert user.phone_number == "555", alias


def test_auto_map_partial_match_fallback():
    user = auto_map_record(
        {"attendee_first": "Ada", "attendee_surname": "Lovelace", "work_mail": "ada@example.com"}
    )
    assert user.first_name == "Ada"
    assert user.last_name == "Lovelace"
    assert user.email == "ada@example.com"
    assert user.extras == {}


def test_auto_map_partial_match_does_not_override_alias():
    user = auto_map_record({"email": "real@example.com", "backup_email": "other@example.com"})
    assert user.email == "real@example.com"


def test_auto_map_unknown_columns_go_to_extras():
    user = auto_map_record({"email": "a@b.co", "badge_color": "blue"})
    assert user.extras == {"badge_color": "blue"}
    assert user.get("badge_color") == "blue"
    assert "badge_color" not in user.as_dict()
    assert user.as_dict(include_extras=True)["badge_color"] == "blue"


def test_auto_map_defaults_for_missing_fields():
    user = auto_map_record({})
    assert (user.first_name, user.last_name, user.email) == ("", "", "")
    assert user.phone_number is None
    assert user.as_dict() == {"first_name": "", "last_name": "", "email": ""}


def test_explicit_mappings_replace_auto_mapping():
    mappings = [
        FieldMapping(csv_column="Work Email", user_field="email"),
        FieldMapping(csv_column="Given", user_field="first_name"),
    ]
    user = apply_field_mappings({"work_email": "a@b.co", "given": "Ada", "cell": "555"}, mappings)
    assert user.email == "a@b.co"
    assert user.first_name == "Ada"
    # no alias pass when mappings are given
    assert user.phone_number is None
    assert user.extras == {"cell": "555"}


def test_explicit_mapping_missing_column_keeps_default():
    user = apply_field_mappings({"x": "1"}, [FieldMapping("Phone Number", "phone_number")])
    assert user.phone_number is None
    assert user.email == ""


def test_map_fields_preserves_order_and_count():
    records = [
        RawRecord(row_number=2, data={"email": "a@b.co"}),
        RawRecord(row_number=3, data={}),
        RawRecord(row_number=4, data={"email": "c@d.co"}),
    ]
    users = map_fields(records)
    assert [u.email for u in users] == ["a@b.co", "", "c@d.co"]


def test_map_fields_empty_mapping_list_means_auto():
    users = map_fields([{"e_mail": "a@b.co"}], [])
    assert users[0].email == "a@b.co"


def test_aliases_for_keeps_priority_order():
    assert aliases_for("phone_number")[0] == "phone"
    assert all(target == "email" for alias, target in AUTO_MAPPINGS if alias in aliases_for("email"))
