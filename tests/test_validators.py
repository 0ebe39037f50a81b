from datetime import date, time

import pytest

from boatbook.shared.validators import (
    calculate_age,
    format_ic,
    gender_from_ic,
    is_malaysian_ic,
    parse_hhmm,
    parse_ic,
    parse_ic_dob,
    passenger_type_for_age,
    validate_email,
    validate_my_phone,
    validate_slug,
)


class TestMyKad:
    def test_recognises_twelve_digit_ic_with_or_without_dashes(self):
        assert is_malaysian_ic("900520-14-5672")
        assert is_malaysian_ic("900520145672")
        assert not is_malaysian_ic("A12345678")
        assert not is_malaysian_ic("901320-14-5672")  # month 13

    def test_birth_date_century(self):
        today = date(2026, 10, 18)
        assert parse_ic_dob("900520-14-5672", today) == date(1990, 5, 20)
        assert parse_ic_dob("150601-10-1235", today) == date(2015, 6, 1)

    def test_invalid_calendar_date_is_rejected(self):
        assert parse_ic_dob("900231-14-5672", date(2026, 1, 1)) is None

    def test_gender_from_last_digit(self):
        assert gender_from_ic("900520-14-5671") == "L"
        assert gender_from_ic("900520-14-5672") == "P"
        assert gender_from_ic("PASSPORT1") is None

    def test_format_ic_adds_dashes(self):
        assert format_ic("900520145672") == "900520-14-5672"
        assert format_ic("A1234567") == "A1234567"

    def test_parse_ic_uses_trip_date_for_age(self):
        info = parse_ic("100615-14-5671", date(2022, 6, 14))
        assert info["dob"] == date(2010, 6, 15)
        assert info["age"] == 11
        assert info["passenger_type"] == "child"
        assert info["gender"] == "L"
        assert info["nationality"] == "MALAYSIA"
        assert info["state_code"] == "14"

    def test_parse_ic_returns_none_for_passports(self):
        assert parse_ic("K12345678", date(2026, 1, 1)) is None


class TestAges:
    def test_age_before_and_after_birthday(self):
        assert calculate_age(date(2000, 6, 15), date(2020, 6, 14)) == 19
        assert calculate_age(date(2000, 6, 15), date(2020, 6, 15)) == 20

    def test_age_never_negative(self):
        assert calculate_age(date(2030, 1, 1), date(2026, 1, 1)) == 0

    @pytest.mark.parametrize(
        "age,expected",
        [(0, "infant"), (2, "infant"), (3, "child"), (11, "child"), (12, "adult"), (70, "adult")],
    )
    def test_passenger_type_boundaries(self, age, expected):
        assert passenger_type_for_age(age) == expected


class TestFieldValidators:
    def test_slug_rules(self):
        assert validate_slug("pulau-tours-2") == "pulau-tours-2"
        with pytest.raises(ValueError):
            validate_slug("ab")
        with pytest.raises(ValueError):
            validate_slug("Pulau Tours")

    def test_phone_needs_ten_characters(self):
        assert validate_my_phone("0123456789") == "0123456789"
        with pytest.raises(ValueError):
            validate_my_phone("012345")

    def test_email_is_lowercased(self):
        assert validate_email(" Aisyah@Example.COM ") == "aisyah@example.com"
        with pytest.raises(ValueError):
            validate_email("not-an-email")

    def test_hhmm(self):
        assert parse_hhmm("09:30") == time(9, 30)
        assert parse_hhmm("23:59:00") == time(23, 59)
        with pytest.raises(ValueError):
            parse_hhmm("24:00")
