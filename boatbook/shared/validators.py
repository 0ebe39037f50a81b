"""Shared validation utilities"""

import re
from datetime import date, datetime, time
from typing import Optional

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")

ADULT_MIN_AGE = 12
CHILD_MIN_AGE = 3


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_slug(slug: str) -> str:
    """Business URL slug: lowercase letters, digits and hyphens, at least 3 chars"""
    slug = (slug or "").strip()
    if len(slug) < 3:
        raise ValueError("Business URL must be at least 3 characters")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Business URL can only contain lowercase letters, numbers, and hyphens")
    return slug


def validate_my_phone(phone: Optional[str]) -> Optional[str]:
    """Phone numbers are stored as typed; only the length is checked"""
    if phone is None:
        return phone
    phone = phone.strip()
    if len(phone) < 10:
        raise ValueError("Phone number must be at least 10 characters")
    return phone


def parse_hhmm(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into a time"""
    value = (value or "").strip()
    if not HHMM_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value, fmt).time()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD"""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError("Date must be in YYYY-MM-DD format") from e


# Malaysian identity card (MyKad) helpers


def clean_ic(ic: str) -> str:
    return re.sub(r"[-\s]", "", ic or "")


def is_malaysian_ic(ic: str) -> bool:
    """
    A MyKad number is 12 digits, YYMMDD-PB-###G, where the first six
    digits are the birth date.
    """
    cleaned = clean_ic(ic)
    if not re.fullmatch(r"\d{12}", cleaned):
        return False
    month = int(cleaned[2:4])
    day = int(cleaned[4:6])
    return 1 <= month <= 12 and 1 <= day <= 31


def parse_ic_dob(ic: str, today: Optional[date] = None) -> Optional[date]:
    """
    Birth date encoded in a MyKad number.

    Two-digit years at or below the current year's are 2000s, the rest 1900s.
    Returns None for invalid calendar dates such as 31 February.
    """
    if not is_malaysian_ic(ic):
        return None
    cleaned = clean_ic(ic)
    today = today or date.today()
    yy = int(cleaned[0:2])
    century = 2000 if yy <= today.year % 100 else 1900
    try:
        return date(century + yy, int(cleaned[2:4]), int(cleaned[4:6]))
    except ValueError:
        return None


def gender_from_ic(ic: str) -> Optional[str]:
    """Odd last digit is male (L, lelaki), even is female (P, perempuan)"""
    if not is_malaysian_ic(ic):
        return None
    return "L" if int(clean_ic(ic)[-1]) % 2 == 1 else "P"


def state_code_from_ic(ic: str) -> Optional[str]:
    if not is_malaysian_ic(ic):
        return None
    return clean_ic(ic)[6:8]


def calculate_age(dob: date, on_date: Optional[date] = None) -> int:
    """Age in whole years on the given date (the trip date), never negative"""
    on_date = on_date or date.today()
    age = on_date.year - dob.year
    if (on_date.month, on_date.day) < (dob.month, dob.day):
        age -= 1
    return max(0, age)


def passenger_type_for_age(age: int) -> str:
    if age >= ADULT_MIN_AGE:
        return "adult"
    if age >= CHILD_MIN_AGE:
        return "child"
    return "infant"


def format_ic(ic: str) -> str:
    """YYMMDD-SS-GGGG for valid MyKad numbers, the input untouched otherwise"""
    if not is_malaysian_ic(ic):
        return ic
    cleaned = clean_ic(ic)
    return f"{cleaned[0:6]}-{cleaned[6:8]}-{cleaned[8:12]}"


def parse_ic(ic: str, trip_date: Optional[date] = None) -> Optional[dict]:
    """Everything a MyKad number tells us about a passenger, or None"""
    dob = parse_ic_dob(ic)
    if dob is None:
        return None
    age = calculate_age(dob, trip_date)
    return {
        "dob": dob,
        "gender": gender_from_ic(ic),
        "age": age,
        "passenger_type": passenger_type_for_age(age),
        "nationality": "MALAYSIA",
        "state_code": state_code_from_ic(ic),
    }
