from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from conftest import TRIP_DATE, create_business, create_slot, create_user

from boatbook.domain.availability.service import (
    AvailabilityService,
    generate_recurring_dates,
    leading_int,
    sunday_based_weekday,
    week_of_month,
)
from boatbook.domain.availability.schemas import RecurringSlotCreate
from boatbook.models import Availability


class TestCheckAvailability:
    def test_enough_capacity(self, client, db, business, service):
        slot = create_slot(db, business, service, capacity=10, booked=4)

        response = client.get(f"/api/availability/check?slot_id={slot.id}&pax=3")

        assert response.status_code == 200
        assert response.json() == {
            "available": True,
            "remaining": 6,
            "capacity": 10,
            "booked": 4,
            "error": None,
        }

    def test_not_enough_capacity(self, client, db, business, service):
        slot = create_slot(db, business, service, capacity=10, booked=8)

        body = client.get(f"/api/availability/check?slot_id={slot.id}&pax=3").json()

        assert body["available"] is False
        assert body["remaining"] == 2
        assert body["error"] == "Not enough capacity"

    def test_exactly_full_request_is_available(self, client, db, business, service):
        slot = create_slot(db, business, service, capacity=5, booked=2)
        body = client.get(f"/api/availability/check?slot_id={slot.id}&pax=3").json()
        assert body["available"] is True
        assert body["remaining"] == 3

    def test_pax_defaults_to_one(self, client, db, business, service):
        slot = create_slot(db, business, service, capacity=1, booked=0)
        body = client.get(f"/api/availability/check?slot_id={slot.id}").json()
        assert body["available"] is True

    def test_missing_slot_id(self, client):
        response = client.get("/api/availability/check")
        assert response.status_code == 400
        assert response.json() == {"error": "slot_id is required"}

    def test_invalid_pax(self, client, slot):
        for pax in ("0", "-2", "abc"):
            response = client.get(f"/api/availability/check?slot_id={slot.id}&pax={pax}")
            assert response.status_code == 400
            assert response.json() == {"error": "pax must be a positive number"}

    def test_unknown_slot(self, client):
        response = client.get("/api/availability/check?slot_id=9999&pax=1")
        assert response.status_code == 404
        assert response.json() == {"available": False, "error": "Slot not found"}

    def test_pax_reads_leading_integer(self, client, db, business, service):
        slot = create_slot(db, business, service, capacity=3, booked=1)
        for pax in ("2abc", "2.5", " 2"):
            response = client.get("/api/availability/check", params={"slot_id": slot.id, "pax": pax})
            assert response.status_code == 200
            assert response.json()["available"] is True
        body = client.get("/api/availability/check", params={"slot_id": slot.id, "pax": "3.9"}).json()
        assert body["available"] is False

    def test_out_of_range_slot_id_is_not_found(self, client):
        for slot_id in ("99999999999999999999", "2147483648", "²", "-1", "1e3"):
            response = client.get("/api/availability/check", params={"slot_id": slot_id, "pax": "1"})
            assert response.status_code == 404
            assert response.json() == {"available": False, "error": "Slot not found"}

    def test_leading_int(self):
        assert leading_int("12") == 12
        assert leading_int("2abc") == 2
        assert leading_int("-3") == -3
        assert leading_int("abc") == 0

    def test_blocked_slot(self, client, db, business, service):
        slot = create_slot(db, business, service, blocked=True)
        response = client.get(f"/api/availability/check?slot_id={slot.id}&pax=1")
        assert response.status_code == 200
        assert response.json() == {"available": False, "remaining": 0, "error": "This date is blocked"}

    def test_past_slot(self, client, db, business, service):
        yesterday = date.today() - timedelta(days=1)
        slot = create_slot(db, business, service, slot_date=yesterday)
        response = client.get(f"/api/availability/check?slot_id={slot.id}&pax=1")
        assert response.status_code == 200
        assert response.json() == {"available": False, "remaining": 0, "error": "This slot is in the past"}

    def test_past_check_uses_jetty_time(self, db, business, service):
        slot = create_slot(db, business, service, slot_date=date(2026, 5, 1), start=time(9, 0))
        tz = ZoneInfo("Asia/Kuala_Lumpur")
        svc = AvailabilityService(db)

        _, before = svc.check_availability(str(slot.id), "1", now=datetime(2026, 5, 1, 8, 59, tzinfo=tz))
        _, after = svc.check_availability(str(slot.id), "1", now=datetime(2026, 5, 1, 9, 1, tzinfo=tz))

        assert before["available"] is True
        assert after["error"] == "This slot is in the past"


class TestSlotManagement:
    def test_requires_authentication(self, client):
        response = client.get("/api/availability?year=2026&month=3")
        assert response.status_code == 401

    def test_create_and_list_slot(self, client, auth, owner, business, service):
        auth.login(owner)
        response = client.post(
            "/api/availability/slots",
            json={
                "service_id": service.id,
                "date": TRIP_DATE.isoformat(),
                "start_time": "09:00",
                "end_time": "10:00",
                "capacity": 12,
            },
        )
        assert response.status_code == 200
        assert response.json()["remaining"] == 12

        slots = client.get(f"/api/availability?year={TRIP_DATE.year}&month={TRIP_DATE.month}").json()
        assert len(slots) == 1
        assert slots[0]["service_name"] == service.name
        assert slots[0]["start_time"] == "09:00:00"

    def test_duplicate_slot_rejected(self, client, auth, owner, business, service, slot):
        auth.login(owner)
        response = client.post(
            "/api/availability/slots",
            json={
                "service_id": service.id,
                "date": slot.date.isoformat(),
                "start_time": "09:00",
                "end_time": "10:00",
                "capacity": 5,
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "A slot already exists at this time"

    def test_cannot_delete_slot_with_bookings(self, client, auth, db, owner, business, service):
        auth.login(owner)
        slot = create_slot(db, business, service, booked=2)
        response = client.delete(f"/api/availability/slots/{slot.id}")
        assert response.status_code == 400

    def test_delete_empty_slot(self, client, auth, owner, slot):
        auth.login(owner)
        assert client.delete(f"/api/availability/slots/{slot.id}").json() == {"success": True}

    def test_other_business_slot_is_not_found(self, client, auth, db, slot):
        intruder = create_user(db, email="other@example.com")
        create_business(db, intruder, slug="other-boats")
        auth.login(intruder)
        assert client.delete(f"/api/availability/slots/{slot.id}").status_code == 404

    def test_block_empty_date_creates_placeholder(self, client, auth, db, owner, business):
        auth.login(owner)
        response = client.post("/api/availability/block-date", json={"date": "2030-01-02", "blocked": True})
        assert response.json() == {"success": True}

        placeholder = db.query(Availability).filter(Availability.date == date(2030, 1, 2)).one()
        assert placeholder.is_blocked is True
        assert placeholder.capacity == 0
        assert placeholder.start_time == time(0, 0)
        assert placeholder.end_time == time(23, 59)

    def test_block_and_unblock_existing_slots(self, client, auth, db, owner, slot):
        auth.login(owner)
        client.post("/api/availability/block-date", json={"date": slot.date.isoformat(), "blocked": True})
        db.refresh(slot)
        assert slot.is_blocked is True

        client.post("/api/availability/block-date", json={"date": slot.date.isoformat(), "blocked": False})
        db.refresh(slot)
        assert slot.is_blocked is False

    def test_recurring_weekly_slots(self, client, auth, owner, business, service):
        auth.login(owner)
        # 2030-01-06 is a Sunday; Mondays and Wednesdays over two weeks
        response = client.post(
            "/api/availability/slots/recurring",
            json={
                "pattern_type": "weekly",
                "service_id": service.id,
                "days_of_week": [1, 3],
                "start_date": "2030-01-06",
                "end_date": "2030-01-19",
                "start_time": "08:00",
                "end_time": "09:00",
                "capacity": 20,
            },
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 4, "created": 4}

        again = client.post(
            "/api/availability/slots/recurring",
            json={
                "pattern_type": "weekly",
                "service_id": service.id,
                "days_of_week": [1, 3],
                "start_date": "2030-01-06",
                "end_date": "2030-01-19",
                "start_time": "08:00",
                "end_time": "09:00",
                "capacity": 20,
            },
        )
        assert again.json() == {"success": True, "count": 4, "created": 0}

    def test_recurring_without_matches(self, client, auth, owner, business):
        auth.login(owner)
        response = client.post(
            "/api/availability/slots/recurring",
            json={
                "pattern_type": "weekly",
                "days_of_week": [],
                "start_date": "2030-01-06",
                "end_date": "2030-01-19",
                "start_time": "08:00",
                "end_time": "09:00",
                "capacity": 20,
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "No matching dates found"


class TestRecurrence:
    def test_sunday_based_weekday(self):
        assert sunday_based_weekday(date(2030, 1, 6)) == 0  # Sunday
        assert sunday_based_weekday(date(2030, 1, 12)) == 6  # Saturday

    def test_week_of_month(self):
        # March 2030 starts on a Friday
        assert week_of_month(date(2030, 3, 1)) == 1
        assert week_of_month(date(2030, 3, 3)) == 2

    def test_monthly_last_week(self):
        data = RecurringSlotCreate(
            pattern_type="monthly",
            monthly_week="last",
            days_of_week=[5],  # Friday
            start_date=date(2030, 3, 1),
            end_date=date(2030, 3, 31),
            start_time="09:00",
            end_time="10:00",
            capacity=5,
        )
        assert generate_recurring_dates(data) == [date(2030, 3, 29)]

    def test_custom_dates_are_deduplicated(self):
        data = RecurringSlotCreate(
            pattern_type="custom",
            custom_dates=[date(2030, 2, 1), date(2030, 2, 1), date(2030, 2, 3)],
            start_time="09:00",
            end_time="10:00",
            capacity=5,
        )
        assert generate_recurring_dates(data) == [date(2030, 2, 1), date(2030, 2, 3)]
