from datetime import date, time, timedelta

from conftest import TRIP_DATE, create_booking, create_business, create_service, create_slot, create_user

from boatbook.domain.analytics.service import AnalyticsService


def seed_bookings(db, business, service):
    morning = create_slot(db, business, service)
    afternoon = create_slot(db, business, service, start=time(14, 0))
    later_in_month = create_slot(db, business, service, slot_date=TRIP_DATE + timedelta(days=3))
    next_month = create_slot(db, business, service, slot_date=TRIP_DATE + timedelta(days=20))
    long_ago = create_slot(db, business, service, slot_date=TRIP_DATE - timedelta(days=100))

    create_booking(db, business, service, morning, ref_code="NTT-AAA111", status="confirmed", total=140)
    create_booking(db, business, service, afternoon, ref_code="NTT-AAA222", status="pending", total=70)
    create_booking(db, business, service, later_in_month, ref_code="NTT-AAA333", status="completed", total=200)
    create_booking(db, business, service, next_month, ref_code="NTT-AAA444", status="cancelled", total=50)
    create_booking(db, business, service, long_ago, ref_code="NTT-AAA555", status="confirmed", total=30)


def test_summary_counts_and_revenue(db, owner, business, service):
    seed_bookings(db, business, service)
    retired = create_service(db, business, name="Retired Charter")
    retired.is_active = False
    db.commit()

    summary = AnalyticsService(db).get_summary(business, today=TRIP_DATE)

    assert summary.total_bookings == 5
    assert summary.today_bookings == 2
    assert summary.month_bookings == 3
    assert summary.total_revenue == 370
    assert summary.active_services == 1


def test_daily_totals_only_count_paid_revenue(db, business, service):
    seed_bookings(db, business, service)

    summary = AnalyticsService(db).get_summary(business, today=TRIP_DATE)

    assert [(d.date, d.bookings, d.revenue) for d in summary.daily] == [
        (TRIP_DATE, 2, 140),
        (TRIP_DATE + timedelta(days=3), 1, 200),
        (TRIP_DATE + timedelta(days=20), 1, 0),
    ]


def test_other_business_is_not_counted(db, business, service):
    other = create_business(db, create_user(db, email="other@example.com"), slug="other-boats")
    other_service = create_service(db, other)
    other_slot = create_slot(db, other, other_service)
    create_booking(db, other, other_service, other_slot, ref_code="NTT-ZZZ999", status="confirmed", total=999)

    summary = AnalyticsService(db).get_summary(business, today=TRIP_DATE)

    assert summary.total_bookings == 0
    assert summary.total_revenue == 0
    assert summary.active_services == 1
    assert summary.daily == []


def test_month_ends_on_its_last_day(db, business, service):
    december = create_slot(db, business, service, slot_date=date(TRIP_DATE.year, 12, 31))
    january = create_slot(db, business, service, slot_date=date(TRIP_DATE.year + 1, 1, 1))
    create_booking(db, business, service, december, ref_code="NTT-DEC310")
    create_booking(db, business, service, january, ref_code="NTT-JAN010")

    summary = AnalyticsService(db).get_summary(business, today=date(TRIP_DATE.year, 12, 1))

    assert summary.month_bookings == 1


def test_analytics_endpoint(client, auth, db, owner, business, service, slot):
    create_booking(db, business, service, slot, status="confirmed")
    auth.login(owner)

    response = client.get("/api/analytics")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {
        "total_bookings",
        "today_bookings",
        "month_bookings",
        "total_revenue",
        "active_services",
        "daily",
    }
    assert body["total_bookings"] == 1
    assert body["total_revenue"] == 140
    assert body["active_services"] == 1


def test_staff_cannot_view_analytics(client, auth, db, business):
    auth.login(create_user(db, email="crew@example.com", role="staff", business_id=business.id))
    assert client.get("/api/analytics").status_code == 403


def test_analytics_requires_a_business(client, auth, db):
    auth.login(create_user(db, email="new@example.com", role="owner"))
    assert client.get("/api/analytics").status_code == 404
