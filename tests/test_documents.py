from datetime import date, time

from conftest import create_booking, create_business, create_slot, create_user

from boatbook.domain.documents.pdf_generator import (
    ManifestPDFGenerator,
    ReceiptPDFGenerator,
    TicketPDFGenerator,
    format_currency,
    format_long_date,
    format_malay_date,
    format_time_12h,
    text,
)
from boatbook.domain.documents.qr import generate_qr_png, verification_url
from boatbook.domain.documents.repository import DocumentRepository


def load(db, booking):
    return DocumentRepository.get_booking_for_document(db, booking.public_id)


def test_formatters():
    assert format_time_12h(time(0, 5)) == "12:05 AM"
    assert format_time_12h(time(9, 0)) == "9:00 AM"
    assert format_time_12h(time(12, 30)) == "12:30 PM"
    assert format_time_12h(time(21, 15)) == "9:15 PM"
    assert format_time_12h(None) == "-"
    assert format_long_date(date(2026, 10, 17)) == "Saturday, 17 October 2026"
    assert format_malay_date(date(2026, 8, 3)) == "3 OGO 2026"
    assert format_currency(140) == "RM 140.00"
    assert format_currency(None) == "RM 0.00"
    assert text("Travel & Tours") == "Travel &amp; Tours"
    assert text("") == "-"


def test_qr_encodes_verification_url():
    assert verification_url("NTT-ABC123") == "https://api.example.test/verify/NTT-ABC123"
    assert generate_qr_png("NTT-ABC123").startswith(b"\x89PNG")


def test_generators_produce_pdfs(db, business, service, slot):
    booking = load(db, create_booking(db, business, service, slot))
    for generator in (TicketPDFGenerator, ReceiptPDFGenerator, ManifestPDFGenerator):
        assert generator(booking).generate().startswith(b"%PDF")


def test_manifest_counts_crew_from_settings(db, owner, service):
    business = create_business(db, owner, slug="crewed", crew_count=3)
    booking = create_booking(db, business, service, create_slot(db, business))
    counts = ManifestPDFGenerator(load(db, booking)).summary_counts()
    assert counts == {"adults": 1, "children": 1, "infants": 0, "crew": 3, "total_souls": 5}


def test_manifest_allows_zero_crew(db, owner, service):
    business = create_business(db, owner, slug="no-crew", crew_count=0)
    booking = create_booking(db, business, service, create_slot(db, business))
    assert ManifestPDFGenerator(load(db, booking)).summary_counts()["total_souls"] == 2


def test_boat_details_fall_back_to_defaults(db, business, service, slot):
    generator = ManifestPDFGenerator(load(db, create_booking(db, business, service, slot)))
    assert generator.boat_name == "NASROM CABIN 01"
    assert generator.boat_reg_no == "TRK 1234"
    assert generator.trip_time == time(9, 0)


def test_ticket_download(client, db, business, service, slot):
    booking = create_booking(db, business, service, slot)

    response = client.get(f"/api/ticket/{booking.public_id}")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="ticket-NTT-ABC123.pdf"'
    assert response.headers["cache-control"] == "private, max-age=3600"
    assert response.content.startswith(b"%PDF")


def test_receipt_download(client, db, business, service, slot):
    booking = create_booking(db, business, service, slot, status="confirmed")
    response = client.get(f"/api/receipt/{booking.public_id}")
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


def test_unknown_booking(client):
    response = client.get("/api/ticket/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json() == {"error": "Booking not found"}


def test_manifest_requires_login(client, db, business, service, slot):
    booking = create_booking(db, business, service, slot)
    assert client.get(f"/api/manifest/{booking.public_id}").status_code == 401


def test_manifest_for_owner(client, auth, db, owner, business, service, slot):
    booking = create_booking(db, business, service, slot)
    auth.login(owner)

    response = client.get(f"/api/manifest/{booking.public_id}")

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="manifest-NTT-ABC123.pdf"'


def test_manifest_for_staff_member(client, auth, db, business, service, slot):
    booking = create_booking(db, business, service, slot)
    staff = create_user(db, email="crew@example.com", role="staff", business_id=business.id)
    auth.login(staff)
    assert client.get(f"/api/manifest/{booking.public_id}").status_code == 200


def test_manifest_forbidden_for_customers(client, auth, db, business, service, slot):
    booking = create_booking(db, business, service, slot)
    auth.login(create_user(db, email="guest@example.com", role="customer"))
    assert client.get(f"/api/manifest/{booking.public_id}").status_code == 403


def test_manifest_hidden_from_other_business(client, auth, db, business, service, slot):
    booking = create_booking(db, business, service, slot)
    rival = create_user(db, email="rival@example.com")
    create_business(db, rival, slug="rival-tours")
    auth.login(rival)

    response = client.get(f"/api/manifest/{booking.public_id}")

    assert response.status_code == 404
    assert response.json() == {"error": "Booking not found"}
