"""
Booking document PDF generators
Boarding tickets, booking receipts and the marine passenger manifest
"""

import io
import logging
from datetime import date, datetime, time
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ...config import (
    DEFAULT_BOAT_NAME,
    DEFAULT_BOAT_REG_NO,
    DEFAULT_CREW_COUNT,
    DEFAULT_DESTINATION,
    DEFAULT_OPERATOR_NAME,
)
from ...models import Booking, BusinessSettings
from .qr import generate_qr_png

logger = logging.getLogger(__name__)

MALAY_MONTHS = ["JAN", "FEB", "MAC", "APR", "MEI", "JUN", "JUL", "OGO", "SEP", "OKT", "NOV", "DIS"]


def format_time_12h(value: Optional[time]) -> str:
    if value is None:
        return "-"
    h12 = value.hour % 12 or 12
    ampm = "PM" if value.hour >= 12 else "AM"
    return f"{h12}:{value.minute:02d} {ampm}"


def format_long_date(value: date) -> str:
    """Saturday, 17 October 2026"""
    return f"{value.strftime('%A')}, {value.day} {value.strftime('%B')} {value.year}"


def format_malay_date(value: date) -> str:
    """18 OKT 2026"""
    return f"{value.day} {MALAY_MONTHS[value.month - 1]} {value.year}"


def format_currency(amount: Optional[float]) -> str:
    return f"RM {amount or 0:.2f}"


def text(value) -> str:
    """Escape a value for use inside a Paragraph"""
    return escape(str(value)) if value not in (None, "") else "-"


class BookingPDFGenerator:
    """Shared page setup and styles for booking documents"""

    title = "Booking"

    def __init__(self, booking: Booking):
        self.booking = booking
        self.business = booking.business
        self.settings: Optional[BusinessSettings] = self.business.settings if self.business else None

        # PDF settings
        self.page_width, self.page_height = A4
        self.margin = 0.6 * inch
        self.content_width = self.page_width - (2 * self.margin)

        # Brand colors (teal / orange)
        self.brand_color = colors.HexColor("#168D95")
        self.accent_color = colors.HexColor("#DE7F21")
        self.dark_gray = colors.HexColor("#1F2937")
        self.muted_gray = colors.HexColor("#6B7280")
        self.light_gray = colors.HexColor("#F3F4F6")

        styles = getSampleStyleSheet()
        self.styles = {
            "brand": ParagraphStyle(
                "Brand", parent=styles["Heading1"], fontSize=18, textColor=self.brand_color, spaceAfter=4
            ),
            "title": ParagraphStyle(
                "DocTitle",
                parent=styles["Heading2"],
                fontSize=14,
                textColor=self.dark_gray,
                alignment=2,  # Right
            ),
            "heading": ParagraphStyle(
                "SectionHeading",
                parent=styles["Heading3"],
                fontSize=11,
                textColor=self.brand_color,
                spaceBefore=14,
                spaceAfter=6,
            ),
            "body": ParagraphStyle(
                "Body", parent=styles["Normal"], fontSize=9, textColor=self.dark_gray, leading=12
            ),
            "label": ParagraphStyle("Label", parent=styles["Normal"], fontSize=8, textColor=self.muted_gray),
            "value": ParagraphStyle(
                "Value", parent=styles["Normal"], fontSize=10, textColor=self.dark_gray, fontName="Helvetica-Bold"
            ),
            "center": ParagraphStyle(
                "Center", parent=styles["Normal"], fontSize=9, textColor=self.muted_gray, alignment=1
            ),
            "ref": ParagraphStyle(
                "RefLarge",
                parent=styles["Title"],
                fontSize=26,
                textColor=self.dark_gray,
                alignment=1,  # Center
                spaceAfter=4,
            ),
            "footer": ParagraphStyle(
                "Footer", parent=styles["Normal"], fontSize=8, textColor=self.muted_gray, alignment=1
            ),
        }

    @property
    def business_name(self) -> str:
        return self.business.name if self.business else DEFAULT_OPERATOR_NAME

    @property
    def service_name(self) -> str:
        return self.booking.service.name if self.booking.service else "-"

    @property
    def trip_time(self) -> Optional[time]:
        if self.booking.availability and self.booking.availability.start_time:
            return self.booking.availability.start_time
        return self.booking.start_time

    @property
    def boat_name(self) -> str:
        return (self.settings.boat_name if self.settings else None) or DEFAULT_BOAT_NAME

    @property
    def boat_reg_no(self) -> str:
        return (self.settings.boat_reg_no if self.settings else None) or DEFAULT_BOAT_REG_NO

    @property
    def destination(self) -> str:
        return (self.settings.default_destination if self.settings else None) or DEFAULT_DESTINATION

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        logger.info(f"📄 Generating {self.title.lower()} PDF for booking {self.booking.ref_code}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"{self.title} - {self.booking.ref_code}",
        )
        doc.build(self.build_story(), onFirstPage=self._add_page_number, onLaterPages=self._add_page_number)

        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"✅ Generated {self.title.lower()} PDF: {len(pdf_bytes)} bytes")
        return pdf_bytes

    def build_story(self) -> list:
        raise NotImplementedError

    def _header(self, title: str) -> Table:
        left = [Paragraph(text(self.business_name), self.styles["brand"])]
        if self.business and self.business.address:
            left.append(Paragraph(text(self.business.address), self.styles["label"]))
        right = [
            Paragraph(title, self.styles["title"]),
            Paragraph(f"Ref: {text(self.booking.ref_code)}", self.styles["title"].clone("RefSmall", fontSize=9)),
        ]
        header = Table([[left, right]], colWidths=[self.content_width * 0.6, self.content_width * 0.4])
        header.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, 0), 2, self.brand_color),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 10),
                ]
            )
        )
        return header

    def _qr_image(self, size: float = 1.6 * inch) -> Image:
        return Image(io.BytesIO(generate_qr_png(self.booking.ref_code)), width=size, height=size)

    def _grid_table(self, rows: list[list], col_widths: list[float]) -> Table:
        """Header row in brand colour, striped body"""
        table = Table(rows, colWidths=col_widths, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, self.light_gray]),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#D1D5DB")),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        return table

    def _add_page_number(self, canvas_obj, doc):
        """Add page numbers to PDF"""
        page_num = canvas_obj.getPageNumber()
        canvas_obj.setFont("Helvetica", 8)
        canvas_obj.setFillColor(colors.grey)
        canvas_obj.drawRightString(self.page_width - self.margin, self.margin / 2, f"Page {page_num}")


class TicketPDFGenerator(BookingPDFGenerator):
    """Boarding ticket: QR code, trip details and the passenger list"""

    title = "Boarding Ticket"

    def build_story(self) -> list:
        booking = self.booking
        story = [self._header("BOARDING TICKET"), Spacer(1, 0.25 * inch)]

        # QR code and ref, centred
        qr = Table([[self._qr_image()]], colWidths=[self.content_width])
        qr.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER")]))
        story.append(qr)
        story.append(Paragraph(text(booking.ref_code), self.styles["ref"]))
        story.append(Paragraph("Scan this code at the terminal", self.styles["center"]))
        story.append(Spacer(1, 0.2 * inch))

        def block(label: str, value: str) -> list:
            return [Paragraph(label, self.styles["label"]), Paragraph(text(value), self.styles["value"])]

        half = self.content_width / 2
        trip = Table(
            [
                [block("SERVICE", self.service_name), block("DESTINATION", self.destination)],
                [block("DATE", format_long_date(booking.booking_date)), block("TIME", format_time_12h(self.trip_time))],
                [block("BOAT INFO", self.boat_name), block("PASSENGERS", f"{booking.pax} Pax")],
            ],
            colWidths=[half, half],
        )
        trip.setStyle(
            TableStyle(
                [
                    ("BOX", (0, 0), (-1, -1), 1, self.brand_color),
                    ("BACKGROUND", (0, 0), (-1, -1), self.light_gray),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("TOPPADDING", (0, 0), (-1, -1), 8),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        story.append(trip)

        story.append(Paragraph("PASSENGER MANIFEST", self.styles["heading"]))
        rows = [["#", "Name", "Type", "IC / Passport"]]
        for index, passenger in enumerate(booking.passengers, start=1):
            rows.append(
                [
                    f"{index}.",
                    Paragraph(text(passenger.full_name), self.styles["body"]),
                    passenger.passenger_type.capitalize(),
                    passenger.ic_passport or "-",
                ]
            )
        w = self.content_width
        story.append(self._grid_table(rows, [0.08 * w, 0.47 * w, 0.15 * w, 0.30 * w]))

        story.append(Spacer(1, 0.3 * inch))
        story.append(Paragraph("<b>IMPORTANT NOTICE</b>", self.styles["footer"]))
        story.append(
            Paragraph(
                "Please arrive at the jetty 30 minutes before departure time. "
                "This ticket is valid only for the date and time specified.",
                self.styles["footer"],
            )
        )
        story.append(Paragraph(f"Generated on {format_malay_date(datetime.utcnow().date())}", self.styles["footer"]))
        return story


class ReceiptPDFGenerator(BookingPDFGenerator):
    """Booking receipt: customer, passengers and the payment summary"""

    title = "Booking Receipt"

    def build_story(self) -> list:
        booking = self.booking
        story = [self._header("BOOKING RECEIPT"), Spacer(1, 0.2 * inch)]

        status_line = (
            f"Booking Reference: <b>{text(booking.ref_code)}</b> &nbsp;&nbsp; "
            f"Status: <b>{text(booking.status.upper())}</b>"
        )
        ref_row = Table(
            [[Paragraph(status_line, self.styles["body"]), self._qr_image(1.1 * inch)]],
            colWidths=[self.content_width - 1.3 * inch, 1.3 * inch],
        )
        ref_row.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "MIDDLE"), ("ALIGN", (1, 0), (1, 0), "RIGHT")]))
        story.append(ref_row)

        story.append(Paragraph("Booking Details", self.styles["heading"]))
        for label, value in (
            ("Service", self.service_name),
            ("Date", format_long_date(booking.booking_date)),
            ("Time", format_time_12h(self.trip_time)),
            ("Total Passengers", f"{booking.pax} person(s)"),
        ):
            story.append(Paragraph(f"{label}: <b>{text(value)}</b>", self.styles["body"]))

        story.append(Paragraph("Customer Details", self.styles["heading"]))
        for label, value in (
            ("Name", booking.customer_name),
            ("Email", booking.customer_email),
            ("Phone", booking.customer_phone),
        ):
            story.append(Paragraph(f"{label}: <b>{text(value)}</b>", self.styles["body"]))

        if booking.passengers:
            story.append(Paragraph("Passenger List", self.styles["heading"]))
            for index, passenger in enumerate(booking.passengers, start=1):
                story.append(
                    Paragraph(
                        f"{index}. {text(passenger.full_name)} ({passenger.passenger_type})",
                        self.styles["body"],
                    )
                )

        story.append(Paragraph("Payment Summary", self.styles["heading"]))
        w = self.content_width
        rows = [["Item", "Qty", "Price", "Total"]]
        for item in booking.items:
            rows.append(
                [
                    Paragraph(text(item.name), self.styles["body"]),
                    str(item.quantity),
                    format_currency(item.unit_price),
                    format_currency(item.total_price),
                ]
            )
        story.append(self._grid_table(rows, [0.49 * w, 0.11 * w, 0.2 * w, 0.2 * w]))

        totals = [["Subtotal", format_currency(booking.subtotal)]]
        if booking.addons_total:
            totals.append(["Add-ons", format_currency(booking.addons_total)])
        totals.append(["Total", format_currency(booking.total_amount)])
        totals_table = Table(totals, colWidths=[0.8 * w, 0.2 * w])
        totals_table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                    ("TEXTCOLOR", (0, -1), (-1, -1), self.brand_color),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, self.brand_color),
                ]
            )
        )
        story.append(totals_table)

        story.append(Spacer(1, 0.4 * inch))
        story.append(Paragraph("Thank you for your booking!", self.styles["footer"]))
        contacts = [c for c in (self.business.contact_email, self.business.contact_phone) if c] if self.business else []
        if contacts:
            story.append(Paragraph(text(" | ".join(contacts)), self.styles["footer"]))
        return story


class ManifestPDFGenerator(BookingPDFGenerator):
    """Passenger manifest in the bilingual format the marine department expects"""

    title = "Passenger Manifest"

    @property
    def operator(self) -> str:
        return self.business.name if self.business and self.business.name else DEFAULT_OPERATOR_NAME

    @property
    def crew_count(self) -> int:
        crew = self.settings.crew_count if self.settings else None
        return DEFAULT_CREW_COUNT if crew is None else crew

    def summary_counts(self) -> dict:
        passengers = self.booking.passengers
        counts = {
            "adults": sum(1 for p in passengers if p.passenger_type == "adult"),
            "children": sum(1 for p in passengers if p.passenger_type == "child"),
            "infants": sum(1 for p in passengers if p.passenger_type == "infant"),
            "crew": self.crew_count,
        }
        counts["total_souls"] = len(passengers) + counts["crew"]
        return counts

    def build_story(self) -> list:
        booking = self.booking
        w = self.content_width
        heading = self.styles["title"].clone("ManifestTitle", alignment=1, fontSize=14)
        story = [
            Paragraph("SENARAI PENUMPANG / PASSENGER MANIFEST", heading),
            Paragraph("JABATAN LAUT MALAYSIA", self.styles["center"]),
            Spacer(1, 0.2 * inch),
        ]

        info = [
            ("Nama Bot / Boat Name:", self.boat_name),
            ("No. Pendaftaran / Reg No:", self.boat_reg_no),
            ("Tarikh / Date:", format_malay_date(booking.booking_date)),
            ("Masa / Time:", format_time_12h(self.trip_time)),
            ("Destinasi / Destination:", self.destination),
            ("Pengusaha / Operator:", self.operator),
            ("No. Rujukan / Ref No:", booking.ref_code),
        ]
        info_table = Table(
            [[Paragraph(label, self.styles["label"]), Paragraph(text(value), self.styles["value"])] for label, value in info],
            colWidths=[0.35 * w, 0.65 * w],
        )
        info_table.setStyle(TableStyle([("BOX", (0, 0), (-1, -1), 1, self.dark_gray), ("VALIGN", (0, 0), (-1, -1), "MIDDLE")]))
        story.append(info_table)
        story.append(Spacer(1, 0.2 * inch))

        rows = [["BIL", "NAMA PENUH", "NO. IC / PASPORT", "JANTINA", "UMUR", "WARGANEGARA"]]
        for index, passenger in enumerate(booking.passengers, start=1):
            rows.append(
                [
                    str(index),
                    Paragraph(text(passenger.full_name.upper()), self.styles["body"]),
                    passenger.ic_passport,
                    passenger.gender or "-",
                    str(passenger.calculated_age),
                    (passenger.nationality or "-").upper(),
                ]
            )
        story.append(self._grid_table(rows, [0.07 * w, 0.33 * w, 0.2 * w, 0.1 * w, 0.08 * w, 0.22 * w]))

        counts = self.summary_counts()
        story.append(Paragraph("RUMUSAN / SUMMARY", self.styles["heading"]))
        summary = Table(
            [
                ["Dewasa / Adults (12+):", str(counts["adults"])],
                ["Kanak-kanak / Children (3-11):", str(counts["children"])],
                ["Bayi / Infants (0-2):", str(counts["infants"])],
                ["Kru Bot / Crew:", str(counts["crew"])],
                ["JUMLAH BESAR / TOTAL SOULS ON BOARD:", str(counts["total_souls"])],
            ],
            colWidths=[0.5 * w, 0.15 * w],
            hAlign="LEFT",
        )
        summary.setStyle(
            TableStyle(
                [
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, self.dark_gray),
                ]
            )
        )
        story.append(summary)

        story.append(Spacer(1, 0.3 * inch))
        story.append(Paragraph("<b>Pengakuan Pengusaha / Operator's Declaration:</b>", self.styles["body"]))
        story.append(
            Paragraph(
                "Saya mengaku bahawa butiran di atas adalah benar dan lengkap.<br/>"
                "(I declare that the details above are true and complete.)",
                self.styles["body"],
            )
        )
        story.append(Spacer(1, 0.6 * inch))
        story.append(
            Paragraph(
                "______________________________<br/>Tandatangan Nakhoda / Pengusaha<br/>(Signature of Master / Operator)",
                self.styles["body"],
            )
        )
        story.append(Spacer(1, 0.3 * inch))
        story.append(
            Paragraph(
                f"Generated by {text(self.operator)} • {format_malay_date(datetime.utcnow().date())} • "
                f"Ref: {text(booking.ref_code)}",
                self.styles["footer"],
            )
        )
        return story
