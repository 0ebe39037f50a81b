import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Null for invited staff until their first sign-in links the Firebase account by email
    firebase_uid = Column(String(255), unique=True, index=True, nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    role = Column(String(20), default="owner", nullable=False)  # admin, owner, staff, customer
    # Staff membership; owners reach their business through Business.owner_id
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=True)
    invited_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owned_business = relationship(
        "Business", back_populates="owner", uselist=False, foreign_keys="Business.owner_id"
    )
    member_of = relationship("Business", foreign_keys=[business_id])


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    logo_url = Column(String(500), nullable=True)
    banner_url = Column(String(500), nullable=True)
    branding = Column(JSON, nullable=True)  # {"primary_color": "#168D95", "secondary_color": "#DE7F21"}
    is_published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="owned_business", foreign_keys=[owner_id])
    settings = relationship(
        "BusinessSettings", back_populates="business", uselist=False, cascade="all, delete-orphan"
    )
    services = relationship("Service", back_populates="business", cascade="all, delete-orphan")


class BusinessSettings(Base):
    __tablename__ = "business_settings"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), unique=True, nullable=False)
    # Payments
    payment_gateway = Column(String(50), default="bayarcash", nullable=False)
    payment_gateway_enabled = Column(Boolean, default=True, nullable=False)
    # Pending bookings are swept by cancel_expired_bookings() after this many minutes
    auto_cancel_timeout = Column(Integer, default=30, nullable=False)
    auto_cancel_enabled = Column(Boolean, default=True, nullable=False)
    # Notifications
    email_notifications = Column(Boolean, default=True, nullable=False)
    whatsapp_notifications = Column(Boolean, default=False, nullable=False)
    notification_phone = Column(String(50), nullable=True)
    # Vessel details printed on tickets and the marine manifest
    boat_name = Column(String(255), nullable=True)
    boat_reg_no = Column(String(100), nullable=True)
    default_destination = Column(String(255), nullable=True)
    crew_count = Column(Integer, default=2, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="settings")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, default=0, nullable=False)  # Pricing is per variant; kept as a base price
    duration_minutes = Column(Integer, nullable=True)
    max_capacity = Column(Integer, nullable=False)
    images = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="services")
    variants = relationship(
        "ServiceVariant",
        back_populates="service",
        cascade="all, delete-orphan",
        order_by="ServiceVariant.sort_order",
    )
    addons = relationship(
        "ServiceAddon",
        back_populates="service",
        cascade="all, delete-orphan",
        order_by="ServiceAddon.sort_order",
    )


class ServiceVariant(Base):
    __tablename__ = "service_variants"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    service = relationship("Service", back_populates="variants")


class ServiceAddon(Base):
    __tablename__ = "service_addons"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    service = relationship("Service", back_populates="addons")


class Availability(Base):
    """One scheduled departure (a slot) with its capacity and booked count"""

    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint(
            "business_id", "service_id", "date", "start_time", name="uq_availability_slot"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    capacity = Column(Integer, nullable=False)
    booked_count = Column(Integer, default=0, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service = relationship("Service")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )
    ref_code = Column(String(20), unique=True, index=True, nullable=False)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    availability_id = Column(Integer, ForeignKey("availability.id"), nullable=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=True)
    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    pax = Column(Integer, nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    subtotal = Column(Float, default=0, nullable=False)
    addons_total = Column(Float, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=True)  # Pending bookings past this are auto-cancelled
    cancelled_at = Column(DateTime, nullable=True)
    cancelled_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("Business")
    service = relationship("Service")
    availability = relationship("Availability")
    items = relationship("BookingItem", back_populates="booking", cascade="all, delete-orphan")
    passengers = relationship(
        "Passenger",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Passenger.sort_order",
    )
    payments = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Payment.created_at",
    )


class BookingItem(Base):
    __tablename__ = "booking_items"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # variant, addon
    item_id = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    booking = relationship("Booking", back_populates="items")


class Passenger(Base):
    __tablename__ = "passengers"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    ic_passport = Column(String(50), nullable=False)
    dob = Column(Date, nullable=True)
    calculated_age = Column(Integer, nullable=False)
    gender = Column(String(1), nullable=True)  # L (lelaki), P (perempuan)
    nationality = Column(String(100), nullable=True)
    passenger_type = Column(String(10), nullable=False)  # adult, child, infant
    sort_order = Column(Integer, default=0, nullable=False)

    booking = relationship("Booking", back_populates="passengers")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="MYR", nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, processing, succeeded, failed, refunded
    payment_gateway = Column(String(50), default="bayarcash", nullable=False)
    method = Column(String(50), nullable=True)  # lower-cased channel, e.g. fpx, duitnow_qr
    gateway_session_id = Column(String(255), nullable=True)  # Bayarcash payment intent ID
    gateway_payment_id = Column(String(255), nullable=True)  # Bayarcash transaction ID
    exchange_ref_number = Column(String(255), nullable=True)
    payer_bank_code = Column(String(255), nullable=True)
    # Raw callback payload; "metadata" is reserved on declarative classes
    gateway_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    booking = relationship("Booking", back_populates="payments")
