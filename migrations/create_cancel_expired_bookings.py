"""
Create the cancel_expired_bookings() function

The auto-cancel cron endpoint calls this function. It:
- cancels pending bookings whose expires_at has passed (reason "Payment timeout")
- releases their pax from the availability slot, never below zero
- marks their open payments failed
- returns the number of bookings cancelled

Run with: python migrations/create_cancel_expired_bookings.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from boatbook.database import engine

CANCEL_EXPIRED_BOOKINGS_SQL = """
CREATE OR REPLACE FUNCTION cancel_expired_bookings()
RETURNS INTEGER
LANGUAGE plpgsql
AS $$
DECLARE
    expired RECORD;
    cancelled_count INTEGER := 0;
BEGIN
    FOR expired IN
        SELECT id, availability_id, pax
        FROM bookings
        WHERE status = 'pending'
          AND expires_at IS NOT NULL
          AND expires_at < NOW()
        FOR UPDATE SKIP LOCKED
    LOOP
        UPDATE bookings
        SET status = 'cancelled',
            cancelled_at = NOW(),
            cancelled_reason = 'Payment timeout',
            updated_at = NOW()
        WHERE id = expired.id;

        IF expired.availability_id IS NOT NULL THEN
            UPDATE availability
            SET booked_count = GREATEST(booked_count - expired.pax, 0),
                updated_at = NOW()
            WHERE id = expired.availability_id;
        END IF;

        UPDATE payments
        SET status = 'failed',
            updated_at = NOW()
        WHERE booking_id = expired.id
          AND status IN ('pending', 'processing');

        cancelled_count := cancelled_count + 1;
    END LOOP;

    RETURN cancelled_count;
END;
$$;
"""


def upgrade():
    """Create or replace cancel_expired_bookings()"""
    if engine.dialect.name != "postgresql":
        print(f"ℹ️  Skipping: cancel_expired_bookings() needs PostgreSQL, not {engine.dialect.name}")
        return

    with engine.connect() as conn:
        conn.execute(text(CANCEL_EXPIRED_BOOKINGS_SQL))
        conn.commit()
        print("✅ Created cancel_expired_bookings() function")

        # Index used by the sweep
        conn.execute(
            text(
                """
                CREATE INDEX IF NOT EXISTS idx_bookings_pending_expires_at
                ON bookings (expires_at)
                WHERE status = 'pending'
                """
            )
        )
        conn.commit()
        print("✅ Ensured idx_bookings_pending_expires_at index")


def downgrade():
    """Drop cancel_expired_bookings()"""
    with engine.connect() as conn:
        conn.execute(text("DROP FUNCTION IF EXISTS cancel_expired_bookings()"))
        conn.commit()
        print("✅ Dropped cancel_expired_bookings() function")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "downgrade":
        downgrade()
    else:
        upgrade()
