"""Schema-level guarantees declared on the models."""

from sqlalchemy import event, inspect

from slotbook.models import Booking
from slotbook.models.booking import NO_OVERLAP_CONSTRAINT


def test_overlap_exclusion_is_created_with_the_bookings_table():
    assert event.contains(Booking.__table__, "after_create", NO_OVERLAP_CONSTRAINT)

    statement = NO_OVERLAP_CONSTRAINT.statement
    assert "EXCLUDE USING gist" in statement
    assert "event_type_id WITH =" in statement
    assert "tsrange(start_time, end_time, '[)') WITH &&" in statement
    assert "WHERE (status <> 'Cancelled')" in statement


def test_exclusion_is_skipped_on_sqlite(engine):
    # SQLite rejects ALTER TABLE ... ADD CONSTRAINT, so reaching here means it was skipped
    assert "bookings" in inspect(engine).get_table_names()
