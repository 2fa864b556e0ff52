"""
Tests for deriving completed status from elapsed event time.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from apps.web.bookings.models import Booking
from apps.web.bookings.services.reconciler import (
    get_reconciled_bookings,
    reconcile_bookings,
    sweep_past_bookings,
)
from apps.web.core.exceptions import PersistenceError

from .factories import BookingFactory

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.django_db
class TestReconcileBookings:
    """Tests for completing past scheduled bookings on read."""

    def test_past_scheduled_becomes_completed(self, connection) -> None:
        booking = BookingFactory(
            client=connection, event_time=NOW - timedelta(hours=2)
        )

        result = reconcile_bookings([booking], now=NOW)

        assert result[0].status == Booking.Status.COMPLETED
        booking.refresh_from_db()
        assert booking.status == Booking.Status.COMPLETED

    def test_future_scheduled_untouched(self, connection) -> None:
        booking = BookingFactory(client=connection, event_time=NOW + timedelta(days=1))

        result = reconcile_bookings([booking], now=NOW)

        assert result[0].status == Booking.Status.SCHEDULED

    def test_event_exactly_now_is_not_past(self, connection) -> None:
        booking = BookingFactory(client=connection, event_time=NOW)

        result = reconcile_bookings([booking], now=NOW)

        assert result[0].status == Booking.Status.SCHEDULED

    def test_canceled_and_undated_untouched(self, connection) -> None:
        canceled = BookingFactory(
            client=connection,
            event_time=NOW - timedelta(days=1),
            status=Booking.Status.CANCELED,
        )
        undated = BookingFactory(client=connection, event_time=None)

        result = reconcile_bookings([canceled, undated], now=NOW)

        assert [b.status for b in result] == [
            Booking.Status.CANCELED,
            Booking.Status.SCHEDULED,
        ]

    def test_preserves_order(self, connection) -> None:
        first = BookingFactory(client=connection, event_time=NOW + timedelta(days=1))
        second = BookingFactory(client=connection, event_time=NOW - timedelta(days=1))

        result = reconcile_bookings([first, second], now=NOW)

        assert [b.pk for b in result] == [first.pk, second.pk]

    def test_no_write_when_nothing_due(
        self, connection, django_assert_num_queries
    ) -> None:
        bookings = [
            BookingFactory(client=connection, event_time=NOW + timedelta(days=1)),
            BookingFactory(client=connection, status=Booking.Status.COMPLETED),
        ]

        with django_assert_num_queries(0):
            reconcile_bookings(bookings, now=NOW)

    def test_single_bulk_write_for_many(
        self, connection, django_assert_num_queries
    ) -> None:
        bookings = [
            BookingFactory(client=connection, event_time=NOW - timedelta(days=n))
            for n in range(1, 4)
        ]

        with django_assert_num_queries(1):
            reconcile_bookings(bookings, now=NOW)

        assert Booking.objects.filter(status=Booking.Status.COMPLETED).count() == 3

    def test_second_run_is_a_noop(self, connection, django_assert_num_queries) -> None:
        BookingFactory(client=connection, event_time=NOW - timedelta(days=1))
        first = reconcile_bookings(list(Booking.objects.all()), now=NOW)
        reread = list(Booking.objects.all())

        with django_assert_num_queries(0):
            second = reconcile_bookings(reread, now=NOW)

        assert [b.status for b in first] == [Booking.Status.COMPLETED]
        assert [b.status for b in second] == [Booking.Status.COMPLETED]

    def test_completes_only_once_event_time_has_passed(self, connection) -> None:
        booking = BookingFactory(
            client=connection, event_time=datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        )

        before = reconcile_bookings(
            [booking], now=datetime(2023, 12, 31, 0, 0, tzinfo=UTC)
        )
        assert before[0].status == Booking.Status.SCHEDULED
        booking.refresh_from_db()
        assert booking.status == Booking.Status.SCHEDULED

        after = reconcile_bookings(
            [booking], now=datetime(2024, 1, 2, 0, 0, tzinfo=UTC)
        )
        assert after[0].status == Booking.Status.COMPLETED
        booking.refresh_from_db()
        assert booking.status == Booking.Status.COMPLETED

    def test_persistence_failure_still_returns_corrected_state(
        self, connection
    ) -> None:
        booking = BookingFactory(client=connection, event_time=NOW - timedelta(hours=1))

        with patch(
            "apps.web.bookings.services.reconciler.mark_completed",
            side_effect=PersistenceError("database unavailable"),
        ):
            result = reconcile_bookings([booking], now=NOW)

        assert result[0].status == Booking.Status.COMPLETED
        booking.refresh_from_db()
        assert booking.status == Booking.Status.SCHEDULED


@pytest.mark.django_db
class TestGetReconciledBookings:
    """Tests for the reconciled read used by the dashboard."""

    def test_reads_and_reconciles_client_bookings(self, connection) -> None:
        BookingFactory(client=connection, event_time=NOW - timedelta(days=1))
        BookingFactory(client=connection, event_time=NOW + timedelta(days=1))
        BookingFactory(event_time=NOW - timedelta(days=1))

        result = get_reconciled_bookings(connection, now=NOW)

        assert [b.status for b in result] == [
            Booking.Status.SCHEDULED,
            Booking.Status.COMPLETED,
        ]


@pytest.mark.django_db
class TestSweepPastBookings:
    """Tests for the cross-client sweep."""

    def test_completes_past_scheduled_for_all_clients(self, connection) -> None:
        ours = BookingFactory(client=connection, event_time=NOW - timedelta(days=1))
        theirs = BookingFactory(event_time=NOW - timedelta(hours=1))
        future = BookingFactory(event_time=NOW + timedelta(hours=1))

        assert sweep_past_bookings(now=NOW) == 2

        for booking, expected in (
            (ours, Booking.Status.COMPLETED),
            (theirs, Booking.Status.COMPLETED),
            (future, Booking.Status.SCHEDULED),
        ):
            booking.refresh_from_db()
            assert booking.status == expected

    def test_nothing_due_returns_zero(self) -> None:
        assert sweep_past_bookings(now=NOW) == 0
