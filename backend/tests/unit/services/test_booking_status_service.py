from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from courtbook.core.enums import (
    BookingSource,
    BookingStatus,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
)
from courtbook.core.exceptions import (
    AlreadyPaidException,
    ConflictException,
    InvalidStatusTransitionException,
    NotFoundException,
    PaymentRequiredException,
    ValidationException,
)
from courtbook.database import build_engine, init_db
from courtbook.models import Booking, Court
from courtbook.services.booking_status_service import BookingStatusService
from tests._utils.helpers import TEST_DAY, local


@pytest.fixture
def service(db, policy, clock):
    return BookingStatusService(db, policy, now=clock)


@pytest.fixture
def confirmed(courts, make_booking):
    return make_booking(courts["one"], local(10), local(11))


class TestPayment:
    def test_mark_paid_records_amount_method_and_time(self, service, confirmed, clock):
        booking = service.mark_paid(confirmed.id, Decimal("350.00"), PaymentMethod.CASH)

        assert booking.payment_status == PaymentStatus.PAID.value
        assert booking.paid_amount == Decimal("350.00")
        assert booking.payment_method == "CASH"
        assert booking.paid_at == clock()
        assert booking.status == BookingStatus.CONFIRMED.value

    def test_second_payment_is_rejected_and_first_is_kept(self, service, confirmed):
        service.mark_paid(confirmed.id, Decimal("350.00"), PaymentMethod.CASH)

        with pytest.raises(AlreadyPaidException) as exc_info:
            service.mark_paid(confirmed.id, Decimal("10.00"), PaymentMethod.CARD)
        assert exc_info.value.code == "ALREADY_PAID"

        booking = service.booking_repository.get_by_id(confirmed.id, fresh=True)
        assert booking.paid_amount == Decimal("350.00")
        assert booking.payment_method == "CASH"

    def test_completed_booking_can_still_be_paid(self, service, courts, make_booking):
        booking = make_booking(courts["one"], local(10), local(11), status=BookingStatus.COMPLETED)
        paid = service.mark_paid(booking.id, Decimal("350"), PaymentMethod.TRANSFER)
        assert paid.status == BookingStatus.COMPLETED.value
        assert paid.is_paid

    def test_racing_desks_cannot_both_register_payment(self, tmp_path, policy, clock):
        db_path = tmp_path / "bookings.db"
        engine = build_engine(f"sqlite:///{db_path}")
        init_db(bind=engine)
        Sessions = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        try:
            with Sessions() as setup:
                court = Court(name="Cancha 1", is_active=True)
                setup.add(court)
                setup.flush()
                booking = Booking(
                    court_id=court.id,
                    start_at=local(10),
                    end_at=local(11),
                    status=BookingStatus.CONFIRMED.value,
                    source=BookingSource.RECEPTION.value,
                    payment_status=PaymentStatus.UNPAID.value,
                )
                setup.add(booking)
                setup.commit()
                booking_id = booking.id

            with Sessions() as first_db, Sessions() as second_db:
                first = BookingStatusService(first_db, policy, now=clock)
                second = BookingStatusService(second_db, policy, now=clock)
                # Both desks see the booking unpaid before either one pays
                assert first.booking_repository.get_by_id(booking_id).payment_status == "UNPAID"
                assert second.booking_repository.get_by_id(booking_id).payment_status == "UNPAID"

                first.mark_paid(booking_id, Decimal("350"), PaymentMethod.CASH)
                with pytest.raises(AlreadyPaidException):
                    second.mark_paid(booking_id, Decimal("400"), PaymentMethod.CARD)

            with Sessions() as check:
                stored = check.get(Booking, booking_id)
                assert stored.paid_amount == Decimal("350")
                assert stored.payment_method == "CASH"
        finally:
            engine.dispose()

    @pytest.mark.parametrize("status", [BookingStatus.HOLD, BookingStatus.CANCELLED])
    def test_unpayable_statuses(self, service, courts, make_booking, status):
        booking = make_booking(courts["one"], local(10), local(11), status=status)
        with pytest.raises(InvalidStatusTransitionException):
            service.mark_paid(booking.id, Decimal("350"), PaymentMethod.CASH)

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_amount_must_be_positive(self, service, confirmed, amount):
        with pytest.raises(ValidationException):
            service.mark_paid(confirmed.id, amount, PaymentMethod.CASH)

    def test_unknown_booking(self, service, courts):
        with pytest.raises(NotFoundException):
            service.mark_paid("missing", Decimal("350"), PaymentMethod.CASH)


class TestAttendance:
    def test_completion_requires_payment(self, service, confirmed):
        with pytest.raises(PaymentRequiredException) as exc_info:
            service.set_status(confirmed.id, BookingStatus.COMPLETED)
        assert exc_info.value.code == "PAYMENT_REQUIRED"

    @pytest.mark.parametrize("outcome", [BookingStatus.COMPLETED, BookingStatus.NO_SHOW])
    def test_paid_booking_records_attendance(self, service, confirmed, outcome):
        service.mark_paid(confirmed.id, Decimal("350"), PaymentMethod.CASH)
        booking = service.set_status(confirmed.id, outcome)
        assert booking.status == outcome.value

    def test_attendance_is_captured_once(self, service, confirmed):
        service.mark_paid(confirmed.id, Decimal("350"), PaymentMethod.CASH)
        service.set_status(confirmed.id, BookingStatus.COMPLETED)

        with pytest.raises(InvalidStatusTransitionException):
            service.set_status(confirmed.id, BookingStatus.NO_SHOW)

    def test_hold_cannot_be_completed(self, service, courts, make_booking):
        hold = make_booking(courts["one"], local(10), local(11), status=BookingStatus.HOLD)
        with pytest.raises(InvalidStatusTransitionException):
            service.set_status(hold.id, BookingStatus.COMPLETED)


class TestCancellation:
    def test_unpaid_booking_is_cancelled_by_reception(self, service, confirmed):
        booking = service.set_status(confirmed.id, BookingStatus.CANCELLED)
        assert booking.status == BookingStatus.CANCELLED.value
        assert booking.cancelled_by == CancelledBy.RECEPTION.value

    def test_paid_booking_cannot_be_cancelled(self, service, confirmed):
        service.mark_paid(confirmed.id, Decimal("350"), PaymentMethod.CARD)

        with pytest.raises(ConflictException) as exc_info:
            service.set_status(confirmed.id, BookingStatus.CANCELLED)
        assert exc_info.value.code == "BOOKING_PAID"

    def test_attended_booking_cannot_be_cancelled(self, service, confirmed):
        service.mark_paid(confirmed.id, Decimal("350"), PaymentMethod.CASH)
        service.set_status(confirmed.id, BookingStatus.NO_SHOW)

        with pytest.raises(InvalidStatusTransitionException):
            service.set_status(confirmed.id, BookingStatus.CANCELLED)

    def test_cancelled_range_can_be_booked_again(self, service, confirmed, courts, make_booking):
        service.set_status(confirmed.id, BookingStatus.CANCELLED)
        again = make_booking(courts["one"], local(10), local(11))
        assert again.status == BookingStatus.CONFIRMED.value

    def test_status_outside_the_settable_set_is_rejected(self, service, confirmed):
        with pytest.raises(ValidationException):
            service.set_status(confirmed.id, BookingStatus.CONFIRMED)

    def test_unknown_booking(self, service, courts):
        with pytest.raises(NotFoundException):
            service.set_status("missing", BookingStatus.CANCELLED)


class TestAttachCustomer:
    def test_attaches_existing_customer(self, service, confirmed, make_customer):
        customer = make_customer()
        booking = service.attach_customer(confirmed.id, customer.id)
        assert booking.customer_id == customer.id
        assert booking.customer.full_name == "Ana López"

    def test_unknown_customer(self, service, confirmed):
        with pytest.raises(NotFoundException):
            service.attach_customer(confirmed.id, "missing")

    def test_unknown_booking(self, service, courts, make_customer):
        customer = make_customer()
        with pytest.raises(NotFoundException):
            service.attach_customer("missing", customer.id)


class TestBoard:
    def test_board_lists_day_in_start_order(self, service, courts, make_booking, make_customer):
        customer = make_customer()
        late = make_booking(courts["one"], local(19), local(20), customer_id=customer.id)
        early = make_booking(courts["two"], local(8), local(9))

        entries = service.list_board(TEST_DAY)

        assert [e.booking.id for e in entries] == [early.id, late.id]
        assert entries[1].court_name == "Cancha 1"
        assert entries[1].customer_name == "Ana López"
        assert entries[1].customer_phone == "+525512345678"
        assert entries[0].customer_name is None

    def test_board_hides_cancellations_not_made_by_reception(
        self, service, courts, make_booking
    ):
        by_reception = make_booking(
            courts["one"],
            local(10),
            local(11),
            status=BookingStatus.CANCELLED,
            cancelled_by=CancelledBy.RECEPTION.value,
        )
        make_booking(courts["two"], local(10), local(11), status=BookingStatus.CANCELLED)

        entries = service.list_board(TEST_DAY)
        assert [e.booking.id for e in entries] == [by_reception.id]

    def test_board_range_uses_local_days(self, service, courts, make_booking):
        next_day = date(2026, 10, 21)
        tomorrow = make_booking(courts["one"], local(7, day=next_day), local(8, day=next_day))
        # 23:30 UTC on the test day is still 17:30 local on the test day
        today = make_booking(courts["one"], local(17, 30), local(18, 30))

        assert [e.booking.id for e in service.list_board(TEST_DAY)] == [today.id]
        assert [e.booking.id for e in service.list_board(TEST_DAY, next_day)] == [
            today.id,
            tomorrow.id,
        ]

    def test_board_range_is_bounded(self, service, courts):
        with pytest.raises(ValidationException):
            service.list_board(date(2026, 10, 1), date(2026, 11, 1))
        with pytest.raises(ValidationException):
            service.list_board(date(2026, 10, 21), date(2026, 10, 20))
