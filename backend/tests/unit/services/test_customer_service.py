from datetime import date
from decimal import Decimal

import pytest

from courtbook.core.exceptions import NotFoundException, ValidationException
from courtbook.models import Customer
from courtbook.principal import Identity
from courtbook.services.customer_service import CustomerService
from tests._utils.helpers import local


@pytest.fixture
def service(db, clock, rates):
    return CustomerService(db, "52", now=clock, rates=rates)


class TestSearch:
    def test_short_queries_return_nothing(self, service, make_customer):
        make_customer()
        assert service.search("A") == []
        assert service.search("   ") == []

    def test_name_search_is_case_insensitive_substring(self, service, make_customer):
        make_customer("Ana López", "+525512345678")
        make_customer("Mariana Ruiz", "+525598765432")
        make_customer("Pedro Gómez", "+525511112222")

        names = {c.full_name for c in service.search("ana")}
        assert names == {"Ana López", "Mariana Ruiz"}

    def test_phone_search_matches_the_canonical_phone(self, service, make_customer):
        make_customer("Ana López", "+525512345678")
        make_customer("Pedro Gómez", "+525511112222")

        [match] = service.search("55 1234 5678")
        assert match.full_name == "Ana López"

    def test_like_wildcards_are_literal(self, service, make_customer):
        make_customer("Ana López", "+525512345678")
        assert service.search("%%") == []
        assert service.search("__") == []

    def test_results_are_capped(self, service, make_customer):
        for i in range(10):
            make_customer(f"Jugador {i}", f"+5255000000{i:02d}")
        assert len(service.search("jugador")) == 8


class TestResolveOrCreate:
    def test_creates_then_reuses_by_phone(self, service, db):
        created = service.resolve_or_create(full_name="Ana", phone_e164="+525512345678")
        db.commit()
        again = service.resolve_or_create(
            full_name="Ana López", phone_e164="+525512345678", email="ana@correo.mx"
        )
        db.commit()

        assert again.id == created.id
        assert again.full_name == "Ana López"
        assert again.email == "ana@correo.mx"
        assert db.query(Customer).count() == 1


class TestSyncProfile:
    def test_inserts_customer_for_new_user(self, service):
        identity = Identity(
            user_id="u1", full_name="Ana López", phone="5512345678", birthday=date(1991, 2, 3)
        )
        result = service.sync_profile(identity)

        assert result.action == "inserted"
        assert result.customer.phone_e164 == "+525512345678"
        assert result.customer.birthday == date(1991, 2, 3)

    def test_updates_customer_with_same_phone(self, service, make_customer):
        existing = make_customer("Ana", "+525512345678")
        result = service.sync_profile(
            Identity(user_id="u1", full_name="Ana López", phone="+52 55 1234 5678", sex="F")
        )

        assert result.action == "updated_by_phone"
        assert result.customer.id == existing.id
        assert result.customer.full_name == "Ana López"
        assert result.customer.sex == "F"

    def test_latest_booking_customer_wins(self, service, courts, make_booking, make_customer):
        booked = make_customer("Ana", "+525512345678")
        make_customer("Otro", "+525598765432")
        make_booking(courts["one"], local(10), local(11), customer_id=booked.id, user_id="u1")

        result = service.sync_profile(
            Identity(user_id="u1", full_name="Ana María", phone="5598765432", division="2a")
        )

        assert result.action == "updated_by_booking"
        assert result.customer.id == booked.id
        assert result.customer.full_name == "Ana María"
        assert result.customer.division == "2a"

    def test_name_is_required(self, service):
        with pytest.raises(ValidationException) as exc_info:
            service.sync_profile(Identity(user_id="u1", phone="5512345678"))
        assert exc_info.value.code == "PROFILE_NAME_REQUIRED"

    def test_invalid_phone_is_rejected(self, service):
        with pytest.raises(ValidationException) as exc_info:
            service.sync_profile(Identity(user_id="u1", full_name="Ana", phone="123"))
        assert exc_info.value.code == "INVALID_PHONE"

    def test_phone_needed_without_a_booking(self, service):
        with pytest.raises(ValidationException) as exc_info:
            service.sync_profile(Identity(user_id="u1", full_name="Ana"))
        assert exc_info.value.code == "PROFILE_PHONE_REQUIRED"


class TestRegisterCustomer:
    def test_creates_a_customer_with_reception_fields(self, service):
        customer, created = service.register_customer(
            full_name=" Ana López ",
            phone="55 1234 5678",
            email="ana@correo.mx",
            notes=" zurda ",
            birthday=date(1990, 5, 1),
            player_notes="   ",
        )

        assert created is True
        assert customer.full_name == "Ana López"
        assert customer.phone_e164 == "+525512345678"
        assert customer.email == "ana@correo.mx"
        assert customer.notes == "zurda"
        assert customer.player_notes is None
        assert customer.birthday == date(1990, 5, 1)

    def test_existing_phone_only_refreshes_the_name(self, service, make_customer):
        existing = make_customer("Ana", "+525512345678", notes="vip")

        customer, created = service.register_customer(
            full_name="Ana María", phone="+52 55 1234 5678", notes="otra"
        )

        assert created is False
        assert customer.id == existing.id
        assert customer.full_name == "Ana María"
        assert customer.notes == "vip"

    def test_invalid_phone_is_rejected(self, service):
        with pytest.raises(ValidationException) as exc_info:
            service.register_customer(full_name="Ana", phone="12-34")
        assert exc_info.value.code == "INVALID_PHONE"

    def test_blank_name_is_rejected(self, service):
        with pytest.raises(ValidationException):
            service.register_customer(full_name="  ", phone="5512345678")


class TestCustomerDetail:
    @pytest.fixture
    def ana(self, make_customer):
        return make_customer()

    def test_history_is_latest_first_priced_and_totalled(
        self, service, ana, courts, make_booking, clock
    ):
        make_booking(
            courts["one"],
            local(10),
            local(11),
            customer_id=ana.id,
            payment_status="PAID",
            paid_amount=Decimal("350"),
            payment_method="CASH",
            paid_at=clock(),
        )
        make_booking(courts["two"], local(17, 30), local(18, 30), customer_id=ana.id)
        make_booking(courts["one"], local(12), local(13))

        detail = service.get_detail(ana.id)

        assert [entry.booking.start_at for entry in detail.history] == [local(17, 30), local(10)]
        assert [entry.court_name for entry in detail.history] == ["Cancha 2", "Cancha 1"]
        assert [entry.expected_amount for entry in detail.history] == [
            Decimal("375.00"),
            Decimal("350.00"),
        ]
        assert detail.total_visits == 2
        assert detail.total_paid == Decimal("350")
        assert detail.last_visit_at == local(17, 30)
        assert detail.has_more is False

    def test_pages_are_clamped_and_totals_cover_every_page(
        self, service, ana, courts, make_booking, clock
    ):
        make_booking(
            courts["one"],
            local(9),
            local(9, 30),
            customer_id=ana.id,
            payment_status="PAID",
            paid_amount=Decimal("175"),
            payment_method="CARD",
            paid_at=clock(),
        )
        make_booking(courts["one"], local(10), local(10, 30), customer_id=ana.id)
        make_booking(courts["one"], local(11), local(11, 30), customer_id=ana.id)

        first = service.get_detail(ana.id, limit=2)
        assert len(first.history) == 2
        assert first.has_more is True
        assert first.total_paid == Decimal("175")

        last = service.get_detail(ana.id, limit=2, offset=2)
        assert [entry.booking.start_at for entry in last.history] == [local(9)]
        assert last.has_more is False

        clamped = service.get_detail(ana.id, limit=0, offset=-5)
        assert (clamped.limit, clamped.offset, len(clamped.history)) == (1, 0, 1)
        assert service.get_detail(ana.id, limit=1000).limit == 200

    def test_customer_without_bookings(self, service, ana):
        detail = service.get_detail(ana.id)
        assert detail.history == []
        assert detail.total_visits == 0
        assert detail.total_paid == Decimal("0")
        assert detail.last_visit_at is None

    def test_unknown_customer(self, service):
        with pytest.raises(NotFoundException):
            service.get_detail("missing")


class TestUpdateNotes:
    def test_only_given_fields_change(self, service, make_customer):
        customer = make_customer(notes="vip", player_notes="drive")

        updated = service.update_notes(customer.id, {"player_notes": "  revés  "})
        assert updated.notes == "vip"
        assert updated.player_notes == "revés"

        updated = service.update_notes(customer.id, {"notes": "", "birthday": date(1991, 2, 3)})
        assert updated.notes is None
        assert updated.birthday == date(1991, 2, 3)
        assert updated.player_notes == "revés"

    @pytest.mark.parametrize("changes", [{}, {"full_name": "Otra"}])
    def test_nothing_to_update(self, service, make_customer, changes):
        customer = make_customer()
        with pytest.raises(ValidationException) as exc_info:
            service.update_notes(customer.id, changes)
        assert exc_info.value.code == "NOTHING_TO_UPDATE"

    def test_unknown_customer(self, service):
        with pytest.raises(NotFoundException):
            service.update_notes("missing", {"notes": "x"})
