from tests._utils.helpers import RECEPTION_HEADERS, local

CUSTOMERS = "/api/v1/reception/customers"


def test_sync_profile_requires_authentication(client):
    r = client.post("/api/v1/customers/sync-profile")
    assert r.status_code == 401


def test_sync_profile_inserts_then_updates(client):
    headers = {
        "X-User-Id": "user-9",
        "X-User-Name": "Ana Lopez",
        "X-User-Phone": "+52 55 1234 5678",
        "X-User-Division": "4a",
    }

    first = client.post("/api/v1/customers/sync-profile", headers=headers)
    assert first.status_code == 201
    assert first.json()["action"] == "inserted"
    assert first.json()["customer"]["division"] == "4a"

    second = client.post(
        "/api/v1/customers/sync-profile", headers={**headers, "X-User-Division": "3a"}
    )
    assert second.status_code == 200
    assert second.json()["action"] == "updated_by_phone"
    assert second.json()["customer"]["id"] == first.json()["customer"]["id"]
    assert second.json()["customer"]["division"] == "3a"


def test_sync_profile_without_phone_or_booking_is_400(client):
    r = client.post(
        "/api/v1/customers/sync-profile", headers={"X-User-Id": "user-9", "X-User-Name": "Ana"}
    )
    assert r.status_code == 400
    assert r.json()["code"] == "PROFILE_PHONE_REQUIRED"


class TestReceptionCustomers:
    def test_register_then_reuse_by_phone(self, client):
        first = client.post(
            CUSTOMERS,
            json={"full_name": "Ana Lopez", "phone": "55 1234 5678", "notes": "zurda"},
            headers=RECEPTION_HEADERS,
        )
        assert first.status_code == 201
        assert first.json()["phone_e164"] == "+525512345678"
        assert first.json()["notes"] == "zurda"

        again = client.post(
            CUSTOMERS,
            json={"full_name": "Ana Maria Lopez", "phone": "+525512345678"},
            headers=RECEPTION_HEADERS,
        )
        assert again.status_code == 200
        assert again.json()["id"] == first.json()["id"]
        assert again.json()["full_name"] == "Ana Maria Lopez"
        assert again.json()["notes"] == "zurda"

    def test_register_requires_reception(self, client):
        r = client.post(CUSTOMERS, json={"full_name": "Ana", "phone": "5512345678"})
        assert r.status_code == 401

    def test_register_rejects_a_malformed_email(self, client):
        r = client.post(
            CUSTOMERS,
            json={"full_name": "Ana", "phone": "5512345678", "email": "not-an-email"},
            headers=RECEPTION_HEADERS,
        )
        assert r.status_code == 422

    def test_detail_with_history_stats_and_pagination(
        self, client, courts, make_customer, make_booking
    ):
        ana = make_customer()
        make_booking(courts["one"], local(17, 30), local(18, 30), customer_id=ana.id)

        r = client.get(f"{CUSTOMERS}/{ana.id}", params={"limit": 5}, headers=RECEPTION_HEADERS)

        assert r.status_code == 200
        data = r.json()
        assert data["customer"]["id"] == ana.id
        assert data["stats"]["total_visits"] == 1
        assert data["stats"]["total_paid"] == 0.0
        assert data["stats"]["last_visit_at"].startswith("2026-10-20T23:30:00")
        [row] = data["bookings"]
        assert row["court_name"] == "Cancha 1"
        assert row["expected_amount"] == 375.0
        assert row["payment_status"] == "UNPAID"
        assert data["pagination"] == {"limit": 5, "offset": 0, "total": 1, "has_more": False}

    def test_detail_of_unknown_customer_is_404(self, client):
        r = client.get(f"{CUSTOMERS}/missing", headers=RECEPTION_HEADERS)
        assert r.status_code == 404

    def test_patch_notes(self, client, make_customer):
        ana = make_customer(player_notes="drive")

        r = client.patch(
            f"{CUSTOMERS}/{ana.id}",
            json={"notes": "paga con tarjeta", "player_notes": None},
            headers=RECEPTION_HEADERS,
        )

        assert r.status_code == 200
        assert r.json()["notes"] == "paga con tarjeta"
        assert r.json()["player_notes"] is None

    def test_empty_patch_is_400(self, client, make_customer):
        ana = make_customer()
        r = client.patch(f"{CUSTOMERS}/{ana.id}", json={}, headers=RECEPTION_HEADERS)
        assert r.status_code == 400
        assert r.json()["code"] == "NOTHING_TO_UPDATE"
