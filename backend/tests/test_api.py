"""End-to-end API tests through the FastAPI app."""

import pytest

from app.core.config import settings
from app.core.constants import UserRole
from app.esim_access.client import ESIM_ORDER, ESIM_QUERY
from tests.factories import (
    WEBHOOK_SECRET,
    make_country,
    make_esim,
    make_order,
    make_package,
    make_user,
    ok,
    profile,
    signed_webhook,
    user_event,
)

V1 = "/api/v1"


async def test_health(api):
    response = await api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestCatalog:
    async def test_country_detail(self, api, db):
        await make_country(db, "JP")
        await make_package(db, "JP-1GB-7D", retail_price=425)
        await db.commit()

        response = await api.get(f"{V1}/countries/jp")

        assert response.status_code == 200
        body = response.json()
        assert (body["code"], body["name"], body["package_count"], body["min_price"]) == ("JP", "Japan", 1, 425)

    async def test_unknown_country(self, api):
        response = await api.get(f"{V1}/countries/XX")

        assert response.status_code == 404
        assert response.json() == {"detail": "Country not found: XX"}

    async def test_package_detail_and_lookup(self, api, db):
        await make_package(db, "JP-1GB-7D")
        await db.commit()

        detail = await api.get(f"{V1}/packages/JP-1GB-7D")
        lookup = await api.post(f"{V1}/packages/lookup", json={"package_codes": ["JP-1GB-7D", "NOPE"]})
        missing = await api.get(f"{V1}/packages/NOPE")

        assert detail.json()["retail_price"] == 425
        assert [p["package_code"] for p in lookup.json()] == ["JP-1GB-7D"]
        assert missing.status_code == 404

    async def test_search_requires_query(self, api):
        response = await api.get(f"{V1}/packages/search", params={"q": ""})

        assert response.status_code == 422


class TestCartAndCheckout:
    async def _cart(self, api, db):
        await make_package(db, "JP-1GB-7D", retail_price=425)
        await db.commit()
        response = await api.post(f"{V1}/cart/sess-1/items", json={"package_code": "JP-1GB-7D", "quantity": 2})
        assert response.json() == {"success": True, "action": "created"}

    async def test_cart_round(self, api, db):
        await self._cart(api, db)

        cart = (await api.get(f"{V1}/cart/sess-1")).json()
        assert (cart["total"], cart["item_count"]) == (850, 2)
        assert cart["items"][0]["package"]["package_code"] == "JP-1GB-7D"

        await api.put(f"{V1}/cart/sess-1/items/JP-1GB-7D", json={"quantity": 0})
        assert (await api.get(f"{V1}/cart/sess-1")).json()["items"] == []

    async def test_add_unknown_package(self, api):
        response = await api.post(f"{V1}/cart/sess-1/items", json={"package_code": "NOPE"})

        assert response.status_code == 404
        assert response.json() == {"detail": "Package not found: NOPE"}

    async def test_update_without_cart(self, api):
        response = await api.put(f"{V1}/cart/nobody/items/JP-1GB-7D", json={"quantity": 1})

        assert response.status_code == 404
        assert response.json() == {"detail": "Cart not found"}

    async def test_guest_checkout(self, api, db):
        await self._cart(api, db)

        response = await api.post(
            f"{V1}/orders/checkout", json={"session_id": "sess-1", "customer_email": "guest@example.com"}
        )

        assert response.status_code == 201
        checkout = response.json()
        assert checkout["total_amount"] == 850

        order = (await api.get(f"{V1}/orders/{checkout['order_id']}")).json()
        assert order["status"] == "paid"
        assert order["items"][0]["quantity"] == 2
        by_txn = await api.get(f"{V1}/orders/by-transaction/{checkout['transaction_id']}")
        assert by_txn.json()["id"] == checkout["order_id"]

    async def test_signed_in_checkout_is_linked(self, api, db, auth_headers):
        await make_user(db)
        await self._cart(api, db)

        await api.post(
            f"{V1}/orders/checkout",
            json={"session_id": "sess-1", "customer_email": "buyer@example.com"},
            headers=auth_headers("user_buyer"),
        )

        mine = await api.get(f"{V1}/orders/me", headers=auth_headers("user_buyer"))
        assert len(mine.json()) == 1

    async def test_empty_cart(self, api):
        response = await api.post(
            f"{V1}/orders/checkout", json={"session_id": "nobody", "customer_email": "guest@example.com"}
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Cart is empty"}

    async def test_invalid_email(self, api):
        response = await api.post(f"{V1}/orders/checkout", json={"session_id": "s", "customer_email": "nope"})

        assert response.status_code == 422

    async def test_unknown_order(self, api):
        response = await api.get(f"{V1}/orders/by-transaction/SIM-NOPE")

        assert response.status_code == 404
        assert response.json() == {"detail": "Order not found"}


class TestFulfillment:
    async def test_fulfill_then_list_esims(self, api, db, partner):
        user = await make_user(db)
        order = await make_order(db, user, [(await make_package(db), 1)])
        await db.commit()
        partner.on(ESIM_ORDER, ok({"orderNo": "B1"}))
        partner.on(ESIM_QUERY, ok({"esimList": [profile("8901")]}))

        response = await api.post(f"{V1}/orders/{order.id}/fulfill")

        assert response.status_code == 200
        assert response.json() == {"success": True, "order_no": "B1", "esim_count": 1, "note": None}
        esims = (await api.get(f"{V1}/orders/{order.id}/esims")).json()
        assert [e["iccid"] for e in esims] == ["8901"]

        again = await api.post(f"{V1}/orders/{order.id}/fulfill")
        assert again.status_code == 409
        assert again.json() == {"detail": "Order cannot be fulfilled. Current status: fulfilled"}

    async def test_partner_failure_is_bad_gateway(self, api, db, partner):
        order = await make_order(db, None, [(await make_package(db), 1)])
        await db.commit()
        partner.on(ESIM_ORDER, {"success": False, "errorCode": "310241", "errorMsg": "Insufficient balance"})
        order_id = order.id

        response = await api.post(f"{V1}/orders/{order_id}/fulfill")

        assert response.status_code == 502
        assert (await api.get(f"{V1}/orders/{order_id}")).json()["status"] == "failed"


class TestAuth:
    async def test_missing_token(self, api):
        response = await api.get(f"{V1}/orders/me")

        assert response.status_code == 401

    async def test_invalid_token(self, api, token_factory):
        token_factory()

        response = await api.get(f"{V1}/orders/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid or expired token"}

    async def test_unsynced_user(self, api, auth_headers):
        response = await api.get(f"{V1}/users/me", headers=auth_headers("user_new"))

        assert response.status_code == 401
        assert response.json() == {"detail": "User not synced"}

    async def test_sync_then_me(self, api, auth_headers):
        headers = auth_headers("user_new")

        synced = await api.post(
            f"{V1}/users/sync", json={"email": "New@Example.com", "name": "New"}, headers=headers
        )
        me = await api.get(f"{V1}/users/me", headers=headers)

        assert synced.status_code == 200
        assert me.json()["email"] == "new@example.com"
        assert me.json()["is_admin"] is False

    async def test_esim_of_another_user(self, api, db, auth_headers):
        owner = await make_user(db)
        await make_user(db, "stranger@example.com", clerk_id="user_stranger")
        order = await make_order(db, owner, [(await make_package(db), 1)])
        await make_esim(db, order, "8901")
        await db.commit()

        stranger = await api.get(f"{V1}/esims/8901", headers=auth_headers("user_stranger"))
        mine = await api.get(f"{V1}/esims/8901", headers=auth_headers("user_buyer"))

        assert stranger.status_code == 403
        assert mine.json()["iccid"] == "8901"


class TestAdmin:
    async def test_requires_admin(self, api, db, auth_headers):
        await make_user(db)
        await db.commit()

        response = await api.get(f"{V1}/admin/stats", headers=auth_headers("user_buyer"))

        assert response.status_code == 403
        assert response.json() == {"detail": "Unauthorized: Admin access required"}

    async def test_bootstrap_first_admin(self, api, db, auth_headers):
        await make_user(db)
        await db.commit()
        headers = auth_headers("user_buyer")

        promoted = await api.post(f"{V1}/admin/make-admin", json={"email": "buyer@example.com"}, headers=headers)
        stats = await api.get(f"{V1}/admin/stats", headers=headers)

        assert promoted.status_code == 200
        assert stats.status_code == 200
        assert stats.json()["total_users"] == 1

    async def test_second_admin_needs_an_admin(self, api, db, auth_headers):
        await make_user(db, "root@example.com", clerk_id="user_root", role=UserRole.ADMIN)
        await make_user(db)
        await db.commit()

        response = await api.post(
            f"{V1}/admin/make-admin", json={"email": "buyer@example.com"}, headers=auth_headers("user_buyer")
        )

        assert response.status_code == 403
        assert response.json() == {"detail": "Only admins can create new admins"}


class TestClerkWebhook:
    async def test_unconfigured_secret(self, api, monkeypatch):
        monkeypatch.setattr(settings, "CLERK_WEBHOOK_SECRET", "")
        payload, headers = signed_webhook(user_event())

        response = await api.post(f"{V1}/webhooks/clerk", content=payload, headers=headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Server configuration error"}

    async def test_missing_headers(self, api, monkeypatch):
        monkeypatch.setattr(settings, "CLERK_WEBHOOK_SECRET", WEBHOOK_SECRET)

        response = await api.post(f"{V1}/webhooks/clerk", content=b"{}")

        assert response.status_code == 400
        assert response.json() == {"detail": "Missing svix headers"}

    async def test_user_created(self, api, monkeypatch, auth_headers):
        monkeypatch.setattr(settings, "CLERK_WEBHOOK_SECRET", WEBHOOK_SECRET)
        payload, headers = signed_webhook(user_event(clerk_id="user_ada"))

        response = await api.post(f"{V1}/webhooks/clerk", content=payload, headers=headers)

        assert response.json() == {"message": "User synced"}
        me = await api.get(f"{V1}/users/me", headers=auth_headers("user_ada"))
        assert me.json()["name"] == "Ada Lovelace"


class TestWaitlist:
    async def test_join_twice_and_count(self, api):
        first = await api.post(f"{V1}/waitlist", json={"email": "early@example.com"})
        second = await api.post(f"{V1}/waitlist", json={"email": "EARLY@example.com"})

        assert first.json()["already_exists"] is False
        assert second.json()["already_exists"] is True
        assert (await api.get(f"{V1}/waitlist/count")).json() == {"count": 1}

    @pytest.mark.parametrize("email", ["", "not-an-email"])
    async def test_invalid_email(self, api, email):
        response = await api.post(f"{V1}/waitlist", json={"email": email})

        assert response.status_code == 422
