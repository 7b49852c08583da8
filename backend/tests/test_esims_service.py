"""Tests for eSIM lifecycle operations."""

import httpx
import pytest

from app.core.constants import EsimStatus, UserRole
from app.core.errors import EsimAccessError, EsimNotFoundError, PermissionDeniedError
from app.esim_access.client import ESIM_CANCEL, ESIM_QUERY, ESIM_REVOKE, ESIM_SUSPEND, ESIM_UNSUSPEND
from app.repositories import esims as esim_repository
from app.services import esims as esim_service
from tests.factories import make_esim, make_order, make_package, make_user, ok, partner_error, profile


async def _owned_esim(db, iccid="8901", *, user=None):
    user = user or await make_user(db)
    pkg = await make_package(db)
    order = await make_order(db, user, [(pkg, 1)], transaction_id=f"SIM-TEST-{iccid}")
    esim = await make_esim(db, order, iccid)
    return user, esim


class TestGetOwnedEsim:
    async def test_owner(self, db):
        user, esim = await _owned_esim(db)

        assert await esim_service.get_owned_esim(db, "8901", user) is esim

    async def test_other_user_is_denied(self, db):
        await _owned_esim(db)
        stranger = await make_user(db, "stranger@example.com", clerk_id="user_stranger")

        with pytest.raises(PermissionDeniedError):
            await esim_service.get_owned_esim(db, "8901", stranger)

    async def test_admin_may_access_any(self, db):
        await _owned_esim(db)
        admin = await make_user(db, "admin@example.com", clerk_id="user_admin", role=UserRole.ADMIN)

        assert (await esim_service.get_owned_esim(db, "8901", admin)).iccid == "8901"

    async def test_unknown_iccid(self, db):
        user = await make_user(db)

        with pytest.raises(EsimNotFoundError):
            await esim_service.get_owned_esim(db, "0000", user)


class TestRefresh:
    async def test_updates_status_usage_and_expiry(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        partner.on(ESIM_QUERY, ok({"esimList": [profile("8901", status="IN_USE", usage=512)]}))

        result = await esim_service.refresh_esim_status(db, "8901", client=esim_client)

        assert result.esim_status == "IN_USE"
        assert esim.status == "IN_USE"
        assert esim.data_used == 512
        assert esim.expires_at.year == 2026
        assert partner.calls(ESIM_QUERY)[0]["iccid"] == "8901"

    async def test_missing_usage_keeps_stored_value(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        esim.data_used = 100
        partner.on(ESIM_QUERY, ok({"esimList": [profile("8901", usage=None, expired_time=None)]}))

        await esim_service.refresh_esim_status(db, "8901", client=esim_client)

        assert esim.data_used == 100
        assert esim.expires_at is None

    async def test_unknown_profile_returns_none(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        partner.on(ESIM_QUERY, ok({"esimList": []}))

        assert await esim_service.refresh_esim_status(db, "8901", client=esim_client) is None
        assert esim.status == "GOT_RESOURCE"


class TestLifecycle:
    async def test_suspend_then_refresh(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        partner.on(ESIM_SUSPEND, ok())
        partner.on(ESIM_QUERY, ok({"esimList": [profile("8901", status="SUSPENDED")]}))

        await esim_service.suspend_esim(db, "8901", client=esim_client)

        assert partner.calls(ESIM_SUSPEND) == [{"iccid": "8901"}]
        assert esim.status == EsimStatus.SUSPENDED

    async def test_unsuspend_then_refresh(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        esim.status = EsimStatus.SUSPENDED.value
        partner.on(ESIM_UNSUSPEND, ok())
        partner.on(ESIM_QUERY, ok({"esimList": [profile("8901", status="IN_USE")]}))

        await esim_service.unsuspend_esim(db, "8901", client=esim_client)

        assert esim.status == EsimStatus.IN_USE

    async def test_cancel_sets_local_status(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        partner.on(ESIM_CANCEL, ok())

        await esim_service.cancel_esim(db, "8901", client=esim_client)

        assert esim.status == EsimStatus.CANCEL
        assert partner.calls(ESIM_QUERY) == []

    async def test_revoke_sets_local_status(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        partner.on(ESIM_REVOKE, ok())

        await esim_service.revoke_esim(db, "8901", client=esim_client)

        assert esim.status == EsimStatus.REVOKED

    async def test_partner_rejection_leaves_row_untouched(self, db, partner, esim_client):
        _, esim = await _owned_esim(db)
        partner.on(ESIM_CANCEL, partner_error("200011", "Profile already installed"))

        with pytest.raises(EsimAccessError, match="200011"):
            await esim_service.cancel_esim(db, "8901", client=esim_client)

        assert esim.status == "GOT_RESOURCE"


class TestRefreshAllUserEsims:
    async def test_one_failure_does_not_stop_the_rest(self, db, partner, esim_client):
        user, first = await _owned_esim(db, "8901")
        _, second = await _owned_esim(db, "8902", user=user)

        def query(body):
            if body["iccid"] == "8901":
                return partner_error("500000", "Upstream down")
            return ok({"esimList": [profile("8902", status="IN_USE", usage=7)]})

        partner.on(ESIM_QUERY, query)

        results = await esim_service.refresh_all_user_esims(db, "user_buyer", client=esim_client)

        assert sorted(results, key=lambda r: r["iccid"]) == [
            {"iccid": "8901", "success": False, "error": "API error: 500000 - Upstream down"},
            {"iccid": "8902", "success": True},
        ]
        assert first.status == "GOT_RESOURCE"
        assert second.status == "IN_USE"
        assert second.data_used == 7

    async def test_non_json_response_does_not_stop_the_rest(self, db, partner, esim_client):
        user, _ = await _owned_esim(db, "8901")
        _, second = await _owned_esim(db, "8902", user=user)

        def query(body):
            if body["iccid"] == "8901":
                return httpx.Response(200, text="<html>Bad Gateway</html>")
            return ok({"esimList": [profile("8902", status="IN_USE")]})

        partner.on(ESIM_QUERY, query)

        results = await esim_service.refresh_all_user_esims(db, "user_buyer", client=esim_client)

        assert sorted(results, key=lambda r: r["iccid"]) == [
            {"iccid": "8901", "success": False, "error": "API request failed: invalid JSON response"},
            {"iccid": "8902", "success": True},
        ]
        assert second.status == "IN_USE"

    async def test_unknown_user(self, db, esim_client):
        assert await esim_service.refresh_all_user_esims(db, "user_nobody", client=esim_client) == []

    async def test_profiles_the_partner_no_longer_knows_are_skipped(self, db, partner, esim_client):
        await _owned_esim(db)
        partner.on(ESIM_QUERY, ok({"esimList": []}))

        assert await esim_service.refresh_all_user_esims(db, "user_buyer", client=esim_client) == []


class TestBalance:
    async def test_balance_views(self, partner, esim_client):
        partner.on("/api/v1/open/balance/query", ok({"balance": 1234500}))

        assert await esim_service.get_merchant_balance(esim_client) == {
            "balance": 1234500,
            "balance_dollars": 123.45,
            "balance_cents": 12345,
        }


async def test_esims_are_listed_per_user(db):
    user, _ = await _owned_esim(db, "8901")
    await _owned_esim(db, "8902", user=user)

    assert {e.iccid for e in await esim_repository.list_for_user(db, user.id)} == {"8901", "8902"}
