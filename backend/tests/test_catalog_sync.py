"""Tests for partner catalog sync and package preview."""

import httpx
import pytest

from app.catalog import country_names
from app.catalog.sync import fetch_package_from_api, sync_packages
from app.core.errors import PackageNotFoundError
from app.esim_access.client import PACKAGE_LIST
from app.repositories import countries as country_repository
from app.repositories import packages as package_repository
from tests.factories import make_bundle, ok, partner_package


def names_transport(countries=None, status_code=200):
    countries = countries if countries is not None else [
        {"cca2": "JP", "name": {"common": "Japan"}},
        {"cca2": "DE", "name": {"common": "Germany"}},
        {"cca2": "FR", "name": {"common": "France"}},
    ]
    return httpx.MockTransport(lambda request: httpx.Response(status_code, json=countries))


CATALOG = [
    partner_package("JP-1", location_code="jp", location_name="Japan", price=25000),
    partner_package("JP-2", location_code="JP", location_name="Japan", price=10000),
    partner_package("EU-1", location_code="EU-42", location_name="Europe", price=99000),
    partner_package("DF-1", location_code="DE,FR", location_name="DE,FR", price=50000),
]


class TestSyncPackages:
    async def test_upserts_packages_with_converted_prices(self, db, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": CATALOG}))

        result = await sync_packages(db, esim_client, names_transport=names_transport())

        assert result.as_dict() == {"synced": 4, "countries": 3}
        jp1 = await package_repository.get_by_code(db, "JP-1")
        assert jp1.location_code == "JP"
        assert jp1.price == 250
        assert jp1.retail_price == 425
        assert jp1.active_type == "1"
        eu1 = await package_repository.get_by_code(db, "EU-1")
        assert eu1.location_code == "EU-42"

    async def test_full_sync_requests_large_page(self, db, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": []}))

        await sync_packages(db, esim_client, names_transport=names_transport())

        assert partner.calls(PACKAGE_LIST) == [{"pager": {"pageNum": 1, "pageSize": 5000}}]

    async def test_location_sync_filters_by_code(self, db, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": CATALOG[:2]}))

        result = await sync_packages(db, esim_client, location_code="JP", names_transport=names_transport())

        assert partner.calls(PACKAGE_LIST) == [{"locationCode": "JP"}]
        assert result.location_codes == ["JP"]

    async def test_one_location_per_code(self, db, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": CATALOG}))

        await sync_packages(db, esim_client, names_transport=names_transport())

        japan = await country_repository.get_by_code(db, "JP")
        assert japan.name == "Japan"
        assert japan.region == "Asia"
        assert japan.flag_emoji == "🇯🇵"
        assert japan.package_count == 2
        assert japan.min_price == 170
        assert japan.popular is True

        pair = await country_repository.get_by_code(db, "DE,FR")
        assert pair.region == "Bundle"
        assert pair.name == "Germany, France"
        assert pair.flag_emoji == "🌐"

    async def test_admin_bundle_fields_survive(self, db, partner, esim_client):
        bundle = await make_bundle(db, "EU-42", name="Old name", slug="europe-deluxe")
        bundle.description = "Hand written"
        bundle.included_countries = ["FR", "DE"]
        await db.flush()
        partner.on(PACKAGE_LIST, ok({"packageList": CATALOG}))

        await sync_packages(db, esim_client, names_transport=names_transport())

        refreshed = await country_repository.get_by_code(db, "EU-42")
        assert refreshed.name == "Europe"
        assert refreshed.custom_name == "Old name"
        assert refreshed.slug == "europe-deluxe"
        assert refreshed.description == "Hand written"
        assert refreshed.included_countries == ["FR", "DE"]

    async def test_resync_updates_in_place(self, db, partner, esim_client):
        partner.on(PACKAGE_LIST, [ok({"packageList": CATALOG}), ok({"packageList": [
            partner_package("JP-1", location_code="JP", location_name="Japan", price=30000),
        ]})])

        await sync_packages(db, esim_client, names_transport=names_transport())
        second = await sync_packages(db, esim_client, names_transport=names_transport())

        assert second.created == 0
        assert (await package_repository.get_by_code(db, "JP-1")).price == 300
        assert await package_repository.count_packages(db) == 4

    async def test_country_name_failure_is_ignored(self, db, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": CATALOG[:1]}))

        await sync_packages(db, esim_client, names_transport=names_transport(status_code=500))

        assert (await country_repository.get_by_code(db, "JP")).name == "Japan"


class TestCountryNames:
    async def test_cached_per_process(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[{"cca2": "jp", "name": {"common": "Japan"}}])

        transport = httpx.MockTransport(handler)
        first = await country_names.fetch_country_names(transport=transport)
        second = await country_names.fetch_country_names(transport=transport)

        assert first == {"JP": "Japan"}
        assert second is first
        assert len(calls) == 1

    async def test_failure_returns_empty_and_retries_next_time(self):
        def broken(request):
            raise httpx.ConnectError("down", request=request)

        assert await country_names.fetch_country_names(transport=httpx.MockTransport(broken)) == {}
        assert await country_names.fetch_country_names(transport=names_transport()) == {
            "JP": "Japan",
            "DE": "Germany",
            "FR": "France",
        }


class TestFetchPackageFromApi:
    async def test_preview_with_converted_prices(self, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": [partner_package("JP-1", price=25000)]}))

        preview = await fetch_package_from_api(esim_client, "JP-1")

        assert partner.calls(PACKAGE_LIST) == [{"packageCode": "JP-1"}]
        assert preview["package_code"] == "JP-1"
        assert preview["price"] == 250
        assert preview["retail_price"] == 425
        assert preview["location_name"] == "Japan"

    async def test_unknown_package(self, partner, esim_client):
        partner.on(PACKAGE_LIST, ok({"packageList": []}))

        with pytest.raises(PackageNotFoundError, match="Package not found: NOPE"):
            await fetch_package_from_api(esim_client, "NOPE")
