"""Tests for storefront catalog reads."""

from app.catalog import service as catalog_service
from tests.factories import GB, make_bundle, make_country, make_package


class TestCountries:
    async def test_enriched_with_live_aggregates(self, db):
        await make_country(db, "JP", min_price=999)
        await make_package(db, "JP-1", retail_price=500)
        await make_package(db, "JP-2", retail_price=300)

        [japan] = await catalog_service.list_countries(db)

        assert japan["code"] == "JP"
        assert japan["package_count"] == 2
        assert japan["min_price"] == 300

    async def test_stored_min_price_is_fallback(self, db):
        await make_country(db, "FR", name="France", region="Europe", min_price=777)

        [france] = await catalog_service.list_countries(db)

        assert france["package_count"] == 0
        assert france["min_price"] == 777

    async def test_synthesized_from_packages_when_no_countries(self, db):
        await make_package(db, "JP-1", retail_price=500)
        await make_package(db, "JP-2", retail_price=300)
        await make_package(db, "EU-1", location_code="EU-42", location_name="Europe")

        countries = await catalog_service.list_countries(db)

        assert countries == [
            {
                "id": None,
                "code": "JP",
                "name": "Japan",
                "region": "Other",
                "flag_emoji": "🇯🇵",
                "min_price": 300,
                "package_count": 2,
                "popular": False,
            }
        ]

    async def test_by_region(self, db):
        await make_country(db, "JP")
        await make_country(db, "FR", name="France", region="Europe")

        countries = await catalog_service.list_countries_by_region(db, "Europe")

        assert [c["code"] for c in countries] == ["FR"]

    async def test_marquee_skips_short_names_and_missing_flags(self, db):
        await make_country(db, "JP")
        await make_country(db, "XX", name="XX")
        await make_country(db, "YY", name="Nowhere", flag_emoji="")

        marquee = await catalog_service.list_marquee_countries(db)

        assert marquee == [{"name": "Japan", "flag_emoji": "🇯🇵"}]

    async def test_marquee_is_capped(self, db):
        for i in range(15):
            await make_country(db, f"C{i:02d}", name=f"Country {i}")

        assert len(await catalog_service.list_marquee_countries(db)) == 12

    async def test_popular(self, db):
        await make_country(db, "JP", popular=True)
        await make_country(db, "FR", name="France", region="Europe")

        popular = await catalog_service.list_popular_countries(db)

        assert [c["code"] for c in popular] == ["JP"]

    async def test_get_country_upper_cases_code(self, db):
        await make_country(db, "JP")

        assert (await catalog_service.get_country(db, "jp"))["name"] == "Japan"
        assert await catalog_service.get_country(db, "zz") is None


class TestPackages:
    async def test_for_location_sorted_by_volume_then_duration(self, db):
        await make_package(db, "JP-5-30", volume=5 * GB, duration=30)
        await make_package(db, "JP-1-30", volume=GB, duration=30)
        await make_package(db, "JP-1-7", volume=GB, duration=7)
        await make_package(db, "FR-1-7", location_code="FR", location_name="France")

        packages = await catalog_service.list_packages_for_location(db, "jp")

        assert [p.package_code for p in packages] == ["JP-1-7", "JP-1-30", "JP-5-30"]

    async def test_get_packages_skips_unknown_codes(self, db):
        await make_package(db, "A")
        await make_package(db, "B")

        packages = await catalog_service.get_packages(db, ["B", "missing", "A"])

        assert [p.package_code for p in packages] == ["B", "A"]

    async def test_search_is_case_insensitive_on_name_or_location(self, db):
        await make_package(db, "JP-1", name="Japan 1GB 7Days")
        await make_package(db, "TH-1", location_code="TH", location_name="Thailand", name="Asia starter")
        await make_package(db, "FR-1", location_code="FR", location_name="France", name="France 1GB")

        by_location = await catalog_service.search_packages(db, "THAI")
        by_name = await catalog_service.search_packages(db, "asia")

        assert [p.package_code for p in by_location] == ["TH-1"]
        assert [p.package_code for p in by_name] == ["TH-1"]

    async def test_search_is_capped(self, db):
        for i in range(25):
            await make_package(db, f"JP-{i}")

        assert len(await catalog_service.search_packages(db, "japan")) == 20


class TestBundles:
    async def test_list_bundles_only(self, db):
        await make_country(db, "JP")
        await make_bundle(db, "EU-42")
        await make_package(db, "EU-1", location_code="EU-42", location_name="Europe", retail_price=1999)

        bundles = await catalog_service.list_bundles(db)

        assert [(b["code"], b["package_count"], b["min_price"]) for b in bundles] == [("EU-42", 1, 1999)]

    async def test_get_bundle_by_slug_then_code(self, db):
        await make_bundle(db, "EU-42", name="Europe Plus", slug="europe-plus")

        assert (await catalog_service.get_bundle(db, "europe-plus"))["code"] == "EU-42"
        assert (await catalog_service.get_bundle(db, "EU-42"))["slug"] == "europe-plus"
        assert await catalog_service.get_bundle(db, "nothing") is None

    async def test_get_bundle_rejects_countries(self, db):
        await make_country(db, "JP")

        assert await catalog_service.get_bundle(db, "JP") is None

    async def test_bundle_packages_by_slug(self, db):
        await make_bundle(db, "EU-42", name="Europe Plus", slug="europe-plus")
        await make_package(db, "EU-1", location_code="EU-42", location_name="Europe")

        packages = await catalog_service.list_bundle_packages(db, "europe-plus")

        assert [p.package_code for p in packages] == ["EU-1"]
