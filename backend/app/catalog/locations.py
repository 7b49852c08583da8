"""
Location-code helpers shared by catalog sync, admin tools and the storefront.

A location code is either an ISO 3166-1 alpha-2 country code ("JP") or a
partner bundle code ("EU-42", "EU_AS", "DE,FR,IT", "GLOBAL").
"""

from __future__ import annotations

import re
from typing import Mapping

from app.core.constants import BUNDLE_FLAG, BUNDLE_REGION, DEFAULT_REGION, UNKNOWN_FLAG

_REGIONAL_INDICATOR_A = 0x1F1E6

# ── Regions ───────────────────────────────────

_REGION_CODES: dict[str, str] = {
    "Europe": (
        "AT BE BG HR CY CZ DK EE FI FR DE GR HU IE IT LV LT LU MT NL PL PT RO SK SI "
        "ES SE GB CH NO IS UA RS AL MK BA ME XK MD BY RU"
    ),
    "Asia": (
        "CN JP KR IN ID TH VN MY SG PH TW HK MO BD PK LK NP MM KH LA MN KZ UZ AF TJ "
        "KG TM AZ GE AM"
    ),
    "Americas": (
        "US CA MX BR AR CL CO PE VE EC BO PY UY CR PA GT HN SV NI CU DO PR JM TT HT "
        "BS BB BZ GY SR"
    ),
    "Oceania": "AU NZ FJ PG WS TO VU SB",
    "Africa": (
        "ZA EG NG KE GH TZ UG ET MA TN DZ SN CI CM ZW AO MZ MG RW ZM BW NA MW LY SD"
    ),
    "Middle East": "AE SA IL TR QA KW BH OM JO LB IQ IR YE SY PS",
}

REGION_BY_COUNTRY: dict[str, str] = {
    code: region for region, codes in _REGION_CODES.items() for code in codes.split()
}

# Auto-featured on the storefront after a sync
POPULAR_COUNTRIES = frozenset(
    "US GB JP KR TH FR DE IT ES AU CA SG NL CH AE HK TW MY ID VN "
    "PT GR TR MX BR NZ IE AT BE SE".split()
)

BUNDLE_NAMES: dict[str, str] = {
    "EU": "Europe",
    "EUROPE": "Europe",
    "AS": "Asia",
    "ASIA": "Asia",
    "AF": "Africa",
    "AFRICA": "Africa",
    "NA": "North America",
    "SA": "South America",
    "ME": "Middle East",
    "OC": "Oceania",
    "OCEANIA": "Oceania",
    "GLOBAL": "Global",
    "WORLD": "Worldwide",
    "EU_AS": "Europe & Asia",
    "AS_EU": "Asia & Europe",
    "EU_NA": "Europe & North America",
    "APAC": "Asia Pacific",
    "EMEA": "Europe, Middle East & Africa",
    "LATAM": "Latin America",
    "CARIBBEAN": "Caribbean",
    "SCHENGEN": "Schengen Zone",
    "BALTIC": "Baltic States",
    "NORDIC": "Nordic Countries",
    "BALKANS": "Balkans",
    "GCC": "Gulf Countries",
    "ASEAN": "Southeast Asia",
    "CIS": "CIS Countries",
}

_REGION_COUNT_RE = re.compile(r"^([A-Z]+)(\d+)$")


def is_bundle(code: str) -> bool:
    """True for multi-country / regional codes, False for ISO alpha-2."""
    if any(sep in code for sep in (",", "_", "-")):
        return True
    return len(code) > 2


def normalize_location_code(code: str) -> str:
    """Bundles keep the partner's spelling; countries are upper-cased."""
    return code if is_bundle(code) else code.upper()


def flag_emoji(code: str) -> str:
    code = code.upper()
    if len(code) != 2 or not code.isascii() or not code.isalpha():
        return UNKNOWN_FLAG
    return "".join(chr(_REGIONAL_INDICATOR_A + ord(ch) - ord("A")) for ch in code)


def region_for_country(code: str) -> str:
    return REGION_BY_COUNTRY.get(code.upper(), DEFAULT_REGION)


def bundle_name(code: str, api_name: str = "", country_names: Mapping[str, str] | None = None) -> str:
    """
    Friendly display name for a bundle code.

    Order of preference: known bundle name, a descriptive partner name,
    "EU42" → "Europe 42 Countries", short comma lists spelled out,
    underscore joins ("EU_NA" parts joined with " & ").
    """
    country_names = country_names or {}
    upper = code.upper()
    if upper in BUNDLE_NAMES:
        return BUNDLE_NAMES[upper]

    if api_name and api_name != code and len(api_name) > 3 and "," not in api_name and "_" not in api_name:
        return api_name

    match = _REGION_COUNT_RE.match(upper)
    if match:
        region, count = match.groups()
        return f"{BUNDLE_NAMES.get(region, region)} {count} Countries"

    if "," in code:
        parts = code.split(",")
        if len(parts) <= 3:
            names = [country_names.get(p.upper(), p) for p in parts]
            if names and all(len(n) > 2 for n in names):
                return ", ".join(names)
        return f"{len(parts)} Countries Bundle"

    if "_" in code:
        return " & ".join(BUNDLE_NAMES.get(p.upper(), p) for p in code.split("_"))

    return api_name or code


def location_info(
    code: str,
    api_name: str = "",
    country_names: Mapping[str, str] | None = None,
) -> dict[str, object]:
    """Name, region, flag and popularity for a (normalised) location code."""
    country_names = country_names or {}
    if is_bundle(code):
        return {
            "name": bundle_name(code, api_name, country_names),
            "region": BUNDLE_REGION,
            "flag_emoji": BUNDLE_FLAG,
            "popular": False,
        }
    upper = code.upper()
    return {
        "name": country_names.get(upper) or api_name or upper,
        "region": region_for_country(upper),
        "flag_emoji": flag_emoji(upper),
        "popular": upper in POPULAR_COUNTRIES,
    }


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")
