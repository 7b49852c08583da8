"""
Catalog — destinations, bundles and the packages sold for each.

    locations.py      Pure helpers: bundle detection, names, flags, regions, slugs
    country_names.py  Display-name lookup from the REST Countries API (cached)
    service.py        Storefront reads with live package aggregates
    sync.py           Partner catalog → local packages/countries
"""
