#!/usr/bin/env python3
"""
Populate the local locality store with towns, villages and other named
places from OpenStreetMap, one county at a time.

Usage:
    python populate_localities.py                 # every known county
    python populate_localities.py wicklow kerry   # just these
"""

import asyncio
import argparse
import logging
import sys

from app.core.logger import logs
from app.core.overpass_connection import overpass_connection
from app.repos.local_repo import LocalityRepository
from app.services.county_bounds import IRISH_COUNTY_BOUNDS
from app.services.Geo_service import GeoResolver, get_default_geo_resolver

# Pause between counties to be nice to OSM
COUNTY_PAUSE_SECONDS = 1.0


async def populate_localities(
    resolver: GeoResolver,
    repo: LocalityRepository,
    counties: list[str],
    pause_seconds: float = COUNTY_PAUSE_SECONDS,
) -> dict[str, int]:
    """Returns the number of localities added per county."""
    added: dict[str, int] = {}

    for county in counties:
        print(f"\n📍 Processing {county}...")
        existing = repo.get_localities(county)
        print(f"   Existing localities: {len(existing)}")

        towns = await resolver.list_places_in_county(county)
        print(f"   OSM returned: {len(towns)} localities")
        if not towns:
            print(f"   ⚠️  No localities found on OSM for {county}")
            added[county] = 0
            continue

        count = repo.add_localities(county, towns)
        added[county] = count
        if count:
            print(f"   ✅ Added {count} new localities to {county}")
        else:
            print(f"   ✅ No new localities to add (all {len(towns)} already exist)")

        if pause_seconds:
            await asyncio.sleep(pause_seconds)

    return added


async def main(argv: list[str] = None) -> int:
    parser = argparse.ArgumentParser(description="Populate localities from OSM Overpass")
    parser.add_argument("counties", nargs="*", help="County names (default: all known counties)")
    parser.add_argument("--data-dir", default=None, help="Override DATA_DIR for the JSON store")
    args = parser.parse_args(argv)

    counties = args.counties or sorted(IRISH_COUNTY_BOUNDS)
    print(f"🗺️  Starting OSM localities population for {len(counties)} counties...")

    try:
        added = await populate_localities(
            get_default_geo_resolver(),
            LocalityRepository(args.data_dir),
            counties,
        )
    finally:
        await overpass_connection.aclose()

    print(f"\n🎉 Completed! Added {sum(added.values())} localities total")
    print("\n📊 Summary:")
    for county, count in added.items():
        print(f"   {county}: +{count}")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except Exception as e:
        logs.log(logging.ERROR, f"Locality population failed: {str(e)}")
        print(f"💥 Script failed: {e}")
        sys.exit(1)
