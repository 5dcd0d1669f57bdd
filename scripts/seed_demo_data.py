#!/usr/bin/env python3
"""
Create the schema and load demo reference data into the configured database.
Run it directly after setting DATABASE_URL; it prints a JSON summary and exits non-zero on failure.
"""
# ruff: noqa: E402

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from servicemap.api.db_access import DatabaseClient
from servicemap.common.logging import configure_logging
from servicemap.common.settings import get_settings
from servicemap.geo.address_catalog import get_address_catalog
from servicemap.geo.distance import GeoPoint
from servicemap.seeding import DEFAULT_CENTER, seed_reference_data


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the service directory with demo data")
    parser.add_argument("--services", type=int, default=200, help="Number of demo services to generate")
    parser.add_argument("--country", default="VN", help="Country code used for generated services")
    parser.add_argument("--latitude", type=float, default=DEFAULT_CENTER.latitude, help="Centre latitude")
    parser.add_argument("--longitude", type=float, default=DEFAULT_CENTER.longitude, help="Centre longitude")
    parser.add_argument("--radius-km", type=float, default=10.0, help="Scatter radius around the centre")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data")
    parser.add_argument("--reset", action="store_true", help="Drop existing tables before seeding")
    parser.add_argument("--no-demo-user", action="store_true", help="Skip creating the demo account")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()
    settings = get_settings()

    summary = seed_reference_data(
        DatabaseClient(database_url=settings.DATABASE_URL),
        catalog=get_address_catalog(),
        services_count=args.services,
        country_code=args.country.upper(),
        center=GeoPoint(latitude=args.latitude, longitude=args.longitude),
        radius_km=args.radius_km,
        random_seed=args.seed,
        reset=args.reset,
        with_demo_user=not args.no_demo_user,
    )
    print(json.dumps(summary.as_dict(), indent=2))


if __name__ == "__main__":
    main()
