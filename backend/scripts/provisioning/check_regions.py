#!/usr/bin/env python3
"""
Check Regions
Lists the backend's regions with currency and countries

Usage:
    python -m scripts.provisioning.check_regions [--backend-url URL]
"""
import sys
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)

from scripts.provisioning.output import build_parser, run_script
from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.services.provisioning_service import list_regions


async def main():
    parser = build_parser('List backend regions', dry_run=False)
    args = parser.parse_args()

    try:
        regions = await list_regions(MedusaConnector(base_url=args.backend_url))
    except Exception as e:
        print(f"❌ Error fetching regions: {e}")
        sys.exit(1)

    print("=== REGIONS ===")
    if not regions:
        print("NO REGIONS FOUND!")
        return

    for region in regions:
        print(f"\nRegion: {region['name']} ({region['id']})")
        print(f"Currency: {region['currency_code']}")
        print(f"Countries: {', '.join(region['countries']) or '-'}")


if __name__ == "__main__":
    run_script(main)
