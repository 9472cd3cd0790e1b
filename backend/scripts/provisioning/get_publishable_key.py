#!/usr/bin/env python3
"""
Get Publishable Key
Prints the publishable API key(s) the storefront should use

Usage:
    python -m scripts.provisioning.get_publishable_key [--backend-url URL]
"""
import sys
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)

from scripts.provisioning.output import build_parser, run_script
from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.services.provisioning_service import list_publishable_keys


async def main():
    parser = build_parser('Show publishable API keys', dry_run=False)
    args = parser.parse_args()

    try:
        keys = await list_publishable_keys(MedusaConnector(base_url=args.backend_url))
    except Exception as e:
        print(f"❌ Error fetching API keys: {e}")
        sys.exit(1)

    if not keys:
        print("No publishable keys found.")
        return

    for key in keys:
        status = " (revoked)" if key['revoked'] else ""
        print(f"{key['title']}{status}")
        print(f"Key: {key['token']}")


if __name__ == "__main__":
    run_script(main)
