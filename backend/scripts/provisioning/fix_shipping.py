#!/usr/bin/env python3
"""
Fix Shipping
Re-creates the Pakistan shipping setup (profile, warehouse, fulfillment set,
service zone and the three shipping options) for an already seeded store.

Usage:
    python -m scripts.provisioning.fix_shipping [--dry-run] [--backend-url URL]

Author: Store Insights
Date: 2026-01-22
"""
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment
env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)

from scripts.provisioning.output import build_parser, print_report, run_script
from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.services.provisioning_service import ProvisioningError, StoreProvisioner


async def main():
    parser = build_parser('Fix shipping options for Pakistan')
    args = parser.parse_args()

    connector = MedusaConnector(base_url=args.backend_url)
    provisioner = StoreProvisioner(connector, dry_run=args.dry_run)

    print("🔧 Fixing shipping options for Pakistan...\n")

    try:
        report = await provisioner.fix_shipping()
    except ProvisioningError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except Exception as e:
        print_report(provisioner.report, args.dry_run)
        print(f"\n❌ Error fixing shipping: {e}")
        sys.exit(1)

    print_report(report, args.dry_run)
    if not args.dry_run:
        print("\n🎉 Shipping options configured!")


if __name__ == "__main__":
    run_script(main)
