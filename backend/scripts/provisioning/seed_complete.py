#!/usr/bin/env python3
"""
Complete Store Setup
Provisions sales channel, PKR store currency, Pakistan region and tax
region, warehouse, shipping (Standard/Express/Free), publishable key,
categories and sample products. Safe to re-run.

Usage:
    python -m scripts.provisioning.seed_complete [--dry-run] [--backend-url URL]

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
from store_insights.services.provisioning_service import StoreProvisioner


async def main():
    parser = build_parser('Complete store setup for Pakistan')
    args = parser.parse_args()

    connector = MedusaConnector(base_url=args.backend_url)
    provisioner = StoreProvisioner(connector, dry_run=args.dry_run)

    print(f"\n{'='*60}")
    print("🚀 Starting complete store setup for Pakistan")
    print(f"   Backend: {connector.base_url}")
    print(f"{'='*60}\n")

    try:
        report = await provisioner.seed_complete()
    except Exception as e:
        print_report(provisioner.report, args.dry_run)
        print(f"\n❌ Error during setup: {e}")
        sys.exit(1)

    print_report(report, args.dry_run)
    if not args.dry_run:
        print("\n🎉 Setup complete! Store ready for Pakistan (PKR)")
        print("   Shipping: Standard PKR 250 | Express PKR 500 | Free PKR 0")


if __name__ == "__main__":
    run_script(main)
