"""
Console output shared by the provisioning scripts
"""
import argparse
import asyncio
import sys
from typing import Awaitable, Callable

from store_insights.services.provisioning_service import ProvisioningReport

ACTION_ICONS = {
    'created': "✅",
    'updated': "🔗",
    'existing': "✓ ",
    'planned': "📝",
}


def build_parser(description: str, dry_run: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument('--backend-url', help='Commerce backend URL (default: MEDUSA_BACKEND_URL)')
    if dry_run:
        parser.add_argument('--dry-run', action='store_true', help='Show what would be created without changing anything')
    return parser


def print_report(report: ProvisioningReport, dry_run: bool = False) -> None:
    for step in report.steps:
        icon = ACTION_ICONS.get(step.action, "  ")
        label = f"{step.step}: {step.detail}" if step.detail else step.step
        suffix = f" ({step.resource_id})" if step.resource_id else ""
        print(f"  {icon} [{step.action}] {label}{suffix}")

    print(f"\n{'='*60}")
    print("📊 SUMMARY")
    print(f"{'='*60}")
    print(f"Steps: {len(report.steps)}")
    print(f"Created/updated: {len(report.created)}")
    if dry_run:
        planned = sum(1 for s in report.steps if s.action == 'planned')
        print(f"Planned: {planned}")
        print("\n⚠️  DRY RUN completed - nothing was changed on the backend")


def run_script(main: Callable[[], Awaitable[None]]) -> None:
    """Run a script coroutine; Ctrl-C exits with status 1"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        sys.exit(1)
