"""
Unit tests for the provisioning scripts' shared console helpers

Author: Store Insights
Date: 2026-01-26
"""
import pytest

from scripts.provisioning.output import build_parser, print_report, run_script
from store_insights.services.provisioning_service import ProvisioningReport


class TestRunScript:

    def test_runs_coroutine(self):
        """The script coroutine is awaited to completion"""
        seen = []

        async def main():
            seen.append('ran')

        run_script(main)
        assert seen == ['ran']

    def test_ctrl_c_exits_with_status_1(self, capsys):
        """Ctrl-C during the run prints a notice and exits 1"""
        async def main():
            raise KeyboardInterrupt

        with pytest.raises(SystemExit) as exc_info:
            run_script(main)

        assert exc_info.value.code == 1
        assert "Interrupted by user" in capsys.readouterr().out


class TestParser:

    def test_dry_run_flag(self):
        """Provisioning scripts accept --dry-run and --backend-url"""
        args = build_parser('setup').parse_args(['--dry-run', '--backend-url', 'http://medusa.test'])
        assert args.dry_run is True
        assert args.backend_url == 'http://medusa.test'

    def test_read_only_scripts_reject_dry_run(self):
        """Listing scripts have no --dry-run option"""
        with pytest.raises(SystemExit):
            build_parser('list', dry_run=False).parse_args(['--dry-run'])


class TestPrintReport:

    def test_dry_run_summary(self, capsys):
        """Planned steps are counted and the dry-run notice is shown"""
        report = ProvisioningReport()
        report.add('region', 'planned', 'dry-run:region', 'Pakistan')
        report.add('sales channel', 'existing', 'sc_1')

        print_report(report, dry_run=True)
        out = capsys.readouterr().out

        assert "[planned] region: Pakistan (dry-run:region)" in out
        assert "Planned: 1" in out
        assert "DRY RUN completed" in out
