"""Tests for the command-line entry point."""
import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from finn.config import AppSettings
from finn.main import main

EXPENSES = "Date,Description,Amount\n2024-01-01,Monthly Rent,2000\n2024-01-05,Starbucks Coffee,6.20\n"


class TestMain(unittest.TestCase):
    """Test CLI commands against a temporary Finn home."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        env = mock.patch.dict(os.environ, {"FINN_HOME": str(self.test_dir)})
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop("GEMINI_API_KEY", None)

        settings = AppSettings.load()
        for target, value in (("finn.main.get_settings", lambda: settings),
                              ("finn.main.configure_logging", lambda *args: None)):
            patcher = mock.patch(target, value)
            patcher.start()
            self.addCleanup(patcher.stop)

        self.expenses = self.test_dir / "expenses.csv"
        self.expenses.write_text(EXPENSES, encoding="utf-8")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_analyze_json(self):
        code, out, _ = self.run_cli("analyze", str(self.expenses), "--offline", "--json", "--profile", "alice")

        self.assertEqual(code, 0)
        metadata = json.loads(out)
        self.assertEqual(metadata["transactionCount"], 2)
        self.assertTrue((self.test_dir / "profiles" / "alice.json").exists())

    def test_analyze_summary_without_key(self):
        code, out, _ = self.run_cli("analyze", str(self.expenses))

        self.assertEqual(code, 0)
        self.assertIn("Transactions: 2", out)
        self.assertIn("keyword heuristics", out)
        self.assertTrue((self.test_dir / "profiles" / "default.json").exists())

    def test_analyze_rejects_file_without_transactions(self):
        empty = self.test_dir / "empty.csv"
        empty.write_text("Date,Description,Amount\n", encoding="utf-8")

        code, _, err = self.run_cli("analyze", str(empty), "--offline")

        self.assertEqual(code, 1)
        self.assertIn("different file", err)

    def test_show_and_clear_profile(self):
        self.run_cli("analyze", str(self.expenses), "--offline", "--profile", "bob")

        code, out, _ = self.run_cli("show-profile", "--profile", "bob")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["identity"]["userId"], "bob")

        code, out, _ = self.run_cli("clear-profile", "--profile", "bob")
        self.assertIn("Deleted profile: bob", out)

        code, out, _ = self.run_cli("show-profile", "--profile", "bob")
        self.assertEqual(code, 1)

    def test_clear_cache(self):
        vendors = self.test_dir / "vendors"
        vendors.mkdir()
        (vendors / "alice.json").write_text("{}", encoding="utf-8")

        code, out, _ = self.run_cli("clear-cache")

        self.assertEqual(code, 0)
        self.assertIn("Cleared 1 learned merchants", out)


if __name__ == "__main__":
    unittest.main()
