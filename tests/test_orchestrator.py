"""Tests for the analysis orchestrator."""
import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from finn.config import AppSettings, Config
from finn.llm import LLMCategorizer
from finn.orchestrator import AnalysisOrchestrator
from finn.profiles import InMemoryProfileStore
from finn.utils.exceptions import LLMError, NoValidTransactionsError, ValidationError

EXPENSES = "\n".join([
    "Date,Description,Amount",
    "2024-01-01,Monthly Rent,2000",
    "2024-01-03,Starbucks Coffee,5.80",
    "2024-01-09,Metro Card Top-up,50",
    "2024-01-15,SQ *BLUE BOTTLE,6.50",
    "2024-02-01,Monthly Rent,2000",
    "2024-02-04,Whole Foods Market,120.40",
    "2024-02-12,Netflix,15.99",
    "2024-02-20,Uber Trip,23.10",
    "2024-03-01,Monthly Rent,2000",
    "2024-03-08,Netflix,15.99",
])


class FakeClient:
    """Returns canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)

    def generate(self, prompt, json_mode=True):
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class TestAnalysisOrchestrator(unittest.TestCase):
    """Test AnalysisOrchestrator end to end."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        env = mock.patch.dict(os.environ, {"FINN_HOME": str(self.test_dir)})
        env.start()
        self.addCleanup(env.stop)

        self.settings = AppSettings.load()
        self.store = InMemoryProfileStore()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_offline_run_stores_profile(self):
        orchestrator = AnalysisOrchestrator(Config(use_llm=False), self.settings, self.store)

        processed = orchestrator.process_text(EXPENSES, "alice")

        self.assertEqual(processed.profile_id, "alice")
        self.assertEqual(processed.transactions_parsed, 10)
        self.assertFalse(processed.used_llm)
        self.assertFalse(orchestrator.llm_enabled)

        recurring = [r.name for r in processed.result.metadata.recurring_expenses]
        self.assertIn("Monthly Rent", recurring)
        self.assertIn("Netflix", recurring)

        profile = self.store.get("alice")
        self.assertEqual(profile["identity"]["userId"], "alice")
        self.assertEqual(profile["aiContext"]["totalInteractions"], 1)

    def test_second_upload_updates_profile(self):
        orchestrator = AnalysisOrchestrator(Config(use_llm=False), self.settings, self.store)

        orchestrator.process_text(EXPENSES, "alice")
        orchestrator.process_text(EXPENSES, "alice")

        self.assertEqual(self.store.get("alice")["aiContext"]["totalInteractions"], 2)

    def test_process_file_with_bom(self):
        path = self.test_dir / "expenses.csv"
        path.write_text("\ufeff" + EXPENSES, encoding="utf-8")
        orchestrator = AnalysisOrchestrator(Config(use_llm=False), self.settings, self.store)

        processed = orchestrator.process_file(path, "alice")

        self.assertEqual(processed.transactions_parsed, 10)

    def test_missing_file(self):
        orchestrator = AnalysisOrchestrator(Config(use_llm=False), self.settings, self.store)
        with self.assertRaises(ValidationError):
            orchestrator.process_file(self.test_dir / "missing.csv", "alice")

    def test_no_transactions(self):
        orchestrator = AnalysisOrchestrator(Config(use_llm=False), self.settings, self.store)
        with self.assertRaises(NoValidTransactionsError):
            orchestrator.process_text("Date,Description,Amount\n", "alice")
        self.assertIsNone(self.store.get("alice"))

    def test_llm_results_are_used(self):
        categorization = json.dumps({"transactions": [
            {"index": 3, "category": "Food & Dining", "merchantName": "Blue Bottle Coffee"},
        ]})
        insights = json.dumps({"hasKids": True, "location": "San Francisco", "estimatedIncome": 9000})
        llm = LLMCategorizer(FakeClient(categorization, insights))
        orchestrator = AnalysisOrchestrator(Config(), self.settings, self.store, llm=llm)

        processed = orchestrator.process_text(EXPENSES, "alice")

        self.assertTrue(processed.used_llm)
        blue_bottle = processed.result.transactions[3]
        self.assertEqual(blue_bottle.category, "Food & Dining")
        self.assertEqual(blue_bottle.merchant_name, "Blue Bottle Coffee")
        self.assertTrue(processed.result.metadata.lifestyle.has_kids)
        self.assertEqual(self.store.get("alice")["identity"]["location"], "San Francisco")

    def test_llm_failures_fall_back_to_heuristics(self):
        llm = LLMCategorizer(FakeClient(LLMError("down"), "not json"))
        orchestrator = AnalysisOrchestrator(Config(), self.settings, self.store, llm=llm)

        processed = orchestrator.process_text(EXPENSES, "alice")

        self.assertFalse(processed.used_llm)
        categories = [t.category for t in processed.result.transactions]
        self.assertEqual(categories[0], "Housing")
        self.assertIsNotNone(self.store.get("alice"))

    def test_settings_can_disable_llm(self):
        settings = AppSettings.load()
        settings.use_llm = False
        llm = LLMCategorizer(FakeClient())
        orchestrator = AnalysisOrchestrator(Config(), settings, self.store, llm=llm)

        processed = orchestrator.process_text(EXPENSES, "alice")

        self.assertFalse(processed.used_llm)


if __name__ == "__main__":
    unittest.main()
