"""Tests for the keyword classifier."""
import json
import shutil
import tempfile
import unittest
from datetime import date
from pathlib import Path

from finn.analysis.categories import KeywordClassifier, category_totals, classify
from finn.analysis.models import CATEGORIES, Transaction
from finn.utils.exceptions import ConfigError


class TestKeywordClassifier(unittest.TestCase):
    """Test KeywordClassifier with the bundled table."""

    def setUp(self):
        self.classifier = KeywordClassifier()

    def test_known_descriptions(self):
        """Test one description per category."""
        cases = {
            "Starbucks Coffee": "Food & Dining",
            "Uber ride home": "Transportation",
            "Monthly Rent": "Housing",
            "Amazon Marketplace": "Shopping",
            "Electric Company": "Bills & Utilities",
            "Cinema City": "Entertainment",
            "Downtown Pharmacy": "Healthcare",
            "Coursera Plus": "Education",
        }
        for description, expected in cases.items():
            with self.subTest(description=description):
                self.assertEqual(self.classifier.classify(description), expected)

    def test_case_insensitive(self):
        self.assertEqual(self.classifier.classify("NETFLIX.COM"), "Entertainment")

    def test_unknown_is_other(self):
        self.assertEqual(self.classifier.classify("Mystery Vendor 42"), "Other")
        self.assertEqual(self.classifier.classify(""), "Other")

    def test_chinese_keywords(self):
        self.assertEqual(self.classifier.classify("滴滴出行"), "Transportation")
        self.assertEqual(self.classifier.classify("淘宝购物"), "Shopping")

    def test_training_is_not_transportation(self):
        """Test that substrings of longer words do not win over their own category."""
        self.assertEqual(self.classifier.classify("Python training course"), "Education")

    def test_short_keywords_match_word_starts(self):
        """Test that short keywords do not match inside longer words."""
        self.assertEqual(self.classifier.classify("Parent council dues"), "Other")
        self.assertEqual(self.classifier.classify("Torrent tracker donation"), "Other")
        self.assertEqual(self.classifier.classify("Rental deposit"), "Housing")
        self.assertEqual(self.classifier.classify("Las Vegas souvenir"), "Other")

    def test_first_matching_category_wins(self):
        """Test table order: food keywords are checked before shopping."""
        self.assertEqual(self.classifier.classify("Grocery store"), "Food & Dining")

    def test_category_names(self):
        names = self.classifier.category_names
        self.assertEqual(names[-1], "Other")
        self.assertEqual(set(names), set(CATEGORIES))

    def test_module_level_classify(self):
        self.assertEqual(classify("KFC Beijing"), "Food & Dining")


class TestCustomTable(unittest.TestCase):
    """Test loading alternative keyword tables."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _write(self, data) -> Path:
        path = self.test_dir / "categories.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_custom_table(self):
        path = self._write({"categories": [{"name": "Healthcare", "keywords": ["Vet"]}]})
        classifier = KeywordClassifier(path)
        self.assertEqual(classifier.classify("City vet clinic"), "Healthcare")
        self.assertEqual(classifier.classify("Starbucks"), "Other")

    def test_unknown_category_rejected(self):
        path = self._write({"categories": [{"name": "Pets", "keywords": ["vet"]}]})
        with self.assertRaises(ConfigError):
            KeywordClassifier(path)

    def test_missing_file_rejected(self):
        with self.assertRaises(ConfigError):
            KeywordClassifier(self.test_dir / "missing.json")


class TestCategoryTotals(unittest.TestCase):
    """Test category_totals."""

    def test_totals_sum_to_total(self):
        transactions = [
            Transaction(date(2024, 1, 1), "a", 10.0, "Food & Dining"),
            Transaction(date(2024, 1, 2), "b", 5.0, "Housing"),
            Transaction(date(2024, 1, 3), "c", 2.5, "Food & Dining"),
        ]

        totals = category_totals(transactions)

        self.assertEqual(list(totals), ["Food & Dining", "Housing"])
        self.assertAlmostEqual(totals["Food & Dining"], 12.5)
        self.assertAlmostEqual(sum(totals.values()), sum(t.amount for t in transactions))


if __name__ == "__main__":
    unittest.main()
