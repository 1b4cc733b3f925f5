"""Tests for anomaly detection."""
import unittest
from datetime import date, timedelta

from finn.analysis.anomalies import detect_anomalies, detect_gaps, detect_outliers
from finn.analysis.models import Transaction


def daily(amounts, start=date(2024, 1, 1), description="Groceries"):
    return [
        Transaction(start + timedelta(days=i), description, amount)
        for i, amount in enumerate(amounts)
    ]


class TestOutliers(unittest.TestCase):
    """Test detect_outliers."""

    def test_large_purchase_is_flagged(self):
        """Test one large amount among fifty ordinary ones."""
        amounts = [90 + (i % 20) for i in range(50)] + [15000]
        transactions = daily(amounts)
        transactions[-1].description = "Designer Watch"

        anomalies = detect_outliers(transactions)

        self.assertEqual(len(anomalies), 1)
        self.assertEqual(anomalies[0].type, "unusual-spending")
        self.assertEqual(anomalies[0].amount, 15000)
        self.assertEqual(anomalies[0].description, "Unusually high expense: Designer Watch")
        self.assertFalse(anomalies[0].resolved)

    def test_moderate_purchase_is_not_flagged(self):
        """Test that a somewhat large amount next to a huge one is not reported."""
        amounts = [90 + (i % 20) for i in range(50)] + [15000, 150]
        anomalies = detect_outliers(daily(amounts))

        self.assertEqual([a.amount for a in anomalies], [15000])

    def test_four_sigma_point_in_tight_cluster(self):
        """Test that the only unusual-spending anomaly is the far outlier."""
        amounts = [100.0, 101.0, 99.0, 100.5, 99.5] * 20 + [400.0]
        anomalies = detect_outliers(daily(amounts))

        self.assertEqual([a.amount for a in anomalies], [400.0])

    def test_identical_amounts(self):
        self.assertEqual(detect_outliers(daily([50.0] * 10)), [])

    def test_empty_and_single(self):
        self.assertEqual(detect_outliers([]), [])
        self.assertEqual(detect_outliers(daily([75.0])), [])


class TestGaps(unittest.TestCase):
    """Test detect_gaps."""

    def test_gap_over_two_weeks(self):
        transactions = [
            Transaction(date(2024, 1, 1), "A", 10),
            Transaction(date(2024, 1, 31), "B", 10),
            Transaction(date(2024, 2, 10), "C", 10),
        ]

        anomalies = detect_gaps(transactions)

        self.assertEqual(len(anomalies), 1)
        self.assertEqual(anomalies[0].type, "missing-data")
        self.assertEqual(anomalies[0].date, date(2024, 1, 1))
        self.assertEqual(anomalies[0].description, "Data gap of 30 days")
        self.assertIsNone(anomalies[0].amount)

    def test_exactly_fourteen_days_is_fine(self):
        transactions = [
            Transaction(date(2024, 1, 1), "A", 10),
            Transaction(date(2024, 1, 15), "B", 10),
        ]
        self.assertEqual(detect_gaps(transactions), [])

    def test_unsorted_input(self):
        transactions = [
            Transaction(date(2024, 3, 1), "A", 10),
            Transaction(date(2024, 1, 1), "B", 10),
        ]
        self.assertEqual(len(detect_gaps(transactions)), 1)

    def test_dense_data_has_no_gaps(self):
        """Test one hundred transactions within ten days."""
        transactions = [
            Transaction(date(2024, 1, 1) + timedelta(days=i % 10), "A", 10)
            for i in range(100)
        ]
        self.assertEqual(detect_gaps(transactions), [])


class TestDetectAnomalies(unittest.TestCase):
    """Test the combined detector."""

    def test_outliers_before_gaps(self):
        transactions = daily([100.0] * 30) + [Transaction(date(2024, 3, 15), "TV", 9000.0)]

        anomalies = detect_anomalies(transactions)

        self.assertEqual([a.type for a in anomalies], ["unusual-spending", "missing-data"])


if __name__ == "__main__":
    unittest.main()
