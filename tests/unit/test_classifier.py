from __future__ import annotations

import math
import unittest

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


class TestRankSingleSignal(unittest.TestCase):
    def test_thresholds(self) -> None:
        from core.classifier import rank

        self.assertEqual(rank(125000, None), "S")
        self.assertEqual(rank(95000, None), "A")
        self.assertEqual(rank(65000, None), "B")
        self.assertEqual(rank(31000, None), "C")
        self.assertEqual(rank(1000, None), "D")

    def test_bounds_are_inclusive(self) -> None:
        from core.classifier import rank

        self.assertEqual(rank(120000), "S")
        self.assertEqual(rank(119999.99), "A")
        self.assertEqual(rank(90000), "A")
        self.assertEqual(rank(60000), "B")
        self.assertEqual(rank(30000), "C")
        self.assertEqual(rank(29999), "D")
        self.assertEqual(rank(0), "D")

    def test_missing_value(self) -> None:
        from core.classifier import rank

        self.assertEqual(rank(None), "N/A")
        self.assertEqual(rank(math.nan), "N/A")

    def test_blank_grade_uses_single_signal(self) -> None:
        from core.classifier import rank

        self.assertEqual(rank(65000, ""), "B")
        self.assertEqual(rank(65000, "   "), "B")


class TestRankCombined(unittest.TestCase):
    def test_examples(self) -> None:
        from core.classifier import rank, weighted_score

        self.assertAlmostEqual(weighted_score(10000, "A+"), 51.0)
        self.assertEqual(rank(10000, "A+"), "S")
        self.assertAlmostEqual(weighted_score(10000, "F"), -9.0)
        self.assertEqual(rank(10000, "F"), "D")

    def test_thresholds_are_exclusive(self) -> None:
        from core.classifier import rank

        # D grade scores 0, so the weighted score is income / 10_000.
        self.assertEqual(rank(250000, "D"), "A")
        self.assertEqual(rank(250001, "D"), "S")
        self.assertEqual(rank(150000, "D"), "B")
        self.assertEqual(rank(50000, "D"), "C")
        self.assertEqual(rank(1, "D"), "C")
        self.assertEqual(rank(0, "D"), "D")

    def test_one_grade_step_weighs_like_50k(self) -> None:
        from core.classifier import weighted_score

        self.assertAlmostEqual(weighted_score(80000, "B") - weighted_score(80000, "B-"), 5.0)
        self.assertAlmostEqual(weighted_score(130000, "B-"), weighted_score(80000, "B"))

    def test_unknown_grade_is_neutral_but_combined(self) -> None:
        from core.classifier import rank

        # Combined mode with score 0: 65000 -> 6.5 -> B (single mode would also say B).
        self.assertEqual(rank(65000, "??"), "B")
        # 125000 -> 12.5 -> B in combined mode, S in single mode.
        self.assertEqual(rank(125000, "??"), "B")
        self.assertEqual(rank(125000, None), "S")

    def test_missing_value_with_any_grade(self) -> None:
        from core.classifier import rank
        from core.grade_table import GRADE_SCORES

        for grade in list(GRADE_SCORES) + [None, "", "unknown"]:
            self.assertEqual(rank(None, grade), "N/A")

    def test_rank_is_deterministic(self) -> None:
        from core.classifier import rank

        self.assertEqual(rank(72000, "B+"), rank(72000, "B+"))
        self.assertEqual(rank(72000), rank(72000))


class TestRankHelpers(unittest.TestCase):
    def test_rank_color(self) -> None:
        from core.classifier import rank_color
        from core.constants import NEUTRAL_COLOR, RANK_COLORS

        for label in ("S", "A", "B", "C", "D"):
            self.assertEqual(rank_color(label), RANK_COLORS[label])
        self.assertEqual(rank_color("N/A"), NEUTRAL_COLOR)
        self.assertEqual(rank_color("Unknown"), NEUTRAL_COLOR)
        self.assertEqual(rank_color(None), NEUTRAL_COLOR)

    def test_rank_order(self) -> None:
        from core.classifier import rank_order

        ordered = ["S", "A", "B", "C", "D"]
        positions = [rank_order(label) for label in ordered]
        self.assertEqual(positions, sorted(positions, reverse=True))
        self.assertIsNone(rank_order("N/A"))

    def test_rank_series_matches_scalar(self) -> None:
        import pandas as pd

        from core.classifier import rank, rank_series

        values = [125000, 95000, None, 10000, 10000, 31000, 250000, float("nan"), 65000]
        grades = [None, "B", "A+", "A+", "F", "", "D", "C", "zz"]
        out = rank_series(values, grades)
        self.assertIsInstance(out, pd.Series)
        self.assertEqual(out.tolist(), [rank(v, g) for v, g in zip(values, grades)])

        single = rank_series(values)
        self.assertEqual(single.tolist(), [rank(v) for v in values])

    def test_rank_series_keeps_index(self) -> None:
        import pandas as pd

        from core.classifier import rank_series

        values = pd.Series([130000, 20000], index=["75201", "75202"])
        grades = pd.Series(["F"], index=["75201"])
        out = rank_series(values, grades)
        self.assertEqual(list(out.index), ["75201", "75202"])
        # 13 - 10 = 3 -> C; the second ZIP has no grade -> single signal.
        self.assertEqual(out.tolist(), ["C", "D"])


if __name__ == "__main__":
    unittest.main()
