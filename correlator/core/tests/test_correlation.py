import math
import unittest

from parameterized import parameterized

from analysis.models import CorrelationMethod
from core.correlation import (
    correlate,
    describe_strength,
    pearson,
    rank,
    select_method,
    spearman,
)
from core.exceptions import LengthMismatchError

X = [1.0, 2.5, 3.0, 4.75, 5.0, 8.0, 9.5]
Y = [2.0, 1.0, 4.0, 3.5, 7.0, 6.0, 12.0]


class TestPearson(unittest.TestCase):
    def test_perfect_positive_correlation(self):
        self.assertAlmostEqual(pearson([1, 2, 3, 4, 5], [2, 4, 6, 8, 10]), 1.0)

    def test_perfect_negative_correlation(self):
        self.assertAlmostEqual(pearson([1, 2, 3, 4, 5], [10, 8, 6, 4, 2]), -1.0)

    def test_known_value(self):
        self.assertAlmostEqual(pearson([1, 2, 3, 4], [1, 3, 2, 4]), 0.8)

    def test_symmetric(self):
        self.assertEqual(pearson(X, Y), pearson(Y, X))

    @parameterized.expand(
        [[2.0, 0.0], [0.5, -3.0], [1000.0, 42.0], [1e200, 0.0], [1e-200, 0.0]]
    )
    def test_positive_scale_and_shift_invariant(self, scale, shift):
        scaled = [scale * value + shift for value in X]

        self.assertAlmostEqual(pearson(scaled, Y), pearson(X, Y))

    def test_large_magnitudes(self):
        self.assertAlmostEqual(
            pearson([1e200, 2e200, 3e200, 4e200], [1, 2, 3, 5]),
            pearson([1, 2, 3, 4], [1, 2, 3, 5]),
        )

    def test_negative_scale_flips_the_sign(self):
        flipped = [-value for value in X]

        self.assertAlmostEqual(pearson(flipped, Y), -pearson(X, Y))

    def test_result_is_within_bounds(self):
        self.assertLessEqual(abs(pearson(X, Y)), 1.0)
        self.assertLessEqual(abs(pearson([0.1, 0.2, 0.3], [0.3, 0.6, 0.9])), 1.0)

    @parameterized.expand(
        [
            [[3, 3, 3, 3], [1, 2, 3, 4]],
            [[1, 2, 3, 4], [5, 5, 5, 5]],
            [[0.1, 0.1, 0.1], [1, 2, 3]],
        ]
    )
    def test_constant_input_is_undefined(self, x, y):
        self.assertTrue(math.isnan(pearson(x, y)))

    @parameterized.expand([[[], []], [[1.0], [2.0]]])
    def test_too_few_points_is_undefined(self, x, y):
        self.assertTrue(math.isnan(pearson(x, y)))

    def test_length_mismatch(self):
        with self.assertRaises(LengthMismatchError):
            pearson([1, 2, 3], [1, 2])


class TestRank(unittest.TestCase):
    def test_ties_share_the_average_rank(self):
        self.assertEqual(rank([1, 1, 2]), [1.5, 1.5, 3.0])

    def test_ranks_follow_the_original_order(self):
        self.assertEqual(rank([30, 10, 20]), [3.0, 1.0, 2.0])

    def test_run_of_ties(self):
        self.assertEqual(rank([5, 1, 5, 5, 0]), [4.0, 2.0, 4.0, 4.0, 1.0])

    def test_empty(self):
        self.assertEqual(rank([]), [])


class TestSpearman(unittest.TestCase):
    def test_equals_pearson_on_ranks(self):
        self.assertEqual(spearman(X, Y), pearson(rank(X), rank(Y)))

    def test_monotonic_relationship_is_perfect(self):
        x = [1, 2, 3, 4, 5]
        y = [1, 8, 27, 64, 125]

        self.assertAlmostEqual(spearman(x, y), 1.0)
        self.assertLess(pearson(x, y), 1.0)

    def test_with_ties(self):
        # ranks are [1.5, 1.5, 3, 4] and [1, 2, 3, 4]
        self.assertAlmostEqual(spearman([1, 1, 2, 3], [1, 2, 3, 4]), pearson([1.5, 1.5, 3, 4], [1, 2, 3, 4]))

    def test_positive_scale_and_shift_invariant(self):
        scaled = [3 * value - 7 for value in X]

        self.assertAlmostEqual(spearman(scaled, Y), spearman(X, Y))

    def test_constant_input_is_undefined(self):
        self.assertTrue(math.isnan(spearman([2, 2, 2], [1, 2, 3])))

    def test_too_few_points_is_undefined(self):
        self.assertTrue(math.isnan(spearman([1.0], [1.0])))

    def test_length_mismatch(self):
        with self.assertRaises(LengthMismatchError):
            spearman([1, 2], [1, 2, 3])


class TestSelectMethod(unittest.TestCase):
    @parameterized.expand(
        [
            ["Spearman", CorrelationMethod.SPEARMAN],
            ["spearman's rank correlation", CorrelationMethod.SPEARMAN],
            ["Use SPEARMAN", CorrelationMethod.SPEARMAN],
            ["Pearson", CorrelationMethod.PEARSON],
            ["Kendall tau", CorrelationMethod.PEARSON],
            ["", CorrelationMethod.PEARSON],
        ]
    )
    def test_select_method(self, suggested_method, expected):
        self.assertEqual(select_method(suggested_method), expected)


class TestCorrelate(unittest.TestCase):
    def test_pearson_by_default(self):
        result = correlate(X, Y)

        self.assertEqual(result.method, CorrelationMethod.PEARSON)
        self.assertEqual(result.coefficient, pearson(X, Y))
        self.assertTrue(result.is_defined)

    def test_spearman(self):
        result = correlate(X, Y, CorrelationMethod.SPEARMAN)

        self.assertEqual(result.method, CorrelationMethod.SPEARMAN)
        self.assertEqual(result.coefficient, spearman(X, Y))

    def test_undefined(self):
        result = correlate([1, 1, 1], [1, 2, 3])

        self.assertFalse(result.is_defined)


class TestDescribeStrength(unittest.TestCase):
    @parameterized.expand(
        [
            [0.95, "Strong positive"],
            [-0.7, "Strong negative"],
            [0.5, "Moderate positive"],
            [-0.4, "Moderate negative"],
            [0.1, "Weak positive"],
            [-0.25, "Weak negative"],
            [0.05, "Very Weak or No positive"],
            [0.0, "Very Weak or No negative"],
        ]
    )
    def test_describe_strength(self, coefficient, expected):
        self.assertEqual(describe_strength(coefficient), expected)
