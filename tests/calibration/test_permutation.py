"""Tests for label permutations and per-permutation calibration factors."""

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from posthoc_analysis.benchmarking.generators import generate_gaussian_two_group
from posthoc_analysis.statistics.calibration import (
    permutation_pivotal_statistics,
    permute_labels,
    seed_sequence_from,
    welch_t_test,
)
from posthoc_analysis.statistics.reference_family import SimesFamily


class TestPermuteLabels:
    def test_group_sizes_preserved(self):
        labels = np.array(["a"] * 3 + ["b"] * 5)
        permuted = permute_labels(labels, 50, np.random.default_rng(0))
        assert permuted.shape == (50, 8)
        assert np.all((permuted == "a").sum(axis=1) == 3)

    def test_reproducible(self):
        labels = np.arange(10) % 2
        first = permute_labels(labels, 20, np.random.default_rng(5))
        second = permute_labels(labels, 20, np.random.default_rng(5))
        assert_array_equal(first, second)

    def test_zero_permutations(self):
        assert permute_labels(np.array([0, 1]), 0, np.random.default_rng()).shape == (0, 2)


class TestSeedSequence:
    def test_int_seed(self):
        assert seed_sequence_from(3).entropy == 3

    def test_seed_sequence_passthrough(self):
        seq = np.random.SeedSequence(7)
        assert seed_sequence_from(seq) is seq

    def test_generator_is_deterministic(self):
        first = seed_sequence_from(np.random.default_rng(1)).generate_state(4)
        second = seed_sequence_from(np.random.default_rng(1)).generate_state(4)
        assert_array_equal(first, second)


class TestPivotalStatistics:
    @staticmethod
    def _inputs():
        data, labels, _ = generate_gaussian_two_group(m=30, n=12, pi0=1.0, random_state=0)
        return data.to_numpy(), labels

    def test_shape_and_positivity(self):
        matrix, labels = self._inputs()
        pivotal = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, SimesFamily(m=30), 0.1, 23,
            random_state=0, batch_size=5,
        )
        assert pivotal.shape == (23,)
        assert np.all(pivotal > 0)

    def test_matches_direct_computation(self):
        matrix, labels = self._inputs()
        family = SimesFamily(m=30)
        pivotal = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, family, 0.1, 4, random_state=9, batch_size=10
        )
        rng = np.random.default_rng(np.random.SeedSequence(9).spawn(1)[0])
        expected = [
            family.calibration_factor(welch_t_test(matrix, perm), 0.1)
            for perm in permute_labels(labels, 4, rng)
        ]
        np.testing.assert_allclose(pivotal, expected)

    def test_same_seed_same_result(self):
        matrix, labels = self._inputs()
        family = SimesFamily(m=30)
        first = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, family, 0.1, 30, random_state=4, batch_size=7
        )
        second = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, family, 0.1, 30, random_state=4, batch_size=7
        )
        other = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, family, 0.1, 30, random_state=5, batch_size=7
        )
        assert_array_equal(first, second)
        assert not np.array_equal(first, other)

    def test_independent_of_worker_count(self):
        matrix, labels = self._inputs()
        family = SimesFamily(m=30)
        serial = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, family, 0.1, 40,
            random_state=2, batch_size=10, n_jobs=1,
        )
        parallel = permutation_pivotal_statistics(
            matrix, labels, welch_t_test, family, 0.1, 40,
            random_state=2, batch_size=10, n_jobs=2,
        )
        assert_array_equal(serial, parallel)
