"""Tests for permutation calibration of the reference family."""

import numpy as np
import pandas as pd
import pytest
from scipy.stats import f_oneway, ttest_ind

from posthoc_analysis.benchmarking.generators import generate_gaussian_two_group
from posthoc_analysis.exceptions import DomainError, StatisticComputationFailure
from posthoc_analysis.statistics.calibration import (
    CalibrationResult,
    PermutationCalibrator,
    calibrate_lambda,
    calibrated_lambda,
    welch_t_test,
)
from posthoc_analysis.statistics.confidence_envelope import confidence_envelope
from posthoc_analysis.statistics.reference_family import BetaFamily, SimesFamily


def _small_data(seed=0, m=20, n=10):
    data, labels, _ = generate_gaussian_two_group(m=m, n=n, pi0=1.0, random_state=seed)
    return data, labels


class TestCalibratedLambda:
    def test_alpha_quantile_order_statistic(self):
        values = np.arange(10, 0, -1, dtype=float)
        assert calibrated_lambda(values, alpha=0.1) == 1.0
        assert calibrated_lambda(values, alpha=0.25) == 3.0
        assert calibrated_lambda(values, alpha=0.5) == 5.0

    def test_single_permutation(self):
        assert calibrated_lambda(np.array([2.5]), alpha=0.05) == 2.5

    def test_empty_sample(self):
        with pytest.raises(DomainError):
            calibrated_lambda(np.array([]), alpha=0.1)


class TestCalibrateLambda:
    def test_single_permutation_is_degenerate_quantile(self):
        data, labels = _small_data()
        result = calibrate_lambda(data, labels, alpha=0.1, n_permutations=1, random_state=3)
        assert result.n_permutations == 1
        assert result.pivotal_statistics.shape == (1,)
        assert result.lambda_ == result.pivotal_statistics[0]

    def test_result_fields(self):
        data, labels = _small_data()
        result = calibrate_lambda(
            data, labels, alpha=0.2, n_permutations=30, random_state=1, batch_size=8
        )
        assert isinstance(result, CalibrationResult)
        assert result.alpha == 0.2
        assert result.m == 20
        assert result.family_name == "simes"
        assert result.lambda_ > 0
        assert result.lambda_ == calibrated_lambda(result.pivotal_statistics, 0.2)

    def test_reference_family_is_calibrated(self):
        data, labels = _small_data()
        result = calibrate_lambda(data, labels, n_permutations=5, random_state=0)
        family = result.reference_family()
        assert isinstance(family, SimesFamily)
        assert family.calibrated
        np.testing.assert_allclose(
            result.thresholds(), family.thresholds(result.alpha, result.lambda_)
        )
        with pytest.raises(DomainError):
            result.reference_family(21)

    def test_beta_family(self):
        data, labels = _small_data()
        result = calibrate_lambda(
            data, labels, n_permutations=20, family="beta", random_state=0
        )
        assert isinstance(result.reference_family(), BetaFamily)
        assert result.lambda_ > 0

    def test_reproducible_with_seed(self):
        data, labels = _small_data()
        first = calibrate_lambda(data, labels, n_permutations=25, random_state=11)
        second = calibrate_lambda(data, labels, n_permutations=25, random_state=11)
        assert first.lambda_ == second.lambda_
        np.testing.assert_array_equal(first.pivotal_statistics, second.pivotal_statistics)

    def test_generator_random_state(self):
        data, labels = _small_data()
        first = calibrate_lambda(
            data, labels, n_permutations=10, random_state=np.random.default_rng(4)
        )
        second = calibrate_lambda(
            data, labels, n_permutations=10, random_state=np.random.default_rng(4)
        )
        assert first.lambda_ == second.lambda_

    def test_calibrator_object(self):
        data, labels = _small_data()
        calibrator = PermutationCalibrator(alpha=0.1, n_permutations=15, random_state=6)
        assert calibrator.calibrate(data, labels) == calibrate_lambda(
            data, labels, alpha=0.1, n_permutations=15, random_state=6
        )


class TestCalibrationErrors:
    @pytest.mark.parametrize("n_permutations", [0, -3])
    def test_needs_at_least_one_permutation(self, n_permutations):
        data, labels = _small_data()
        with pytest.raises(DomainError):
            calibrate_lambda(data, labels, n_permutations=n_permutations)

    def test_alpha_out_of_range(self):
        data, labels = _small_data()
        with pytest.raises(DomainError):
            calibrate_lambda(data, labels, alpha=1.0, n_permutations=5)

    def test_labels_must_match_samples(self):
        data, labels = _small_data()
        with pytest.raises(DomainError):
            calibrate_lambda(data, labels[:-1], n_permutations=5)

    def test_labels_need_two_groups(self):
        data, _ = _small_data()
        with pytest.raises(DomainError):
            calibrate_lambda(data, np.zeros(10), n_permutations=5)

    def test_statistic_failure_aborts(self):
        data, labels = _small_data()
        calls = {"n": 0}

        def flaky_statistic(matrix, perm):
            calls["n"] += 1
            if calls["n"] == 3:
                raise RuntimeError("singular design")
            return welch_t_test(matrix, perm)

        with pytest.raises(StatisticComputationFailure, match="permutation 3") as excinfo:
            calibrate_lambda(
                data, labels, statistic=flaky_statistic, n_permutations=10,
                random_state=0, n_jobs=1,
            )
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_statistic_must_return_p_values(self):
        data, labels = _small_data()
        with pytest.raises(DomainError):
            calibrate_lambda(
                data, labels, statistic=lambda matrix, perm: matrix.mean(axis=1) + 5.0,
                n_permutations=3, random_state=0,
            )

    def test_statistic_must_return_one_value_per_hypothesis(self):
        data, labels = _small_data()
        with pytest.raises(DomainError):
            calibrate_lambda(
                data, labels, statistic=lambda matrix, perm: np.full(3, 0.5),
                n_permutations=3, random_state=0,
            )


class TestWelchTTest:
    def test_two_groups_match_scipy(self):
        data, labels = _small_data(seed=2)
        matrix = data.to_numpy()
        expected = ttest_ind(
            matrix[:, labels == 0], matrix[:, labels == 1], axis=1, equal_var=False
        ).pvalue
        np.testing.assert_allclose(welch_t_test(data, labels), expected)

    def test_three_groups_use_anova(self):
        rng = np.random.default_rng(0)
        matrix = rng.standard_normal((6, 12))
        labels = np.repeat(["x", "y", "z"], 4)
        expected = f_oneway(
            matrix[:, :4], matrix[:, 4:8], matrix[:, 8:], axis=1
        ).pvalue
        np.testing.assert_allclose(welch_t_test(matrix, labels), expected)

    @pytest.mark.filterwarnings("ignore::RuntimeWarning")
    def test_constant_row_has_p_value_one(self):
        matrix = np.vstack([np.ones(8), np.arange(8.0)])
        labels = np.repeat([0, 1], 4)
        p_values = welch_t_test(pd.DataFrame(matrix), labels)
        assert p_values[0] == 1.0
        assert 0.0 <= p_values[1] <= 1.0


class TestAdaptivePower:
    def test_correlated_features_give_power_gain(self):
        data, labels, _ = generate_gaussian_two_group(
            m=100, n=40, pi0=1.0, rho=0.5, random_state=2024
        )
        result = calibrate_lambda(
            data, labels, alpha=0.1, n_permutations=1000, random_state=2024
        )
        assert result.lambda_ > 1.2

    def test_independent_features_stay_near_simes(self):
        data, labels, _ = generate_gaussian_two_group(
            m=100, n=40, pi0=1.0, rho=0.0, random_state=2024
        )
        result = calibrate_lambda(
            data, labels, alpha=0.1, n_permutations=1000, random_state=2024
        )
        assert 0.6 < result.lambda_ < 1.6

    @pytest.mark.filterwarnings(
        "ignore::posthoc_analysis.exceptions.DependencyAssumptionUnverifiable"
    )
    def test_calibrated_envelope_dominates_simes(self):
        data, labels, _ = generate_gaussian_two_group(
            m=200, n=30, pi0=0.8, effect=1.5, rho=0.5, random_state=7
        )
        p_values = welch_t_test(data, labels)
        calibration = calibrate_lambda(
            data, labels, alpha=0.1, n_permutations=300, random_state=7
        )
        simes = confidence_envelope(p_values, alpha=0.1)
        adaptive = confidence_envelope(p_values, calibration=calibration)
        if calibration.lambda_ >= 1.0:
            assert np.all(adaptive["TP_Lower_Bound"] >= simes["TP_Lower_Bound"])
        else:
            assert np.all(adaptive["TP_Lower_Bound"] <= simes["TP_Lower_Bound"])
