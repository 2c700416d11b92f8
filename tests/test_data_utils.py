import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_array_equal

from posthoc_analysis.core_utils.data_utils import (
    as_data_matrix,
    as_p_value_array,
    resolve_subset,
    validate_labels,
)
from posthoc_analysis.exceptions import DomainError


class TestPValues:
    def test_series_is_accepted(self):
        values = as_p_value_array(pd.Series([0.1, 0.2], index=["a", "b"]))
        assert_array_equal(values, [0.1, 0.2])

    @pytest.mark.parametrize(
        "p_values", [[], [0.1, 1.2], [-0.01, 0.5], [np.nan, 0.2], [[0.1, 0.2]]]
    )
    def test_invalid_vectors(self, p_values):
        with pytest.raises(DomainError):
            as_p_value_array(p_values)


class TestResolveSubset:
    p_values = np.array([0.3, 0.1, 0.2, 0.4])

    def test_none_means_all(self):
        assert_array_equal(resolve_subset(self.p_values, None), [0, 1, 2, 3])

    def test_positions_are_sorted_and_unique(self):
        assert_array_equal(resolve_subset(self.p_values, [3, 1, 3]), [1, 3])

    def test_set_input(self):
        assert_array_equal(resolve_subset(self.p_values, {2, 0}), [0, 2])

    def test_boolean_mask(self):
        mask = np.array([True, False, False, True])
        assert_array_equal(resolve_subset(self.p_values, mask), [0, 3])

    def test_mask_length_mismatch(self):
        with pytest.raises(DomainError):
            resolve_subset(self.p_values, [True, False])

    def test_empty(self):
        assert resolve_subset(self.p_values, []).size == 0

    @pytest.mark.parametrize("subset", [[4], [-1], [0, 10]])
    def test_out_of_range(self, subset):
        with pytest.raises(DomainError):
            resolve_subset(self.p_values, subset)

    def test_series_labels(self):
        series = pd.Series(self.p_values, index=["g1", "g2", "g3", "g4"])
        assert_array_equal(resolve_subset(series, ["g4", "g2"]), [1, 3])

    def test_unknown_label(self):
        series = pd.Series(self.p_values, index=["g1", "g2", "g3", "g4"])
        with pytest.raises(DomainError, match="Unknown hypothesis labels"):
            resolve_subset(series, ["g9"])

    def test_labels_without_series(self):
        with pytest.raises(DomainError):
            resolve_subset(self.p_values, ["g1"])


class TestMatrixAndLabels:
    def test_dataframe_matrix(self):
        frame = pd.DataFrame(np.ones((3, 4)))
        assert as_data_matrix(frame).shape == (3, 4)

    def test_matrix_must_be_2d(self):
        with pytest.raises(DomainError):
            as_data_matrix(np.ones(5))

    def test_label_length(self):
        with pytest.raises(DomainError):
            validate_labels([0, 1, 0], n_samples=4)

    def test_single_group(self):
        with pytest.raises(DomainError):
            validate_labels(["a", "a", "a"], n_samples=3)
