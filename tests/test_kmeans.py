# -*- coding: utf-8 -*-
"""
Tests for k-means clustering.

Verifies k-means++ seeding, Lloyd convergence, the objective and
idempotence properties, empty-cluster handling, parameter validation,
reapplying trained centroids, output formats and run control.

Author
------
pixelseg contributors

License
-------
MIT License
Copyright (c) 2026 pixelseg contributors
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

import logging

import numpy as np
import pytest

from pixelseg.exceptions import (
    ConvergenceError,
    InsufficientUniqueValuesError,
    ProcessingCancelled,
    ValidationError,
)
from pixelseg.grid import PixelGrid


def _two_groups():
    """Single-band image with values {10, 11, 12} and {200, 201, 202}."""
    return np.array([[10.0, 200.0, 11.0],
                     [201.0, 12.0, 202.0]])


def _blobs(seed=0, bands=2, rows=20, cols=30):
    """Band stack of three well-separated Gaussian blobs in band space."""
    rng = np.random.default_rng(seed)
    centers = np.array([[0.0, 0.0], [50.0, 0.0], [0.0, 50.0]])[:, :bands]
    which = rng.integers(0, 3, size=rows * cols)
    pixels = centers[which] + rng.normal(0.0, 1.0, size=(rows * cols, bands))
    return pixels.T.reshape(bands, rows, cols)


# ============================================================================
# Metadata and parameters
# ============================================================================

class TestKMeansMetadata:
    """Attribution, version and tunable declarations."""

    def test_import(self):
        from pixelseg.imagej import KMeansClustering
        assert KMeansClustering is not None

    def test_version_attribute(self):
        from pixelseg.imagej import KMeansClustering
        assert KMeansClustering.__imagej_source__ == (
            'net/sf/ij_plugins/clustering/KMeans2D.java'
        )
        assert KMeansClustering.__processor_version__ == '1.0.0'

    def test_defaults(self):
        from pixelseg.imagej import KMeansClustering
        km = KMeansClustering()
        assert km.number_of_clusters == 4
        assert km.tolerance == 1e-4
        assert km.random_seed == 48
        assert km.max_iterations == 1000
        assert km.output == 'labels'

    @pytest.mark.parametrize('kwargs', [
        {'number_of_clusters': 0},
        {'tolerance': 0.0},
        {'tolerance': -1.0},
        {'max_iterations': 0},
        {'random_seed': -5},
        {'output': 'palette'},
    ])
    def test_invalid_parameters(self, kwargs):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ValidationError):
            KMeansClustering(**kwargs)

    def test_invalid_runtime_override(self):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ValidationError, match="number_of_clusters"):
            KMeansClustering().cluster(_two_groups(), number_of_clusters=0)

    def test_random_seed_none_allowed(self):
        from pixelseg.imagej import KMeansClustering
        result = KMeansClustering(number_of_clusters=2, random_seed=None).cluster(
            _two_groups()
        )
        assert result.labels.shape == (2, 3)


# ============================================================================
# Clustering behaviour
# ============================================================================

class TestKMeansClustering:
    """Convergence and output properties."""

    def test_two_separated_groups(self):
        from pixelseg.imagej import KMeansClustering
        image = _two_groups()
        result = KMeansClustering(number_of_clusters=2).cluster(image)
        assert result.iterations <= 3
        np.testing.assert_allclose(np.sort(result.centroids[:, 0]), [11.0, 201.0])
        low = result.labels[image < 100]
        high = result.labels[image > 100]
        assert len(set(low.tolist())) == 1
        assert len(set(high.tolist())) == 1
        assert low[0] != high[0]
        assert set(np.unique(result.labels)) == {1, 2}
        assert result.labels.dtype == np.int32
        assert result.counts.tolist() == [3, 3]

    def test_fixed_initial_centroids(self):
        from pixelseg.imagej import KMeansClustering
        result = KMeansClustering(number_of_clusters=2).cluster(
            _two_groups(), initial_centroids=np.array([[10.0], [202.0]])
        )
        assert result.iterations == 2
        np.testing.assert_allclose(result.centroids, [[11.0], [201.0]])
        np.testing.assert_array_equal(result.labels, [[1, 2, 1], [2, 1, 2]])
        assert result.inertia == pytest.approx(4.0)

    def test_objective_non_increasing(self):
        from pixelseg.imagej import KMeansClustering
        rng = np.random.default_rng(7)
        image = rng.uniform(0.0, 255.0, size=(3, 25, 25))
        result = KMeansClustering(number_of_clusters=6, random_seed=3).cluster(image)
        history = np.array(result.objective_history)
        assert len(history) == result.iterations
        assert np.all(np.diff(history) <= 1e-9 * history[:-1])
        assert result.inertia <= history[-1] * (1 + 1e-12)

    def test_idempotent_from_converged_centroids(self):
        from pixelseg.imagej import KMeansClustering
        image = _blobs()
        km = KMeansClustering(number_of_clusters=3, random_seed=11)
        first = km.cluster(image)
        again = km.cluster(image, initial_centroids=first.centroids)
        assert again.iterations == 1
        np.testing.assert_array_equal(again.labels, first.labels)
        np.testing.assert_array_equal(again.centroids, first.centroids)

    def test_reproducible_with_seed(self):
        from pixelseg.imagej import KMeansClustering
        image = _blobs(seed=2)
        a = KMeansClustering(number_of_clusters=3, random_seed=5).cluster(image)
        b = KMeansClustering(number_of_clusters=3, random_seed=5).cluster(image)
        np.testing.assert_array_equal(a.centroids, b.centroids)
        np.testing.assert_array_equal(a.labels, b.labels)

    def test_blobs_recovered(self):
        from pixelseg.imagej import KMeansClustering
        image = _blobs(seed=4)
        result = KMeansClustering(number_of_clusters=3).cluster(image)
        found = sorted(map(tuple, np.round(result.centroids, -1)))
        assert found == [(0.0, 0.0), (0.0, 50.0), (50.0, 0.0)]

    def test_empty_cluster_keeps_centroid(self):
        from pixelseg.imagej import KMeansClustering
        image = np.array([[0.0, 1.0], [2.0, 3.0]])
        result = KMeansClustering(number_of_clusters=2).cluster(
            image, initial_centroids=np.array([[1.5], [100.0]])
        )
        assert result.iterations == 1
        assert np.all(np.isfinite(result.centroids))
        np.testing.assert_allclose(result.centroids, [[1.5], [100.0]])
        assert result.counts.tolist() == [4, 0]
        assert np.all(result.labels == 1)

    def test_single_cluster(self):
        from pixelseg.imagej import KMeansClustering
        image = _two_groups()
        result = KMeansClustering(number_of_clusters=1).cluster(image)
        assert np.all(result.labels == 1)
        assert result.centroids[0, 0] == pytest.approx(image.mean())

    def test_integer_input_accumulates_in_float64(self):
        from pixelseg.imagej import KMeansClustering
        image = np.full((64, 64), 250, dtype=np.uint8)
        image[:, 32:] = 5
        result = KMeansClustering(number_of_clusters=2).cluster(image)
        assert result.centroids.dtype == np.float64
        np.testing.assert_allclose(np.sort(result.centroids[:, 0]), [5.0, 250.0])

    def test_volume_grid(self):
        from pixelseg.imagej import KMeansClustering
        volume = np.zeros((2, 3, 4))
        volume[1] = 100.0
        result = KMeansClustering(number_of_clusters=2).cluster(PixelGrid(volume))
        assert result.labels.shape == (2, 3, 4)
        assert len(set(result.labels[0].ravel().tolist())) == 1
        assert result.labels[0, 0, 0] != result.labels[1, 0, 0]


# ============================================================================
# Output formats and reapplying
# ============================================================================

class TestKMeansOutputs:
    """apply(), predict() and closest_cluster()."""

    def test_apply_labels(self):
        from pixelseg.imagej import KMeansClustering
        labels = KMeansClustering(number_of_clusters=2).apply(_two_groups())
        assert labels.shape == (2, 3)
        assert labels.dtype == np.int32

    def test_apply_mean_single_band(self):
        from pixelseg.imagej import KMeansClustering
        out = KMeansClustering(number_of_clusters=2, output='mean').apply(
            _two_groups(), initial_centroids=np.array([[10.0], [202.0]])
        )
        np.testing.assert_allclose(out, [[11.0, 201.0, 11.0], [201.0, 11.0, 201.0]])

    def test_apply_mean_multiband_layout(self):
        from pixelseg.imagej import KMeansClustering
        image = _blobs()
        out = KMeansClustering(number_of_clusters=3, output='mean').apply(image)
        assert out.shape == image.shape
        assert len(np.unique(out.reshape(2, -1), axis=1).T) == 3

    def test_predict_matches_labels(self):
        from pixelseg.imagej import KMeansClustering
        image = _blobs()
        result = KMeansClustering(number_of_clusters=3).cluster(image)
        np.testing.assert_array_equal(result.predict(image), result.labels)

    def test_predict_other_image(self):
        from pixelseg.imagej import KMeansClustering
        result = KMeansClustering(number_of_clusters=2).cluster(
            _two_groups(), initial_centroids=np.array([[10.0], [202.0]])
        )
        labels = result.predict(np.array([[0.0, 150.0], [300.0, 90.0]]))
        np.testing.assert_array_equal(labels, [[1, 2], [2, 1]])

    def test_predict_band_mismatch(self):
        from pixelseg.imagej import KMeansClustering
        result = KMeansClustering(number_of_clusters=3).cluster(_blobs())
        with pytest.raises(ValidationError, match="bands"):
            result.predict(np.zeros((4, 4)))

    def test_closest_cluster(self):
        from pixelseg.imagej import closest_cluster
        centroids = np.array([[0.0, 0.0], [10.0, 10.0]])
        assert closest_cluster([9.0, 8.0], centroids) == 1
        assert closest_cluster(np.array([1.0, -1.0]), centroids) == 0
        # equidistant goes to the lowest index
        assert closest_cluster([5.0, 5.0], centroids) == 0

    def test_closest_cluster_length_mismatch(self):
        from pixelseg.imagej import closest_cluster
        with pytest.raises(ValidationError, match="length 2"):
            closest_cluster([1.0, 2.0, 3.0], np.zeros((2, 2)))

    def test_result_closest_cluster_is_label(self):
        from pixelseg.imagej import KMeansClustering
        result = KMeansClustering(number_of_clusters=2).cluster(
            _two_groups(), initial_centroids=np.array([[10.0], [202.0]])
        )
        assert result.closest_cluster([190.0]) == 2
        with pytest.raises(ValidationError):
            result.closest_cluster([1.0, 2.0])


# ============================================================================
# Errors
# ============================================================================

class TestKMeansErrors:
    """Validation and convergence failures."""

    def test_insufficient_unique_values(self):
        from pixelseg.imagej import KMeansClustering
        calls = []
        with pytest.raises(InsufficientUniqueValuesError, match="1 distinct"):
            KMeansClustering(number_of_clusters=2).cluster(
                np.full((3, 3), 7.0), progress_callback=calls.append,
            )
        assert calls == []

    def test_insufficient_unique_vectors(self):
        from pixelseg.imagej import KMeansClustering
        image = np.zeros((2, 4, 4))
        image[:, :2, :] = 1.0
        with pytest.raises(InsufficientUniqueValuesError):
            KMeansClustering(number_of_clusters=3).cluster(image)

    def test_did_not_converge(self):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ConvergenceError) as exc_info:
            KMeansClustering(number_of_clusters=2, max_iterations=1).cluster(
                _two_groups(), initial_centroids=np.array([[10.0], [202.0]])
            )
        err = exc_info.value
        assert err.iterations == 1
        np.testing.assert_allclose(err.centroids, [[11.0], [201.0]])
        assert isinstance(err, RuntimeError)

    def test_initial_centroids_wrong_count(self):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ValidationError, match="Expecting 2 initial centroids"):
            KMeansClustering(number_of_clusters=2).cluster(
                _two_groups(), initial_centroids=np.array([[1.0], [2.0], [3.0]])
            )

    def test_initial_centroids_wrong_bands(self):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ValidationError, match="centroids"):
            KMeansClustering(number_of_clusters=2).cluster(
                _blobs(), initial_centroids=np.zeros((2, 3))
            )

    def test_bad_source_shape(self):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ValidationError):
            KMeansClustering().cluster(np.zeros(10))


# ============================================================================
# Seeding
# ============================================================================

class TestKMeansPlusPlus:
    """k-means++ initial centroid selection."""

    def test_distinct_values(self):
        from pixelseg.imagej.kmeans import kmeans_plus_plus
        values = np.zeros((52, 1))
        values[50] = 1.0
        values[51] = 2.0
        for seed in range(10):
            centroids, sites = kmeans_plus_plus(values, 3, np.random.default_rng(seed))
            assert sorted(centroids[:, 0].tolist()) == [0.0, 1.0, 2.0]
            assert len(set(sites)) == 3

    def test_too_few_distinct_values(self):
        from pixelseg.imagej.kmeans import kmeans_plus_plus
        values = np.array([[0.0], [0.0], [1.0]])
        with pytest.raises(InsufficientUniqueValuesError):
            kmeans_plus_plus(values, 3, np.random.default_rng(0))

    def test_assignment_ties_to_lowest_index(self):
        from pixelseg.imagej.kmeans import assign_clusters
        values = np.array([[5.0], [0.0], [10.0]])
        centroids = np.array([[0.0], [10.0]])
        assignment, sq_distance = assign_clusters(values, centroids)
        assert assignment.tolist() == [0, 0, 1]
        np.testing.assert_allclose(sq_distance, [25.0, 0.0, 0.0])


# ============================================================================
# Run control
# ============================================================================

class TestKMeansRunControl:
    """Progress, cancellation and trace logging."""

    def test_progress_reported(self):
        from pixelseg.imagej import KMeansClustering
        seen = []
        KMeansClustering(number_of_clusters=3).cluster(
            _blobs(), progress_callback=seen.append
        )
        assert seen[0] == 0.0
        assert seen[-1] == 1.0
        assert seen == sorted(seen)

    def test_cancelled(self):
        from pixelseg.imagej import KMeansClustering
        with pytest.raises(ProcessingCancelled):
            KMeansClustering(number_of_clusters=3).cluster(
                _blobs(), cancel_check=lambda: True
            )

    def test_iteration_trace_logged(self, caplog):
        from pixelseg.imagej import KMeansClustering
        with caplog.at_level(logging.DEBUG, logger='pixelseg.imagej.kmeans'):
            KMeansClustering(number_of_clusters=2).cluster(
                _two_groups(), initial_centroids=np.array([[10.0], [202.0]])
            )
        messages = [r.getMessage() for r in caplog.records]
        assert any('k-means iteration 1' in m for m in messages)
        assert any('converged in 2 iterations' in m for m in messages)
