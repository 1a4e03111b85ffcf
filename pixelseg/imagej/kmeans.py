# -*- coding: utf-8 -*-
"""
k-means Clustering - Port of the ij-plugins pixel-based k-means segmentation.

Partitions the pixels of a multi-band image into K clusters by their
proximity in band space. An image stack is read as a set of bands of the
same image (an RGB image has three bands), so every pixel is a K-band
vector. Initial centroids are chosen with k-means++ seeding and refined
with Lloyd iterations until the summed squared centroid movement drops
below a tolerance.

Particularly useful for:
- Unsupervised colour/spectral segmentation of RGB and MSI imagery
- Reducing an image to a small palette of representative values
- Initial class maps for later supervised refinement
- Reapplying a trained clustering to further images of the same type

Attribution
-----------
Algorithm: A. K. Jain and R. C. Dubes, "Algorithms for Clustering Data",
Prentice Hall, 1988; seeding from D. Arthur and S. Vassilvitskii,
"k-means++: The Advantages of Careful Seeding", SODA 2007.

ImageJ implementation: Jarek Sacha, ij-plugins toolkit (``KMeans.java``,
``KMeans2D.java``, ``KMeansConfig.java``; LGPL-2.1). This is an
independent NumPy/SciPy reimplementation following the published
algorithms.

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

# Standard library
import logging
from typing import Annotated, Any, List, Optional, Tuple, Union

# Third-party
import numpy as np
from scipy.spatial.distance import cdist

# pixelseg internal
from pixelseg.exceptions import (
    ConvergenceError,
    InsufficientUniqueValuesError,
    ValidationError,
)
from pixelseg.grid import LABEL_DTYPE, MAX_LABEL, PixelGrid
from pixelseg.image_processing.base import ImageTransform
from pixelseg.image_processing.params import Desc, Options, Range
from pixelseg.image_processing.versioning import processor_tags, processor_version
from pixelseg.vocabulary import (
    ImageModality,
    ProcessorCategory,
    SegmentationType,
)

logger = logging.getLogger(__name__)

#: Sites per block in the assignment step; bounds the distance matrix size.
ASSIGNMENT_CHUNK = 65536


def as_band_grid(source: Union[PixelGrid, np.ndarray]) -> PixelGrid:
    """Interpret *source* as a band stack.

    ``(rows, cols)`` arrays are single-band images and ``(bands, rows,
    cols)`` arrays multi-band images. 3D volumes must be passed as a
    ``PixelGrid``.
    """
    if isinstance(source, PixelGrid):
        return source
    arr = np.asarray(source)
    return PixelGrid(arr, multiband=arr.ndim != 2)


def _as_centroids(centroids: np.ndarray, bands: int) -> np.ndarray:
    centroids = np.asarray(centroids, dtype=np.float64)
    if centroids.ndim == 1:
        centroids = centroids[:, np.newaxis] if bands == 1 else centroids[np.newaxis]
    if centroids.ndim != 2 or centroids.shape[1] != bands:
        raise ValidationError(
            f"Expecting centroids with {bands} values each, got shape {centroids.shape}"
        )
    if not np.all(np.isfinite(centroids)):
        raise ValidationError("Centroids contain NaN or infinite values")
    return centroids


def closest_cluster(x: np.ndarray, centroids: np.ndarray) -> int:
    """Return the index of the centroid nearest to *x*.

    Ties go to the lowest index.

    Parameters
    ----------
    x : array_like
        Sample vector, one value per band.
    centroids : np.ndarray
        Cluster centroids, shape ``(K, bands)``.

    Returns
    -------
    int
        Zero-based cluster index.

    Raises
    ------
    ValidationError
        If the length of *x* differs from the centroid band count.
    """
    centroids = np.asarray(centroids, dtype=np.float64)
    x = np.asarray(x, dtype=np.float64).ravel()
    if centroids.ndim != 2 or x.shape[0] != centroids.shape[1]:
        raise ValidationError(
            f"Expecting argument 'x' of length {centroids.shape[-1]}, got {x.shape[0]}"
        )
    d2 = np.sum((centroids - x) ** 2, axis=1)
    return int(np.argmin(d2))


def assign_clusters(
    values: np.ndarray, centroids: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """Nearest-centroid assignment for every row of *values*.

    Parameters
    ----------
    values : np.ndarray
        Samples, shape ``(n, bands)``.
    centroids : np.ndarray
        Centroids, shape ``(K, bands)``.

    Returns
    -------
    assignment : np.ndarray
        Zero-based cluster index per sample (ties to the lowest index).
    sq_distance : np.ndarray
        Squared Euclidean distance of each sample to its centroid.
    """
    n = values.shape[0]
    assignment = np.empty(n, dtype=np.intp)
    sq_distance = np.empty(n, dtype=np.float64)
    for start in range(0, n, ASSIGNMENT_CHUNK):
        stop = min(start + ASSIGNMENT_CHUNK, n)
        d2 = cdist(values[start:stop], centroids, metric='sqeuclidean')
        nearest = np.argmin(d2, axis=1)
        assignment[start:stop] = nearest
        sq_distance[start:stop] = d2[np.arange(stop - start), nearest]
    return assignment, sq_distance


def kmeans_plus_plus(
    values: np.ndarray, k: int, rng: np.random.Generator
) -> Tuple[np.ndarray, List[int]]:
    """Choose *k* initial centroids with k-means++ seeding.

    The first centroid is a uniformly random site. Each further centroid
    is drawn among the sites not chosen yet with probability proportional
    to the squared distance to the nearest centroid chosen so far, so
    sites sharing a value with a chosen centroid are never drawn again.

    Parameters
    ----------
    values : np.ndarray
        Samples, shape ``(n, bands)``.
    k : int
        Number of centroids.
    rng : np.random.Generator
        Random source.

    Returns
    -------
    centroids : np.ndarray
        Shape ``(k, bands)``, float64.
    sites : List[int]
        Indices of the chosen sites.

    Raises
    ------
    InsufficientUniqueValuesError
        If fewer than *k* distinct sample vectors exist.
    """
    n = values.shape[0]
    first = int(rng.integers(n))
    sites = [first]
    taken = np.zeros(n, dtype=bool)
    taken[first] = True
    nearest_d2 = cdist(values, values[first:first + 1], metric='sqeuclidean')[:, 0]

    while len(sites) < k:
        weights = np.where(taken, 0.0, nearest_d2)
        total = float(weights.sum())
        if total <= 0.0:
            raise InsufficientUniqueValuesError(
                f"Unable to initialize {k} unique cluster centroids, "
                f"image has only {len(sites)} distinct values"
            )
        cumulative = np.cumsum(weights)
        r = rng.random() * total
        site = int(np.searchsorted(cumulative, r, side='right'))
        if site >= n or weights[site] == 0.0:
            # r landed on the rounded tail of the cumulative sum
            site = int(np.flatnonzero(weights)[-1])
        sites.append(site)
        taken[site] = True
        d2 = cdist(values, values[site:site + 1], metric='sqeuclidean')[:, 0]
        np.minimum(nearest_d2, d2, out=nearest_d2)

    return values[sites].copy(), sites


class KMeansResult:
    """Outcome of a k-means clustering run.

    Parameters
    ----------
    labels : np.ndarray
        ``int32`` label grid, clusters numbered ``1..K``.
    centroids : np.ndarray
        Final centroids, shape ``(K, bands)``; row ``i`` is cluster
        ``i + 1``.
    iterations : int
        Lloyd iterations run until convergence.
    objective_history : List[float]
        Sum of squared site-to-centroid distances of each iteration's
        assignment step.
    counts : np.ndarray
        Sites per cluster under the final labelling.
    inertia : float
        Sum of squared distances under the final labelling.
    """

    def __init__(
        self,
        labels: np.ndarray,
        centroids: np.ndarray,
        iterations: int,
        objective_history: List[float],
        counts: np.ndarray,
        inertia: float,
    ) -> None:
        self.labels = labels
        self.centroids = centroids
        self.iterations = iterations
        self.objective_history = objective_history
        self.counts = counts
        self.inertia = inertia

    @property
    def number_of_clusters(self) -> int:
        return int(self.centroids.shape[0])

    def closest_cluster(self, x: np.ndarray) -> int:
        """Label (``1..K``) of the centroid nearest to vector *x*."""
        return closest_cluster(x, self.centroids) + 1

    def predict(self, source: Union[PixelGrid, np.ndarray]) -> np.ndarray:
        """Label another image with these centroids.

        Parameters
        ----------
        source : PixelGrid or np.ndarray
            Image with the same band count, read as in
            :meth:`KMeansClustering.cluster`.

        Returns
        -------
        np.ndarray
            ``int32`` label grid, clusters numbered ``1..K``.

        Raises
        ------
        ValidationError
            If the band count differs from the centroids'.
        """
        grid = as_band_grid(source)
        if grid.bands != self.centroids.shape[1]:
            raise ValidationError(
                f"Expecting an image with {self.centroids.shape[1]} bands, "
                f"got {grid.bands}"
            )
        assignment, _ = assign_clusters(grid.values, self.centroids)
        return grid.to_label_grid(assignment + 1)

    def __repr__(self) -> str:
        return (
            f"KMeansResult(clusters={self.number_of_clusters}, "
            f"iterations={self.iterations}, inertia={self.inertia:.6g})"
        )


@processor_version('1.0.0')
@processor_tags(
    modalities=[ImageModality.GRAY, ImageModality.RGB, ImageModality.MSI,
                ImageModality.HSI, ImageModality.VOLUME],
    category=ProcessorCategory.CLUSTERING,
    description='Pixel-based k-means clustering of multi-band images',
    segmentation_types=[SegmentationType.SEMANTIC],
)
class KMeansClustering(ImageTransform):
    """Pixel-based k-means clustering, ported from ij-plugins.

    Parameters
    ----------
    number_of_clusters : int
        Number of clusters K. Must be >= 1. Default 4.
    tolerance : float
        Convergence threshold on the summed squared movement of all
        centroids between two iterations. Must be > 0. Default 1e-4.
    random_seed : int or None
        Seed for the k-means++ random draws. ``None`` draws fresh OS
        entropy, so repeated runs may differ. Default 48.
    max_iterations : int
        Iteration cap. Reaching it without converging raises
        ``ConvergenceError``. Default 1000.
    output : str
        - ``'labels'``: ``int32`` label grid, clusters ``1..K``. Default.
        - ``'mean'``: centroid value image, every pixel replaced by its
          cluster centroid (float64, source layout).

    Notes
    -----
    Sums for the centroid update are accumulated in float64 whatever the
    input dtype. A cluster that receives no sites keeps its previous
    centroid. Distances are compared squared.

    Examples
    --------
    Cluster an RGB image held as a ``(3, rows, cols)`` stack:

    >>> from pixelseg.imagej import KMeansClustering
    >>> km = KMeansClustering(number_of_clusters=5, random_seed=7)
    >>> result = km.cluster(rgb_stack)
    >>> result.centroids.shape
    (5, 3)

    Posterize the image with the cluster centroids:

    >>> posterized = KMeansClustering(output='mean').apply(rgb_stack)
    """

    __imagej_source__ = 'net/sf/ij_plugins/clustering/KMeans2D.java'

    number_of_clusters: Annotated[int, Range(min=1, max=MAX_LABEL),
                                  Desc('Number of clusters')] = 4
    tolerance: Annotated[float, Range(min=0.0, min_inclusive=False),
                         Desc('Cluster center tolerance')] = 1e-4
    random_seed: Annotated[Optional[int], Range(min=0),
                           Desc('Randomization seed (None for entropy)')] = 48
    max_iterations: Annotated[int, Range(min=1),
                              Desc('Maximum number of iterations')] = 1000
    output: Annotated[str, Options('labels', 'mean'),
                      Desc('Output format')] = 'labels'

    def cluster(
        self,
        source: Union[PixelGrid, np.ndarray],
        initial_centroids: Optional[np.ndarray] = None,
        **kwargs: Any,
    ) -> KMeansResult:
        """Run k-means clustering.

        Parameters
        ----------
        source : PixelGrid or np.ndarray
            ``(rows, cols)`` single-band image, ``(bands, rows, cols)``
            band stack, or any ``PixelGrid`` (including 3D volumes).
        initial_centroids : np.ndarray, optional
            Start centroids, shape ``(number_of_clusters, bands)``. Skips
            k-means++ seeding.
        **kwargs
            Overrides for any tunable parameter, plus optional
            ``progress_callback(fraction)`` and ``cancel_check()``.

        Returns
        -------
        KMeansResult

        Raises
        ------
        ValidationError
            For invalid parameters or initial centroids.
        InsufficientUniqueValuesError
            If the image has fewer distinct pixel vectors than clusters.
        ConvergenceError
            If ``max_iterations`` is reached without converging.
        ProcessingCancelled
            If ``cancel_check`` returns true between iterations.
        """
        params = self._resolve_params(kwargs)
        k = params['number_of_clusters']
        tolerance = params['tolerance']
        max_iterations = params['max_iterations']

        grid = as_band_grid(source)
        values = grid.values

        if initial_centroids is not None:
            centroids = _as_centroids(initial_centroids, grid.bands).copy()
            if centroids.shape[0] != k:
                raise ValidationError(
                    f"Expecting {k} initial centroids, got {centroids.shape[0]}"
                )
        else:
            distinct = np.unique(values, axis=0).shape[0]
            if distinct < k:
                raise InsufficientUniqueValuesError(
                    f"Unable to initialize {k} unique cluster centroids, "
                    f"input image has only {distinct} distinct pixel values"
                )
            rng = np.random.default_rng(params['random_seed'])
            centroids, sites = kmeans_plus_plus(values, k, rng)
            logger.debug("k-means++ initial centroid sites: %s", sites)
        logger.debug("Initial clusters:\n%s", centroids)

        self._report_progress(kwargs, 0.0)
        objective_history: List[float] = []
        for iteration in range(1, max_iterations + 1):
            self._check_cancelled(kwargs)

            assignment, sq_distance = assign_clusters(values, centroids)
            objective_history.append(float(sq_distance.sum()))

            counts = np.bincount(assignment, minlength=k)
            sums = np.empty((k, grid.bands), dtype=np.float64)
            for band in range(grid.bands):
                sums[:, band] = np.bincount(
                    assignment, weights=values[:, band], minlength=k
                )
            updated = centroids.copy()
            populated = counts > 0
            updated[populated] = sums[populated] / counts[populated, np.newaxis]

            movement = float(np.sum((updated - centroids) ** 2))
            centroids = updated
            logger.debug(
                "k-means iteration %d, cluster error: %g\n%s",
                iteration, movement, centroids,
            )
            self._report_progress(kwargs, iteration / max_iterations)
            if movement < tolerance:
                break
        else:
            raise ConvergenceError(
                f"k-means did not converge in {max_iterations} iterations "
                f"(last centroid movement {movement:g}, tolerance {tolerance:g})",
                iterations=max_iterations,
                centroids=centroids,
            )

        assignment, sq_distance = assign_clusters(values, centroids)
        counts = np.bincount(assignment, minlength=k)
        logger.info(
            "k-means converged in %d iterations, %d clusters, inertia %g",
            iteration, k, float(sq_distance.sum()),
        )
        self._report_progress(kwargs, 1.0)
        return KMeansResult(
            labels=grid.to_label_grid(assignment.astype(LABEL_DTYPE) + 1),
            centroids=centroids,
            iterations=iteration,
            objective_history=objective_history,
            counts=counts,
            inertia=float(sq_distance.sum()),
        )

    def apply(self, source: Union[PixelGrid, np.ndarray], **kwargs: Any) -> np.ndarray:
        """Cluster *source* and return labels or the centroid value image.

        Parameters
        ----------
        source : PixelGrid or np.ndarray
            Image to cluster, see :meth:`cluster`.
        **kwargs
            Passed to :meth:`cluster` (``initial_centroids`` included).

        Returns
        -------
        np.ndarray
            ``int32`` labels ``1..K`` for ``output='labels'``; float64
            centroid value image in the source layout for
            ``output='mean'``.
        """
        params = self._resolve_params(kwargs)
        grid = as_band_grid(source)
        result = self.cluster(grid, **kwargs)
        if params['output'] == 'labels':
            return result.labels
        return grid.to_image(result.centroids[result.labels.ravel() - 1])
