# -*- coding: utf-8 -*-
"""
Seeded Region Growing - Port of the ij-plugins SRG segmentation.

Assigns every reachable pixel (or voxel) of an image to one of several
operator-seeded regions. Regions grow outward from their seeds; at each
step the unassigned boundary site whose value is closest to the current
mean of a bordering region is absorbed into that region, and its own
unassigned neighbours become candidates. Region means are updated
incrementally, so later decisions see the regions as grown so far.

Particularly useful for:
- Interactive object/background separation from a few clicks
- Splitting touching blobs that share an intensity range
- Delineating homogeneous zones in multi-band imagery
- Growing 3D structures in volumetric stacks from point seeds

Attribution
-----------
Algorithm: R. Adams and L. Bischof, "Seeded Region Growing", IEEE
Transactions on Pattern Analysis and Machine Intelligence, 16(6):641-647,
1994.

ImageJ implementation: Jarek Sacha, ij-plugins toolkit (``SRG.java``,
``SRG2DBase.java``, ``SRG3D.java``; LGPL-2.1). This is an independent
NumPy reimplementation following the published algorithm.

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
import heapq
import logging
import math
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple, Union

# Third-party
import numpy as np

# pixelseg internal
from pixelseg.exceptions import (
    ConflictingSeedError,
    EmptyRegionError,
    ValidationError,
)
from pixelseg.grid import LABEL_DTYPE, MAX_LABEL, PixelGrid, as_pixel_grid
from pixelseg.image_processing.base import ImageTransform
from pixelseg.image_processing.params import Desc, Options
from pixelseg.image_processing.versioning import processor_tags, processor_version
from pixelseg.vocabulary import (
    Connectivity,
    ImageModality,
    ProcessorCategory,
    SegmentationType,
    SiteState,
)

logger = logging.getLogger(__name__)

#: Promotions between two ``cancel_check`` polls.
CHECK_INTERVAL = 4096

SeedSpec = Union[np.ndarray, Sequence[Sequence[Sequence[int]]]]


class RegionStatistic:
    """Running aggregate of one growing region.

    Parameters
    ----------
    region_id : int
        Label the region carries in the output.
    bands : int
        Length of the sample vectors folded into the region.

    Attributes
    ----------
    region_id : int
    point_count : int
        Number of sites absorbed so far.
    sum_intensity : np.ndarray
        Per-band float64 running sum of absorbed values.
    """

    __slots__ = ('region_id', 'point_count', 'sum_intensity')

    def __init__(self, region_id: int, bands: int) -> None:
        self.region_id = region_id
        self.point_count = 0
        self.sum_intensity = np.zeros(bands, dtype=np.float64)

    def add(self, value: np.ndarray) -> None:
        """Fold one site value into the region."""
        self.point_count += 1
        self.sum_intensity += value

    @property
    def mean(self) -> np.ndarray:
        """Current mean vector (zeros before the first site is added)."""
        if self.point_count == 0:
            return np.zeros_like(self.sum_intensity)
        return self.sum_intensity / self.point_count

    def __repr__(self) -> str:
        return (
            f"RegionStatistic(region_id={self.region_id}, "
            f"point_count={self.point_count}, mean={self.mean.tolist()})"
        )


class RegionGrowthResult:
    """Outcome of a seeded region growing run.

    Parameters
    ----------
    labels : np.ndarray
        ``int32`` label grid with the source's spatial shape. Sites never
        reached from any seed (or outside the mask) are 0.
    statistics : List[RegionStatistic]
        Final statistic per region, in region order.
    processed_count : int
        Number of sites assigned, seeds included.

    Attributes
    ----------
    labels : np.ndarray
    statistics : List[RegionStatistic]
    processed_count : int
    """

    def __init__(
        self,
        labels: np.ndarray,
        statistics: List[RegionStatistic],
        processed_count: int,
    ) -> None:
        self.labels = labels
        self.statistics = statistics
        self.processed_count = processed_count

    @property
    def region_ids(self) -> List[int]:
        """Output label of each region, in region order."""
        return [s.region_id for s in self.statistics]

    @property
    def means(self) -> np.ndarray:
        """Final region means, shape ``(regions, bands)``."""
        return np.vstack([s.mean for s in self.statistics])

    @property
    def point_counts(self) -> np.ndarray:
        """Final number of sites per region."""
        return np.array([s.point_count for s in self.statistics], dtype=np.int64)

    def __repr__(self) -> str:
        return (
            f"RegionGrowthResult(regions={len(self.statistics)}, "
            f"processed_count={self.processed_count})"
        )


def _vector_distance(value: np.ndarray, mean: np.ndarray) -> float:
    """Euclidean distance between a sample vector and a region mean."""
    diff = value - mean
    return math.sqrt(float(np.dot(diff, diff)))


def _collect_seeds(
    grid: PixelGrid,
    seeds: SeedSpec,
    inside: Optional[np.ndarray],
) -> Tuple[List[List[int]], List[int]]:
    """Validate seeds and convert them to site indices.

    Returns
    -------
    region_sites : List[List[int]]
        Seed site indices per region, in supply order, without repeats.
    region_ids : List[int]
        Output label of each region.

    Raises
    ------
    EmptyRegionError
        If a region has no seeds.
    ConflictingSeedError
        If two regions claim the same site.
    ValidationError
        For malformed, out-of-bounds or masked-out seeds, or an
        unsupported number of regions.
    """
    if isinstance(seeds, np.ndarray):
        seeds = seeds.tolist()

    if isinstance(seeds, (str, bytes)) or not isinstance(seeds, Sequence):
        raise ValidationError(
            "seeds must be a sequence of regions (each a sequence of site "
            "coordinates)"
        )
    regions = list(seeds)
    if not regions:
        raise ValidationError("At least one seeded region is required")
    if len(regions) > MAX_LABEL:
        raise ValidationError(
            f"Number of regions cannot be larger than {MAX_LABEL}, got {len(regions)}"
        )

    owner: Dict[int, int] = {}
    region_sites: List[List[int]] = []
    for position, region in enumerate(regions):
        region_id = position + 1
        points = list(region) if region is not None else []
        if not points:
            raise EmptyRegionError(f"Region {region_id} has no seed points")
        sites: List[int] = []
        for point in points:
            x, y, z = grid.normalize_site(point)
            index = grid.index(x, y, z)
            if inside is not None and not inside[index]:
                raise ValidationError(
                    f"Seed {tuple(point)!r} of region {region_id} lies outside the mask"
                )
            previous = owner.get(index)
            if previous is None:
                owner[index] = region_id
                sites.append(index)
            elif previous != region_id:
                site = (x, y) if grid.ndim == 2 else (x, y, z)
                raise ConflictingSeedError(site, previous, region_id)
        region_sites.append(sites)

    return region_sites, list(range(1, len(regions) + 1))


def _collect_seed_image(
    grid: PixelGrid,
    seed_image: np.ndarray,
    inside: Optional[np.ndarray],
) -> Tuple[List[List[int]], List[int]]:
    """Read regions from a seed label image; non-zero values name regions."""
    seed_image = np.asarray(seed_image)
    if seed_image.shape != grid.shape:
        raise ValidationError(
            f"Seed image shape {seed_image.shape} must match grid shape {grid.shape}"
        )
    if not np.issubdtype(seed_image.dtype, np.integer):
        if not np.all(np.mod(seed_image, 1) == 0):
            raise ValidationError("Seed image values must be integers")
    flat = seed_image.ravel().astype(np.int64)
    if flat.min() < 0:
        raise ValidationError("Seed image values must be non-negative")
    if flat.max() > MAX_LABEL:
        raise ValidationError(
            f"Seed id cannot be larger than {MAX_LABEL}, got {int(flat.max())}"
        )
    region_ids = [int(v) for v in np.unique(flat) if v != 0]
    if not region_ids:
        raise EmptyRegionError("Seed image does not contain any seed points")

    region_sites: List[List[int]] = []
    for region_id in region_ids:
        sites = np.flatnonzero(flat == region_id)
        if inside is not None and not np.all(inside[sites]):
            x, y, z = grid.coordinates(int(sites[~inside[sites]][0]))
            raise ValidationError(
                f"Seed at ({x}, {y}, {z}) of region {region_id} lies outside the mask"
            )
        region_sites.append([int(s) for s in sites])
    return region_sites, region_ids


@processor_version('1.0.0')
@processor_tags(
    modalities=[ImageModality.GRAY, ImageModality.RGB, ImageModality.MSI,
                ImageModality.VOLUME],
    category=ProcessorCategory.SEGMENTATION,
    description='Seeded region growing from operator-supplied seed points',
    segmentation_types=[SegmentationType.SEMANTIC],
)
class SeededRegionGrowing(ImageTransform):
    """Seeded Region Growing segmentation, ported from ij-plugins.

    Grows one labelled region per seed set. The next site absorbed is
    always the candidate with the globally smallest distance between its
    value and the mean of the bordering region it matches best. Works on
    scalar and multi-band data, in 2D and 3D.

    Parameters
    ----------
    connectivity : str
        Site neighbourhood, used both to discover candidates and to find
        the regions a candidate borders.

        - ``'face'``: 4-connected in 2D, 6-connected in 3D. Default.
        - ``'full'``: 8-connected in 2D, 26-connected in 3D (the ImageJ
          plugin's neighbourhood).

    output : str
        - ``'labels'``: ``int32`` label grid. Default.
        - ``'mean'``: each assigned site replaced by its region's final
          mean (float64, source layout); unassigned sites are 0.

    Notes
    -----
    Candidate ordering uses the composite key ``(distance, x, y, z)``, so
    ties are broken by increasing ``x``, then ``y``, then ``z`` and the
    result does not depend on heap internals. A candidate is scored once,
    against the regions bordering it when it is discovered, and is not
    re-scored when other regions reach it later.

    All seeds are placed and folded into their region statistics before
    the first candidate is scored, so initial region means are the means
    of all their seeds.

    Each site enters the candidate heap at most once, giving
    O(S log S) time for S sites.

    Examples
    --------
    Separate two blobs from the background:

    >>> from pixelseg.imagej import SeededRegionGrowing
    >>> srg = SeededRegionGrowing()
    >>> seeds = [[(107, 144)], [(91, 159)], [(119, 143)]]
    >>> labels = srg.apply(image, seeds=seeds)

    Keep the region statistics:

    >>> result = srg.grow(image, seeds)
    >>> result.means[:, 0]
    """

    __imagej_source__ = 'net/sf/ij_plugins/im3d/grow/SRG.java'

    connectivity: Annotated[str, Options('face', 'full'),
                            Desc('Site neighbourhood')] = 'face'
    output: Annotated[str, Options('labels', 'mean'),
                      Desc('Output format')] = 'labels'

    def grow(
        self,
        source: Union[PixelGrid, np.ndarray],
        seeds: Optional[SeedSpec] = None,
        mask: Optional[np.ndarray] = None,
        seed_image: Optional[np.ndarray] = None,
        **kwargs: Any,
    ) -> RegionGrowthResult:
        """Run seeded region growing.

        Parameters
        ----------
        source : PixelGrid or np.ndarray
            Image to segment. Arrays are read as a scalar 2D image
            ``(rows, cols)`` or volume ``(depth, rows, cols)``; wrap
            multi-band data in a ``PixelGrid(..., multiband=True)``.
        seeds : sequence or np.ndarray, optional
            Sequence of regions, each a non-empty sequence of ``(x, y)``
            (2D) or ``(x, y, z)`` (3D) site coordinates, with region ``i``
            labelled ``i + 1``. Arrays are always read as coordinates.
        mask : np.ndarray, optional
            Region of interest with the grid's spatial shape. Growth never
            enters sites where the mask is zero.
        seed_image : np.ndarray, optional
            Seed label image with the grid's spatial shape, used instead
            of *seeds*. Its non-zero values identify regions and are kept
            as the output labels.
        **kwargs
            Overrides for ``connectivity``/``output``, plus optional
            ``progress_callback(fraction)`` and ``cancel_check()``.

        Returns
        -------
        RegionGrowthResult

        Raises
        ------
        EmptyRegionError
            If a region has no seeds.
        ConflictingSeedError
            If two regions claim the same site.
        ValidationError
            For any other malformed input, including passing both or
            neither of *seeds* and *seed_image*. Raised before growth
            starts.
        ProcessingCancelled
            If ``cancel_check`` returns true during growth.
        """
        params = self._resolve_params(kwargs)
        grid = as_pixel_grid(source)
        inside = grid.validate_mask(mask)
        if seeds is not None and seed_image is not None:
            raise ValidationError("Pass either seeds or seed_image, not both")
        if seed_image is not None:
            region_sites, region_ids = _collect_seed_image(grid, seed_image, inside)
        elif seeds is not None:
            region_sites, region_ids = _collect_seeds(grid, seeds, inside)
        else:
            raise ValidationError(
                f"{type(self).__name__} requires seeds or seed_image"
            )
        offsets = grid.neighbor_offsets(Connectivity(params['connectivity']))

        values = grid.values
        scalar = grid.bands == 1
        # Python floats keep the per-site scoring off NumPy scalars
        samples = values[:, 0].tolist() if scalar else values
        outside = int(SiteState.OUTSIDE)
        unassigned = int(SiteState.UNASSIGNED)
        candidate = int(SiteState.CANDIDATE)
        state_arena = grid.new_labels()
        if inside is not None:
            state_arena[~inside] = outside
        state = state_arena.tolist()
        statistics = [RegionStatistic(rid, grid.bands) for rid in region_ids]
        # means[number] caches the mean of region `number`; slot 0 is unused
        means: List[Any] = [None] * (len(region_ids) + 1)

        logger.debug(
            "SRG on %r: %d regions, %d seed sites, %d-neighbourhood",
            grid, len(region_ids), sum(len(s) for s in region_sites), len(offsets),
        )

        def absorb(site: int, number: int) -> None:
            stat = statistics[number - 1]
            state[site] = number
            stat.add(values[site])
            if scalar:
                means[number] = float(stat.sum_intensity[0]) / stat.point_count
            else:
                means[number] = stat.sum_intensity / stat.point_count

        # Regions are numbered 1..R internally; output ids are mapped at the end.
        processed = 0
        for number, sites in enumerate(region_sites, start=1):
            for site in sites:
                absorb(site, number)
                processed += 1

        heap: List[Tuple[float, int, int, int, int, int]] = []

        def score(site: int) -> Tuple[int, float]:
            bordering = sorted({
                state[n] for n in grid.neighbors(site, offsets) if state[n] > 0
            })
            best_region = -1
            best_distance = math.inf
            value = samples[site]
            for number in bordering:
                if scalar:
                    d = abs(value - means[number])
                else:
                    d = _vector_distance(value, means[number])
                if d < best_distance:
                    best_distance = d
                    best_region = number
            return best_region, best_distance

        def add_candidates(site: int) -> None:
            for n in grid.neighbors(site, offsets):
                if state[n] == unassigned:
                    state[n] = candidate
                    number, distance = score(n)
                    x, y, z = grid.coordinates(n)
                    heapq.heappush(heap, (distance, x, y, z, n, number))

        for sites in region_sites:
            for site in sites:
                add_candidates(site)

        reachable = grid.size if inside is None else int(inside.sum())
        progress_increment = max(reachable // 25, 1)
        self._check_cancelled(kwargs)
        self._report_progress(kwargs, processed / reachable)

        while heap:
            _, _, _, _, site, number = heapq.heappop(heap)
            absorb(site, number)
            processed += 1
            add_candidates(site)

            if processed % CHECK_INTERVAL == 0:
                self._check_cancelled(kwargs)
            if processed % progress_increment == 0:
                self._report_progress(kwargs, processed / reachable)

        lookup = np.zeros(len(region_ids) + 1, dtype=LABEL_DTYPE)
        lookup[1:] = region_ids
        labels = lookup[np.clip(np.asarray(state, dtype=np.int64), 0, None)]

        logger.info(
            "SRG assigned %d of %d sites to %d regions",
            processed, grid.size, len(region_ids),
        )
        self._report_progress(kwargs, 1.0)
        return RegionGrowthResult(
            labels=grid.to_label_grid(labels),
            statistics=statistics,
            processed_count=processed,
        )

    def apply(
        self,
        source: Union[PixelGrid, np.ndarray],
        seeds: Optional[SeedSpec] = None,
        mask: Optional[np.ndarray] = None,
        seed_image: Optional[np.ndarray] = None,
        **kwargs: Any,
    ) -> np.ndarray:
        """Segment *source* and return the label grid or region-mean image.

        Parameters
        ----------
        source : PixelGrid or np.ndarray
            Image to segment, see :meth:`grow`.
        seeds : sequence or np.ndarray, optional
            Region seed coordinates, see :meth:`grow`.
        mask : np.ndarray, optional
            Region of interest, see :meth:`grow`.
        seed_image : np.ndarray, optional
            Seed label image, see :meth:`grow`. Exactly one of *seeds*
            and *seed_image* is required.

        Returns
        -------
        np.ndarray
            ``int32`` labels for ``output='labels'``; float64 region-mean
            image in the source layout for ``output='mean'``.

        Raises
        ------
        ValidationError
            If no seeds are given or they are invalid.
        """
        if seeds is None and seed_image is None:
            raise ValidationError(
                "SeededRegionGrowing.apply() requires seeds or seed_image"
            )
        params = self._resolve_params(kwargs)
        grid = as_pixel_grid(source)
        result = self.grow(grid, seeds, mask=mask, seed_image=seed_image, **kwargs)
        if params['output'] == 'labels':
            return result.labels

        # Region ids are ascending in both seed forms.
        flat = result.labels.ravel()
        assigned = flat != 0
        positions = np.searchsorted(np.asarray(result.region_ids), flat[assigned])
        mean_values = np.zeros((grid.size, grid.bands), dtype=np.float64)
        mean_values[assigned] = result.means[positions]
        return grid.to_image(mean_values)
