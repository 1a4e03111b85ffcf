# -*- coding: utf-8 -*-
"""
pixelseg - Seeded region growing and k-means segmentation of pixel grids.

Segments 2D images and 3D volumes, single- or multi-band, either by
growing user-seeded regions across similar neighbouring pixels or by
clustering pixel values into K groups. Both engines are ports of the
ij-plugins toolkit algorithms for ImageJ.

Dependencies
------------
numpy
scipy

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

__version__ = "0.1.0"

from pixelseg.exceptions import (
    PixelsegError,
    ValidationError,
    ConflictingSeedError,
    EmptyRegionError,
    InsufficientUniqueValuesError,
    ProcessorError,
    ConvergenceError,
    ProcessingCancelled,
)
from pixelseg.vocabulary import (
    ImageModality,
    ProcessorCategory,
    SegmentationType,
    Connectivity,
    SiteState,
)
from pixelseg.grid import LABEL_DTYPE, MAX_LABEL, PixelGrid, as_pixel_grid
from pixelseg.imagej import (
    SeededRegionGrowing,
    RegionGrowthResult,
    RegionStatistic,
    KMeansClustering,
    KMeansResult,
    closest_cluster,
)

__all__ = [
    'PixelsegError',
    'ValidationError',
    'ConflictingSeedError',
    'EmptyRegionError',
    'InsufficientUniqueValuesError',
    'ProcessorError',
    'ConvergenceError',
    'ProcessingCancelled',
    'ImageModality',
    'ProcessorCategory',
    'SegmentationType',
    'Connectivity',
    'SiteState',
    'LABEL_DTYPE',
    'MAX_LABEL',
    'PixelGrid',
    'as_pixel_grid',
    'SeededRegionGrowing',
    'RegionGrowthResult',
    'RegionStatistic',
    'KMeansClustering',
    'KMeansResult',
    'closest_cluster',
]
