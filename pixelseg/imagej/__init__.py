# -*- coding: utf-8 -*-
"""
ImageJ Ports - Segmentation algorithms ported from the ij-plugins toolkit.

NumPy/SciPy reimplementations of the ij-plugins segmentation plugins for
ImageJ. Each class mirrors the original algorithm as closely as possible,
preserving default parameter values and algorithmic behavior, and exposes
it through the ``ImageTransform`` interface.

Components
----------
Region-based Segmentation:
- SeededRegionGrowing: Seeded region growing over 2D/3D, scalar or
  multi-band grids

Clustering:
- KMeansClustering: Pixel-based k-means with k-means++ seeding

Attribution
-----------
The ij-plugins toolkit is developed by Jarek Sacha and distributed under
LGPL-2.1. This module provides independent reimplementations following the
same published algorithms (Adams and Bischof 1994 for seeded region
growing; Jain and Dubes 1988 and Arthur and Vassilvitskii 2007 for
k-means) and cites the original authors.

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

from pixelseg.imagej.seeded_region_growing import (
    RegionGrowthResult,
    RegionStatistic,
    SeededRegionGrowing,
)
from pixelseg.imagej.kmeans import KMeansClustering, KMeansResult, closest_cluster

__all__ = [
    'SeededRegionGrowing',
    'RegionGrowthResult',
    'RegionStatistic',
    'KMeansClustering',
    'KMeansResult',
    'closest_cluster',
]
