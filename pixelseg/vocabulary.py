# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for pixelseg.

Single source of truth for the controlled vocabularies used in processor
tags and grid traversal: image modalities, processor categories,
segmentation types, neighbourhood connectivity and SRG site states.

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

from enum import Enum, IntEnum


class ImageModality(Enum):
    """Image modalities a processor is designed for."""

    GRAY = "GRAY"
    RGB = "RGB"
    MSI = "MSI"
    HSI = "HSI"
    VOLUME = "VOLUME"


class ProcessorCategory(Enum):
    """Processing categories for processor tagging.

    Values mirror the ImageJ menu groupings the ported plugins live under.
    """

    SEGMENTATION = "segmentation"
    CLUSTERING = "clustering"


class SegmentationType(Enum):
    """Type of segmentation a segmentor processor produces."""

    INSTANCE = "instance"
    SEMANTIC = "semantic"


class Connectivity(Enum):
    """Neighbourhood used when walking the site grid.

    ``FACE`` joins sites sharing an edge (4-connected in 2D, 6-connected
    in 3D). ``FULL`` also joins sites sharing a corner (8-connected in 2D,
    26-connected in 3D).
    """

    FACE = "face"
    FULL = "full"


class SiteState(IntEnum):
    """Seeded region growing site states.

    Assigned sites carry their region number (>= 1) instead of a state
    constant. ``OUTSIDE`` marks sites excluded by an ROI mask; they are
    never grown into and are reported as unassigned.
    """

    OUTSIDE = -2
    CANDIDATE = -1
    UNASSIGNED = 0
