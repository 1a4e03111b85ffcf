# -*- coding: utf-8 -*-
"""
Vocabulary and Exception Tests - Unit tests for the pixelseg enums and
the exception hierarchy.

Tests that enum members carry the expected values, that every exception
derives from both ``PixelsegError`` and the matching built-in, and that
the public names are importable from the top-level package.

Dependencies
------------
pytest

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

import pytest


class TestVocabulary:
    """Tests for the vocabulary enums."""

    def test_connectivity_values(self):
        from pixelseg.vocabulary import Connectivity
        assert Connectivity('face') is Connectivity.FACE
        assert Connectivity('full') is Connectivity.FULL

    def test_site_states(self):
        """Sentinel states sit below the first region number."""
        from pixelseg.vocabulary import SiteState
        assert SiteState.UNASSIGNED == 0
        assert SiteState.CANDIDATE < 0
        assert SiteState.OUTSIDE < 0
        assert len({int(s) for s in SiteState}) == 3

    def test_processor_categories(self):
        from pixelseg.vocabulary import ProcessorCategory
        assert {m.value for m in ProcessorCategory} == {'segmentation', 'clustering'}

    def test_importable_from_pixelseg(self):
        from pixelseg import Connectivity, ImageModality, SegmentationType
        assert Connectivity.FACE.value == 'face'
        assert ImageModality.RGB.value == 'RGB'
        assert SegmentationType.SEMANTIC.value == 'semantic'


class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize('name,builtin', [
        ('ValidationError', ValueError),
        ('ConflictingSeedError', ValueError),
        ('EmptyRegionError', ValueError),
        ('InsufficientUniqueValuesError', ValueError),
        ('ProcessorError', RuntimeError),
        ('ConvergenceError', RuntimeError),
        ('ProcessingCancelled', RuntimeError),
    ])
    def test_bases(self, name, builtin):
        import pixelseg
        cls = getattr(pixelseg, name)
        assert issubclass(cls, pixelseg.PixelsegError)
        assert issubclass(cls, builtin)

    def test_conflicting_seed_fields(self):
        from pixelseg import ConflictingSeedError
        err = ConflictingSeedError((3, 4, 1), 2, 5)
        assert err.site == (3, 4, 1)
        assert err.first_region == 2
        assert err.second_region == 5
        assert 'region 2 and region 5' in str(err)

    def test_convergence_error_fields(self):
        import numpy as np
        from pixelseg import ConvergenceError
        err = ConvergenceError("did not converge", iterations=10,
                               centroids=np.zeros((2, 1)))
        assert err.iterations == 10
        assert err.centroids.shape == (2, 1)
        assert str(err) == "did not converge"

    def test_version(self):
        import pixelseg
        assert pixelseg.__version__ == '0.1.0'
