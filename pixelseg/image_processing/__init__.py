# -*- coding: utf-8 -*-
"""
Image Processing Module - Processor base classes and tunable parameters.

Sub-modules
-----------
base.py
    ``ImageProcessor`` and ``ImageTransform``: version checking, tunable
    parameter collection, per-call parameter resolution, progress
    reporting and cancellation.
params.py
    ``Range``, ``Options``, ``Desc`` constraint markers for tunable
    parameters via ``Annotated`` type hints.
versioning.py
    ``@processor_version`` and ``@processor_tags`` decorators.

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

from pixelseg.image_processing.base import ImageProcessor, ImageTransform
from pixelseg.image_processing.params import Desc, Options, ParamSpec, Range
from pixelseg.image_processing.versioning import processor_tags, processor_version

__all__ = [
    'ImageProcessor',
    'ImageTransform',
    'Range',
    'Options',
    'Desc',
    'ParamSpec',
    'processor_version',
    'processor_tags',
]
