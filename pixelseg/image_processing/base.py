# -*- coding: utf-8 -*-
"""
Segmenter Base Classes - Shared plumbing for pixelseg segmenters.

``ImageProcessor`` carries what every segmenter needs regardless of its
algorithm: declared tunables turned into a keyword-only constructor, a
per-call parameter snapshot with keyword overrides, progress callbacks,
cooperative cancellation, and a one-time warning for classes that never
declared a version. ``ImageTransform`` adds the single abstract entry
point, ``apply``, which maps an image onto a label (or value) grid.

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
import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict, Set, Tuple

# Third-party
import numpy as np

# pixelseg internal
from pixelseg.exceptions import ProcessingCancelled
from pixelseg.image_processing.params import ParamSpec, collect_param_specs, _make_init

logger = logging.getLogger(__name__)

#: Keyword carrying ``callable(fraction)`` for progress updates.
PROGRESS_KEY = 'progress_callback'

#: Keyword carrying a zero-argument ``callable`` polled for cancellation.
CANCEL_KEY = 'cancel_check'


def _warn_unversioned(cls: type) -> None:
    if getattr(cls, '__processor_version__', None):
        return
    if getattr(cls, '__abstractmethods__', None):
        return
    warnings.warn(
        f"{cls.__qualname__} does not declare a processor version. "
        f"Use @processor_version('x.y.z') to declare one.",
        UserWarning,
        stacklevel=3,
    )


class ImageProcessor(ABC):
    """
    Common base class for segmenters.

    Tunables are declared as ``typing.Annotated`` class attributes using
    the markers in :mod:`pixelseg.image_processing.params`::

        number_of_clusters: Annotated[int, Range(min=1)] = 4

    Declaring at least one tunable gives the class a generated
    keyword-only ``__init__`` that validates each value. A hand-written
    ``__init__`` in the class body takes precedence.

    Every run starts with ``_resolve_params(kwargs)``, which snapshots the
    instance values with any keyword overrides applied. Overrides never
    write back to the instance, so one configured segmenter can serve
    many calls.

    The reserved keywords ``progress_callback`` and ``cancel_check`` are
    read by ``_report_progress`` and ``_check_cancelled``.
    """

    _version_warned_classes: Set[type] = set()

    __param_specs__: Tuple[ParamSpec, ...] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        specs = collect_param_specs(cls)
        cls.__param_specs__ = specs
        if specs and '__init__' not in vars(cls):
            cls.__init__ = _make_init(specs)

    def __new__(cls, *args: Any, **kwargs: Any) -> 'ImageProcessor':
        # Runs after class decorators, unlike __init_subclass__
        warned = ImageProcessor._version_warned_classes
        if cls not in warned:
            warned.add(cls)
            _warn_unversioned(cls)
        logger.debug("Instantiating %s", cls.__qualname__)
        return super().__new__(cls)

    def _resolve_params(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Snapshot the tunables for one run.

        Parameters
        ----------
        kwargs : Dict[str, Any]
            Keyword arguments of the run. Names that are not tunables,
            such as the run-control keywords, are skipped.

        Returns
        -------
        Dict[str, Any]
            Every tunable by name, validated.

        Raises
        ------
        TypeError
            If a value has the wrong type.
        ValidationError
            If a value is out of range or not an allowed choice.
        """
        resolved: Dict[str, Any] = {}
        for spec in type(self).__param_specs__:
            if spec.name in kwargs:
                value = kwargs[spec.name]
            else:
                value = getattr(self, spec.name)
            spec.validate(value)
            resolved[spec.name] = value
        return resolved

    def _report_progress(self, kwargs: Dict[str, Any], fraction: float) -> None:
        """Pass *fraction* (0.0 to 1.0) to ``progress_callback``, if given."""
        callback = kwargs.get(PROGRESS_KEY)
        if callback is not None:
            callback(float(fraction))

    def _check_cancelled(self, kwargs: Dict[str, Any]) -> None:
        """Abort the run once ``cancel_check()`` returns true.

        Raises
        ------
        ProcessingCancelled
            If the caller's ``cancel_check`` asks to stop.
        """
        poll = kwargs.get(CANCEL_KEY)
        if poll is None or not poll():
            return
        logger.info("%s cancelled by caller", type(self).__name__)
        raise ProcessingCancelled(f"{type(self).__name__} cancelled by caller")


class ImageTransform(ImageProcessor):
    """Segmenter that maps a whole image onto an output grid."""

    @abstractmethod
    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """
        Segment *source*.

        Parameters
        ----------
        source : np.ndarray
            Input image, or a :class:`~pixelseg.grid.PixelGrid`.
        **kwargs
            Tunable overrides plus ``progress_callback`` and
            ``cancel_check``.

        Returns
        -------
        np.ndarray
            Label grid, or a value image in the source layout.
        """
        ...
