# -*- coding: utf-8 -*-
"""
pixelseg Exception Hierarchy - Domain-specific exceptions for segmentation.

Lets callers catch pixelseg errors distinctly from Python built-in
exceptions. Every pixelseg exception subclasses both ``PixelsegError`` and
the appropriate built-in exception, so code written against ``ValueError``
or ``RuntimeError`` keeps working.

Configuration problems (seed conflicts, empty regions, too few distinct
pixel values, out-of-range parameters) are all ``ValidationError`` and are
raised before any label is written. Failures after processing has started
(non-convergence, cancellation) are ``ProcessorError``.

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
from typing import Optional, Tuple

# Third-party
import numpy as np


class PixelsegError(Exception):
    """Base exception for all pixelseg errors."""


class ValidationError(PixelsegError, ValueError):
    """Invalid input data, parameters, or configuration.

    Raised for shape mismatches, out-of-range parameters, malformed seeds,
    vector length mismatches and other precondition failures.
    """


class ConflictingSeedError(ValidationError):
    """Two different regions claim the same seed site.

    Parameters
    ----------
    site : Tuple[int, ...]
        Site coordinate ``(x, y)`` or ``(x, y, z)``.
    first_region : int
        Region id that claimed the site first.
    second_region : int
        Region id that claimed it again.
    """

    def __init__(
        self,
        site: Tuple[int, ...],
        first_region: int,
        second_region: int,
    ) -> None:
        self.site = tuple(site)
        self.first_region = first_region
        self.second_region = second_region
        super().__init__(
            f"Seed at {self.site} is assigned both to region "
            f"{first_region} and region {second_region}"
        )


class EmptyRegionError(ValidationError):
    """A declared region has no seed points."""


class InsufficientUniqueValuesError(ValidationError):
    """Fewer distinct pixel vectors exist than requested clusters."""


class ProcessorError(PixelsegError, RuntimeError):
    """Algorithm or processing failure during apply().

    Raised when a processor encounters a non-recoverable error
    during execution (not an input validation issue).
    """


class ConvergenceError(ProcessorError):
    """Iterative optimisation hit its iteration cap before converging.

    Parameters
    ----------
    message : str
        Error text.
    iterations : int
        Number of iterations performed.
    centroids : np.ndarray, optional
        Centroids after the last iteration.
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        centroids: Optional[np.ndarray] = None,
    ) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.centroids = centroids


class ProcessingCancelled(ProcessorError):
    """The caller's ``cancel_check`` requested an abort."""
