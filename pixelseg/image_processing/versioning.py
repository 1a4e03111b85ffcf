# -*- coding: utf-8 -*-
"""
Processor Versioning - Version stamps and capability tags for segmenters.

``@processor_version`` records which revision of a segmentation algorithm
produced a label grid, so that saved results can be traced back to the
behavior that made them. ``@processor_tags`` records what a segmenter
accepts (gray, colour, multispectral or volumetric input) and what it
emits (semantic labels from clustering, instance regions from growth).

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
import importlib.metadata
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, Type, TypeVar

# pixelseg vocabulary
from pixelseg.vocabulary import (
    ImageModality,
    ProcessorCategory,
    SegmentationType,
)

T = TypeVar('T')

_DISTRIBUTION = 'pixelseg'


def _distribution_version() -> str:
    try:
        return importlib.metadata.version(_DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        # Source checkout without an installed distribution
        return 'unknown'


def _members(
    field: str,
    values: Optional[Iterable[Enum]],
    enum_cls: Type[Enum],
) -> Tuple[Enum, ...]:
    if values is None:
        return ()
    members = tuple(values)
    for value in members:
        if not isinstance(value, enum_cls):
            raise TypeError(
                f"{field} must be {enum_cls.__name__} members, got {value!r}"
            )
    return members


def processor_version(version: Optional[str] = None):
    """Stamp ``__processor_version__`` on a segmenter class.

    Bump the version whenever a change alters the labels a segmenter
    produces for the same input and parameters.

    Parameters
    ----------
    version : str, optional
        Semantic version string, e.g. ``'1.0.0'``. Defaults to the
        installed ``pixelseg`` version, or ``'unknown'`` from a source
        tree.

    Returns
    -------
    Callable
        Class decorator.

    Examples
    --------
    >>> @processor_version('1.0.0')
    ... class Everything(ImageTransform):
    ...     def apply(self, source, **kwargs):
    ...         return np.ones(np.shape(source), dtype=np.int32)
    >>> Everything.__processor_version__
    '1.0.0'
    """
    def decorator(cls: Type[T]) -> Type[T]:
        cls.__processor_version__ = version or _distribution_version()
        return cls
    return decorator


def processor_tags(
    modalities: Optional[Sequence[ImageModality]] = None,
    category: Optional[ProcessorCategory] = None,
    description: Optional[str] = None,
    segmentation_types: Optional[Sequence[SegmentationType]] = None,
):
    """Stamp ``__processor_tags__`` capability metadata on a segmenter.

    Parameters
    ----------
    modalities : Sequence[ImageModality], optional
        Image layouts the segmenter accepts.
    category : ProcessorCategory, optional
        ``SEGMENTATION`` for region growth, ``CLUSTERING`` for
        partitioning by sample value.
    description : str, optional
        One-line summary shown when listing segmenters.
    segmentation_types : Sequence[SegmentationType], optional
        Kind of label grid produced.

    Raises
    ------
    TypeError
        If a tag is not a member of its vocabulary enum. Tags are checked
        when the decorator is built, before any class is decorated.
    """
    tags = {
        'modalities': _members('modalities', modalities, ImageModality),
        'category': None,
        'description': description,
        'segmentation_types': _members(
            'segmentation_types', segmentation_types, SegmentationType,
        ),
    }
    if category is not None:
        tags['category'] = _members('category', [category], ProcessorCategory)[0]

    def decorator(cls: Type[T]) -> Type[T]:
        cls.__processor_tags__ = dict(tags)
        return cls
    return decorator
