# -*- coding: utf-8 -*-
"""
Pixel Grid - Site-indexed views over 2D/3D, single- or multi-band images.

``PixelGrid`` wraps caller image data as a read-only arena of float64
sample vectors, one row per site, so the segmentation engines can work on
flat site indices instead of per-pixel objects. Site index ``i`` of the
site at ``(x, y, z)`` is ``x + y * width + z * width * height``; ``x`` is
the column, ``y`` the row and ``z`` the slice, matching ImageJ pixel
coordinates. Label grids are plain ``int32`` arrays with the grid's
spatial shape, 0 meaning unassigned.

Array layouts
-------------
- ``multiband=False``: ``(rows, cols)`` or ``(depth, rows, cols)``.
- ``multiband=True``: ``(bands, rows, cols)`` or
  ``(bands, depth, rows, cols)``, bands first like an ImageJ stack.

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
import itertools
from typing import Iterator, List, Optional, Sequence, Tuple, Union

# Third-party
import numpy as np

# pixelseg internal
from pixelseg.exceptions import ValidationError
from pixelseg.vocabulary import Connectivity

LABEL_DTYPE = np.int32

#: Largest label a region or cluster can carry.
MAX_LABEL = int(np.iinfo(LABEL_DTYPE).max)

Offset = Tuple[int, int, int]


class PixelGrid:
    """Immutable site-indexed view over image data.

    Parameters
    ----------
    data : array_like
        Real-valued image data, see the module docstring for layouts.
    multiband : bool
        Whether the leading axis of *data* holds bands. Default ``False``.

    Attributes
    ----------
    width, height, depth : int
        Spatial extent. ``depth`` is 1 for 2D grids.
    bands : int
        Number of values per site.
    ndim : int
        Spatial dimensionality, 2 or 3.
    shape : Tuple[int, ...]
        Spatial shape, ``(rows, cols)`` or ``(depth, rows, cols)``.
    size : int
        Number of sites.

    Raises
    ------
    ValidationError
        If *data* has an unsupported dimensionality, is empty, complex,
        or contains non-finite values.

    Examples
    --------
    >>> grid = PixelGrid(np.zeros((4, 5)))
    >>> grid.width, grid.height, grid.bands
    (5, 4, 1)
    >>> rgb = PixelGrid(np.zeros((3, 4, 5)), multiband=True)
    >>> rgb.sample(0, 0).shape
    (3,)
    """

    def __init__(self, data: np.ndarray, multiband: bool = False) -> None:
        arr = np.asarray(data)
        if np.iscomplexobj(arr):
            raise ValidationError("Complex-valued pixel data is not supported")

        if multiband:
            if arr.ndim not in (3, 4):
                raise ValidationError(
                    f"Expected (bands, rows, cols) or (bands, depth, rows, cols) "
                    f"data, got shape {arr.shape}"
                )
            bands = arr.shape[0]
            spatial = arr.shape[1:]
            per_site = np.moveaxis(arr, 0, -1)
        else:
            if arr.ndim not in (2, 3):
                raise ValidationError(
                    f"Expected 2D (rows, cols) or 3D (depth, rows, cols) data, "
                    f"got shape {arr.shape}"
                )
            bands = 1
            spatial = arr.shape
            per_site = arr[..., np.newaxis]

        if bands < 1 or min(spatial) < 1:
            raise ValidationError(f"Pixel grid cannot be empty, got shape {arr.shape}")

        values = np.array(per_site, dtype=np.float64).reshape(-1, bands)
        if not np.all(np.isfinite(values)):
            raise ValidationError("Pixel data contains NaN or infinite values")
        values.flags.writeable = False

        self._values = values
        self._multiband = multiband
        self.shape: Tuple[int, ...] = tuple(int(s) for s in spatial)
        self.ndim = len(self.shape)
        if self.ndim == 2:
            self.depth = 1
            self.height, self.width = self.shape
        else:
            self.depth, self.height, self.width = self.shape
        self.bands = int(bands)
        self.size = int(values.shape[0])
        self._plane = self.width * self.height

    def __repr__(self) -> str:
        return (
            f"PixelGrid(width={self.width}, height={self.height}, "
            f"depth={self.depth}, bands={self.bands})"
        )

    @property
    def values(self) -> np.ndarray:
        """Read-only ``(size, bands)`` float64 samples in site-index order."""
        return self._values

    # -----------------------------------------------------------------
    # Site addressing
    # -----------------------------------------------------------------
    def contains(self, x: int, y: int, z: int = 0) -> bool:
        """Whether ``(x, y, z)`` lies inside the grid."""
        return (
            0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.depth
        )

    def index(self, x: int, y: int, z: int = 0) -> int:
        """Flat site index of ``(x, y, z)``."""
        return x + y * self.width + z * self._plane

    def coordinates(self, index: int) -> Offset:
        """Inverse of :meth:`index`, returns ``(x, y, z)``."""
        z, rem = divmod(index, self._plane)
        y, x = divmod(rem, self.width)
        return x, y, z

    def sample(self, x: int, y: int, z: int = 0) -> np.ndarray:
        """Return a copy of the value vector at ``(x, y, z)``.

        Raises
        ------
        ValidationError
            If the coordinate lies outside the grid.
        """
        if not self.contains(x, y, z):
            raise ValidationError(
                f"Site ({x}, {y}, {z}) is outside grid "
                f"{self.width}x{self.height}x{self.depth}"
            )
        return self._values[self.index(x, y, z)].copy()

    def normalize_site(self, site: Sequence[int]) -> Offset:
        """Turn a user coordinate into an in-bounds ``(x, y, z)`` triple.

        2D grids take ``(x, y)`` (or ``(x, y, 0)``); 3D grids require
        ``(x, y, z)``.

        Raises
        ------
        ValidationError
            For a wrong coordinate length, non-integer components, or a
            site outside the grid.
        """
        try:
            coords = tuple(site)
        except TypeError as e:
            raise ValidationError(f"Invalid site coordinate {site!r}") from e
        if self.ndim == 2 and len(coords) == 2:
            coords = coords + (0,)
        if len(coords) != 3:
            expected = '(x, y)' if self.ndim == 2 else '(x, y, z)'
            raise ValidationError(
                f"Expected site coordinate {expected}, got {site!r}"
            )
        try:
            x, y, z = (int(c) for c in coords)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid site coordinate {site!r}") from e
        if (x, y, z) != coords:
            raise ValidationError(f"Site coordinates must be integers, got {site!r}")
        if not self.contains(x, y, z):
            raise ValidationError(
                f"Site {site!r} is outside grid "
                f"{self.width}x{self.height}x{self.depth}"
            )
        return x, y, z

    # -----------------------------------------------------------------
    # Neighbourhoods
    # -----------------------------------------------------------------
    def neighbor_offsets(
        self, connectivity: Union[Connectivity, str]
    ) -> List[Offset]:
        """Neighbour offsets for *connectivity* on this grid.

        Face neighbours come first (x, then y, then z), followed by the
        corner neighbours in lexicographic order.
        """
        connectivity = Connectivity(connectivity)
        face: List[Offset] = [(-1, 0, 0), (1, 0, 0), (0, -1, 0), (0, 1, 0)]
        if self.ndim == 3:
            face += [(0, 0, -1), (0, 0, 1)]
        if connectivity is Connectivity.FACE:
            return face

        dz_range = (-1, 0, 1) if self.ndim == 3 else (0,)
        corners = [
            (dx, dy, dz)
            for dz, dy, dx in itertools.product(dz_range, (-1, 0, 1), (-1, 0, 1))
            if (dx, dy, dz) != (0, 0, 0) and (dx, dy, dz) not in face
        ]
        return face + corners

    def neighbors(
        self,
        index: int,
        offsets: Union[Connectivity, str, Sequence[Offset]] = Connectivity.FACE,
    ) -> Iterator[int]:
        """Yield in-bounds neighbour site indices of *index*.

        *offsets* is either a connectivity or a precomputed offset list
        from :meth:`neighbor_offsets`.
        """
        if isinstance(offsets, (Connectivity, str)):
            offsets = self.neighbor_offsets(offsets)
        x, y, z = self.coordinates(index)
        width, height, depth = self.width, self.height, self.depth
        for dx, dy, dz in offsets:
            nx, ny, nz = x + dx, y + dy, z + dz
            if 0 <= nx < width and 0 <= ny < height and 0 <= nz < depth:
                yield nx + ny * width + nz * self._plane

    # -----------------------------------------------------------------
    # Label and value grids
    # -----------------------------------------------------------------
    def new_labels(self) -> np.ndarray:
        """Zeroed flat label arena (all sites unassigned)."""
        return np.zeros(self.size, dtype=LABEL_DTYPE)

    def to_label_grid(self, flat: np.ndarray) -> np.ndarray:
        """Reshape a flat label arena to the grid's spatial shape."""
        return np.asarray(flat, dtype=LABEL_DTYPE).reshape(self.shape)

    def to_image(self, flat_values: np.ndarray) -> np.ndarray:
        """Reshape a ``(size, bands)`` value arena to the source layout."""
        arr = np.asarray(flat_values, dtype=np.float64).reshape(
            self.shape + (self.bands,)
        )
        if self._multiband:
            return np.moveaxis(arr, -1, 0)
        return arr[..., 0]

    def validate_mask(self, mask: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """Check an ROI mask and flatten it to a boolean site arena.

        Non-zero mask values mark sites inside the region of interest.

        Raises
        ------
        ValidationError
            If the mask shape differs from the grid's spatial shape.
        """
        if mask is None:
            return None
        mask = np.asarray(mask)
        if mask.shape != self.shape:
            raise ValidationError(
                f"Mask shape {mask.shape} must match grid shape {self.shape}"
            )
        return mask.astype(bool).ravel()


def as_pixel_grid(source: Union[PixelGrid, np.ndarray], multiband: bool = False) -> PixelGrid:
    """Return *source* unchanged if it is a ``PixelGrid``, else wrap it."""
    if isinstance(source, PixelGrid):
        return source
    return PixelGrid(source, multiband=multiband)
