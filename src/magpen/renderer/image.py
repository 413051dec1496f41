# MIT License (see LICENSE)
"""
Basin images from classification grids.

Each cell's magnet index becomes a pixel color. Row 0 of the grid is the top
row of the image, matching the screen convention of Viewport.
"""
from __future__ import annotations
from typing import Sequence

import numpy as np
from matplotlib import image as mpimg
from matplotlib.colors import to_rgb

# Fixed colors for magnets 0..2, as on the bench setup.
DEFAULT_PALETTE: tuple[str, ...] = ("red", "yellow", "blue")

# Color of unclassified (-1) cells.
UNCLASSIFIED_COLOR = (0, 0, 0)


def basin_colors(indices: np.ndarray, palette: Sequence = DEFAULT_PALETTE) -> np.ndarray:
    """
    Map a grid of magnet indices to RGB pixels.

    Args:
        indices: Integer array [H, W]; -1 marks unclassified cells.
        palette: One matplotlib color spec per magnet index.

    Returns:
        uint8 array [H, W, 3].

    Raises:
        ValueError: If an index has no palette entry.
    """
    indices = np.asarray(indices)
    if indices.ndim != 2:
        raise ValueError(f"indices must be 2D, got shape {indices.shape}")
    if indices.size and indices.max() >= len(palette):
        raise ValueError(f"Palette has {len(palette)} colors but index {int(indices.max())} occurs")

    lut = np.array([UNCLASSIFIED_COLOR] + [
        tuple(round(255 * c) for c in to_rgb(color)) for color in palette
    ], dtype=np.uint8)
    return lut[indices + 1]


def save_basin_image(path: str, indices: np.ndarray, palette: Sequence = DEFAULT_PALETTE) -> None:
    """Write a basin image to disk; the format follows the file extension (PNG recommended)."""
    mpimg.imsave(path, basin_colors(indices, palette))
