# MIT License (see LICENSE)
"""
Rendering adapters for visualization.

This subpackage provides:
    - Viewport: Screen ↔ world coordinate transform.
    - TrailRenderer: Abstract base class defining the rendering interface.
    - DebugRenderer: Text/console output for debugging.
    - NullRenderer: No-op renderer for performance testing.
    - BufferedRenderer: Records frames for playback or export.
    - basin_colors / save_basin_image: Classification grid to image.

The physics has no rendering dependency; these adapters are optional.

Typical usage:
    from magpen.renderer import DebugRenderer, Viewport

    viewport = Viewport(800, 800, config.length_scale)
    DebugRenderer().render_simulation(sim, sim.tick(1 / 60), viewport)
"""
from .adapter import (
    Viewport,
    TrailRenderer,
    DebugRenderer,
    NullRenderer,
    BufferedRenderer,
)
from .image import DEFAULT_PALETTE, basin_colors, save_basin_image

__all__ = [
    "Viewport",
    "TrailRenderer",
    "DebugRenderer",
    "NullRenderer",
    "BufferedRenderer",
    "DEFAULT_PALETTE",
    "basin_colors",
    "save_basin_image",
]
