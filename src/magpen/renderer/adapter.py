# MIT License (see LICENSE)
"""
Renderer adapters for the interactive pendulum.

The physics has no rendering dependency. A viewer converts between screen
pixels and world meters with a Viewport and hands each frame's trail to a
TrailRenderer implementation.

Screen convention: the pivot's vertical axis projects to the screen center,
pixel = center + world · length_scale (y grows downward on screen exactly as
world y does, so a basin image and the live view line up).
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO
import sys

import numpy as np

from ..types import Magnet
from ..util import f64

if TYPE_CHECKING:
    from ..session import Simulation


@dataclass(frozen=True)
class Viewport:
    """
    Screen ↔ world transform.

    Attributes:
        width: Screen width in pixels.
        height: Screen height in pixels.
        length_scale: Pixels per meter (usually config.length_scale).
    """
    width: int
    height: int
    length_scale: float

    @property
    def center(self) -> np.ndarray:
        """Screen position of the world origin."""
        return np.array([self.width / 2.0, self.height / 2.0], dtype=np.float64)

    def to_screen(self, world) -> np.ndarray:
        """Convert world [x, y] (or an [N, 2] array) to pixel coordinates."""
        return self.center + f64(world) * self.length_scale

    def to_world(self, pixel) -> np.ndarray:
        """Convert pixel [px, py] (or an [N, 2] array) to world meters."""
        return (f64(pixel) - self.center) / self.length_scale

    def grid_origin(self) -> np.ndarray:
        """World position of pixel (0, 0), for classifying the whole screen."""
        return self.to_world((0.0, 0.0))

    @property
    def grid_spacing(self) -> float:
        """World distance between neighbouring pixels."""
        return 1.0 / self.length_scale


class TrailRenderer(ABC):
    """
    Abstract base class for renderer implementations.

    Subclasses should implement the drawing methods to integrate with
    various graphics backends (matplotlib, pyglet, a game loop, etc.).

    Usage:
        renderer.begin_frame(sim.time)
        renderer.draw_trail(viewport.to_screen(trail))
        for magnet in sim.magnets:
            renderer.draw_magnet(magnet, viewport.to_screen(magnet.xy))
        renderer.draw_ball(viewport.to_screen(sim.position))
        renderer.end_frame()

    Or use the convenience method:
        renderer.render_simulation(sim, trail, viewport)
    """

    @abstractmethod
    def begin_frame(self, time: float) -> None:
        """
        Begin a new frame for rendering.

        Args:
            time: Current simulated time in seconds.
        """
        ...

    @abstractmethod
    def draw_trail(self, points: np.ndarray) -> None:
        """
        Draw the positions visited since the previous frame.

        Args:
            points: Screen coordinates [N, 2]; may be empty.
        """
        ...

    @abstractmethod
    def draw_magnet(self, magnet: Magnet, point: np.ndarray) -> None:
        """Draw one magnet at screen position `point`."""
        ...

    @abstractmethod
    def draw_ball(self, point: np.ndarray) -> None:
        """Draw the ball at screen position `point`."""
        ...

    @abstractmethod
    def end_frame(self) -> None:
        """
        Finalize the current frame.
        """
        ...

    def render_simulation(self, sim: "Simulation", trail: np.ndarray, viewport: Viewport) -> None:
        """
        Convenience method to draw one frame of a Simulation.

        Args:
            sim: The simulation to draw.
            trail: World positions returned by sim.tick().
            viewport: Transform from world to screen.
        """
        self.begin_frame(sim.time)
        self.draw_trail(viewport.to_screen(trail).reshape(-1, 2))
        for magnet in sim.magnets:
            self.draw_magnet(magnet, viewport.to_screen(magnet.xy))
        self.draw_ball(viewport.to_screen(sim.position))
        self.end_frame()


class DebugRenderer(TrailRenderer):
    """
    Console/text debug renderer for development and testing.

    Output:
        === Frame t=0.0167 ===
        trail 167 pts, last (1312.4, 702.9)
        magnet 0 @ (1603.9, 1020.0)
        ball @ (1312.4, 702.9)
    """

    def __init__(self, output: TextIO | None = None, verbose: bool = True):
        """
        Initialize the debug renderer.

        Args:
            output: Output stream (defaults to sys.stdout).
            verbose: If True, include magnet lines.
        """
        self.output = output or sys.stdout
        self.verbose = verbose

    def begin_frame(self, time: float) -> None:
        self.output.write(f"=== Frame t={time:.4f} ===\n")

    def draw_trail(self, points: np.ndarray) -> None:
        if len(points):
            x, y = points[-1]
            self.output.write(f"trail {len(points)} pts, last ({x:.1f}, {y:.1f})\n")
        else:
            self.output.write("trail 0 pts\n")

    def draw_magnet(self, magnet: Magnet, point: np.ndarray) -> None:
        if self.verbose:
            self.output.write(f"magnet {magnet.tag} @ ({point[0]:.1f}, {point[1]:.1f})\n")

    def draw_ball(self, point: np.ndarray) -> None:
        self.output.write(f"ball @ ({point[0]:.1f}, {point[1]:.1f})\n")

    def end_frame(self) -> None:
        self.output.write("\n")
        self.output.flush()


class NullRenderer(TrailRenderer):
    """
    No-op renderer that does nothing.

    Useful as a placeholder or for performance testing without rendering overhead.
    """

    def begin_frame(self, time: float) -> None:
        pass

    def draw_trail(self, points: np.ndarray) -> None:
        pass

    def draw_magnet(self, magnet: Magnet, point: np.ndarray) -> None:
        pass

    def draw_ball(self, point: np.ndarray) -> None:
        pass

    def end_frame(self) -> None:
        pass


class BufferedRenderer(TrailRenderer):
    """
    Renderer that buffers frame data for later retrieval.

    Trails accumulate across frames the way a persistent trail canvas does;
    each frame also records the ball position.

    Example:
        renderer = BufferedRenderer()
        for _ in range(60):
            renderer.render_simulation(sim, sim.tick(1 / 60), viewport)
        canvas_points = renderer.trail()
    """

    def __init__(self):
        self.frames: list[dict] = []
        self._current_frame: dict | None = None

    def begin_frame(self, time: float) -> None:
        """Begin buffering a new frame."""
        self._current_frame = {"time": time, "trail": [], "magnets": [], "ball": None}

    def draw_trail(self, points: np.ndarray) -> None:
        if self._current_frame is not None:
            self._current_frame["trail"] = f64(points).reshape(-1, 2).tolist()

    def draw_magnet(self, magnet: Magnet, point: np.ndarray) -> None:
        if self._current_frame is not None:
            self._current_frame["magnets"].append({"tag": magnet.tag, "position": f64(point).tolist()})

    def draw_ball(self, point: np.ndarray) -> None:
        if self._current_frame is not None:
            self._current_frame["ball"] = f64(point).tolist()

    def end_frame(self) -> None:
        """Finalize and store the buffered frame."""
        if self._current_frame is not None:
            self.frames.append(self._current_frame)
            self._current_frame = None

    def trail(self) -> np.ndarray:
        """All trail points of all frames, in order, as [N, 2]."""
        pts = [p for frame in self.frames for p in frame["trail"]]
        return np.array(pts, dtype=np.float64).reshape(-1, 2)

    def clear(self) -> None:
        """Clear all buffered frames."""
        self.frames.clear()
