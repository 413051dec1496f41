# MIT License (see LICENSE)
import io

import numpy as np
import pytest
from matplotlib import image as mpimg
from magpen.config import SimulationConfig
from magpen.renderer import (
    BufferedRenderer,
    DebugRenderer,
    NullRenderer,
    Viewport,
    basin_colors,
    save_basin_image,
)
from magpen.session import Simulation
from magpen.types import ring_magnets


def make_sim():
    cfg = SimulationConfig(micro_step=1e-3)
    return Simulation(cfg, ring_magnets((30.0, 150.0, 270.0), 0.04, 0.04), start=(0.05, 0.02))


def test_viewport_transform():
    vp = Viewport(800, 600, 3000.0)
    assert np.array_equal(vp.to_screen((0.0, 0.0)), [400.0, 300.0])
    assert np.allclose(vp.to_screen((0.01, -0.02)), [430.0, 240.0])

    pts = np.array([[0.05, 0.02], [-0.1, 0.03]])
    assert np.allclose(vp.to_world(vp.to_screen(pts)), pts)

    assert np.allclose(vp.grid_origin(), [-400.0 / 3000.0, -300.0 / 3000.0])
    assert vp.grid_spacing == pytest.approx(1.0 / 3000.0)
    # Pixel (col, row) of the grid lands on the classified world position
    assert np.allclose(vp.to_world((10.0, 20.0)), vp.grid_origin() + np.array([10.0, 20.0]) * vp.grid_spacing)


def test_debug_renderer_output():
    sim = make_sim()
    vp = Viewport(800, 800, sim.config.length_scale)
    buf = io.StringIO()
    renderer = DebugRenderer(output=buf)

    trail = sim.tick(0.05)
    renderer.render_simulation(sim, trail, vp)
    text = buf.getvalue()
    assert text.startswith("=== Frame t=")
    assert f"trail {len(trail)} pts" in text
    assert "magnet 0 @" in text and "magnet 2 @" in text
    assert "ball @" in text

    quiet = io.StringIO()
    DebugRenderer(output=quiet, verbose=False).render_simulation(sim, sim.tick(0.0), vp)
    assert "trail 0 pts" in quiet.getvalue()
    assert "magnet" not in quiet.getvalue()


def test_buffered_renderer_accumulates_trail():
    sim = make_sim()
    vp = Viewport(800, 800, sim.config.length_scale)
    renderer = BufferedRenderer()

    trails = []
    for _ in range(3):
        trail = sim.tick(0.02)
        trails.append(trail)
        renderer.render_simulation(sim, trail, vp)

    assert len(renderer.frames) == 3
    frame = renderer.frames[-1]
    assert len(frame["magnets"]) == 3
    assert np.allclose(frame["ball"], vp.to_screen(sim.position))

    all_points = vp.to_screen(np.concatenate(trails))
    assert np.allclose(renderer.trail(), all_points)

    renderer.clear()
    assert renderer.trail().shape == (0, 2)


def test_null_renderer():
    sim = make_sim()
    NullRenderer().render_simulation(sim, sim.tick(0.01), Viewport(10, 10, 100.0))


def test_basin_colors():
    idx = np.array([[0, 1], [2, -1]])
    rgb = basin_colors(idx)
    assert rgb.dtype == np.uint8
    assert rgb.shape == (2, 2, 3)
    assert rgb[0, 0].tolist() == [255, 0, 0]
    assert rgb[0, 1].tolist() == [255, 255, 0]
    assert rgb[1, 0].tolist() == [0, 0, 255]
    assert rgb[1, 1].tolist() == [0, 0, 0]

    custom = basin_colors(np.array([[0, 1]]), palette=["#00ff00", (0.0, 0.0, 0.0)])
    assert custom[0, 0].tolist() == [0, 255, 0]

    with pytest.raises(ValueError):
        basin_colors(np.array([[3]]))
    with pytest.raises(ValueError):
        basin_colors(np.array([0, 1]))


def test_save_basin_image(tmp_path):
    idx = np.zeros((4, 6), dtype=np.int64)
    idx[0, :] = 2
    path = tmp_path / "basins.png"
    save_basin_image(str(path), idx)

    img = mpimg.imread(str(path))
    assert img.shape[:2] == (4, 6)
    # Row 0 of the grid is the top row of the image
    assert np.allclose(img[0, 0, :3], [0.0, 0.0, 1.0])
    assert np.allclose(img[3, 5, :3], [1.0, 0.0, 0.0])
