# examples/small_basins.py
import numpy as np

from magpen import SimulationConfig, classify, ring_magnets
from magpen.renderer import save_basin_image

config = SimulationConfig(micro_step=1e-3)
magnets = ring_magnets((30, 150, 270), radius=0.04, height=0.04)

n = 64
spacing = 0.002
origin = (-n / 2 * spacing, -n / 2 * spacing)

if __name__ == "__main__":
    indices = classify(config, magnets, origin, spacing, n, n, settle_duration=10.0, workers=4)
    save_basin_image("small_basins.png", indices)
    print("cells per magnet:", np.bincount(indices.ravel(), minlength=len(magnets)))
