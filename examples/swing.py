# examples/swing.py
from magpen import SimulationConfig, Simulation, ring_magnets
from magpen.renderer import DebugRenderer, Viewport

config = SimulationConfig(time_scale=0.7)
magnets = ring_magnets((30, 150, 270), radius=0.04, height=0.04, tags=["red", "yellow", "blue"])
sim = Simulation(config, magnets, start=(0.06, -0.03))

viewport = Viewport(800, 800, config.length_scale)
renderer = DebugRenderer()

# 2 s of a 60 fps viewer
for frame in range(120):
    trail = sim.tick(1 / 60)
    if frame % 30 == 0:
        renderer.render_simulation(sim, trail, viewport)

print("t:", sim.time)
print("ball:", sim.ball_position)
