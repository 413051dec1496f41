# examples/repelling_magnets.py
from magpen import ParticleState, SimulationConfig, advance_recording, ring_magnets
from magpen.core.invariants import mechanical_energy, nearest_magnet

config = SimulationConfig(magnet_coeff=-0.0002, micro_step=2e-4)
magnets = ring_magnets((0, 90, 180, 270), radius=0.05, height=0.04)

ball = ParticleState.at_rest((0.02, 0.01), config)
final, trail = advance_recording(ball, config, magnets, 5.0)

print("steps:", len(trail))
print("energy:", mechanical_energy(ball, config), "->", mechanical_energy(final, config))
print("nearest magnet:", nearest_magnet(final.horizontal_position, magnets))
