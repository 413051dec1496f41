"""
Microbenchmark: micro-step cost and grid classification throughput.
Run:
  python benchmarks/bench_classify.py
"""
import time

from magpen import ParticleState, SimulationConfig, advance, classify, ring_magnets


def run_steps(n: int = 20000):
    config = SimulationConfig()
    magnets = ring_magnets((30, 150, 270), 0.04, 0.04)
    state = ParticleState.at_rest((0.05, 0.02), config)
    duration = n * config.micro_step

    # warmup
    advance(state, config, magnets, 100 * config.micro_step)

    t0 = time.perf_counter()
    advance(state, config, magnets, duration)
    t1 = time.perf_counter()
    return (t1 - t0) / n


def run_grid(side: int, workers: int, settle: float = 2.0):
    config = SimulationConfig(micro_step=1e-3)
    magnets = ring_magnets((30, 150, 270), 0.04, 0.04)
    spacing = 0.1 / side
    origin = (-0.05, -0.05)

    t0 = time.perf_counter()
    classify(config, magnets, origin, spacing, side, side, settle, workers=workers)
    t1 = time.perf_counter()
    return (t1 - t0) / (side * side)


if __name__ == "__main__":
    per_step = run_steps()
    print(f"micro-step={1e6*per_step:8.2f} us  steps/s={1/per_step:10.1f}")
    for workers in [1, 2, 4]:
        per_cell = run_grid(16, workers)
        print(f"workers={workers}  cell={1e3*per_cell:8.2f} ms  cells/s={1/per_cell:8.1f}")
