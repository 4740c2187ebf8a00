#!/usr/bin/env python3
"""
Basic InkVerify example.

This script demonstrates:
1. Deriving a lock for a credential
2. Verifying the right and a wrong credential
3. Measuring how the grid evolved
"""

import time

from inkverify import Config, derive_lock, verify_lock
from inkverify.engine import Engine
from inkverify.metrics import compute_all_metrics, find_cycle, print_metrics_summary
from inkverify.pipeline import build_grid, derive_seed


def main():
    print("=" * 60)
    print("InkVerify - Cellular Automaton Locks")
    print("Basic Lock Example")
    print("=" * 60)
    print()

    config = Config(
        width=256,
        height=256,
        generations=1000,
    )
    credentials = ("alice", "correct-horse")

    print("Configuration:")
    print(f"  Grid: {config.width}x{config.height}")
    print(f"  Generations: {config.generations}")
    print(f"  Rule: {config.rule}")
    print()

    # Derive
    start = time.perf_counter()
    lock = derive_lock(
        credentials, config.width, config.height, config.generations,
        show_progress=True,
    )
    print(f"Lock: {lock.hex()} ({time.perf_counter() - start:.2f}s)")
    print()

    # Verify
    for candidate in [credentials, ("alice", "correct-horsf")]:
        ok = verify_lock(candidate, config.width, config.height, config.generations, lock)
        print(f"  verify{candidate}: {'✓' if ok else '✗'}")
    print()

    # Inspect the evolved grid
    seed = derive_seed(credentials)
    engine = Engine(config, build_grid(seed, config))
    initial = engine.grid.current.copy()
    engine.run()
    print_metrics_summary(compute_all_metrics(engine.grid, previous=initial))

    small = Config(width=32, height=32, generations=config.generations)
    cycle = find_cycle(small, seed)
    if cycle is None:
        print(f"✓ No repeated state on a 32x32 grid within {small.generations} generations")
    else:
        print(f"✗ Repeated state at generation {cycle[0]} (period {cycle[1]})")
    print()


if __name__ == "__main__":
    main()
