"""
Command-line interface for InkVerify.

Usage:
    python -m inkverify.main --help
    python -m inkverify.main alice correct-horse --width 200 --height 200 --generations 500
    python -m inkverify.main alice correct-horse --expected 27e98ff2...
"""

import argparse
import binascii
import json
import logging
import sys
import time

from .config import Config
from .engine import Engine
from .errors import ConfigurationError, InvalidInputError
from .metrics import CycleDetector, compute_all_metrics, print_metrics_summary
from .pipeline import build_grid, derive_seed, digest_state, serialize_grid, verify_lock
from .rules import RULES


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all options."""
    parser = argparse.ArgumentParser(
        description="InkVerify - Cellular Automaton Proof-of-Work Locks",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("username", help="First credential part")
    parser.add_argument("password", help="Second credential part")

    # Grid options
    parser.add_argument("--width", type=int, default=200, help="Grid width")
    parser.add_argument("--height", type=int, default=200, help="Grid height")
    parser.add_argument(
        "--generations", type=int, default=500,
        help="Number of generations (work factor)"
    )
    parser.add_argument(
        "--rule", type=str, default=None, choices=sorted(RULES),
        help="Update rule (default: life-xor)"
    )

    # Verification
    parser.add_argument(
        "--expected", type=str, default=None,
        help="Hex lock to verify against instead of printing a new one"
    )

    # Analysis options
    parser.add_argument(
        "--check-cycles", action="store_true",
        help="Check whether the grid repeats a state before the target"
    )
    parser.add_argument(
        "--print-metrics", action="store_true",
        help="Print grid metrics at end"
    )
    parser.add_argument(
        "--save-metrics", type=str, default=None,
        help="Save metrics to JSON file"
    )
    parser.add_argument(
        "--progress", action="store_true",
        help="Show progress bar"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging"
    )

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config = Config.from_args(argparse.Namespace(
            width=args.width,
            height=args.height,
            generations=args.generations,
            rule=args.rule,
        ))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    credentials = (args.username, args.password)

    if args.expected is not None:
        try:
            expected = binascii.unhexlify(args.expected)
        except (binascii.Error, ValueError):
            print("Invalid lock: expected a hex string", file=sys.stderr)
            return 1

        ok = verify_lock(
            credentials, config.width, config.height, config.generations,
            expected, rule=config.rule,
        )
        print("MATCH" if ok else "MISMATCH")
        return 0 if ok else 1

    try:
        seed = derive_seed(credentials, config.require_nonempty)
    except InvalidInputError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 1

    print("InkVerify Lock")
    print(f"  User: {args.username}")
    print(f"  Grid: {config.width}x{config.height}")
    print(f"  Generations: {config.generations}")
    print(f"  Rule: {config.rule}")
    print()

    start = time.perf_counter()
    engine = Engine(config, build_grid(seed, config))
    initial = engine.grid.current.copy()

    # Cycle checking rides along with the main evolution
    callback = None
    cycles = []
    if args.check_cycles:
        detector = CycleDetector(engine.rule, history=config.generations + 1)
        detector.observe(engine.grid, 0)

        def callback(e: Engine) -> None:
            period = detector.observe(e.grid, e.generation)
            if period is not None and not cycles:
                cycles.append((e.generation, period))

    engine.run(callback=callback, callback_interval=1, show_progress=args.progress)
    lock = digest_state(serialize_grid(engine.grid))
    elapsed = time.perf_counter() - start

    print(f"Completed in {elapsed:.2f}s")
    print(f"Lock: {lock.hex()}")

    if args.check_cycles:
        if not cycles:
            print(f"No repeated state within {config.generations} generations")
        else:
            generation, period = cycles[0]
            print(f"Repeated state at generation {generation} (period {period})")

    if args.print_metrics or args.save_metrics:
        metrics = compute_all_metrics(engine.grid, previous=initial)

        if args.print_metrics:
            print_metrics_summary(metrics)

        if args.save_metrics:
            with open(args.save_metrics, "w") as f:
                json.dump(metrics, f, indent=2)
            print(f"Metrics saved to {args.save_metrics}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
