"""Simulate engine output for the sample harness.

Usage:
    python tools/sim_engine.py OUT_DIR [--paths N] [--seed S] [--max-symbolic-size M]
"""
import sys
from pathlib import Path

REPO = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO / "src"))

from concolic_core.protocol import DEFAULT_MAX_SYMBOLIC_SIZE  # noqa: E402
from concolic_tools.simulate import generate_paths  # noqa: E402

if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list: list[str], flag: str, default: int) -> tuple[int, list[str]]:
        """Remove an integer option from an argv-style list."""
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    paths, args = pop_option(args, "--paths", 1)
    seed, args = pop_option(args, "--seed", 0)
    bound, args = pop_option(args, "--max-symbolic-size", DEFAULT_MAX_SYMBOLIC_SIZE)

    out = Path(args[0] if args else "simulated_paths")
    for target in generate_paths(out, paths=paths, seed=seed, max_symbolic_size=bound):
        print(f"GENERATED: {target}")
