"""Concolic Names - encode identifiers, decode and export engine assignments."""
from __future__ import annotations

import functools
from pathlib import Path

import click

from concolic_core.assignment import decode_assignment
from concolic_core.names import KindTag, encode_name
from concolic_core.protocol import DEFAULT_MAX_SYMBOLIC_SIZE
from concolic_tools.simulate import generate_paths
from concolic_tools.witness import export_witnesses, load_assignment, tree_to_json

TAG_CHOICES = [tag.value for tag in KindTag]


def fail_closed(func):
    """Report any failure as a single FATAL line and exit 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            click.echo(f"FATAL: {e}")
            raise SystemExit(1)
    return wrapper


@click.group()
def main():
    pass


@main.command("encode")
@click.argument("base")
@click.argument("qualifier")
@click.option("--tag", type=click.Choice(TAG_CHOICES), default=KindTag.BYTE_ARRAY.value,
              show_default=True, help="Kind tag character")
@fail_closed
def encode_cmd(base: str, qualifier: str, tag: str):
    click.echo(encode_name(base, qualifier, KindTag(tag)))


@main.command("decode")
@click.argument("assignment", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@fail_closed
def decode_cmd(assignment: Path):
    """Print the decoded tree of one assignment file."""
    tree = decode_assignment(load_assignment(assignment))
    click.echo(tree_to_json(tree))


@main.command("export")
@click.argument("assignments", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@fail_closed
def export_cmd(assignments: tuple[Path, ...], out: Path):
    """Export assignment files as a witness table."""
    loaded = [load_assignment(p) for p in assignments]
    target = export_witnesses(loaded, out)
    if target is None:
        click.echo("No entries to export.")
        return
    click.echo(f"PASS: Witness table written to {target}")
    click.echo(f"  Paths: {len(loaded)}")
    click.echo(f"  Entries: {sum(len(a) for a in loaded)}")


@main.command("simulate")
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@click.option("--paths", type=click.IntRange(min=1), default=1, show_default=True,
              help="Number of assignment files to write")
@click.option("--seed", type=int, default=0, show_default=True)
@click.option("--max-symbolic-size", type=int, default=DEFAULT_MAX_SYMBOLIC_SIZE,
              show_default=True, help="Session bound on dict and tuple sizes")
@fail_closed
def simulate_cmd(out: Path, paths: int, seed: int, max_symbolic_size: int):
    """Replay the sample harness and write assignment files."""
    for target in generate_paths(out, paths=paths, seed=seed,
                                 max_symbolic_size=max_symbolic_size):
        click.echo(f"GENERATED: {target}")


if __name__ == "__main__":
    main()
