"""CLI for fastcheck."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from .aggregate import format_tree_digest
from .config import CheckConfig, load_config
from .constants import CONFIG_FILE, FASTCHECK_VERSION, ZERO_OUTPUT
from .core import FileFailure
from .diffing import format_diff
from .errors import FastcheckError
from .hashing import Algorithm, format_digest
from .logging_setup import setup_logging
from .ops import RunResult, diff_against, fingerprint_paths, fingerprint_tree, read_path_list
from .snapshot import FingerprintSnapshot
from .verify import parse_checklist, verify_entries


app = typer.Typer(help="""\
Fast parallel file fingerprinting. Hash directory trees or path lists,
compare a tree against an earlier snapshot, or verify files against a
recorded digest list.""")

# stdout carries the output protocol verbatim; diagnostics go to stderr
console = Console(highlight=False, soft_wrap=True, emoji=False, markup=False)
err_console = Console(stderr=True)


def _report_failure(failure: FileFailure) -> None:
    err_console.print(escape(f"{failure.path}: {failure.message}"))


def _fail(e: Exception, code: int = 2) -> typer.Exit:
    err_console.print(f"[red]error:[/red] {escape(str(e))}")
    return typer.Exit(code)


def _load_config(config_path: Optional[Path], required: bool) -> CheckConfig:
    """Load the config file, or defaults when it is optional and absent."""
    if config_path is None:
        config_path = Path(CONFIG_FILE)
        if not required and not config_path.exists():
            return CheckConfig()
    return load_config(config_path)


def _apply_flags(
    config: CheckConfig,
    strict: bool,
    sha256: bool,
    cores: Optional[int],
    salt: bool,
    verbose: bool,
) -> CheckConfig:
    # Flags can only switch behaviour on; absent flags keep the config value
    config = config.with_overrides(
        strict=True if strict else None,
        algorithm=Algorithm.SHA256 if sha256 else None,
        cores=cores,
        salt_with_path=True if salt else None,
        verbose=True if verbose else None,
    )
    setup_logging(config.verbose)
    return config


def _print_result(result: RunResult, tree: bool, colon: bool, digest_first: bool) -> None:
    if tree or result.is_empty:
        digest = None if result.is_empty else result.tree_digest
        console.print(format_tree_digest(digest, colon))
        return
    for task in result.hashed:
        digest = format_digest(task.digest, colon)
        console.print(f"{digest} {task.path}" if digest_first else f"{task.path} {digest}")


@app.command()
def scan(
    config_path: Path = typer.Option(Path(CONFIG_FILE), "--config", "-c", help="Configuration file (TOML or YAML)"),
    diff: Optional[Path] = typer.Option(None, "--diff", "-d", help="Earlier snapshot to compare against"),
    tree: bool = typer.Option(False, "--tree", help="Print only the aggregate tree digest"),
    colon: bool = typer.Option(False, "--colon", help="Separate digest bytes with ':'"),
    save: bool = typer.Option(False, "--save", help="Write the snapshot file even if the config does not ask for it"),
    exit_code: bool = typer.Option(False, "--exit-code", help="Exit with 1 when the diff is not empty"),
    strict: bool = typer.Option(False, "--strict", help="Abort on the first unreadable file"),
    sha256: bool = typer.Option(False, "--sha256", help="Use SHA256 instead of XXH3-64"),
    cores: Optional[int] = typer.Option(None, "--cores", "-j", min=0, help="Maximum parallel workers (0 = all CPUs)"),
    salt: bool = typer.Option(False, "--salt-with-path", help="Mix each file's path into its digest"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    """Fingerprint the configured directory trees.

    Prints one "<path> <digest>" line per file, or with --diff one line per
    difference from the earlier snapshot: "+" added, "-" removed, "~" changed.

    Examples:
        fastcheck scan                          # Use ./config.toml
        fastcheck scan --tree                   # Single tree digest
        fastcheck scan --diff fastcheck.snapshot
    """
    setup_logging(verbose)
    try:
        config = _apply_flags(_load_config(config_path, required=True), strict, sha256, cores, salt, verbose)
        if save:
            config = config.with_overrides(save_snapshot=True)

        # Read the baseline first: saving this run may overwrite the same file
        baseline = FingerprintSnapshot.load(diff, config.algorithm) if diff else None
        result = fingerprint_tree(config, on_failure=_report_failure)
    except FastcheckError as e:
        raise _fail(e)

    for failure in result.root_failures:
        err_console.print(f"[yellow]⚠[/yellow] {escape(str(failure))}")

    code = 1 if result.has_errors else 0
    if baseline is not None:
        changes = diff_against(baseline, result)
        for line in format_diff(changes):
            console.print(line)
        if exit_code and not changes.is_empty:
            code = 1
    else:
        _print_result(result, tree, colon, digest_first=False)

    if code:
        raise typer.Exit(code)


@app.command("hash")
def hash_paths(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Optional configuration file"),
    tree: bool = typer.Option(False, "--tree", help="Print only the aggregate digest"),
    colon: bool = typer.Option(False, "--colon", help="Separate digest bytes with ':'"),
    strict: bool = typer.Option(False, "--strict", help="Abort on the first unreadable file"),
    sha256: bool = typer.Option(False, "--sha256", help="Use SHA256 instead of XXH3-64"),
    cores: Optional[int] = typer.Option(None, "--cores", "-j", min=0, help="Maximum parallel workers (0 = all CPUs)"),
    salt: bool = typer.Option(False, "--salt-with-path", help="Mix each file's path into its digest"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    """Fingerprint newline-delimited paths read from stdin.

    Output lines are "<digest> <path>", sorted by path, and can be fed back
    to "fastcheck check".

    Examples:
        find data -type f | fastcheck hash > data.sums
        find data -type f | fastcheck hash --tree
    """
    setup_logging(verbose)
    try:
        config = _apply_flags(_load_config(config_path, required=False), strict, sha256, cores, salt, verbose)
        paths = read_path_list(sys.stdin)
        result = fingerprint_paths(paths, config, on_failure=_report_failure)
    except FastcheckError as e:
        raise _fail(e)

    _print_result(result, tree, colon, digest_first=True)
    if result.has_errors:
        raise typer.Exit(1)


@app.command()
def check(
    checklist: Path = typer.Argument(..., help='File of "<digest> <path>" lines'),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Optional configuration file"),
    strict: bool = typer.Option(False, "--strict", help="Abort on the first unreadable file"),
    sha256: bool = typer.Option(False, "--sha256", help="Digests in the list are SHA256"),
    cores: Optional[int] = typer.Option(None, "--cores", "-j", min=0, help="Maximum parallel workers (0 = all CPUs)"),
    salt: bool = typer.Option(False, "--salt-with-path", help="Digests were salted with their path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    """Verify files against a recorded digest list.

    Prints "!! <path>" for every file whose digest differs, then "Success"
    or "Failure". An empty list prints "0".
    """
    setup_logging(verbose)
    try:
        config = _apply_flags(_load_config(config_path, required=False), strict, sha256, cores, salt, verbose)
        try:
            text = checklist.read_text(encoding="utf-8")
        except OSError as e:
            raise FastcheckError(f"Cannot open file at {checklist}: {e.strerror or e}") from e
        entries = parse_checklist(text, config.algorithm, source=str(checklist))
        if not entries:
            console.print(ZERO_OUTPUT)
            return
        result = verify_entries(entries, config, on_failure=_report_failure)
    except FastcheckError as e:
        raise _fail(e)

    for path in result.mismatches:
        console.print(f"!! {path}")
    console.print("Success" if result.ok else "Failure")
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def version():
    """Show the fastcheck version."""
    console.print(FASTCHECK_VERSION)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
