from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import replace
from pathlib import Path
from typing import Annotated, TextIO

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from result import Err

from foldersize.config.defaults import default_config
from foldersize.config.loader import load_config, load_exclusions, sample_config_json
from foldersize.config.schema import AppConfig
from foldersize.models.collisions import ReportLine
from foldersize.models.enums import Action
from foldersize.models.scan import ScanError, SizeOptions
from foldersize.services.collisions import CollisionReconciler
from foldersize.services.duplicates import find_duplicate_trees
from foldersize.services.sizes import aggregate
from foldersize.services.summary import dump_text, duplicate_lines, print_lines, print_report_line, size_lines

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(error: ScanError) -> typer.Exit:
    err_console.print(f"[red]Failed for {escape(error.path)}: {escape(error.message)}[/]")
    return typer.Exit(1)


def _run_sizes(path: str, config: AppConfig, *, show_large: bool, full_name: bool) -> None:
    options = SizeOptions(
        max_depth=config.max_depth,
        always_show=frozenset(config.always_show),
        large_threshold=config.large_threshold if show_large else None,
    )
    with console.status("[bold #8abeb7]Measuring folders...[/]"):
        result = aggregate(path, options)
    if isinstance(result, Err):
        raise _fail(result.unwrap_err())
    report = result.unwrap()

    if report.stats.access_errors:
        err_console.print(f"[red]{report.stats.access_errors:,} access errors during scan[/red]")
    print_lines(console, size_lines(report, full_name=full_name))


def _run_find_dups(path: str, config: AppConfig, log_path: str) -> None:
    with console.status("[bold #8abeb7]Hashing folders...[/]"):
        result = find_duplicate_trees(path, config.excluded_dir_names)
    if isinstance(result, Err):
        raise _fail(result.unwrap_err())
    report = result.unwrap()

    lines = duplicate_lines(report)
    print_lines(console, lines)
    Path(log_path).write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    console.print(f"[#81a2be]Wrote {len(report.groups()):,} groups to[/] {escape(log_path)}")


def _run_fix_drive(
    path: str,
    config: AppConfig,
    *,
    dry_run: bool,
    exclusions: str | None,
    dump: str | None,
) -> None:
    excluded: frozenset[str] = frozenset()
    if exclusions is not None:
        loaded = load_exclusions(exclusions)
        if isinstance(loaded, Err):
            err_console.print(f"[red]{escape(loaded.unwrap_err())}[/]")
            raise typer.Exit(1)
        excluded = loaded.unwrap()

    console.print(
        f"Running drive fixer with: dry_run={dry_run}"
        + (f", dump={escape(dump)}" if dump else "")
        + (f", exclusions={escape(exclusions)}" if exclusions else ""),
        highlight=False,
    )

    with ExitStack() as stack:
        out: TextIO | None = None
        if dump is not None:
            out = stack.enter_context(open(dump, "w", encoding="utf-8"))

        def on_line(line: ReportLine) -> None:
            print_report_line(console, line)
            if out is not None:
                out.write(dump_text(line) + "\n")
                out.flush()

        fixer = CollisionReconciler(
            dry_run=dry_run,
            exclusions=excluded,
            compare_contents=config.compare_contents,
            marker=config.collision_marker,
            on_line=on_line,
        )
        result = fixer.reconcile(path)

    if isinstance(result, Err):
        raise _fail(result.unwrap_err())
    report = result.unwrap()
    applied = sum(1 for d in report.decisions if d.applied)
    console.print(
        f"Done: {applied:,} fixed, {len(report.by_action(Action.FLAGGED)):,} flagged groups",
        highlight=False,
    )


def run(
    path: Annotated[str, typer.Argument(help="Folder to analyze.")] = ".",
    depth: Annotated[int | None, typer.Option("--depth", "-d", help="Nesting levels to report below the root.")] = None,
    separate: Annotated[
        list[str] | None,
        typer.Option("--separate", "-s", help="Folder name to always report. Repeatable."),
    ] = None,
    show_large: Annotated[bool, typer.Option("--show-large", help="Also report folders above the size threshold.")] = False,
    large_threshold: Annotated[
        int | None, typer.Option("--large-threshold", help="Byte threshold for --show-large.")
    ] = None,
    full_name: Annotated[bool, typer.Option("--full-name", "-f", help="Print full paths.")] = False,
    find_dups: Annotated[bool, typer.Option("--find-dups", help="Find probable duplicate folder trees.")] = False,
    fix_drive: Annotated[bool, typer.Option("--fix-drive", help="Reconcile 'name (1)' sync collisions.")] = False,
    apply: Annotated[bool, typer.Option("--run", help="Apply --fix-drive changes instead of a dry run.")] = False,
    exclusions: Annotated[str | None, typer.Option("--exclusions", help="File listing paths to skip.")] = None,
    dump: Annotated[str | None, typer.Option("--dump", help="Mirror the report to this file.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
    sample_config: Annotated[bool, typer.Option("--sample-config", help="Print sample config JSON.")] = False,
) -> None:
    _configure_logging(verbose)

    if sample_config:
        console.print(sample_config_json(), markup=False)
        raise typer.Exit(0)

    config_result = load_config()
    if isinstance(config_result, Err):
        err_console.print(f"[yellow]{escape(config_result.unwrap_err())} Using defaults.[/]")
        config = default_config()
    else:
        config = config_result.unwrap()

    overrides: dict[str, object] = {}
    if depth is not None:
        overrides["max_depth"] = depth
    if separate:
        overrides["always_show"] = [*config.always_show, *separate]
    if large_threshold is not None:
        overrides["large_threshold"] = max(0, large_threshold)
    if overrides:
        config = replace(config, **overrides)

    if find_dups:
        _run_find_dups(path, config, dump or config.duplicates_log)
    elif fix_drive:
        _run_fix_drive(path, config, dry_run=not apply, exclusions=exclusions, dump=dump)
    else:
        _run_sizes(path, config, show_large=show_large or large_threshold is not None, full_name=full_name)


def cli() -> None:
    typer.run(run)


if __name__ == "__main__":
    cli()
