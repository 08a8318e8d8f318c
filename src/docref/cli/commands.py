"""Build and inspection commands.

Commands: build, check, refs
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from docref.build import BuildContext, BuildResult, load_files, register_all, run_build
from docref.cli._app import BUILD_COMMANDS, INSPECT_COMMANDS
from docref.cli._context import get_runtime_context
from docref.config import Settings
from docref.content import discover_content_files
from docref.exceptions import ConfigurationError, DocrefError
from docref.ui import (
    console,
    fatal_error,
    print_build_error,
    print_build_summary,
    print_info,
    print_issue_table,
    print_registry_table,
    print_step,
    print_success,
    print_warning,
)

ContentRootArg = Annotated[
    Path | None,
    typer.Argument(
        help="Content root (default: content_root from docref.yaml).",
        show_default=False,
    ),
]

StrictOpt = Annotated[
    bool | None,
    typer.Option(
        "--strict/--no-strict",
        help="Fail on the first issue (default: strict when DOCREF_ENV=production).",
        show_default=False,
    ),
]


def _settings_or_exit(ctx: typer.Context, **overrides: object) -> Settings:
    runtime = get_runtime_context(ctx.obj)
    try:
        return runtime.settings_with(**overrides)
    except ConfigurationError as e:
        fatal_error(str(e), f"Check {runtime.config_path}")
        raise typer.Exit(2) from e


def _run(ctx: BuildContext, *, write: bool) -> BuildResult:
    mode = "strict" if ctx.settings.strict_mode else "permissive"
    print_info(f"Content root: {ctx.settings.content_root} ({mode} mode)")
    try:
        return run_build(ctx, write=write)
    except DocrefError as e:
        print_build_error(e)
        raise typer.Exit(1) from e


def _write_report(result: BuildResult, report: Path) -> None:
    report.parent.mkdir(parents=True, exist_ok=True)
    report.write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")
    print_info(f"Report written to {report}")


def register_build_commands(app: typer.Typer) -> None:
    """Register build, check and refs on the app."""

    @app.command(rich_help_panel=BUILD_COMMANDS)
    def build(
        ctx: typer.Context,
        content_root: ContentRootArg = None,
        out: Annotated[
            Path | None,
            typer.Option("--out", "-o", help="Output directory for rewritten files."),
        ] = None,
        strict: StrictOpt = None,
        report: Annotated[
            Path | None,
            typer.Option("--report", help="Write a JSON report of all issues."),
        ] = None,
    ) -> None:
        """Resolve every link token and write the rewritten content tree.

        Runs identity registration over the whole tree first, then rewrites
        [cyan]ref:[/] and [cyan]repo[/] links in every file.

        [bold]Examples:[/]
          docref build documentation -o build/content
          DOCREF_ENV=production docref build   [dim]# strict[/]
        """
        settings = _settings_or_exit(
            ctx, content_root=content_root, output_dir=out, strict_mode=strict
        )
        build_ctx = BuildContext(settings)
        result = _run(build_ctx, write=True)

        print_build_summary(result, wrote=True)
        print_issue_table(result.issues)
        if report:
            _write_report(result, report)
        if result.ok:
            print_success(f"Wrote {len(result.written)} file(s) to {settings.output_dir}")
        else:
            print_warning("Build finished with issues; unresolved tokens were left inert")

    @app.command(rich_help_panel=BUILD_COMMANDS)
    def check(
        ctx: typer.Context,
        content_root: ContentRootArg = None,
        strict: StrictOpt = None,
        report: Annotated[
            Path | None,
            typer.Option("--report", help="Write a JSON report of all issues."),
        ] = None,
    ) -> None:
        """Resolve every link token without writing anything.

        Exits with status 1 if any issue was found.
        """
        settings = _settings_or_exit(ctx, content_root=content_root, strict_mode=strict)
        build_ctx = BuildContext(settings)
        result = _run(build_ctx, write=False)

        print_build_summary(result, wrote=False)
        print_issue_table(result.issues)
        if report:
            _write_report(result, report)
        if not result.ok:
            raise typer.Exit(1)
        print_success(f"All {result.rewritten} link token(s) resolved")

    @app.command(rich_help_panel=INSPECT_COMMANDS)
    def refs(
        ctx: typer.Context,
        content_root: ContentRootArg = None,
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Print the registry as JSON."),
        ] = False,
    ) -> None:
        """List the global identifiers declared in the content tree."""
        settings = _settings_or_exit(ctx, content_root=content_root)
        build_ctx = BuildContext(settings)
        try:
            if not json_output:
                print_step(1, 1, "Registering identities")
            paths = discover_content_files(settings.content_root, settings.extensions)
            register_all(build_ctx, load_files(build_ctx, paths))
        except DocrefError as e:
            print_build_error(e)
            raise typer.Exit(1) from e

        records = build_ctx.registry.all()
        if json_output:
            console.print_json(json.dumps([record.to_dict() for record in records]))
            return
        print_registry_table(records)
