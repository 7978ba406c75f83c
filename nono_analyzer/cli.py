"""CLI entry point for nono-analyzer."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Literal, Optional, cast

import click
from rich.console import Console
from rich.markup import escape

from nono_analyzer import __version__
from nono_analyzer.checker import run_check, run_verify, runtime_namespace
from nono_analyzer.config import AnalyzerConfig, load_config
from nono_analyzer.constants import (
    EXIT_ERROR,
    EXIT_INVALID_TARGET,
    EXIT_ISSUES,
    EXIT_SUCCESS,
)
from nono_analyzer.exceptions import (
    ConfigurationError,
    NonoAnalyzerError,
    PackageSelectionError,
)
from nono_analyzer.logging import setup_logging
from nono_analyzer.models.options import CheckOptions, Verbosity
from nono_analyzer.models.support import CheckReport
from nono_analyzer.models.verify import VerifyReport
from nono_analyzer.output.check_json import CheckJsonFormatter, VerifyJsonFormatter
from nono_analyzer.output.check_markdown import (
    CheckMarkdownFormatter,
    VerifyMarkdownFormatter,
)
from nono_analyzer.output.terminal import TerminalFormatter
from nono_analyzer.resolvers.base import MetadataProvider
from nono_analyzer.resolvers.metadata import CargoMetadataProvider, JsonFileMetadataProvider
from nono_analyzer.verify.build import CargoBuildRunner

# Module-level console for consistent output
_console = Console()
# Separate console for error output (writes to stderr)
_error_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """no_std compliance analyzer for Cargo packages.

    Checks whether a package and every dependency activated for a feature
    selection can be built without the standard library.

    \b
    Examples:
        nono-analyzer check
        nono-analyzer check --no-default-features --features alloc
        nono-analyzer check --package my-crate --format json
        nono-analyzer verify --no-default-features
    """
    setup_logging()


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by `check` and `verify`."""
    options = [
        click.option(
            "--no-default-features",
            is_flag=True,
            default=False,
            help="Do not activate the `default` feature.",
        ),
        click.option(
            "--features",
            "features",
            multiple=True,
            help="Features to activate (repeatable, comma or space separated).",
        ),
        click.option(
            "--package",
            "-p",
            "package",
            default=None,
            help="Package to check when the workspace has several members.",
        ),
        click.option(
            "--manifest-path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="Path to Cargo.toml.",
        ),
        click.option(
            "--metadata",
            "metadata_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="Read `cargo metadata` JSON from a file instead of running cargo.",
        ),
        click.option(
            "--format",
            "output_format",
            type=click.Choice(["terminal", "markdown", "json"], case_sensitive=False),
            default="terminal",
            help="Output format (default: terminal).",
        ),
        click.option(
            "--output",
            "-o",
            "output_path",
            type=click.Path(dir_okay=False),
            default=None,
            help="Write report to file instead of stdout.",
        ),
        click.option(
            "--verbose",
            "-v",
            "verbose_flag",
            is_flag=True,
            default=False,
            help="Show active features and clean artifacts.",
        ),
        click.option(
            "--quiet",
            "-q",
            "quiet_flag",
            is_flag=True,
            default=False,
            help="Only show failing packages and the status line.",
        ),
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Path to configuration file.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_options(
    no_default_features: bool,
    features: tuple[str, ...],
    package: Optional[str],
    output_format: str,
    verbose_flag: bool,
    quiet_flag: bool,
) -> CheckOptions:
    if verbose_flag and quiet_flag:
        raise click.UsageError("--verbose and --quiet are mutually exclusive.")

    if quiet_flag:
        verbosity = Verbosity.QUIET
    elif verbose_flag:
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL

    format_value = cast(Literal["terminal", "markdown", "json"], output_format.lower())
    return CheckOptions(
        no_default_features=no_default_features,
        features=list(features),
        package=package,
        format=format_value,
        verbosity=verbosity,
    )


def _make_provider(
    manifest_path: Optional[Path], metadata_path: Optional[Path]
) -> MetadataProvider:
    """Metadata provider for the given CLI options."""
    if metadata_path is not None:
        return JsonFileMetadataProvider(metadata_path)
    return CargoMetadataProvider(manifest_path=manifest_path)


def _make_builder(manifest_path: Optional[Path]) -> CargoBuildRunner:
    return CargoBuildRunner(manifest_path=manifest_path)


@main.command()
@common_options
def check(
    no_default_features: bool,
    features: tuple[str, ...],
    package: Optional[str],
    manifest_path: Optional[Path],
    metadata_path: Optional[Path],
    output_format: str,
    output_path: Optional[str],
    verbose_flag: bool,
    quiet_flag: bool,
    config_path: Optional[str],
) -> None:
    """Check a package's activated dependency graph for no_std compliance.

    Every activated package gets one line with a pass/fail marker. Failing
    packages are explained by the feature chain that enabled `std` or by the
    offending source lines.

    \b
    Examples:
        nono-analyzer check
        nono-analyzer check --no-default-features
        nono-analyzer check --features alloc,serde --format json
        nono-analyzer check --output report.md
        nono-analyzer check --quiet
    """
    options = _build_options(
        no_default_features, features, package, output_format, verbose_flag, quiet_flag
    )

    try:
        config = load_config(config_path)
        provider = _make_provider(manifest_path, metadata_path)
        show_progress = options.format == "terminal" and output_path is None
        report = run_check(
            provider,
            options,
            config,
            console=_error_console,
            show_progress=show_progress,
        )
        _display_check_report(report, options, config, output_path)

        if report.has_failures:
            sys.exit(EXIT_ISSUES)
        sys.exit(EXIT_SUCCESS)

    except PackageSelectionError as e:
        _display_selection_error(e, options.format)
        sys.exit(EXIT_INVALID_TARGET)
    except NonoAnalyzerError as e:
        _display_error(e, options.format)
        sys.exit(EXIT_ERROR)


@main.command()
@common_options
def verify(
    no_default_features: bool,
    features: tuple[str, ...],
    package: Optional[str],
    manifest_path: Optional[Path],
    metadata_path: Optional[Path],
    output_format: str,
    output_path: Optional[str],
    verbose_flag: bool,
    quiet_flag: bool,
    config_path: Optional[str],
) -> None:
    """Build the package and search its artifacts' debug info for `std`.

    Runs `cargo build` with the same feature selection and inspects the
    package's own artifact and the archives of its activated dependencies.
    Exits 0 only if the package's own artifact was inspected and does not
    reference `std`; an artifact that cannot be inspected exits 2.

    \b
    Examples:
        nono-analyzer verify --no-default-features
        nono-analyzer verify --format json
    """
    options = _build_options(
        no_default_features, features, package, output_format, verbose_flag, quiet_flag
    )

    try:
        config = load_config(config_path)
        provider = _make_provider(manifest_path, metadata_path)
        report = run_verify(provider, options, config, builder=_make_builder(manifest_path))
        _display_verify_report(report, options, config, output_path)

        if report.primary_contains_namespace:
            sys.exit(EXIT_ISSUES)
        if report.primary_inconclusive:
            sys.exit(EXIT_ERROR)
        sys.exit(EXIT_SUCCESS)

    except PackageSelectionError as e:
        _display_selection_error(e, options.format)
        sys.exit(EXIT_INVALID_TARGET)
    except NonoAnalyzerError as e:
        _display_error(e, options.format)
        sys.exit(EXIT_ERROR)


def _write_output_to_file(content: str, path: str) -> None:
    """Write report content to file.

    Args:
        content: The report content to write.
        path: The file path to write to.

    Raises:
        ConfigurationError: If file cannot be written.
    """
    file_path = Path(path)

    try:
        if file_path.exists():
            _error_console.print(
                f"[yellow]Warning: Overwriting existing file: {path}[/yellow]"
            )
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot write to file '{path}': {e}") from e

    _error_console.print(f"[green]Report written to {path}[/green]")


def _display_check_report(
    report: CheckReport,
    options: CheckOptions,
    config: AnalyzerConfig,
    output_path: Optional[str] = None,
) -> None:
    """Display a check report in the selected format.

    Terminal format written to a file becomes Markdown.
    """
    namespace = runtime_namespace(config)
    if options.format == "json":
        content = CheckJsonFormatter().format_check_report(report)
    elif options.format == "markdown" or output_path:
        content = CheckMarkdownFormatter(namespace).format_check_report(report)
    else:
        TerminalFormatter(
            console=_console, verbosity=options.verbosity, namespace=namespace
        ).format_check_report(report)
        return

    if output_path:
        _write_output_to_file(content, output_path)
    else:
        click.echo(content)


def _display_verify_report(
    report: VerifyReport,
    options: CheckOptions,
    config: AnalyzerConfig,
    output_path: Optional[str] = None,
) -> None:
    """Display a verify report in the selected format."""
    if options.format == "json":
        content = VerifyJsonFormatter().format_verify_report(report)
    elif options.format == "markdown" or output_path:
        content = VerifyMarkdownFormatter().format_verify_report(report)
    else:
        TerminalFormatter(
            console=_console,
            verbosity=options.verbosity,
            namespace=runtime_namespace(config),
        ).format_verify_report(report)
        return

    if output_path:
        _write_output_to_file(content, output_path)
    else:
        click.echo(content)


def _display_error(error: NonoAnalyzerError, format_type: str) -> None:
    """Display error message to user.

    All errors are written to stderr for consistent CI/CD behavior.

    Args:
        error: The exception that occurred.
        format_type: Output format type for styling.
    """
    error_type = type(error).__name__
    message = f"Error: {error_type}: {error}"

    if format_type == "terminal":
        _error_console.print(f"[red bold]{escape(message)}[/red bold]", highlight=False)
    else:
        click.echo(message, err=True)


def _display_selection_error(error: PackageSelectionError, format_type: str) -> None:
    """Display a target selection error with the valid package names."""
    _display_error(error, format_type)
    if error.candidates:
        click.echo(
            "Please provide one of the following via --package: "
            + ", ".join(error.candidates),
            err=True,
        )


if __name__ == "__main__":
    main()
