"""Command line interface: ``mdcombine combine`` and ``mdcombine validate``."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from mdcombine import __version__
from mdcombine.compiler import CombinationEngine, DirectiveValidator
from mdcombine.models import Document, MdCombineError, ValidationIssue
from mdcombine.models.document import normalize_key
from mdcombine.parser import DocumentCollector
from mdcombine.service import DocumentWriter
from mdcombine.settings import Settings

logger = logging.getLogger("mdcombine.cli")

app = typer.Typer(help="Combine markdown templates with shared fragments.", no_args_is_help=True)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings()


def _split(documents: list[Document]) -> tuple[list[Document], list[Document], list[Document]]:
    """(templates, sources, plain markdown) by extension."""
    templates = [d for d in documents if d.is_template]
    sources = [d for d in documents if d.is_source or d.is_markdown]
    markdown = [d for d in documents if d.is_markdown]
    return templates, sources, markdown


def _collect(settings: Settings, input_folder: Path) -> list[Document]:
    collector = DocumentCollector(max_workers=settings.max_workers, encoding=settings.encoding)
    return collector.collect_all(input_folder)


def _validator(settings: Settings) -> DirectiveValidator:
    return DirectiveValidator(
        settings.max_resolution_passes, max_length=settings.max_content_length
    )


def _print_issues(title: str, issues: tuple[ValidationIssue, ...], color: str) -> None:
    if not issues:
        return
    typer.secho(title, fg=typer.colors.YELLOW)
    for issue in issues:
        location = ""
        if issue.source_file:
            location = f" ({issue.source_file}"
            location += f":{issue.line_number})" if issue.line_number else ")"
        typer.secho(f"  - {issue.message}{location}", fg=color)


@app.callback()
def configure(
    ctx: typer.Context,
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Logging level (overrides MDCOMBINE_LOG_LEVEL)"
    ),
) -> None:
    """Configure logging for all subcommands."""
    settings = Settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug("mdcombine v%s", __version__)
    ctx.obj = settings


@app.command()
def combine(
    ctx: typer.Context,
    input_folder: Path = typer.Argument(..., help="Input folder containing markdown templates"),
    output_folder: Path = typer.Argument(..., help="Output folder for combined markdown files"),
) -> None:
    """Resolve every template in INPUT_FOLDER and write the results to OUTPUT_FOLDER."""
    settings = _settings(ctx)
    if not input_folder.is_dir():
        typer.secho(f"Error: Input folder '{input_folder}' does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        typer.secho(f"Collecting markdown files from: {input_folder}", fg=typer.colors.GREEN)
        templates, sources, markdown = _split(_collect(settings, input_folder))
        if not templates:
            typer.secho("Warning: No markdown template files found", fg=typer.colors.YELLOW)
            raise typer.Exit(code=1)
        typer.echo(f"Found {len(templates)} template files and {len(sources)} source files")

        result = _validator(settings).validate(templates, sources)
        if not result.is_valid:
            _print_issues("Validation errors found:", result.errors, typer.colors.RED)
            raise typer.Exit(code=1)
        _print_issues("Warnings:", result.warnings, typer.colors.YELLOW)

        outputs = CombinationEngine(
            settings.max_resolution_passes, max_length=settings.max_content_length
        ).build(templates, sources)
        produced = {normalize_key(doc.path) for doc in outputs}
        for doc in markdown:
            if normalize_key(doc.path) in produced:
                logger.warning("Template output replaces existing markdown file: %s", doc.path)
            else:
                outputs.append(doc)

        DocumentWriter(settings.encoding).write_all(outputs, output_folder)
    except MdCombineError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    typer.secho("Markdown combination completed!", fg=typer.colors.GREEN)
    typer.echo(f"Output location: {output_folder.resolve()}")


@app.command()
def validate(
    ctx: typer.Context,
    input_folder: Path = typer.Argument(..., help="Input folder containing markdown templates to validate"),
) -> None:
    """Check every template in INPUT_FOLDER without writing anything."""
    settings = _settings(ctx)
    if not input_folder.is_dir():
        typer.secho(f"Error: Input folder '{input_folder}' does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        typer.secho(f"Validating markdown files in: {input_folder}", fg=typer.colors.GREEN)
        templates, sources, _ = _split(_collect(settings, input_folder))
    except MdCombineError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if not templates:
        typer.secho("Warning: No markdown template files found", fg=typer.colors.YELLOW)
        return
    typer.echo(f"Found {len(templates)} template files and {len(sources)} source files")

    result = _validator(settings).validate(templates, sources)
    total = len(templates)
    typer.echo(f"Total files:   {total}")
    typer.echo(f"Valid files:   {result.valid_files_count}")
    typer.echo(f"Invalid files: {total - result.valid_files_count}")

    _print_issues("Warnings:", result.warnings, typer.colors.YELLOW)
    if not result.is_valid:
        typer.secho("Validation completed with errors", fg=typer.colors.RED)
        _print_issues("Issues found:", result.errors, typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho(f"All {total} files validated successfully!", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
