from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer

from .config import GridSpec, Settings
from .logging import get_logger
from .image.ppm import LoadError, WriteError, load_image
from .dedup.collection import Collection
from .dedup.hash import AverageHashStrategy, FingerprintError, format_digest
from .dedup.distance import hamming_distance

app = typer.Typer(help="photodedup – perceptual-fingerprint image deduplication", no_args_is_help=True)


def _settings(grid_width: Optional[int] = None, grid_height: Optional[int] = None) -> Settings:
    """Settings from PHOTODEDUP_* variables, with grid options taking precedence."""
    try:
        settings = Settings.from_env()
        grid = GridSpec(
            width=settings.grid.width if grid_width is None else grid_width,
            height=settings.grid.height if grid_height is None else grid_height,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return replace(settings, grid=grid)


@app.command()
def ingest(
    files: List[Path] = typer.Argument(..., help="PPM (P6) files to add, in order"),
    export_first: Optional[Path] = typer.Option(None, "--export-first", help="Write the first stored image to this path"),
    grid_width: Optional[int] = typer.Option(None, help="Fingerprint grid width [default: PHOTODEDUP_GRID_WIDTH or 8]"),
    grid_height: Optional[int] = typer.Option(None, help="Fingerprint grid height [default: PHOTODEDUP_GRID_HEIGHT or 8]"),
) -> None:
    """
    Add images to a collection, rejecting exact duplicates.

    Each file is reported as added or duplicate. Files that cannot be loaded
    or fingerprinted are reported and skipped.
    """
    logger = get_logger(__name__)
    collection = Collection.from_settings(_settings(grid_width, grid_height))
    failures = 0

    for path in files:
        try:
            added = collection.add(path)
        except (LoadError, FingerprintError) as exc:
            logger.error(f"Skipping {path}: {exc}")
            typer.echo(f"error      {path}")
            failures += 1
            continue
        typer.echo(f"{'added' if added else 'duplicate':<10} {path}")

    typer.echo(f"Collection size: {collection.size()}")

    if export_first is not None:
        if collection.size() == 0:
            logger.warning("Collection is empty, nothing to export")
        else:
            try:
                collection.get(0).save(export_first)
            except WriteError as exc:
                logger.error(str(exc))
                raise typer.Exit(1)
            typer.echo(f"Exported {collection.get(0).identifier} to {export_first}")

    if failures:
        raise typer.Exit(1)


@app.command()
def digest(
    files: List[Path] = typer.Argument(..., help="PPM (P6) files to fingerprint"),
    grid_width: Optional[int] = typer.Option(None, help="Fingerprint grid width [default: PHOTODEDUP_GRID_WIDTH or 8]"),
    grid_height: Optional[int] = typer.Option(None, help="Fingerprint grid height [default: PHOTODEDUP_GRID_HEIGHT or 8]"),
) -> None:
    """Print the average-hash digest of each file."""
    logger = get_logger(__name__)
    settings = _settings(grid_width, grid_height)
    strategy = AverageHashStrategy(grid=settings.grid)
    failures = 0

    for path in files:
        try:
            value = strategy.generate(load_image(path, dtype=settings.pixel_dtype))
        except (LoadError, FingerprintError) as exc:
            logger.error(f"Cannot fingerprint {path}: {exc}")
            failures += 1
            continue
        typer.echo(f"{format_digest(value, settings.grid)}  {path}")

    if failures:
        raise typer.Exit(1)


@app.command()
def compare(
    first: Path = typer.Argument(..., help="First PPM file"),
    second: Path = typer.Argument(..., help="Second PPM file"),
) -> None:
    """Compare two files by digest and by exact pixel content."""
    logger = get_logger(__name__)
    settings = _settings()
    strategy = AverageHashStrategy(grid=settings.grid)

    try:
        image_a = load_image(first, dtype=settings.pixel_dtype)
        image_b = load_image(second, dtype=settings.pixel_dtype)
        digest_a = strategy.generate(image_a)
        digest_b = strategy.generate(image_b)
    except (LoadError, FingerprintError) as exc:
        logger.error(str(exc))
        raise typer.Exit(1)

    typer.echo(f"{format_digest(digest_a, settings.grid)}  {first}")
    typer.echo(f"{format_digest(digest_b, settings.grid)}  {second}")
    typer.echo(f"Hamming distance: {hamming_distance(digest_a, digest_b, settings.grid)}")
    typer.echo(f"Identical pixels: {'yes' if image_a == image_b else 'no'}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
