from pathlib import Path
from typing import Optional
import sys
import os

import typer

# Ensure UTF-8 console output on Windows
if sys.platform == "win32":
    os.environ["PYTHONIOENCODING"] = "utf-8"

from .config import Settings
from .logging import get_logger
from .errors import LookalikeError
from .fingerprint.cache import FingerprintCache
from .grouping.engine import GroupingEngine
from .output.report import write_report
from .raster.pillow import discover_images, file_provider
from .similarity.score import WEIGHTS, compare

app = typer.Typer(help="lookalike – find visually similar images", no_args_is_help=True)


def safe_echo(message: str) -> None:
    """Echo message with an ASCII fallback for consoles without Unicode support."""
    try:
        typer.echo(message)
    except UnicodeEncodeError:
        fallback_message = (
            message.replace("✅", "[OK]")
            .replace("📁", "[DIR]")
            .replace("🖼️", "[IMG]")
            .replace("🔄", "[GRP]")
            .replace("📋", "[DUP]")
            .replace("⚠️", "[WARN]")
            .replace("⏱️", "[TIME]")
            .replace("📊", "[STATS]")
        )
        typer.echo(fallback_message.encode("ascii", "replace").decode("ascii"))


@app.command()
def scan(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, readable=True, help="Directory containing images"),
    threshold: float = typer.Option(0.85, min=0.01, max=1.0, help="Minimum overall similarity for two images to be linked"),
    recursive: bool = typer.Option(False, "--recursive/--no-recursive", help="Scan subdirectories as well"),
    workers: int = typer.Option(1, min=1, help="Threads used for fingerprint extraction"),
    batch_size: int = typer.Option(256, min=1, help="Pairs compared between progress updates"),
    buckets: int = typer.Option(256, min=1, max=256, help="Color histogram buckets per channel"),
    report: Optional[Path] = typer.Option(None, "--report", "-r", help="Write a JSON report to this path"),
) -> None:
    """
    Fingerprint every image in DIRECTORY and list groups of similar images.
    """
    logger = get_logger(__name__)

    images = discover_images(directory, recursive=recursive)
    if not images:
        logger.warning(f"No images found in {directory}")
        raise typer.Exit(code=1)

    settings = Settings(
        threshold=threshold,
        workers=workers,
        compare_batch_size=batch_size,
        histogram_buckets=buckets,
    )
    engine = GroupingEngine(images, cache=FingerprintCache(settings), settings=settings)

    events = engine.iter_progress()
    pending = None
    with typer.progressbar(length=len(images), label="Fingerprinting") as bar:
        for event in events:
            if event.phase != "extract":
                pending = event
                break
            bar.update(1)

    # Comparisons resume from the same generator under a second bar
    if pending is not None:
        with typer.progressbar(length=pending.total, label="Comparing") as bar:
            bar.update(pending.completed)
            last = pending.completed
            for event in events:
                bar.update(event.completed - last)
                last = event.completed

    result = engine.result
    assert result is not None
    summary = result.summary()

    safe_echo("\n✅ Scan complete!")
    safe_echo(f"📁 Directory: {directory}")
    safe_echo(f"🖼️  Images fingerprinted: {summary['fingerprinted']}/{summary['total_images']}")
    safe_echo(f"🔄 Similar groups: {summary['similar_groups']}")
    safe_echo(f"📋 Potential duplicates: {summary['potential_duplicates']}")
    safe_echo(f"⏱️  Processing time: {summary['processing_time']:.1f}s")

    for group in result.groups:
        safe_echo(f"\n{group.group_id} ({group.average_similarity:.1%} similar)")
        for image_id in group.image_ids:
            marker = "*" if image_id == group.canonical_id else " "
            safe_echo(f"  {marker} {image_id}")

    if result.partial_failures:
        safe_echo(f"\n⚠️  Skipped {len(result.partial_failures)} images:")
        for image_id, reason in result.partial_failures:
            safe_echo(f"   {image_id}: {reason}")

    if report is not None:
        write_report(result, report, source=str(directory))
        safe_echo(f"📊 Report: {report}")


@app.command(name="compare")
def compare_images(
    first: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="First image"),
    second: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Second image"),
) -> None:
    """
    Show the similarity breakdown between two images.
    """
    logger = get_logger(__name__)
    cache = FingerprintCache()

    try:
        left = cache.get_or_compute(str(first), file_provider(first))
        right = cache.get_or_compute(str(second), file_provider(second))
    except LookalikeError as exc:
        logger.error(f"Failed to fingerprint images: {exc}")
        raise typer.Exit(code=1) from exc

    result = compare(left, right)
    safe_echo(f"Overall similarity: {result.overall:.1%}")
    for key in WEIGHTS:
        safe_echo(f"   {key}: {result.details[key]:.1%} (weight {WEIGHTS[key]:.2f})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
