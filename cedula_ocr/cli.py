"""Command-line interface for cédula extraction.

Provides subcommands for extracting a single card, re-parsing saved OCR
text, and batch processing a folder of front/back image pairs into CSV.
"""

import argparse
import asyncio
import csv
import json
import mimetypes
import sys
import time
from pathlib import Path

from cedula_ocr.exceptions import IdExtractionError
from cedula_ocr.extraction.back_parser import BackSideParser
from cedula_ocr.extraction.front_parser import FrontSideParser
from cedula_ocr.models import ExtractedIdData, IdImage
from cedula_ocr.ocr.id_card_processor import IdCardProcessor
from cedula_ocr.utils.config import AppConfig, load_config
from cedula_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".tif", ".tiff", ".bmp")
_FIELD_COLUMNS = ["firstName", "lastName", "cedulaNo", "dateOfBirth", "address"]
_META_COLUMNS = ["card", "front", "back", "status", "processing_time_s", "error"]


def _load_image(path: Path) -> IdImage:
    mime_type, _ = mimetypes.guess_type(path.name)
    return IdImage(
        data=path.read_bytes(),
        mime_type=mime_type or "application/octet-stream",
        name=path.name,
    )


def find_card_pairs(input_dir: Path) -> list[tuple[Path, Path | None]]:
    """Pair front images with their back images in a directory.

    A front image has ``front`` in its file name; its back image has the
    same name with ``front`` replaced by ``back``.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted ``(front, back)`` pairs; ``back`` is ``None`` when missing.
    """
    pairs: list[tuple[Path, Path | None]] = []
    for path in sorted(input_dir.iterdir()):
        if path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
            continue
        if "front" not in path.name.lower():
            continue
        idx = path.name.lower().index("front")
        back_name = path.name[:idx] + "back" + path.name[idx + len("front") :]
        back = path.with_name(back_name)
        pairs.append((path, back if back.exists() else None))
    return pairs


async def _extract(
    processor: IdCardProcessor, front: Path, back: Path | None
) -> ExtractedIdData:
    back_image = _load_image(back) if back is not None else None
    return await processor.extract(_load_image(front), back_image)


def extract_single(
    front: Path, back: Path | None = None, config: AppConfig | None = None
) -> dict[str, str]:
    """Process one card and return its form fields.

    Args:
        front: Front-side image path.
        back: Optional back-side image path.
        config: Application configuration, loaded from disk when omitted.

    Returns:
        Extracted fields keyed by form field name.
    """
    processor = IdCardProcessor(config or load_config())
    record = asyncio.run(_extract(processor, front, back))
    return record.as_form_fields()


def parse_text(
    text: str, side: str, config: AppConfig | None = None
) -> dict[str, str]:
    """Parse previously captured OCR text without running OCR.

    Args:
        text: Raw OCR text.
        side: ``"front"`` or ``"back"``.
        config: Application configuration, loaded from disk when omitted.

    Returns:
        Extracted fields keyed by form field name.
    """
    config = config or load_config()
    if side == "back":
        record = BackSideParser(config.extraction).parse(text)
    else:
        record = FrontSideParser(config.extraction).parse(text)
    return record.as_form_fields()


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
    config: AppConfig | None = None,
) -> dict[str, int]:
    """Process every card in a folder and export results to CSV.

    Args:
        input_dir: Directory containing front/back image pairs.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-card progress.
        config: Application configuration, loaded from disk when omitted.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    processor = IdCardProcessor(config or load_config())

    pairs = find_card_pairs(input_dir)
    if not pairs:
        logger.warning("No card images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d cards to process", len(pairs))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, (front, back) in enumerate(pairs, 1):
        if verbose:
            print(f"Processing [{i}/{len(pairs)}]: {front.name}")

        row: dict[str, object] = {
            "card": front.stem,
            "front": front.name,
            "back": back.name if back is not None else None,
        }
        start_time = time.time()
        try:
            record = asyncio.run(_extract(processor, front, back))
        except Exception as exc:
            logger.error("Failed to process %s: %s", front.name, exc)
            row.update({"status": "failed", "error": str(exc)})
            failed += 1
        else:
            row.update(record.as_form_fields())
            row["status"] = "partial" if record.error else "success"
            successful += 1
        row["processing_time_s"] = round(time.time() - start_time, 2)
        results.append(row)

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(pairs), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write extraction results to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    columns = _META_COLUMNS[:3] + _FIELD_COLUMNS + _META_COLUMNS[3:]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout.

    Args:
        summary: Counts of total, successful, and failed cards.
        output_csv: Path to the output CSV.
    """
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def _emit(result: dict[str, str], output: Path | None) -> None:
    output_str = json.dumps(result, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Dominican ID card (cédula) OCR extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, help="YAML configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser("extract", help="Process a single card")
    extract_parser.add_argument("front", type=Path, help="Front-side image")
    extract_parser.add_argument("-b", "--back", type=Path, help="Back-side image")
    extract_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    parse_parser = subparsers.add_parser(
        "parse", help="Parse saved OCR text without running OCR"
    )
    parse_parser.add_argument("text_file", type=Path, help="File with raw OCR text")
    parse_parser.add_argument(
        "-s",
        "--side",
        choices=["front", "back"],
        default="front",
        help="Card side the text was read from (default: front)",
    )
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of cards")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Directory with *front*/*back* images"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, stream=sys.stderr)

    if args.command == "extract":
        for path in (args.front, args.back):
            if path is not None and not path.exists():
                print(f"Error: {path} does not exist", file=sys.stderr)
                sys.exit(1)
        try:
            result = extract_single(args.front, args.back, config)
        except IdExtractionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "parse":
        if not args.text_file.exists():
            print(f"Error: {args.text_file} does not exist", file=sys.stderr)
            sys.exit(1)
        text = args.text_file.read_text(encoding="utf-8")
        _emit(parse_text(text, args.side, config), args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose, config)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
