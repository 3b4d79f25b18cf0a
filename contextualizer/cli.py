"""Command-line interface for the story contextualizer."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .assembler import display_text
from .config import Config
from .data import DocumentStore, ReferenceData
from .errors import ContextualizationError
from .pipeline import TranslationPipeline
from .resolvers import MarkerResolver
from .validation import ERROR, validate_all


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Translate story markers into a destination country's context",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render one story for France, printing the display text
  contextualizer translate mahsa-amini --country FR --language fr --text

  # Render every story for every country using a config file
  contextualizer generate --config config.yaml --workers 4

  # Check reference data and stories
  contextualizer validate --strict
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    translate_parser = subparsers.add_parser("translate", help="Translate a single story")
    setup_translate_parser(translate_parser)

    generate_parser = subparsers.add_parser(
        "generate", help="Translate every story for every country and language"
    )
    setup_generate_parser(generate_parser)

    validate_parser = subparsers.add_parser("validate", help="Validate reference data and stories")
    setup_validate_parser(validate_parser)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("a command is required (translate, generate or validate)")
    return args


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by every command."""
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--contexts",
        type=Path,
        help="Directory with countries/names/places/comparable-events YAML files",
    )
    parser.add_argument(
        "--stories",
        type=Path,
        help="Directory with story YAML files",
    )
    parser.add_argument(
        "--default-country",
        type=str,
        help="Country used when a requested country has no data (default: US)",
    )
    parser.add_argument(
        "--scope",
        choices=["document", "global"],
        help="Selection seed scope (default: document)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )


def setup_translate_parser(parser: argparse.ArgumentParser) -> None:
    """Setup arguments for translate command."""
    add_common_arguments(parser)
    parser.add_argument(
        "story",
        type=str,
        help="Story id or slug",
    )
    parser.add_argument(
        "--country",
        type=str,
        required=True,
        help="Destination country code",
    )
    parser.add_argument(
        "--language",
        type=str,
        default="en",
        help="Language used for number and date formatting (default: en)",
    )
    parser.add_argument(
        "--no-contextualize",
        action="store_true",
        help="Render original values instead of substituting",
    )
    parser.add_argument(
        "--inline-comparisons",
        action="store_true",
        help="Emit comparison segments after compared numbers",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write JSON to this file instead of stdout",
    )
    parser.add_argument(
        "--text",
        action="store_true",
        help="Print plain display text instead of JSON",
    )


def setup_generate_parser(parser: argparse.ArgumentParser) -> None:
    """Setup arguments for generate command."""
    add_common_arguments(parser)
    parser.add_argument(
        "--output",
        type=Path,
        help="Output directory (default: output)",
    )
    parser.add_argument(
        "--countries",
        nargs="+",
        help="Country codes to render (default: every country)",
    )
    parser.add_argument(
        "--languages",
        nargs="+",
        help="Languages to render (default: each country's languages)",
    )
    parser.add_argument(
        "--only",
        nargs="+",
        metavar="STORY",
        help="Story ids or slugs to render (default: every story)",
    )
    parser.add_argument(
        "--no-contextualize",
        action="store_true",
        help="Render original values instead of substituting",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Skip writing report.csv",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of parallel workers (default: 1)",
    )


def setup_validate_parser(parser: argparse.ArgumentParser) -> None:
    """Setup arguments for validate command."""
    add_common_arguments(parser)
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as errors",
    )
    parser.add_argument(
        "--no-resolve",
        action="store_true",
        help="Skip resolving every marker for every country",
    )


def build_config(args: argparse.Namespace) -> Config:
    """Build configuration from arguments."""
    if hasattr(args, "config") and args.config:
        config = Config.from_yaml(args.config)
    else:
        config = Config()

    # Data config overrides
    if hasattr(args, "contexts") and args.contexts:
        config.data.contexts_dir = args.contexts
    if hasattr(args, "stories") and args.stories:
        config.data.stories_dir = args.stories
    if hasattr(args, "default_country") and args.default_country:
        config.data.default_country = args.default_country
    if hasattr(args, "scope") and args.scope:
        config.selection.scope = args.scope

    # Output config overrides
    if hasattr(args, "output") and args.output and args.command == "generate":
        config.output.output_dir = args.output
    if hasattr(args, "countries") and args.countries:
        config.output.countries = args.countries
    if hasattr(args, "languages") and args.languages:
        config.output.languages = args.languages
    if hasattr(args, "only") and args.only:
        config.output.stories = args.only
    if hasattr(args, "no_contextualize") and args.no_contextualize:
        config.output.contextualize = False
    if hasattr(args, "no_report") and args.no_report:
        config.output.save_report = False
    if hasattr(args, "workers") and args.workers is not None:
        if args.workers < 1:
            raise ValueError("--workers must be at least 1")
        config.workers = args.workers

    return config


def handle_translate(args: argparse.Namespace) -> int:
    """Handle translate command."""
    try:
        config = build_config(args)
        pipeline = TranslationPipeline(config)
        result = pipeline.translate(
            args.story,
            args.country,
            language=args.language,
            contextualize=not args.no_contextualize,
            inline_comparisons=True if args.inline_comparisons else None,
        )
    except FileNotFoundError as e:
        print(f"Error: File not found - {e}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    except (ContextualizationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.text:
        for section in (result.title, result.summary):
            print(display_text(section))
            print()
        paragraphs = [[]]
        for segment in result.content:
            if segment.kind == "paragraph-break":
                paragraphs.append([])
            else:
                paragraphs[-1].append(segment)
        print("\n\n".join(display_text(p) for p in paragraphs))
        return 0

    output = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output, encoding="utf-8")
        print(f"Written to {args.output}")
    else:
        print(output)
    return 0


def handle_generate(args: argparse.Namespace) -> int:
    """Handle generate command."""
    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        pipeline = TranslationPipeline(config)
        total = len(pipeline.jobs())
        succeeded = pipeline.run()
    except FileNotFoundError as e:
        print(f"Error: File not found - {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.exception("Generation failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"\nRendered {succeeded}/{total} story translations to {config.output.output_dir}")
    return 0 if succeeded == total else 1


def handle_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    try:
        config = build_config(args)
        reference = ReferenceData.from_directory(config.data.contexts_dir, config.data.default_country)
        documents = DocumentStore.from_directory(config.data.stories_dir)
    except FileNotFoundError as e:
        print(f"Error: File not found - {e}", file=sys.stderr)
        return 1
    except (ContextualizationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    resolver = None if args.no_resolve else MarkerResolver(config, reference)
    issues = validate_all(reference, documents, resolver)

    for issue in issues:
        print(issue)

    errors = [issue for issue in issues if issue.severity == ERROR]
    warnings = len(issues) - len(errors)
    print(f"\n{len(errors)} errors, {warnings} warnings")

    if errors or (args.strict and warnings):
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose if hasattr(args, "verbose") else False)

    if args.command == "translate":
        return handle_translate(args)
    if args.command == "generate":
        return handle_generate(args)
    return handle_validate(args)


if __name__ == "__main__":
    sys.exit(main())
