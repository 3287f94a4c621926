#!/usr/bin/env python3
"""
OneNote Markdown Post-Processor - Main CLI Entry Point

Post-processes markdown produced by the document converter for exported
OneNote pages: image tags become page attachments moved into the resource
folder, and converter boilerplate (page header, quote block artifacts,
runs of blank lines) is stripped.
"""

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import List

from config_loader import ConfigLoader
from converters.document_converter import PandocConverter
from logger import ProgressTracker, log_config, log_section, setup_logging
from models import Page
from orchestrator import PostProcessor

__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Post-process converter-emitted markdown for OneNote page exports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Post-process markdown files, attachments referenced by relative path
  python postprocess.py _tmp/Page.md --output-dir ./export

  # Joplin-style attachment references (:/<id>)
  python postprocess.py _tmp/Page.md --output-dir ./export --absolute-refs

  # Convert docx exports with pandoc first
  python postprocess.py Page.docx --docx --output-dir ./export

  # Keep temp files and log tracebacks
  python postprocess.py _tmp/Page.md --output-dir ./export --debug -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'inputs',
        nargs='+',
        help='Markdown files (or docx files with --docx) to post-process'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        required=True,
        help='Directory the post-processed markdown files are written to'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file (default: built-in defaults)'
    )

    parser.add_argument(
        '--title',
        type=str,
        help='Page title (default: input file name); only valid with a single input'
    )

    parser.add_argument(
        '--media-root',
        type=str,
        help='Directory image src paths are relative to (default: current directory)'
    )

    parser.add_argument(
        '--resource-folder-name',
        type=str,
        help='Name of the attachment folder inside the output directory'
    )

    parser.add_argument(
        '--docx',
        action='store_true',
        help='Inputs are docx exports to convert with pandoc first'
    )

    parser.add_argument(
        '--pandoc-path',
        type=str,
        help='Path to the pandoc executable'
    )

    parser.add_argument(
        '--absolute-refs',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Reference attachments by id (:/<id>) instead of relative path'
    )

    parser.add_argument(
        '--md-img-ref',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Extract images and rewrite their references'
    )

    parser.add_argument(
        '--remove-quotation-blocks',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Strip blockquote wrapper artifacts'
    )

    parser.add_argument(
        '--remove-consecutive-linebreaks',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Strip blockquote marker runs and collapse runs of blank lines'
    )

    parser.add_argument(
        '--remove-header',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Strip the page title/date/time header block'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Keep temporary files and log full tracebacks'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Optional log file path'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def process_inputs(config: dict, args: argparse.Namespace, logger: logging.Logger) -> int:
    """Post-process every input file and write the results to the output directory."""
    output_dir = Path(args.output_dir)
    resource_folder = output_dir / config['export']['resource_folder_name']
    output_dir.mkdir(parents=True, exist_ok=True)

    processor = PostProcessor(config, logger=logger, source_root=args.media_root)
    converter = PandocConverter(config, logger=logger) if args.docx else None

    failed = 0
    with ProgressTracker(total_items=len(args.inputs), item_type='pages') as tracker:
        for input_path in args.inputs:
            title = args.title or Path(input_path).stem
            page = Page(id=uuid.uuid4().hex, title=title)
            md_file_path = output_dir / f"{page.title_with_no_invalid_chars}.md"

            try:
                if converter is not None:
                    markdown = processor.convert_and_post_process(
                        converter, input_path, page, str(resource_folder), str(md_file_path)
                    )
                else:
                    markdown = processor.post_process(
                        page,
                        Path(input_path).read_text(encoding='utf-8'),
                        str(resource_folder),
                        str(md_file_path)
                    )

                md_file_path.write_text(markdown, encoding='utf-8')
                logger.info(f"Wrote '{md_file_path}' ({len(page.attachments)} attachment(s))")
                tracker.increment(success=True)

            except Exception as e:
                # Remaining inputs are still processed
                logger.error(
                    f"Page '{page.get_page_file_relative_path()}' ({input_path}) failed: {e}",
                    exc_info=config.get('debug', False)
                )
                tracker.increment(success=False)
                failed += 1

    stats = processor.get_stats()
    logger.info(
        f"Pages: {stats['pages_processed']}, images: {stats['images_extracted']}, "
        f"image pass failures: {stats['image_pass_failures']}, "
        f"relocation failures: {stats['relocation_failures']}"
    )

    return 1 if failed else 0


def main(argv: List[str] = None) -> int:
    """Main entry point for CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.title and len(args.inputs) > 1:
        parser.error("--title can only be used with a single input file")

    try:
        logger = setup_logging(verbosity=args.verbose, log_file=args.log_file)

        log_section("OneNote Markdown Post-Processor")
        logger.info(f"Version: {__version__}")

        if args.config:
            logger.info(f"Loading configuration from {args.config}")
            config = ConfigLoader.load(args.config)
        else:
            config = ConfigLoader.defaults()

        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        # Configuration file may pin a level or log file
        level = config['logging'].get('level')
        log_file = config['logging'].get('file')
        if level or (log_file and log_file != args.log_file):
            logger = setup_logging(verbosity=args.verbose, log_file=log_file, level=level)

        log_config(config)

        return process_inputs(config, args, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nPost-processing interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
