"""Document converter interface and pandoc-backed implementation."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from config_loader import get_nested
from models import ConversionOutput, DocumentConversionError, Page


class DocumentConverter(ABC):
    """Abstract boundary around the external document-to-markdown converter."""

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        """
        Initialize converter with configuration and logger.

        Args:
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.config = config
        self.logger = logger or logging.getLogger('onenote_md_exporter.converters.document_converter')
        self.debug = bool(get_nested(config, 'debug', False))

    @abstractmethod
    def convert(self, input_path: str, page: Page) -> ConversionOutput:
        """
        Convert an exported document into raw markdown plus extracted media.

        Args:
            input_path: Path to the exported document (e.g. docx)
            page: Page the document was exported from

        Returns:
            ConversionOutput with markdown text and media manifest
        """
        pass


class PandocConverter(DocumentConverter):
    """Converts docx exports to GitHub-flavored markdown with pandoc."""

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        super().__init__(config, logger)
        self.pandoc_path = get_nested(config, 'converter.pandoc_path', 'pandoc')
        self.tmp_folder = Path(get_nested(config, 'converter.tmp_folder', '_tmp'))
        self.extra_args = list(get_nested(config, 'converter.extra_args', []) or [])

    def build_command(self, input_path: Path, md_path: Path) -> List[str]:
        """Build the pandoc command line."""
        return [
            self.pandoc_path,
            str(input_path.resolve()),
            '--to', 'gfm',
            '-o', str(md_path.resolve()),
            # Without --wrap=none pandoc inserts random quote blocks
            '--wrap=none',
            f'--extract-media={self.tmp_folder}',
            *self.extra_args
        ]

    def convert(self, input_path: str, page: Page) -> ConversionOutput:
        input_file = Path(input_path)
        if not input_file.exists():
            raise DocumentConversionError(f"Input document not found: {input_file}")

        self.tmp_folder.mkdir(parents=True, exist_ok=True)
        md_path = self.tmp_folder / f"{page.title_with_no_invalid_chars}.md"

        cmd = self.build_command(input_file, md_path)
        self.logger.debug(f"Running converter: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise DocumentConversionError(
                f"Converter executable '{self.pandoc_path}' not found"
            ) from e

        if result.returncode != 0:
            raise DocumentConversionError(
                f"Converter exited with code {result.returncode} for page "
                f"'{page.get_page_file_relative_path()}': {result.stderr.strip()}"
            )

        if not md_path.exists():
            raise DocumentConversionError(f"Converter produced no output file: {md_path}")

        markdown = md_path.read_text(encoding='utf-8')
        media_files = self._list_media_files()

        if not self.debug:
            input_file.unlink()
            md_path.unlink()

        self.logger.debug(
            f"Converted '{page.get_page_file_relative_path()}' "
            f"({len(markdown)} chars, {len(media_files)} media file(s))"
        )

        return ConversionOutput(
            markdown=markdown,
            markdown_path=str(md_path),
            media_files=media_files
        )

    def _list_media_files(self) -> List[str]:
        """List media extracted by pandoc, as paths relative to the working directory."""
        media_dir = self.tmp_folder / 'media'
        if not media_dir.is_dir():
            return []

        return sorted(str(p) for p in media_dir.rglob('*') if p.is_file())


__all__ = ['DocumentConverter', 'PandocConverter']
