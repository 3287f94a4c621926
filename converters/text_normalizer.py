"""Regex-based normalization passes for converter-emitted markdown."""

import logging
import re
from typing import Optional

logger = logging.getLogger('onenote_md_exporter.converters.text_normalizer')


class TextNormalizer:
    """
    Stateless text substitutions applied to whole markdown documents.

    Every pass is a no-op on text that does not contain its trigger
    pattern, so passes can be toggled and combined freely.
    """

    # Title, blank line, subtitle (date), blank line, HH:MM time-stamp
    HEADER_PATTERN = re.compile(r'^.+\n\n.+\n\n\d{2}:\d{2}\s+')

    # 3 to 10 lines holding only tabs or spaces
    BLANK_RUN_PATTERN = re.compile(r'(\n[\t ]+){3,10}')

    BLOCKQUOTE_MARKER_PATTERN = re.compile(r'\n>[ \n]*')

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize text normalizer with optional logger."""
        self.logger = logger or logging.getLogger('onenote_md_exporter.converters.text_normalizer')

    @staticmethod
    def normalize_line_endings(text: str) -> str:
        """Drop carriage returns so every pass sees plain \\n line endings."""
        return text.replace('\r', '')

    def strip_header(self, text: str) -> str:
        """
        Remove the title/date/time block the converter puts at the top of each page.

        The header is followed by a blank-run collapse, since removing it
        often leaves whitespace-only lines behind.

        Args:
            text: Markdown content

        Returns:
            Markdown without the leading header block
        """
        text = self.normalize_line_endings(text)
        text, count = self.HEADER_PATTERN.subn('', text, count=1)
        if count:
            self.logger.debug("Removed page header block")

        return self.collapse_blank_runs(text)

    def collapse_blank_runs(self, text: str) -> str:
        """Collapse runs of 3-10 whitespace-only lines to a single blank line."""
        return self.BLANK_RUN_PATTERN.sub('\n\n', text)

    def strip_blockquote_markers(self, text: str) -> str:
        """Remove '>' markers the converter wraps around indented paragraphs."""
        text, count = self.BLOCKQUOTE_MARKER_PATTERN.subn('', text)
        if count:
            self.logger.debug(f"Removed {count} blockquote marker run(s)")
        return text

    def remove_quotation_blocks(self, text: str) -> str:
        """Strip blockquote wrapper artifacts."""
        return self.strip_blockquote_markers(text)

    def remove_consecutive_linebreaks(self, text: str) -> str:
        """Strip blockquote marker runs and collapse runs of blank lines."""
        text = self.strip_blockquote_markers(text)
        return self.collapse_blank_runs(text)

    def normalize(
        self,
        text: str,
        remove_quotation_blocks: bool = False,
        remove_consecutive_linebreaks: bool = False,
        remove_header: bool = False
    ) -> str:
        """
        Apply the enabled passes in pipeline order.

        Args:
            text: Markdown content
            remove_quotation_blocks: Strip blockquote wrapper artifacts
            remove_consecutive_linebreaks: Strip marker runs and collapse blank runs
            remove_header: Strip the leading page header block

        Returns:
            Normalized markdown
        """
        text = self.normalize_line_endings(text)

        if remove_quotation_blocks:
            text = self.remove_quotation_blocks(text)

        if remove_consecutive_linebreaks:
            text = self.remove_consecutive_linebreaks(text)

        if remove_header:
            text = self.strip_header(text)

        return text


__all__ = ['TextNormalizer']
