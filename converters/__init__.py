"""Converters package for turning exported pages into clean markdown."""

import logging

from config_loader import get_nested
from .document_converter import DocumentConverter, PandocConverter
from .text_normalizer import TextNormalizer

logger = logging.getLogger('onenote_md_exporter.converters')


def normalize_markdown(text, config=None, logger=None):
    """
    Convenience function applying the configured normalization passes.

    Image extraction is not part of this function; see
    orchestrator.PostProcessor for the full pipeline.

    Args:
        text: Markdown content
        config: Optional configuration dictionary
        logger: Optional logger instance (uses module logger if not provided)

    Returns:
        Normalized markdown

    Example:
        >>> from converters import normalize_markdown
        >>> normalize_markdown('Title\\n\\nMonday\\n\\n14:32 Body')
        'Body'
    """
    config = config or {}
    if logger is None:
        logger = logging.getLogger('onenote_md_exporter.converters')

    normalizer = TextNormalizer(logger=logger)
    return normalizer.normalize(
        text,
        remove_quotation_blocks=get_nested(config, 'post_processing.remove_quotation_blocks', True),
        remove_consecutive_linebreaks=get_nested(config, 'post_processing.remove_consecutive_linebreaks', True),
        remove_header=get_nested(config, 'post_processing.remove_onenote_header', True)
    )


__all__ = [
    'normalize_markdown',
    'DocumentConverter',
    'PandocConverter',
    'TextNormalizer'
]
