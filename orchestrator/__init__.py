"""
Orchestration package for the markdown post-processing stage.

This package sequences the post-conversion passes applied to each exported
page: image extraction and reference rewriting, quotation block removal,
consecutive linebreak removal and header stripping.
"""

from .post_processor import PostProcessor

__all__ = [
    'PostProcessor'
]
