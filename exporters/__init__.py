"""Attachment export package for the OneNote to Markdown post-processing stage.

This package turns converter-emitted image tags into first-class page
attachments and materializes their files in the page's resource folder.

Package Structure:
- attachment_manager: Finds or creates page attachments and moves their files
- link_rewriter: Replaces <img> tags with markdown image references

Addressing Modes:
- absolute: references encode the attachment id (':/<id>')
- relative: references are paths from the markdown file to the resource folder
"""

from .attachment_manager import AttachmentResolver, FileRelocator
from .link_rewriter import LinkRewriter

__all__ = [
    'AttachmentResolver',
    'FileRelocator',
    'LinkRewriter'
]
