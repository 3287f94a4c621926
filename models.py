"""Data models for the OneNote to Markdown post-processing pipeline."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger('onenote_md_exporter')

INVALID_TITLE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class AttachmentType(Enum):
    """Kinds of embedded resources a page can own."""
    IMAGE = "image"
    FILE = "file"


class MalformedImageReferenceError(ValueError):
    """Raised when a converter-emitted <img> tag carries no parsable src attribute."""

    def __init__(self, tag: str):
        super().__init__(f"Unable to parse src attribute of image tag: {tag}")
        self.tag = tag


class DocumentConversionError(RuntimeError):
    """Raised when the external document converter fails."""


@dataclass(frozen=True)
class Attachment:
    """Represents one embedded resource registered on a page."""

    id: str
    type: AttachmentType
    source_path: str  # path as emitted by the converter
    file_name: str
    export_file_path: str
    page_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize attachment to dictionary."""
        return {
            'id': self.id,
            'type': self.type.value,
            'source_path': self.source_path,
            'file_name': self.file_name,
            'export_file_path': self.export_file_path,
            'page_id': self.page_id
        }


@dataclass
class Page:
    """Represents a notebook page being exported, owning its attachments."""

    id: str
    title: str
    level: int = 0
    parent_path: List[str] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)

    @property
    def title_with_no_invalid_chars(self) -> str:
        """Page title safe for use as a file name and inside markdown."""
        sanitized = INVALID_TITLE_CHARS.sub('_', self.title).strip().rstrip('.')
        return sanitized or 'Untitled'

    def get_page_file_relative_path(self, extension: str = '.md') -> str:
        """Relative path of the exported page file, used in log messages."""
        parts = [INVALID_TITLE_CHARS.sub('_', p).strip() for p in self.parent_path]
        parts.append(self.title_with_no_invalid_chars + extension)
        return '/'.join(parts)

    def find_attachment_by_source(self, source_path: str) -> Optional[Attachment]:
        """Find an attachment by its converter-emitted source path."""
        for attachment in self.attachments:
            if attachment.source_path == source_path:
                return attachment
        return None

    def add_attachment(self, attachment: Attachment) -> None:
        """Add an attachment."""
        self.attachments.append(attachment)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize page to dictionary."""
        return {
            'id': self.id,
            'title': self.title,
            'level': self.level,
            'parent_path': list(self.parent_path),
            'attachments': [att.to_dict() for att in self.attachments]
        }

    def __eq__(self, other: Any) -> bool:
        """Compare pages by ID."""
        if not isinstance(other, Page):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash page by ID."""
        return hash(self.id)


@dataclass
class ImageExtractionResult:
    """Outcome of the image extraction and reference rewriting pass."""

    success: bool
    markdown: str
    new_attachments: List[Attachment] = field(default_factory=list)
    error: Optional[str] = None
    relocation_failures: List[str] = field(default_factory=list)

    @classmethod
    def failed(cls, markdown: str, error: str) -> 'ImageExtractionResult':
        """Build a failed result that leaves the markdown untouched."""
        return cls(success=False, markdown=markdown, error=error)


@dataclass
class ConversionOutput:
    """Raw markdown and extracted media produced by the document converter."""

    markdown: str
    markdown_path: Optional[str] = None
    media_files: List[str] = field(default_factory=list)


__all__ = [
    'Attachment',
    'AttachmentType',
    'ConversionOutput',
    'DocumentConversionError',
    'ImageExtractionResult',
    'MalformedImageReferenceError',
    'Page'
]
