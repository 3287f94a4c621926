"""Attachment registration and relocation for converter-extracted media."""

import logging
import os
import shutil
import sys
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from models import Attachment, AttachmentType, Page


class AttachmentResolver:
    """
    Finds or creates the attachment for a converter-emitted source path.

    Attachments are keyed by source path, so the same embedded reference
    appearing twice on a page resolves to the same Attachment. New
    attachments are staged and only added to the page by commit(), which
    keeps the page untouched when the scan fails part-way.
    """

    def __init__(
        self,
        page: Page,
        resource_folder_path: str,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the resolver for a single page scan.

        Args:
            page: Page that owns the attachments
            resource_folder_path: Destination directory for the page's attachments
            logger: Logger instance
        """
        self.page = page
        self.resource_folder_path = resource_folder_path
        self.logger = logger or logging.getLogger('onenote_md_exporter.exporters.attachment_manager')

        self._pending: Dict[str, Attachment] = {}

    @property
    def new_attachments(self) -> List[Attachment]:
        """Attachments created during this scan, in first-encounter order."""
        return list(self._pending.values())

    def resolve(self, source_path: str) -> Attachment:
        """
        Return the attachment for a source path, creating it on first encounter.

        Args:
            source_path: Image path as emitted by the converter

        Returns:
            Existing or newly staged Attachment
        """
        attachment = self.page.find_attachment_by_source(source_path)
        if attachment is None:
            attachment = self._pending.get(source_path)

        if attachment is not None:
            return attachment

        attach_id = uuid.uuid4().hex
        file_name = attach_id + os.path.splitext(source_path)[1]

        attachment = Attachment(
            id=attach_id,
            type=AttachmentType.IMAGE,
            source_path=source_path,
            file_name=file_name,
            export_file_path=os.path.join(self.resource_folder_path, file_name),
            page_id=self.page.id
        )
        self._pending[source_path] = attachment

        self.logger.debug(f"Registered attachment '{file_name}' for '{source_path}'")
        return attachment

    def commit(self) -> List[Attachment]:
        """Add staged attachments to the page and return them."""
        committed = self.new_attachments
        for attachment in committed:
            self.page.add_attachment(attachment)
        self._pending.clear()
        return committed


class FileRelocator:
    """
    Moves converter-extracted files to their attachment destinations.

    Failures (missing source, existing destination, OS errors) are logged
    per attachment and reported back; they never abort the page.
    """

    def __init__(
        self,
        source_root: Optional[str] = None,
        show_progress: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the relocator.

        Args:
            source_root: Directory relative source paths are resolved against (default: cwd)
            show_progress: Show a progress bar when attached to a terminal
            logger: Logger instance
        """
        self.source_root = Path(source_root) if source_root else None
        self.show_progress = show_progress
        self.logger = logger or logging.getLogger('onenote_md_exporter.exporters.attachment_manager')

        self.stats = {
            'relocated': 0,
            'failed': 0
        }

    def relocate(self, attachments: List[Attachment], page_label: str = "") -> List[str]:
        """
        Copy each attachment's source file to its destination, then delete the source.

        Args:
            attachments: Attachments to materialize
            page_label: Page description used in log and progress messages

        Returns:
            List of failure messages (empty if every file was moved)
        """
        failures = []

        attachments_iter = attachments
        if self._should_show_progress() and attachments:
            attachments_iter = tqdm(
                attachments,
                desc=f"Attachments: {page_label[:30]}",
                leave=False
            )

        for attachment in attachments_iter:
            error = self._relocate_one(attachment)
            if error:
                self.logger.warning(f"Page '{page_label}': {error}")
                failures.append(error)
                self.stats['failed'] += 1
            else:
                self.stats['relocated'] += 1

        return failures

    def resolve_source(self, source_path: str) -> Path:
        """Resolve a converter-emitted source path to a filesystem path."""
        path = Path(source_path)
        if self.source_root is not None and not path.is_absolute():
            return self.source_root / path
        return path

    def _relocate_one(self, attachment: Attachment) -> Optional[str]:
        """Move a single attachment file; return an error message on failure."""
        source = self.resolve_source(attachment.source_path)
        destination = Path(attachment.export_file_path)

        try:
            if not source.is_file():
                return f"Attachment source file not found: {source}"

            if destination.exists():
                return f"Attachment destination already exists: {destination}"

            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
            source.unlink()
        except OSError as e:
            return f"Failed to move attachment '{source}' -> '{destination}': {e}"

        self.logger.debug(f"Moved attachment '{source}' -> {destination}")
        return None

    def _should_show_progress(self) -> bool:
        """Check if progress bars should be displayed."""
        if not self.show_progress:
            return False
        return sys.stdout.isatty()

    def get_stats(self) -> Dict[str, int]:
        """Get relocation statistics."""
        return self.stats.copy()


__all__ = ['AttachmentResolver', 'FileRelocator']
