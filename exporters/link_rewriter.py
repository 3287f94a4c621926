"""Link rewriter replacing converter-emitted <img> tags by markdown image references."""

import logging
import os
import re
from typing import List, Optional, Tuple

from models import Attachment, MalformedImageReferenceError, Page
from .attachment_manager import AttachmentResolver

logger = logging.getLogger('onenote_md_exporter.exporters.link_rewriter')


class LinkRewriter:
    """
    Rewrites converter-emitted HTML image tags to markdown image references.

    This rewriter:
    1. Finds self-closing <img ... /> tags left in the markdown
    2. Extracts the src attribute (the converter-relative temp file path)
    3. Resolves it to a page attachment, creating one on first encounter
    4. Substitutes ![<file name>](<reference>) for the tag

    References are either store-internal (':/<id>', absolute mode) or
    filesystem-relative from the markdown file's directory (relative mode).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the link rewriter.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger('onenote_md_exporter.exporters.link_rewriter')

        self.img_tag_pattern = re.compile(r'<img [^>]+/>')
        self.img_src_pattern = re.compile(r'<img\s+src="(?P<src>[^"]+)"[^>]*/>', re.IGNORECASE)

    def resolve_and_rewrite(
        self,
        page: Page,
        markdown: str,
        resource_folder_path: str,
        md_file_path: str,
        absolute_attachment_ref: bool
    ) -> Tuple[str, List[Attachment]]:
        """
        Replace every image tag and register the attachments it references.

        Args:
            page: Page owning the attachments
            markdown: Converter-emitted markdown content
            resource_folder_path: Destination directory of the page's attachments
            md_file_path: Path the markdown file will be written to
            absolute_attachment_ref: Emit ':/<id>' references instead of relative paths

        Returns:
            Tuple of (rewritten_markdown, new_attachments)

        Raises:
            MalformedImageReferenceError: If an image tag has no parsable src
        """
        resolver = AttachmentResolver(page, resource_folder_path, logger=self.logger)
        relative_folder = None
        if not absolute_attachment_ref:
            relative_folder = self.relative_resource_folder(md_file_path, resource_folder_path)

        def replace_tag(match):
            src = self.extract_src(match.group(0))
            attachment = resolver.resolve(src)

            if absolute_attachment_ref:
                reference = self.build_absolute_reference(attachment)
            else:
                reference = self.build_relative_reference(relative_folder, attachment.file_name)

            return f'![{attachment.file_name}]({reference})'

        rewritten = self.img_tag_pattern.sub(replace_tag, markdown)
        new_attachments = resolver.commit()

        self.logger.debug(
            f"Rewrote image references for page '{page.get_page_file_relative_path()}', "
            f"{len(new_attachments)} new attachment(s)"
        )

        return rewritten, new_attachments

    def extract_src(self, image_tag: str) -> str:
        """
        Extract the src attribute value of an image tag.

        Raises:
            MalformedImageReferenceError: If the tag does not carry a src attribute
        """
        match = self.img_src_pattern.search(image_tag)
        if not match:
            raise MalformedImageReferenceError(image_tag)
        return match.group('src')

    @staticmethod
    def build_absolute_reference(attachment: Attachment) -> str:
        """Store-internal reference resolved by attachment id."""
        return f':/{attachment.id}'

    @staticmethod
    def relative_resource_folder(md_file_path: str, resource_folder_path: str) -> str:
        """Path of the resource folder relative to the markdown file's directory."""
        md_dir = os.path.dirname(md_file_path) or os.curdir
        return os.path.relpath(resource_folder_path, md_dir)

    @staticmethod
    def build_relative_reference(relative_folder: str, file_name: str) -> str:
        """Join folder and file name, with forward slashes for markdown portability."""
        return os.path.join(relative_folder, file_name).replace('\\', '/')


__all__ = ['LinkRewriter']
