"""
Post-processor sequencing the markdown clean-up passes for one exported page.

Passes, each gated by its own configuration flag:
image extraction/rewrite -> quotation blocks -> consecutive linebreaks -> header.
"""

import logging
from typing import Any, Dict, Optional

from config_loader import get_nested
from converters.document_converter import DocumentConverter
from converters.text_normalizer import TextNormalizer
from exporters.attachment_manager import FileRelocator
from exporters.link_rewriter import LinkRewriter
from models import ImageExtractionResult, Page

logger = logging.getLogger('onenote_md_exporter.orchestrator.post_processor')

IMAGE_EXTRACT_ERROR_MESSAGE = "Error while extracting images, image references left unchanged"


class PostProcessor:
    """Applies post-conversion passes to converter-emitted markdown."""

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        source_root: Optional[str] = None
    ):
        """
        Initialize the post-processor.

        Args:
            config: Configuration dictionary
            logger: Optional logger instance
            source_root: Directory converter-emitted image paths are relative to (default: cwd)
        """
        self.config = config
        self.logger = logger or logging.getLogger('onenote_md_exporter.orchestrator.post_processor')

        self.debug = bool(get_nested(config, 'debug', False))
        self.md_img_ref = get_nested(config, 'post_processing.md_img_ref', True)
        self.remove_quotation_blocks = get_nested(config, 'post_processing.remove_quotation_blocks', True)
        self.remove_consecutive_linebreaks = get_nested(config, 'post_processing.remove_consecutive_linebreaks', True)
        self.remove_onenote_header = get_nested(config, 'post_processing.remove_onenote_header', True)
        self.absolute_attachment_ref = get_nested(config, 'export.absolute_attachment_ref', False)

        self.normalizer = TextNormalizer(logger=self.logger)
        self.link_rewriter = LinkRewriter(logger=self.logger)
        self.file_relocator = FileRelocator(
            source_root=source_root,
            show_progress=get_nested(config, 'export.progress_bars', True),
            logger=self.logger
        )

        self.stats = {
            'pages_processed': 0,
            'images_extracted': 0,
            'image_pass_failures': 0,
            'relocation_failures': 0
        }

    def post_process(
        self,
        page: Page,
        markdown: str,
        resource_folder_path: str,
        md_file_path: str,
        absolute_attachment_ref: Optional[bool] = None
    ) -> str:
        """
        Apply every enabled pass to a page's markdown.

        Args:
            page: Page the markdown belongs to
            markdown: Converter-emitted markdown
            resource_folder_path: Destination directory of the page's attachments
            md_file_path: Path the markdown file will be written to
            absolute_attachment_ref: Addressing mode (None uses the configured default)

        Returns:
            Post-processed markdown
        """
        if absolute_attachment_ref is None:
            absolute_attachment_ref = self.absolute_attachment_ref

        markdown = self.normalizer.normalize_line_endings(markdown)

        if self.md_img_ref:
            result = self.extract_images(
                page, markdown, resource_folder_path, md_file_path, absolute_attachment_ref
            )
            markdown = result.markdown

        if self.remove_quotation_blocks:
            markdown = self.normalizer.remove_quotation_blocks(markdown)

        if self.remove_consecutive_linebreaks:
            markdown = self.normalizer.remove_consecutive_linebreaks(markdown)

        if self.remove_onenote_header:
            markdown = self.normalizer.strip_header(markdown)

        self.stats['pages_processed'] += 1
        return markdown

    def extract_images(
        self,
        page: Page,
        markdown: str,
        resource_folder_path: str,
        md_file_path: str,
        absolute_attachment_ref: bool
    ) -> ImageExtractionResult:
        """
        Rewrite image tags and move their files, without raising on malformed markup.

        Args:
            page: Page the markdown belongs to
            markdown: Markdown content
            resource_folder_path: Destination directory of the page's attachments
            md_file_path: Path the markdown file will be written to
            absolute_attachment_ref: Emit ':/<id>' references instead of relative paths

        Returns:
            ImageExtractionResult; on failure the markdown is returned unchanged
        """
        page_label = page.get_page_file_relative_path()

        try:
            rewritten, new_attachments = self.link_rewriter.resolve_and_rewrite(
                page, markdown, resource_folder_path, md_file_path, absolute_attachment_ref
            )
        except Exception as e:
            self.stats['image_pass_failures'] += 1
            if self.debug:
                self.logger.warning(f"Page '{page_label}': {e}", exc_info=True)
            else:
                self.logger.warning(f"Page '{page_label}': {IMAGE_EXTRACT_ERROR_MESSAGE}")
            return ImageExtractionResult.failed(markdown, str(e))

        # All references are rewritten before any source file is removed
        failures = self.file_relocator.relocate(new_attachments, page_label=page_label)

        self.stats['images_extracted'] += len(new_attachments)
        self.stats['relocation_failures'] += len(failures)

        return ImageExtractionResult(
            success=True,
            markdown=rewritten,
            new_attachments=new_attachments,
            relocation_failures=failures
        )

    def convert_and_post_process(
        self,
        converter: DocumentConverter,
        input_path: str,
        page: Page,
        resource_folder_path: str,
        md_file_path: str,
        absolute_attachment_ref: Optional[bool] = None
    ) -> str:
        """
        Run the external converter on an exported document, then post-process its output.

        Raises:
            DocumentConversionError: If the converter fails
        """
        output = converter.convert(input_path, page)
        return self.post_process(
            page, output.markdown, resource_folder_path, md_file_path, absolute_attachment_ref
        )

    def get_stats(self) -> Dict[str, int]:
        """Get post-processing statistics."""
        return self.stats.copy()


__all__ = ['PostProcessor']
