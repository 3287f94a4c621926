"""Tests for image tag rewriting and attachment addressing."""

import os
import re
import unittest

from exporters.link_rewriter import LinkRewriter
from models import AttachmentType, MalformedImageReferenceError, Page


class TestResolveAndRewrite(unittest.TestCase):
    def setUp(self):
        self.rewriter = LinkRewriter()
        self.page = Page(id='p1', title='Meeting notes')
        self.resource_folder = os.path.join('export', 'Notebook', 'resources')
        self.md_file_path = os.path.join('export', 'Notebook', 'Section', 'Meeting notes.md')

    def test_absolute_reference(self):
        """Test absolute mode emits :/<id> with the attachment id."""
        markdown = 'Before\n<img src="media/img1.png" />\nAfter'

        result, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, markdown, self.resource_folder, self.md_file_path, True
        )

        self.assertEqual(len(new_attachments), 1)
        attachment = new_attachments[0]
        self.assertEqual(result, f'Before\n![{attachment.file_name}](:/{attachment.id})\nAfter')
        self.assertRegex(attachment.id, r'^[0-9a-f]{32}$')
        self.assertEqual(attachment.file_name, attachment.id + '.png')
        self.assertEqual(attachment.type, AttachmentType.IMAGE)
        self.assertEqual(attachment.source_path, 'media/img1.png')
        self.assertEqual(
            attachment.export_file_path,
            os.path.join(self.resource_folder, attachment.file_name)
        )
        self.assertEqual(attachment.page_id, 'p1')

    def test_relative_reference_points_at_destination(self):
        """Test relative reference resolved from the md directory hits the destination path."""
        markdown = '<img src="media/image1.jpeg" style="width:4in" />'

        result, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, markdown, self.resource_folder, self.md_file_path, False
        )

        attachment = new_attachments[0]
        match = re.fullmatch(r'!\[(?P<name>[^\]]+)\]\((?P<ref>[^)]+)\)', result)
        self.assertIsNotNone(match)
        self.assertEqual(match.group('name'), attachment.file_name)
        self.assertEqual(match.group('ref'), f'../resources/{attachment.file_name}')

        resolved = os.path.normpath(
            os.path.join(os.path.dirname(self.md_file_path), match.group('ref'))
        )
        self.assertEqual(resolved, os.path.normpath(attachment.export_file_path))

    def test_relative_reference_same_directory(self):
        result, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, '<img src="a.gif" />', 'resources', 'Page.md', False
        )
        self.assertEqual(result, f'![{new_attachments[0].file_name}](resources/{new_attachments[0].file_name})')

    def test_duplicate_source_resolves_to_one_attachment(self):
        """Test the same src twice yields one attachment and identical references."""
        markdown = (
            '<img src="media/img1.png" />\n'
            'text\n'
            '<img src="media/img1.png" alt="again" />'
        )

        result, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, markdown, self.resource_folder, self.md_file_path, True
        )

        self.assertEqual(len(new_attachments), 1)
        self.assertEqual(len(self.page.attachments), 1)
        references = re.findall(r'!\[[^\]]+\]\(([^)]+)\)', result)
        self.assertEqual(len(references), 2)
        self.assertEqual(references[0], references[1])

    def test_distinct_sources_get_distinct_attachments(self):
        markdown = '<img src="media/a.png" /> <img src="media/b.png" />'

        _, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, markdown, self.resource_folder, self.md_file_path, True
        )

        self.assertEqual([a.source_path for a in new_attachments], ['media/a.png', 'media/b.png'])
        self.assertNotEqual(new_attachments[0].id, new_attachments[1].id)

    def test_existing_attachment_reused(self):
        """Test a source already registered on the page is not registered again."""
        _, first = self.rewriter.resolve_and_rewrite(
            self.page, '<img src="media/a.png" />', self.resource_folder, self.md_file_path, True
        )
        result, second = self.rewriter.resolve_and_rewrite(
            self.page, '<img src="media/a.png" />', self.resource_folder, self.md_file_path, True
        )

        self.assertEqual(second, [])
        self.assertEqual(len(self.page.attachments), 1)
        self.assertIn(f':/{first[0].id}', result)

    def test_no_images(self):
        markdown = 'Plain text with ![existing](ref.png)'
        result, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, markdown, self.resource_folder, self.md_file_path, False
        )
        self.assertEqual(result, markdown)
        self.assertEqual(new_attachments, [])

    def test_missing_src_raises(self):
        """Test an image tag without src is a hard error."""
        markdown = '<img src="media/ok.png" />\n<img alt="no source" />'

        with self.assertRaises(MalformedImageReferenceError) as ctx:
            self.rewriter.resolve_and_rewrite(
                self.page, markdown, self.resource_folder, self.md_file_path, True
            )

        self.assertEqual(ctx.exception.tag, '<img alt="no source" />')
        # Attachments are only added once the whole document is rewritten
        self.assertEqual(self.page.attachments, [])

    def test_uppercase_tag_not_matched(self):
        result, new_attachments = self.rewriter.resolve_and_rewrite(
            self.page, '<IMG SRC="media/x.png" />', self.resource_folder, self.md_file_path, True
        )
        # Tag matching is case-sensitive
        self.assertEqual(result, '<IMG SRC="media/x.png" />')
        self.assertEqual(new_attachments, [])


class TestReferenceHelpers(unittest.TestCase):
    def test_build_relative_reference_uses_forward_slashes(self):
        self.assertEqual(
            LinkRewriter.build_relative_reference('..\\resources', 'abc.png'),
            '../resources/abc.png'
        )

    def test_relative_resource_folder(self):
        self.assertEqual(
            LinkRewriter.relative_resource_folder(
                os.path.join('out', 'nb', 'sec', 'page.md'),
                os.path.join('out', 'nb', 'resources')
            ),
            os.path.join('..', 'resources')
        )

    def test_extract_src(self):
        rewriter = LinkRewriter()
        self.assertEqual(
            rewriter.extract_src('<img src="_tmp/media/image2.png" style="width:1in;height:2in" />'),
            '_tmp/media/image2.png'
        )


if __name__ == '__main__':
    unittest.main()
