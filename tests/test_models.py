"""Tests for the page and attachment models."""

import dataclasses
import unittest

from models import Attachment, AttachmentType, ImageExtractionResult, Page


class TestPage(unittest.TestCase):
    def test_title_with_no_invalid_chars(self):
        page = Page(id='1', title='Draft: a/b <c>? ')
        self.assertEqual(page.title_with_no_invalid_chars, 'Draft_ a_b _c__')

    def test_empty_title(self):
        self.assertEqual(Page(id='1', title='...').title_with_no_invalid_chars, 'Untitled')

    def test_page_file_relative_path(self):
        page = Page(id='1', title='Notes', level=1, parent_path=['Work', 'Team: Ops'])
        self.assertEqual(page.get_page_file_relative_path(), 'Work/Team_ Ops/Notes.md')

    def test_find_attachment_by_source(self):
        page = Page(id='1', title='Notes')
        attachment = Attachment(
            id='a', type=AttachmentType.IMAGE, source_path='media/x.png',
            file_name='a.png', export_file_path='res/a.png', page_id='1'
        )
        page.add_attachment(attachment)

        self.assertIs(page.find_attachment_by_source('media/x.png'), attachment)
        self.assertIsNone(page.find_attachment_by_source('media/y.png'))
        self.assertEqual(page.to_dict()['attachments'][0]['type'], 'image')

    def test_attachment_is_immutable(self):
        attachment = Attachment(
            id='a', type=AttachmentType.IMAGE, source_path='media/x.png',
            file_name='a.png', export_file_path='res/a.png'
        )
        with self.assertRaises(dataclasses.FrozenInstanceError):
            attachment.file_name = 'b.png'

    def test_pages_compare_by_id(self):
        self.assertEqual(Page(id='1', title='A'), Page(id='1', title='B'))
        self.assertEqual(len({Page(id='1', title='A'), Page(id='1', title='B')}), 1)


class TestImageExtractionResult(unittest.TestCase):
    def test_failed(self):
        result = ImageExtractionResult.failed('text', 'boom')
        self.assertFalse(result.success)
        self.assertEqual(result.markdown, 'text')
        self.assertEqual(result.new_attachments, [])
        self.assertEqual(result.error, 'boom')


if __name__ == '__main__':
    unittest.main()
