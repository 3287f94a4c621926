"""Tests for the pandoc converter boundary."""

import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config_loader import ConfigLoader
from converters.document_converter import PandocConverter
from models import DocumentConversionError, Page


class TestPandocConverter(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.tmp_folder = self.root / '_tmp'
        self.input_path = self.root / 'page.docx'
        self.input_path.write_bytes(b'docx')
        self.page = Page(id='p1', title='Plan: Q3?')

        self.config = ConfigLoader.defaults()
        self.config['converter']['tmp_folder'] = str(self.tmp_folder)

    def tearDown(self):
        self.tmp.cleanup()

    def _fake_pandoc(self, markdown='# Converted\n', returncode=0, stderr=''):
        """Build a subprocess.run replacement that writes pandoc's outputs."""
        def run(cmd, **kwargs):
            out_path = Path(cmd[cmd.index('-o') + 1])
            if returncode == 0:
                out_path.write_text(markdown, encoding='utf-8')
                media = self.tmp_folder / 'media'
                media.mkdir(parents=True, exist_ok=True)
                (media / 'image1.png').write_bytes(b'png')
            return subprocess.CompletedProcess(cmd, returncode, stdout='', stderr=stderr)
        return run

    def test_build_command(self):
        converter = PandocConverter(self.config)
        cmd = converter.build_command(self.input_path, self.tmp_folder / 'out.md')

        self.assertEqual(cmd[0], 'pandoc')
        self.assertIn('--wrap=none', cmd)
        self.assertIn('gfm', cmd)
        self.assertIn(f'--extract-media={self.tmp_folder}', cmd)

    def test_convert(self):
        converter = PandocConverter(self.config)

        with mock.patch('converters.document_converter.subprocess.run', side_effect=self._fake_pandoc()):
            output = converter.convert(str(self.input_path), self.page)

        self.assertEqual(output.markdown, '# Converted\n')
        self.assertEqual(Path(output.markdown_path).name, 'Plan_ Q3_.md')
        self.assertEqual(len(output.media_files), 1)
        self.assertTrue(output.media_files[0].endswith('image1.png'))
        self.assertFalse(self.input_path.exists())

    def test_debug_keeps_input(self):
        self.config['debug'] = True
        converter = PandocConverter(self.config)

        with mock.patch('converters.document_converter.subprocess.run', side_effect=self._fake_pandoc()):
            output = converter.convert(str(self.input_path), self.page)

        self.assertTrue(self.input_path.exists())
        self.assertTrue(Path(output.markdown_path).exists())

    def test_non_zero_exit(self):
        converter = PandocConverter(self.config)

        with mock.patch(
            'converters.document_converter.subprocess.run',
            side_effect=self._fake_pandoc(returncode=1, stderr='bad docx')
        ):
            with self.assertRaises(DocumentConversionError) as ctx:
                converter.convert(str(self.input_path), self.page)

        self.assertIn('bad docx', str(ctx.exception))
        self.assertTrue(self.input_path.exists())

    def test_missing_executable(self):
        converter = PandocConverter(self.config)

        with mock.patch('converters.document_converter.subprocess.run', side_effect=FileNotFoundError()):
            with self.assertRaises(DocumentConversionError):
                converter.convert(str(self.input_path), self.page)

    def test_missing_input(self):
        converter = PandocConverter(self.config)
        with self.assertRaises(DocumentConversionError):
            converter.convert(str(self.root / 'absent.docx'), self.page)


if __name__ == '__main__':
    unittest.main()
