"""
Tests for the export_document management command
"""

import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings


@override_settings(DOCUMENT_EXPORT={'CAPTURE_SCALE': 1})
class ExportDocumentCommandTestCase(SimpleTestCase):
    """Test cases for export_document"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.dir = Path(self.tmp.name)
        self.output_dir = self.dir / 'out'

    def write(self, name, content):
        path = self.dir / name
        path.write_text(content, encoding='utf-8')
        return str(path)

    def run_command(self, *args):
        out = StringIO()
        call_command('export_document', *args, '--output-dir', str(self.output_dir), stdout=out)
        return out.getvalue()

    def test_text_export(self):
        """Test exporting an HTML file as text named after the input"""
        source = self.write('minutes.html', '<h1>Minutes</h1><p>Agreed.</p>')

        output = self.run_command(source, '--format', 'text', '--title', 'Board')

        saved = (self.output_dir / 'minutes.txt').read_text(encoding='utf-8')
        self.assertIn('BOARD\n=====', saved)
        self.assertIn('MINUTES\n=======\n\nAgreed.', saved)
        self.assertIn('Exported minutes.txt', output)

    def test_pdf_export_from_markdown(self):
        source = self.write('plan.md', '# Plan\n\n- first\n- second\n')

        self.run_command(source, '--markdown', '--filename', 'project-plan', '--watermark', 'DRAFT',
                         '--page-size', 'letter', '--orientation', 'landscape', '--width', '600')

        saved = (self.output_dir / 'project-plan.pdf').read_bytes()
        self.assertTrue(saved.startswith(b'%PDF'))

    def test_table_export(self):
        source = self.write('grants.json', json.dumps({
            'rows': [{'name': 'Alpha', 'amount': 10}],
            'columns': [{'header': 'Name', 'dataKey': 'name'}, {'header': 'Amount', 'dataKey': 'amount'}],
        }))

        self.run_command(source, '--format', 'table')

        self.assertTrue((self.output_dir / 'grants.pdf').read_bytes().startswith(b'%PDF'))

    def test_missing_input(self):
        with self.assertRaises(CommandError):
            self.run_command(str(self.dir / 'missing.html'))

    def test_invalid_table_json(self):
        source = self.write('broken.json', '{rows')
        with self.assertRaises(CommandError):
            self.run_command(source, '--format', 'table')

    def test_table_without_columns(self):
        """Test that a failed export becomes a CommandError and writes nothing"""
        source = self.write('rows.json', json.dumps({'rows': [{'name': 'Alpha'}]}))

        with self.assertRaises(CommandError) as cm:
            self.run_command(source, '--format', 'table')

        self.assertIn('Missing table data', str(cm.exception))
        self.assertFalse((self.output_dir / 'rows.pdf').exists())

    def test_empty_document(self):
        source = self.write('empty.html', '<p> </p>')
        with self.assertRaises(CommandError):
            self.run_command(source)
