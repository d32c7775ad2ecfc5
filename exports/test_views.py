"""
Tests for the export endpoints
"""

import json
from unittest.mock import AsyncMock, patch

from django.test import TestCase, override_settings
from django.urls import reverse

from exports.services.exceptions import ExportFailed


@override_settings(DOCUMENT_EXPORT={'CAPTURE_SCALE': 1})
class ExportViewsTestCase(TestCase):
    """Test cases for the export views"""

    def post(self, name, payload):
        return self.client.post(
            reverse(name),
            data=json.dumps(payload),
            content_type='application/json',
        )

    def test_export_text(self):
        """Test that the text export is returned as an attachment"""
        response = self.post('exports:export-text', {
            'html': '<h1>Notes</h1><p>Body</p>',
            'options': {'filename': 'notes', 'title': 'Meeting'},
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/plain; charset=utf-8')
        self.assertEqual(response['Content-Disposition'], 'attachment; filename="notes.txt"')
        content = response.content.decode('utf-8')
        self.assertIn('MEETING', content)
        self.assertIn('NOTES\n=====', content)

    def test_export_text_from_markdown(self):
        response = self.post('exports:export-text', {'markdown': '## Plan\n\n1. first\n2. second\n'})

        self.assertEqual(response.status_code, 200)
        self.assertIn('1. first\n2. second', response.content.decode('utf-8'))

    def test_export_pdf(self):
        """Test that the PDF export returns PDF bytes"""
        response = self.post('exports:export-pdf', {
            'html': '<h1>Report</h1><p>Some content</p>',
            'options': {'filename': 'report', 'watermark': 'DRAFT', 'margins': {'top': 20}},
            'width': 500,
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('filename="report.pdf"', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_export_pdf_failure(self):
        """Test that failed exports answer with a JSON error"""
        failure = AsyncMock(side_effect=ExportFailed('Failed to generate PDF. Please try again.', format='pdf'))

        with patch('exports.views.DocumentExportService.export_pdf', new=failure):
            response = self.post('exports:export-pdf', {'html': '<p>x</p>'})

        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])
        self.assertIn('Failed to generate PDF', response.json()['error'])

    def test_export_pdf_empty_content(self):
        response = self.post('exports:export-pdf', {'html': '<p>   </p>'})
        self.assertEqual(response.status_code, 500)

    def test_export_table(self):
        response = self.post('exports:export-table', {
            'rows': [{'name': 'Alpha', 'amount': 10}],
            'columns': [{'header': 'Name', 'dataKey': 'name'}, {'header': 'Amount', 'dataKey': 'amount'}],
            'options': {'filename': 'grants', 'orientation': 'landscape'},
        })

        self.assertEqual(response.status_code, 200)
        self.assertIn('filename="grants.pdf"', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_export_table_missing_columns(self):
        response = self.post('exports:export-table', {'rows': [{'name': 'Alpha'}]})

        self.assertEqual(response.status_code, 400)
        self.assertIn('Missing table data', response.json()['error'])

    def test_export_table_rows_must_be_list(self):
        response = self.post('exports:export-table', {'rows': 'nope', 'columns': [{'key': 'a'}]})
        self.assertEqual(response.status_code, 400)

    def test_missing_content(self):
        response = self.post('exports:export-text', {'options': {}})

        self.assertEqual(response.status_code, 400)
        self.assertIn("'html' or 'markdown'", response.json()['error'])

    def test_invalid_json(self):
        response = self.client.post(reverse('exports:export-text'), data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_invalid_options(self):
        response = self.post('exports:export-text', {'html': '<p>x</p>', 'options': {'pageSize': 'a3'}})
        self.assertEqual(response.status_code, 400)

    def test_invalid_width(self):
        response = self.post('exports:export-pdf', {'html': '<p>x</p>', 'width': -5})
        self.assertEqual(response.status_code, 400)

    def test_get_not_allowed(self):
        response = self.client.get(reverse('exports:export-text'))
        self.assertEqual(response.status_code, 405)
