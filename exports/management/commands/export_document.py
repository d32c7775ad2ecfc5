"""
Django management command to export a document file.

Exports an HTML or Markdown file as a paginated PDF or as plain text, or
a JSON table definition ({"rows": [...], "columns": [...]}) as a PDF
table, and saves the result into an output directory.
"""

import json
from pathlib import Path

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from exports.printing.savers import DirectoryFileSaver
from exports.services.document import RenderSurface, parse_html, parse_markdown
from exports.services.exceptions import ExportFailed, ServiceNotConfigured
from exports.services.reporting import DocumentExportService, ExportOptions


class Command(BaseCommand):
    help = 'Export an HTML/Markdown document as PDF or text, or JSON table data as a PDF table'

    def add_arguments(self, parser):
        parser.add_argument('input', help='Path of the HTML, Markdown or JSON input file')
        parser.add_argument(
            '--format',
            choices=['pdf', 'text', 'table'],
            default='pdf',
            help='Export format (default: pdf)',
        )
        parser.add_argument('--markdown', action='store_true', help='Treat the input as Markdown')
        parser.add_argument('--output-dir', help='Directory to save the export in (default: OUTPUT_DIR setting)')
        parser.add_argument('--title', help='Document title')
        parser.add_argument('--filename', help='Output file name without extension')
        parser.add_argument('--watermark', help='Watermark text drawn on every page')
        parser.add_argument('--page-size', choices=['a4', 'letter', 'legal'], help='Paper size')
        parser.add_argument('--orientation', choices=['portrait', 'landscape'], help='Page orientation')
        parser.add_argument('--width', type=int, help='Layout width in CSS pixels')

    def handle(self, *args, **options):
        """Execute the command."""
        path = Path(options['input'])
        if not path.is_file():
            raise CommandError(f"Input file not found: {path}")

        try:
            overrides = {
                'title': options['title'],
                'filename': options['filename'] or path.stem,
                'watermark': options['watermark'],
                'page_size': options['page_size'],
                'orientation': options['orientation'],
            }
            export_options = ExportOptions.from_overrides(
                {key: value for key, value in overrides.items() if value is not None}
            )
        except ServiceNotConfigured as e:
            raise CommandError(f"Export is not properly configured: {e}")

        service = DocumentExportService(saver=DirectoryFileSaver(options['output_dir']))
        content = path.read_text(encoding='utf-8')

        self.stdout.write(f"Exporting {path} as {options['format']}...")
        try:
            if options['format'] == 'table':
                result = self._export_table(service, content, export_options)
            else:
                root = parse_markdown(content) if options['markdown'] else parse_html(content)
                if options['format'] == 'text':
                    result = service.export_text(root, export_options)
                else:
                    result = self._export_pdf(service, root, export_options, options['width'])
        except ExportFailed as e:
            cause = f" ({e.__cause__})" if e.__cause__ else ''
            raise CommandError(f"{e}{cause}")

        self.stdout.write(
            self.style.SUCCESS(f"✓ Exported {result.filename} ({len(result)} bytes)")
        )

    def _export_pdf(self, service, root, export_options, width):
        surface = RenderSurface(width=width)
        surface.attach(root)
        try:
            return async_to_sync(service.export_pdf)(root, surface, export_options)
        finally:
            surface.detach(root)

    def _export_table(self, service, content, export_options):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CommandError(f"Table input is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise CommandError("Table input must be a JSON object with 'rows' and 'columns'")
        return service.export_table(data.get('rows'), data.get('columns'), export_options)
