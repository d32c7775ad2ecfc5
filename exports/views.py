"""
Export views.

Each endpoint accepts a JSON body and answers with the exported file as
an attachment. Malformed requests get a JSON 400, failed exports a JSON 500.
"""

import json
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_POST

from exports.services.document import RenderSurface, parse_html, parse_markdown
from exports.services.exceptions import ExportFailed, MissingDataError
from exports.services.reporting import DocumentExportService, ExportOptions


logger = logging.getLogger(__name__)


def _error(message, status):
    return JsonResponse({'success': False, 'error': message}, status=status)


def _parse_body(request) -> dict:
    """
    Decode the JSON request body.

    Raises:
        ValueError: If the body is not a JSON object
    """
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _parse_options(data: dict) -> ExportOptions:
    """
    Validate the export options of a request.

    Raises:
        ValueError: If the options are malformed
    """
    options = data.get('options') or {}
    if not isinstance(options, dict):
        raise ValueError("'options' must be a JSON object")
    try:
        return ExportOptions.from_overrides(options)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid export options: {e}")


def _parse_document(data: dict):
    """
    Build the document tree from 'html' or 'markdown'.

    Raises:
        ValueError: If neither is given
    """
    html = data.get('html')
    markdown_text = data.get('markdown')
    if isinstance(html, str) and html.strip():
        return parse_html(html)
    if isinstance(markdown_text, str) and markdown_text.strip():
        return parse_markdown(markdown_text)
    raise ValueError("Either 'html' or 'markdown' is required")


def _parse_width(value):
    if value is None:
        return None
    try:
        width = int(value)
    except (TypeError, ValueError):
        raise ValueError("'width' must be an integer")
    if width <= 0:
        raise ValueError("'width' must be positive")
    return width


def _attachment(result) -> HttpResponse:
    response = HttpResponse(result.content, content_type=result.content_type)
    response['Content-Disposition'] = f'attachment; filename="{result.filename}"'
    response['Content-Length'] = str(len(result))
    return response


@require_POST
async def export_pdf(request):
    """
    Export HTML or Markdown content as a paginated PDF.

    Body: {"html": "...", "markdown": "...", "options": {...}, "width": 794}
    """
    try:
        data = _parse_body(request)
        root = _parse_document(data)
        options = _parse_options(data)
        width = _parse_width(data.get('width'))
    except ValueError as e:
        return _error(str(e), 400)

    surface = RenderSurface(width=width)
    surface.attach(root)
    try:
        result = await DocumentExportService().export_pdf(root, surface, options)
    except ExportFailed as e:
        return _error(str(e), 500)
    finally:
        surface.detach(root)

    return _attachment(result)


@require_POST
def export_text(request):
    """
    Export HTML or Markdown content as structured plain text.

    Body: {"html": "...", "markdown": "...", "options": {...}}
    """
    try:
        data = _parse_body(request)
        root = _parse_document(data)
        options = _parse_options(data)
    except ValueError as e:
        return _error(str(e), 400)

    try:
        result = DocumentExportService().export_text(root, options)
    except ExportFailed as e:
        return _error(str(e), 500)

    return _attachment(result)


@require_POST
def export_table(request):
    """
    Export row/column data as a paginated PDF table.

    Body: {"rows": [{...}], "columns": [{"header": "...", "dataKey": "..."}], "options": {...}}
    """
    try:
        data = _parse_body(request)
        options = _parse_options(data)
    except ValueError as e:
        return _error(str(e), 400)

    rows = data.get('rows')
    columns = data.get('columns')
    if rows is not None and not isinstance(rows, list):
        return _error("'rows' must be a list", 400)
    if rows and not all(isinstance(row, dict) for row in rows):
        return _error("Every row must be a JSON object", 400)

    try:
        result = DocumentExportService().export_table(rows, columns, options)
    except ExportFailed as e:
        if isinstance(e.__cause__, MissingDataError):
            return _error(str(e), 400)
        return _error(str(e), 500)

    return _attachment(result)
