"""
HTML Sanitization Utilities.

This module provides the sanitization rules applied to editor content before
it is parsed into a document tree, and the Markdown conversion used when a
document is authored in Markdown instead of rich text.
"""

import markdown
import bleach
from bleach.css_sanitizer import CSSSanitizer


# Tags that map onto document nodes (everything else is stripped, text kept)
ALLOWED_TAGS = [
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'p', 'br', 'hr', 'strong', 'b', 'em', 'i', 'u', 's', 'strike',
    'ul', 'ol', 'li',
    'blockquote', 'code', 'pre',
    'a',
    'table', 'thead', 'tbody', 'tfoot', 'tr', 'th', 'td',
    'div', 'span'
]

# Only inline styles survive; they carry the editor's font sizes
ALLOWED_ATTRIBUTES = {
    '*': ['style'],
    'a': ['href', 'title', 'style'],
    'code': ['class', 'style'],
    'pre': ['class', 'style'],
    'td': ['style', 'colspan'],
    'th': ['style', 'colspan'],
}

# CSS properties that are allowed in inline styles
ALLOWED_CSS_PROPERTIES = [
    'color', 'background-color', 'font-size', 'font-weight', 'font-style',
    'text-align', 'text-decoration',
]

# Create a CSS sanitizer for safe inline styles
css_sanitizer = CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES)

# Markdown extensions: tables and fenced code come from 'extra'
MARKDOWN_EXTENSIONS = ['extra', 'sane_lists']


def sanitize_document_html(html):
    """
    Sanitize editor HTML before it is parsed into a document tree.

    Args:
        html: HTML string to sanitize

    Returns:
        HTML string restricted to the tags the exporter understands
    """
    if not html:
        return ""

    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        css_sanitizer=css_sanitizer,
        strip=True,
        strip_comments=True,
    )


def render_markdown_to_html(text):
    """
    Convert Markdown text to sanitized HTML.

    Args:
        text: Markdown-formatted text

    Returns:
        Sanitized HTML string
    """
    if not text:
        return ""

    # Create a new markdown parser instance for thread safety
    md_parser = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    html_content = md_parser.convert(text)
    md_parser.reset()

    return sanitize_document_html(html_content)
