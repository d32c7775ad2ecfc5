"""
Tests for the document tree: parsing, surface mounting and normalization
"""

from unittest.mock import Mock

from django.test import SimpleTestCase

from exports.services.document import (
    CodeBlock, Container, Heading, NodeKind, OrderedList, Paragraph,
    RenderSurface, StyleNormalizer, Table, TableCell, TableRow, TextRun,
    UnorderedList, parse_html, parse_markdown,
)
from exports.services.document.parser import parse_inline_style
from exports.services.exceptions import DetachedNodeError


def blocks(root):
    """Top-level nodes without the whitespace text between them."""
    return [child for child in root.children if child.kind != NodeKind.TEXT]


class DocumentNodeTestCase(SimpleTestCase):
    """Test cases for the node types"""

    def test_default_style_is_empty_and_read_only(self):
        """Test that nodes built without a style share an empty, read-only mapping"""
        first, second = Paragraph(), Container()

        self.assertEqual(dict(first.style), {})
        self.assertIs(first.style, second.style)
        with self.assertRaises(TypeError):
            first.style['font_size'] = 12


class ParseHtmlTestCase(SimpleTestCase):
    """Test cases for parse_html"""

    def test_headings_and_paragraphs(self):
        """Test that headings keep their level and paragraphs their text"""
        root = parse_html('<h2>Budget</h2><p>Total cost</p>')

        heading, paragraph = blocks(root)
        self.assertIsInstance(heading, Heading)
        self.assertEqual(heading.level, 2)
        self.assertIsInstance(paragraph, Paragraph)
        self.assertEqual(paragraph.text_content(), 'Total cost')

    def test_root_is_container(self):
        """Test that the parsed tree hangs off a root container"""
        root = parse_html('<p>x</p>')
        self.assertIsInstance(root, Container)
        self.assertEqual(root.tag, 'root')

    def test_lists(self):
        """Test that list items become one container each"""
        root = parse_html('<ul><li>alpha</li><li>beta</li></ul><ol><li>one</li></ol>')

        unordered, ordered = blocks(root)
        self.assertIsInstance(unordered, UnorderedList)
        self.assertEqual([item.text_content() for item in unordered.children], ['alpha', 'beta'])
        self.assertIsInstance(ordered, OrderedList)
        self.assertEqual(len(ordered.children), 1)

    def test_table_rows_and_header_cells(self):
        """Test that th cells are flagged as header cells"""
        root = parse_html(
            '<table><thead><tr><th>Name</th><th>Age</th></tr></thead>'
            '<tbody><tr><td>Ana</td><td>30</td></tr></tbody></table>'
        )

        table = blocks(root)[0]
        self.assertIsInstance(table, Table)
        self.assertEqual(len(table.rows), 2)
        self.assertTrue(table.rows[0].is_header)
        self.assertFalse(table.rows[1].is_header)
        self.assertEqual([cell.text_content() for cell in table.header_cells], ['Name', 'Age'])

    def test_nested_table_rows_stay_in_nested_table(self):
        """Test that rows of a nested table are not added to the outer table"""
        root = parse_html(
            '<table><tr><td><table><tr><td>inner</td></tr></table></td></tr></table>'
        )

        outer = blocks(root)[0]
        self.assertEqual(len(outer.rows), 1)

    def test_preformatted_code_is_verbatim(self):
        """Test that pre blocks keep their line breaks"""
        root = parse_html('<pre><code>a = 1\nb = 2</code></pre>')

        code = blocks(root)[0]
        self.assertIsInstance(code, CodeBlock)
        self.assertEqual(code.text_content(), 'a = 1\nb = 2')

    def test_inline_code_stays_inline(self):
        """Test that code inside a paragraph is not turned into a block"""
        root = parse_html('<p>Use <code>x</code> now</p>')

        paragraph = blocks(root)[0]
        inline = [child for child in paragraph.children if child.kind == NodeKind.CONTAINER]
        self.assertEqual(inline[0].tag, 'code')
        self.assertEqual(paragraph.text_content(), 'Use x now')

    def test_bold_text_is_marked(self):
        """Test that strong elements carry a bold weight"""
        root = parse_html('<p><strong>Important</strong></p>')

        strong = blocks(root)[0].children[0]
        self.assertEqual(strong.style['font_weight'], 'bold')

    def test_inline_font_size(self):
        """Test that inline font sizes are recorded on the node"""
        root = parse_html('<p style="font-size: 18px">Big</p>')
        self.assertEqual(blocks(root)[0].style['font_size'], 18.0)

    def test_disallowed_tags_are_stripped(self):
        """Test that markup outside the document node set is removed"""
        root = parse_html('<p>Safe<img src="x" onerror="alert(1)"></p>')

        paragraph = blocks(root)[0]
        self.assertEqual(paragraph.text_content(), 'Safe')
        self.assertFalse(any(getattr(node, 'tag', '') == 'img' for node in paragraph.iter()))

    def test_empty_input(self):
        """Test that empty input gives an empty root"""
        self.assertEqual(parse_html('').children, ())


class ParseMarkdownTestCase(SimpleTestCase):
    """Test cases for parse_markdown"""

    def test_markdown_document(self):
        """Test that Markdown is rendered into document nodes"""
        root = parse_markdown("# Title\n\nSome *text*.\n\n- one\n- two\n")

        heading, paragraph, items = blocks(root)
        self.assertEqual(heading.level, 1)
        self.assertEqual(paragraph.text_content(), 'Some text.')
        self.assertIsInstance(items, UnorderedList)
        self.assertEqual(len(items.children), 2)

    def test_markdown_table(self):
        """Test that Markdown tables become table nodes"""
        root = parse_markdown("| Name | Age |\n| --- | --- |\n| Ana | 30 |\n")

        table = blocks(root)[0]
        self.assertIsInstance(table, Table)
        self.assertEqual(len(table.rows), 2)


class ParseInlineStyleTestCase(SimpleTestCase):
    """Test cases for parse_inline_style"""

    def test_points_are_converted_to_pixels(self):
        self.assertEqual(parse_inline_style('font-size: 12pt')['font_size'], 16.0)

    def test_numeric_font_weight(self):
        self.assertEqual(parse_inline_style('font-weight: 700')['font_weight'], 'bold')
        self.assertNotIn('font_weight', parse_inline_style('font-weight: 400'))

    def test_unknown_properties_are_ignored(self):
        self.assertEqual(dict(parse_inline_style('margin: 4px; color: red')), {'color': 'red'})


class RenderSurfaceTestCase(SimpleTestCase):
    """Test cases for RenderSurface"""

    def setUp(self):
        self.engine = Mock()
        self.engine.measure.return_value = (500, 120)
        self.surface = RenderSurface(width=500, layout_engine=self.engine)
        self.text = TextRun(text='Hello')
        self.root = Container(children=(Paragraph(children=(self.text,)),))

    def test_descendants_of_attached_root_are_attached(self):
        """Test that every node inside a mounted root counts as attached"""
        self.surface.attach(self.root)
        self.assertTrue(self.surface.is_attached(self.root))
        self.assertTrue(self.surface.is_attached(self.text))

    def test_detach(self):
        """Test that detaching unmounts the whole subtree"""
        self.surface.attach(self.root)
        self.surface.detach(self.root)
        self.assertFalse(self.surface.is_attached(self.text))

    def test_attachment_uses_identity(self):
        """Test that an equal-looking copy is not considered attached"""
        self.surface.attach(self.root)
        self.assertFalse(self.surface.is_attached(TextRun(text='Hello')))

    def test_offscreen_mount_is_released(self):
        """Test that offscreen mounts end with the with block"""
        with self.surface.offscreen(self.root) as node:
            self.assertIs(node, self.root)
            self.assertTrue(self.surface.is_attached(self.text))
            self.assertEqual(self.surface.offscreen_count, 1)

        self.assertEqual(self.surface.offscreen_count, 0)
        self.assertFalse(self.surface.is_attached(self.text))

    def test_offscreen_mount_is_released_on_error(self):
        """Test that offscreen mounts are released when the block raises"""
        with self.assertRaises(RuntimeError):
            with self.surface.offscreen(self.root):
                raise RuntimeError("capture failed")

        self.assertEqual(self.surface.offscreen_count, 0)

    def test_measure_delegates_to_layout_engine(self):
        """Test that measuring uses the layout engine at the surface width"""
        self.surface.attach(self.root)

        self.assertEqual(self.surface.measure(self.root), (500, 120))
        self.engine.measure.assert_called_once_with(self.root, 500)

    def test_measure_detached_node_raises(self):
        """Test that measuring an unmounted node fails"""
        with self.assertRaises(DetachedNodeError):
            self.surface.measure(self.root)
        self.engine.measure.assert_not_called()


class StyleNormalizerTestCase(SimpleTestCase):
    """Test cases for StyleNormalizer"""

    def setUp(self):
        self.surface = RenderSurface(width=500, layout_engine=Mock())
        self.normalizer = StyleNormalizer(self.surface, base_font_size=14)

    def mount(self, *children):
        root = Container(children=children, tag='root')
        self.surface.attach(root)
        return root

    def test_detached_node_raises(self):
        """Test that only mounted nodes can be normalized"""
        with self.assertRaises(DetachedNodeError):
            self.normalizer.normalize(Paragraph(children=(TextRun(text='x'),)))

    def test_heading_sizes(self):
        """Test that headings get fixed sizes per level"""
        root = self.mount(
            Heading(level=1, children=(TextRun(text='a'),)),
            Heading(level=2, children=(TextRun(text='b'),)),
            Heading(level=3, children=(TextRun(text='c'),)),
            Heading(level=5, children=(TextRun(text='d'),)),
        )

        clone = self.normalizer.normalize(root)
        sizes = [child.style['font_size'] for child in clone.children]
        self.assertEqual(sizes, [32, 28, 24, 20])
        self.assertTrue(all(child.style['font_weight'] == 'bold' for child in clone.children))

    def test_text_is_scaled_up(self):
        """Test that generic text gets max(current * 1.5, 16)"""
        root = self.mount(
            Container(children=(TextRun(text='base'),)),
            Container(children=(TextRun(text='small'),), style={'font_size': 8}),
            Container(children=(TextRun(text='large'),), style={'font_size': 20}),
        )

        clone = self.normalizer.normalize(root)
        sizes = [child.style['font_size'] for child in clone.children]
        self.assertEqual(sizes, [21, 16, 30])

    def test_paragraphs_and_list_items_have_fixed_size(self):
        """Test that paragraphs and list items are 16px whatever their live size"""
        root = parse_html('<p>Hello</p><p style="font-size: 30px">Big</p><ul><li>item</li></ul>')
        self.surface.attach(root)

        clone = self.normalizer.normalize(root)
        paragraph, big, items = clone.children

        self.assertEqual(paragraph.style['font_size'], 16)
        self.assertEqual(big.style['font_size'], 16)
        self.assertEqual(items.style['font_size'], 21)
        self.assertEqual(items.children[0].style['font_size'], 16)

    def test_root_gets_absolute_colours(self):
        """Test that the clone root is painted white on black text"""
        clone = self.normalizer.normalize(self.mount(Paragraph()))

        self.assertEqual(clone.style['background'], '#ffffff')
        self.assertEqual(clone.style['color'], '#000000')

    def test_theme_colours_are_dropped(self):
        """Test that live colours do not survive normalization"""
        root = self.mount(Paragraph(children=(TextRun(text='x'),), style={'color': '#eeeeee'}))

        clone = self.normalizer.normalize(root)
        self.assertNotEqual(clone.children[0].style.get('color'), '#eeeeee')

    def test_source_tree_is_untouched(self):
        """Test that normalization clones instead of modifying"""
        paragraph = Paragraph(children=(TextRun(text='x'),))
        root = self.mount(paragraph)

        clone = self.normalizer.normalize(root)
        self.assertIsNot(clone, root)
        self.assertIsNot(clone.children[0], paragraph)
        self.assertEqual(dict(paragraph.style), {})
        self.assertFalse(self.surface.is_attached(clone))

    def test_table_cells_are_cloned(self):
        """Test that table cell content is normalized and preserved"""
        table = Table(rows=(
            TableRow(cells=(TableCell(children=(TextRun(text='Name'),), header=True),)),
            TableRow(cells=(TableCell(children=(TextRun(text='Ana'),)),)),
        ))
        root = self.mount(table)

        clone = self.normalizer.normalize(root).children[0]
        self.assertEqual(clone.text_content(), 'NameAna')
        self.assertIsNot(clone.rows[0].cells[0], table.rows[0].cells[0])
        self.assertTrue(clone.rows[0].cells[0].header)
        self.assertEqual(clone.style['border_color'], '#dddddd')

    def test_heading_sizes_are_idempotent(self):
        """Test that normalizing normalized content keeps heading sizes"""
        root = self.mount(
            Heading(level=1, children=(TextRun(text='a'),)),
            Heading(level=4, children=(TextRun(text='b'),)),
        )

        with self.normalizer.staged(root) as clone:
            again = self.normalizer.normalize(clone)

        first = [child.style['font_size'] for child in clone.children]
        second = [child.style['font_size'] for child in again.children]
        self.assertEqual(first, second)

    def test_staged_clone_is_mounted_then_released(self):
        """Test that staged clones are only mounted inside the block"""
        root = self.mount(Paragraph(children=(TextRun(text='x'),)))

        with self.normalizer.staged(root) as clone:
            self.assertTrue(self.surface.is_attached(clone))

        self.assertFalse(self.surface.is_attached(clone))
        self.assertEqual(self.surface.offscreen_count, 0)

    def test_staged_clone_is_released_on_error(self):
        """Test that a failing capture still releases the clone"""
        root = self.mount(Paragraph(children=(TextRun(text='x'),)))

        with self.assertRaises(ValueError):
            with self.normalizer.staged(root):
                raise ValueError("boom")

        self.assertEqual(self.surface.offscreen_count, 0)
