"""
Tests for page composition
"""

from PIL import Image
from django.test import SimpleTestCase

from exports.services.reporting.capture import RasterImage
from exports.services.reporting.composer import (
    Decorations, PageGeometry, compose, paginate,
)
from exports.services.reporting.options import ExportOptions, Margins, Orientation


# 80 mm content width, 100 mm content height
GEOMETRY = PageGeometry(width=100, height=120, margin=10, start_y=10, bottom_margin=10)


class PageGeometryTestCase(SimpleTestCase):
    """Test cases for PageGeometry"""

    def test_a4_portrait(self):
        """Test geometry derived from default A4 options"""
        geometry = PageGeometry.from_options(ExportOptions())

        self.assertAlmostEqual(geometry.width, 210, places=1)
        self.assertAlmostEqual(geometry.height, 297, places=1)
        self.assertAlmostEqual(geometry.content_width, 180, places=1)
        self.assertAlmostEqual(geometry.max_content_height, 267, places=1)

    def test_landscape_and_margins(self):
        """Test that orientation and margins shape the content area"""
        options = ExportOptions(
            orientation=Orientation.LANDSCAPE,
            margins=Margins(top=20, right=15, bottom=25, left=10),
        )
        geometry = PageGeometry.from_options(options)

        self.assertAlmostEqual(geometry.content_width, 297 - 20, places=1)
        self.assertAlmostEqual(geometry.max_content_height, 210 - 45, places=1)
        self.assertEqual(geometry.start_y, 20)


class PaginateTestCase(SimpleTestCase):
    """Test cases for paginate"""

    def test_fast_path(self):
        """Test that content fitting one page yields one full descriptor"""
        descriptors = paginate(800, 500, GEOMETRY)

        self.assertEqual(len(descriptors), 1)
        page = descriptors[0]
        self.assertEqual(page.index, 1)
        self.assertEqual((page.source_top, page.source_bottom), (0.0, 500.0))
        self.assertEqual((page.x, page.y, page.width), (10, 10, 80))
        self.assertAlmostEqual(page.height, 50)

    def test_exactly_one_page(self):
        """Test content exactly as tall as the content area"""
        descriptors = paginate(800, 1000, GEOMETRY)
        self.assertEqual(len(descriptors), 1)
        self.assertAlmostEqual(descriptors[0].height, 100)

    def test_multiple_pages(self):
        """Test slicing into full pages plus a shorter last page"""
        descriptors = paginate(800, 2500, GEOMETRY)

        self.assertEqual([d.index for d in descriptors], [1, 2, 3])
        self.assertEqual([round(d.height, 6) for d in descriptors], [100, 100, 50])
        for d, (top, bottom) in zip(descriptors, [(0, 1000), (1000, 2000), (2000, 2500)]):
            self.assertAlmostEqual(d.source_top, top, places=6)
            self.assertAlmostEqual(d.source_bottom, bottom, places=6)

    def test_exact_multiple_has_no_trailing_page(self):
        """Test that an exact multiple of the page height ends cleanly"""
        descriptors = paginate(800, 2000, GEOMETRY)

        self.assertEqual(len(descriptors), 2)
        self.assertAlmostEqual(descriptors[-1].height, 100)
        self.assertEqual(descriptors[-1].source_bottom, 2000)

    def test_heights_sum_to_scaled_height(self):
        """Test placement heights and source coverage over many sizes"""
        for width, height in [(1, 1), (3, 7001), (794, 3333), (1000, 999), (333, 12345), (640, 4000)]:
            with self.subTest(width=width, height=height):
                descriptors = paginate(width, height, GEOMETRY)
                scaled = height * GEOMETRY.content_width / width

                self.assertAlmostEqual(sum(d.height for d in descriptors), scaled, places=6)
                for d in descriptors[:-1]:
                    self.assertLessEqual(d.height, GEOMETRY.max_content_height + 1e-6)
                self.assertGreater(descriptors[-1].height, 0)

                self.assertEqual(descriptors[0].source_top, 0)
                self.assertEqual(descriptors[-1].source_bottom, height)
                for previous, current in zip(descriptors, descriptors[1:]):
                    self.assertEqual(previous.source_bottom, current.source_top)

    def test_empty_image_raises(self):
        with self.assertRaises(ValueError):
            paginate(0, 100, GEOMETRY)

    def test_margins_without_content_area_raise(self):
        geometry = PageGeometry(width=100, height=120, margin=10, start_y=60, bottom_margin=60)
        with self.assertRaises(ValueError):
            paginate(100, 100, geometry)

    def test_crop_box_is_never_empty(self):
        """Test that a tiny last band still crops at least one row"""
        descriptors = paginate(8000, 10001, GEOMETRY)
        last = descriptors[-1]

        left, top, right, bottom = last.crop_box(8000, 10001)
        self.assertEqual((left, right), (0, 8000))
        self.assertGreater(bottom, top)
        self.assertEqual(bottom, 10001)


class ComposeTestCase(SimpleTestCase):
    """Test cases for compose"""

    def test_single_page_uses_whole_image(self):
        """Test that the fast path does not crop the bitmap"""
        image = Image.new('RGB', (80, 40), 'white')

        composition = compose(RasterImage(image), GEOMETRY, Decorations())

        self.assertEqual(composition.page_count, 1)
        self.assertIs(composition.pages[0].segment, image)

    def test_segments_follow_descriptors(self):
        """Test segment sizes for a bitmap spanning three pages"""
        image = Image.new('RGB', (80, 250), 'white')

        composition = compose(RasterImage(image), GEOMETRY, Decorations(footer_text='Footer'))

        self.assertEqual([page.segment.size for page in composition.pages],
                         [(80, 100), (80, 100), (80, 50)])
        self.assertEqual([d.page_label for d in composition.decorations],
                         ['Page 1 of 3', 'Page 2 of 3', 'Page 3 of 3'])
        self.assertTrue(all(d.footer_text == 'Footer' for d in composition.decorations))

    def test_decorations_from_options(self):
        """Test that the date is dropped when include_date is off"""
        options = ExportOptions(header_text='Header', watermark='DRAFT', include_date=False)

        decorations = Decorations.from_options(options, '2024-03-05')

        self.assertEqual(decorations.header_text, 'Header')
        self.assertEqual(decorations.watermark, 'DRAFT')
        self.assertEqual(decorations.date_text, '')

    def test_footer_position_follows_bottom_margin(self):
        """Test the footer baseline for default, large and small bottom margins"""
        for bottom, expected in [(15, 10), (30, 25), (6, 5)]:
            with self.subTest(bottom=bottom):
                options = ExportOptions(margins=Margins(bottom=bottom))
                decoration = Decorations.from_options(options).for_page(1, 1)
                self.assertEqual(decoration.footer_y, expected)
