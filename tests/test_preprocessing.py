"""Unit tests for border removal, binarization and the morphological filter."""

import unittest

import numpy as np
from skimage import draw
from skimage.color import rgb2gray

from solemesh.errors import DegenerateStructuringElement, EmptyRegionAfterThreshold
from solemesh.step1_border import (
    border_pixels,
    border_signature,
    find_border_bbox,
    remove_border,
)
from solemesh.step2_binarize import binarize_and_trim, compute_threshold, content_bbox
from solemesh.step3_morphology import clean, disk_footprint

YELLOW = (1.0, 1.0, 0.0)


class TestBorderRemoval(unittest.TestCase):
    """Test ruler strip detection and cropping."""

    def test_no_border_keeps_full_extent(self):
        image = np.full((40, 60, 3), 0.5)
        gray = remove_border(image)
        self.assertEqual(gray.shape, (40, 60))
        np.testing.assert_allclose(gray, rgb2gray(image))

    def test_grayscale_input_is_returned_unmodified(self):
        gray = np.random.default_rng(0).random((30, 50))
        out = remove_border(gray)
        np.testing.assert_array_equal(out, gray)

    def test_side_strip_is_cropped(self):
        image = np.zeros((40, 60, 3))
        image[:, :10] = YELLOW
        self.assertEqual(find_border_bbox(image), (0, 40, 10, 60))
        self.assertEqual(remove_border(image).shape, (40, 50))

    def test_frame_is_cropped(self):
        image = np.empty((42, 62, 3))
        image[...] = YELLOW
        image[6:36, 6:56] = 0.0
        image[20, 30] = 1.0
        self.assertEqual(find_border_bbox(image), (6, 36, 6, 56))
        gray = remove_border(image)
        self.assertEqual(gray.shape, (30, 50))
        self.assertAlmostEqual(gray[14, 24], 1.0, places=5)

    def test_black_pixels_are_not_border(self):
        image = np.zeros((2, 2, 3))
        image[0, 0] = YELLOW
        sig = border_signature(image)
        self.assertTrue(np.isposinf(sig[0, 0]))
        self.assertTrue(np.isnan(sig[1, 1]))
        np.testing.assert_array_equal(
            border_pixels(image), [[True, False], [False, False]])

    def test_gray_alpha_input(self):
        image = np.zeros((20, 30, 2))
        image[..., 0] = 0.25
        image[..., 1] = 1.0
        gray = remove_border(image)
        self.assertEqual(gray.shape, (20, 30))
        np.testing.assert_allclose(gray, 0.25)

    def test_all_border_fails(self):
        image = np.empty((20, 20, 3))
        image[...] = YELLOW
        with self.assertRaises(EmptyRegionAfterThreshold) as ctx:
            remove_border(image)
        self.assertEqual(ctx.exception.stage, "border")


class TestBinarize(unittest.TestCase):
    """Test half splitting, margin trimming, thresholding and speck removal."""

    def setUp(self):
        # Left half: a dim impression block holding one bright dot and a
        # single-pixel speck, with a bright fuzz band along the top edge.
        self.image = np.zeros((100, 200))
        self.image[10:90, 10:90] = 0.4
        self.disk = np.zeros_like(self.image, dtype=bool)
        rr, cc = draw.disk((50, 50), 15)
        self.disk[rr, cc] = True
        self.image[self.disk] = 1.0
        self.image[25, 75] = 1.0
        self.image[0:4, 0:100] = 1.0

    def test_keeps_feature_and_drops_noise(self):
        mask = binarize_and_trim(self.image)
        self.assertEqual(mask.dtype, bool)
        self.assertEqual(mask.shape, self.image.shape)
        self.assertTrue(mask[50, 50])
        self.assertFalse(mask[25, 75])
        self.assertFalse(mask[1, 50])
        self.assertFalse((mask & ~self.disk).any())
        self.assertGreater(mask.sum(), 0.9 * self.disk.sum())

    def test_empty_half_gives_empty_block(self):
        mask = binarize_and_trim(self.image)
        self.assertFalse(mask[:, 100:].any())

    def test_blank_image_does_not_fail(self):
        mask = binarize_and_trim(np.zeros((50, 80)))
        self.assertFalse(mask.any())

    def test_fixed_threshold(self):
        mask = binarize_and_trim(self.image, threshold_method='fixed',
                                 fixed_threshold=0.5)
        self.assertTrue(mask[50, 50])
        self.assertFalse((mask & ~self.disk).any())

    def test_features_at_content_edge_are_not_cut(self):
        image = np.zeros((80, 160))
        disks = np.zeros_like(image, dtype=bool)
        for center in ((20, 30), (55, 60)):
            rr, cc = draw.disk(center, 12)
            disks[rr, cc] = True
        image[disks] = 1.0

        mask = binarize_and_trim(image)
        self.assertFalse((mask & ~disks).any())
        self.assertGreater(mask.sum(), 0.95 * disks.sum())
        self.assertTrue(mask[9, 30])
        self.assertTrue(mask[66, 60])
        self.assertTrue(mask[55, 71])

    def test_split_trims_both_sides_of_the_midline(self):
        image = np.zeros((80, 160))
        image[5:75, 5:155] = 0.4
        rr, cc = draw.disk((40, 80), 15)
        image[rr, cc] = 1.0
        self.assertFalse(binarize_and_trim(image)[40, 80])
        self.assertTrue(binarize_and_trim(image, split_halves=False)[40, 80])

    def test_content_bbox(self):
        self.assertIsNone(content_bbox(np.zeros((5, 5))))
        image = np.zeros((10, 10))
        image[2:4, 5:8] = 1.0
        self.assertEqual(content_bbox(image), (2, 4, 5, 8))

    def test_unknown_threshold_method(self):
        with self.assertRaises(ValueError):
            compute_threshold(self.image, method='triangle')


class TestMorphology(unittest.TestCase):
    """Test the disk structuring element and the double closing."""

    def test_degenerate_radius_rejected(self):
        for radius in (0, -3, 2.5):
            with self.assertRaises(DegenerateStructuringElement):
                disk_footprint(radius)
        with self.assertRaises(ValueError):
            clean(np.zeros((10, 10), dtype=bool), 0)

    def test_footprint_is_symmetric(self):
        fp = disk_footprint(4)
        self.assertEqual(fp.shape, (9, 9))
        np.testing.assert_array_equal(fp, fp[::-1, ::-1])
        np.testing.assert_array_equal(fp, fp.T)

    def test_removes_specks_and_fills_gaps(self):
        mask = np.zeros((120, 120), dtype=bool)
        rr, cc = draw.disk((60, 60), 30)
        mask[rr, cc] = True
        mask[60, 60] = False
        mask[9:12, 9:12] = True

        cleaned = clean(mask, radius=5)
        self.assertTrue(cleaned[60, 60])
        self.assertFalse(cleaned[10, 10])
        self.assertTrue(cleaned[60, 35])
        self.assertFalse(cleaned[60, 95])

    def test_repeated_filter_does_not_grow(self):
        rng = np.random.default_rng(1)
        mask = rng.random((80, 80)) > 0.55
        rr, cc = draw.disk((40, 40), 15)
        mask[rr, cc] = True
        once = clean(mask, 3)
        twice = clean(once, 3)
        self.assertFalse((twice & ~once).any())

    def test_input_not_modified(self):
        mask = np.zeros((30, 30), dtype=bool)
        mask[5, 5] = True
        before = mask.copy()
        clean(mask, 2)
        np.testing.assert_array_equal(mask, before)


if __name__ == '__main__':
    unittest.main()
