import unittest

import numpy as np

from qrdecode.models import PixelBuffer
from qrdecode.services.luminance import to_luminance


class TestLuminance(unittest.TestCase):
    def test_truncated_mean_per_pixel(self):
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, size=(13, 17, 3), dtype=np.uint8)
        plane = to_luminance(PixelBuffer(width=17, height=13, pixels=pixels))

        self.assertEqual((plane.width, plane.height), (17, 13))
        self.assertEqual(len(plane.to_bytes()), 17 * 13)
        for y in range(13):
            for x in range(17):
                r, g, b = (int(v) for v in pixels[y, x])
                self.assertEqual(plane.data[y, x], (r + g + b) // 3)

    def test_no_overflow_at_white(self):
        pixels = np.array([[[255, 255, 255], [255, 255, 254], [0, 0, 2]]], dtype=np.uint8)
        plane = to_luminance(PixelBuffer(width=3, height=1, pixels=pixels))
        self.assertEqual(plane.data.tolist(), [[255, 254, 0]])

    def test_alpha_is_ignored(self):
        pixels = np.array([[[30, 60, 90, 0], [30, 60, 90, 255]]], dtype=np.uint8)
        plane = to_luminance(PixelBuffer(width=2, height=1, pixels=pixels))
        self.assertEqual(plane.data.tolist(), [[60, 60]])

    def test_not_perceptual_luma(self):
        # Pure green would be ~150 under 0.299/0.587/0.114 weighting
        pixels = np.array([[[0, 255, 0]]], dtype=np.uint8)
        plane = to_luminance(PixelBuffer(width=1, height=1, pixels=pixels))
        self.assertEqual(plane.data[0, 0], 85)

    def test_row_major_bytes(self):
        pixels = np.zeros((2, 3, 3), dtype=np.uint8)
        pixels[0, 2] = 255
        pixels[1, 0] = 30
        plane = to_luminance(PixelBuffer(width=3, height=2, pixels=pixels))
        self.assertEqual(plane.to_bytes(), bytes([0, 0, 255, 30, 0, 0]))

    def test_input_is_not_mutated(self):
        pixels = np.full((4, 4, 3), 90, dtype=np.uint8)
        buffer = PixelBuffer(width=4, height=4, pixels=pixels)
        to_luminance(buffer)
        self.assertTrue((buffer.pixels == 90).all())
        self.assertFalse(buffer.pixels.flags.writeable)


class TestPixelBuffer(unittest.TestCase):
    def test_rejects_zero_size(self):
        with self.assertRaises(ValueError):
            PixelBuffer(width=0, height=0, pixels=np.zeros((0, 0, 3), dtype=np.uint8))

    def test_rejects_shape_mismatch(self):
        with self.assertRaises(ValueError):
            PixelBuffer(width=5, height=4, pixels=np.zeros((4, 4, 3), dtype=np.uint8))

    def test_copies_pixels(self):
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        buffer = PixelBuffer(width=2, height=2, pixels=pixels)
        pixels[0, 0] = 255
        self.assertEqual(buffer.pixels[0, 0].tolist(), [0, 0, 0])


if __name__ == "__main__":
    unittest.main()
