"""
Binarization strategies

Both strategies take a LuminancePlane and return a BinaryMatrix (True = black),
or None when the image has no usable contrast. Thresholding follows the ZXing
binarizers the symbol engines were tuned against:

- HybridBinarizer: local thresholds from 8x8 block statistics, good on photos
  with uneven lighting
- GlobalHistogramBinarizer: one threshold from a coarse histogram, cheap and
  sometimes better on synthetic or low-noise images
"""

from typing import List, Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from qrdecode.models import BinaryMatrix, LuminancePlane

LUMINANCE_BITS = 5
LUMINANCE_SHIFT = 8 - LUMINANCE_BITS
LUMINANCE_BUCKETS = 1 << LUMINANCE_BITS

BLOCK_SIZE_POWER = 3
BLOCK_SIZE = 1 << BLOCK_SIZE_POWER
MINIMUM_DIMENSION = BLOCK_SIZE * 5
MIN_DYNAMIC_RANGE = 24


class Binarizer:
    name = "binarizer"

    def binarize(self, plane: LuminancePlane) -> Optional[BinaryMatrix]:
        raise NotImplementedError


def estimate_black_point(buckets: List[int]) -> Optional[int]:
    """
    Picks the valley between the two dominant histogram peaks.

    Returns:
        Threshold in luminance units, or None if the peaks are too close
        together to separate black from white.
    """
    num_buckets = len(buckets)
    first_peak = 0
    first_peak_size = 0
    max_bucket_count = 0
    for x in range(num_buckets):
        if buckets[x] > first_peak_size:
            first_peak = x
            first_peak_size = buckets[x]
        if buckets[x] > max_bucket_count:
            max_bucket_count = buckets[x]

    # Second peak: far from the first one and reasonably tall
    second_peak = 0
    second_peak_score = 0
    for x in range(num_buckets):
        distance = x - first_peak
        score = buckets[x] * distance * distance
        if score > second_peak_score:
            second_peak = x
            second_peak_score = score

    if first_peak > second_peak:
        first_peak, second_peak = second_peak, first_peak

    if second_peak - first_peak <= num_buckets // 16:
        return None

    best_valley = second_peak - 1
    best_valley_score = -1
    for x in range(second_peak - 1, first_peak, -1):
        from_first = x - first_peak
        score = from_first * from_first * (second_peak - x) * (max_bucket_count - buckets[x])
        if score > best_valley_score:
            best_valley = x
            best_valley_score = score

    return best_valley << LUMINANCE_SHIFT


class GlobalHistogramBinarizer(Binarizer):
    name = "global_histogram"

    @staticmethod
    def _sample_histogram(plane: LuminancePlane) -> List[int]:
        # Four rows across the middle three fifths of the image
        width, height = plane.width, plane.height
        rows = [height * y // 5 for y in range(1, 5)]
        left, right = width // 5, (width * 4) // 5
        sample = plane.data[rows, left:right].ravel() >> LUMINANCE_SHIFT
        return np.bincount(sample, minlength=LUMINANCE_BUCKETS).tolist()

    def binarize(self, plane: LuminancePlane) -> Optional[BinaryMatrix]:
        black_point = estimate_black_point(self._sample_histogram(plane))
        if black_point is None:
            return None
        bits = plane.data < black_point
        return BinaryMatrix(width=plane.width, height=plane.height, bits=bits)


def _block_offsets(count: int, dimension: int) -> np.ndarray:
    # Last block is pulled back inside the image
    return np.minimum(np.arange(count) << BLOCK_SIZE_POWER, dimension - BLOCK_SIZE)


class HybridBinarizer(GlobalHistogramBinarizer):
    """
    Local-contrast binarizer. Images under 40px on either side are handed to
    the global histogram algorithm.
    """
    name = "hybrid"

    def binarize(self, plane: LuminancePlane) -> Optional[BinaryMatrix]:
        width, height = plane.width, plane.height
        if width < MINIMUM_DIMENSION or height < MINIMUM_DIMENSION:
            return super().binarize(plane)

        sub_width = -(-width // BLOCK_SIZE)
        sub_height = -(-height // BLOCK_SIZE)
        y_offsets = _block_offsets(sub_height, height)
        x_offsets = _block_offsets(sub_width, width)

        black_points = self._black_points(plane.data, y_offsets, x_offsets)
        thresholds = self._block_thresholds(black_points)
        bits = self._apply_thresholds(plane.data, thresholds, sub_width, sub_height)
        return BinaryMatrix(width=width, height=height, bits=bits)

    @staticmethod
    def _black_points(data: np.ndarray, y_offsets: np.ndarray, x_offsets: np.ndarray) -> np.ndarray:
        sub_height, sub_width = len(y_offsets), len(x_offsets)
        step = np.arange(BLOCK_SIZE)
        rows = (y_offsets[:, None] + step).ravel()
        cols = (x_offsets[:, None] + step).ravel()
        blocks = data[np.ix_(rows, cols)].astype(np.int32).reshape(
            sub_height, BLOCK_SIZE, sub_width, BLOCK_SIZE)

        sums = blocks.sum(axis=(1, 3))
        mins = blocks.min(axis=(1, 3))
        maxs = blocks.max(axis=(1, 3))

        averages = sums >> (BLOCK_SIZE_POWER * 2)
        flat = maxs - mins <= MIN_DYNAMIC_RANGE
        # Low-contrast blocks are assumed white unless their neighbours say otherwise
        averages = np.where(flat, mins // 2, averages)

        points = averages.tolist()
        flat_rows = flat.tolist()
        min_rows = mins.tolist()
        for y in range(1, sub_height):
            above, row = points[y - 1], points[y]
            for x in range(1, sub_width):
                if not flat_rows[y][x]:
                    continue
                neighbour = (above[x] + 2 * row[x - 1] + above[x - 1]) // 4
                if min_rows[y][x] < neighbour:
                    row[x] = neighbour
        return np.array(points, dtype=np.int32)

    @staticmethod
    def _block_thresholds(black_points: np.ndarray) -> np.ndarray:
        sub_height, sub_width = black_points.shape
        window_sums = sliding_window_view(black_points, (5, 5)).sum(axis=(2, 3))
        # 5x5 window centre stays two blocks away from the border
        tops = np.clip(np.arange(sub_height), 2, sub_height - 3) - 2
        lefts = np.clip(np.arange(sub_width), 2, sub_width - 3) - 2
        return window_sums[np.ix_(tops, lefts)] // 25

    @staticmethod
    def _apply_thresholds(data: np.ndarray, thresholds: np.ndarray,
                          sub_width: int, sub_height: int) -> np.ndarray:
        height, width = data.shape

        def covering_blocks(dimension, count):
            pos = np.arange(dimension)
            primary = pos >> BLOCK_SIZE_POWER
            # Pixels in the overlap are also covered by the pulled-back last block
            secondary = np.where(pos >= dimension - BLOCK_SIZE, count - 1, primary)
            return primary, secondary

        ya, yb = covering_blocks(height, sub_height)
        xa, xb = covering_blocks(width, sub_width)

        # A pixel is black if any block covering it marks it black
        per_pixel = np.maximum.reduce([
            thresholds[np.ix_(ya, xa)],
            thresholds[np.ix_(ya, xb)],
            thresholds[np.ix_(yb, xa)],
            thresholds[np.ix_(yb, xb)],
        ])
        return data <= per_pixel


DEFAULT_STRATEGIES = (HybridBinarizer(), GlobalHistogramBinarizer())
