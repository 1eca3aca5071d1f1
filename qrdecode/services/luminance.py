import numpy as np

from qrdecode.models import LuminancePlane, PixelBuffer


def to_luminance(buffer: PixelBuffer) -> LuminancePlane:
    """
    Plain (R + G + B) / 3 per pixel, truncated. Alpha is ignored.

    Decoders downstream are tuned against this exact formula, so it is not
    swapped for perceptual luma.
    """
    rgb = buffer.pixels[:, :, :3].astype(np.uint16)
    luminance = (rgb.sum(axis=2) // 3).astype(np.uint8)
    return LuminancePlane(width=buffer.width, height=buffer.height, data=luminance)
