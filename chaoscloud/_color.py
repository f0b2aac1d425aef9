"""Map point displacement magnitudes onto a blue-to-red hue gradient."""
import numpy
from matplotlib.colors import hsv_to_rgb

# Hues as fractions of a full turn
HUE_COLD = 240.0 / 360.0  # blue
HUE_HOT = 0.0  # red

FALLBACK_COLOR = numpy.array([1.0, 1.0, 1.0])  # white


def distance_to_hue(distance, max_distance=2.0):
    """Hue for a displacement ``distance``.

    Zero maps to blue, ``max_distance`` and beyond to red. Negative distances
    clamp to blue and non-finite ones to red, so the hue is always valid and
    never increases with distance.
    """
    d = numpy.asarray(distance, dtype=float)
    frac = numpy.clip(numpy.nan_to_num(d / max_distance, nan=1.0,
                                       posinf=1.0, neginf=0.0), 0.0, 1.0)
    return HUE_COLD + (HUE_HOT - HUE_COLD) * frac


def hsl_to_rgb(h, s, l):
    """Vectorised HSL to RGB; all channels in [0, 1].

    Converted through HSV so matplotlib does the sextant arithmetic.
    """
    h, s, l = numpy.broadcast_arrays(numpy.asarray(h, dtype=float),
                                     numpy.asarray(s, dtype=float),
                                     numpy.asarray(l, dtype=float))
    v = l + s * numpy.minimum(l, 1.0 - l)
    with numpy.errstate(invalid='ignore', divide='ignore'):
        s_v = numpy.where(v > 0.0, 2.0 * (1.0 - l / v), 0.0)
    hsv = numpy.stack([numpy.mod(h, 1.0), numpy.clip(s_v, 0.0, 1.0),
                       numpy.clip(v, 0.0, 1.0)], axis=-1)
    return hsv_to_rgb(hsv)


def displacement_colors(distance, saturation=1.0, lightness=0.5,
                        max_distance=2.0):
    """RGB colors (N, 3) for an array of N displacement magnitudes."""
    hue = distance_to_hue(distance, max_distance=max_distance)
    return hsl_to_rgb(hue, saturation, lightness)
