'''
    File name: features.py
    Haar features: the four rectangle templates, their catalog over a
    detection window, and their evaluation on integral images.
'''

import logging
from collections import Counter
from enum import Enum
from typing import Dict, Iterable, List, Tuple

import numpy as np

from .errors import ConfigurationError
from .integral import Rectangle, compute_area
from .labels import Sign, multiplier

logger = logging.getLogger(__name__)


class FeatureType(Enum):
    TWO_VERTICAL = 'two-vertical'
    TWO_HORIZONTAL = 'two-horizontal'
    THREE_HORIZONTAL = 'three-horizontal'
    TWO_BY_TWO = 'two-by-two'


# Sub-rectangles of each template as (column offset, row offset, sign, weight),
# offsets in units of the sub-rectangle width and height. Weighted areas of
# each template cancel on a uniform image.
SIGN_PATTERNS = {
    FeatureType.TWO_VERTICAL:     ((0, 0, Sign.POSITIVE, 1), (0, 1, Sign.NEGATIVE, 1)),
    FeatureType.TWO_HORIZONTAL:   ((0, 0, Sign.NEGATIVE, 1), (1, 0, Sign.POSITIVE, 1)),
    FeatureType.THREE_HORIZONTAL: ((0, 0, Sign.NEGATIVE, 1), (1, 0, Sign.POSITIVE, 2), (2, 0, Sign.NEGATIVE, 1)),
    FeatureType.TWO_BY_TWO:       ((0, 0, Sign.NEGATIVE, 1), (1, 0, Sign.POSITIVE, 1),
                                   (0, 1, Sign.POSITIVE, 1), (1, 1, Sign.NEGATIVE, 1)),
}

# How many sub-rectangles the template spans horizontally and vertically
HEADROOM = {
    FeatureType.TWO_VERTICAL: (1, 2),
    FeatureType.TWO_HORIZONTAL: (2, 1),
    FeatureType.THREE_HORIZONTAL: (3, 1),
    FeatureType.TWO_BY_TWO: (2, 2),
}


class HaarFeature:
    def __init__(self, feature_type: FeatureType, x: int, y: int, width: int, height: int):
        # numpy would wrap negative indices to the far edge
        if x < 0 or y < 0:
            raise ValueError(f'feature position must be non-negative, got ({x}, {y})')
        if width < 1 or height < 1:
            raise ValueError(f'feature size must be positive, got {width}x{height}')
        self.feature_type = feature_type
        self.x = x
        self.y = y
        self.width = width
        self.height = height

        coords_x, coords_y, coeffs = [], [], []
        for rect, s in self.terms():
            coords_x += [rect.xmax,  rect.xmin, rect.xmax, rect.xmin]
            coords_y += [rect.ymax,  rect.ymin, rect.ymin, rect.ymax]
            coeffs   += [s,          s,         -s,        -s]
        self.coords_x = np.array(coords_x, dtype=np.intp)
        self.coords_y = np.array(coords_y, dtype=np.intp)
        self.coeffs = np.array(coeffs, dtype=np.int64)

    def _rectangle(self, dx: int, dy: int) -> Rectangle:
        w, h = self.width, self.height
        return Rectangle(self.x + dx * w, self.y + dy * h, self.x + (dx + 1) * w, self.y + (dy + 1) * h)

    def rectangles(self) -> List[Tuple[Rectangle, Sign]]:
        return [(self._rectangle(dx, dy), sign) for dx, dy, sign, _ in SIGN_PATTERNS[self.feature_type]]

    def terms(self) -> List[Tuple[Rectangle, int]]:
        """Sub-rectangles with their signed integer weights."""
        return [(self._rectangle(dx, dy), multiplier(sign) * weight)
                for dx, dy, sign, weight in SIGN_PATTERNS[self.feature_type]]

    @property
    def extent(self) -> Tuple[int, int]:
        """Total (width, height) the template covers."""
        wx, hy = HEADROOM[self.feature_type]
        return self.width * wx, self.height * hy

    def __call__(self, integral_image: np.ndarray):
        # Works on one integral image or on a stack of them
        try:
            return np.dot(integral_image[..., self.coords_y, self.coords_x], self.coeffs)
        except IndexError as e:
            raise IndexError(str(e) + ' in ' + str(self))

    def key(self) -> Tuple:
        return (self.feature_type, self.x, self.y, self.width, self.height)

    def __eq__(self, other):
        return isinstance(other, HaarFeature) and self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def to_descriptor(self) -> Dict:
        return {'type': self.feature_type.value, 'x': self.x, 'y': self.y,
                'width': self.width, 'height': self.height}

    @classmethod
    def from_descriptor(cls, descriptor: Dict) -> 'HaarFeature':
        return cls(FeatureType(descriptor['type']), int(descriptor['x']), int(descriptor['y']),
                   int(descriptor['width']), int(descriptor['height']))

    def __repr__(self):
        return (f'{self.__class__.__name__}({self.feature_type.name}, x={self.x}, y={self.y}, '
                f'width={self.width}, height={self.height})')


def evaluate(feature: HaarFeature, integral_image: np.ndarray):
    """Signed sum of the feature's sub-rectangle areas, with bounds checks."""
    return sum(s * compute_area(integral_image, rect) for rect, s in feature.terms())


def possible_position(size: int, window_size: int, stride: int = 1) -> Iterable[int]:
    return range(0, window_size - size + 1, stride)


def fits(feature_type: FeatureType, x: int, y: int, w: int, h: int, max_w: int, max_h: int) -> bool:
    wx, hy = HEADROOM[feature_type]
    return x + wx * w <= max_w and y + hy * h <= max_h


def enumerate_features(min_w: int, min_h: int, max_w: int, max_h: int, stride: int = 1) -> List[HaarFeature]:
    """Every placement of the four templates inside a max_w x max_h window.

    Ordered lexicographically by (w, h, x, y, shape); feature ids elsewhere
    are positions in this list, so the order must stay reproducible.
    """
    if min_w < 1 or min_h < 1:
        raise ConfigurationError(f'minimum feature size must be positive, got {min_w}x{min_h}')
    if min_w > max_w or min_h > max_h:
        raise ConfigurationError(f'inverted feature bounds: min {min_w}x{min_h}, max {max_w}x{max_h}')
    if stride < 1:
        raise ConfigurationError(f'stride must be positive, got {stride}')

    features = []
    for w in range(min_w, max_w + 1):
        for h in range(min_h, max_h + 1):
            for x in possible_position(w, max_w, stride):
                for y in possible_position(h, max_h, stride):
                    for feature_type in FeatureType:
                        if fits(feature_type, x, y, w, h, max_w, max_h):
                            features.append(HaarFeature(feature_type, x, y, w, h))

    counts = feature_counts(features)
    for feature_type in FeatureType:
        logger.debug('%d %s features', counts[feature_type], feature_type.value)
    logger.info('Enumerated %d Haar features for a %dx%d window', len(features), max_w, max_h)
    return features


def feature_counts(features: Iterable[HaarFeature]) -> Counter:
    return Counter(f.feature_type for f in features)
