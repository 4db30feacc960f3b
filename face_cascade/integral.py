'''
    File name: integral.py
    Integral images and rectangle sums over them.

    Integral images are padded: row 0 and column 0 are zero, and
    I[r, c] holds the sum of every pixel with row < r and col < c.
    x is the column axis and y the row axis throughout.
'''

from typing import Iterable, NamedTuple, Union

import numpy as np

from .errors import InputShapeError


Rectangle = NamedTuple('Rectangle', [('xmin', int), ('ymin', int), ('xmax', int), ('ymax', int)])


def _integral_dtype(values: np.ndarray):
    return np.int64 if values.dtype.kind in 'biu' else np.float64


def build_integral(image: np.ndarray) -> np.ndarray:
    img = np.asarray(image)
    if img.ndim != 2:
        raise InputShapeError(f'expected a 2-D intensity matrix, got shape {img.shape}')
    img = img.astype(_integral_dtype(img))
    integral = np.cumsum(np.cumsum(img, axis=0), axis=1)
    return np.pad(integral, ((1, 0), (1, 0)), 'constant', constant_values=0)


def build_integrals(images: Iterable[np.ndarray]) -> np.ndarray:
    integrals = [build_integral(image) for image in images]
    if not integrals:
        raise InputShapeError('no images to integrate')
    shape = integrals[0].shape
    for i, integral in enumerate(integrals):
        if integral.shape != shape:
            raise InputShapeError(f'image {i} has window {_window(integral)}, expected {_window(integrals[0])}')
    return np.stack(integrals)


def _window(integral: np.ndarray):
    return (integral.shape[-2] - 1, integral.shape[-1] - 1)


def _check_bounds(integral: np.ndarray, rect: Rectangle):
    rows, cols = integral.shape[-2:]
    if not (0 <= rect.ymin and rect.ymax < rows and 0 <= rect.xmin and rect.xmax < cols):
        raise IndexError(f'{rect} outside integral image of shape {(rows, cols)}')


def compute_area(integral: np.ndarray, rect: Rectangle) -> Union[int, float, np.ndarray]:
    """Pixel sum inside ``rect``.

    ``integral`` may be a single padded integral image or a stack of them,
    in which case one area per image is returned.
    """
    if rect.xmin > rect.xmax or rect.ymin > rect.ymax:
        raise ValueError(f'rectangle has negative extent: {rect}')
    _check_bounds(integral, rect)
    if rect.xmin == rect.xmax or rect.ymin == rect.ymax:
        if integral.ndim == 2:
            return integral.dtype.type(0)
        return np.zeros(integral.shape[0], dtype=integral.dtype)
    return (integral[..., rect.ymax, rect.xmax] + integral[..., rect.ymin, rect.xmin]
            - integral[..., rect.ymin, rect.xmax] - integral[..., rect.ymax, rect.xmin])
