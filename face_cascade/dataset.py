'''
    File name: dataset.py
    Training sets of (integral image, label) pairs and the loaders that
    build them from directories of face and background windows.
'''

import glob
import logging
import os
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from .errors import InputShapeError
from .integral import build_integrals
from .labels import Classification, label_signs

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.pgm', '.bmp')


class TrainingSet:
    """Stacked integral images with one label each.

    ``integrals`` has shape (n, H+1, W+1); the order of samples is the order
    every distribution vector refers to.
    """

    def __init__(self, integrals: np.ndarray, labels: Sequence[Classification]):
        integrals = np.asarray(integrals)
        if integrals.ndim != 3:
            raise InputShapeError(f'expected a stack of integral images, got shape {integrals.shape}')
        if len(integrals) != len(labels):
            raise InputShapeError(f'{len(integrals)} images but {len(labels)} labels')
        if len(integrals) == 0:
            raise InputShapeError('training set is empty')
        self.integrals = integrals
        self.labels = list(labels)
        self.signs = label_signs(self.labels)

    @classmethod
    def from_images(cls, images: Sequence[np.ndarray], labels: Sequence[Classification]) -> 'TrainingSet':
        if len(images) == 0:
            raise InputShapeError('training set is empty')
        return cls(build_integrals(images), labels)

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[np.ndarray, Classification]]) -> 'TrainingSet':
        if len(pairs) == 0:
            raise InputShapeError('training set is empty')
        integrals, labels = zip(*pairs)
        shapes = {np.shape(i) for i in integrals}
        if len(shapes) != 1:
            raise InputShapeError(f'integral images differ in size: {sorted(shapes)}')
        return cls(np.stack(integrals), labels)

    @property
    def window(self) -> Tuple[int, int]:
        """(width, height) of the original windows."""
        return self.integrals.shape[2] - 1, self.integrals.shape[1] - 1

    @property
    def is_face(self) -> np.ndarray:
        return self.signs > 0

    @property
    def num_faces(self) -> int:
        return int(np.count_nonzero(self.signs > 0))

    @property
    def num_non_faces(self) -> int:
        return int(np.count_nonzero(self.signs < 0))

    def subset(self, mask: np.ndarray) -> 'TrainingSet':
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (len(self),):
            raise InputShapeError(f'mask of shape {mask.shape} for {len(self)} samples')
        if not mask.any():
            raise InputShapeError('no samples left after filtering')
        return TrainingSet(self.integrals[mask], [label for label, keep in zip(self.labels, mask) if keep])

    def __len__(self):
        return len(self.labels)

    def __iter__(self) -> Iterator[Tuple[np.ndarray, Classification]]:
        return iter(zip(self.integrals, self.labels))

    def __repr__(self):
        w, h = self.window
        return f'{self.__class__.__name__}({len(self)} samples, {self.num_faces} faces, {w}x{h})'


def open_window(path: str) -> np.ndarray:
    # Average the colour channels with integer division, channel by channel
    with Image.open(path) as img:
        pixels = np.asarray(img.convert('RGB'), dtype=np.int64)
    return (pixels // 3).sum(axis=2)


def image_files(directory: str) -> List[str]:
    if not os.path.isdir(directory):
        raise InputShapeError(f'data directory not found: {directory}')
    files = sorted(glob.glob(os.path.join(directory, '**', '*'), recursive=True))
    kept = [f for f in files if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS]
    ignored = set(files).difference(kept)
    for f in files:
        if f in ignored and os.path.isfile(f):
            logger.debug('Ignoring %s while loading data', f)
    return kept


def load_windows(directory: str, window: Optional[Tuple[int, int]] = None) -> List[np.ndarray]:
    windows = []
    for path in image_files(directory):
        pixels = open_window(path)
        if window is not None and (pixels.shape[1], pixels.shape[0]) != tuple(window):
            raise InputShapeError(f'{path} is {pixels.shape[1]}x{pixels.shape[0]}, expected {window[0]}x{window[1]}')
        windows.append(pixels)
    return windows


def load_training_set(faces_dir: str, background_dir: str,
                      window: Optional[Tuple[int, int]] = None) -> TrainingSet:
    """Faces followed by backgrounds, each labeled accordingly."""
    faces = load_windows(faces_dir, window)
    backgrounds = load_windows(background_dir, window)
    if not faces or not backgrounds:
        raise InputShapeError(f'need both classes, found {len(faces)} faces and {len(backgrounds)} backgrounds')
    logger.info('Loaded %d faces and %d backgrounds', len(faces), len(backgrounds))
    labels = [Classification.FACE] * len(faces) + [Classification.NON_FACE] * len(backgrounds)
    return TrainingSet.from_images(faces + backgrounds, labels)
