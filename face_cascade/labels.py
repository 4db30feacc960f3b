'''
    File name: labels.py
    Class labels and threshold polarity, with their +1/-1 arithmetic.
'''

from enum import Enum

import numpy as np


class Classification(Enum):
    FACE = 'face'
    NON_FACE = 'non-face'


class Sign(Enum):
    POSITIVE = 'positive'
    NEGATIVE = 'negative'


def multiplier(sign: Sign) -> int:
    return 1 if sign is Sign.POSITIVE else -1


def flip(sign: Sign) -> Sign:
    return Sign.NEGATIVE if sign is Sign.POSITIVE else Sign.POSITIVE


def label_multiplier(label: Classification) -> int:
    return 1 if label is Classification.FACE else -1


def label_signs(labels) -> np.ndarray:
    # Face -> +1, NonFace -> -1, in training-set order
    return np.array([label_multiplier(label) for label in labels], dtype=np.int64)


def from_prediction(is_face: bool) -> Classification:
    return Classification.FACE if is_face else Classification.NON_FACE
