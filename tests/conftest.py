import logging

import matplotlib

# Plots are rendered off-screen during tests
matplotlib.use('Agg')

import numpy as np
import pytest

from face_cascade.config import CascadeConfig
from face_cascade.dataset import TrainingSet
from face_cascade.features import FeatureType, HaarFeature
from face_cascade.labels import Classification

handler = logging.StreamHandler()
formatter = logging.Formatter('%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s')
handler.setFormatter(formatter)
root = logging.getLogger()
if not root.handlers:
    root.addHandler(handler)
root.setLevel(logging.DEBUG)

logging.getLogger('PIL').setLevel(logging.WARNING)
logging.getLogger('matplotlib').setLevel(logging.WARNING)

FACE = Classification.FACE
NON_FACE = Classification.NON_FACE


def window(a, b):
    """2x2 window on which the two ``pair_features`` read ``a`` and ``b``."""
    return np.array([[0, a], [0, b]])


def make_set(samples):
    """Training set from (a, b, label) triples."""
    return TrainingSet.from_images([window(a, b) for a, b, _ in samples], [label for _, _, label in samples])


@pytest.fixture
def canonical_image():
    return np.arange(1, 17).reshape(4, 4)


@pytest.fixture
def pair_features():
    # Top row difference, bottom row difference
    return [HaarFeature(FeatureType.TWO_HORIZONTAL, 0, 0, 1, 1),
            HaarFeature(FeatureType.TWO_HORIZONTAL, 0, 1, 1, 1)]


@pytest.fixture
def separable_set():
    # The first feature separates the classes, the second does not
    return make_set([(5, 5, FACE), (5, 0, FACE), (0, 5, NON_FACE), (0, 0, NON_FACE)])


@pytest.fixture
def two_round_set():
    # Each feature alone lets one non-face through; together they separate
    return make_set([(5, 5, FACE), (5, 5, FACE),
                     (5, 0, NON_FACE), (0, 5, NON_FACE), (0, 0, NON_FACE), (0, 0, NON_FACE)])


@pytest.fixture
def config():
    return CascadeConfig(max_depth=3, max_false_positive_rate=0., min_rounds=1, n_jobs=1, batch_size=1)
