'''
    File name: strong.py
    Weighted ensembles of decision stumps with a calibrated decision
    threshold; one of these forms each cascade stage.
'''

import logging
from typing import List, Optional, Sequence

import numpy as np

from .dataset import TrainingSet
from .errors import TrainingError
from .features import HaarFeature
from .labels import Classification, from_prediction, multiplier
from .metrics import ErrorRates, as_binary, error_rates, prediction_stats
from .weak import WeakClassifier

logger = logging.getLogger(__name__)


class StrongClassifier:
    """Stumps with their boosting weights, bound to the feature catalog the
    stumps index into.

    A window is a Face when
    sum(weight * polarity * (feature(window) - stump threshold)) >= threshold.
    """

    def __init__(self, features: Sequence[HaarFeature], calibration_percentile: float = 0.05,
                 classifiers: Optional[List[WeakClassifier]] = None, weights: Optional[List[float]] = None,
                 threshold: float = 0.):
        self.features = features
        self.calibration_percentile = calibration_percentile
        self.classifiers = list(classifiers or [])
        self.weights = list(weights or [])
        self.threshold = threshold
        if len(self.classifiers) != len(self.weights):
            raise ValueError(f'{len(self.classifiers)} classifiers but {len(self.weights)} weights')

    def raw_scores(self, integrals: np.ndarray):
        """Ensemble score of one integral image, or of each image in a stack."""
        total = np.zeros(integrals.shape[:-2]) if integrals.ndim > 2 else 0.
        for c, alpha in zip(self.classifiers, self.weights):
            total = total + alpha * multiplier(c.polarity) * (self.features[c.feature_id](integrals) - c.threshold)
        return total

    def predict(self, integrals: np.ndarray) -> np.ndarray:
        return self.raw_scores(integrals) >= self.threshold

    def evaluate(self, integral_image: np.ndarray) -> Classification:
        return from_prediction(bool(self.raw_scores(integral_image) >= self.threshold))

    def add_weak_classifier(self, stump: WeakClassifier, weight: float, training_set: TrainingSet):
        self.classifiers.append(stump)
        self.weights.append(float(weight))
        self.calibrate(training_set)

    def calibrate(self, training_set: TrainingSet):
        """Place the threshold at a low percentile of the Face raw scores.

        Few Face windows fall below it; the false positives it lets through are
        left to later stages.
        """
        faces = np.sort(self.raw_scores(training_set.integrals)[training_set.is_face])
        if len(faces) == 0:
            raise TrainingError('cannot calibrate a stage threshold without Face samples')
        index = int(np.floor(self.calibration_percentile * len(faces)))
        index = min(max(index, 0), len(faces) - 1)
        self.threshold = float(faces[index])

    def compute_error(self, training_set: TrainingSet) -> ErrorRates:
        _, stats = prediction_stats(as_binary(training_set.labels), self.predict(training_set.integrals))
        return error_rates(stats)

    def __len__(self):
        return len(self.classifiers)

    def __repr__(self):
        return f'{self.__class__.__name__}({len(self)} weak classifiers, threshold={self.threshold:.4f})'
