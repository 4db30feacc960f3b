'''
    File name: metrics.py
    Confusion-matrix statistics for Face / NonFace predictions.
'''

from typing import NamedTuple, Sequence, Tuple

import numpy as np
from sklearn.metrics import confusion_matrix

from .labels import Classification

PredictionStats = NamedTuple('PredictionStats', [('tn', int), ('fp', int), ('fn', int), ('tp', int)])


class ErrorRates(NamedTuple):
    false_positive_rate: float
    false_negative_rate: float
    overall_error: float


def prediction_stats(y_true: np.ndarray, y_pred: np.ndarray) -> Tuple[np.ndarray, PredictionStats]:
    """Confusion matrix and its cells; 1 is Face, 0 is NonFace."""
    c = confusion_matrix(np.asarray(y_true, dtype=int), np.asarray(y_pred, dtype=int), labels=[0, 1])
    tn, fp, fn, tp = (int(v) for v in c.ravel())
    return c, PredictionStats(tn=tn, fp=fp, fn=fn, tp=tp)


def as_binary(labels: Sequence[Classification]) -> np.ndarray:
    return np.array([1 if label is Classification.FACE else 0 for label in labels], dtype=int)


def error_rates(s: PredictionStats) -> ErrorRates:
    negatives = s.fp + s.tn
    positives = s.tp + s.fn
    total = negatives + positives
    return ErrorRates(false_positive_rate=s.fp / negatives if negatives else 0.,
                      false_negative_rate=s.fn / positives if positives else 0.,
                      overall_error=(s.fp + s.fn) / total if total else 0.)


def detection_rate(s: PredictionStats) -> float:
    positives = s.tp + s.fn
    return s.tp / positives if positives else 0.


def precision(s: PredictionStats) -> float:
    predicted = s.tp + s.fp
    return s.tp / predicted if predicted else 0.
