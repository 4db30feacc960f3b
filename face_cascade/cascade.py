'''
    File name: cascade.py
    A cascade of strong classifiers: a window is a face only if every stage,
    in order, accepts it.
'''

import logging
from typing import Iterator, List, NamedTuple, Optional, Sequence

import numpy as np

from .dataset import TrainingSet
from .errors import TrainingError
from .features import HaarFeature
from .labels import Classification
from .metrics import PredictionStats, as_binary, detection_rate, prediction_stats
from .strong import StrongClassifier

logger = logging.getLogger(__name__)


class CascadeReport(NamedTuple):
    detection_rate: float
    false_positive_rate: float
    stats: PredictionStats
    confusion: np.ndarray


class Cascade:
    def __init__(self, features: Sequence[HaarFeature], stages: Optional[List[StrongClassifier]] = None,
                 complete: bool = True):
        self.features = features
        self.stages = list(stages or [])
        self.complete = complete

    def append(self, stage: StrongClassifier):
        self.stages.append(stage)

    def evaluate(self, integral_image: np.ndarray) -> Classification:
        for stage in self.stages:
            if stage.evaluate(integral_image) is Classification.NON_FACE:
                return Classification.NON_FACE
        return Classification.FACE

    def predict(self, integrals: np.ndarray) -> np.ndarray:
        alive = np.ones(len(integrals), dtype=bool)
        for stage in self.stages:
            if not alive.any():
                break
            alive[alive] = stage.predict(integrals[alive])
        return alive

    def report(self, training_set: TrainingSet) -> CascadeReport:
        c, stats = prediction_stats(as_binary(training_set.labels), self.predict(training_set.integrals))
        negatives = stats.fp + stats.tn
        return CascadeReport(detection_rate=detection_rate(stats),
                             false_positive_rate=stats.fp / negatives if negatives else 0.,
                             stats=stats, confusion=c)

    def __len__(self):
        return len(self.stages)

    def __iter__(self) -> Iterator[StrongClassifier]:
        return iter(self.stages)

    def __repr__(self):
        state = 'complete' if self.complete else 'incomplete'
        return f'{self.__class__.__name__}({len(self)} stages, {state})'


def filter_training_set(stage: StrongClassifier, training_set: TrainingSet) -> TrainingSet:
    """Samples the stage accepts as faces; everything else leaves training."""
    keep = stage.predict(training_set.integrals)
    if not keep.any():
        raise TrainingError('stage rejected every training sample')
    survivors = training_set.subset(keep)
    logger.info('%d of %d samples survive the stage (%d faces, %d non-faces)',
                len(survivors), len(training_set), survivors.num_faces, survivors.num_non_faces)
    return survivors
