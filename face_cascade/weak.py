'''
    File name: weak.py
    Decision stumps over single Haar features and the weighted search that
    picks the best one for a sample distribution.
'''

import logging
from datetime import datetime
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from .dataset import TrainingSet
from .errors import InputShapeError
from .features import HaarFeature
from .labels import Sign, multiplier

logger = logging.getLogger(__name__)


class ThresholdPolarity(NamedTuple):
    threshold: float
    polarity: Sign


class WeakClassifier(NamedTuple):
    """A stump on the feature at ``feature_id`` of the catalog it was trained on.

    Positive polarity means Face when the feature value is at or above
    ``threshold``; Negative means Face when it is below.
    """
    feature_id: int
    threshold: float
    polarity: Sign

    def votes(self, features: Sequence[HaarFeature], integrals: np.ndarray) -> np.ndarray:
        """+1 for Face, -1 for NonFace, one per integral image."""
        return stump_votes(features[self.feature_id](integrals), self.threshold, self.polarity)


def stump_votes(zs: np.ndarray, threshold, polarity: Sign) -> np.ndarray:
    is_face = zs >= threshold if polarity is Sign.POSITIVE else zs < threshold
    return np.where(is_face, 1, -1)


def build_running_sums(ys: np.ndarray, ws: np.ndarray) -> Tuple[float, float, np.ndarray, np.ndarray]:
    """Face and NonFace weight strictly below each sorted position.

    Totals come from the same running sums, so a perfect split leaves an
    error of exactly zero.
    """
    cum_plus = np.cumsum(np.where(ys > 0, ws, 0.))
    cum_minus = np.cumsum(np.where(ys > 0, 0., ws))
    t_plus, t_minus = cum_plus[-1], cum_minus[-1]
    s_pluses = np.concatenate(([0.], cum_plus[:-1]))
    s_minuses = np.concatenate(([0.], cum_minus[:-1]))
    return t_plus, t_minus, s_pluses, s_minuses


def find_best_threshold(zs: np.ndarray, t_plus: float, t_minus: float,
                        s_pluses: np.ndarray, s_minuses: np.ndarray) -> Tuple[ThresholdPolarity, float]:
    # A threshold can only sit where the sorted score changes
    candidates = np.ones(len(zs), dtype=bool)
    candidates[1:] = zs[1:] != zs[:-1]

    errors_positive = s_pluses + (t_minus - s_minuses)
    errors_negative = s_minuses + (t_plus - s_pluses)
    errors = np.where(candidates, np.minimum(errors_positive, errors_negative), np.inf)

    i = int(np.argmin(errors))
    polarity = Sign.POSITIVE if errors_positive[i] <= errors_negative[i] else Sign.NEGATIVE
    return ThresholdPolarity(threshold=zs[i].item(), polarity=polarity), float(errors[i])


def determine_threshold_polarity(ys: np.ndarray, ws: np.ndarray, zs: np.ndarray) -> Tuple[ThresholdPolarity, float]:
    # Sort according to score
    p = np.argsort(zs, kind='stable')
    zs, ys, ws = zs[p], ys[p], ws[p]

    t_plus, t_minus, s_pluses, s_minuses = build_running_sums(ys, ws)
    return find_best_threshold(zs, t_plus, t_minus, s_pluses, s_minuses)


def check_distribution(training_set: TrainingSet, distribution: np.ndarray) -> np.ndarray:
    ws = np.asarray(distribution, dtype=np.float64)
    if ws.shape != (len(training_set),):
        raise InputShapeError(f'distribution of shape {ws.shape} for {len(training_set)} samples')
    if not np.all(np.isfinite(ws)) or np.any(ws < 0.):
        raise InputShapeError('distribution weights must be finite and non-negative')
    return ws


def find_optimal_stump(feature_id: int, features: Sequence[HaarFeature], training_set: TrainingSet,
                       distribution: np.ndarray) -> Tuple[WeakClassifier, float]:
    ws = check_distribution(training_set, distribution)
    zs = features[feature_id](training_set.integrals)
    result, error = determine_threshold_polarity(training_set.signs, ws, zs)
    return WeakClassifier(feature_id, result.threshold, result.polarity), error


def _search_batch(feature_ids: Sequence[int], features: Sequence[HaarFeature], integrals: np.ndarray,
                  ys: np.ndarray, ws: np.ndarray) -> Tuple[float, WeakClassifier]:
    best_error, best = float('inf'), None
    for feature_id in feature_ids:
        result, error = determine_threshold_polarity(ys, ws, features[feature_id](integrals))
        if error < best_error:
            best_error = error
            best = WeakClassifier(feature_id, result.threshold, result.polarity)
    return best_error, best


def best_stump(features: Sequence[HaarFeature], training_set: TrainingSet, distribution: np.ndarray,
               n_jobs: int = -1, batch_size: int = 512, feature_ids: Optional[Sequence[int]] = None,
               parallel: Optional[Parallel] = None) -> Tuple[WeakClassifier, float]:
    """Minimum weighted-error stump over the catalog.

    Features are searched in batches on worker threads; ties go to the
    feature that comes first in catalog order.
    """
    if len(features) == 0:
        raise InputShapeError('feature catalog is empty')
    ws = check_distribution(training_set, distribution)
    if feature_ids is None:
        feature_ids = range(len(features))
    feature_ids = list(feature_ids)
    if not feature_ids:
        raise InputShapeError('no features selected for the search')

    batches: List[List[int]] = [feature_ids[i:i + batch_size] for i in range(0, len(feature_ids), batch_size)]
    start_time = datetime.now()
    if parallel is None:
        parallel = Parallel(n_jobs=n_jobs, backend='threading')
    results = parallel(delayed(_search_batch)(batch, features, training_set.integrals, training_set.signs, ws)
                       for batch in batches)

    best_error, best = float('inf'), None
    for error, stump in results:
        if error < best_error or (error == best_error and stump.feature_id < best.feature_id):
            best_error, best = error, stump
            logger.debug('Classification error improved to %.5f using %s', error, features[stump.feature_id])

    duration = datetime.now() - start_time
    logger.debug('Searched %d features in %.2fs', len(feature_ids), duration.total_seconds())
    return best, best_error
