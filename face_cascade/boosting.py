'''
    File name: boosting.py
    AdaBoost over decision stumps: one call to train_stage builds one
    cascade stage.
'''

import logging
from datetime import datetime
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence

import numpy as np
from joblib import Parallel

from .config import CascadeConfig, StoppingPolicy
from .dataset import TrainingSet
from .errors import TrainingError
from .features import HaarFeature
from .metrics import ErrorRates
from .strong import StrongClassifier
from .weak import WeakClassifier, best_stump

logger = logging.getLogger(__name__)

# Weight given to a stump that separates the training set on its own
PERFECT_STUMP_WEIGHT = 1.


class StageOutcome(Enum):
    TARGET_REACHED = 'target-reached'
    ROUND_LIMIT = 'round-limit'
    PERFECT_STUMP = 'perfect-stump'
    NO_IMPROVEMENT = 'no-improvement'


class RoundResult(NamedTuple):
    stump: WeakClassifier
    error: float
    alpha: Optional[float]
    distribution: np.ndarray


class RoundRecord(NamedTuple):
    round: int
    stump: WeakClassifier
    error: float
    alpha: float
    rates: ErrorRates


class StageResult(NamedTuple):
    classifier: StrongClassifier
    outcome: StageOutcome
    rounds: int
    history: List[RoundRecord]


def initial_distribution(training_set: TrainingSet, balanced: bool = False) -> np.ndarray:
    n = len(training_set)
    if not balanced:
        return np.full(n, 1. / n)
    m = training_set.num_non_faces  # Gives the no. of negative samples
    l = training_set.num_faces      # Gives the no. of positive samples
    if m == 0 or l == 0:
        return np.full(n, 1. / n)
    ws = np.where(training_set.is_face, 1. / (2. * l), 1. / (2. * m))
    return ws / ws.sum()


def compute_alpha(error: float) -> float:
    return 0.5 * np.log((1. - error) / error)


def update_distribution(distribution: np.ndarray, signs: np.ndarray, votes: np.ndarray, alpha: float) -> np.ndarray:
    """Scale each weight by exp(-alpha * label * vote) and renormalise."""
    ws = distribution * np.exp(-alpha * signs * votes)
    total = ws.sum()
    if not np.isfinite(total) or total <= 0.:
        raise TrainingError(f'sample distribution collapsed (total weight {total})')
    return ws / total


def make_rng(config: CascadeConfig) -> Optional[np.random.Generator]:
    if config.feature_keep_probability >= 1.:
        return None
    seed = config.seed
    if seed is None:
        seed = np.random.SeedSequence().entropy
    logger.info('Sub-sampling %.0f%% of features per round with seed %d',
                100 * config.feature_keep_probability, seed)
    return np.random.default_rng(seed)


def select_features(num_features: int, keep_probability: float,
                    rng: Optional[np.random.Generator]) -> Optional[np.ndarray]:
    if rng is None or keep_probability >= 1.:
        return None
    keep = np.flatnonzero(rng.random(num_features) <= keep_probability)
    if len(keep) == 0:
        keep = np.array([int(rng.integers(num_features))])
    return keep


def boosting_round(features: Sequence[HaarFeature], training_set: TrainingSet, distribution: np.ndarray,
                   n_jobs: int = -1, batch_size: int = 512, feature_ids: Optional[Sequence[int]] = None,
                   parallel: Optional[Parallel] = None) -> RoundResult:
    """One AdaBoost round: (distribution, training set) -> (new distribution, stump, error, alpha).

    A perfect stump (error 0) or one no better than chance (error >= 0.5)
    leaves alpha unset and the distribution untouched.
    """
    stump, error = best_stump(features, training_set, distribution, n_jobs=n_jobs, batch_size=batch_size,
                              feature_ids=feature_ids, parallel=parallel)
    if error <= 0. or error >= .5:
        return RoundResult(stump=stump, error=error, alpha=None, distribution=distribution)

    alpha = compute_alpha(error)
    votes = stump.votes(features, training_set.integrals)
    new_distribution = update_distribution(distribution, training_set.signs, votes, alpha)
    return RoundResult(stump=stump, error=error, alpha=alpha, distribution=new_distribution)


def stage_finished(config: CascadeConfig, rounds: int, rates: ErrorRates) -> Optional[StageOutcome]:
    if config.stopping is StoppingPolicy.MAX_ROUNDS:
        return StageOutcome.ROUND_LIMIT if rounds >= config.max_rounds else None
    if rates.false_positive_rate <= config.max_false_positive_rate and rounds >= config.min_rounds:
        return StageOutcome.TARGET_REACHED
    if config.max_rounds is not None and rounds >= config.max_rounds:
        return StageOutcome.ROUND_LIMIT
    return None


def train_stage(features: Sequence[HaarFeature], training_set: TrainingSet, config: CascadeConfig,
                rng: Optional[np.random.Generator] = None) -> StageResult:
    """Boost stumps into one strong classifier until a terminal state.

    A perfect stump or a stump no better than chance ends the stage. If the
    very first stump is no better than chance there is nothing to keep, and
    TrainingError is raised instead.
    """
    distribution = initial_distribution(training_set, config.balanced_weights)
    strong = StrongClassifier(features, config.calibration_percentile)
    history: List[RoundRecord] = []
    outcome = None
    rounds = 0

    start_time = datetime.now()
    with Parallel(n_jobs=config.n_jobs, backend='threading') as parallel:
        while outcome is None:
            rounds += 1
            feature_ids = select_features(len(features), config.feature_keep_probability, rng)
            result = boosting_round(features, training_set, distribution, n_jobs=config.n_jobs,
                                    batch_size=config.batch_size, feature_ids=feature_ids, parallel=parallel)

            if result.error <= 0.:
                logger.info('%s separates the training set on its own, ending the stage',
                            features[result.stump.feature_id])
                strong = StrongClassifier(features, config.calibration_percentile)
                strong.add_weak_classifier(result.stump, PERFECT_STUMP_WEIGHT, training_set)
                history.append(RoundRecord(rounds, result.stump, result.error, PERFECT_STUMP_WEIGHT,
                                           strong.compute_error(training_set)))
                outcome = StageOutcome.PERFECT_STUMP
                break

            if result.error >= .5:
                if len(strong) == 0:
                    raise TrainingError(f'no weak classifier beats chance (best error {result.error:.5f})')
                logger.warning('Best weak classifier has error %.5f, ending the stage after %d rounds',
                               result.error, rounds - 1)
                rounds -= 1
                outcome = StageOutcome.NO_IMPROVEMENT
                break

            strong.add_weak_classifier(result.stump, result.alpha, training_set)
            distribution = result.distribution
            rates = strong.compute_error(training_set)
            history.append(RoundRecord(rounds, result.stump, result.error, result.alpha, rates))

            duration = datetime.now() - start_time
            logger.info('Finished boosting round %d (%.2fs in this stage): error %.5f using %s',
                        rounds, duration.total_seconds(), result.error, features[result.stump.feature_id])
            logger.info('Currently have %d weak classifiers with FPR %.4f, FNR %.4f and overall error %.4f',
                        len(strong), rates.false_positive_rate, rates.false_negative_rate, rates.overall_error)
            outcome = stage_finished(config, rounds, rates)

    return StageResult(classifier=strong, outcome=outcome, rounds=rounds, history=history)
