'''
    File name: trainer.py
    Cascade training: boost a stage, keep the samples it accepts, repeat.
'''

import logging
from datetime import datetime
from typing import List, NamedTuple, Sequence

from .boosting import StageResult, make_rng, train_stage
from .cascade import Cascade, CascadeReport, filter_training_set
from .config import CascadeConfig, FeatureConfig
from .dataset import TrainingSet
from .errors import InputShapeError, TrainingError
from .features import HaarFeature, enumerate_features
from .persistence import save_checkpoint

logger = logging.getLogger(__name__)


class TrainingReport(NamedTuple):
    cascade: Cascade
    stages: List[StageResult]
    evaluation: CascadeReport


class CascadeTrainer:
    def __init__(self, features: Sequence[HaarFeature], training_set: TrainingSet, config: CascadeConfig):
        if len(features) == 0:
            raise InputShapeError('feature catalog is empty')
        if config.expected_samples is not None and len(training_set) != config.expected_samples:
            raise InputShapeError(f'expected {config.expected_samples} training samples, got {len(training_set)}')
        if training_set.num_faces == 0 or training_set.num_non_faces == 0:
            raise InputShapeError(f'training needs both classes, got {training_set!r}')

        width, height = training_set.window
        for feature in features:
            extent_w, extent_h = feature.extent
            if (feature.x < 0 or feature.y < 0
                    or feature.x + extent_w > width or feature.y + extent_h > height):
                raise InputShapeError(f'{feature} does not fit a {width}x{height} window')

        self.features = features
        self.training_set = training_set
        self.config = config

    @classmethod
    def from_config(cls, training_set: TrainingSet, feature_config: FeatureConfig,
                    config: CascadeConfig) -> 'CascadeTrainer':
        if tuple(feature_config.window) != tuple(training_set.window):
            raise InputShapeError(f'feature window {feature_config.window} does not match '
                                  f'training window {training_set.window}')
        features = enumerate_features(feature_config.min_width, feature_config.min_height,
                                      feature_config.max_width, feature_config.max_height,
                                      feature_config.stride)
        return cls(features, training_set, config)

    def train(self) -> TrainingReport:
        config = self.config
        cascade = Cascade(self.features, complete=False)
        stages: List[StageResult] = []
        current = self.training_set
        rng = make_rng(config)

        logger.info('Beginning training on %r with %d features', current, len(self.features))
        total_start_time = datetime.now()
        try:
            for depth in range(1, config.max_depth + 1):
                if current.num_non_faces == 0:
                    logger.info('No non-faces left to reject, stopping after %d stages', len(cascade))
                    break

                logger.info('Starting cascade round %d/%d on %r', depth, config.max_depth, current)
                start_time = datetime.now()
                stage = train_stage(self.features, current, config, rng)
                cascade.append(stage.classifier)
                stages.append(stage)
                duration = datetime.now() - start_time
                logger.info('Stage %d finished (%s) with %d weak classifiers in %.2fs',
                            depth, stage.outcome.value, len(stage.classifier), duration.total_seconds())

                if config.checkpoint_dir:
                    path = save_checkpoint(stage.classifier, config.checkpoint_dir, depth, config.max_depth)
                    logger.debug('Saved stage %d to %s', depth, path)

                current = filter_training_set(stage.classifier, current)

                if config.target_false_positive_rate is not None:
                    partial = cascade.report(self.training_set)
                    if partial.false_positive_rate <= config.target_false_positive_rate:
                        logger.info('Cascade false positive rate %.4f meets the target %.4f, stopping early',
                                    partial.false_positive_rate, config.target_false_positive_rate)
                        break
        except TrainingError as e:
            logger.error('Training stopped after %d complete stages: %s', len(cascade), e)
            e.cascade = cascade
            raise

        cascade.complete = True
        evaluation = cascade.report(self.training_set)
        s = evaluation.stats
        total_duration = datetime.now() - total_start_time
        logger.info('Trained %d stages in %.2fs', len(cascade), total_duration.total_seconds())
        logger.info('False positive rate: %d / %d = %.4f', s.fp, s.fp + s.tn, evaluation.false_positive_rate)
        logger.info('Detection rate:      %d / %d = %.4f', s.tp, s.tp + s.fn, evaluation.detection_rate)
        return TrainingReport(cascade=cascade, stages=stages, evaluation=evaluation)
