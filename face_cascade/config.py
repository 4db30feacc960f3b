"""Configuration objects for feature enumeration and cascade training.

Every value is checked when the object is built so that a bad setting is
reported before any training work begins.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ConfigurationError


class StoppingPolicy(Enum):
    FALSE_POSITIVE_RATE = 'false-positive-rate'
    MAX_ROUNDS = 'max-rounds'


@dataclass
class FeatureConfig:
    """Bounds of the Haar feature search space."""

    min_width: int = 1
    """Smallest sub-rectangle width"""

    min_height: int = 1
    """Smallest sub-rectangle height"""

    max_width: int = 64
    """Window width; also the largest sub-rectangle width"""

    max_height: int = 64
    """Window height; also the largest sub-rectangle height"""

    stride: int = 1
    """Spacing between candidate top-left positions"""

    def __post_init__(self):
        if min(self.min_width, self.min_height, self.max_width, self.max_height) < 1:
            raise ConfigurationError(f'feature bounds must be positive: {self}')
        if self.min_width > self.max_width or self.min_height > self.max_height:
            raise ConfigurationError(f'inverted feature bounds: {self}')
        if self.stride < 1:
            raise ConfigurationError(f'stride must be positive, got {self.stride}')

    @property
    def window(self):
        return self.max_width, self.max_height


@dataclass
class CascadeConfig:
    """Configuration for boosting stages and the cascade built from them."""

    max_depth: int = 10
    """Maximum number of cascade stages"""

    stopping: StoppingPolicy = StoppingPolicy.FALSE_POSITIVE_RATE
    """Rule that ends a boosting stage"""

    max_false_positive_rate: float = 0.35
    """Stage false-positive rate at or below which a stage may stop"""

    min_rounds: int = 3
    """Fewest boosting rounds a stage runs under the false-positive policy"""

    max_rounds: Optional[int] = None
    """Stumps per stage under MAX_ROUNDS; a safeguard cap otherwise"""

    calibration_percentile: float = 0.05
    """Percentile of Face raw scores used as a stage's decision threshold"""

    target_false_positive_rate: Optional[float] = None
    """Cascade-level false-positive rate that ends training early"""

    balanced_weights: bool = False
    """Start each stage with 1/(2m), 1/(2l) class weights instead of uniform"""

    feature_keep_probability: float = 1.0
    """Fraction of features searched each round"""

    seed: Optional[int] = None
    """Seed for feature sub-sampling"""

    n_jobs: int = -1
    """Worker threads for the stump search (joblib convention)"""

    batch_size: int = 512
    """Features evaluated per search task"""

    expected_samples: Optional[int] = None
    """Training-set size the run must start with"""

    checkpoint_dir: Optional[str] = None
    """Directory receiving one pickle per finished stage"""

    def __post_init__(self):
        if isinstance(self.stopping, str):
            self.stopping = StoppingPolicy(self.stopping)
        if self.max_depth < 1:
            raise ConfigurationError(f'max_depth must be at least 1, got {self.max_depth}')
        if not 0. <= self.max_false_positive_rate <= 1.:
            raise ConfigurationError(f'max_false_positive_rate must be in [0, 1], got {self.max_false_positive_rate}')
        if self.min_rounds < 1:
            raise ConfigurationError(f'min_rounds must be at least 1, got {self.min_rounds}')
        if self.max_rounds is not None and self.max_rounds < 1:
            raise ConfigurationError(f'max_rounds must be at least 1, got {self.max_rounds}')
        if self.stopping is StoppingPolicy.MAX_ROUNDS and self.max_rounds is None:
            raise ConfigurationError('the max-rounds stopping policy needs max_rounds')
        if (self.stopping is StoppingPolicy.FALSE_POSITIVE_RATE and self.max_rounds is not None
                and self.max_rounds < self.min_rounds):
            raise ConfigurationError(f'max_rounds ({self.max_rounds}) is below min_rounds ({self.min_rounds})')
        if not 0. <= self.calibration_percentile < 1.:
            raise ConfigurationError(f'calibration_percentile must be in [0, 1), got {self.calibration_percentile}')
        if self.target_false_positive_rate is not None and not 0. <= self.target_false_positive_rate <= 1.:
            raise ConfigurationError(f'target_false_positive_rate must be in [0, 1], got {self.target_false_positive_rate}')
        if not 0. < self.feature_keep_probability <= 1.:
            raise ConfigurationError(f'feature_keep_probability must be in (0, 1], got {self.feature_keep_probability}')
        if self.n_jobs == 0:
            raise ConfigurationError('n_jobs must be non-zero')
        if self.batch_size < 1:
            raise ConfigurationError(f'batch_size must be positive, got {self.batch_size}')
        if self.expected_samples is not None and self.expected_samples < 1:
            raise ConfigurationError(f'expected_samples must be positive, got {self.expected_samples}')
