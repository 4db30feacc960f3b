from .boosting import StageOutcome, StageResult, boosting_round, train_stage
from .cascade import Cascade, CascadeReport, filter_training_set
from .config import CascadeConfig, FeatureConfig, StoppingPolicy
from .dataset import TrainingSet, load_training_set
from .errors import CascadeError, ConfigurationError, InputShapeError, TrainingError
from .features import FeatureType, HaarFeature, enumerate_features, evaluate
from .integral import Rectangle, build_integral, build_integrals, compute_area
from .labels import Classification, Sign, flip, label_multiplier, multiplier
from .persistence import load_cascade, save_cascade
from .strong import StrongClassifier
from .trainer import CascadeTrainer, TrainingReport
from .weak import WeakClassifier, best_stump, find_optimal_stump

__version__ = '0.1.0'
