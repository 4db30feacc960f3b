import numpy as np
import pytest
from conftest import FACE, NON_FACE, make_set, window

from face_cascade.errors import TrainingError
from face_cascade.integral import build_integral
from face_cascade.labels import Classification, Sign
from face_cascade.strong import StrongClassifier
from face_cascade.weak import WeakClassifier


def test_raw_score_is_weighted_signed_margin(pair_features, separable_set):
    strong = StrongClassifier(pair_features)
    strong.add_weak_classifier(WeakClassifier(0, 5, Sign.POSITIVE), 2., separable_set)
    strong.add_weak_classifier(WeakClassifier(1, 1, Sign.NEGATIVE), .5, separable_set)
    # 2 * (7 - 5) - 0.5 * (3 - 1)
    assert strong.raw_scores(build_integral(window(7, 3))) == pytest.approx(3.)
    assert strong.raw_scores(separable_set.integrals).shape == (4,)


def test_threshold_sits_at_the_face_percentile(pair_features):
    samples = [(a, 0, FACE) for a in range(1, 21)] + [(0, 0, NON_FACE)]
    training_set = make_set(samples)
    strong = StrongClassifier(pair_features, calibration_percentile=.05)
    strong.add_weak_classifier(WeakClassifier(0, 0, Sign.POSITIVE), 1., training_set)
    # Face raw scores are 1..20; index floor(0.05 * 20) = 1
    assert strong.threshold == 2.
    assert strong.evaluate(build_integral(window(1, 0))) is Classification.NON_FACE
    assert strong.evaluate(build_integral(window(2, 0))) is Classification.FACE


def test_calibration_index_is_clamped(pair_features):
    training_set = make_set([(3, 0, FACE), (0, 0, NON_FACE)])
    strong = StrongClassifier(pair_features, calibration_percentile=.99)
    strong.add_weak_classifier(WeakClassifier(0, 0, Sign.POSITIVE), 1., training_set)
    assert strong.threshold == 3.


def test_calibration_needs_faces(pair_features):
    training_set = make_set([(3, 0, NON_FACE), (0, 0, NON_FACE)])
    strong = StrongClassifier(pair_features)
    with pytest.raises(TrainingError):
        strong.add_weak_classifier(WeakClassifier(0, 0, Sign.POSITIVE), 1., training_set)


def test_threshold_is_recomputed_on_every_append(pair_features, separable_set):
    strong = StrongClassifier(pair_features)
    strong.add_weak_classifier(WeakClassifier(0, 0, Sign.POSITIVE), 1., separable_set)
    first = strong.threshold
    strong.add_weak_classifier(WeakClassifier(1, 0, Sign.POSITIVE), 1., separable_set)
    # Face raw scores: 5 + 5 and 5 + 0
    assert first == 5.
    assert strong.threshold == 5.
    assert len(strong) == 2
    assert strong.weights == [1., 1.]


def test_compute_error(pair_features):
    training_set = make_set([(5, 5, FACE), (5, 0, FACE), (5, 0, NON_FACE), (0, 0, NON_FACE)])
    strong = StrongClassifier(pair_features)
    strong.add_weak_classifier(WeakClassifier(0, 5, Sign.POSITIVE), 1., training_set)
    rates = strong.compute_error(training_set)
    assert rates.false_positive_rate == .5
    assert rates.false_negative_rate == 0.
    assert rates.overall_error == .25


def test_predict_matches_evaluate(pair_features, two_round_set):
    strong = StrongClassifier(pair_features)
    strong.add_weak_classifier(WeakClassifier(0, 5, Sign.POSITIVE), .8, two_round_set)
    strong.add_weak_classifier(WeakClassifier(1, 5, Sign.POSITIVE), 1.1, two_round_set)
    predicted = strong.predict(two_round_set.integrals)
    evaluated = [strong.evaluate(i) is Classification.FACE for i in two_round_set.integrals]
    assert predicted.tolist() == evaluated == [True, True, False, False, False, False]


def test_mismatched_weights_are_rejected(pair_features):
    with pytest.raises(ValueError):
        StrongClassifier(pair_features, classifiers=[WeakClassifier(0, 0, Sign.POSITIVE)], weights=[])


def test_empty_ensemble_scores_zero(pair_features, separable_set):
    strong = StrongClassifier(pair_features)
    assert np.all(strong.raw_scores(separable_set.integrals) == 0.)
