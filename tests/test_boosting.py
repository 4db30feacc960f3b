import numpy as np
import pytest
from conftest import FACE, NON_FACE, make_set

from face_cascade.boosting import (PERFECT_STUMP_WEIGHT, StageOutcome, boosting_round, compute_alpha,
                                   initial_distribution, select_features, stage_finished, train_stage,
                                   update_distribution)
from face_cascade.config import CascadeConfig, StoppingPolicy
from face_cascade.errors import TrainingError
from face_cascade.labels import Classification
from face_cascade.metrics import ErrorRates
from face_cascade.weak import best_stump


def test_alpha():
    assert compute_alpha(.1) == pytest.approx(.5 * np.log(9.))
    assert compute_alpha(.5) == pytest.approx(0.)


def test_update_distribution_upweights_mistakes():
    distribution = np.full(4, .25)
    signs = np.array([1, 1, -1, -1])
    votes = np.array([1, -1, -1, -1])
    updated = update_distribution(distribution, signs, votes, compute_alpha(.25))
    assert updated.sum() == pytest.approx(1.)
    assert updated[1] > updated[0]
    assert updated[0] == pytest.approx(updated[2])
    # Misclassified mass becomes one half after the update
    assert updated[1] == pytest.approx(.5)


def test_update_distribution_collapse_raises():
    with pytest.raises(TrainingError):
        update_distribution(np.zeros(2), np.array([1, -1]), np.array([1, -1]), 1.)


def test_initial_distribution(two_round_set):
    uniform = initial_distribution(two_round_set)
    assert uniform.tolist() == pytest.approx([1. / 6] * 6)
    balanced = initial_distribution(two_round_set, balanced=True)
    assert balanced.sum() == pytest.approx(1.)
    assert balanced[:2].tolist() == pytest.approx([.25, .25])
    assert balanced[2:].tolist() == pytest.approx([.125] * 4)


def test_boosting_round_leaves_its_input_untouched(pair_features, two_round_set):
    distribution = initial_distribution(two_round_set)
    before = distribution.copy()
    result = boosting_round(pair_features, two_round_set, distribution, n_jobs=1)
    assert np.array_equal(distribution, before)
    assert result.error == pytest.approx(1. / 6)
    assert result.alpha == pytest.approx(.5 * np.log(5.))
    assert result.distribution.sum() == pytest.approx(1.)


def test_end_to_end_perfect_feature(pair_features, separable_set, config):
    stump, error = best_stump(pair_features, separable_set, initial_distribution(separable_set), n_jobs=1)
    assert error == 0.
    assert stump.feature_id == 0

    stage = train_stage(pair_features, separable_set, config)
    assert stage.outcome is StageOutcome.PERFECT_STUMP
    assert stage.rounds == 1
    assert len(stage.classifier) == 1
    assert stage.classifier.weights == [PERFECT_STUMP_WEIGHT]
    assert [stage.classifier.evaluate(i) for i in separable_set.integrals] == [
        Classification.FACE, Classification.FACE, Classification.NON_FACE, Classification.NON_FACE]
    assert stage.history[-1].rates == ErrorRates(0., 0., 0.)


def test_overall_error_never_increases(pair_features, two_round_set, config):
    stage = train_stage(pair_features, two_round_set, config)
    errors = [record.rates.overall_error for record in stage.history]
    assert errors == pytest.approx([1. / 6, 0.])
    assert all(later < earlier for earlier, later in zip(errors, errors[1:]))
    assert stage.outcome is StageOutcome.TARGET_REACHED
    assert stage.rounds == 2
    assert {record.stump.feature_id for record in stage.history} == {0, 1}
    assert stage.history[1].error == pytest.approx(.1)


def test_min_rounds_holds_a_stage_open(pair_features, two_round_set):
    config = CascadeConfig(max_false_positive_rate=.5, min_rounds=2, n_jobs=1)
    stage = train_stage(pair_features, two_round_set, config)
    # One stump already meets the target, but two rounds are required
    assert stage.history[0].rates.false_positive_rate == .25
    assert stage.rounds == 2


def test_max_rounds_policy(pair_features, two_round_set):
    config = CascadeConfig(stopping=StoppingPolicy.MAX_ROUNDS, max_rounds=1, n_jobs=1)
    stage = train_stage(pair_features, two_round_set, config)
    assert stage.outcome is StageOutcome.ROUND_LIMIT
    assert len(stage.classifier) == 1


def test_round_cap_under_false_positive_policy():
    config = CascadeConfig(max_false_positive_rate=0., min_rounds=1, max_rounds=3)
    rates = ErrorRates(.5, 0., .25)
    assert stage_finished(config, 2, rates) is None
    assert stage_finished(config, 3, rates) is StageOutcome.ROUND_LIMIT
    assert stage_finished(config, 1, ErrorRates(0., 0., 0.)) is StageOutcome.TARGET_REACHED


def test_stage_without_a_useful_feature_fails(pair_features, config):
    training_set = make_set([(3, 3, FACE), (3, 3, NON_FACE)])
    with pytest.raises(TrainingError):
        train_stage(pair_features, training_set, config)


def test_feature_selection_is_seeded():
    first = select_features(1000, .25, np.random.default_rng(7))
    second = select_features(1000, .25, np.random.default_rng(7))
    assert np.array_equal(first, second)
    assert 150 < len(first) < 350
    assert select_features(1000, 1., np.random.default_rng(7)) is None
    assert select_features(1000, .25, None) is None


def test_sub_sampled_stage_still_trains(pair_features, two_round_set):
    config = CascadeConfig(max_false_positive_rate=0., min_rounds=1, max_rounds=20,
                           feature_keep_probability=.5, seed=3, n_jobs=1)
    first = train_stage(pair_features, two_round_set, config, np.random.default_rng(config.seed))
    second = train_stage(pair_features, two_round_set, config, np.random.default_rng(config.seed))
    assert 1 <= len(first.classifier) <= 20
    assert first.classifier.classifiers == second.classifier.classifiers
    assert first.outcome is second.outcome
