import matplotlib.pyplot as plt
import numpy as np
import pytest

from face_cascade.features import FeatureType, HaarFeature
from face_cascade.metrics import ErrorRates, PredictionStats, error_rates, prediction_stats
from face_cascade.reporting import describe, draw_feature, plot_confusion_matrix


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


def test_prediction_stats():
    c, s = prediction_stats(np.array([1, 1, 0, 0, 0]), np.array([1, 0, 1, 0, 0]))
    assert c.tolist() == [[2, 1], [1, 1]]
    assert s == PredictionStats(tn=2, fp=1, fn=1, tp=1)
    assert error_rates(s) == ErrorRates(false_positive_rate=1. / 3, false_negative_rate=.5, overall_error=.4)


def test_prediction_stats_with_a_single_class():
    c, s = prediction_stats(np.array([0, 0]), np.array([0, 0]))
    assert c.shape == (2, 2)
    assert error_rates(s) == ErrorRates(0., 0., 0.)


def test_describe():
    assert describe(PredictionStats(tn=3, fp=1, fn=0, tp=4)) == (
        'Precision 0.80, recall 1.00, false positive rate 0.25, false negative rate 0.00')


def test_plot_confusion_matrix():
    c, _ = prediction_stats(np.array([1, 0, 0]), np.array([1, 1, 0]))
    ax = plot_confusion_matrix(c, title='Strong classifier (Stage 1)')
    assert ax.get_title() == 'Strong classifier (Stage 1)'
    assert [t.get_text() for t in ax.get_xticklabels()] == ['Predicted negative', 'Predicted positive']


def test_draw_feature():
    feature = HaarFeature(FeatureType.TWO_BY_TWO, 1, 2, 3, 2)
    ax = draw_feature(feature, np.zeros((8, 8)))
    assert len(ax.patches) == 4
    assert ax.get_title() == repr(feature)
