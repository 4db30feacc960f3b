'''
    File name: reporting.py
    Plots and summaries for inspecting trained classifiers.
'''

from typing import Optional

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from .features import HaarFeature
from .labels import Sign
from .metrics import PredictionStats, detection_rate, error_rates, precision

# Fill colours for the positive and negative sub-rectangles of a feature
SIGN_COLOURS = {Sign.POSITIVE: 'yellow', Sign.NEGATIVE: 'blue'}


def describe(s: PredictionStats) -> str:
    rates = error_rates(s)
    return (f'Precision {precision(s):.2f}, recall {detection_rate(s):.2f}, '
            f'false positive rate {rates.false_positive_rate:.2f}, '
            f'false negative rate {rates.false_negative_rate:.2f}')


def plot_confusion_matrix(c: np.ndarray, title: Optional[str] = None, ax=None):
    if ax is None:
        _, ax = plt.subplots(1)
    total = c.sum()
    sns.heatmap(c / total if total else c, cmap='YlGnBu', annot=True, square=True, fmt='.1%',
                xticklabels=['Predicted negative', 'Predicted positive'],
                yticklabels=['Negative', 'Positive'], ax=ax)
    if title:
        ax.set_title(title)
    return ax


def draw_feature(feature: HaarFeature, window: Optional[np.ndarray] = None, ax=None):
    """Overlay the feature's sub-rectangles on a window image."""
    if ax is None:
        _, ax = plt.subplots(1)
    if window is not None:
        ax.imshow(window, cmap='gray')
    for rect, sign in feature.rectangles():
        ax.add_patch(patches.Rectangle((rect.xmin - .5, rect.ymin - .5), rect.xmax - rect.xmin,
                                       rect.ymax - rect.ymin, facecolor=SIGN_COLOURS[sign], alpha=.6))
    ax.set_title(repr(feature))
    return ax
