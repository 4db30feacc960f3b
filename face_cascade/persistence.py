'''
    File name: persistence.py
    Saving and loading trained cascades.

    Cascades are stored as JSON with each stump's feature descriptor
    inlined; loading rebuilds a feature catalog holding only the features
    the stumps use. Training also pickles every finished stage.
'''

import json
import os
import pickle
from typing import Dict, List

from .cascade import Cascade
from .features import HaarFeature
from .labels import Sign
from .strong import StrongClassifier
from .weak import WeakClassifier

FORMAT_VERSION = 1


def stage_to_dict(stage: StrongClassifier) -> Dict:
    return {
        'classifiers': [{'feature': stage.features[c.feature_id].to_descriptor(),
                         'threshold': c.threshold,
                         'polarity': c.polarity.value} for c in stage.classifiers],
        'weights': list(stage.weights),
        'threshold': stage.threshold,
        'calibration_percentile': stage.calibration_percentile,
    }


def stage_from_dict(data: Dict, features: List[HaarFeature], index: Dict[HaarFeature, int]) -> StrongClassifier:
    classifiers = []
    for c in data['classifiers']:
        feature = HaarFeature.from_descriptor(c['feature'])
        if feature not in index:
            index[feature] = len(features)
            features.append(feature)
        classifiers.append(WeakClassifier(index[feature], c['threshold'], Sign(c['polarity'])))
    return StrongClassifier(features, data.get('calibration_percentile', 0.05), classifiers,
                            [float(w) for w in data['weights']], float(data['threshold']))


def cascade_to_dict(cascade: Cascade) -> Dict:
    return {'version': FORMAT_VERSION,
            'complete': cascade.complete,
            'stages': [stage_to_dict(stage) for stage in cascade]}


def cascade_from_dict(data: Dict) -> Cascade:
    if data.get('version') != FORMAT_VERSION:
        raise ValueError(f'unsupported cascade format version: {data.get("version")}')
    features: List[HaarFeature] = []
    index: Dict[HaarFeature, int] = {}
    stages = [stage_from_dict(stage, features, index) for stage in data['stages']]
    return Cascade(features, stages, complete=bool(data['complete']))


def save_cascade(cascade: Cascade, path: str):
    with open(path, 'w') as f:
        json.dump(cascade_to_dict(cascade), f, indent=2)


def load_cascade(path: str) -> Cascade:
    with open(path) as f:
        return cascade_from_dict(json.load(f))


def checkpoint_path(directory: str, stage: int, max_depth: int) -> str:
    return os.path.join(directory, f'stage-{stage}-of-{max_depth}.pickle')


def save_checkpoint(stage: StrongClassifier, directory: str, number: int, max_depth: int) -> str:
    os.makedirs(directory, exist_ok=True)
    path = checkpoint_path(directory, number, max_depth)
    with open(path, 'wb') as f:
        pickle.dump(stage_to_dict(stage), f)
    return path


def load_checkpoint(path: str) -> StrongClassifier:
    with open(path, 'rb') as f:
        data = pickle.load(f)
    return stage_from_dict(data, [], {})
