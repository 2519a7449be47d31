"""
Model families and the trainable-classifier capability.

A ModelFamily is a named recipe for fresh, untrained classifiers. The core
only needs the ProbabilisticClassifier capability (fit + predict_probability),
so any library can back a family; the defaults wrap scikit-learn estimators.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.tree import DecisionTreeClassifier

RANDOM_STATE = 42


class ProbabilisticClassifier(ABC):
    """What the pipeline needs from a trainable binary classifier."""

    @abstractmethod
    def fit(self, rows, labels):
        """Fit on a 2-D feature matrix and boolean labels. Returns self."""

    @abstractmethod
    def predict_probability(self, row):
        """Probability that `row` (one feature vector) has label True."""

    def predict_probabilities(self, rows):
        return [self.predict_probability(row) for row in rows]


class SklearnClassifier(ProbabilisticClassifier):
    """Adapter from a scikit-learn estimator with predict_proba."""

    def __init__(self, estimator):
        self.estimator = estimator

    def fit(self, rows, labels):
        X = np.asarray(rows, dtype=float)
        y = np.asarray(labels, dtype=bool)
        self.estimator.fit(X, y)
        return self

    def predict_probabilities(self, rows):
        X = np.atleast_2d(np.asarray(rows, dtype=float))
        proba = self.estimator.predict_proba(X)
        classes = list(self.estimator.classes_)
        if True in classes:
            return proba[:, classes.index(True)].tolist()
        # Fitted on all-False labels: the positive class was never seen
        return [0.0] * len(X)

    def predict_probability(self, row):
        return self.predict_probabilities([row])[0]

    def __repr__(self):
        return f"SklearnClassifier({self.estimator!r})"


@dataclass(frozen=True)
class ModelFamily:
    """A stable name plus a factory for untrained classifiers."""

    name: str
    factory: Callable[[], ProbabilisticClassifier]

    def new_classifier(self):
        return self.factory()


def sklearn_family(name, make_estimator):
    """Family whose classifiers wrap a fresh estimator from `make_estimator()`."""
    return ModelFamily(name, lambda: SklearnClassifier(make_estimator()))


def default_families() -> Dict[str, ModelFamily]:
    """The candidate families compared in every backtest."""
    families = [
        sklearn_family("Logistic", lambda: LogisticRegression(max_iter=1000)),
        sklearn_family("RandomForest_100", lambda: RandomForestClassifier(
            n_estimators=100, random_state=RANDOM_STATE)),
        sklearn_family("RandomForest_500", lambda: RandomForestClassifier(
            n_estimators=500, random_state=RANDOM_STATE)),
        sklearn_family("DecisionTree_Pruned", lambda: DecisionTreeClassifier(
            min_samples_leaf=2, ccp_alpha=0.001, random_state=RANDOM_STATE)),
        sklearn_family("DecisionTree_Unpruned", lambda: DecisionTreeClassifier(
            random_state=RANDOM_STATE)),
    ]
    return {f.name: f for f in families}
