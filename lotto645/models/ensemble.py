"""
Per-number classifier ensemble.

Splits a training set by number and fits one fresh classifier per number
(45 in total) from a ModelFamily. Numbers are independent, so fitting fans
out over joblib workers when n_jobs != 1.
"""
import logging

from joblib import Parallel, delayed

from lotto645.config import ALL_NUMBERS, FEATURE_COLUMNS, MAX_NUMBER, MIN_NUMBER
from lotto645.errors import (
    ClassifierTrainingFailure,
    InsufficientHistory,
    MissingClassifierForNumber,
)

logger = logging.getLogger(__name__)


class TrainedEnsemble:
    """
    The fitted classifiers of one family, one slot per number 1-45.

    A slot holds None when that number had no training rows. Read-only after
    construction and safe to share between threads.
    """

    __slots__ = ("family_name", "_slots", "feature_schema")

    def __init__(self, family_name, classifiers, feature_schema=FEATURE_COLUMNS):
        self.family_name = family_name
        self.feature_schema = tuple(feature_schema)
        self._slots = tuple(classifiers.get(n) for n in ALL_NUMBERS)

    def _index(self, number):
        if not MIN_NUMBER <= number <= MAX_NUMBER:
            raise ValueError(f"number {number} outside {MIN_NUMBER}-{MAX_NUMBER}")
        return number - MIN_NUMBER

    def has_classifier(self, number):
        return self._slots[self._index(number)] is not None

    def classifier_for(self, number):
        clf = self._slots[self._index(number)]
        if clf is None:
            raise MissingClassifierForNumber(self.family_name, number)
        return clf

    @property
    def trained_numbers(self):
        return [n for n, clf in zip(ALL_NUMBERS, self._slots) if clf is not None]

    @property
    def missing_numbers(self):
        return [n for n, clf in zip(ALL_NUMBERS, self._slots) if clf is None]

    def __len__(self):
        return len(self.trained_numbers)

    def __repr__(self):
        return f"TrainedEnsemble({self.family_name!r}, {len(self)}/{len(ALL_NUMBERS)} numbers)"


def _fit_number(family, number, X, y):
    """Fit one number's classifier. Returns (number, classifier, error)."""
    try:
        clf = family.new_classifier()
        clf.fit(X, y)
    except (ValueError, TypeError, ArithmeticError) as e:
        return number, None, e
    return number, clf, None


def train_ensemble(dataset, family, n_jobs=1):
    """
    Train one classifier per number on `dataset` using `family`.

    Raises InsufficientHistory on an empty dataset and
    ClassifierTrainingFailure (lowest failing number) if the capability
    rejects any number's data. Numbers without rows are left empty.
    """
    if dataset is None or len(dataset) == 0:
        raise InsufficientHistory(required=1, available=0, unit="training rows")

    logger.info("[Ensemble] Training %s on %d rows...", family.name, len(dataset))
    groups = []
    for number, group in dataset.groupby("number", sort=True):
        X = group[FEATURE_COLUMNS].to_numpy(dtype=float)
        y = group["label"].to_numpy(dtype=bool)
        groups.append((int(number), X, y))

    results = Parallel(n_jobs=n_jobs)(
        delayed(_fit_number)(family, number, X, y) for number, X, y in groups
    )

    classifiers = {}
    for number, clf, error in sorted(results, key=lambda r: r[0]):
        if error is not None:
            raise ClassifierTrainingFailure(family.name, number, error) from error
        classifiers[number] = clf
        logger.debug("[Ensemble] ... %s number %d trained", family.name, number)

    ensemble = TrainedEnsemble(family.name, classifiers)
    if ensemble.missing_numbers:
        logger.warning("[Ensemble] %s: no training rows for numbers %s",
                       family.name, ensemble.missing_numbers)
    logger.info("[Ensemble] %s: %d classifiers trained", family.name, len(ensemble))
    return ensemble
