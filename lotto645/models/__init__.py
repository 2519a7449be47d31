"""
Lotto 6/45 classifier models

- families: named classifier recipes (Logistic, RandomForest_100/500,
  DecisionTree_Pruned/Unpruned) behind the ProbabilisticClassifier capability
- ensemble: one classifier per number 1-45, trained from a family
"""

from . import families
from . import ensemble

__all__ = [
    "families",
    "ensemble",
]
