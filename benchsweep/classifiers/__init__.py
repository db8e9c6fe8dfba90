"""Classifiers available to result producers.

Contains:
- ZeroR (``zero_r``)
- k-nearest neighbours (``knn``)
"""

from benchsweep.classifiers.base import Classifier
from benchsweep.classifiers.knn import NearestNeighbours
from benchsweep.classifiers.zero_r import ZeroR

__all__ = ["Classifier", "NearestNeighbours", "ZeroR"]
