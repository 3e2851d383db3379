"""Classifier error taxonomy."""

from __future__ import annotations


class ClassifierError(Exception):
    """Base class for frame classification failures."""


class ModelUnavailable(ClassifierError):
    """The classifier could not be loaded; translation cannot start."""


class InvalidInput(ClassifierError):
    """A frame could not be converted into the classifier's input format."""


class InferenceFailed(ClassifierError):
    """The underlying interpreter raised while classifying a frame."""
