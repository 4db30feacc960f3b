'''
    File name: errors.py
    Exceptions raised by the cascade training engine.
'''


class CascadeError(Exception):
    """Base class for every error raised by face_cascade."""


class InputShapeError(CascadeError):
    """Training data does not have the shape the engine expects."""


class ConfigurationError(CascadeError):
    """A configuration value was rejected before training started."""


class TrainingError(CascadeError):
    """An invariant broke while training.

    When raised out of the cascade trainer, ``cascade`` holds the stages
    built so far, marked incomplete.
    """

    def __init__(self, message: str, cascade=None):
        super().__init__(message)
        self.cascade = cascade
