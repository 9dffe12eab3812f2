"""Exception hierarchy for signalon.

All custom exceptions inherit from SignalError base class.

By default the dispatcher logs these conditions and returns ``None``;
they are raised only when the dispatcher runs with ``strict=True``.
"""


class SignalError(Exception):
    """Base exception for all signalon errors.

    All custom exceptions in the signalon package inherit from this class,
    allowing users to catch all framework-specific errors with a single except clause.
    """


class TopicError(SignalError, ValueError):
    """Topic string does not match the ``emitter:event`` pattern.

    Raised when:
    - Subscribing or detaching with a malformed (wildcard) topic
    - Emitting or defining a topic that is not fully concrete
    """


class EmitterNameError(SignalError, ValueError):
    """Emitter name cannot be resolved or is malformed.

    Raised when a ``this:`` subscription is made for an owner that has no
    emitter name, or when an invalid name is assigned to an emitter.
    """


class ReentrantEmitError(SignalError, RuntimeError):
    """Topic was emitted from within its own dispatch.

    The inner emission is dropped without invoking any subscriber.
    """


class SettingsError(SignalError, ValueError):
    """Dispatcher settings failed validation.

    This wraps pydantic.ValidationError to provide a framework-specific exception type.
    """
