"""
Error taxonomy shared by the core library and the API layer.

Request-shape and configuration problems fail fast (raised before any streaming
starts). Persistence problems never raise: the store returns None and the engine
reports False/None. Mid-stream provider failures are delivered in-band as an
ErrorEvent, see academy.tutor.events.
"""


class AcademyError(Exception):
    """Base class for all academy errors."""


class InvalidUserError(AcademyError):
    """Progress operation called without a usable user id."""


class SubmissionError(AcademyError):
    """Malformed chat submission (missing messages, module or lesson id)."""


class ConfigurationError(AcademyError):
    """Required model-access configuration is absent."""


class StreamError(AcademyError):
    """Provider failure after the response stream has started."""


class NotFoundError(AcademyError):
    """Unknown module or lesson id in a catalog lookup."""
