"""Exceptions raised while building a dissemination package."""


class PackagingError(Exception):
    """Base class for errors that abort a packaging run."""

    pass


class MissingFindingAidReferenceError(PackagingError):
    """Raised when the structural template does not reference a finding aid."""

    pass


class UnsupportedObjectTypeError(PackagingError):
    """Raised when the requested package object type is not supported."""

    pass


class TemplateCompatibilityError(PackagingError):
    """Raised when the structural template lacks the placeholder we fill in."""

    pass


class BaseIdentifierError(PackagingError):
    """Raised when no base identifier can be determined for the package."""

    pass


class QueueWriteError(PackagingError):
    """Raised when a job descriptor cannot be handed to the queue."""

    pass


class DuplicateJobError(QueueWriteError):
    """Raised when a job id is already present in the queue."""

    pass
