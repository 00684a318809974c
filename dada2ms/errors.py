"""Exceptions raised while building archive metadata."""


class Dada2MSError(RuntimeError):
    """Base class for errors that abort a conversion run."""
    pass


class FormatError(Dada2MSError, ValueError):
    """Exception thrown when an epoch string is not of the form
    ``YYYY-MM-DD-HH:MM:SS[.frac]``.
    """
    pass


class ConversionError(Dada2MSError):
    """Exception thrown when a coordinate frame conversion cannot be resolved."""
    pass


class StructureError(Dada2MSError):
    """Exception thrown when an input table or file does not have the
    expected shape or row ordering.
    """
    pass


class SizeMismatchError(Dada2MSError, ValueError):
    """Exception thrown when source and destination buffers differ in length."""
    pass


class SchemaFrozenError(Dada2MSError):
    """Exception thrown when modifying a table schema after the table has
    been created.
    """
    pass
