"""
Error types raised while converting a ROM catalogue.

Every fatal condition in the pipeline is a CatalogueError subclass carrying
the offending line, section and catalogue key where they are known.
"""

from typing import Optional, Any, Dict


class CatalogueError(Exception):
    """
    Base exception for all catalogue conversion errors.

    Provides common location tracking for diagnostics.
    """

    def __init__(self, message: str,
                 line: Optional[int] = None,
                 section: Optional[str] = None,
                 key: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize catalogue error.

        Args:
            message: Error message
            line: 1-based line number in the catalogue text
            section: Identity key of the section being processed
            key: Catalogue key involved (e.g. 'SaveType')
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.line = line
        self.section = section
        self.key = key
        self.details = details or {}

        self.details.update({
            'line': line,
            'section': section,
            'key': key
        })

    def __str__(self) -> str:
        location = []
        if self.line is not None:
            location.append(f"line {self.line}")
        if self.section is not None:
            location.append(f"section [{self.section}]")
        if self.key is not None:
            location.append(f"key {self.key}")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"


class MalformedLine(CatalogueError):
    """Raised when a line does not follow the catalogue grammar."""
    pass


class InvalidEnumValue(CatalogueError):
    """Raised when a text token does not map to a known enum member."""

    def __init__(self, message: str, value: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.value = value
        self.details['value'] = value


class OutOfRangeValue(CatalogueError):
    """Raised when a numeric field is non-numeric or outside its valid range."""

    def __init__(self, message: str, value: str = "",
                 minimum: Optional[int] = None,
                 maximum: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.details.update({
            'value': value,
            'minimum': minimum,
            'maximum': maximum
        })


class StringTableFull(CatalogueError):
    """Raised when interning a new value would exceed the table capacity."""

    def __init__(self, message: str, capacity: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.capacity = capacity
        self.details['capacity'] = capacity


class UnresolvedReference(CatalogueError):
    """Raised (in strict mode) when a reference entry has no target."""

    def __init__(self, message: str, reference_key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.reference_key = reference_key
        self.details['reference_key'] = reference_key


class DuplicateIdentityKey(CatalogueError):
    """Raised when two sections share the same identity key."""

    def __init__(self, message: str, first_line: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.first_line = first_line
        self.details['first_line'] = first_line


class UnknownKey(CatalogueError):
    """Raised for unrecognized keys when the parser runs in strict mode."""
    pass
