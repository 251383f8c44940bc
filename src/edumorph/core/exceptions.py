"""
Custom exceptions for EduMorph

This module contains all custom exceptions used throughout the application.
"""


class EduMorphException(Exception):
    """Base exception for all EduMorph exceptions"""


class ValidationError(EduMorphException):
    """Raised when validation fails"""


class AuthenticationError(EduMorphException):
    """Raised when authentication fails"""


class DatabaseError(EduMorphException):
    """Raised when the document store cannot be read or written"""


class NotFoundError(EduMorphException):
    """Raised when a requested document does not exist"""


class NoPerformanceDataError(NotFoundError):
    """Raised when a student has no recorded progress yet"""


class EncryptionError(EduMorphException):
    """Raised when encryption/decryption fails"""
