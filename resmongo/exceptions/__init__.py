##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Module of all resmongo-specific exception types.
"""

# Pylint complains that these exceptions are no different from Exception
# but we don't care, we just need new names for exceptions here
# pylint: disable=W0235

__all__ = (
    "ResMongoError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "AuthenticationError",
    "InvalidIdentifierError",
    "StoreError",
    "EngineNotSupportedError",
)


class ResMongoError(Exception):
    """
    Base class for every error raised by resmongo.
    """


class ConfigurationError(ResMongoError):
    """
    Exception to signal that an engine configuration is incomplete or malformed
    (e.g. neither a collection nor an `on_connect` callback was given).
    """


class DatabaseConnectionError(ResMongoError):
    """
    Exception to signal that a connection to the database could not be opened,
    or that an engine was used before its connection became ready.
    """


class AuthenticationError(ResMongoError):
    """
    Exception to signal that the database rejected the supplied credentials.
    """


class InvalidIdentifierError(ResMongoError):
    """
    Exception to signal that a string identifier could not be converted
    to a native database identifier.
    """


class StoreError(ResMongoError):
    """
    Exception wrapping an error reported by the database driver.
    """


class EngineNotSupportedError(ResMongoError):
    """
    Exception to signal that the provided storage engine is not supported.
    """
