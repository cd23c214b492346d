"""
crmdml.exceptions
~~~~~~~~~~~~~~~~~

This module implements the errors raised by persistence providers.
"""


class PersistenceError(Exception):
    """ Base error for a rejected persistence call.

    :param message: A `str` summary of the failure.
    :param errors: A `list` of error `dict` objects in the shape Salesforce
                   reports them (`statusCode`, `message`, `fields`).
    """

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.message: str = message
        self.errors: list = errors or []


class ValidationError(PersistenceError):
    """ A record failed validation; the whole batch was rejected. """


class NotFoundError(PersistenceError):
    """ A record Id is unknown or was already deleted. """
