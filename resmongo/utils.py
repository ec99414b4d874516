##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Module for project-wide utility functions.
"""
import functools
import logging
from typing import Any, Callable, Dict

import yaml

from resmongo.exceptions import ResMongoError


LOG = logging.getLogger(__name__)


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def deliver_to_callback(func: Callable) -> Callable:
    """
    Let an engine operation report through an optional `callback` keyword argument.

    Without a callback the decorated method behaves normally: it returns its result
    and raises its errors. With a callback, the outcome is handed over as
    `callback(error, result)` instead and the method returns None. Only resmongo
    errors are routed to the callback; anything else is a bug and propagates.

    Args:
        func: The engine method to wrap.

    Returns:
        The wrapped method.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, callback: Callable = None, **kwargs: Any) -> Any:
        if callback is None:
            return func(*args, **kwargs)

        try:
            result = func(*args, **kwargs)
        except ResMongoError as exc:
            LOG.debug(f"'{func.__name__}' failed, handing {type(exc).__name__} to callback.")
            callback(exc, None)
            return None

        callback(None, result)
        return None

    return wrapper
