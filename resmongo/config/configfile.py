##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
This module provides functionality for locating and loading resmongo's optional
application configuration file, and for assembling the connection defaults that
engine configurations fall back on.

An `app.yaml` file may carry a `connection` section such as:

    connection:
      host: db.example.com
      port: 27018
      database: inventory
      safe: true
      client_options:
        serverSelectionTimeoutMS: 5000
"""
import logging
import os
from typing import Any, Dict, Optional

from resmongo.config.config_filepaths import APP_FILENAME, RESMONGO_HOME
from resmongo.exceptions import ConfigurationError
from resmongo.utils import load_yaml


LOG: logging.Logger = logging.getLogger(__name__)

ENV_DATABASE_VAR: str = "RESMONGO_ENV"

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 27017
DEFAULT_DATABASE: str = "test"

CONNECTION_KEYS = ("host", "port", "database", "safe", "client_options")


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads a resmongo YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath: The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.debug(f"No app config file at {filepath}")
        return None
    LOG.debug(f"Reading app config from file {filepath}")
    return load_yaml(filepath) or {}


def find_config_file(path: str = None) -> Optional[str]:
    """
    Locate the resmongo application configuration file (`app.yaml`).

    Without a `path`, the current working directory is checked first and the
    resmongo home directory (`~/.resmongo`) second. With a `path`, only that
    directory is checked.

    Args:
        path: A specific directory to look for `app.yaml`.

    Returns:
        The full path to the `app.yaml` file if found, otherwise `None`.
    """
    if path is None:
        for directory in (os.getcwd(), RESMONGO_HOME):
            app_path = os.path.join(directory, APP_FILENAME)
            if os.path.isfile(app_path):
                return app_path
        return None

    app_path = os.path.join(path, APP_FILENAME)
    if os.path.exists(app_path):
        return app_path

    return None


def get_defaults(path: str = None) -> Dict[str, Any]:
    """
    Build the connection defaults used when an engine configuration leaves a field unset.

    Values come from, in increasing order of precedence: the built-in defaults, the
    `connection` section of `app.yaml`, and the `RESMONGO_ENV` environment variable
    (database name only).

    Args:
        path: A directory to look for `app.yaml` in. If `None`, default search paths are used.

    Returns:
        A dictionary with `host`, `port` and `database` keys, plus `safe` and
        `client_options` when the configuration file sets them.

    Raises:
        ConfigurationError: If the configuration file's `connection` section is not a mapping.
    """
    defaults: Dict[str, Any] = {"host": DEFAULT_HOST, "port": DEFAULT_PORT, "database": DEFAULT_DATABASE}

    filepath = find_config_file(path)
    if filepath is not None:
        app_config = load_config(filepath) or {}
        connection = app_config.get("connection") or {}
        if not isinstance(connection, dict):
            raise ConfigurationError(f"The 'connection' section of {filepath} must be a mapping.")
        for key in CONNECTION_KEYS:
            if connection.get(key) is not None:
                defaults[key] = connection[key]

    env_database = os.environ.get(ENV_DATABASE_VAR)
    if env_database:
        LOG.debug(f"Using default database '{env_database}' from {ENV_DATABASE_VAR}.")
        defaults["database"] = env_database

    return defaults
