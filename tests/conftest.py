##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import os
from glob import glob
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from resmongo.backends.registry import CONNECTIONS
from resmongo.config.configfile import ENV_DATABASE_VAR
from tests.fixture_types import FixtureModification


# pylint: disable=redefined-outer-name


#######################################
# Loading in Module Specific Fixtures #
#######################################

fixture_glob = os.path.join(os.path.dirname(__file__), "fixtures", "**", "*.py")
pytest_plugins = [
    "tests." + os.path.relpath(fixture_file, os.path.dirname(__file__)).replace(os.sep, ".")[: -len(".py")]
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


#######################################
######### Fixture Definitions #########
#######################################


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: MonkeyPatch) -> FixtureModification:
    """
    Keep the user's environment and any `app.yaml` out of the tests.

    The working directory and the resmongo home directory both point at an empty
    temporary directory, and the default database environment variable is unset.

    Args:
        tmp_path: A built-in fixture from pytest providing a temporary directory.
        monkeypatch: A built-in fixture from pytest for patching the environment.
    """
    monkeypatch.delenv(ENV_DATABASE_VAR, raising=False)
    monkeypatch.setattr("resmongo.config.configfile.RESMONGO_HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_connection_registry() -> FixtureModification:
    """
    Give every test an empty process-wide connection registry.
    """
    CONNECTIONS.reset()
    yield
    CONNECTIONS.reset()
