##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Used to resolve engine configuration.

The `config` package turns the raw configuration handed to an engine (explicit fields
or a connection URI) into a canonical `ConnectionSpec`, and loads the optional
`app.yaml` file that supplies connection defaults.

Modules:
    config_filepaths.py: Constants for the locations of configuration files.
    configfile.py: Loads connection defaults from `app.yaml` and the environment.
    connection_spec.py: Normalizes engine configuration and builds `ConnectionSpec` objects.
"""
