##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
resmongo: a MongoDB storage engine for resource-oriented persistence layers.

This module contains the source code for resmongo.
"""


__version__ = "0.4.0"
VERSION = __version__
