##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Storage engine infrastructure for resmongo.

The `backends` package binds resource documents to MongoDB. It shares one connection
per database target across every engine, lets engines be defined before that
connection is opened, and converts document identifiers between their string and
`ObjectId` forms.

Modules:
    connection: Contains `MongoConnection`, the driver wrapper that opens and authenticates connections.
    connection_manager: Contains `ConnectionManager`, which reuses, opens, or defers an engine's connection.
    engine_base: Defines the abstract `ResourceEngine` base class for storage engines.
    engine_factory: Contains `EngineFactory`, used to select and instantiate an engine by name.
    identifiers: Conversions between string and native document identifiers.
    mongo_engine: Contains `MongoEngine`, the MongoDB storage engine.
    registry: The process-wide registry of connections and deferred engine wiring.
"""
