##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
MongoDB connection handle for resmongo engines.

This module defines the `MongoConnection` class, a thin wrapper around a
`pymongo.MongoClient` bound to one database. It separates opening the connection
from authenticating it so that each step can fail with its own error, and it
translates driver exceptions into resmongo exceptions.
"""

import logging
from typing import Any, Dict

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from resmongo.config.connection_spec import ConnectionSpec
from resmongo.exceptions import AuthenticationError, DatabaseConnectionError, StoreError


LOG = logging.getLogger(__name__)

# Error code the server returns when credentials are rejected
AUTHENTICATION_FAILED_CODE = 18


class MongoConnection:
    """
    A live connection to one MongoDB database.

    Attributes:
        spec (ConnectionSpec): The target this connection points at.
        client_options (Dict[str, Any]): Extra keyword arguments for `MongoClient`.
        client (MongoClient): The driver client, set once `open` succeeds.

    Methods:
        open: Connect to the server and verify it answers.
        authenticate: Reconnect with credentials and verify the server accepts them.
        collection: Look up a collection in the target database.
        close: Close the driver client.
    """

    def __init__(self, spec: ConnectionSpec, client_options: Dict[str, Any] = None):
        """
        Initialize an unopened connection.

        Args:
            spec: The target to connect to.
            client_options: Extra keyword arguments for `MongoClient`.
        """
        self.spec: ConnectionSpec = spec
        self.client_options: Dict[str, Any] = dict(client_options or {})
        self.client: MongoClient = None

    @property
    def database(self) -> Database:
        """The `pymongo` database object for the target database."""
        if self.client is None:
            raise DatabaseConnectionError(f"Connection to '{self.spec.host}:{self.spec.port}' is not open.")
        return self.client.get_database(self.spec.database)

    def open(self):
        """
        Connect to the server and check that it responds.

        Raises:
            DatabaseConnectionError: If the server cannot be reached.
        """
        LOG.debug(f"Opening connection to {self.spec.host}:{self.spec.port}...")
        try:
            self.client = MongoClient(host=self.spec.host, port=self.spec.port, **self.client_options)
            self.client.get_database("admin").command("ping")
        except PyMongoError as exc:
            self.close()
            raise DatabaseConnectionError(
                f"Could not connect to {self.spec.host}:{self.spec.port}/{self.spec.database}: {exc}"
            ) from exc
        LOG.debug(f"Connection to {self.spec.host}:{self.spec.port} is open.")

    def authenticate(self, username: str, password: str):
        """
        Authenticate against the target database.

        The driver binds credentials to a client, so an authenticated client
        replaces the anonymous one once the server has accepted the credentials.

        Args:
            username: The username to authenticate as.
            password: The password for `username`.

        Raises:
            AuthenticationError: If the server rejects the credentials.
            DatabaseConnectionError: If the server cannot be reached.
        """
        LOG.debug(f"Authenticating as '{username}' against '{self.spec.database}'...")
        authenticated = MongoClient(
            host=self.spec.host,
            port=self.spec.port,
            username=username,
            password=password,
            authSource=self.spec.database,
            **self.client_options,
        )
        try:
            authenticated.get_database(self.spec.database).command("ping")
        except OperationFailure as exc:
            authenticated.close()
            if exc.code == AUTHENTICATION_FAILED_CODE or "auth" in str(exc).lower():
                raise AuthenticationError(f"Authentication failed for user '{username}': {exc}") from exc
            raise DatabaseConnectionError(f"Could not verify credentials for user '{username}': {exc}") from exc
        except ConnectionFailure as exc:
            authenticated.close()
            raise DatabaseConnectionError(f"Lost connection while authenticating '{username}': {exc}") from exc

        self.close()
        self.client = authenticated
        LOG.debug(f"Authenticated as '{username}'.")

    def collection(self, name: str) -> Collection:
        """
        Look up a collection in the target database.

        Args:
            name: The collection name.

        Returns:
            The `pymongo` collection.

        Raises:
            StoreError: If the driver rejects the collection.
        """
        try:
            return self.database.get_collection(name)
        except PyMongoError as exc:
            raise StoreError(f"Could not get collection '{name}': {exc}") from exc

    def close(self):
        """
        Close the driver client if there is one.
        """
        if self.client is not None:
            self.client.close()
            self.client = None
