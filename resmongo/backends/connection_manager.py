##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Connection lifecycle for resmongo engines.

Each engine owns a `ConnectionManager`. When the engine is constructed the manager
takes exactly one of three paths:

1. Reuse: a connection for the engine's identity is already registered.
2. Open: no connection exists and the engine was given an `on_connect` callback,
   so a new connection is opened (and authenticated if credentials were given),
   registered, and every engine waiting on it is wired up.
3. Defer: no connection exists and there is no callback, so the engine waits in
   the registry's deferred queue until another engine opens the connection.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from resmongo.backends.connection import MongoConnection
from resmongo.backends.registry import CONNECTIONS, ConnectionRegistry
from resmongo.config.connection_spec import ConnectionSpec
from resmongo.exceptions import AuthenticationError, DatabaseConnectionError


LOG = logging.getLogger(__name__)

ConnectCallback = Callable[[Optional[Exception]], None]


class ConnectionState(Enum):
    """
    States a `ConnectionManager` moves through.

    `READY` and `FAILED` are terminal. `AWAITING` means the engine is queued in the
    registry until another engine opens the connection.
    """

    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    AWAITING = "awaiting"
    READY = "ready"
    FAILED = "failed"


class ConnectionManager:
    """
    Gets an engine a connection for its target.

    Attributes:
        spec (ConnectionSpec): The target to connect to.
        on_connect (Optional[ConnectCallback]): Called with None once the connection is
            ready, or with the error that stopped it.
        registry (ConnectionRegistry): The registry of shared connections.
        client_options (Dict[str, Any]): Extra keyword arguments for the driver client.
        connection (Optional[MongoConnection]): The connection, once ready.
        state (ConnectionState): The current lifecycle state.
        error (Optional[Exception]): The error that moved the manager to `FAILED`.

    Methods:
        establish: Reuse, open, or defer the connection.
        is_ready: Whether the connection can be used.
    """

    def __init__(
        self,
        spec: ConnectionSpec,
        on_connect: Optional[ConnectCallback] = None,
        registry: ConnectionRegistry = None,
        client_options: Dict[str, Any] = None,
    ):
        """
        Initialize an unconnected manager.

        Args:
            spec: The target to connect to.
            on_connect: Callback to invoke when the connection is ready or fails.
            registry: The registry of shared connections. Defaults to the process-wide one.
            client_options: Extra keyword arguments for the driver client.
        """
        self.spec: ConnectionSpec = spec
        self.on_connect: Optional[ConnectCallback] = on_connect
        self.registry: ConnectionRegistry = registry if registry is not None else CONNECTIONS
        self.client_options: Dict[str, Any] = client_options or {}
        self.connection: Optional[MongoConnection] = None
        self.state: ConnectionState = ConnectionState.UNCONNECTED
        self.error: Optional[Exception] = None

    def _transition(self, state: ConnectionState):
        LOG.debug(f"Connection to '{self.spec.display}': {self.state.value} -> {state.value}.")
        self.state = state

    def is_ready(self) -> bool:
        """
        Check whether the connection can be used.

        Returns:
            True if the manager is in the `READY` state.
        """
        return self.state is ConnectionState.READY

    def establish(self):
        """
        Reuse a registered connection, open a new one, or defer until one exists.

        `on_connect` is only called on the open path.
        """
        handle = self.registry.lookup(self.spec.identity)
        if handle is not None:
            LOG.debug(f"Reusing the connection registered for '{self.spec.display}'.")
            self.connection = handle
            self._transition(ConnectionState.READY)
        elif self.on_connect is not None:
            self._open()
        else:
            self._defer()

    def _fail(self, error: Exception):
        """
        Move to `FAILED` and report `error` to the `on_connect` callback.

        Args:
            error: The error that stopped the connection.
        """
        self.error = error
        self._transition(ConnectionState.FAILED)
        self.on_connect(error)

    def _open(self):
        """
        Open, authenticate and register a new connection, then wire up waiting engines.
        """
        self._transition(ConnectionState.CONNECTING)
        connection = MongoConnection(self.spec, self.client_options)
        try:
            connection.open()
        except DatabaseConnectionError as exc:
            LOG.error(f"Failed to connect to '{self.spec.host}:{self.spec.port}': {exc}")
            self._fail(exc)
            return

        if self.spec.has_credentials:
            self._transition(ConnectionState.AUTHENTICATING)
            try:
                connection.authenticate(self.spec.username, self.spec.password)
            except (AuthenticationError, DatabaseConnectionError) as exc:
                LOG.error(f"Authentication failed: {exc}")
                connection.close()
                self._fail(exc)
                return

        registered = self.registry.register(self.spec.identity, connection)
        if registered is not connection:
            connection.close()
        self.connection = registered
        self._transition(ConnectionState.READY)
        LOG.info(f"Connected to {self.spec.host}:{self.spec.port}/{self.spec.database}.")

        self.registry.drain_deferred(self.spec.identity)
        self.on_connect(None)

    def _defer(self):
        """
        Queue this manager to pick up the connection once another engine registers it.
        """

        def wire(identity: str):
            self.connection = self.registry.lookup(identity)
            self._transition(ConnectionState.READY)

        self._transition(ConnectionState.AWAITING)
        self.registry.enqueue_deferred(self.spec.identity, wire)
