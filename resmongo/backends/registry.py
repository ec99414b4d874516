##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Process-wide registry of open database connections and of deferred engine wiring.

Every engine configured against the same canonical identity shares one connection.
Engines created before that connection exists leave a deferred action behind; when
the connection is registered, the actions run in the order they were queued.

For any identity the registry is in exactly one of three states:

- virgin: no connection and no queue
- pending: no connection and a non-empty queue
- ready: a connection and no queue

The module-level `CONNECTIONS` object is the registry shared by the whole process.
It starts empty and is never torn down.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from resmongo.config.connection_spec import redact_identity


LOG = logging.getLogger(__name__)

DeferredAction = Callable[[str], None]


class ConnectionRegistry:
    """
    Maps canonical connection identities to live connections and to the actions
    waiting on them.

    All access to the two maps is serialized by one re-entrant lock. Deferred actions
    always run outside of the lock.

    Attributes:
        _connections (Dict[str, Any]): Identity to live connection handle.
        _deferred (Dict[str, List[DeferredAction]]): Identity to queued actions.

    Methods:
        lookup: Return the connection registered for an identity.
        register: Install the connection for an identity, keeping any existing one.
        enqueue_deferred: Queue an action until an identity's connection is registered.
        drain_deferred: Run and discard every action queued for an identity.
        pending: Return how many actions are queued for an identity.
        reset: Forget every connection and queued action.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._lock = threading.RLock()
        self._connections: Dict[str, Any] = {}
        self._deferred: Dict[str, List[DeferredAction]] = {}

    def lookup(self, identity: str) -> Optional[Any]:
        """
        Return the connection registered for `identity`.

        Args:
            identity: The canonical connection identity.

        Returns:
            The live connection handle, or None if there isn't one.
        """
        with self._lock:
            return self._connections.get(identity)

    def register(self, identity: str, handle: Any) -> Any:
        """
        Install `handle` as the connection for `identity`.

        A registered connection is never replaced. If another connection won the
        race for this identity, that one is returned and the caller should adopt it.

        Args:
            identity: The canonical connection identity.
            handle: The newly opened connection.

        Returns:
            The connection now registered for `identity`.
        """
        with self._lock:
            existing = self._connections.get(identity)
            if existing is not None:
                LOG.debug(f"A connection for '{redact_identity(identity)}' is already registered; keeping it.")
                return existing
            self._connections[identity] = handle
        LOG.debug(f"Registered connection for '{redact_identity(identity)}'.")
        return handle

    def enqueue_deferred(self, identity: str, action: DeferredAction):
        """
        Queue `action` to run once a connection for `identity` is registered.

        If the connection is already registered the action runs right away, so an
        identity never holds a connection and a queue at the same time.

        Args:
            identity: The canonical connection identity.
            action: A callable taking the identity once its connection is ready.
        """
        with self._lock:
            ready = identity in self._connections
            if not ready:
                queue = self._deferred.setdefault(identity, [])
                queue.append(action)
                LOG.debug(f"Deferred action #{len(queue)} queued for '{redact_identity(identity)}'.")

        if ready:
            action(identity)

    def drain_deferred(self, identity: str):
        """
        Run every action queued for `identity`, first in first out, then drop the queue.

        Actions run one after another; each finishes before the next one starts.

        Args:
            identity: The canonical connection identity.
        """
        with self._lock:
            actions = self._deferred.pop(identity, [])

        if actions:
            LOG.info(f"Running {len(actions)} deferred action(s) for '{redact_identity(identity)}'.")

        for position, action in enumerate(actions, start=1):
            try:
                action(identity)
            except Exception:
                LOG.error(f"Deferred action #{position} for '{redact_identity(identity)}' failed.")
                raise

    def pending(self, identity: str) -> int:
        """
        Return how many actions are queued for `identity`.

        Args:
            identity: The canonical connection identity.

        Returns:
            The number of queued actions.
        """
        with self._lock:
            return len(self._deferred.get(identity, []))

    def reset(self):
        """
        Forget every registered connection and queued action.

        Connections are not closed. This is meant for test suites that need a clean
        registry between cases.
        """
        with self._lock:
            self._connections.clear()
            self._deferred.clear()


CONNECTIONS = ConnectionRegistry()
