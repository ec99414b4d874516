##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
MongoDB storage engine implementation for resmongo.

This module provides `MongoEngine`, a concrete implementation of the `ResourceEngine`
interface. An engine is bound to one collection of one database. Engines pointed at
the same target share a single connection through the process-wide registry, and an
engine may be defined before that connection has been opened.

Example:
    ```python
    def connected(error):
        if error:
            raise error

    MongoEngine(uri="localhost/inventory", on_connect=connected)
    books = MongoEngine(collection="books", uri="localhost/inventory")
    saved = books.save({"title": "Dune"})
    books.get(saved["_id"])
    ```
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from bson.errors import BSONError
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult
from pymongo.write_concern import WriteConcern

from resmongo.backends.connection import MongoConnection
from resmongo.backends.connection_manager import ConnectionManager
from resmongo.backends.engine_base import ResourceEngine
from resmongo.backends.identifiers import (
    ID_FIELD,
    externalize_document,
    id_filter,
    id_list_filter,
    to_external,
    to_native,
)
from resmongo.config.connection_spec import ConnectionSpec, normalize_config
from resmongo.exceptions import ConfigurationError, DatabaseConnectionError, InvalidIdentifierError, StoreError
from resmongo.utils import deliver_to_callback


LOG = logging.getLogger(__name__)

# Errors the driver raises for rejected operations and for documents it cannot encode
STORE_ERRORS = (PyMongoError, BSONError)


class MongoEngine(ResourceEngine):
    """
    A MongoDB-backed implementation of the `ResourceEngine` interface.

    Identifiers are strings outside of this class and `ObjectId`s inside the
    database. Every CRUD method also accepts a `callback(error, result)` keyword
    argument; see [`deliver_to_callback`][utils.deliver_to_callback].

    Attributes:
        protocol (str): Always `"mongodb"`.
        config (Dict[str, Any]): The normalized engine configuration.
        spec (ConnectionSpec): The connection target.
        manager (ConnectionManager): Tracks this engine's connection.

    Methods:
        collection: Resolve (once) the collection this engine works on.
        save: Create or replace a document.
        update: Merge fields into an existing document.
        get: Fetch a single document by identifier.
        find: Fetch every document matching a list of identifiers or a filter.
        destroy: Remove the documents matching an identifier.
    """

    protocol: str = "mongodb"

    def __init__(self, collection: str = None, on_connect: Callable[[Optional[Exception]], None] = None, **config: Any):
        """
        Initialize the engine and get it a connection.

        Args:
            collection: The name of the collection to work on.
            on_connect: Callback invoked with None once a new connection is ready,
                or with the error that prevented it. Supplying it makes this engine
                open the connection when none is registered yet. It is invoked only
                when this engine opens the connection; an engine that reuses an
                already registered connection never calls it.
            **config: Connection settings: `uri`, `host`, `port`, `database`, `auth`,
                `safe` and `client_options`.

        Raises:
            ConfigurationError: If neither `collection` nor `on_connect` is given, or
                a connection setting is malformed.
        """
        self.config: Dict[str, Any] = normalize_config(dict(config, collection=collection, on_connect=on_connect))
        self.spec: ConnectionSpec = ConnectionSpec.from_config(self.config)
        self._collection: Optional[Collection] = None

        self.manager: ConnectionManager = ConnectionManager(
            self.spec,
            on_connect=self.config.get("on_connect"),
            client_options=self.config.get("client_options"),
        )
        self.manager.establish()

    @property
    def connection(self) -> Optional[MongoConnection]:
        """The shared connection, once ready."""
        return self.manager.connection

    def collection(self) -> Collection:
        """
        Resolve the collection this engine works on.

        The first successful lookup is cached for the lifetime of the engine. A failed
        lookup is not cached, so the next call tries again.

        Returns:
            The `pymongo` collection.

        Raises:
            ConfigurationError: If this engine was not given a collection name.
            DatabaseConnectionError: If the connection is not ready yet.
            StoreError: If the database rejects the lookup.
        """
        if self._collection is not None:
            return self._collection

        name = self.config.get("collection")
        if not name:
            raise ConfigurationError("This engine was configured without a collection.")

        if not self.manager.is_ready():
            raise DatabaseConnectionError(
                f"Connection to '{self.spec.display}' is not ready (state: {self.manager.state.value})."
            )

        self._collection = self.manager.connection.collection(name)
        LOG.debug(f"Resolved collection '{name}'.")
        return self._collection

    def _writable(self) -> Collection:
        """
        Resolve the collection with this engine's write concern applied.

        Returns:
            The collection, acknowledging writes only when `safe` is set.
        """
        return self.collection().with_options(write_concern=WriteConcern(w=1 if self.spec.safe else 0))

    @deliver_to_callback
    def save(self, document: Dict, identifier: str = None) -> Dict:
        """
        Create or replace a document.

        Documents that carry an identifier are upserted by that identifier; the
        others are inserted and receive the identifier the database generates.
        `document` is updated in place so that its `_id` is always a string.

        Args:
            document: The document to save.
            identifier: Optional identifier to assign to the document before saving.

        Returns:
            `document`, with its string identifier.

        Raises:
            InvalidIdentifierError: If the identifier is malformed.
            StoreError: If the database rejects the write.
        """
        if identifier is not None:
            document[ID_FIELD] = identifier

        native = dict(document)
        if native.get(ID_FIELD) is None:
            native.pop(ID_FIELD, None)
        else:
            native[ID_FIELD] = to_native(native[ID_FIELD])

        collection = self._writable()
        try:
            if ID_FIELD in native:
                document[ID_FIELD] = to_external(native[ID_FIELD])
                collection.replace_one({ID_FIELD: native[ID_FIELD]}, native, upsert=True)
                saved_id = native[ID_FIELD]
            else:
                saved_id = collection.insert_one(native).inserted_id
        except STORE_ERRORS as exc:
            raise StoreError(f"Failed to save document in '{self.config['collection']}': {exc}") from exc

        document[ID_FIELD] = to_external(saved_id)
        LOG.debug(f"Saved document '{document[ID_FIELD]}' in '{self.config['collection']}'.")
        return document

    @deliver_to_callback
    def update(self, identifier: Any, partial_document: Dict) -> Dict:
        """
        Merge fields into an existing document and return the result.

        Only the given fields are changed. A missing document is not an error; the
        result is then an empty dict, as with `get`.

        Args:
            identifier: The identifier of the document, or a filter mapping.
            partial_document: The fields to set. Any `_id` in it is ignored.

        Returns:
            The full updated document, or an empty dict.

        Raises:
            InvalidIdentifierError: If the identifier is missing or malformed.
            StoreError: If the database rejects the update.
        """
        if identifier is None:
            raise InvalidIdentifierError("An identifier is required to update a document.")
        query = id_filter(identifier)
        changes = {key: value for key, value in partial_document.items() if key != ID_FIELD}

        collection = self._writable()
        try:
            collection.update_one(query, {"$set": changes})
        except STORE_ERRORS as exc:
            raise StoreError(f"Failed to update document in '{self.config['collection']}': {exc}") from exc

        return self._fetch_one(query)

    def _fetch_one(self, query: Any) -> Dict:
        """
        Fetch the first document matching `query`.

        Args:
            query: A filter mapping, or None for any document.

        Returns:
            The document with a string identifier, or an empty dict.

        Raises:
            StoreError: If the database rejects the query.
        """
        collection = self.collection()
        try:
            document = collection.find_one(query)
        except STORE_ERRORS as exc:
            raise StoreError(f"Failed to fetch document from '{self.config['collection']}': {exc}") from exc
        return externalize_document(document)

    @deliver_to_callback
    def get(self, identifier: Any) -> Dict:
        """
        Fetch a single document by identifier.

        Args:
            identifier: The identifier of the document, or a filter mapping.

        Returns:
            The document with a string identifier, or an empty dict if nothing matches.

        Raises:
            InvalidIdentifierError: If the identifier is malformed.
            StoreError: If the database rejects the query.
        """
        return self._fetch_one(id_filter(identifier))

    @deliver_to_callback
    def find(self, criteria: Any = None) -> List[Dict]:
        """
        Fetch every document matching `criteria`.

        Args:
            criteria: Either a list of identifiers, which matches the documents with
                any of those identifiers, or a filter mapping passed to the database
                unchanged. None matches every document.

        Returns:
            The matching documents, each with a string identifier.

        Raises:
            InvalidIdentifierError: If any identifier in the list is malformed, or
                `criteria` is neither a list nor a mapping.
            StoreError: If the database rejects the query.
        """
        if isinstance(criteria, (list, tuple)):
            criteria = id_list_filter(criteria)
        elif criteria is None:
            criteria = {}
        elif not isinstance(criteria, dict):
            raise InvalidIdentifierError(f"Criteria must be a list of identifiers or a filter mapping, not {criteria!r}.")

        collection = self.collection()
        try:
            return [externalize_document(document) for document in collection.find(criteria)]
        except STORE_ERRORS as exc:
            raise StoreError(f"Failed to query '{self.config['collection']}': {exc}") from exc

    @deliver_to_callback
    def destroy(self, identifier: Any) -> DeleteResult:
        """
        Remove the documents matching `identifier`.

        There is no existence check; removing a missing document succeeds.

        Args:
            identifier: The identifier of the document, or a filter mapping.

        Returns:
            The driver's `DeleteResult`.

        Raises:
            InvalidIdentifierError: If the identifier is missing or malformed.
            StoreError: If the database rejects the removal.
        """
        if identifier is None:
            raise InvalidIdentifierError("An identifier is required to destroy a document.")
        query = id_filter(identifier)

        collection = self._writable()
        try:
            result = collection.delete_many(query)
        except STORE_ERRORS as exc:
            raise StoreError(f"Failed to remove document from '{self.config['collection']}': {exc}") from exc

        LOG.debug(f"Removed document(s) matching {query} from '{self.config['collection']}'.")
        return result
