##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
This module defines the abstract base class for all storage engines in resmongo.

This module provides the `ResourceEngine` class, which outlines the required interface
for saving, updating, fetching, searching, and destroying resource documents in a
backing data store. Concrete engines (e.g. `MongoEngine`) must inherit from this class
and implement its abstract methods.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class ResourceEngine(ABC):
    """
    Base class for all storage engines supported in resmongo.

    Documents cross this interface as dictionaries whose `_id` is always a string.

    Attributes:
        protocol (str): The name of the storage protocol this engine speaks.

    Methods:
        save: Create or replace a document.
        update: Merge fields into an existing document.
        get: Fetch a single document by identifier.
        find: Fetch every document matching some criteria.
        destroy: Remove the documents matching an identifier.
    """

    protocol: str = None

    @abstractmethod
    def save(self, document: Dict, identifier: str = None) -> Dict:
        """
        Create or replace a document.

        Args:
            document: The document to save.
            identifier: Optional identifier to assign to the document before saving.

        Returns:
            The saved document.
        """
        raise NotImplementedError("Subclasses of `ResourceEngine` must implement a `save` method.")

    @abstractmethod
    def update(self, identifier: Any, partial_document: Dict) -> Dict:
        """
        Merge fields into an existing document.

        Args:
            identifier: The identifier of the document to update.
            partial_document: The fields to set.

        Returns:
            The full updated document.
        """
        raise NotImplementedError("Subclasses of `ResourceEngine` must implement an `update` method.")

    @abstractmethod
    def get(self, identifier: Any) -> Dict:
        """
        Fetch a single document by identifier.

        Args:
            identifier: The identifier of the document.

        Returns:
            The document if found, an empty dict otherwise.
        """
        raise NotImplementedError("Subclasses of `ResourceEngine` must implement a `get` method.")

    @abstractmethod
    def find(self, criteria: Any) -> List[Dict]:
        """
        Fetch every document matching `criteria`.

        Args:
            criteria: A list of identifiers or a store-native filter.

        Returns:
            A list of documents.
        """
        raise NotImplementedError("Subclasses of `ResourceEngine` must implement a `find` method.")

    @abstractmethod
    def destroy(self, identifier: Any) -> Any:
        """
        Remove the documents matching `identifier`.

        Args:
            identifier: The identifier of the document(s) to remove.

        Returns:
            The store's report of the removal.
        """
        raise NotImplementedError("Subclasses of `ResourceEngine` must implement a `destroy` method.")
