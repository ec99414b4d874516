##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Conversions between external (string) and native (`ObjectId`) document identifiers.

Engines expose identifiers as plain strings. Whenever one crosses into the database
it goes through `to_native`, and whenever one comes back out it goes through
`to_external`. Documents are never stored in a mixed form.
"""

from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from resmongo.exceptions import InvalidIdentifierError


ID_FIELD = "_id"


def to_native(identifier: Any) -> Any:
    """
    Convert a string identifier into an `ObjectId`.

    Non-string values (e.g. an `ObjectId` already) are returned unchanged.

    Args:
        identifier: The identifier to convert.

    Returns:
        The native form of the identifier.

    Raises:
        InvalidIdentifierError: If `identifier` is a string that is not a valid `ObjectId`.
    """
    if not isinstance(identifier, str):
        return identifier
    try:
        return ObjectId(identifier)
    except (InvalidId, TypeError) as exc:
        raise InvalidIdentifierError(f"'{identifier}' is not a valid document identifier.") from exc


def to_external(identifier: Any) -> Optional[str]:
    """
    Convert a native identifier into its string form.

    Args:
        identifier: The identifier returned by the database.

    Returns:
        The string form of the identifier, or None if there was none.
    """
    if identifier is None:
        return None
    return str(identifier)


def id_filter(identifier: Any) -> Any:
    """
    Build the query filter that selects a document by identifier.

    Mappings are treated as ready-made filters and passed through, as is None.

    Args:
        identifier: A string or native identifier, or a filter mapping.

    Returns:
        A filter mapping (or None).

    Raises:
        InvalidIdentifierError: If `identifier` is a malformed string.
    """
    if identifier is None or isinstance(identifier, dict):
        return identifier
    return {ID_FIELD: to_native(identifier)}


def id_list_filter(identifiers: Iterable[Any]) -> Dict[str, Dict[str, List[Any]]]:
    """
    Build a set-membership filter for a list of identifiers.

    Every identifier is converted before the filter is returned, so a single
    malformed one fails the whole list.

    Args:
        identifiers: The identifiers to match.

    Returns:
        A filter of the form `{"_id": {"$in": [...]}}`.

    Raises:
        InvalidIdentifierError: If any identifier is a malformed string.
    """
    return {ID_FIELD: {"$in": [to_native(identifier) for identifier in identifiers]}}


def externalize_document(document: Optional[Dict]) -> Dict:
    """
    Convert the identifier of a document read from the database into its string form.

    Args:
        document: The document, or None if nothing was found.

    Returns:
        The document with a string identifier, or an empty dict when `document` is None.
    """
    if not document:
        return {}
    if document.get(ID_FIELD) is not None:
        document[ID_FIELD] = to_external(document[ID_FIELD])
    return document
