##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Tests for the `identifiers.py` module.
"""

import pytest
from bson import ObjectId

from resmongo.backends.identifiers import (
    externalize_document,
    id_filter,
    id_list_filter,
    to_external,
    to_native,
)
from resmongo.exceptions import InvalidIdentifierError


VALID_ID = "5f43a1b2c3d4e5f6a7b8c9d0"


def test_to_native_valid_string():
    """
    Test that a well-formed string becomes an `ObjectId`.
    """
    assert to_native(VALID_ID) == ObjectId(VALID_ID)


@pytest.mark.parametrize("identifier", ["", "abc", "zzzzzzzzzzzzzzzzzzzzzzzz", VALID_ID + "0"])
def test_to_native_malformed_string(identifier: str):
    """
    Test that malformed strings are rejected.

    Args:
        identifier: A malformed identifier.
    """
    with pytest.raises(InvalidIdentifierError, match="not a valid document identifier"):
        to_native(identifier)


def test_to_native_passes_non_strings_through():
    """
    Test that values that aren't strings are returned unchanged.
    """
    oid = ObjectId()
    assert to_native(oid) is oid
    assert to_native(42) == 42


def test_round_trip():
    """
    Test that a store-generated identifier survives a round trip through its string form.
    """
    oid = ObjectId()
    assert to_native(to_external(oid)) == oid
    assert to_external(to_native(VALID_ID)) == VALID_ID
    assert to_external(None) is None


def test_id_filter():
    """
    Test filters built from identifiers, mappings and None.
    """
    assert id_filter(VALID_ID) == {"_id": ObjectId(VALID_ID)}
    assert id_filter({"name": "a"}) == {"name": "a"}
    assert id_filter(None) is None


def test_id_list_filter():
    """
    Test the set-membership filter for a list of identifiers.
    """
    other = ObjectId()
    assert id_list_filter([VALID_ID, str(other)]) == {"_id": {"$in": [ObjectId(VALID_ID), other]}}


def test_id_list_filter_one_malformed():
    """
    Test that one malformed identifier fails the whole list.
    """
    with pytest.raises(InvalidIdentifierError):
        id_list_filter([VALID_ID, "bad", str(ObjectId())])


def test_externalize_document():
    """
    Test converting documents read from the store.
    """
    oid = ObjectId()
    assert externalize_document({"_id": oid, "name": "a"}) == {"_id": str(oid), "name": "a"}
    assert externalize_document({"name": "a"}) == {"name": "a"}
    assert externalize_document(None) == {}
