""" Conversions between Python values and the documents the builders accumulate """

import dataclasses
from collections.abc import Mapping

from bson.int64 import Int64

from ..exc import UnserializableValueError


def to_bson_value(value):
    """ Convert a native scalar into its canonical BSON representation

        * bool stays bool (it's an int subclass, so it's tested first)
        * int becomes a 64-bit Int64
        * float, str, datetime are stored as they are

        Anything else is returned unchanged: lists, documents, ObjectId, Regex, etc.
        The conversion never fails.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return Int64(value)
    return value


def to_document(value, where: str) -> dict:
    """ Convert a value object into a document

        Supports: mappings, dataclass instances, named tuples.

        :param where: name of the operation, for the error message
        :raises UnserializableValueError: the value can't be converted
    """
    if isinstance(value, Mapping):
        return dict(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, tuple) and hasattr(value, '_asdict'):
        return dict(value._asdict())
    raise UnserializableValueError(value, where)


def document_of(value) -> dict:
    """ Get the filter document from a builder, or take a plain mapping """
    if isinstance(value, Mapping):
        return dict(value)
    return value.document


def field_ref(field: str) -> str:
    """ Reference a field in an aggregation expression: 'price' -> '$price' """
    return '$' + field


def field_refs(fields) -> list:
    return [field_ref(f) for f in fields]
