from enum import Enum, IntEnum

import pymongo


class SortOrder(IntEnum):
    """ Sort direction: compares equal to pymongo.ASCENDING and pymongo.DESCENDING """
    ASCENDING = pymongo.ASCENDING
    DESCENDING = pymongo.DESCENDING


class BsonType(Enum):
    """ String aliases accepted by the `$type` query operator """
    DOUBLE = 'double'
    STRING = 'string'
    OBJECT = 'object'
    ARRAY = 'array'
    BOOL = 'bool'
    DATE = 'date'
    NULL = 'null'
    REGEX = 'regex'
    INT = 'int'
    TIMESTAMP = 'timestamp'
    LONG = 'long'
    DECIMAL = 'decimal'
    MIN_KEY = 'minKey'
    MAX_KEY = 'maxKey'
