"""
### Filter Builder

The filter builder produces a MongoDB filter document: the thing you would give to `find()`.

```python
from mongodsl import FilterBuilder, SortOrder

adults = (FilterBuilder()
    .where('status', 'active')
    .where('age', gte=18)
    .sort('age', SortOrder.DESCENDING)
    .limit(10))

adults.document  # -> {'status': 'active', 'age': {'$gte': 18}}
adults.find(db.users)
```

#### Syntax

* Equality: `where('name', 'John')`.

    Python integers are stored as 64-bit integers, so `where('age', 25)` and `where('age', Int64(25))`
    produce the same document.

* Operators: `where('age', gt=18)`. Exactly one operator keyword per call.

    Supported keywords:

    * `eq`, `ne`, `gt`, `gte`, `lt`, `lte` compare the field to a value
    * `in_`, `nin` take a list of values
    * `all` requires an array to contain every value from the list
    * `size` checks the length of an array
    * `exists` checks whether the field is there at all
    * `type` takes a `BsonType`, a type alias string like 'string', or a BSON type number
    * `elem_match` takes a filter document (or another FilterBuilder) for array elements
    * `mod` takes a `(divisor, remainder)` pair

    Every keyword also has a named method: `greater_than('age', 18)`, `not_in('role', ['guest'])`, etc.
    Any other operator can be used with `operator('age', '$gt', 18)`.

* Logical operators: `and_()`, `or_()`, `nor()` take a list of conditions;
  calling them again adds more conditions to the same list.
  `not_()` and `expr()` replace the previous value.

* Every other call on a field replaces the previous condition on that field:

    ```python
    FilterBuilder().where('age', gt=1).where('age', lt=5).document
    # -> {'age': {'$lt': 5}}
    ```

#### Options

Sorting, pagination and projection are not a part of the filter: they're kept on the side
as `FindOptions`, and given to `find()` as keyword arguments.
"""

from collections.abc import Mapping
from copy import deepcopy
from dataclasses import replace

from bson.int64 import Int64

from .base import MongoBuilderBase
from .sort import sort_document
from ..options import FindOptions
from ..types import BsonType, SortOrder
from ..util.marker import ABSENT
from ..util.values import to_bson_value, document_of


def _as_given(value):
    return value


def _bson_type(value):
    # BsonType, a string alias, or a type number
    if isinstance(value, BsonType):
        return value.value
    if isinstance(value, str):
        return value
    return int(value)


def _mod(value):
    divisor, remainder = value
    return [Int64(divisor), Int64(remainder)]


class FilterDocumentBuilderBase(MongoBuilderBase):
    """ Base for builders that accumulate a filter document

        Implements the common bits: field conditions that replace each other,
        and logical operators that collect conditions into a list.
    """

    STATE_ATTR_NAMES = ('_filter', '_options')

    #: Options class
    OPTIONS_CLASS = None

    def __init__(self, settings=None):
        super(FilterDocumentBuilderBase, self).__init__(settings)

        #: The filter document
        self._filter = {}

        #: Options for the driver
        self._options = self.OPTIONS_CLASS()

    @property
    def document(self) -> dict:
        """ The filter document (a copy) """
        return deepcopy(self._filter)

    @property
    def options(self):
        """ The options value object (a copy) """
        return deepcopy(self._options)

    def _with_field(self, field: str, value):
        """ Get a new builder with `field` set to `value`, replacing what was there

            The value is copied: the caller may keep modifying their object.
        """
        builder = self._derive()
        builder._filter[field] = deepcopy(value)
        return builder

    def _with_options(self, options):
        builder = self._derive()
        builder._options = options
        return builder

    def _extend_logical(self, operator: str, conditions):
        """ Get a new builder with `conditions` appended to a logical operator's list

            When the key is not there yet, it is created.
            When it holds a list, the conditions are appended to it.
        """
        conditions = [deepcopy(document_of(c)) for c in conditions]

        builder = self._derive()
        existing = builder._filter.get(operator)
        if isinstance(existing, list):
            existing.extend(conditions)
        else:
            builder._filter[operator] = conditions
        return builder

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self._filter)


class FilterBuilder(FilterDocumentBuilderBase):
    """ Builds a filter document and find() options

        See the module docstring for the syntax.
    """

    OPTIONS_CLASS = FindOptions

    # Operator keywords for where()
    # keyword => (operator, value conversion)
    _operators = {
        'eq': ('$eq', to_bson_value),
        'ne': ('$ne', _as_given),
        'gt': ('$gt', _as_given),
        'gte': ('$gte', _as_given),
        'lt': ('$lt', _as_given),
        'lte': ('$lte', _as_given),
        'in_': ('$in', list),
        'nin': ('$nin', list),
        'all': ('$all', list),
        'size': ('$size', int),
        'exists': ('$exists', bool),
        'type': ('$type', _bson_type),
        'elem_match': ('$elemMatch', document_of),
        'mod': ('$mod', _mod),
    }

    # region Field conditions

    def where(self, field: str, value=ABSENT, **operator):
        """ Add a condition on a field

            where('name', 'John')  # equality
            where('age', gte=18)  # one operator

            :raises TypeError: no value, more than one operator, or an unknown operator keyword
        """
        # Equality
        if not operator:
            if value is ABSENT:
                raise TypeError('where() requires a value or an operator keyword')
            return self._with_field(field, to_bson_value(value))

        # Operator
        if value is not ABSENT or len(operator) != 1:
            raise TypeError('where() takes either a value or exactly one operator keyword')

        (name, operand), = operator.items()
        try:
            op, convert = self._operators[name]
        except KeyError:
            raise TypeError('where() got an unexpected operator keyword {!r}'.format(name)) from None

        return self._with_field(field, {op: convert(operand)})

    def equals_explicit(self, field: str, value):
        """ Equality with an explicit `$eq` operator """
        return self.where(field, eq=value)

    def not_equals(self, field: str, value):
        return self.where(field, ne=value)

    def greater_than(self, field: str, value):
        return self.where(field, gt=value)

    def greater_than_or_equal(self, field: str, value):
        return self.where(field, gte=value)

    def less_than(self, field: str, value):
        return self.where(field, lt=value)

    def less_than_or_equal(self, field: str, value):
        return self.where(field, lte=value)

    def in_(self, field: str, values):
        return self.where(field, in_=values)

    def not_in(self, field: str, values):
        return self.where(field, nin=values)

    def exists(self, field: str, exists: bool = True):
        return self.where(field, exists=exists)

    def type(self, field: str, bson_type):
        """ Check the type of a field

            :param bson_type: BsonType, a type alias string, or a BSON type number
        """
        return self.where(field, type=bson_type)

    def contains_all(self, field: str, values):
        """ The array contains every one of the values """
        return self.where(field, all=values)

    # Same thing, named after the operator
    all = contains_all

    def size(self, field: str, count: int):
        return self.where(field, size=count)

    def elem_match(self, field: str, condition):
        """ At least one element of the array matches the condition

            :param condition: A filter document, or a FilterBuilder
        """
        return self.where(field, elem_match=condition)

    def mod(self, field: str, divisor: int, remainder: int):
        return self.where(field, mod=(divisor, remainder))

    def contains(self, field: str, value):
        """ The array contains the value. In MongoDB, this is just equality. """
        return self._with_field(field, value)

    def nested(self, path: str, value):
        """ Equality on a dotted path: nested('address.city', 'Paris') """
        return self._with_field(path, value)

    def operator(self, path: str, op: str, value):
        """ Use any operator: operator('age', '$gt', 18) """
        return self._with_field(path, {op: value})

    def matches(self, field: str, regex: str, options: str = ''):
        """ Match a regular expression. Empty `options` are left out. """
        condition = {'$regex': regex}
        if options:
            condition['$options'] = options
        return self._with_field(field, condition)

    def near(self, field: str, coordinates, max_distance: float = None):
        """ Geospatial proximity to a point, on a flat surface """
        return self._with_field(field, {'$near': self._near_query(coordinates, max_distance)})

    def near_sphere(self, field: str, coordinates, max_distance: float = None):
        """ Geospatial proximity to a point, on a sphere """
        return self._with_field(field, {'$nearSphere': self._near_query(coordinates, max_distance)})

    @staticmethod
    def _near_query(coordinates, max_distance):
        query = {
            '$geometry': {
                'type': 'Point',
                'coordinates': [float(c) for c in coordinates],
            }
        }
        if max_distance is not None:
            query['$maxDistance'] = float(max_distance)
        return query

    def is_null(self, field: str, is_null: bool = True):
        """ The field is null (or missing). With `False`: the field is not null. """
        return self._with_field(field, None if is_null else {'$ne': None})

    def missing(self, field: str, missing: bool = True):
        """ The field is not there. With `False`: the field is there. """
        return self._with_field(field, {'$exists': not missing})

    # endregion

    # region Logical operators

    def and_(self, conditions):
        """ All of the conditions are true

            :param conditions: List of filter documents, or FilterBuilders
        """
        return self._extend_logical('$and', conditions)

    def or_(self, conditions):
        """ At least one of the conditions is true """
        return self._extend_logical('$or', conditions)

    def nor(self, conditions):
        """ None of the conditions is true """
        return self._extend_logical('$nor', conditions)

    def not_(self, condition):
        return self._with_field('$not', document_of(condition))

    def expr(self, expression: Mapping):
        """ Use an aggregation expression: expr({'$gt': ['$spent', '$budget']}) """
        return self._with_field('$expr', dict(expression))

    def text_search(self, search: str, language: str = None,
                    case_sensitive: bool = False, diacritic_sensitive: bool = False):
        """ Full-text search. Requires a text index on the collection. """
        text = {'$search': search}
        if language is not None:
            text['$language'] = language
        text['$caseSensitive'] = case_sensitive
        text['$diacriticSensitive'] = diacritic_sensitive
        return self._with_field('$text', text)

    # endregion

    # region Options

    def sort(self, spec, direction=SortOrder.ASCENDING):
        """ Sort the results. Replaces the previous sort.

            sort('age', SortOrder.DESCENDING)
            sort([('age', -1), ('name', 1)])
            sort(['age-', 'name+'])
        """
        return self._with_options(self._replace_options(sort=sort_document(spec, direction)))

    def limit(self, count: int):
        return self._with_options(self._replace_options(limit=count))

    def skip(self, count: int):
        return self._with_options(self._replace_options(skip=count))

    def select(self, *fields):
        """ Only return these fields. Replaces the previous projection. """
        return self._with_options(self._replace_options(
            projection={f: 1 for f in _flatten_names(fields)}))

    def exclude(self, *fields):
        """ Return everything except these fields. Replaces the previous projection. """
        return self._with_options(self._replace_options(
            projection={f: 0 for f in _flatten_names(fields)}))

    def slice(self, field: str, count: int = None, *, skip: int = None, limit: int = None):
        """ Return only a part of an array field

            slice('comments', 5)  # first 5
            slice('comments', -5)  # last 5
            slice('comments', skip=10, limit=5)

            Unlike select() and exclude(), this adds to the projection.
        """
        if count is not None:
            value = count
        elif skip is not None and limit is not None:
            value = [skip, limit]
        else:
            raise TypeError('slice() requires either a count, or both skip and limit')

        return self._with_options(self._options.with_projection_field(field, {'$slice': value}))

    def _replace_options(self, **changes) -> FindOptions:
        return replace(self._options, **changes)

    # endregion

    # region Execution

    def find(self, collection):
        """ Run find() with the filter and the options. Returns the cursor. """
        return self._execute(collection, 'find', self.document, **self._options.to_kwargs())

    def find_one(self, collection):
        """ Run find_one() with the filter. Returns a document, or None. """
        return self._execute(collection, 'find_one', self.document)

    def count(self, collection):
        """ Count the documents that match the filter """
        return self._execute(collection, 'count_documents', self.document)

    # endregion


def _flatten_names(fields):
    """ Accept both select('a', 'b') and select(['a', 'b']) """
    names = []
    for f in fields:
        if isinstance(f, str):
            names.append(f)
        else:
            names.extend(f)
    return names
