"""
### Aggregation Builder

The aggregation builder produces an aggregation pipeline: a list of stages.

Every method appends exactly one stage to the end of the pipeline.
Stages are never merged, removed, or reordered:

```python
from mongodsl import AggregationBuilder, FilterBuilder, SortOrder

pipeline = (AggregationBuilder()
    .match(FilterBuilder().where('status', 'active'))
    .group('$country', [('total', {'$sum': '$amount'})])
    .sort('total', SortOrder.DESCENDING)
    .limit(10))

pipeline.execute(db.orders)
```

#### Stages

Structural stages map one-to-one onto MongoDB stages:
`match()`, `group()`, `project()`, `sort()`, `limit()`, `skip()`, `lookup()`, `unwind()`,
`add_fields()`, `replace_root()`, `replace_with()`, `redact()`, `sample()`, `index_stats()`,
`geo_near()`, `facet()`, `bucket()`, `bucket_auto()`, `count()`, `sample_rate()`, `union_with()`.

Arguments that describe a list of output fields (`fields`, `output`, `pipelines`) can be given
either as a dict, or as a list of `(name, value)` pairs. Their order is kept.

#### Shortcuts

A few accumulators have a shortcut that groups the whole collection into one document:

```python
AggregationBuilder().avg('price').pipeline
# -> [{'$group': {'_id': None, 'avg': {'$avg': '$price'}}}]
```

#### Expression conveniences

Most aggregation expression operators have a method that computes the expression in a `$project` stage,
under a fixed output name:

```python
AggregationBuilder().to_lower('name').pipeline
# -> [{'$project': {'lowercase': {'$toLower': '$name'}}}]
```

Keep in mind that every such method is a separate `$project` stage, which only keeps the computed field.
Two conveniences in a row do not add up: the second one sees the output of the first.
When you need more than one computed field, use `project()` with your own expressions.
"""

from collections.abc import Mapping
from copy import deepcopy

from .base import MongoBuilderBase
from .sort import sort_document
from ..types import SortOrder
from ..util.marker import ABSENT
from ..util.values import document_of, field_ref, field_refs


# region Method factories

def _group_accumulator(operator: str, output: str, doc: str):
    """ Make a method that groups everything into one document with one accumulated field """
    def method(self, field: str):
        return self._append('$group', {'_id': None, output: {operator: field_ref(field)}})
    method.__doc__ = doc
    return method


def _unary_expression(operator: str, output: str, doc: str):
    """ Make a method that projects {output: {operator: '$field'}} """
    def method(self, field: str):
        return self._project_expression(output, {operator: field_ref(field)})
    method.__doc__ = doc
    return method


def _binary_expression(operator: str, output: str, doc: str):
    """ Make a method that projects {output: {operator: ['$first', '$second']}} """
    def method(self, first: str, second: str):
        return self._project_expression(output, {operator: [field_ref(first), field_ref(second)]})
    method.__doc__ = doc
    return method


def _variadic_expression(operator: str, output: str, doc: str):
    """ Make a method that projects {output: {operator: ['$a', '$b', ...]}} """
    def method(self, fields):
        return self._project_expression(output, {operator: field_refs(fields)})
    method.__doc__ = doc
    return method


def _substring_expression(operator: str, output: str, doc: str):
    def method(self, field: str, start: int, length: int):
        return self._project_expression(output, {operator: [field_ref(field), start, length]})
    method.__doc__ = doc
    return method


def _rounding_expression(operator: str, output: str, doc: str):
    """ Make a method that rounds a number: with `place`, it's the two-argument form """
    def method(self, field: str, place: int = None):
        if place is None:
            expression = {operator: field_ref(field)}
        else:
            expression = {operator: [field_ref(field), place]}
        return self._project_expression(output, expression)
    method.__doc__ = doc
    return method

# endregion


def _fields_document(fields) -> dict:
    """ Accept both a mapping and a sequence of (name, value) pairs """
    return dict(fields)


def _pipeline_of(pipeline) -> list:
    """ Get the stages from an AggregationBuilder, or take a list of stages """
    if isinstance(pipeline, AggregationBuilder):
        return pipeline.pipeline
    return [dict(stage) for stage in pipeline]


class AggregationBuilder(MongoBuilderBase):
    """ Builds an aggregation pipeline

        See the module docstring for the syntax.
    """

    STATE_ATTR_NAMES = ('_pipeline',)

    def __init__(self, settings=None):
        super(AggregationBuilder, self).__init__(settings)

        #: The list of stages
        self._pipeline = []

    @property
    def pipeline(self) -> list:
        """ The pipeline (a copy) """
        return deepcopy(self._pipeline)

    # Alias
    pipeline_array = pipeline

    def _append(self, operator: str, value):
        """ Get a new builder with one more stage: {operator: value}

            The value is copied.
        """
        builder = self._derive()
        builder._pipeline.append({operator: deepcopy(value)})
        return builder

    def _project_expression(self, output: str, expression):
        return self._append('$project', {output: expression})

    # region Structural stages

    def match(self, filter):
        """ Filter the documents

            :param filter: FilterBuilder, or a filter document
        """
        return self._append('$match', document_of(filter))

    def group(self, id, fields=()):
        """ Group documents by an expression

            group('$country', [('total', {'$sum': '$amount'})])

            :param id: The group key expression; `None` puts everything into one group
            :param fields: Accumulated fields
        """
        group = {'_id': id}
        group.update(_fields_document(fields))
        return self._append('$group', group)

    def project(self, fields):
        return self._append('$project', _fields_document(fields))

    def sort(self, spec, direction=SortOrder.ASCENDING):
        """ Sort the documents. Every call is a new `$sort` stage.

            sort('age', SortOrder.DESCENDING)
            sort([('age', -1), ('name', 1)])
            sort(['age-', 'name+'])
        """
        return self._append('$sort', sort_document(spec, direction))

    def limit(self, count: int):
        return self._append('$limit', count)

    def skip(self, count: int):
        return self._append('$skip', count)

    def lookup(self, from_: str, local_field: str, foreign_field: str, as_: str):
        """ Join documents from another collection into an array field """
        return self._append('$lookup', {
            'from': from_,
            'localField': local_field,
            'foreignField': foreign_field,
            'as': as_,
        })

    def unwind(self, field: str):
        """ Output one document per array element """
        return self._append('$unwind', field_ref(field))

    def add_fields(self, fields):
        return self._append('$addFields', _fields_document(fields))

    def replace_root(self, new_root: str):
        """ Promote an embedded document to the top level """
        return self._append('$replaceRoot', {'newRoot': field_ref(new_root)})

    def replace_with(self, new_root: str):
        return self._append('$replaceWith', field_ref(new_root))

    def redact(self, expression: Mapping):
        return self._append('$redact', dict(expression))

    def sample(self, size: int):
        """ Pick `size` random documents """
        return self._append('$sample', {'size': size})

    def index_stats(self):
        return self._append('$indexStats', {})

    def geo_near(self, near, distance_field: str, spherical: bool = True):
        """ Sort documents by distance to a point. Must be the first stage. """
        return self._append('$geoNear', {
            'near': [float(c) for c in near],
            'distanceField': distance_field,
            'spherical': spherical,
        })

    def facet(self, pipelines):
        """ Run multiple sub-pipelines on the same documents

            facet([
                ('by_country', AggregationBuilder().group('$country')),
                ('top', [{'$sort': {'amount': -1}}, {'$limit': 5}]),
            ])

            :param pipelines: Named sub-pipelines: AggregationBuilders, or lists of stages
        """
        return self._append('$facet', {
            name: _pipeline_of(pipeline)
            for name, pipeline in _fields_document(pipelines).items()
        })

    def bucket(self, group_by, boundaries, default=ABSENT, output=None):
        """ Categorize documents into buckets by boundaries

            :param default: The bucket for documents outside of the boundaries.
                When not given, it's left out; `None` is a valid bucket name.
            :param output: Accumulated fields; left out when not given
        """
        bucket = {
            'groupBy': group_by,
            'boundaries': list(boundaries),
        }
        if default is not ABSENT:
            bucket['default'] = default
        if output is not None:
            bucket['output'] = _fields_document(output)
        return self._append('$bucket', bucket)

    def bucket_auto(self, group_by, buckets: int, output=None, granularity: str = None):
        """ Categorize documents into a number of evenly distributed buckets """
        bucket = {
            'groupBy': group_by,
            'buckets': buckets,
        }
        if output is not None:
            bucket['output'] = _fields_document(output)
        if granularity is not None:
            bucket['granularity'] = granularity
        return self._append('$bucketAuto', bucket)

    def count(self, field_name: str):
        """ Replace the documents with one document that holds their count """
        return self._append('$count', field_name)

    def sample_rate(self, rate: float):
        return self._append('$sampleRate', float(rate))

    def union_with(self, collection: str, pipeline=None):
        """ Add the documents from another collection

            :param pipeline: Stages to run on the other collection first: an AggregationBuilder, or a list of stages
        """
        union = {'coll': collection}
        if pipeline is not None:
            union['pipeline'] = _pipeline_of(pipeline)
        return self._append('$unionWith', union)

    # endregion

    # region Group shortcuts

    def add_to_set(self, field: str):
        """ Group by the field: one document per distinct value """
        return self._append('$group', {'_id': field_ref(field)})

    avg = _group_accumulator('$avg', 'avg', """ The average of a field, as `avg` """)
    sum = _group_accumulator('$sum', 'total', """ The sum of a field, as `total` """)
    first = _group_accumulator('$first', 'first', None)
    last = _group_accumulator('$last', 'last', None)
    min = _group_accumulator('$min', 'min', None)
    max = _group_accumulator('$max', 'max', None)
    push = _group_accumulator('$push', 'items', """ All values of a field, as an array in `items` """)

    # endregion

    # region Arithmetic

    add = _variadic_expression('$add', 'sum', """ Add fields up, as `sum` """)
    multiply = _variadic_expression('$multiply', 'product', """ Multiply fields, as `product` """)
    subtract = _binary_expression('$subtract', 'difference', """ first - second, as `difference` """)
    divide = _binary_expression('$divide', 'quotient', """ first / second, as `quotient` """)
    mod = _binary_expression('$mod', 'remainder', """ first % second, as `remainder` """)
    abs = _unary_expression('$abs', 'absolute', None)
    ceil = _unary_expression('$ceil', 'ceiling', None)
    floor = _unary_expression('$floor', 'floor', None)
    exp = _unary_expression('$exp', 'exponential', """ e to the power of the field, as `exponential` """)
    ln = _unary_expression('$ln', 'log', """ Natural logarithm, as `log` """)
    log10 = _unary_expression('$log10', 'log10', """ Logarithm base 10, as `log10` """)
    log = log10
    sqrt = _unary_expression('$sqrt', 'squareRoot', None)
    round = _rounding_expression('$round', 'rounded', """ Round a number, as `rounded`

        round('price')  # -> {'$round': '$price'}
        round('price', 2)  # -> {'$round': ['$price', 2]}
        round('price', 0)  # -> {'$round': ['$price', 0]}

        Any explicit `place`, 0 included, gives the array form.
        The server treats `['$price', 0]` the same as `'$price'`.
    """)
    trunc = _rounding_expression('$trunc', 'truncated', """ Truncate a number, as `truncated`

        Like round(): without `place` it's the one-argument form, with any `place` it's the array form.
    """)

    def pow(self, field: str, exponent: float):
        """ Raise the field to a power, as `power` """
        return self._project_expression('power', {'$pow': [field_ref(field), float(exponent)]})

    def rand(self):
        """ A random number between 0 and 1, as `random` """
        return self._project_expression('random', {'$rand': {}})

    # endregion

    # region Trigonometry

    sin = _unary_expression('$sin', 'sine', None)
    cos = _unary_expression('$cos', 'cosine', None)
    tan = _unary_expression('$tan', 'tangent', None)
    asin = _unary_expression('$asin', 'arcsine', None)
    acos = _unary_expression('$acos', 'arccosine', None)
    atan = _unary_expression('$atan', 'arctangent', None)
    atan2 = _binary_expression('$atan2', 'arctangent2', """ Arctangent of y/x, as `arctangent2` """)
    asinh = _unary_expression('$asinh', 'hyperbolicAsin', None)
    acosh = _unary_expression('$acosh', 'hyperbolicAcos', None)
    atanh = _unary_expression('$atanh', 'hyperbolicAtan', None)
    sinh = _unary_expression('$sinh', 'hyperbolicSin', None)
    cosh = _unary_expression('$cosh', 'hyperbolicCos', None)
    tanh = _unary_expression('$tanh', 'hyperbolicTan', None)
    degrees_to_radians = _unary_expression('$degreesToRadians', 'radians', None)
    radians_to_degrees = _unary_expression('$radiansToDegrees', 'degrees', None)

    # endregion

    # region Strings

    concat = _variadic_expression('$concat', 'concatenatedString', """ Concatenate strings, as `concatenatedString` """)
    substr = _substring_expression('$substr', 'substring', None)
    substr_bytes = _substring_expression('$substrBytes', 'substringBytes', None)
    substr_cp = _substring_expression('$substrCP', 'substringCP', """ Substring by code points, as `substringCP` """)
    to_lower = _unary_expression('$toLower', 'lowercase', None)
    to_upper = _unary_expression('$toUpper', 'uppercase', None)
    trim = _unary_expression('$trim', 'trimmed', None)
    ltrim = _unary_expression('$ltrim', 'ltrimmed', None)
    rtrim = _unary_expression('$rtrim', 'rtrimmed', None)
    str_len_bytes = _unary_expression('$strLenBytes', 'byteLength', None)
    str_len_cp = _unary_expression('$strLenCP', 'codePointLength', None)
    strcasecmp = _binary_expression('$strcasecmp', 'comparison', """ Case-insensitive comparison: -1, 0, 1, as `comparison` """)

    def split(self, field: str, delimiter: str):
        """ Split a string into an array, as `splitArray` """
        return self._project_expression('splitArray', {'$split': [field_ref(field), delimiter]})

    def regex_match(self, field: str, regex: str, options: str = None):
        """ Whether the field matches a regular expression, as `matches` """
        match = {
            'input': field_ref(field),
            'regex': regex,
        }
        if options is not None:
            match['options'] = options
        return self._project_expression('matches', {'$regexMatch': match})

    # endregion

    # region Dates

    def date_to_string(self, field: str, format: str = None):
        """ Format a date, as `formattedDate`. Without a format, the server's default is used. """
        date = {'date': field_ref(field)}
        if format is not None:
            date['format'] = format
        return self._project_expression('formattedDate', {'$dateToString': date})

    year = _unary_expression('$year', 'year', None)
    month = _unary_expression('$month', 'month', None)
    day_of_month = _unary_expression('$dayOfMonth', 'day', None)
    day_of_year = _unary_expression('$dayOfYear', 'dayOfYear', None)
    day_of_week = _unary_expression('$dayOfWeek', 'dayOfWeek', None)
    hour = _unary_expression('$hour', 'hour', None)
    minute = _unary_expression('$minute', 'minute', None)
    second = _unary_expression('$second', 'second', None)
    millisecond = _unary_expression('$millisecond', 'millisecond', None)
    week = _unary_expression('$week', 'week', None)

    def year_month_day(self, field: str):
        """ Extract `year`, `month`, `day` from a date """
        ref = field_ref(field)
        return self._append('$project', {
            'year': {'$year': ref},
            'month': {'$month': ref},
            'day': {'$dayOfMonth': ref},
        })

    def hour_minute_second(self, field: str):
        """ Extract `hour`, `minute`, `second` from a date """
        ref = field_ref(field)
        return self._append('$project', {
            'hour': {'$hour': ref},
            'minute': {'$minute': ref},
            'second': {'$second': ref},
        })

    # endregion

    # region Arrays

    def filter(self, array: str, as_: str, cond: Mapping):
        """ Keep array elements that match a condition; the result replaces the array

            filter('items', 'item', {'$gte': ['$$item.price', 100]})
        """
        return self._project_expression(array, {'$filter': {
            'input': field_ref(array),
            'as': as_,
            'cond': dict(cond),
        }})

    def map(self, array: str, as_: str, in_):
        """ Apply an expression to every array element; the result replaces the array """
        return self._project_expression(array, {'$map': {
            'input': field_ref(array),
            'as': as_,
            'in': in_,
        }})

    def reduce(self, array: str, initial_value, in_):
        """ Combine array elements into one value; the result replaces the array

            In the expression, use `$$value` for the accumulated value, and `$$this` for the element.
        """
        return self._project_expression(array, {'$reduce': {
            'input': field_ref(array),
            'initialValue': initial_value,
            'in': in_,
        }})

    def reverse_array(self, field: str):
        return self._project_expression(field, {'$reverseArray': field_ref(field)})

    def slice(self, field: str, count: int = None, *, skip: int = None, limit: int = None):
        """ A part of an array; the result replaces the array

            slice('comments', 5)
            slice('comments', skip=10, limit=5)
        """
        if count is not None:
            args = [field_ref(field), count]
        elif skip is not None and limit is not None:
            args = [field_ref(field), skip, limit]
        else:
            raise TypeError('slice() requires either a count, or both skip and limit')
        return self._project_expression(field, {'$slice': args})

    def zip(self, arrays, use_longest_length: bool = False, defaults=None):
        """ Transpose arrays into an array of tuples, as `zipped` """
        args = {
            'inputs': field_refs(arrays),
            'useLongestLength': use_longest_length,
        }
        if defaults is not None:
            args['defaults'] = list(defaults)
        return self._project_expression('zipped', {'$zip': args})

    def range(self, name: str, start: int, end: int, step: int = 1):
        """ An array of numbers from start to end, as `name` """
        args = [start, end]
        if step != 1:
            args.append(step)
        return self._project_expression(name, {'$range': args})

    size = _unary_expression('$size', 'arraySize', """ The number of array elements, as `arraySize` """)

    def is_array(self, field: str):
        """ Whether the field is an array, as `is<Field>`: is_array('tags') -> `isTags` """
        return self._project_expression('is' + field.capitalize(), {'$isArray': field_ref(field)})

    concat_arrays = _variadic_expression('$concatArrays', 'concatenatedArray', None)

    def array_elem_at(self, field: str, index: int):
        """ The array element at an index, as `elementAt<index>` """
        return self._project_expression('elementAt{}'.format(index),
                                        {'$arrayElemAt': [field_ref(field), index]})

    def in_(self, field: str, array: str):
        """ Whether the field's value is in the array, as `is<Field>InArray` """
        return self._project_expression('is{}InArray'.format(field.capitalize()),
                                        {'$in': [field_ref(field), field_ref(array)]})

    # endregion

    # region Sets

    set_equals = _variadic_expression('$setEquals', 'setsEqual', None)
    set_intersection = _variadic_expression('$setIntersection', 'intersection', None)
    set_union = _variadic_expression('$setUnion', 'union', None)
    set_difference = _binary_expression('$setDifference', 'difference', """ Elements of the first array that are not in the second, as `difference` """)
    set_is_subset = _binary_expression('$setIsSubset', 'isSubset', None)
    any_element_true = _unary_expression('$anyElementTrue', 'anyTrue', None)
    all_elements_true = _unary_expression('$allElementsTrue', 'allTrue', None)

    # endregion

    # region Conditionals

    def cond(self, if_: Mapping, then, else_):
        """ if-then-else, as `conditionalValue` """
        return self._project_expression('conditionalValue', {'$cond': {
            'if': dict(if_),
            'then': then,
            'else': else_,
        }})

    def if_null(self, field: str, then):
        """ The field, or a replacement when it's null or missing, as `value` """
        return self._project_expression('value', {'$ifNull': [field_ref(field), then]})

    def switch(self, branches, default):
        """ The first branch whose case is true, as `switchedValue`

            :param branches: A sequence of (case, then) pairs
            :param default: The value when no case is true
        """
        return self._project_expression('switchedValue', {'$switch': {
            'branches': [{'case': dict(case), 'then': then}
                         for case, then in branches],
            'default': default,
        }})

    # endregion

    # region Execution

    def execute(self, collection):
        """ Run the pipeline. Returns the cursor. """
        return self._execute(collection, 'aggregate', self.pipeline)

    # endregion

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self._pipeline)
