"""
### Update Builder

The update builder produces an update document made of update operators:

```python
from mongodsl import FilterBuilder, UpdateBuilder

(UpdateBuilder()
    .set('status', 'active')
    .increment('logins', 1)
    .push('history', {'event': 'login'})
    .update_one(db.users, where=FilterBuilder().where('_id', user_id)))
```

Every call adds one field to the sub-document of its operator. Calls with the same operator
are merged into one sub-document:

```python
UpdateBuilder().set('a', 1).set('b', 2).document
# -> {'$set': {'a': 1, 'b': 2}}
```

The filter is not a part of the update: it's given to `update_one()` / `update_many()`.
"""

from copy import deepcopy
from dataclasses import replace

from .base import MongoBuilderBase
from ..options import UpdateOptions
from ..util.marker import ABSENT
from ..util.values import to_bson_value, to_document, document_of


class UpdateBuilder(MongoBuilderBase):
    """ Builds an update document and update options """

    STATE_ATTR_NAMES = ('_update', '_options')

    def __init__(self, settings=None):
        super(UpdateBuilder, self).__init__(settings)

        #: The update document: {operator: {field: value}}
        self._update = {}

        #: Options for the driver
        self._options = UpdateOptions()

    @property
    def document(self) -> dict:
        """ The update document (a copy) """
        return deepcopy(self._update)

    @property
    def options(self) -> UpdateOptions:
        return deepcopy(self._options)

    def _with_operator_field(self, operator: str, field: str, value):
        """ Get a new builder with `update[operator][field] = value`

            The operator's sub-document is created when it's not there yet.
            The value is copied.
        """
        builder = self._derive()
        builder._update.setdefault(operator, {})[field] = deepcopy(value)
        return builder

    # region Fields

    def set(self, field, value=ABSENT):
        """ Set a field value

            set('name', 'John')  # one field

            set({'name': 'John', 'age': 30})  # a whole document

            With a single argument, the value may be a mapping, a dataclass instance, or a named tuple.
            It replaces the whole `$set` sub-document, including the fields set earlier.

            :raises UnserializableValueError: the single argument can't be converted into a document
        """
        if value is ABSENT:
            builder = self._derive()
            builder._update['$set'] = deepcopy(to_document(field, 'UpdateBuilder.set()'))
            return builder
        return self._with_operator_field('$set', field, to_bson_value(value))

    def set_on_insert(self, field: str, value):
        """ Set a field only when the update inserts a new document (with upsert) """
        return self._with_operator_field('$setOnInsert', field, value)

    def increment(self, field: str, by):
        return self._with_operator_field('$inc', field, to_bson_value(by))

    def multiply(self, field: str, by: float):
        return self._with_operator_field('$mul', field, float(by))

    def rename(self, old_name: str, new_name: str):
        return self._with_operator_field('$rename', old_name, new_name)

    def unset(self, field: str):
        return self._with_operator_field('$unset', field, 1)

    def current_date(self, field: str):
        """ Set the field to the current date, on the server """
        return self._with_operator_field('$currentDate', field, True)

    # endregion

    # region Arrays

    def pop(self, field: str, first: bool = False):
        """ Remove the last element of an array; with `first=True`, the first one """
        return self._with_operator_field('$pop', field, -1 if first else 1)

    def push(self, field: str, value, options=()):
        """ Append a value to an array

            Without options, the value is pushed as it is.
            With options, it's wrapped into `$each`, and the options are added:

                push('scores', 89, options=[('$slice', -5)])
                # -> {'$push': {'scores': {'$each': [89], '$slice': -5}}}

            :param options: Modifiers: ($slice, $sort, $position); a mapping, or a sequence of pairs
        """
        if not options:
            return self._with_operator_field('$push', field, value)
        return self.push_each(field, [value], options)

    def push_each(self, field: str, values, options=()):
        """ Append multiple values to an array """
        push = {'$each': list(values)}
        push.update(options)
        return self._with_operator_field('$push', field, push)

    def add_to_set(self, field: str, value):
        """ Add a value to an array, unless it's already there """
        return self._with_operator_field('$addToSet', field, value)

    def add_each_to_set(self, field: str, values):
        return self._with_operator_field('$addToSet', field, {'$each': list(values)})

    def pull(self, field: str, condition):
        """ Remove all array elements that match a value or a condition """
        return self._with_operator_field('$pull', field, condition)

    def pull_all(self, field: str, values):
        return self._with_operator_field('$pullAll', field, list(values))

    # endregion

    # region Positional

    def set_at_position(self, field: str, value):
        """ Set the first array element matched by the filter: `field.$` """
        return self._with_operator_field('$set', field + '.$', value)

    def set_at_all_positions(self, field: str, value):
        """ Set every array element: `field.$[]` """
        return self._with_operator_field('$set', field + '.$[]', value)

    def set_at_filtered_position(self, field: str, value, identifier: str, condition):
        """ Set the array elements that match an array filter: `field.$[identifier]`

            set_at_filtered_position('grades', 100, 'elem', {'elem.score': {'$gte': 90}})

            The condition is added to the `array_filters` option.
            Array filters accumulate: every call adds one more.
        """
        builder = self._with_operator_field('$set', '{}.$[{}]'.format(field, identifier), value)
        builder._options = builder._options.with_array_filter(deepcopy(document_of(condition)))
        return builder

    # endregion

    # region Options

    def upsert(self, flag: bool = True):
        """ Insert a new document when nothing matches the filter """
        builder = self._derive()
        builder._options = replace(builder._options, upsert=flag)
        return builder

    # endregion

    # region Execution

    def update_one(self, collection, where):
        """ Update the first document that matches

            :param where: FilterBuilder, or a filter document
        """
        return self._execute(collection, 'update_one', document_of(where), self.document,
                             **self._options.to_kwargs())

    def update_many(self, collection, where):
        """ Update every document that matches """
        return self._execute(collection, 'update_many', document_of(where), self.document,
                             **self._options.to_kwargs())

    # endregion

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self._update)
