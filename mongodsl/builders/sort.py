""" Sort specs, shared by FilterBuilder.sort() and AggregationBuilder.sort()

A sort spec can be given as:

* A single field name, with a direction: `sort('age', SortOrder.DESCENDING)`
* A list of (field, direction) pairs: `sort([('age', -1), ('name', +1)])`
* A list of strings '<field>[<+|->]': `sort(['age-', 'name+', 'city'])`. The default direction is +.
* A dict: `sort({'age': -1, 'name': 1})`. Its order is the order of the keys.
"""

from collections.abc import Mapping

from ..types import SortOrder


def sort_document(spec, direction=SortOrder.ASCENDING) -> dict:
    """ Convert a sort spec into an ordered {field: +1|-1} document

        :raises ValueError: a direction is neither +1 nor -1
    """
    # Single field
    if isinstance(spec, str):
        return {spec: _direction(direction)}

    # Dict
    if isinstance(spec, Mapping):
        return {field: _direction(d) for field, d in spec.items()}

    # List: strings or pairs
    sort = {}
    for item in spec:
        if isinstance(item, str):
            if item[-1:] in {'+', '-'}:
                sort[item[:-1]] = -1 if item[-1] == '-' else +1
            else:
                sort[item] = +1
        else:
            field, d = item
            sort[field] = _direction(d)
    return sort


def _direction(d) -> int:
    # SortOrder(5) raises ValueError
    return int(SortOrder(d))
