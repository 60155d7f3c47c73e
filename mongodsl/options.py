"""
Execution options that builders keep on the side of their documents.

These are the options the driver receives next to a filter or an update:
they never become part of the document itself.
All of them are frozen: a builder that changes an option replaces the whole object.
"""

from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FindOptions:
    """ Options for find(): sort, limit, skip, projection """

    #: Sort spec: {field: +1|-1}, in order
    sort: Optional[Dict[str, int]] = None
    limit: Optional[int] = None
    skip: Optional[int] = None
    #: Projection: {field: 1|0|{'$slice': ...}}
    projection: Optional[Dict[str, object]] = None

    def with_projection_field(self, field: str, value) -> 'FindOptions':
        """ Add one field to the projection, keeping the others """
        projection = dict(self.projection or {})
        projection[field] = value
        return replace(self, projection=projection)

    def to_kwargs(self) -> dict:
        """ Get the kwargs for Collection.find()

            Options that were not set are left out, so that the driver's defaults apply.
            The sort spec is given as a list of (key, direction) pairs.
            Containers are copies: the driver can't modify the builder through them.
        """
        kwargs = {}
        if self.sort is not None:
            kwargs['sort'] = list(self.sort.items())
        if self.limit is not None:
            kwargs['limit'] = self.limit
        if self.skip is not None:
            kwargs['skip'] = self.skip
        if self.projection is not None:
            kwargs['projection'] = deepcopy(self.projection)
        return kwargs


@dataclass(frozen=True)
class UpdateOptions:
    """ Options for update_one() and update_many(): upsert, array filters """

    upsert: bool = False
    #: Conditions for the `$[identifier]` positional operator
    array_filters: Optional[List[dict]] = None

    def with_array_filter(self, condition: dict) -> 'UpdateOptions':
        """ Append a condition to the array filters; duplicates are kept """
        return replace(self, array_filters=list(self.array_filters or ()) + [condition])

    def to_kwargs(self) -> dict:
        kwargs = {'upsert': self.upsert}
        if self.array_filters is not None:
            kwargs['array_filters'] = deepcopy(self.array_filters)
        return kwargs


@dataclass(frozen=True)
class DeleteOptions:
    """ Options for delete_one() and delete_many()

        There are none at the moment: everything a delete takes is an execution setting.
    """

    def to_kwargs(self) -> dict:
        return {}
