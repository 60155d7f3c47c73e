from .filter import FilterDocumentBuilderBase
from ..options import DeleteOptions
from ..util.values import to_bson_value


class DeleteBuilder(FilterDocumentBuilderBase):
    """ Builds a filter for deleting documents

        DeleteBuilder().filter('status', 'archived').filter_operator('age', '$gt', 90).delete_many(db.users)

        It speaks a smaller vocabulary than FilterBuilder;
        for anything fancy, build the filter with FilterBuilder and delete with the collection directly.
    """

    OPTIONS_CLASS = DeleteOptions

    def filter(self, field: str, value):
        """ Equality condition """
        return self._with_field(field, to_bson_value(value))

    def filter_operator(self, field: str, op: str, value):
        """ Condition with any operator: filter_operator('age', '$gt', 90) """
        return self._with_field(field, {op: value})

    def or_(self, conditions):
        """ At least one of the conditions is true. Repeated calls add more conditions. """
        return self._extend_logical('$or', conditions)

    def delete_one(self, collection):
        return self._execute(collection, 'delete_one', self.document, **self._options.to_kwargs())

    def delete_many(self, collection):
        return self._execute(collection, 'delete_many', self.document, **self._options.to_kwargs())
