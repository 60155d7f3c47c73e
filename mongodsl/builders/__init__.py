"""

If you know how to write MongoDB queries, you already know how to use these builders.
They produce the very same documents that you would write by hand, only with method calls
instead of nested dicts with `$`-keys:

```python
FilterBuilder().where('age', gte=18).or_([{'role': 'admin'}, {'role': 'owner'}]).document
# -> {'age': {'$gte': 18}, '$or': [{'role': 'admin'}, {'role': 'owner'}]}
```

There are four builders, one per kind of document:

* `FilterBuilder`: [Filter Builder](#filter-builder) builds filters for `find()`, and keeps sort/limit/projection
* `UpdateBuilder`: [Update Builder](#update-builder) builds update documents for `update_one()` and `update_many()`
* `DeleteBuilder`: a filter for `delete_one()` and `delete_many()`
* `AggregationBuilder`: [Aggregation Builder](#aggregation-builder) builds pipelines for `aggregate()`

All of them work the same way:

1. Start with an empty builder
2. Every method call gives you a new builder, with one more thing in its document.
   The builder you called it on stays the same, so you can keep it around and reuse it.
3. Either read the document (`.document`, or `.pipeline`), or give the builder a collection to run on

Builders never talk to MongoDB on their own: they hand the document over to a PyMongo collection,
and give you back whatever the collection has returned. Errors are not caught either.
"""

from .base import MongoBuilderBase
from .sort import sort_document
from .filter import FilterBuilder, FilterDocumentBuilderBase
from .update import UpdateBuilder
from .delete import DeleteBuilder
from .aggregate import AggregationBuilder
