"""
MongoDSL is a fluent builder for [MongoDB](https://www.mongodb.com/) queries, updates and aggregation pipelines
on top of [PyMongo](https://pymongo.readthedocs.io/).

Instead of writing nested dicts full of `$`-keys by hand, you chain method calls:

```python
from mongodsl import FilterBuilder, UpdateBuilder, SortOrder

active_adults = (FilterBuilder()
    .where('status', 'active')
    .where('age', gte=18)
    .sort('age', SortOrder.DESCENDING)
    .limit(10))

for user in active_adults.find(db.users):
    ...

UpdateBuilder().set('status', 'inactive').update_many(db.users, where=active_adults)
```

Every builder is immutable: each method returns a new builder, so partial queries can be
kept in variables and reused as building blocks.
"""

# Exceptions that are used here and there
from .exc import *

# Enums used as arguments
from .types import SortOrder, BsonType

# The heart of MongoDSL are the builders:
# that's where your method calls are turned into MongoDB documents
from . import builders
from .builders import FilterBuilder, UpdateBuilder, DeleteBuilder, AggregationBuilder

# Options that builders keep on the side of their documents
from .options import FindOptions, UpdateOptions, DeleteOptions

# Build a document with a function: query(lambda q: q.where(...))
from .dsl import query, update, delete, aggregate

# Helpers
# The marker for arguments that were not given at all
from .util import ABSENT
# Settings object for the builders
from .util import ExecutionSettingsDict
