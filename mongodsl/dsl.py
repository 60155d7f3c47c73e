""" Build a document with a function

    These helpers give a function an empty builder, and return the document it has built.
    Handy with lambdas:

        query(lambda q: q.where('status', 'active').where('age', gte=18))
        # -> {'status': 'active', 'age': {'$gte': 18}}
"""

from typing import Callable

from .builders import FilterBuilder, UpdateBuilder, DeleteBuilder, AggregationBuilder


def query(build: Callable[[FilterBuilder], FilterBuilder]) -> dict:
    """ Build a filter document """
    return build(FilterBuilder()).document


def update(build: Callable[[UpdateBuilder], UpdateBuilder]) -> dict:
    """ Build an update document """
    return build(UpdateBuilder()).document


def delete(build: Callable[[DeleteBuilder], DeleteBuilder]) -> dict:
    """ Build a filter document for deleting """
    return build(DeleteBuilder()).document


def aggregate(build: Callable[[AggregationBuilder], AggregationBuilder]) -> list:
    """ Build an aggregation pipeline """
    return build(AggregationBuilder()).pipeline
