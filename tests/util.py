from copy import deepcopy
from unittest import mock

from pymongo.collection import Collection


def mock_collection(name: str = 'users', **return_values):
    """ Make a fake pymongo Collection

        Methods return MagicMocks, unless a return value is given:

            mock_collection(find_one={'_id': 1})
    """
    collection = mock.MagicMock(spec=Collection)
    collection.name = name
    for method_name, value in return_values.items():
        getattr(collection, method_name).return_value = value
    return collection


class DocumentAssertionsMixin:
    """ unittest mixin that helps checking builders """

    def assertImmutableCall(self, builder, method_name: str, *args, **kwargs):
        """ Call a builder method, and make sure the builder has not changed

            :return: The new builder
        """
        before = deepcopy(builder._state())
        result = getattr(builder, method_name)(*args, **kwargs)

        self.assertIsNot(result, builder)
        self.assertEqual(builder._state(), before, 'The builder has changed after {}()'.format(method_name))
        return result

    def assertStage(self, builder, expected_stage: dict):
        """ Check the single stage of an AggregationBuilder """
        self.assertEqual(builder.pipeline, [expected_stage])
