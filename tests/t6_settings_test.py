import unittest

from mongodsl import FilterBuilder, UpdateBuilder, DeleteBuilder, AggregationBuilder, ExecutionSettingsDict
from mongodsl.exc import InvalidSettingsError, BaseMongoDslException
from mongodsl.util import ExecutionSettingsHandler
from .util import mock_collection


class SettingsTest(unittest.TestCase):
    """ Test execution settings """

    longMessage = True
    maxDiff = None

    def test_settings_dict(self):
        settings = ExecutionSettingsDict(max_time_ms=5000, comment='dashboard')

        # Every key is there
        self.assertEqual(set(settings), {
            'session', 'comment', 'collation', 'hint', 'let',
            'max_time_ms', 'batch_size', 'allow_disk_use',
            'bypass_document_validation',
        })
        self.assertEqual(settings['max_time_ms'], 5000)
        self.assertEqual(settings['comment'], 'dashboard')
        self.assertIsNone(settings['session'])

        # Every key is known to the handler
        self.assertEqual(set(settings), ExecutionSettingsHandler.KNOWN_SETTINGS)

    def test_handler_kwargs(self):
        handler = ExecutionSettingsHandler(ExecutionSettingsDict(
            comment='c', max_time_ms=100, batch_size=10, allow_disk_use=True, bypass_document_validation=True))

        # Names are translated; unsupported settings and Nones are left out
        self.assertEqual(handler.kwargs_for('find'),
                         {'comment': 'c', 'max_time_ms': 100, 'batch_size': 10, 'allow_disk_use': True})
        self.assertEqual(handler.kwargs_for('find_one'), handler.kwargs_for('find'))
        self.assertEqual(handler.kwargs_for('count_documents'), {'comment': 'c', 'maxTimeMS': 100})
        self.assertEqual(handler.kwargs_for('aggregate'),
                         {'comment': 'c', 'maxTimeMS': 100, 'batchSize': 10, 'allowDiskUse': True})
        self.assertEqual(handler.kwargs_for('update_one'), {'comment': 'c', 'bypass_document_validation': True})
        self.assertEqual(handler.kwargs_for('update_many'), handler.kwargs_for('update_one'))
        self.assertEqual(handler.kwargs_for('delete_many'), {'comment': 'c'})

        # Empty
        self.assertEqual(ExecutionSettingsHandler().kwargs_for('find'), {})

    def test_invalid_settings(self):
        for builder_class in (FilterBuilder, UpdateBuilder, DeleteBuilder, AggregationBuilder):
            with self.assertRaises(InvalidSettingsError) as e:
                builder_class({'max_time': 100, 'comment': 'ok'})
            self.assertEqual(e.exception.setting_names, ['max_time'])
            self.assertEqual(e.exception.builder, builder_class.__name__)

        # Also from with_settings()
        with self.assertRaises(InvalidSettingsError) as e:
            FilterBuilder().with_settings(timeout=1, retries=2)
        self.assertEqual(str(e.exception), 'Invalid execution settings for FilterBuilder: retries, timeout')

        # Exception hierarchy
        self.assertIsInstance(e.exception, KeyError)
        self.assertIsInstance(e.exception, BaseMongoDslException)

    def test_with_settings(self):
        base = FilterBuilder(settings={'comment': 'a'}).where('x', 1)
        derived = base.with_settings(max_time_ms=100)

        # Merged into a new builder
        self.assertEqual(derived.settings, {'comment': 'a', 'max_time_ms': 100})
        self.assertEqual(base.settings, {'comment': 'a'})
        self.assertEqual(derived.document, base.document)

        # Override
        self.assertEqual(derived.with_settings(comment='b').settings, {'comment': 'b', 'max_time_ms': 100})

        # Settings survive further derivation
        self.assertEqual(derived.where('y', 2).settings, derived.settings)

        # Settings take part in equality
        self.assertNotEqual(base, derived)

    def test_settings_reach_the_collection(self):
        session = object()
        settings = ExecutionSettingsDict(session=session, max_time_ms=500, bypass_document_validation=True)
        collection = mock_collection()

        FilterBuilder(settings).where('a', 'b').limit(1).find(collection)
        collection.find.assert_called_once_with({'a': 'b'}, limit=1, session=session, max_time_ms=500)

        FilterBuilder(settings).where('a', 'b').count(collection)
        collection.count_documents.assert_called_once_with({'a': 'b'}, session=session, maxTimeMS=500)

        UpdateBuilder(settings).set('a', 'c').update_one(collection, {'a': 'b'})
        collection.update_one.assert_called_once_with(
            {'a': 'b'}, {'$set': {'a': 'c'}},
            upsert=False, session=session, bypass_document_validation=True)

        DeleteBuilder(settings).filter('a', 'b').delete_one(collection)
        collection.delete_one.assert_called_once_with({'a': 'b'}, session=session)

        AggregationBuilder(settings).limit(1).with_settings(allow_disk_use=True).execute(collection)
        collection.aggregate.assert_called_once_with(
            [{'$limit': 1}], session=session, maxTimeMS=500, allowDiskUse=True)
