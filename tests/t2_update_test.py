import unittest
from collections import namedtuple
from dataclasses import dataclass

from bson.int64 import Int64

from mongodsl import UpdateBuilder, UpdateOptions, FilterBuilder
from mongodsl.exc import UnserializableValueError, BaseMongoDslException
from .util import DocumentAssertionsMixin


@dataclass
class Profile:
    name: str
    age: int


Point = namedtuple('Point', ('x', 'y'))


class UpdateBuilderTest(DocumentAssertionsMixin, unittest.TestCase):
    """ Test UpdateBuilder: update documents and options """

    longMessage = True
    maxDiff = None

    def test_empty(self):
        ub = UpdateBuilder()
        self.assertEqual(ub.document, {})
        self.assertEqual(ub.options, UpdateOptions())
        self.assertEqual(ub.options.to_kwargs(), {'upsert': False})

    def test_set(self):
        # Merge into one sub-document
        self.assertEqual(UpdateBuilder().set('a', 1).set('b', 2).document,
                         {'$set': {'a': 1, 'b': 2}})

        # Canonical values
        doc = UpdateBuilder().set('a', 1).set('flag', False).document
        self.assertIsInstance(doc['$set']['a'], Int64)
        self.assertIs(type(doc['$set']['flag']), bool)

        # Same field: last write wins
        self.assertEqual(UpdateBuilder().set('a', 1).set('a', 2).document, {'$set': {'a': 2}})

    def test_set_document(self):
        # Mapping
        self.assertEqual(UpdateBuilder().set({'name': 'John', 'age': 30}).document,
                         {'$set': {'name': 'John', 'age': 30}})

        # Replaces the whole $set
        self.assertEqual(UpdateBuilder().set('x', 1).set({'name': 'John'}).document,
                         {'$set': {'name': 'John'}})

        # ...and later fields are merged into it
        self.assertEqual(UpdateBuilder().set({'name': 'John'}).set('x', 1).document,
                         {'$set': {'name': 'John', 'x': 1}})

        # Dataclass
        self.assertEqual(UpdateBuilder().set(Profile('John', 30)).document,
                         {'$set': {'name': 'John', 'age': 30}})

        # Named tuple
        self.assertEqual(UpdateBuilder().set(Point(1, 2)).document,
                         {'$set': {'x': 1, 'y': 2}})

        # Other operators survive
        self.assertEqual(UpdateBuilder().increment('n', 1).set({'a': 1}).document,
                         {'$inc': {'n': 1}, '$set': {'a': 1}})

        # Not a document
        with self.assertRaises(UnserializableValueError) as e:
            UpdateBuilder().set(42)
        self.assertIsInstance(e.exception, TypeError)
        self.assertIsInstance(e.exception, BaseMongoDslException)
        self.assertIn('int', str(e.exception))

        # A dataclass class is not an instance
        with self.assertRaises(UnserializableValueError):
            UpdateBuilder().set(Profile)

    def test_field_operators(self):
        ub = UpdateBuilder()

        self.assertEqual(ub.set_on_insert('created', 'now').document, {'$setOnInsert': {'created': 'now'}})
        self.assertEqual(ub.increment('n', 5).document, {'$inc': {'n': 5}})
        self.assertIsInstance(ub.increment('n', 5).document['$inc']['n'], Int64)
        self.assertEqual(ub.increment('balance', -0.5).document, {'$inc': {'balance': -0.5}})
        self.assertEqual(ub.multiply('price', 2).document, {'$mul': {'price': 2.0}})
        self.assertIsInstance(ub.multiply('price', 2).document['$mul']['price'], float)
        self.assertEqual(ub.rename('nick', 'alias').document, {'$rename': {'nick': 'alias'}})
        self.assertEqual(ub.unset('tmp').document, {'$unset': {'tmp': 1}})
        self.assertEqual(ub.current_date('updated').document, {'$currentDate': {'updated': True}})

        # Different operators live side by side
        self.assertEqual(ub.set('a', 1).increment('n', 1).unset('tmp').document, {
            '$set': {'a': 1},
            '$inc': {'n': 1},
            '$unset': {'tmp': 1},
        })

    def test_array_operators(self):
        ub = UpdateBuilder()

        self.assertEqual(ub.pop('queue').document, {'$pop': {'queue': 1}})
        self.assertEqual(ub.pop('queue', first=True).document, {'$pop': {'queue': -1}})

        # push: bare value
        self.assertEqual(ub.push('items', 'x').document, {'$push': {'items': 'x'}})
        self.assertEqual(ub.push('items', 'x').push('tags', 'y').document,
                         {'$push': {'items': 'x', 'tags': 'y'}})

        # push: with options
        self.assertEqual(ub.push('items', 'x', options=[('$slice', 5)]).document,
                         {'$push': {'items': {'$each': ['x'], '$slice': 5}}})
        self.assertEqual(ub.push('scores', 89, options={'$sort': -1, '$slice': 3}).document,
                         {'$push': {'scores': {'$each': [89], '$sort': -1, '$slice': 3}}})

        # push_each
        self.assertEqual(ub.push_each('items', ['a', 'b']).document,
                         {'$push': {'items': {'$each': ['a', 'b']}}})
        self.assertEqual(ub.push_each('items', ('a', 'b'), options=[('$position', 0)]).document,
                         {'$push': {'items': {'$each': ['a', 'b'], '$position': 0}}})

        # Sets
        self.assertEqual(ub.add_to_set('tags', 'python').document, {'$addToSet': {'tags': 'python'}})
        self.assertEqual(ub.add_each_to_set('tags', ['a', 'b']).document,
                         {'$addToSet': {'tags': {'$each': ['a', 'b']}}})

        # Pull
        self.assertEqual(ub.pull('scores', {'$lt': 50}).document, {'$pull': {'scores': {'$lt': 50}}})
        self.assertEqual(ub.pull_all('tags', ('a', 'b')).document, {'$pullAll': {'tags': ['a', 'b']}})

    def test_positional(self):
        self.assertEqual(UpdateBuilder().set_at_position('grades', 90).document,
                         {'$set': {'grades.$': 90}})
        self.assertEqual(UpdateBuilder().set_at_all_positions('grades', 0).document,
                         {'$set': {'grades.$[]': 0}})

        ub = (UpdateBuilder()
              .set('updated', True)
              .set_at_filtered_position('grades', 100, 'elem', {'elem.score': {'$gte': 90}}))
        self.assertEqual(ub.document, {'$set': {'updated': True, 'grades.$[elem]': 100}})
        self.assertEqual(ub.options.array_filters, [{'elem.score': {'$gte': 90}}])

        # Array filters accumulate, duplicates included
        ub = ub.set_at_filtered_position('grades', 100, 'elem', {'elem.score': {'$gte': 90}})
        self.assertEqual(ub.options.array_filters, [{'elem.score': {'$gte': 90}}] * 2)
        self.assertEqual(ub.options.to_kwargs(), {
            'upsert': False,
            'array_filters': [{'elem.score': {'$gte': 90}}] * 2,
        })

        # A FilterBuilder as the condition
        ub = UpdateBuilder().set_at_filtered_position('items', 0, 'i', FilterBuilder().where('i.qty', lt=0))
        self.assertEqual(ub.options.array_filters, [{'i.qty': {'$lt': 0}}])

    def test_upsert(self):
        self.assertEqual(UpdateBuilder().upsert().options.upsert, True)
        self.assertEqual(UpdateBuilder().upsert().upsert(False).options.upsert, False)

        # Keeps array filters
        ub = UpdateBuilder().set_at_filtered_position('a', 1, 'x', {'x': 1}).upsert()
        self.assertEqual(ub.options, UpdateOptions(upsert=True, array_filters=[{'x': 1}]))

        # Never touches the document
        self.assertEqual(UpdateBuilder().upsert().document, {})

    def test_immutability(self):
        base = UpdateBuilder().set('a', 1).push('items', 'x')

        self.assertImmutableCall(base, 'set', 'b', 2)
        self.assertImmutableCall(base, 'set', 'a', 100)
        self.assertImmutableCall(base, 'set', {'c': 3})
        self.assertImmutableCall(base, 'push', 'items', 'y')
        self.assertImmutableCall(base, 'set_at_filtered_position', 'g', 1, 'e', {'e': 1})
        self.assertImmutableCall(base, 'upsert')

        b1 = base.set('b', 2)
        b2 = base.increment('n', 1)
        self.assertEqual(base.document, {'$set': {'a': 1}, '$push': {'items': 'x'}})
        self.assertEqual(b1.document, {'$set': {'a': 1, 'b': 2}, '$push': {'items': 'x'}})
        self.assertEqual(b2.document, {'$set': {'a': 1}, '$push': {'items': 'x'}, '$inc': {'n': 1}})

    def test_document_is_a_copy(self):
        ub = UpdateBuilder().set('a', 1)
        doc = ub.document
        doc['$set']['b'] = 2
        self.assertEqual(ub.document, {'$set': {'a': 1}})

    def test_arguments_are_copied(self):
        # The caller's objects are not shared with the builder
        items = [1]
        ub = UpdateBuilder().set('items', items).push_each('log', items)
        items.append(2)
        self.assertEqual(ub.document, {'$set': {'items': [1]}, '$push': {'log': {'$each': [1]}}})

        profile = {'name': 'John', 'tags': ['a']}
        ub = UpdateBuilder().set(profile)
        profile['tags'].append('b')
        self.assertEqual(ub.document, {'$set': {'name': 'John', 'tags': ['a']}})

        condition = {'g': {'$gte': 90}}
        ub = UpdateBuilder().set_at_filtered_position('grades', 100, 'g', condition)
        condition['g']['$gte'] = 0
        self.assertEqual(ub.options.array_filters, [{'g': {'$gte': 90}}])

    def test_repr(self):
        self.assertEqual(repr(UpdateBuilder().unset('a')), "UpdateBuilder({'$unset': {'a': 1}})")
