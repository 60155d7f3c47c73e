from copy import copy, deepcopy
from logging import getLogger

from ..util.execution_settings_handler import ExecutionSettingsHandler

logger = getLogger(__name__)


class MongoBuilderBase:
    """ An immutable builder that accumulates a MongoDB document

        Every subclass accumulates one kind of document (a filter, an update, a pipeline)
        and knows how to hand it over to a collection.

        Builders are values: every method that adds something to the document
        returns a new builder, and the original one is never modified.
        This means that a builder can be shared, reused, and branched:

            active = FilterBuilder().where('status', 'active')
            adults = active.where('age', gte=18)  # `active` is still just {'status': 'active'}
    """

    #: Names of the attributes that hold mutable state.
    #: These are deep-copied by __copy__(): the rest is shared between copies.
    STATE_ATTR_NAMES = ()

    def __init__(self, settings=None):
        """ Initialize an empty builder

        :param settings: Execution settings: driver kwargs forwarded to the collection.
            See ExecutionSettingsDict for the list of supported keys.
        :type settings: dict | ExecutionSettingsDict | None
        :raises InvalidSettingsError: unknown setting names
        """
        #: Execution settings
        self._settings = ExecutionSettingsHandler(settings)
        self._settings.raise_if_invalid_settings(self.__class__.__name__)

    def __copy__(self):
        """ Make a copy that shares nothing mutable with this builder

            This is how every method derives a new builder: copy(), then change the copy.
        """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update(self.__dict__)

        # Copy the state
        for name in self.STATE_ATTR_NAMES:
            setattr(result, name, deepcopy(getattr(self, name)))

        return result

    def _derive(self):
        """ Get a copy of this builder to apply one change to """
        return copy(self)

    def with_settings(self, **settings):
        """ Get a builder with more execution settings on top of the current ones

        Example:

            FilterBuilder().where('status', 'active').with_settings(session=session).find(collection)

        :raises InvalidSettingsError: unknown setting names
        """
        settings = self._settings.merged(settings)
        settings.raise_if_invalid_settings(self.__class__.__name__)

        builder = self._derive()
        builder._settings = settings
        return builder

    @property
    def settings(self) -> dict:
        """ Execution settings of this builder """
        return self._settings.settings

    def _execute(self, collection, operation: str, *args, **kwargs):
        """ Call a method on the collection with the accumulated document

            Whatever the collection returns is returned unchanged: a result, a cursor, or,
            with an asynchronous collection, an awaitable.
            Whatever it raises is not caught.

            :param collection: pymongo.collection.Collection, or anything that quacks like it
            :param operation: Collection method name
            :param args: Positional arguments for the method: the documents
            :param kwargs: Options for the method. Execution settings are added to them.
        """
        kwargs.update(self._settings.kwargs_for(operation))

        logger.debug('%s.%s(): %s: %r', self.__class__.__name__, operation,
                     getattr(collection, 'name', collection), args)

        return getattr(collection, operation)(*args, **kwargs)

    def _state(self) -> tuple:
        return tuple(getattr(self, name) for name in self.STATE_ATTR_NAMES)

    def __eq__(self, other):
        return type(self) is type(other) and \
               self._state() == other._state() and \
               self._settings == other._settings

    __hash__ = None
