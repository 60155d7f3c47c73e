from collections.abc import Mapping

from ..exc import InvalidSettingsError


class ExecutionSettingsHandler:
    """ Settings keeper for builders

        This is essentially a helper which will feed the correct kwargs to every collection method.

        Builders receive execution settings as one flat dict (see ExecutionSettingsDict).
        Collection methods, however, accept different subsets of those,
        and sometimes spell them differently: `find()` wants `max_time_ms`, `aggregate()` wants `maxTimeMS`.

        This class knows which method takes which setting, and under what name.
    """

    # operation => {setting name => driver kwarg name}
    OPERATION_KWARGS = {
        'find': {
            'session': 'session',
            'comment': 'comment',
            'collation': 'collation',
            'hint': 'hint',
            'let': 'let',
            'max_time_ms': 'max_time_ms',
            'batch_size': 'batch_size',
            'allow_disk_use': 'allow_disk_use',
        },
        'count_documents': {
            'session': 'session',
            'comment': 'comment',
            'collation': 'collation',
            'hint': 'hint',
            'max_time_ms': 'maxTimeMS',
        },
        'update': {
            'session': 'session',
            'comment': 'comment',
            'collation': 'collation',
            'hint': 'hint',
            'let': 'let',
            'bypass_document_validation': 'bypass_document_validation',
        },
        'delete': {
            'session': 'session',
            'comment': 'comment',
            'collation': 'collation',
            'hint': 'hint',
            'let': 'let',
        },
        'aggregate': {
            'session': 'session',
            'comment': 'comment',
            'collation': 'collation',
            'hint': 'hint',
            'let': 'let',
            'max_time_ms': 'maxTimeMS',
            'batch_size': 'batchSize',
            'allow_disk_use': 'allowDiskUse',
        },
    }

    # Collection methods that share a set of kwargs
    OPERATION_ALIASES = {
        'find_one': 'find',
        'update_one': 'update',
        'update_many': 'update',
        'delete_one': 'delete',
        'delete_many': 'delete',
    }

    #: All known setting names (to identify invalid ones)
    KNOWN_SETTINGS = frozenset(name
                               for kwargs in OPERATION_KWARGS.values()
                               for name in kwargs)

    def __init__(self, settings: Mapping = None):
        """ Store the settings

            :param settings: dict of execution settings
        """
        #: Settings dict
        self._settings = dict(settings or {})

    def raise_if_invalid_settings(self, builder: str):
        """ Check whether there were any typos in setting names

            :param builder: Builder name, for the error message
            :raises InvalidSettingsError: Invalid settings provided
        """
        invalid_keys = set(self._settings.keys()) - self.KNOWN_SETTINGS
        if invalid_keys:
            raise InvalidSettingsError(builder, invalid_keys)

    def merged(self, settings: Mapping) -> 'ExecutionSettingsHandler':
        """ Get a new handler with more settings on top of the current ones """
        return self.__class__({**self._settings, **settings})

    def kwargs_for(self, operation: str) -> dict:
        """ Get the kwargs for a collection method

            Settings that the method does not support are left out, and so are `None` values.

            :param operation: Collection method name: 'find', 'update_one', 'aggregate', ...
        """
        kwargs_names = self.OPERATION_KWARGS[self.OPERATION_ALIASES.get(operation, operation)]
        return {kwargs_names[name]: value
                for name, value in self._settings.items()
                if name in kwargs_names and value is not None}

    @property
    def settings(self) -> dict:
        return dict(self._settings)

    def __eq__(self, other):
        return isinstance(other, ExecutionSettingsHandler) and self._settings == other._settings

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, self._settings)
