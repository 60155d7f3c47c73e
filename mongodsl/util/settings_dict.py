from typing import *


class ExecutionSettingsDict(dict):
    """ Execution settings container.

        Is only used for nice autocompletion and documentation purposes only! :)

        The keys are driver keyword arguments that builders forward to the collection
        when a query is executed. Every collection method only receives the settings it supports:
        see ExecutionSettingsHandler.

        Example:

            settings = ExecutionSettingsDict(max_time_ms=5000, comment='dashboard')
            FilterBuilder(settings).where('status', 'active').find(collection)
    """

    def __init__(self,
                 # --- every operation
                 session = None,
                 comment = None,
                 # --- find, count, update, delete, aggregate
                 collation: Mapping = None,
                 hint = None,
                 # --- find, update, delete, aggregate
                 let: Mapping = None,
                 # --- find, count, aggregate
                 max_time_ms: int = None,
                 # --- find, aggregate
                 batch_size: int = None,
                 allow_disk_use: bool = None,
                 # --- update
                 bypass_document_validation: bool = None,
                 ):
        """ Settings that control how the driver executes a builder's document.

        Args:
            session (pymongo.client_session.ClientSession): (for: everything)
                The session to run the operation in.
            comment (Any): (for: everything)
                A comment attached to the operation; shows up in the profiler and the server logs.
            collation (dict): (for: find, count, update, delete, aggregate)
                Collation rules for string comparison.
            hint (str | list): (for: find, count, update, delete, aggregate)
                The index to use: an index name, or an index specification.
            let (dict): (for: find, update, delete, aggregate)
                Variables that can be accessed with `$$var` in the filter or pipeline.
            max_time_ms (int): (for: find, count, aggregate)
                Server-side time limit for the operation, in milliseconds.
                The driver spells it `maxTimeMS` for `count_documents()` and `aggregate()`.
            batch_size (int): (for: find, aggregate)
                The number of documents to return per batch.
            allow_disk_use (bool): (for: find, aggregate)
                Allow the server to write temporary data to disk for large sorts and stages.
            bypass_document_validation (bool): (for: update)
                Skip schema validation on the updated documents.

        Settings that are `None` are never passed to the driver.
        """
        super(ExecutionSettingsDict, self).__init__()
        self.update({k: v
                     for k, v in locals().items()
                     if k not in {'__class__', 'self'}})
