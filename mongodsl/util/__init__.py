from .marker import ABSENT
from .values import to_bson_value, to_document, document_of, field_ref, field_refs
from .settings_dict import ExecutionSettingsDict
from .execution_settings_handler import ExecutionSettingsHandler
