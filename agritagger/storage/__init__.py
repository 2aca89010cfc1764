from agritagger.storage.local import LocalKeyValueStorage, LocalStorageError
from agritagger.storage.protocols import KeyValueStorage

__all__ = ["KeyValueStorage", "LocalKeyValueStorage", "LocalStorageError"]
