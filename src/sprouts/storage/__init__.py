from .blob import merge_with_defaults
from .kv_store import JsonFileBackend, KeyValueBackend, MemoryBackend

__all__ = ["JsonFileBackend", "KeyValueBackend", "MemoryBackend", "merge_with_defaults"]
