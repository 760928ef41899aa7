# Services package

from .tokenizer import tokenize, normalize_command
from .curl_interpreter import CurlImport, interpret, parse_curl
from .fingerprint import fingerprint
from .stores import HistoryStore, SavedRequestStore
from .blob_store import MemoryBlobStore, SqlBlobStore
from . import postman_importer, insomnia_importer

__all__ = [
    "tokenize",
    "normalize_command",
    "CurlImport",
    "interpret",
    "parse_curl",
    "fingerprint",
    "HistoryStore",
    "SavedRequestStore",
    "MemoryBlobStore",
    "SqlBlobStore",
    "postman_importer",
    "insomnia_importer",
]
