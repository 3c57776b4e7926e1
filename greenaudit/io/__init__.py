"""greenaudit I/O package.

File read/write operations and document formatting only; no scoring logic
in this layer.
"""

from greenaudit.io.criteria_loader import load_criteria_config
from greenaudit.io.document import build_document_text, document_context, split_pages
from greenaudit.io.job_store import JobStore, JsonJobStore
from greenaudit.io.persistence import load_json, load_structured, save_json

__all__ = [
    "build_document_text",
    "document_context",
    "split_pages",
    "load_criteria_config",
    "JobStore",
    "JsonJobStore",
    "save_json",
    "load_json",
    "load_structured",
]
