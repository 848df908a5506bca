# Helpers for identifiers and content hashes.
# Author: Shibo Li
# Date: 2025-07-02
# Version: 0.1.0

import hashlib
from uuid import uuid4


def create_id(prefix: str = "") -> str:
    """Returns a fresh uuid4, optionally as ``<prefix>_<uuid>``."""
    new_id = str(uuid4())
    return f"{prefix}_{new_id}" if prefix else new_id


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
