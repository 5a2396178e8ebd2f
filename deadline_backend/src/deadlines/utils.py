from __future__ import annotations

import time

from ulid import ULID


# PUBLIC_INTERFACE
def new_uid() -> str:
    """
    Generate a record identifier.

    ULIDs are 26-character Crockford base32 strings: URL safe, globally unique
    and lexicographically sortable by creation time.
    """
    return str(ULID())


# PUBLIC_INTERFACE
def now_ts() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


# PUBLIC_INTERFACE
def next_updated_at(previous: int) -> int:
    """
    Timestamp for a modification of a record last stamped at `previous`.

    Timestamps have one-second resolution, so two writes within the same
    second would otherwise share a value; updated_at must strictly increase.
    """
    return max(now_ts(), previous + 1)
