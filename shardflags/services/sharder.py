# shardflags/services/sharder.py
"""Deterministic hash bucketing.

Every SDK must bucket a subject identically, so the hash (MD5), the input
encoding (UTF-8) and the width of the hex prefix (8 digits) are fixed.
"""


from __future__ import annotations

import hashlib
from typing import Iterable

from shardflags.models.flag import Shard, ShardRange


def get_hex(value: str) -> str:
    """Return the lower-case MD5 hex digest of ``value``."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def get_shard(value: str, total_shards: int) -> int:
    """Bucket ``value`` into ``[0, total_shards)``."""
    return int(get_hex(value)[:8], 16) % total_shards


def is_in_range(shard: int, shard_range: ShardRange) -> bool:
    return shard_range.start <= shard < shard_range.end


def matches_shard(shard: Shard, subject_key: str, total_shards: int) -> bool:
    """True if the salted subject bucket falls in any of the shard's ranges."""
    bucket = get_shard(f"{shard.salt}-{subject_key}", total_shards)
    return any(is_in_range(bucket, r) for r in shard.ranges)


def matches_all_shards(
    shards: Iterable[Shard], subject_key: str, total_shards: int
) -> bool:
    return all(matches_shard(s, subject_key, total_shards) for s in shards)
