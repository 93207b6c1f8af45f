# tests/test_sharder.py
"""
Unit tests for the sharder. Hash values are shared with the other SDKs and
must never change.
"""


from shardflags.models.flag import Shard, ShardRange
from shardflags.services.sharder import (
    get_hex,
    get_shard,
    is_in_range,
    matches_all_shards,
    matches_shard,
)


SUBJECT_KEY = "subjectKey"
TOTAL_SHARDS = 10  # "na-subjectKey" -> 4, "cl-subjectKey" -> 6


def test_get_hex_matches_reference_digests():
    assert get_hex("hello-world") == "2095312189753de6ad47dfe20cbe97ec"
    assert (
        get_hex("another-string-with-experiment-subject")
        == "fd6bfc667b1bcdb901173f3d712e6c50"
    )


def test_get_shard_uses_first_eight_hex_digits():
    assert get_shard("hello-world", 100000) == 0x20953121 % 100000
    assert get_shard("hello-world", 100000) == 48353
    assert get_shard("hello-world", 10000) == 8353


def test_get_shard_is_within_bounds():
    shard = get_shard("test-user", 100)
    assert 0 <= shard < 100


def test_range_is_half_open():
    shard_range = ShardRange(start=10, end=20)
    assert is_in_range(10, shard_range) is True
    assert is_in_range(19, shard_range) is True
    assert is_in_range(20, shard_range) is False
    assert is_in_range(9, shard_range) is False


def test_matches_shard_any_range():
    shard = Shard(
        salt="na",
        ranges=(ShardRange(0, 2), ShardRange(4, 5)),
    )
    assert matches_shard(shard, SUBJECT_KEY, TOTAL_SHARDS) is True


def test_no_matching_shards_returns_false():
    shards = [
        Shard(salt="na", ranges=(ShardRange(0, 4), ShardRange(5, 9))),
        Shard(salt="cl", ranges=()),
    ]
    assert matches_all_shards(shards, SUBJECT_KEY, TOTAL_SHARDS) is False


def test_some_matching_shards_returns_false():
    shards = [
        Shard(salt="na", ranges=(ShardRange(0, TOTAL_SHARDS),)),
        Shard(salt="cl", ranges=(ShardRange(0, 6),)),
    ]
    assert matches_all_shards(shards, SUBJECT_KEY, TOTAL_SHARDS) is False


def test_all_matching_shards_returns_true():
    shards = [
        Shard(salt="na", ranges=(ShardRange(0, TOTAL_SHARDS),)),
        Shard(salt="cl", ranges=(ShardRange(6, 7),)),
    ]
    assert matches_all_shards(shards, SUBJECT_KEY, TOTAL_SHARDS) is True


def test_empty_shard_list_matches():
    assert matches_all_shards([], SUBJECT_KEY, TOTAL_SHARDS) is True
