# shardflags/models/configuration.py
"""Immutable configuration snapshot consumed by the evaluators."""


from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional

from shardflags.models.bandit import BanditModel, BanditReference
from shardflags.models.flag import Flag


class Configuration:
    """Read-only bundle of flags, bandit models and bandit references.

    A snapshot is never mutated once built; a new snapshot replaces the old
    one in the :class:`~shardflags.repositories.memory_repo.ConfigurationStore`.
    """

    __slots__ = (
        "_flags",
        "_bandits",
        "_bandit_references",
        "_flag_config_version",
        "_bandit_model_versions",
    )

    def __init__(
        self,
        flags: Optional[Iterable[Flag]] = None,
        bandits: Optional[Iterable[BanditModel]] = None,
        bandit_references: Optional[Mapping[str, BanditReference]] = None,
        flag_config_version: Optional[str] = None,
    ) -> None:
        self._flags = MappingProxyType({f.key: f for f in flags or ()})
        self._bandits = MappingProxyType(
            {b.bandit_key: b for b in bandits or ()}
        )
        self._bandit_references = MappingProxyType(
            dict(bandit_references or {})
        )
        self._flag_config_version = flag_config_version
        self._bandit_model_versions = frozenset(
            ref.model_version
            for ref in self._bandit_references.values()
            if ref.flag_variations
        )

    @classmethod
    def empty(cls) -> "Configuration":
        return cls()

    def try_get_flag(self, key: str) -> Optional[Flag]:
        return self._flags.get(key)

    def try_get_bandit(self, key: str) -> Optional[BanditModel]:
        return self._bandits.get(key)

    def try_get_bandit_key(
        self, flag_key: str, variation_value: str
    ) -> Optional[str]:
        """Return the bandit that scores actions for a flag variation value."""
        for reference in self._bandit_references.values():
            for flag_variation in reference.flag_variations:
                if (
                    flag_variation.flag_key == flag_key
                    and flag_variation.variation_value == variation_value
                ):
                    return flag_variation.bandit_key
        return None

    @property
    def flags(self) -> Mapping[str, Flag]:
        return self._flags

    @property
    def bandits(self) -> Mapping[str, BanditModel]:
        return self._bandits

    @property
    def bandit_references(self) -> Mapping[str, BanditReference]:
        return self._bandit_references

    @property
    def flag_keys(self) -> FrozenSet[str]:
        return frozenset(self._flags)

    @property
    def bandit_keys(self) -> FrozenSet[str]:
        return frozenset(self._bandits)

    @property
    def flag_config_version(self) -> Optional[str]:
        return self._flag_config_version

    @property
    def bandit_model_versions(self) -> FrozenSet[str]:
        return self._bandit_model_versions
