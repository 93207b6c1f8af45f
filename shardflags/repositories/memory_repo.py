# shardflags/repositories/memory_repo.py
"""In-memory configuration store for ShardFlags.

The store keeps a reference to the active configuration snapshot in process
memory. Readers grab the reference once per evaluation and keep using that
snapshot even if a new one is activated meanwhile.
"""


from __future__ import annotations

import threading

import structlog

from shardflags.models.configuration import Configuration


logger = structlog.get_logger(__name__)


class ConfigurationStore:
    """Holder of the active ``Configuration`` snapshot."""

    def __init__(self, configuration: Configuration | None = None) -> None:
        self._configuration = configuration or Configuration.empty()
        self._lock = threading.Lock()

    def get(self) -> Configuration:
        """Return the active snapshot.

        Returns:
            The current configuration. Never ``None``; an empty snapshot is
            returned before anything has been activated.
        """
        return self._configuration

    def set(self, configuration: Configuration) -> Configuration:
        """Activate ``configuration`` and return the snapshot it replaced.

        Args:
            configuration: The new, fully built snapshot.

        Returns:
            The previously active snapshot.
        """
        with self._lock:
            previous = self._configuration
            self._configuration = configuration

        logger.info(
            "configuration_activated",
            flags=len(configuration.flags),
            bandits=len(configuration.bandits),
            flag_config_version=configuration.flag_config_version,
        )
        return previous
