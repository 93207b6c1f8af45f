# tests/conftest.py
"""Shared fixtures: a realistic flags document and a bandit models document.

Bucket values quoted in comments are MD5-derived and fixed across SDKs, e.g.
``salt-alice`` -> 3619 and ``salt-erin`` -> 6948 out of 10000 shards.
"""


import copy

import pytest


FULL_RANGE = [{"salt": "full", "ranges": [{"start": 0, "end": 10000}]}]


def _full_split(variation_key, extra_logging=None):
    split = {"variationKey": variation_key, "shards": copy.deepcopy(FULL_RANGE)}
    if extra_logging is not None:
        split["extraLogging"] = extra_logging
    return split


FLAGS_PAYLOAD = {
    "format": "SERVER",
    "createdAt": "2024-04-17T19:40:53.716Z",
    "environment": {"name": "Test"},
    "flags": {
        "kill-switch": {
            "key": "kill-switch",
            "enabled": True,
            "variationType": "BOOLEAN",
            "totalShards": 10000,
            "variations": {
                "on": {"key": "on", "value": True},
                "off": {"key": "off", "value": False},
            },
            "allocations": [
                {
                    "key": "internal-users",
                    "rules": [
                        {
                            "conditions": [
                                {
                                    "attribute": "email",
                                    "operator": "MATCHES",
                                    "value": "@example\\.com$",
                                }
                            ]
                        }
                    ],
                    "splits": [_full_split("on")],
                    "doLog": True,
                },
                {
                    "key": "everyone-else",
                    "splits": [_full_split("off")],
                    "doLog": True,
                },
            ],
        },
        "disabled-flag": {
            "key": "disabled-flag",
            "enabled": False,
            "variationType": "STRING",
            "variations": {"a": {"key": "a", "value": "a"}},
            "allocations": [{"key": "all", "splits": [_full_split("a")]}],
        },
        "numeric-flag": {
            "key": "numeric-flag",
            "enabled": True,
            "variationType": "NUMERIC",
            "variations": {"pi": {"key": "pi", "value": 3.1415926}},
            "allocations": [{"key": "all", "splits": [_full_split("pi")]}],
        },
        "integer-flag": {
            "key": "integer-flag",
            "enabled": True,
            "variationType": "INTEGER",
            "variations": {"three": {"key": "three", "value": 3.0}},
            "allocations": [{"key": "all", "splits": [_full_split("three")]}],
        },
        "json-flag": {
            "key": "json-flag",
            "enabled": True,
            "variationType": "JSON",
            "variations": {
                "blue": {"key": "blue", "value": '{"color": "blue", "size": 2}'}
            },
            "allocations": [{"key": "all", "splits": [_full_split("blue")]}],
        },
        "split-flag": {
            "key": "split-flag",
            "enabled": True,
            "variationType": "STRING",
            "totalShards": 10000,
            "variations": {
                "control": {"key": "control", "value": "control"},
                "treatment": {"key": "treatment", "value": "treatment"},
            },
            "allocations": [
                {
                    "key": "rollout",
                    "doLog": False,
                    "splits": [
                        {
                            "variationKey": "control",
                            "shards": [
                                {
                                    "salt": "salt",
                                    "ranges": [{"start": 0, "end": 5000}],
                                }
                            ],
                        },
                        {
                            "variationKey": "treatment",
                            "shards": [
                                {
                                    "salt": "salt",
                                    "ranges": [{"start": 5000, "end": 10000}],
                                }
                            ],
                            "extraLogging": {"holdout": "h1"},
                        },
                    ],
                }
            ],
        },
        "windowed-flag": {
            "key": "windowed-flag",
            "enabled": True,
            "variationType": "STRING",
            "variations": {"a": {"key": "a", "value": "a"}},
            "allocations": [
                {
                    "key": "expired",
                    "endAt": "2000-01-01T00:00:00.000Z",
                    "splits": [_full_split("a")],
                },
                {
                    "key": "not-started",
                    "startAt": "2999-01-01T00:00:00.000Z",
                    "splits": [_full_split("a")],
                },
            ],
        },
        "broken-flag": {
            "key": "broken-flag",
            "enabled": True,
            "variationType": "STRING",
            "variations": {"a": {"key": "a", "value": "a"}},
            "allocations": [{"key": "all", "splits": [_full_split("ghost")]}],
        },
        "banner_bandit_flag": {
            "key": "banner_bandit_flag",
            "enabled": True,
            "variationType": "STRING",
            "variations": {
                "banner_bandit": {
                    "key": "banner_bandit",
                    "value": "banner_bandit",
                },
                "control": {"key": "control", "value": "control"},
            },
            "allocations": [
                {
                    "key": "training",
                    "splits": [_full_split("banner_bandit")],
                    "doLog": True,
                }
            ],
        },
    },
    "banditReferences": {
        "banner_bandit": {
            "modelVersion": "v123",
            "flagVariations": [
                {
                    "key": "banner_bandit",
                    "flagKey": "banner_bandit_flag",
                    "allocationKey": "training",
                    "variationKey": "banner_bandit",
                    "variationValue": "banner_bandit",
                }
            ],
        }
    },
}


BANDITS_PAYLOAD = {
    "bandits": {
        "banner_bandit": {
            "banditKey": "banner_bandit",
            "modelName": "falcon",
            "modelVersion": "v123",
            "updatedAt": "2024-04-17T19:40:53.716Z",
            "modelData": {
                "gamma": 1.0,
                "defaultActionScore": 0.0,
                "actionProbabilityFloor": 0.0,
                "coefficients": {
                    "nike": {
                        "actionKey": "nike",
                        "intercept": 1.0,
                        "subjectNumericCoefficients": [
                            {
                                "attributeKey": "age",
                                "coefficient": 0.1,
                                "missingValueCoefficient": 0.0,
                            }
                        ],
                        "subjectCategoricalCoefficients": [
                            {
                                "attributeKey": "country",
                                "missingValueCoefficient": 0.0,
                                "valueCoefficients": {"US": 0.5, "UK": -0.5},
                            }
                        ],
                        "actionNumericCoefficients": [
                            {
                                "attributeKey": "brandAffinity",
                                "coefficient": 2.0,
                                "missingValueCoefficient": -0.1,
                            }
                        ],
                        "actionCategoricalCoefficients": [],
                    },
                    "adidas": {
                        "actionKey": "adidas",
                        "intercept": 1.1,
                        "subjectNumericCoefficients": [],
                        "subjectCategoricalCoefficients": [],
                        "actionNumericCoefficients": [],
                        "actionCategoricalCoefficients": [
                            {
                                "attributeKey": "loyalty_tier",
                                "missingValueCoefficient": 0.0,
                                "valueCoefficients": {"gold": 4.5},
                            }
                        ],
                    },
                },
            },
        }
    }
}


class RecordingLogger:
    """Assignment logger that keeps every event in memory."""

    def __init__(self):
        self.assignments = []
        self.bandit_actions = []

    def log_assignment(self, event):
        self.assignments.append(event)

    def log_bandit_action(self, event):
        self.bandit_actions.append(event)


@pytest.fixture
def flags_payload():
    return copy.deepcopy(FLAGS_PAYLOAD)


@pytest.fixture
def bandits_payload():
    return copy.deepcopy(BANDITS_PAYLOAD)


@pytest.fixture
def recording_logger():
    return RecordingLogger()
