# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import pytest

from shapeguard import ConfigurationError, configure, get_config, reset_config, string
from shapeguard.config import OFFLOAD_ENV


def test_defaults():
    config = get_config()

    assert config.custom_error is None
    assert config.offload_sync_implementations is True
    assert config.max_prettify_issues is None


def test_configure_updates_and_reset_restores():
    configure(custom_error="Nope", max_prettify_issues=5)

    assert string().safe_parse(1).issues[0].message == "Nope"
    assert get_config().max_prettify_issues == 5

    reset_config()

    assert get_config().custom_error is None
    assert string().safe_parse(1).issues[0].message.startswith("Invalid input")


@pytest.mark.parametrize(
    "options",
    [
        {"colour": "red"},
        {"custom_error": 42},
        {"max_prettify_issues": 0},
        {"max_prettify_issues": "10"},
    ],
)
def test_configure_rejects_bad_options(options):
    with pytest.raises(ConfigurationError):
        configure(**options)


@pytest.mark.parametrize("raw,expected", [("0", False), ("false", False), ("1", True), ("yes", True)])
def test_offload_flag_read_from_environment(monkeypatch, raw, expected):
    monkeypatch.setenv(OFFLOAD_ENV, raw)

    assert reset_config().offload_sync_implementations is expected
