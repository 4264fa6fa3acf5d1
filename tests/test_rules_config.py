from datetime import timedelta

import pytest

from mantra.core import ConfigurationException
from mantra.sla.infrastructure import (
    RULES_DEFAULTS,
    RULES_FROM_FILE,
    RULES_NOT_LOADED,
    RulesConfigManager,
    SLAScheduler,
)

RULES_YAML = """
priority_bands:
  - label: P1
    max_sla_hours: 2
  - label: P2
    max_sla_hours: null
comment_merge_window_seconds: 60
display_timezone: Europe/London
"""


@pytest.fixture
def rules_file(tmp_path):
    path = tmp_path / "helpdesk_rules.yaml"
    path.write_text(RULES_YAML)
    return path


def test_load_from_yaml(rules_file):
    manager = RulesConfigManager()

    rules = manager.load(rules_file)

    assert rules.priority_for(2) == "P1"
    assert rules.priority_for(3) == "P2"
    assert rules.comment_merge_window == timedelta(seconds=60)
    assert manager.get_rules().display_timezone == "Europe/London"
    assert manager.source == RULES_FROM_FILE


def test_missing_file_gives_defaults(tmp_path):
    manager = RulesConfigManager(default_timezone="UTC")

    rules = manager.load(tmp_path / "missing.yaml")

    assert rules.display_timezone == "UTC"
    assert manager.source == RULES_DEFAULTS
    assert rules.priority_for(24) == "P2"


def test_default_timezone_fills_gap_in_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("comment_merge_window_seconds: 30\n")

    rules = RulesConfigManager(default_timezone="UTC").load(path)

    assert rules.display_timezone == "UTC"
    assert rules.comment_merge_window_seconds == 30


def test_get_rules_before_load():
    manager = RulesConfigManager()

    assert manager.get_rules().display_timezone == "Asia/Kolkata"
    assert manager.source == RULES_NOT_LOADED


@pytest.mark.parametrize(
    "content",
    [
        "comment_merge_window_seconds: -5\n",
        "display_timezone: Mars/Olympus\n",
        "priority_bands: [unterminated\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_file_on_load(tmp_path, content):
    path = tmp_path / "rules.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationException):
        RulesConfigManager().load(path)


def test_bad_reload_keeps_previous_rules(rules_file):
    manager = RulesConfigManager()
    manager.load(rules_file)

    rules_file.write_text("comment_merge_window_seconds: not-a-number\n")

    assert manager.reload() is False
    assert manager.get_rules().comment_merge_window_seconds == 60
    assert manager.source == RULES_FROM_FILE


def test_reload_picks_up_changes(rules_file):
    manager = RulesConfigManager()
    manager.load(rules_file)

    rules_file.write_text("comment_merge_window_seconds: 15\n")

    assert manager.reload() is True
    assert manager.get_rules().comment_merge_window_seconds == 15


def test_reload_before_load():
    assert RulesConfigManager().reload() is False


def test_watching_requires_load():
    with pytest.raises(RuntimeError):
        RulesConfigManager().start_watching()


@pytest.mark.asyncio
async def test_scheduler_disabled_with_zero_interval():
    scheduler = SLAScheduler(interval_seconds=0)

    async def job():
        return None

    await scheduler.start(job)

    assert not scheduler.is_running
    await scheduler.stop()


@pytest.mark.asyncio
async def test_scheduler_start_and_stop():
    scheduler = SLAScheduler(interval_seconds=3600)

    async def job():
        return None

    await scheduler.start(job)
    assert scheduler.is_running

    await scheduler.stop()
    assert not scheduler.is_running


def test_deleted_file_falls_back_to_defaults_on_reload(rules_file):
    manager = RulesConfigManager(default_timezone="UTC")
    manager.load(rules_file)

    rules_file.unlink()

    assert manager.reload() is True
    assert manager.source == RULES_DEFAULTS
    assert manager.get_rules().display_timezone == "UTC"
