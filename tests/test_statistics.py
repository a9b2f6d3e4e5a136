import json

import pytest

from tracer.schema import Exchange, Message, SessionData
from tracer.statistics import SessionStatistics, StatisticsCollector, compute_session_statistics


def _msgs(*roles):
    return [Message(role=r) for r in roles]


CASES = [
    (
        SessionData(
            created_at="2026-02-09T10:00:00Z",
            updated_at="2026-02-09T10:15:00Z",
            exchanges=[Exchange(start_time="2026-02-09T10:00:00Z", end_time="2026-02-09T10:15:00Z",
                                messages=_msgs("user", "agent"))],
        ),
        "# Test\n\nSome content", "claude", 1, 1, "2026-02-09T10:00:00Z", "2026-02-09T10:15:00Z",
    ),
    (
        SessionData(
            created_at="2026-02-09T10:00:00Z",
            updated_at="2026-02-09T10:30:00Z",
            exchanges=[
                Exchange(start_time="2026-02-09T10:00:00Z", end_time="2026-02-09T10:10:00Z",
                         messages=_msgs("user", "agent")),
                Exchange(start_time="2026-02-09T10:15:00Z", end_time="2026-02-09T10:30:00Z",
                         messages=_msgs("user", "agent", "user", "agent")),
            ],
        ),
        "# Test\n\nMore content", "codex", 3, 3, "2026-02-09T10:00:00Z", "2026-02-09T10:30:00Z",
    ),
    (
        SessionData(
            created_at="2026-02-09T10:00:00Z",
            updated_at="2026-02-09T10:05:00Z",
            exchanges=[Exchange(start_time="2026-02-09T10:00:00Z", end_time="2026-02-09T10:05:00Z",
                                messages=_msgs("agent"))],
        ),
        "# Test\n\nAgent-only content", "codex", 0, 1, "2026-02-09T10:00:00Z", "2026-02-09T10:05:00Z",
    ),
    (
        SessionData(created_at="2026-02-09T09:00:00Z", updated_at="", exchanges=[]),
        "", "claude", 0, 0, "2026-02-09T09:00:00Z", "2026-02-09T09:00:00Z",
    ),
    (
        SessionData(created_at="2026-02-09T09:00:00Z", updated_at="2026-02-09T09:30:00Z", exchanges=[]),
        "# Empty", "codex", 0, 0, "2026-02-09T09:00:00Z", "2026-02-09T09:30:00Z",
    ),
    (
        SessionData(
            created_at="2026-02-09T10:00:00Z",
            updated_at="2026-02-09T10:20:00Z",
            exchanges=[Exchange(start_time="2026-02-09T10:00:00Z", end_time="", messages=_msgs("user"))],
        ),
        "# Test", "claude", 1, 0, "2026-02-09T10:00:00Z", "2026-02-09T10:20:00Z",
    ),
    (
        SessionData(
            created_at="2026-02-09T10:00:00Z",
            updated_at="",
            exchanges=[Exchange(start_time="2026-02-09T10:00:00Z", end_time="", messages=_msgs("user"))],
        ),
        "# Test", "codex", 1, 0, "2026-02-09T10:00:00Z", "2026-02-09T10:00:00Z",
    ),
    (
        SessionData(
            created_at="2026-02-09T09:00:00Z",
            updated_at="2026-02-09T10:00:00Z",
            exchanges=[Exchange(start_time="", end_time="2026-02-09T10:00:00Z",
                                messages=_msgs("user", "agent"))],
        ),
        "# Test", "claude", 1, 1, "2026-02-09T09:00:00Z", "2026-02-09T10:00:00Z",
    ),
]


@pytest.mark.parametrize("data, markdown, provider, users, agents, start, end", CASES)
def test_compute_session_statistics(data, markdown, provider, users, agents, start, end):
    stats = compute_session_statistics(data, markdown, provider)
    assert stats.user_message_count == users
    assert stats.agent_message_count == agents
    assert stats.markdown_size_bytes == len(markdown)
    assert stats.provider == provider
    assert stats.start_timestamp == start
    assert stats.end_timestamp == end
    assert stats.last_updated.endswith("Z")


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def _stats(**overrides):
    base = dict(
        user_message_count=5,
        agent_message_count=8,
        start_timestamp="2026-02-09T10:00:00Z",
        end_timestamp="2026-02-09T10:15:00Z",
        markdown_size_bytes=1234,
        provider="claude",
        last_updated="2026-02-09T10:20:00Z",
    )
    base.update(overrides)
    return SessionStatistics(**base)


def test_collector_creates_new_file(tmp_path):
    path = tmp_path / "statistics.json"
    collector = StatisticsCollector(str(path))
    collector.add_session_stats("session-1", _stats())
    collector.flush()

    sessions = _read(path)["sessions"]
    assert list(sessions) == ["session-1"]
    assert sessions["session-1"]["user_message_count"] == 5
    assert sessions["session-1"]["provider"] == "claude"
    assert path.read_text(encoding="utf-8").endswith("}\n")


def test_collector_updates_existing(tmp_path):
    path = tmp_path / "statistics.json"
    collector = StatisticsCollector(str(path))
    collector.add_session_stats("session-1", _stats())
    collector.flush()
    collector.add_session_stats("session-1", _stats(user_message_count=7, last_updated="2026-02-09T10:30:00Z"))
    collector.flush()

    sessions = _read(path)["sessions"]
    assert len(sessions) == 1
    assert sessions["session-1"]["user_message_count"] == 7


def test_collector_multiple_sessions(tmp_path):
    path = tmp_path / "statistics.json"
    collector = StatisticsCollector(str(path))
    collector.add_session_stats("session-1", _stats())
    collector.add_session_stats("session-2", _stats(user_message_count=3, provider="codex"))
    collector.flush()

    sessions = _read(path)["sessions"]
    assert set(sessions) == {"session-1", "session-2"}
    assert sessions["session-2"]["provider"] == "codex"


def test_collector_keeps_sessions_from_earlier_file(tmp_path):
    path = tmp_path / "statistics.json"
    StatisticsCollector(str(path)).add_session_stats("x", _stats())
    first = StatisticsCollector(str(path))
    first.add_session_stats("old", _stats())
    first.flush()
    second = StatisticsCollector(str(path))
    second.add_session_stats("new", _stats())
    second.flush()
    assert set(_read(path)["sessions"]) == {"old", "new"}


def test_collector_recovers_from_corrupt_json(tmp_path):
    path = tmp_path / "statistics.json"
    path.write_text("{invalid json", encoding="utf-8")
    collector = StatisticsCollector(str(path))
    collector.add_session_stats("session-corrupt", _stats(provider="codex"))
    collector.flush()

    sessions = _read(path)["sessions"]
    assert list(sessions) == ["session-corrupt"]


def test_flush_without_pending_writes_nothing(tmp_path):
    path = tmp_path / "statistics.json"
    StatisticsCollector(str(path)).flush()
    assert not path.exists()


def test_flush_clears_pending(tmp_path):
    path = tmp_path / "statistics.json"
    collector = StatisticsCollector(str(path))
    collector.add_session_stats("a", _stats())
    collector.flush()
    path.unlink()
    collector.flush()
    assert not path.exists()


def test_session_statistics_round_trip():
    stats = _stats()
    assert SessionStatistics.from_dict(stats.to_dict()) == stats
    assert list(stats.to_dict()) == [
        "user_message_count",
        "agent_message_count",
        "start_timestamp",
        "end_timestamp",
        "markdown_size_bytes",
        "provider",
        "last_updated",
    ]


def test_session_statistics_rejects_bad_types():
    with pytest.raises(TypeError):
        SessionStatistics.from_dict({"user_message_count": "five"})