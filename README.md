# tracer

Building blocks for recording, rendering and summarising sessions from
AI coding agents. The package has no dependencies outside the standard
library.

## Modules

- `tracer.schema`: the unified session data model. It has the dataclasses
  `SessionData`, `Exchange`, `Message`, `ContentPart`, `ToolInfo`, `Usage` and
  `ProviderInfo`, and the enums `Role`, `ContentType` and `ToolType`.
  `SessionData.validate()` checks the schema rules and logs a warning for
  each problem it finds. It returns `False` if it found any.
  `session_data_from_dict()` and `SessionData.to_dict()` convert to and from
  the JSON dictionary form. `get_int_from_map()` reads a numeric value from a
  dictionary and returns 0 when the value is missing or not a number.
- `tracer.markdown`: `generate_markdown_from_agent_session()` renders a
  session as a Markdown transcript. The transcript has role headers,
  separators where the role changes, collapsible thinking blocks, tool-use
  blocks and optional message-id comments. `format_timestamp()` formats an
  RFC 3339 timestamp either as UTC (`2025-11-13 21:12:14Z`) or in local time
  (`2025-11-13 21:12:14-0700`). Text it cannot parse comes back unchanged.
- `tracer.statistics`: `compute_session_statistics()` counts user and agent
  messages and picks the start and end timestamps of a session.
  `StatisticsCollector` buffers `SessionStatistics` in memory.
  `flush()` merges them into a JSON file, writing a temporary file and then
  renaming it. If the existing file is corrupt, the collector starts fresh.
- `tracer.cmdline`: `split_command_line()` splits a command string into
  arguments. It respects single and double quotes and backslash escapes.
- `tracer.shell_hints`: `extract_shell_path_hints()` lists the files that a
  shell command creates or modifies:
  - redirect targets (`>`, `>>`, `2>`, `&>`);
  - files named to `touch`, `mkdir` and `tee`;
  - destinations of `cp`, `mv` and `ln`;
  - `-o` output paths;
  - files edited with `sed -i`.

  Paths are resolved against the working directory and made relative to the
  workspace root when they fall under it. `normalize_path()` and
  `expand_tilde()` are also available.
- `tracer.paths`:
  - `generate_filename_from_user_message()` and `generate_readable_name()`
    build names from a user message;
  - `get_canonical_path()` resolves symlinks and corrects the letter case of
    each path component;
  - `set_debug_base_dir()`, `get_debug_dir()` and
    `write_debug_session_data()` manage debug output, which defaults to
    `~/.local/state/tracer/debug/<session id>`.
- `tracer.output_paths`: `OutputPathConfig` gives the archive directory
  (default `~/.local/share/tracer/archive`), the state directory
  (`~/.local/state/tracer`), the debug directory, the log path, the
  statistics path and the runtime-state database path.
  `new_output_path_config()` and `setup_output_config()` validate custom
  directories: each one is created, or checked for write access if it
  already exists. Failures raise `ValidationError`.
  `ensure_history_directory_exists()` and `ensure_state_directory_exists()`
  create the directories.
- `tracer.provider`: the abstract `Provider` class that agent integrations
  subclass, plus the `AgentChatSession`, `SessionMetadata` and `CheckResult`
  dataclasses.
- `tracer.watch`: `watch_providers()` runs `watch_agent` for each provider in
  its own thread until all of them return or a `threading.Event` is set. It
  passes a session to the callback only when the session's content
  fingerprint (`session_fingerprint()`) has changed. Failures are gathered
  into a `WatchError`, except after the stop event has been set, which counts
  as a clean exit.
- `tracer.style`: ANSI colour helpers: `section`, `command`, `success`,
  `warning`, `error` and `bold`. Colour is off when `NO_COLOR` is set.
  `TRACER_COLOR` (`always`/`never`) forces it on or off. Otherwise colour is
  used only on a terminal whose `TERM` is set and is not `dumb`. The choice
  is made once per process.

## Example

```python
from tracer.schema import session_data_from_dict
from tracer.markdown import generate_markdown_from_agent_session
from tracer.statistics import compute_session_statistics, StatisticsCollector

session = session_data_from_dict({
    "schemaVersion": "1.0",
    "provider": {"id": "claude", "name": "Claude Code", "version": "1.0"},
    "sessionId": "session-1",
    "createdAt": "2026-01-25T15:30:45Z",
    "workspaceRoot": "/project",
    "exchanges": [{
        "exchangeId": "ex-1",
        "startTime": "2026-01-25T15:30:45Z",
        "messages": [
            {"role": "user", "content": [{"type": "text", "text": "Hello"}]},
            {"role": "agent", "content": [{"type": "text", "text": "Hi!"}]},
        ],
    }],
})

md = generate_markdown_from_agent_session(session, False, True)
stats = compute_session_statistics(session, md, "claude")

collector = StatisticsCollector("statistics.json")
collector.add_session_stats("session-1", stats)
collector.flush()
```

```python
from tracer.shell_hints import extract_shell_path_hints

extract_shell_path_hints("mkdir -p build && cp main.go build/main.go",
                         "/project/src", "/project")
# ['src/build', 'src/build/main.go']
```

## What it does not do

- It includes no `Provider` implementations for any particular agent, and no
  registry of providers. To read or watch sessions, you subclass `Provider`
  yourself.
- It installs no command-line program.
- It sends no telemetry.

## Running the tests

```
pip install -e ".[test]"
pytest
```