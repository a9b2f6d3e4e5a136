import pytest

from tracer.shell_hints import expand_tilde, extract_shell_path_hints, normalize_path

WS = "/project"
CWD = "/project/src"


@pytest.mark.parametrize(
    "command, cwd, workspace_root, expected",
    [
        # Redirects
        ('echo "text" > /project/file.txt', CWD, WS, ["file.txt"]),
        ('echo "text" > ./rel/file.txt', CWD, WS, ["src/rel/file.txt"]),
        ('echo "text" > file.txt', CWD, WS, ["src/file.txt"]),
        ('echo "text" >> log.txt', CWD, WS, ["src/log.txt"]),
        ("command 2> error.log", CWD, WS, ["src/error.log"]),
        ("command &> all.log", CWD, WS, ["src/all.log"]),
        ("command >file.txt", CWD, WS, ["src/file.txt"]),
        ('echo "text" > "path with spaces.txt"', CWD, WS, ["src/path with spaces.txt"]),
        ('echo "text" > ../other/file.txt', CWD, WS, ["other/file.txt"]),
        # File-creating commands
        ("touch new_file.ts", CWD, WS, ["src/new_file.ts"]),
        ("touch file1.txt file2.txt file3.go", CWD, WS,
         ["src/file1.txt", "src/file2.txt", "src/file3.go"]),
        ("mkdir -p src/components/ui", CWD, WS, ["src/src/components/ui"]),
        ("cp src/main.go backup/main.go", CWD, WS, ["src/backup/main.go"]),
        ("mv old.go new.go", CWD, WS, ["src/new.go"]),
        ('echo "data" | tee output.txt', CWD, WS, ["src/output.txt"]),
        ("ln -s /target link_name", CWD, WS, ["src/link_name"]),
        # Build outputs
        ("go build -o tracer", CWD, WS, ["src/tracer"]),
        ("go build -o ./bin/tracer", CWD, WS, ["src/bin/tracer"]),
        ("gcc -o output input.c", CWD, WS, ["src/output"]),
        # Pipes
        ("grep pattern src/ | tee results.txt", CWD, WS, ["src/results.txt"]),
        ("cat input.txt | sort > sorted.txt", CWD, WS, ["src/sorted.txt"]),
        # Chaining
        ("mkdir -p build && cp src/main.go build/main.go", CWD, WS,
         ["src/build", "src/build/main.go"]),
        ("touch a.txt; touch b.txt", CWD, WS, ["src/a.txt", "src/b.txt"]),
        ('cd /tmp && echo "hi" > out.txt', CWD, WS, ["src/out.txt"]),
        # CWD resolution
        ("touch file.txt", "/project/src", "/project", ["src/file.txt"]),
        ("touch ./file.txt", "/project/src", "/project", ["src/file.txt"]),
        ("touch ../config.json", "/project/src", "/project", ["config.json"]),
        # Workspace normalisation
        ("touch /project/src/main.go", CWD, WS, ["src/main.go"]),
        # No false positives
        ("", CWD, WS, []),
        ("ls -la", CWD, WS, []),
        ('echo "hello world"', CWD, WS, []),
        ("cat file.txt", CWD, WS, []),
        ("curl https://example.com", CWD, WS, []),
        ('git commit -m "fix bug"', CWD, WS, []),
        ("export FOO=bar", CWD, WS, []),
        ("pwd", CWD, WS, []),
        # Multi-line
        ("touch a.txt\ntouch b.txt", CWD, WS, ["src/a.txt", "src/b.txt"]),
        # sed -i
        ("sed -i '' 's/Sean/Thatcher/' /project/src/hello.py", CWD, WS, ["src/hello.py"]),
        ("sed -i 's/old/new/g' /project/src/config.yaml", CWD, WS, ["src/config.yaml"]),
        ("sed -i -e 's/foo/bar/' -e 's/baz/qux/' /project/src/file.txt", CWD, WS,
         ["src/file.txt"]),
        ("sed 's/foo/bar/' file.txt", CWD, WS, []),
        # Heredoc
        ("cat <<EOF > output.txt\ncontent line\nEOF", CWD, WS, ["src/output.txt"]),
    ],
)
def test_extract_shell_path_hints(command, cwd, workspace_root, expected):
    assert extract_shell_path_hints(command, cwd, workspace_root) == expected


def test_heredoc_body_is_skipped_until_marker():
    command = "cat <<EOF\ntouch inside.txt\nEOF\ntouch after.txt"
    assert extract_shell_path_hints(command, CWD, WS) == ["src/after.txt"]


def test_duplicate_paths_reported_once():
    assert extract_shell_path_hints("touch a.txt a.txt > a.txt", CWD, WS) == ["src/a.txt"]


def test_sed_backup_suffix_and_address_expression():
    assert extract_shell_path_hints("sed -i.bak 's/a/b/' f.txt", CWD, WS) == ["src/f.txt"]
    assert extract_shell_path_hints("sed -i /foo/d x.txt", CWD, WS) == ["src/x.txt"]


def test_env_assignment_before_command_is_skipped():
    assert extract_shell_path_hints("FOO=bar touch x.txt", CWD, WS) == ["src/x.txt"]


def test_quoted_semicolon_does_not_split():
    assert extract_shell_path_hints('echo "a;b" > out.txt', CWD, WS) == ["src/out.txt"]


def test_path_outside_workspace_stays_absolute():
    assert extract_shell_path_hints("touch /tmp/x", CWD, WS) == ["/tmp/x"]


def test_copy_with_single_argument_creates_nothing():
    assert extract_shell_path_hints("cp a.txt", CWD, WS) == []


@pytest.mark.parametrize(
    "path, expected",
    [
        ("~/project/file.txt", "/home/tester/project/file.txt"),
        ("/absolute/path", "/absolute/path"),
        ("~user/file", "~user/file"),
        ("relative/path", "relative/path"),
    ],
)
def test_expand_tilde(monkeypatch, path, expected):
    monkeypatch.setenv("HOME", "/home/tester")
    assert expand_tilde(path) == expected


@pytest.mark.parametrize(
    "path, workspace_root, expected",
    [
        ("/project/src/main.go", "/project", "src/main.go"),
        ("/other/file.txt", "/project", "/other/file.txt"),
        ("src/main.go", "/project", "src/main.go"),
        ("/project/file.txt", "", "/project/file.txt"),
        ("/project", "/project", "."),
    ],
)
def test_normalize_path(path, workspace_root, expected):
    assert normalize_path(path, workspace_root) == expected


def test_tilde_expansion_in_command(monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")
    workspace_root = "/home/tester/project"
    got = extract_shell_path_hints("touch ~/project/file.txt", workspace_root, workspace_root)
    assert got == ["file.txt"]