import os
import subprocess
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CLI = os.path.join(ROOT, "cli.py")


def run_cli(*args, cwd=None):
    return subprocess.run(
        [sys.executable, CLI, *args],
        text=True,
        capture_output=True,
        cwd=cwd or ROOT,
        timeout=10,
    )


def write_program(tmp_path, source, name="program.happy"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_run_prints_program_output(tmp_path):
    path = write_program(tmp_path, '1: A: x="hello", x, ;;\n1>A\n')
    proc = run_cli("run", path)
    if proc.returncode != 0:
        raise AssertionError(f"run exited with code {proc.returncode}\nSTDERR:\n{proc.stderr}")
    if proc.stdout != "hello":
        raise AssertionError(f"Expected 'hello'.\nOUT:\n{proc.stdout!r}")


def test_run_defaults_to_program_happy(tmp_path):
    write_program(tmp_path, '1: A: x="default", x,;; 1>A')
    proc = run_cli("run", cwd=str(tmp_path))
    if proc.stdout != "default":
        raise AssertionError(f"Expected 'default'.\nOUT:\n{proc.stdout!r}\nERR:\n{proc.stderr}")


def test_parse_error_is_rendered_and_exits_1(tmp_path):
    path = write_program(tmp_path, "1: A x,;;\n1>A\n", name="bad.happy")
    proc = run_cli("run", path, "--no-color")
    if proc.returncode != 1:
        raise AssertionError(f"Expected exit code 1, got {proc.returncode}")
    if "bad.happy:1:6: error: expected ':'" not in proc.stderr:
        raise AssertionError(f"Missing diagnostic.\nERR:\n{proc.stderr}")
    if proc.stdout:
        raise AssertionError(f"Nothing should run after a parse error.\nOUT:\n{proc.stdout!r}")


def test_runtime_failure_is_reported_once(tmp_path):
    path = write_program(tmp_path, '1: B: x="later", x,;;\n3>A\n1>B\n')
    proc = run_cli("run", path)
    if proc.returncode != 0:
        raise AssertionError(f"Expected exit code 0, got {proc.returncode}\nERR:\n{proc.stderr}")
    if proc.stdout != "Not a class: `3`\n":
        raise AssertionError(f"Unexpected output.\nOUT:\n{proc.stdout!r}")


def test_max_steps_stops_endless_recursion(tmp_path):
    path = write_program(tmp_path, "1: A: 1>A;;\n1>A\n")
    proc = run_cli("run", path, "--max-steps", "100")
    if "Step limit exceeded (100)" not in proc.stdout:
        raise AssertionError(f"Expected step limit message.\nOUT:\n{proc.stdout!r}")


def test_parse_prints_ast(tmp_path):
    path = write_program(tmp_path, '1: A: x="hi", (x==y)?{x,}, 2>B;;\n1>A\n')
    proc = run_cli("parse", path)
    if proc.returncode != 0:
        raise AssertionError(f"parse exited with code {proc.returncode}\nERR:\n{proc.stderr}")
    for needle in ("type: Program", "type: Conditional", "op: ==", "target: 2>B", "statements:"):
        if needle not in proc.stdout:
            raise AssertionError(f"Expected {needle!r} in AST dump.\nOUT:\n{proc.stdout}")


def test_missing_file_exits_1(tmp_path):
    proc = run_cli("run", str(tmp_path / "nope.happy"))
    if proc.returncode != 1 or "Cannot read" not in proc.stderr:
        raise AssertionError(f"Unexpected result {proc.returncode}\nERR:\n{proc.stderr}")


def test_usage_without_command():
    proc = run_cli()
    if proc.returncode != 1 or "Usage:" not in proc.stdout:
        raise AssertionError(f"Expected usage text.\nOUT:\n{proc.stdout}")
