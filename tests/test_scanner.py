import pytest

from errors import ErrorKind, ParseError
from scanner import DIGITS, LOWER_LETTERS, Scanner


def test_while_any_returns_matched_slice():
    s = Scanner("123abc")
    assert s.while_any(DIGITS) == "123"
    assert s.while_any(DIGITS) == ""
    assert s.while_any(LOWER_LETTERS) == "abc"
    assert s.is_eof()


def test_skip_is_chainable():
    s = Scanner("  \n\t:x")
    assert s.skip().then(":")
    assert s.peek() == "x"


def test_until_any_stops_before_delimiter():
    s = Scanner('hello\\n"')
    assert s.until_any(("\"", "\\")) == "hello"
    assert s.test("\\")


def test_until_any_runs_to_eof_without_delimiter():
    s = Scanner("abc")
    assert s.until_any((";",)) == "abc"
    assert s.is_eof()


def test_until_counted_is_bounded():
    s = Scanner("1234567}")
    assert s.until_counted("}", 6) == "123456"
    assert s.peek() == "7"

    s = Scanner("48}")
    assert s.until_counted("}", 6) == "48"
    assert s.then("}")


def test_then_only_advances_on_match():
    s = Scanner(">=")
    assert not s.then("==")
    assert s.pos == 0
    assert s.then(">=")
    assert s.is_eof()
    assert not s.then(">")


def test_test_and_test_any_do_not_consume():
    s = Scanner(";x")
    assert s.test(";")
    assert s.test_any((",", ";"))
    assert not s.test_any((",", "}"))
    assert s.pos == 0


def test_eat_past_end_is_an_important_eof():
    s = Scanner("a")
    with pytest.raises(ParseError) as info:
        s.eat(2)
    assert info.value.kind is ErrorKind.UNEXPECTED_EOF
    assert info.value.important
    assert s.pos == 0


def test_checkpoint_rollback_restores_position():
    s = Scanner("12: A")
    cp = s.checkpoint()
    s.while_any(DIGITS)
    s.then(":")
    cp.rollback()
    assert s.pos == 0
    assert s.while_any(DIGITS) == "12"


def test_checkpoint_commit_keeps_position():
    s = Scanner("12:")
    cp = s.checkpoint()
    s.while_any(DIGITS)
    cp.commit()
    assert s.pos == 2


def test_location_is_one_based():
    s = Scanner("ab\ncd\nef")
    assert s.location(0) == (1, 1)
    assert s.location(4) == (2, 2)
    s.pos = 6
    assert s.location() == (3, 1)


def test_error_carries_position_and_filename():
    s = Scanner("x\n  y", filename="prog.happy")
    s.pos = 4
    err = s.error(ErrorKind.EXPECTED_COLON, False)
    assert (err.line, err.column, err.offset) == (2, 3, 4)
    assert err.filename == "prog.happy"
    assert not err.important
