import os
from enum import Enum

import colorama
from colorama import Fore, Style


class ErrorKind(Enum):
    UNEXPECTED_EOF = "unexpected end of input"
    EXPECTED_CLASS_NAME = "expected class number"
    EXPECTED_FUNCTION_NAME = "expected function name"
    EXPECTED_VARIABLE_NAME = "expected variable name"
    EXPECTED_OPERATION = "expected operation"
    EXPECTED_COLON = "expected ':'"
    EXPECTED_SEMICOLON = "expected ';'"
    EXPECTED_PARENTHESIS_END = "expected ')'"
    EXPECTED_CONDITIONAL_BLOCK = "expected '?{' after condition"
    EXPECTED_CONDITIONAL_BLOCK_END = "expected '}' closing conditional block"
    EXPECTED_OTHERWISE_BLOCK = "expected '{' after ':' of conditional"
    EXPECTED_OTHERWISE_BLOCK_END = "expected '}' closing otherwise block"
    EXPECTED_NUMBER = "expected number"
    EXPECTED_CALL = "expected '>' and function name"
    INVALID_ESCAPE = "invalid escape sequence"
    INVALID_ASCII_ESCAPE = "invalid \\x escape"
    INVALID_UNICODE_ESCAPE = "invalid \\u{...} escape"
    INVALID_NUMBER = "invalid number"
    NUMBER_OVERFLOW = "number too large"
    FUNCTION_EXISTS = "function already defined"
    CLASS_EXISTS = "class already defined"
    NESTING_TOO_DEEP = "conditionals nested too deeply"


class HappyError(Exception):
    pass


class ParseError(HappyError):
    def __init__(self, kind: ErrorKind, important: bool, offset: int, line: int, column: int,
                 filename: str = "<input>", detail: str | None = None):
        super().__init__(kind.value)
        self.kind = kind
        self.important = important
        self.offset = offset
        self.line = line
        self.column = column
        self.filename = filename
        self.detail = detail

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}: {self.message}"


class HappyRuntimeError(HappyError):
    def __init__(self, message: str, frames=None):
        super().__init__(message)
        self.message = message
        self.frames = frames or []  # (class_id, function_name), most recent first

    def format(self, indent: str = "") -> str:
        lines = [f"{indent}Runtime error: {self.message}"]
        for class_id, name in self.frames:
            lines.append(f"{indent}  at {class_id}>{name}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class MissingClassError(HappyRuntimeError):
    def __init__(self, class_id: int, frames=None):
        super().__init__(f"Not a class: `{class_id}`", frames)
        self.class_id = class_id


class MissingFunctionError(HappyRuntimeError):
    def __init__(self, class_id: int, name: str, frames=None):
        super().__init__(f"Not a function: `{name}`", frames)
        self.class_id = class_id
        self.name = name


class StepLimitError(HappyRuntimeError):
    def __init__(self, limit: int, frames=None):
        super().__init__(f"Step limit exceeded ({limit}), possible infinite recursion", frames)
        self.limit = limit


_colorama_inited = False


def _ensure_colorama():
    global _colorama_inited
    if _colorama_inited:
        return
    _colorama_inited = True
    colorama.just_fix_windows_console()


def render_diagnostic(error: ParseError, source: str, color: bool = True) -> str:
    """Render a parse error against the text it was raised for.

    Output looks like::

        program.happy:3:7: error: expected ':'
          3 | 1: A x,;
            |      ^
    """
    if color:
        _ensure_colorama()

    def paint(s: str, *codes: str) -> str:
        if not color:
            return s
        return "".join(codes) + s + Style.RESET_ALL

    lines = source.split("\n")
    text = lines[error.line - 1].rstrip("\r") if error.line <= len(lines) else ""

    gutter = str(error.line)
    pad = " " * len(gutter)
    # keep tabs so the caret lines up with the echoed source
    caret_pad = "".join("\t" if ch == "\t" else " " for ch in text[: error.column - 1])

    header = f"{os.path.basename(error.filename)}:{error.line}:{error.column}: "
    out = [
        paint(header, Style.BRIGHT) + paint("error: ", Fore.RED, Style.BRIGHT) + paint(error.message, Style.BRIGHT),
        paint(f"  {gutter} | ", Fore.BLUE) + text,
        paint(f"  {pad} | ", Fore.BLUE) + caret_pad + paint("^", Fore.RED, Style.BRIGHT),
    ]
    if not error.important:
        out.append(paint(f"  {pad} = ", Fore.BLUE) + "no alternative production matched here")
    return "\n".join(out)
