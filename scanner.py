from errors import ErrorKind, ParseError

WHITESPACE = " \t\r\n"
DIGITS = "0123456789"
HEX_DIGITS = "0123456789abcdefABCDEF"
LOWER_LETTERS = "abcdefghijklmnopqrstuvwxyz"
UPPER_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class Checkpoint:
    """Saved scanner position. Either commit() it or rollback() to it."""

    def __init__(self, scanner):
        self.scanner = scanner
        self.pos = scanner.pos
        self.done = False

    def commit(self):
        self.done = True

    def rollback(self):
        self.scanner.pos = self.pos
        self.done = True


class Scanner:
    def __init__(self, text, filename="<input>"):
        self.text = text
        self.filename = filename
        self.pos = 0

    def is_eof(self):
        return self.pos >= len(self.text)

    def peek(self):
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def location(self, pos=None):
        # line/column are only needed for diagnostics, so compute them on demand
        if pos is None:
            pos = self.pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def error(self, kind, important, detail=None, pos=None):
        if pos is None:
            pos = self.pos
        line, column = self.location(pos)
        return ParseError(kind, important, pos, line, column, filename=self.filename, detail=detail)

    def checkpoint(self):
        return Checkpoint(self)

    # ---------- CHARACTER CLASSES ----------
    def while_any(self, chars):
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in chars:
            self.pos += 1
        return self.text[start:self.pos]

    def skip(self, chars=WHITESPACE):
        self.while_any(chars)
        return self

    def until_any(self, delimiters):
        # stops before the delimiter (or at EOF), delimiter is not consumed
        start = self.pos
        while self.pos < len(self.text):
            if any(self.text.startswith(d, self.pos) for d in delimiters):
                break
            self.pos += 1
        return self.text[start:self.pos]

    def until_counted(self, delimiter, max_chars):
        start = self.pos
        while self.pos < len(self.text) and self.pos - start < max_chars:
            if self.text.startswith(delimiter, self.pos):
                break
            self.pos += 1
        return self.text[start:self.pos]

    # ---------- LITERALS ----------
    def then(self, literal):
        if self.text.startswith(literal, self.pos):
            self.pos += len(literal)
            return True
        return False

    def test(self, literal):
        return self.text.startswith(literal, self.pos)

    def test_any(self, literals):
        return any(self.text.startswith(lit, self.pos) for lit in literals)

    def eat(self, n):
        if self.pos + n > len(self.text):
            raise self.error(ErrorKind.UNEXPECTED_EOF, True, pos=len(self.text))
        start = self.pos
        self.pos += n
        return self.text[start:self.pos]
