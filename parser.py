import logging

from ast_nodes import (
    Program, Class, Function, Var,
    Add, Sub, Mul, Div, Mod,
    Equal, NotEqual, Greater, Less, GreaterEqual, LessEqual,
    And, Or, Not, Assign, Print, Load, Call, Conditional,
)
from errors import ErrorKind, ParseError
from scanner import Scanner, DIGITS, HEX_DIGITS, LOWER_LETTERS, UPPER_LETTERS

logger = logging.getLogger(__name__)

MAX_CLASS_ID = 0xFFFFFFFF

# Order matters: ">=" must win over ">", "!=" over "!", "//" over "/".
OPERATORS = [
    ("==", Equal),
    (">=", GreaterEqual),
    ("<=", LessEqual),
    (">", Greater),
    ("<", Less),
    ("!=", NotEqual),
    ("!", Not),
    ("|", Or),
    ("&", And),
    ("=", Assign),
    ("+", Add),
    ("-", Sub),
    ("*", Mul),
    ("//", Mod),
    ("/", Div),
]

SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\"": "\"",
    "\\": "\\",
}


class Parser:
    def __init__(self, scanner):
        self.scanner = scanner

    # ---------- TOP LEVEL ----------
    # program -> (class | top_statement)*
    def parse(self):
        try:
            return self.program()
        except RecursionError:
            # conditionals nest through Python calls
            raise self.scanner.error(ErrorKind.NESTING_TOO_DEEP, True) from None

    def program(self):
        s = self.scanner
        classes = {}
        statements = []

        while not s.skip().is_eof():
            cp = s.checkpoint()
            try:
                cls = self.class_def()
            except ParseError as e:
                cp.rollback()
                if e.important:
                    raise
                logger.debug("no class at offset %d (%s), trying a call statement", cp.pos, e.kind.name)
                statements.append(self.top_statement())
                continue

            cp.commit()
            if cls.class_id in classes:
                raise s.error(ErrorKind.CLASS_EXISTS, True, detail=str(cls.class_id), pos=cp.pos)
            classes[cls.class_id] = cls

        logger.debug("parsed %d classes, %d statements", len(classes), len(statements))
        return Program(classes, statements)

    # top_statement -> DIGITS '>' UPPER
    def top_statement(self):
        s = self.scanner
        start = s.pos
        digits = s.while_any(DIGITS)
        if not digits:
            raise s.error(ErrorKind.EXPECTED_CALL, True)
        statement = self.finish_call(digits, start)
        logger.debug("statement %d>%s", *statement)
        return statement

    # class -> DIGITS ':' function* ';'
    def class_def(self):
        s = self.scanner
        start = s.pos
        digits = s.while_any(DIGITS)
        if not digits:
            raise s.error(ErrorKind.EXPECTED_CLASS_NAME, False)
        if not s.skip().then(":"):
            raise s.error(ErrorKind.EXPECTED_COLON, False)
        class_id = self.class_number(digits, start)

        functions = {}
        while not s.skip().then(";"):
            fn_start = s.pos
            function = self.function_def()
            if function.name in functions:
                raise s.error(ErrorKind.FUNCTION_EXISTS, True, detail=function.name, pos=fn_start)
            functions[function.name] = function

        node = Class(class_id, functions)
        node.line = s.location(start)[0]
        logger.debug("class %d with functions %s", class_id, sorted(functions))
        return node

    # function -> UPPER ':' (operation (',' operation)*)? ';'
    def function_def(self):
        s = self.scanner
        start = s.pos
        name = s.while_any(UPPER_LETTERS)
        if not name:
            raise s.error(ErrorKind.EXPECTED_FUNCTION_NAME, False)
        if not s.skip().then(":"):
            raise s.error(ErrorKind.EXPECTED_COLON, True)

        operations = self.operation_list((";",))
        if not s.skip().then(";"):
            raise s.error(ErrorKind.EXPECTED_SEMICOLON, True)

        node = Function(name, operations)
        node.line = s.location(start)[0]
        return node

    # ---------- OPERATIONS ----------
    def operation_list(self, ends):
        s = self.scanner
        operations = []
        while not s.skip().test_any(ends):
            operations.append(self.operation())
            if not s.skip().then(","):
                break
        return operations

    # operation -> conditional | simple_op | call
    def operation(self):
        s = self.scanner
        start = s.pos

        if s.then("("):
            return self.conditional()

        name = s.while_any(LOWER_LETTERS)
        if name:
            return self.simple_operation(name)

        digits = s.while_any(DIGITS)
        if digits:
            class_id, function_name = self.finish_call(digits, start)
            return Call(class_id, function_name)

        raise s.error(ErrorKind.EXPECTED_OPERATION, True)

    # simple_op -> LOWER (OPERATOR (LOWER | data)?)?
    def simple_operation(self, name):
        s = self.scanner
        s.skip()

        # bare name: print it, or read it when it is a condition
        if s.test_any((",", ";", "}")):
            return Print(name)
        if s.test(")"):
            return Load(name)

        for symbol, node_class in OPERATORS:
            if not s.then(symbol):
                continue
            if node_class is Not:
                return Not(name)
            if node_class is Assign:
                return Assign(name, self.data())
            return node_class(name, self.var_name())

        raise s.error(ErrorKind.EXPECTED_OPERATION, True)

    # conditional -> '(' operation ')' '?' block (':' block)?
    def conditional(self):
        s = self.scanner
        s.skip()
        condition = self.operation()
        if not s.skip().then(")"):
            raise s.error(ErrorKind.EXPECTED_PARENTHESIS_END, True)
        if not s.skip().then("?"):
            raise s.error(ErrorKind.EXPECTED_CONDITIONAL_BLOCK, True)
        if not s.skip().then("{"):
            raise s.error(ErrorKind.EXPECTED_CONDITIONAL_BLOCK, True)
        then_block = self.block(ErrorKind.EXPECTED_CONDITIONAL_BLOCK_END)

        if not s.skip().then(":"):
            return Conditional(condition, then_block)

        if not s.skip().then("{"):
            raise s.error(ErrorKind.EXPECTED_OTHERWISE_BLOCK, True)
        else_block = self.block(ErrorKind.EXPECTED_OTHERWISE_BLOCK_END)
        return Conditional(condition, then_block, else_block)

    # block -> (operation (',' operation)*)? ','? ';'? '}'   (opening '{' already eaten)
    def block(self, end_kind):
        s = self.scanner
        operations = self.operation_list(("}", ";"))
        s.skip().then(";")
        if not s.skip().then("}"):
            raise s.error(end_kind, True)
        return operations

    # call -> DIGITS '>' UPPER   (digits already read)
    def finish_call(self, digits, start):
        s = self.scanner
        class_id = self.class_number(digits, start)
        if not s.skip().then(">"):
            raise s.error(ErrorKind.EXPECTED_CALL, True)
        name = s.skip().while_any(UPPER_LETTERS)
        if not name:
            raise s.error(ErrorKind.EXPECTED_FUNCTION_NAME, True)
        return class_id, name

    def class_number(self, digits, start):
        # class ids are u32; long digit runs never reach int()
        significant = digits.lstrip("0")
        if len(significant) > len(str(MAX_CLASS_ID)) or int(significant or "0") > MAX_CLASS_ID:
            shown = digits if len(digits) <= 20 else digits[:20] + "..."
            raise self.scanner.error(ErrorKind.NUMBER_OVERFLOW, True, detail=shown, pos=start)
        return int(significant or "0")

    def var_name(self):
        s = self.scanner
        name = s.skip().while_any(LOWER_LETTERS)
        if not name:
            raise s.error(ErrorKind.EXPECTED_VARIABLE_NAME, True)
        return name

    # ---------- LITERALS ----------
    # data -> '"' string '"' | 'true' | 'false' | LOWER | number
    def data(self):
        s = self.scanner
        s.skip()
        if s.then("\""):
            return self.string_literal()
        if s.then("true"):
            return True
        if s.then("false"):
            return False
        name = s.while_any(LOWER_LETTERS)
        if name:
            return Var(name)
        return self.number()

    def number(self):
        s = self.scanner
        start = s.pos
        text = s.while_any(DIGITS)
        if s.then("."):
            text += "." + s.while_any(DIGITS)
        if not text:
            raise s.error(ErrorKind.EXPECTED_NUMBER, True)
        if text == ".":
            raise s.error(ErrorKind.INVALID_NUMBER, True, detail=text, pos=start)
        return float(text)

    def string_literal(self):
        # opening quote already eaten
        s = self.scanner
        parts = []
        while True:
            parts.append(s.until_any(("\"", "\\")))
            if s.then("\""):
                return "".join(parts)
            if s.then("\\"):
                parts.append(self.escape())
                continue
            raise s.error(ErrorKind.UNEXPECTED_EOF, True)

    def escape(self):
        # backslash already eaten
        s = self.scanner
        start = s.pos - 1
        ch = s.peek()
        if ch is None:
            raise s.error(ErrorKind.UNEXPECTED_EOF, True)

        if ch in SIMPLE_ESCAPES:
            s.eat(1)
            return SIMPLE_ESCAPES[ch]

        if s.then("x"):
            digits = s.eat(2)
            if not all(c in HEX_DIGITS for c in digits):
                raise s.error(ErrorKind.INVALID_ASCII_ESCAPE, True, detail=f"\\x{digits}", pos=start)
            return chr(int(digits, 16))

        if s.then("u"):
            if not s.then("{"):
                raise s.error(ErrorKind.INVALID_UNICODE_ESCAPE, True, detail="missing '{'", pos=start)
            digits = s.until_counted("}", 6)
            if not digits or not all(c in HEX_DIGITS for c in digits) or not s.then("}"):
                raise s.error(ErrorKind.INVALID_UNICODE_ESCAPE, True, detail=f"\\u{{{digits}", pos=start)
            code = int(digits, 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise s.error(ErrorKind.INVALID_UNICODE_ESCAPE, True, detail=f"U+{code:X} is not a character", pos=start)
            return chr(code)

        raise s.error(ErrorKind.INVALID_ESCAPE, True, detail=f"\\{ch}", pos=start)


def parse_source(source, filename="<input>"):
    return Parser(Scanner(source, filename)).parse()
