import logging
import math
import operator
import sys
from collections import defaultdict
from decimal import Decimal

from ast_nodes import (
    Var,
    Add, Sub, Mul, Div, Mod,
    Equal, NotEqual, Greater, Less, GreaterEqual, LessEqual,
    And, Or, Not, Assign, Print, Load, Call, Conditional,
)
from errors import HappyRuntimeError, MissingClassError, MissingFunctionError, StepLimitError

logger = logging.getLogger(__name__)


# ---------- VALUES ----------
# float (Number), str (Str), bool (Bool) and None. Var only appears in literals.

def divide(a, b):
    # IEEE 754 semantics instead of ZeroDivisionError
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def remainder(a, b):
    # truncated remainder, sign follows the dividend
    if b == 0.0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan
    return math.fmod(a, b)


ARITHMETIC = {
    Add: operator.add,
    Sub: operator.sub,
    Mul: operator.mul,
    Div: divide,
    Mod: remainder,
}

# maps the result of compare() (-1, 0, 1 or None when incomparable) to a bool
COMPARISONS = {
    Equal: lambda order: order == 0,
    NotEqual: lambda order: order != 0,
    Greater: lambda order: order == 1,
    Less: lambda order: order == -1,
    GreaterEqual: lambda order: order in (0, 1),
    LessEqual: lambda order: order in (-1, 0),
}


def arithmetic(kind, a, b):
    if type(a) is float and type(b) is float:
        return ARITHMETIC[kind](a, b)
    if kind is Add and type(a) is str and type(b) is str:
        return a + b
    # any other pairing leaves the left value untouched
    return a


def compare(a, b):
    if a is None and b is None:
        return 0
    if type(a) is not type(b) or isinstance(a, Var):
        return None
    if a < b:
        return -1
    if a > b:
        return 1
    if a == b:
        return 0
    return None  # NaN


def format_number(n: float) -> str:
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    text = format(Decimal(repr(n)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_value(value) -> str:
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, Var):
        return f"Var `{value.name}`"
    return value


def new_scope():
    # unknown names read as None and are created on first touch
    return defaultdict(lambda: None)


# ---------- OUTPUT ----------
class StdoutSink:
    def write(self, text):
        sys.stdout.write(text)
        sys.stdout.flush()


# ---------- EXECUTION ----------
class Activation:
    def __init__(self, operations, function=None):
        self.operations = operations
        self.index = 0
        # (class_id, name) for a function body, which owns a scope frame;
        # None for a conditional branch, which runs in its function's frame
        self.function = function

    def exhausted(self):
        return self.index >= len(self.operations)


class Interpreter:
    def __init__(self, program, output=None, trace=False, max_steps=None):
        self.program = program
        self.output = output if output is not None else StdoutSink()
        self.trace = trace
        self.max_steps = max_steps  # set to an int to guard against runaway recursion

        self.scopes = []      # one frame per active function, only the last one is used
        self.call_stack = []  # pending Activations, innermost last
        self.steps = 0

    def run(self):
        """Run every top-level statement in order.

        Returns None on success. A call to a missing class or function is
        reported on the output, ends the whole run and is returned.
        """
        self.scopes = []
        self.call_stack = []
        self.steps = 0
        try:
            for class_id, name in self.program.statements:
                self.run_function(class_id, name)
        except HappyRuntimeError as e:
            logger.info("%s", e.format())
            self.output.write(e.message + "\n")
            # frames of the unwound calls are dropped so the next run starts clean
            self.scopes.clear()
            self.call_stack.clear()
            return e
        return None

    def run_function(self, class_id, name):
        self.enter(class_id, name)
        while self.call_stack:
            self.step()

    def lookup(self, class_id, name):
        cls = self.program.classes.get(class_id)
        if cls is None:
            raise MissingClassError(class_id, frames=self.build_stacktrace())
        function = cls.functions.get(name)
        if function is None:
            raise MissingFunctionError(class_id, name, frames=self.build_stacktrace())
        return function

    def enter(self, class_id, name):
        function = self.lookup(class_id, name)
        logger.debug("call %d>%s (depth %d)", class_id, name, len(self.scopes) + 1)
        self.scopes.append(new_scope())
        self.call_stack.append(Activation(function.operations, (class_id, name)))

    def leave(self):
        activation = self.call_stack.pop()
        if activation.function is not None:
            self.scopes.pop()

    def release_finished(self):
        # Nothing after a trailing call can run in these activations, so their
        # frames can go before the callee's frame is pushed (tail calls).
        while self.call_stack and self.call_stack[-1].exhausted():
            self.leave()

    def build_stacktrace(self):
        return [a.function for a in reversed(self.call_stack) if a.function is not None]

    def step(self):
        activation = self.call_stack[-1]
        if activation.exhausted():
            self.leave()
            return

        op = activation.operations[activation.index]
        activation.index += 1

        if self.max_steps is not None:
            self.steps += 1
            if self.steps > self.max_steps:
                raise StepLimitError(self.max_steps, frames=self.build_stacktrace())

        if self.trace:
            logger.debug("TRACE depth=%d %r", len(self.scopes), op)

        if isinstance(op, Call):
            self.release_finished()
            self.enter(op.class_id, op.name)
            return

        if isinstance(op, Conditional):
            self.schedule_conditional(op)
            return

        self.evaluate(op)

    def schedule_conditional(self, op):
        condition = op.condition
        if isinstance(condition, (Call, Conditional)):
            # these yield None once done, so the else branch follows them
            if op.else_block:
                self.call_stack.append(Activation(op.else_block))
            self.call_stack.append(Activation([condition]))
            return

        if self.evaluate(condition) is True:
            branch = op.then_block
        else:
            branch = op.else_block
        if branch:
            self.call_stack.append(Activation(branch))

    def evaluate(self, op):
        """Execute one operation that cannot call, and return its value."""
        scope = self.scopes[-1]

        kind = type(op)
        if kind in ARITHMETIC:
            scope[op.left] = arithmetic(kind, scope[op.left], scope[op.right])
            return scope[op.left]

        if kind in COMPARISONS:
            result = COMPARISONS[kind](compare(scope[op.left], scope[op.right]))
            scope[op.left] = result
            return result

        if kind is Assign:
            value = op.value
            while isinstance(value, Var):
                value = scope[value.name]
            scope[op.name] = value
            return value

        if kind is And or kind is Or:
            left = scope[op.left]
            right = scope[op.right]
            if isinstance(left, bool) and isinstance(right, bool):
                scope[op.left] = (left and right) if kind is And else (left or right)
            return scope[op.left]

        if kind is Not:
            value = scope[op.name]
            if isinstance(value, bool):
                scope[op.name] = not value
            return scope[op.name]

        if kind is Print:
            self.output.write(format_value(scope[op.name]))
            return None

        if kind is Load:
            return scope[op.name]

        raise TypeError(f"Unknown operation: {op!r}")
