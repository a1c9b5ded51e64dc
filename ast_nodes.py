class ASTNode:
    # Optional source line (1-based). Parser sets this.
    line: int | None = None


class Program(ASTNode):
    def __init__(self, classes, statements):
        self.classes = classes        # dict[int, Class]
        self.statements = statements  # list[(class_id, function_name)], run in order


class Class(ASTNode):
    def __init__(self, class_id, functions):
        self.class_id = class_id
        self.functions = functions    # dict[str, Function]


class Function(ASTNode):
    def __init__(self, name, operations):
        self.name = name
        self.operations = operations  # list[Operation]


class Var(ASTNode):
    # Unresolved variable reference, only found on the right of `=`.
    def __init__(self, name):
        self.name = name

    def __eq__(self, other):
        return isinstance(other, Var) and other.name == self.name

    def __hash__(self):
        return hash(("Var", self.name))

    def __repr__(self):
        return f"Var({self.name})"


class Operation(ASTNode):
    pass


class BinaryOperation(Operation):
    symbol = "?"

    def __init__(self, left, right):
        self.left = left    # variable receiving the result
        self.right = right

    def __repr__(self):
        return f"{self.__class__.__name__}({self.left}, {self.right})"


class Add(BinaryOperation):
    symbol = "+"


class Sub(BinaryOperation):
    symbol = "-"


class Mul(BinaryOperation):
    symbol = "*"


class Div(BinaryOperation):
    symbol = "/"


class Mod(BinaryOperation):
    symbol = "//"


class Equal(BinaryOperation):
    symbol = "=="


class NotEqual(BinaryOperation):
    symbol = "!="


class Greater(BinaryOperation):
    symbol = ">"


class Less(BinaryOperation):
    symbol = "<"


class GreaterEqual(BinaryOperation):
    symbol = ">="


class LessEqual(BinaryOperation):
    symbol = "<="


class And(BinaryOperation):
    symbol = "&"


class Or(BinaryOperation):
    symbol = "|"


class Assign(Operation):
    def __init__(self, name, value):
        self.name = name
        self.value = value  # float | str | bool | Var

    def __repr__(self):
        return f"Assign({self.name}, {self.value!r})"


class Not(Operation):
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Not({self.name})"


class Print(Operation):
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Print({self.name})"


class Load(Operation):
    # bare `(x)` in a condition: yields x's value, no side effect
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Load({self.name})"


class Call(Operation):
    def __init__(self, class_id, name):
        self.class_id = class_id
        self.name = name

    def __repr__(self):
        return f"Call({self.class_id}, {self.name})"


class Conditional(Operation):
    def __init__(self, condition, then_block, else_block=None):
        self.condition = condition    # Operation
        self.then_block = then_block  # list[Operation]
        self.else_block = else_block  # list[Operation] | None

    def __repr__(self):
        return f"Conditional({self.condition!r}, {self.then_block!r}, {self.else_block!r})"
