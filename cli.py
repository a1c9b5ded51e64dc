import logging
import sys
import traceback

from errors import ParseError, render_diagnostic
from interpreter import Interpreter, format_value
from parser import Parser
from scanner import Scanner

DEFAULT_PROGRAM = "program.happy"

USAGE = [
    "Usage:",
    "  python cli.py parse <file.happy>",
    f"  python cli.py run [file.happy]   (default: {DEFAULT_PROGRAM})",
    "  (optional) --debug to show Python traceback and debug logs",
    "  (optional) --trace to log every executed operation",
    "  (optional) --no-color for plain diagnostics",
    "  (optional) --max-steps N to stop runaway recursion",
]


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_dict(n) for n in node]

    t = node.__class__.__name__
    d = {"type": t}

    if t == "Program":
        d["classes"] = [ast_to_dict(c) for _, c in sorted(node.classes.items())]
        d["statements"] = [f"{class_id}>{name}" for class_id, name in node.statements]
    elif t == "Class":
        d["id"] = node.class_id
        d["functions"] = [ast_to_dict(f) for f in node.functions.values()]
    elif t == "Function":
        d["name"] = node.name
        d["operations"] = [ast_to_dict(op) for op in node.operations]
    elif t == "Assign":
        d["name"] = node.name
        if node.value.__class__.__name__ == "Var":
            d["value"] = f"Var({node.value.name})"
        elif isinstance(node.value, str):
            d["value"] = repr(node.value)
        else:
            d["value"] = format_value(node.value)
    elif t in ("Not", "Print", "Load"):
        d["name"] = node.name
    elif t == "Call":
        d["target"] = f"{node.class_id}>{node.name}"
    elif t == "Conditional":
        d["condition"] = ast_to_dict(node.condition)
        d["then_block"] = ast_to_dict(node.then_block)
        d["else_block"] = ast_to_dict(node.else_block)
    elif hasattr(node, "symbol"):
        d["op"] = node.symbol
        d["left"] = node.left
        d["right"] = node.right
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def read_source(path, debug=False):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        if debug:
            traceback.print_exc()
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        sys.exit(1)


def parse_or_exit(code, path, debug=False, color=True):
    try:
        return Parser(Scanner(code, path)).parse()
    except ParseError as e:
        if debug:
            traceback.print_exc()
        print(render_diagnostic(e, code, color=color), file=sys.stderr)
        sys.exit(1)


def cmd_parse(path, debug=False, color=True):
    code = read_source(path, debug=debug)
    program = parse_or_exit(code, path, debug=debug, color=color)
    print(pretty(ast_to_dict(program)))


def cmd_run(path, debug=False, color=True, trace=False, max_steps=None):
    code = read_source(path, debug=debug)
    program = parse_or_exit(code, path, debug=debug, color=color)

    interpreter = Interpreter(program, trace=trace, max_steps=max_steps)
    error = interpreter.run()
    if error is not None and debug:
        print(error.format(), file=sys.stderr)


def usage_exit():
    for line in USAGE:
        print(line)
    sys.exit(1)


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    trace = False
    if "--trace" in args:
        trace = True
        args.remove("--trace")

    color = sys.stderr.isatty()
    if "--no-color" in args:
        color = False
        args.remove("--no-color")

    max_steps = None
    if "--max-steps" in args:
        i = args.index("--max-steps")
        try:
            max_steps = int(args[i + 1])
        except (IndexError, ValueError):
            print("--max-steps expects an integer")
            sys.exit(1)
        del args[i : i + 2]

    logging.basicConfig(
        level=logging.DEBUG if (debug or trace) else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args:
        usage_exit()

    cmd = args[0]
    rest = args[1:]

    if cmd == "parse":
        if len(rest) != 1:
            usage_exit()
        cmd_parse(rest[0], debug=debug, color=color)
    elif cmd == "run":
        if len(rest) > 1:
            print("Run accepts at most one file.")
            sys.exit(1)
        path = rest[0] if rest else DEFAULT_PROGRAM
        cmd_run(path, debug=debug, color=color, trace=trace, max_steps=max_steps)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
