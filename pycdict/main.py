from dataclasses import dataclass
import shlex
import sys

from .debug import print_dict
from .shared import printf, printf_err, show_bytes
from .table import Dict, NotFound, new_dict


@dataclass(frozen=True)
class CommandOk:
    pass


@dataclass(frozen=True)
class CommandError:
    pass


CommandResult = CommandOk | CommandError


TEAMS = [
    ("Atlanta", "Hawks"),
    ("Boston", "Celtics"),
    ("Los Angeles", "Lakers"),
    ("Denver", "Nuggets"),
]


d: Dict


def init_dict():
    global d
    d = new_dict()


def demonstrate_dict() -> bool:
    demo = new_dict()
    passed = True

    def check(cond: bool, what: str):
        nonlocal passed
        printf("{0:s} {1:s}\n", "ok  " if cond else "FAIL", what)
        passed = passed and cond

    check(demo.capacity() == 8, "new dictionary has 8 slots")
    check(demo.size() == 0, "new dictionary is empty")
    check(demo.load_factor() == 0.0, "new dictionary has load factor 0")

    for city, team in TEAMS:
        demo.store(city, team)
    print_dict(demo)

    check(demo.retrieve("Denver") == b"Nuggets", "Denver -> Nuggets")
    check(demo.size() == 4, "4 teams stored")

    demo.delete("Boston")
    check(demo.size() == 3, "3 teams left after deleting Boston")
    check(not demo.contains("Boston"), "Boston is gone")

    demo.store("Denver", "Broncos")
    check(demo.retrieve("Denver") == b"Broncos", "Denver updated to Broncos")
    check(demo.size() == 3, "update keeps 3 teams")
    print_dict(demo)

    demo.free()
    return passed


def run_command(line: str) -> CommandResult:
    try:
        words = shlex.split(line, comments=True)
    except ValueError as e:
        printf_err("{0:s}: {1:s}\n", str(e), line.strip())
        return CommandError()

    if not words:
        return CommandOk()

    name, args = words[0], words[1:]
    match name, len(args):
        case "store", 2:
            d.store(args[0], args[1])
        case "retrieve", 1:
            value = d.retrieve(args[0])
            if isinstance(value, NotFound):
                printf("(not found)\n")
            else:
                printf("{0:s}\n", show_bytes(value))
        case "contains", 1:
            printf("{0:s}\n", "true" if d.contains(args[0]) else "false")
        case "delete", 1:
            d.delete(args[0])
        case "size", 0:
            printf("{0:d}\n", d.size())
        case "capacity", 0:
            printf("{0:d}\n", d.capacity())
        case "load", 0:
            printf("{0:.2f}\n", d.load_factor())
        case "print", 0:
            print_dict(d)
        case "demo", 0:
            if not demonstrate_dict():
                return CommandError()
        case _:
            printf_err("Unknown command or wrong arguments: {0:s}\n", line.strip())
            return CommandError()

    return CommandOk()


def interpret(source: str) -> CommandResult:
    result: CommandResult = CommandOk()
    for line in source.splitlines():
        if isinstance(run_command(line), CommandError):
            result = CommandError()
    return result


def repl():
    while True:
        try:
            line = input("> ")
        except EOFError:
            printf("\n")
            return
        run_command(line)


def run_file(filepath: str):
    with open(filepath) as fp:
        result = interpret(fp.read())

    if isinstance(result, CommandError):
        sys.exit(65)


def main():
    init_dict()

    if len(sys.argv) == 1:
        repl()
    elif len(sys.argv) == 2:
        run_file(sys.argv[1])
    else:
        printf("Usage: pycdict [path]\n")
        sys.exit(64)
