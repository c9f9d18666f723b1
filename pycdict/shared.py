import sys
from typing import Any


def printf(format: str, *args: Any):
    print(format.format(*args), end="")


def printf_err(format: str, *args: Any):
    print(format.format(*args), end="", file=sys.stderr)


def show_bytes(data: bytes) -> str:
    return data.decode("utf-8", errors="backslashreplace")
