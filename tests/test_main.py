import sys

import pytest

from pycdict.main import (
    CommandError,
    CommandOk,
    demonstrate_dict,
    init_dict,
    interpret,
    main,
    run_command,
)


def test_demonstrate_dict(capsys):
    assert demonstrate_dict()

    out = capsys.readouterr().out
    assert "FAIL" not in out
    assert "ok   Denver updated to Broncos\n" in out
    assert "*** capacity: 8 stored: 4 deleted: 0 load_factor: 0.50\n" in out
    assert "*** capacity: 8 stored: 3 deleted: 1 load_factor: 0.50\n" in out


def test_commands(capsys):
    init_dict()
    assert (
        interpret(
            """
            # teams
            store Atlanta Hawks
            store "Los Angeles" Lakers
            retrieve "Los Angeles"
            retrieve Chicago
            contains Atlanta
            delete Atlanta
            contains Atlanta
            size
            capacity
            load
            """
        )
        == CommandOk()
    )

    assert capsys.readouterr().out == "Lakers\n(not found)\ntrue\nfalse\n1\n8\n0.25\n"


def test_command_errors(capsys):
    init_dict()
    assert run_command("fetch Atlanta") == CommandError()
    assert run_command("store Atlanta") == CommandError()
    assert run_command('store "Atlanta Hawks') == CommandError()
    assert run_command("   ") == CommandOk()

    err = capsys.readouterr().err
    assert "Unknown command or wrong arguments: fetch Atlanta" in err
    assert "Unknown command or wrong arguments: store Atlanta" in err

    # a bad line does not stop the rest of the script
    assert interpret("bogus\nstore a 1\nsize\n") == CommandError()
    assert capsys.readouterr().out == "1\n"


def test_print_command(capsys):
    init_dict()
    assert run_command("store a x") == CommandOk()
    assert run_command("print") == CommandOk()
    assert "00: IN_USE key=a hash=0 value=x\n" in capsys.readouterr().out


def test_main_run_file(tmp_path, monkeypatch, capsys):
    script = tmp_path / "ok.txt"
    script.write_text("store Denver Nuggets\nstore Denver Broncos\nretrieve Denver\nsize\n")
    monkeypatch.setattr(sys, "argv", ["pycdict", str(script)])
    main()
    assert capsys.readouterr().out == "Broncos\n1\n"

    bad = tmp_path / "bad.txt"
    bad.write_text("store Denver\n")
    monkeypatch.setattr(sys, "argv", ["pycdict", str(bad)])
    with pytest.raises(SystemExit) as exc:
        main()
    assert exc.value.code == 65


def test_main_usage(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["pycdict", "a", "b"])
    with pytest.raises(SystemExit) as exc:
        main()
    assert exc.value.code == 64
    assert capsys.readouterr().out == "Usage: pycdict [path]\n"


def test_main_repl(monkeypatch, capsys):
    lines = iter(["store Boston Celtics", "retrieve Boston"])

    def fake_input(prompt: str) -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    monkeypatch.setattr(sys, "argv", ["pycdict"])
    main()
    assert capsys.readouterr().out == "Celtics\n\n"
