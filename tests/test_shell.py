import pytest

from xvtools.memlayout import O_CREATE, O_RDONLY, O_TRUNC, O_WRONLY
from xvtools.shell import (
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse_cmd,
)


def test_simple_command():
    assert parse_cmd("echo hello world\n") == ExecCmd(["echo", "hello", "world"])


def test_empty_line_gives_empty_exec():
    assert parse_cmd("") == ExecCmd([])
    assert parse_cmd("   \t\n") == ExecCmd([])


def test_pipe_is_right_associative():
    assert parse_cmd("a | b | c") == PipeCmd(
        ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_list_is_right_associative():
    assert parse_cmd("a;b;c") == ListCmd(
        ExecCmd(["a"]), ListCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_background_nests():
    assert parse_cmd("sleep &") == BackCmd(ExecCmd(["sleep"]))
    assert parse_cmd("a&&") == BackCmd(BackCmd(ExecCmd(["a"])))


def test_redirections_wrap_in_order():
    result = parse_cmd("cat < in > out")
    assert result == RedirCmd(
        RedirCmd(ExecCmd(["cat"]), "in", O_RDONLY, 0),
        "out",
        O_WRONLY | O_CREATE | O_TRUNC,
        1,
    )


def test_append_redirection():
    result = parse_cmd("echo x >> log")
    assert result == RedirCmd(ExecCmd(["echo", "x"]), "log", O_WRONLY | O_CREATE, 1)


def test_redirection_before_arguments():
    result = parse_cmd("<in cat")
    assert result == RedirCmd(ExecCmd(["cat"]), "in", O_RDONLY, 0)


def test_block_with_redirection():
    result = parse_cmd("(a; b) > out")
    assert result == RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])),
        "out",
        O_WRONLY | O_CREATE | O_TRUNC,
        1,
    )


def test_block_in_pipe():
    result = parse_cmd("(a) | b")
    assert result == PipeCmd(ExecCmd(["a"]), ExecCmd(["b"]))


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse_cmd("(echo hi")


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file"):
        parse_cmd("echo >")


def test_too_many_args():
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_cmd("a b c d e f g h i j")


def test_nine_args_accepted():
    words = ["w%d" % i for i in range(9)]
    assert parse_cmd(" ".join(words)) == ExecCmd(words)


def test_leftovers_reported():
    with pytest.raises(ShellSyntaxError) as info:
        parse_cmd(")")
    assert info.value.leftovers == ")"


def test_word_after_block_is_leftover():
    with pytest.raises(ShellSyntaxError) as info:
        parse_cmd("(a) b")
    assert info.value.leftovers == "b"


def test_paren_inside_arguments_is_syntax_error():
    with pytest.raises(ShellSyntaxError, match="^syntax$"):
        parse_cmd("a (")