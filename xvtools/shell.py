"""Parser for the shell's command language.

The grammar covers simple commands, ``<``, ``>`` and ``>>`` redirections,
pipes ``|``, sequencing ``;``, background ``&`` and parenthesised blocks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from xvtools.memlayout import O_CREATE, O_RDONLY, O_TRUNC, O_WRONLY

MAXARGS = 10

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"

_REDIRECTIONS = {
    "<": (O_RDONLY, 0),
    ">": (O_WRONLY | O_CREATE | O_TRUNC, 1),
    "+": (O_WRONLY | O_CREATE, 1),  # ">>"
}


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message, leftovers=None):
        super().__init__(message)
        self.leftovers = leftovers


@dataclass
class ExecCmd:
    argv: List[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    cmd: "Command"
    file: str
    mode: int
    fd: int


@dataclass
class PipeCmd:
    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Parser:
    def __init__(self, text):
        self._text = text
        self._pos = 0

    def _skip_ws(self):
        text = self._text
        while self._pos < len(text) and text[self._pos] in WHITESPACE:
            self._pos += 1

    def at_end(self):
        self._skip_ws()
        return self._pos >= len(self._text)

    def rest(self):
        return self._text[self._pos:]

    def peek(self, toks):
        self._skip_ws()
        return self._pos < len(self._text) and self._text[self._pos] in toks

    def gettoken(self):
        """Consume one token; return (kind, text), kind None at the end."""
        self._skip_ws()
        text = self._text
        start = self._pos
        if start >= len(text):
            return None, ""
        c = text[start]
        if c in "|();&<":
            kind = c
            self._pos += 1
        elif c == ">":
            kind = ">"
            self._pos += 1
            if self._pos < len(text) and text[self._pos] == ">":
                kind = "+"
                self._pos += 1
        else:
            kind = "a"
            while (
                self._pos < len(text)
                and text[self._pos] not in WHITESPACE
                and text[self._pos] not in SYMBOLS
            ):
                self._pos += 1
        word = text[start:self._pos]
        self._skip_ws()
        return kind, word

    def line(self):
        cmd = self.pipe()
        while self.peek("&"):
            self.gettoken()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.gettoken()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self):
        cmd = self.exec_()
        if self.peek("|"):
            self.gettoken()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd):
        while self.peek("<>"):
            tok, _ = self.gettoken()
            kind, word = self.gettoken()
            if kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            mode, fd = _REDIRECTIONS[tok]
            cmd = RedirCmd(cmd, word, mode, fd)
        return cmd

    def block(self):
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.gettoken()
        cmd = self.line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.gettoken()
        return self.redirs(cmd)

    def exec_(self):
        if self.peek("("):
            return self.block()
        node = ExecCmd()
        cmd = self.redirs(node)
        while not self.peek("|)&;"):
            kind, word = self.gettoken()
            if kind is None:
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            node.argv.append(word)
            if len(node.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            cmd = self.redirs(cmd)
        return cmd


def parse_cmd(line: str) -> Command:
    """Parse a command line into a command tree."""
    line = line.split("\0", 1)[0]
    parser = _Parser(line)
    cmd = parser.line()
    if not parser.at_end():
        rest = parser.rest()
        raise ShellSyntaxError(f"syntax (leftovers: {rest})", leftovers=rest)
    return cmd