"""Line filter supporting the ``^ . * $`` regular-expression operators."""

import sys

BUFFER_SIZE = 1024
# Longest line (without its newline) the line buffer can hold.
MAX_LINE = BUFFER_SIZE - 2


def _match_here(re, ri, text, ti):
    while True:
        if ri == len(re):
            return True
        if ri + 1 < len(re) and re[ri + 1] == "*":
            return _match_star(re[ri], re, ri + 2, text, ti)
        if re[ri] == "$" and ri + 1 == len(re):
            return ti == len(text)
        if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
            ri += 1
            ti += 1
            continue
        return False


def _match_star(c, re, ri, text, ti):
    while True:
        if _match_here(re, ri, text, ti):
            return True
        if ti < len(text) and (text[ti] == c or c == "."):
            ti += 1
            continue
        return False


def match(pattern, text):
    """True if pattern matches anywhere in text."""
    if pattern.startswith("^"):
        return _match_here(pattern, 1, text, 0)
    return any(_match_here(pattern, 0, text, ti) for ti in range(len(text) + 1))


def grep_lines(pattern, data):
    """Yield each newline-terminated line of data that matches pattern.

    A final line without a newline is never reported, and a line too long
    for the line buffer ends the search.
    """
    start = 0
    while True:
        nl = data.find("\n", start)
        if nl < 0:
            return
        line = data[start:nl]
        if len(line) > MAX_LINE:
            return
        if match(pattern, line):
            yield line + "\n"
        start = nl + 1


def _read_path(path):
    with open(path, encoding="latin-1", newline="") as fh:
        return fh.read()


def main(argv=None):
    """Run grep with argv (without the program name); return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, *paths = argv
    if not paths:
        sys.stdout.writelines(grep_lines(pattern, sys.stdin.read()))
        return 0
    for path in paths:
        try:
            data = _read_path(path)
        except OSError:
            sys.stdout.write(f"grep: cannot open {path}\n")
            return 1
        sys.stdout.writelines(grep_lines(pattern, data))
    return 0