"""The small file utilities: cat, echo, wc, ln, mkdir and rm."""

import os
import sys

BUFFER_SIZE = 512

# A NUL byte also separates words.
_WS_BYTES = frozenset(b" \r\t\n\v\0")
_WS_TEXT = frozenset(" \r\t\n\v\0")


def cat(streams, out):
    """Copy each binary stream in turn to out."""
    for stream in streams:
        for chunk in iter(lambda: stream.read(BUFFER_SIZE), b""):
            out.write(chunk)


def echo(args):
    """Text printed for args: joined by spaces, newline-terminated; empty with no args."""
    if not args:
        return ""
    return " ".join(args) + "\n"


def wc(data):
    """Count (lines, words, characters) in bytes or text."""
    if isinstance(data, str):
        whitespace, newline = _WS_TEXT, "\n"
    else:
        data = bytes(data)
        whitespace, newline = _WS_BYTES, ord("\n")
    lines = words = 0
    inword = False
    for c in data:
        if c == newline:
            lines += 1
        if c in whitespace:
            inword = False
        elif not inword:
            words += 1
            inword = True
    return lines, words, len(data)


def _args(argv):
    return sys.argv[1:] if argv is None else list(argv)


def cat_main(argv=None):
    """Concatenate files (or standard input) to standard output."""
    argv = _args(argv)
    sys.stdout.flush()
    out = sys.stdout.buffer
    try:
        if not argv:
            try:
                cat([sys.stdin.buffer], out)
            except OSError:
                sys.stderr.write("cat: read error\n")
                return 1
            return 0
        for path in argv:
            try:
                fh = open(path, "rb")
            except OSError:
                sys.stderr.write(f"cat: cannot open {path}\n")
                return 1
            with fh:
                cat([fh], out)
        return 0
    finally:
        out.flush()


def echo_main(argv=None):
    """Print the arguments."""
    sys.stdout.write(echo(_args(argv)))
    return 0


def _report(data, name):
    lines, words, chars = wc(data)
    sys.stdout.write(f"{lines} {words} {chars} {name}\n")


def wc_main(argv=None):
    """Print line, word and character counts for files or standard input."""
    argv = _args(argv)
    if not argv:
        _report(sys.stdin.buffer.read(), "")
        return 0
    for path in argv:
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError:
            sys.stdout.write(f"wc: cannot open {path}\n")
            return 1
        _report(data, path)
    return 0


def ln_main(argv=None):
    """Create a hard link: ln old new."""
    argv = _args(argv)
    if len(argv) != 2:
        sys.stderr.write("Usage: ln old new\n")
        return 1
    old, new = argv
    try:
        os.link(old, new)
    except OSError:
        sys.stderr.write(f"link {old} {new}: failed\n")
    return 0


def mkdir_main(argv=None):
    """Create directories, stopping at the first failure."""
    argv = _args(argv)
    if not argv:
        sys.stderr.write("Usage: mkdir files...\n")
        return 1
    for path in argv:
        try:
            os.mkdir(path)
        except OSError:
            sys.stderr.write(f"mkdir: {path} failed to create\n")
            break
    return 0


def _unlink(path):
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def rm_main(argv=None):
    """Remove files or empty directories, stopping at the first failure."""
    argv = _args(argv)
    if not argv:
        sys.stderr.write("Usage: rm files...\n")
        return 1
    for path in argv:
        try:
            _unlink(path)
        except OSError:
            sys.stderr.write(f"rm: {path} failed to delete\n")
            break
    return 0