"""Minimal formatted output understanding %d %l %x %p %s %c and %%."""

DIGITS = "0123456789ABCDEF"

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1


def _as_int32(value):
    value &= _MASK32
    return value - (1 << 32) if value >= 1 << 31 else value


def _string(value):
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("latin-1")
    return str(value).split("\0", 1)[0]


def _char(value):
    if isinstance(value, str):
        return value[:1]
    return chr(value & 0xFF)


def _convert(conv, value):
    if conv == "d":
        return str(_as_int32(value))
    if conv == "l":
        # The value is narrowed to 32 bits and printed unsigned.
        return str(value & _MASK32)
    if conv == "x":
        return format(value & _MASK32, "X")
    if conv == "p":
        return "0x" + format(value & _MASK64, "016X")
    if conv == "s":
        return _string(value)
    return _char(value)


def xformat(fmt, *args):
    """Format args according to fmt and return the resulting text."""
    fmt = fmt.split("\0", 1)[0]
    remaining = iter(args)
    out = []
    pending = False
    for c in fmt:
        if not pending:
            if c == "%":
                pending = True
            else:
                out.append(c)
            continue
        pending = False
        if c in "dlxpsc":
            try:
                value = next(remaining)
            except StopIteration:
                raise TypeError("not enough arguments for format string") from None
            out.append(_convert(c, value))
        elif c == "%":
            out.append("%")
        else:
            # Unknown conversion: print it to draw attention.
            out.append("%" + c)
    return "".join(out)


def fprintf(stream, fmt, *args):
    """Write formatted output to a text stream."""
    stream.write(xformat(fmt, *args))