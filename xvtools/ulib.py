"""Small C-library helpers and the pseudo-random generator used by the stress tester."""

_MASK64 = (1 << 64) - 1

RAND_MAX = 0x7FFFFFFD


def _cstr(s):
    """Bytes of s up to (not including) the first NUL."""
    if isinstance(s, str):
        s = s.encode("utf-8")
    return bytes(s).split(b"\0", 1)[0]


def atoi(s):
    """Value of the leading decimal digits of s; 0 when there are none.

    No sign and no leading whitespace are accepted.
    """
    n = 0
    for c in s:
        if not "0" <= c <= "9":
            break
        n = n * 10 + ord(c) - ord("0")
    return n


def strcmp(p, q):
    """Compare two strings byte by byte as unsigned chars.

    Returns the difference of the first differing bytes, or 0 if equal.
    """
    a, b = _cstr(p), _cstr(q)
    for x, y in zip(a, b):
        if x != y:
            return x - y
    if len(a) > len(b):
        return a[len(b)]
    if len(b) > len(a):
        return -b[len(a)]
    return 0


def gets(stream, max):
    """Read one line of at most max - 1 characters from stream.

    Reading stops after a newline or carriage return, which is kept, or at
    end of input.  The result has the same type (str or bytes) as the stream.
    """
    empty = stream.read(0)
    parts = []
    while len(parts) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        parts.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    return empty.join(parts)


def do_rand(ctx):
    """One step of the Park-Miller minimal-standard generator.

    Returns the next value in [0, 0x7ffffffd], which is also the new state.
    """
    x = (ctx & _MASK64) % 0x7FFFFFFE + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += 0x7FFFFFFF
    return x - 1


class Rand:
    """Stateful pseudo-random generator; the state may be reseeded freely."""

    def __init__(self, seed=1):
        self.state = seed & _MASK64

    def next(self):
        """Advance the generator and return the next value."""
        self.state = do_rand(self.state)
        return self.state

    def __iter__(self):
        return self

    def __next__(self):
        return self.next()