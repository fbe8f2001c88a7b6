"""First-fit free-list memory allocator over a simulated, growable heap."""

HEADER_SIZE = 16  # bytes per header, the allocation unit
MIN_GROWTH = 4096  # smallest heap extension, in units

_BASE = -1  # the sentinel header, placed below every heap address


class Allocator:
    """Circular free-list allocator whose heap grows up to heap_limit bytes.

    Addresses are byte offsets from the start of the heap.
    """

    def __init__(self, heap_limit):
        if heap_limit < 0:
            raise ValueError("heap_limit must not be negative")
        self.heap_limit = heap_limit
        self.heap_size = 0
        self._headers = {}
        self._freep = None
        self._allocated = set()

    def _morecore(self, nunits):
        nunits = max(nunits, MIN_GROWTH)
        start = self.heap_size // HEADER_SIZE
        if self.heap_size + nunits * HEADER_SIZE > self.heap_limit:
            return None
        self.heap_size += nunits * HEADER_SIZE
        self._headers[start] = [None, nunits]
        self._release(start)
        return self._freep

    def _release(self, bp):
        h = self._headers
        p = self._freep
        while not (p < bp < h[p][0]):
            if p >= h[p][0] and (bp > p or bp < h[p][0]):
                break
            p = h[p][0]
        nxt = h[p][0]
        if bp + h[bp][1] == nxt:
            h[bp][1] += h[nxt][1]
            h[bp][0] = h[nxt][0]
            del h[nxt]
        else:
            h[bp][0] = nxt
        if p + h[p][1] == bp:
            h[p][1] += h[bp][1]
            h[p][0] = h[bp][0]
            del h[bp]
        else:
            h[p][0] = bp
        self._freep = p

    def malloc(self, nbytes):
        """Allocate nbytes; return the block's address, or None if out of memory."""
        if nbytes < 0:
            raise ValueError("nbytes must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        h = self._headers
        if self._freep is None:
            h[_BASE] = [_BASE, 0]
            self._freep = _BASE
        prevp = self._freep
        p = h[prevp][0]
        while True:
            size = h[p][1]
            if size >= nunits:
                if size == nunits:
                    h[prevp][0] = h[p][0]
                else:
                    h[p][1] -= nunits
                    p += h[p][1]
                    h[p] = [None, nunits]
                self._freep = prevp
                address = (p + 1) * HEADER_SIZE
                self._allocated.add(address)
                return address
            if p == self._freep:
                p = self._morecore(nunits)
                if p is None:
                    return None
            prevp, p = p, h[p][0]

    def free(self, ap):
        """Return a block obtained from malloc() to the free list."""
        if ap not in self._allocated:
            raise ValueError(f"free of unallocated address {ap!r}")
        self._allocated.discard(ap)
        self._release(ap // HEADER_SIZE - 1)