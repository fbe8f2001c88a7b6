"""Sv39 virtual memory management over a simulated physical memory."""

from xvtools.memlayout import KERNBASE
from xvtools.riscv import (
    MASK64,
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    PTES_PER_PAGE,
    pa_to_pte,
    pg_round_down,
    pg_round_up,
    pte_flags,
    pte_to_pa,
    px,
)


class KernelPanic(RuntimeError):
    """An unrecoverable inconsistency the kernel would panic on."""


class PhysicalMemory:
    """Page-granular physical memory with a free-page allocator."""

    def __init__(self, npages=1024, base=KERNBASE):
        if npages <= 0:
            raise ValueError("npages must be positive")
        if base % PGSIZE:
            raise ValueError("base must be page-aligned")
        self.base = base
        self.end = base + npages * PGSIZE
        self._pages = {}
        self._free = list(range(base, self.end, PGSIZE))
        self._allocated = set()

    def alloc(self):
        """Take one free page; None when memory is exhausted."""
        if not self._free:
            return None
        pa = self._free.pop()
        self._allocated.add(pa)
        return pa

    def free(self, pa):
        """Return a page obtained from alloc()."""
        if pa % PGSIZE or not self.base <= pa < self.end or pa not in self._allocated:
            raise KernelPanic("kfree")
        self._allocated.discard(pa)
        self._free.append(pa)

    def _page(self, pa):
        if not self.base <= pa < self.end:
            raise KernelPanic(f"bad physical address {pa:#x}")
        key = pg_round_down(pa)
        page = self._pages.get(key)
        if page is None:
            page = self._pages[key] = bytearray(PGSIZE)
        return page

    def read(self, pa, n):
        out = bytearray()
        while n > 0:
            page = self._page(pa)
            off = pa % PGSIZE
            chunk = min(n, PGSIZE - off)
            out += page[off:off + chunk]
            pa += chunk
            n -= chunk
        return bytes(out)

    def write(self, pa, data):
        view = memoryview(bytes(data))
        while view:
            page = self._page(pa)
            off = pa % PGSIZE
            chunk = min(len(view), PGSIZE - off)
            page[off:off + chunk] = view[:chunk]
            view = view[chunk:]
            pa += chunk

    def read_pte(self, pagetable, index):
        if not 0 <= index < PTES_PER_PAGE:
            raise IndexError(f"PTE index {index} out of range")
        return int.from_bytes(self.read(pagetable + 8 * index, 8), "little")

    def write_pte(self, pagetable, index, value):
        if not 0 <= index < PTES_PER_PAGE:
            raise IndexError(f"PTE index {index} out of range")
        self.write(pagetable + 8 * index, (value & MASK64).to_bytes(8, "little"))


def _zero_page(mem, pa):
    mem.write(pa, bytes(PGSIZE))


def walk(mem, pagetable, va, alloc):
    """Locate the level-0 PTE for va as (table, index).

    Returns None if an intermediate table is missing and alloc is false,
    or if a needed table page cannot be allocated.
    """
    if va >= MAXVA:
        raise KernelPanic("walk")
    for level in (2, 1):
        index = px(level, va)
        pte = mem.read_pte(pagetable, index)
        if pte & PTE_V:
            pagetable = pte_to_pa(pte)
            continue
        if not alloc:
            return None
        table = mem.alloc()
        if table is None:
            return None
        _zero_page(mem, table)
        mem.write_pte(pagetable, index, pa_to_pte(table) | PTE_V)
        pagetable = table
    return pagetable, px(0, va)


def walkaddr(mem, pagetable, va):
    """Physical address of a mapped user page, or None."""
    if va >= MAXVA:
        return None
    ref = walk(mem, pagetable, va, False)
    if ref is None:
        return None
    pte = mem.read_pte(*ref)
    if not pte & PTE_V or not pte & PTE_U:
        return None
    return pte_to_pa(pte)


def mappages(mem, pagetable, va, size, pa, perm):
    """Map [va, va+size) to physical memory starting at pa."""
    if size == 0:
        raise KernelPanic("mappages: size")
    a = pg_round_down(va)
    last = pg_round_down(va + size - 1)
    while True:
        ref = walk(mem, pagetable, a, True)
        if ref is None:
            raise MemoryError("mappages: cannot allocate page-table page")
        if mem.read_pte(*ref) & PTE_V:
            raise KernelPanic("mappages: remap")
        mem.write_pte(*ref, pa_to_pte(pa) | perm | PTE_V)
        if a == last:
            break
        a += PGSIZE
        pa += PGSIZE


def uvmunmap(mem, pagetable, va, npages, do_free):
    """Remove npages existing mappings from page-aligned va."""
    if va % PGSIZE:
        raise KernelPanic("uvmunmap: not aligned")
    for a in range(va, va + npages * PGSIZE, PGSIZE):
        ref = walk(mem, pagetable, a, False)
        if ref is None:
            raise KernelPanic("uvmunmap: walk")
        pte = mem.read_pte(*ref)
        if not pte & PTE_V:
            raise KernelPanic("uvmunmap: not mapped")
        if pte_flags(pte) == PTE_V:
            raise KernelPanic("uvmunmap: not a leaf")
        if do_free:
            mem.free(pte_to_pa(pte))
        mem.write_pte(*ref, 0)


def uvmcreate(mem):
    """Allocate an empty user page table."""
    pagetable = mem.alloc()
    if pagetable is None:
        raise MemoryError("uvmcreate: out of memory")
    _zero_page(mem, pagetable)
    return pagetable


def uvmfirst(mem, pagetable, src):
    """Load code smaller than a page at address 0."""
    if len(src) >= PGSIZE:
        raise KernelPanic("uvmfirst: more than a page")
    page = mem.alloc()
    if page is None:
        raise MemoryError("uvmfirst: out of memory")
    _zero_page(mem, page)
    mappages(mem, pagetable, 0, PGSIZE, page, PTE_W | PTE_R | PTE_X | PTE_U)
    mem.write(page, src)


def uvmalloc(mem, pagetable, oldsz, newsz, xperm):
    """Grow a process from oldsz to newsz; returns the new size."""
    if newsz < oldsz:
        return oldsz
    oldsz = pg_round_up(oldsz)
    for a in range(oldsz, newsz, PGSIZE):
        page = mem.alloc()
        if page is None:
            uvmdealloc(mem, pagetable, a, oldsz)
            raise MemoryError("uvmalloc: out of memory")
        _zero_page(mem, page)
        try:
            mappages(mem, pagetable, a, PGSIZE, page, PTE_R | PTE_U | xperm)
        except MemoryError:
            mem.free(page)
            uvmdealloc(mem, pagetable, a, oldsz)
            raise
    return newsz


def uvmdealloc(mem, pagetable, oldsz, newsz):
    """Shrink a process from oldsz to newsz; returns the new size."""
    if newsz >= oldsz:
        return oldsz
    if pg_round_up(newsz) < pg_round_up(oldsz):
        npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
        uvmunmap(mem, pagetable, pg_round_up(newsz), npages, True)
    return newsz


def freewalk(mem, pagetable):
    """Free page-table pages recursively; leaves must already be unmapped."""
    for index in range(PTES_PER_PAGE):
        pte = mem.read_pte(pagetable, index)
        if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
            freewalk(mem, pte_to_pa(pte))
            mem.write_pte(pagetable, index, 0)
        elif pte & PTE_V:
            raise KernelPanic("freewalk: leaf")
    mem.free(pagetable)


def uvmfree(mem, pagetable, sz):
    """Free user pages and then the page table itself."""
    if sz > 0:
        uvmunmap(mem, pagetable, 0, pg_round_up(sz) // PGSIZE, True)
    freewalk(mem, pagetable)


def uvmcopy(mem, old, new, sz):
    """Copy a parent's pages and mappings into a child's page table."""
    for i in range(0, sz, PGSIZE):
        ref = walk(mem, old, i, False)
        if ref is None:
            raise KernelPanic("uvmcopy: pte should exist")
        pte = mem.read_pte(*ref)
        if not pte & PTE_V:
            raise KernelPanic("uvmcopy: page not present")
        page = mem.alloc()
        if page is None:
            uvmunmap(mem, new, 0, i // PGSIZE, True)
            raise MemoryError("uvmcopy: out of memory")
        mem.write(page, mem.read(pte_to_pa(pte), PGSIZE))
        try:
            mappages(mem, new, i, PGSIZE, page, pte_flags(pte))
        except MemoryError:
            mem.free(page)
            uvmunmap(mem, new, 0, i // PGSIZE, True)
            raise


def uvmclear(mem, pagetable, va):
    """Mark the PTE for va inaccessible to user mode."""
    ref = walk(mem, pagetable, va, False)
    if ref is None:
        raise KernelPanic("uvmclear")
    mem.write_pte(*ref, mem.read_pte(*ref) & ~PTE_U)


def _user_page(mem, pagetable, va0):
    pa0 = walkaddr(mem, pagetable, va0)
    if pa0 is None:
        raise ValueError(f"bad user address {va0:#x}")
    return pa0


def copyout(mem, pagetable, dstva, src):
    """Copy bytes from the kernel into user memory at dstva."""
    view = memoryview(bytes(src))
    while view:
        va0 = pg_round_down(dstva)
        pa0 = _user_page(mem, pagetable, va0)
        n = min(PGSIZE - (dstva - va0), len(view))
        mem.write(pa0 + (dstva - va0), view[:n])
        view = view[n:]
        dstva = va0 + PGSIZE


def copyin(mem, pagetable, srcva, length):
    """Copy length bytes from user memory at srcva."""
    out = bytearray()
    while length > 0:
        va0 = pg_round_down(srcva)
        pa0 = _user_page(mem, pagetable, va0)
        n = min(PGSIZE - (srcva - va0), length)
        out += mem.read(pa0 + (srcva - va0), n)
        length -= n
        srcva = va0 + PGSIZE
    return bytes(out)


def copyinstr(mem, pagetable, srcva, max):
    """Copy a NUL-terminated string of at most max bytes (NUL included)."""
    out = bytearray()
    while max > 0:
        va0 = pg_round_down(srcva)
        pa0 = _user_page(mem, pagetable, va0)
        n = min(PGSIZE - (srcva - va0), max)
        chunk = mem.read(pa0 + (srcva - va0), n)
        end = chunk.find(b"\0")
        if end >= 0:
            out += chunk[:end]
            return bytes(out)
        out += chunk
        max -= n
        srcva = va0 + PGSIZE
    raise ValueError("copyinstr: string not terminated")