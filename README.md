# xvtools

Pure-Python models of the pieces of a small RISC-V teaching operating
system: the Sv39 page-table layout and the virtual-memory routines that
work on it, the machine's physical memory map, ELF header parsing, a
parser for the shell's command language, a tiny regular-expression grep,
a minimal `printf`, a first-fit free-list allocator, a few C-library
helpers, and a handful of file utilities.

No third-party libraries are needed. Python 3.10 or later.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

### `xvtools.riscv`

Control-register bit constants (`SSTATUS_SIE`, `MIE_MTIE`, ...), page
constants (`PGSIZE`, `PGSHIFT`, `MAXVA`), PTE flag bits (`PTE_V`, `PTE_R`,
`PTE_W`, `PTE_X`, `PTE_U`) and the helpers `pg_round_up`, `pg_round_down`,
`pa_to_pte`, `pte_to_pa`, `pte_flags`, `px_shift`, `px` and `make_satp`.
Arithmetic wraps at 64 bits.

### `xvtools.memlayout`

The physical memory map of the `virt` machine (`UART0`, `VIRTIO0`, `CLINT`,
`PLIC`, `KERNBASE`, `PHYSTOP`, `TRAMPOLINE`, `TRAPFRAME`), the open-mode
flags `O_RDONLY`, `O_WRONLY`, `O_RDWR`, `O_CREATE`, `O_TRUNC`, and the
address functions `clint_mtimecmp`, `plic_menable`, `plic_senable`,
`plic_mpriority`, `plic_spriority`, `plic_mclaim`, `plic_sclaim` and
`kstack`.

### `xvtools.elf`

`parse_elf_header(data)` and `parse_program_header(data)` unpack
little-endian 64-bit headers into the frozen dataclasses `ElfHeader` and
`ProgramHeader`. `ElfHeader.is_valid()` checks the magic number;
`ProgramHeader.is_loadable()` is true for `ELF_PROG_LOAD` segments. Input
too short for the structure raises `ElfFormatError` (a `ValueError`).

### `xvtools.vm`

`PhysicalMemory(npages=1024, base=KERNBASE)` is a page-granular simulated
memory with `alloc()` (returns a page address or `None` when exhausted),
`free(pa)`, `read(pa, n)`, `write(pa, data)`, `read_pte(pagetable, index)`
and `write_pte(pagetable, index, value)`.

The page-table routines take that memory as their first argument:
`walk` (returns the `(table, index)` of the level-0 PTE, or `None`),
`walkaddr`, `mappages`, `uvmunmap`, `uvmcreate`, `uvmfirst`, `uvmalloc`,
`uvmdealloc`, `freewalk`, `uvmfree`, `uvmcopy`, `uvmclear`, `copyout`,
`copyin` and `copyinstr`.

Violated invariants (remapping a page, unmapping an unmapped one, freeing
a page never allocated, ...) raise `KernelPanic`. Running out of pages
raises `MemoryError`, after undoing any partial work. `copyout`, `copyin`
and `copyinstr` raise `ValueError` for an address that is not a mapped
user page; `copyinstr` also raises it when no NUL appears within `max`
bytes.

### `xvtools.shell`

`parse_cmd(line)` parses simple commands, `<`, `>` and `>>`
redirections, pipes `|`, sequencing `;`, background `&` and
parenthesised blocks into a tree of the dataclasses `ExecCmd`, `RedirCmd`,
`PipeCmd`, `ListCmd` and `BackCmd`. A command may hold at most nine
arguments. Bad input raises `ShellSyntaxError`, whose `leftovers`
attribute holds unparsed text when there is any.

### `xvtools.grep`

`match(pattern, text)` supports only `^`, `.`, `*` and `$`.
`grep_lines(pattern, data)` yields each matching newline-terminated line;
a final line without a newline is not reported, and a line longer than
1022 characters ends the search. `main(argv=None)` is the command.

### `xvtools.printf`

`xformat(fmt, *args)` returns the formatted text and `fprintf(stream,
fmt, *args)` writes it. Conversions: `%d` (signed 32-bit), `%l` (narrowed
to 32 bits, unsigned), `%x` (upper-case hex), `%p` (`0x` and 16 hex
digits), `%s` (`None` prints `(null)`), `%c` and `%%`. Unknown conversions
are printed as written. Too few arguments raise `TypeError`.

### `xvtools.umalloc`

`Allocator(heap_limit)` is a first-fit circular free-list allocator over a
heap that grows in steps of at least 4096 16-byte units up to
`heap_limit` bytes. `malloc(nbytes)` returns a byte offset into the heap,
or `None` when the limit is reached; `free(ap)` coalesces neighbouring
free blocks and raises `ValueError` for an address not currently
allocated.

### `xvtools.ulib`

`atoi(s)` (leading decimal digits only), `strcmp(p, q)` (unsigned byte
comparison returning the difference), `gets(stream, max)` (reads up to
`max - 1` characters, stopping after `\n` or `\r`), and the Park–Miller
generator: `do_rand(state)` and the iterable `Rand(seed=1)` with
`next()`.

### `xvtools.coreutils`

`cat(streams, out)`, `echo(args)` and `wc(data)` (returns
`(lines, words, characters)`), and the command entry points `cat_main`,
`echo_main`, `wc_main`, `ln_main`, `mkdir_main` and `rm_main`. Each entry
point takes `argv=None` (meaning the process arguments) and returns an
exit status.

## Examples

```python
from xvtools.riscv import pg_round_up, pg_round_down

pg_round_up(1)        # 4096
pg_round_down(8191)   # 4096
```

```python
from xvtools.printf import xformat

xformat("%d %x %s", -5, 255, "ok")   # "-5 FF ok"
```

```python
from xvtools.grep import match

match("^ab*c$", "abbbc")   # True
match("^ab*c$", "abd")     # False
```

```python
from xvtools.shell import parse_cmd

tree = parse_cmd("cat < in.txt | grep foo > out.txt; echo done &")
```

```python
from xvtools.riscv import PTE_W
from xvtools.vm import PhysicalMemory, copyin, copyout, uvmalloc, uvmcreate

mem = PhysicalMemory()
pt = uvmcreate(mem)
uvmalloc(mem, pt, 0, 8192, PTE_W)
copyout(mem, pt, 100, b"hello")
copyin(mem, pt, 100, 5)     # b"hello"
```

## Commands

```
xv-grep PATTERN [FILE ...]
xv-cat [FILE ...]
xv-echo [WORD ...]
xv-wc [FILE ...]
xv-ln OLD NEW
xv-mkdir DIR ...
xv-rm FILE ...
```

`xv-grep`, `xv-cat` and `xv-wc` read standard input when no file is
given. `xv-wc` prints lines, words and bytes followed by the name.
`xv-mkdir` and `xv-rm` stop at the first failure; `xv-rm` also removes
empty directories. `xv-ln` reports a failed link on standard error but
still exits with status 0.

## What this package does not do

There is no kernel here: no processes, scheduler, traps, devices or file
system, and nothing that builds a disk image. The memory routines work on
the simulated `PhysicalMemory` only. The shell module parses command
lines but nothing runs the resulting trees, so there is no interactive
shell command.