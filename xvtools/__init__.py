"""Models of a small RISC-V teaching kernel's memory system, with a shell parser, grep, printf, an allocator and file utilities."""

__version__ = "0.1.0"