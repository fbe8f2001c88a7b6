"""ELF executable file header and program header parsing."""

import struct
from dataclasses import dataclass

ELF_MAGIC = 0x464C457F  # "\x7FELF" read little endian

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

_ELF_HEADER = struct.Struct("<I12sHHIQQQIHHHHHH")
_PROG_HEADER = struct.Struct("<IIQQQQQQ")

ELF_HEADER_SIZE = _ELF_HEADER.size
PROGRAM_HEADER_SIZE = _PROG_HEADER.size


class ElfFormatError(ValueError):
    """Raised when bytes are too short to hold an ELF structure."""


@dataclass(frozen=True)
class ElfHeader:
    magic: int
    ident: bytes
    type: int
    machine: int
    version: int
    entry: int
    phoff: int
    shoff: int
    flags: int
    ehsize: int
    phentsize: int
    phnum: int
    shentsize: int
    shnum: int
    shstrndx: int

    def is_valid(self):
        """True when the header carries the ELF magic number."""
        return self.magic == ELF_MAGIC


@dataclass(frozen=True)
class ProgramHeader:
    type: int
    flags: int
    off: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    align: int

    def is_loadable(self):
        """True for segments that are to be loaded into memory."""
        return self.type == ELF_PROG_LOAD


def parse_elf_header(data):
    """Parse the file header at the start of data."""
    raw = bytes(data[:ELF_HEADER_SIZE])
    if len(raw) < ELF_HEADER_SIZE:
        raise ElfFormatError(
            f"ELF header needs {ELF_HEADER_SIZE} bytes, got {len(raw)}"
        )
    return ElfHeader(*_ELF_HEADER.unpack(raw))


def parse_program_header(data):
    """Parse one program header at the start of data."""
    raw = bytes(data[:PROGRAM_HEADER_SIZE])
    if len(raw) < PROGRAM_HEADER_SIZE:
        raise ElfFormatError(
            f"program header needs {PROGRAM_HEADER_SIZE} bytes, got {len(raw)}"
        )
    return ProgramHeader(*_PROG_HEADER.unpack(raw))