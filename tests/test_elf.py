import struct

import pytest

from xvtools.elf import (
    ELF_HEADER_SIZE,
    ELF_MAGIC,
    ELF_PROG_FLAG_EXEC,
    ELF_PROG_FLAG_READ,
    ELF_PROG_LOAD,
    PROGRAM_HEADER_SIZE,
    ElfFormatError,
    parse_elf_header,
    parse_program_header,
)


def _header_bytes(magic=b"\x7fELF", entry=0x1000, phoff=64, phnum=2):
    ident = bytes([2, 1, 1]) + bytes(9)
    rest = struct.pack(
        "<HHIQQQIHHHHHH", 2, 0xF3, 1, entry, phoff, 0, 0, 64, 56, phnum, 64, 0, 0
    )
    return magic + ident + rest


def _prog_bytes(ptype=ELF_PROG_LOAD):
    return struct.pack(
        "<IIQQQQQQ",
        ptype,
        ELF_PROG_FLAG_READ | ELF_PROG_FLAG_EXEC,
        0x1000,
        0x0,
        0x0,
        0x200,
        0x300,
        0x1000,
    )


def test_header_sizes_match_structs():
    data = _header_bytes()
    assert len(data) == ELF_HEADER_SIZE
    header = parse_elf_header(data)
    assert header.phentsize == PROGRAM_HEADER_SIZE
    prog = _prog_bytes()
    assert len(prog) == PROGRAM_HEADER_SIZE
    assert parse_program_header(prog).filesz == 0x200


def test_magic_bytes_give_elf_magic():
    header = parse_elf_header(_header_bytes())
    assert header.magic == ELF_MAGIC
    assert header.is_valid()


def test_header_fields_round_trip():
    header = parse_elf_header(_header_bytes(entry=0x2468, phoff=64, phnum=3))
    assert header.entry == 0x2468
    assert header.phoff == 64
    assert header.phnum == 3
    assert header.phentsize == PROGRAM_HEADER_SIZE
    assert header.ident[:3] == bytes([2, 1, 1])


def test_bad_magic_is_not_valid():
    header = parse_elf_header(_header_bytes(magic=b"\x7fELG"))
    assert not header.is_valid()


def test_trailing_bytes_are_ignored():
    data = _header_bytes() + b"\xff" * 32
    assert parse_elf_header(data) == parse_elf_header(_header_bytes())


def test_short_header_raises():
    with pytest.raises(ElfFormatError):
        parse_elf_header(_header_bytes()[:-1])


def test_program_header_fields():
    ph = parse_program_header(_prog_bytes())
    assert ph.is_loadable()
    assert ph.filesz == 0x200
    assert ph.memsz == 0x300
    assert ph.flags & ELF_PROG_FLAG_EXEC
    assert ph.memsz >= ph.filesz


def test_program_header_not_loadable():
    ph = parse_program_header(_prog_bytes(ptype=ELF_PROG_LOAD + 1))
    assert not ph.is_loadable()


def test_short_program_header_raises():
    with pytest.raises(ElfFormatError):
        parse_program_header(b"\x01\x00")


def test_program_header_from_offset_in_file():
    data = _header_bytes() + _prog_bytes()
    header = parse_elf_header(data)
    ph = parse_program_header(data[header.phoff:])
    assert ph == parse_program_header(_prog_bytes())