import pytest

from xvtools.riscv import (
    MAXVA,
    PGSHIFT,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    PXMASK,
    SATP_SV39,
    make_satp,
    pa_to_pte,
    pg_round_down,
    pg_round_up,
    pte_flags,
    pte_to_pa,
    px,
    px_shift,
)


def test_page_size_matches_rounding():
    assert pg_round_up(1) == 4096
    assert pg_round_down(PGSIZE - 1) == 0
    assert pg_round_up(PGSIZE) == 1 << PGSHIFT


@pytest.mark.parametrize("value", [0, 1, PGSIZE - 1, PGSIZE, PGSIZE + 1, 7 * PGSIZE + 3])
def test_round_up_is_aligned_and_minimal(value):
    up = pg_round_up(value)
    assert up % PGSIZE == 0
    assert up >= value
    assert up - value < PGSIZE


@pytest.mark.parametrize("value", [0, 1, PGSIZE - 1, PGSIZE, PGSIZE + 1, 9 * PGSIZE + 5])
def test_round_down_is_aligned_and_maximal(value):
    down = pg_round_down(value)
    assert down % PGSIZE == 0
    assert down <= value
    assert value - down < PGSIZE


def test_round_examples():
    assert pg_round_up(1) == PGSIZE
    assert pg_round_up(0) == 0
    assert pg_round_down(PGSIZE + 1) == PGSIZE


@pytest.mark.parametrize("pa", [0x80000000, 0x80001000, 0x87FFF000])
def test_pte_round_trip(pa):
    pte = pa_to_pte(pa) | PTE_R | PTE_W | PTE_V
    assert pte_to_pa(pte) == pa
    assert pte_flags(pte) == PTE_R | PTE_W | PTE_V


def test_pte_flags_ignore_address_bits():
    pte = pa_to_pte(0x80005000)
    assert pte_flags(pte) == 0
    assert pte_flags(pte | PTE_X | PTE_U) == PTE_X | PTE_U


def test_px_extracts_each_level():
    va = (3 << px_shift(2)) | (5 << px_shift(1)) | (7 << px_shift(0)) | 0x123
    assert px(2, va) == 3
    assert px(1, va) == 5
    assert px(0, va) == 7


def test_px_shift_level_zero_is_page_shift():
    assert px_shift(0) == PGSHIFT
    assert px_shift(1) - px_shift(0) == px_shift(2) - px_shift(1)


def test_px_is_masked():
    top = MAXVA - PGSIZE
    for level in range(3):
        assert 0 <= px(level, top) <= PXMASK
    assert px(2, top) < PXMASK


def test_make_satp_round_trip():
    root = 0x80042000
    satp = make_satp(root)
    assert satp & SATP_SV39 == SATP_SV39
    assert (satp & ~SATP_SV39) << PGSHIFT == root