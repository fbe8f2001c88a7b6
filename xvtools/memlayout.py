"""Physical memory layout of the virt machine and open-mode flags."""

from xvtools.riscv import MAXVA, PGSIZE

UART0 = 0x10000000
UART0_IRQ = 10

VIRTIO0 = 0x10001000
VIRTIO0_IRQ = 1

CLINT = 0x2000000
CLINT_MTIME = CLINT + 0xBFF8

PLIC = 0x0C000000
PLIC_PRIORITY = PLIC + 0x0
PLIC_PENDING = PLIC + 0x1000

KERNBASE = 0x80000000
PHYSTOP = KERNBASE + 128 * 1024 * 1024

# Trampoline page sits at the highest address in both address spaces.
TRAMPOLINE = MAXVA - PGSIZE
TRAPFRAME = TRAMPOLINE - PGSIZE

# Open modes.
O_RDONLY = 0x000
O_WRONLY = 0x001
O_RDWR = 0x002
O_CREATE = 0x200
O_TRUNC = 0x400


def clint_mtimecmp(hartid):
    """Address of the timer compare register for a hart."""
    return CLINT + 0x4000 + 8 * hartid


def plic_menable(hart):
    return PLIC + 0x2000 + hart * 0x100


def plic_senable(hart):
    return PLIC + 0x2080 + hart * 0x100


def plic_mpriority(hart):
    return PLIC + 0x200000 + hart * 0x2000


def plic_spriority(hart):
    return PLIC + 0x201000 + hart * 0x2000


def plic_mclaim(hart):
    return PLIC + 0x200004 + hart * 0x2000


def plic_sclaim(hart):
    return PLIC + 0x201004 + hart * 0x2000


def kstack(p):
    """Virtual address of process slot p's kernel stack, below a guard page."""
    return TRAMPOLINE - (p + 1) * 2 * PGSIZE