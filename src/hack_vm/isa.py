'''
tabla formal Hack (dest, comp, jump, símbolos predefinidos) y ALU
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .utils import u16, to_signed16

@dataclass(frozen=True)
class CompSpec:
    """Especificación de un cómputo de la ALU.

    - a: 0 opera con A, 1 opera con M
    - cbits: zx nx zy ny f no (6 bits, zx el más significativo)
    """
    a: int
    cbits: int

# dest: bits d1 d2 d3 (A, D, M)
DEST: Dict[str, int] = {
    "": 0b000, "M": 0b001, "D": 0b010, "MD": 0b011, "DM": 0b011,
    "A": 0b100, "AM": 0b101, "MA": 0b101, "AD": 0b110, "DA": 0b110, "AMD": 0b111,
}

JUMP: Dict[str, int] = {
    "": 0b000, "JGT": 0b001, "JEQ": 0b010, "JGE": 0b011,
    "JLT": 0b100, "JNE": 0b101, "JLE": 0b110, "JMP": 0b111,
}

COMP: Dict[str, CompSpec] = {}

def _add(name: str, a: int, cbits: int):
    COMP[name] = CompSpec(a, cbits)

# a = 0
_add("0",   0, 0b101010)
_add("1",   0, 0b111111)
_add("-1",  0, 0b111010)
_add("D",   0, 0b001100)
_add("A",   0, 0b110000)
_add("!D",  0, 0b001101)
_add("!A",  0, 0b110001)
_add("-D",  0, 0b001111)
_add("-A",  0, 0b110011)
_add("D+1", 0, 0b011111)
_add("A+1", 0, 0b110111)
_add("D-1", 0, 0b001110)
_add("A-1", 0, 0b110010)
_add("D+A", 0, 0b000010)
_add("D-A", 0, 0b010011)
_add("A-D", 0, 0b000111)
_add("D&A", 0, 0b000000)
_add("D|A", 0, 0b010101)
# a = 1
_add("M",   1, 0b110000)
_add("!M",  1, 0b110001)
_add("-M",  1, 0b110011)
_add("M+1", 1, 0b110111)
_add("M-1", 1, 0b110010)
_add("D+M", 1, 0b000010)
_add("D-M", 1, 0b010011)
_add("M-D", 1, 0b000111)
_add("D&M", 1, 0b000000)
_add("D|M", 1, 0b010101)

PREDEFINED: Dict[str, int] = {
    "SP": 0, "LCL": 1, "ARG": 2, "THIS": 3, "THAT": 4,
    "SCREEN": 0x4000, "KBD": 0x6000,
    **{f"R{i}": i for i in range(16)},
}

VARIABLE_BASE = 16

def comp(mnemonic: str) -> CompSpec:
    """Devuelve la especificación de un cómputo por su mnemónico."""
    if mnemonic not in COMP:
        raise KeyError(f"Cómputo desconocido: {mnemonic}")
    return COMP[mnemonic]

def split_c(line: str) -> Tuple[str, str, str]:
    """Divide 'dest=comp;jump' en (dest, comp, jump); dest y jump pueden ser ''."""
    s = line.replace(" ", "")
    dest, rest = ("", s)
    if "=" in s:
        dest, rest = s.split("=", 1)
    jump = ""
    if ";" in rest:
        rest, jump = rest.split(";", 1)
    return dest, rest, jump

def alu(x: int, y: int, cbits: int) -> Tuple[int, bool, bool]:
    """ALU Hack: devuelve (out, zr, ng) con aritmética de 16 bits."""
    zx, nx, zy, ny, f, no = ((cbits >> s) & 1 for s in (5, 4, 3, 2, 1, 0))
    if zx: x = 0
    if nx: x = u16(~x)
    if zy: y = 0
    if ny: y = u16(~y)
    out = u16(x + y) if f else (x & y)
    if no: out = u16(~out)
    return out, out == 0, to_signed16(out) < 0

def jumps(jump: str, zr: bool, ng: bool) -> bool:
    bits = JUMP[jump]
    lt = bool(bits & 0b100) and ng
    eq = bool(bits & 0b010) and zr
    gt = bool(bits & 0b001) and not zr and not ng
    return lt or eq or gt

def label_of(line: str) -> Optional[str]:
    s = line.strip()
    if len(s) >= 3 and s[0] == "(" and s[-1] == ")":
        return s[1:-1]
    return None

def is_instruction(line: str) -> bool:
    """Indica si la línea es una instrucción A, C o una etiqueta válida."""
    s = line.strip()
    if label_of(s) is not None:
        return True
    if s.startswith("@"):
        return len(s) > 1
    dest, c, jump = split_c(s)
    return dest in DEST and c in COMP and jump in JUMP
