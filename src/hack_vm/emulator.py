'''
máquina Hack de referencia: carga el texto .asm (dos pasadas) y lo ejecuta
'''

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .isa import PREDEFINED, VARIABLE_BASE, DEST, JUMP, comp, split_c, alu, jumps, label_of
from .utils import u16, is_unsigned_nbit

RAM_SIZE = 0x8000

# Instrucciones decodificadas: ("A", valor) o ("C", dest, comp, jump)
Decoded = Union[Tuple[str, int], Tuple[str, str, str, str]]

@dataclass
class Machine:
    """Estado de la máquina: ROM decodificada, RAM, registros y tabla de símbolos."""
    rom: List[Decoded]
    symbols: Dict[str, int]
    ram: List[int] = field(default_factory=lambda: [0] * RAM_SIZE)
    a: int = 0
    d: int = 0
    pc: int = 0
    steps: int = 0

    def read(self, name: str) -> int:
        """Valor de la celda nombrada por un símbolo (SP, LCL, Foo.0, ...)."""
        return self.ram[self.symbols[name]]

def load(lines: Iterable[str]) -> Machine:
    """Pasada 1: etiquetas; pasada 2: variables desde 16 y decodificación."""
    source = [ln.strip() for ln in lines if ln.strip()]
    symbols: Dict[str, int] = dict(PREDEFINED)

    code: List[str] = []
    for ln in source:
        lbl = label_of(ln)
        if lbl is not None:
            if lbl in symbols:
                raise ValueError(f"Etiqueta redefinida: {lbl}")
            symbols[lbl] = len(code)
            continue
        code.append(ln)

    next_var = VARIABLE_BASE
    rom: List[Decoded] = []
    for ln in code:
        if ln.startswith("@"):
            tok = ln[1:]
            if tok.isdigit():
                value = int(tok)
                if not is_unsigned_nbit(value, 15):
                    raise ValueError(f"Constante fuera de rango: {ln}")
            else:
                if tok not in symbols:
                    symbols[tok] = next_var
                    next_var += 1
                value = symbols[tok]
            rom.append(("A", value))
            continue
        dest, c, jump = split_c(ln)
        if dest not in DEST or jump not in JUMP:
            raise ValueError(f"Instrucción inválida: {ln}")
        comp(c)  # valida el cómputo
        rom.append(("C", dest, c, jump))

    return Machine(rom=rom, symbols=symbols)

def step(m: Machine) -> None:
    ins = m.rom[m.pc]
    m.steps += 1
    if ins[0] == "A":
        m.a = ins[1]
        m.pc += 1
        return
    _, dest, c, jump = ins
    spec = comp(c)
    y = m.ram[m.a] if spec.a else m.a
    out, zr, ng = alu(m.d, y, spec.cbits)
    addr = m.a
    if "M" in dest:
        m.ram[addr] = out
    if "D" in dest:
        m.d = out
    if "A" in dest:
        m.a = u16(out)
    m.pc = addr if jump and jumps(jump, zr, ng) else m.pc + 1

def run(m: Machine, *, max_steps: int = 100_000, stop_label: Optional[str] = None) -> Machine:
    """Ejecuta hasta salir de la ROM, llegar a stop_label o agotar max_steps."""
    stop = m.symbols.get(stop_label) if stop_label is not None else None
    for _ in range(max_steps):
        if m.pc >= len(m.rom) or m.pc == stop:
            break
        step(m)
    return m
