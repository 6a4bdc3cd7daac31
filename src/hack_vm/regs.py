'''
banco de registros (SP, LCL, ARG, THIS, THAT, temporales) y tablas de segmentos
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple

from .diagnostics import UnknownSegment, IndexOutOfRange

SEGMENTS: Tuple[str, ...] = (
    "constant", "static", "pointer", "temp",
    "local", "argument", "this", "that",
)

# Segmentos cuya base vive en una celda de la máquina
INDIRECT_SEGMENTS = ("local", "argument", "this", "that")

POINTER_BASE = 3
POINTER_SIZE = 2
TEMP_BASE = 5
TEMP_SIZE = 8
STATIC_BASE = 16

# Mayor constante cargable con una instrucción A (15 bits)
MAX_CONSTANT = 0x7FFF

@dataclass(frozen=True)
class RegisterFile:
    """Nombres simbólicos de las celdas que usa la convención de llamada.

    - sp/lcl/arg/this/that: puntero de pila y bases de marco
    - scratch: destino cacheado por pop
    - end_frame/ret_addr: celdas auxiliares de return
    """
    sp: str = "SP"
    lcl: str = "LCL"
    arg: str = "ARG"
    this: str = "THIS"
    that: str = "THAT"
    scratch: str = "R13"
    end_frame: str = "END_FRAME"
    ret_addr: str = "RET_ADDR"

    def frame(self) -> Tuple[str, str, str, str]:
        """Celdas del marco del llamador, en orden de guardado."""
        return (self.lcl, self.arg, self.this, self.that)

def _segment_to_reg(regs: RegisterFile) -> Dict[str, str]:
    return {
        "local": regs.lcl,
        "argument": regs.arg,
        "this": regs.this,
        "that": regs.that,
    }

def is_segment(token: str) -> bool:
    """Indica si el token nombra uno de los ocho segmentos."""
    try:
        normalize_segment(token)
        return True
    except ValueError:
        return False

def normalize_segment(token: str) -> str:
    """Devuelve el nombre canónico del segmento o lanza UnknownSegment."""
    t = token.strip()
    if t in SEGMENTS:
        return t
    raise UnknownSegment(f"Segmento desconocido: {token}")

def base_reg(segment: str, regs: RegisterFile | None = None) -> str:
    """Celda que guarda la base de un segmento indirecto (local -> LCL, ...)."""
    regs = regs or RegisterFile()
    seg = normalize_segment(segment)
    table = _segment_to_reg(regs)
    if seg not in table:
        raise UnknownSegment(f"El segmento {seg} no tiene celda base")
    return table[seg]

def fixed_address(segment: str, index: int) -> int:
    """Dirección absoluta de pointer/temp; valida el tamaño del segmento."""
    seg = normalize_segment(segment)
    if seg == "pointer":
        base, size = POINTER_BASE, POINTER_SIZE
    elif seg == "temp":
        base, size = TEMP_BASE, TEMP_SIZE
    else:
        raise UnknownSegment(f"El segmento {seg} no tiene base fija")
    if not 0 <= index < size:
        raise IndexOutOfRange(f"Índice {index} fuera de rango para {seg} (0..{size - 1})")
    return base + index
