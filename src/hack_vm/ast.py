'''
dataclases de comandos VM (Arithmetic, Push, Pop, ..., Return) y Module
'''

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Union, Optional

# Operadores aritmético-lógicos
UNARY_OPS = ("neg", "not")
BINARY_OPS = ("add", "sub", "and", "or")
COMPARISON_OPS = ("eq", "gt", "lt")
ARITHMETIC_OPS = BINARY_OPS + UNARY_OPS + COMPARISON_OPS

# ---- Comandos (un tipo por clase de comando) ----

@dataclass(frozen=True)
class Arithmetic:
    """Operación aritmética/lógica sobre la pila (add, sub, neg, eq, ...)."""
    operator: str
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Push:
    """push <segmento> <índice>"""
    segment: str
    index: int
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Pop:
    """pop <segmento> <índice>"""
    segment: str
    index: int
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Label:
    name: str
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Goto:
    label: str
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class IfGoto:
    label: str
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Function:
    """Declaración de función con su número de variables locales."""
    name: str
    n_locals: int
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Call:
    """Llamada a función con su número de argumentos ya apilados."""
    name: str
    n_args: int
    line: int = 0
    module: Optional[str] = None

@dataclass(frozen=True)
class Return:
    line: int = 0
    module: Optional[str] = None

Command = Union[Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return]

# ---- Unidad de traducción ----

@dataclass(frozen=True)
class Module:
    """Comandos de un archivo .vm; el nombre prefija los símbolos de static."""
    name: str
    commands: List[Command] = field(default_factory=list)
    path: Optional[str] = None

def render(cmd: Command) -> str:
    """Texto VM del comando, para los mensajes de diagnóstico."""
    if isinstance(cmd, Arithmetic):
        return cmd.operator
    if isinstance(cmd, Push):
        return f"push {cmd.segment} {cmd.index}"
    if isinstance(cmd, Pop):
        return f"pop {cmd.segment} {cmd.index}"
    if isinstance(cmd, Label):
        return f"label {cmd.name}"
    if isinstance(cmd, Goto):
        return f"goto {cmd.label}"
    if isinstance(cmd, IfGoto):
        return f"if-goto {cmd.label}"
    if isinstance(cmd, Function):
        return f"function {cmd.name} {cmd.n_locals}"
    if isinstance(cmd, Call):
        return f"call {cmd.name} {cmd.n_args}"
    if isinstance(cmd, Return):
        return "return"
    return repr(cmd)
