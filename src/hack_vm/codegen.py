# src/hack_vm/codegen.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from .ast import (
    Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return,
    Command, render,
)
from .diagnostics import (
    Diagnostic, TranslationError, MalformedCommand, NegativeIndex, IndexOutOfRange,
)
from .lexer import is_symbol
from .pseudo import set_a_to_stack, inc_sp, dec_sp, push_d, pop_d, load_constant
from .regs import RegisterFile, normalize_segment, base_reg, fixed_address, MAX_CONSTANT

# ---------------- Estado del emisor ----------------

@dataclass
class EmitterState:
    """Estado de una sesión de traducción.

    Los contadores sólo avanzan y garantizan etiquetas únicas en todo el
    programa; function_name da ámbito a label/goto/if-goto y static_scope
    prefija los símbolos del segmento static.
    """
    program: str
    function_name: str
    static_scope: str
    comparison_count: int = 0
    return_counter: int = 1
    regs: RegisterFile = field(default_factory=RegisterFile)

def new_state(program: str, *, regs: RegisterFile | None = None) -> EmitterState:
    return EmitterState(
        program=program,
        function_name=program,
        static_scope=program,
        regs=regs or RegisterFile(),
    )

@dataclass(frozen=True)
class EmitResult:
    lines: List[str]
    diagnostics: List[Diagnostic]

# Cómputo Hack de cada operador (x en M, y en D)
_BINARY_COMP = {
    "add": "D+M",
    "sub": "M-D",
    "and": "D&M",
    "or":  "D|M",
}
_UNARY_COMP = {
    "neg": "-M",
    "not": "!M",
}
_COMPARISON_JUMP = {
    "eq": "JEQ",
    "gt": "JGT",
    "lt": "JLT",
}

# ---------------- Helpers semánticos ----------------

def _check_index(index: int, what: str = "Índice") -> None:
    if not isinstance(index, int) or isinstance(index, bool):
        raise MalformedCommand(f"{what} no entero: {index!r}")
    if index < 0:
        raise NegativeIndex(f"{what} negativo: {index}")

def _check_symbol(name: str, what: str) -> None:
    if not isinstance(name, str) or not is_symbol(name):
        raise MalformedCommand(f"{what} inválido: {name!r}")

def _scoped(st: EmitterState, label: str) -> str:
    return f"{st.function_name}${label}"

# ---------------- Resolución de segmentos ----------------

def resolve_address(st: EmitterState, segment: str, index: int, out: List[str]) -> None:
    """Deja en A la dirección de segment[index] (para constant, el literal)."""
    _check_index(index)
    seg = normalize_segment(segment)

    if seg == "constant":
        if index > MAX_CONSTANT:
            raise IndexOutOfRange(f"Constante {index} no cabe en 15 bits")
        out.append(f"@{index}")
    elif seg == "static":
        out.append(f"@{st.static_scope}.{index}")
    elif seg in ("pointer", "temp"):
        out.append(f"@R{fixed_address(seg, index)}")
    else:
        # base indirecta: A = *BASE + index
        out.extend(load_constant(index))
        out.append(f"@{base_reg(seg, st.regs)}")
        out.append("A=M")
        out.append("A=D+A")

# ---------------- Operaciones de pila ----------------

def emit_push(st: EmitterState, segment: str, index: int, out: List[str]) -> None:
    resolve_address(st, segment, index, out)
    if normalize_segment(segment) == "constant":
        out.append("D=A")
    else:
        out.append("D=M")
    out.extend(push_d(st.regs.sp))

def emit_pop(st: EmitterState, segment: str, index: int, out: List[str]) -> None:
    if normalize_segment(segment) == "constant":
        raise MalformedCommand("No se puede hacer pop sobre constant")
    resolve_address(st, segment, index, out)
    # la dirección destino se guarda antes de tocar la pila
    out.append("D=A")
    out.append(f"@{st.regs.scratch}")
    out.append("M=D")
    out.extend(pop_d(st.regs.sp))
    out.append(f"@{st.regs.scratch}")
    out.append("A=M")
    out.append("M=D")

def emit_arithmetic(st: EmitterState, operator: str, out: List[str]) -> None:
    sp = st.regs.sp
    if operator in _UNARY_COMP:
        out.extend(dec_sp(sp))
        out.extend(set_a_to_stack(sp))
        out.append(f"M={_UNARY_COMP[operator]}")
    elif operator in _BINARY_COMP:
        out.extend(pop_d(sp))
        out.extend(dec_sp(sp))
        out.extend(set_a_to_stack(sp))
        out.append(f"M={_BINARY_COMP[operator]}")
    elif operator in _COMPARISON_JUMP:
        _emit_comparison(st, operator, out)
    else:
        raise MalformedCommand(f"Operación aritmética desconocida: {operator}")
    out.extend(inc_sp(sp))

def _emit_comparison(st: EmitterState, operator: str, out: List[str]) -> None:
    sp = st.regs.sp
    n = st.comparison_count
    st.comparison_count += 1
    true_label = f"COMPARISON_{n}_WAS_TRUE"
    false_label = f"COMPARISON_{n}_WAS_FALSE"

    out.extend(pop_d(sp))
    out.extend(dec_sp(sp))
    out.extend(set_a_to_stack(sp))
    # x op y  <=>  (x - y) op 0
    out.append("D=M-D")
    out.append(f"@{true_label}")
    out.append(f"D;{_COMPARISON_JUMP[operator]}")
    out.extend(set_a_to_stack(sp))
    out.append("M=0")
    out.append(f"@{false_label}")
    out.append("0;JMP")
    out.append(f"({true_label})")
    out.extend(set_a_to_stack(sp))
    out.append("M=-1")
    out.append(f"({false_label})")

# ---------------- Control de flujo ----------------

def emit_label(st: EmitterState, name: str, out: List[str]) -> None:
    _check_symbol(name, "Nombre de etiqueta")
    out.append(f"({_scoped(st, name)})")

def emit_goto(st: EmitterState, label: str, out: List[str]) -> None:
    _check_symbol(label, "Etiqueta de goto")
    out.append(f"@{_scoped(st, label)}")
    out.append("0;JMP")

def emit_if_goto(st: EmitterState, label: str, out: List[str]) -> None:
    _check_symbol(label, "Etiqueta de if-goto")
    out.extend(pop_d(st.regs.sp))
    out.append(f"@{_scoped(st, label)}")
    out.append("D;JNE")

# ---------------- Convención de llamada ----------------

def emit_function(st: EmitterState, name: str, n_locals: int, out: List[str]) -> None:
    _check_symbol(name, "Nombre de función")
    _check_index(n_locals, "Número de locales")
    st.function_name = name
    st.static_scope = name.split(".")[0]
    out.append(f"({name})")
    for _ in range(n_locals):
        emit_push(st, "constant", 0, out)

def emit_call(st: EmitterState, name: str, n_args: int, out: List[str]) -> None:
    _check_symbol(name, "Nombre de función")
    _check_index(n_args, "Número de argumentos")
    regs = st.regs
    ret_label = f"FUNC_RETURN_{st.return_counter}"
    st.return_counter += 1

    # push dirección de retorno
    out.append(f"@{ret_label}")
    out.append("D=A")
    out.extend(push_d(regs.sp))

    # push LCL, ARG, THIS, THAT del llamador
    for cell in regs.frame():
        out.append(f"@{cell}")
        out.append("D=M")
        out.extend(push_d(regs.sp))

    # ARG = SP - nArgs - 5
    out.append(f"@{regs.sp}")
    out.append("D=M")
    out.append(f"@{n_args}")
    out.append("D=D-A")
    out.append("@5")
    out.append("D=D-A")
    out.append(f"@{regs.arg}")
    out.append("M=D")

    # LCL = SP
    out.append(f"@{regs.sp}")
    out.append("D=M")
    out.append(f"@{regs.lcl}")
    out.append("M=D")

    out.append(f"@{name}")
    out.append("0;JMP")
    out.append(f"({ret_label})")

def _restore(regs: RegisterFile, cell: str, offset: int, out: List[str]) -> None:
    # cell = *(END_FRAME - offset)
    out.append(f"@{offset}")
    out.append("D=A")
    out.append(f"@{regs.end_frame}")
    out.append("A=M-D")
    out.append("D=M")
    out.append(f"@{cell}")
    out.append("M=D")

def emit_return(st: EmitterState, out: List[str]) -> None:
    regs = st.regs

    # END_FRAME = LCL
    out.append(f"@{regs.lcl}")
    out.append("D=M")
    out.append(f"@{regs.end_frame}")
    out.append("M=D")

    # RET_ADDR = *(END_FRAME - 5), antes de que *ARG lo pise con 0 argumentos
    out.append("@5")
    out.append("A=D-A")
    out.append("D=M")
    out.append(f"@{regs.ret_addr}")
    out.append("M=D")

    # *ARG = pop()
    out.append(f"@{regs.sp}")
    out.append("A=M-1")
    out.append("D=M")
    out.append(f"@{regs.arg}")
    out.append("A=M")
    out.append("M=D")

    # SP = ARG + 1
    out.append(f"@{regs.arg}")
    out.append("D=M+1")
    out.append(f"@{regs.sp}")
    out.append("M=D")

    # LCL se restaura al final
    _restore(regs, regs.that, 1, out)
    _restore(regs, regs.this, 2, out)
    _restore(regs, regs.arg, 3, out)
    _restore(regs, regs.lcl, 4, out)

    out.append(f"@{regs.ret_addr}")
    out.append("A=M")
    out.append("0;JMP")

# ---------------- Traductor principal ----------------

def emit(cmd: Command, st: EmitterState, out: List[str]) -> None:
    """Añade a out las instrucciones Hack de un comando."""
    if isinstance(cmd, Push):
        emit_push(st, cmd.segment, cmd.index, out)
    elif isinstance(cmd, Pop):
        emit_pop(st, cmd.segment, cmd.index, out)
    elif isinstance(cmd, Arithmetic):
        emit_arithmetic(st, cmd.operator, out)
    elif isinstance(cmd, Label):
        emit_label(st, cmd.name, out)
    elif isinstance(cmd, Goto):
        emit_goto(st, cmd.label, out)
    elif isinstance(cmd, IfGoto):
        emit_if_goto(st, cmd.label, out)
    elif isinstance(cmd, Function):
        emit_function(st, cmd.name, cmd.n_locals, out)
    elif isinstance(cmd, Call):
        emit_call(st, cmd.name, cmd.n_args, out)
    elif isinstance(cmd, Return):
        emit_return(st, out)
    else:
        raise MalformedCommand(f"Comando desconocido: {cmd!r}")

def translate(
    commands: List[Command],
    *,
    program: str = "Main",
    state: Optional[EmitterState] = None,
    out: Optional[List[str]] = None,
) -> EmitResult:
    """Traduce la secuencia completa o nada.

    Con el primer error se detiene: lines queda vacío y el diagnóstico nombra
    el comando, su módulo (o el programa si no tiene) y su línea.
    """
    st = state if state is not None else new_state(program)
    lines: List[str] = list(out) if out is not None else []
    for cmd in commands:
        try:
            emit(cmd, st, lines)
        except TranslationError as ex:
            diag = ex.to_diagnostic(
                line=getattr(cmd, "line", 0) or None,
                file=getattr(cmd, "module", None) or st.program,
                command=render(cmd),
            )
            return EmitResult(lines=[], diagnostics=[diag])
    return EmitResult(lines=lines, diagnostics=[])
