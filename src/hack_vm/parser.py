# src/hack_vm/parser.py
from __future__ import annotations
import re
from typing import List, Tuple, Optional

from .lexer import strip_comment, split_operation, is_symbol
from .ast import (
    Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return,
    Command, ARITHMETIC_OPS,
)
from .regs import normalize_segment
from .diagnostics import (
    Diagnostic, TranslationError, MalformedCommand, NegativeIndex,
)

DEC_INT_RE = re.compile(r"^[+-]?\d+$")

# Número de palabras (operación incluida) de cada comando
ARITY = {
    **{op: 1 for op in ARITHMETIC_OPS},
    "return": 1,
    "label": 2,
    "goto": 2,
    "if-goto": 2,
    "push": 3,
    "pop": 3,
    "function": 3,
    "call": 3,
}

def _parse_count(token: str, what: str) -> int:
    t = token.strip()
    if not DEC_INT_RE.match(t):
        raise MalformedCommand(f"{what} inválido: '{token}' (se esperaba un entero)")
    value = int(t, 10)
    if value < 0:
        raise NegativeIndex(f"{what} negativo: {value}")
    return value

def _parse_symbol(token: str, what: str) -> str:
    if not is_symbol(token):
        raise MalformedCommand(f"{what} inválido: '{token}'")
    return token

def _parse_command(op: str, args: List[str], *, line: int, module: Optional[str]) -> Command:
    if op not in ARITY:
        raise MalformedCommand(f"Operación desconocida: '{op}'")
    expected = ARITY[op] - 1
    if len(args) != expected:
        raise MalformedCommand(
            f"'{op}' espera {expected} argumento(s), recibió {len(args)}"
        )

    if op in ARITHMETIC_OPS:
        return Arithmetic(operator=op, line=line, module=module)
    if op == "return":
        return Return(line=line, module=module)
    if op in ("push", "pop"):
        segment = normalize_segment(args[0])
        index = _parse_count(args[1], "Índice")
        if op == "pop":
            if segment == "constant":
                raise MalformedCommand("No se puede hacer pop sobre constant")
            return Pop(segment=segment, index=index, line=line, module=module)
        return Push(segment=segment, index=index, line=line, module=module)
    if op == "label":
        return Label(name=_parse_symbol(args[0], "Nombre de etiqueta"), line=line, module=module)
    if op == "goto":
        return Goto(label=_parse_symbol(args[0], "Etiqueta"), line=line, module=module)
    if op == "if-goto":
        return IfGoto(label=_parse_symbol(args[0], "Etiqueta"), line=line, module=module)
    if op == "function":
        name = _parse_symbol(args[0], "Nombre de función")
        return Function(name=name, n_locals=_parse_count(args[1], "Número de locales"),
                        line=line, module=module)
    # call
    name = _parse_symbol(args[0], "Nombre de función")
    return Call(name=name, n_args=_parse_count(args[1], "Número de argumentos"),
                line=line, module=module)

def parse(text: str, *, module: Optional[str] = None,
          filename: Optional[str] = None) -> Tuple[List[Command], List[Diagnostic]]:
    """
    Devuelve (commands, diagnostics).

    Reglas:
      - Comentarios: '//' hasta fin de línea; líneas vacías se ignoran.
      - Una orden por línea: operación seguida de 0, 1 o 2 argumentos
        separados por espacios.
      - Cada línea inválida produce un diagnóstico de error; el resto de
        líneas se sigue analizando para reportar todos los problemas.
    """
    commands: List[Command] = []
    diags: List[Diagnostic] = []
    where = filename if filename is not None else module

    for lineno, raw in enumerate(text.splitlines(), start=1):
        core = strip_comment(raw)
        if not core:
            continue
        op, args = split_operation(core)
        try:
            commands.append(_parse_command(op, args, line=lineno, module=module))
        except TranslationError as ex:
            diags.append(ex.to_diagnostic(line=lineno, file=where, command=core))

    return commands, diags
