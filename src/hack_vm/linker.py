# src/hack_vm/linker.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from .ast import Module, Function, Command, render
from .codegen import EmitterState, new_state, emit_call, translate
from .diagnostics import Diagnostic, MalformedCommand, error, warning, has_errors

ENTRY_FUNCTION = "Sys.init"
HALT_LABEL = "END"
STACK_BASE = 256

# ---------- Resultado del enlazado ----------

@dataclass(frozen=True)
class LinkResult:
    lines: List[str]
    order: List[str]        # nombres de módulo en orden de traducción
    bootstrap: bool
    diagnostics: List[Diagnostic]

# ---------- Helpers ----------

def declares(module: Module, name: str) -> bool:
    """Indica si el módulo declara la función 'name'."""
    return any(isinstance(c, Function) and c.name == name for c in module.commands)

def order_modules(modules: List[Module], *, entry: str = ENTRY_FUNCTION) -> List[Module]:
    """El módulo que declara la función de entrada va primero; el resto conserva su orden."""
    first = [m for m in modules if declares(m, entry)]
    rest = [m for m in modules if not declares(m, entry)]
    return first + rest

def bootstrap(st: EmitterState, *, stack_base: int = STACK_BASE,
              entry: str = ENTRY_FUNCTION) -> List[str]:
    """SP = stack_base y 'call entry 0' antes de cualquier módulo."""
    out = [f"@{stack_base}", "D=A", f"@{st.regs.sp}", "M=D"]
    st.function_name = entry
    st.static_scope = entry.split(".")[0]
    emit_call(st, entry, 0, out)
    return out

def halt_loop(label: str = HALT_LABEL) -> List[str]:
    """Bucle infinito final para no ejecutar memoria indefinida."""
    return [f"({label})", f"@{label}", "0;JMP"]

def check_halt_label(modules: List[Module], label: str = HALT_LABEL) -> List[Diagnostic]:
    """Una función con el nombre del bucle de parada definiría la etiqueta dos veces."""
    diags: List[Diagnostic] = []
    for m in modules:
        for c in m.commands:
            if isinstance(c, Function) and c.name == label:
                ex = MalformedCommand(f"El nombre '{label}' está reservado para el bucle de parada",
                                      hint="renombre la función")
                diags.append(ex.to_diagnostic(line=c.line or None, file=m.path or m.name,
                                              command=render(c)))
    return diags

# ---------- Enlazado del programa ----------

def link(
    modules: List[Module],
    *,
    program: Optional[str] = None,
    stack_base: int = STACK_BASE,
    entry: str = ENTRY_FUNCTION,
    bootstrap_mode: Optional[bool] = None,   # None: sólo si algún módulo declara entry
    halt_label: str = HALT_LABEL,
) -> LinkResult:
    """Ordena los módulos y los traduce en una sola sesión del emisor.

    Los contadores de comparaciones y de retornos son globales al programa,
    así que las etiquetas sintetizadas no chocan entre módulos. El bucle de
    parada se emite una sola vez, al final.
    """
    diags: List[Diagnostic] = []

    if not modules:
        diags.append(error("No hay módulos que traducir"))
        return LinkResult(lines=[], order=[], bootstrap=False, diagnostics=diags)

    seen = set()
    for m in modules:
        if m.name in seen:
            diags.append(error(f"Módulo duplicado: {m.name}", file=m.path,
                               hint="los símbolos static de ambos colisionarían"))
        seen.add(m.name)
    diags.extend(check_halt_label(modules, halt_label))
    if has_errors(diags):
        return LinkResult(lines=[], order=[], bootstrap=False, diagnostics=diags)

    ordered = order_modules(modules, entry=entry)
    has_entry = declares(ordered[0], entry)
    use_bootstrap = has_entry if bootstrap_mode is None else bootstrap_mode

    if len(modules) > 1 and not has_entry:
        diags.append(warning(f"Ningún módulo declara {entry}",
                             hint="el programa empezará por el primer módulo"))
    if use_bootstrap and not has_entry:
        diags.append(warning(f"Arranque forzado pero ningún módulo declara {entry}",
                             hint=f"'call {entry} 0' saltará a una etiqueta sin definir"))

    name = program if program is not None else ordered[0].name
    st = new_state(name)

    prologue = bootstrap(st, stack_base=stack_base, entry=entry) if use_bootstrap else []

    commands: List[Command] = []
    for m in ordered:
        commands.extend(m.commands)

    res = translate(commands, state=st, out=prologue)
    diags.extend(res.diagnostics)
    if has_errors(diags):
        return LinkResult(lines=[], order=[m.name for m in ordered],
                          bootstrap=use_bootstrap, diagnostics=diags)

    lines = res.lines + halt_loop(halt_label)
    return LinkResult(
        lines=lines,
        order=[m.name for m in ordered],
        bootstrap=use_bootstrap,
        diagnostics=diags,
    )
