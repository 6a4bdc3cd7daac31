from __future__ import annotations
import argparse, os, sys
from typing import List, Tuple

from .ast import Module
from .parser import parse
from .linker import link, LinkResult
from .diagnostics import Diagnostic, error, has_errors
from .writers import write_asm

VM_EXT = ".vm"
ASM_EXT = ".asm"

_BOOTSTRAP_MODES = {"auto": None, "always": True, "never": False}

def module_name(path: str) -> str:
    """Nombre del módulo: el nombre del archivo sin extensión."""
    return os.path.splitext(os.path.basename(path))[0]

def parse_module(text: str, *, name: str, path: str | None = None) -> Tuple[Module, List[Diagnostic]]:
    commands, diags = parse(text, module=name, filename=path)
    return Module(name=name, commands=commands, path=path), diags

def translate_text(text: str, *, name: str = "Main", **link_opts) -> Tuple[List[Diagnostic], LinkResult]:
    """Parsea y enlaza un único módulo. Devuelve (diagnostics_totales, link_result)."""
    module, diags = parse_module(text, name=name)
    if has_errors(diags):
        return diags, LinkResult(lines=[], order=[], bootstrap=False, diagnostics=[])
    res = link([module], program=name, **link_opts)
    return list(diags) + list(res.diagnostics), res

def load_modules(path: str) -> Tuple[str, List[Module], List[Diagnostic], str]:
    """Lee un .vm o un directorio de .vm.

    Devuelve (program, modules, diagnostics, out_path). Lanza OSError si la
    entrada no se puede leer; un archivo que no es UTF-8 es un diagnóstico.
    """
    path = path.rstrip("/\\") or path
    if os.path.isdir(path):
        program = os.path.basename(os.path.abspath(path))
        out_path = os.path.join(path, program + ASM_EXT)
        files = sorted(f for f in os.listdir(path) if f.endswith(VM_EXT))
        if not files:
            return program, [], [error("El directorio no contiene archivos .vm", file=path)], out_path
        # un único módulo con el nombre del directorio: se usa tal cual
        if len(files) == 1 and module_name(files[0]) == program:
            files = [program + VM_EXT]
        paths = [os.path.join(path, f) for f in files]
    elif os.path.isfile(path):
        program = module_name(path)
        out_path = os.path.join(os.path.dirname(path), program + ASM_EXT)
        paths = [path]
    else:
        raise FileNotFoundError(f"No existe {path}")

    modules: List[Module] = []
    diags: List[Diagnostic] = []
    for p in paths:
        try:
            with open(p, "r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as ex:
            diags.append(error(f"El archivo no está en UTF-8: {ex.reason} en el byte {ex.start}",
                               file=p, hint="guarde el archivo .vm como texto UTF-8"))
            continue
        module, mdiags = parse_module(text, name=module_name(p), path=p)
        modules.append(module)
        diags.extend(mdiags)
    return program, modules, diags, out_path

def translate_path(path: str, **link_opts) -> Tuple[List[Diagnostic], LinkResult, str]:
    """Devuelve (diagnostics_totales, link_result, out_path)."""
    program, modules, diags, out_path = load_modules(path)
    if has_errors(diags):
        return diags, LinkResult(lines=[], order=[], bootstrap=False, diagnostics=[]), out_path
    res = link(modules, program=program, **link_opts)
    return list(diags) + list(res.diagnostics), res, out_path

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Traductor VM -> ensamblador Hack")
    ap.add_argument("source", help="archivo .vm o directorio con archivos .vm")
    ap.add_argument("-o", "--output", help="archivo .asm de salida (por defecto junto a la entrada)")
    ap.add_argument("--bootstrap", choices=sorted(_BOOTSTRAP_MODES), default="auto",
                    help="emitir el arranque SP=256; call Sys.init 0 (auto: si existe Sys.init)")
    args = ap.parse_args(argv)

    try:
        diags, res, out_path = translate_path(args.source,
                                              bootstrap_mode=_BOOTSTRAP_MODES[args.bootstrap])
    except OSError as ex:
        print(f"ERROR: no pude leer {args.source}: {ex}", file=sys.stderr)
        return 2

    for d in diags:
        # imprimimos todo; si hay error, devolvemos código 1 sin escribir nada
        print(d, file=sys.stderr)
    if has_errors(diags):
        return 1

    out_path = args.output or out_path
    try:
        write_asm(res.lines, out_path)
    except OSError as ex:
        print(f"ERROR al escribir salidas: {ex}", file=sys.stderr)
        return 3

    print(f"OK: {len(res.lines)} instrucciones → {out_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
