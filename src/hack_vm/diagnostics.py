'''
clase Diagnostic, helpers y jerarquía de errores de traducción
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Literal

# Severidad de los diagnósticos (en español)
Severity = Literal["error", "advertencia"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "advertencia": "ADVERTENCIA",
}

@dataclass(frozen=True)
class Diagnostic:
    """Estructura de un diagnóstico para reportar problemas.

    Abarca errores y advertencias, con ubicación opcional (módulo/archivo y línea)
    y un mensaje de ayuda (pista) para orientar la corrección.
    """
    severity: Severity
    message: str
    line: Optional[int] = None
    hint: Optional[str] = None
    file: Optional[str] = None

    def __str__(self) -> str:
        parts = [str(p) for p in (self.file, self.line) if p is not None]
        loc = ":".join(parts)
        if loc:
            loc += ": "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.hint:
            core += f"  (pista: {self.hint})"
        return loc + core

def error(message: str, *, line: int | None = None,
          file: str | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic("error", message, line, hint, file)

def warning(message: str, *, line: int | None = None,
            file: str | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo advertencia."""
    return Diagnostic("advertencia", message, line, hint, file)

def has_errors(diags) -> bool:
    return any(d.severity == "error" for d in diags)

# ---- Errores fatales ----
#
# Los emisores lanzan estas excepciones; parse() y translate() las convierten
# en Diagnostic en la frontera de cada pasada.

class TranslationError(ValueError):
    """Error fatal: la traducción se aborta sin producir salida."""
    hint: Optional[str] = None

    def __init__(self, message: str, *, hint: str | None = None):
        super().__init__(message)
        if hint is not None:
            self.hint = hint

    def to_diagnostic(self, *, line: int | None = None, file: str | None = None,
                      command: str | None = None) -> Diagnostic:
        msg = str(self)
        if command:
            msg += f" en '{command}'"
        return error(msg, line=line, file=file, hint=self.hint)

class MalformedCommand(TranslationError):
    """Operación desconocida, aridad incorrecta o argumento mal formado."""

class UnknownSegment(TranslationError):
    """Nombre de segmento fuera de los ocho conocidos."""
    hint = "constant, static, pointer, temp, local, argument, this, that"

class NegativeIndex(TranslationError):
    """Índice o contador negativo."""

class IndexOutOfRange(TranslationError):
    """Índice fuera del tamaño de un segmento de base fija."""
