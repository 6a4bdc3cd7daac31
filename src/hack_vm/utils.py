'''
 aritmética de palabras de 16 bits (u16, complemento a dos, rangos)
'''

from __future__ import annotations

# Máscara para 16 bits sin signo
U16_MASK = 0xFFFF

def u16(x: int) -> int:
    """Fuerza el valor al rango de 16 bits sin signo."""
    return x & U16_MASK

def to_signed16(x: int) -> int:
    """Interpreta una palabra de 16 bits como entero con signo (complemento a dos)."""
    x &= U16_MASK
    return x - 0x10000 if x & 0x8000 else x

def is_unsigned_nbit(x: int, n: int) -> bool:
    """Devuelve True si x está en [0, 2^n) (sin signo de n bits)."""
    if n <= 0:
        raise ValueError("n debe ser positivo")
    return 0 <= x < (1 << n)
