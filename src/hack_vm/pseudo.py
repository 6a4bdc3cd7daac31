'''
secuencias de pila (*SP, SP++, SP--, push/pop de D) expandidas a instrucciones Hack
'''

from __future__ import annotations
from typing import List

def set_a_to_stack(sp: str = "SP") -> List[str]:
    # A = *SP
    return [f"@{sp}", "A=M"]

def inc_sp(sp: str = "SP") -> List[str]:
    return [f"@{sp}", "M=M+1"]

def dec_sp(sp: str = "SP") -> List[str]:
    return [f"@{sp}", "M=M-1"]

def push_d(sp: str = "SP") -> List[str]:
    """*SP = D; SP++"""
    return set_a_to_stack(sp) + ["M=D"] + inc_sp(sp)

def pop_d(sp: str = "SP") -> List[str]:
    """SP--; D = *SP"""
    return dec_sp(sp) + set_a_to_stack(sp) + ["D=M"]

def load_constant(value: int) -> List[str]:
    # D = value
    return [f"@{value}", "D=A"]
