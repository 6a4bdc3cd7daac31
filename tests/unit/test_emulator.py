import pytest
from src.hack_vm.emulator import load, run, step

def test_labels_and_variables():
    m = load(["@x", "M=1", "(LOOP)", "@y", "M=-1", "@LOOP", "0;JMP"])
    assert m.symbols["x"] == 16
    assert m.symbols["y"] == 17
    assert m.symbols["LOOP"] == 2
    assert len(m.rom) == 6

def test_run_stops_at_label_and_max_steps():
    m = run(load(["@5", "D=A", "@R1", "M=D", "(END)", "@END", "0;JMP"]), stop_label="END")
    assert m.ram[1] == 5
    assert m.pc == m.symbols["END"]
    m = run(load(["(L)", "@L", "0;JMP"]), max_steps=10)
    assert m.steps == 10

def test_conditional_jump():
    m = load(["@3", "D=A", "@SKIP", "D;JGT", "@R0", "M=1", "(SKIP)"])
    run(m)
    assert m.ram[0] == 0

def test_step_writes_a_d_m():
    m = load(["@100", "AMD=A+1"])
    step(m); step(m)
    assert m.a == 101 and m.d == 101 and m.ram[100] == 101

def test_invalid_programs():
    with pytest.raises(KeyError):
        load(["M=M+D"])
    with pytest.raises(ValueError):
        load(["@40000"])
    with pytest.raises(ValueError):
        load(["(A)", "(A)"])
