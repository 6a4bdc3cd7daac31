import re
from src.hack_vm.parser import parse
from src.hack_vm.ast import Module, Function, Push
from src.hack_vm.linker import link, order_modules, halt_loop
from src.hack_vm.isa import PREDEFINED
from src.hack_vm.emulator import load, run
from src.hack_vm.diagnostics import has_errors

SYS_SRC = """
function Sys.init 0
    push constant 5
    call Main.double 1
    pop static 0
label LOOP
    goto LOOP
"""

MAIN_SRC = """
function Main.double 0
    push argument 0
    push argument 0
    add
    return
"""

def _module(name, src):
    cmds, diags = parse(src, module=name)
    assert not diags
    return Module(name=name, commands=cmds)

def test_entry_module_goes_first():
    a = _module("A", "function A.f 0\npush constant 1\nreturn\n")
    b = _module("B", "function B.g 0\npush constant 2\nreturn\n")
    sys_ = _module("Sys", "function Sys.init 0\ncall A.f 0\n")
    assert [m.name for m in order_modules([a, b, sys_])] == ["Sys", "A", "B"]
    r = link([a, sys_])
    assert r.order == ["Sys", "A"]
    assert r.lines.index("(Sys.init)") < r.lines.index("(A.f)")

def test_bootstrap_only_with_entry_function():
    r = link([_module("Sys", SYS_SRC), _module("Main", MAIN_SRC)])
    assert r.bootstrap
    assert r.lines[:4] == ["@256", "D=A", "@SP", "M=D"]
    assert r.lines[4] == "@FUNC_RETURN_1"
    assert "@Sys.init" in r.lines

    r = link([_module("Main", MAIN_SRC)])
    assert not r.bootstrap
    assert r.lines[0] == "(Main.double)"
    assert "@Sys.init" not in r.lines

def test_bootstrap_can_be_forced():
    r = link([_module("Main", MAIN_SRC)], bootstrap_mode=True, stack_base=300)
    assert r.lines[:4] == ["@300", "D=A", "@SP", "M=D"]
    r = link([_module("Sys", SYS_SRC)], bootstrap_mode=False)
    assert r.lines[0] == "(Sys.init)"

def test_halt_loop_once_at_the_end():
    r = link([_module("Sys", SYS_SRC), _module("Main", MAIN_SRC)])
    assert r.lines[-3:] == halt_loop() == ["(END)", "@END", "0;JMP"]
    assert r.lines.count("(END)") == 1

def test_every_label_defined_once():
    r = link([_module("Sys", SYS_SRC), _module("Main", MAIN_SRC)])
    defined = [ln[1:-1] for ln in r.lines if ln.startswith("(")]
    assert len(defined) == len(set(defined))
    refs = {ln[1:] for ln in r.lines if ln.startswith("@")}
    labels = {s for s in refs
              if not s.isdigit() and s not in PREDEFINED
              and s not in ("END_FRAME", "RET_ADDR")
              and not re.match(r"^\w+\.\d+$", s)}
    assert labels <= set(defined)

def test_program_runs_through_modules():
    r = link([_module("Main", MAIN_SRC), _module("Sys", SYS_SRC)])
    m = run(load(r.lines), stop_label="Sys.init$LOOP")
    assert m.pc == m.symbols["Sys.init$LOOP"]
    assert m.read("Sys.0") == 10
    assert m.ram[0] == 261  # marco de Sys.init: 5 celdas guardadas por el arranque

def test_counters_are_global_across_modules():
    a = _module("A", "function A.f 0\npush constant 1\npush constant 1\neq\nreturn\n")
    b = _module("B", "function B.f 0\npush constant 1\npush constant 1\neq\ncall A.f 0\nreturn\n")
    r = link([a, b])
    assert "(COMPARISON_0_WAS_TRUE)" in r.lines
    assert "(COMPARISON_1_WAS_TRUE)" in r.lines
    assert "(FUNC_RETURN_1)" in r.lines
    assert any("Ningún módulo declara Sys.init" in d.message for d in r.diagnostics)

def test_statics_use_owning_module():
    a = _module("A", "function A.f 0\npush constant 1\npop static 0\nreturn\n")
    b = _module("B", "function B.f 0\npush constant 2\npop static 0\nreturn\n")
    r = link([a, b])
    assert "@A.0" in r.lines and "@B.0" in r.lines

def test_link_errors():
    r = link([])
    assert r.lines == [] and r.diagnostics
    a = _module("A", "function A.f 0\nreturn\n")
    r = link([a, a])
    assert r.lines == []
    assert any("duplicado" in d.message for d in r.diagnostics)

def test_codegen_error_aborts_whole_program():
    bad = Module(name="Bad", commands=[Function("Bad.f", 0), Push("local", -1, line=2, module="Bad")])
    r = link([_module("Sys", SYS_SRC), bad])
    assert r.lines == []
    assert r.diagnostics[-1].file == "Bad" and r.diagnostics[-1].line == 2

def test_function_named_like_halt_label_is_rejected():
    clash = _module("Main", "function Main.f 0\nreturn\nfunction END 0\nreturn\n")
    r = link([clash])
    assert r.lines == []
    assert len(r.diagnostics) == 1
    d = r.diagnostics[0]
    assert d.file == "Main" and d.line == 3
    assert "reservado" in d.message and "'function END 0'" in d.message
    # con otra etiqueta de parada el mismo módulo enlaza y cada etiqueta aparece una vez
    r = link([clash], halt_label="HALT_LOOP")
    assert not r.diagnostics
    defined = [ln for ln in r.lines if ln.startswith("(")]
    assert len(defined) == len(set(defined))
    assert r.lines[-3:] == ["(HALT_LOOP)", "@HALT_LOOP", "0;JMP"]

def test_forced_bootstrap_without_entry_warns():
    r = link([_module("Main", MAIN_SRC)], bootstrap_mode=True)
    assert r.bootstrap and r.lines
    assert not has_errors(r.diagnostics)
    assert any("Arranque forzado" in d.message for d in r.diagnostics)
    r = link([_module("Sys", SYS_SRC)], bootstrap_mode=True)
    assert r.diagnostics == []
