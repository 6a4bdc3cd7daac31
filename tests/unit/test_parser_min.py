from src.hack_vm.parser import parse
from src.hack_vm.ast import Arithmetic, Push, Pop, Label, Goto, IfGoto, Function, Call, Return

def test_parse_simple_program():
    src = """
    // Programa mínimo
    function Main.main 1
        push constant 7
        push constant 8   // suma
        add
        pop local 0
    label LOOP
        push local 0
        if-goto LOOP
        goto LOOP
        call Main.main 0
        return
    """
    cmds, diags = parse(src, module="Main")
    assert not diags
    kinds = [type(c).__name__ for c in cmds]
    assert kinds == ["Function", "Push", "Push", "Arithmetic", "Pop",
                     "Label", "Push", "IfGoto", "Goto", "Call", "Return"]
    fn = cmds[0]; assert isinstance(fn, Function) and fn.name == "Main.main" and fn.n_locals == 1
    p = cmds[1]; assert isinstance(p, Push) and p.segment == "constant" and p.index == 7
    assert p.line == 4 and p.module == "Main"
    assert isinstance(cmds[3], Arithmetic) and cmds[3].operator == "add"
    assert isinstance(cmds[4], Pop) and cmds[4].segment == "local"
    assert isinstance(cmds[5], Label) and cmds[5].name == "LOOP"
    assert isinstance(cmds[7], IfGoto) and cmds[7].label == "LOOP"
    assert isinstance(cmds[8], Goto) and cmds[8].label == "LOOP"
    assert isinstance(cmds[9], Call) and cmds[9].n_args == 0
    assert isinstance(cmds[10], Return)

def test_all_arithmetic_operators():
    src = "\n".join(["add", "sub", "neg", "eq", "gt", "lt", "and", "or", "not"])
    cmds, diags = parse(src)
    assert not diags
    assert [c.operator for c in cmds] == ["add", "sub", "neg", "eq", "gt", "lt", "and", "or", "not"]

def test_errores_se_reportan_por_linea():
    src = "\n".join([
        "push constant 1",
        "push nowhere 1",       # segmento desconocido
        "pop constant 0",       # pop sobre constant
        "push local -2",        # índice negativo
        "add 3",                # aridad
        "jump LOOP",            # operación desconocida
        "push local x",         # índice no entero
        "label 1BAD",           # símbolo inválido
    ])
    cmds, diags = parse(src, module="Bad", filename="Bad.vm")
    assert len(cmds) == 1
    assert [d.line for d in diags] == [2, 3, 4, 5, 6, 7, 8]
    assert all(d.severity == "error" and d.file == "Bad.vm" for d in diags)
    assert "Segmento desconocido" in diags[0].message
    assert diags[0].hint is not None
    assert "pop" in diags[1].message
    assert "negativo" in diags[2].message
    assert "espera 0 argumento" in diags[3].message
    assert "Operación desconocida" in diags[4].message
    # el diagnóstico nombra el comando
    assert "'push local -2'" in diags[2].message
