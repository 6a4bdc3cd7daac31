from src.hack_vm.pseudo import set_a_to_stack, inc_sp, dec_sp, push_d, pop_d, load_constant

def test_stack_primitives():
    assert set_a_to_stack() == ["@SP", "A=M"]
    assert inc_sp() == ["@SP", "M=M+1"]
    assert dec_sp() == ["@SP", "M=M-1"]

def test_push_and_pop_d():
    assert push_d() == ["@SP", "A=M", "M=D", "@SP", "M=M+1"]
    assert pop_d() == ["@SP", "M=M-1", "@SP", "A=M", "D=M"]

def test_custom_stack_pointer_and_constant():
    assert push_d("R0")[0] == "@R0"
    assert load_constant(17) == ["@17", "D=A"]
