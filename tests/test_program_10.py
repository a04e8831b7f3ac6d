from codelang.interpreter import parse_program, Interpreter


def test_program_10_text_arithmetic(capsys):
    with open('examples/program_10.code', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['item10', 'abc5', 'TRUE TRUE']
