#!/usr/bin/env python3
"""
compiler.py
Simulated C compiler pipeline for the 3D visualizer (lexer → parser → semantic
analysis → IR → optimization → code generation).

Only the lexer looks at the source text. Every later stage returns the same
canned structure describing one reference program (a = 5; b = 10; sum = a + b;
an if/else on sum; a for loop 0..3; return 0) so the front end always has a
complete, well-formed pipeline to animate.
"""

import re
from collections import namedtuple

# =====================================================
# LEXER
# =====================================================
Token = namedtuple('Token', ['type', 'value', 'line'])


class Lexer:
    KEYWORDS = {'int', 'return', 'if', 'else', 'for', 'while', 'printf', 'main'}
    OPERATORS = {'=', '+', '-', '*', '/', '>', '<', '==', '!='}
    DELIMITERS = {';', '(', ')', '{', '}', ','}

    # split on whitespace and around every operator/delimiter character
    split_re = re.compile(r'\s+|(?<=[(){};=+\-/*<>,])|(?=[(){};=+\-/*<>,])')
    number_re = re.compile(r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')

    def __init__(self, code):
        self.code = code
        self.tokens = []
        self._tokenize()

    def _tokenize(self):
        for lineno, line in enumerate(self.code.split('\n'), start=1):
            line = line.strip()
            if not line:
                continue
            for word in self.split_re.split(line):
                if word:
                    self.tokens.append(Token(self.classify(word), word, lineno))

    @classmethod
    def classify(cls, word):
        if word in cls.KEYWORDS:
            return 'KEYWORD'
        if word in cls.OPERATORS:
            return 'OPERATOR'
        if word in cls.DELIMITERS:
            return 'DELIMITER'
        if cls.number_re.fullmatch(word):
            return 'LITERAL'
        if '"' in word:
            return 'STRING_LITERAL'
        return 'IDENTIFIER'

    def peek_all(self):
        return list(self.tokens)


def tokenize(code):
    return Lexer(code).peek_all()

# =====================================================
# FIXTURES (syntax, semantic, IR, optimization, codegen)
# =====================================================


def _ident(name):
    return {'type': 'Identifier', 'name': name}


def _lit(value):
    return {'type': 'Literal', 'value': value}


def _printf(fmt, arg):
    return {
        'type': 'CallExpression',
        'callee': _ident('printf'),
        'arguments': [_lit(fmt), _ident(arg)],
    }


def generate_ast(code):
    """Return the reference program's AST. The source text is ignored."""
    declarations = [
        dict(_ident('a'), init=_lit(5)),
        dict(_ident('b'), init=_lit(10)),
        dict(_ident('sum'), init={
            'type': 'BinaryExpression',
            'operator': '+',
            'left': _ident('a'),
            'right': _ident('b'),
        }),
    ]
    if_stmt = {
        'type': 'IfStatement',
        'test': {
            'type': 'BinaryExpression',
            'operator': '>',
            'left': _ident('sum'),
            'right': _lit(10),
        },
        'consequent': {
            'type': 'BlockStatement',
            'body': [_printf('Sum is greater than 10: %d\\n', 'sum')],
        },
        'alternate': {
            'type': 'BlockStatement',
            'body': [_printf('Sum is 10 or less: %d\\n', 'sum')],
        },
    }
    for_stmt = {
        'type': 'ForStatement',
        'init': {
            'type': 'VariableDeclaration',
            'declarations': [dict(_ident('i'), init=_lit(0))],
        },
        'test': {
            'type': 'BinaryExpression',
            'operator': '<',
            'left': _ident('i'),
            'right': _lit(3),
        },
        'update': {
            'type': 'UpdateExpression',
            'operator': '++',
            'argument': _ident('i'),
        },
        'body': {
            'type': 'BlockStatement',
            'body': [_printf('Iteration %d\\n', 'i')],
        },
    }
    return {
        'type': 'Program',
        'body': [{
            'type': 'FunctionDeclaration',
            'name': 'main',
            'params': [],
            'body': [
                {'type': 'VariableDeclaration', 'declarations': declarations},
                if_stmt,
                for_stmt,
                {'type': 'ReturnStatement', 'argument': _lit(0)},
            ],
        }],
    }


def generate_symbol_table(code):
    def local(name):
        return {'name': name, 'type': 'int', 'initialized': True, 'scope': 'local'}

    return {
        'global': [
            {'name': 'main', 'type': 'function', 'return_type': 'int', 'scope': 'global'},
        ],
        'main': [local('a'), local('b'), local('sum'), local('i')],
    }


def generate_ir(code):
    # every 'target' below names a label emitted further down
    return [
        {'op': 'ALLOC', 'dest': 'a', 'type': 'int'},
        {'op': 'ALLOC', 'dest': 'b', 'type': 'int'},
        {'op': 'ALLOC', 'dest': 'sum', 'type': 'int'},
        {'op': 'STORE', 'dest': 'a', 'value': 5},
        {'op': 'STORE', 'dest': 'b', 'value': 10},
        {'op': 'LOAD', 'dest': 't1', 'src': 'a'},
        {'op': 'LOAD', 'dest': 't2', 'src': 'b'},
        {'op': 'ADD', 'dest': 'sum', 'src1': 't1', 'src2': 't2'},
        {'op': 'CMP', 'dest': 't3', 'src1': 'sum', 'src2': 10},
        {'op': 'JLE', 'target': 'L1'},
        {'op': 'CALL', 'func': 'printf', 'args': ['"Sum is greater than 10: %d\\n"', 'sum']},
        {'op': 'JMP', 'target': 'L2'},
        {'label': 'L1'},
        {'op': 'CALL', 'func': 'printf', 'args': ['"Sum is 10 or less: %d\\n"', 'sum']},
        {'label': 'L2'},
        {'op': 'STORE', 'dest': 'i', 'value': 0},
        {'label': 'L3'},
        {'op': 'CMP', 'dest': 't4', 'src1': 'i', 'src2': 3},
        {'op': 'JGE', 'target': 'L4'},
        {'op': 'CALL', 'func': 'printf', 'args': ['"Iteration %d\\n"', 'i']},
        {'op': 'INC', 'dest': 'i'},
        {'op': 'JMP', 'target': 'L3'},
        {'label': 'L4'},
        {'op': 'RET', 'value': 0},
    ]


def generate_optimizations(code=None):
    return {
        'constant_folding': True,
        'dead_code_elimination': False,
        'common_subexpression': True,
        'loop_unrolling': False,
    }


def generate_assembly(code):
    return [
        '.section .text',
        '.globl main',
        'main:',
        '    push %rbp',
        '    mov %rsp, %rbp',
        '    sub $16, %rsp',
        '    movl $5, -4(%rbp)    # a = 5',
        '    movl $10, -8(%rbp)   # b = 10',
        '    movl -4(%rbp), %eax',
        '    addl -8(%rbp), %eax',
        '    movl %eax, -12(%rbp) # sum = a + b',
        '    cmpl $10, -12(%rbp)',
        '    jle .L1',
        '    # printf for greater than 10',
        '    jmp .L2',
        '.L1:',
        '    # printf for less or equal',
        '.L2:',
        '    movl $0, -16(%rbp)   # i = 0',
        '.L3:',
        '    cmpl $3, -16(%rbp)',
        '    jge .L4',
        '    # printf for iteration',
        '    incl -16(%rbp)',
        '    jmp .L3',
        '.L4:',
        '    movl $0, %eax',
        '    leave',
        '    ret',
    ]


# =====================================================
# AST WALK
# =====================================================
CHILD_KEYS = ('body', 'declarations', 'consequent', 'alternate')


def ast_children(node):
    children = []
    for key in CHILD_KEYS:
        value = node.get(key)
        if isinstance(value, list):
            children.extend(c for c in value if isinstance(c, dict))
        elif isinstance(value, dict):
            children.append(value)
    return children


def walk_ast(root):
    """
    Depth-first, pre-order walk over an AST. Yields
    (node_number, node, parent_number, depth, sibling_index); node numbers
    count from 0 in visit order and belong to this walk alone.
    """
    counter = 0
    stack = [(root, None, 0, 0)]
    while stack:
        node, parent, depth, index = stack.pop()
        number = counter
        counter += 1
        yield number, node, parent, depth, index
        children = ast_children(node)
        for i in range(len(children) - 1, -1, -1):
            stack.append((children[i], number, depth + 1, i))


def _tokens_payload(code):
    return [t._asdict() for t in tokenize(code)]

# =====================================================
# STAGE TABLE
# =====================================================
StageSpec = namedtuple('StageSpec', ['name', 'key', 'duration_range', 'generate'])

# The payload key of a stage is fixed by its position in this table.
STAGES = (
    StageSpec('Lexical Analysis', 'tokens', (50, 200), _tokens_payload),
    StageSpec('Syntax Analysis', 'ast', (100, 300), generate_ast),
    StageSpec('Semantic Analysis', 'symbol_table', (80, 250), generate_symbol_table),
    StageSpec('IR Generation', 'ir_code', (150, 400), generate_ir),
    StageSpec('Optimization', 'optimizations', (200, 500), generate_optimizations),
    StageSpec('Code Generation', 'assembly', (250, 600), generate_assembly),
)

STAGE_NAMES = [s.name for s in STAGES]


def payload_key(index):
    return STAGES[index].key


def run_pipeline(code, rng):
    """
    Run every stage over `code` and return the stage records in pipeline
    order. `rng` supplies the display-only durations.
    """
    stages = []
    for spec in STAGES:
        low, high = spec.duration_range
        stages.append({
            'name': spec.name,
            'status': 'completed',
            'duration': rng.randint(low, high),
            spec.key: spec.generate(code),
        })
    return stages


def collect_outputs(stages):
    return {
        'tokens': stages[0]['tokens'],
        'ast': stages[1]['ast'],
        'ir': stages[3]['ir_code'],
        'asm': stages[5]['assembly'],
    }

# =====================================================
# TEST PROGRAM
# =====================================================
TEST_PROGRAM = r'''
int main() {
    int a = 5;
    int b = 10;
    int sum = a + b;
    if (sum > 10) {
        printf("Sum is greater than 10: %d\n", sum);
    } else {
        printf("Sum is 10 or less: %d\n", sum);
    }
    for (int i = 0; i < 3; i = i + 1) {
        printf("Iteration %d\n", i);
    }
    return 0;
}
'''

if __name__ == '__main__':
    for tok in tokenize(TEST_PROGRAM):
        print(f"{tok.type:<15} {tok.value:<20} Line {tok.line}")
