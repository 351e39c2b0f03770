import pytest

from compilerviz.cfg import START, classify_blocks, derive_cfg
from compilerviz.compiler import generate_ir
from compilerviz.errors import MalformedIR


def test_fixture_cfg():
    cfg = derive_cfg(generate_ir(""))
    assert [n['id'] for n in cfg['nodes']] == ['L1', 'L2', 'L3', 'L4']
    assert cfg['nodes'][0] == {'id': 'L1', 'label': 'L1:', 'instructions': ['CALL']}
    assert cfg['nodes'][2]['instructions'] == ['CMP', 'JGE', 'CALL', 'INC', 'JMP']
    assert [(e['from'], e['to']) for e in cfg['edges']] == [
        ('start', 'L1'), ('start', 'L2'), ('L3', 'L4'), ('L3', 'L3'),
    ]
    assert all(e['label'] == 'jump' for e in cfg['edges'])


def test_instructions_before_first_label_are_dropped():
    cfg = derive_cfg([{'op': 'NOP'}, {'label': 'A'}, {'op': 'RET'}])
    assert cfg['nodes'] == [{'id': 'A', 'label': 'A:', 'instructions': ['RET']}]
    assert cfg['edges'] == []


def test_edge_endpoints_resolve():
    ir = [
        {'op': 'JMP', 'target': 'B'},
        {'label': 'A'},
        {'op': 'JZ', 'target': 'A'},
        {'label': 'B'},
        {'op': 'JMP', 'target': 'A'},
    ]
    cfg = derive_cfg(ir)
    ids = {n['id'] for n in cfg['nodes']}
    for edge in cfg['edges']:
        assert edge['from'] in ids or edge['from'] == START
        assert edge['to'] in ids


def test_dangling_target_is_malformed():
    with pytest.raises(MalformedIR):
        derive_cfg([{'label': 'A'}, {'op': 'JMP', 'target': 'nowhere'}])


def test_empty_ir():
    assert derive_cfg([]) == {'nodes': [], 'edges': []}


def test_block_kinds():
    kinds = classify_blocks(derive_cfg(generate_ir("")))
    assert kinds == {'L1': 'statement', 'L2': 'statement', 'L3': 'loop', 'L4': 'exit'}


def test_conditional_block():
    cfg = derive_cfg([{'label': 'A'}, {'op': 'JZ', 'target': 'B'}, {'label': 'B'}, {'op': 'NOP'}])
    assert classify_blocks(cfg) == {'A': 'condition', 'B': 'statement'}


def test_repeated_label_continues_first_block():
    cfg = derive_cfg([
        {'label': 'A'}, {'op': 'NOP'},
        {'label': 'B'},
        {'label': 'A'}, {'op': 'RET'},
    ])
    assert [n['id'] for n in cfg['nodes']] == ['A', 'B']
    assert cfg['nodes'][0]['instructions'] == ['NOP', 'RET']
