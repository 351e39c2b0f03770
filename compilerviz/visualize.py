"""
Scene data for the 3D front end.

Every view is a flat list of nodes ({id, type, name, position, color, ...})
and edges ({from, to, type, label?}); the renderer owns everything else.
"""

import random

from .cfg import START, classify_blocks, derive_cfg
from .compiler import STAGE_NAMES, walk_ast
from .errors import InvalidRequest

STAGE_COLORS = ['#3498db', '#2ecc71', '#e74c3c', '#9b59b6', '#f39c12', '#1abc9c']
DEFAULT_COLOR = '#7f8c8d'

TOKEN_COLORS = {
    'KEYWORD': '#e74c3c',
    'IDENTIFIER': '#3498db',
    'OPERATOR': '#f39c12',
    'DELIMITER': '#95a5a6',
    'LITERAL': '#2ecc71',
    'STRING_LITERAL': '#9b59b6',
}

AST_COLORS = {
    'Program': '#2c3e50',
    'FunctionDeclaration': '#3498db',
    'VariableDeclaration': '#2ecc71',
    'IfStatement': '#e74c3c',
    'ForStatement': '#9b59b6',
    'CallExpression': '#f39c12',
    'Identifier': '#1abc9c',
    'Literal': '#34495e',
}

SYMBOL_COLORS = {
    'function': '#3498db',
    'int': '#2ecc71',
    'float': '#e74c3c',
    'char': '#9b59b6',
}

BLOCK_COLORS = {
    'entry': '#2ecc71',
    'exit': '#e74c3c',
    'condition': '#f39c12',
    'loop': '#9b59b6',
    'statement': '#3498db',
}


def _pos(x, y, z=0):
    return {'x': x, 'y': y, 'z': z}


def stage_color(index):
    return STAGE_COLORS[index % len(STAGE_COLORS)]


def pipeline_view(session, rng):
    nodes, edges = [], []
    stages = session['stages']
    x = -300
    for index, name in enumerate(STAGE_NAMES):
        duration = stages[index]['duration'] if index < len(stages) else 0
        nodes.append({
            'id': f"stage_{index}",
            'type': 'stage',
            'name': name,
            'position': _pos(x, 0),
            'color': stage_color(index),
            'status': 'completed',
            'metrics': {'duration': duration, 'complexity': rng.randint(1, 10)},
        })
        if index > 0:
            edges.append({
                'from': f"stage_{index - 1}",
                'to': f"stage_{index}",
                'type': 'pipeline',
                'flow': True,
            })
        x += 120
    return nodes, edges


def lexical_view(session, rng):
    nodes = []
    for index, tok in enumerate(session['outputs']['tokens']):
        nodes.append({
            'id': f"token_{index}",
            'type': 'token',
            'name': tok['value'],
            'token_type': tok['type'],
            'line': tok['line'],
            'position': _pos(index * 40 - 200, 50),
            'color': TOKEN_COLORS.get(tok['type'], DEFAULT_COLOR),
        })
    return nodes, []


def syntax_view(session, rng):
    nodes, edges = [], []
    for number, node, parent, depth, index in walk_ast(session['outputs']['ast']):
        node_id = f"ast_{number}"
        nodes.append({
            'id': node_id,
            'type': 'ast_node',
            'name': node.get('type', 'Node'),
            'value': node.get('name', node.get('value', '')),
            'position': _pos(index * 100 - 200, -depth * 60),
            'color': AST_COLORS.get(node.get('type', ''), DEFAULT_COLOR),
        })
        if parent is not None:
            edges.append({'from': f"ast_{parent}", 'to': node_id, 'type': 'parent_child'})
    return nodes, edges


def semantic_view(session, rng):
    nodes = []
    symbol_table = session['stages'][2]['symbol_table']
    symbols = [(scope, sym) for scope, entries in symbol_table.items() for sym in entries]
    for index, (scope, sym) in enumerate(symbols):
        nodes.append({
            'id': f"symbol_{index}",
            'type': 'symbol',
            'name': sym['name'],
            'symbol_type': sym['type'],
            'scope': scope,
            'position': _pos(-100 + (index % 3) * 80, 50 - (index // 3) * 60),
            'color': SYMBOL_COLORS.get(sym['type'], DEFAULT_COLOR),
        })
    return nodes, []


def ir_view(session, rng):
    cfg = derive_cfg(session['outputs']['ir'])
    kinds = classify_blocks(cfg)
    blocks = list(cfg['nodes'])
    if any(e['from'] == START for e in cfg['edges']):
        blocks.insert(0, {'id': START, 'label': 'start', 'instructions': []})
        kinds[START] = 'entry'

    nodes = []
    for index, block in enumerate(blocks):
        kind = kinds[block['id']]
        nodes.append({
            'id': block['id'],
            'type': kind,
            'name': block['label'],
            'instructions': block['instructions'],
            'position': _pos(0, 150 - index * 60),
            'color': BLOCK_COLORS[kind],
        })
    edges = [
        {'from': e['from'], 'to': e['to'], 'type': 'jump', 'label': e['label']}
        for e in cfg['edges']
    ]
    return nodes, edges


def optimization_view(session, rng):
    nodes = []
    flags = session['stages'][4]['optimizations']
    for index, (name, enabled) in enumerate(flags.items()):
        nodes.append({
            'id': f"opt_{index}",
            'type': 'optimization',
            'name': name,
            'enabled': bool(enabled),
            'position': _pos(index * 100 - 150, 0),
            'color': '#2ecc71' if enabled else '#95a5a6',
        })
    return nodes, []


def codegen_view(session, rng):
    nodes, edges = [], []
    for index, line in enumerate(session['outputs']['asm']):
        text = line.strip()
        if text.endswith(':'):
            kind = 'label'
        elif text.startswith('.'):
            kind = 'directive'
        elif text.startswith('#'):
            kind = 'comment'
        else:
            kind = 'instruction'
        nodes.append({
            'id': f"asm_{index}",
            'type': kind,
            'name': text,
            'position': _pos(0 if kind in ('label', 'directive') else 40, 200 - index * 15),
            'color': stage_color(5),
        })
        if index > 0:
            edges.append({'from': f"asm_{index - 1}", 'to': f"asm_{index}", 'type': 'sequence'})
    return nodes, edges


VIEWS = {
    'all': pipeline_view,
    'lexical': lexical_view,
    'syntax': syntax_view,
    'semantic': semantic_view,
    'ir': ir_view,
    'optimization': optimization_view,
    'codegen': codegen_view,
}


def visualize(session, stage='all', rng=None):
    view = VIEWS.get(stage)
    if view is None:
        raise InvalidRequest(f"Unknown visualization stage '{stage}'")
    nodes, edges = view(session, rng or random.Random())
    return {
        'nodes': nodes,
        'edges': edges,
        'metadata': {
            'stage': stage,
            'session_id': session.get('session_id'),
            'node_count': len(nodes),
            'edge_count': len(edges),
        },
    }
