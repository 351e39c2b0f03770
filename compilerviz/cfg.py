"""
Control-flow graph derived from the IR instruction list.

Each label opens a block; instructions are appended to the most recently
opened block. A jump (any instruction with a 'target') adds an edge from the
current block, or from the implicit 'start' block when no label has been
seen yet, to the block its target names.
"""

import logging

from .errors import MalformedIR

logger = logging.getLogger(__name__)

START = 'start'


def derive_cfg(ir):
    nodes = []
    by_id = {}
    edges = []
    current = None

    for instr in ir:
        if 'label' in instr:
            current = instr['label']
            # a repeated label continues its first block
            if current not in by_id:
                node = {'id': current, 'label': f"{current}:", 'instructions': []}
                nodes.append(node)
                by_id[current] = node
        elif current is not None:
            by_id[current]['instructions'].append(instr['op'])

        if 'target' in instr:
            edges.append({
                'from': current if current is not None else START,
                'to': instr['target'],
                'label': 'jump',
            })

    for edge in edges:
        if edge['to'] not in by_id:
            logger.error("jump to undefined label %r", edge['to'])
            raise MalformedIR(f"Jump to undefined label '{edge['to']}'")

    return {'nodes': nodes, 'edges': edges}


def classify_blocks(cfg):
    """Shape hint per block id for the renderer: loop, condition, exit or statement."""
    order = {node['id']: i for i, node in enumerate(cfg['nodes'])}
    kinds = {}
    for node in cfg['nodes']:
        ops = node['instructions']
        here = order[node['id']]
        # jumped to from itself or a later block
        back_edge = any(
            e['to'] == node['id'] and e['from'] in order and order[e['from']] >= here
            for e in cfg['edges']
        )
        if ops and ops[-1] == 'RET':
            kinds[node['id']] = 'exit'
        elif back_edge:
            kinds[node['id']] = 'loop'
        elif any(op.startswith('J') and op != 'JMP' for op in ops):
            kinds[node['id']] = 'condition'
        else:
            kinds[node['id']] = 'statement'
    return kinds
