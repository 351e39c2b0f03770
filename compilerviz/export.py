"""
Downloadable renderings of a compile session.

`export(session, artifact, fmt)` returns a Download with the file body as
bytes, the suggested filename and its mimetype. The "all" artifact is always
a zip archive holding tokens, AST, IR, assembly, the CFG as DOT and a summary,
whatever format was asked for.
"""

import io
import json
import logging
import zipfile
from collections import namedtuple
from datetime import datetime

from .cfg import derive_cfg
from .compiler import walk_ast
from .errors import InvalidArtifactOrFormat

logger = logging.getLogger(__name__)

Download = namedtuple('Download', ['content', 'filename', 'mimetype'])

MIME_TYPES = {
    'json': 'application/json',
    'txt': 'text/plain',
    'dot': 'text/plain',
    'zip': 'application/zip',
}

FILENAMES = {
    'tokens': 'tokens_list',
    'ast': 'ast_visualization',
    'ir': 'intermediate_code',
    'asm': 'assembly_code',
    'cfg': 'control_flow_graph',
}

ARCHIVE_NAME = 'compilation_results.zip'


def to_json(data):
    return json.dumps(data, indent=4)

# =====================================================
# TEXT
# =====================================================


def tokens_to_text(tokens):
    out = []
    for tok in tokens:
        out.append(f"{tok['type']:<15} {tok['value']:<20} Line {tok['line']}\n")
    return ''.join(out)


def ir_to_text(ir):
    out = []
    for instr in ir:
        if 'label' in instr:
            out.append(f"{instr['label']}:\n")
            continue
        line = f"    {instr['op']}"
        if 'dest' in instr:
            line += f" {instr['dest']}"
        for field in ('src', 'src1', 'src2', 'value'):
            if field in instr:
                line += f", {instr[field]}"
        out.append(line + "\n")
    return ''.join(out)


def asm_to_text(asm):
    return "\n".join(asm)


def ast_to_text(ast):
    out = []
    for _, node, _, depth, _ in walk_ast(ast):
        line = "  " * depth + node.get('type', 'Node')
        if 'name' in node:
            line += f" {node['name']}"
        if 'value' in node:
            line += f" = {node['value']!r}"
        out.append(line + "\n")
    return ''.join(out)


def cfg_to_text(cfg):
    out = []
    for node in cfg['nodes']:
        out.append(f"{node['label']}\n")
        for op in node['instructions']:
            out.append(f"    {op}\n")
    if cfg['edges']:
        out.append("\n")
    for edge in cfg['edges']:
        out.append(f"{edge['from']} -> {edge['to']}")
        if edge.get('label'):
            out.append(f" ({edge['label']})")
        out.append("\n")
    return ''.join(out)

# =====================================================
# DOT
# =====================================================


def dot_escape(text):
    return str(text).replace("\\", "\\\\").replace('"', '\\"')


def ast_to_dot(ast):
    lines = ["digraph AST {", "  node [shape=box, style=filled, color=lightblue];", ""]
    edges = []
    for number, node, parent, _, _ in walk_ast(ast):
        label = dot_escape(node.get('type', 'Node'))
        if 'name' in node:
            label += "\\n" + dot_escape(node['name'])
        if 'value' in node:
            label += "\\n" + dot_escape(node['value'])
        lines.append(f'  node{number} [label="{label}"];')
        if parent is not None:
            edges.append(f"  node{parent} -> node{number};")
    lines.extend(edges)
    lines.append("}")
    return "\n".join(lines) + "\n"


def cfg_to_dot(cfg):
    lines = ["digraph CFG {", "  node [shape=box, style=rounded];", ""]
    for node in cfg['nodes']:
        lines.append(f'  {node["id"]} [label="{dot_escape(node["label"])}"];')
    for edge in cfg['edges']:
        stmt = f"  {edge['from']} -> {edge['to']}"
        if edge.get('label'):
            stmt += f' [label="{dot_escape(edge["label"])}"]'
        lines.append(stmt + ";")
    lines.append("}")
    return "\n".join(lines) + "\n"

# =====================================================
# DISPATCH
# =====================================================


def _outputs(session):
    return session['outputs']


RENDERERS = {
    'tokens': {
        'json': lambda s: to_json(_outputs(s)['tokens']),
        'txt': lambda s: tokens_to_text(_outputs(s)['tokens']),
    },
    'ast': {
        'json': lambda s: to_json(_outputs(s)['ast']),
        'txt': lambda s: ast_to_text(_outputs(s)['ast']),
        'dot': lambda s: ast_to_dot(_outputs(s)['ast']),
    },
    'ir': {
        'json': lambda s: to_json(_outputs(s)['ir']),
        'txt': lambda s: ir_to_text(_outputs(s)['ir']),
    },
    'asm': {
        'json': lambda s: to_json(_outputs(s)['asm']),
        'txt': lambda s: asm_to_text(_outputs(s)['asm']),
    },
    'cfg': {
        'json': lambda s: to_json(derive_cfg(_outputs(s)['ir'])),
        'txt': lambda s: cfg_to_text(derive_cfg(_outputs(s)['ir'])),
        'dot': lambda s: cfg_to_dot(derive_cfg(_outputs(s)['ir'])),
    },
}

ARTIFACTS = tuple(RENDERERS) + ('all',)


def build_summary(session, now=None):
    stages = session['stages']
    now = now or datetime.now()
    return {
        'timestamp': now.strftime('%Y-%m-%d %H:%M:%S'),
        'stages': [s['name'] for s in stages],
        'total_duration': sum(s['duration'] for s in stages),
    }


def build_archive(session, now=None):
    outputs = _outputs(session)
    entries = [
        ('tokens.json', to_json(outputs['tokens'])),
        ('ast.json', to_json(outputs['ast'])),
        ('ir.json', to_json(outputs['ir'])),
        ('assembly.txt', asm_to_text(outputs['asm'])),
        ('cfg.dot', cfg_to_dot(derive_cfg(outputs['ir']))),
        ('summary.json', to_json(build_summary(session, now))),
    ]
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w', zipfile.ZIP_DEFLATED) as zf:
        for name, text in entries:
            zf.writestr(name, text)
    return buf.getvalue()


def export(session, artifact, fmt='json'):
    if artifact == 'all':
        return Download(build_archive(session), ARCHIVE_NAME, MIME_TYPES['zip'])

    formats = RENDERERS.get(artifact)
    if formats is None:
        raise InvalidArtifactOrFormat()
    render = formats.get(fmt)
    if render is None:
        raise InvalidArtifactOrFormat(f"Unsupported format '{fmt}' for {artifact}")

    logger.info("exporting %s as %s for %s", artifact, fmt, session.get('session_id'))
    content = render(session).encode('utf-8')
    return Download(content, f"{FILENAMES[artifact]}.{fmt}", MIME_TYPES[fmt])
