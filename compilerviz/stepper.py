"""
Step-through navigation over the six pipeline stages.

The client keeps the cursor; every call recomputes the target stage from the
step it passes in, so nothing is stored between requests.
"""

from .errors import InvalidStep
from .visualize import STAGE_COLORS

ACTIONS = ("next", "prev", "jump")

EXPLANATIONS = [
    {
        'step': 0,
        'title': 'Lexical Analysis',
        'description': 'Breaking source code into tokens (keywords, identifiers, operators, etc.)',
        'details': 'Scanner reads characters and groups them into tokens according to language grammar.',
    },
    {
        'step': 1,
        'title': 'Syntax Analysis',
        'description': 'Parsing tokens to build Abstract Syntax Tree (AST)',
        'details': 'Parser checks syntax validity and creates tree structure representing program hierarchy.',
    },
    {
        'step': 2,
        'title': 'Semantic Analysis',
        'description': 'Validating program meaning and building symbol table',
        'details': 'Type checking, scope resolution, and semantic rule verification.',
    },
    {
        'step': 3,
        'title': 'IR Generation',
        'description': 'Generating Intermediate Representation (IR) code',
        'details': 'Converting AST to platform-independent intermediate code for optimization.',
    },
    {
        'step': 4,
        'title': 'Optimization',
        'description': 'Applying optimizations to improve code efficiency',
        'details': 'Constant folding, dead code elimination, loop optimizations, etc.',
    },
    {
        'step': 5,
        'title': 'Code Generation',
        'description': 'Generating target assembly/machine code',
        'details': 'Converting optimized IR to specific architecture assembly code.',
    },
]

# one animation per stage, indexed by step
ANIMATIONS = [
    {'type': 'highlight_tokens', 'duration': 2000, 'elements': ['token_*'], 'color': '#f39c12'},
    {'type': 'build_ast', 'duration': 3000, 'direction': 'top_down'},
    {'type': 'connect_symbols', 'duration': 2000, 'elements': ['symbol_*']},
    {'type': 'flow_animation', 'duration': 2500, 'path': 'linear', 'speed': 'medium'},
    {'type': 'transform', 'duration': 2000, 'before': 'ir_node', 'after': 'optimized_node'},
    {'type': 'assembly_build', 'duration': 3000, 'direction': 'sequential'},
]


def target_step(current, action, total, to=None):
    """
    Compute the stage index an action lands on.

    `next` and `prev` saturate at the ends of the table. `jump` clamps `to`
    into [0, total - 1]; a missing `to` stays on the current step. Any other
    action stays where it is.
    """
    last = total - 1
    if action == 'next':
        return min(current + 1, last)
    if action == 'prev':
        return max(current - 1, 0)
    if action == 'jump':
        if to is None:
            to = current
        return max(min(to, last), 0)
    return current


def generate_animations(step):
    if 0 <= step < len(ANIMATIONS):
        return [dict(ANIMATIONS[step])]
    return []


def generate_highlights(step):
    return [{
        'element': f"stage_{step}",
        'color': STAGE_COLORS[step % len(STAGE_COLORS)],
        'intensity': 0.8,
        'pulse': True,
    }]


def generate_explanations(step):
    if 0 <= step < len(EXPLANATIONS):
        return dict(EXPLANATIONS[step])
    return dict(EXPLANATIONS[0])


def navigate(session, current, action='next', to=None):
    stages = session['stages']
    total = len(stages)
    step = target_step(current, action, total, to)
    if not 0 <= step < total or not stages[step]:
        raise InvalidStep()

    return {
        'current_step': step,
        'total_steps': total,
        'stage': stages[step],
        'animations': generate_animations(step),
        'highlights': generate_highlights(step),
        'explanations': generate_explanations(step),
    }
