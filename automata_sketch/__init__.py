from .commands import Command, ReplayResult, Script, apply_command, parse_script, replay
from .validate import validate, validate_command
from .errors import (
    SketchError,
    StrokeRejected,
    ClassificationFailed,
    DuplicateFinalMarking,
    AmbiguousCycleTarget,
    NoInitialState,
    GraphIntegrityError,
    ValidationError,
    DocumentError,
)
from .config import InterpretationConfig, get_interpretation_config, set_interpretation_config
from .model import (
    Attached,
    AutomatonState,
    AutomatonTransition,
    CycleGeometry,
    Dangling,
    Graph,
    GraphEdit,
    RegularGeometry,
)
from .shapes import CycleShape, StateShape, TransitionShape, make_shape, shape_from_payload
from .interpreter import interpret
from .propagate import flex_drag_finished, flex_dragged, move_state, state_drag_finished, state_dragged
from .simulation import SimulationResult, epsilon_closure, simulate, simulate_graph
from .consistency import check_consistency, ConsistencyWarning
from .printer import print_graph
from .render import RenderFeed, build_render_feed
from .tikz_codegen import generate_tikz_code, generate_tikz_document, latex_escape_keep_math
from .document import (
    AutomatonDocument,
    export_snapshot,
    import_snapshot,
    save_document,
    load_document,
    create_document,
    list_documents,
)
from .session import Classifier, EditorSession

__all__ = [
    'Command',
    'ReplayResult',
    'Script',
    'apply_command',
    'parse_script',
    'replay',
    'validate',
    'validate_command',
    'SketchError',
    'StrokeRejected',
    'ClassificationFailed',
    'DuplicateFinalMarking',
    'AmbiguousCycleTarget',
    'NoInitialState',
    'GraphIntegrityError',
    'ValidationError',
    'DocumentError',
    'InterpretationConfig',
    'get_interpretation_config',
    'set_interpretation_config',
    'Attached',
    'AutomatonState',
    'AutomatonTransition',
    'CycleGeometry',
    'Dangling',
    'Graph',
    'GraphEdit',
    'RegularGeometry',
    'CycleShape',
    'StateShape',
    'TransitionShape',
    'make_shape',
    'shape_from_payload',
    'interpret',
    'flex_drag_finished',
    'flex_dragged',
    'move_state',
    'state_drag_finished',
    'state_dragged',
    'SimulationResult',
    'epsilon_closure',
    'simulate',
    'simulate_graph',
    'check_consistency',
    'ConsistencyWarning',
    'print_graph',
    'RenderFeed',
    'build_render_feed',
    'generate_tikz_code',
    'generate_tikz_document',
    'latex_escape_keep_math',
    'AutomatonDocument',
    'export_snapshot',
    'import_snapshot',
    'save_document',
    'load_document',
    'create_document',
    'list_documents',
    'Classifier',
    'EditorSession',
]
