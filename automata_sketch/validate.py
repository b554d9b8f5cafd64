from typing import Any, Dict, Sequence

from .commands import COMMAND_KINDS, Command, Script
from .errors import ValidationError

_STATE_KINDS = ('state_dragged', 'state_drag_finished', 'rename_state', 'remove_state', 'toggle_final', 'add_cycle')
_TRANSITION_KINDS = (
    'flex_dragged',
    'flex_drag_finished',
    'add_symbol',
    'remove_symbol',
    'symbol_draft',
    'toggle_epsilon',
    'remove_transition',
)
_POINT_KINDS = ('state_dragged', 'state_drag_finished', 'flex_dragged', 'flex_drag_finished', 'add_state')


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_point(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_number(v) for v in value)


def _require_str(d: Dict[str, Any], key: str, seq: int, kind: str) -> None:
    if not isinstance(d.get(key), str):
        raise ValidationError(f'[command {seq}] {kind} needs string field "{key}"')


def _check_points(points: Sequence[Any], seq: int) -> None:
    if not isinstance(points, (list, tuple)) or not points:
        raise ValidationError(f'[command {seq}] shape needs a non-empty controlPoints list')
    for idx, pt in enumerate(points):
        if not _is_point(pt):
            raise ValidationError(f'[command {seq}] controlPoints[{idx}] must be [x, y], got {pt!r}')


def validate_command(c: Command) -> None:
    k = c.kind
    d = c.data
    if k not in COMMAND_KINDS:
        raise ValidationError(f'[command {c.seq}] unknown command kind "{k}"')
    if k == 'shape':
        shape = d.get('shape')
        # unknown categories replay as rejected strokes
        if not isinstance(shape, str):
            raise ValidationError(f'[command {c.seq}] shape needs string field "shape"')
        _check_points(d.get('controlPoints'), c.seq)
    if k in _STATE_KINDS:
        _require_str(d, 'state', c.seq, k)
    if k in _TRANSITION_KINDS:
        _require_str(d, 'transition', c.seq, k)
    if k in _POINT_KINDS and not _is_point(d.get('point')):
        raise ValidationError(f'[command {c.seq}] {k} needs "point" as [x, y]')
    if k == 'rename_state':
        _require_str(d, 'name', c.seq, k)
    elif k == 'remove_symbol':
        _require_str(d, 'symbol', c.seq, k)
    elif k == 'add_symbol' and 'symbol' in d and not isinstance(d['symbol'], str):
        raise ValidationError(f'[command {c.seq}] add_symbol "symbol" must be a string')
    elif k == 'symbol_draft':
        _require_str(d, 'text', c.seq, k)
    elif k == 'connect_states':
        _require_str(d, 'from', c.seq, k)
        _require_str(d, 'to', c.seq, k)


def validate(script: Script) -> None:
    for c in script.commands:
        validate_command(c)
    for symbol in script.alphabet:
        if not symbol:
            raise ValidationError('alphabet symbols must be non-empty')
