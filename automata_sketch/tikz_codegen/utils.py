"""Label helpers for TikZ output."""

import re
import unicodedata
from typing import Optional

# unescaped $$ or $, kept as separate tokens by re.split
_MATH_SPLIT_RE = re.compile(r'((?<!\\)\$\$|(?<!\\)\$)')
_INDEXED_ID_RE = re.compile(r'([A-Za-z]+)(\d+)')

_LATEX_SPECIALS = str.maketrans({
    '\\': r'\textbackslash{}',
    '&': r'\&',
    '%': r'\%',
    '#': r'\#',
    '_': r'\_',
    '{': r'\{',
    '}': r'\}',
    '~': r'\textasciitilde{}',
    '^': r'\textasciicircum{}',
})


def escape_text(text: str) -> str:
    """Escape LaTeX specials after dropping combining marks."""
    normalized = unicodedata.normalize('NFC', text)
    bare = ''.join(ch for ch in normalized if not unicodedata.combining(ch))
    return bare.translate(_LATEX_SPECIALS)


def latex_escape_keep_math(s: str) -> str:
    """Escape a label for LaTeX text mode, leaving ``$...$`` spans untouched.

    An unterminated math span is kept as math up to the end of the string.
    """
    out = []
    open_delim: Optional[str] = None
    for index, token in enumerate(_MATH_SPLIT_RE.split(s)):
        if index % 2:
            out.append(token)
            if open_delim is None:
                open_delim = token
            elif token == open_delim:
                open_delim = None
        else:
            out.append(token if open_delim else escape_text(token))
    return ''.join(out)


def math_subscript_label(identifier: str) -> str:
    """``q12`` → ``$q_{12}$``; identifiers without a numeric tail are escaped as text."""
    m = _INDEXED_ID_RE.fullmatch(identifier)
    if not m:
        return escape_text(identifier)
    return f'${m.group(1)}_{{{m.group(2)}}}$'
