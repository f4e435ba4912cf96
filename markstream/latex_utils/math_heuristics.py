import re
from typing import List


MATH_COMMANDS: List[str] = [
    "frac", "sqrt", "int", "sum", "prod", "lim", "log", "sin", "cos", "tan",
    "cdot", "ldots", "leq", "geq", "neq", "approx", "sim", "propto",
]

GREEK_LETTERS: List[str] = [
    "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta", "iota", "kappa",
    "lambda", "mu", "nu", "xi", "omicron", "pi", "rho", "sigma", "tau", "upsilon",
    "phi", "chi", "psi", "omega",
]

KNOWN_COMMANDS: List[str] = MATH_COMMANDS + GREEK_LETTERS

# longest names first so alternation never stops at a shorter prefix
_COMMAND_ALT = "|".join(sorted(KNOWN_COMMANDS, key=len, reverse=True))
_GREEK_ALT = "|".join(sorted(GREEK_LETTERS, key=len, reverse=True))

_PREFIXED_COMMAND_RE = re.compile(r"\\(?:" + _COMMAND_ALT + r")\b")
_BARE_COMMAND_RE = re.compile(r"(?<![A-Za-z\\])(?:" + _COMMAND_ALT + r")(?![A-Za-z])")
_SUPER_OR_SUB_RE = re.compile(r"[A-Za-z0-9)]\s*[\^_]\s*[A-Za-z0-9(]")
_OPERATOR_RE = re.compile(r"[A-Za-z0-9)\]]\s*(?:=|≤|≥|≠|≈|∼|∝|\+|−|-|\*)\s*[A-Za-z0-9(\\]")
_GREEK_WORD_RE = re.compile(r"\b(?:" + _GREEK_ALT + r")\b", re.IGNORECASE)
# letters delimit command words; digits and underscores do not (2pi, x_alpha)
_COMMAND_WORD_RE = re.compile(r"(?<![A-Za-z])(?:" + _COMMAND_ALT + r")(?![A-Za-z])")


def looks_like_math(phrase: str) -> bool:
    """Heuristic: does a bare phrase from prose look like mathematics?

    Deliberately permissive. A false positive only costs a pair of `$`
    around the phrase.
    """
    p = (phrase or "").strip()
    if not p:
        return False
    return bool(
        _PREFIXED_COMMAND_RE.search(p)
        or _BARE_COMMAND_RE.search(p)
        or _SUPER_OR_SUB_RE.search(p)
        or _OPERATOR_RE.search(p)
        or _GREEK_WORD_RE.search(p)
    )


def normalize_latex_commands(text: str, prev_char: str = "") -> str:
    """Prefix a backslash to known LaTeX command words that are missing one.

    `prev_char` is the character that preceded `text` where it came from, so a
    leading word that continues an escaped command (or a longer word) is left
    alone. Already normalized text comes back unchanged.
    """
    def _prefix(m: "re.Match[str]") -> str:
        start = m.start()
        before = text[start - 1] if start > 0 else prev_char
        if before == "\\" or before.isalpha():
            return m.group(0)
        return "\\" + m.group(0)

    return _COMMAND_WORD_RE.sub(_prefix, text)


def could_become_command(partial: str) -> bool:
    """True when `partial` is a prefix of some known command name."""
    return any(c.startswith(partial) for c in KNOWN_COMMANDS)
