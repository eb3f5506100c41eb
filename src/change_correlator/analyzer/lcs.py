"""
Line-level longest-common-subsequence diff.

Implements Myers' O(ND) greedy algorithm. The result is a list of opcodes
in the same shape as ``difflib.SequenceMatcher.get_opcodes()``, but unlike
difflib the edit script is minimal: the equal runs always form a longest
common subsequence of the two inputs.
"""

from collections.abc import Hashable, Sequence
from typing import Literal

OpTag = Literal["equal", "replace", "delete", "insert"]

# (tag, i1, i2, j1, j2): a[i1:i2] relates to b[j1:j2]
Opcode = tuple[OpTag, int, int, int, int]


def _common_prefix(a: Sequence[Hashable], b: Sequence[Hashable]) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def _common_suffix(a: Sequence[Hashable], b: Sequence[Hashable], prefix: int) -> int:
    limit = min(len(a), len(b)) - prefix
    i = 0
    while i < limit and a[len(a) - 1 - i] == b[len(b) - 1 - i]:
        i += 1
    return i


def _shortest_edit(a: Sequence[Hashable], b: Sequence[Hashable]) -> list[str]:
    """
    Compute a shortest edit script between ``a`` and ``b``.

    Returns one move per step, in forward order: ``"="`` (keep a[x] == b[y]),
    ``"-"`` (delete a[x]) or ``"+"`` (insert b[y]).
    """
    n, m = len(a), len(b)
    if n == 0:
        return ["+"] * m
    if m == 0:
        return ["-"] * n

    v: dict[int, int] = {1: 0}
    trace: list[dict[int, int]] = []

    for d in range(n + m + 1):
        trace.append(dict(v))
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[k - 1] < v[k + 1]):
                x = v[k + 1]
            else:
                x = v[k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)

    raise AssertionError("edit script longer than n + m")  # pragma: no cover


def _backtrack(trace: list[dict[int, int]], n: int, m: int) -> list[str]:
    moves: list[str] = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        k = x - y
        if k == -d or (k != d and v[k - 1] < v[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            moves.append("=")
            x -= 1
            y -= 1
        if d > 0:
            moves.append("+" if x == prev_x else "-")
        x, y = prev_x, prev_y

    moves.reverse()
    return moves


def diff_opcodes(a: Sequence[Hashable], b: Sequence[Hashable]) -> list[Opcode]:
    """
    Diff two sequences.

    Args:
        a: Old sequence (typically lines).
        b: New sequence.

    Returns:
        Opcodes covering both sequences completely and in order. Adjacent
        deletions and insertions are merged into a single ``replace``.
    """
    prefix = _common_prefix(a, b)
    suffix = _common_suffix(a, b, prefix)
    a_mid = a[prefix:len(a) - suffix]
    b_mid = b[prefix:len(b) - suffix]

    opcodes: list[Opcode] = []
    if prefix:
        opcodes.append(("equal", 0, prefix, 0, prefix))

    i = j = prefix
    moves = _shortest_edit(a_mid, b_mid)
    pos = 0
    while pos < len(moves):
        i1, j1 = i, j
        if moves[pos] == "=":
            while pos < len(moves) and moves[pos] == "=":
                i += 1
                j += 1
                pos += 1
            opcodes.append(("equal", i1, i, j1, j))
            continue

        while pos < len(moves) and moves[pos] != "=":
            if moves[pos] == "-":
                i += 1
            else:
                j += 1
            pos += 1
        if i > i1 and j > j1:
            tag: OpTag = "replace"
        elif i > i1:
            tag = "delete"
        else:
            tag = "insert"
        opcodes.append((tag, i1, i, j1, j))

    if suffix:
        opcodes.append(("equal", i, i + suffix, j, j + suffix))

    return opcodes


def lcs_length(a: Sequence[Hashable], b: Sequence[Hashable]) -> int:
    """Length of the longest common subsequence of ``a`` and ``b``."""
    return sum(i2 - i1 for tag, i1, i2, _, _ in diff_opcodes(a, b) if tag == "equal")
