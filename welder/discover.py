"""
Asset discovery - find sprite files under an input root.

Patterns are matched against root-relative paths using ``/`` separators:

    **      any run of characters, including ``/``
    **/     zero or more leading directories
    *       any run of characters except ``/``
    ?       one character except ``/``
    [abc]   character class (``[!abc]`` / ``[^abc]`` negate)
    {a,b}   alternation

The returned order is byte-wise lexicographic and is the canonical sprite
order for every layout downstream.
"""

import logging
import os
import re
from pathlib import Path
from typing import List, Pattern, Sequence

from welder.config import SPRITE_EXTENSION
from welder.errors import DiscoveryError, WelderIOError
from welder.fsutil import raise_walk_error

logger = logging.getLogger(__name__)


def _translate_class(pattern: str, start: int) -> tuple:
    """Translate a ``[...]`` class beginning at ``start``; return (regex, next index)."""
    i = start + 1
    negate = False
    if i < len(pattern) and pattern[i] in "!^":
        negate = True
        i += 1

    members = []
    # A leading ']' is a literal member
    if i < len(pattern) and pattern[i] == "]":
        members.append(r"\]")
        i += 1

    while i < len(pattern) and pattern[i] != "]":
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            members.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if (
            i + 2 < len(pattern)
            and pattern[i + 1] == "-"
            and pattern[i + 2] != "]"
        ):
            low, high = char, pattern[i + 2]
            if low > high:
                raise DiscoveryError(
                    f"invalid range '{low}-{high}' in glob pattern '{pattern}'"
                )
            members.append(f"{re.escape(low)}-{re.escape(high)}")
            i += 3
            continue
        members.append(re.escape(char))
        i += 1

    if i >= len(pattern):
        raise DiscoveryError(f"unclosed character class in glob pattern '{pattern}'")
    if not members:
        raise DiscoveryError(f"empty character class in glob pattern '{pattern}'")

    body = "".join(members)
    # Classes never match the separator
    regex = f"[^/{body}]" if negate else f"(?!/)[{body}]"
    return regex, i + 1


def glob_to_regex(pattern: str) -> str:
    """Translate a glob pattern into an anchored regular expression string."""
    if not pattern:
        raise DiscoveryError("empty glob pattern")

    out = []
    depth = 0
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            if i + 1 < n and pattern[i + 1] == "*":
                at_start = i == 0 or pattern[i - 1] == "/"
                i += 2
                if at_start and i < n and pattern[i] == "/":
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            regex, i = _translate_class(pattern, i)
            out.append(regex)
            continue
        elif char == "{":
            if depth:
                raise DiscoveryError(f"nested alternation in glob pattern '{pattern}'")
            depth += 1
            out.append("(?:")
        elif char == "}":
            if not depth:
                raise DiscoveryError(f"unmatched '}}' in glob pattern '{pattern}'")
            depth -= 1
            out.append(")")
        elif char == "," and depth:
            out.append("|")
        elif char == "\\":
            if i + 1 >= n:
                raise DiscoveryError(f"dangling escape in glob pattern '{pattern}'")
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(char))
        i += 1

    if depth:
        raise DiscoveryError(f"unclosed '{{' in glob pattern '{pattern}'")
    return "^" + "".join(out) + "$"


def compile_patterns(patterns: Sequence[str]) -> List[Pattern]:
    """Compile glob patterns, raising DiscoveryError on the first invalid one."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(glob_to_regex(pattern)))
        except re.error as exc:
            raise DiscoveryError(f"invalid glob pattern '{pattern}'") from exc
    return compiled


def _matches(patterns: Sequence[Pattern], relative: str) -> bool:
    # Extension compared case-insensitively
    normalized = relative[: -len(SPRITE_EXTENSION)] + SPRITE_EXTENSION
    return any(p.fullmatch(relative) or p.fullmatch(normalized) for p in patterns)


def _byte_order(path: str) -> bytes:
    return path.encode("utf-8", "surrogateescape")


def discover_sprites(
    root: Path,
    include: Sequence[str],
    exclude: Sequence[str] = (),
) -> List[str]:
    """
    List sprite files under ``root``.

    Args:
        root: Input directory to walk (symlinks are not followed)
        include: Glob patterns; a file must match at least one
        exclude: Glob patterns; a file matching any of them is dropped

    Returns:
        Root-relative ``/``-separated paths in byte-wise lexicographic order.
        Empty when ``root`` does not exist.

    Raises:
        DiscoveryError: A pattern is syntactically invalid
        WelderIOError: A directory below ``root`` could not be read
    """
    include_res = compile_patterns(include)
    exclude_res = compile_patterns(exclude)

    root = Path(root)
    if not root.is_dir():
        logger.info(f"Input root {root} does not exist, nothing to discover")
        return []

    found = []
    try:
        walked = list(os.walk(root, onerror=raise_walk_error, followlinks=False))
    except OSError as exc:
        raise WelderIOError(f"cannot read {exc.filename or root}") from exc

    for dirpath, dirnames, filenames in walked:
        for filename in filenames:
            if not filename.lower().endswith(SPRITE_EXTENSION):
                continue
            full = os.path.join(dirpath, filename)
            # Regular files only; symlinks are skipped even when they point at one
            if os.path.islink(full) or not os.path.isfile(full):
                continue

            relative = Path(full).relative_to(root).as_posix()
            if not _matches(include_res, relative):
                continue
            if _matches(exclude_res, relative):
                logger.debug(f"Excluded {relative}")
                continue
            found.append(relative)

    found.sort(key=_byte_order)
    logger.info(f"Discovered {len(found)} sprite(s) under {root}")
    return found
