"""
Markup-aware splitting of article bodies.

Store APIs cap the size of an article body, so long posts have to be
published as several parts.  :func:`split_html` cuts an HTML string into
an ordered list of fragments that each fit a character budget while
staying well-formed on their own:

* root-level nodes are packed greedily, in document order, into groups
  that fit the budget;
* a node that is too big on its own is decomposed recursively.  Its
  children are regrouped against the budget left over once the node's
  own opening and closing tags are accounted for, and every group is
  re-wrapped in a copy of the node (a *wrapper clone*);
* text that is still too long is cut at a word boundary when one sits in
  the last 30% of the window, otherwise at the budget itself.

Identifier attributes (``id`` and friends) are kept only on the first
wrapper clone of each source element so that the published parts never
repeat an identifier.

Problems never abort the split.  Unparsable markup comes back as a single
fragment, and anything that forces a fragment over budget or cuts text
mid-word is reported as a :class:`SplitWarning` to the ``on_warning``
callback (or to the module logger when no callback is given).
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup

__all__ = [
    "IDENTIFIER_ATTRIBUTES",
    "OVERSIZE_POLICIES",
    "OversizedFragmentError",
    "SplitWarning",
    "clone_node",
    "split_html",
    "split_text",
]

logger = logging.getLogger(__name__)

Node = Union[Tag, NavigableString]

# Attributes whose value must be unique in a rendered page.
IDENTIFIER_ATTRIBUTES = frozenset(
    {
        "id",
        "data-id",
        "data-section-id",
        "data-block-id",
        "data-component-id",
        "data-shopify-editor-section",
        "data-shopify-editor-block",
    }
)

OVERSIZE_POLICIES = ("pass", "drop", "reject")

# A word boundary is only used when it leaves the piece at least this full.
_MIN_FILL_NUMERATOR = 7
_MIN_FILL_DENOMINATOR = 10

_WHITESPACE = " \t\n\r\f"

# Warning kinds
PARSE_FAILED = "parse_failed"
EMPTY_DOCUMENT = "empty_document"
OVERSIZED_ELEMENT = "oversized_element"
WRAPPER_OVERHEAD = "wrapper_overhead"
HARD_TEXT_SPLIT = "hard_text_split"
EMPTY_RESULT = "empty_result"

# A tag opener left open at the very end of the markup, or a lone "<".
_UNTERMINATED_TAG = re.compile(r"<(?:[!/?A-Za-z][^<>]*)?\Z")


@dataclass(frozen=True)
class SplitWarning:
    """A diagnostic raised while splitting a body."""

    kind: str
    detail: str
    size: Optional[int] = None
    limit: Optional[int] = None

    def __str__(self) -> str:
        if self.size is not None and self.limit is not None:
            return f"{self.kind}: {self.detail} ({self.size} > {self.limit} chars)"
        return f"{self.kind}: {self.detail}"


class OversizedFragmentError(Exception):
    """Raised under the ``reject`` policy when an atomic element exceeds the budget."""

    def __init__(self, detail: str, size: int, limit: int) -> None:
        super().__init__(f"{detail} ({size} > {limit} chars)")
        self.size = size
        self.limit = limit


WarningSink = Callable[[SplitWarning], None]


def _log_warning(warning: SplitWarning) -> None:
    logger.warning("%s", warning)


###############################################################################
# Tree helpers
###############################################################################

def clone_node(node: Node) -> Node:
    """Return a structurally independent deep copy of ``node``."""
    # bs4 implements __copy__ as a recursive copy detached from any tree.
    return copy.copy(node)


def _empty_clone(tag: Tag) -> Tag:
    shell = clone_node(tag)
    shell.clear()
    return shell


def _serialize(node: Node) -> str:
    if isinstance(node, NavigableString):
        return node.output_ready()
    return str(node)


def _size(node: Node) -> int:
    return len(_serialize(node))


def _text_size(text: str) -> int:
    return len(NavigableString(text).output_ready())


def _is_plain_text(node: Node) -> bool:
    # Comments, CDATA, doctypes etc. are NavigableString subclasses and stay atomic.
    return type(node) is NavigableString


def _describe(node: Node) -> str:
    if isinstance(node, Tag):
        return f"<{node.name}>"
    return type(node).__name__


###############################################################################
# Text splitting
###############################################################################

def _longest_fitting_prefix(text: str, budget: int, measure: Callable[[str], int]) -> int:
    """Length of the longest prefix of at most ``budget`` characters that measures within ``budget``."""
    hi = min(len(text), budget)
    if measure(text[:hi]) <= budget:
        return hi
    lo = 0
    # measure(text[:lo]) fits, measure(text[:hi]) does not
    while lo < hi - 1:
        mid = (lo + hi) // 2
        if measure(text[:mid]) <= budget:
            lo = mid
        else:
            hi = mid
    return max(lo, 1)


def split_text(text: str, budget: int, measure: Callable[[str], int] = len) -> Tuple[List[str], bool]:
    """
    Cut ``text`` into pieces whose measured size is at most ``budget``.

    ``measure`` gives the size a piece takes once serialized; it defaults
    to ``len`` and is the escaped length when the text goes back into
    markup.  Within each window that fits the budget the cut goes after
    the last whitespace character, provided the text before it fills at
    least 70% of the budget; otherwise the window is cut at its end.
    Joining the pieces gives back ``text`` unchanged.

    :return: The pieces and whether any cut fell outside a word boundary.
    """
    if budget < 1:
        raise ValueError("budget must be a positive integer")
    if measure(text) <= budget:
        return [text], False

    pieces: List[str] = []
    hard_split = False
    remaining = text
    while measure(remaining) > budget:
        window = remaining[:_longest_fitting_prefix(remaining, budget, measure)]
        cut = max(window.rfind(ch) for ch in _WHITESPACE)
        if cut >= 0 and measure(window[:cut]) * _MIN_FILL_DENOMINATOR >= budget * _MIN_FILL_NUMERATOR:
            end = cut + 1
        else:
            end = len(window)
            hard_split = True
        pieces.append(remaining[:end])
        remaining = remaining[end:]
    if remaining:
        pieces.append(remaining)
    return pieces, hard_split


###############################################################################
# Recursive decomposition
###############################################################################

class _Splitter:
    """Per-call state: the warning sink and the oversize policy."""

    def __init__(self, max_chars: int, on_warning: WarningSink, oversize_policy: str) -> None:
        self.max_chars = max_chars
        self.on_warning = on_warning
        self.oversize_policy = oversize_policy

    def warn(self, kind: str, detail: str, size: Optional[int] = None, limit: Optional[int] = None) -> None:
        self.on_warning(SplitWarning(kind, detail, size, limit))

    def split_root(self, nodes: List[Node]) -> List[str]:
        fragments: List[str] = []
        group: List[Node] = []
        group_size = 0

        def flush() -> None:
            nonlocal group, group_size
            if group:
                fragments.append("".join(_serialize(n) for n in group))
            group = []
            group_size = 0

        for node in nodes:
            size = _size(node)
            if size > self.max_chars:
                flush()
                fragments.extend(_serialize(part) for part in self.decompose(node, self.max_chars))
                continue
            if group and group_size + size > self.max_chars:
                flush()
            group.append(clone_node(node))
            group_size += size
        flush()
        return fragments

    def decompose(self, node: Node, budget: int) -> List[Node]:
        """Break an over-budget node into root-ready pieces, each a single node."""
        if isinstance(node, NavigableString):
            if _is_plain_text(node):
                return self.split_string(node, budget)
            return self.atomic(node, budget)
        if not node.contents:
            return self.atomic(node, budget)
        return self.split_element(node, budget)

    def atomic(self, node: Node, budget: int) -> List[Node]:
        size = _size(node)
        detail = f"{_describe(node)} cannot be split further"
        if self.oversize_policy == "reject":
            raise OversizedFragmentError(detail, size, budget)
        if self.oversize_policy == "drop":
            self.warn(OVERSIZED_ELEMENT, f"{detail}; dropped", size, budget)
            return []
        self.warn(OVERSIZED_ELEMENT, f"{detail}; emitted over budget", size, budget)
        return [clone_node(node)]

    def split_string(self, node: NavigableString, budget: int) -> List[Node]:
        pieces, hard_split = split_text(str(node), budget, measure=_text_size)
        if hard_split:
            size = _size(node)
            self.warn(HARD_TEXT_SPLIT, f"no word boundary for text of {size} chars", size, budget)
        return [NavigableString(piece) for piece in pieces]

    def split_element(self, tag: Tag, budget: int) -> List[Node]:
        overhead = _size(_empty_clone(tag))
        inner = budget - overhead
        if inner < 1:
            self.warn(WRAPPER_OVERHEAD, f"tags of <{tag.name}> alone use {overhead} chars", overhead, budget)
            return self.atomic(tag, budget)

        wrappers: List[Node] = []

        def wrap(children: List[Node]) -> None:
            shell = _empty_clone(tag)
            if wrappers:
                for attr in IDENTIFIER_ATTRIBUTES:
                    if attr in shell.attrs:
                        del shell[attr]
            for child in children:
                shell.append(child)
            wrappers.append(shell)

        group: List[Node] = []
        group_size = 0
        for child in tag.contents:
            size = _size(child)
            if size > inner:
                if group:
                    wrap(group)
                group, group_size = [], 0
                for part in self.decompose(child, inner):
                    wrap([part])
                continue
            if group and group_size + size > inner:
                wrap(group)
                group, group_size = [], 0
            group.append(clone_node(child))
            group_size += size
        if group:
            wrap(group)
        return wrappers


###############################################################################
# Entry point
###############################################################################

def _parse(html: str) -> BeautifulSoup:
    # html.parser would turn a dangling "<" into text instead of failing.
    if _UNTERMINATED_TAG.search(html):
        raise ParserRejectedMarkup("unterminated tag at the end of the markup")
    return BeautifulSoup(html, "html.parser")


def split_html(
    html: str,
    max_chars: int,
    *,
    on_warning: Optional[WarningSink] = None,
    oversize_policy: str = "pass",
) -> List[str]:
    """
    Split ``html`` into well-formed fragments of at most ``max_chars`` characters.

    :param html: The article body.
    :param max_chars: Character budget per fragment.
    :param on_warning: Called with a :class:`SplitWarning` for every
        recovered problem.  Defaults to logging them.
    :param oversize_policy: What to do with a childless element that is
        larger than the budget on its own: ``"pass"`` emits it anyway,
        ``"drop"`` leaves it out, ``"reject"`` raises
        :class:`OversizedFragmentError`.  If dropping leaves nothing at
        all, the original markup is returned whole (oversized element
        included) and an ``empty_result`` warning is raised.
    :return: The fragments, in document order.  Never empty.
    """
    if isinstance(max_chars, bool) or not isinstance(max_chars, int) or max_chars < 1:
        raise ValueError(f"max_chars must be a positive integer, got {max_chars!r}")
    if oversize_policy not in OVERSIZE_POLICIES:
        raise ValueError(f"Unknown oversize policy {oversize_policy!r}; expected one of {OVERSIZE_POLICIES}")
    if not html or len(html) <= max_chars:
        return [html]

    sink = on_warning or _log_warning
    try:
        soup = _parse(html)
    except (ParserRejectedMarkup, AssertionError, ValueError) as e:
        sink(SplitWarning(PARSE_FAILED, f"markup could not be parsed: {e}"))
        return [html]

    container = soup.body if soup.body else soup
    if container is None or not container.contents:
        sink(SplitWarning(EMPTY_DOCUMENT, "no content found to split"))
        return [html]

    splitter = _Splitter(max_chars, sink, oversize_policy)
    fragments = splitter.split_root(list(container.contents))
    if not fragments:
        sink(SplitWarning(EMPTY_RESULT, "nothing left after splitting; returning the original markup"))
        return [html]
    return fragments
