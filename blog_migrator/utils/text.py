from __future__ import annotations

import re
from typing import Any, Optional


def rewrite_domains(html: Optional[str], from_domain: str, to_domain: str) -> Optional[str]:
    """Replace every literal occurrence of ``from_domain`` with ``to_domain``.

    Nothing is rewritten unless both domains and the html are non-empty.
    """
    if not from_domain or not to_domain or not html:
        return html
    return html.replace(from_domain, to_domain)


def part_title(base: str, part: int, fmt: str) -> str:
    """Append the part suffix, e.g. ``part_title("Post", 2, " (Part {n})")``."""
    return f"{base}{fmt.replace('{n}', str(part))}"


def external_id_for(article_id: Any, part: Optional[int] = None) -> str:
    """
    Build the external id that links a created article to its source.

    Multi-part articles get a ``:part:<n>`` suffix so each part stays unique.
    """
    base = f"migrated:article:{article_id}"
    if part is None:
        return base
    return f"{base}:part:{part}"


def matches_pattern(text: Optional[str], pattern: Optional[str]) -> bool:
    """
    Case-insensitive wildcard match of the whole ``text``.

    ``*`` matches any run of characters; everything else is literal.  An
    empty pattern matches everything.
    """
    if not pattern:
        return True
    regex = "^" + ".*".join(re.escape(part) for part in pattern.split("*")) + "$"
    return re.match(regex, text or "", flags=re.IGNORECASE | re.DOTALL) is not None
