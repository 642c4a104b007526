"""
Company name cleanup.

Job boards and chat tools often hand us the company as Markdown, e.g.
``**[Acme Inc](https://acme.com)**``. ``sanitize_company`` reduces that to the
plain name so it reads naturally inside a cover letter.
"""
from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

FALLBACK_COMPANY = "the company"

_BOLD_LINK = re.compile(r"\*\*\[([^\]]+)\]\([^)]+\)\*\*")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_BRACKETS = re.compile(r"[\[\]]")
_PARENS = re.compile(r"\([^)]*\)")


def _strip_markdown(text: str) -> str:
    text = _BOLD_LINK.sub(r"\1", text)
    text = _LINK.sub(r"\1", text)
    text = text.replace("**", "")
    text = _BRACKETS.sub("", text)
    text = _PARENS.sub("", text)
    return text.strip()


def sanitize_company(company: Any) -> str:
    if not company or not isinstance(company, str):
        return FALLBACK_COMPANY

    # Removing brackets/parens can expose a new "**" ("*[*"), so run to a fixpoint.
    sanitized = _strip_markdown(company)
    while True:
        again = _strip_markdown(sanitized)
        if again == sanitized:
            break
        sanitized = again

    if sanitized != company:
        logger.debug(f"Sanitized company: {company!r} -> {sanitized!r}")
    return sanitized or FALLBACK_COMPANY
