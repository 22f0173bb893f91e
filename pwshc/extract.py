"""Locate ``<script type="pwsh">`` blocks in an HTML page."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

__all__ = ["ScriptBlock", "extract_script_blocks", "read_script_blocks", "script_block_pattern"]


@dataclass(frozen=True)
class ScriptBlock:
    """Trimmed body of one script element and its position in the page."""

    text: str
    index: int


def script_block_pattern(script_type: str = "pwsh") -> re.Pattern[str]:
    return re.compile(
        rf'<script\s+type="{re.escape(script_type)}"[^>]*>(?P<code>.*?)</script>',
        flags=re.DOTALL | re.IGNORECASE,
    )


def extract_script_blocks(html: str, script_type: str = "pwsh") -> List[ScriptBlock]:
    """
    Return the non-empty script bodies of ``html`` in document order.

    A script element whose closing tag is missing never matches and is
    skipped; bodies that are empty after trimming are dropped before they
    reach the parser.  ``index`` counts kept blocks only.
    """
    blocks: List[ScriptBlock] = []
    for match in script_block_pattern(script_type).finditer(html):
        code = match.group("code").strip()
        if code:
            blocks.append(ScriptBlock(text=code, index=len(blocks)))
    logger.debug("Found %d %s block(s)", len(blocks), script_type)
    return blocks


def read_script_blocks(path: Union[str, Path], script_type: str = "pwsh") -> List[ScriptBlock]:
    """Read ``path`` and extract its script blocks; a missing file yields none."""
    html_path = Path(path)
    if not html_path.exists():
        logger.warning("%s not found", html_path)
        return []
    html = html_path.read_text(encoding="utf-8-sig")
    return extract_script_blocks(html, script_type)
