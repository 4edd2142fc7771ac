from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path
from typing import Tuple

log = logging.getLogger("secarweather.publish")


DEFAULT_PLACEHOLDER_ID = "reportOutput"
DEFAULT_PLACEHOLDER_CLASS = "report-text"

_DIV_TAG_RE = re.compile(r"<div\b[^>]*>|</div\s*>", re.IGNORECASE)


class TemplateError(RuntimeError):
    pass


def _marker_re(placeholder_id: str, placeholder_class: str) -> re.Pattern[str]:
    return re.compile(
        rf'<div\s+id="{re.escape(placeholder_id)}"\s+class="{re.escape(placeholder_class)}"\s*>',
        re.IGNORECASE,
    )


def _find_block(
    html: str,
    placeholder_id: str,
    placeholder_class: str,
) -> Tuple[int, int]:
    """
    Locate the placeholder's inner content as (start, end) offsets.

    The closing tag is found by counting nested divs, so a previously rendered
    report (full of divs) is replaced as a whole.
    """
    markers = list(_marker_re(placeholder_id, placeholder_class).finditer(html))
    if not markers:
        raise TemplateError(f'Placeholder <div id="{placeholder_id}"> not found in template')
    if len(markers) > 1:
        raise TemplateError(f'Placeholder <div id="{placeholder_id}"> appears {len(markers)} times; expected exactly one')

    start = markers[0].end()
    depth = 1
    for m in _DIV_TAG_RE.finditer(html, start):
        if m.group(0).startswith("</"):
            depth -= 1
            if depth == 0:
                return start, m.start()
        else:
            depth += 1

    raise TemplateError(f'Placeholder <div id="{placeholder_id}"> is never closed')


def extract_report_block(
    html: str,
    placeholder_id: str = DEFAULT_PLACEHOLDER_ID,
    placeholder_class: str = DEFAULT_PLACEHOLDER_CLASS,
) -> str:
    start, end = _find_block(html, placeholder_id, placeholder_class)
    return html[start:end]


def replace_report_block(
    html: str,
    fragment: str,
    placeholder_id: str = DEFAULT_PLACEHOLDER_ID,
    placeholder_class: str = DEFAULT_PLACEHOLDER_CLASS,
) -> str:
    start, end = _find_block(html, placeholder_id, placeholder_class)
    return html[:start] + fragment + html[end:]


def read_template(path: str | Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def atomic_write_text(path: str | Path, data: str) -> None:
    """
    Write text atomically: temp file beside the target, fsync, rename over it.
    The original file is untouched if anything fails before the rename.
    """
    p = Path(path)
    tmp = p.with_name(f"{p.name}.tmp.{os.getpid()}.{int(time.time()*1000)}")
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, p)
    finally:
        if tmp.exists():
            tmp.unlink()


def publish(
    path: str | Path,
    fragment: str,
    placeholder_id: str = DEFAULT_PLACEHOLDER_ID,
    placeholder_class: str = DEFAULT_PLACEHOLDER_CLASS,
) -> bool:
    """
    Replace the report block inside the HTML file at ``path``.

    Returns True when the file content changed.
    """
    original = read_template(path)
    updated = replace_report_block(original, fragment, placeholder_id, placeholder_class)
    if updated == original:
        log.info("Report block unchanged: %s", path)
        return False

    atomic_write_text(path, updated)
    log.info("Report block updated: %s (%d bytes)", path, len(updated))
    return True
