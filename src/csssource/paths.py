"""Classification and resolution of `from` values and source-map paths."""

from __future__ import annotations

import os
import re
from enum import Enum
from urllib.parse import urljoin

_URL_RE = re.compile(r"^\w+://")


class PathKind(Enum):
    URL = "url"
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


def classify_path(candidate: str) -> PathKind:
    """Tell a URL, an absolute filesystem path and a relative path apart."""
    if _URL_RE.match(candidate):
        return PathKind.URL
    if os.path.isabs(candidate):
        return PathKind.ABSOLUTE
    return PathKind.RELATIVE


def resolve_path(candidate: str, root: str | None = None) -> str:
    """Resolve a relative path against root (default: the working directory).

    URLs and absolute paths come back verbatim, so resolving an already
    resolved value is a no-op.
    """
    if classify_path(candidate) is not PathKind.RELATIVE:
        return candidate
    if root and classify_path(root) is PathKind.URL:
        return urljoin(root if root.endswith("/") else root + "/", candidate)
    return os.path.abspath(os.path.join(root or os.getcwd(), candidate))
