"""Request path parsing.

Every artifact URL shares one shape::

    /<version>/<org>/<repo>/<release>/...

Runtime requests (``/1.2.0/carimbo.js``) only carry the leading segment;
bundle requests carry all four. Segments missing from a short path come
back as ``None``; nothing here validates the values.
"""

import re
from dataclasses import dataclass
from typing import Optional

_PATH_PATTERN = re.compile(
    r"^/(?P<version>[^/]+)"
    r"(?:/(?P<org>[^/]+)"
    r"(?:/(?P<repo>[^/]+)"
    r"(?:/(?P<release>[^/]+))?)?)?"
)


@dataclass(frozen=True)
class RequestParams:
    version: Optional[str] = None
    org: Optional[str] = None
    repo: Optional[str] = None
    release: Optional[str] = None


def parse_request_path(path: str) -> RequestParams:
    """Extract the positional fields of ``path``.

    >>> parse_request_path("/1.0.0/acme/widget/2.3.1/bundle.zip").repo
    'widget'
    """
    match = _PATH_PATTERN.match(path)
    if match is None:
        return RequestParams()
    return RequestParams(**match.groupdict())
