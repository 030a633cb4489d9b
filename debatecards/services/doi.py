"""DOI detection inside citation links."""

import re
from typing import Optional
from urllib.parse import unquote

from debatecards.config.settings import settings

# "10." + 4-9 digit registrant + "/" + suffix (Crossref's recommended pattern)
DOI_RE = re.compile(r'10\.\d{4,9}/[-._;()/:A-Z0-9]+', re.IGNORECASE)

_TRAILING_PUNCT = ".,;/"

# publisher landing-page segments that follow the DOI in article URLs
_PUBLISHER_TAIL_RE = re.compile(r'/(?:full|pdf|epdf|pdfdirect|abstract|abs|fulltext|html|references|summary)/?$', re.IGNORECASE)


def extract_doi(url: str) -> Optional[str]:
    """Return the first DOI found in `url` (raw, then percent-decoded) or None."""
    if not url:
        return None
    for candidate in (url, unquote(url)):
        match = DOI_RE.search(candidate)
        if match:
            doi = _strip_publisher_tail(match.group(0).rstrip(_TRAILING_PUNCT))
            if doi:
                return doi
    return None


def doi_url(doi: str, base: Optional[str] = None) -> str:
    base = (base or settings.DOI_RESOLVER_BASE).rstrip('/')
    return f"{base}/{doi}"


def _strip_publisher_tail(doi: str) -> str:
    # e.g. 10.1002/abc.123/full/pdf -> 10.1002/abc.123
    while True:
        stripped = _PUBLISHER_TAIL_RE.sub('', doi)
        # never cut into the registrant prefix itself
        if stripped == doi or '/' not in stripped:
            return doi
        doi = stripped
