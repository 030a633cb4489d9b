import re
from html import escape
from typing import List, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from debatecards.middleware.security import Security
from debatecards.schemas.cards import ClipboardPayload, DebateCard

# inline styles survive a paste into Google Docs/Word, classes do not
EMPHASIS_STYLES = {
    "mark": "background-color:#ffff00",
    "b": "font-weight:700",
    "strong": "font-weight:700",
    "u": "text-decoration:underline",
}

TAGLINE_STYLE = "font-weight:700;font-size:13pt;margin:0 0 4pt 0"
CITATION_STYLE = "font-size:10pt;margin:0 0 4pt 0"
EVIDENCE_STYLE = "font-size:11pt;margin:0 0 4pt 0"
LINK_STYLE = "font-size:9pt;margin:0"

# *Publication Name.* in citations
_ITALIC_RE = re.compile(r'\*([^*\n]+)\*')


class ClipboardFormatter:
    """Builds the one-click copy payload for a debate card.

    Evidence highlight markup (<mark>, <b>/<strong>, <u>) becomes flat runs of
    <span style="..."> carrying the accumulated styles of every enclosing emphasis tag.
    Unknown tags are dropped but their text kept. The plain-text variant carries the
    same blocks with all markup removed.
    """

    def format_card(self, card: DebateCard) -> ClipboardPayload:
        evidence_html, evidence_text = self.render_evidence(card.evidence)

        html_blocks: List[str] = []
        text_blocks: List[str] = []

        if card.tagline.strip():
            tagline = self._plain(card.tagline)
            html_blocks.append(f'<p style="{TAGLINE_STYLE}">{escape(tagline, quote=False)}</p>')
            text_blocks.append(tagline)

        if card.citation.strip():
            citation = self._plain(card.citation)
            html_blocks.append(f'<p style="{CITATION_STYLE}">{self._citation_html(citation)}</p>')
            text_blocks.append(_ITALIC_RE.sub(r'\1', citation))

        if evidence_text.strip():
            html_blocks.append(f'<p style="{EVIDENCE_STYLE}">{evidence_html}</p>')
            text_blocks.append(evidence_text.strip())

        link = card.link.strip()
        if link:
            shown = escape(link, quote=True)
            if Security().is_valid_url(link):
                html_blocks.append(f'<p style="{LINK_STYLE}"><a href="{shown}">{shown}</a></p>')
            else:
                # only http(s) links become clickable
                html_blocks.append(f'<p style="{LINK_STYLE}">{shown}</p>')
            text_blocks.append(link)

        return ClipboardPayload(
            html='<meta charset="utf-8"><div>' + "".join(html_blocks) + "</div>",
            text="\n\n".join(text_blocks),
        )

    def render_evidence(self, evidence: str) -> Tuple[str, str]:
        """Return (html, text) for an evidence string with emphasis markup."""
        soup = BeautifulSoup(evidence or "", "html.parser")
        html_parts: List[str] = []
        text_parts: List[str] = []
        self._walk(soup, (), html_parts, text_parts)
        return "".join(html_parts), "".join(text_parts)

    def _walk(self, node, styles: Tuple[str, ...], html_parts: List[str], text_parts: List[str]) -> None:
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                text = str(child)
                if not text:
                    continue
                text_parts.append(text)
                escaped = escape(text, quote=False)
                if styles:
                    html_parts.append(f'<span style="{";".join(styles)}">{escaped}</span>')
                else:
                    html_parts.append(escaped)
            elif isinstance(child, Tag):
                name = child.name.lower()
                if name == "br":
                    html_parts.append("<br>")
                    text_parts.append("\n")
                    continue
                style = EMPHASIS_STYLES.get(name)
                child_styles = styles + (style,) if style and style not in styles else styles
                self._walk(child, child_styles, html_parts, text_parts)

    @staticmethod
    def _plain(value: str) -> str:
        # taglines and citations should be plain text; strip stray markup the model adds
        return BeautifulSoup(value, "html.parser").get_text().strip()

    @staticmethod
    def _citation_html(citation: str) -> str:
        return _ITALIC_RE.sub(r'<i>\1</i>', escape(citation, quote=False))
