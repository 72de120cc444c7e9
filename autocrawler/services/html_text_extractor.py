import logging
import re
from typing import Callable, List, Optional, Protocol
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Script, Stylesheet, Tag, TemplateString

from autocrawler.domain.extracted_page import ExtractedPage

logger = logging.getLogger(__name__)

# Conservative removal: only structure that is reliably not article content.
NOISE_TAGS = frozenset({
    'script', 'style', 'noscript', 'iframe', 'svg',  # Code, styling, embeds
    'nav', 'footer', 'header', 'aside',              # Page chrome
    'form', 'button', 'input',                       # Interactive elements
})
NOISE_CLASSES = frozenset({
    'ad', 'ads', 'advertisement',
    'menu', 'navigation', 'sidebar', 'widget',
    'cookie-consent',
    'social-share', 'share-buttons',
    'related-posts', 'comments',
    'hidden',
})
NOISE_IDS = frozenset({'cookie-banner', 'comments'})

HEADING_TAGS = frozenset({'h1', 'h2', 'h3'})
CELL_TAGS = frozenset({'td', 'th'})
BLOCK_TAGS = frozenset({'div', 'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li', 'article', 'section', 'tr'})
# Elements that start a new line when the whole body is rendered as text.
LINE_BREAK_TAGS = BLOCK_TAGS | {'body', 'main', 'ul', 'ol', 'table', 'blockquote', 'pre'}
HEAD_TAGS = ('head', 'title')

# Below this the structured walk most likely missed the content.
MIN_STRUCTURED_TEXT_LENGTH = 100

# Strings that never render as page text.
_SKIPPED_STRINGS = (PreformattedString, Script, Stylesheet, TemplateString)


class TextExtractor(Protocol):
    def extract(self, document: Optional[str], source_url: str) -> ExtractedPage: ...


def _is_noise(tag: Tag) -> bool:
    if tag.name in NOISE_TAGS:
        return True
    classes = tag.get('class') or []
    if any(c in NOISE_CLASSES for c in classes):
        return True
    if tag.get('id') in NOISE_IDS:
        return True
    if tag.has_attr('hidden'):
        return True
    return tag.get('aria-hidden') == 'true'


def _origin(url: str) -> Optional[str]:
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}/"


def normalize_whitespace(value: str) -> str:
    return re.sub(r'\s+', ' ', value).strip()


_LINE_END = object()


def _render_text(root: Tag) -> str:
    """Render text the way a browser lays it out: inline runs stay on one
    line, block elements and <br> start a new one, table cells are spaced."""
    parts: List[str] = []
    stack = list(reversed(root.contents))
    while stack:
        node = stack.pop()
        if node is _LINE_END:
            parts.append('\n')
        elif isinstance(node, Tag):
            name = (node.name or '').lower()
            if name in HEAD_TAGS:
                continue
            if name == 'br':
                parts.append('\n')
                continue
            if name in LINE_BREAK_TAGS:
                parts.append('\n')
                stack.append(_LINE_END)
            elif name in CELL_TAGS:
                parts.append(' ')
            stack.extend(reversed(node.contents))
        elif isinstance(node, NavigableString) and not isinstance(node, _SKIPPED_STRINGS):
            # source line breaks inside inline text are just whitespace
            parts.append(re.sub(r'\s+', ' ', str(node)))
    return ''.join(parts)


class HtmlTextExtractor:
    """Turns raw HTML into readable text, a title and absolute outbound links.

    Extraction never raises: odd markup degrades to less text rather than an
    error, and a parser failure yields an empty page.
    """

    def __init__(
        self,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract(self, document: Optional[str], source_url: str) -> ExtractedPage:
        if not document:
            return ExtractedPage(text="", title="", links=[])

        try:
            soup = self._soup_factory(document)
            self._remove_noise(soup)
            title = self._extract_title(soup)
            text = self._extract_text(soup)
            links = self._extract_links(soup, source_url)
            return ExtractedPage(text=text, title=title, links=links)
        except Exception:
            logger.exception("Error extracting content from %s", source_url)
            return ExtractedPage(text="", title="", links=[])

    def _remove_noise(self, soup: BeautifulSoup) -> None:
        for element in soup.find_all(_is_noise):
            # nested matches go away with their ancestor
            if not element.decomposed:
                element.decompose()

    def _extract_title(self, soup: BeautifulSoup) -> str:
        title = ''
        title_tag = soup.find('title')
        if title_tag is not None:
            title = title_tag.get_text()
        if not title.strip():
            h1 = soup.find('h1')
            if h1 is not None:
                title = h1.get_text(separator=' ')
        return normalize_whitespace(title)

    def _find_main_container(self, soup: BeautifulSoup):
        candidates = (
            lambda: soup.find('article'),
            lambda: soup.find(attrs={'role': 'main'}),
            lambda: soup.find(id='content'),
            lambda: soup.find(class_='content'),
            lambda: soup.find(class_='post-content'),
            lambda: soup.find(class_='entry-content'),
            lambda: soup.find(class_='main'),
            lambda: soup.body,
        )
        for find in candidates:
            found = find()
            if found is not None:
                return found
        # html.parser does not synthesize <body> for fragments
        return soup

    def _extract_text(self, soup: BeautifulSoup) -> str:
        container = self._find_main_container(soup)
        whole_document = container is soup

        pieces: List[str] = []
        for node in container.find_all(string=True):
            if not isinstance(node, NavigableString) or isinstance(node, _SKIPPED_STRINGS):
                continue
            text = node.strip()
            if not text:
                continue
            parent = node.parent
            if parent is None:
                continue
            if whole_document and node.find_parent(HEAD_TAGS) is not None:
                continue

            tag_name = (parent.name or '').lower()
            if tag_name in HEADING_TAGS:
                pieces.append(f"\n\n### {text}\n")
            elif tag_name == 'li':
                pieces.append(f"\n- {text}")
            elif tag_name in CELL_TAGS:
                pieces.append(f" {text} |")
            elif tag_name in BLOCK_TAGS:
                pieces.append(f"\n{text}\n")
            else:
                pieces.append(f" {text} ")

        content = ''.join(pieces)
        content = re.sub(r' +', ' ', content)
        content = re.sub(r'\n\s+', '\n', content)
        content = re.sub(r'\n+', '\n\n', content)
        content = content.strip()

        if len(content) < MIN_STRUCTURED_TEXT_LENGTH:
            content = self._fallback_text(soup)
        return content

    def _fallback_text(self, soup: BeautifulSoup) -> str:
        body = soup.body if soup.body is not None else soup
        rendered = _render_text(body)
        lines = [normalize_whitespace(line) for line in rendered.split('\n')]
        return '\n\n'.join(line for line in lines if line)

    def _extract_links(self, soup: BeautifulSoup, source_url: str) -> List[str]:
        base = _origin(source_url)
        if base is None:
            logger.debug("Cannot resolve links against invalid source URL %r", source_url)
            return []

        links: List[str] = []
        for a in soup.find_all('a', href=True):
            href = a.get('href')
            if not href:
                continue
            try:
                absolute = urljoin(base, href.strip())
            except ValueError:
                continue
            if absolute.startswith('http'):
                links.append(absolute)
        return links
