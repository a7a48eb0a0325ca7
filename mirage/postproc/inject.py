"""Places analytics and ad snippets inside the generated page head."""

from __future__ import annotations

import html as html_lib
import json
from dataclasses import dataclass
from typing import List, Protocol, Sequence

from bs4 import BeautifulSoup, Doctype, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from ..logging import get_logger
from ..models import InjectionConfig, InjectionStrategy

ANALYTICS_TEMPLATE = """<!-- Google Analytics (injected by mirage) -->
<script async src="https://www.googletagmanager.com/gtag/js?id={attr_id}"></script>
<script>
  window.dataLayer = window.dataLayer || [];
  function gtag(){{dataLayer.push(arguments);}}
  gtag('js', new Date());
  gtag('config', {js_id});
</script>"""

ADS_TEMPLATE = """<!-- Google AdSense (injected by mirage) -->
<script async src="https://pagead2.googlesyndication.com/pagead/js/adsbygoogle.js?client={attr_id}" crossorigin="anonymous"></script>"""

# Minimal entity handling and HTML-style void tags keep the re-serialised page close to the input.
_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)

logger = get_logger("postproc.inject")


@dataclass(frozen=True)
class Snippet:
    """A fixed block of third-party head markup."""

    name: str
    markup: str


def build_snippets(config: InjectionConfig) -> List[Snippet]:
    """Render snippets for the configured identifiers, analytics first."""
    snippets: List[Snippet] = []
    if config.analytics_id:
        snippets.append(
            Snippet(
                name="analytics",
                markup=ANALYTICS_TEMPLATE.format(
                    attr_id=html_lib.escape(config.analytics_id, quote=True),
                    js_id=json.dumps(config.analytics_id),
                ),
            )
        )
    if config.ad_client_id:
        snippets.append(
            Snippet(
                name="ads",
                markup=ADS_TEMPLATE.format(
                    attr_id=html_lib.escape(config.ad_client_id, quote=True),
                ),
            )
        )
    return snippets


class HeadVisitor(Protocol):
    """Callback invoked once with the document's head element."""

    def enter_head(self, head: Tag) -> None:
        ...


class SnippetAppender:
    """Appends snippet fragments as trailing children of the head."""

    def __init__(self, snippets: Sequence[Snippet]) -> None:
        self.snippets = list(snippets)

    def enter_head(self, head: Tag) -> None:
        for snippet in self.snippets:
            fragment = BeautifulSoup(snippet.markup, "html.parser")
            for node in list(fragment.contents):
                head.append(node.extract())


def rewrite_head(document: str, visitor: HeadVisitor) -> str:
    """Parse ``document``, hand its head to ``visitor`` and serialise the result.

    A head element is synthesised when the document has none.
    """
    soup = BeautifulSoup(document, "html.parser")
    head = soup.head
    if head is None:
        logger.debug("Generated page has no <head>; synthesising one")
        head = _synthesise_head(soup)
    visitor.enter_head(head)
    return soup.decode(formatter=_FORMATTER)


def _synthesise_head(soup: BeautifulSoup) -> Tag:
    head = soup.new_tag("head")
    if soup.html is not None:
        soup.html.insert(0, head)
        return head
    position = 0
    for index, node in enumerate(soup.contents):
        if isinstance(node, Doctype):
            position = index + 1
    soup.insert(position, head)
    return head


class MarkupInjector:
    """Injects configured snippets using the selected strategy.

    ``STRUCTURAL`` rewrites the parsed document. ``PROMPT`` leaves the page
    untouched because the snippets were already handed to the prompt builder
    (see :meth:`prompt_snippets`).
    """

    def __init__(
        self,
        config: InjectionConfig,
        strategy: InjectionStrategy | str = InjectionStrategy.STRUCTURAL,
    ) -> None:
        self.config = config
        self.strategy = InjectionStrategy(strategy)
        self.snippets = build_snippets(config)

    def prompt_snippets(self) -> List[str]:
        """Snippet markup the prompt must carry for the current strategy."""
        if self.strategy is InjectionStrategy.PROMPT:
            return [snippet.markup for snippet in self.snippets]
        return []

    def inject(self, document: str) -> str:
        if self.strategy is InjectionStrategy.PROMPT or not self.snippets:
            return document
        return rewrite_head(document, SnippetAppender(self.snippets))


def inject(
    document: str,
    config: InjectionConfig,
    strategy: InjectionStrategy | str = InjectionStrategy.STRUCTURAL,
) -> str:
    return MarkupInjector(config, strategy).inject(document)


__all__ = [
    "HeadVisitor",
    "MarkupInjector",
    "Snippet",
    "SnippetAppender",
    "build_snippets",
    "inject",
    "rewrite_head",
]
