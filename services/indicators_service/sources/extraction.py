"""\
Извлечение цен PLD из HTML-страницы CCEE.

Разметка страницы не версионируется и может поменяться в любой момент,
поэтому стратегия разбора вынесена в отдельный объект с методом
extract(page, region) -> float | None. Коннектор знает только этот контракт.
"""

import re
from html.parser import HTMLParser
from typing import Optional, Protocol


class PriceExtractor(Protocol):
    def extract(self, page: str, region: str) -> Optional[float]:
        ...


class _VisibleTextParser(HTMLParser):
    """Собирает видимый текст документа, пропуская script/style."""

    SKIP_TAGS = {"script", "style", "noscript", "template"}

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.chunks: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1

    def handle_endtag(self, tag):
        if tag in self.SKIP_TAGS and self._skip_depth > 0:
            self._skip_depth -= 1

    def handle_data(self, data):
        if not self._skip_depth:
            self.chunks.append(data)


def visible_text(html: str) -> str:
    """Возвращает видимый текст HTML-документа одной строкой."""
    parser = _VisibleTextParser()
    parser.feed(html)
    parser.close()
    return " ".join(chunk.strip() for chunk in parser.chunks if chunk.strip())


def parse_decimal(raw: str) -> float:
    """'123,45' / '123.45' -> 123.45"""
    return float(raw.replace(",", "."))


class RegexPriceExtractor:
    """
    Ищет в видимом тексте название региона, за которым в пределах window
    символов идёт число вида 99,99 / 999.99. Берётся первое совпадение.

    Видимый текст последней страницы запоминается, чтобы не разбирать
    один и тот же HTML заново для каждого из четырёх регионов.
    """

    def __init__(self, window: int = 100) -> None:
        self.window = window
        self._last_page: Optional[str] = None
        self._last_text = ""

    def text_of(self, page: str) -> str:
        if page != self._last_page:
            self._last_text = visible_text(page)
            self._last_page = page
        return self._last_text

    def pattern_for(self, region: str) -> re.Pattern:
        return re.compile(
            rf"{re.escape(region)}[\s\S]{{0,{self.window}}}?(\d{{2,3}}[,.]\d{{2}})",
            re.IGNORECASE,
        )

    def extract(self, page: str, region: str) -> Optional[float]:
        match = self.pattern_for(region).search(self.text_of(page))
        if not match:
            return None
        return parse_decimal(match.group(1))
