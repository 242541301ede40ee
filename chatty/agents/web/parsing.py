"""
HTML helpers for the DuckDuckGo results page.

Scraping is best effort: markup changes upstream simply produce fewer (or
zero) results.
"""

from typing import Dict, List
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup


def clean_text(fragment: str) -> str:
    """Strip tags, decode entities and collapse whitespace."""
    if not fragment:
        return ""
    text = BeautifulSoup(fragment, "html.parser").get_text(" ")
    return " ".join(text.split())


def resolve_result_url(href: str) -> str:
    """Unwrap DuckDuckGo redirect links (``//duckduckgo.com/l/?uddg=...``)."""
    if not href:
        return ""
    if href.startswith("//"):
        href = "https:" + href

    parsed = urlparse(href)
    if parsed.netloc.endswith("duckduckgo.com") and parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target:
            return target[0]
    return href


def parse_duckduckgo_html(html: str, max_results: int) -> List[Dict[str, str]]:
    """
    Extract ``{title, url, snippet, source}`` records from a results page.

    Args:
        html: Raw HTML of html.duckduckgo.com/html
        max_results: Maximum number of records to return

    Returns:
        Parsed results, at most ``max_results``
    """
    soup = BeautifulSoup(html, "html.parser")
    results: List[Dict[str, str]] = []

    for block in soup.find_all("div", class_="result"):
        if len(results) >= max_results:
            break

        title_elem = block.find("a", class_="result__a")
        if title_elem is None:
            continue

        url = resolve_result_url(title_elem.get("href", ""))
        title = " ".join(title_elem.get_text(" ").split())

        snippet_elem = block.find("a", class_="result__snippet") or block.find("span", class_="result__snippet")
        snippet = " ".join(snippet_elem.get_text(" ").split()) if snippet_elem is not None else ""

        if title and url:
            results.append({
                "title": title,
                "url": url,
                "snippet": snippet or "No description available",
                "source": "web",
            })

    return results
