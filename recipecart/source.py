"""Recipe source: search results and detail pages scraped from the web."""
import logging
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from . import schemas
from .config import get_settings
from .errors import FetchError

logger = logging.getLogger(__name__)

SEARCH_RESULT_SELECTOR = "a.title"
MATERIALS_SELECTOR = "ul.recipe-materials li"
INSTRUCTIONS_SELECTOR = "ol.recipe-instructions > li"


def create_session() -> requests.Session:
    """Return a session that sends browser-like headers."""
    session = requests.Session()
    session.headers.update({
        'User-Agent': get_settings().user_agent,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
    })
    return session


def _get_html(url, session=None, params=None):
    session = session or create_session()
    try:
        response = session.get(
            url, params=params, timeout=get_settings().request_timeout
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("Fetching %s failed: %s", url, e)
        raise FetchError(f"Could not fetch {url}: {e}") from e
    return response.text


def _texts(soup, selector) -> List[str]:
    texts = (el.get_text().strip() for el in soup.select(selector))
    return [t for t in texts if t]


def parse_search_results(html: str) -> List[schemas.SearchResult]:
    soup = BeautifulSoup(html, 'html.parser')
    results = []
    for anchor in soup.select(SEARCH_RESULT_SELECTOR):
        title = anchor.get_text().strip()
        link = (anchor.get('href') or '').strip()
        if not title or not link:
            continue
        results.append(schemas.SearchResult(title=title, link=link))
    return results


def parse_recipe_details(html: str) -> schemas.RecipeDetails:
    soup = BeautifulSoup(html, 'html.parser')
    return schemas.RecipeDetails(
        materials=_texts(soup, MATERIALS_SELECTOR),
        steps=_texts(soup, INSTRUCTIONS_SELECTOR),
    )


def search(term: str, session: Optional[requests.Session] = None) -> List[schemas.SearchResult]:
    """Search the recipe site. No matches gives an empty list."""
    html = _get_html(get_settings().search_url, session=session, params={'s': term})
    results = parse_search_results(html)
    logger.info("Search for %r returned %s result(s)", term, len(results))
    return results


def fetch_details(link: str, session: Optional[requests.Session] = None) -> schemas.RecipeDetails:
    """Fetch a recipe page and pull out its ingredient and step lists."""
    details = parse_recipe_details(_get_html(link, session=session))
    logger.info(
        "Fetched %s: %s material(s), %s step(s)",
        link, len(details.materials), len(details.steps),
    )
    return details
