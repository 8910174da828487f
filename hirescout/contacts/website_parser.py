"""
Company website analysis for contact discovery.

Fetches a page with HttpFetcher and reads it with BeautifulSoup: title and
meta description, addresses on the page, same-site contact/team/about links,
social profiles, whether a contact form exists and a few company facts.
Fetch failures propagate as ScrapingError subclasses; the caller decides
whether a failed page is fatal.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..core.errors import ParsingError
from ..core.models import EmailContact, EmailSourceType
from ..utils.http import HttpFetcher
from .email_extractor import EmailExtractor

logger = logging.getLogger(__name__)

HOMEPAGE_CONFIDENCE = 0.8
CONTACT_PAGE_CONFIDENCE = 0.9

CONTACT_KEYWORDS = frozenset({"contact", "contacts", "touch", "reach", "careers", "jobs", "hiring", "hr", "recruiting"})
TEAM_KEYWORDS = frozenset({"team", "people", "staff", "leadership", "management", "executives", "founders"})
ABOUT_KEYWORDS = frozenset({"about", "company", "story", "mission", "vision"})

SOCIAL_DOMAINS = (
    "linkedin.com",
    "twitter.com",
    "x.com",
    "facebook.com",
    "instagram.com",
    "youtube.com",
    "github.com",
    "medium.com",
    "tiktok.com",
)

COMMON_CONTACT_PATHS = ["/contact", "/contact-us", "/careers", "/jobs"]

FORM_INDICATORS = ("email", "message", "subject", "contact", "inquiry", "get-in-touch", "reach-out")

INDUSTRIES = [
    "fintech", "healthcare", "education", "e-commerce", "retail", "manufacturing", "consulting",
    "marketing", "insurance", "real estate", "automotive", "energy", "software", "technology", "finance",
]

SIZE_PATTERNS = [
    re.compile(r"\d[\d,]*\+?\s*employees", re.IGNORECASE),
    re.compile(r"team\s+of\s+\d+", re.IGNORECASE),
    re.compile(r"(?:startup|small|medium|large|enterprise)\s+company", re.IGNORECASE),
]

_TITLE_SUFFIX_RE = re.compile(r"\s*[-|:]\s*(?:Home|Homepage|Welcome|Official Site).*$", re.IGNORECASE)
_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


@dataclass
class WebsiteAnalysis:
    url: str
    title: str = ""
    description: str = ""
    emails: List[EmailContact] = field(default_factory=list)
    contact_links: List[str] = field(default_factory=list)
    social_links: List[str] = field(default_factory=list)
    team_page_links: List[str] = field(default_factory=list)
    about_page_links: List[str] = field(default_factory=list)
    has_contact_form: bool = False
    company_info: Dict[str, str] = field(default_factory=dict)


def normalize_url(url: str) -> str:
    """
    Add a scheme when missing and check there is a host.

    Raises:
        ParsingError: Nothing usable as a URL
    """
    url = (url or "").strip()
    if not url:
        raise ParsingError("Empty URL")
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    parsed = urlparse(url)
    if not parsed.netloc or " " in parsed.netloc:
        raise ParsingError("Invalid URL", url=url)
    return url


def site_host(url: str) -> str:
    """Lowercased host without a leading www."""
    host = urlparse(url).netloc.lower()
    return host[4:] if host.startswith("www.") else host


class WebsiteParser:
    """Reads company pages through a shared HttpFetcher."""

    def __init__(self, fetcher: HttpFetcher, extractor: Optional[EmailExtractor] = None):
        self.fetcher = fetcher
        self.extractor = extractor or EmailExtractor()

    def parse_website(self, url: str) -> WebsiteAnalysis:
        """
        Fetch and analyze a company homepage.

        Raises:
            NetworkError, RateLimitError, BlockedError: Fetch failed
            ParsingError: URL is unusable
        """
        url = normalize_url(url)
        html = self.fetcher.get_text(url, headers={"Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"})
        soup = BeautifulSoup(html, "html.parser")

        title = soup.title.get_text(strip=True) if soup.title else ""
        description = self._meta_content(soup, name="description") or self._meta_content(
            soup, prop="og:description"
        )
        links = self._page_links(soup, url)

        analysis = WebsiteAnalysis(
            url=url,
            title=title,
            description=description or "",
            emails=self.extractor.extract_from_html(
                html, EmailSourceType.WEBPAGE, url, page_confidence=HOMEPAGE_CONFIDENCE
            ),
            contact_links=self._matching_links(links, CONTACT_KEYWORDS, url),
            social_links=self._social_links(links),
            team_page_links=self._matching_links(links, TEAM_KEYWORDS, url),
            about_page_links=self._matching_links(links, ABOUT_KEYWORDS, url),
            has_contact_form=self._has_contact_form(soup),
            company_info=self._company_info(soup, title),
        )
        logger.info(
            f"🌐 Analyzed {url}: {len(analysis.emails)} emails, {len(analysis.contact_links)} contact links"
        )
        return analysis

    def extract_emails_from_page(
        self,
        url: str,
        source_type: EmailSourceType = EmailSourceType.CONTACT_PAGE,
        confidence: float = CONTACT_PAGE_CONFIDENCE,
    ) -> List[EmailContact]:
        """Fetch one page and return the addresses on it, credited to ``source_type``."""
        url = normalize_url(url)
        html = self.fetcher.get_text(url)
        return self.extractor.extract_from_html(html, source_type, url, page_confidence=confidence)

    def find_contact_pages(self, base_url: str) -> List[str]:
        """Contact links on the homepage plus common contact paths that answer a HEAD probe."""
        analysis = self.parse_website(base_url)
        pages = list(analysis.contact_links)
        for candidate in self.probe_contact_paths(analysis.url):
            if candidate not in pages:
                pages.append(candidate)
        return pages

    def probe_contact_paths(self, base_url: str, paths: Iterable[str] = COMMON_CONTACT_PATHS) -> List[str]:
        parsed = urlparse(normalize_url(base_url))
        origin = f"{parsed.scheme}://{parsed.netloc}"
        return [f"{origin}{path}" for path in paths if self.fetcher.exists(f"{origin}{path}")]

    # ------------------------------------------------------------------
    # Page reading
    # ------------------------------------------------------------------

    @staticmethod
    def _meta_content(soup: BeautifulSoup, name: Optional[str] = None, prop: Optional[str] = None) -> str:
        tag = soup.find("meta", attrs={"name": name}) if name else soup.find("meta", attrs={"property": prop})
        if tag is None or not tag.get("content"):
            return ""
        return tag["content"].strip()

    @staticmethod
    def _page_links(soup: BeautifulSoup, base_url: str) -> List[Dict[str, str]]:
        links = []
        for anchor in soup.select("a[href]"):
            href = anchor["href"].strip()
            if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
                continue
            links.append({"url": urljoin(base_url, href).split("#")[0], "text": anchor.get_text(" ", strip=True)})
        return links

    @staticmethod
    def _matching_links(links: List[Dict[str, str]], keywords: frozenset, base_url: str) -> List[str]:
        """Same-site links whose path or anchor text contains one of ``keywords`` as a word."""
        host = site_host(base_url)
        matches: List[str] = []
        for link in links:
            if site_host(link["url"]) != host:
                continue
            tokens = set(_TOKEN_SPLIT_RE.split(urlparse(link["url"]).path.lower()))
            tokens.update(_TOKEN_SPLIT_RE.split(link["text"].lower()))
            if tokens & keywords and link["url"] not in matches:
                matches.append(link["url"])
        return matches

    @staticmethod
    def _social_links(links: List[Dict[str, str]]) -> List[str]:
        matches: List[str] = []
        for link in links:
            host = site_host(link["url"])
            if any(host == domain or host.endswith(f".{domain}") for domain in SOCIAL_DOMAINS):
                if link["url"] not in matches:
                    matches.append(link["url"])
        return matches

    @staticmethod
    def _has_contact_form(soup: BeautifulSoup) -> bool:
        for form in soup.find_all("form"):
            markup = str(form).lower()
            if any(indicator in markup for indicator in FORM_INDICATORS):
                return True
        return False

    @staticmethod
    def _company_info(soup: BeautifulSoup, title: str) -> Dict[str, str]:
        info: Dict[str, str] = {}

        schema_name = soup.select_one('[itemtype*="Organization"] [itemprop="name"]')
        site_name = soup.find("meta", attrs={"property": "og:site_name"})
        if schema_name and schema_name.get_text(strip=True):
            info["name"] = schema_name.get_text(strip=True)
        elif site_name is not None and site_name.get("content"):
            info["name"] = site_name["content"].strip()
        else:
            stripped = _TITLE_SUFFIX_RE.sub("", title).strip()
            if len(stripped) > 2:
                info["name"] = stripped

        body_text = soup.body.get_text(" ", strip=True) if soup.body else soup.get_text(" ", strip=True)
        lowered = body_text.lower()
        for industry in INDUSTRIES:
            if re.search(rf"\b{re.escape(industry)}\b", lowered):
                info["industry"] = industry.capitalize()
                break

        for pattern in SIZE_PATTERNS:
            match = pattern.search(body_text)
            if match:
                info["size"] = match.group(0)
                break

        for selector in ('[itemtype*="PostalAddress"]', ".address", '[class*="address"]', '[class*="location"]'):
            element = soup.select_one(selector)
            if element is not None:
                text = element.get_text(" ", strip=True)
                if len(text) > 10:
                    info["location"] = text
                    break

        return info
