"""
Hiring-contact email discovery.

EmailDiscoveryService runs the pipeline; EmailExtractor and WebsiteParser are
usable on their own for one-off text or page analysis.
"""

from .discovery_service import EmailDiscoveryService, merge_contacts
from .email_extractor import EmailExtractor
from .website_parser import WebsiteAnalysis, WebsiteParser

__all__ = [
    "EmailDiscoveryService",
    "EmailExtractor",
    "WebsiteAnalysis",
    "WebsiteParser",
    "merge_contacts",
]
