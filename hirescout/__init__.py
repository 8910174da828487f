"""
HireScout

Job posting discovery across community, social, search-engine and feed sources,
plus hiring-contact email discovery from company and job pages.
"""

__version__ = "0.3.0"
