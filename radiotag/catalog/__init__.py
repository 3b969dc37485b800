"""
Catalog package
Asynchronous access to station details and upcoming-song lists
"""

from .client import CatalogClient
from .models import Station, UpcomingSong

__all__ = [
    'CatalogClient',
    'Station',
    'UpcomingSong'
]
