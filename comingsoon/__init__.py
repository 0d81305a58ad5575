"""Coming Soon - countdown and email signup page

A terminal "coming soon" page: a live countdown to a launch date and an
email capture form backed by a subscription API.
"""

__version__ = '0.1.0'

from .config import SiteConfig, load_config
from .page import ComingSoonPage

__all__ = ['ComingSoonPage', 'SiteConfig', 'load_config']
