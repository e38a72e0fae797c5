"""
Modules package initialization.
This package contains the functional modules of the feed core.
"""

from feedcore.modules import user_management
from feedcore.modules import posts
from feedcore.modules import home_feed
