"""
Modules package initialization.
Each feature lives in its own subpackage with models, schemas, services and api.
"""

from app.modules import auth
from app.modules import user_management
from app.modules import posts
from app.modules import follows
from app.modules import topics
from app.modules import home_feed
from app.modules import media
