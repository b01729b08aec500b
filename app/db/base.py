# Import all models here so create_all and Alembic can detect them
from app.db.session import Base

from app.modules.user_management.models.user import Profile
from app.modules.topics.models.topic import Topic
from app.modules.posts.models.post import Post
from app.modules.posts.comments.models.comment import Comment
from app.modules.follows.models.follow import Follow
