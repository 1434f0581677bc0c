# Import all models once to ensure SQLAlchemy mapper registry is fully populated.
# This prevents late-binding issues for relationship("ClassName").

from .users.models import User, user_followers  # noqa: F401
from .news.models import News, Image, news_likes  # noqa: F401
from .comments.models import Comment  # noqa: F401
