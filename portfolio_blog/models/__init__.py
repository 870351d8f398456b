"""
Models for django-portfolio-blog.

    from portfolio_blog.models import Post
"""
from .posts import Post

__all__ = [
    "Post",
]
