"""
Configuration settings for django-portfolio-blog.

Override these in your Django settings.py:

    PORTFOLIO_BLOG = {
        'MAX_UPLOAD_SIZE_MB': 5,
        'UPLOAD_PATH': 'blog-images/',
        ...
    }
"""
from django.conf import settings

DEFAULTS = {
    # Uploads
    "ALLOWED_IMAGE_TYPES": [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
    ],
    "MAX_UPLOAD_SIZE_MB": 5,
    "UPLOAD_PATH": "blog-images/",
    "HERO_IMAGE_PATH": "hero-images/",

    # Hero image variants
    "HERO_IMAGE_LARGE_WIDTH": 1920,
    "HERO_IMAGE_THUMBNAIL_WIDTH": 800,
    "HERO_IMAGE_QUALITY": 85,

    # Slugs
    "SLUG_MIN_LENGTH": 3,
    "SLUG_MAX_LENGTH": 100,

    # Titles
    "TITLE_MIN_LENGTH": 3,
    "TITLE_MAX_LENGTH": 200,

    # Drafts
    "DRAFT_TITLE": "Untitled Draft",
    "DRAFT_SLUG_PREFIX": "draft-",

    # Listing
    "POSTS_PER_PAGE": 10,
}


class PortfolioBlogSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from portfolio_blog.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid portfolio_blog setting: {name}")

        user_settings = getattr(settings, "PORTFOLIO_BLOG", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def MAX_UPLOAD_SIZE(self):
        """Return the upload ceiling in bytes."""
        return int(self.MAX_UPLOAD_SIZE_MB * 1024 * 1024)


blog_settings = PortfolioBlogSettings()
