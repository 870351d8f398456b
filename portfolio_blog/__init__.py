"""
django-portfolio-blog - structured block content for a portfolio blog.

Features:
- Typed content blocks (subtitle, body, list, image)
- Tolerant document loader shared by public and admin views
- Pure renderer from documents to presentation units
- Draft / publish / republish authoring workflow
- Upload validation gate with hero image resizing
"""

__version__ = "0.1.0"
