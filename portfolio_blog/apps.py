"""Django app configuration for portfolio_blog."""
from django.apps import AppConfig


class PortfolioBlogConfig(AppConfig):
    """Configuration for the portfolio blog app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "portfolio_blog"
    verbose_name = "Portfolio Blog"
