"""
URL configuration for django-portfolio-blog.

Include in your project urls.py:

    path('blog/', include('portfolio_blog.urls')),
"""
from django.urls import path

from . import views

app_name = "portfolio_blog"

urlpatterns = [
    # Public
    path("", views.PostListView.as_view(), name="post_list"),
    path("post/<slug:slug>/", views.PostDetailView.as_view(), name="post_detail"),

    # Admin API
    path("admin-api/posts/", views.PostCreateView.as_view(), name="post_create"),
    path("admin-api/posts/<str:identifier>/", views.PostPreviewView.as_view(), name="post_preview"),
    path("admin-api/posts/<str:identifier>/edit/", views.PostEditView.as_view(), name="post_edit"),
    path("admin-api/posts/<str:identifier>/publish/", views.PostPublishView.as_view(), name="post_publish"),
    path(
        "admin-api/posts/<str:identifier>/republish/",
        views.PostRepublishView.as_view(),
        name="post_republish",
    ),
    path(
        "admin-api/posts/<str:identifier>/hero-image/",
        views.HeroImageUploadView.as_view(),
        name="hero_image_upload",
    ),
    path("admin-api/images/", views.ImageUploadView.as_view(), name="image_upload"),
]
