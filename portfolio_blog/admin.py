"""
Django admin configuration for portfolio_blog.

The change form does not write Post rows itself. Submitted values go
through PostForm and the AuthoringService, the same path the JSON
endpoints use, so admin edits are parsed and validated like any other.
"""
from django import forms
from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from .exceptions import InvalidTransitionError
from .forms import PostForm
from .models import Post
from .services import AuthoringService
from .workflow import AuthoringContext

# Post model field -> PostForm / document field
FIELD_MAP = {
    "sources_data": "sources",
    "notes_content": "notes",
}
ERROR_FIELDS = {value: key for key, value in FIELD_MAP.items()}


class PostAdminForm(forms.ModelForm):
    """
    Model form that checks the submitted post with the authoring service.

    On success `checked` holds the document to store.
    """

    authoring_context = None
    checked = None

    class Meta:
        model = Post
        fields = "__all__"

    def _post_form(self):
        data = {
            FIELD_MAP.get(name, name): value
            for name, value in self.cleaned_data.items()
        }
        return PostForm(data)

    def _add_errors(self, error_dict):
        for name, messages_ in error_dict.items():
            field_name = ERROR_FIELDS.get(name, name)
            if field_name not in self.fields:
                field_name = None
            for message in messages_:
                self.add_error(field_name, message)

    def clean(self):
        cleaned_data = super().clean()
        if self.errors:
            return cleaned_data

        post_form = self._post_form()
        if not post_form.is_valid():
            self._add_errors(post_form.errors)
            return cleaned_data

        service = AuthoringService()
        try:
            if self.instance._state.adding:
                self.checked = service.check_create(
                    self.authoring_context,
                    post_form.to_fields(),
                    content_warnings=post_form.block_warnings,
                )
            else:
                self.checked = service.check_edit(
                    self.authoring_context,
                    str(self.instance.pk),
                    post_form.to_patch(),
                    content_warnings=post_form.block_warnings,
                )
        except InvalidTransitionError as exc:
            self.add_error(None, str(exc))
        except ValidationError as exc:
            if hasattr(exc, "error_dict"):
                self._add_errors(exc.message_dict)
            else:
                self.add_error(None, exc.messages)
        return cleaned_data


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    form = PostAdminForm
    list_display = [
        "title_preview",
        "slug",
        "is_draft",
        "published_at",
        "republished_at",
        "updated_at",
    ]
    list_filter = ["is_draft", "has_sources", "has_notes", "published_at"]
    search_fields = ["title", "slug", "excerpt"]
    date_hierarchy = "created_at"
    readonly_fields = [
        "id",
        "is_draft",
        "published_at",
        "republished_at",
        "created_at",
        "updated_at",
    ]

    fieldsets = (
        (None, {
            "fields": ("id", "title", "slug", "excerpt", "content", "tags")
        }),
        ("Hero Image", {
            "fields": ("hero_image_large", "hero_image_thumbnail")
        }),
        ("Sources & Notes", {
            "fields": ("has_sources", "sources_data", "has_notes", "notes_content"),
            "classes": ("collapse",),
        }),
        ("Status", {
            "fields": ("is_draft", "published_at", "republished_at", "created_at", "updated_at"),
        }),
    )

    actions = ["publish_posts", "republish_posts"]

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    def get_readonly_fields(self, request, obj=None):
        # Published slugs are part of external links
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None and obj.published_at is not None:
            fields.append("slug")
        return fields

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        form.authoring_context = AuthoringContext.from_request(request)
        return form

    def save_model(self, request, obj, form, change):
        saved = AuthoringService().store(form.checked)
        obj.pk = saved.id
        obj.refresh_from_db()

    def _run_transition(self, request, queryset, method, verb):
        service = AuthoringService()
        ctx = AuthoringContext.from_request(request)
        done = 0
        for post in queryset:
            try:
                getattr(service, method)(ctx, str(post.pk))
            except (InvalidTransitionError, ValidationError) as exc:
                self.message_user(request, f"{post}: {exc}", messages.WARNING)
            else:
                done += 1
        if done:
            self.message_user(request, f"{done} post(s) {verb}.", messages.SUCCESS)

    @admin.action(description="Publish selected drafts")
    def publish_posts(self, request, queryset):
        self._run_transition(request, queryset, "publish_post", "published")

    @admin.action(description="Republish selected posts")
    def republish_posts(self, request, queryset):
        self._run_transition(request, queryset, "republish_post", "republished")
