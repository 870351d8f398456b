"""
Views for django-portfolio-blog.

Public pages render documents through the same loader the admin preview
uses. Admin endpoints speak JSON and are limited to staff users.
"""
import json
import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ValidationError
from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import render
from django.views import View
from django.views.generic import ListView

from .conf import blog_settings
from .documents import serialize_document
from .exceptions import (
    CollaboratorFailure,
    InvalidTransitionError,
    NotFoundError,
    UploadRejected,
)
from .forms import PostForm
from .loader import PERIODS, load_document, load_documents
from .rendering import render_document, render_document_html
from .services import AuthoringService
from .workflow import AuthoringContext

logger = logging.getLogger(__name__)


class PostListView(ListView):
    """List published posts, newest first, with optional search and date filter."""

    template_name = "portfolio_blog/post_list.html"
    context_object_name = "posts"
    paginate_by = blog_settings.POSTS_PER_PAGE

    def get_filters(self):
        query = self.request.GET.get("q", "").strip()
        period = self.request.GET.get("period", "all")
        if period not in PERIODS:
            period = "all"
        return query, period

    def get_queryset(self):
        query, period = self.get_filters()
        return load_documents(query=query, period=period)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        query, period = self.get_filters()
        context.update({
            "query": query,
            "period": period,
            "periods": PERIODS,
            "has_filters": bool(query) or period != "all",
        })
        return context


class PostDetailView(View):
    """Display a published post by slug."""

    template_name = "portfolio_blog/post_detail.html"
    not_found_template_name = "portfolio_blog/post_not_found.html"

    def get(self, request, slug):
        try:
            document = load_document(slug)
        except NotFoundError:
            return render(request, self.not_found_template_name, {"slug": slug}, status=404)

        # Drafts are only reachable through the admin preview
        if document.is_draft:
            return render(request, self.not_found_template_name, {"slug": slug}, status=404)

        return render(request, self.template_name, {
            "post": document,
            "units": render_document(document),
            "body_html": render_document_html(document),
        })


def document_json(document):
    """JSON payload for a document as returned by the admin endpoints."""
    data = serialize_document(document)
    data["state"] = document.state
    data["degraded"] = document.degraded
    data["warnings"] = [str(warning) for warning in document.warnings]
    return data


class AdminJSONView(LoginRequiredMixin, View):
    """
    Base for staff-only JSON endpoints.

    Core errors are turned into JSON responses here; PermissionDenied is
    left to Django's 403 handling.
    """

    raise_exception = True
    service_class = AuthoringService

    def get_service(self):
        return self.service_class()

    def get_context(self):
        return AuthoringContext.from_request(self.request)

    def get_payload(self):
        if self.request.content_type == "application/json":
            try:
                return json.loads(self.request.body or b"{}")
            except ValueError as exc:
                raise ValidationError("Request body is not valid JSON.") from exc
        return self.request.POST

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except NotFoundError as exc:
            return JsonResponse({"error": str(exc)}, status=404)
        except InvalidTransitionError as exc:
            return JsonResponse({"errors": {"__all__": [str(exc)]}}, status=400)
        except ValidationError as exc:
            errors = exc.message_dict if hasattr(exc, "error_dict") else {"__all__": exc.messages}
            return JsonResponse({"errors": errors}, status=400)
        except UploadRejected as exc:
            return JsonResponse({"error": exc.reason, "code": exc.code}, status=400)
        except CollaboratorFailure as exc:
            logger.exception("Collaborator failure in %s", type(self).__name__)
            return JsonResponse({"error": str(exc)}, status=502)

    def bound_form(self):
        form = PostForm(self.get_payload())
        if not form.is_valid():
            raise ValidationError(form.errors.as_data())
        return form


class PostPreviewView(AdminJSONView):
    """Render any post, drafts included, exactly as the public page would."""

    def get(self, request, identifier):
        self.get_context().require_admin()
        document = load_document(identifier)
        data = document_json(document)
        data["html"] = render_document_html(document)
        return JsonResponse(data)


class PostCreateView(AdminJSONView):
    """Create a draft; publish it straight away when is_draft is false."""

    def post(self, request):
        ctx = self.get_context()
        ctx.require_admin()
        form = self.bound_form()
        service = self.get_service()

        # A rejected publish must not leave the draft behind
        with transaction.atomic():
            document = service.create_post(ctx, form.to_fields(), content_warnings=form.block_warnings)
            if "is_draft" in form.data and not form.cleaned_data["is_draft"]:
                document = service.publish_post(ctx, document.id)
        return JsonResponse(document_json(document), status=201)


class PostEditView(AdminJSONView):
    def post(self, request, identifier):
        ctx = self.get_context()
        ctx.require_admin()
        form = self.bound_form()
        document = self.get_service().edit_post(
            ctx, identifier, form.to_patch(), content_warnings=form.block_warnings
        )
        return JsonResponse(document_json(document))


class PostPublishView(AdminJSONView):
    def post(self, request, identifier):
        document = self.get_service().publish_post(self.get_context(), identifier)
        return JsonResponse(document_json(document))


class PostRepublishView(AdminJSONView):
    def post(self, request, identifier):
        document = self.get_service().republish_post(self.get_context(), identifier)
        return JsonResponse(document_json(document))


def _uploaded_file(request):
    uploaded_file = request.FILES.get("file")
    if uploaded_file is None:
        raise ValidationError({"file": ["No file was uploaded."]})
    return uploaded_file


class HeroImageUploadView(AdminJSONView):
    """Upload a hero image and attach its variants to a post."""

    def post(self, request, identifier):
        ctx = self.get_context()
        ctx.require_admin()
        document = self.get_service().attach_hero_image(ctx, identifier, _uploaded_file(request))
        return JsonResponse(document_json(document))


class ImageUploadView(AdminJSONView):
    """Upload an image for an image block."""

    def post(self, request):
        ctx = self.get_context()
        ctx.require_admin()
        url = self.get_service().upload_inline_image(ctx, _uploaded_file(request))
        return JsonResponse({"url": url}, status=201)
