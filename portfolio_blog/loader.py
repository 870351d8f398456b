"""
Document loading shared by the public site and the admin preview.
"""
import calendar
from datetime import timedelta

from django.utils import timezone

from .documents import parse_document
from .exceptions import NotFoundError

# Date filters offered on the public list
PERIODS = ("all", "week", "month", "year")


def _repository(repository):
    if repository is not None:
        return repository
    from .repository import default_repository

    return default_repository


def load_document(identifier, repository=None):
    """
    Load and validate the document for a slug or id.

    Args:
        identifier: slug or id, matched exactly
        repository: PostRepository to read from (Django ORM by default)

    Returns:
        Document, possibly degraded

    Raises:
        NotFoundError: nothing matches identifier
        CollaboratorFailure: the repository call failed
    """
    if not identifier:
        raise NotFoundError(identifier)

    record = _repository(repository).get_by_identifier(identifier)
    if record is None:
        raise NotFoundError(identifier)
    return parse_document(record)


def _months_back(moment, months):
    """Same day `months` earlier, clamped to the end of shorter months."""
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def period_cutoff(period, now=None):
    """
    Earliest publish time a document may have to fall inside period.

    Returns None for "all".

    Raises:
        ValueError: unknown period
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}")
    if period == "all":
        return None
    now = now or timezone.now()
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return _months_back(now, 1)
    return _months_back(now, 12)


def matches_query(document, query):
    """Case-insensitive match on title, excerpt or any tag."""
    query = query.strip().lower()
    if not query:
        return True
    return (
        query in document.title.lower()
        or query in document.excerpt.lower()
        or any(query in tag.lower() for tag in document.tags)
    )


def filter_documents(documents, query="", period="all", now=None):
    """Keep documents matching query and published inside period."""
    cutoff = period_cutoff(period, now)
    return [
        document
        for document in documents
        if matches_query(document, query)
        and (cutoff is None or (document.published_at is not None and document.published_at >= cutoff))
    ]


def load_documents(include_drafts=False, repository=None, query="", period="all", now=None):
    """
    Return documents newest-published first; drafts only when asked.

    Args:
        query: text matched against title, excerpt and tags
        period: one of PERIODS; limits by publish time
        now: reference time for period (defaults to timezone.now())
    """
    records = _repository(repository).list_records(include_drafts=include_drafts)
    documents = [parse_document(record) for record in records]
    if query or period != "all":
        documents = filter_documents(documents, query=query, period=period, now=now)
    return documents
