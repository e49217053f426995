"""Short-hash resolution for commit digests."""

from typing import Iterable

from trakit.errors import EmptyRevisionError
from trakit.models import ResolveResult, ResolveStatus


def resolve_digest(prefix: str, digests: Iterable[str]) -> ResolveResult:
    """Resolve a full or partial digest against the known commit digests.

    Matching is a case-sensitive prefix test. Zero matches is NOT_FOUND,
    exactly one is FOUND and two or more is AMBIGUOUS.

    Raises:
        EmptyRevisionError: If prefix is empty
    """
    if not prefix:
        raise EmptyRevisionError("Please provide a commit hash")

    matches = tuple(sorted(d for d in set(digests) if d.startswith(prefix)))

    if not matches:
        return ResolveResult(status=ResolveStatus.NOT_FOUND, prefix=prefix)
    if len(matches) == 1:
        return ResolveResult(
            status=ResolveStatus.FOUND, prefix=prefix, digest=matches[0], matches=matches
        )
    return ResolveResult(status=ResolveStatus.AMBIGUOUS, prefix=prefix, matches=matches)
