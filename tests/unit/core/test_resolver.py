"""Unit tests for hash prefix resolution."""

import pytest

from trakit.core.resolver import resolve_digest
from trakit.errors import EmptyRevisionError
from trakit.models import ResolveStatus

FIRST = "abc123" + "0" * 58
SECOND = "abc999" + "0" * 58
DIGESTS = [FIRST, SECOND]


class TestResolveDigest:
    """Test prefix matching outcomes."""

    def test_ambiguous_prefix(self) -> None:
        result = resolve_digest("abc", DIGESTS)

        assert result.status is ResolveStatus.AMBIGUOUS
        assert result.digest is None
        assert result.matches == (FIRST, SECOND)

    def test_unique_prefix(self) -> None:
        result = resolve_digest("abc1", DIGESTS)

        assert result.status is ResolveStatus.FOUND
        assert result.found
        assert result.digest == FIRST

    def test_full_digest(self) -> None:
        assert resolve_digest(SECOND, DIGESTS).digest == SECOND

    def test_not_found(self) -> None:
        result = resolve_digest("zzz", DIGESTS)

        assert result.status is ResolveStatus.NOT_FOUND
        assert result.matches == ()

    def test_empty_input_is_precondition_error(self) -> None:
        with pytest.raises(EmptyRevisionError):
            resolve_digest("", DIGESTS)

    def test_case_sensitive(self) -> None:
        assert resolve_digest("ABC1", DIGESTS).status is ResolveStatus.NOT_FOUND

    def test_no_commits(self) -> None:
        assert resolve_digest("a", []).status is ResolveStatus.NOT_FOUND
