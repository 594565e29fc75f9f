"""Tests for attachment filename utilities.

Tests cover:
- safe_filename: last path component, traversal removed
- attachment_id_from_filename: identifier derivation
- Property-based checks with hypothesis
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from msglogger.utils.paths import attachment_id_from_filename, safe_filename


class TestSafeFilename:
    """Tests for safe_filename function."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("1234.png", "1234.png"),
            ("../../someMaliciousPath.png", "someMaliciousPath.png"),
            ("/etc/passwd", "passwd"),
            ("..\\..\\windows\\evil.jpg", "evil.jpg"),
            ("dir/sub/", "sub"),
            ("..", ""),
            ("../..", ""),
            (".", ""),
            ("", ""),
            ("///", ""),
        ],
    )
    def test_strips_directories(self, filename: str, expected: str) -> None:
        assert safe_filename(filename) == expected


class TestAttachmentIdFromFilename:
    """Tests for attachment_id_from_filename function."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("abc.png", "abc"),
            ("def.jpg", "def"),
            ("../../x.png", "x"),
            ("a.tar.gz", "a.tar"),
            ("noextension", "noextension"),
            (".hidden", ".hidden"),
            (".screenshot.tmp", ".screenshot"),
            ("x.", "x"),
            ("x..", "x."),
            ("...", "..."),
            ("C:\\Users\\me\\1097.webp", "1097"),
            ("", ""),
            ("..", ""),
        ],
    )
    def test_derives_identifier(self, filename: str, expected: str) -> None:
        assert attachment_id_from_filename(filename) == expected

    def test_same_id_for_different_extensions(self) -> None:
        assert attachment_id_from_filename("42.png") == attachment_id_from_filename("42.jpg")


class TestSanitizerProperties:
    """Property-based tests: any input decomposes without escaping."""

    @given(st.text())
    def test_never_contains_separators(self, filename: str) -> None:
        result = attachment_id_from_filename(filename)

        assert "/" not in result
        assert "\\" not in result

    @given(st.text())
    def test_safe_filename_never_contains_separators(self, filename: str) -> None:
        result = safe_filename(filename)

        assert "/" not in result
        assert "\\" not in result
        assert result not in (".", "..")

    @given(
        st.lists(st.sampled_from(["..", ".", "a", "dir"]), max_size=5),
        st.text(alphabet="abcdefghij0123456789_-", min_size=1, max_size=12),
        st.sampled_from([".png", ".jpg", ".gif", ".webp"]),
    )
    def test_traversal_yields_base_name(
        self, segments: list[str], stem: str, extension: str
    ) -> None:
        filename = "/".join([*segments, stem + extension])

        assert attachment_id_from_filename(filename) == stem
        assert safe_filename(filename) == stem + extension
