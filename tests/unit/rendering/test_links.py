"""Unit tests for archive URL helpers."""

from venue_hierarchy.rendering.links import TermArchiveLinker, is_safe_url, resolve_url


class TestIsSafeUrl:
    """Tests for is_safe_url."""

    def test_accepts_http_and_relative(self):
        assert is_safe_url("https://example.org/location/de/")
        assert is_safe_url("http://example.org")
        assert is_safe_url("/location/de/")

    def test_rejects_other_schemes(self):
        assert not is_safe_url("javascript:alert(1)")
        assert not is_safe_url("data:text/html,hi")
        assert not is_safe_url("ftp://example.org/")

    def test_rejects_protocol_relative_and_whitespace(self):
        assert not is_safe_url("//evil.example")
        assert not is_safe_url("/a b")
        assert not is_safe_url("https://example.org/\n")

    def test_rejects_empty(self):
        assert not is_safe_url("")
        assert not is_safe_url(None)


class TestTermArchiveLinker:
    """Tests for TermArchiveLinker."""

    def test_url(self, make_term):
        linker = TermArchiveLinker("https://example.org/location/")
        assert linker(make_term(1, "Bavaria", slug="bayern")) == "https://example.org/location/bayern/"

    def test_default_base(self, make_term):
        assert TermArchiveLinker()(make_term(2, "Germany", slug="de")) == "/location/de/"


class TestResolveUrl:
    """Tests for resolve_url."""

    def test_resolver_error(self, make_term):
        """A failing resolver yields no URL."""

        def broken(term):
            raise RuntimeError("no permalink")

        assert resolve_url(broken, make_term(1, "Europe")) is None

    def test_no_resolver(self, make_term):
        assert resolve_url(None, make_term(1, "Europe")) is None
