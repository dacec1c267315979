"""
Unit tests for playlist retrieval. The HTTP session is patched, nothing
leaves the machine.
"""
import pytest
import requests

from playlist_catalog import config, sources
from playlist_catalog.sources import SourceError

LOCAL_DOC = "#EXTM3U\n#EXTINF:-1,Local\nhttp://l\n"


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code
        self.encoding = None

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def fake_web(monkeypatch):
    """Serve a dict of url -> text (or status code) through the shared session."""
    pages = {}

    def fake_get(url, timeout=None, allow_redirects=True):
        page = pages.get(url, 404)
        if isinstance(page, int):
            return FakeResponse("", page)
        if isinstance(page, Exception):
            raise page
        return FakeResponse(page)

    monkeypatch.setattr(sources.session, "get", fake_get)
    return pages


class TestReadLocation:
    """Single location reads."""

    def test_remote(self, fake_web):
        fake_web["http://h/a.m3u"] = "#EXTM3U\n"
        assert sources.read_location("http://h/a.m3u") == "#EXTM3U\n"

    def test_local(self, tmp_path):
        path = tmp_path / "a.m3u"
        path.write_text("#EXTM3U\n", encoding="utf-8")
        assert sources.read_location(str(path)) == "#EXTM3U\n"

    def test_missing_local_file(self, tmp_path):
        with pytest.raises(SourceError) as exc:
            sources.read_location(str(tmp_path / "nope.m3u"))
        assert exc.value.location.endswith("nope.m3u")

    def test_http_error_without_fallback(self, fake_web):
        with pytest.raises(SourceError):
            sources.read_location("http://h/missing.m3u")

    def test_connection_error_uses_local_fallback(self, fake_web, tmp_path):
        local = tmp_path / "local-playlist.m3u"
        local.write_text(LOCAL_DOC, encoding="utf-8")
        fake_web["http://h/down.m3u"] = requests.exceptions.ConnectionError("refused")
        text = sources.read_location("http://h/down.m3u", fallback=sources.Fallback(str(local)))
        assert "Local" in text

    def test_fallback_configured_but_absent(self, fake_web, tmp_path):
        with pytest.raises(SourceError):
            sources.read_location(
                "http://h/missing.m3u", fallback=sources.Fallback(str(tmp_path / "absent.m3u"))
            )

    def test_fallback_used_only_once(self, fake_web, tmp_path):
        local = tmp_path / "local-playlist.m3u"
        local.write_text(LOCAL_DOC, encoding="utf-8")
        fallback = sources.Fallback(str(local))
        sources.read_location("http://h/one.m3u", fallback=fallback)
        with pytest.raises(SourceError) as exc:
            sources.read_location("http://h/two.m3u", fallback=fallback)
        assert "already used" in exc.value.reason
        assert fallback.used_by == "http://h/one.m3u"


class TestLocalFallback:
    """The local playlist copy during a full load."""

    @pytest.fixture
    def local_copy(self, tmp_path, monkeypatch):
        local = tmp_path / "local-playlist.m3u"
        local.write_text(LOCAL_DOC, encoding="utf-8")
        monkeypatch.setattr(config, "FALLBACK_PLAYLIST", str(local))
        return local

    def test_single_failing_source_uses_copy(self, fake_web, local_copy):
        fake_web["http://h/ok.m3u"] = "#EXTM3U\n# ok\n"
        docs = sources.load_documents(["http://h/ok.m3u", "http://h/down.m3u"])
        assert docs == ["#EXTM3U\n# ok\n", LOCAL_DOC]

    def test_two_failing_sources_abort_instead_of_duplicating(self, fake_web, local_copy):
        """The copy stands in for one location only; its streams never appear twice."""
        with pytest.raises(SourceError):
            sources.load_documents(["http://h/down1.m3u", "http://h/down2.m3u"])

    def test_copy_not_used_for_linked_playlists(self, fake_web, local_copy):
        fake_web["http://h/link.playlist"] = "http://h/a.m3u\nhttp://h/gone.m3u\n"
        fake_web["http://h/a.m3u"] = "#EXTM3U\n# a\n"
        with pytest.raises(SourceError) as exc:
            sources.load_documents(["http://h/link.playlist"])
        assert exc.value.location == "http://h/gone.m3u"

    def test_fresh_copy_each_load(self, fake_web, local_copy):
        assert sources.load_documents(["http://h/down.m3u"]) == [LOCAL_DOC]
        assert sources.load_documents(["http://h/down.m3u"]) == [LOCAL_DOC]


class TestFetchDocuments:
    """Concurrent fetching and link lists."""

    def test_order_is_preserved(self, fake_web):
        urls = [f"http://h/{i}.m3u" for i in range(10)]
        for i, url in enumerate(urls):
            fake_web[url] = f"#EXTM3U\n# {i}\n"
        docs = sources.fetch_documents(urls, max_workers=4)
        assert docs == [f"#EXTM3U\n# {i}\n" for i in range(10)]

    def test_empty(self):
        assert sources.fetch_documents([]) == []

    def test_one_failure_fails_all(self, fake_web, monkeypatch):
        monkeypatch.setattr(config, "FALLBACK_PLAYLIST", None)
        fake_web["http://h/ok.m3u"] = "#EXTM3U\n"
        with pytest.raises(SourceError):
            sources.fetch_documents(["http://h/ok.m3u", "http://h/gone.m3u"])

    def test_link_list_expanded_in_place(self, fake_web):
        fake_web["http://h/first.m3u"] = "#EXTM3U\n# first\n"
        fake_web["http://h/link.playlist"] = "http://h/a.m3u\n\n  http://h/b.m3u  \n"
        fake_web["http://h/a.m3u"] = "#EXTM3U\n# a\n"
        fake_web["http://h/b.m3u"] = "#EXTM3U\n# b\n"
        docs = sources.load_documents(["http://h/first.m3u", "http://h/link.playlist"])
        assert docs == ["#EXTM3U\n# first\n", "#EXTM3U\n# a\n", "#EXTM3U\n# b\n"]

    def test_is_playlist(self):
        assert sources.is_playlist("\ufeff  #EXTM3U\n")
        assert sources.is_playlist("#extm3u\n#extinf:-1,x\nhttp://x\n")
        assert not sources.is_playlist("http://h/a.m3u\n")

    def test_local_link_list_relative_to_its_directory(self, tmp_path, monkeypatch):
        lists = tmp_path / "lists"
        (lists / "sub").mkdir(parents=True)
        (lists / "sub" / "a.m3u").write_text("#EXTM3U\n# a\n", encoding="utf-8")
        (tmp_path / "b.m3u").write_text("#EXTM3U\n# b\n", encoding="utf-8")
        link_list = lists / "link.playlist"
        link_list.write_text("sub/a.m3u\n../b.m3u\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path / "lists" / "sub")

        docs = sources.load_documents([str(link_list)])

        assert docs == ["#EXTM3U\n# a\n", "#EXTM3U\n# b\n"]

    def test_resolve_link(self):
        assert sources.resolve_link("http://h/lists/link.playlist", "a.m3u") == "http://h/lists/a.m3u"
        assert sources.resolve_link("http://h/link.playlist", "http://o/x.m3u") == "http://o/x.m3u"
        assert sources.resolve_link("/srv/lists/link.playlist", "/abs/x.m3u") == "/abs/x.m3u"
        assert sources.resolve_link("/srv/lists/link.playlist", "x.m3u") == "/srv/lists/x.m3u"
