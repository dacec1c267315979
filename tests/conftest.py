import pytest

SAMPLE = """#EXTM3U url-tvg="http://x/epg1"
#EXTINF:-1 tvg-id="ChFoo" tvg-name="Foo TV" tvg-logo="http://img/foo.png" group-title="News",Foo HD
#EXTVLCOPT:http-user-agent=Mozilla/5.0
#EXTVLCOPT:http-referrer=http://ref.example
http://streams.example/foo.m3u8
#EXTINF:-1 tvg-id="chbar" group-title="Sport",Bar
http://streams.example/bar.m3u8
#EXTINF:-1,Plain Channel
http://streams.example/plain.m3u8
"""


@pytest.fixture
def sample_playlist():
    return SAMPLE
