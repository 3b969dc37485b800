"""Cross-check the parser against tags written by mutagen"""

import pytest
from mutagen import id3

from radiotag.id3 import TIMESTAMP_OWNER, decode_frames, extract_container, get_timestamp


def make_mp3_silence(path):
    """Minimal MPEG-1 Layer III frame for mutagen to tag"""
    frame_header = b'\xff\xfb\x90\x00'
    path.write_bytes(frame_header + b'\x00' * 413)


@pytest.fixture
def tagged_file(tmp_path):
    path = tmp_path / "tagged.mp3"
    make_mp3_silence(path)

    tags = id3.ID3()
    tags.add(id3.TPE1(encoding=3, text=["Band"]))
    tags.add(id3.TIT2(encoding=3, text=["Canção"]))
    tags.add(id3.TOFN(encoding=3, text=["seg-7"]))
    tags.add(id3.TXXX(encoding=3, desc="", text=['{"pointerID": "abc"}']))
    tags.add(id3.WOAR(url="https://example.com/band"))
    tags.add(id3.PRIV(owner=TIMESTAMP_OWNER, data=b'\x00\x00\x00\x01\x00\x01\x02\x03'))
    tags.save(str(path), v2_version=4)
    return path


class TestMutagenInterop:
    """Test decoding of real-world ID3v2.4 tags"""

    def test_container_ends_before_audio(self, tagged_file):
        data = tagged_file.read_bytes()
        container = extract_container(data, 0)

        assert container is not None
        assert data[len(container):len(container) + 2] == b'\xff\xfb'

    def test_frames(self, tagged_file):
        frames = {frame.key: frame for frame in decode_frames(extract_container(tagged_file.read_bytes()))}

        assert frames['TPE1'].data == "Band"
        assert frames['TIT2'].data == "Canção"
        assert frames['TOFN'].data == "seg-7"
        assert frames['TXXX'].info == ""
        assert frames['TXXX'].data == '{"pointerID": "abc"}'
        assert frames['WOAR'].data == "https://example.com/band"
        assert frames['PRIV'].info == TIMESTAMP_OWNER

    def test_timestamp(self, tagged_file):
        assert get_timestamp(tagged_file.read_bytes()) == 47722593
