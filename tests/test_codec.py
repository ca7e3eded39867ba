import pytest

from hive_chat.codec import (
    DEFAULT_FILE_CAPTION,
    DEFAULT_VOICE_CAPTION,
    decode,
    decode_legacy,
    encode_file,
    encode_location,
    encode_voice,
    human_readable_size,
    is_audio_file,
    is_image_file,
    is_video_file,
)
from hive_chat.models.content import (
    FileRef,
    IndexedDbRef,
    LegacyBase64Ref,
    LegacyNoSizeRef,
    LocationRef,
    PlainText,
    VoiceRef,
)

BLOB = "M4hsZGQ1oCktdzegB6HnI6Mi28S2nqOPHxK-W7_4BUk"


class TestFileEnvelope:
    def test_wire_shape(self):
        text = encode_file("report.pdf", "1.50 MB", "see attached", BLOB)
        assert text == f"\U0001F4CE report.pdf (1.50 MB)\nsee attached\n\n[Walrus: {BLOB}]"

    @pytest.mark.parametrize("name,size,caption", [
        ("photo.png", "2.00 MB", "pic"),
        ("photo (1).png", "812.40 KB", "with parens in the name"),
        ("notes.txt", "12.00 Bytes", "line one\nline two\n\nline four"),
        ("a b c.tar.gz", "1.00 GB", "trailing newline\n"),
    ])
    def test_round_trip(self, name, size, caption):
        decoded = decode(encode_file(name, size, caption, BLOB))
        assert decoded == FileRef(file_name=name, human_size=size, caption=caption, blob_id=BLOB)

    def test_empty_caption_uses_default_both_ways(self):
        decoded = decode(encode_file("x.bin", "1.00 KB", "", BLOB))
        assert isinstance(decoded, FileRef)
        assert decoded.caption == DEFAULT_FILE_CAPTION


class TestVoiceEnvelope:
    def test_round_trip(self):
        decoded = decode(encode_voice("0:07.3", "listen\nto this", BLOB))
        assert decoded == VoiceRef(duration_label="0:07.3", caption="listen\nto this", blob_id=BLOB)

    def test_default_caption(self):
        decoded = decode(encode_voice("1:02.0", "", BLOB))
        assert decoded.caption == DEFAULT_VOICE_CAPTION

    def test_voice_wins_over_file(self):
        # A voice envelope whose caption embeds a complete file envelope still decodes as voice.
        inner = encode_file("x.png", "1.00 KB", "c", "other")
        text = encode_voice("0:01.0", inner, BLOB)
        decoded = decode(text)
        assert isinstance(decoded, VoiceRef)
        assert decoded.blob_id == BLOB


class TestLocationEnvelope:
    def test_manual_entry_scenario(self):
        decoded = decode(encode_location(41.0082, 28.9784, "Office"))
        assert decoded == LocationRef(lat=41.0082, lng=28.9784, label="Office")

    def test_empty_label_decodes_to_empty_string(self):
        text = encode_location(-33.8688, 151.2093, "")
        assert "\n" not in text
        decoded = decode(text)
        assert isinstance(decoded, LocationRef)
        assert decoded.label == ""

    def test_label_is_trimmed(self):
        assert decode(encode_location(1.5, 2.5, "  Home  ")).label == "Home"

    @pytest.mark.parametrize("lat,lng", [(0.1 + 0.2, -179.99999999999997), (1e-05, 90.0), (-90, 180)])
    def test_coordinates_round_trip_exactly(self, lat, lng):
        decoded = decode(encode_location(lat, lng))
        assert decoded.lat == float(lat)
        assert decoded.lng == float(lng)

    @pytest.mark.parametrize("lat,lng", [(float("nan"), 1.0), (1.0, float("inf"))])
    def test_non_finite_coordinates_rejected(self, lat, lng):
        with pytest.raises(ValueError):
            encode_location(lat, lng)

    def test_unparseable_coordinate_falls_back_to_text(self):
        text = "\U0001F4CD Location: north,28.9"
        assert decode(text) == PlainText(body=text)

    def test_nan_token_falls_back_to_text(self):
        text = "\U0001F4CD Location: nan,28.9"
        assert decode(text) == PlainText(body=text)


class TestLegacyShapes:
    def test_indexeddb(self):
        text = "\U0001F4CE a.txt (3.00 KB)\nold\n\n[FileID: file_123]"
        assert decode(text) == IndexedDbRef(file_name="a.txt", human_size="3.00 KB", caption="old", local_id="file_123")

    def test_base64_with_size(self):
        text = "\U0001F4CE a.png (1 KB)\nhi\n\n[File: data:image/png;base64,iVBORw0KGgo]..."
        assert decode(text) == LegacyBase64Ref(
            file_name="a.png", human_size="1 KB", caption="hi", base64_data="data:image/png;base64,iVBORw0KGgo",
        )

    def test_base64_without_size(self):
        text = "\U0001F4CE a.png\nhi\nthere\n\n[File: aGVsbG8=]..."
        assert decode(text) == LegacyNoSizeRef(file_name="a.png", caption="hi\nthere", base64_data="aGVsbG8=")

    def test_decode_legacy_ignores_current_shapes(self):
        assert decode_legacy(encode_file("a", "1 KB", "c", BLOB)) is None


class TestFallback:
    @pytest.mark.parametrize("text", [
        "hello",
        "",
        "\U0001F4CE",
        "look at this \U0001F4CE a.png (1 KB)\nc\n\n[Walrus: abc]",
        "\U0001F4CE a.png (1 KB)\nc\n\n[Walrus: abc] trailing",
        "\U0001F3A4 Voice Message (0:01.0)\nno marker",
        "\U0001F4CD Location: 1.0",
    ])
    def test_plain_text_is_returned_unmodified(self, text):
        assert decode(text) == PlainText(body=text)

    def test_decode_is_idempotent(self):
        text = encode_voice("0:02.0", "hey", BLOB)
        assert decode(text) == decode(text)
        assert decode("plain") == decode("plain")


class TestHumanReadableSize:
    @pytest.mark.parametrize("n,expected", [
        (0, "0 Bytes"),
        (1, "1.00 Bytes"),
        (1023, "1023.00 Bytes"),
        (1024, "1.00 KB"),
        (1536, "1.50 KB"),
        (2 * 1024 * 1024, "2.00 MB"),
        (10 * 1024 * 1024, "10.00 MB"),
        (5 * 1024 ** 3, "5.00 GB"),
        (2048 * 1024 ** 3, "2048.00 GB"),
    ])
    def test_values(self, n, expected):
        assert human_readable_size(n) == expected

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            human_readable_size(-1)


def test_media_helpers():
    assert is_image_file("Holiday.JPG")
    assert not is_image_file("doc.pdf")
    assert is_video_file("video/mp4")
    assert is_audio_file("audio/webm")
    assert not is_audio_file("video/webm")
