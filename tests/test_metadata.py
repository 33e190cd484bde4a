import json
import logging

from akb_converter.metadata import CanvasMetadata, load_metadata, metadata_path, save_metadata


def test_metadata_path():
    assert metadata_path("images/title.png") == "images/title.metadata.json"
    assert metadata_path("title.akb") == "title.metadata.json"


def test_load(tmp_path):
    path = tmp_path / "title.metadata.json"
    path.write_text(json.dumps({
        "Width": 800, "Height": 600, "OffsetX": 12, "OffsetY": -4,
        "BackgroundColor": 255, "BackgroundImage": "bg01",
    }))
    metadata = load_metadata(str(path), (10, 10))
    assert metadata == CanvasMetadata(800, 600, 12, -4, 255, "bg01")


def test_missing_fields_default_to_zero(tmp_path):
    path = tmp_path / "title.metadata.json"
    path.write_text('{"Width": 20}')
    assert load_metadata(str(path), (10, 10)) == CanvasMetadata(width=20)


def test_missing_sidecar(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        metadata = load_metadata(str(tmp_path / "none.metadata.json"), (32, 16))
    assert metadata == CanvasMetadata(width=32, height=16)
    assert "using default settings" in caplog.text


def test_malformed_sidecar(tmp_path, caplog):
    path = tmp_path / "title.metadata.json"
    for text in ("{not json", "null", '{"Width": "wide"}', '{"BackgroundImage": 3}'):
        path.write_text(text)
        caplog.clear()
        with caplog.at_level(logging.WARNING):
            assert load_metadata(str(path), (3, 4)) == CanvasMetadata.default((3, 4))
        assert "using default settings" in caplog.text


def test_save(tmp_path):
    path = tmp_path / "title.metadata.json"
    metadata = CanvasMetadata(640, 480, 1, 2, -1, None)
    save_metadata(str(path), metadata)
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "Width": 640, "Height": 480, "OffsetX": 1, "OffsetY": 2,
        "BackgroundColor": -1, "BackgroundImage": None,
    }
    assert load_metadata(str(path), (1, 1)) == metadata


def test_expand_to_fit(caplog):
    metadata = CanvasMetadata(width=100, height=100, offset_x=50)
    with caplog.at_level(logging.WARNING):
        expanded = metadata.expand_to_fit((100, 100))
    assert (expanded.width, expanded.height) == (150, 100)
    assert "Image width is expanded." in caplog.text
    assert "height" not in caplog.text
    assert CanvasMetadata(10, 10).expand_to_fit((10, 10)) == CanvasMetadata(10, 10)
