import json

from PIL import Image

from akb_converter.cli import main


def test_create_extract_decode(tmp_path):
    source = tmp_path / "title.png"
    Image.new("RGBA", (6, 4), (200, 100, 50, 255)).save(source)
    (tmp_path / "title.metadata.json").write_text(json.dumps({
        "Width": 6, "Height": 4, "OffsetX": 0, "OffsetY": 0,
        "BackgroundColor": 0, "BackgroundImage": "bg",
    }))
    akb = tmp_path / "out" / "title.akb"
    akb.parent.mkdir()
    assert main(["-c", str(source), str(akb)]) == 0
    assert akb.read_bytes()[:4] == b"AKB+"

    assert main(["-e", str(akb)]) == 0
    extracted = json.loads((tmp_path / "out" / "title.metadata.json").read_text(encoding="utf-8"))
    assert extracted["BackgroundImage"] == "bg"
    assert extracted["Width"] == 6

    decoded = tmp_path / "decoded.png"
    assert main(["-x", str(akb), str(decoded)]) == 0
    with Image.open(decoded) as image:
        assert image.tobytes() == Image.new("RGBA", (6, 4), (200, 100, 50, 255)).tobytes()


def test_create_without_sidecar(tmp_path, caplog):
    source = tmp_path / "plain.bmp"
    Image.new("RGB", (3, 3), (1, 2, 3)).save(source)
    akb = tmp_path / "plain.akb"
    assert main(["-c", str(source), str(akb)]) == 0
    assert akb.read_bytes()[:8] == b"AKB \x03\x00\x03\x00"
    assert "using default settings" in caplog.text


def test_errors(tmp_path):
    bad = tmp_path / "bad.akb"
    bad.write_bytes(b"nope")
    assert main(["-e", str(bad)]) == 1
    gray = tmp_path / "gray.png"
    Image.new("L", (2, 2)).save(gray)
    assert main(["-c", str(gray), str(tmp_path / "gray.akb")]) == 1
    assert main(["-e", str(tmp_path / "missing.akb")]) == 1
    source = tmp_path / "far.png"
    Image.new("RGB", (2, 2)).save(source)
    (tmp_path / "far.metadata.json").write_text(json.dumps({"Width": 2, "Height": 2, "OffsetX": -(1 << 40)}))
    assert main(["-c", str(source), str(tmp_path / "far.akb")]) == 1
