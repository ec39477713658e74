import json

import pytest

from spinlio.__main__ import build_parser, main, parse_param
from spinlio.ghx.inspect import extract_script_body
from spinlio.ghx.validator import validate


@pytest.fixture(autouse=True)
def _no_user_catalogs(tmp_path, monkeypatch):
    from spinlio.ghx import catalog

    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("SPINLIO_TEMPLATE_DATA", raising=False)
    catalog.clear_cache()
    yield
    catalog.clear_cache()


def test_parse_param():
    assert parse_param("rake=50") == ("rake", 50)
    assert parse_param(" blade_length = 420.5 ") == ("blade_length", 420.5)
    with pytest.raises(ValueError, match="expected name=value"):
        parse_param("rake")
    with pytest.raises(ValueError, match="not a number"):
        parse_param("rake=fifty")


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_templates_command(capsys):
    assert main(["templates"]) == 0
    out = capsys.readouterr().out
    assert "fork: Bicycle Fork" in out
    assert "spoke_count" in out
    assert "[integer]" in out


def test_generate_and_validate(tmp_path, capsys):
    doc = tmp_path / "fork.b64"
    assert main(["generate", "fork", "-p", "rake=50", "--output", str(doc)]) == 0
    text = doc.read_text().strip()
    assert validate(text).is_valid

    assert main(["validate", str(doc), "--strict"]) == 0
    assert "passed validation" in capsys.readouterr().out

    assert main(["extract-script", str(doc)]) == 0
    assert capsys.readouterr().out.rstrip("\n") == extract_script_body(text).rstrip("\n")

    assert main(["inspect", str(doc)]) == 0
    out = capsys.readouterr().out
    assert "slider rake" in out
    assert "Output:        OutputBake" in out


def test_generate_request(tmp_path):
    out = tmp_path / "request.json"
    assert main(["generate", "wheel", "--request", "-o", str(out)]) == 0
    payload = json.loads(out.read_text())
    assert payload["pointer"] is None
    assert [v["ParamName"] for v in payload["values"]][-2:] == ["spoke_count", "spoke_diameter"]


def test_generate_unknown_type(capsys):
    assert main(["generate", "frame"]) == 1
    assert "unknown component type" in capsys.readouterr().err


def test_generate_bad_param(capsys):
    assert main(["generate", "fork", "-p", "rake"]) == 2
    assert "expected name=value" in capsys.readouterr().err


def test_validate_reports_errors(tmp_path, capsys):
    bad = tmp_path / "bad.b64"
    bad.write_text("not base64!!")
    assert main(["validate", str(bad)]) == 1
    out = capsys.readouterr().out
    assert "FAILED" in out
    assert "ERROR: Invalid base64" in out


def test_missing_file(tmp_path, capsys):
    assert main(["inspect", str(tmp_path / "missing.b64")]) == 2
    assert "Error:" in capsys.readouterr().err


def test_extra_template_catalog(tmp_path, capsys):
    catalog_file = tmp_path / "stem.yaml"
    catalog_file.write_text(
        "templates:\n"
        "  - id: stem\n"
        "    name: Bicycle Stem\n"
        "    parameters:\n"
        "      - {name: length, default: 100}\n"
        "    script: a = make_stem(length)\n"
    )
    assert main(["--templates", str(catalog_file), "templates"]) == 0
    assert "stem: Bicycle Stem" in capsys.readouterr().out


def test_preview_writes_stl(tmp_path, monkeypatch, capsys, fake_codec, mesh_value, response_with):
    from spinlio.compute import codec

    monkeypatch.setattr(codec, "Rhino3dmCodec", lambda: fake_codec)
    response = tmp_path / "response.json"
    response.write_text(json.dumps(response_with(("OutputBake", mesh_value()))))
    stl = tmp_path / "out.stl"
    scene = tmp_path / "out.json"

    assert main(["preview", str(response), "-o", str(stl), "--ascii", "--json", str(scene)]) == 0
    assert stl.read_text().startswith("solid response")
    assert "Wrote 2 triangle(s)" in capsys.readouterr().err
    assert json.loads(scene.read_text())["geometry"]["data"]["index"]["array"] == [0, 1, 2, 0, 2, 3]


def test_preview_without_geometry(tmp_path, monkeypatch, capsys, fake_codec):
    from spinlio.compute import codec

    monkeypatch.setattr(codec, "Rhino3dmCodec", lambda: fake_codec)
    response = tmp_path / "response.json"
    response.write_text(json.dumps({"values": []}))
    assert main(["preview", str(response), "-o", str(tmp_path / "out.stl")]) == 1
    assert "no geometry output" in capsys.readouterr().err


def test_templates_option_keeps_environment_catalogs(tmp_path, monkeypatch, capsys):
    from spinlio.ghx import catalog

    env_dir = tmp_path / "env"
    env_dir.mkdir()
    (env_dir / "post.yaml").write_text(
        "templates:\n"
        "  - id: seatpost\n"
        "    name: Seatpost\n"
        "    parameters: [{name: length, default: 350}]\n"
        "    script: a = make_post(length)\n"
    )
    extra = tmp_path / "stem.yaml"
    extra.write_text(
        "templates:\n"
        "  - id: stem\n"
        "    name: Bicycle Stem\n"
        "    parameters: [{name: length, default: 100}]\n"
        "    script: a = make_stem(length)\n"
    )
    monkeypatch.setenv("SPINLIO_TEMPLATE_DATA", str(env_dir))
    catalog.clear_cache()

    assert main(["--templates", str(extra), "templates"]) == 0
    out = capsys.readouterr().out
    assert "seatpost: Seatpost" in out
    assert "stem: Bicycle Stem" in out


def test_validate_line_wrapped_file(tmp_path, capsys):
    doc = tmp_path / "fork.b64"
    assert main(["generate", "fork", "-o", str(doc)]) == 0
    text = doc.read_text().strip()
    doc.write_text("\n".join(text[i:i + 76] for i in range(0, len(text), 76)) + "\n")
    assert main(["validate", str(doc)]) == 0
    assert "passed validation" in capsys.readouterr().out
