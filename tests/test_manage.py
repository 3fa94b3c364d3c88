import json

import pytest

from handgesture import manage

from conftest import open_palm, thumbs_up


@pytest.fixture
def use_store(monkeypatch, json_store):
    monkeypatch.setattr(manage, "build_template_store", lambda: json_store)
    return json_store


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def test_export_then_import_file(use_store, tmp_path, capsys):
    use_store.create("thumbs_up", [thumbs_up()] * 10)
    out = tmp_path / "export.json"

    assert manage.main(["manage", "export", str(out)]) == 0
    assert json.loads(out.read_text())[0]["name"] == "thumbs_up"

    assert manage.main(["manage", "clear"]) == 0
    assert use_store.list_templates() == []

    assert manage.main(["manage", "import", str(out)]) == 0
    assert [t.name for t in use_store.list_templates()] == ["thumbs_up"]
    assert "Imported 1" in capsys.readouterr().out


def test_import_from_url_accepts_wrapped_data(use_store, monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse({"data": [{"name": "hello", "frames": [open_palm()] * 12}]})

    monkeypatch.setattr(manage.requests, "get", fake_get)

    assert manage.main(["manage", "import", "https://example.test/gestures"]) == 0
    assert calls == ["https://example.test/gestures"]
    assert [t.name for t in use_store.list_templates()] == ["hello"]


def test_list_and_summary(use_store, capsys):
    use_store.create("thumbs_up", [thumbs_up()] * 10)
    use_store.create("thumbs_up", [thumbs_up()] * 20)

    assert manage.main(["manage", "list"]) == 0
    out = capsys.readouterr().out
    assert "[0] thumbs_up - 10 frames" in out
    assert "[1] thumbs_up - 20 frames" in out

    assert manage.main(["manage", "summary"]) == 0
    assert "Total gestures: 2" in capsys.readouterr().out


def test_summarize_templates_frame():
    df = manage.summarize_templates([])
    assert list(df.columns) == ["name", "frame_count", "created_at"]
    assert df.empty


def test_unknown_mode(use_store, capsys):
    assert manage.main(["manage", "train"]) == 1
    assert "Unknown mode" in capsys.readouterr().out


def test_import_skips_malformed_records(use_store, tmp_path, capsys):
    source = tmp_path / "datasets.json"
    source.write_text(json.dumps([
        {"name": "broken", "frames": 7},
        {"name": "thumbs_up", "frames": [thumbs_up()] * 10},
    ]))

    assert manage.main(["manage", "import", str(source)]) == 0
    out = capsys.readouterr().out
    assert "Imported 1" in out
    assert "Skipped 'broken'" in out
    assert [t.name for t in use_store.list_templates()] == ["thumbs_up"]
