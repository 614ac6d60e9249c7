"""Tests for layout.render - viewer projection and live overlay"""

from varboard.layout import BackgroundKind, LayoutDocument, apply_update, default_placeholders, render_viewer


class TestRenderViewer:
    """What a viewer draws"""

    def test_disabled_entries_omitted(self, sample_layout):
        """enabled:false entries never reach the viewer"""
        doc = LayoutDocument.from_dict(sample_layout)
        scene = render_viewer(doc)

        assert scene.names == ["score"]
        # still present in the editable document
        assert [e.name for e in doc.variables] == ["score", "clock"]

    def test_item_fields(self, sample_layout):
        item = render_viewer(LayoutDocument.from_dict(sample_layout)).items["score"]

        assert item.title == "Score"
        assert item.text == "0 - 0"
        assert (item.top, item.left) == ("10%", "25%")
        assert item.font_size == "2em"
        assert item.text_color == item.title_color == "#ffffff"

    def test_defaults(self):
        item = render_viewer(LayoutDocument.from_dict({"variables": [{"name": "a"}]})).items["a"]

        assert item.title == "a"
        assert item.text == ""
        assert (item.top, item.left) == ("0%", "0%")
        assert item.font_size == "1em"
        assert item.text_color == "#ffffff"

    def test_background(self):
        scene = render_viewer(LayoutDocument.from_dict({"background": "/img/bg.png"}))
        assert scene.background == "/img/bg.png"
        assert scene.background_kind == BackgroundKind.LOCATOR


class TestApplyUpdate:
    """Live overlay"""

    def test_text_and_color(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))
        applied = apply_update(scene, {"score": {"text": "1 - 0", "color": "#00ff00"}})

        item = scene.items["score"]
        assert applied == ["score"]
        assert item.text == "1 - 0"
        assert item.text_color == item.title_color == "#00ff00"

    def test_escaped_newlines(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))
        apply_update(scene, {"score": {"text": "line1\\nline2"}})

        assert scene.items["score"].text == "line1\nline2"

    def test_color_kept_when_absent(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))
        apply_update(scene, {"score": {"text": "x"}})

        assert scene.items["score"].text_color == "#ffffff"

    def test_unknown_and_disabled_skipped(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))
        applied = apply_update(scene, {"nope": {"text": "x"}, "clock": {"text": "12:00"}})

        assert applied == []
        assert "clock" not in scene.items

    def test_non_object_ignored(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))

        assert apply_update(scene, ["score"]) == []
        assert apply_update(scene, None) == []
        assert scene.items["score"].text == "0 - 0"

    def test_plain_string_value(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))
        apply_update(scene, {"score": "2 - 2"})

        assert scene.items["score"].text == "2 - 2"

    def test_non_string_text_placeholder(self, sample_layout):
        scene = render_viewer(LayoutDocument.from_dict(sample_layout))
        apply_update(scene, {"score": {"text": 5}})

        assert scene.items["score"].text == "[Error: Not a string - int]"

    def test_document_not_mutated(self, sample_layout):
        """Overlaying never writes back into the layout"""
        doc = LayoutDocument.from_dict(sample_layout)
        apply_update(render_viewer(doc), {"score": {"text": "9 - 9", "color": "#000"}})

        assert doc.get("score").text == "0 - 0"
        assert doc.get("score").style.color == "#ffffff"


class TestDefaultPlaceholders:
    """Starter entries for an empty designer"""

    def test_ten_entries(self):
        entries = default_placeholders()

        assert [e.name for e in entries] == [f"text_{i}" for i in range(1, 11)]
        assert all(e.enabled for e in entries)
        assert entries[0].style.top == "10px"
        assert entries[1].style.top == "70px"

    def test_unknown_height_single_column(self):
        assert {e.style.left for e in default_placeholders(0)} == {"10px"}

    def test_wraps_into_columns(self):
        entries = default_placeholders(canvas_height=200)

        assert [(e.style.top, e.style.left) for e in entries[:4]] == [
            ("10px", "10px"),
            ("70px", "10px"),
            ("130px", "10px"),
            ("10px", "190px"),
        ]
