"""Tests for content tree helpers and unit conversion."""
import dataclasses
import unittest

from docx_flow.model.elements import (
    DomType,
    ParagraphElement,
    RunElement,
    Section,
    SectionProperties,
    TableCellElement,
    TableElement,
    TableRowElement,
    TextElement,
    find_parent,
)
from docx_flow.utils.css import append_class, copy_style_properties, escape_class_name, style_to_string
from docx_flow.utils.units import Length, render_length, twips


class ContentTreeTest(unittest.TestCase):
    """Parent links and upward lookups."""

    def test_constructor_children_get_parent(self) -> None:
        text = TextElement(text="a")
        run = RunElement(children=[text])
        self.assertIs(text.parent, run)
        self.assertEqual(text.type, DomType.TEXT)

    def test_append_and_extend(self) -> None:
        paragraph = ParagraphElement()
        run = paragraph.append(RunElement())
        run.extend([TextElement(text="a"), TextElement(text="b")])
        self.assertIs(run.parent, paragraph)
        self.assertEqual([child.text for child in run.children], ["a", "b"])
        self.assertTrue(all(child.parent is run for child in run.children))

    def test_adopt_children_replaces_stale_links(self) -> None:
        text = TextElement(text="a")
        original = RunElement(children=[text])
        copy = dataclasses.replace(original, children=[text])
        self.assertIs(text.parent, original)
        copy.adopt_children()
        self.assertIs(text.parent, copy)

    def test_find_parent(self) -> None:
        text = TextElement(text="x")
        cell = TableCellElement(children=[ParagraphElement(children=[RunElement(children=[text])])])
        table = TableElement(children=[TableRowElement(children=[cell])])
        self.assertIs(find_parent(text, DomType.CELL), cell)
        self.assertIs(find_parent(text, DomType.TABLE), table)
        self.assertIsNone(find_parent(text, DomType.HEADER))

    def test_parent_link_does_not_keep_parent_alive(self) -> None:
        text = TextElement(text="orphan")
        RunElement(children=[text])
        self.assertIsNone(text.parent)

    def test_section_is_immutable(self) -> None:
        section = Section(elements=[], properties=SectionProperties())
        with self.assertRaises(dataclasses.FrozenInstanceError):
            section.page_within_section = 2

    def test_section_identity(self) -> None:
        named = SectionProperties(section_id="s1")
        anonymous = SectionProperties()
        self.assertEqual(named.identity, "s1")
        self.assertEqual(anonymous.identity, id(anonymous))
        self.assertNotEqual(SectionProperties().identity, anonymous.identity)


class CssHelpersTest(unittest.TestCase):
    """Class name and rule text helpers."""

    def test_escape_class_name(self) -> None:
        self.assertEqual(escape_class_name("Table Grid.Light"), "Table-Grid-Light")
        self.assertEqual(escape_class_name("R&&D"), "RandD")
        self.assertIsNone(escape_class_name(None))

    def test_append_class(self) -> None:
        self.assertEqual(append_class(None, "a"), "a")
        self.assertEqual(append_class("a", "b"), "a b")
        self.assertEqual(append_class("a", None), "a")

    def test_copy_style_properties(self) -> None:
        target = {"color": "red"}
        copy_style_properties({"color": "blue", "margin": "0", "padding": "1pt"}, target, ["color", "margin"])
        self.assertEqual(target, {"color": "red", "margin": "0"})
        copy_style_properties({"color": "blue"}, target, override=True)
        self.assertEqual(target["color"], "blue")

    def test_style_to_string(self) -> None:
        self.assertEqual(
            style_to_string("p.docx", {"color": "red"}, "width: 1pt;"),
            "p.docx {\r\n  color: red;\r\nwidth: 1pt;}\r\n",
        )


class UnitsTest(unittest.TestCase):
    """Length conversion and formatting."""

    def test_twips(self) -> None:
        self.assertEqual(twips(1440), Length(72.0, "pt"))

    def test_render_length(self) -> None:
        self.assertEqual(render_length(Length(12.5)), "12.50pt")
        self.assertEqual(render_length(Length(50, "%")), "50.00%")
        self.assertIsNone(render_length(None))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
