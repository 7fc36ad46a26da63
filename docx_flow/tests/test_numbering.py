"""Tests for numbering compiler behavior."""
import unittest

from docx_flow.compiler.numbering_compiler import NumberingCompiler, num_format_to_css
from docx_flow.compiler.style_resolver import StyleResolver
from docx_flow.model.elements import NumberingReference
from docx_flow.model.numbering_model import BulletPicture, NumberingLevel
from docx_flow.model.options import RenderOptions
from docx_flow.model.style_model import ParagraphStyleProperties, StyleDefinition


def rule(stylesheet, selector):
    matches = [item for item in stylesheet.rules if item.selector == selector]
    assert matches, f"no rule for {selector}"
    return matches[0]


class NumberingCompilerTest(unittest.TestCase):
    """Ensure numbering levels become the expected counter rules."""

    def setUp(self) -> None:
        self.compiler = NumberingCompiler()

    def test_two_level_decimal_list(self) -> None:
        levels = [
            NumberingLevel("3", 0, level_text="%1.", num_format="decimal"),
            NumberingLevel("3", 1, level_text="%1.%2", num_format="decimal"),
        ]
        stylesheet = self.compiler.compile(levels)

        reset = [item for item in stylesheet.rules if item.declarations.get("counter-reset") == "docx-num-3-1"]
        self.assertEqual(len(reset), 1)
        self.assertEqual(reset[0].selector, "p.docx-num-3-0")

        before = rule(stylesheet, "p.docx-num-3-1:before")
        self.assertEqual(
            before.declarations["content"],
            '""counter(docx-num-3-0, decimal)"."counter(docx-num-3-1, decimal)"\\9"',
        )
        self.assertEqual(before.declarations["counter-increment"], "docx-num-3-1")

        base = rule(stylesheet, "p.docx-num-3-1")
        self.assertEqual(base.declarations["display"], "list-item")
        self.assertEqual(base.declarations["list-style-position"], "inside")
        self.assertEqual(base.declarations["list-style-type"], "none")

        wrapper = stylesheet.rules[-1]
        self.assertEqual(wrapper.selector, ".docx-wrapper")
        self.assertEqual(wrapper.declarations, {"counter-reset": "docx-num-3-0"})

    def test_root_counters_collected_once_per_list(self) -> None:
        levels = [
            NumberingLevel("1", 0, level_text="%1)", num_format="lowerLetter"),
            NumberingLevel("2", 0, level_text="%1.", num_format="upperRoman"),
        ]
        stylesheet = self.compiler.compile(levels)
        self.assertEqual(stylesheet.rules[-1].declarations["counter-reset"], "docx-num-1-0 docx-num-2-0")
        self.assertEqual(
            rule(stylesheet, "p.docx-num-1-0:before").declarations["content"],
            '""counter(docx-num-1-0, lower-alpha)")\\9"',
        )

    def test_suffix_variants(self) -> None:
        space = self.compiler.level_text_to_content("%1.", "space", "7", 0, "decimal")
        nothing = self.compiler.level_text_to_content("%1.", "nothing", "7", 0, "decimal")
        self.assertEqual(space, '""counter(docx-num-7-0, decimal)".\\a0"')
        self.assertEqual(nothing, '""counter(docx-num-7-0, decimal)"."')

    def test_malformed_placeholders_are_dropped(self) -> None:
        self.assertEqual(self.compiler.level_text_to_content("%3", "tab", "1", 0, "decimal"), '"\\9"')
        self.assertEqual(self.compiler.level_text_to_content("%0-", None, "1", 0, "decimal"), '"-"')
        self.assertEqual(self.compiler.level_text_to_content("a%b", None, "1", 2, "decimal"), '"ab"')

    def test_literal_quotes_escaped(self) -> None:
        content = self.compiler.level_text_to_content('"%1"', None, "1", 0, "decimal")
        self.assertEqual(content, '"\\""counter(docx-num-1-0, decimal)"\\""')

    def test_bullet_picture_binds_image_variable(self) -> None:
        level = NumberingLevel("9", 0, num_format="bullet", bullet=BulletPicture("rId5", "width: 9pt;"))
        stylesheet = self.compiler.compile([level])

        before = rule(stylesheet, "p.docx-num-9-0:before")
        self.assertEqual(before.declarations["background"], "var(--docx-rid5)")
        self.assertEqual(before.declarations["display"], "inline-block")
        self.assertEqual(before.css_text, "width: 9pt;")
        self.assertEqual(stylesheet.image_bindings[0].variable, "--docx-rid5")
        self.assertEqual(stylesheet.image_bindings[0].image_ref, "rId5")
        self.assertEqual(rule(stylesheet, "p.docx-num-9-0").declarations["list-style-type"], "none")
        self.assertNotEqual(stylesheet.rules[-1].selector, ".docx-wrapper")

    def test_level_without_text_uses_list_style_type(self) -> None:
        stylesheet = self.compiler.compile([
            NumberingLevel("4", 0, num_format="lowerRoman"),
            NumberingLevel("4", 1, num_format="bullet"),
            NumberingLevel("4", 2, num_format="ordinal"),
        ])
        self.assertEqual(rule(stylesheet, "p.docx-num-4-0").declarations["list-style-type"], "lower-roman")
        self.assertEqual(rule(stylesheet, "p.docx-num-4-1").declarations["list-style-type"], "disc")
        self.assertEqual(rule(stylesheet, "p.docx-num-4-2").declarations["list-style-type"], "ordinal")

    def test_level_styles_merged_into_rules(self) -> None:
        level = NumberingLevel(
            "2", 0, level_text="%1.", num_format="decimal",
            p_style={"margin-left": "36pt", "list-style-type": "square"},
            r_style={"font-weight": "bold"},
        )
        stylesheet = self.compiler.compile([level])
        self.assertEqual(rule(stylesheet, "p.docx-num-2-0").declarations["margin-left"], "36pt")
        self.assertEqual(rule(stylesheet, "p.docx-num-2-0").declarations["list-style-type"], "square")
        self.assertEqual(rule(stylesheet, "p.docx-num-2-0:before").declarations["font-weight"], "bold")

    def test_compile_is_deterministic(self) -> None:
        levels = [
            NumberingLevel("1", 0, level_text="%1.", num_format="decimal"),
            NumberingLevel("1", 1, level_text="%1.%2.", num_format="decimal"),
            NumberingLevel("2", 0, num_format="bullet", bullet=BulletPicture("img1")),
        ]
        first = self.compiler.compile(levels)
        second = self.compiler.compile(levels)
        self.assertEqual(first, second)
        self.assertIn("p.docx-num-1-1:before", [r.selector for r in first.rules])

    def test_counter_names_unique_per_level(self) -> None:
        names = {
            self.compiler.numbering_counter(num_id, level)
            for num_id in ("1", "2", "12")
            for level in range(3)
        }
        self.assertEqual(len(names), 9)

    def test_custom_root_class(self) -> None:
        compiler = NumberingCompiler(RenderOptions(class_name="preview"))
        self.assertEqual(compiler.numbering_class("5", 1), "preview-num-5-1")
        self.assertEqual(compiler.image_patch("--preview-img", "blob:1"), ".preview-wrapper { --preview-img: url(blob:1) }")

    def test_num_format_mapping(self) -> None:
        self.assertEqual(num_format_to_css("upperLetter"), "upper-alpha")
        self.assertEqual(num_format_to_css("none"), "none")
        self.assertIsNone(num_format_to_css(None))


class NumberingStyleLinkTest(unittest.TestCase):
    """Paragraph styles pick up the level of their linked numbering."""

    def test_level_copied_into_style(self) -> None:
        catalog = StyleResolver().resolve([
            StyleDefinition(
                "ListHeading", target="p",
                paragraph_props=ParagraphStyleProperties(numbering=NumberingReference("4")),
            )
        ])
        NumberingCompiler().link_paragraph_styles(
            [NumberingLevel("4", 2, paragraph_style_name="ListHeading")], catalog
        )
        self.assertEqual(catalog.get("ListHeading").paragraph_props.numbering.level, 2)

    def test_missing_style_logged_in_debug(self) -> None:
        catalog = StyleResolver().resolve([])
        compiler = NumberingCompiler(RenderOptions(debug=True))
        with self.assertLogs("docx_flow.compiler.numbering_compiler", level="WARNING") as logs:
            compiler.link_paragraph_styles([NumberingLevel("1", 0, paragraph_style_name="Nope")], catalog)
        self.assertIn("Nope", logs.output[0])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
