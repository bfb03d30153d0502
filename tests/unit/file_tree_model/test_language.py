"""Language tag inference tests for editor buffers."""

from __future__ import annotations

import unittest

from devstudio.language import PLAINTEXT, language_for_path


class LanguageForPathTests(unittest.TestCase):
    def test_known_web_extensions_map_directly(self) -> None:
        self.assertEqual(language_for_path("src/App.jsx"), "javascript")
        self.assertEqual(language_for_path("src/main.tsx"), "typescript")
        self.assertEqual(language_for_path("index.html"), "html")
        self.assertEqual(language_for_path("README.MD"), "markdown")
        self.assertEqual(language_for_path("ci.yml"), "yaml")

    def test_unmapped_extension_falls_back_to_pygments_alias(self) -> None:
        self.assertEqual(language_for_path("scripts/build.rb"), "ruby")

    def test_unknown_names_are_plaintext(self) -> None:
        self.assertEqual(language_for_path("data.zzqqunknown"), PLAINTEXT)
        self.assertEqual(language_for_path("src/"), PLAINTEXT)


if __name__ == "__main__":
    unittest.main()
