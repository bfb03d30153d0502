"""Tree derivation tests for path-table snapshots.

Verifies nesting, synthesized ancestors, sibling order, and that the built
forest always covers exactly the stored paths under random mutation.
"""

from __future__ import annotations

import random
import unittest

from devstudio.file_tree_model import (
    DEFAULT_PROJECT_FILES,
    DIRECTORY,
    FileRecord,
    PathTable,
    build_tree,
    format_tree,
    iter_tree,
    parent_path,
)


class BuildTreeTests(unittest.TestCase):
    def test_template_builds_one_src_directory_with_four_children(self) -> None:
        nodes = build_tree(PathTable(DEFAULT_PROJECT_FILES).snapshot())

        self.assertEqual([node.name for node in nodes], ["package.json", "vite.config.js", "index.html", "src"])
        src = nodes[-1]
        self.assertTrue(src.is_dir)
        self.assertEqual(
            [child.path for child in src.children],
            ["src/main.jsx", "src/App.jsx", "src/App.css", "src/index.css"],
        )

    def test_missing_ancestors_are_synthesized_as_directories(self) -> None:
        nodes = build_tree([FileRecord(path="a/b/c.txt", name="c.txt", content="x")])

        self.assertEqual(len(nodes), 1)
        a = nodes[0]
        self.assertEqual((a.path, a.kind), ("a", DIRECTORY))
        b = a.children[0]
        self.assertEqual((b.path, b.kind), ("a/b", DIRECTORY))
        self.assertEqual(b.children[0].path, "a/b/c.txt")

    def test_explicit_record_replaces_synthesized_placeholder(self) -> None:
        nodes = build_tree(
            [
                FileRecord(path="src/a.js", name="a.js", content=""),
                FileRecord(path="src", name="src", kind=DIRECTORY),
            ]
        )

        self.assertEqual([node.path for node in nodes], ["src"])
        self.assertEqual([child.path for child in nodes[0].children], ["src/a.js"])

    def test_empty_directory_has_no_children(self) -> None:
        nodes = build_tree([FileRecord(path="empty", name="empty", kind=DIRECTORY)])

        self.assertEqual(nodes[0].children, ())

    def test_format_tree_indents_and_marks_directories(self) -> None:
        nodes = build_tree(
            [
                FileRecord(path="src", name="src", kind=DIRECTORY),
                FileRecord(path="src/a.js", name="a.js", content=""),
                FileRecord(path="index.html", name="index.html", content=""),
            ]
        )

        self.assertEqual(format_tree(nodes), "src/\n  a.js\nindex.html")


class BuildTreeConsistencyTests(unittest.TestCase):
    def _assert_consistent(self, table: PathTable) -> None:
        nodes = build_tree(table.snapshot())
        seen = [node.path for node in iter_tree(nodes)]
        self.assertEqual(len(seen), len(set(seen)))
        self.assertTrue(table.paths() <= set(seen))
        for node in iter_tree(nodes):
            for child in node.children:
                self.assertEqual(parent_path(child.path), node.path)
        for root in nodes:
            self.assertEqual(parent_path(root.path), "")
        for path in set(seen) - table.paths():
            self.assertTrue(any(other.startswith(path + "/") for other in table.paths()))

    def test_random_upserts_and_deletes_keep_the_forest_consistent(self) -> None:
        rng = random.Random(1337)
        segments = ["src", "lib", "ui", "a.js", "b.css", "c.md"]
        table = PathTable(DEFAULT_PROJECT_FILES)

        for _ in range(300):
            depth = rng.randint(1, 4)
            path = "/".join(rng.choice(segments) for _ in range(depth))
            if rng.random() < 0.3 and len(table):
                victim = rng.choice(sorted(table.paths()))
                table.delete(victim)
            elif rng.random() < 0.3:
                table.upsert(path, FileRecord(path=path, name="", kind=DIRECTORY))
            else:
                table.upsert(path, FileRecord(path=path, name="", content="x"))
            self._assert_consistent(table)


if __name__ == "__main__":
    unittest.main()
