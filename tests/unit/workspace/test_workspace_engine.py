"""Workspace engine orchestration tests.

Drives the engine end to end over the seed project, a temporary local
folder, and an in-memory sandbox: open, edit, save, run, reset.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from devstudio.file_tree_model import DEFAULT_PROJECT_PATHS
from devstudio.local_fs import LocalBridge, StaticDirectoryPicker
from devstudio.session import LineType, SessionRuntime, SessionState
from devstudio.workspace import WorkspaceEngine
from sandbox_fakes import FakeProcess, FakeSandbox, boot_with, settle


def _engine(sandbox: FakeSandbox, folder: Path | None = None) -> WorkspaceEngine:
    engine = WorkspaceEngine(LocalBridge(StaticDirectoryPicker(folder)), SessionRuntime(boot_with(sandbox)))
    engine.init()
    return engine


def _contents(engine: WorkspaceEngine) -> list[str]:
    return [line.content for line in engine.session.output_log]


class WorkspaceDocumentTests(unittest.IsolatedAsyncioTestCase):
    async def test_init_loads_the_seed_project(self) -> None:
        engine = _engine(FakeSandbox())

        self.assertEqual(engine.paths.paths(), set(DEFAULT_PROJECT_PATHS))
        self.assertEqual([node.name for node in engine.tree()][-1], "src")
        self.assertIsNone(engine.active_document)

    async def test_open_document_reuses_the_buffer_for_one_path(self) -> None:
        engine = _engine(FakeSandbox())

        first = engine.open_document("/src/App.jsx")
        again = engine.open_document("src/App.jsx")

        self.assertIsNotNone(first)
        self.assertIs(first, again)
        self.assertEqual(first.language, "javascript")
        self.assertEqual(len(engine.documents), 1)
        self.assertIs(engine.active_document, first)

    async def test_directories_and_unknown_paths_do_not_open(self) -> None:
        engine = _engine(FakeSandbox())

        self.assertIsNone(engine.open_document("src"))
        self.assertIsNone(engine.open_document("missing.js"))

    async def test_edit_updates_buffer_and_table(self) -> None:
        engine = _engine(FakeSandbox())
        document = engine.open_document("src/App.jsx")

        self.assertTrue(engine.edit(document.id, "export default 2"))

        self.assertTrue(document.modified)
        self.assertEqual(engine.paths.get("src/App.jsx").content, "export default 2")
        self.assertFalse(engine.edit("unknown-id", "x"))

    async def test_closing_the_active_document_activates_the_last_remaining(self) -> None:
        engine = _engine(FakeSandbox())
        app = engine.open_document("src/App.jsx")
        css = engine.open_document("src/App.css")
        main = engine.open_document("src/main.jsx")

        self.assertTrue(engine.close_document(main.id))
        self.assertIs(engine.active_document, css)
        engine.select_document(app.id)
        self.assertTrue(engine.close_document(css.id))
        self.assertIs(engine.active_document, app)
        self.assertTrue(engine.close_document(app.id))
        self.assertIsNone(engine.active_document)
        self.assertFalse(engine.close_document(app.id))

    async def test_save_without_local_folder_or_session_clears_modified(self) -> None:
        engine = _engine(FakeSandbox())
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "x")

        self.assertTrue(await engine.save())

        self.assertFalse(document.modified)
        self.assertEqual(_contents(engine)[-1], "Saved: src/App.jsx")

    async def test_save_of_a_path_removed_from_the_table_is_silently_skipped(self) -> None:
        engine = _engine(FakeSandbox())
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "x")
        engine.paths.delete("src/App.jsx")

        self.assertFalse(await engine.save(document.id))

        self.assertTrue(document.modified)
        self.assertEqual(engine.session.output_log, [])


class WorkspaceRunTests(unittest.IsolatedAsyncioTestCase):
    async def test_run_mounts_installs_and_starts(self) -> None:
        sandbox = FakeSandbox([FakeProcess(["installed\n"]), FakeProcess(["VITE ready\n"], block=True)])
        engine = _engine(sandbox)

        self.assertTrue(await engine.run())
        await settle()
        sandbox.signal_ready(3000, "http://localhost:3000/")

        self.assertEqual(engine.session.state, SessionState.RUNNING)
        self.assertEqual(set(sandbox.fs.files), set(DEFAULT_PROJECT_PATHS) - {"src"})
        self.assertIn("src", sandbox.fs.directories)
        self.assertEqual([command for command, _args in sandbox.spawned], ["pnpm", "pnpm"])
        self.assertEqual(engine.preview_url, "http://localhost:3000/")
        await engine.teardown()

    async def test_run_still_starts_when_install_fails(self) -> None:
        sandbox = FakeSandbox([FakeProcess(exit_code=1), FakeProcess(block=True)])
        engine = _engine(sandbox)

        self.assertTrue(await engine.run())

        self.assertEqual(engine.session.state, SessionState.RUNNING)
        self.assertTrue(any(line.type == LineType.STDERR for line in engine.session.output_log))
        await engine.teardown()

    async def test_run_again_after_the_dev_server_crashes(self) -> None:
        sandbox = FakeSandbox(
            [FakeProcess(), FakeProcess(["crash\n"], exit_code=1), FakeProcess(), FakeProcess(block=True)]
        )
        engine = _engine(sandbox)
        self.assertTrue(await engine.run())
        await settle()
        self.assertEqual(engine.session.state, SessionState.STOPPED)

        self.assertTrue(await engine.run())

        self.assertEqual(engine.session.state, SessionState.RUNNING)
        self.assertEqual(len(sandbox.spawned), 4)
        self.assertFalse(any("Cannot" in line for line in _contents(engine)))
        await engine.teardown()

    async def test_save_after_the_dev_server_exits_skips_the_dead_mount(self) -> None:
        sandbox = FakeSandbox([FakeProcess(), FakeProcess(exit_code=0)])
        engine = _engine(sandbox)
        await engine.run()
        await settle()
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "after exit")

        self.assertTrue(await engine.save(document.id))

        self.assertNotEqual(sandbox.fs.files["src/App.jsx"], "after exit")
        self.assertNotIn("Updated in sandbox: src/App.jsx", _contents(engine))

    async def test_save_while_running_updates_the_live_sandbox(self) -> None:
        sandbox = FakeSandbox([FakeProcess(), FakeProcess(block=True)])
        engine = _engine(sandbox)
        await engine.run()
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "live edit")

        self.assertTrue(await engine.save(document.id))

        self.assertEqual(sandbox.fs.files["src/App.jsx"], "live edit")
        self.assertIn("Updated in sandbox: src/App.jsx", _contents(engine))
        await engine.teardown()

    async def test_stop_clears_the_preview_url(self) -> None:
        sandbox = FakeSandbox([FakeProcess(), FakeProcess(block=True)])
        engine = _engine(sandbox)
        await engine.run()
        sandbox.signal_ready(3000, "http://localhost:3000/")

        await engine.stop()

        self.assertIsNone(engine.preview_url)
        self.assertEqual(engine.session.state, SessionState.STOPPED)

    async def test_reset_restores_template_and_clears_everything(self) -> None:
        sandbox = FakeSandbox([FakeProcess(), FakeProcess(block=True)])
        engine = _engine(sandbox)
        await engine.run()
        sandbox.signal_ready(3000, "http://localhost:3000/")
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "changed")
        engine.paths.create_file("src", "extra.js")

        await engine.reset()

        self.assertEqual(engine.paths.paths(), set(DEFAULT_PROJECT_PATHS))
        self.assertNotEqual(engine.paths.get("src/App.jsx").content, "changed")
        self.assertEqual(engine.documents, {})
        self.assertIsNone(engine.active_document)
        self.assertEqual(engine.session.output_log, [])
        self.assertIsNone(engine.preview_url)
        self.assertFalse(engine.use_local_fs)


class WorkspaceLocalFolderTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        (self.root / "src").mkdir()
        (self.root / "src" / "App.jsx").write_text("old", encoding="utf-8")
        (self.root / "package.json").write_text("{}", encoding="utf-8")

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    async def test_open_folder_replaces_the_table_and_documents(self) -> None:
        engine = _engine(FakeSandbox(), self.root)
        engine.open_document("index.html")

        self.assertTrue(await engine.open_folder())

        self.assertEqual(engine.paths.paths(), {"src", "src/App.jsx", "package.json"})
        self.assertEqual(engine.documents, {})
        self.assertTrue(engine.use_local_fs)
        self.assertEqual(_contents(engine)[-1], "Local folder connected!")

    async def test_declined_prompt_keeps_the_current_project(self) -> None:
        engine = _engine(FakeSandbox(), None)

        self.assertFalse(await engine.open_folder())

        self.assertEqual(engine.paths.paths(), set(DEFAULT_PROJECT_PATHS))
        self.assertFalse(engine.use_local_fs)

    async def test_edit_and_save_write_through_to_disk(self) -> None:
        engine = _engine(FakeSandbox(), self.root)
        await engine.open_folder()
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "new")
        self.assertTrue(engine.bridge.get_file("src/App.jsx").modified)

        self.assertTrue(await engine.save())

        self.assertEqual((self.root / "src" / "App.jsx").read_text(encoding="utf-8"), "new")
        self.assertFalse(document.modified)
        self.assertFalse(engine.bridge.get_file("src/App.jsx").modified)

    async def test_failed_local_write_keeps_modified_and_reports(self) -> None:
        engine = _engine(FakeSandbox(), self.root)
        await engine.open_folder()
        document = engine.open_document("src/App.jsx")
        engine.edit(document.id, "new")
        (self.root / "src" / "App.jsx").unlink()

        with self.assertLogs("devstudio.local_fs.bridge", level="ERROR"):
            self.assertFalse(await engine.save())

        self.assertTrue(document.modified)
        last = engine.session.output_log[-1]
        self.assertEqual((last.content, last.type), ("Failed to save: src/App.jsx", LineType.STDERR))

    async def test_reset_disconnects_the_local_folder(self) -> None:
        engine = _engine(FakeSandbox(), self.root)
        await engine.open_folder()

        await engine.reset()

        self.assertFalse(engine.bridge.is_connected())
        self.assertEqual(engine.paths.paths(), set(DEFAULT_PROJECT_PATHS))


if __name__ == "__main__":
    unittest.main()
