import unittest
from unittest.mock import patch
import os
import sys
import json
import tempfile
from pathlib import Path

# Add parent dir to path so we can import placeholder_expander
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import placeholder_expander

TOKEN = "<% name %>"


class TestPlaceholderExpander(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, rel, content):
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def read(self, rel):
        return (self.root / rel).read_text(encoding="utf-8")

    def test_escape_json_string(self):
        self.assertEqual(placeholder_expander.escape_json_string('a"b\\c\td\re\nf'), 'a\\"b\\\\c\\td\\re\\nf')

    def test_expands_only_matching_files(self):
        self.write("README.md", f"# {TOKEN}\nWelcome to {TOKEN}.")
        self.write("src/server/index.ts", f"export const name = '{TOKEN}';")
        self.write("devvit.json", f'{{"name": "{TOKEN}"}}')
        self.write("src/client/style.css", "body { margin: 0; }")
        self.write("builder/notes.txt", TOKEN)

        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame")

        self.assertEqual(result.changed_files, 4)
        self.assertEqual(result.renamed_paths, 0)
        self.assertEqual(self.read("README.md"), "# mygame\nWelcome to mygame.")
        self.assertEqual(self.read("src/server/index.ts"), "export const name = 'mygame';")
        self.assertEqual(self.read("builder/notes.txt"), "mygame")
        self.assertEqual(self.read("src/client/style.css"), "body { margin: 0; }")
        self.assertFalse((self.root / "src/client/style.css.bak").exists())

    def test_backups_keep_original(self):
        self.write("README.md", f"# {TOKEN}")
        placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame")
        self.assertEqual(self.read("README.md.bak"), f"# {TOKEN}")

    def test_backup_can_be_disabled(self):
        self.write("README.md", f"# {TOKEN}")
        placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame", backup=False)
        self.assertFalse((self.root / "README.md.bak").exists())

    def test_skips_vendor_dirs_and_binary_exts(self):
        self.write("node_modules/pkg/index.js", TOKEN)
        self.write(".git/config", TOKEN)
        self.write("dist/out.js", TOKEN)
        self.write("build/out.js", TOKEN)
        self.write("assets/logo.png", TOKEN.encode("utf-8"))
        self.write("assets/theme.MP3", TOKEN.encode("utf-8"))

        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame", rename_paths=True)

        self.assertEqual(result.changed_files, 0)
        for rel in ("node_modules/pkg/index.js", ".git/config", "dist/out.js", "build/out.js"):
            self.assertEqual(self.read(rel), TOKEN)
        self.assertEqual((self.root / "assets/logo.png").read_bytes(), TOKEN.encode("utf-8"))

    def test_json_stays_valid(self):
        self.write("package.json", json.dumps({"name": TOKEN, "description": f"The {TOKEN} app"}))
        value = 'say "hi" \\ tab\there\nnext'

        placeholder_expander.expand_placeholder(self.root, TOKEN, value)

        data = json.loads(self.read("package.json"))
        self.assertEqual(data["name"], value)
        self.assertEqual(data["description"], f"The {value} app")

    def test_non_json_is_not_escaped(self):
        self.write("notes.txt", TOKEN)
        placeholder_expander.expand_placeholder(self.root, TOKEN, 'a "b"')
        self.assertEqual(self.read("notes.txt"), 'a "b"')

    def test_rename_paths_deepest_first(self):
        self.write(f"{TOKEN}/{TOKEN}_assets/file_{TOKEN}.txt", "plain")
        self.write(f"{TOKEN}/other.txt", "plain")

        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "game", rename_paths=True)

        self.assertEqual(result.renamed_paths, 3)
        self.assertTrue((self.root / "game/game_assets/file_game.txt").is_file())
        self.assertTrue((self.root / "game/other.txt").is_file())
        self.assertFalse((self.root / TOKEN).exists())

    def test_renamed_file_backup_uses_new_name(self):
        self.write(f"{TOKEN}.txt", f"hello {TOKEN}")

        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "game", rename_paths=True)

        self.assertEqual(result, (1, 1))
        self.assertEqual(self.read("game.txt"), "hello game")
        self.assertEqual(self.read("game.txt.bak"), f"hello {TOKEN}")
        self.assertEqual(sorted(p.name for p in self.root.iterdir()), ["game.txt", "game.txt.bak"])

    def test_rename_disabled_by_default(self):
        self.write(f"{TOKEN}.txt", "plain")
        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "game")
        self.assertEqual(result.renamed_paths, 0)
        self.assertTrue((self.root / f"{TOKEN}.txt").exists())

    @patch("console_log.warn")
    def test_rename_collision_is_skipped(self, mock_warn):
        self.write(f"{TOKEN}.txt", "template")
        self.write("game.txt", "existing")

        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "game", rename_paths=True)

        self.assertEqual(result.renamed_paths, 0)
        self.assertEqual(self.read("game.txt"), "existing")
        mock_warn.assert_called_once()

    def test_no_occurrences_is_not_an_error(self):
        self.write("a.txt", "nothing here")
        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame", rename_paths=True)
        self.assertEqual(result, (0, 0))

    def test_second_run_changes_nothing(self):
        self.write("README.md", f"# {TOKEN}")
        placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame")
        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame")
        self.assertEqual(result.changed_files, 0)
        self.assertEqual(self.read("README.md.bak"), f"# {TOKEN}")

    @patch("console_log.warn")
    def test_undecodable_file_is_skipped(self, mock_warn):
        self.write("data.bin", b"\xff\xfe" + TOKEN.encode("utf-8"))
        result = placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame")
        self.assertEqual(result.changed_files, 0)
        mock_warn.assert_called_once()

    def test_bom_is_stripped_on_write(self):
        self.write("devvit.json", b"\xef\xbb\xbf" + f'{{"name": "{TOKEN}"}}'.encode("utf-8"))
        placeholder_expander.expand_placeholder(self.root, TOKEN, "mygame")
        raw = (self.root / "devvit.json").read_bytes()
        self.assertEqual(raw, b'{"name": "mygame"}')

    def test_empty_placeholder_rejected(self):
        with self.assertRaises(ValueError):
            placeholder_expander.expand_placeholder(self.root, "", "x")


if __name__ == "__main__":
    unittest.main()
