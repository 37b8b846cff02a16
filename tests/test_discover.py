"""Tests for sprite discovery."""

import os

import pytest

from welder.discover import compile_patterns, discover_sprites, glob_to_regex
from welder.errors import DiscoveryError, WelderIOError

from helpers import solid_pixels, write_png


class TestGlobPatterns:
    """Tests for glob translation."""

    @pytest.mark.parametrize("pattern,path,expected", [
        ("**/*.png", "hero.png", True),
        ("**/*.png", "a/b/c.png", True),
        ("*.png", "a/b.png", False),
        ("chars/*.png", "chars/slime.png", True),
        ("chars/?at.png", "chars/bat.png", True),
        ("tiles/**", "tiles/x/y.png", True),
        ("[ab]*.png", "bat.png", True),
        ("[!ab]*.png", "bat.png", False),
        ("{chars,tiles}/*.png", "tiles/grass.png", True),
        ("{chars,tiles}/*.png", "items/gem.png", False),
        ("**/_*", "chars/_wip.png", True),
    ])
    def test_matching(self, pattern, path, expected):
        """Patterns should match root-relative paths with / separators."""
        regex = compile_patterns([pattern])[0]
        assert bool(regex.fullmatch(path)) is expected

    @pytest.mark.parametrize("pattern", ["[abc", "{a,b", "a}", "[]", "trailing\\", "[z-a]", ""])
    def test_invalid_patterns_raise(self, pattern):
        """Malformed patterns should raise DiscoveryError."""
        with pytest.raises(DiscoveryError):
            glob_to_regex(pattern)


class TestDiscoverSprites:
    """Tests for discover_sprites."""

    def test_sorted_relative_paths(self, sprite_tree):
        """Results should be /-separated and byte-wise sorted."""
        found = discover_sprites(sprite_tree, ["**/*.png"])
        assert found == ["chars/bat.PNG", "chars/slime.png", "hero.png", "tiles/grass.png"]

    def test_extension_is_case_insensitive(self, sprite_tree):
        """Upper-case extensions count as PNG."""
        assert "chars/bat.PNG" in discover_sprites(sprite_tree, ["**"])

    def test_lowercase_pattern_matches_uppercase_extension(self, sprite_tree):
        """The default `**/*.png` include selects `.PNG` files too."""
        assert "chars/bat.PNG" in discover_sprites(sprite_tree, ["**/*.png"])
        assert discover_sprites(sprite_tree, ["chars/*.png"]) == ["chars/bat.PNG", "chars/slime.png"]

    def test_exclude_matches_uppercase_extension(self, sprite_tree):
        found = discover_sprites(sprite_tree, ["**/*.png"], ["chars/bat.png"])
        assert "chars/bat.PNG" not in found
        assert "chars/slime.png" in found

    def test_pattern_body_stays_case_sensitive(self, sprite_tree):
        assert discover_sprites(sprite_tree, ["CHARS/*.png"]) == []

    def test_non_png_files_skipped(self, sprite_tree):
        """Other files are never returned, even when the pattern matches."""
        assert "notes.txt" not in discover_sprites(sprite_tree, ["**"])

    def test_exclude_wins_over_include(self, sprite_tree):
        """A file matching both include and exclude is dropped."""
        found = discover_sprites(sprite_tree, ["**/*.png", "tiles/*.png"], ["tiles/**"])
        assert "tiles/grass.png" not in found
        assert "hero.png" in found

    def test_requires_an_include_match(self, sprite_tree):
        """Files matching no include pattern are dropped."""
        assert discover_sprites(sprite_tree, ["tiles/*.png"]) == ["tiles/grass.png"]

    def test_missing_root_is_empty(self, tmp_path):
        """A missing root returns an empty list rather than failing."""
        assert discover_sprites(tmp_path / "nope", ["**/*.png"]) == []

    def test_invalid_pattern_raises_even_for_missing_root(self, tmp_path):
        """Pattern errors are reported before the walk."""
        with pytest.raises(DiscoveryError):
            discover_sprites(tmp_path / "nope", ["[oops"])

    def test_repeated_runs_identical(self, sprite_tree):
        """Discovery is deterministic."""
        first = discover_sprites(sprite_tree, ["**/*.png"])
        second = discover_sprites(sprite_tree, ["**/*.png"])
        assert first == second

    def test_order_independent_of_creation_order(self, tmp_path):
        """Filesystem creation order never leaks into the result."""
        names = ["b.png", "a.png", "C.png", "a/z.png", "_.png"]
        one = tmp_path / "one"
        two = tmp_path / "two"
        for name in names:
            write_png(one / name, solid_pixels(1, 1))
        for name in reversed(names):
            write_png(two / name, solid_pixels(1, 1))

        expected = ["C.png", "_.png", "a.png", "a/z.png", "b.png"]
        assert discover_sprites(one, ["**/*.png"]) == expected
        assert discover_sprites(two, ["**/*.png"]) == expected

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinks_not_followed(self, sprite_tree, tmp_path):
        """Symlinked files and directories are skipped."""
        outside = tmp_path / "outside"
        write_png(outside / "secret.png", solid_pixels(1, 1))
        try:
            os.symlink(outside, sprite_tree / "linked_dir")
            os.symlink(sprite_tree / "hero.png", sprite_tree / "alias.png")
        except OSError:
            pytest.skip("cannot create symlinks here")

        found = discover_sprites(sprite_tree, ["**/*.png"])
        assert "linked_dir/secret.png" not in found
        assert "alias.png" not in found

    def test_unreadable_directory_raises(self, sprite_tree, monkeypatch):
        """A subtree that cannot be listed fails instead of being skipped."""
        real_scandir = os.scandir

        def scandir(path="."):
            if os.path.basename(os.fspath(path)) == "chars":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)
        with pytest.raises(WelderIOError, match="chars"):
            discover_sprites(sprite_tree, ["**/*.png"])
