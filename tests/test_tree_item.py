"""
Tests for TreeItem - the vertices of a virtual tree.

Tests focus on:
- File/directory classification by live filesystem probe
- Child lookup with and without #n disambiguation
- Directory creation and removal policies
- Entity collection and outline formatting
"""

import pytest

from vtree.tree import (
    AlreadyExistsError,
    AmbiguousError,
    InvalidNameError,
    NotFoundError,
    TreeItem,
    is_valid_item_name,
    split_nth_item,
)


@pytest.fixture
def real_file(tmp_path):
    path = tmp_path / "real.txt"
    path.write_text("hello")
    return path


@pytest.fixture
def duplicates(real_file):
    """A directory with a file and a directory both named NAME.

    Structure:
        docs
        ├── NAME        (file)
        ├── NAME        (directory)
        └── other
    """
    root = TreeItem("docs")
    root.add_new_child("NAME", real_file)
    root.add_item(TreeItem("NAME", desc="the directory"))
    root.make_directory("other")
    return root


class TestHelpers:
    """Name validation and #n parsing."""

    @pytest.mark.parametrize("name", ["foo", "123.txt", "with space", "dots.and-dash_"])
    def test_valid_names(self, name):
        assert is_valid_item_name(name)

    @pytest.mark.parametrize("char", list('\\/#|"*?<>:'))
    def test_invalid_characters(self, char):
        assert not is_valid_item_name(f"a{char}b")

    def test_split_nth(self):
        assert split_nth_item("foo.txt#0") == ("foo.txt", 0)
        assert split_nth_item("foo.txt#4412") == ("foo.txt", 4412)
        assert split_nth_item("2#4#2") == ("2#4", 2)

    def test_split_without_index(self):
        assert split_nth_item("foo") == ("foo", -1)
        assert split_nth_item("foo#bar") == ("foo#bar", -1)
        assert split_nth_item("foo#") == ("foo#", -1)


class TestClassification:
    """is_file/is_dir probe the disk on every call."""

    def test_item_without_entity_is_dir(self):
        item = TreeItem("dir")
        assert item.is_dir()
        assert not item.is_file()

    def test_item_with_existing_entity_is_file(self, real_file):
        item = TreeItem.new_file("real.txt", real_file)
        assert item.is_file()
        assert not item.is_dir()

    def test_missing_entity_is_dir(self, tmp_path):
        item = TreeItem.new_file("ghost", tmp_path / "ghost.txt")
        assert item.is_dir()

    def test_entity_pointing_at_directory_is_dir(self, tmp_path):
        item = TreeItem.new_file("folder", tmp_path)
        assert item.is_dir()

    def test_classification_flips_when_backing_file_is_deleted(self, real_file):
        """
        Given: An item aliasing an existing file
        When: The file is deleted behind the tree's back
        Then: The item is classified as a directory from then on
        """
        item = TreeItem.new_file("real.txt", real_file)
        assert item.is_file()

        real_file.unlink()

        assert item.is_dir()
        assert not item.is_file()

    def test_file_with_children_is_still_a_file(self, real_file):
        item = TreeItem.new_file("real.txt", real_file)
        item.add_item(TreeItem("child"))
        assert item.is_file()


class TestLookup:
    """get_child, get_child_dir, has and get_offspring."""

    def test_has_is_exact(self, duplicates):
        assert duplicates.has("NAME")
        assert not duplicates.has("NAME#0")
        assert not duplicates.has("missing")

    def test_get_child_first_match_wins(self, duplicates):
        child = duplicates.get_child("NAME")
        assert child.is_file()

    def test_get_child_nth(self, duplicates):
        assert duplicates.get_child("NAME#0").is_file()
        second = duplicates.get_child("NAME#1")
        assert second.desc == "the directory"

    def test_get_child_nth_out_of_range(self, duplicates):
        with pytest.raises(AmbiguousError) as exc_info:
            duplicates.get_child("NAME#2")
        assert exc_info.value.count == 2

    def test_get_child_missing(self, duplicates):
        with pytest.raises(NotFoundError):
            duplicates.get_child("missing")
        with pytest.raises(NotFoundError):
            duplicates.get_child("missing#0")

    def test_get_child_dir_skips_file_sibling(self, duplicates):
        child = duplicates.get_child_dir("NAME")
        assert child.desc == "the directory"

    def test_get_child_dir_rejects_file(self, duplicates):
        with pytest.raises(NotFoundError):
            duplicates.get_child_dir("NAME#0")
        assert duplicates.get_child_dir("NAME#1").desc == "the directory"

    def test_get_child_dir_missing(self, duplicates):
        with pytest.raises(NotFoundError):
            duplicates.get_child_dir("nothing")

    def test_get_offspring(self):
        root = TreeItem("root")
        root.make_directory("a").make_directory("b").make_directory("c")

        assert root.get_offspring("a/b/c").name == "c"
        assert root.get_offspring("a").name == "a"

    def test_get_offspring_is_strictly_downward(self):
        root = TreeItem("root")
        root.make_directory("a").make_directory("b")

        with pytest.raises(NotFoundError):
            root.get_offspring("a/../a")
        with pytest.raises(NotFoundError):
            root.get_offspring("a/x")


class TestMutation:
    """make_directory, add_item, remove_child and remove_item."""

    def test_make_directory_appends_in_order(self):
        root = TreeItem("root")
        root.make_directory("b")
        root.make_directory("a")
        assert root.children_names() == ["b", "a"]
        assert root.get_child("a").entity is None

    def test_make_directory_rejects_existing_directory(self):
        root = TreeItem("root")
        root.make_directory("a")
        with pytest.raises(AlreadyExistsError):
            root.make_directory("a")

    def test_file_child_does_not_block_directory(self, real_file):
        root = TreeItem("root")
        root.add_new_child("a", real_file)

        root.make_directory("a")

        assert root.children_names() == ["a", "a"]
        assert root.get_child_dir("a").entity is None

    @pytest.mark.parametrize("name", ["a/b", "a\\b", "a#1", "a|b", 'a"b', "a*", "a?", "<a>", "c:"])
    def test_make_directory_rejects_invalid_names(self, name):
        root = TreeItem("root")
        with pytest.raises(InvalidNameError):
            root.make_directory(name)
        assert root.children_names() == []

    def test_add_new_child_does_not_check_duplicates(self, real_file):
        root = TreeItem("root")
        root.add_new_child("x", real_file)
        root.add_new_child("x", real_file)
        assert root.children_names() == ["x", "x"]

    def test_remove_child_removes_first_match(self, duplicates):
        removed = duplicates.remove_child("NAME")

        assert removed.entity is not None
        assert duplicates.children_names() == ["NAME", "other"]
        assert duplicates.get_child("NAME").desc == "the directory"

    def test_remove_child_does_not_parse_index(self, duplicates):
        with pytest.raises(NotFoundError):
            duplicates.remove_child("NAME#1")

    def test_remove_child_missing(self):
        with pytest.raises(NotFoundError):
            TreeItem("root").remove_child("x")

    def test_remove_item_by_identity(self, duplicates):
        second = duplicates.get_child("NAME#1")
        duplicates.remove_item(second)

        assert duplicates.children_names() == ["NAME", "other"]
        assert duplicates.get_child("NAME").is_file()

    def test_children_is_a_copy(self):
        root = TreeItem("root")
        root.make_directory("a")
        root.children.clear()
        assert root.children_names() == ["a"]


class TestEntities:
    """Recursive entity collection."""

    def test_entities_recurse_through_directories(self, tmp_path):
        root = TreeItem("root")
        top = root.add_new_child("top.txt", tmp_path / "top.txt")
        sub = root.make_directory("sub")
        deep = sub.make_directory("deep").add_new_child("deep.txt", tmp_path / "deep.txt")
        root.make_directory("empty")

        assert root.entities() == [top, deep]

    def test_entities_do_not_descend_into_entity_items(self, tmp_path):
        root = TreeItem("root")
        aliased = root.add_new_child("aliased", tmp_path / "gone")
        aliased.add_new_child("hidden", tmp_path / "hidden")

        assert root.entities() == [aliased]


class TestSerialization:
    """Dictionary / JSON conversion."""

    def test_round_trip(self, tmp_path):
        root = TreeItem("t", desc="root desc")
        root.make_directory("a").add_new_child("f", "./f.txt")
        root.make_directory("b")

        copy = TreeItem.from_dict(root.to_dict())

        assert copy.to_dict() == root.to_dict()
        assert copy.get_offspring("a/f").entity == "./f.txt"

    def test_missing_optional_fields(self):
        item = TreeItem.from_string('{"name": "default", "children": []}')
        assert item.name == "default"
        assert item.desc is None
        assert item.entity is None
        assert item.children == []

    def test_from_file(self, tmp_path):
        path = tmp_path / "t.json"
        path.write_text('{"name": "t", "children": [{"name": "x", "children": []}], "desc": null, "entity": null}')
        assert TreeItem.from_file(path).children_names() == ["x"]


class TestFormatting:
    """Box-drawn outline."""

    def test_format_nesting_and_order(self):
        root = TreeItem("t")
        a = root.make_directory("dir-A")
        a.add_new_child("item.txt", "./a")
        a.add_new_child("second.txt", "./b")
        root.make_directory("dir-B").make_directory("inner")

        assert root.format().splitlines() == [
            "t",
            "├── dir-A",
            "│   ├── item.txt",
            "│   └── second.txt",
            "└── dir-B",
            "    └── inner",
        ]

    def test_format_leaf(self):
        assert str(TreeItem("alone")) == "alone"
