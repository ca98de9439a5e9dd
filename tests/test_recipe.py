"""Tests for recipe parsing and lookup."""

import pytest

from aido import recipe as recipes
from aido.core.errors import (
    RecipeEmptyError,
    RecipeNotFoundError,
)
from aido.recipe import (
    Frontmatter,
    Header,
    RecipeInfo,
    parse_recipe,
    split_frontmatter,
)


@pytest.mark.parametrize(
    "content",
    [
        "---\nname: Test Recipe\n---\nThis is the body of the recipe.",
        "----\nname: Test Recipe\n-----\nThis is the body of the recipe.",
        "---\nname: Test Recipe\n-----\nThis is the body of the recipe.",
        "----------\nname: Test Recipe\n----------\nThis is the body of the recipe.",
        "---\nname: Test Recipe\nanotherParam: some other value\n---\n"
        "This is the body of the recipe.",
    ],
)
def test_header_and_body(content: str) -> None:
    """Delimiters of three or more dashes, matched or not, bracket the header."""
    recipe = parse_recipe(content)

    assert recipe.header.name == "Test Recipe"
    assert recipe.body == "This is the body of the recipe."


def test_name_and_allowed_tools() -> None:
    """The header's name and allowed tools are read; the body is trimmed."""
    recipe = parse_recipe("---\nname: do\nallowed_tools: ['ls']\n---\nBODY\n\n")

    assert recipe.header.name == "do"
    assert recipe.header.allowed_tools == ["ls"]
    assert recipe.body == "BODY"


def test_crlf_line_endings() -> None:
    """Recipes saved with Windows line endings keep their header."""
    recipe = parse_recipe("---\r\nname: do\r\nallowed_tools: ['ls']\r\n---\r\nBODY\r\n")

    assert recipe.header.name == "do"
    assert recipe.header.allowed_tools == ["ls"]
    assert recipe.body == "BODY"


def test_block_list_and_quotes() -> None:
    """Both YAML list styles and quoted scalars are understood."""
    block = parse_recipe("---\nname: test recipe\nallowed_tools:\n  - ls\n  - cat\n---\nBody.")
    flow = parse_recipe('---\nname: "quoted name"\nallowed_tools: ["ls", "cat"]\n---\nBody.')

    assert block.header.allowed_tools == ["ls", "cat"]
    assert flow.header.name == "quoted name"
    assert flow.header.allowed_tools == ["ls", "cat"]


def test_no_header() -> None:
    """A document without frontmatter is all body."""
    recipe = parse_recipe("This is just a plain recipe body with no header.")

    assert recipe.header == Header()
    assert recipe.body == "This is just a plain recipe body with no header."


def test_closing_delimiter_not_on_own_line() -> None:
    """Dashes glued to other text do not close the header; nothing is consumed."""
    content = (
        "---\nname: Test Recipe\nDoes not start on new line-----\nThis is the body of the recipe."
    )
    recipe = parse_recipe(content)

    assert recipe.header.name == ""
    assert recipe.body == content


def test_only_opening_delimiter() -> None:
    """An opening delimiter without a closing one leaves the document intact."""
    content = "---\nname: Test Recipe\nThis should all be treated as body"
    recipe = parse_recipe(content)

    assert recipe.header.name == ""
    assert recipe.body == content


def test_empty_header() -> None:
    """An empty header region is the default header."""
    recipe = parse_recipe("---\n\n---\nThis is the body of the recipe.")

    assert recipe.header == Header()
    assert recipe.body == "This is the body of the recipe."


@pytest.mark.parametrize("body", ["", "   \n  \t  \n"])
def test_empty_body(body: str) -> None:
    """An empty or whitespace-only body becomes an empty string."""
    recipe = parse_recipe("---\nname: Test Recipe\n---\n" + body)

    assert recipe.header.name == "Test Recipe"
    assert recipe.body == ""


def test_delimiters_with_trailing_whitespace() -> None:
    """Spaces and tabs after the dashes are tolerated."""
    recipe = parse_recipe("---   \n  \nname: Test Recipe\n  \n---  \t \nThis is the body.")

    assert recipe.body == "This is the body."


def test_body_with_delimiter_lines() -> None:
    """Only the first closing delimiter ends the header; later ones belong to the body."""
    recipe = parse_recipe(
        "---\nname: Test Recipe\n---\nHere's some content.\n\n---\n"
        "This looks like a delimiter but it's in the body.\n---\n\nMore content."
    )

    assert recipe.header.name == "Test Recipe"
    assert recipe.body == (
        "Here's some content.\n\n---\nThis looks like a delimiter but it's in the body.\n---\n\n"
        "More content."
    )


def test_header_with_dashes_in_values() -> None:
    """Dash runs inside header lines are part of the header."""
    recipe = parse_recipe(
        "---\nname: My Recipe\ndescription: This has -- dashes in it\ncommand: ls -la\n---\n"
        "Body content here."
    )

    assert recipe.header.name == "My Recipe"
    assert recipe.body == "Body content here."


def test_complex_header_extra_keys_ignored() -> None:
    """Unrecognised keys, nested maps and block scalars are ignored."""
    recipe = parse_recipe(
        "---\nname: complex recipe\nauthor: test\nversion: 1.0\ntags:\n  - utility\n"
        "options:\n  verbose: true\ndescription: |\n  multi\n  line\n---\nBody."
    )

    assert recipe.header.name == "complex recipe"
    assert recipe.body == "Body."


def test_header_that_is_not_a_mapping() -> None:
    """A scalar header falls back to the default header."""
    recipe = parse_recipe("---\na\n---\nb")

    assert recipe.header.name == ""
    assert recipe.body == "b"


def test_invalid_yaml_header_falls_back() -> None:
    """A header that is not valid YAML keeps the body usable."""
    recipe = parse_recipe("---\nname: [unclosed\n---\nStill usable.")

    assert recipe.header == Header()
    assert recipe.body == "Still usable."


def test_unicode() -> None:
    """Non-ASCII text survives in header and body."""
    recipe = parse_recipe(
        "---\nname: 测试食谱\nauthor: José García\n---\nThis recipe contains unicode: café, 中文"
    )

    assert recipe.header.name == "测试食谱"
    assert recipe.body == "This recipe contains unicode: café, 中文"


@pytest.mark.parametrize("content", ["", "   \n  \t  \n"])
def test_empty_content(content: str) -> None:
    """Empty documents are rejected."""
    with pytest.raises(RecipeEmptyError):
        parse_recipe(content)


def test_split_frontmatter() -> None:
    """The pattern stage reports the raw header, or None when there is none."""
    assert split_frontmatter("---\nname: x\n---\nbody") == Frontmatter("name: x", "body")
    assert split_frontmatter("no header") is None


# ---------------------------------------------------------------------------
# Recipe files
# ---------------------------------------------------------------------------
def test_get_and_list(tmp_path) -> None:
    """Recipes are read from ``<name>.recipe`` files and listed by display name."""
    (tmp_path / "do.recipe").write_text(
        "---\nname: Do things\nallowed_tools: [ls]\n---\nYou are a command-line assistant.",
        encoding="utf-8",
    )
    (tmp_path / "plain.recipe").write_text("Just a prompt.", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    recipe = recipes.get(tmp_path, "do")

    assert recipe.header.allowed_tools == ["ls"]
    assert recipe.body == "You are a command-line assistant."
    assert recipes.list_recipes(tmp_path) == [
        RecipeInfo(name="do", display_name="Do things"),
        RecipeInfo(name="plain", display_name="plain"),
    ]


def test_missing_recipe(tmp_path) -> None:
    """Asking for an unknown recipe is an error naming it."""
    with pytest.raises(RecipeNotFoundError, match="'nope'"):
        recipes.get(tmp_path, "nope")


def test_list_missing_directory(tmp_path) -> None:
    """A missing recipes directory lists nothing."""
    assert recipes.list_recipes(tmp_path / "absent") == []


def test_recipes_dir_is_next_to_config_file(tmp_path) -> None:
    """The recipes directory sits beside the config file."""
    assert recipes.get_recipes_dir(tmp_path / "aido.env") == tmp_path / "recipes"
