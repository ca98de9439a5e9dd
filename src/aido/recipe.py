"""
Recipe parsing and lookup.

A recipe is a ``<name>.recipe`` file in the recipes directory: an optional YAML frontmatter
header followed by a markdown body.  The body becomes the system prompt of a conversation; the
header names the recipe and restricts which tools the model may use:

    ---
    name: do
    allowed_tools: [ls]
    ---
    You are a command-line assistant. ...

The opening and closing delimiter lines are three or more dashes and need not match in length.
A document that does not start with such a bracketed header is all body.
"""

import logging
import re
from pathlib import Path
from typing import (
    List,
    NamedTuple,
    Optional,
)

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
)

from aido.core.errors import (
    RecipeEmptyError,
    RecipeNotFoundError,
)

logger = logging.getLogger(__name__)

RECIPE_SUFFIX = ".recipe"

# 1: opening dashes, 2: header (non-greedy), 3: closing dashes, 4: body
HEADER_PATTERN = re.compile(r"\A(-{3,})[ \t]*\r?\n(.*?)\r?\n(-{3,})[ \t]*\r?\n(.*)\Z", re.DOTALL)


class Header(BaseModel):
    """Recipe metadata from the YAML frontmatter; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    allowed_tools: List[str] = Field(default_factory=list)

    @classmethod
    def parse(cls, content: str) -> "Header":
        """Parse YAML header text, falling back to the default header if it is not usable."""
        if not content.strip():
            return cls()
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            logger.debug("Recipe header is not valid YAML, ignoring it: %s", exc)
            return cls()
        if not isinstance(data, dict):
            logger.debug("Recipe header is not a mapping, ignoring it")
            return cls()
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.debug("Recipe header has unexpected values, ignoring it: %s", exc)
            return cls()


class Recipe(BaseModel):
    """A parsed recipe: header plus trimmed body."""

    model_config = ConfigDict(frozen=True)

    header: Header = Field(default_factory=Header)
    body: str = ""


class Frontmatter(NamedTuple):
    """Raw pieces of a document that starts with a delimited header."""

    header: str
    body: str


class RecipeInfo(NamedTuple):
    """A recipe file found in the recipes directory."""

    name: str
    display_name: str


def split_frontmatter(content: str) -> Optional[Frontmatter]:
    """Return the raw header and body, or ``None`` if *content* has no delimited header."""
    match = HEADER_PATTERN.match(content)
    if match is None:
        return None
    return Frontmatter(header=match.group(2), body=match.group(4))


def parse_recipe(content: str) -> Recipe:
    """
    Parse a recipe document.

    Raises
    ------
    RecipeEmptyError
        If *content* is empty or whitespace only.
    """
    if not content.strip():
        raise RecipeEmptyError()

    parts = split_frontmatter(content)
    if parts is None:
        return Recipe(body=content.strip())

    return Recipe(header=Header.parse(parts.header), body=parts.body.strip())


# ---------------------------------------------------------------------------
# Recipe files
# ---------------------------------------------------------------------------
def get_recipes_dir(config_file: str | Path) -> Path:
    """Recipes live in a ``recipes`` directory next to the config file."""
    return Path(config_file).expanduser().parent / "recipes"


def get_content(recipes_dir: Path, name: str) -> str:
    """Read the raw text of recipe *name*."""
    path = Path(recipes_dir) / f"{name}{RECIPE_SUFFIX}"
    if not path.is_file():
        raise RecipeNotFoundError(name)
    return path.read_text(encoding="utf-8")


def get(recipes_dir: Path, name: str) -> Recipe:
    """Load and parse recipe *name* from *recipes_dir*."""
    recipe = parse_recipe(get_content(recipes_dir, name))
    logger.info("Retrieved recipe '%s': %s", name, recipe.header)
    return recipe


def list_recipes(recipes_dir: Path) -> List[RecipeInfo]:
    """
    List the recipes in *recipes_dir*, sorted by file name.

    The display name is the header's ``name`` when set, else the file name without its suffix.
    A missing directory yields an empty list.
    """
    recipes_dir = Path(recipes_dir)
    if not recipes_dir.is_dir():
        logger.info("Recipes directory %s does not exist", recipes_dir)
        return []

    recipes: List[RecipeInfo] = []
    for path in sorted(recipes_dir.glob(f"*{RECIPE_SUFFIX}")):
        if not path.is_file():
            continue
        name = path.stem
        display_name = name
        try:
            header_name = parse_recipe(path.read_text(encoding="utf-8")).header.name
        except (OSError, UnicodeDecodeError, RecipeEmptyError) as exc:
            logger.warning("Could not read recipe %s: %s", path, exc)
        else:
            display_name = header_name or name
        recipes.append(RecipeInfo(name=name, display_name=display_name))
    return recipes
