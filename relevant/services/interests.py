"""Built-in interest catalogue.

Loads ``relevant/config/interests.yaml`` (categories, subcategories, keywords and
a popular-keyword list) and answers the lookups the interest picker needs.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from relevant.core.exceptions import ConfigError, ConfigValidationError
from relevant.core.logging import get_logger
from relevant.models.user import InterestCategory, InterestCategoryForm, Interests

logger = get_logger(__name__)

_CONFIG_BASE_DIR = Path(__file__).parent.parent / "config"
DEFAULT_CATALOG_PATH = _CONFIG_BASE_DIR / "interests.yaml"

SuggestionKind = Literal["category", "subcategory", "keyword"]
MAX_KEYWORD_SUGGESTIONS = 10


class CatalogFile(BaseModel):
    """Schema of interests.yaml."""

    categories: Interests = Field(default_factory=Interests)
    popular_keywords: list[str] = Field(default_factory=list)

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_categories(cls, v: Any) -> Interests:
        return v if isinstance(v, Interests) else Interests.from_payload(v)


@lru_cache(maxsize=4)
def load_interest_catalog(path: Path = DEFAULT_CATALOG_PATH) -> CatalogFile:
    """Load and validate the catalogue file.

    Args:
        path: YAML file to read

    Returns:
        Parsed catalogue

    Raises:
        ConfigError: If the file is missing or not valid YAML
        ConfigValidationError: If the content does not match the schema
    """
    if not path.exists():
        logger.error("Interest catalogue not found", path=str(path))
        raise ConfigError(f"Config file not found: {path}", config_path=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("YAML parsing failed", path=str(path), error=str(e))
        raise ConfigError(f"Invalid YAML in {path}: {e}", config_path=str(path)) from e

    if not isinstance(content, dict):
        raise ConfigError(f"Config file must contain a YAML object: {path}", config_path=str(path))

    try:
        catalog = CatalogFile.model_validate(content)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigValidationError(
            field=".".join(str(loc) for loc in first["loc"]),
            reason=first["msg"],
            config_path=str(path),
        ) from e

    logger.debug("Loaded interest catalogue", path=str(path), categories=len(catalog.categories))
    return catalog


class InterestCatalog:
    """Lookups over the built-in catalogue.

    Example:
        >>> catalog = InterestCatalog()
        >>> catalog.keywords("Technology", "Artificial Intelligence")[:2]
        ['AI', 'machine learning']
        >>> [form.category for form in catalog.suggest(limit=2)]
        ['Technology', 'Health & Fitness']
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else DEFAULT_CATALOG_PATH
        self._catalog = load_interest_catalog(self.path)

    @property
    def interests(self) -> Interests:
        return self._catalog.categories

    @property
    def categories(self) -> list[str]:
        """Category names, highest priority first."""
        return self.interests.categories

    @property
    def popular_keywords(self) -> list[str]:
        return list(self._catalog.popular_keywords)

    def get(self, category: str) -> InterestCategory | None:
        return self.interests.root.get(category)

    def subcategories(self, category: str) -> list[str]:
        entry = self.get(category)
        return list(entry.subcategories) if entry else []

    def keywords(self, category: str, subcategory: str | None = None) -> list[str]:
        """Keywords of a category, or of one of its subcategories."""
        entry = self.get(category)
        if entry is None:
            return []
        if subcategory:
            sub = entry.subcategories.get(subcategory)
            return list(sub.keywords) if sub else []
        return list(entry.keywords)

    def search(self, text: str, kind: SuggestionKind = "category") -> list[str]:
        """Case-insensitive substring match over names or keywords.

        Keyword results are de-duplicated and capped at ten.
        """
        query = text.lower().strip()

        if kind == "category":
            return [name for name in self.interests.root if query in name.lower()]

        if kind == "subcategory":
            return [
                name
                for entry in self.interests.root.values()
                for name in entry.subcategories
                if query in name.lower()
            ]

        pool: dict[str, None] = dict.fromkeys(self.popular_keywords)
        for entry in self.interests.root.values():
            pool.update(dict.fromkeys(entry.keywords))
            for sub in entry.subcategories.values():
                pool.update(dict.fromkeys(sub.keywords))
        return [kw for kw in pool if query in kw.lower()][:MAX_KEYWORD_SUGGESTIONS]

    def suggest(
        self, exclude: Interests | None = None, limit: int | None = None
    ) -> list[InterestCategoryForm]:
        """Category forms ready to submit, skipping ones the user already has.

        Args:
            exclude: The user's current interests
            limit: Maximum number of suggestions

        Returns:
            Forms ordered by descending priority
        """
        forms = [
            InterestCategoryForm(
                category=name,
                priority=self.interests.root[name].priority,
                keywords=list(self.interests.root[name].keywords),
            )
            for name in self.categories
            if exclude is None or name not in exclude
        ]
        return forms[:limit] if limit is not None else forms


__all__ = [
    "CatalogFile",
    "InterestCatalog",
    "load_interest_catalog",
    "DEFAULT_CATALOG_PATH",
]
