"""Site descriptor for Ivan.

A website is declared once, as an immutable ``Website`` value holding the
site metadata and the closed enumeration of its sections. Everything else
(themes, plugins, publishing) reads from this value and never mutates it.

Key classes:
- Language: Locale tags a website can be published in.
- SectionID: Base enum for a site's section identifiers.
- Website: Frozen record of site metadata and sections.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from .utils import join_root_url


class InvalidWebsiteError(ValueError):
    """Raised when a website declaration is malformed."""


class Language(str, Enum):
    """Locale tags used for ``<html lang>`` and the RSS ``<language>``."""

    ENGLISH = "en"
    NORWEGIAN_BOKMAL = "nb"
    NORWEGIAN_NYNORSK = "nn"
    SWEDISH = "sv"
    DANISH = "da"
    GERMAN = "de"
    FRENCH = "fr"
    SPANISH = "es"

    @property
    def tag(self) -> str:
        return self.value


class SectionID(str, Enum):
    """Base class for a website's section identifiers.

    Subclass it with one member per section; the member value is the
    section's path segment::

        @unique
        class Sections(SectionID):
            VAPOR = "vapor"
            LIFE = "life"
    """

    @property
    def path(self) -> str:
        return self.value

    @property
    def title(self) -> str:
        """Default display title, overridable by the section's index file."""
        return self.value.capitalize()


@dataclass(frozen=True)
class Website:
    """Immutable site metadata plus the enumeration of its sections.

    Attributes:
        url: Absolute URL the site is served from.
        name: Display name.
        description: Free text shown on the home page and in the feed.
        language: Locale of the content.
        section_ids: ``SectionID`` subclass listing the sections.
        image_path: Optional site-wide image, relative to the site root.
    """

    url: str
    name: str
    description: str
    language: Language
    section_ids: type[SectionID]
    image_path: str | None = None

    def __post_init__(self) -> None:
        parts = urlsplit(self.url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise InvalidWebsiteError(
                f"Website url must be absolute with a scheme and host: {self.url!r}"
            )
        if not (isinstance(self.section_ids, type) and issubclass(self.section_ids, SectionID)):
            raise InvalidWebsiteError("section_ids must be a SectionID subclass")
        members = list(self.section_ids)
        if not members:
            raise InvalidWebsiteError(f"{self.name} declares no sections")
        # Enum aliases collapse duplicate values, so compare against the raw members.
        if len(self.section_ids.__members__) != len(members):
            duplicated = sorted(
                name
                for name, member in self.section_ids.__members__.items()
                if member.name != name
            )
            raise InvalidWebsiteError(
                f"Duplicate section identifiers: {', '.join(duplicated)}"
            )

    @property
    def sections(self) -> tuple[SectionID, ...]:
        """Section identifiers in declaration order."""
        return tuple(self.section_ids)

    def section(self, value: str) -> SectionID | None:
        """Look up a section by its path segment."""
        try:
            return self.section_ids(value)
        except ValueError:
            return None

    def section_url(self, section: SectionID) -> str:
        return f"/{section.path}/"

    def absolute_url(self, path: str) -> str:
        return join_root_url(self.url, path)
