"""Ivan's Blog.

The concrete website published by the ``ivan`` command: its metadata,
sections, theme and plugins.
"""

from __future__ import annotations

from enum import unique

from .plugins import Plugin, highlighting
from .site import Language, SectionID, Website
from .themes import FOUNDATION, Theme


@unique
class BlogSection(SectionID):
    PROJECTS = "projects"
    VAPOR = "vapor"
    AWS = "aws"
    IOS = "ios"
    LIFE = "life"

    @property
    def title(self) -> str:
        return _TITLES.get(self.value, self.value.capitalize())


_TITLES = {"aws": "AWS", "ios": "iOS"}

IVAN = Website(
    url="https://ivan.myrvold.blog",
    name="Ivan's Blog",
    description=(
        "I live in a small beautiful seaside town in south Norway called Lillesand. "
        "My interests is in Web technologies, Cloud (AWS, Digital Ocean), Terraform, "
        "Ansible, server-side Swift, MacOS and iOS."
    ),
    language=Language.ENGLISH,
    section_ids=BlogSection,
    image_path=None,
)

THEME: Theme = FOUNDATION

PLUGINS: list[Plugin] = [highlighting()]
