from enum import unique
from pathlib import Path

import pytest

from ivan.site import Language, SectionID, Website


@unique
class Sections(SectionID):
    A = "a"
    B = "b"


@pytest.fixture
def website() -> Website:
    return Website(
        url="https://example.com",
        name="X",
        description="An example & test site",
        language=Language.ENGLISH,
        section_ids=Sections,
    )


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    content = tmp_path / "Content"
    write(content / "index.md", "# Welcome\n\nHello from the home page.\n")
    write(
        content / "a" / "2024-01-15-first-post.md",
        "---\ndescription: The first post\ntags: swift, vapor\n---\n"
        "# First Post\n\nSome text.\n\n```python\nprint('hi')\n```\n",
    )
    write(
        content / "a" / "second.md",
        "---\ndate: 2024-02-01 10:30\ntags: [vapor]\n---\n# Second\n\nMore text.\n",
    )
    write(content / "b" / "index.md", "---\ntitle: Bees\n---\nAll about bees.\n")
    write(content / "b" / "2023-06-01-buzz.md", "# Buzz\n\nBuzzing.\n")
    write(content / "b" / "_draft.md", "# Draft\n")
    write(content / "about.md", "# About\n\nAbout me.\n")
    write(tmp_path / "Resources" / "images" / "logo.txt", "logo")
    return tmp_path
