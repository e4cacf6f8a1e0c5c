import re
from pathlib import Path

import pytest

from ivan.plugins import Plugin, highlighting
from ivan.publish import PublishingError, publish, publishing_steps
from ivan.themes import FOUNDATION, Theme

from conftest import write


def read_tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def nav_titles(html: str) -> list[str]:
    nav = html.split("<nav>", 1)[1].split("</nav>", 1)[0]
    return re.findall(r'href="[^"]+">([^<]+)</a>', nav)


def test_publish_writes_site(project, website):
    result = publish(website, project_root=project)
    output = project / "Output"
    assert result.output_dir == output

    expected = {
        "index.html",
        "a/index.html",
        "b/index.html",
        "a/first-post/index.html",
        "a/second/index.html",
        "b/buzz/index.html",
        "about/index.html",
        "tags/index.html",
        "tags/swift/index.html",
        "tags/vapor/index.html",
        "feed.rss",
        "sitemap.xml",
        "styles.css",
        "images/logo.txt",
    }
    assert expected <= set(result.files)
    assert set(result.files) == set(read_tree(output))
    assert [i.url for i in result.items] == ["/a/second/", "/a/first-post/", "/b/buzz/"]

    home = (output / "index.html").read_text(encoding="utf-8")
    assert '<html lang="en">' in home
    assert "Hello from the home page." in home
    assert "An example &amp; test site" in home

    section = (output / "b" / "index.html").read_text(encoding="utf-8")
    assert "<h1>Bees</h1>" in section
    assert 'class="selected" href="/b/"' in section

    tag_page = (output / "tags" / "vapor" / "index.html").read_text(encoding="utf-8")
    assert tag_page.index("/a/second/") < tag_page.index("/a/first-post/")


def test_navigation_lists_sections_in_declared_order(project, website):
    publish(website, FOUNDATION, [], project_root=project)
    html = (project / "Output" / "index.html").read_text(encoding="utf-8")
    assert nav_titles(html) == ["A", "Bees"]


def test_minimal_site_without_content(tmp_path, website):
    result = publish(website, FOUNDATION, [], project_root=tmp_path)
    assert nav_titles((tmp_path / "Output" / "index.html").read_text(encoding="utf-8")) == [
        "A",
        "B",
    ]
    assert "tags/index.html" not in result.files
    assert result.items == []


def test_publish_is_deterministic(project, website):
    publish(website, FOUNDATION, [highlighting()], project_root=project)
    first = read_tree(project / "Output")
    publish(website, FOUNDATION, [highlighting()], project_root=project)
    assert read_tree(project / "Output") == first


def test_zero_plugins_is_identity(project, website, tmp_path_factory):
    other = tmp_path_factory.mktemp("other")
    publish(website, FOUNDATION, [], project_root=project)
    publish(
        website,
        FOUNDATION,
        [Plugin("noop", lambda context: None)],
        project_root=project,
        output_dir=other,
    )
    assert read_tree(project / "Output") == read_tree(other)


def test_highlighting_plugin_applies(project, website):
    result = publish(website, FOUNDATION, [highlighting()], project_root=project)
    html = (project / "Output" / "a" / "first-post" / "index.html").read_text(encoding="utf-8")
    assert '<div class="highlight">' in html
    assert '<link rel="stylesheet" href="/highlight.css">' in html
    assert "highlight.css" in result.files


def test_plugins_run_in_order(project, website):
    def appender(marker):
        def install(context):
            context.add_content_modifier(lambda html: html + marker)

        return Plugin(marker, install)

    publish(website, FOUNDATION, [appender("[1]"), appender("[2]")], project_root=project)
    html = (project / "Output" / "about" / "index.html").read_text(encoding="utf-8")
    assert "[1][2]" in html


def test_steps_are_ordered():
    names = [s.name for s in publishing_steps(FOUNDATION, [highlighting()])]
    assert names[0] == "Install plugin 'highlighting'"
    assert names[-2:] == ["Generate RSS feed", "Generate site map"]
    assert "Generate HTML using theme 'foundation'" in names


def test_progress_is_echoed(project, website, capsys):
    publish(website, project_root=project)
    out = capsys.readouterr().out
    assert out.startswith("Publishing X (7 steps)\n[1/7] Copy 'Resources' files\n")
    assert "Successfully published X" in out


def test_output_is_wiped_before_publishing(project, website):
    stale = write(project / "Output" / "stale.html", "old")
    publish(website, project_root=project)
    assert not stale.exists()


def test_config_file_overrides_directories(project, website):
    (project / "Content").rename(project / "Posts")
    write(project / "ivan.yaml", "content_dir: Posts\noutput_dir: public\nrss_path: rss.xml\n")
    result = publish(website, project_root=project)
    assert result.output_dir == project / "public"
    assert (project / "public" / "rss.xml").exists()
    assert (project / "public" / "a" / "second" / "index.html").exists()


def test_content_error_is_a_publishing_error(project, website):
    bad = write(project / "Content" / "a" / "bad.md", "---\ndate: nope\n---\n# Bad\n")
    with pytest.raises(PublishingError) as excinfo:
        publish(website, project_root=project)
    assert excinfo.value.step == "Add Markdown files from 'Content' folder"
    assert excinfo.value.source_path == bad


def test_plugin_failure_is_a_publishing_error(project, website):
    def install(context):
        raise RuntimeError("boom")

    with pytest.raises(PublishingError) as excinfo:
        publish(website, FOUNDATION, [Plugin("broken", install)], project_root=project)
    assert excinfo.value.step == "Install plugin 'broken'"
    assert excinfo.value.message == "RuntimeError: boom"
    assert isinstance(excinfo.value.original_error, RuntimeError)


def test_template_error_is_a_publishing_error(project, website, tmp_path_factory):
    root = tmp_path_factory.mktemp("theme")
    templates = root / "templates"
    for template in FOUNDATION.templates_dir.iterdir():
        write(templates / template.name, template.read_text(encoding="utf-8"))
    write(templates / "page.html", "{{ missing_variable }}")
    theme = Theme.from_directory("broken", root)
    with pytest.raises(PublishingError) as excinfo:
        publish(website, theme, project_root=project)
    assert excinfo.value.step == "Generate HTML using theme 'broken'"
    assert "missing_variable" in excinfo.value.message


def test_incomplete_theme_is_rejected_before_output(tmp_path, website):
    theme = Theme.from_directory("empty", tmp_path / "empty")
    with pytest.raises(PublishingError, match="missing templates"):
        publish(website, theme, project_root=tmp_path)
    assert not (tmp_path / "Output").exists()


def test_malformed_config_is_a_publishing_error(project, website):
    config = write(project / "ivan.yaml", "output_dir: [unclosed\n")
    with pytest.raises(PublishingError) as excinfo:
        publish(website, project_root=project)
    assert excinfo.value.step == "Load configuration"
    assert excinfo.value.source_path == config
    assert excinfo.value.message.startswith("ParserError:")
    assert not (project / "Output").exists()


@pytest.mark.parametrize("output_dir", [".", "..", "Content", "Resources"])
def test_output_dir_holding_sources_is_refused(project, website, output_dir):
    write(project / "ivan.yaml", f"output_dir: '{output_dir}'\n")
    with pytest.raises(PublishingError, match="Refusing to wipe") as excinfo:
        publish(website, project_root=project)
    assert excinfo.value.step == "Clean output folder"
    assert (project / "Content" / "a" / "second.md").exists()
    assert (project / "Resources" / "images" / "logo.txt").exists()


def test_output_dir_argument_is_checked_too(project, website):
    with pytest.raises(PublishingError, match="content folder"):
        publish(website, project_root=project, output_dir=project / "Content")
    assert (project / "Content" / "index.md").exists()


def test_clashing_tags_stop_publishing(project, website):
    write(project / "Content" / "b" / "cpp.md", "---\ntags: [Swift]\n---\n# C++\n")
    with pytest.raises(PublishingError, match="collides with tag") as excinfo:
        publish(website, project_root=project)
    assert excinfo.value.step == "Add Markdown files from 'Content' folder"
