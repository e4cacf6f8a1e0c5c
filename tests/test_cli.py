from pathlib import Path

from click.testing import CliRunner

from ivan import __version__
from ivan.cli import cli
from ivan.publish import PublishingError, PublishResult


def test_cli_publishes_blog_from_cwd(tmp_path, monkeypatch):
    content = tmp_path / "Content" / "vapor"
    content.mkdir(parents=True)
    (content / "2020-05-12-hello-vapor.md").write_text(
        "# Hello Vapor\n\n```swift\nimport Vapor\n```\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli, [], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Publishing Ivan's Blog (8 steps)" in result.output
    assert "[1/8] Install plugin 'highlighting'" in result.output

    output = tmp_path / "Output"
    post = (output / "vapor" / "hello-vapor" / "index.html").read_text(encoding="utf-8")
    assert '<div class="highlight">' in post
    home = (output / "index.html").read_text(encoding="utf-8")
    for title in ("Projects", "Vapor", "AWS", "iOS", "Life"):
        assert f">{title}</a>" in home
    assert "https://ivan.myrvold.blog/vapor/hello-vapor/" in (output / "feed.rss").read_text(
        encoding="utf-8"
    )


def test_cli_reports_failures(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def failing_publish(website, theme, plugins, project_root=None):
        raise PublishingError(
            "Add Markdown files from 'Content' folder",
            "Invalid front matter",
            project_root / "Content" / "life" / "bad.md",
        )

    monkeypatch.setattr("ivan.publish.publish", failing_publish)
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 1
    assert "Publishing failed:" in result.output
    assert "Step: Add Markdown files from 'Content' folder" in result.output
    assert f"File: {Path('Content') / 'life' / 'bad.md'}" in result.output
    assert "Error: Invalid front matter" in result.output


def test_cli_summary(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def fake_publish(website, theme, plugins, project_root=None):
        return PublishResult(
            website=website,
            output_dir=project_root / "Output",
            items=[],
            pages=[],
            files=["index.html", "feed.rss"],
        )

    monkeypatch.setattr("ivan.publish.publish", fake_publish)
    result = CliRunner().invoke(cli, [], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Wrote 2 files into" in result.output


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_module_main_entrypoint():
    from ivan.__main__ import main

    assert callable(main)


def test_main_invokes_cli(monkeypatch):
    import ivan.cli as cli_mod

    called = {}

    def fake_cli():
        called["ran"] = True

    monkeypatch.setattr(cli_mod, "cli", fake_cli)
    cli_mod.main()
    assert called["ran"] is True


def test_cli_reports_malformed_config(tmp_path, monkeypatch):
    (tmp_path / "ivan.yaml").write_text("output_dir: [unclosed\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 1
    assert "Publishing failed:" in result.output
    assert "Step: Load configuration" in result.output
    assert "File: ivan.yaml" in result.output
