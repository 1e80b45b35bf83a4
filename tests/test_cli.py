import asyncio
import io

import pytest

from md2pdf import cli, config as config_module, service
from md2pdf.renderer import ConversionResult
from md2pdf.service import ConversionResponse


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module, "get_user_config_dir", lambda: tmp_path / "config")
    monkeypatch.setenv("MD2PDF_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.delenv("MD2PDF_MAX_WORKERS", raising=False)
    monkeypatch.delenv("MD2PDF_VERBOSE", raising=False)


@pytest.fixture
def recorded_requests(monkeypatch, isolated_config):
    requests = []

    async def fake_convert(request, config, logger):
        requests.append((request, config))
        return ConversionResponse(success=True, message=f"Successfully created PDF {request['outputFilename']}")

    monkeypatch.setattr(cli, "convert_markdown", fake_convert)
    return requests


def test_parser_defaults():
    args = cli.build_parser().parse_args(["notes.md"])

    assert args.files == ["notes.md"]
    assert args.paper_format == "letter"
    assert args.orientation == "portrait"
    assert args.margin == "2cm"
    assert args.watermark_scope == "all-pages"
    assert args.code_theme == "light"
    assert args.verbose is None
    assert args.max_workers is None


def test_output_filename_for():
    args = cli.build_parser().parse_args(["a.md", "-o", "custom.pdf"])

    assert cli.output_filename_for("a.md", args, 1) == "custom.pdf"
    assert cli.output_filename_for("docs/a.md", args, 2) == "a.pdf"
    assert cli.output_filename_for("-", cli.build_parser().parse_args(["-"]), 1) == "output.pdf"


def test_converts_every_file(tmp_path, recorded_requests, capsys):
    first = tmp_path / "first.md"
    second = tmp_path / "second.md"
    first.write_text("# First\n", encoding="utf-8")
    second.write_text("# Second\n", encoding="utf-8")
    css = tmp_path / "extra.css"
    css.write_text("h1 { color: teal; }", encoding="utf-8")

    exit_code = cli.main([str(first), str(second), "--paper-format", "a4", "--watermark", "draft",
                          "--page-numbers", "--css", str(css), "--max-workers", "1"])

    assert exit_code == 0
    requests = sorted((request for request, _ in recorded_requests), key=lambda r: r["outputFilename"])
    assert [r["outputFilename"] for r in requests] == ["first.pdf", "second.pdf"]
    assert requests[0]["markdown"] == "# First\n"
    assert requests[0]["paperFormat"] == "a4"
    assert requests[0]["watermark"] == "draft"
    assert requests[0]["showPageNumbers"] is True
    assert requests[0]["customCss"] == "h1 { color: teal; }"

    config = recorded_requests[0][1]
    assert config.get_output_dir() == tmp_path / "out"
    assert config.get_max_workers() == 1
    assert "Converted 2/2 file(s)" in capsys.readouterr().out


def test_unreadable_file_fails(tmp_path, recorded_requests):
    exit_code = cli.main([str(tmp_path / "missing.md")])

    assert exit_code == 1
    assert recorded_requests == []


def test_missing_stylesheet_fails(tmp_path, recorded_requests):
    source = tmp_path / "doc.md"
    source.write_text("# Doc\n", encoding="utf-8")

    assert cli.main([str(source), "--css", str(tmp_path / "missing.css")]) == 1
    assert recorded_requests == []


def test_reads_stdin_without_files(monkeypatch, recorded_requests):
    monkeypatch.setattr(cli.sys, "stdin", io.StringIO("# From stdin\n"))

    assert cli.main([]) == 0
    request, _ = recorded_requests[0]
    assert request["markdown"] == "# From stdin\n"
    assert request["outputFilename"] == "output.pdf"


def test_output_flag_with_several_files_warns(tmp_path, recorded_requests, capsys):
    first = tmp_path / "first.md"
    second = tmp_path / "second.md"
    first.write_text("# First\n", encoding="utf-8")
    second.write_text("# Second\n", encoding="utf-8")

    assert cli.main([str(first), str(second), "-o", "custom.pdf"]) == 0

    out = capsys.readouterr().out
    assert "[WARNING]" in out
    assert "--output custom.pdf is ignored" in out
    assert sorted(request["outputFilename"] for request, _ in recorded_requests) == ["first.pdf", "second.pdf"]


class WritingRenderer:
    def __init__(self, logger):
        self.logger = logger

    async def render(self, markdown, output_path, options=None):
        await asyncio.sleep(0.01)
        output_path.write_text(markdown, encoding="utf-8")
        return ConversionResult(success=True, artifact_path=output_path, page_count=1)


def test_inputs_sharing_a_name_get_separate_outputs(tmp_path, isolated_config, monkeypatch):
    monkeypatch.setattr(service, "PdfRenderer", WritingRenderer)
    sources = []
    for folder in ("a", "b"):
        (tmp_path / folder).mkdir()
        source = tmp_path / folder / "notes.md"
        source.write_text(f"# From {folder}\n", encoding="utf-8")
        sources.append(str(source))

    assert cli.main(sources) == 0

    outputs = sorted((tmp_path / "out").iterdir())
    assert [path.name for path in outputs] == ["notes-1.pdf", "notes.pdf"]
    assert sorted(path.read_text(encoding="utf-8") for path in outputs) == ["# From a\n", "# From b\n"]
