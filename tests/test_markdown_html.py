from md2pdf.markdown_html import CodeBlockRenderer, has_diagrams, markdown_to_html


def test_has_diagrams():
    assert has_diagrams("text\n```mermaid\ngraph TD\n```\n")
    assert has_diagrams("~~~Mermaid\nsequenceDiagram\n~~~\n")
    assert not has_diagrams("```python\nprint('mermaid')\n```\n")
    assert not has_diagrams("A mermaid is a sea creature.")


def test_mermaid_fence_becomes_diagram_container():
    html = markdown_to_html("```mermaid\ngraph TD\n    A --> B\n```\n")

    assert html == '<div class="mermaid">graph TD\n    A --&gt; B\n</div>\n'


def test_known_language_is_highlighted():
    html = markdown_to_html("```python\ndef f():\n    return 1\n```\n")

    assert '<pre class="highlight"><code class="language-python">' in html
    assert '<span class="k">def</span>' in html


def test_unknown_language_falls_back_to_plain_text():
    html = CodeBlockRenderer().fence("<b>x</b>\n", "no-such-language")

    assert html == '<pre class="highlight"><code class="language-plaintext">&lt;b&gt;x&lt;/b&gt;\n</code></pre>\n'


def test_gfm_features():
    html = markdown_to_html("| a | b |\n|---|---|\n| 1 | 2 |\n\n- [x] done\n\n~~gone~~ https://example.com\n")

    assert "<table>" in html
    assert 'type="checkbox"' in html
    assert "<s>gone</s>" in html
    assert '<a href="https://example.com">' in html
