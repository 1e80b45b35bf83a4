from md2pdf.protector import CODE, FENCE, INDENTED, SPACED_CODE, TOKEN_RE, URL, make_token, protect, restore

SAMPLES = [
    "",
    "plain text with **bold** and _italic_",
    "Inline `code` and ``double `tick` code`` here",
    "```python\nprint('**not bold**')\n```\nafter",
    "~~~\nfenced with tildes\n~~~",
    "[link](https://example.com/some_path?a=1&b=2) and <https://x.org>",
    "[ref]: https://example.com/docs\n\nSee http://foo.bar/bazQux for more.",
    "Nested ```\nnot a fence because not at line start",
    "Unclosed `code and text",
    "Intro\n\n```python\nnever closed\n",
    "Para\n\n    indented code\n\tmore\n\nafter",
    "Wrapped `inline\ncode` span",
]


def test_round_trip_without_rewrites():
    for sample in SAMPLES:
        protected = protect(sample)
        assert protected.restore(protected.text) == sample
        assert restore(protected.text, protected.spans) == sample


def test_fenced_block_is_one_token():
    protected = protect("before\n```js\nlet a = 1;\n```\nafter")

    assert protected.text == f"before\n{make_token(FENCE, 0)}\nafter"
    assert protected.spans == ("```js\nlet a = 1;\n```",)


def test_inline_code_keeps_ticks_and_padding_visible():
    protected = protect("run ` ls -la ` and `pwd`")

    assert protected.text == f"run ` {make_token(SPACED_CODE, 0)} ` and `{make_token(CODE, 1)}`"
    assert protected.spans == ("ls -la", "pwd")


def test_link_destinations_and_raw_urls_are_masked():
    protected = protect("[docs](https://example.com/a_b_c) see https://example.org/x*y*")

    assert "example" not in protected.text
    assert protected.text.startswith(f"[docs]({make_token(URL, 0)})")
    assert protected.text.endswith(f"{make_token(URL, 1)}*y*")
    assert protected.spans == ("https://example.com/a_b_c", "https://example.org/x")


def test_code_inside_fence_is_not_tokenized_twice():
    protected = protect("```\n`inner`\n```")

    assert len(protected.spans) == 1
    assert len(TOKEN_RE.findall(protected.text)) == 1


def test_unknown_token_index_is_left_alone():
    stray = make_token(CODE, 7)

    assert restore(f"keep {stray}", ("only",)) == f"keep {stray}"


def test_unclosed_fence_runs_to_end_of_document():
    protected = protect("Intro\n\n```python\nmyValue = a  *  b\n")

    assert protected.text == f"Intro\n\n{make_token(FENCE, 0)}"
    assert protected.spans == ("```python\nmyValue = a  *  b\n",)


def test_triple_backticks_inside_a_line_are_inline_code():
    protected = protect("```js``` is inline\nnext line")

    assert protected.text == f"```{make_token(CODE, 0)}``` is inline\nnext line"


def test_indented_code_block_is_one_token():
    protected = protect("Para\n\n    x = a  *  b\n    getUserName()\n\nafter")

    assert protected.text == f"Para\n\n{make_token(INDENTED, 0)}\n\nafter"
    assert protected.spans == ("    x = a  *  b\n    getUserName()",)


def test_indented_list_item_is_not_code():
    protected = protect("- one\n\n    - nested **item **")

    assert protected.spans == ()


def test_inline_code_may_wrap_onto_the_next_line():
    protected = protect("Call `getUser\nName()` now")

    assert protected.text == f"Call `{make_token(SPACED_CODE, 0)}` now"
    assert protected.spans == ("getUser\nName()",)


def test_inline_code_does_not_cross_a_blank_line():
    protected = protect("a `b\n\nc` d")

    assert protected.spans == ()
