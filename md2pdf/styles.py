#!/usr/bin/env python3
"""
Stylesheets for PDF generation.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from pygments.formatters import HtmlFormatter

CODE_THEMES = {
    "light": {"background": "#f6f8fa", "color": "#24292e", "border": "#e1e4e8", "pygments": "default"},
    "dark": {"background": "#1e1e1e", "color": "#d4d4d4", "border": "#333", "pygments": "monokai"},
}

DEFAULT_FONT_FAMILY = "'IBM Plex Serif', 'Crimson Pro', Georgia, serif"
MONO_FONT_FAMILY = "'IBM Plex Mono', 'JetBrains Mono', 'Fira Code', monospace"
FONT_IMPORT_URL = (
    "https://fonts.googleapis.com/css2?family=IBM+Plex+Serif:ital,wght@0,400;0,600;0,700;1,400"
    "&family=IBM+Plex+Mono:wght@400;500&display=swap"
)


def get_code_theme_styles(code_theme: str = "light") -> str:
    """Pygments token colours for the chosen code theme."""
    theme = CODE_THEMES.get(code_theme, CODE_THEMES["light"])
    return HtmlFormatter(style=theme["pygments"]).get_style_defs(".highlight")


def get_styles(code_theme: str = "light", font_family: str = DEFAULT_FONT_FAMILY,
               font_size: str = "11pt") -> str:
    """Base document stylesheet."""
    theme = CODE_THEMES.get(code_theme, CODE_THEMES["light"])

    return f"""
@import url('{FONT_IMPORT_URL}');

* {{
    box-sizing: border-box;
}}

html {{
    font-size: {font_size};
    -webkit-print-color-adjust: exact;
    print-color-adjust: exact;
}}

body {{
    font-family: {font_family};
    line-height: 1.7;
    color: #1a1a1a;
    max-width: 100%;
    margin: 0;
    padding: 0;
    text-rendering: optimizeLegibility;
}}

h1, h2, h3, h4, h5, h6 {{
    font-weight: 600;
    line-height: 1.3;
    margin-top: 1.8em;
    margin-bottom: 0.6em;
    color: #0f0f0f;
    page-break-after: avoid;
}}

h1 {{
    font-size: 2.2rem;
    font-weight: 700;
    border-bottom: 2px solid #e74c3c;
    padding-bottom: 0.4em;
    margin-top: 0;
}}

h2 {{
    font-size: 1.65rem;
    border-bottom: 1px solid #e8e8e8;
    padding-bottom: 0.3em;
}}

h3 {{ font-size: 1.35rem; }}
h4 {{ font-size: 1.15rem; }}
h5, h6 {{ font-size: 1rem; color: #444; }}

p {{
    margin: 0 0 1.2em 0;
    orphans: 3;
    widows: 3;
}}

a {{
    color: #2563eb;
    text-decoration: none;
}}

ul, ol {{
    margin: 0 0 1.2em 0;
    padding-left: 1.8em;
}}

li {{
    margin-bottom: 0.4em;
}}

li.task-list-item {{
    list-style: none;
}}

li.task-list-item input[type="checkbox"] {{
    margin: 0 0.5em 0 -1.4em;
}}

code {{
    font-family: {MONO_FONT_FAMILY};
    font-size: 0.88em;
    background: {theme['background']};
    color: {theme['color']};
    padding: 0.15em 0.4em;
    border-radius: 4px;
}}

pre {{
    font-family: {MONO_FONT_FAMILY};
    font-size: 0.85em;
    background: {theme['background']};
    color: {theme['color']};
    padding: 1.2em 1.4em;
    border-radius: 8px;
    overflow-x: auto;
    line-height: 1.5;
    margin: 0 0 1.4em 0;
    border: 1px solid {theme['border']};
    white-space: pre-wrap;
}}

pre code {{
    background: transparent;
    padding: 0;
    font-size: inherit;
    color: inherit;
    border-radius: 0;
}}

blockquote {{
    margin: 0 0 1.4em 0;
    padding: 0.8em 1.2em;
    border-left: 4px solid #e74c3c;
    background: #fdf6f5;
    color: #444;
    font-style: italic;
}}

table {{
    width: 100%;
    border-collapse: collapse;
    margin: 0 0 1.4em 0;
    font-size: 0.95em;
    page-break-inside: avoid;
}}

th, td {{
    padding: 0.7em 1em;
    text-align: left;
    border: 1px solid #ddd;
}}

th {{
    background: #f8f9fa;
    font-weight: 600;
}}

tr:nth-child(even) {{
    background: #fafbfc;
}}

hr {{
    border: none;
    height: 2px;
    background: linear-gradient(to right, #e74c3c, #f39c12, #27ae60);
    margin: 2em 0;
}}

img {{
    max-width: 100%;
    height: auto;
    display: block;
    margin: 1.4em auto;
}}

@media print {{
    h1, h2, h3, h4, h5, h6 {{
        page-break-after: avoid;
    }}

    pre, blockquote, table, figure {{
        page-break-inside: avoid;
    }}
}}

.watermark {{
    position: fixed;
    top: 50%;
    left: 50%;
    transform: translate(-50%, -50%) rotate(-45deg);
    font-size: 6rem;
    font-weight: 700;
    color: rgba(231, 76, 60, 0.08);
    text-transform: uppercase;
    letter-spacing: 0.2em;
    pointer-events: none;
    z-index: 1000;
    white-space: nowrap;
}}

{get_code_theme_styles(code_theme)}
"""


def get_mermaid_styles() -> str:
    """Styles for diagram containers and their error marker."""
    return f"""
.mermaid {{
    display: flex;
    justify-content: center;
    align-items: center;
    margin: 1.5em 0;
    padding: 1em;
    background: #fafbfc;
    border-radius: 8px;
    border: 1px solid #e1e4e8;
    page-break-inside: avoid;
    break-inside: avoid;
    overflow: visible;
}}

.mermaid svg {{
    max-width: 100% !important;
    height: auto;
}}

.mermaid-error {{
    background: #fff5f5;
    border-color: #fed7d7;
    color: #c53030;
    font-family: {MONO_FONT_FAMILY};
    font-size: 0.85em;
    white-space: pre-wrap;
    word-wrap: break-word;
}}
"""


def get_first_page_watermark_styles() -> str:
    """Keep the watermark on the first page only."""
    return """
.watermark.first-page-only {
    position: absolute;
    top: 30%;
}

@media print {
    .watermark.first-page-only {
        position: absolute;
    }
}
"""
