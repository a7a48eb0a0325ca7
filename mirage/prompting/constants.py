"""Shared constants for page prompts."""

from __future__ import annotations

# Structural requirements every generated page must satisfy, in prompt order.
DEFAULT_CONSTRAINTS: tuple[str, ...] = (
    "charset",
    "inline_styles",
    "html_only",
    "internal_link",
)

CONSTRAINT_TEXT: dict[str, dict[str, str]] = {
    "en": {
        "charset": 'The head element must contain a <meta charset="utf-8"> declaration.',
        "inline_styles": (
            "All styling must be inline, written in the style attribute of each element. "
            "Do not use <style> blocks, external stylesheets or class-based styling."
        ),
        "html_only": "Return only the HTML document, with no commentary before or after it.",
        "internal_link": (
            "Include at least one hyperlink whose href is an absolute path on this site "
            "(for example /about or /products)."
        ),
    },
    "zh": {
        "charset": "HTML 文档的 head 标签中必须包含一个 charset=utf-8 标签。",
        "inline_styles": "样式只能写成行内样式，写在标签的 style 属性上！",
        "html_only": "除了 HTML 内容外不要返回其他内容！",
        "internal_link": "HTML 内最少要有一个超链接，路径必须是本站的绝对路径（例如 /about 或 /products）。",
    },
}

TEMPLATE_NAMES: dict[str, str] = {
    "en": "page_prompt.en.j2",
    "zh": "page_prompt.zh.j2",
}


__all__ = ["CONSTRAINT_TEXT", "DEFAULT_CONSTRAINTS", "TEMPLATE_NAMES"]
