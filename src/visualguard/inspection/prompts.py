"""Fixed prompts for the storefront visual inspection.

The all-clear sentinel sentences start with the marker checked by
``InspectionResult.is_all_clear``.
"""

from __future__ import annotations

ALL_CLEAR_SENTINELS: dict[str, str] = {
    "en": "✅ Visual check passed: no obvious layout issues found.",
    "zh": "✅ 视觉检测通过：未发现明显布局问题",
}

SYSTEM_PROMPTS: dict[str, str] = {
    "en": """\
You are a professional Shopify UI/UX visual QA specialist. Inspect the web page
screenshot the way a human shopper would see it.

Check for the following problems:
1. Broken layout: overlapping text, images covering content, obscured buttons?
2. Resource loading: any visible broken-image icons?
3. Key elements: this is an e-commerce site, so are the "Add to Cart" or "Buy Now"
   buttons clearly visible and not covered?
4. Popup interference: is there a popup that cannot be closed and blocks the main content?

Keep the report short. If everything looks fine, reply exactly "{sentinel}".
If there are problems, list them as bullet points.
""",
    "zh": """\
你是一个专业的 Shopify UI/UX 视觉测试专家。你的任务是像人类用户一样检查网页截图。
请检查以下问题：
1. 布局错乱：是否有文字重叠、图片覆盖、按钮被遮挡？
2. 资源加载：是否有明显的图片破损图标？
3. 关键元素：由于这是电商网站，"Add to Cart" 或 "Buy Now" 按钮是否清晰可见且未被遮挡？
4. 弹窗干扰：是否有无法关闭的弹窗遮挡了主要内容？

请简明扼要地输出检测报告。如果一切正常，请回复 "{sentinel}"。如果有问题，请用列表形式列出。
""",
}

USER_PROMPTS: dict[str, str] = {
    "en": "This is the first-screen screenshot of the storefront. Please run the visual check:",
    "zh": "这是该 Shopify 店铺的首页截图，请进行视觉检查：",
}

SUPPORTED_LANGUAGES = frozenset(SYSTEM_PROMPTS)


def build_system_prompt(language: str = "en") -> str:
    """Return the inspection checklist prompt for *language*.

    Raises:
        ValueError: If *language* has no prompt.
    """
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported prompt language: {language!r}. Supported: {sorted(SUPPORTED_LANGUAGES)}")
    return SYSTEM_PROMPTS[language].format(sentinel=ALL_CLEAR_SENTINELS[language])
