"""
Localized labels and user-facing messages.

Labels name things the engine creates (fallback category, unnamed folders,
the exported toolbar folder). Messages are the text of client errors.
"""

from typing import Dict

DEFAULT_LOCALE = "en"

LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "imported_bookmarks": "Imported Bookmarks",
        "unnamed_category": "Unnamed Category",
        "bookmarks_bar": "Bookmarks bar",
    },
    "zh": {
        "imported_bookmarks": "导入的书签",
        "unnamed_category": "未命名分类",
        "bookmarks_bar": "书签栏",
    },
}

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "empty_content": "No bookmarks found in the uploaded content",
        "invalid_json": "Bookmark JSON could not be parsed: {detail}",
        "invalid_shape": "Bookmark JSON must be an array or an object with a 'children' array",
        "missing_type": "Node at {path} must have type 'folder' or 'link'",
        "missing_url": "Link at {path} is missing a url",
        "too_deep": "Folder at {path} is nested deeper than {limit} levels",
        "icon_empty": "Please upload an image file",
        "icon_not_image": "Only image files are supported",
        "icon_too_large": "Image size must not exceed {limit} bytes",
    },
    "zh": {
        "empty_content": "未解析到书签内容",
        "invalid_json": "书签 JSON 解析失败: {detail}",
        "invalid_shape": "书签 JSON 必须是数组或包含 children 数组的对象",
        "missing_type": "{path} 处的节点类型必须为 folder 或 link",
        "missing_url": "{path} 处的链接缺少 url",
        "too_deep": "{path} 处的文件夹嵌套超过 {limit} 层",
        "icon_empty": "请上传图片文件",
        "icon_not_image": "仅支持图片文件",
        "icon_too_large": "图片大小不能超过 {limit} 字节",
    },
}


def get_label(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Return the label for ``key`` in ``locale``, falling back to English."""
    table = LABELS.get(locale, LABELS[DEFAULT_LOCALE])
    return table.get(key, LABELS[DEFAULT_LOCALE][key])


def get_message(key: str, locale: str = DEFAULT_LOCALE, **kwargs) -> str:
    """Return the formatted message for ``key`` in ``locale``."""
    table = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    template = table.get(key, MESSAGES[DEFAULT_LOCALE][key])
    return template.format(**kwargs)
