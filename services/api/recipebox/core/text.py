import re


def clean_md(text: str) -> str:
    """
    Strip markdown artifacts from user-entered text.
    Removes:
    - Leading headers (#, ##)
    - Bold markers (**, __)
    - Leading bullets (-, *)
    """
    if not text:
        return ""

    text = re.sub(r"(\*\*|__)(.*?)\1", r"\2", text)
    text = re.sub(r"^\s*#+\s+", "", text)
    text = re.sub(r"^\s*[-*]\s+", "", text)

    return text.strip()


def normalize_name(text: str) -> str:
    """Collapse runs of whitespace; used for ingredient, item and tag names."""
    return re.sub(r"\s+", " ", text or "").strip()
