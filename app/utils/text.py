import re

_MD_RULES = [
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"#{1,6}\s+(.*)"), r"\1"),
    (re.compile(r"- \[(.*?)\]\((.*?)\)"), r"\1: \2"),
    (re.compile(r"\[(.*?)\]\((.*?)\)"), r"\1"),
    (re.compile(r"^\s*[-*+]\s+", re.M), "• "),
    (re.compile(r"^\s*\d+\.\s+", re.M), ""),
]
_UNSAFE_NAME = re.compile(r"[^\w\s-]")

def word_count(text: str) -> int:
    return len((text or "").split())

def strip_markdown(text: str) -> str:
    out = text or ""
    for pattern, repl in _MD_RULES:
        out = pattern.sub(repl, out)
    return out.strip()

def safe_filename(name: str) -> str:
    return _UNSAFE_NAME.sub("", name or "").strip()
