from typing import Iterable, List, Union

from .constants import SPLIT_PROCESSED_TAG

TAG_SEPARATOR = ", "


def parse_tags(raw: Union[str, Iterable[str], None]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = raw.split(",")
    elif isinstance(raw, (list, tuple, set)):
        parts = raw
    else:
        raise ValueError(f"tags must be a string or a list, got {type(raw).__name__}")
    tags: List[str] = []
    for part in parts:
        tag = str(part).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def join_tags(tags: Iterable[str]) -> str:
    return TAG_SEPARATOR.join(tags)


def has_tag(tags: Iterable[str], tag: str) -> bool:
    return tag in tags


def is_split_processed(tags: Iterable[str]) -> bool:
    return has_tag(tags, SPLIT_PROCESSED_TAG)


def append_tag(tags: Iterable[str], tag: str) -> List[str]:
    """Return a copy of ``tags`` with ``tag`` appended unless already present."""
    result = list(tags)
    if tag not in result:
        result.append(tag)
    return result
