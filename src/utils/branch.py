from typing import Optional

REF_HEADS_PREFIX = "refs/heads/"


def normalize_branch(ref: Optional[str]) -> str:
    """Strip the refs/heads/ prefix from a git ref, leaving plain branch names untouched."""
    if not ref:
        return ""
    return ref.replace(REF_HEADS_PREFIX, "")
