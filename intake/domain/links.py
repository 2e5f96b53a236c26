"""Resumable link construction."""


def build_resume_url(public_base: str, draft_id: str) -> str:
    """Canonical resume link for a draft: ``{public_base}/form/{draft_id}``.

    Derived purely from the origin and the id; trailing slashes on the origin
    are dropped so the path never doubles up.
    """
    return f"{public_base.rstrip('/')}/form/{draft_id}"
