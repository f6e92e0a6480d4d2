# addressbook/toast.py
from __future__ import annotations

import uuid
from typing import Dict, Optional

from fastapi import Request

TOAST_SESSION_KEY = "toast"
TOAST_KINDS = ("info", "success", "error", "warning")


def set_toast(
    request: Request,
    description: str,
    title: Optional[str] = None,
    kind: str = "success",
) -> None:
    """
    Queue a one-shot notification for the next rendered page. Lives in the
    signed session cookie, so it survives the POST -> 303 -> GET hop.
    """
    if kind not in TOAST_KINDS:
        raise ValueError(f"Unknown toast kind: {kind!r}")
    request.session[TOAST_SESSION_KEY] = {
        "id": uuid.uuid4().hex,
        "kind": kind,
        "title": title,
        "description": description,
    }


def pop_toast(request: Request) -> Optional[Dict]:
    return request.session.pop(TOAST_SESSION_KEY, None)
