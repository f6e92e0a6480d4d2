# addressbook/routes_contacts.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from starlette import status

from addressbook.contacts import (
    ContactNotFound,
    Err,
    create_contact,
    delete_contact,
    get_contact,
    list_contacts,
    toggle_favorite,
    update_contact,
)
from addressbook.database import get_db
from addressbook.models import Contact
from addressbook.toast import set_toast
from addressbook.views import render

log = logging.getLogger(__name__)

router = APIRouter()

INTENTS = ("delete", "favorite")


# --- Utilities ---------------------------------------------------------------

def _phone_region(request: Request) -> Optional[str]:
    return request.app.state.settings.PHONE_DEFAULT_REGION or None


def _form_values(contact: Optional[Contact] = None) -> Dict[str, Any]:
    """Initial values for the create/edit form."""
    if contact is None:
        return {"name": "", "email": "", "phone_number": "", "address": "", "is_favorite": False}
    return {
        "name": contact.name,
        "email": contact.email,
        "phone_number": contact.phone_number,
        "address": contact.address or "",
        "is_favorite": contact.is_favorite,
    }


def _to_listing() -> RedirectResponse:
    return RedirectResponse(url="/contacts", status_code=status.HTTP_303_SEE_OTHER)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")


def _render_form(request: Request, *, mode: str, values: Dict[str, Any], errors=None,
                 contact_id: Optional[int] = None, status_code: int = 200):
    title = "Create Contact" if mode == "create" else f"Edit {values.get('name') or 'Contact'}"
    return render(
        request,
        "contact_form.html",
        {
            "title": title,
            "mode": mode,
            "contact_id": contact_id,
            "values": values,
            "errors": errors or {},
        },
        status_code=status_code,
    )


# --- Listing & single-field actions -------------------------------------------


@router.get("/contacts")
def contacts_page(request: Request, q: str = "", db: Session = Depends(get_db)):
    """
    Render the contact list, filtered by name when ``q`` is given.
    """
    contacts = list_contacts(db, q)
    return render(request, "contacts.html", {"title": "List Contacts", "contacts": contacts, "q": q})


@router.post("/contacts")
def contacts_action(
    request: Request,
    intent: str = Form(""),
    raw_id: str = Form("", alias="id"),
    db: Session = Depends(get_db),
):
    """
    Favorite toggle / delete buttons on the listing, discriminated by ``intent``.
    """
    try:
        contact_id = int(raw_id)
    except ValueError:
        contact_id = None
    if intent not in INTENTS or contact_id is None:
        log.info("rejected contacts action intent=%r id=%r", intent, raw_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Action is not permitted")

    try:
        if intent == "delete":
            delete_contact(db, contact_id)
            set_toast(request, "Contact deleted successfully")
        else:
            contact = toggle_favorite(db, contact_id)
            if contact.is_favorite:
                set_toast(request, f"{contact.name} added to favorites")
            else:
                set_toast(request, f"{contact.name} removed from favorites")
    except ContactNotFound:
        raise _not_found()

    return _to_listing()


# --- Create ------------------------------------------------------------------


@router.get("/contacts/create")
def contact_create_form(request: Request):
    return _render_form(request, mode="create", values=_form_values())


@router.post("/contacts/create")
def contact_create(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone_number: str = Form(""),
    address: str = Form(""),
    db: Session = Depends(get_db),
):
    submitted = {"name": name, "email": email, "phone_number": phone_number, "address": address}
    result = create_contact(db, submitted, phone_region=_phone_region(request))
    if isinstance(result, Err):
        return _render_form(
            request,
            mode="create",
            values={**submitted, "is_favorite": False},
            errors=result.errors,
            status_code=422,
        )

    set_toast(request, "Contact added successfully")
    return _to_listing()


# --- Edit --------------------------------------------------------------------


@router.get("/contacts/{contact_id:int}/edit")
def contact_edit_form(request: Request, contact_id: int, db: Session = Depends(get_db)):
    contact = get_contact(db, contact_id)
    if contact is None:
        raise _not_found()
    return _render_form(request, mode="edit", values=_form_values(contact), contact_id=contact_id)


@router.post("/contacts/{contact_id:int}/edit")
def contact_edit(
    request: Request,
    contact_id: int,
    name: str = Form(""),
    email: str = Form(""),
    phone_number: str = Form(""),
    address: str = Form(""),
    is_favorite: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    submitted = {
        "name": name,
        "email": email,
        "phone_number": phone_number,
        "address": address,
        "is_favorite": is_favorite or "",
    }
    try:
        result = update_contact(db, contact_id, submitted, phone_region=_phone_region(request))
    except ContactNotFound:
        raise _not_found()

    if isinstance(result, Err):
        return _render_form(
            request,
            mode="edit",
            values={**submitted, "is_favorite": bool(is_favorite)},
            errors=result.errors,
            contact_id=contact_id,
            status_code=422,
        )

    set_toast(request, "Contact updated successfully")
    return _to_listing()
