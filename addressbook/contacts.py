# addressbook/contacts.py
"""
Contact upsert workflow: validate -> check uniqueness -> persist.

Create and edit return a tagged result, ``Ok(contact)`` or ``Err(errors)``,
where ``errors`` maps a field name to its ordered list of messages. Nothing is
written when an ``Err`` is returned.

The uniqueness lookups and the write share one session transaction, and the
unique indexes on ``email`` / ``phone_number`` stay as the authoritative
backstop: if a concurrent request slips in between lookup and write, the
resulting IntegrityError is turned back into the same field error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from addressbook.models import Contact
from addressbook.schemas import ContactForm, FieldErrors, field_errors, parse_contact_form

log = logging.getLogger(__name__)

CONTACT_EXISTS = "Contact already exists"


class ContactNotFound(LookupError):
    def __init__(self, contact_id: int):
        super().__init__(f"Contact {contact_id} not found")
        self.contact_id = contact_id


@dataclass
class Ok:
    contact: Contact
    ok: bool = field(default=True, init=False)


@dataclass
class Err:
    errors: FieldErrors
    ok: bool = field(default=False, init=False)


Result = Union[Ok, Err]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# -------------------------------------------------------------------
# Lookups
# -------------------------------------------------------------------
def get_contact(db: Session, contact_id: int) -> Optional[Contact]:
    return db.get(Contact, contact_id)


def get_contact_or_raise(db: Session, contact_id: int) -> Contact:
    contact = db.get(Contact, contact_id)
    if contact is None:
        raise ContactNotFound(contact_id)
    return contact


def find_by_email(db: Session, email: str) -> Optional[Contact]:
    return db.execute(select(Contact).where(Contact.email == email)).scalars().first()


def find_by_phone_number(db: Session, phone_number: str) -> Optional[Contact]:
    return db.execute(select(Contact).where(Contact.phone_number == phone_number)).scalars().first()


def list_contacts(db: Session, q: Optional[str] = None) -> List[Contact]:
    """All contacts in id order, optionally filtered by a case-insensitive name substring."""
    stmt = select(Contact).order_by(Contact.id.asc())
    q = (q or "").strip()
    if q:
        stmt = stmt.where(Contact.name.icontains(q, autoescape=True))
    return list(db.execute(stmt).scalars().all())


def check_uniqueness(
    db: Session, email: str, phone_number: str, contact_id: Optional[int] = None
) -> FieldErrors:
    """
    Email is checked first and a conflict there stops the phone lookup, so a
    record clashing on both is always reported on ``email``.
    """
    existing = find_by_email(db, email)
    if existing is not None and existing.id != contact_id:
        return {"email": [CONTACT_EXISTS]}

    existing = find_by_phone_number(db, phone_number)
    if existing is not None and existing.id != contact_id:
        return {"phone_number": [CONTACT_EXISTS]}

    return {}


# -------------------------------------------------------------------
# Upsert workflow
# -------------------------------------------------------------------
def _validate(data: Mapping[str, Any], phone_region: Optional[str]) -> Union[ContactForm, Err]:
    try:
        return parse_contact_form(data, phone_region=phone_region)
    except ValidationError as exc:
        errors = field_errors(exc)
        log.info("contact rejected: invalid fields %s", ", ".join(errors))
        return Err(errors)


def _commit_or_conflict(db: Session, form: ContactForm, contact_id: Optional[int]) -> Optional[Err]:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        errors = check_uniqueness(db, form.email, form.phone_number, contact_id)
        if not errors:
            # not a uniqueness race (NOT NULL etc.), let it surface
            raise
        log.warning("contact write lost a uniqueness race on %s", ", ".join(errors))
        return Err(errors)
    return None


def create_contact(db: Session, data: Mapping[str, Any], phone_region: Optional[str] = None) -> Result:
    form = _validate(data, phone_region)
    if isinstance(form, Err):
        return form

    errors = check_uniqueness(db, form.email, form.phone_number)
    if errors:
        db.rollback()
        log.info("contact rejected: duplicate %s", ", ".join(errors))
        return Err(errors)

    now = _utcnow()
    contact = Contact(
        name=form.name,
        email=form.email,
        phone_number=form.phone_number,
        address=form.address,
        is_favorite=False,
        created_at=now,
        updated_at=now,
    )
    db.add(contact)
    conflict = _commit_or_conflict(db, form, None)
    if conflict is not None:
        return conflict

    log.info("contact %s created", contact.id)
    return Ok(contact)


def update_contact(
    db: Session, contact_id: int, data: Mapping[str, Any], phone_region: Optional[str] = None
) -> Result:
    """
    Edit an existing contact. A missing ``contact_id`` raises
    ``ContactNotFound`` before any validation happens.
    """
    contact = get_contact_or_raise(db, contact_id)

    form = _validate(data, phone_region)
    if isinstance(form, Err):
        return form

    errors = check_uniqueness(db, form.email, form.phone_number, contact_id)
    if errors:
        db.rollback()
        log.info("contact %s rejected: duplicate %s", contact_id, ", ".join(errors))
        return Err(errors)

    contact.name = form.name
    contact.email = form.email
    contact.phone_number = form.phone_number
    contact.address = form.address
    contact.is_favorite = form.is_favorite
    contact.updated_at = _utcnow()

    conflict = _commit_or_conflict(db, form, contact_id)
    if conflict is not None:
        return conflict

    log.info("contact %s updated", contact_id)
    return Ok(contact)


# -------------------------------------------------------------------
# Single-field actions
# -------------------------------------------------------------------
def toggle_favorite(db: Session, contact_id: int) -> Contact:
    contact = get_contact_or_raise(db, contact_id)
    contact.is_favorite = not contact.is_favorite
    contact.updated_at = _utcnow()
    db.commit()
    log.info("contact %s favorite=%s", contact_id, contact.is_favorite)
    return contact


def delete_contact(db: Session, contact_id: int) -> None:
    contact = get_contact_or_raise(db, contact_id)
    db.delete(contact)
    db.commit()
    log.info("contact %s deleted", contact_id)
