"""Saved customer profiles keyed by normalized email."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

from .errors import ValidationError
from .ids import IdGenerator
from .models import Profile, clean_optional

logger = logging.getLogger(__name__)


@dataclass
class ContactFields:
    """Contact details as typed into the checkout form."""

    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""

    def has_name_and_email(self) -> bool:
        return bool(self.name.strip()) and bool(self.email.strip())

    def normalized(self) -> ContactFields:
        return ContactFields(
            name=self.name.strip(),
            email=self.email.strip(),
            phone=self.phone.strip(),
            address=self.address.strip(),
            city=self.city.strip(),
            postal_code=self.postal_code.strip(),
        )

    @classmethod
    def from_profile(cls, profile: Profile) -> ContactFields:
        return cls(
            name=profile.name,
            email=profile.email,
            phone=profile.phone or "",
            address=profile.address or "",
            city=profile.city or "",
            postal_code=profile.postal_code or "",
        )


@dataclass(frozen=True)
class UpsertResult:
    profile: Profile
    created: bool

    @property
    def status(self) -> str:
        return "created" if self.created else "updated"


class ProfileStore:
    """Collection of saved profiles; at most one per normalized email."""

    def __init__(
        self,
        profiles: Iterable[Profile] = (),
        *,
        ids: IdGenerator | None = None,
        id_prefix: str = "user",
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._profiles: list[Profile] = list(profiles)
        self._ids = ids or IdGenerator()
        self._id_prefix = id_prefix
        self.on_change = on_change

    def __iter__(self) -> Iterator[Profile]:
        return iter(list(self._profiles))

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, profile_id: str) -> Profile | None:
        for profile in self._profiles:
            if profile.id == profile_id:
                return profile
        return None

    def find_by_email(self, email: str) -> Profile | None:
        key = email.strip().lower()
        for profile in self._profiles:
            if profile.email_key == key:
                return profile
        return None

    def replace_all(self, profiles: Iterable[Profile]) -> None:
        self._profiles = list(profiles)

    def upsert(self, contact: ContactFields) -> UpsertResult:
        """Create a profile or update the one sharing the same email.

        Raises:
            ValidationError: If name or email is blank.
        """
        if not contact.has_name_and_email():
            raise ValidationError(
                "Add at least name and email before saving as a profile."
            )

        contact = contact.normalized()
        existing = self.find_by_email(contact.email)
        profile = Profile(
            id=existing.id if existing else self._ids.prefixed(self._id_prefix),
            name=contact.name,
            email=contact.email,
            phone=clean_optional(contact.phone),
            address=clean_optional(contact.address),
            city=clean_optional(contact.city),
            postal_code=clean_optional(contact.postal_code),
            extra=dict(existing.extra) if existing else {},
        )

        if existing is not None:
            index = self._profiles.index(existing)
            self._profiles[index] = profile
            logger.info("Updated profile %s", profile.id)
        else:
            self._profiles.append(profile)
            logger.info("Created profile %s", profile.id)

        if self.on_change is not None:
            self.on_change()
        return UpsertResult(profile=profile, created=existing is None)
