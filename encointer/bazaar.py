"""Registry of community businesses and the offerings they publish."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Hashable, Iterable, Optional


@dataclass(frozen=True)
class BusinessData:
    """A business's URL and the identifier its next offering will get."""

    url: str = ""
    last_oid: int = 0


@dataclass(frozen=True)
class OfferingData:
    url: str = ""


@dataclass(frozen=True)
class BusinessIdentifier:
    """A business, identified by its community and controlling account."""

    community_identifier: Hashable
    controller: Hashable


class BazaarError(Exception):
    """Base class for errors raised by the bazaar."""


class NonexistentCommunity(BazaarError):
    """The community identifier is not registered."""


class ExistingBusiness(BazaarError):
    """A business is already registered for this account and community."""


class NonexistentBusiness(BazaarError):
    """The business does not exist."""


class NonexistentOffering(BazaarError):
    """The offering does not exist."""


class BazaarEventKind(Enum):
    BUSINESS_CREATED = "business_created"
    BUSINESS_UPDATED = "business_updated"
    BUSINESS_DELETED = "business_deleted"
    OFFERING_CREATED = "offering_created"
    OFFERING_UPDATED = "offering_updated"
    OFFERING_DELETED = "offering_deleted"


@dataclass(frozen=True)
class BazaarEvent:
    kind: BazaarEventKind
    cid: Hashable
    who: Hashable
    oid: Optional[int] = None


class Bazaar:
    """Businesses and offerings, registered per community.

    Only communities in ``communities`` accept new businesses. Every
    successful call appends a :class:`BazaarEvent` to ``events``.
    """

    def __init__(self, communities: Iterable[Hashable] = ()) -> None:
        self.communities: set[Hashable] = set(communities)
        self.events: list[BazaarEvent] = []
        self._businesses: dict[Hashable, dict[Hashable, BusinessData]] = {}
        self._offerings: dict[BusinessIdentifier, dict[int, OfferingData]] = {}

    def _emit(self, kind: BazaarEventKind, cid: Hashable, who: Hashable, oid: Optional[int] = None) -> None:
        self.events.append(BazaarEvent(kind, cid, who, oid))

    def _has_business(self, cid: Hashable, who: Hashable) -> bool:
        return who in self._businesses.get(cid, {})

    def _require_business(self, cid: Hashable, who: Hashable) -> BusinessData:
        if not self._has_business(cid, who):
            raise NonexistentBusiness()
        return self._businesses[cid][who]

    def _require_offering(self, bid: BusinessIdentifier, oid: int) -> None:
        if oid not in self._offerings.get(bid, {}):
            raise NonexistentOffering()

    # --- calls -----------------------------------------------------------

    def create_business(self, sender: Hashable, cid: Hashable, url: str) -> None:
        if cid not in self.communities:
            raise NonexistentCommunity()
        if self._has_business(cid, sender):
            raise ExistingBusiness()
        self._businesses.setdefault(cid, {})[sender] = BusinessData(url, 1)
        self._emit(BazaarEventKind.BUSINESS_CREATED, cid, sender)

    def update_business(self, sender: Hashable, cid: Hashable, url: str) -> None:
        business = self._require_business(cid, sender)
        self._businesses[cid][sender] = replace(business, url=url)
        self._emit(BazaarEventKind.BUSINESS_UPDATED, cid, sender)

    def delete_business(self, sender: Hashable, cid: Hashable) -> None:
        """Delete a business together with all of its offerings."""
        self._require_business(cid, sender)
        del self._businesses[cid][sender]
        self._offerings.pop(BusinessIdentifier(cid, sender), None)
        self._emit(BazaarEventKind.BUSINESS_DELETED, cid, sender)

    def create_offering(self, sender: Hashable, cid: Hashable, url: str) -> int:
        """Create an offering and return its identifier."""
        business = self._require_business(cid, sender)
        oid = business.last_oid
        self._businesses[cid][sender] = replace(business, last_oid=oid + 1)
        self._offerings.setdefault(BusinessIdentifier(cid, sender), {})[oid] = OfferingData(url)
        self._emit(BazaarEventKind.OFFERING_CREATED, cid, sender, oid)
        return oid

    def update_offering(self, sender: Hashable, cid: Hashable, oid: int, url: str) -> None:
        bid = BusinessIdentifier(cid, sender)
        self._require_offering(bid, oid)
        self._offerings[bid][oid] = OfferingData(url)
        self._emit(BazaarEventKind.OFFERING_UPDATED, cid, sender, oid)

    def delete_offering(self, sender: Hashable, cid: Hashable, oid: int) -> None:
        bid = BusinessIdentifier(cid, sender)
        self._require_offering(bid, oid)
        del self._offerings[bid][oid]
        if not self._offerings[bid]:
            del self._offerings[bid]
        self._emit(BazaarEventKind.OFFERING_DELETED, cid, sender, oid)

    # --- queries ---------------------------------------------------------

    def business_registry(self, cid: Hashable, who: Hashable) -> BusinessData:
        """The business of ``who`` in ``cid``, or an empty default."""
        return self._businesses.get(cid, {}).get(who, BusinessData())

    def offering_registry(self, bid: BusinessIdentifier, oid: int) -> OfferingData:
        """The offering ``oid`` of a business, or an empty default."""
        return self._offerings.get(bid, {}).get(oid, OfferingData())

    def get_businesses(self, cid: Hashable) -> list[tuple[Hashable, BusinessData]]:
        return list(self._businesses.get(cid, {}).items())

    def get_offerings(self, bid: BusinessIdentifier) -> list[OfferingData]:
        return list(self._offerings.get(bid, {}).values())

    def get_community_businesses(self, cid: Hashable) -> list[BusinessData]:
        return [business for _, business in self.get_businesses(cid)]

    def get_community_offerings(self, cid: Hashable) -> list[OfferingData]:
        """All offerings of all businesses of a community."""
        return [
            offering
            for who, _ in self.get_businesses(cid)
            for offering in self.get_offerings(BusinessIdentifier(cid, who))
        ]