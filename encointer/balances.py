"""Community currency balances with demurrage applied per block."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Hashable, Optional, Union

from encointer.fixed import Fixed, exp

_U32_MAX = 2**32 - 1
_DECIMAL_PLACES = 18
_DECIMALS = 10**_DECIMAL_PLACES
_ZERO = Fixed(0)
_ASSET_NAME = "Encointer"
_ASSET_SYMBOL = "ETR"

Event = Union["NewAccount", "Endowed", "Transferred", "FeeConversionFactorUpdated"]


@dataclass(frozen=True)
class BalanceEntry:
    """A principal together with the block at which it was last written."""

    principal: Fixed = field(default_factory=Fixed)
    last_update: int = 0


class BalancesError(Exception):
    """Base class for errors raised by the balances ledger."""


class BalanceTooLow(BalancesError):
    """The balance is too low to perform this action."""


class TotalIssuanceOverflow(BalancesError):
    """The total issuance would overflow."""


class NoAccount(BalancesError):
    """The account to alter does not exist in the community."""


class ExistentialDepositError(BalancesError):
    """The balance is too low to create or remove an account."""


class BadOrigin(BalancesError):
    """The call was made by an origin that is not allowed to make it."""


@dataclass(frozen=True)
class NewAccount:
    account: Hashable


@dataclass(frozen=True)
class Endowed:
    cid: Hashable
    who: Hashable
    balance: Fixed


@dataclass(frozen=True)
class Transferred:
    cid: Hashable
    source: Hashable
    dest: Hashable
    amount: Fixed


@dataclass(frozen=True)
class FeeConversionFactorUpdated:
    fee_conversion_factor: int


class DepositConsequence(Enum):
    BELOW_MINIMUM = "below_minimum"
    CANNOT_CREATE = "cannot_create"
    UNKNOWN_ASSET = "unknown_asset"
    OVERFLOW = "overflow"
    SUCCESS = "success"


class WithdrawConsequence(Enum):
    NO_FUNDS = "no_funds"
    WOULD_DIE = "would_die"
    UNKNOWN_ASSET = "unknown_asset"
    UNDERFLOW = "underflow"
    OVERFLOW = "overflow"
    FROZEN = "frozen"
    SUCCESS = "success"


def fungible(balance: Fixed) -> int:
    """Convert a fixed-point balance to an integer with 18 decimals (floored, never negative)."""
    return (max(balance.bits, 0) * _DECIMALS) >> 64


def balance_type(amount: int) -> Fixed:
    """Convert an integer amount with 18 decimals to a fixed-point balance."""
    if amount < 0:
        raise ValueError("amount must not be negative")
    return Fixed.from_bits((amount << 64) // _DECIMALS)


class Balances:
    """Ledger of community balances and total issuances.

    Balances decay by ``exp(-demurrage * blocks)`` since they were last written.
    """

    def __init__(
        self,
        *,
        default_demurrage: Fixed = _ZERO,
        existential_deposit: Fixed = _ZERO,
        ceremony_master: Optional[Hashable] = None,
        fee_conversion_factor: int = 0,
    ) -> None:
        self.default_demurrage = default_demurrage
        self.existential_deposit = existential_deposit
        self.ceremony_master = ceremony_master
        self.fee_conversion_factor = fee_conversion_factor
        self.block_number = 0
        self.events: list[Event] = []
        self._balances: dict[Hashable, dict[Hashable, BalanceEntry]] = {}
        self._total_issuance: dict[Hashable, BalanceEntry] = {}
        self._demurrage_per_block: dict[Hashable, Fixed] = {}
        self._sufficients: Counter[Hashable] = Counter()
        self._asset_name = _ASSET_NAME
        self._asset_symbol = _ASSET_SYMBOL
        # The balance is a binary fixed-point number; 18 decimals lose a little
        # precision but cannot overflow.
        self._decimal_places = _DECIMAL_PLACES
        self._minimum_balance = _ZERO

    # --- bookkeeping -----------------------------------------------------

    def _emit(self, event: Event) -> None:
        self.events.append(event)

    @staticmethod
    def _ensure_signed(origin: Optional[Hashable]) -> Hashable:
        if origin is None:
            raise BadOrigin()
        return origin

    def _inc_sufficients(self, who: Hashable) -> None:
        if self._sufficients[who] == 0:
            self._emit(NewAccount(who))
        self._sufficients[who] += 1

    def _dec_sufficients(self, who: Hashable) -> None:
        if self._sufficients[who] > 0:
            self._sufficients[who] -= 1

    def _insert_balance(self, cid: Hashable, who: Hashable, entry: BalanceEntry) -> None:
        self._balances.setdefault(cid, {})[who] = entry

    # --- storage access --------------------------------------------------

    def balance_entry(self, cid: Hashable, who: Hashable) -> BalanceEntry:
        """Stored entry of an account, without demurrage applied."""
        return self._balances.get(cid, {}).get(who, BalanceEntry())

    def total_issuance_entry(self, cid: Hashable) -> BalanceEntry:
        """Stored total issuance entry, without demurrage applied."""
        return self._total_issuance.get(cid, BalanceEntry())

    def contains_account(self, cid: Hashable, who: Hashable) -> bool:
        return who in self._balances.get(cid, {})

    def _balance_entry_updated(self, cid: Hashable, who: Hashable) -> BalanceEntry:
        return self.apply_demurrage(self.balance_entry(cid, who), self.demurrage(cid))

    def _total_issuance_entry_updated(self, cid: Hashable) -> BalanceEntry:
        return self.apply_demurrage(self.total_issuance_entry(cid), self.demurrage(cid))

    def balance(self, cid: Hashable, who: Hashable) -> Fixed:
        return self._balance_entry_updated(cid, who).principal

    def total_issuance(self, cid: Hashable) -> Fixed:
        return self._total_issuance_entry_updated(cid).principal

    def apply_demurrage(self, entry: BalanceEntry, demurrage: Fixed) -> BalanceEntry:
        """Value of ``entry`` at the current block."""
        elapsed = self.block_number - entry.last_update
        if not 0 <= elapsed <= _U32_MAX:
            raise OverflowError("elapsed blocks out of range")
        exponent = -demurrage * Fixed.from_num(elapsed)
        principal = entry.principal.checked_mul(exp(exponent))
        if principal is None:
            raise OverflowError("demurrage should never overflow")
        return BalanceEntry(principal, self.block_number)

    # --- accounts --------------------------------------------------------

    def remove_account(self, cid: Hashable, who: Hashable) -> None:
        """Remove an account whose balance fell below the existential deposit."""
        if not self.contains_account(cid, who):
            raise NoAccount()
        if not self.balance(cid, who) < self.existential_deposit:
            raise ExistentialDepositError()
        del self._balances[cid][who]
        self._dec_sufficients(who)

    # --- calls -----------------------------------------------------------

    def transfer(self, origin: Optional[Hashable], dest: Hashable, cid: Hashable, amount: Fixed) -> None:
        source = self._ensure_signed(origin)
        self.do_transfer(cid, source, dest, amount)

    def transfer_all(self, origin: Optional[Hashable], dest: Hashable, cid: Hashable) -> None:
        source = self._ensure_signed(origin)
        self.do_transfer(cid, source, dest, self.balance(cid, source))

    def set_fee_conversion_factor(self, origin: Optional[Hashable], fee_conversion_factor: int) -> None:
        if origin is None or origin != self.ceremony_master:
            raise BadOrigin()
        self.fee_conversion_factor = fee_conversion_factor
        self._emit(FeeConversionFactorUpdated(fee_conversion_factor))

    def do_transfer(self, cid: Hashable, source: Hashable, dest: Hashable, amount: Fixed) -> Fixed:
        amount = Fixed.from_num(amount)
        if amount == 0:
            self._emit(Transferred(cid, source, dest, amount))
            return amount

        if not self.contains_account(cid, source):
            raise NoAccount()
        entry_from = self._balance_entry_updated(cid, source)
        if entry_from.principal < amount:
            raise BalanceTooLow()

        if source == dest:
            self._insert_balance(cid, source, entry_from)
            return amount

        if not self.contains_account(cid, dest):
            if not amount > self.existential_deposit:
                raise ExistentialDepositError()
            self._inc_sufficients(dest)
            self._emit(Endowed(cid, dest, amount))

        entry_to = self._balance_entry_updated(cid, dest)
        entry_from = replace(entry_from, principal=entry_from.principal.saturating_sub(amount))
        entry_to = replace(entry_to, principal=entry_to.principal.saturating_add(amount))
        self._insert_balance(cid, source, entry_from)
        self._insert_balance(cid, dest, entry_to)
        self._emit(Transferred(cid, source, dest, amount))

        if self.balance(cid, source) < self.existential_deposit:
            self.remove_account(cid, source)
        return amount

    def issue(self, cid: Hashable, who: Hashable, amount: Fixed) -> None:
        amount = Fixed.from_num(amount)
        entry_who = self._balance_entry_updated(cid, who)
        entry_tot = self._total_issuance_entry_updated(cid)
        new_total = entry_tot.principal.checked_add(amount)
        if new_total is None:
            raise TotalIssuanceOverflow()
        new_balance = entry_who.principal + amount
        self._total_issuance[cid] = replace(entry_tot, principal=new_total)
        self._insert_balance(cid, who, replace(entry_who, principal=new_balance))

    def burn(self, cid: Hashable, who: Hashable, amount: Fixed) -> None:
        amount = Fixed.from_num(amount)
        entry_who = self._balance_entry_updated(cid, who)
        entry_tot = self._total_issuance_entry_updated(cid)
        remaining = entry_who.principal.checked_sub(amount)
        if remaining is None or remaining < 0:
            raise BalanceTooLow()
        new_total = entry_tot.principal - amount
        self._total_issuance[cid] = replace(entry_tot, principal=new_total)
        self._insert_balance(cid, who, replace(entry_who, principal=remaining))

    def demurrage(self, cid: Hashable) -> Fixed:
        """Community-specific demurrage, or the default one if none is set."""
        return self._demurrage_per_block.get(cid, self.default_demurrage)

    def set_demurrage(self, cid: Hashable, demurrage: Fixed) -> None:
        self._demurrage_per_block[cid] = demurrage

    def purge_balances(self, cid: Hashable) -> None:
        self._balances.pop(cid, None)

    # --- fungible asset view ---------------------------------------------

    def name(self, asset: Hashable) -> bytes:
        """Asset name as bytes; the same for every community."""
        return self._asset_name.encode("utf-8")

    def symbol(self, asset: Hashable) -> bytes:
        """Asset symbol as bytes; the same for every community."""
        return self._asset_symbol.encode("utf-8")

    def decimals(self, asset: Hashable) -> int:
        """Number of decimals used by the integer view of balances."""
        return self._decimal_places

    def fungible_total_issuance(self, asset: Hashable) -> int:
        return fungible(self.total_issuance(asset))

    def minimum_balance(self, asset: Hashable) -> int:
        """Smallest balance an account may hold in the integer view."""
        return fungible(self._minimum_balance)

    def fungible_balance(self, asset: Hashable, who: Hashable) -> int:
        return fungible(self.balance(asset, who))

    def reducible_balance(self, asset: Hashable, who: Hashable, keep_alive: bool) -> int:
        return fungible(self.balance(asset, who))

    def can_deposit(self, asset: Hashable, who: Hashable, amount: int, mint: bool) -> DepositConsequence:
        if asset not in self._total_issuance:
            return DepositConsequence.UNKNOWN_ASSET
        try:
            balance_amount = balance_type(amount)
        except OverflowError:
            return DepositConsequence.OVERFLOW
        if self.total_issuance_entry(asset).principal.checked_add(balance_amount) is None:
            return DepositConsequence.OVERFLOW
        if self.balance(asset, who).checked_add(balance_amount) is None:
            return DepositConsequence.OVERFLOW
        return DepositConsequence.SUCCESS

    def can_withdraw(self, asset: Hashable, who: Hashable, amount: int) -> WithdrawConsequence:
        if asset not in self._total_issuance:
            return WithdrawConsequence.UNKNOWN_ASSET
        if fungible(self.total_issuance_entry(asset).principal) < amount:
            return WithdrawConsequence.UNDERFLOW
        if amount == 0:
            return WithdrawConsequence.SUCCESS
        if fungible(self.balance(asset, who)) < amount:
            return WithdrawConsequence.NO_FUNDS
        return WithdrawConsequence.SUCCESS

    def set_balance(self, asset: Hashable, who: Hashable, amount: int) -> None:
        self._insert_balance(asset, who, BalanceEntry(balance_type(amount), self.block_number))

    def set_total_issuance(self, asset: Hashable, amount: int) -> None:
        self._total_issuance[asset] = BalanceEntry(balance_type(amount), self.block_number)