# encointer

Core logic of a community-currency system in plain Python. It has no
runtime dependencies.

## Modules

- `encointer.math`: integer helpers. It provides `is_prime`,
  `find_prime_below`, `get_greatest_common_denominator`, `is_coprime`,
  `checked_mod_inv`, `checked_modulo`, `checked_ceil_division` and
  `find_random_coprime_below`, which takes a `random.Random`. The checked
  helpers return `None` where fixed-width integer arithmetic would overflow
  or divide by zero.
- `encointer.assignment`: assigns participants to meetups and meetups to
  locations.
  - `assignment_fn` computes `(i * s1 + s2) % m % count`.
  - `assignment_fn_inverse` gives back every participant of a meetup.
  - `validate_equal_mapping` checks that the participants are spread evenly
    over the meetups.
  - `meetup_index` gives the one-based meetup index.
  - `get_meetup_location_index` and `meetup_location` pick a meetup's
    location.
  - `meetup_time` gives the time of high sun at a location's longitude,
    plus an offset.
  - The data types are the frozen dataclasses `AssignmentParams` and
    `Location`.
- `encointer.fees`: `apply_fee_conversion_factor(balance, reward, factor)`
  multiplies the three values, saturating at 2**128 - 1, and divides the
  result by `ONE_KILO_KSM`. The module also defines the constants
  `ONE_MICRO_KSM` and `ONE_KSM`.
- `encointer.meetup_validation`: `get_participant_judgements` decides which
  meetup participants are legit. It excludes, in order:
  1. participants who did not vote;
  2. participants whose vote differs from the majority vote;
  3. participants with too few incoming or outgoing attestations, judged by
     a threshold function you pass in.

  It returns `ParticipantJudgements`, holding `legit` indices and
  `ExcludedParticipant` entries, each with an `ExclusionReason`. Errors are
  raised as subclasses of `MeetupValidationError`: `BallotEmpty`,
  `NoDependableVote` and `IndexOutOfBounds`.
- `encointer.fixed`: `Fixed`, a signed binary fixed-point number with 64
  integer bits and 64 fractional bits.
  - Build values with `Fixed.from_num` or `Fixed.from_bits`.
  - Checked arithmetic returns `None` on overflow; saturating arithmetic
    clamps instead.
  - The plain operators raise `OverflowError` on overflow.
  - `exp` is the natural exponential.
- `encointer.balances`: `Balances`, an in-memory ledger of community
  balances with demurrage.
  - A balance decays by `exp(-demurrage * blocks)` since it was last
    written. The caller advances the `block_number` attribute.
  - It supports `issue`, `burn`, `transfer`, `transfer_all`, `do_transfer`,
    `remove_account`, `purge_balances`, per-community `set_demurrage` and
    `set_fee_conversion_factor`.
  - `set_fee_conversion_factor` may only be called by the configured
    `ceremony_master`; any other origin raises `BadOrigin`.
  - Transfers enforce an existential deposit. They create a new account
    only above it, and remove the source account once it falls below it.
  - Events are appended to `events` as `NewAccount`, `Endowed`,
    `Transferred` and `FeeConversionFactorUpdated`.
  - Errors derive from `BalancesError`: `BalanceTooLow`,
    `TotalIssuanceOverflow`, `NoAccount`, `ExistentialDepositError` and
    `BadOrigin`.
  - An integer view with 18 decimals is provided by `fungible`,
    `balance_type`, `fungible_balance`, `fungible_total_issuance`,
    `reducible_balance`, `minimum_balance`, `can_deposit` (returns a
    `DepositConsequence`), `can_withdraw` (returns a `WithdrawConsequence`),
    `set_balance`, `set_total_issuance`, `name`, `symbol` and `decimals`.
- `encointer.bazaar`: `Bazaar`, a registry of businesses and their offerings
  per community.
  - Only communities listed in `communities` accept new businesses.
  - Calls append a `BazaarEvent` to `events`.
  - Failures raise subclasses of `BazaarError`: `NonexistentCommunity`,
    `ExistingBusiness`, `NonexistentBusiness` and `NonexistentOffering`.
  - Deleting a business also deletes all of its offerings.
  - Queries are `business_registry`, `offering_registry`, `get_businesses`,
    `get_offerings`, `get_community_businesses` and
    `get_community_offerings`.

## Example

```python
from encointer.assignment import AssignmentParams, assignment_fn
from encointer.balances import Balances
from encointer.bazaar import Bazaar
from encointer.fees import apply_fee_conversion_factor
from encointer.fixed import Fixed

params = AssignmentParams(m=4, s1=5, s2=3)
assert assignment_fn(6, params, 5) == 1

one_cc = 1 << 64
assert apply_fee_conversion_factor(5_000_000, 20 * one_cc, 100_000) == one_cc // 100

ledger = Balances()
ledger.issue("cid", "alice", Fixed.from_num(50))
ledger.transfer("alice", "bob", "cid", Fixed.from_num(20))
assert ledger.balance("cid", "alice") == 30

bazaar = Bazaar(communities=["cid"])
bazaar.create_business("alice", "cid", "https://example.com")
oid = bazaar.create_offering("alice", "cid", "https://example.com/offer")
assert oid == 1
```

## What this package does not do

Everything here is a library working on in-memory state:

- there is no persistent storage;
- there is no network service or RPC server;
- there is no command-line tool.

Community identifiers and accounts are any hashable values you choose.
Blocks advance only when you set `Balances.block_number`.

## Running the tests

```
pip install -e ".[test]"
pytest
```